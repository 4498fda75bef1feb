"""Tests for the Séquence Flash machine — playback, input, levels."""


def _game(scheduler, store, scripted, sequences, **tuning):
    from reactivity.config import SequenceTuning
    from reactivity.models import SequenceStimulus
    from reactivity.sequence_game import SequenceRecallGame

    return SequenceRecallGame(
        SequenceTuning(**tuning), scheduler, store=store,
        generator=scripted([SequenceStimulus(tuple(s)) for s in sequences]),
    )


def _repeat(game, colors):
    for c in colors:
        assert game.tap(c)


def test_clear_three_levels_then_fail_on_fourth(scheduler, store, scripted):
    """Start length 4, levels 1-3 cleared, mismatch on level 4: 3 levels count."""
    from reactivity.models import Feedback, GameVariant, SessionState

    seqs = [(0, 1, 2, 3), (3, 2, 1, 0, 1), (1, 1, 2, 2, 3, 3), (0, 0, 0, 0, 0, 0, 0)]
    game = _game(scheduler, store, scripted, seqs, start_length=4)
    game.start()

    for level, seq in enumerate(seqs[:3], start=1):
        scheduler.run_until_idle()
        assert game.state is SessionState.ACTIVE
        assert game.level == level
        _repeat(game, seq)
        assert game.feedback is Feedback.CORRECT

    scheduler.run_until_idle()
    assert game.level == 4
    assert len(game.sequence) == 7
    assert game.tap(1)

    # terminal: scored and saved right away, result after the pause
    assert game.state is SessionState.FEEDBACK
    assert game.feedback is Feedback.WRONG
    assert game.levels_cleared == 3
    assert game.final_score == 60
    assert store.saves == [(GameVariant.SEQUENCE_RECALL, 60)]
    assert not game.tap(0)

    scheduler.run_until_idle()
    assert game.state is SessionState.RESULT
    assert len(store.saves) == 1


def test_length_weight_counts_extra_elements(scheduler, store, scripted):
    seqs = [(0, 1), (1, 0, 1)]
    game = _game(scheduler, store, scripted, seqs, start_length=2, level_weight=15, length_weight=5)
    game.start()
    scheduler.run_until_idle()
    _repeat(game, seqs[0])
    scheduler.run_until_idle()
    game.tap(0)  # wrong
    # one level cleared, final length 3 is one past the start length
    assert game.final_score == 20


def test_failing_first_sequence_scores_zero(scheduler, store, scripted):
    game = _game(scheduler, store, scripted, [(0, 1, 2)])
    game.start()
    scheduler.run_until_idle()
    game.tap(3)
    assert game.final_score == 0


def test_each_level_regenerates_a_longer_sequence(scheduler, store, scripted):
    seqs = [(0, 1, 2), (2, 2, 2, 2)]
    game = _game(scheduler, store, scripted, seqs)
    gen = game.generator
    game.start()
    scheduler.run_until_idle()
    _repeat(game, seqs[0])
    scheduler.run_until_idle()
    assert gen.levels == [1, 2]
    assert game.sequence == (2, 2, 2, 2)
    assert game.progress == 0


def test_playback_timing(scheduler, store, scripted):
    """pause, flash 0, pause, flash 1, ..., pause, then input opens."""
    from reactivity.models import SessionState

    game = _game(scheduler, store, scripted, [(2, 0, 1)], flash_ms=500, pause_ms=200)
    game.start()
    assert game.state is SessionState.ARMED
    assert game.highlight is None

    scheduler.advance(200)
    assert game.highlight == 2
    scheduler.advance(499)
    assert game.highlight == 2
    scheduler.advance(1)
    assert game.highlight is None
    scheduler.advance(200)
    assert game.highlight == 0

    assert not game.tap(2)  # still watching

    # 3 x (200 + 500) + 200
    scheduler.advance(2300 - scheduler.now_ms())
    assert game.state is SessionState.ACTIVE
    assert game.pending_timer is None


def test_second_level_plays_faster(scheduler, store, scripted):
    from reactivity.models import SessionState

    seqs = [(0,), (1, 2)]
    game = _game(scheduler, store, scripted, seqs, start_length=1, flash_ms=500, flash_step_ms=100,
                 pause_ms=200, pause_step_ms=50, feedback_ms=1000)
    game.start()
    scheduler.run_until_idle()
    game.tap(0)
    t0 = scheduler.now_ms()
    scheduler.advance(1000)
    assert game.state is SessionState.ARMED

    # level 2: pause 150, flash 400
    scheduler.advance(150)
    assert game.highlight == 1
    scheduler.advance(400)
    assert game.highlight is None
    scheduler.advance(t0 + 1000 + 2 * 550 + 150 - scheduler.now_ms())
    assert game.state is SessionState.ACTIVE


def test_reset_mid_playback_cancels_the_chain(scheduler, store, scripted):
    """No highlight, level change or save happens after reset."""
    from reactivity.models import SessionState

    game = _game(scheduler, store, scripted, [(0, 1, 2, 3)])
    game.start()
    scheduler.advance(250)
    assert game.highlight == 0
    step = game.pending_timer

    game.reset()
    assert game.state is SessionState.INTRO
    assert game.highlight is None
    assert game.pending_timer is None
    assert scheduler.pending() == []

    step.callback()
    scheduler.advance(60_000)
    assert game.state is SessionState.INTRO
    assert game.highlight is None
    assert store.saves == []


def test_reset_during_final_feedback_skips_result(scheduler, store, scripted):
    from reactivity.models import SessionState

    game = _game(scheduler, store, scripted, [(0, 1, 2)])
    game.start()
    scheduler.run_until_idle()
    game.tap(2)
    game.reset()
    scheduler.advance(10_000)
    assert game.state is SessionState.INTRO
    assert len(store.saves) == 1


def test_out_of_palette_choice_ignored(scheduler, store, scripted):
    game = _game(scheduler, store, scripted, [(0, 1, 2)], palette_size=4)
    game.start()
    scheduler.run_until_idle()
    assert not game.tap(4)
    assert not game.tap(None)
    assert game.progress == 0


def test_snapshot_carries_level_progress_and_highlight(scheduler, store, scripted):
    game = _game(scheduler, store, scripted, [(3, 1, 2)])
    game.start()
    scheduler.advance(200)
    snap = game.snapshot()
    assert snap.level == 1
    assert snap.highlight == 3
    assert snap.rounds_total == 0

    scheduler.run_until_idle()
    game.tap(3)
    assert game.snapshot().progress == 1
