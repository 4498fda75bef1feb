"""Tests for the Reflex Timer machine."""


def _game(scheduler, store, scripted, stimuli, **tuning):
    from reactivity.config import ReflexTuning
    from reactivity.models import ReflexStimulus
    from reactivity.reflex_game import ReflexGame

    return ReflexGame(
        ReflexTuning(**tuning), scheduler, store=store,
        generator=scripted([ReflexStimulus(d) for d in stimuli]),
    )


def test_tap_180ms_after_go_scores_180(scheduler, store, scripted):
    """Waiting, then GO, then a tap 180 ms later gives 180."""
    from reactivity.models import GameVariant, SessionState

    game = _game(scheduler, store, scripted, [2500])
    assert game.start()
    assert game.state is SessionState.ARMED

    scheduler.advance(2500)
    assert game.state is SessionState.ACTIVE
    assert game.go_ms == 2500

    scheduler.advance(180)
    assert game.tap()
    assert game.state is SessionState.RESULT
    assert game.final_score == 180
    assert store.saves == [(GameVariant.REFLEX, 180)]

    # a slower run later never replaces the best time
    store.save(GameVariant.REFLEX, 220)
    assert store.best(GameVariant.REFLEX) == 180
    assert store.last_play() == (GameVariant.REFLEX, 220)


def test_go_signal_waits_for_the_delay(scheduler, store, scripted):
    from reactivity.models import SessionState

    game = _game(scheduler, store, scripted, [3000])
    game.start()
    scheduler.advance(2999)
    assert game.state is SessionState.ARMED
    scheduler.advance(1)
    assert game.state is SessionState.ACTIVE


def test_go_signal_has_no_deadline(scheduler, store, scripted):
    """Once GO shows, it stays up until the player taps."""
    from reactivity.models import SessionState

    game = _game(scheduler, store, scripted, [2000])
    game.start()
    scheduler.advance(2000)
    assert game.pending_timer is None
    scheduler.advance(60_000)
    assert game.state is SessionState.ACTIVE
    game.tap()
    assert game.final_score == 60_000


def test_tap_while_waiting_is_too_early(scheduler, store, scripted):
    """An early tap records nothing and cancels the GO timer."""
    from reactivity.models import Feedback, SessionState

    game = _game(scheduler, store, scripted, [2000])
    game.start()
    scheduler.advance(1500)
    assert game.tap()

    assert game.state is SessionState.FEEDBACK
    assert game.feedback is Feedback.TOO_EARLY
    assert game.outcomes == []
    assert game.pending_timer is None
    scheduler.advance(10_000)
    assert game.state is SessionState.FEEDBACK
    assert store.saves == []


def test_tap_after_too_early_returns_to_intro(scheduler, store, scripted):
    from reactivity.models import SessionState

    game = _game(scheduler, store, scripted, [2000, 2000])
    game.start()
    game.tap()
    game.tap()
    assert game.state is SessionState.INTRO
    assert game.round_index == 0
    assert store.saves == []


def test_tap_in_intro_arms_the_wait(scheduler, store, scripted):
    """Tapping the start screen is the same as start()."""
    from reactivity.models import SessionState

    game = _game(scheduler, store, scripted, [2000])
    assert game.tap()
    assert game.state is SessionState.ARMED
    assert game.pending_timer is not None


def test_multi_round_mean_and_too_early_rearms(scheduler, store, scripted):
    """Later rounds re-arm on TOO EARLY; final is the mean reaction time."""
    from reactivity.models import Feedback, SessionState

    game = _game(scheduler, store, scripted, [1000, 2000, 1500], rounds=2, feedback_ms=800)
    game.start()
    scheduler.advance(1000)
    scheduler.advance(200)
    game.tap()
    assert game.state is SessionState.FEEDBACK
    assert game.feedback is Feedback.CORRECT
    assert game.score == 200

    scheduler.advance(800)
    assert game.state is SessionState.ARMED
    game.tap()
    assert game.feedback is Feedback.TOO_EARLY
    game.tap()
    assert game.state is SessionState.ARMED
    assert game.round_index == 1

    scheduler.advance(1500)
    scheduler.advance(300)
    game.tap()
    assert game.state is SessionState.RESULT
    assert game.final_score == 250
    assert len(game.outcomes) == 2
    assert len(store.saves) == 1


def test_taps_after_result_are_ignored(scheduler, store, scripted):
    game = _game(scheduler, store, scripted, [1000])
    game.start()
    scheduler.advance(1100)
    game.tap()
    assert not game.tap()
    assert len(store.saves) == 1
