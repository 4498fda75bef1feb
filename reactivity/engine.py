"""Game state machine shared by all five games.

A session moves ``INTRO -> ACTIVE -> FEEDBACK -> ACTIVE ... -> RESULT``.
Subclasses decide what a round looks like; this class owns the parts that
must be identical everywhere:

- at most one pending timer per session (``_arm`` cancels the previous one)
- an optional countdown tick (``_every``) only redraws; it lives and dies
  with the round timer
- every timer callback is bound to the session generation and to its own
  handle; ``reset()`` bumps the generation so anything still in flight is a
  no-op when it fires
- every round is recorded exactly once (``_record``)
- one persistence write per finished session, none after ``reset()``

Public methods take ``scheduler.lock`` so a key press never runs in the
middle of a timer callback.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable

from reactivity.config import Tuning
from reactivity.models import (
    Feedback,
    GameVariant,
    RoundOutcome,
    SessionState,
    Snapshot,
    Stimulus,
)
from reactivity.rounds import RoundGenerator
from reactivity.scheduler import Scheduler, StepChain, Ticker, TimerHandle
from reactivity.scores import ScorePersistence
from reactivity.scoring import ScoreAggregator

logger = logging.getLogger(__name__)

Listener = Callable[[Snapshot], None]


class GameMachine:
    variant: GameVariant

    def __init__(
        self,
        tuning: Tuning,
        scheduler: Scheduler,
        store: ScorePersistence | None = None,
        generator: RoundGenerator | None = None,
        rng: random.Random | None = None,
        aggregator: ScoreAggregator | None = None,
        on_change: Listener | None = None,
        on_result: Listener | None = None,
    ):
        self.tuning = tuning
        self.scheduler = scheduler
        self.store = store
        self.generator = generator or RoundGenerator(self.variant, tuning, rng=rng)
        self.aggregator = aggregator or ScoreAggregator()
        self.on_change = on_change
        self.on_result = on_result
        self.record = None
        self._handle: TimerHandle | None = None
        self._playback: StepChain | None = None
        self._ticker: Ticker | None = None
        self._generation = 0
        self._clear()

    # -- session state -----------------------------------------------------

    def _clear(self) -> None:
        self.state = SessionState.INTRO
        self.round_index = 0
        self.score: float = 0
        self.stimulus: Stimulus | None = None
        self.feedback: Feedback | None = None
        self.final_score: float | None = None
        self.outcomes: list[RoundOutcome] = []
        self._round_started_ms: float | None = None
        self._saved = False
        self._deadline_ms: float | None = None

    @property
    def rounds_total(self) -> int:
        return self.tuning.rounds

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending_timer(self) -> TimerHandle | None:
        """The session's single live timer, if any."""
        if self._playback is not None and self._playback.pending_handle is not None:
            return self._playback.pending_handle
        if self._handle is not None and self._handle.live:
            return self._handle
        return None

    def snapshot(self) -> Snapshot:
        return Snapshot(
            variant=self.variant,
            state=self.state,
            round_index=self.round_index,
            rounds_total=self.rounds_total,
            score=self.score,
            stimulus=self.stimulus,
            feedback=self.feedback,
            final_score=self.final_score,
            deadline_ms=self._deadline_ms,
            time_left_ms=self.time_left_ms(),
            **self._extra_snapshot(),
        )

    def time_left_ms(self) -> float | None:
        """Milliseconds until the current round deadline, None when none is running."""
        if self._deadline_ms is None:
            return None
        return max(0.0, self._deadline_ms - self.scheduler.now_ms())

    def _extra_snapshot(self) -> dict:
        return {}

    # -- public API --------------------------------------------------------

    def start(self) -> bool:
        """Leave INTRO and run the first round. No-op in any other state."""
        with self.scheduler.lock:
            if self.state is not SessionState.INTRO:
                return False
            self._generation += 1
            logger.debug("%s: start (generation %d)", self.variant.value, self._generation)
            self._begin_session()
            self._notify()
            return True

    def tap(self, choice: int | None = None) -> bool:
        """Player input. Returns False when the tap was ignored."""
        with self.scheduler.lock:
            accepted = self._on_tap(choice)
            if accepted:
                self._notify()
            else:
                logger.debug("%s: tap ignored in %s", self.variant.value, self.state.value)
            return accepted

    def reset(self) -> None:
        """Back to INTRO from anywhere; round progress is discarded."""
        with self.scheduler.lock:
            self._abandon()
            self._notify()

    def close(self) -> None:
        """Screen is going away: same as reset but nobody is listening."""
        with self.scheduler.lock:
            self._abandon()
            self.on_change = None
            self.on_result = None

    def _abandon(self) -> None:
        self._generation += 1
        self._disarm()
        self._clear()

    # -- hooks for subclasses ----------------------------------------------

    def _begin_session(self) -> None:
        self._begin_round()

    def _begin_round(self) -> None:
        raise NotImplementedError

    def _on_tap(self, choice: int | None) -> bool:
        raise NotImplementedError

    def _final_context(self) -> dict:
        return {"total": self.rounds_total}

    # -- timers ------------------------------------------------------------

    def _arm(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        """Replace the session timer with a new one."""
        self._disarm()
        generation = self._generation
        handle: TimerHandle | None = None

        def fire():
            if generation != self._generation or handle is not self._handle:
                logger.debug("%s: stale timer suppressed", self.variant.value)
                return
            self._handle = None
            callback()
            self._notify()

        handle = self.scheduler.schedule(delay_ms, fire)
        self._handle = handle
        return handle

    def _play(self, steps: list[tuple[float, Callable[[], None]]],
              on_done: Callable[[], None] | None = None) -> StepChain:
        """Run a multi-step timed chain as the session's timer."""
        self._disarm()
        generation = self._generation

        def guarded(action):
            def run():
                if generation != self._generation:
                    logger.debug("%s: stale playback step suppressed", self.variant.value)
                    return
                action()
                self._notify()
            return run

        self._playback = StepChain(
            self.scheduler,
            [(delay, guarded(action)) for delay, action in steps],
            on_done=guarded(on_done) if on_done is not None else None,
        )
        return self._playback.start()

    def _every(self, interval_ms: float) -> Ticker:
        """Redraw tick alongside the session timer; ``_disarm`` stops both."""
        generation = self._generation

        def tick():
            if generation != self._generation:
                logger.debug("%s: stale tick suppressed", self.variant.value)
                return
            self._notify()

        self._ticker = self.scheduler.every(interval_ms, tick)
        return self._ticker

    def _disarm(self) -> None:
        self.scheduler.cancel(self._handle)
        self._handle = None
        self._deadline_ms = None
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None
        if self._playback is not None:
            self._playback.cancel()
            self._playback = None

    # -- rounds & results --------------------------------------------------

    def _record(self, outcome: RoundOutcome) -> None:
        """Append a round outcome. Callers have already disarmed the timer."""
        self.outcomes.append(outcome)
        self.round_index += 1
        logger.debug(
            "%s: round %d %s (%s ms)", self.variant.value, self.round_index,
            "correct" if outcome.correct else "wrong", outcome.elapsed_ms,
        )

    def _resolve(self, outcome: RoundOutcome) -> None:
        """Close the current round and pause on feedback before the next."""
        self._disarm()
        self._record(outcome)
        if outcome.correct:
            self.score += 1
        self.feedback = Feedback.CORRECT if outcome.correct else Feedback.WRONG
        self.state = SessionState.FEEDBACK
        self._arm(self.tuning.feedback_ms, self._after_feedback)

    def _after_feedback(self) -> None:
        if self.round_index >= self.rounds_total:
            self._finish()
        else:
            self._begin_round()

    def _elapsed_ms(self) -> float | None:
        if self._round_started_ms is None:
            return None
        return max(0.0, self.scheduler.now_ms() - self._round_started_ms)

    def _conclude(self) -> None:
        """Compute the final score and persist it once."""
        self.final_score = self.aggregator.finalize(self.variant, self.outcomes, **self._final_context())
        logger.info("%s: final score %s", self.variant.value, self.final_score)
        if self._saved or self.store is None:
            return
        self._saved = True
        self.record = self.store.save(self.variant, self.final_score)

    def _show_result(self) -> None:
        self._disarm()
        self.state = SessionState.RESULT
        if self.on_result is not None:
            self.on_result(self.snapshot())

    def _finish(self) -> None:
        self._disarm()
        self._conclude()
        self._show_result()

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self.snapshot())


class TimedChoiceGame(GameMachine):
    """Fixed number of rounds, each with a response window.

    The deadline and the tap race for the round; whichever runs first
    disarms the other before touching the score.
    """

    def _begin_round(self) -> None:
        self.stimulus = self.generator.next_stimulus(self.round_index + 1)
        self.feedback = None
        self.state = SessionState.ACTIVE
        self._round_started_ms = self.scheduler.now_ms()
        self._arm(self.tuning.window_ms, self._on_deadline)
        self._deadline_ms = self._round_started_ms + self.tuning.window_ms
        if self.tuning.tick_ms > 0:
            self._every(self.tuning.tick_ms)

    def _on_deadline(self) -> None:
        if self.state is not SessionState.ACTIVE:
            return
        self._resolve(RoundOutcome(self._correct_without_tap(), None))

    def _on_tap(self, choice: int | None) -> bool:
        if self.state is not SessionState.ACTIVE:
            return False
        if not self._accepts(choice):
            return False
        elapsed = self._elapsed_ms()
        self._resolve(RoundOutcome(self._judge(choice), elapsed))
        return True

    def _accepts(self, choice: int | None) -> bool:
        return True

    def _judge(self, choice: int | None) -> bool:
        raise NotImplementedError

    def _correct_without_tap(self) -> bool:
        return False
