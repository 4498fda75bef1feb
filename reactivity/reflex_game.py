"""Reflex Timer — wait for the signal, then tap as fast as possible.

Tap to arm. After a random 2-5 s delay the signal goes green and the clock
starts; the next tap stops it. Tapping while still waiting is TOO EARLY:
no score, and the next tap restarts the wait.
"""

from __future__ import annotations

from reactivity.engine import GameMachine
from reactivity.models import Feedback, GameVariant, RoundOutcome, SessionState
from reactivity.scoring import round_half_up


class ReflexGame(GameMachine):
    variant = GameVariant.REFLEX

    def _clear(self) -> None:
        super()._clear()
        self.go_ms: float | None = None

    def _final_context(self) -> dict:
        return {}

    def _begin_round(self) -> None:
        """Arm the random wait before the signal."""
        self.stimulus = self.generator.next_stimulus(self.round_index + 1)
        self.feedback = None
        self.go_ms = None
        self.state = SessionState.ARMED
        self._arm(self.stimulus.delay_ms, self._go)

    def _go(self) -> None:
        if self.state is not SessionState.ARMED:
            return
        # No deadline: the signal stays up until the player taps
        self.state = SessionState.ACTIVE
        self.go_ms = self.scheduler.now_ms()
        self._round_started_ms = self.go_ms

    def _on_tap(self, choice: int | None) -> bool:
        state = self.state

        if state is SessionState.INTRO:
            self._generation += 1
            self._begin_session()
            return True

        if state is SessionState.ARMED:
            self._disarm()
            self.feedback = Feedback.TOO_EARLY
            self.state = SessionState.FEEDBACK
            return True

        if state is SessionState.FEEDBACK and self.feedback is Feedback.TOO_EARLY:
            if self.round_index == 0:
                # nothing to lose yet: back to the start screen
                self._abandon()
            else:
                self._begin_round()
            return True

        if state is SessionState.ACTIVE:
            elapsed = self._elapsed_ms()
            self._disarm()
            self._record(RoundOutcome(True, elapsed))
            self.score = round_half_up(elapsed)
            self.feedback = Feedback.CORRECT
            if self.round_index >= self.rounds_total:
                self._finish()
            else:
                self.state = SessionState.FEEDBACK
                self._arm(self.tuning.feedback_ms, self._after_feedback)
            return True

        return False
