"""Séquence Flash — watch the color sequence, then repeat it.

Each cleared level regenerates a sequence one element longer and plays it
back faster (flash and pause shrink per level down to a floor). The first
wrong color ends the run.
"""

from __future__ import annotations

from functools import partial

from reactivity.engine import GameMachine
from reactivity.models import Feedback, GameVariant, RoundOutcome, SessionState


class SequenceRecallGame(GameMachine):
    variant = GameVariant.SEQUENCE_RECALL

    def _clear(self) -> None:
        super()._clear()
        self.level = 1
        self.levels_cleared = 0
        self.progress = 0
        self.highlight: int | None = None

    @property
    def rounds_total(self) -> int:
        # open-ended: the run lasts until the first mistake
        return 0

    @property
    def sequence(self) -> tuple[int, ...]:
        return self.stimulus.colors if self.stimulus is not None else ()

    def _extra_snapshot(self) -> dict:
        return {"level": self.level, "progress": self.progress, "highlight": self.highlight}

    def _final_context(self) -> dict:
        return {
            "levels_cleared": self.levels_cleared,
            "extra_length": len(self.sequence) - self.tuning.start_length,
            "level_weight": self.tuning.level_weight,
            "length_weight": self.tuning.length_weight,
        }

    # -- playback ----------------------------------------------------------

    def _begin_round(self) -> None:
        self.stimulus = self.generator.next_stimulus(self.level)
        self.progress = 0
        self.feedback = None
        self.highlight = None
        self.state = SessionState.ARMED

        flash = self.tuning.flash_for(self.level)
        pause = self.tuning.pause_for(self.level)
        steps = []
        for i in range(len(self.sequence)):
            steps.append((pause, partial(self._light, i)))
            steps.append((flash, self._unlight))
        steps.append((pause, self._open_input))
        self._play(steps)

    def _light(self, index: int) -> None:
        # palette color of the element, so the matching key lights up
        self.highlight = self.sequence[index]

    def _unlight(self) -> None:
        self.highlight = None

    def _open_input(self) -> None:
        self.state = SessionState.ACTIVE
        self._round_started_ms = self.scheduler.now_ms()

    # -- input -------------------------------------------------------------

    def _on_tap(self, choice: int | None) -> bool:
        if self.state is not SessionState.ACTIVE:
            return False
        if not (isinstance(choice, int) and 0 <= choice < self.tuning.palette_size):
            return False

        if choice != self.sequence[self.progress]:
            # terminal: no further input, score now, result after a pause
            self._disarm()
            self._record(RoundOutcome(False, self._elapsed_ms()))
            self.feedback = Feedback.WRONG
            self.state = SessionState.FEEDBACK
            self._conclude()
            self._arm(self.tuning.feedback_ms, self._show_result)
            return True

        self.progress += 1
        if self.progress == len(self.sequence):
            self._disarm()
            self._record(RoundOutcome(True, self._elapsed_ms()))
            self.levels_cleared += 1
            self.score = self.levels_cleared
            self.feedback = Feedback.CORRECT
            self.state = SessionState.FEEDBACK
            self._arm(self.tuning.feedback_ms, self._next_level)
        return True

    def _next_level(self) -> None:
        self.level += 1
        self._begin_round()
