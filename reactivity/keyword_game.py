"""Mot-Clé — spot the exact target word in a fast stream.

Words flash for 800 ms. Tap only on the exact target; near-miss traps
(ALHADAB, ALHADADA, ...) and plain distractors must be let through.
"""

from __future__ import annotations

from reactivity.engine import TimedChoiceGame
from reactivity.models import GameVariant


class KeywordSpotterGame(TimedChoiceGame):
    variant = GameVariant.KEYWORD_SPOTTER

    def _is_target(self) -> bool:
        # compare the text itself, a trap is only "similar"
        return self.stimulus.word == self.tuning.target

    def _judge(self, choice: int | None) -> bool:
        return self._is_target()

    def _correct_without_tap(self) -> bool:
        return not self._is_target()
