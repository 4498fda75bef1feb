"""Bonne Couleur — a Stroop test.

A color word is painted in a (usually different) ink. Tap the INK color,
not the word. 15 rounds, 2.5 s each; a timeout counts as wrong.
"""

from __future__ import annotations

from reactivity.engine import TimedChoiceGame
from reactivity.models import GameVariant


class StroopColorGame(TimedChoiceGame):
    variant = GameVariant.STROOP_COLOR

    def _accepts(self, choice: int | None) -> bool:
        return isinstance(choice, int) and 0 <= choice < self.tuning.palette_size

    def _judge(self, choice: int | None) -> bool:
        return choice == self.stimulus.color
