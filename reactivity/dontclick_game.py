"""Clique Pas — go/no-go inhibition.

Each round shows CLICK or DON'T CLICK. Tap on CLICK, hold still on
DON'T CLICK until the window closes.
"""

from __future__ import annotations

from reactivity.engine import TimedChoiceGame
from reactivity.models import GameVariant, Instruction


class ClickInhibitionGame(TimedChoiceGame):
    variant = GameVariant.CLICK_INHIBITION

    def _judge(self, choice: int | None) -> bool:
        return self.stimulus.instruction is Instruction.CLICK

    def _correct_without_tap(self) -> bool:
        return self.stimulus.instruction is Instruction.DONT_CLICK
