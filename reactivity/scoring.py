"""Final score formulas.

Three families:

- percentage (color, dontclick, keyword): round(correct / total * 100)
- progression (sequence): weighted levels cleared + extra length
- elapsed (reflex): reaction time in ms, lower is better
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from reactivity.models import GameVariant, Orientation, RoundOutcome, orientation_for

PERCENTAGE_VARIANTS = frozenset({
    GameVariant.STROOP_COLOR,
    GameVariant.CLICK_INHIBITION,
    GameVariant.KEYWORD_SPOTTER,
})


def round_half_up(x: float) -> int:
    # Python's round() is banker's rounding; scores round .5 up
    return math.floor(x + 0.5)


def percentage(correct: int, total: int) -> int:
    if total < 1:
        raise ValueError("total rounds must be >= 1")
    if not 0 <= correct <= total:
        raise ValueError(f"correct={correct} outside [0, {total}]")
    return round_half_up(correct * 100 / total)


def progression(levels_cleared: int, extra_length: int,
                level_weight: float = 20, length_weight: float = 0) -> float:
    """Zero when the very first sequence fails."""
    score = levels_cleared * level_weight + extra_length * length_weight
    score = max(0, score)
    return int(score) if float(score).is_integer() else score


def elapsed(times: Sequence[float]) -> int:
    """One reaction time, or the rounded mean over several rounds."""
    if not times:
        raise ValueError("no reaction times recorded")
    return round_half_up(sum(times) / len(times))


class ScoreAggregator:
    """Turns a session's round outcomes into its final score."""

    def finalize(self, variant: GameVariant, outcomes: Sequence[RoundOutcome], **context) -> float:
        if variant in PERCENTAGE_VARIANTS:
            total = context.get("total", len(outcomes))
            return percentage(sum(1 for o in outcomes if o.correct), total)
        if variant is GameVariant.REFLEX:
            return elapsed([o.elapsed_ms for o in outcomes if o.correct and o.elapsed_ms is not None])
        if variant is GameVariant.SEQUENCE_RECALL:
            return progression(
                context["levels_cleared"],
                context["extra_length"],
                context.get("level_weight", 20),
                context.get("length_weight", 0),
            )
        raise ValueError(f"unknown variant: {variant}")

    @staticmethod
    def is_better(variant: GameVariant, new: float, old: float | None) -> bool:
        if old is None:
            return True
        if orientation_for(variant) is Orientation.LOWER_IS_BETTER:
            return new < old
        return new > old
