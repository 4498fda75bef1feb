"""Stimulus generation for each game variant.

Every draw goes through an injected ``random.Random`` so a seeded
generator replays the exact same session.
"""

from __future__ import annotations

import random

from reactivity.config import (
    InhibitionTuning,
    KeywordTuning,
    ReflexTuning,
    SequenceTuning,
    StroopTuning,
    Tuning,
)
from reactivity.models import (
    GameVariant,
    Instruction,
    InstructionStimulus,
    KeywordStimulus,
    ReflexStimulus,
    SequenceStimulus,
    Stimulus,
    StroopStimulus,
    WordKind,
)


def reflex_delay(tuning: ReflexTuning, rng: random.Random) -> ReflexStimulus:
    # uniform over [min, max)
    span = tuning.delay_max_ms - tuning.delay_min_ms
    return ReflexStimulus(delay_ms=tuning.delay_min_ms + rng.random() * span)


def stroop_pair(tuning: StroopTuning, rng: random.Random) -> StroopStimulus:
    """Word and ink color; most of the time forced to disagree."""
    n = tuning.palette_size
    word = rng.randrange(n)
    color = rng.randrange(n)
    if rng.random() < tuning.mismatch_probability:
        while color == word:
            color = rng.randrange(n)
    return StroopStimulus(word=word, color=color)


def instruction(tuning: InhibitionTuning, rng: random.Random) -> InstructionStimulus:
    if rng.random() < tuning.click_probability:
        return InstructionStimulus(Instruction.CLICK)
    return InstructionStimulus(Instruction.DONT_CLICK)


def keyword(tuning: KeywordTuning, rng: random.Random) -> KeywordStimulus:
    """Three-way draw: target, near-miss trap, or neutral distractor."""
    roll = rng.random()
    if roll < tuning.p_target:
        return KeywordStimulus(tuning.target, WordKind.TARGET)
    if roll < tuning.p_target + tuning.p_trap:
        return KeywordStimulus(rng.choice(tuning.traps), WordKind.TRAP)
    return KeywordStimulus(rng.choice(tuning.distractors), WordKind.DISTRACTOR)


def sequence(tuning: SequenceTuning, level: int, rng: random.Random) -> SequenceStimulus:
    """Whole sequence for a level, regenerated from scratch every time."""
    length = tuning.start_length + max(0, level - 1)
    return SequenceStimulus(tuple(rng.randrange(tuning.palette_size) for _ in range(length)))


class RoundGenerator:
    """Per-variant stimulus source."""

    def __init__(self, variant: GameVariant, tuning: Tuning,
                 rng: random.Random | None = None, seed: int | None = None):
        self.variant = variant
        self.tuning = tuning
        self.rng = rng if rng is not None else random.Random(seed)

    def reseed(self, seed: int | None) -> None:
        self.rng.seed(seed)

    def next_stimulus(self, level: int = 1) -> Stimulus:
        v = self.variant
        if v is GameVariant.REFLEX:
            return reflex_delay(self.tuning, self.rng)
        if v is GameVariant.STROOP_COLOR:
            return stroop_pair(self.tuning, self.rng)
        if v is GameVariant.CLICK_INHIBITION:
            return instruction(self.tuning, self.rng)
        if v is GameVariant.KEYWORD_SPOTTER:
            return keyword(self.tuning, self.rng)
        if v is GameVariant.SEQUENCE_RECALL:
            return sequence(self.tuning, level, self.rng)
        raise ValueError(f"unknown variant: {v}")
