"""Core data model — variants, states, stimuli, outcomes, snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class GameVariant(str, Enum):
    REFLEX = "reflex"
    STROOP_COLOR = "color"
    CLICK_INHIBITION = "dontclick"
    KEYWORD_SPOTTER = "keyword"
    SEQUENCE_RECALL = "sequence"


class SessionState(str, Enum):
    INTRO = "intro"
    ARMED = "armed"        # stimulus pending: reflex wait, sequence playback
    ACTIVE = "active"      # accepting responses
    FEEDBACK = "feedback"
    RESULT = "result"


class Feedback(str, Enum):
    CORRECT = "correct"
    WRONG = "wrong"
    TOO_EARLY = "too_early"


class Orientation(str, Enum):
    LOWER_IS_BETTER = "lower"
    HIGHER_IS_BETTER = "higher"


# Shared color palette, palette index -> (label, hex). Games use the first N.
PALETTE = [
    ("VIOLET", "#a855f7"),
    ("VERT", "#22c55e"),
    ("ROUGE", "#ef4444"),
    ("BLEU", "#3b82f6"),
    ("JAUNE", "#eab308"),
    ("ORANGE", "#f97316"),
]

TIME_VARIANTS = frozenset({GameVariant.REFLEX})


def orientation_for(variant: GameVariant) -> Orientation:
    """Reflex is scored in milliseconds, everything else in points."""
    if variant in TIME_VARIANTS:
        return Orientation.LOWER_IS_BETTER
    return Orientation.HIGHER_IS_BETTER


# -- stimuli ---------------------------------------------------------------

class Instruction(str, Enum):
    CLICK = "click"
    DONT_CLICK = "dontclick"


class WordKind(str, Enum):
    TARGET = "target"
    TRAP = "trap"
    DISTRACTOR = "distractor"


@dataclass(frozen=True)
class ReflexStimulus:
    delay_ms: float


@dataclass(frozen=True)
class StroopStimulus:
    word: int   # palette index the text spells
    color: int  # palette index the text is painted in

    @property
    def congruent(self) -> bool:
        return self.word == self.color


@dataclass(frozen=True)
class InstructionStimulus:
    instruction: Instruction


@dataclass(frozen=True)
class KeywordStimulus:
    word: str
    kind: WordKind


@dataclass(frozen=True)
class SequenceStimulus:
    colors: tuple[int, ...]

    def __len__(self) -> int:
        return len(self.colors)


Stimulus = ReflexStimulus | StroopStimulus | InstructionStimulus | KeywordStimulus | SequenceStimulus


# -- outcomes & views ------------------------------------------------------

@dataclass(frozen=True)
class RoundOutcome:
    correct: bool
    elapsed_ms: float | None = None


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of a session for the presentation layer."""

    variant: GameVariant
    state: SessionState
    round_index: int
    rounds_total: int
    score: float
    stimulus: Stimulus | None = None
    feedback: Feedback | None = None
    final_score: float | None = None
    deadline_ms: float | None = None    # scheduler time the round window closes
    time_left_ms: float | None = None
    level: int = 0
    progress: int = 0             # sequence inputs accepted this level
    highlight: int | None = None  # palette color lit during sequence playback


@dataclass
class ScoreRecord:
    best: dict[GameVariant, float] = field(default_factory=dict)
    last_variant: GameVariant | None = None
    last_score: float | None = None

    def to_dict(self) -> dict:
        return {
            "best": {v.value: s for v, s in self.best.items()},
            "last_variant": self.last_variant.value if self.last_variant else None,
            "last_score": self.last_score,
        }

    @classmethod
    def from_dict(cls, raw: dict) -> ScoreRecord:
        """Build a record from stored JSON. Raises on malformed input."""
        if not isinstance(raw, dict):
            raise TypeError(f"score record must be an object, got {type(raw).__name__}")
        best = {}
        for key, value in (raw.get("best") or {}).items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise TypeError(f"best score for {key!r} is not a number")
            best[GameVariant(key)] = value
        last = raw.get("last_variant")
        last_score = raw.get("last_score")
        if last_score is not None and (isinstance(last_score, bool) or not isinstance(last_score, (int, float))):
            raise TypeError("last_score is not a number")
        return cls(
            best=best,
            last_variant=GameVariant(last) if last else None,
            last_score=last_score,
        )
