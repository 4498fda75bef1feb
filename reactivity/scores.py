"""Persistent best scores for the arcade.

Stores best scores per game plus the most recent play in a JSON file
(default ~/.reactivity-arcade/scores.json). Reflex keeps the lowest time,
every other game keeps the highest score.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path

from reactivity.models import GameVariant, ScoreRecord
from reactivity.scoring import ScoreAggregator

logger = logging.getLogger(__name__)

_lock = threading.Lock()


def merge(record: ScoreRecord, variant: GameVariant, score: float) -> ScoreRecord:
    """Apply one finished session to a record (in place) and return it."""
    previous = record.best.get(variant)
    if ScoreAggregator.is_better(variant, score, previous):
        record.best[variant] = score
    record.last_variant = variant
    record.last_score = score
    return record


class ScorePersistence:
    """Score store interface used by the game machines."""

    def load(self) -> ScoreRecord:
        raise NotImplementedError

    def save(self, variant: GameVariant, score: float) -> ScoreRecord:
        raise NotImplementedError

    def best(self, variant: GameVariant) -> float | None:
        return self.load().best.get(variant)

    def last_play(self) -> tuple[GameVariant | None, float | None]:
        record = self.load()
        return record.last_variant, record.last_score


class MemoryScoreStore(ScorePersistence):
    def __init__(self, record: ScoreRecord | None = None):
        self.record = record or ScoreRecord()
        self.saves: list[tuple[GameVariant, float]] = []

    def load(self) -> ScoreRecord:
        return ScoreRecord(dict(self.record.best), self.record.last_variant, self.record.last_score)

    def save(self, variant: GameVariant, score: float) -> ScoreRecord:
        self.saves.append((variant, score))
        merge(self.record, variant, score)
        return self.load()


class JsonScoreStore(ScorePersistence):
    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _read(self) -> ScoreRecord:
        try:
            with open(self.path) as f:
                raw = json.load(f)
        except FileNotFoundError:
            return ScoreRecord()
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("unreadable score file %s (%s), using defaults", self.path, exc)
            return ScoreRecord()
        try:
            return ScoreRecord.from_dict(raw)
        except (TypeError, ValueError, AttributeError) as exc:
            logger.warning("malformed score file %s (%s), using defaults", self.path, exc)
            return ScoreRecord()

    def load(self) -> ScoreRecord:
        """Load the record. Never raises; falls back to an empty record."""
        return self._read()

    def save(self, variant: GameVariant, score: float) -> ScoreRecord:
        """Merge and write. A failed write is logged; the merged record is still returned."""
        with _lock:
            record = merge(self._read(), variant, score)
            try:
                os.makedirs(self.path.parent, exist_ok=True)
                with open(self.path, "w") as f:
                    json.dump(record.to_dict(), f, indent=2)
            except OSError as exc:
                logger.warning("could not write score file %s (%s), score not saved", self.path, exc)
                return record
        logger.info("saved %s score %s (best %s)", variant.value, score, record.best[variant])
        return record
