"""Game registry — one machine class per variant."""

from __future__ import annotations

import random

from reactivity.color_game import StroopColorGame
from reactivity.config import GamesConfig
from reactivity.dontclick_game import ClickInhibitionGame
from reactivity.engine import GameMachine, Listener
from reactivity.keyword_game import KeywordSpotterGame
from reactivity.models import GameVariant
from reactivity.reflex_game import ReflexGame
from reactivity.scheduler import Scheduler
from reactivity.scores import ScorePersistence
from reactivity.sequence_game import SequenceRecallGame

GAME_CLASSES: dict[GameVariant, type[GameMachine]] = {
    GameVariant.REFLEX: ReflexGame,
    GameVariant.STROOP_COLOR: StroopColorGame,
    GameVariant.CLICK_INHIBITION: ClickInhibitionGame,
    GameVariant.KEYWORD_SPOTTER: KeywordSpotterGame,
    GameVariant.SEQUENCE_RECALL: SequenceRecallGame,
}


def create_game(
    variant: GameVariant,
    games: GamesConfig,
    scheduler: Scheduler,
    store: ScorePersistence | None = None,
    seed: int | None = None,
    on_change: Listener | None = None,
    on_result: Listener | None = None,
) -> GameMachine:
    """Build a machine for ``variant`` with its configured tuning."""
    cls = GAME_CLASSES[variant]
    return cls(
        games.tuning(variant),
        scheduler,
        store=store,
        rng=random.Random(seed),
        on_change=on_change,
        on_result=on_result,
    )
