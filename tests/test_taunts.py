"""Tests for result-screen flavor text."""

import random

import pytest

from reactivity.models import GameVariant


@pytest.mark.parametrize("score, bucket", [
    (150, "EXCELLENT"), (199, "EXCELLENT"), (200, "GOOD"), (350, "AVERAGE"),
    (599, "BAD"), (600, "TERRIBLE"), (2000, "TERRIBLE"),
])
def test_reflex_tiers_by_time(score, bucket):
    from reactivity import taunts

    assert taunts.tier_for(score, GameVariant.REFLEX) is getattr(taunts, bucket)


@pytest.mark.parametrize("score, bucket", [
    (100, "EXCELLENT"), (90, "EXCELLENT"), (89, "GOOD"), (50, "AVERAGE"),
    (30, "BAD"), (29, "TERRIBLE"), (0, "TERRIBLE"),
])
def test_point_tiers(score, bucket):
    from reactivity import taunts

    assert taunts.tier_for(score, GameVariant.STROOP_COLOR) is getattr(taunts, bucket)


def test_taunt_comes_from_the_tier_and_is_seedable():
    from reactivity.taunts import EXCELLENT, taunt_for

    a = taunt_for(95, GameVariant.KEYWORD_SPOTTER, random.Random(3))
    b = taunt_for(95, GameVariant.KEYWORD_SPOTTER, random.Random(3))
    assert a == b
    assert a in EXCELLENT


def test_format_score():
    from reactivity.taunts import format_score

    assert format_score(180, GameVariant.REFLEX) == "180ms"
    assert format_score(80, GameVariant.STROOP_COLOR) == "80 pts"
    assert format_score(None, GameVariant.SEQUENCE_RECALL) == "---"
    assert format_score(62.5, GameVariant.SEQUENCE_RECALL) == "62.5 pts"


def test_every_game_has_a_name_and_description():
    from reactivity.taunts import GAME_DESCRIPTIONS, GAME_NAMES

    assert set(GAME_NAMES) == set(GameVariant)
    assert set(GAME_DESCRIPTIONS) == set(GameVariant)
