"""Result-screen flavor text, keyed only by final score and game."""

from __future__ import annotations

import random

from reactivity.models import GameVariant, Orientation, orientation_for

GAME_NAMES = {
    GameVariant.REFLEX: "Reflex Timer",
    GameVariant.STROOP_COLOR: "Bonne Couleur",
    GameVariant.KEYWORD_SPOTTER: "Mot-Clé",
    GameVariant.CLICK_INHIBITION: "Clique Pas",
    GameVariant.SEQUENCE_RECALL: "Séquence Flash",
}

GAME_DESCRIPTIONS = {
    GameVariant.REFLEX: "Raw reflexes. Tap the moment the signal turns green.",
    GameVariant.STROOP_COLOR: "RED written in blue? Tap the INK, not the word.",
    GameVariant.KEYWORD_SPOTTER: "Words fly by. Catch ALHADADE, dodge the traps.",
    GameVariant.CLICK_INHIBITION: "Sometimes tap, sometimes don't. Are you that disciplined?",
    GameVariant.SEQUENCE_RECALL: "Watch the colors, repeat them. It speeds up.",
}

EXCELLENT = [
    "Reflexes of a getaway driver. Respect.",
    "Not bad at all, there might be hope for you.",
    "OK, that one was actually clean.",
    "Flow AND reflexes? Who are you?",
    "Whatever you had before this, share it.",
]

GOOD = [
    "Decent. Don't get carried away though.",
    "Acceptable. For a beginner.",
    "You're warming up, keep going.",
    "Not terrible, still room to grow.",
    "The block would almost be proud.",
]

AVERAGE = [
    "The flow is there, the reflexes less so.",
    "Hmm... you've done better, right?",
    "Is it the WiFi lagging or is it you?",
    "Slow motion, episode 47.",
    "You sure you're not fifty?",
]

BAD = [
    "A skateboard rolls faster than that.",
    "Reflexes of a cold kebab.",
    "Big mindset, snail timing.",
    "Bro, this is getting awkward.",
    "You sure your connection didn't drop?",
]

TERRIBLE = [
    "Confirmed: you are a bot.",
    "My blind grandpa does better.",
    "That's not reflexes, that's yoga.",
    "Did you tap with your feet?",
    "Go back to sleep, it's for the best.",
    "Even the asphalt reacts faster.",
]

# (upper bound in ms, bucket) for time-based games
TIME_TIERS = [(200, EXCELLENT), (300, GOOD), (400, AVERAGE), (600, BAD)]
# (lower bound in points, bucket) for everything else
POINT_TIERS = [(90, EXCELLENT), (70, GOOD), (50, AVERAGE), (30, BAD)]


def tier_for(score: float, variant: GameVariant) -> list[str]:
    if orientation_for(variant) is Orientation.LOWER_IS_BETTER:
        for bound, bucket in TIME_TIERS:
            if score < bound:
                return bucket
        return TERRIBLE
    for bound, bucket in POINT_TIERS:
        if score >= bound:
            return bucket
    return TERRIBLE


def taunt_for(score: float, variant: GameVariant, rng: random.Random | None = None) -> str:
    """Pick a random line from the tier the score falls in."""
    return (rng or random).choice(tier_for(score, variant))


def format_score(score: float | None, variant: GameVariant) -> str:
    if score is None:
        return "---"
    value = int(score) if float(score).is_integer() else round(score, 1)
    if orientation_for(variant) is Orientation.LOWER_IS_BETTER:
        return f"{value}ms"
    return f"{value} pts"
