"""Config loader — YAML to dataclasses.

Every timing constant, round count and scoring weight of the five games is a
named tuning value. Two built-in profiles exist (``classic`` and ``hard``);
the ``games`` section of the YAML picks one and may override single fields::

    games:
      profile: hard
      keyword:
        window_ms: 650
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path

import yaml

from reactivity.models import PALETTE, GameVariant


class ConfigError(ValueError):
    """Invalid configuration value."""


@dataclass
class DeckConfig:
    brightness: int = 80


@dataclass
class ReflexTuning:
    delay_min_ms: float = 2000
    delay_max_ms: float = 5000
    rounds: int = 1
    feedback_ms: float = 800


@dataclass
class StroopTuning:
    rounds: int = 15
    window_ms: float = 2500
    feedback_ms: float = 600
    palette_size: int = 4
    mismatch_probability: float = 0.7
    tick_ms: float = 50  # countdown refresh, 0 disables


@dataclass
class InhibitionTuning:
    rounds: int = 10
    window_ms: float = 1500
    feedback_ms: float = 400
    click_probability: float = 0.5
    tick_ms: float = 0


@dataclass
class KeywordTuning:
    rounds: int = 10
    window_ms: float = 800
    feedback_ms: float = 300
    tick_ms: float = 0
    target: str = "ALHADADE"
    p_target: float = 0.3
    p_trap: float = 0.2
    traps: list[str] = field(default_factory=lambda: [
        "ALHADAB", "ALHADAD", "ALHADADA", "ALHADDE", "ALAHDADE", "AIHADADE",
    ])
    distractors: list[str] = field(default_factory=lambda: [
        "FLOW", "STREET", "BITUME", "SKATE", "DAMSO",
        "TRAP", "HOOD", "BOSS", "CASH", "DRIP",
    ])


@dataclass
class SequenceTuning:
    palette_size: int = 4
    start_length: int = 3
    flash_ms: float = 500
    flash_step_ms: float = 30
    flash_floor_ms: float = 200
    pause_ms: float = 200
    pause_step_ms: float = 10
    pause_floor_ms: float = 80
    feedback_ms: float = 1000
    level_weight: float = 20
    length_weight: float = 0

    def flash_for(self, level: int) -> float:
        """Flash duration for a level — shrinks each level down to the floor."""
        return max(self.flash_floor_ms, self.flash_ms - (level - 1) * self.flash_step_ms)

    def pause_for(self, level: int) -> float:
        return max(self.pause_floor_ms, self.pause_ms - (level - 1) * self.pause_step_ms)


Tuning = ReflexTuning | StroopTuning | InhibitionTuning | KeywordTuning | SequenceTuning


@dataclass
class GamesConfig:
    profile: str = "classic"
    reflex: ReflexTuning = field(default_factory=ReflexTuning)
    color: StroopTuning = field(default_factory=StroopTuning)
    dontclick: InhibitionTuning = field(default_factory=InhibitionTuning)
    keyword: KeywordTuning = field(default_factory=KeywordTuning)
    sequence: SequenceTuning = field(default_factory=SequenceTuning)

    def tuning(self, variant: GameVariant) -> Tuning:
        return getattr(self, variant.value)


@dataclass
class AppConfig:
    deck: DeckConfig = field(default_factory=DeckConfig)
    games: GamesConfig = field(default_factory=GamesConfig)
    scores_path: str = "~/.reactivity-arcade/scores.json"

    @property
    def scores_file(self) -> Path:
        return Path(os.path.expanduser(self.scores_path))


# Faster windows, longer and wider sequences.
PROFILES: dict[str, GamesConfig] = {
    "classic": GamesConfig(),
    "hard": GamesConfig(
        profile="hard",
        reflex=ReflexTuning(rounds=5),
        color=StroopTuning(rounds=20, window_ms=1800, feedback_ms=500),
        dontclick=InhibitionTuning(rounds=15, window_ms=1200, feedback_ms=350),
        keyword=KeywordTuning(rounds=15, window_ms=600, p_target=0.3, p_trap=0.3),
        sequence=SequenceTuning(
            palette_size=6, start_length=4, flash_ms=450, flash_step_ms=40,
            flash_floor_ms=150, pause_ms=180, pause_step_ms=15, pause_floor_ms=60,
            level_weight=15, length_weight=5,
        ),
    ),
}


def _override(base, raw: dict | None, section: str):
    if not raw:
        return replace(base)
    if not isinstance(raw, dict):
        raise ConfigError(f"{section} must be a mapping")
    types = {f.name: f.type for f in fields(base)}
    unknown = set(raw) - set(types)
    if unknown:
        raise ConfigError(f"unknown keys in {section}: {', '.join(sorted(unknown))}")
    for name, value in raw.items():
        _check_type(f"{section}.{name}", types[name], value)
    return replace(base, **raw)


def _check_type(name: str, kind: str, value) -> None:
    # field annotations are strings here (postponed evaluation)
    if isinstance(value, bool):
        ok = False
    elif kind == "int":
        ok = isinstance(value, int)
    elif kind == "float":
        ok = isinstance(value, (int, float))
    elif kind == "str":
        ok = isinstance(value, str)
    elif kind == "list[str]":
        ok = isinstance(value, list) and all(isinstance(v, str) for v in value)
    else:
        ok = True
    if not ok:
        raise ConfigError(f"{name} must be {kind}, got {value!r}")


def _check_probability(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ConfigError(f"{name} must be within [0, 1], got {value}")


def validate(games: GamesConfig) -> GamesConfig:
    """Reject tunings the engine cannot run."""
    for name in ("color", "dontclick", "keyword"):
        t = getattr(games, name)
        if t.rounds < 1:
            raise ConfigError(f"games.{name}.rounds must be >= 1")
        if t.window_ms <= 0:
            raise ConfigError(f"games.{name}.window_ms must be positive")
        if t.tick_ms < 0:
            raise ConfigError(f"games.{name}.tick_ms must not be negative")

    r = games.reflex
    if r.rounds < 1:
        raise ConfigError("games.reflex.rounds must be >= 1")
    if not 0 <= r.delay_min_ms <= r.delay_max_ms:
        raise ConfigError("games.reflex needs 0 <= delay_min_ms <= delay_max_ms")

    if not 2 <= games.color.palette_size <= len(PALETTE):
        raise ConfigError(f"games.color.palette_size must be within [2, {len(PALETTE)}]")
    _check_probability("games.color.mismatch_probability", games.color.mismatch_probability)
    _check_probability("games.dontclick.click_probability", games.dontclick.click_probability)

    k = games.keyword
    _check_probability("games.keyword.p_target", k.p_target)
    _check_probability("games.keyword.p_trap", k.p_trap)
    if k.p_target + k.p_trap > 1.0:
        raise ConfigError("games.keyword.p_target + p_trap must not exceed 1")
    if k.target in k.traps or k.target in k.distractors:
        raise ConfigError("games.keyword.target must not appear among traps or distractors")
    if k.p_trap > 0 and not k.traps:
        raise ConfigError("games.keyword.traps is empty but p_trap > 0")
    if k.p_target + k.p_trap < 1.0 and not k.distractors:
        raise ConfigError("games.keyword.distractors is empty")

    s = games.sequence
    if not 2 <= s.palette_size <= len(PALETTE):
        raise ConfigError(f"games.sequence.palette_size must be within [2, {len(PALETTE)}]")
    if s.start_length < 1:
        raise ConfigError("games.sequence.start_length must be >= 1")
    if s.flash_step_ms < 0 or s.pause_step_ms < 0:
        raise ConfigError("games.sequence step values must not be negative")
    return games


def games_config(raw: dict | None) -> GamesConfig:
    """Resolve the ``games`` section: profile first, then per-game overrides."""
    if raw is not None and not isinstance(raw, dict):
        raise ConfigError("games must be a mapping")
    raw = dict(raw or {})
    profile = raw.pop("profile", "classic")
    if not isinstance(profile, str) or profile not in PROFILES:
        raise ConfigError(f"unknown profile {profile!r} (choose from {', '.join(PROFILES)})")
    base = PROFILES[profile]
    games = GamesConfig(
        profile=profile,
        reflex=_override(base.reflex, raw.get("reflex"), "games.reflex"),
        color=_override(base.color, raw.get("color"), "games.color"),
        dontclick=_override(base.dontclick, raw.get("dontclick"), "games.dontclick"),
        keyword=_override(base.keyword, raw.get("keyword"), "games.keyword"),
        sequence=_override(base.sequence, raw.get("sequence"), "games.sequence"),
    )
    return validate(games)


def load_config(path: Path) -> AppConfig:
    """Load config from YAML file."""
    with open(path) as f:
        try:
            raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"{path}: not valid YAML ({exc})") from exc

    if not isinstance(raw, dict):
        raise ConfigError("config file must hold a mapping")
    deck = _override(DeckConfig(), raw.get("deck"), "deck")
    games = games_config(raw.get("games"))
    scores_path = raw.get("scores_path") or AppConfig.scores_path
    if not isinstance(scores_path, str):
        raise ConfigError(f"scores_path must be a string, got {scores_path!r}")

    return AppConfig(deck=deck, games=games, scores_path=scores_path)
