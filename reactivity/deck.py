"""Stream Deck frontend — draws a game session and feeds key presses to it.

Layout (32-key deck):
    row 1 (0-7):   HUD — menu, round, score, best, state, time left
    row 2 (8-15):  stimulus
    row 3 (16-23): answer keys (color games) / taunt on the result screen
    row 4 (24-31): start key
"""

from __future__ import annotations

import random

from PIL import Image
from StreamDeck.ImageHelpers import PILHelper

from reactivity.engine import GameMachine
from reactivity.models import (
    PALETTE,
    Feedback,
    GameVariant,
    Instruction,
    InstructionStimulus,
    KeywordStimulus,
    SessionState,
    Snapshot,
    StroopStimulus,
)
from reactivity.renderer import (
    EMPTY_BG,
    dim,
    render_countdown,
    render_feedback,
    render_hud,
    render_text_button,
    render_tile,
    state_to_color,
    wrap_lines,
)
from reactivity.scores import ScorePersistence
from reactivity.taunts import GAME_DESCRIPTIONS, GAME_NAMES, format_score, taunt_for

GAME_KEYS = list(range(8, 32))
BACK_KEY = 0
COUNTDOWN_KEY = 5
STIMULUS_KEYS = [11, 12]
CHOICE_KEYS = [17, 18, 19, 20, 21, 22]
TAUNT_KEYS = [18, 19, 20, 21]
START_KEY = 28
KEY_TO_CHOICE = {k: i for i, k in enumerate(CHOICE_KEYS)}

CHOICE_VARIANTS = {GameVariant.STROOP_COLOR, GameVariant.SEQUENCE_RECALL}


class DeckFrontend:
    """Renders snapshots of one machine and routes key presses to it."""

    def __init__(self, deck, machine: GameMachine, store: ScorePersistence | None = None,
                 rng: random.Random | None = None, verbose: bool = False):
        self.deck = deck
        self.machine = machine
        self.store = store
        self.rng = rng or random.Random()
        self.verbose = verbose
        self.taunt: str | None = None
        self.best = store.best(machine.variant) if store is not None else None
        self._shown: dict[int, bytes] = {}
        machine.on_change = self.draw
        machine.on_result = self._on_result

    @property
    def palette_size(self) -> int:
        return getattr(self.machine.tuning, "palette_size", 0)

    def set_key(self, pos: int, img: Image.Image):
        # skip keys whose image did not change (countdown ticks redraw often)
        raw = img.tobytes()
        if self._shown.get(pos) == raw:
            return
        self._shown[pos] = raw
        native = PILHelper.to_native_key_format(self.deck, img)
        with self.deck:
            self.deck.set_key_image(pos, native)

    def show(self):
        self.draw(self.machine.snapshot())

    def draw(self, snap: Snapshot):
        for pos, img in self.compose(snap).items():
            self.set_key(pos, img)

    def _on_result(self, snap: Snapshot):
        if self.store is not None:
            self.best = self.store.best(snap.variant)
        self.taunt = taunt_for(snap.final_score, snap.variant, self.rng)
        if self.verbose:
            print(f"{GAME_NAMES[snap.variant]}: {format_score(snap.final_score, snap.variant)} - {self.taunt}")

    # -- key handling ------------------------------------------------------

    def on_key(self, _deck, key: int, pressed: bool):
        if not pressed:
            return

        state = self.machine.state
        if key == START_KEY and state in (SessionState.INTRO, SessionState.RESULT):
            if state is SessionState.RESULT:
                self.taunt = None
                self.machine.reset()
            self.machine.start()
            return

        if key not in GAME_KEYS:
            return

        if self.machine.variant in CHOICE_VARIANTS:
            choice = KEY_TO_CHOICE.get(key)
            if choice is not None:
                self.machine.tap(choice)
            return
        self.machine.tap()

    # -- layout ------------------------------------------------------------

    def compose(self, snap: Snapshot) -> dict[int, Image.Image]:
        """Images for every key, given a snapshot."""
        keys = {pos: render_tile(EMPTY_BG) for pos in range(32)}
        keys.update(self._hud(snap))

        if snap.state is SessionState.INTRO:
            keys[START_KEY] = render_text_button(lines=["PRESS", "START"], bg_color=state_to_color(snap.state),
                                                 colors=["#ffffff", "#34d399"])
            keys[STIMULUS_KEYS[0]] = render_text_button(lines=GAME_NAMES[snap.variant].upper().split(" ", 1),
                                                        font_sizes=[14, 14])
            for pos, chunk in zip(TAUNT_KEYS, wrap_lines(GAME_DESCRIPTIONS[snap.variant])):
                keys[pos] = render_text_button(lines=chunk, font_sizes=[11], colors=["#9ca3af"])
        elif snap.state is SessionState.RESULT:
            keys.update(self._result(snap))
        else:
            keys.update(self._stimulus(snap))
            if snap.variant in CHOICE_VARIANTS:
                keys.update(self._choices(snap))
        return keys

    def _hud(self, snap: Snapshot) -> dict[int, Image.Image]:
        if snap.variant is GameVariant.SEQUENCE_RECALL:
            progress = render_hud("LEVEL", str(snap.level))
        else:
            shown = min(snap.round_index + 1, snap.rounds_total) if snap.state is not SessionState.INTRO else 0
            progress = render_hud("ROUND", f"{shown}/{snap.rounds_total}", "#60a5fa")
        keys = {
            BACK_KEY: render_text_button(lines=["<<", "MENU"], bg_color="#374151", colors=["#fbbf24", "#9ca3af"]),
            1: progress,
            2: render_hud("SCORE", format_score(snap.score, snap.variant).split()[0], "#fbbf24"),
            3: render_hud("BEST", format_score(self.best, snap.variant).split()[0], "#34d399"),
            4: render_tile(state_to_color(snap.state)),
        }
        if snap.time_left_ms is not None and getattr(self.machine.tuning, "tick_ms", 0) > 0:
            keys[COUNTDOWN_KEY] = render_countdown(snap.time_left_ms, self.machine.tuning.window_ms)
        return keys

    def _stimulus(self, snap: Snapshot) -> dict[int, Image.Image]:
        left, right = STIMULUS_KEYS
        if snap.state is SessionState.FEEDBACK:
            return {left: render_feedback(snap.feedback), right: render_feedback(snap.feedback)}

        stim = snap.stimulus
        if snap.variant is GameVariant.REFLEX:
            # whole game area turns into the signal
            color = "#22c55e" if snap.state is SessionState.ACTIVE else "#7f1d1d"
            label = ["GO!"] if snap.state is SessionState.ACTIVE else ["WAIT"]
            keys = {pos: render_tile(color) for pos in GAME_KEYS if pos != START_KEY}
            keys[left] = render_text_button(lines=label, bg_color=color)
            return keys
        if isinstance(stim, StroopStimulus):
            word, _ = PALETTE[stim.word]
            _, ink = PALETTE[stim.color]
            return {left: render_text_button(lines=[word], bg_color="#000000", colors=[ink], font_sizes=[20])}
        if isinstance(stim, InstructionStimulus):
            go = stim.instruction is Instruction.CLICK
            label = ["CLICK!"] if go else ["DON'T", "CLICK"]
            bg = "#14532d" if go else "#7f1d1d"
            return {pos: render_text_button(lines=label, bg_color=bg) for pos in STIMULUS_KEYS}
        if isinstance(stim, KeywordStimulus):
            return {left: render_text_button(lines=[stim.word], font_sizes=[16]), right: render_tile("#111827")}
        if snap.variant is GameVariant.SEQUENCE_RECALL:
            label = ["WATCH", "..."] if snap.state is SessionState.ARMED else ["YOUR", f"TURN {snap.progress}"]
            return {left: render_text_button(lines=label, bg_color=state_to_color(snap.state))}
        return {}

    def _choices(self, snap: Snapshot) -> dict[int, Image.Image]:
        keys = {}
        accepting = snap.state is SessionState.ACTIVE
        for i in range(self.palette_size):
            name, color = PALETTE[i]
            if snap.variant is GameVariant.STROOP_COLOR:
                keys[CHOICE_KEYS[i]] = render_text_button(
                    lines=[name], bg_color="#1f2937" if accepting else "#111827", font_sizes=[14],
                )
            else:
                lit = snap.highlight == i
                keys[CHOICE_KEYS[i]] = render_tile(color if lit else dim(color))
        return keys

    def _result(self, snap: Snapshot) -> dict[int, Image.Image]:
        keys = {
            11: render_text_button(lines=["FINAL", format_score(snap.final_score, snap.variant)],
                                   font_sizes=[12, 20], colors=["#9ca3af", "#fbbf24"]),
            12: render_text_button(lines=["GAME", "OVER"], bg_color=state_to_color(snap.state)),
            START_KEY: render_text_button(lines=["PLAY", "AGAIN"], bg_color="#065f46",
                                          colors=["#ffffff", "#34d399"]),
        }
        if snap.feedback is Feedback.WRONG and snap.variant is GameVariant.SEQUENCE_RECALL:
            keys[13] = render_hud("LEVELS", str(int(snap.score)))
        if self.taunt:
            for pos, chunk in zip(TAUNT_KEYS, wrap_lines(self.taunt)):
                keys[pos] = render_text_button(lines=chunk, font_sizes=[11])
        return keys
