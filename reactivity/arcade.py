"""Reactivity Arcade — game menu and entry point.

Shows the five games on the deck with their best scores; press one to
play it, press the top-left key to come back to the menu.

Usage:
    reactivity-arcade --config config.yaml
    reactivity-arcade --game reflex --seed 42 -v
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
import threading
from pathlib import Path

from PIL import Image
from StreamDeck.DeviceManager import DeviceManager
from StreamDeck.ImageHelpers import PILHelper

from reactivity.config import AppConfig, ConfigError, load_config
from reactivity.deck import BACK_KEY, DeckFrontend
from reactivity.engine import GameMachine
from reactivity.games import create_game
from reactivity.models import GameVariant
from reactivity.renderer import render_hud, render_text_button, render_tile
from reactivity.scheduler import Scheduler, ThreadScheduler
from reactivity.scores import JsonScoreStore, ScorePersistence
from reactivity.taunts import GAME_NAMES, format_score

logger = logging.getLogger(__name__)

# menu slot, button color
MENU = [
    (GameVariant.REFLEX, 8, "#14532d"),
    (GameVariant.STROOP_COLOR, 9, "#4c1d95"),
    (GameVariant.KEYWORD_SPOTTER, 10, "#1e3a5f"),
    (GameVariant.CLICK_INHIBITION, 11, "#7f1d1d"),
    (GameVariant.SEQUENCE_RECALL, 12, "#713f12"),
]
BEST_ROW_OFFSET = 8  # best score shown right under each game button


def find_deck():
    """Find first visual Stream Deck device."""
    decks = DeviceManager().enumerate()
    for deck in decks:
        if deck.is_visual():
            return deck
    return None


class Arcade:
    def __init__(self, deck, config: AppConfig, store: ScorePersistence,
                 scheduler: Scheduler | None = None, seed: int | None = None, verbose: bool = False):
        self.deck = deck
        self.config = config
        self.store = store
        self.scheduler = scheduler or ThreadScheduler()
        self.seed = seed
        self.verbose = verbose
        self.active_game: GameMachine | None = None
        self.frontend: DeckFrontend | None = None
        self.in_menu = True

    def set_key(self, pos: int, img: Image.Image):
        native = PILHelper.to_native_key_format(self.deck, img)
        with self.deck:
            self.deck.set_key_image(pos, native)

    def show_menu(self):
        """Draw the game selection menu."""
        self.in_menu = True
        record = self.store.load()

        self.set_key(0, render_text_button(lines=["REACT", "ARCADE"], bg_color="#4c1d95",
                                           colors=["#c4b5fd", "#fbbf24"], font_sizes=[14, 14]))
        if record.last_variant is not None:
            self.set_key(1, render_hud("LAST", format_score(record.last_score, record.last_variant)))
        else:
            self.set_key(1, render_tile("#111827"))
        for k in range(2, 8):
            self.set_key(k, render_tile("#111827"))

        used = set(range(8))
        for variant, pos, bg in MENU:
            title = GAME_NAMES[variant].upper().split(" ", 1)
            self.set_key(pos, render_text_button(lines=title, bg_color=bg, font_sizes=[13, 13]))
            best = record.best.get(variant)
            self.set_key(pos + BEST_ROW_OFFSET, render_hud("BEST", format_score(best, variant)))
            used |= {pos, pos + BEST_ROW_OFFSET}

        for k in range(8, 32):
            if k not in used:
                self.set_key(k, render_tile("#111827"))

        self.deck.set_key_callback(self.on_key)

    def launch_game(self, variant: GameVariant):
        """Build a fresh machine for ``variant`` and hand the deck to it."""
        self.in_menu = False
        seed = self.seed if self.seed is not None else random.randrange(2**32)
        game = create_game(variant, self.config.games, self.scheduler, store=self.store, seed=seed)
        self.active_game = game
        self.frontend = DeckFrontend(self.deck, game, store=self.store,
                                     rng=random.Random(seed), verbose=self.verbose)
        logger.info("launching %s (seed %d)", variant.value, seed)
        self.frontend.show()

        original_on_key = self.frontend.on_key

        def wrapped_on_key(deck, key, pressed):
            if pressed and key == BACK_KEY:
                self._stop_game()
                self.show_menu()
                return
            original_on_key(deck, key, pressed)

        self.deck.set_key_callback(wrapped_on_key)

    def _stop_game(self):
        """Invalidate the running session: timers, playback, pending saves."""
        if self.active_game is not None:
            self.active_game.close()
            self.active_game = None
        self.frontend = None
        self.in_menu = True

    def on_key(self, _deck, key: int, pressed: bool):
        """Menu key handler."""
        if not pressed or not self.in_menu:
            return

        for variant, pos, _ in MENU:
            if key == pos:
                self.launch_game(variant)
                return


def main():
    parser = argparse.ArgumentParser(description="Reactivity Arcade for Stream Deck")
    parser.add_argument("--config", default=None, help="Config file path (YAML)")
    parser.add_argument("--game", choices=[v.value for v in GameVariant], help="Skip the menu and play one game")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible rounds")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Config not found: {config_path}")
            sys.exit(1)
        try:
            config = load_config(config_path)
        except ConfigError as exc:
            print(f"Bad config: {exc}")
            sys.exit(1)
    else:
        config = AppConfig()

    deck = find_deck()
    if deck is None:
        print("No Stream Deck found. Is it plugged in?")
        sys.exit(1)

    deck.open()
    deck.reset()
    deck.set_brightness(config.deck.brightness)
    print(f"Connected: {deck.deck_type()} ({deck.key_count()} keys)")

    store = JsonScoreStore(config.scores_file)
    arcade = Arcade(deck, config, store, seed=args.seed, verbose=args.verbose)
    if args.game:
        arcade.launch_game(GameVariant(args.game))
    else:
        print("REACTIVITY ARCADE - choose a game!")
        arcade.show_menu()

    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        print("\nBye!")
    finally:
        arcade._stop_game()
        deck.reset()
        deck.close()


if __name__ == "__main__":
    main()
