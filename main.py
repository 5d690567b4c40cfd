#!/usr/bin/env python3
"""Desk Cat - Animated desktop companion.

A transparent, always-on-top sprite that chases the pointer, swats at
it, grooms, plays and naps, picking what to do from a weighted table.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import random
import signal
import sys

from profiles import DEFAULT_PROFILE, PROFILES, Profile, get_profile
from weights import DEFAULT_FAR_CHASE, BehaviorWeights, InvalidWeightsError, parse_weights_arg

logger = logging.getLogger("desk-cat")

DEFAULT_SPRITES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "sprites")
CONFIG_DIR = os.path.join(os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config")), "desk-cat")
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")

EXIT_INVALID_CONFIG = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="desk-cat",
        description="Animated desktop companion that chases your pointer",
    )
    parser.add_argument(
        "--profile",
        choices=sorted(PROFILES),
        default=None,
        help=f"Companion variant (default: saved choice or {DEFAULT_PROFILE})",
    )
    parser.add_argument(
        "--weights",
        type=str,
        default=None,
        help="Behavior percentages, e.g. walk=40,groom=15,sleep=10,play=10,idleAlt=10,idle=15",
    )
    parser.add_argument(
        "--far-chase",
        type=int,
        default=None,
        help="Chance (0-100) to chase the pointer when it is far away",
    )
    parser.add_argument(
        "--sprites",
        type=str,
        default=DEFAULT_SPRITES_DIR,
        help="Directory holding the sprite frame folders",
    )
    parser.add_argument(
        "--pid-file",
        type=str,
        default="/tmp/desk-cat.pid",
        help="Path to the PID file (default: /tmp/desk-cat.pid)",
    )
    parser.add_argument(
        "--save",
        action="store_true",
        help="Remember the given profile and weights as defaults",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed the behavior RNG (reproducible runs)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging to stderr",
    )
    return parser.parse_args(argv)


def setup_logging(debug: bool) -> None:
    """Configure logging to stderr."""
    level = logging.DEBUG if debug else logging.WARNING
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter("[%(levelname)s] %(name)s: %(message)s")
    )
    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def setup_signal_handlers() -> None:
    """Register SIGINT and SIGTERM to gracefully quit GTK."""
    from gi.repository import Gtk

    def handle_signal(signum: int, frame: object) -> None:
        logger.info("Received signal %d, shutting down", signum)
        Gtk.main_quit()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)


def check_single_instance(pid_file: str) -> None:
    """Exit if another instance is already running."""
    if os.path.exists(pid_file):
        try:
            with open(pid_file) as f:
                pid = int(f.read().strip())
            os.kill(pid, 0)  # raises if process doesn't exist
            logger.info("Already running (PID %d), exiting", pid)
            sys.exit(0)
        except (ValueError, ProcessLookupError, PermissionError, OSError):
            pass  # stale PID file, continue


def write_pid(pid_file: str) -> None:
    with open(pid_file, "w") as f:
        f.write(str(os.getpid()))


def remove_pid(pid_file: str) -> None:
    try:
        os.unlink(pid_file)
    except OSError:
        pass


def load_config(path: str = CONFIG_FILE) -> dict:
    try:
        with open(path) as f:
            cfg = json.load(f)
    except (OSError, json.JSONDecodeError):
        return {}
    return cfg if isinstance(cfg, dict) else {}


def save_config(cfg: dict, path: str = CONFIG_FILE) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w") as f:
        json.dump(cfg, f, indent=2)


def resolve_profile(args: argparse.Namespace, config: dict) -> Profile:
    """--profile > saved profile > default."""
    name = args.profile or config.get("profile") or DEFAULT_PROFILE
    return get_profile(name)


def resolve_weights(profile: Profile, args: argparse.Namespace, config: dict) -> BehaviorWeights:
    """Merge weights: CLI > saved config (same profile only) > profile defaults.

    Raises InvalidWeightsError if the result does not sum to 100.
    """
    mapping: dict[str, object] = dict(profile.default_weights)
    far_chase: object = config.get("far_chase", DEFAULT_FAR_CHASE)
    saved = config.get("weights")
    if isinstance(saved, dict) and config.get("profile", DEFAULT_PROFILE) == profile.name:
        mapping = dict(saved)
    if args.weights:
        mapping = dict(parse_weights_arg(args.weights))
    if args.far_chase is not None:
        far_chase = args.far_chase
    weights = BehaviorWeights.from_mapping(mapping, profile.order, far_chase)
    weights.validate()
    return weights


def main() -> None:
    args = parse_args()
    setup_logging(args.debug)

    config = load_config()
    try:
        profile = resolve_profile(args, config)
        weights = resolve_weights(profile, args, config)
    except (InvalidWeightsError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(EXIT_INVALID_CONFIG)

    if args.save:
        config.update(profile=profile.name, weights=weights.as_dict(), far_chase=weights.far_chase)
        save_config(config)
        logger.info("Saved settings to %s", CONFIG_FILE)

    check_single_instance(args.pid_file)

    import gi

    gi.require_version("Gtk", "3.0")
    from gi.repository import Gtk

    from engine import CompanionEngine
    from pet_window import PetWindow, get_work_area
    from sprite_character import SpriteCharacter

    setup_signal_handlers()
    write_pid(args.pid_file)

    logger.info(
        "Starting Desk Cat: profile=%s, sprites=%s, pid_file=%s",
        profile.name,
        args.sprites,
        args.pid_file,
    )

    character = SpriteCharacter(args.sprites, profile.catalog)
    if not len(character):
        logger.warning("No sprite frames found in %s", args.sprites)

    rng = random.Random(args.seed)
    engine = CompanionEngine(profile, weights, get_work_area(), rng=rng)
    try:
        engine.start()
    except InvalidWeightsError as exc:
        remove_pid(args.pid_file)
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(EXIT_INVALID_CONFIG)

    window = PetWindow(engine=engine, character=character)
    window.show_all()

    Gtk.main()
    remove_pid(args.pid_file)
    logger.info("Desk Cat shut down")


if __name__ == "__main__":
    main()
