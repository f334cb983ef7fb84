"""Configuration for Scramble read from the environment (and `.env`).

Keys:
- SCRAMBLE_DATA_DIR: directory for the JSON store (default `~/.scramble`)
- SCRAMBLE_PERSIST: '0' keeps everything in memory only
- SCRAMBLE_DICTIONARY_PATH: word list loaded at start-up
- SCRAMBLE_SEED: integer seed for a reproducible tile bag
- SCRAMBLE_GAME_MODE: default mode when no settings are stored
- SCRAMBLE_LOG_PATH: see `scramble.logging_setup`
"""
from __future__ import annotations

import logging
import os
import random
from pathlib import Path

from dotenv import load_dotenv

from .core.modes import GameMode

log = logging.getLogger("scramble.config")

# Load .env early, but never replace variables already set in the OS
if os.getenv("PYTEST_CURRENT_TEST") is None:
    load_dotenv(override=False)

_TRUE = {"1", "true", "yes", "on", "y", "t"}
_FALSE = {"0", "false", "no", "off", "n", "f"}


def _parse_bool(val: str | None) -> bool | None:
    """Tolerant boolean parsing; None when the value is not recognised."""
    if val is None:
        return None
    v = val.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    return None


def data_dir() -> Path:
    env = os.getenv("SCRAMBLE_DATA_DIR")
    if env:
        return Path(env).expanduser()
    return Path.home() / ".scramble"


def persistence_enabled() -> bool:
    """File persistence is on unless SCRAMBLE_PERSIST says otherwise."""
    return _parse_bool(os.getenv("SCRAMBLE_PERSIST")) is not False


def dictionary_path() -> Path | None:
    env = os.getenv("SCRAMBLE_DICTIONARY_PATH")
    return Path(env).expanduser() if env else None


def bag_seed() -> int | None:
    raw = os.getenv("SCRAMBLE_SEED")
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError:
        log.warning("config_bad_seed value=%r", raw)
        return None


def make_rng() -> random.Random:
    """Seeded generator when SCRAMBLE_SEED is set, OS-seeded otherwise."""
    return random.Random(bag_seed())


def default_game_mode() -> GameMode:
    raw = os.getenv("SCRAMBLE_GAME_MODE")
    if not raw:
        return GameMode.STANDARD
    try:
        return GameMode.from_string(raw)
    except ValueError:
        log.warning("config_bad_game_mode value=%r", raw)
        return GameMode.STANDARD
