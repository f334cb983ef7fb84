"""Key-value persistence of the game state and settings.

Every read degrades gracefully: a missing or corrupt record means "nothing
stored", it never takes the game down.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from .modes import GameMode
from .settings import (
    GameSettings,
    PlayersSettings,
    upgrade_game_settings,
    upgrade_player_settings,
)
from .state import GameState, parse_save_state_dict

log = logging.getLogger("scramble.core.storage")

STORAGE_KEY = "scramble-game-state"
PLAYER_NAMES_KEY = "scramble-player-names"
GAME_SETTINGS_KEY = "scramble-game-settings"


class KeyValueStore(Protocol):
    """Minimal string store (browser localStorage-like)."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    """In-process store, used by tests and as a no-persistence default."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStore:
    """One `<key>.json` file per key inside `directory`."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        log.info("json_store_ready dir=%s", self.directory)

    def _path(self, key: str) -> Path:
        safe = "".join(ch if ch.isalnum() or ch in "-_" else "-" for ch in key)
        return self.directory / f"{safe}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class GameRepository:
    """Reads and writes game records through a `KeyValueStore`."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def _read_json(self, key: str) -> Any | None:
        try:
            raw = self.store.get(key)
        except UnicodeDecodeError as exc:
            log.warning("storage_undecodable key=%s error=%s", key, exc)
            return None
        except OSError as exc:
            log.error("storage_read_failed key=%s error=%s", key, exc)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            log.warning("storage_corrupt_json key=%s error=%s", key, exc)
            return None

    def _write_json(self, key: str, payload: Any) -> bool:
        try:
            self.store.set(key, json.dumps(payload, ensure_ascii=False))
        except OSError as exc:
            log.error("storage_write_failed key=%s error=%s", key, exc)
            return False
        return True

    # --- game state -------------------------------------------------------

    def save_game(self, state: GameState) -> bool:
        return self._write_json(STORAGE_KEY, state.to_dict())

    def load_game(self) -> GameState | None:
        """Stored game or None when absent/corrupt."""
        data = self._read_json(STORAGE_KEY)
        if data is None:
            return None
        try:
            return parse_save_state_dict(data)
        except (ValidationError, ValueError) as exc:
            log.warning("storage_invalid_game error=%s", exc)
            return None

    def clear_game(self) -> None:
        try:
            self.store.remove(STORAGE_KEY)
        except OSError as exc:
            log.error("storage_clear_failed key=%s error=%s", STORAGE_KEY, exc)

    # --- settings ---------------------------------------------------------

    def save_settings(self, settings: GameSettings) -> bool:
        return self._write_json(GAME_SETTINGS_KEY, settings.to_dict())

    def load_settings(self, default_mode: GameMode = GameMode.STANDARD) -> GameSettings:
        return upgrade_game_settings(self._read_json(GAME_SETTINGS_KEY), default_mode)

    def save_players(self, players: PlayersSettings) -> bool:
        return self._write_json(PLAYER_NAMES_KEY, players.to_dict())

    def load_players(self) -> PlayersSettings:
        return upgrade_player_settings(self._read_json(PLAYER_NAMES_KEY))
