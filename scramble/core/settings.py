"""Game and player settings, including upgrades of legacy stored shapes.

Settings are plain values handed to the turn controller when it is built;
nothing in the rules engine reads them from storage on its own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .modes import GameMode

log = logging.getLogger("scramble.core.settings")

PLAYER_COLORS: tuple[str, ...] = (
    "#ffd700",  # Gold
    "#4caf50",  # Green
    "#2196f3",  # Blue
    "#f44336",  # Red
    "#ba68c8",  # Purple
    "#ff9800",  # Orange
)

DEFAULT_PLAYER_NAMES = ("Player 1", "Player 2")


@dataclass
class GameSettings:
    """Per-match options chosen on the start screen."""

    mode: GameMode = GameMode.STANDARD
    hide_player_tiles: bool = False
    randomize_player1: bool = False
    show_player_color_on_tiles: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "gameMode": self.mode.value,
            "hidePlayerTiles": self.hide_player_tiles,
            "randomizePlayer1": self.randomize_player1,
            "showPlayerColorOnTiles": self.show_player_color_on_tiles,
        }


@dataclass
class PlayerSettings:
    """Display name and color of one seat."""

    name: str
    color: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "color": self.color}


@dataclass
class PlayersSettings:
    player1: PlayerSettings = field(
        default_factory=lambda: PlayerSettings(DEFAULT_PLAYER_NAMES[0], PLAYER_COLORS[0])
    )
    player2: PlayerSettings = field(
        default_factory=lambda: PlayerSettings(DEFAULT_PLAYER_NAMES[1], PLAYER_COLORS[1])
    )

    def to_dict(self) -> dict[str, Any]:
        return {"player1": self.player1.to_dict(), "player2": self.player2.to_dict()}

    def swapped(self) -> PlayersSettings:
        return PlayersSettings(player1=self.player2, player2=self.player1)


def _as_bool(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def upgrade_game_settings(raw: Any, default_mode: GameMode = GameMode.STANDARD) -> GameSettings:
    """Build `GameSettings` from any stored shape; never raises.

    Older saves only knew a boolean `expertMode`; that maps to EXPERT or
    the default mode. An explicit `gameMode` wins over the legacy flag.
    Unknown keys are ignored, missing ones take defaults.
    """
    if not isinstance(raw, dict):
        return GameSettings(mode=default_mode)

    mode = default_mode
    legacy_expert = raw.get("expertMode")
    if legacy_expert is True:
        mode = GameMode.EXPERT
    stored_mode = raw.get("gameMode", raw.get("mode"))
    if isinstance(stored_mode, str):
        try:
            mode = GameMode.from_string(stored_mode)
        except ValueError:
            log.warning("settings_unknown_mode value=%r -> %s", stored_mode, mode.value)

    return GameSettings(
        mode=mode,
        hide_player_tiles=_as_bool(raw.get("hidePlayerTiles"), False),
        randomize_player1=_as_bool(raw.get("randomizePlayer1"), False),
        show_player_color_on_tiles=_as_bool(raw.get("showPlayerColorOnTiles"), False),
    )


def _upgrade_one_player(raw: Any, index: int) -> PlayerSettings:
    default_name = DEFAULT_PLAYER_NAMES[index]
    default_color = PLAYER_COLORS[index]
    # legacy shape: just the name as a string
    if isinstance(raw, str):
        return PlayerSettings(raw.strip() or default_name, default_color)
    if isinstance(raw, dict):
        name = raw.get("name")
        color = raw.get("color")
        return PlayerSettings(
            name.strip() if isinstance(name, str) and name.strip() else default_name,
            color if isinstance(color, str) and color else default_color,
        )
    return PlayerSettings(default_name, default_color)


def upgrade_player_settings(raw: Any) -> PlayersSettings:
    """Build `PlayersSettings` from the stored record (legacy: names only)."""
    if not isinstance(raw, dict):
        return PlayersSettings()
    return PlayersSettings(
        player1=_upgrade_one_player(raw.get("player1"), 0),
        player2=_upgrade_one_player(raw.get("player2"), 1),
    )


def color_for_player(players: PlayersSettings, name: str) -> str:
    """Color of the seat with `name`, first palette color if nobody matches."""
    if name == players.player1.name:
        return players.player1.color
    if name == players.player2.name:
        return players.player2.color
    return PLAYER_COLORS[0]
