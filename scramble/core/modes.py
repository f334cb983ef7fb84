"""Game mode enumeration."""

from __future__ import annotations

from enum import Enum


class GameMode(Enum):
    """How submitted words are judged.

    - STANDARD: invalid words block the submission
    - EXPERT: invalid words cost the turn
    - FREE_PLAY: no dictionary, tiles score face value only
    - TOURNAMENT: words accepted unchecked, opponent may challenge
    """

    STANDARD = "standard"
    EXPERT = "expert"
    FREE_PLAY = "free-play"
    TOURNAMENT = "tournament"

    @property
    def display_name(self) -> str:
        names = {
            GameMode.STANDARD: "Standard",
            GameMode.EXPERT: "Expert",
            GameMode.FREE_PLAY: "Free Play",
            GameMode.TOURNAMENT: "Tournament",
        }
        return names[self]

    @property
    def description(self) -> str:
        descriptions = {
            GameMode.STANDARD: "Invalid words are rejected; fix the move and try again.",
            GameMode.EXPERT: "Playing an invalid word loses your turn.",
            GameMode.FREE_PLAY: "Any word goes. Tiles score face value, no bonus squares.",
            GameMode.TOURNAMENT: (
                "Words are not checked on submit. Your opponent may challenge "
                "the move before you draw new tiles."
            ),
        }
        return descriptions[self]

    @property
    def checks_dictionary_on_submit(self) -> bool:
        return self in (GameMode.STANDARD, GameMode.EXPERT)

    @classmethod
    def from_string(cls, mode: str) -> GameMode:
        """Convert a string (case-insensitive, `_` or `-`) to a GameMode.

        Raises:
            ValueError: If mode string is invalid
        """
        try:
            return cls(mode.strip().lower().replace("_", "-"))
        except ValueError:
            valid_modes = ", ".join([m.value for m in cls])
            raise ValueError(
                f"Invalid game mode: {mode}. Valid modes: {valid_modes}"
            )
