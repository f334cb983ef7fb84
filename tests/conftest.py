"""Pytest configuration and shared fixtures.

- Keeps the environment free of user `SCRAMBLE_*` overrides
- Builders for tiles, boards and a ready-to-play controller
"""

from __future__ import annotations

import random
from typing import Iterable

import pytest

from scramble.core.board import Board
from scramble.core.dictionary import WordDictionary
from scramble.core.game import TurnController
from scramble.core.modes import GameMode
from scramble.core.settings import GameSettings
from scramble.core.storage import GameRepository, MemoryStore
from scramble.core.types import Position, Tile

LETTER_POINTS = {
    "A": 1, "B": 3, "C": 3, "D": 2, "E": 1, "F": 4, "G": 2, "H": 4, "I": 1,
    "J": 8, "K": 5, "L": 1, "M": 3, "N": 1, "O": 1, "P": 3, "Q": 10, "R": 1,
    "S": 1, "T": 1, "U": 1, "V": 4, "W": 4, "X": 8, "Y": 4, "Z": 10,
}

WORDS = ["CAT", "CATS", "AT", "TA", "AS", "ACT", "TAT", "SAT", "CAB", "TAB", "BAT"]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "SCRAMBLE_DATA_DIR",
        "SCRAMBLE_PERSIST",
        "SCRAMBLE_DICTIONARY_PATH",
        "SCRAMBLE_SEED",
        "SCRAMBLE_GAME_MODE",
        "SCRAMBLE_LOG_PATH",
    ):
        monkeypatch.delenv(key, raising=False)


def make_tile(letter: str, tile_id: str | None = None, points: int | None = None) -> Tile:
    """Tile for tests; `?` makes an unassigned blank."""
    if letter == "?":
        return Tile(id=tile_id or "blank", letter="", points=0, is_blank=True)
    pts = LETTER_POINTS[letter] if points is None else points
    return Tile(id=tile_id or f"t-{letter}", letter=letter, points=pts)


def rack_of(letters: str, prefix: str = "r") -> list[Tile]:
    return [make_tile(ch, f"{prefix}{i}") for i, ch in enumerate(letters)]


def lay(
    board: Board,
    word: str,
    start: Position,
    *,
    across: bool = True,
    newly_placed: bool = True,
    prefix: str = "b",
) -> list[Position]:
    """Write `word` onto the board and return the covered positions."""
    r, c = start
    positions: list[Position] = []
    for i, ch in enumerate(word):
        pos = (r, c + i) if across else (r + i, c)
        board.set_tile(*pos, make_tile(ch, f"{prefix}{i}"), newly_placed=newly_placed)
        positions.append(pos)
    return positions


def rig_racks(controller: TurnController, first: str, second: str) -> None:
    """Replace both racks with known letters; the replaced tiles go to the bag."""
    state = controller.state
    assert state is not None
    for player, letters, prefix in (
        (state.players[0], first, "p0-"),
        (state.players[1], second, "p1-"),
    ):
        state.tile_bag.extend(player.rack)
        player.rack = rack_of(letters, prefix)
        for _ in letters:
            state.tile_bag.pop()


def place_word(
    controller: TurnController,
    word: str,
    start: Position,
    *,
    across: bool = True,
    blanks: dict[int, str] | None = None,
) -> None:
    """Place `word` from the current rack, one tile per letter (`?` = blank)."""
    state = controller.state
    assert state is not None
    rack = list(state.current_player.rack)
    r, c = start
    for i, ch in enumerate(word):
        pos = (r, c + i) if across else (r + i, c)
        if blanks and i in blanks:
            tile = next(t for t in rack if t.is_blank)
            letter = blanks[i]
        else:
            tile = next(t for t in rack if t.letter == ch and not t.is_blank)
            letter = None
        rack.remove(tile)
        result = controller.place_tile(tile.id, *pos, blank_letter=letter)
        assert result.ok, result.message


def new_controller(
    mode: GameMode = GameMode.STANDARD,
    *,
    words: Iterable[str] = WORDS,
    repository: GameRepository | None = None,
    seed: int = 7,
) -> TurnController:
    controller = TurnController(
        settings=GameSettings(mode=mode),
        dictionary=WordDictionary(words),
        repository=repository or GameRepository(MemoryStore()),
        rng=random.Random(seed),
    )
    controller.start_new_game("Alice", "Bob")
    return controller
