from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .board import CENTER, Board
from .types import Direction, Position, WordFound

ERR_EMPTY = "No tiles placed"
ERR_NOT_IN_LINE = "Tiles must be placed in a single row or column"
ERR_GAPS = "Tiles must be placed without gaps"
ERR_CENTER = "First word must go through the center square"
ERR_NOT_CONNECTED = "Word must connect to existing tiles"
ERR_NO_WORD = "Must form at least one word"


class PlacementError(ValueError):
    """Structural rule violation of a placement."""


class NoWordError(PlacementError):
    """Structurally valid placement that forms no word of length >= 2."""

    def __init__(self) -> None:
        super().__init__(ERR_NO_WORD)


@dataclass
class PlacementCheck:
    """Outcome of the structural checks.

    `errors` lists every violated rule in evaluation order; only the first
    one is shown to the player.
    """
    valid: bool
    errors: list[str] = field(default_factory=list)
    direction: Direction | None = None

    @property
    def first_error(self) -> str | None:
        return self.errors[0] if self.errors else None


def placements_in_line(positions: Sequence[Position]) -> Direction | None:
    """ACROSS/DOWN if all positions share a row/column (a single tile is ACROSS)."""
    rows = {r for r, _ in positions}
    cols = {c for _, c in positions}
    if len(rows) == 1:
        return Direction.ACROSS
    if len(cols) == 1:
        return Direction.DOWN
    return None


def no_gaps_in_line(board: Board, positions: Sequence[Position], direction: Direction) -> bool:
    """Every square between the outermost new tiles is occupied.

    Existing tiles fill gaps too. The new tiles must already be on the board.
    """
    if direction == Direction.ACROSS:
        r = positions[0][0]
        cols = [c for _, c in positions]
        return all(board.is_occupied(r, c) for c in range(min(cols), max(cols) + 1))
    c = positions[0][1]
    rows = [r for r, _ in positions]
    return all(board.is_occupied(r, c) for r in range(min(rows), max(rows) + 1))


def covers_center(positions: Sequence[Position]) -> bool:
    """Whether the placement passes through the center square."""
    return any(pos == CENTER for pos in positions)


def connected_to_existing(board: Board, positions: Sequence[Position]) -> bool:
    """At least one new tile touches (orthogonally) a tile from an earlier turn."""
    placed = set(positions)
    for r, c in positions:
        for dr, dc in ((-1, 0), (1, 0), (0, -1), (0, 1)):
            rr, cc = r + dr, c + dc
            if (rr, cc) not in placed and board.is_occupied(rr, cc):
                return True
    return False


def check_placement(
    board: Board,
    positions: Sequence[Position],
    is_first_move: bool,
) -> PlacementCheck:
    """Run the structural rules against tiles already written to the board."""
    if not positions:
        return PlacementCheck(False, [ERR_EMPTY])

    errors: list[str] = []
    direction = placements_in_line(positions)
    if direction is None:
        errors.append(ERR_NOT_IN_LINE)
    elif not no_gaps_in_line(board, positions, direction):
        errors.append(ERR_GAPS)

    if is_first_move:
        if not covers_center(positions):
            errors.append(ERR_CENTER)
    elif not connected_to_existing(board, positions):
        errors.append(ERR_NOT_CONNECTED)

    return PlacementCheck(not errors, errors, direction)


def extract_words(
    board: Board,
    positions: Sequence[Position],
    direction: Direction,
) -> list[WordFound]:
    """Main and cross words for this move; raises `NoWordError` if none."""
    words = board.build_words_for_move(list(positions), direction)
    if not words:
        raise NoWordError()
    return words
