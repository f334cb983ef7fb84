from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Iterator

from .types import BonusType, Direction, Position, Tile, WordFound

BOARD_SIZE = 15
CENTER: Position = (7, 7)

_TRIPLE_WORD: tuple[Position, ...] = (
    (0, 0), (0, 7), (0, 14),
    (7, 0), (7, 14),
    (14, 0), (14, 7), (14, 14),
)

_DOUBLE_WORD: tuple[Position, ...] = (
    (1, 1), (2, 2), (3, 3), (4, 4),
    (1, 13), (2, 12), (3, 11), (4, 10),
    (13, 1), (12, 2), (11, 3), (10, 4),
    (13, 13), (12, 12), (11, 11), (10, 10),
)

_TRIPLE_LETTER: tuple[Position, ...] = (
    (1, 5), (1, 9),
    (5, 1), (5, 5), (5, 9), (5, 13),
    (9, 1), (9, 5), (9, 9), (9, 13),
    (13, 5), (13, 9),
)

_DOUBLE_LETTER: tuple[Position, ...] = (
    (0, 3), (0, 11),
    (2, 6), (2, 8),
    (3, 0), (3, 7), (3, 14),
    (6, 2), (6, 6), (6, 8), (6, 12),
    (7, 3), (7, 11),
    (8, 2), (8, 6), (8, 8), (8, 12),
    (11, 0), (11, 7), (11, 14),
    (12, 6), (12, 8),
    (14, 3), (14, 11),
)


def _build_bonus_grid() -> tuple[tuple[BonusType, ...], ...]:
    grid = [[BonusType.NONE] * BOARD_SIZE for _ in range(BOARD_SIZE)]
    for table, bonus in (
        (_DOUBLE_LETTER, BonusType.DOUBLE_LETTER),
        (_TRIPLE_LETTER, BonusType.TRIPLE_LETTER),
        (_DOUBLE_WORD, BonusType.DOUBLE_WORD),
        (_TRIPLE_WORD, BonusType.TRIPLE_WORD),
    ):
        for r, c in table:
            grid[r][c] = bonus
    grid[CENTER[0]][CENTER[1]] = BonusType.CENTER
    return tuple(tuple(row) for row in grid)


BONUS_GRID = _build_bonus_grid()


def bonus_at(row: int, col: int) -> BonusType:
    return BONUS_GRID[row][col]


@dataclass(frozen=True)
class Cell:
    """Board square. Immutable; the board swaps cells instead of editing them."""
    row: int
    col: int
    bonus: BonusType = BonusType.NONE
    tile: Tile | None = None
    newly_placed: bool = False
    placed_by: int | None = None  # cosmetic only, stamped when the move is committed


class Board:
    """15x15 arena of cells addressed by (row, col).

    `snapshot()` copies only the index of cells; since cells are frozen, the
    copy and the original never observe each other's writes.
    """

    def __init__(self, cells: list[Cell] | None = None) -> None:
        if cells is None:
            cells = [
                Cell(row=r, col=c, bonus=BONUS_GRID[r][c])
                for r in range(BOARD_SIZE)
                for c in range(BOARD_SIZE)
            ]
        if len(cells) != BOARD_SIZE * BOARD_SIZE:
            raise ValueError("Board needs exactly 225 cells")
        self._cells = cells

    @staticmethod
    def inside(row: int, col: int) -> bool:
        return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE

    def cell(self, row: int, col: int) -> Cell:
        if not self.inside(row, col):
            raise IndexError(f"Cell ({row}, {col}) is off the board")
        return self._cells[row * BOARD_SIZE + col]

    def tile_at(self, row: int, col: int) -> Tile | None:
        return self.cell(row, col).tile

    def is_occupied(self, row: int, col: int) -> bool:
        return self.inside(row, col) and self.cell(row, col).tile is not None

    def _swap(self, cell: Cell) -> None:
        self._cells[cell.row * BOARD_SIZE + cell.col] = cell

    def set_tile(
        self,
        row: int,
        col: int,
        tile: Tile,
        *,
        newly_placed: bool = True,
        placed_by: int | None = None,
    ) -> None:
        """Puts a tile on an empty square (no rule checks)."""
        current = self.cell(row, col)
        if current.tile is not None:
            raise ValueError(f"Cell ({row}, {col}) is already occupied")
        self._swap(replace(current, tile=tile, newly_placed=newly_placed, placed_by=placed_by))

    def clear_tile(self, row: int, col: int) -> Tile | None:
        """Removes the tile from a square and returns it."""
        current = self.cell(row, col)
        self._swap(replace(current, tile=None, newly_placed=False, placed_by=None))
        return current.tile

    def commit_newly_placed(self, player_index: int) -> list[Position]:
        """Confirms this turn's tiles: clears the newly-placed flag, stamps the owner."""
        committed: list[Position] = []
        for cell in self._cells:
            if cell.newly_placed:
                self._swap(replace(cell, newly_placed=False, placed_by=player_index))
                committed.append((cell.row, cell.col))
        return committed

    def __iter__(self) -> Iterator[Cell]:
        return iter(self._cells)

    def rows(self) -> list[list[Cell]]:
        return [
            self._cells[r * BOARD_SIZE:(r + 1) * BOARD_SIZE] for r in range(BOARD_SIZE)
        ]

    def count_tiles(self) -> int:
        return sum(1 for cell in self._cells if cell.tile is not None)

    def is_empty(self) -> bool:
        return self.count_tiles() == 0

    def snapshot(self) -> Board:
        return Board(list(self._cells))

    def extend_word(self, row: int, col: int, direction: Direction) -> list[Position]:
        """Coordinates of the contiguous run through (row, col) along `direction`."""
        dr, dc = direction.delta
        r, c = row, col
        while self.is_occupied(r - dr, c - dc):
            r -= dr
            c -= dc
        coords: list[Position] = []
        while self.is_occupied(r, c):
            coords.append((r, c))
            r += dr
            c += dc
        return coords

    def word_from(self, coords: Iterable[Position]) -> str:
        letters: list[str] = []
        for r, c in coords:
            tile = self.tile_at(r, c)
            letters.append(tile.letter if tile else "")
        return "".join(letters)

    def build_words_for_move(
        self,
        positions: list[Position],
        direction: Direction,
    ) -> list[WordFound]:
        """Main word plus every new cross word for a tentatively placed set.

        Assumes the tiles are already written to the board. Words shorter
        than 2 are skipped; duplicates collapse on (start cell, word).
        """
        if not positions:
            return []
        words: dict[tuple[Position, str], WordFound] = {}

        r0, c0 = positions[0]
        main_coords = self.extend_word(r0, c0, direction)
        if len(main_coords) >= 2:
            w = self.word_from(main_coords)
            words[(main_coords[0], w)] = WordFound(w, main_coords)

        for r, c in positions:
            coords = self.extend_word(r, c, direction.cross)
            if len(coords) >= 2:
                w = self.word_from(coords)
                words.setdefault((coords[0], w), WordFound(w, coords))

        return list(words.values())
