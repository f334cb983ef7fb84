from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, auto


class Direction(Enum):
    """Axis along which a word runs on the board."""
    ACROSS = auto()
    DOWN = auto()

    @property
    def delta(self) -> tuple[int, int]:
        return (0, 1) if self is Direction.ACROSS else (1, 0)

    @property
    def cross(self) -> Direction:
        return Direction.DOWN if self is Direction.ACROSS else Direction.ACROSS


class BonusType(str, Enum):
    """Bonus classification of a board square."""
    NONE = "none"
    DOUBLE_LETTER = "double-letter"
    TRIPLE_LETTER = "triple-letter"
    DOUBLE_WORD = "double-word"
    TRIPLE_WORD = "triple-word"
    CENTER = "center"


@dataclass(frozen=True)
class TileSpec:
    """One row of the tile distribution table."""
    letter: str
    points: int
    count: int
    is_blank: bool = False


@dataclass(frozen=True)
class Tile:
    """A single physical tile.

    Blanks carry `letter == ""` until assigned; assignment returns a new
    instance with the same `id`.
    """
    id: str
    letter: str
    points: int
    is_blank: bool = False

    @property
    def score(self) -> int:
        return 0 if self.is_blank else self.points

    def with_letter(self, letter: str) -> Tile:
        if not self.is_blank:
            raise ValueError(f"Tile {self.id} is not a blank")
        return replace(self, letter=letter.upper())

    def cleared(self) -> Tile:
        """Blanks are fungible: drop the assigned letter."""
        if not self.is_blank or not self.letter:
            return self
        return replace(self, letter="")


Position = tuple[int, int]


@dataclass(frozen=True)
class PlacedTile:
    """Tile put on the board by the current player in the current turn."""
    row: int
    col: int
    tile: Tile

    @property
    def pos(self) -> Position:
        return (self.row, self.col)


@dataclass
class WordFound:
    """One word formed on the board together with its cells."""
    word: str
    letters: list[Position]

    @property
    def start(self) -> Position:
        return self.letters[0]


@dataclass
class ScoreBreakdown:
    """Detailed score of one word."""
    word: str
    base_points: int
    letter_bonus_points: int
    word_multiplier: int
    total: int


class MessageKind(str, Enum):
    ERROR = "error"
    INFO = "info"
    SUCCESS = "success"


@dataclass(frozen=True)
class GameMessage:
    """User-facing message attached to a controller action."""
    text: str
    kind: MessageKind = MessageKind.INFO
