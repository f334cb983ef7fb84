"""Canonical game state and its persisted (JSON) form.

The module has no UI concerns; `GameState` is what the turn controller
owns and what gets written to storage after every transition.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from .board import BOARD_SIZE, Board
from .modes import GameMode
from .types import PlacedTile, Position, Tile

log = logging.getLogger("scramble.core.state")

SCHEMA_VERSION = "2"


@dataclass
class Player:
    """One seat at the table."""

    id: int
    name: str
    score: int = 0
    rack: list[Tile] = field(default_factory=list)

    def copy(self) -> Player:
        return replace(self, rack=list(self.rack))


@dataclass
class LastMove:
    """Most recent accepted move; the tournament challenge works off this."""

    player_index: int
    words: list[str]
    tiles: list[Position]
    score: int
    turn_number: int
    tiles_need_drawing: bool = False


@dataclass
class GameState:
    board: Board
    players: list[Player]
    current_player_index: int = 0
    tile_bag: list[Tile] = field(default_factory=list)
    turn_number: int = 1
    placed_this_turn: list[PlacedTile] = field(default_factory=list)
    is_first_move: bool = True
    game_over: bool = False
    winner: int | None = None
    last_move: LastMove | None = None
    challenge_available: bool = False
    mode: GameMode = GameMode.STANDARD

    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    @property
    def opponent_index(self) -> int:
        return 1 - self.current_player_index

    def copy(self) -> GameState:
        """Snapshot taken before a transition mutates anything.

        Tiles and cells are immutable, so only the containers are copied.
        """
        return replace(
            self,
            board=self.board.snapshot(),
            players=[p.copy() for p in self.players],
            tile_bag=list(self.tile_bag),
            placed_this_turn=list(self.placed_this_turn),
            last_move=replace(
                self.last_move,
                words=list(self.last_move.words),
                tiles=list(self.last_move.tiles),
            ) if self.last_move else None,
        )

    def total_tiles(self) -> int:
        """Tiles in both racks, the bag and on the board."""
        return (
            sum(len(p.rack) for p in self.players)
            + len(self.tile_bag)
            + self.board.count_tiles()
        )

    def to_dict(self) -> dict[str, Any]:
        return build_save_state_dict(self)


# --- Persisted schema ------------------------------------------------------


class TileModel(BaseModel):
    id: str
    letter: str = Field("", max_length=1)
    points: int = Field(..., ge=0)
    is_blank: bool = False

    @field_validator("letter")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode="after")
    def _letter_required(self) -> "TileModel":
        if not self.is_blank and not self.letter:
            raise ValueError("letter_required_for_non_blank")
        return self


class Coord(BaseModel):
    row: int = Field(..., ge=0, le=BOARD_SIZE - 1)
    col: int = Field(..., ge=0, le=BOARD_SIZE - 1)


class CellModel(Coord):
    tile: TileModel
    newly_placed: bool = False
    placed_by: int | None = Field(None, ge=0, le=1)


class PlacedTileModel(Coord):
    tile: TileModel


class PlayerModel(BaseModel):
    id: int
    name: str
    score: int = 0
    rack: list[TileModel] = Field(default_factory=list)


class LastMoveModel(BaseModel):
    player_index: int = Field(..., ge=0, le=1)
    words: list[str] = Field(default_factory=list)
    tiles: list[Coord] = Field(default_factory=list)
    score: int = 0
    turn_number: int = Field(..., ge=1)
    tiles_need_drawing: bool = False


class SavedGameModel(BaseModel):
    """JSON record of a whole game (schema v2).

    Only occupied cells are stored; bonus squares come from the fixed layout.
    """

    schema_version: Literal["2"] = SCHEMA_VERSION
    mode: GameMode = GameMode.STANDARD
    board: list[CellModel] = Field(default_factory=list)
    players: list[PlayerModel] = Field(..., min_length=2, max_length=2)
    current_player_index: int = Field(0, ge=0, le=1)
    tile_bag: list[TileModel] = Field(default_factory=list)
    turn_number: int = Field(1, ge=1)
    placed_this_turn: list[PlacedTileModel] = Field(default_factory=list)
    is_first_move: bool = True
    game_over: bool = False
    winner: int | None = Field(None, ge=0, le=1)
    last_move: LastMoveModel | None = None
    challenge_available: bool = False

    @model_validator(mode="after")
    def _consistency(self) -> "SavedGameModel":
        if (self.winner is not None) != self.game_over:
            raise ValueError("winner_iff_game_over")
        seen: set[tuple[int, int]] = set()
        newly: dict[tuple[int, int], str] = {}
        for cell in self.board:
            key = (cell.row, cell.col)
            if key in seen:
                raise ValueError("duplicate_cell")
            seen.add(key)
            if cell.newly_placed:
                newly[key] = cell.tile.id
        for placed in self.placed_this_turn:
            if newly.get((placed.row, placed.col)) != placed.tile.id:
                raise ValueError("placed_tile_not_on_board")
        if len(newly) != len(self.placed_this_turn):
            raise ValueError("stray_newly_placed_cell")
        return self


def _tile_dict(tile: Tile) -> dict[str, Any]:
    return {"id": tile.id, "letter": tile.letter, "points": tile.points, "is_blank": tile.is_blank}


def _tile_from(model: TileModel) -> Tile:
    return Tile(id=model.id, letter=model.letter, points=model.points, is_blank=model.is_blank)


def build_save_state_dict(state: GameState) -> dict[str, Any]:
    """JSON-serialisable record of `state` (schema v2)."""
    board: list[dict[str, Any]] = []
    for cell in state.board:
        if cell.tile is None:
            continue
        board.append(
            {
                "row": cell.row,
                "col": cell.col,
                "tile": _tile_dict(cell.tile),
                "newly_placed": cell.newly_placed,
                "placed_by": cell.placed_by,
            }
        )
    last_move = None
    if state.last_move is not None:
        lm = state.last_move
        last_move = {
            "player_index": lm.player_index,
            "words": list(lm.words),
            "tiles": [{"row": r, "col": c} for r, c in lm.tiles],
            "score": lm.score,
            "turn_number": lm.turn_number,
            "tiles_need_drawing": lm.tiles_need_drawing,
        }
    return {
        "schema_version": SCHEMA_VERSION,
        "mode": state.mode.value,
        "board": board,
        "players": [
            {
                "id": p.id,
                "name": p.name,
                "score": p.score,
                "rack": [_tile_dict(t) for t in p.rack],
            }
            for p in state.players
        ],
        "current_player_index": state.current_player_index,
        "tile_bag": [_tile_dict(t) for t in state.tile_bag],
        "turn_number": state.turn_number,
        "placed_this_turn": [
            {"row": p.row, "col": p.col, "tile": _tile_dict(p.tile)}
            for p in state.placed_this_turn
        ],
        "is_first_move": state.is_first_move,
        "game_over": state.game_over,
        "winner": state.winner,
        "last_move": last_move,
        "challenge_available": state.challenge_available,
    }


def upgrade_save_state_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Lift a v1 record (before modes and challenges) to the v2 shape."""
    version = str(data.get("schema_version", "1"))
    if version == SCHEMA_VERSION:
        return data
    if version != "1":
        raise ValueError(f"Unsupported schema_version: {version}")
    upgraded = dict(data)
    upgraded["schema_version"] = SCHEMA_VERSION
    if "mode" not in upgraded:
        upgraded["mode"] = (
            GameMode.EXPERT.value if upgraded.pop("expert_mode", False) is True
            else GameMode.STANDARD.value
        )
    upgraded.setdefault("last_move", None)
    upgraded.setdefault("challenge_available", False)
    log.info("save_state_upgraded from=%s to=%s", version, SCHEMA_VERSION)
    return upgraded


def parse_save_state_dict(data: dict[str, Any]) -> GameState:
    """Validate a stored record and rebuild a `GameState`.

    Raises `ValueError` (pydantic `ValidationError` included) on bad input.
    """
    if not isinstance(data, dict):
        raise ValueError("Saved game must be a JSON object")
    model = SavedGameModel.model_validate(upgrade_save_state_dict(data))

    board = Board()
    for cell in model.board:
        board.set_tile(
            cell.row,
            cell.col,
            _tile_from(cell.tile),
            newly_placed=cell.newly_placed,
            placed_by=cell.placed_by,
        )

    last_move = None
    if model.last_move is not None:
        lm = model.last_move
        last_move = LastMove(
            player_index=lm.player_index,
            words=list(lm.words),
            tiles=[(c.row, c.col) for c in lm.tiles],
            score=lm.score,
            turn_number=lm.turn_number,
            tiles_need_drawing=lm.tiles_need_drawing,
        )

    return GameState(
        board=board,
        players=[
            Player(id=p.id, name=p.name, score=p.score, rack=[_tile_from(t) for t in p.rack])
            for p in model.players
        ],
        current_player_index=model.current_player_index,
        tile_bag=[_tile_from(t) for t in model.tile_bag],
        turn_number=model.turn_number,
        placed_this_turn=[
            PlacedTile(p.row, p.col, _tile_from(p.tile)) for p in model.placed_this_turn
        ],
        is_first_move=model.is_first_move,
        game_over=model.game_over,
        winner=model.winner,
        last_move=last_move,
        challenge_available=model.challenge_available,
        mode=model.mode,
    )
