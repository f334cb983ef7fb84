from __future__ import annotations

import pytest
from pydantic import ValidationError

from conftest import lay, make_tile, rack_of
from scramble.core.board import Board
from scramble.core.modes import GameMode
from scramble.core.state import (
    GameState,
    LastMove,
    Player,
    build_save_state_dict,
    parse_save_state_dict,
)
from scramble.core.types import PlacedTile


def _state() -> GameState:
    board = Board()
    lay(board, "CAT", (7, 7))
    board.commit_newly_placed(0)
    blank = make_tile("?", "q").with_letter("S")
    board.set_tile(7, 10, blank)
    return GameState(
        board=board,
        players=[
            Player(1, "Alice", 10, rack_of("ABC", "a")),
            Player(2, "Bob", 0, rack_of("XYZ", "b")),
        ],
        current_player_index=1,
        tile_bag=rack_of("EEE", "bag"),
        turn_number=2,
        placed_this_turn=[PlacedTile(7, 10, blank)],
        is_first_move=False,
        last_move=LastMove(0, ["CAT"], [(7, 7), (7, 8), (7, 9)], 10, 1, True),
        challenge_available=True,
        mode=GameMode.TOURNAMENT,
    )


def test_round_trip_preserves_state() -> None:
    state = _state()
    restored = parse_save_state_dict(build_save_state_dict(state))

    assert restored.mode is GameMode.TOURNAMENT
    assert restored.current_player_index == 1
    assert restored.turn_number == 2
    assert [p.name for p in restored.players] == ["Alice", "Bob"]
    assert restored.players[0].rack == state.players[0].rack
    assert restored.tile_bag == state.tile_bag
    assert restored.board.tile_at(7, 10) == state.board.tile_at(7, 10)
    assert restored.board.cell(7, 10).newly_placed
    assert restored.board.cell(7, 8).placed_by == 0
    assert restored.placed_this_turn == state.placed_this_turn
    assert restored.last_move == state.last_move
    assert restored.challenge_available


def test_copy_does_not_share_containers() -> None:
    state = _state()
    clone = state.copy()
    clone.players[0].rack.pop()
    clone.tile_bag.clear()
    clone.board.clear_tile(7, 7)
    clone.last_move.words.append("X")
    assert len(state.players[0].rack) == 3
    assert len(state.tile_bag) == 3
    assert state.board.tile_at(7, 7) is not None
    assert state.last_move.words == ["CAT"]


def test_v1_record_is_upgraded() -> None:
    data = build_save_state_dict(_state())
    data["schema_version"] = "1"
    data.pop("mode")
    data.pop("last_move")
    data.pop("challenge_available")
    data["expert_mode"] = True
    restored = parse_save_state_dict(data)
    assert restored.mode is GameMode.EXPERT
    assert restored.last_move is None


def test_unknown_version_rejected() -> None:
    data = build_save_state_dict(_state())
    data["schema_version"] = "9"
    with pytest.raises(ValueError):
        parse_save_state_dict(data)


def test_winner_requires_game_over() -> None:
    data = build_save_state_dict(_state())
    data["winner"] = 0
    with pytest.raises(ValidationError):
        parse_save_state_dict(data)


def test_placed_tile_must_be_on_board() -> None:
    data = build_save_state_dict(_state())
    data["placed_this_turn"][0]["col"] = 11
    with pytest.raises(ValidationError):
        parse_save_state_dict(data)


def test_off_board_cell_rejected() -> None:
    data = build_save_state_dict(_state())
    data["board"][0]["row"] = 15
    with pytest.raises(ValidationError):
        parse_save_state_dict(data)


def test_total_tiles_counts_everything() -> None:
    assert _state().total_tiles() == 3 + 3 + 3 + 4
