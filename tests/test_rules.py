from __future__ import annotations

import pytest

from conftest import lay, make_tile
from scramble.core.board import Board
from scramble.core.rules import (
    ERR_CENTER,
    ERR_EMPTY,
    ERR_GAPS,
    ERR_NOT_CONNECTED,
    ERR_NOT_IN_LINE,
    ERR_NO_WORD,
    NoWordError,
    check_placement,
    extract_words,
    placements_in_line,
)
from scramble.core.types import Direction


def _committed_cat() -> Board:
    board = Board()
    lay(board, "CAT", (7, 7), newly_placed=False)
    return board


def test_line_detection() -> None:
    assert placements_in_line([(7, 7), (7, 9)]) == Direction.ACROSS
    assert placements_in_line([(3, 2), (5, 2)]) == Direction.DOWN
    assert placements_in_line([(4, 4)]) == Direction.ACROSS
    assert placements_in_line([(7, 7), (8, 8)]) is None


def test_nothing_placed() -> None:
    check = check_placement(Board(), [], True)
    assert not check.valid
    assert check.first_error == ERR_EMPTY


def test_diagonal_rejected() -> None:
    board = Board()
    board.set_tile(7, 7, make_tile("A", "a"))
    board.set_tile(8, 8, make_tile("T", "t"))
    check = check_placement(board, [(7, 7), (8, 8)], True)
    assert not check.valid
    assert check.first_error == ERR_NOT_IN_LINE


def test_first_move_must_cover_center() -> None:
    board = Board()
    positions = lay(board, "CAT", (3, 3))
    check = check_placement(board, positions, True)
    assert check.errors == [ERR_CENTER]


def test_gap_rejected() -> None:
    board = Board()
    board.set_tile(7, 7, make_tile("A", "a"))
    board.set_tile(7, 9, make_tile("T", "t"))
    check = check_placement(board, [(7, 7), (7, 9)], True)
    assert check.first_error == ERR_GAPS


def test_existing_tile_fills_gap() -> None:
    board = _committed_cat()
    board.set_tile(7, 6, make_tile("S", "s1"))
    board.set_tile(7, 10, make_tile("S", "s2"))
    check = check_placement(board, [(7, 6), (7, 10)], False)
    assert check.valid
    assert check.direction == Direction.ACROSS


def test_later_move_must_connect() -> None:
    board = _committed_cat()
    positions = lay(board, "AT", (1, 1), prefix="n")
    check = check_placement(board, positions, False)
    assert check.errors == [ERR_NOT_CONNECTED]


def test_several_errors_in_order() -> None:
    board = Board()
    board.set_tile(1, 1, make_tile("A", "a"))
    board.set_tile(2, 2, make_tile("T", "t"))
    check = check_placement(board, [(1, 1), (2, 2)], True)
    assert check.errors == [ERR_NOT_IN_LINE, ERR_CENTER]


def test_single_tile_first_move_forms_no_word() -> None:
    board = Board()
    board.set_tile(7, 7, make_tile("A", "a"))
    check = check_placement(board, [(7, 7)], True)
    assert check.valid
    with pytest.raises(NoWordError, match=ERR_NO_WORD):
        extract_words(board, [(7, 7)], check.direction)
