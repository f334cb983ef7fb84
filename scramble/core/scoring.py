from __future__ import annotations

from typing import Sequence

from .board import Board
from .tiles import RACK_SIZE
from .types import BonusType, Position, ScoreBreakdown, WordFound

ALL_TILES_BONUS = 50

_LETTER_MULTIPLIER = {
    BonusType.DOUBLE_LETTER: 2,
    BonusType.TRIPLE_LETTER: 3,
}
_WORD_MULTIPLIER = {
    BonusType.DOUBLE_WORD: 2,
    BonusType.CENTER: 2,
    BonusType.TRIPLE_WORD: 3,
}


def score_words(
    board: Board,
    positions: Sequence[Position],
    words: Sequence[WordFound],
) -> tuple[int, list[ScoreBreakdown]]:
    """Total score of the words plus a per-word breakdown.

    Bonus squares count only for cells placed in this move (in `positions`
    and still flagged as newly placed); older tiles give face value.
    """
    new_cells = {
        pos for pos in positions if board.cell(*pos).newly_placed
    }
    total_score = 0
    breakdowns: list[ScoreBreakdown] = []

    for wf in words:
        word_multiplier = 1
        word_points = 0
        letter_bonus = 0
        for r, c in wf.letters:
            cell = board.cell(r, c)
            base = cell.tile.score if cell.tile else 0
            if (r, c) in new_cells:
                letter_bonus += base * (_LETTER_MULTIPLIER.get(cell.bonus, 1) - 1)
                word_multiplier *= _WORD_MULTIPLIER.get(cell.bonus, 1)
            word_points += base
        total = (word_points + letter_bonus) * word_multiplier
        total_score += total
        breakdowns.append(
            ScoreBreakdown(
                word=wf.word,
                base_points=word_points,
                letter_bonus_points=letter_bonus,
                word_multiplier=word_multiplier,
                total=total,
            )
        )
    return total_score, breakdowns


def score_move(
    board: Board,
    positions: Sequence[Position],
    words: Sequence[WordFound],
) -> tuple[int, list[ScoreBreakdown]]:
    """`score_words` plus the all-tiles bonus for a full rack played."""
    total, breakdowns = score_words(board, positions, words)
    if len(positions) == RACK_SIZE:
        total += ALL_TILES_BONUS
    return total, breakdowns


def face_value_score(board: Board, words: Sequence[WordFound]) -> int:
    """Free-play score: plain tile values of every word, no bonus squares."""
    total = 0
    for wf in words:
        for r, c in wf.letters:
            tile = board.tile_at(r, c)
            total += tile.score if tile else 0
    return total
