"""Evaluation heuristics and related utilities.

Deterministic; the board is left exactly as it was passed in.
"""

from __future__ import annotations

from typing import Dict, Final, List, Optional

from chessrules.engine.attacks import in_check
from chessrules.engine.board import (
    Board,
    BISHOP,
    BLACK,
    KING,
    KNIGHT,
    PAWN,
    QUEEN,
    ROOK,
    WHITE,
)
from chessrules.engine.move import Move
from chessrules.engine.movegen import all_legal_moves


# Material values in centipawns; the king value is a sentinel, never traded
P_VAL: Final = 100
N_VAL: Final = 320
B_VAL: Final = 330
R_VAL: Final = 500
Q_VAL: Final = 900
K_VAL: Final = 20000

PIECE_VALUES: Final[Dict[str, int]] = {
    PAWN: P_VAL,
    KNIGHT: N_VAL,
    BISHOP: B_VAL,
    ROOK: R_VAL,
    QUEEN: Q_VAL,
    KING: K_VAL,
}

MOBILITY_WEIGHT: Final = 10
CHECK_PENALTY: Final = -50


# Piece-square tables from White's point of view, row 0 = rank 8.
# Black reads the same table with the rank mirrored.
# fmt: off
PSQT_P: Final = [
    0,   0,   0,   0,   0,   0,   0,   0,
    50,  50,  50,  50,  50,  50,  50,  50,
    10,  10,  20,  30,  30,  20,  10,  10,
    5,   5,   10,  25,  25,  10,  5,   5,
    0,   0,   0,   20,  20,  0,   0,   0,
    5,   -5,  -10, 0,   0,   -10, -5,  5,
    5,   10,  10,  -20, -20, 10,  10,  5,
    0,   0,   0,   0,   0,   0,   0,   0,
]

PSQT_N: Final = [
    -50, -40, -30, -30, -30, -30, -40, -50,
    -40, -20, 0,   0,   0,   0,   -20, -40,
    -30, 0,   10,  15,  15,  10,  0,   -30,
    -30, 5,   15,  20,  20,  15,  5,   -30,
    -30, 0,   15,  20,  20,  15,  0,   -30,
    -30, 5,   10,  15,  15,  10,  5,   -30,
    -40, -20, 0,   5,   5,   0,   -20, -40,
    -50, -40, -30, -30, -30, -30, -40, -50,
]

PSQT_B: Final = [
    -20, -10, -10, -10, -10, -10, -10, -20,
    -10, 0,   0,   0,   0,   0,   0,   -10,
    -10, 0,   5,   10,  10,  5,   0,   -10,
    -10, 5,   5,   10,  10,  5,   5,   -10,
    -10, 0,   10,  10,  10,  10,  0,   -10,
    -10, 10,  10,  10,  10,  10,  10,  -10,
    -10, 5,   0,   0,   0,   0,   5,   -10,
    -20, -10, -10, -10, -10, -10, -10, -20,
]

PSQT_R: Final = [
    0,   0,   0,   0,   0,   0,   0,   0,
    5,   10,  10,  10,  10,  10,  10,  5,
    -5,  0,   0,   0,   0,   0,   0,   -5,
    -5,  0,   0,   0,   0,   0,   0,   -5,
    -5,  0,   0,   0,   0,   0,   0,   -5,
    -5,  0,   0,   0,   0,   0,   0,   -5,
    -5,  0,   0,   0,   0,   0,   0,   -5,
    0,   0,   0,   5,   5,   0,   0,   0,
]

PSQT_Q: Final = [
    -20, -10, -10, -5,  -5,  -10, -10, -20,
    -10, 0,   0,   0,   0,   0,   0,   -10,
    -10, 0,   5,   5,   5,   5,   0,   -10,
    -5,  0,   5,   5,   5,   5,   0,   -5,
    0,   0,   5,   5,   5,   5,   0,   -5,
    -10, 5,   5,   5,   5,   5,   0,   -10,
    -10, 0,   5,   0,   0,   0,   0,   -10,
    -20, -10, -10, -5,  -5,  -10, -10, -20,
]

PSQT_K: Final = [
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -20, -30, -30, -40, -40, -30, -30, -20,
    -10, -20, -20, -20, -20, -20, -20, -10,
    20,  20,  0,   0,   0,   0,   20,  20,
    20,  30,  10,  0,   0,   10,  30,  20,
]
# fmt: on

PSQT: Final[Dict[str, List[int]]] = {
    PAWN: PSQT_P,
    KNIGHT: PSQT_N,
    BISHOP: PSQT_B,
    ROOK: PSQT_R,
    QUEEN: PSQT_Q,
    KING: PSQT_K,
}


def psqt_index(row: int, col: int, color: str) -> int:
    # Flip vertically (rank mirror) for Black
    return (row if color == WHITE else 7 - row) * 8 + col


def material(board: Board) -> int:
    score = 0
    for _sq, piece in board.pieces():
        value = PIECE_VALUES[piece.kind]
        score += value if piece.color == WHITE else -value
    return score


def positional(board: Board) -> int:
    score = 0
    for (r, c), piece in board.pieces():
        bonus = PSQT[piece.kind][psqt_index(r, c, piece.color)]
        score += bonus if piece.color == WHITE else -bonus
    return score


def mobility(board: Board, side_moves: Optional[List[Move]] = None) -> int:
    """Legal-move count difference (White minus Black), unweighted.

    ``side_moves`` may carry the already generated legal moves of the side to
    move so only the other side is generated here.
    """
    counts = {}
    for color in (WHITE, BLACK):
        if side_moves is not None and color == board.side_to_move:
            counts[color] = len(side_moves)
        else:
            counts[color] = len(all_legal_moves(board, color))
    return counts[WHITE] - counts[BLACK]


def king_safety(board: Board) -> int:
    score = 0
    if in_check(board, WHITE):
        score += CHECK_PENALTY
    if in_check(board, BLACK):
        score -= CHECK_PENALTY
    return score


def evaluate(board: Board, side_moves: Optional[List[Move]] = None) -> int:
    """Return a static evaluation in centipawns.

    Sum of material, piece-square bonuses, weighted mobility and a flat
    penalty for a side in check. Positive means advantage for White; the
    function is side-agnostic. ``side_moves`` is passed through to
    :func:`mobility`.
    """
    return (
        material(board)
        + positional(board)
        + MOBILITY_WEIGHT * mobility(board, side_moves)
        + king_safety(board)
    )
