from __future__ import annotations

from enum import Enum
from typing import Hashable, Mapping, Optional

from .attacks import in_check
from .board import Board, BISHOP, KING, KNIGHT
from .movegen import has_legal_moves


class GameStatus(Enum):
    ONGOING = "ongoing"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW_REPETITION = "draw_repetition"
    DRAW_FIFTY_MOVE = "draw_fifty_move"
    DRAW_INSUFFICIENT_MATERIAL = "draw_insufficient_material"


DRAWS = frozenset(
    {
        GameStatus.STALEMATE,
        GameStatus.DRAW_REPETITION,
        GameStatus.DRAW_FIFTY_MOVE,
        GameStatus.DRAW_INSUFFICIENT_MATERIAL,
    }
)

FIFTY_MOVE_PLIES = 100
REPETITION_LIMIT = 3


def is_game_over(status: GameStatus) -> bool:
    return status is GameStatus.CHECKMATE or status in DRAWS


def is_insufficient_material(board: Board) -> bool:
    """Piece-count heuristic for positions where nobody can force mate.

    Recognises bare kings, a single minor piece against a bare king, and
    one bishop each on same-coloured squares. Anything with a pawn, rook or
    queen is considered sufficient.
    """
    minors = []
    for (r, c), piece in board.pieces():
        if piece.kind == KING:
            continue
        if piece.kind not in (KNIGHT, BISHOP):
            return False
        minors.append((piece, (r + c) % 2))
    if len(minors) <= 1:
        return True
    if len(minors) == 2:
        (p1, shade1), (p2, shade2) = minors
        return p1.kind == BISHOP and p2.kind == BISHOP and p1.color != p2.color and shade1 == shade2
    return False


def classify(board: Board, repetitions: Optional[Mapping[Hashable, int]] = None) -> GameStatus:
    """Classify the position for the side to move.

    Args:
        board (Board): Position to classify.
        repetitions (Optional[Mapping]): Occurrence counts keyed by
            :meth:`Board.position_key`, including the current position.

    Returns:
        GameStatus: Checkmate and stalemate win over draw claims; check is only
        reported while legal moves remain.
    """
    checked = in_check(board)
    if not has_legal_moves(board):
        return GameStatus.CHECKMATE if checked else GameStatus.STALEMATE
    if board.halfmove_clock >= FIFTY_MOVE_PLIES:
        return GameStatus.DRAW_FIFTY_MOVE
    if repetitions is not None and repetitions.get(board.position_key(), 0) >= REPETITION_LIMIT:
        return GameStatus.DRAW_REPETITION
    if is_insufficient_material(board):
        return GameStatus.DRAW_INSUFFICIENT_MATERIAL
    return GameStatus.CHECK if checked else GameStatus.ONGOING
