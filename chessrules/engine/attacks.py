"""Attack and check oracle.

Answers "can a piece of this color reach that square in one move" from piece
geometry alone. No legality filtering happens here; the move generator builds
on top of it.
"""

from __future__ import annotations

from typing import List, Optional

from .board import Board, BISHOP, KING, KNIGHT, PAWN, QUEEN, ROOK, opponent, pawn_direction
from .move import Square


KNIGHT_OFFSETS = ((-1, 2), (1, 2), (-2, 1), (2, 1), (-2, -1), (2, -1), (-1, -2), (1, -2))
KING_OFFSETS = ((-1, -1), (0, -1), (1, -1), (-1, 0), (1, 0), (-1, 1), (0, 1), (1, 1))
DIAGONALS = ((-1, -1), (1, -1), (-1, 1), (1, 1))
ORTHOGONALS = ((-1, 0), (1, 0), (0, -1), (0, 1))


def attackers_of(board: Board, sq: Square, by_color: str, *, first_only: bool = False) -> List[Square]:
    """Return the squares of ``by_color`` pieces attacking ``sq``.

    Args:
        board (Board): Position to inspect.
        sq (Square): Target square.
        by_color (str): Attacking side, ``'w'`` or ``'b'``.
        first_only (bool): Stop after the first attacker is found.

    Returns:
        List[Square]: Attacker squares (pawns, knights, king, then sliders).
    """
    found: List[Square] = []
    r, f = sq

    # Pawns attack diagonally forward, so look one row behind the target
    pr = r - pawn_direction(by_color)
    if 0 <= pr < 8:
        for pf in (f - 1, f + 1):
            if 0 <= pf < 8:
                p = board.squares[pr][pf]
                if p is not None and p.color == by_color and p.kind == PAWN:
                    found.append((pr, pf))
                    if first_only:
                        return found

    for offsets, kind in ((KNIGHT_OFFSETS, KNIGHT), (KING_OFFSETS, KING)):
        for dr, df in offsets:
            tr, tf = r + dr, f + df
            if 0 <= tr < 8 and 0 <= tf < 8:
                p = board.squares[tr][tf]
                if p is not None and p.color == by_color and p.kind == kind:
                    found.append((tr, tf))
                    if first_only:
                        return found

    for dirs, kinds in ((DIAGONALS, (BISHOP, QUEEN)), (ORTHOGONALS, (ROOK, QUEEN))):
        for dr, df in dirs:
            tr, tf = r, f
            while True:
                tr += dr
                tf += df
                if not (0 <= tr < 8 and 0 <= tf < 8):
                    break
                p = board.squares[tr][tf]
                if p is None:
                    continue
                if p.color == by_color and p.kind in kinds:
                    found.append((tr, tf))
                    if first_only:
                        return found
                break

    return found


def is_square_attacked(board: Board, sq: Square, by_color: str) -> bool:
    """Return True if ``sq`` is attacked by any piece of ``by_color``."""
    return bool(attackers_of(board, sq, by_color, first_only=True))


def king_square(board: Board, color: str) -> Optional[Square]:
    for r in range(8):
        for c in range(8):
            p = board.squares[r][c]
            if p is not None and p.kind == KING and p.color == color:
                return r, c
    return None


def in_check(board: Board, color: Optional[str] = None) -> bool:
    """Return True if ``color`` (default: side to move) is in check.

    A side without a king is never in check.
    """
    side = board.side_to_move if color is None else color
    ks = king_square(board, side)
    if ks is None:
        return False
    return is_square_attacked(board, ks, opponent(side))
