"""Move generation.

Pseudo-legal moves follow piece movement and board occupancy only. Legal moves
are the pseudo-legal ones that survive a simulate-and-check pass: each
candidate is made on the board, the mover's king is probed with the attack
oracle, and the move is unmade again.
"""

from __future__ import annotations

from typing import List, Optional

from .attacks import DIAGONALS, KING_OFFSETS, KNIGHT_OFFSETS, ORTHOGONALS, in_check, is_square_attacked
from .board import (
    Board,
    BISHOP,
    CASTLING_HOMES,
    KING,
    KNIGHT,
    PAWN,
    QUEEN,
    ROOK,
    WHITE,
    opponent,
    pawn_direction,
    promotion_row,
)
from .move import PROMOTION_PIECES, Move, Special, Square


SLIDER_DIRECTIONS = {
    BISHOP: DIAGONALS,
    ROOK: ORTHOGONALS,
    QUEEN: DIAGONALS + ORTHOGONALS,
}


def pseudo_legal_moves(board: Board, sq: Square) -> List[Move]:
    """Return pseudo-legal moves for the piece on ``sq`` (empty if none)."""
    piece = board.piece_at(sq)
    if piece is None:
        return []
    if piece.kind == PAWN:
        return _pawn_moves(board, sq, piece.color)
    if piece.kind in (KNIGHT, KING):
        moves = _step_moves(board, sq, piece.color, KNIGHT_OFFSETS if piece.kind == KNIGHT else KING_OFFSETS)
        if piece.kind == KING:
            moves.extend(_castling_moves(board, sq, piece.color))
        return moves
    return _slider_moves(board, sq, piece.color, SLIDER_DIRECTIONS[piece.kind])


def legal_moves(board: Board, sq: Square) -> List[Move]:
    """Return the legal moves for the piece on ``sq``.

    The board is mutated during filtering and restored before returning.
    """
    piece = board.piece_at(sq)
    if piece is None:
        return []
    legal: List[Move] = []
    for mv in pseudo_legal_moves(board, sq):
        board.make_move(mv)
        try:
            if not in_check(board, piece.color):
                legal.append(mv)
        finally:
            board.unmake_move()
    return legal


def all_legal_moves(board: Board, color: Optional[str] = None) -> List[Move]:
    """Return every legal move for ``color`` (default: side to move)."""
    side = board.side_to_move if color is None else color
    moves: List[Move] = []
    for sq, _piece in list(board.pieces(side)):
        moves.extend(legal_moves(board, sq))
    return moves


def has_legal_moves(board: Board, color: Optional[str] = None) -> bool:
    side = board.side_to_move if color is None else color
    for sq, _piece in list(board.pieces(side)):
        if legal_moves(board, sq):
            return True
    return False


def _step_moves(board: Board, sq: Square, color: str, offsets) -> List[Move]:
    r, f = sq
    moves: List[Move] = []
    for dr, df in offsets:
        tr, tf = r + dr, f + df
        if not (0 <= tr < 8 and 0 <= tf < 8):
            continue
        target = board.squares[tr][tf]
        if target is None:
            moves.append(Move(sq, (tr, tf)))
        elif target.color != color:
            moves.append(Move(sq, (tr, tf), capture=True))
    return moves


def _slider_moves(board: Board, sq: Square, color: str, dirs) -> List[Move]:
    r, f = sq
    moves: List[Move] = []
    for dr, df in dirs:
        tr, tf = r, f
        while True:
            tr += dr
            tf += df
            if not (0 <= tr < 8 and 0 <= tf < 8):
                break
            target = board.squares[tr][tf]
            if target is None:
                moves.append(Move(sq, (tr, tf)))
                continue
            if target.color != color:
                moves.append(Move(sq, (tr, tf), capture=True))
            break
    return moves


def _pawn_moves(board: Board, sq: Square, color: str) -> List[Move]:
    r, f = sq
    d = pawn_direction(color)
    start_row = 6 if color == WHITE else 1
    last_row = promotion_row(color)
    moves: List[Move] = []

    def add(to: Square, capture: bool) -> None:
        if to[0] == last_row:
            for promo in PROMOTION_PIECES:
                moves.append(Move(sq, to, capture=capture, special=Special.PROMOTION, promotion=promo))
        else:
            moves.append(Move(sq, to, capture=capture))

    one = r + d
    if not (0 <= one < 8):
        return moves

    if board.squares[one][f] is None:
        add((one, f), False)
        two = r + 2 * d
        if r == start_row and board.squares[two][f] is None:
            moves.append(Move(sq, (two, f), special=Special.DOUBLE_PUSH))

    for tf in (f - 1, f + 1):
        if not (0 <= tf < 8):
            continue
        target = board.squares[one][tf]
        if target is not None and target.color != color:
            add((one, tf), True)
        elif target is None and board.ep_square == (one, tf):
            victim = board.squares[r][tf]
            if victim is not None and victim.kind == PAWN and victim.color != color:
                moves.append(Move(sq, (one, tf), capture=True, special=Special.EN_PASSANT))
    return moves


def _castling_moves(board: Board, sq: Square, color: str) -> List[Move]:
    rights = "KQ" if color == WHITE else "kq"
    enemy = opponent(color)
    moves: List[Move] = []
    for right in rights:
        if right not in board.castling:
            continue
        rook_sq, king_home = CASTLING_HOMES[right]
        if sq != king_home:
            continue
        rook = board.piece_at(rook_sq)
        if rook is None or rook.kind != ROOK or rook.color != color:
            continue
        row = king_home[0]
        kingside = right in "Kk"
        between = (5, 6) if kingside else (1, 2, 3)
        if any(board.squares[row][c] is not None for c in between):
            continue
        # Start, transit and destination must all be safe
        king_path = (4, 5, 6) if kingside else (4, 3, 2)
        if any(is_square_attacked(board, (row, c), enemy) for c in king_path):
            continue
        special = Special.CASTLE_KINGSIDE if kingside else Special.CASTLE_QUEENSIDE
        moves.append(Move(sq, (row, king_path[-1]), special=special))
    return moves
