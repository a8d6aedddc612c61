from __future__ import annotations

from typing import Dict

from .board import Board
from .movegen import all_legal_moves


def perft(board: Board, depth: int) -> int:
    """Compute perft node count for ``board`` at ``depth``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Children are visited with make/unmake, so ``board`` is unchanged afterwards.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    nodes = 0
    for m in all_legal_moves(board):
        board.make_move(m)
        try:
            nodes += perft(board, depth - 1)
        finally:
            board.unmake_move()
    return nodes


def divide(board: Board, depth: int) -> Dict[str, int]:
    """Perft split by root move, keyed by long algebraic move."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    out: Dict[str, int] = {}
    for m in all_legal_moves(board):
        board.make_move(m)
        try:
            out[m.to_uci()] = perft(board, depth - 1)
        finally:
            board.unmake_move()
    return out
