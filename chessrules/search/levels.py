"""Difficulty tiers for the computer player.

Level 1 plays a random legal move, level 2 prefers a random capture, level 3
greedily takes the most valuable capture or heads for the centre, and level 4
and above run the minimax search at ``min(level, MAX_DEPTH)`` plies.
"""

from __future__ import annotations

import logging
import random
from typing import Hashable, List, Mapping, Optional

from chessrules.engine.board import Board
from chessrules.engine.move import Move
from chessrules.engine.movegen import all_legal_moves

from .service import MAX_DEPTH, SearchService, captured_value


logger = logging.getLogger(__name__)

MIN_LEVEL = 1
SEARCH_LEVEL = 4


def search_depth_for_level(level: int) -> int:
    return min(level, MAX_DEPTH)


def random_move(moves: List[Move], rng: random.Random) -> Optional[Move]:
    return rng.choice(moves) if moves else None


def capture_preferring_move(moves: List[Move], rng: random.Random) -> Optional[Move]:
    captures = [m for m in moves if m.capture]
    return random_move(captures or moves, rng)


def greedy_move(board: Board, moves: List[Move]) -> Optional[Move]:
    captures = [m for m in moves if m.capture]
    if captures:
        return max(captures, key=lambda m: captured_value(board, m))
    if not moves:
        return None

    def center_distance(m: Move) -> float:
        r, c = m.to_sq
        return abs(r - 3.5) + abs(c - 3.5)

    return min(moves, key=center_distance)


def choose_move(
    board: Board,
    level: int,
    *,
    color: Optional[str] = None,
    rng: Optional[random.Random] = None,
    repetition: Optional[Mapping[Hashable, int]] = None,
) -> Optional[Move]:
    """Pick a move for ``color`` (default: side to move) at a difficulty level.

    ``repetition`` is handed to the search so repeated positions score as
    draws; the lower tiers ignore it.

    Raises:
        ValueError: If ``level`` is below 1.
    """
    if level < MIN_LEVEL:
        raise ValueError(f"level must be >= {MIN_LEVEL}")
    if level >= SEARCH_LEVEL:
        depth = search_depth_for_level(level)
        logger.debug("level %d: minimax at depth %d", level, depth)
        result = SearchService().search(board, depth=depth, color=color, repetition=repetition)
        return result.best_move

    rng = rng or random.Random()
    moves = all_legal_moves(board, color)
    if level == 1:
        return random_move(moves, rng)
    if level == 2:
        return capture_preferring_move(moves, rng)
    return greedy_move(board, moves)
