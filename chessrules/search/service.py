from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Dict, Final, Hashable, List, Mapping, Optional

from chessrules.engine.attacks import in_check
from chessrules.engine.board import Board, PAWN, WHITE
from chessrules.engine.move import Move
from chessrules.engine.movegen import all_legal_moves
from chessrules.engine.terminal import FIFTY_MOVE_PLIES, REPETITION_LIMIT
from chessrules.eval import PIECE_VALUES, evaluate


logger = logging.getLogger(__name__)

INF: Final = 10_000_000
MATE_SCORE: Final = 100_000  # mate scores are MATE_SCORE + remaining depth
MAX_DEPTH: Final = 5


@dataclass
class SearchResult:
    best_move: Optional[Move]
    score: int  # centipawns, positive favours White
    nodes: int
    depth: int
    time_ms: int


def captured_value(board: Board, move: Move) -> int:
    """Material value of the piece ``move`` removes (0 for quiet moves)."""
    if not move.capture:
        return 0
    victim = board.piece_at(move.to_sq)
    # en passant lands on an empty square
    return PIECE_VALUES[victim.kind if victim is not None else PAWN]


def order_moves(board: Board, moves: List[Move]) -> List[Move]:
    """Captures first, most valuable victim then least valuable attacker.

    Quiet moves keep their generation order.
    """

    def key(m: Move) -> tuple:
        if not m.capture:
            return (1, 0, 0)
        attacker = board.piece_at(m.from_sq)
        return (0, -captured_value(board, m), PIECE_VALUES[attacker.kind] if attacker else 0)

    return sorted(moves, key=key)


def mate_score(loser: str, depth_left: int) -> int:
    # More depth left means the mate came sooner, so it scores further from zero
    score = MATE_SCORE + depth_left
    return -score if loser == WHITE else score


class SearchService:
    """Fixed-depth minimax with alpha-beta pruning.

    White maximizes and Black minimizes at every node; the root picks the move
    that is best for the requested color. The caller's board is never touched:
    the search runs make/unmake on a private copy.
    """

    def search(
        self,
        board: Board,
        depth: int = 3,
        color: Optional[str] = None,
        repetition: Optional[Mapping[Hashable, int]] = None,
    ) -> SearchResult:
        """Search ``board`` and return the best move for ``color``.

        Args:
            board (Board): Position to search; left unchanged.
            depth (int): Plies to search. Values below 1 degrade to a one-ply
                search scored by the static evaluation.
            color (Optional[str]): Side to find a move for (default: side to
                move).
            repetition (Optional[Mapping]): Position occurrence counts from
                the game so far, so repetitions inside the tree score as draws.

        Returns:
            SearchResult: ``best_move`` is ``None`` when the side has no legal
            moves; ``score`` then holds the mate or stalemate score.
        """
        start = time.perf_counter()
        b = board.copy()
        if color is not None and color != b.side_to_move:
            b.side_to_move = color
            b.ep_square = None
        depth = max(1, depth)
        rep_counts: Dict[Hashable, int] = dict(repetition or {})
        nodes = 0

        def minimax(depth_left: int, alpha: int, beta: int) -> int:
            nonlocal nodes
            nodes += 1
            side = b.side_to_move
            # Mate and stalemate outrank draw claims
            moves = all_legal_moves(b)
            if not moves:
                return mate_score(side, depth_left) if in_check(b, side) else 0
            if rep_counts.get(b.position_key(), 0) >= REPETITION_LIMIT:
                return 0
            if b.halfmove_clock >= FIFTY_MOVE_PLIES:
                return 0
            if depth_left == 0:
                return evaluate(b, moves)

            maximizing = side == WHITE
            best = -INF if maximizing else INF
            for m in order_moves(b, moves):
                score = _child(m, depth_left - 1, alpha, beta)
                if maximizing:
                    best = max(best, score)
                    alpha = max(alpha, score)
                else:
                    best = min(best, score)
                    beta = min(beta, score)
                if beta <= alpha:
                    break
            return best

        def _child(m: Move, depth_left: int, alpha: int, beta: int) -> int:
            b.make_move(m)
            key = b.position_key()
            rep_counts[key] = rep_counts.get(key, 0) + 1
            try:
                return minimax(depth_left, alpha, beta)
            finally:
                rep_counts[key] -= 1
                b.unmake_move()

        side = b.side_to_move
        root_moves = all_legal_moves(b)
        if not root_moves:
            score = mate_score(side, depth) if in_check(b, side) else 0
            return SearchResult(None, score, 1, depth, int((time.perf_counter() - start) * 1000))

        maximizing = side == WHITE
        best_move: Optional[Move] = None
        best_score = -INF if maximizing else INF
        alpha, beta = -INF, INF
        for m in order_moves(b, root_moves):
            score = _child(m, depth - 1, alpha, beta)
            if maximizing and score > best_score:
                best_score, best_move = score, m
                alpha = max(alpha, score)
            elif not maximizing and score < best_score:
                best_score, best_move = score, m
                beta = min(beta, score)
        nodes += 1

        time_ms = int((time.perf_counter() - start) * 1000)
        logger.debug(
            "search done depth=%d nodes=%d time_ms=%d best=%s score=%d",
            depth,
            nodes,
            time_ms,
            best_move.to_uci() if best_move else None,
            best_score,
        )
        return SearchResult(best_move, best_score, nodes, depth, time_ms)


def best_move(board: Board, color: Optional[str] = None, depth: int = 3) -> Optional[Move]:
    """Return the minimax move for ``color``, or ``None`` without legal moves."""
    return SearchService().search(board, depth=depth, color=color).best_move
