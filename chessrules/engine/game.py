from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Hashable, List, Optional

from .attacks import in_check
from .board import Board, PAWN, QUEEN, promotion_row
from .move import IllegalMoveError, Move, Square
from .movegen import all_legal_moves, legal_moves
from .terminal import DRAWS, GameStatus, classify


logger = logging.getLogger(__name__)


@dataclass
class Game:
    """Game wrapper around a board with helper operations.

    Responsibility: track board state and history, expose legal moves,
    validate and apply moves, count repetitions.
    """

    board: Board
    move_stack: List[Move] = field(default_factory=list)
    repetition: Dict[Hashable, int] = field(default_factory=dict)

    @classmethod
    def new(cls) -> "Game":
        return cls(board=Board.startpos())

    @classmethod
    def from_fen(cls, fen: str) -> "Game":
        return cls(board=Board.from_fen(fen))

    def to_fen(self) -> str:
        return self.board.to_fen()

    def __post_init__(self) -> None:
        # Seed repetition with current position
        key = self.board.position_key()
        self.repetition[key] = self.repetition.get(key, 0) + 1

    def legal_moves(self, square: Optional[Square] = None) -> List[Move]:
        if square is not None:
            piece = self.board.piece_at(square)
            if piece is None or piece.color != self.board.side_to_move:
                return []
            return legal_moves(self.board, square)
        return all_legal_moves(self.board)

    def resolve_move(self, move: Move) -> Move:
        """Return the generated legal move that ``move`` names.

        A pawn move onto the last rank without a promotion piece resolves to
        the Queen promotion.

        Raises:
            IllegalMoveError: If no legal move matches.
        """
        promo = move.promotion
        piece = self.board.piece_at(move.from_sq)
        if (
            promo is None
            and piece is not None
            and piece.kind == PAWN
            and move.to_sq[0] == promotion_row(piece.color)
        ):
            promo = QUEEN
        for m in self.legal_moves(move.from_sq):
            if m.to_sq == move.to_sq and m.promotion == promo:
                return m
        raise IllegalMoveError(f"illegal move: {move.to_uci()}")

    def apply_move(self, move: Move) -> Move:
        """Validate and apply ``move``; returns the resolved legal move."""
        resolved = self.resolve_move(move)
        self.board.make_move(resolved)
        self.move_stack.append(resolved)
        key = self.board.position_key()
        self.repetition[key] = self.repetition.get(key, 0) + 1
        logger.debug("applied %s, fen=%s", resolved.to_uci(), self.board.to_fen())
        return resolved

    def undo_move(self) -> Move:
        if not self.move_stack:
            raise ValueError("no moves to undo")
        # Decrement count for current position
        key = self.board.position_key()
        if key in self.repetition:
            self.repetition[key] -= 1
            if self.repetition[key] <= 0:
                del self.repetition[key]
        self.move_stack.pop()
        last = self.board.unmake_move()
        logger.debug("undid %s", last.to_uci())
        return last

    # --- State flags for protocol ---
    def status(self) -> GameStatus:
        return classify(self.board, self.repetition)

    def in_check(self) -> bool:
        return in_check(self.board)

    def checkmate(self) -> bool:
        return self.status() is GameStatus.CHECKMATE

    def stalemate(self) -> bool:
        return self.status() is GameStatus.STALEMATE

    def is_draw(self) -> bool:
        return self.status() in DRAWS

    def move_history_uci(self) -> List[str]:
        return [m.to_uci() for m in self.move_stack]
