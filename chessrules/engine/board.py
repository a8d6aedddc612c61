from __future__ import annotations

from dataclasses import dataclass, field
from typing import Hashable, Iterator, List, Optional, Tuple

from .move import Move, Special, Square, square_to_str, str_to_square


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

WHITE, BLACK = "w", "b"
PAWN, KNIGHT, BISHOP, ROOK, QUEEN, KING = "p", "n", "b", "r", "q", "k"
PIECE_KINDS = (PAWN, KNIGHT, BISHOP, ROOK, QUEEN, KING)

# Castling right -> (rook home square, king home square)
CASTLING_HOMES = {
    "K": ((7, 7), (7, 4)),
    "Q": ((7, 0), (7, 4)),
    "k": ((0, 7), (0, 4)),
    "q": ((0, 0), (0, 4)),
}
ROOK_HOME_TO_RIGHT = {rook: right for right, (rook, _king) in CASTLING_HOMES.items()}


def opponent(color: str) -> str:
    return BLACK if color == WHITE else WHITE


def pawn_direction(color: str) -> int:
    # White pawns walk towards row 0
    return -1 if color == WHITE else 1


def promotion_row(color: str) -> int:
    return 0 if color == WHITE else 7


@dataclass(frozen=True)
class Piece:
    color: str  # 'w' or 'b'
    kind: str  # one of PIECE_KINDS

    @property
    def symbol(self) -> str:
        return self.kind.upper() if self.color == WHITE else self.kind

    @classmethod
    def from_symbol(cls, ch: str) -> "Piece":
        if ch.lower() not in PIECE_KINDS:
            raise ValueError(f"invalid piece in FEN: {ch!r}")
        return cls(WHITE if ch.isupper() else BLACK, ch.lower())


@dataclass
class Board:
    """Position plus auxiliary game state.

    Notes:
    - ``squares[row][col]``; row 0 is Black's back rank, row 7 is White's.
    - Moves are applied in place with :meth:`make_move` and reverted with
      :meth:`unmake_move`; :meth:`apply` gives a pure transition on a copy.
    """

    squares: List[List[Optional[Piece]]]
    side_to_move: str  # 'w' or 'b'
    castling: str  # subset of 'KQkq' or ''
    ep_square: Optional[Square]
    halfmove_clock: int = 0
    fullmove_number: int = 1
    # undo records for make/unmake
    _history: List[Tuple] = field(default_factory=list, repr=False)

    @classmethod
    def empty(cls) -> "Board":
        return cls(
            squares=[[None] * 8 for _ in range(8)],
            side_to_move=WHITE,
            castling="",
            ep_square=None,
        )

    @classmethod
    def startpos(cls) -> "Board":
        """Create a board initialized to the standard chess starting position."""
        return cls.from_fen(STARTPOS_FEN)

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Create a board from a position string in FEN layout.

        The last two fields (move counters) are optional and default to
        ``0 1``.

        Raises:
            ValueError: If ``fen`` is empty, has the wrong number of fields, or
                contains invalid piece placement, castling rights, en passant
                square, or move counters.
        """
        if not fen or not isinstance(fen, str):
            raise ValueError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) == 4:
            parts += ["0", "1"]
        if len(parts) != 6:
            raise ValueError("FEN must have 4 or 6 fields")
        placement, stm, castling, ep, halfmove, fullmove = parts

        rows = placement.split("/")
        if len(rows) != 8:
            raise ValueError("FEN board must have 8 ranks")
        squares: List[List[Optional[Piece]]] = []
        for row_str in rows:  # rank 8 first, which is row 0
            row: List[Optional[Piece]] = []
            for ch in row_str:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise ValueError("invalid empty count in FEN rank")
                    row.extend([None] * n)
                else:
                    row.append(Piece.from_symbol(ch))
                if len(row) > 8:
                    raise ValueError("too many squares in FEN rank")
            if len(row) != 8:
                raise ValueError("rank does not sum to 8 squares in FEN")
            squares.append(row)

        if stm not in (WHITE, BLACK):
            raise ValueError("side to move must be 'w' or 'b'")

        if castling != "-":
            for ch in castling:
                if ch not in "KQkq":
                    raise ValueError("invalid castling rights")
            castling = "".join(c for c in "KQkq" if c in castling)
        else:
            castling = ""

        ep_square: Optional[Square]
        if ep == "-":
            ep_square = None
        else:
            try:
                ep_square = str_to_square(ep)
            except ValueError as e:
                raise ValueError("invalid en passant square") from e
            # ep target sits on rank 3 or rank 6
            if ep_square[0] not in (2, 5):
                raise ValueError("invalid en passant square rank")

        try:
            halfmove_clock = int(halfmove)
            fullmove_number = int(fullmove)
        except ValueError as e:
            raise ValueError("invalid move counters in FEN") from e
        if halfmove_clock < 0 or fullmove_number <= 0:
            raise ValueError("invalid move counters in FEN")

        return cls(
            squares=squares,
            side_to_move=stm,
            castling=castling,
            ep_square=ep_square,
            halfmove_clock=halfmove_clock,
            fullmove_number=fullmove_number,
        )

    def to_fen(self) -> str:
        """Serialize the current position into a normalized FEN string."""
        rows_str: List[str] = []
        for row in self.squares:
            run = 0
            out = []
            for piece in row:
                if piece is None:
                    run += 1
                    continue
                if run > 0:
                    out.append(str(run))
                    run = 0
                out.append(piece.symbol)
            if run > 0:
                out.append(str(run))
            rows_str.append("".join(out))
        placement = "/".join(rows_str)

        castling = self.castling if self.castling else "-"
        ep = square_to_str(self.ep_square) if self.ep_square is not None else "-"
        return f"{placement} {self.side_to_move} {castling} {ep} {self.halfmove_clock} {self.fullmove_number}"

    # --- Queries ---
    def piece_at(self, sq: Square) -> Optional[Piece]:
        return self.squares[sq[0]][sq[1]]

    def set_piece(self, sq: Square, piece: Optional[Piece]) -> None:
        self.squares[sq[0]][sq[1]] = piece

    def pieces(self, color: Optional[str] = None) -> Iterator[Tuple[Square, Piece]]:
        """Yield ``(square, piece)`` for every occupied square, optionally by color."""
        for r in range(8):
            for c in range(8):
                piece = self.squares[r][c]
                if piece is not None and (color is None or piece.color == color):
                    yield (r, c), piece

    def position_key(self) -> Hashable:
        """Key identifying the position for repetition purposes.

        Covers placement, side to move, castling rights and en-passant target;
        move counters are excluded.
        """
        return (
            tuple(tuple(row) for row in self.squares),
            self.side_to_move,
            self.castling,
            self.ep_square,
        )

    def copy(self) -> "Board":
        return Board(
            squares=[list(row) for row in self.squares],
            side_to_move=self.side_to_move,
            castling=self.castling,
            ep_square=self.ep_square,
            halfmove_clock=self.halfmove_clock,
            fullmove_number=self.fullmove_number,
        )

    # --- Move application ---
    def apply(self, move: Move) -> "Board":
        """Return a new Board with ``move`` applied; this board is unchanged.

        The move is expected to come from the move generator and is not
        re-validated.
        """
        new_board = self.copy()
        new_board.make_move(move)
        return new_board

    def make_move(self, move: Move) -> None:
        """Apply ``move`` to this board in-place with reversible state.

        Handles normal moves, captures, promotions, en passant and castling.
        The mover is the piece on ``move.from_sq``, which need not belong to
        the side to move (mobility counts simulate moves for both colors).
        """
        from_sq, to_sq = move.from_sq, move.to_sq
        moved = self.piece_at(from_sq)
        if moved is None:
            raise ValueError(f"no piece to move on {square_to_str(from_sq)}")

        if move.special is Special.EN_PASSANT:
            # The passed pawn stands beside the capturer, on the destination file
            cap_sq: Optional[Square] = (from_sq[0], to_sq[1])
        else:
            cap_sq = to_sq if self.piece_at(to_sq) is not None else None
        captured = self.piece_at(cap_sq) if cap_sq is not None else None

        self._history.append(
            (
                move,
                moved,
                captured,
                cap_sq,
                self.side_to_move,
                self.ep_square,
                self.castling,
                self.halfmove_clock,
                self.fullmove_number,
            )
        )

        # 1. relocate
        self.set_piece(from_sq, None)
        # 2. en passant victim
        if cap_sq is not None and cap_sq != to_sq:
            self.set_piece(cap_sq, None)
        self.set_piece(to_sq, moved)
        # 3. castling rook
        if move.is_castle:
            row = from_sq[0]
            if move.special is Special.CASTLE_KINGSIDE:
                rook_from, rook_to = (row, 7), (row, 5)
            else:
                rook_from, rook_to = (row, 0), (row, 3)
            self.set_piece(rook_to, self.piece_at(rook_from))
            self.set_piece(rook_from, None)
        # 4. promotion, Queen unless the caller chose otherwise
        if moved.kind == PAWN and to_sq[0] == promotion_row(moved.color):
            self.set_piece(to_sq, Piece(moved.color, move.promotion or QUEEN))

        # 5. castling rights
        self._update_castling_rights_on_move(moved, from_sq, to_sq)

        # 6. en passant target only survives a fresh double push
        self.ep_square = None
        if moved.kind == PAWN and abs(to_sq[0] - from_sq[0]) == 2:
            self.ep_square = ((from_sq[0] + to_sq[0]) // 2, from_sq[1])

        if moved.kind == PAWN or captured is not None:
            self.halfmove_clock = 0
        else:
            self.halfmove_clock += 1
        if moved.color == BLACK:
            self.fullmove_number += 1

        # 7. side to move
        self.side_to_move = opponent(moved.color)

    def unmake_move(self) -> Move:
        """Undo the last move in-place, restoring previous state.

        Returns:
            Move: The move that was undone.

        Raises:
            ValueError: If there is no move to unmake.
        """
        if not self._history:
            raise ValueError("no move to unmake")
        (
            move,
            moved,
            captured,
            cap_sq,
            prev_side,
            prev_ep,
            prev_castling,
            prev_halfmove,
            prev_fullmove,
        ) = self._history.pop()

        from_sq, to_sq = move.from_sq, move.to_sq
        self.set_piece(to_sq, None)
        self.set_piece(from_sq, moved)
        if captured is not None:
            self.set_piece(cap_sq, captured)
        if move.is_castle:
            row = from_sq[0]
            if move.special is Special.CASTLE_KINGSIDE:
                rook_from, rook_to = (row, 7), (row, 5)
            else:
                rook_from, rook_to = (row, 0), (row, 3)
            self.set_piece(rook_from, self.piece_at(rook_to))
            self.set_piece(rook_to, None)

        self.side_to_move = prev_side
        self.ep_square = prev_ep
        self.castling = prev_castling
        self.halfmove_clock = prev_halfmove
        self.fullmove_number = prev_fullmove
        return move

    def _update_castling_rights_on_move(self, moved: Piece, from_sq: Square, to_sq: Square) -> None:
        """Drop castling rights on king/rook moves and on arrivals at rook corners."""
        if not self.castling:
            return
        rights = set(self.castling)
        if moved.kind == KING:
            if moved.color == WHITE:
                rights.discard("K")
                rights.discard("Q")
            else:
                rights.discard("k")
                rights.discard("q")
        # Leaving a home corner, or anything landing on one, ends that right for good
        rights.discard(ROOK_HOME_TO_RIGHT.get(from_sq, ""))
        rights.discard(ROOK_HOME_TO_RIGHT.get(to_sq, ""))
        self.castling = "".join(c for c in "KQkq" if c in rights)
