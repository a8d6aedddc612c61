from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


Square = Tuple[int, int]  # (row, col); row 0 is rank 8, col 0 is file a

PROMOTION_PIECES = ("q", "r", "b", "n")


class IllegalMoveError(ValueError):
    """Raised when a move is not in the legal move list of the position."""


class Special(Enum):
    NONE = "none"
    DOUBLE_PUSH = "double-pawn-push"
    EN_PASSANT = "en-passant"
    CASTLE_KINGSIDE = "castle-kingside"
    CASTLE_QUEENSIDE = "castle-queenside"
    PROMOTION = "promotion"


@dataclass(frozen=True)
class Move:
    """Engine-internal move representation.

    Attributes:
        from_sq (Square): Origin square as ``(row, col)``.
        to_sq (Square): Destination square as ``(row, col)``.
        capture (bool): Whether the move removes an enemy piece (en passant
            included).
        special (Special): Special-move tag.
        promotion (Optional[str]): Lowercase promotion piece for
            ``Special.PROMOTION``, else ``None``.

    Equality only looks at ``from_sq``, ``to_sq`` and ``promotion`` so a move
    parsed from text compares equal to the generated move it names.
    """

    from_sq: Square
    to_sq: Square
    capture: bool = field(default=False, compare=False)
    special: Special = field(default=Special.NONE, compare=False)
    promotion: Optional[str] = None

    @property
    def is_castle(self) -> bool:
        return self.special in (Special.CASTLE_KINGSIDE, Special.CASTLE_QUEENSIDE)

    def to_uci(self) -> str:
        """Serialize the move into long algebraic form.

        Returns:
            str: Move encoded like ``"e2e4"`` or ``"e7e8q"``.
        """
        return square_to_str(self.from_sq) + square_to_str(self.to_sq) + (self.promotion or "")

    def to_dict(self) -> dict:
        return {
            "from_sq": square_to_str(self.from_sq),
            "to_sq": square_to_str(self.to_sq),
            "capture": self.capture,
            "special": self.special.value,
            "promotion": self.promotion,
            "uci": self.to_uci(),
        }


def parse_uci(uci: str) -> Move:
    """Parse a long algebraic move string.

    The result only carries squares and the promotion piece; look it up in the
    legal move list to recover the capture flag and special tag.

    Args:
        uci (str): Move encoded in long algebraic notation (e.g. ``"e2e4"``).

    Returns:
        Move: Parsed move.

    Raises:
        ValueError: If the string has an invalid length, squares, or promotion
            piece.
    """
    if len(uci) not in (4, 5):
        raise ValueError(f"invalid move length: {uci!r}")
    from_sq = str_to_square(uci[0:2])
    to_sq = str_to_square(uci[2:4])
    promo: Optional[str] = None
    if len(uci) == 5:
        promo = uci[4].lower()
        if promo not in PROMOTION_PIECES:
            raise ValueError(f"invalid promotion piece: {promo!r}")
    return Move(from_sq, to_sq, promotion=promo)


def str_to_square(s: str) -> Square:
    """Convert algebraic notation into a ``(row, col)`` square.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        Square: ``(row, col)`` with row 0 on rank 8.

    Raises:
        ValueError: If ``s`` is not a valid square.
    """
    if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise ValueError(f"invalid square: {s!r}")
    col = ord(s[0]) - ord("a")
    row = 8 - int(s[1])
    return row, col


def square_to_str(sq: Square) -> str:
    """Convert a ``(row, col)`` square into algebraic notation.

    Raises:
        ValueError: If ``sq`` is off the board.
    """
    row, col = sq
    if not (0 <= row < 8 and 0 <= col < 8):
        raise ValueError(f"invalid square: {sq!r}")
    return chr(ord("a") + col) + str(8 - row)
