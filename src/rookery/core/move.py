"""Move value object."""

from __future__ import annotations

from dataclasses import dataclass

from rookery.core.enums import PieceType
from rookery.core.piece import Piece
from rookery.core.types import Square, square_name

_PROMO_CHARS: dict[PieceType, str] = {
    PieceType.KNIGHT: "n",
    PieceType.BISHOP: "b",
    PieceType.ROOK: "r",
    PieceType.QUEEN: "q",
}

MoveKey = tuple[Square, Square, PieceType | None]


@dataclass(frozen=True, slots=True)
class Move:
    """Immutable description of a transition between two positions.

    ``captured`` is recorded by value for notation and statistics. Only the
    explicit ``is_en_passant`` and ``is_castling`` flags make a move touch
    squares other than ``from_sq`` and ``to_sq``. A two-square pawn advance
    carries the square it skipped in ``en_passant_target``.
    """

    from_sq: Square
    to_sq: Square
    piece: Piece
    captured: Piece | None = None
    is_en_passant: bool = False
    is_castling: bool = False
    promotion: PieceType | None = None
    en_passant_target: Square | None = None

    def __str__(self) -> str:
        base = f"{square_name(self.from_sq)}{square_name(self.to_sq)}"
        if self.promotion is not None:
            base += _PROMO_CHARS.get(self.promotion, "")
        return base

    @property
    def key(self) -> MoveKey:
        """Identity used by the search tables: (from, to, promotion)."""
        return (self.from_sq, self.to_sq, self.promotion)

    @property
    def is_capture(self) -> bool:
        return self.captured is not None
