"""Move text: long algebraic rendering and coordinate parsing."""

from __future__ import annotations

from rookery.core.enums import PieceType
from rookery.core.executor import resolve_move
from rookery.core.move import Move
from rookery.core.move_generator import MoveGenerator
from rookery.core.piece import Piece
from rookery.core.state import GameState
from rookery.core.types import col_of, parse_square, square_name

_PROMO_LETTERS: dict[str, PieceType] = {
    "q": PieceType.QUEEN,
    "r": PieceType.ROOK,
    "b": PieceType.BISHOP,
    "n": PieceType.KNIGHT,
}


def move_to_notation(state: GameState, move: Move) -> str:
    """Render *move* (legal in *state*) as text, e.g. ``Qh5xf7#`` or ``O-O``.

    Non-castling moves are written ``<piece><from>[x]<to>[=<promo>]`` with an
    empty piece letter for pawns. *state* is left untouched; the check suffix
    comes from a scratch copy.
    """
    if move.is_castling:
        text = "O-O" if col_of(move.to_sq) == 6 else "O-O-O"
    else:
        text = move.piece.letter + square_name(move.from_sq)
        if move.is_capture:
            text += "x"
        text += square_name(move.to_sq)
        if move.promotion is not None:
            text += "=" + Piece(move.piece.color, move.promotion).letter

    scratch = state.copy()
    scratch.make_move(move)
    gen = MoveGenerator(scratch)
    if gen.is_in_check(scratch.turn):
        text += "+" if gen.has_legal_move() else "#"
    return text


def parse_coordinates(state: GameState, text: str) -> Move:
    """Parse coordinate text like ``e2e4`` or ``e7e8q`` into a legal move."""
    clean = text.strip().lower()
    if len(clean) not in (4, 5):
        raise ValueError(f"Invalid move text: {text!r}")
    from_sq = parse_square(clean[:2])
    to_sq = parse_square(clean[2:4])
    promotion: PieceType | None = None
    if len(clean) == 5:
        promotion = _PROMO_LETTERS.get(clean[4])
        if promotion is None:
            raise ValueError(f"Invalid promotion piece: {text!r}")
    move = resolve_move(state, from_sq, to_sq, promotion)
    if move is None:
        raise ValueError(f"Illegal move: {text}")
    return move
