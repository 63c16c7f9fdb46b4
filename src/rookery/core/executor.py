"""Validated move application for caller-submitted requests."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rookery.core.enums import PieceType
from rookery.core.move import Move
from rookery.core.move_generator import MoveGenerator
from rookery.core.types import Square, square_name

if TYPE_CHECKING:
    from rookery.core.state import GameState

_LOGGER = logging.getLogger(__name__)


def resolve_move(
    state: GameState,
    from_sq: Square,
    to_sq: Square,
    promotion: PieceType | None = None,
) -> Move | None:
    """Find the legal move matching ``(from_sq, to_sq, promotion)``.

    Returns ``None`` when the source is empty or belongs to the side not on
    move, when the destination is not legal, or when a promotion choice is
    missing or not one of queen, rook, bishop or knight.
    """
    piece = state.board[from_sq]
    if piece is None or piece.color != state.turn:
        return None
    for move in MoveGenerator(state).legal_moves_from(from_sq):
        if move.to_sq == to_sq and move.promotion == promotion:
            return move
    return None


def needs_promotion(state: GameState, from_sq: Square, to_sq: Square) -> bool:
    """Would moving ``from_sq -> to_sq`` require a promotion choice?"""
    return any(
        move.to_sq == to_sq and move.promotion is not None
        for move in MoveGenerator(state).legal_moves_from(from_sq)
    )


def apply_move(state: GameState, move: Move) -> bool:
    """Apply *move* if legal for the side to move.

    The request is matched by its ``(from, to, promotion)`` key, and the
    generated legal move is the one made. Returns ``False`` without touching
    *state* when nothing matches.
    """
    resolved = resolve_move(state, move.from_sq, move.to_sq, move.promotion)
    if resolved is None:
        _LOGGER.debug(
            "Rejected move %s%s",
            square_name(move.from_sq),
            square_name(move.to_sq),
        )
        return False
    state.make_move(resolved)
    return True
