"""Core domain layer — pure chess logic with zero external dependencies.

Quick start::

    from rookery.core import MoveGenerator, state_from_fen, STARTING_FEN

    state = state_from_fen(STARTING_FEN)
    gen = MoveGenerator(state)
    for move in gen.generate_legal_moves():
        print(move)
"""

from rookery.core.board import Board
from rookery.core.enums import CastlingRights, Color, GameResult, PieceType
from rookery.core.executor import apply_move, needs_promotion, resolve_move
from rookery.core.move import Move, MoveKey
from rookery.core.move_generator import MoveGenerator
from rookery.core.notation import (
    STARTING_FEN,
    move_to_notation,
    parse_coordinates,
    state_from_fen,
    state_to_fen,
)
from rookery.core.piece import Piece
from rookery.core.rules import Rules
from rookery.core.state import GameState
from rookery.core.types import (
    Square,
    col_of,
    make_square,
    parse_square,
    row_of,
    square_name,
)

__all__ = [
    # Enums / flags
    "CastlingRights",
    "Color",
    "GameResult",
    "PieceType",
    # Types / helpers
    "Square",
    "col_of",
    "make_square",
    "parse_square",
    "row_of",
    "square_name",
    # Domain objects
    "Board",
    "GameState",
    "Move",
    "MoveKey",
    "MoveGenerator",
    "Piece",
    "Rules",
    # Executor
    "apply_move",
    "needs_promotion",
    "resolve_move",
    # Notation
    "STARTING_FEN",
    "move_to_notation",
    "parse_coordinates",
    "state_from_fen",
    "state_to_fen",
]
