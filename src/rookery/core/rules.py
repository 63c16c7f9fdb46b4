"""High-level chess rules: check, checkmate, stalemate, game result."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rookery.core.enums import Color, GameResult
from rookery.core.move_generator import MoveGenerator
from rookery.core.types import Square

if TYPE_CHECKING:
    from rookery.core.state import GameState


class Rules:
    """Static rule-checker that operates on a :class:`GameState`.

    Only checkmate and stalemate end a game; clock-based and repetition
    draws are not adjudicated.
    """

    @staticmethod
    def is_in_check(state: GameState, color: Color | None = None) -> bool:
        gen = MoveGenerator(state)
        return gen.is_in_check(state.turn if color is None else color)

    @staticmethod
    def is_checkmate(state: GameState) -> bool:
        gen = MoveGenerator(state)
        return gen.is_in_check(state.turn) and not gen.has_legal_move()

    @staticmethod
    def is_stalemate(state: GameState) -> bool:
        gen = MoveGenerator(state)
        return not gen.is_in_check(state.turn) and not gen.has_legal_move()

    @staticmethod
    def is_game_over(state: GameState) -> bool:
        return not MoveGenerator(state).has_legal_move()

    @staticmethod
    def king_square(state: GameState, color: Color) -> Square:
        return state.board.king_square(color)

    @staticmethod
    def game_result(state: GameState) -> GameResult:
        """Determine the current game result."""
        gen = MoveGenerator(state)
        if gen.has_legal_move():
            return GameResult.IN_PROGRESS
        if gen.is_in_check(state.turn):
            return (
                GameResult.BLACK_WINS
                if state.turn == Color.WHITE
                else GameResult.WHITE_WINS
            )
        return GameResult.DRAW  # stalemate
