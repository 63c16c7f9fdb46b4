"""Contracts between the controller and the two sides of a game."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import IntEnum, auto
from typing import TYPE_CHECKING

from rookery.core.enums import Color, PieceType
from rookery.core.types import Square

if TYPE_CHECKING:
    from rookery.core.move import Move
    from rookery.core.state import GameState


class GamePhase(IntEnum):
    """Where the controller is in its turn cycle."""

    NOT_STARTED = auto()
    AWAITING_MOVE = auto()  # a human is on move
    THINKING = auto()  # a bot search is pending
    GAME_OVER = auto()


class IPlayer(ABC):
    """One side of the board.

    Humans answer through :meth:`IGameController.move_piece`; bots receive a
    snapshot in :meth:`request_move` and answer asynchronously.
    """

    @property
    @abstractmethod
    def color(self) -> Color: ...

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def is_human(self) -> bool: ...

    @abstractmethod
    def request_move(self, state: GameState) -> None:
        """It is this side's turn in *state* (a private copy)."""

    @abstractmethod
    def cancel(self) -> None:
        """Any answer to the last request is no longer wanted."""


class IGameController(ABC):
    @abstractmethod
    def new_game(
        self,
        white: IPlayer,
        black: IPlayer,
        fen: str | None = None,
    ) -> None: ...

    @abstractmethod
    def reset(self) -> None: ...

    @abstractmethod
    def submit_move(self, move: Move) -> bool:
        """Play *move* for the side to move; ``False`` leaves the game as is."""

    @abstractmethod
    def move_piece(
        self,
        from_sq: Square,
        to_sq: Square,
        promotion: PieceType | None = None,
    ) -> bool: ...

    @abstractmethod
    def undo_move(self) -> bool: ...
