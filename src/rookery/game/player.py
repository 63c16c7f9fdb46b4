"""Human and bot sides of a game."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from rookery.core.enums import Color
from rookery.game.interfaces import IPlayer

if TYPE_CHECKING:
    from rookery.core.state import GameState

RequestHandler = Callable[["GameState"], None]
CancelHandler = Callable[[], None]


class _Side(IPlayer):
    __slots__ = ("_color", "_name")

    def __init__(self, color: Color, name: str) -> None:
        self._color = color
        self._name = name

    @property
    def color(self) -> Color:
        return self._color

    @property
    def name(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._color}, {self._name!r})"


class HumanPlayer(_Side):
    """Moves come from the UI through ``GameController.move_piece``."""

    __slots__ = ()

    def __init__(self, color: Color, name: str = "") -> None:
        super().__init__(color, name or f"Player ({color})")

    @property
    def is_human(self) -> bool:
        return True

    def request_move(self, state: GameState) -> None:
        pass

    def cancel(self) -> None:
        pass


class AIPlayer(_Side):
    """A bot side wired to a search backend through two callbacks.

    ``GameController.bind_bot`` builds one whose *on_request_move* queues the
    snapshot on a :class:`~rookery.engine.qt_bridge.BotService` and whose
    *on_cancel* forgets the pending request id. :attr:`is_thinking` is true
    from a request until the controller plays the reply or cancels it.
    """

    __slots__ = ("_on_request_move", "_on_cancel", "_thinking")

    def __init__(
        self,
        color: Color,
        name: str = "Rookery",
        on_request_move: RequestHandler | None = None,
        on_cancel: CancelHandler | None = None,
    ) -> None:
        super().__init__(color, name)
        self._on_request_move = on_request_move
        self._on_cancel = on_cancel
        self._thinking = False

    @property
    def is_human(self) -> bool:
        return False

    @property
    def is_thinking(self) -> bool:
        return self._thinking

    def request_move(self, state: GameState) -> None:
        self._thinking = True
        if self._on_request_move is not None:
            self._on_request_move(state)

    def cancel(self) -> None:
        self._thinking = False
        if self._on_cancel is not None:
            self._on_cancel()

    def answered(self) -> None:
        """The reply to the last request has been played."""
        self._thinking = False
