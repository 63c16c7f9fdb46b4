"""Tests for player implementations."""

from rookery.core.enums import Color
from rookery.core.state import GameState
from rookery.game.player import AIPlayer, HumanPlayer


class TestHumanPlayer:
    def test_properties(self) -> None:
        p = HumanPlayer(Color.WHITE, "Alice")
        assert p.color == Color.WHITE
        assert p.name == "Alice"
        assert p.is_human

    def test_default_name(self) -> None:
        assert HumanPlayer(Color.BLACK).name == "Player (black)"

    def test_request_and_cancel_are_noops(self) -> None:
        p = HumanPlayer(Color.WHITE)
        p.request_move(GameState.initial())
        p.cancel()


class TestAIPlayer:
    def test_properties(self) -> None:
        p = AIPlayer(Color.BLACK)
        assert p.color == Color.BLACK
        assert p.name == "Rookery"
        assert not p.is_human

    def test_request_forwards_state(self) -> None:
        seen: list[GameState] = []
        p = AIPlayer(Color.WHITE, on_request_move=seen.append)
        state = GameState.initial()
        p.request_move(state)
        assert seen == [state]

    def test_cancel_callback(self) -> None:
        calls: list[bool] = []
        p = AIPlayer(Color.WHITE, on_cancel=lambda: calls.append(True))
        p.cancel()
        assert calls == [True]

    def test_without_callbacks(self) -> None:
        p = AIPlayer(Color.WHITE)
        p.request_move(GameState.initial())
        p.cancel()

    def test_thinking_flag(self) -> None:
        p = AIPlayer(Color.BLACK)
        assert not p.is_thinking
        p.request_move(GameState.initial())
        assert p.is_thinking
        p.answered()
        assert not p.is_thinking
        p.request_move(GameState.initial())
        p.cancel()
        assert not p.is_thinking

    def test_repr(self) -> None:
        assert repr(AIPlayer(Color.WHITE, "Deep")) == "AIPlayer(white, 'Deep')"
