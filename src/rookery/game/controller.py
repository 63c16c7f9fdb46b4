"""Turn loop that ties players, the game session and bot services together.

Listeners subscribe through the plain callback lists on :class:`GameEvents`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rookery.core.enums import Color, GameResult, PieceType
from rookery.core.executor import needs_promotion, resolve_move
from rookery.core.move import Move
from rookery.core.move_generator import MoveGenerator
from rookery.core.notation import move_to_notation
from rookery.core.piece import Piece
from rookery.core.rules import Rules
from rookery.core.state import GameState
from rookery.core.types import Square
from rookery.game.interfaces import GamePhase, IGameController, IPlayer
from rookery.game.player import AIPlayer
from rookery.game.session import GameSession, MoveRecord, PlayerStats

if TYPE_CHECKING:
    from rookery.engine.qt_bridge import BotService
    from rookery.engine.search import SearchResult

_LOGGER = logging.getLogger(__name__)

# ── Event definitions ────────────────────────────────────────────────────────

MoveCallback = Callable[[Move, str, GameSession], None]  # move, notation, session
GameOverCallback = Callable[[GameResult], None]
PhaseCallback = Callable[[GamePhase], None]
BotResultCallback = Callable[[Color, "SearchResult"], None]


@dataclass
class GameEvents:
    """Observable callbacks. Multiple handlers per event."""

    on_move: list[MoveCallback] = field(default_factory=list)
    on_game_over: list[GameOverCallback] = field(default_factory=list)
    on_phase_changed: list[PhaseCallback] = field(default_factory=list)
    on_bot_result: list[BotResultCallback] = field(default_factory=list)


# ── Controller ───────────────────────────────────────────────────────────────


class GameController(IGameController):
    """Orchestrates a full chess game: validates moves, switches turns,
    prompts bots and notifies listeners.

    Methods are meant to be called from a single thread (the main/UI
    thread). Bot results arrive on that thread through queued Qt signals.
    """

    __slots__ = (
        "_session",
        "_players",
        "_services",
        "_pending_requests",
        "_deferred_requests",
        "events",
    )

    def __init__(self) -> None:
        self._session = GameSession()
        self._players: dict[Color, IPlayer] = {}
        self._services: dict[Color, BotService] = {}
        self._pending_requests: dict[Color, int] = {}
        self._deferred_requests: dict[Color, GameState] = {}
        self.events = GameEvents()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def session(self) -> GameSession:
        return self._session

    @property
    def phase(self) -> GamePhase:
        return self._session.phase

    @property
    def result(self) -> GameResult:
        return self._session.result

    @property
    def side_to_move(self) -> Color:
        return self._session.side_to_move

    @property
    def move_history(self) -> list[MoveRecord]:
        return list(self._session.move_history)

    @property
    def stats(self) -> dict[Color, PlayerStats]:
        return self._session.stats

    @property
    def current_player(self) -> IPlayer | None:
        return self._players.get(self._session.side_to_move)

    def player(self, color: Color) -> IPlayer | None:
        return self._players.get(color)

    # ── IGameController impl ─────────────────────────────────────────────

    def new_game(
        self,
        white: IPlayer,
        black: IPlayer,
        fen: str | None = None,
    ) -> None:
        self._cancel_bots()
        self._players = {Color.WHITE: white, Color.BLACK: black}
        self._session = GameSession()
        self._session.setup(fen)
        self._start()

    def reset(self) -> None:
        """Restart from the starting position, clearing bot caches."""
        self._cancel_bots()
        for service in self._services.values():
            service.reset()
        self._session.setup(self._session.start_fen)
        self._start()

    def submit_move(self, move: Move) -> bool:
        if self._session.phase not in (GamePhase.AWAITING_MOVE, GamePhase.THINKING):
            return False

        record = self._session.apply_move(move)
        if record is None:
            return False

        self._emit_move(record.move, record.notation)

        if self._session.is_game_over:
            self._emit_game_over(self._session.result)
            return True

        self._prompt_current_player()
        return True

    def move_piece(
        self,
        from_sq: Square,
        to_sq: Square,
        promotion: PieceType | None = None,
    ) -> bool:
        """Submit a human move given by squares; False on a bot's turn."""
        cp = self.current_player
        if cp is not None and not cp.is_human:
            return False
        move = resolve_move(self._session.state, from_sq, to_sq, promotion)
        if move is None:
            return False
        return self.submit_move(move)

    def undo_move(self) -> bool:
        if not self._session.move_history:
            return False

        # Drop a pending bot result
        cp = self.current_player
        if cp and not cp.is_human:
            cp.cancel()

        self._session.undo_last_move()
        self._emit_phase(GamePhase.AWAITING_MOVE)
        self._prompt_current_player()
        return True

    # ── Read access ──────────────────────────────────────────────────────

    def snapshot(self) -> GameState:
        """Deep copy of the live state."""
        return self._session.state.copy()

    def piece_at(self, sq: Square) -> Piece | None:
        return self._session.state.board[sq]

    def legal_destinations(self, sq: Square) -> list[Square]:
        """Target squares of the piece on *sq* (empty if not the mover's)."""
        moves = MoveGenerator(self._session.state).legal_moves_from(sq)
        return sorted({m.to_sq for m in moves})

    def needs_promotion(self, from_sq: Square, to_sq: Square) -> bool:
        return needs_promotion(self._session.state, from_sq, to_sq)

    def notation(self, move: Move) -> str:
        return move_to_notation(self._session.state, move)

    def is_in_check(self) -> bool:
        return Rules.is_in_check(self._session.state)

    def is_checkmate(self) -> bool:
        return Rules.is_checkmate(self._session.state)

    def is_stalemate(self) -> bool:
        return Rules.is_stalemate(self._session.state)

    def is_game_over(self) -> bool:
        return Rules.is_game_over(self._session.state)

    def king_square(self, color: Color) -> Square:
        return Rules.king_square(self._session.state, color)

    # ── Bots ─────────────────────────────────────────────────────────────

    def bind_bot(
        self,
        color: Color,
        service: BotService,
        difficulty: int | None = None,
        name: str = "Rookery",
    ) -> AIPlayer:
        """Create an :class:`AIPlayer` for *color* backed by *service*.

        Use one service per bot side so each keeps its own caches.
        """
        self._services[color] = service

        def request(state: GameState) -> None:
            if service.is_busy:
                # Issued once the service reports idle.
                self._deferred_requests[color] = state
                return
            self._pending_requests[color] = service.request(state, difficulty)

        def cancel() -> None:
            self._pending_requests.pop(color, None)
            self._deferred_requests.pop(color, None)

        def on_idle() -> None:
            state = self._deferred_requests.pop(color, None)
            if state is not None:
                request(state)

        def on_result(request_id: int, result: object) -> None:
            if self._pending_requests.get(color) != request_id:
                return
            del self._pending_requests[color]
            self.on_bot_result(result)  # type: ignore[arg-type]

        def on_failed(request_id: int, message: str) -> None:
            if self._pending_requests.pop(color, None) == request_id:
                _LOGGER.warning("Bot for %s failed: %s", color, message)

        service.move_ready.connect(on_result)
        service.search_failed.connect(on_failed)
        service.idle.connect(on_idle)
        return AIPlayer(color, name, on_request_move=request, on_cancel=cancel)

    def on_bot_result(self, result: SearchResult) -> bool:
        """Apply a bot's chosen move; listeners receive the metrics first."""
        color = self._session.side_to_move
        for cb in self.events.on_bot_result:
            cb(color, result)
        if self._session.phase != GamePhase.THINKING:
            return False
        if result.best_move is None:
            if result.error is not None:
                _LOGGER.warning("Bot for %s returned no move: %s", color, result.error)
            return False
        bot = self._players.get(color)
        if not self.submit_move(result.best_move):
            return False
        if isinstance(bot, AIPlayer):
            bot.answered()
        return True

    # ── Internal helpers ─────────────────────────────────────────────────

    def _start(self) -> None:
        if self._session.is_game_over:
            self._emit_game_over(self._session.result)
            return
        self._emit_phase(GamePhase.AWAITING_MOVE)
        self._prompt_current_player()

    def _cancel_bots(self) -> None:
        for p in self._players.values():
            if not p.is_human:
                p.cancel()

    def _prompt_current_player(self) -> None:
        """Ask the current player to move."""
        cp = self.current_player
        if cp is None:
            return

        if cp.is_human:
            self._session.phase = GamePhase.AWAITING_MOVE
            self._emit_phase(GamePhase.AWAITING_MOVE)
        else:
            self._session.phase = GamePhase.THINKING
            self._emit_phase(GamePhase.THINKING)
            cp.request_move(self._session.state.copy())

    def _emit_move(self, move: Move, notation: str) -> None:
        for cb in self.events.on_move:
            cb(move, notation, self._session)

    def _emit_game_over(self, result: GameResult) -> None:
        self._emit_phase(GamePhase.GAME_OVER)
        for cb in self.events.on_game_over:
            cb(result)

    def _emit_phase(self, phase: GamePhase) -> None:
        for cb in self.events.on_phase_changed:
            cb(phase)
