"""Qt bridge to run bot searches in a worker thread."""

from __future__ import annotations

import logging

from PyQt6.QtCore import QObject, QThread, pyqtSignal, pyqtSlot

from rookery.core.state import GameState
from rookery.engine.bot import BotConfig, ChessBot

_LOGGER = logging.getLogger(__name__)

_SHUTDOWN_WAIT_MS = 30_000


class EngineWorker(QObject):
    """Thread-affine worker that computes bot moves on demand."""

    move_ready = pyqtSignal(int, object)
    search_error = pyqtSignal(int, str)

    def __init__(self, bot: ChessBot) -> None:
        super().__init__()
        self._bot = bot

    @pyqtSlot(object, int, object)
    def request_move(self, state_obj: object, request_id: int, difficulty: object) -> None:
        """Choose a move for *state_obj* and emit the :class:`SearchResult`."""
        if not isinstance(state_obj, GameState):
            self.search_error.emit(request_id, "Engine received invalid state")
            return
        level = difficulty if isinstance(difficulty, int) else None
        try:
            result = self._bot.choose_move(state_obj, level)
        except Exception as exc:
            _LOGGER.warning("Search request %d failed: %s", request_id, exc)
            self.search_error.emit(request_id, str(exc))
            return
        if result.error is not None:
            _LOGGER.warning("Search request %d degraded: %s", request_id, result.error)
        self.move_ready.emit(request_id, result)

    @pyqtSlot()
    def reset(self) -> None:
        """Clear the bot's caches (runs after any in-flight search)."""
        self._bot.reset()


class BotService(QObject):
    """Owns one bot on a dedicated ``QThread`` and tracks its requests.

    Results arrive through :attr:`move_ready` / :attr:`search_failed` on the
    thread that owns the service. Results of requests issued before the last
    :meth:`reset` are dropped.
    """

    move_ready = pyqtSignal(int, object)
    search_failed = pyqtSignal(int, str)
    idle = pyqtSignal()

    _search_requested = pyqtSignal(object, int, object)
    _reset_requested = pyqtSignal()

    def __init__(
        self,
        config: BotConfig | None = None,
        *,
        bot: ChessBot | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._bot = bot if bot is not None else ChessBot(config)
        self._thread = QThread()
        self._worker = EngineWorker(self._bot)
        self._worker.moveToThread(self._thread)

        self._search_requested.connect(self._worker.request_move)
        self._reset_requested.connect(self._worker.reset)
        self._worker.move_ready.connect(self._on_move_ready)
        self._worker.search_error.connect(self._on_search_error)
        self._thread.finished.connect(self._worker.deleteLater)

        self._next_request_id = 0
        self._in_flight: int | None = None
        self._stale_before = 0
        self._thread.start()

    @property
    def bot(self) -> ChessBot:
        return self._bot

    @property
    def is_busy(self) -> bool:
        return self._in_flight is not None

    def request(self, state: GameState, difficulty: int | None = None) -> int:
        """Queue a search on a copy of *state*; returns the request id."""
        if self._in_flight is not None:
            raise RuntimeError("A search is already in progress")
        if not self._thread.isRunning():
            raise RuntimeError("Bot service has been shut down")
        self._next_request_id += 1
        request_id = self._next_request_id
        self._in_flight = request_id
        self._search_requested.emit(state.copy(), request_id, difficulty)
        return request_id

    def reset(self) -> None:
        """Drop pending results and clear the bot's caches."""
        self._stale_before = self._next_request_id + 1
        self._reset_requested.emit()

    def shutdown(self) -> None:
        """Stop the worker thread, waiting for an in-flight search to finish."""
        if not self._thread.isRunning():
            return
        self._thread.quit()
        if not self._thread.wait(_SHUTDOWN_WAIT_MS):
            _LOGGER.warning("Bot worker did not stop within %d ms", _SHUTDOWN_WAIT_MS)
        self._in_flight = None

    def _finish(self, request_id: int) -> bool:
        if request_id == self._in_flight:
            self._in_flight = None
        return request_id >= self._stale_before

    def _on_move_ready(self, request_id: int, result: object) -> None:
        if self._finish(request_id):
            self.move_ready.emit(request_id, result)
        self.idle.emit()

    def _on_search_error(self, request_id: int, message: str) -> None:
        if self._finish(request_id):
            self.search_failed.emit(request_id, message)
        self.idle.emit()
