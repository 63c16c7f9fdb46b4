"""Game session — live state, phase, move history and per-side statistics."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rookery.core.enums import Color, GameResult
from rookery.core.executor import resolve_move
from rookery.core.move_generator import MoveGenerator
from rookery.core.notation import (
    STARTING_FEN,
    move_to_notation,
    state_from_fen,
    state_to_fen,
)
from rookery.core.rules import Rules
from rookery.core.state import GameState
from rookery.game.interfaces import GamePhase

if TYPE_CHECKING:
    from rookery.core.move import Move


@dataclass
class MoveRecord:
    """One played ply with its rendered text and what it did."""

    move: Move
    notation: str
    fen_after: str
    was_check: bool = False
    was_capture: bool = False
    was_castling: bool = False

    @property
    def color(self) -> Color:
        return self.move.piece.color


@dataclass
class PlayerStats:
    """Running counters for one side."""

    captures: int = 0
    checks: int = 0
    castled: bool = False


@dataclass
class GameSession:
    """Owns the single live :class:`GameState` of a game.

    Pure data/logic class — no threading, no UI.
    """

    state: GameState = field(default_factory=GameState, init=False)
    phase: GamePhase = field(default=GamePhase.NOT_STARTED, init=False)
    result: GameResult = field(default=GameResult.IN_PROGRESS, init=False)
    move_history: list[MoveRecord] = field(default_factory=list, init=False)
    start_fen: str = field(default=STARTING_FEN, init=False)
    stats: dict[Color, PlayerStats] = field(default_factory=dict, init=False)

    # ── Initialisation ───────────────────────────────────────────────────

    def setup(self, fen: str | None = None) -> None:
        """Start over from *fen* (default: the standard position)."""
        state = state_from_fen(fen or STARTING_FEN)
        self.start_fen = fen or STARTING_FEN
        self.state = state
        self.phase = GamePhase.AWAITING_MOVE
        self.result = GameResult.IN_PROGRESS
        self.move_history.clear()
        self.stats = {Color.WHITE: PlayerStats(), Color.BLACK: PlayerStats()}
        self._check_game_over()

    # ── Move application ─────────────────────────────────────────────────

    def apply_move(self, move: Move) -> MoveRecord | None:
        """Apply *move* if legal; returns the history record or ``None``."""
        resolved = resolve_move(self.state, move.from_sq, move.to_sq, move.promotion)
        if resolved is None:
            return None

        text = move_to_notation(self.state, resolved)
        self.state.make_move(resolved)
        record = MoveRecord(
            move=resolved,
            notation=text,
            fen_after=state_to_fen(self.state),
            was_check=MoveGenerator(self.state).is_in_check(self.state.turn),
            was_capture=resolved.is_capture,
            was_castling=resolved.is_castling,
        )
        self.move_history.append(record)
        self._count(record, +1)
        self._check_game_over()
        return record

    def undo_last_move(self) -> Move | None:
        """Take back the last ply; ``None`` when nothing has been played."""
        if not self.move_history:
            return None

        record = self.move_history.pop()
        self.state.unmake_move(record.move)
        self._count(record, -1)

        if self.result != GameResult.IN_PROGRESS:
            self.result = GameResult.IN_PROGRESS
            self.phase = GamePhase.AWAITING_MOVE

        return record.move

    # ── Query helpers ────────────────────────────────────────────────────

    @property
    def side_to_move(self) -> Color:
        return self.state.turn

    @property
    def is_game_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    @property
    def ply_count(self) -> int:
        """Number of half-moves played."""
        return len(self.move_history)

    def legal_moves(self) -> list[Move]:
        """Legal moves in the current position."""
        return MoveGenerator(self.state).generate_legal_moves()

    # ── Internal ─────────────────────────────────────────────────────────

    def _count(self, record: MoveRecord, step: int) -> None:
        stats = self.stats[record.color]
        if record.was_capture:
            stats.captures += step
        if record.was_check:
            stats.checks += step
        if record.was_castling:
            stats.castled = step > 0

    def _check_game_over(self) -> None:
        result = Rules.game_result(self.state)
        if result != GameResult.IN_PROGRESS:
            self.result = result
            self.phase = GamePhase.GAME_OVER
