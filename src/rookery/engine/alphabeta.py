"""Iterative-deepening negamax search with alpha-beta pruning."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from time import perf_counter, sleep

from rookery.core.enums import Color, PieceType
from rookery.core.move import Move, MoveKey
from rookery.core.move_generator import MoveGenerator
from rookery.core.state import GameState
from rookery.core.types import col_of, row_of
from rookery.engine.evaluation import MATE_SCORE, Evaluator
from rookery.engine.search import IEngine, RootCandidate, SearchLimits, SearchResult

_LOGGER = logging.getLogger(__name__)

_INF_SCORE = 1_000_000
FORCED_MATE_THRESHOLD = 19_000
_TT_EXACT = 0
_TT_LOWER = 1
_TT_UPPER = 2
_TT_MAX_ENTRIES = 200_000
_MAX_KILLER_PLY = 128
_DEPTH_TIME_FRACTION = 0.8
_YIELD_EVERY_NODES = 4096

_TT_MOVE_BONUS = 10_000
_CAPTURE_BASE = 1_000
_KILLER_BONUS = 900
_PROMOTION_BONUS = 800
_CASTLING_BONUS = 50
_CENTRAL_MINOR_BONUS = 20
_DEVELOPMENT_BONUS = 30
_HISTORY_MAX_SCORE = 850

_NULL_MOVE_MIN_DEPTH = 3
_NULL_MOVE_REDUCTION = 3
_LMR_MIN_DEPTH = 3
_LMR_MIN_MOVE_INDEX = 4
_LMR_REDUCTION = 2
_DEFAULT_QUIESCENCE_DEPTH = 4

# Attacker value for MVV-LVA; the king never loses material by capturing.
_ORDER_VALUES: dict[PieceType, int] = {
    PieceType.PAWN: 100,
    PieceType.KNIGHT: 320,
    PieceType.BISHOP: 330,
    PieceType.ROOK: 500,
    PieceType.QUEEN: 900,
    PieceType.KING: 0,
}
_MINOR_PIECES = (PieceType.KNIGHT, PieceType.BISHOP)


class _SearchTimeout(Exception):
    """Raised inside the tree when the deadline passes."""


@dataclass(slots=True)
class _TTEntry:
    depth: int
    score: int
    bound: int
    best_move: Move | None


class AlphaBetaEngine(IEngine):
    """Classical searcher: TT, killer/history ordering, null move, LMR, quiescence.

    The transposition table, killer slots and history scores persist across
    calls to :meth:`search` until :meth:`clear` is called.
    """

    __slots__ = (
        "_evaluator",
        "_quiescence_depth",
        "_tt",
        "_tt_max_entries",
        "_killer_moves",
        "_history_scores",
        "_nodes",
        "_deadline",
        "_last_yield_nodes",
        "null_move_enabled",
        "lmr_enabled",
    )

    def __init__(
        self,
        evaluator: Evaluator | None = None,
        *,
        quiescence_depth: int = _DEFAULT_QUIESCENCE_DEPTH,
        tt_max_entries: int = _TT_MAX_ENTRIES,
        null_move_enabled: bool = True,
        lmr_enabled: bool = True,
    ) -> None:
        if tt_max_entries < 1:
            raise ValueError("tt_max_entries must be >= 1")
        self._evaluator = evaluator if evaluator is not None else Evaluator()
        self._quiescence_depth = max(0, quiescence_depth)
        self._tt: dict[str, _TTEntry] = {}
        self._tt_max_entries = tt_max_entries
        self._killer_moves: list[list[MoveKey | None]] = []
        self._history_scores: list[list[list[int]]] = []
        self._nodes = 0
        self._deadline: float | None = None
        self._last_yield_nodes = 0
        self.null_move_enabled = null_move_enabled
        self.lmr_enabled = lmr_enabled
        self._reset_move_order_heuristics()

    # ── Public API ──────────────────────────────────────────────────────

    @property
    def nodes(self) -> int:
        return self._nodes

    @property
    def tt_size(self) -> int:
        return len(self._tt)

    def clear(self) -> None:
        """Forget the transposition table, killers and history."""
        self._tt.clear()
        self._reset_move_order_heuristics()

    def killers(self, ply: int) -> tuple[MoveKey | None, MoveKey | None]:
        first, second = self._killer_moves[ply]
        return first, second

    def history_score(self, color: Color, move: Move) -> int:
        return self._history_scores[color][move.from_sq][move.to_sq]

    def search(self, state: GameState, limits: SearchLimits) -> SearchResult:
        """Search a private copy of *state* and return the best move found."""
        if limits.max_depth <= 0:
            raise ValueError("Search depth must be >= 1")

        work = state.copy()
        start = perf_counter()
        self._nodes = 0
        self._last_yield_nodes = 0
        self._deadline = None
        budget_s: float | None = None
        if limits.time_limit_ms is not None:
            budget_s = max(limits.time_limit_ms, 1) / 1000.0
            self._deadline = start + budget_s

        gen = MoveGenerator(work)
        root_moves = gen.generate_legal_moves()
        if not root_moves:
            score = -MATE_SCORE if gen.is_in_check(work.turn) else 0
            return SearchResult(None, score, 0, 0, _elapsed_ms(start))

        entry = self._tt.get(work.position_key())
        ordered = self._order_moves(
            work, root_moves, entry.best_move if entry else None, ply=0
        )

        best_move: Move | None = None
        best_score = 0
        completed_depth = 0
        candidates: tuple[RootCandidate, ...] = ()
        error: str | None = None

        for depth in range(1, limits.max_depth + 1):
            if (
                budget_s is not None
                and depth > 1
                and perf_counter() - start > budget_s * _DEPTH_TIME_FRACTION
            ):
                break
            try:
                scored = self._search_root(work, ordered, depth)
            except _SearchTimeout:
                _LOGGER.debug("Depth %d interrupted by deadline", depth)
                break
            except Exception as exc:
                _LOGGER.exception("Search failed at depth %d", depth)
                error = str(exc) or type(exc).__name__
                break

            best_move, best_score = scored[0]
            completed_depth = depth
            candidates = tuple(RootCandidate(m, s) for m, s in scored)
            # Best move of this iteration is searched first in the next one.
            ordered = [m for m, _ in scored]

            if abs(best_score) > FORCED_MATE_THRESHOLD:
                break

        if best_move is None and error is None:
            # Deadline hit before depth 1 finished: fall back to move ordering.
            best_move = ordered[0]
            best_score = self._evaluator.evaluate_position(work)

        return SearchResult(
            best_move,
            best_score,
            completed_depth,
            self._nodes,
            _elapsed_ms(start),
            error,
            candidates,
        )

    # ── Tree search ─────────────────────────────────────────────────────

    def _search_root(
        self,
        state: GameState,
        root_moves: list[Move],
        depth: int,
    ) -> list[tuple[Move, int]]:
        """Score every root move; returns them best first (stable)."""
        alpha = -_INF_SCORE
        beta = _INF_SCORE
        scored: list[tuple[Move, int]] = []

        for move in root_moves:
            self._check_deadline()
            with state.applied(move):
                score = -self._search(state, depth - 1, -beta, -alpha, ply=1)
            scored.append((move, score))
            if score > alpha:
                alpha = score

        scored.sort(key=lambda item: item[1], reverse=True)
        self._store_tt(state.position_key(), depth, scored[0][1], _TT_EXACT, scored[0][0])
        return scored

    def _search(
        self,
        state: GameState,
        depth: int,
        alpha: int,
        beta: int,
        ply: int,
        allow_null: bool = True,
    ) -> int:
        self._check_deadline()
        self._nodes += 1

        alpha_orig = alpha
        key = state.position_key()
        entry = self._tt.get(key)
        tt_move = entry.best_move if entry is not None else None

        if entry is not None and entry.depth >= depth:
            tt_score = _score_from_tt(entry.score, ply)
            if entry.bound == _TT_EXACT:
                return tt_score
            if entry.bound == _TT_LOWER and tt_score >= beta:
                return tt_score
            if entry.bound == _TT_UPPER and tt_score <= alpha:
                return tt_score

        if depth <= 0:
            return self._quiescence(state, alpha, beta, ply, self._quiescence_depth)

        gen = MoveGenerator(state)
        legal = gen.generate_legal_moves()
        in_check = gen.is_in_check(state.turn)
        if not legal:
            return -(MATE_SCORE - ply) if in_check else 0

        if (
            allow_null
            and self.null_move_enabled
            and depth >= _NULL_MOVE_MIN_DEPTH
            and not in_check
            and _has_non_pawn_material(state, state.turn)
            and self._null_move_fails_high(state, depth, beta, ply)
        ):
            return beta

        side = state.turn
        best_score = -_INF_SCORE
        best_move: Move | None = None

        for index, move in enumerate(self._order_moves(state, legal, tt_move, ply)):
            with state.applied(move):
                if (
                    self.lmr_enabled
                    and index >= _LMR_MIN_MOVE_INDEX
                    and depth >= _LMR_MIN_DEPTH
                    and not move.is_capture
                    and not MoveGenerator(state).is_in_check(state.turn)
                ):
                    score = self._reduced_search(state, depth, alpha, beta, ply)
                else:
                    score = -self._search(state, depth - 1, -beta, -alpha, ply + 1)

            if score > best_score:
                best_score = score
                best_move = move
            if score > alpha:
                alpha = score
            if alpha >= beta:
                if not move.is_capture:
                    self._record_killer(move, ply)
                    self._update_history(side, move, depth)
                break

        if best_score <= alpha_orig:
            bound = _TT_UPPER
        elif best_score >= beta:
            bound = _TT_LOWER
        else:
            bound = _TT_EXACT
        self._store_tt(key, depth, _score_to_tt(best_score, ply), bound, best_move)
        return best_score

    def _null_move_fails_high(
        self, state: GameState, depth: int, beta: int, ply: int
    ) -> bool:
        """Pass the turn; does a reduced null-window search still beat *beta*?"""
        state.make_null_move()
        try:
            score = -self._search(
                state,
                depth - _NULL_MOVE_REDUCTION,
                -beta,
                -beta + 1,
                ply + 1,
                allow_null=False,
            )
        finally:
            state.unmake_null_move()
        return score >= beta

    def _reduced_search(
        self, state: GameState, depth: int, alpha: int, beta: int, ply: int
    ) -> int:
        """Late move: null-window search at reduced depth, full re-search if it beats alpha."""
        score = -self._search(
            state, depth - _LMR_REDUCTION, -alpha - 1, -alpha, ply + 1
        )
        if score > alpha:
            score = -self._search(state, depth - 1, -beta, -alpha, ply + 1)
        return score

    def _quiescence(
        self,
        state: GameState,
        alpha: int,
        beta: int,
        ply: int,
        depth_left: int,
    ) -> int:
        self._check_deadline()
        self._nodes += 1

        gen = MoveGenerator(state)
        legal = gen.generate_legal_moves()
        in_check = gen.is_in_check(state.turn)
        if not legal:
            return -(MATE_SCORE - ply) if in_check else 0

        stand_pat = self._evaluator.evaluate_position(state, gen)
        if depth_left <= 0:
            return stand_pat

        if in_check:
            candidates = legal
        else:
            if stand_pat >= beta:
                return beta
            if stand_pat > alpha:
                alpha = stand_pat
            candidates = [m for m in legal if self._is_noisy(state, m)]

        for move in self._order_moves(state, candidates, None, ply):
            with state.applied(move):
                score = -self._quiescence(state, -beta, -alpha, ply + 1, depth_left - 1)
            if score >= beta:
                return beta
            if score > alpha:
                alpha = score

        return alpha

    def _is_noisy(self, state: GameState, move: Move) -> bool:
        """Captures, and quiet moves that give check."""
        if move.is_capture:
            return True
        with state.applied(move):
            return MoveGenerator(state).is_in_check(state.turn)

    def _check_deadline(self) -> None:
        if self._nodes - self._last_yield_nodes >= _YIELD_EVERY_NODES:
            self._last_yield_nodes = self._nodes
            sleep(0.001)
        if self._deadline is not None and perf_counter() >= self._deadline:
            raise _SearchTimeout

    # ── Move ordering ───────────────────────────────────────────────────

    def _order_moves(
        self,
        state: GameState,
        moves: list[Move],
        tt_move: Move | None,
        ply: int,
    ) -> list[Move]:
        tt_key = tt_move.key if tt_move is not None else None
        side = state.turn
        return sorted(
            moves,
            key=lambda move: self._move_order_score(move, side, tt_key, ply),
            reverse=True,
        )

    def _move_order_score(
        self,
        move: Move,
        side: Color,
        tt_key: MoveKey | None,
        ply: int,
    ) -> int:
        score = 0
        if tt_key is not None and move.key == tt_key:
            score += _TT_MOVE_BONUS

        piece_type = move.piece.piece_type
        if move.captured is not None:
            score += (
                _CAPTURE_BASE
                + 10 * _ORDER_VALUES[move.captured.piece_type]
                - _ORDER_VALUES[piece_type]
            )
        else:
            if ply < _MAX_KILLER_PLY and move.key in self._killer_moves[ply]:
                score += _KILLER_BONUS
            score += self._history_scores[side][move.from_sq][move.to_sq]

        if move.promotion is not None:
            score += _PROMOTION_BONUS
        if move.is_castling:
            score += _CASTLING_BONUS
        if piece_type in _MINOR_PIECES:
            to_row, to_col = row_of(move.to_sq), col_of(move.to_sq)
            if 2 <= to_row <= 5 and 2 <= to_col <= 5:
                score += _CENTRAL_MINOR_BONUS
            if row_of(move.from_sq) == side.back_row:
                score += _DEVELOPMENT_BONUS
        return score

    # ── Caches ──────────────────────────────────────────────────────────

    def _store_tt(
        self,
        key: str,
        depth: int,
        score: int,
        bound: int,
        best_move: Move | None,
    ) -> None:
        existing = self._tt.get(key)
        if existing is not None and existing.depth > depth:
            return
        if len(self._tt) >= self._tt_max_entries and key not in self._tt:
            self._tt.clear()
        self._tt[key] = _TTEntry(depth, score, bound, best_move)

    def _reset_move_order_heuristics(self) -> None:
        self._killer_moves = [[None, None] for _ in range(_MAX_KILLER_PLY)]
        self._history_scores = [
            [[0 for _ in range(64)] for _ in range(64)] for _ in range(2)
        ]

    def _record_killer(self, move: Move, ply: int) -> None:
        if ply >= _MAX_KILLER_PLY:
            return
        killers = self._killer_moves[ply]
        if killers[0] == move.key:
            return
        killers[1] = killers[0]
        killers[0] = move.key

    def _update_history(self, side: Color, move: Move, depth: int) -> None:
        side_scores = self._history_scores[side]
        current = side_scores[move.from_sq][move.to_sq]
        side_scores[move.from_sq][move.to_sq] = min(
            _HISTORY_MAX_SCORE, current + depth * depth
        )


def _has_non_pawn_material(state: GameState, side: Color) -> bool:
    for _sq, piece in state.board.occupied(side):
        if piece.piece_type not in (PieceType.KING, PieceType.PAWN):
            return True
    return False


def _elapsed_ms(start: float) -> int:
    return int((perf_counter() - start) * 1000)


def _score_to_tt(score: int, ply: int) -> int:
    """Mate scores are stored as distance from the node, not from the root."""
    if score > FORCED_MATE_THRESHOLD:
        return score + ply
    if score < -FORCED_MATE_THRESHOLD:
        return score - ply
    return score


def _score_from_tt(score: int, ply: int) -> int:
    if score > FORCED_MATE_THRESHOLD:
        return score - ply
    if score < -FORCED_MATE_THRESHOLD:
        return score + ply
    return score
