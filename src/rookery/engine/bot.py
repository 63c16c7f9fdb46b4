"""ChessBot — difficulty policy wrapped around the alpha-beta engine."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, replace
from time import perf_counter

from rookery.core.enums import Color, PieceType
from rookery.core.move import Move
from rookery.core.move_generator import MoveGenerator
from rookery.core.state import GameState
from rookery.core.types import col_of, row_of
from rookery.engine.alphabeta import AlphaBetaEngine
from rookery.engine.evaluation import MATE_SCORE, Evaluator
from rookery.engine.search import SearchLimits, SearchResult

_LOGGER = logging.getLogger(__name__)

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 10

_DEPTH_PER_LEVEL = 1.2
_MIN_SEARCH_DEPTH = 3
_BOOK_MIN_DIFFICULTY = 3
_BOOK_MAX_FULLMOVE = 10
_RANDOM_MOVE_MAX_DIFFICULTY = 2
_RANDOM_MOVE_CHANCE = 0.4
_SHUFFLE_MAX_DIFFICULTY = 6
_SHUFFLE_STEP = 0.06
_SHUFFLE_TOP_N = 5
_NULL_MOVE_MIN_DIFFICULTY = 6
_LMR_MIN_DIFFICULTY = 7


@dataclass(slots=True, frozen=True)
class BotConfig:
    """Tunables for a :class:`ChessBot`."""

    difficulty: int = 7
    time_budget_ms: int | None = 5000
    max_depth: int = 12
    quiescence_depth: int = 4
    tt_max_entries: int = 200_000


def clamp_difficulty(level: int) -> int:
    return max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, int(level)))


class ChessBot:
    """Chooses moves for one side, with strength set by a 1-10 difficulty.

    Each bot owns an :class:`AlphaBetaEngine` whose caches survive between
    moves. The random source is injectable so play can be reproduced.
    """

    __slots__ = ("_config", "_difficulty", "_engine", "_evaluator", "_rng")

    def __init__(
        self,
        config: BotConfig | None = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config if config is not None else BotConfig()
        self._rng = rng if rng is not None else random.Random()
        self._evaluator = Evaluator()
        self._engine = AlphaBetaEngine(
            self._evaluator,
            quiescence_depth=self._config.quiescence_depth,
            tt_max_entries=self._config.tt_max_entries,
        )
        self._difficulty = clamp_difficulty(self._config.difficulty)
        self._apply_pruning_gates()

    @property
    def config(self) -> BotConfig:
        return self._config

    @property
    def difficulty(self) -> int:
        return self._difficulty

    @property
    def engine(self) -> AlphaBetaEngine:
        return self._engine

    def set_difficulty(self, level: int) -> int:
        """Clamp and apply *level*; a change clears the engine caches."""
        level = clamp_difficulty(level)
        if level != self._difficulty:
            self._difficulty = level
            self._engine.clear()
            self._apply_pruning_gates()
        return level

    def reset(self) -> None:
        """Forget everything learned during the current game."""
        self._engine.clear()

    def search_depth(self) -> int:
        depth = max(_MIN_SEARCH_DEPTH, math.floor(self._difficulty * _DEPTH_PER_LEVEL))
        return min(self._config.max_depth, depth)

    def choose_move(
        self,
        state: GameState,
        difficulty: int | None = None,
        color: Color | None = None,
    ) -> SearchResult:
        """Pick a move for the side to move in *state*; *state* is not modified."""
        if difficulty is not None:
            self.set_difficulty(difficulty)
        if color is not None and color != state.turn:
            raise ValueError(f"It is {state.turn}'s turn, not {color}'s")

        start = perf_counter()
        try:
            result = self._choose(state.copy(), start)
        except Exception as exc:
            _LOGGER.exception("Bot failed to choose a move")
            return SearchResult(
                None, 0, 0, 0, _elapsed_ms(start), error=str(exc) or type(exc).__name__
            )

        _LOGGER.debug(
            "Bot (difficulty %d) chose %s: score=%d depth=%d nodes=%d time=%dms",
            self._difficulty,
            result.best_move,
            result.score_cp,
            result.depth,
            result.nodes,
            result.elapsed_ms,
        )
        return result

    # ── Policy ──────────────────────────────────────────────────────────

    def _choose(self, state: GameState, start: float) -> SearchResult:
        gen = MoveGenerator(state)
        legal = gen.generate_legal_moves()
        if not legal:
            score = -MATE_SCORE if gen.is_in_check(state.turn) else 0
            return SearchResult(None, score, 0, 0, _elapsed_ms(start))

        level = self._difficulty
        if level >= _BOOK_MIN_DIFFICULTY and state.fullmove_number <= _BOOK_MAX_FULLMOVE:
            book = opening_candidates(legal)
            if book:
                return self._quick_result(state, self._rng.choice(book), start)

        if level <= _RANDOM_MOVE_MAX_DIFFICULTY and self._rng.random() < _RANDOM_MOVE_CHANCE:
            return self._quick_result(state, self._rng.choice(legal), start)

        limits = SearchLimits(
            max_depth=self.search_depth(),
            time_limit_ms=self._config.time_budget_ms,
        )
        result = self._engine.search(state, limits)

        if (
            level <= _SHUFFLE_MAX_DIFFICULTY
            and result.candidates
            and self._rng.random() < (8 - level) * _SHUFFLE_STEP
        ):
            pick = self._rng.choice(result.candidates[:_SHUFFLE_TOP_N])
            result = replace(result, best_move=pick.move, score_cp=pick.score_cp)

        return replace(result, elapsed_ms=_elapsed_ms(start))

    def _quick_result(self, state: GameState, move: Move, start: float) -> SearchResult:
        score = self._evaluator.evaluate_position(state)
        return SearchResult(move, score, 0, 0, _elapsed_ms(start))

    def _apply_pruning_gates(self) -> None:
        self._engine.null_move_enabled = self._difficulty >= _NULL_MOVE_MIN_DIFFICULTY
        self._engine.lmr_enabled = self._difficulty >= _LMR_MIN_DIFFICULTY


def opening_candidates(legal: list[Move]) -> list[Move]:
    """Developing moves: d/e double pushes, minor pieces off the home rank, castling."""
    picks: list[Move] = []
    for move in legal:
        piece = move.piece
        match piece.piece_type:
            case PieceType.PAWN:
                if col_of(move.to_sq) in (3, 4) and move.en_passant_target is not None:
                    picks.append(move)
            case PieceType.KNIGHT | PieceType.BISHOP:
                if row_of(move.from_sq) == piece.color.back_row:
                    picks.append(move)
            case PieceType.KING:
                if move.is_castling:
                    picks.append(move)
    return picks


def _elapsed_ms(start: float) -> int:
    return int((perf_counter() - start) * 1000)
