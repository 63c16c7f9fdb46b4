"""Shared engine search models and protocol."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from rookery.core.move import Move
    from rookery.core.state import GameState


@dataclass(slots=True, frozen=True)
class SearchLimits:
    """Search constraints for a single move computation."""

    max_depth: int = 3
    time_limit_ms: int | None = 5000


@dataclass(slots=True, frozen=True)
class RootCandidate:
    """A root move with the score of the last completed iteration."""

    move: Move
    score_cp: int


@dataclass(slots=True, frozen=True)
class SearchResult:
    """Result produced by the engine search.

    ``score_cp`` is from the side to move's point of view. ``error`` is set
    when the search failed; ``best_move`` then holds the move of the last
    completed depth, if any.
    """

    best_move: Move | None
    score_cp: int
    depth: int
    nodes: int
    elapsed_ms: int = 0
    error: str | None = None
    candidates: tuple[RootCandidate, ...] = field(default=())


class IEngine(Protocol):
    """Protocol for chess engines used by the bot and game layer."""

    def search(self, state: GameState, limits: SearchLimits) -> SearchResult: ...

    def clear(self) -> None: ...
