"""Chess engine package: evaluation, search, bot policy and Qt worker bridge."""

from rookery.engine.alphabeta import AlphaBetaEngine
from rookery.engine.bot import BotConfig, ChessBot
from rookery.engine.evaluation import MATE_SCORE, Evaluator
from rookery.engine.search import IEngine, RootCandidate, SearchLimits, SearchResult

__all__ = [
    "MATE_SCORE",
    "AlphaBetaEngine",
    "BotConfig",
    "ChessBot",
    "Evaluator",
    "IEngine",
    "RootCandidate",
    "SearchLimits",
    "SearchResult",
]
