"""Chess engine package: evaluation, transposition cache and minimax search."""

from chesscore.engine.evaluation import MATE_SCORE, EvalConfig, evaluate
from chesscore.engine.minimax import MinimaxSearchEngine, find_best_move
from chesscore.engine.search import IEngine, SearchConfig, SearchResult
from chesscore.engine.transposition import Bound, CacheEntry, TranspositionCache

__all__ = [
    "MATE_SCORE",
    "Bound",
    "CacheEntry",
    "EvalConfig",
    "IEngine",
    "MinimaxSearchEngine",
    "SearchConfig",
    "SearchResult",
    "TranspositionCache",
    "evaluate",
    "find_best_move",
]
