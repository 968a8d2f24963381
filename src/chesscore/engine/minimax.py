"""Minimax search with alpha-beta pruning, quiescence and a shared cache.

Scores are White-relative throughout: White maximises, Black minimises.
Root moves are searched concurrently, one task per move, and share one
:class:`TranspositionCache`; positions themselves are immutable.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from time import perf_counter

from chesscore.core.enums import Color, PieceType
from chesscore.core.errors import InvariantViolation
from chesscore.core.move import MoveIntent
from chesscore.core.move_generator import generate_captures, generate_legal_moves
from chesscore.core.position import Position
from chesscore.core.transition import apply_move
from chesscore.core.validation import validate_move
from chesscore.engine.evaluation import DEFAULT_EVAL_CONFIG, EvalConfig, evaluate
from chesscore.engine.search import IEngine, SearchConfig, SearchResult
from chesscore.engine.transposition import CacheEntry, TranspositionCache, bound_for

_LOGGER = logging.getLogger(__name__)

_INF_SCORE = 1_000_000


@dataclass(slots=True)
class _SearchContext:
    """Per-task state; only ``cache`` is shared between tasks."""

    config: SearchConfig
    eval_config: EvalConfig
    cache: TranspositionCache | None
    nodes: int = 0


def successor(position: Position, intent: MoveIntent) -> Position:
    """Validate and apply a generated move.

    A generated move that fails validation means the generator and the
    validator disagree, which is a bug rather than a rule violation.
    """
    result = validate_move(position, intent)
    if not result.ok:
        raise InvariantViolation(
            f"generated move {intent} rejected by validator: {result.errors!r}"
        )
    child, _ = apply_move(position, result.unwrap())
    return child


def _move_order_key(position: Position, move: MoveIntent) -> tuple[int, int]:
    """Captures first, most valuable victim then least valuable attacker."""
    board = position.board
    attacker = board[move.from_sq]
    victim = board[move.to_sq]
    if (
        victim is None
        and attacker is not None
        and attacker.piece_type == PieceType.PAWN
        and move.to_sq == position.en_passant
    ):
        return (0, -(10 * PieceType.PAWN.value_cp - PieceType.PAWN.value_cp))
    if victim is None or attacker is None:
        return (1, 0)
    return (0, -(10 * victim.value_cp - attacker.value_cp))


def order_moves(
    position: Position,
    moves: list[MoveIntent],
    first: MoveIntent | None = None,
) -> list[MoveIntent]:
    """Stable MVV-LVA ordering; *first* (a cached best move) leads if present."""
    ordered = sorted(moves, key=lambda move: _move_order_key(position, move))
    if first is not None and first in ordered:
        ordered.remove(first)
        ordered.insert(0, first)
    return ordered


class MinimaxSearchEngine(IEngine):
    """Fixed-depth minimax searcher with quiescence and a transposition cache."""

    __slots__ = ("_config", "_eval_config", "_cache")

    def __init__(
        self,
        config: SearchConfig | None = None,
        eval_config: EvalConfig | None = None,
    ) -> None:
        self._config = config or SearchConfig()
        self._eval_config = eval_config or DEFAULT_EVAL_CONFIG
        self._cache: TranspositionCache | None = None

    @property
    def cache(self) -> TranspositionCache | None:
        return self._cache

    def search(
        self,
        position: Position,
        config: SearchConfig | None = None,
    ) -> SearchResult:
        """Best root move for *position*; scores are White-relative.

        Root moves are searched in parallel and gathered in generator order.
        With the transposition table on, root subtrees share one cache, so
        at larger depths a transposition may pick up a deeper entry stored
        by another worker and the score can vary with thread timing. With
        the table off the result does not depend on ``max_workers``.
        """
        config = config or self._config
        config.validate()
        started = perf_counter()

        root_moves = generate_legal_moves(position)
        if not root_moves:
            score = evaluate(position, self._eval_config)
            _LOGGER.info("No legal moves at root; static score %d", score)
            return SearchResult(None, score, 0, 1)

        cache = self._prepare_cache(config)
        maximizing = position.side_to_move == Color.WHITE
        children = [successor(position, move) for move in root_moves]
        contexts = [
            _SearchContext(config, self._eval_config, cache) for _ in root_moves
        ]

        workers = min(config.max_workers or os.cpu_count() or 1, len(root_moves))
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="chesscore-search"
        ) as pool:
            futures = [
                pool.submit(
                    self._minimax,
                    ctx,
                    child,
                    config.max_depth - 1,
                    -_INF_SCORE,
                    _INF_SCORE,
                    not maximizing,
                )
                for ctx, child in zip(contexts, children)
            ]
            scores = [future.result() for future in futures]

        best_index = 0
        for index, score in enumerate(scores):
            _LOGGER.debug("Root move %s scored %d", root_moves[index], score)
            if maximizing and score > scores[best_index]:
                best_index = index
            elif not maximizing and score < scores[best_index]:
                best_index = index

        nodes = 1 + sum(ctx.nodes for ctx in contexts)
        best_move = root_moves[best_index]
        best_score = scores[best_index]
        _LOGGER.info(
            "Searched depth %d: best %s score %d, %d nodes in %.3fs",
            config.max_depth,
            best_move,
            best_score,
            nodes,
            perf_counter() - started,
        )
        return SearchResult(best_move, best_score, config.max_depth, nodes)

    def _prepare_cache(self, config: SearchConfig) -> TranspositionCache | None:
        if not config.use_transposition_table:
            return None
        if self._cache is None or self._cache.max_entries != config.table_size:
            self._cache = TranspositionCache(config.table_size)
        else:
            self._cache.clear()
        return self._cache

    def _minimax(
        self,
        ctx: _SearchContext,
        position: Position,
        depth: int,
        alpha: int,
        beta: int,
        maximizing: bool,
    ) -> int:
        if depth <= 0:
            return self._quiescence(
                ctx, position, ctx.config.quiescence_depth, alpha, beta, maximizing
            )

        ctx.nodes += 1
        key = position.zobrist_hash
        assert key is not None
        cached_move: MoveIntent | None = None
        if ctx.cache is not None:
            entry = ctx.cache.get(key)
            if entry is not None:
                if entry.usable(depth, alpha, beta):
                    return entry.score
                cached_move = entry.best_move

        legal = generate_legal_moves(position)
        if not legal:
            return evaluate(position, ctx.eval_config)

        use_alpha_beta = ctx.config.use_alpha_beta
        alpha_orig, beta_orig = alpha, beta
        best_score = -_INF_SCORE if maximizing else _INF_SCORE
        best_move: MoveIntent | None = None

        for move in order_moves(position, legal, cached_move):
            score = self._minimax(
                ctx, successor(position, move), depth - 1, alpha, beta, not maximizing
            )
            if maximizing:
                if score > best_score:
                    best_score, best_move = score, move
                if use_alpha_beta:
                    alpha = max(alpha, best_score)
            else:
                if score < best_score:
                    best_score, best_move = score, move
                if use_alpha_beta:
                    beta = min(beta, best_score)
            if use_alpha_beta and alpha >= beta:
                break

        if ctx.cache is not None:
            ctx.cache.put(
                key,
                CacheEntry(
                    score=best_score,
                    depth=depth,
                    bound=bound_for(best_score, alpha_orig, beta_orig),
                    best_move=best_move,
                ),
            )
        return best_score

    def _quiescence(
        self,
        ctx: _SearchContext,
        position: Position,
        q_depth: int,
        alpha: int,
        beta: int,
        maximizing: bool,
    ) -> int:
        ctx.nodes += 1
        stand_pat = evaluate(position, ctx.eval_config)
        if q_depth <= 0:
            return stand_pat

        captures = generate_captures(position)
        if not captures:
            return stand_pat

        use_alpha_beta = ctx.config.use_alpha_beta
        best_score = stand_pat
        if use_alpha_beta:
            if maximizing:
                if stand_pat >= beta:
                    return stand_pat
                alpha = max(alpha, stand_pat)
            else:
                if stand_pat <= alpha:
                    return stand_pat
                beta = min(beta, stand_pat)

        for move in order_moves(position, captures):
            score = self._quiescence(
                ctx, successor(position, move), q_depth - 1, alpha, beta, not maximizing
            )
            if maximizing:
                best_score = max(best_score, score)
                if use_alpha_beta:
                    alpha = max(alpha, best_score)
            else:
                best_score = min(best_score, score)
                if use_alpha_beta:
                    beta = min(beta, best_score)
            if use_alpha_beta and alpha >= beta:
                break
        return best_score


def find_best_move(
    position: Position,
    config: SearchConfig | None = None,
    eval_config: EvalConfig | None = None,
) -> SearchResult:
    """One-shot search with a fresh engine."""
    return MinimaxSearchEngine(config, eval_config).search(position)
