"""Shared engine search models and protocol."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from chesscore.core.move import MoveIntent
    from chesscore.core.position import Position


@dataclass(slots=True, frozen=True)
class SearchConfig:
    """Search constraints for a single move computation."""

    max_depth: int = 3
    use_alpha_beta: bool = True
    quiescence_depth: int = 2
    use_transposition_table: bool = True
    table_size: int = 1_000_000
    max_workers: int | None = None

    def validate(self) -> None:
        """Raise :class:`ValueError` for settings no search can honour."""
        if self.max_depth < 1:
            raise ValueError("Search depth must be >= 1")
        if self.quiescence_depth < 0:
            raise ValueError("Quiescence depth must be >= 0")
        if self.table_size < 1:
            raise ValueError("Transposition table size must be >= 1")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError("max_workers must be >= 1 when set")


@dataclass(slots=True, frozen=True)
class SearchResult:
    """Result produced by the engine search."""

    best_move: MoveIntent | None
    score_cp: int
    depth: int
    nodes: int


class IEngine(Protocol):
    """Protocol for chess engines driven by a caller-supplied position."""

    def search(
        self,
        position: Position,
        config: SearchConfig | None = None,
    ) -> SearchResult: ...
