"""Thread-safe transposition cache keyed by Zobrist hash."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import IntEnum

from chesscore.core.move import MoveIntent

_LOGGER = logging.getLogger(__name__)


class Bound(IntEnum):
    """How a stored score relates to the true minimax value."""

    EXACT = 0
    LOWER = 1
    UPPER = 2


@dataclass(frozen=True, slots=True)
class CacheEntry:
    score: int
    depth: int
    bound: Bound
    best_move: MoveIntent | None = None

    def usable(self, depth: int, alpha: int, beta: int) -> bool:
        """Can this entry stand in for a search of *depth* in ``[alpha, beta]``?"""
        if self.depth < depth:
            return False
        if self.bound == Bound.EXACT:
            return True
        if self.bound == Bound.LOWER:
            return self.score >= beta
        return self.score <= alpha


def bound_for(score: int, alpha: int, beta: int) -> Bound:
    """Classify a node result against the window it was searched with."""
    if score <= alpha:
        return Bound.UPPER
    if score >= beta:
        return Bound.LOWER
    return Bound.EXACT


class TranspositionCache:
    """Dictionary of :class:`CacheEntry` guarded by a single lock.

    Each of :meth:`get`, :meth:`put`, :meth:`probe`, :meth:`clear` and
    :meth:`size` is atomic. There is no eviction: once ``max_entries`` keys
    are stored, new keys are dropped while existing keys can still be
    refreshed by results of equal or greater depth.
    """

    __slots__ = ("_entries", "_lock", "_max_entries", "_full_logged")

    def __init__(self, max_entries: int = 1_000_000) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._entries: dict[int, CacheEntry] = {}
        self._lock = threading.Lock()
        self._max_entries = max_entries
        self._full_logged = False

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def get(self, key: int) -> CacheEntry | None:
        with self._lock:
            return self._entries.get(key)

    def probe(self, key: int, depth: int, alpha: int, beta: int) -> CacheEntry | None:
        """Entry for *key* if it is usable at *depth* within ``[alpha, beta]``."""
        with self._lock:
            entry = self._entries.get(key)
        if entry is not None and entry.usable(depth, alpha, beta):
            return entry
        return None

    def put(self, key: int, entry: CacheEntry) -> bool:
        """Store *entry*; returns whether the table changed."""
        with self._lock:
            existing = self._entries.get(key)
            if existing is not None:
                if entry.depth < existing.depth:
                    return False
                self._entries[key] = entry
                return True
            if len(self._entries) >= self._max_entries:
                if not self._full_logged:
                    self._full_logged = True
                    _LOGGER.debug(
                        "Transposition cache full at %d entries; new keys dropped",
                        self._max_entries,
                    )
                return False
            self._entries[key] = entry
            return True

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._full_logged = False

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries
