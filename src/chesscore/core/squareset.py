"""SquareSet: a 64-bit bitboard value type."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import ClassVar

from chesscore.core.types import Square, make_square

_MASK_64 = 0xFFFFFFFFFFFFFFFF


@dataclass(frozen=True, slots=True)
class SquareSet:
    """Immutable set of squares backed by a single 64-bit integer.

    Bit *n* is set when square *n* is a member. All operators return new
    values; the underlying mask never has bits above 63.
    """

    mask: int = 0

    EMPTY: ClassVar[SquareSet]
    FULL: ClassVar[SquareSet]

    def __post_init__(self) -> None:
        if self.mask & ~_MASK_64:
            raise ValueError(f"SquareSet mask out of 64-bit range: {self.mask:#x}")

    @classmethod
    def from_squares(cls, squares: Iterable[Square]) -> SquareSet:
        mask = 0
        for sq in squares:
            mask |= 1 << sq
        return cls(mask)

    # ── Membership ───────────────────────────────────────────────────────

    def __contains__(self, sq: object) -> bool:
        if not isinstance(sq, int) or not 0 <= sq < 64:
            return False
        return bool(self.mask >> sq & 1)

    def add(self, sq: Square) -> SquareSet:
        return SquareSet(self.mask | (1 << sq))

    def remove(self, sq: Square) -> SquareSet:
        return SquareSet(self.mask & ~(1 << sq))

    def toggle(self, sq: Square) -> SquareSet:
        return SquareSet(self.mask ^ (1 << sq))

    # ── Set algebra ──────────────────────────────────────────────────────

    def __or__(self, other: SquareSet) -> SquareSet:
        return SquareSet(self.mask | other.mask)

    def __and__(self, other: SquareSet) -> SquareSet:
        return SquareSet(self.mask & other.mask)

    def __sub__(self, other: SquareSet) -> SquareSet:
        return SquareSet(self.mask & ~other.mask)

    def __xor__(self, other: SquareSet) -> SquareSet:
        return SquareSet(self.mask ^ other.mask)

    def __invert__(self) -> SquareSet:
        return SquareSet(~self.mask & _MASK_64)

    union = __or__
    intersection = __and__
    difference = __sub__

    def complement(self) -> SquareSet:
        return ~self

    # ── Size / iteration ─────────────────────────────────────────────────

    def __bool__(self) -> bool:
        return self.mask != 0

    def __len__(self) -> int:
        return self.mask.bit_count()

    def count(self) -> int:
        return self.mask.bit_count()

    def __iter__(self) -> Iterator[Square]:
        mask = self.mask
        while mask:
            lsb = mask & -mask
            yield lsb.bit_length() - 1
            mask ^= lsb

    def squares(self) -> list[Square]:
        """Members in ascending square order."""
        return list(self)

    def __repr__(self) -> str:
        return f"SquareSet({self.mask:#018x})"

    def __str__(self) -> str:
        rows: list[str] = []
        for rank in range(7, -1, -1):
            rows.append(
                " ".join(
                    "1" if make_square(file, rank) in self else "."
                    for file in range(8)
                )
            )
        return "\n".join(rows)


SquareSet.EMPTY = SquareSet(0)
SquareSet.FULL = SquareSet(_MASK_64)
