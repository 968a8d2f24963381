"""Square indices and coordinate helpers.

Squares are plain ints laid out rank by rank from White's side::

    a1=0  b1=1  ... h1=7
    a2=8  ...       h2=15
    ...
    a8=56 ...       h8=63

so ``file = sq & 7`` and ``rank = sq >> 3``.
"""

from __future__ import annotations

from typing import TypeAlias

from chesscore.core.errors import ErrorKind, ParseError

Square: TypeAlias = int  # 0–63

FILE_NAMES = "abcdefgh"
RANK_NAMES = "12345678"

_NAME_TO_SQUARE: dict[str, Square] = {
    f + r: ri * 8 + fi
    for ri, r in enumerate(RANK_NAMES)
    for fi, f in enumerate(FILE_NAMES)
}


def file_of(sq: Square) -> int:
    return sq & 7


def rank_of(sq: Square) -> int:
    return sq >> 3


def make_square(file: int, rank: int) -> Square:
    """Square index for zero-based *file* and *rank* (no bounds check)."""
    return (rank << 3) | file


def try_make_square(file: int, rank: int) -> Square | None:
    """Bounds-checked :func:`make_square`; ``None`` when off the board."""
    if file & ~7 or rank & ~7:
        return None
    return (rank << 3) | file


def is_valid_square(sq: int) -> bool:
    return 0 <= sq < 64


def is_light_square(sq: Square) -> bool:
    """a1 is dark, h1 is light."""
    return (file_of(sq) + rank_of(sq)) % 2 == 1


def mirror_square(sq: Square) -> Square:
    """Same file, opposite rank (e2 <-> e7)."""
    return sq ^ 56


def square_name(sq: Square) -> str:
    return FILE_NAMES[file_of(sq)] + RANK_NAMES[rank_of(sq)]


def parse_square(name: str) -> Square:
    """Square index for a lowercase algebraic name such as ``"e4"``.

    Raises:
        ParseError: (kind ``SQUARE_OUT_OF_RANGE``) for anything else.
    """
    try:
        return _NAME_TO_SQUARE[name]
    except KeyError:
        raise ParseError(
            ErrorKind.SQUARE_OUT_OF_RANGE, f"Invalid square name: {name!r}"
        ) from None


# ── Named square constants ──────────────────────────────────────────────────

A1, B1, C1, D1, E1, F1, G1, H1 = range(0, 8)
A2, B2, C2, D2, E2, F2, G2, H2 = range(8, 16)
A3, B3, C3, D3, E3, F3, G3, H3 = range(16, 24)
A4, B4, C4, D4, E4, F4, G4, H4 = range(24, 32)
A5, B5, C5, D5, E5, F5, G5, H5 = range(32, 40)
A6, B6, C6, D6, E6, F6, G6, H6 = range(40, 48)
A7, B7, C7, D7, E7, F7, G7, H7 = range(48, 56)
A8, B8, C8, D8, E8, F8, G8, H8 = range(56, 64)
