"""Attack tables for leapers and ray-cast attacks for sliders.

Masks are plain ``int`` bitboards; :class:`SquareSet` wraps them only at
the :class:`Position` boundary.
"""

from __future__ import annotations

from chesscore.core.enums import PieceType
from chesscore.core.piece import Piece
from chesscore.core.types import Square, file_of, rank_of, try_make_square

KNIGHT_OFFSETS: tuple[tuple[int, int], ...] = tuple(
    (df, dr) for df in (-2, -1, 1, 2) for dr in (-2, -1, 1, 2) if abs(df) != abs(dr)
)
KING_OFFSETS: tuple[tuple[int, int], ...] = tuple(
    (df, dr) for df in (-1, 0, 1) for dr in (-1, 0, 1) if df or dr
)

BISHOP_DIRS: tuple[tuple[int, int], ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
ROOK_DIRS: tuple[tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


# -- Precomputed lookup tables ---------------------------------------------


def _build_attack_masks(offsets: tuple[tuple[int, int], ...]) -> tuple[int, ...]:
    masks: list[int] = []
    for sq in range(64):
        mask = 0
        for df, dr in offsets:
            target = try_make_square(file_of(sq) + df, rank_of(sq) + dr)
            if target is not None:
                mask |= 1 << target
        masks.append(mask)
    return tuple(masks)


def _walk(sq: Square, df: int, dr: int) -> tuple[Square, ...]:
    """Squares from *sq* (exclusive) to the board edge in one direction."""
    ray: list[Square] = []
    target = try_make_square(file_of(sq) + df, rank_of(sq) + dr)
    while target is not None:
        ray.append(target)
        target = try_make_square(file_of(target) + df, rank_of(target) + dr)
    return tuple(ray)


def _build_rays(
    directions: tuple[tuple[int, int], ...],
) -> tuple[tuple[tuple[Square, ...], ...], ...]:
    return tuple(
        tuple(_walk(sq, df, dr) for df, dr in directions) for sq in range(64)
    )


KNIGHT_ATTACKS = _build_attack_masks(KNIGHT_OFFSETS)
KING_ATTACKS = _build_attack_masks(KING_OFFSETS)
# Indexed by Color: squares a pawn standing on each square attacks.
PAWN_ATTACKS = (
    _build_attack_masks(((-1, 1), (1, 1))),
    _build_attack_masks(((-1, -1), (1, -1))),
)

BISHOP_RAYS = _build_rays(BISHOP_DIRS)
ROOK_RAYS = _build_rays(ROOK_DIRS)


# -- Sliding attacks ---------------------------------------------------------


def _cast_rays(rays: tuple[tuple[Square, ...], ...], occupied: int) -> int:
    attacks = 0
    for ray in rays:
        for to_sq in ray:
            attacks |= 1 << to_sq
            if occupied >> to_sq & 1:
                break
    return attacks


def bishop_attacks(sq: Square, occupied: int) -> int:
    """Diagonal attacks from *sq*; each ray stops on (and includes) a blocker."""
    return _cast_rays(BISHOP_RAYS[sq], occupied)


def rook_attacks(sq: Square, occupied: int) -> int:
    return _cast_rays(ROOK_RAYS[sq], occupied)


def queen_attacks(sq: Square, occupied: int) -> int:
    return bishop_attacks(sq, occupied) | rook_attacks(sq, occupied)


def attacks_from(piece: Piece, sq: Square, occupied: int) -> int:
    """Attack mask of *piece* standing on *sq* given total occupancy."""
    ptype = piece.piece_type
    if ptype == PieceType.PAWN:
        return PAWN_ATTACKS[int(piece.color)][sq]
    if ptype == PieceType.KNIGHT:
        return KNIGHT_ATTACKS[sq]
    if ptype == PieceType.BISHOP:
        return bishop_attacks(sq, occupied)
    if ptype == PieceType.ROOK:
        return rook_attacks(sq, occupied)
    if ptype == PieceType.QUEEN:
        return queen_attacks(sq, occupied)
    return KING_ATTACKS[sq]


# -- Geometry helpers --------------------------------------------------------


def _build_between() -> dict[tuple[Square, Square], int]:
    between: dict[tuple[Square, Square], int] = {}
    for sq in range(64):
        for ray in BISHOP_RAYS[sq] + ROOK_RAYS[sq]:
            mask = 0
            for to_sq in ray:
                between[(sq, to_sq)] = mask
                mask |= 1 << to_sq
    return between


_BETWEEN = _build_between()


def squares_between(a: Square, b: Square) -> int:
    """Mask of squares strictly between two aligned squares (0 otherwise)."""
    return _BETWEEN.get((a, b), 0)


def is_aligned(a: Square, b: Square) -> bool:
    """Whether *a* and *b* share a rank, file or diagonal."""
    return (a, b) in _BETWEEN
