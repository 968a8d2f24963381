"""Zobrist hashing keys for incremental position hashing."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from chesscore.core.enums import CastlingRights, Color, PieceType
from chesscore.core.move import (
    CASTLING_ROOK_SQUARES,
    ValidatedMove,
    castling_rights_after,
    en_passant_target_after,
)
from chesscore.core.piece import Piece
from chesscore.core.types import Square

if TYPE_CHECKING:
    from chesscore.core.position import Position

_SEED: Final = 0xA5B3C7D9E1F23412
_MASK_64: Final = 0xFFFFFFFFFFFFFFFF


def _splitmix64(state: int) -> int:
    """Deterministic 64-bit bit-mixer suitable for static key generation."""
    z = (state + 0x9E3779B97F4A7C15) & _MASK_64
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & _MASK_64
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & _MASK_64
    return z ^ (z >> 31)


def _nth_key(index: int) -> int:
    return _splitmix64(_SEED + index)


_PIECE_KEYS: Final = tuple(
    tuple(
        tuple(_nth_key((color * 384) + (ptype * 64) + sq) for sq in range(64))
        for ptype in range(6)
    )
    for color in range(2)
)
_SIDE_TO_MOVE_KEY: Final = _nth_key(2 * 6 * 64)
_CASTLING_KEYS: Final = tuple(_nth_key((2 * 6 * 64) + 1 + idx) for idx in range(16))
_EN_PASSANT_KEYS: Final = tuple(
    _nth_key((2 * 6 * 64) + 1 + 16 + idx) for idx in range(64)
)


def piece_key(piece: Piece, sq: Square) -> int:
    """Hash key for a specific piece on a square."""
    return _PIECE_KEYS[int(piece.color)][int(piece.piece_type) - 1][sq]


def castling_key(castling: CastlingRights) -> int:
    """Hash key for castling rights state."""
    return _CASTLING_KEYS[int(castling) & 0xF]


def en_passant_key(ep_square: Square) -> int:
    """Hash key for an en passant target square."""
    return _EN_PASSANT_KEYS[ep_square]


def compute_hash(position: Position) -> int:
    """Fold every key of *position* from scratch."""
    key = castling_key(position.castling)
    if position.side_to_move == Color.BLACK:
        key ^= _SIDE_TO_MOVE_KEY
    if position.en_passant is not None:
        key ^= en_passant_key(position.en_passant)

    for sq, piece in enumerate(position.board):
        if piece is not None:
            key ^= piece_key(piece, sq)
    return key


def move_delta(
    move: ValidatedMove,
    castling_before: CastlingRights,
    castling_after: CastlingRights,
    en_passant_before: Square | None,
    en_passant_after: Square | None,
) -> int:
    """XOR delta turning the hash before *move* into the hash after it.

    Applying a key twice removes it, so lifting a piece and placing it are
    the same operation.
    """
    piece = move.piece
    delta = piece_key(piece, move.from_sq)

    captured_sq = move.capture_square
    if move.captured is not None and captured_sq is not None:
        delta ^= piece_key(move.captured, captured_sq)

    placed = piece
    if move.promotion is not None:
        placed = Piece(piece.color, move.promotion)
    delta ^= piece_key(placed, move.to_sq)

    if move.is_castling:
        rook_from, rook_to = CASTLING_ROOK_SQUARES[move.to_sq]
        rook = Piece(piece.color, PieceType.ROOK)
        delta ^= piece_key(rook, rook_from) ^ piece_key(rook, rook_to)

    if castling_before != castling_after:
        delta ^= castling_key(castling_before) ^ castling_key(castling_after)
    if en_passant_before is not None:
        delta ^= en_passant_key(en_passant_before)
    if en_passant_after is not None:
        delta ^= en_passant_key(en_passant_after)

    return delta ^ _SIDE_TO_MOVE_KEY


def update_hash(position: Position, move: ValidatedMove) -> int:
    """Hash of the position reached by *move*, derived by XOR deltas only."""
    castling_after = castling_rights_after(position.castling, move)
    en_passant_after = en_passant_target_after(move)
    assert position.zobrist_hash is not None
    return position.zobrist_hash ^ move_delta(
        move,
        position.castling,
        castling_after,
        position.en_passant,
        en_passant_after,
    )
