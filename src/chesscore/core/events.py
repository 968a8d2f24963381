"""Move events recorded in a position's history.

``MoveEvent`` is a closed union of four frozen records. Consumers match on
it and end with :func:`typing.assert_never` so a new variant fails type
checking and raises at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias, assert_never

from chesscore.core.enums import CastlingRights, CastlingSide, PieceType
from chesscore.core.piece import Piece
from chesscore.core.types import Square, square_name


@dataclass(frozen=True, slots=True)
class MoveExecuted:
    """A plain move or capture."""

    from_sq: Square
    to_sq: Square
    piece: Piece
    captured: Piece | None
    castling_before: CastlingRights
    en_passant_before: Square | None


@dataclass(frozen=True, slots=True)
class CastlingExecuted:
    king_from: Square
    king_to: Square
    rook_from: Square
    rook_to: Square
    side: CastlingSide


@dataclass(frozen=True, slots=True)
class EnPassantExecuted:
    pawn_from: Square
    pawn_to: Square
    captured_square: Square


@dataclass(frozen=True, slots=True)
class PromotionExecuted:
    from_sq: Square
    to_sq: Square
    promoted_to: PieceType
    captured: Piece | None


MoveEvent: TypeAlias = (
    MoveExecuted | CastlingExecuted | EnPassantExecuted | PromotionExecuted
)


def event_token(event: MoveEvent) -> str:
    """Coordinate token of the move that produced *event*."""
    match event:
        case MoveExecuted(from_sq=src, to_sq=dst):
            return square_name(src) + square_name(dst)
        case CastlingExecuted(king_from=src, king_to=dst):
            return square_name(src) + square_name(dst)
        case EnPassantExecuted(pawn_from=src, pawn_to=dst):
            return square_name(src) + square_name(dst)
        case PromotionExecuted(from_sq=src, to_sq=dst, promoted_to=kind):
            return square_name(src) + square_name(dst) + kind.symbol
        case _:
            assert_never(event)


def describe_event(event: MoveEvent) -> str:
    """One-line human description, e.g. ``'Nb1-c3'`` or ``'O-O (e1g1)'``."""
    match event:
        case MoveExecuted(from_sq=src, to_sq=dst, piece=piece, captured=captured):
            sep = "x" if captured is not None else "-"
            letter = "" if piece.piece_type == PieceType.PAWN else str(piece).upper()
            return f"{letter}{square_name(src)}{sep}{square_name(dst)}"
        case CastlingExecuted(side=side):
            castle = "O-O" if side == CastlingSide.KINGSIDE else "O-O-O"
            return f"{castle} ({event_token(event)})"
        case EnPassantExecuted(pawn_from=src, pawn_to=dst, captured_square=cap):
            return f"{square_name(src)}x{square_name(dst)} e.p. (removes {square_name(cap)})"
        case PromotionExecuted(from_sq=src, to_sq=dst, promoted_to=kind, captured=captured):
            sep = "x" if captured is not None else "-"
            return f"{square_name(src)}{sep}{square_name(dst)}={kind.symbol.upper()}"
        case _:
            assert_never(event)
