"""Move value objects: raw intents and validated moves."""

from __future__ import annotations

from dataclasses import dataclass

from chesscore.core.enums import PROMOTION_TYPES, CastlingRights, MoveFlag, PieceType
from chesscore.core.errors import ErrorKind, ParseError
from chesscore.core.piece import Piece
from chesscore.core.types import (
    Square,
    file_of,
    make_square,
    parse_square,
    rank_of,
    square_name,
)

_PROMO_FROM_CHAR: dict[str, PieceType] = {pt.symbol: pt for pt in PROMOTION_TYPES}


@dataclass(frozen=True, slots=True)
class MoveIntent:
    """Unvalidated move proposal (from the generator or an external token).

    Two intents are equal iff source, destination and promotion match.
    """

    from_sq: Square
    to_sq: Square
    promotion: PieceType | None = None

    # ── Coordinate notation ──────────────────────────────────────────────

    def __str__(self) -> str:
        return self.to_token()

    def to_token(self) -> str:
        """Long-algebraic token, e.g. ``e2e4`` or ``e7e8q``."""
        base = f"{square_name(self.from_sq)}{square_name(self.to_sq)}"
        if self.promotion is not None:
            base += self.promotion.symbol
        return base

    @classmethod
    def from_token(cls, token: str, promotion: str | None = None) -> MoveIntent:
        """Parse ``e2e4`` / ``e7e8q``; *promotion* supplies a separate piece char."""
        text = token.strip()
        if len(text) not in (4, 5):
            raise ParseError(ErrorKind.MALFORMED_TOKEN, repr(token))
        promo_char = text[4] if len(text) == 5 else promotion
        from_sq = _parse_token_square(text[0:2], token)
        to_sq = _parse_token_square(text[2:4], token)

        promo: PieceType | None = None
        if promo_char is not None:
            promo = _PROMO_FROM_CHAR.get(promo_char.lower())
            if promo is None:
                raise ParseError(
                    ErrorKind.MALFORMED_TOKEN,
                    f"bad promotion piece {promo_char!r} in {token!r}",
                )
        return cls(from_sq, to_sq, promo)


# king destination -> (rook origin, rook destination)
CASTLING_ROOK_SQUARES: dict[Square, tuple[Square, Square]] = {
    make_square(6, 0): (make_square(7, 0), make_square(5, 0)),
    make_square(2, 0): (make_square(0, 0), make_square(3, 0)),
    make_square(6, 7): (make_square(7, 7), make_square(5, 7)),
    make_square(2, 7): (make_square(0, 7), make_square(3, 7)),
}


def _parse_token_square(text: str, token: str) -> Square:
    try:
        return parse_square(text)
    except ParseError:
        raise ParseError(ErrorKind.MALFORMED_TOKEN, repr(token)) from None


@dataclass(frozen=True, slots=True)
class ValidatedMove:
    """A :class:`MoveIntent` plus facts established during validation.

    Only :func:`chesscore.core.validation.validate_move` should build these;
    the transition engine trusts every field.
    """

    intent: MoveIntent
    piece: Piece
    captured: Piece | None = None
    flag: MoveFlag = MoveFlag.NORMAL

    @property
    def from_sq(self) -> Square:
        return self.intent.from_sq

    @property
    def to_sq(self) -> Square:
        return self.intent.to_sq

    @property
    def promotion(self) -> PieceType | None:
        return self.intent.promotion

    @property
    def is_capture(self) -> bool:
        return self.captured is not None

    @property
    def is_en_passant(self) -> bool:
        return self.flag == MoveFlag.EN_PASSANT

    @property
    def is_castling(self) -> bool:
        return self.flag in (MoveFlag.CASTLE_KINGSIDE, MoveFlag.CASTLE_QUEENSIDE)

    @property
    def is_promotion(self) -> bool:
        return self.flag == MoveFlag.PROMOTION

    @property
    def capture_square(self) -> Square | None:
        """Square the captured piece stands on (differs from ``to_sq`` for e.p.)."""
        if self.captured is None:
            return None
        if self.flag == MoveFlag.EN_PASSANT:
            return make_square(file_of(self.to_sq), rank_of(self.from_sq))
        return self.to_sq

    def __str__(self) -> str:
        return self.intent.to_token()


# corner square -> castling right lost when a piece leaves or is taken there
_CORNER_RIGHTS: dict[Square, CastlingRights] = {
    make_square(0, 0): CastlingRights.WHITE_QUEENSIDE,
    make_square(7, 0): CastlingRights.WHITE_KINGSIDE,
    make_square(0, 7): CastlingRights.BLACK_QUEENSIDE,
    make_square(7, 7): CastlingRights.BLACK_KINGSIDE,
}


def castling_rights_after(castling: CastlingRights, move: ValidatedMove) -> CastlingRights:
    """Rights remaining once *move* is played; bits are only ever cleared."""
    if move.piece.piece_type == PieceType.KING:
        castling &= ~CastlingRights.both(move.piece.color)
    for sq in (move.from_sq, move.to_sq):
        right = _CORNER_RIGHTS.get(sq)
        if right is not None:
            castling &= ~right
    return castling


def en_passant_target_after(move: ValidatedMove) -> Square | None:
    """The skipped square after a double push, ``None`` otherwise."""
    if move.flag == MoveFlag.DOUBLE_PAWN:
        return (move.from_sq + move.to_sq) // 2
    return None
