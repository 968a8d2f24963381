"""FEN parsing and serialization.

The parser only splits text into a board description; every consistency
rule (one king per side, no pawns on the back ranks, en passant rank) is
enforced by :meth:`Position.from_board_description`.
"""

from __future__ import annotations

from chesscore.core.enums import CastlingRights, Color
from chesscore.core.errors import ErrorKind, ParseError
from chesscore.core.piece import Piece
from chesscore.core.position import Position
from chesscore.core.types import Square, make_square, parse_square, square_name

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

_SIDES: dict[str, Color] = {"w": Color.WHITE, "b": Color.BLACK}
_SIDE_CHARS: dict[Color, str] = {v: k for k, v in _SIDES.items()}

# FEN order: KQkq
_CASTLING_ORDER: tuple[tuple[str, CastlingRights], ...] = (
    ("K", CastlingRights.WHITE_KINGSIDE),
    ("Q", CastlingRights.WHITE_QUEENSIDE),
    ("k", CastlingRights.BLACK_KINGSIDE),
    ("q", CastlingRights.BLACK_QUEENSIDE),
)
_CASTLING_CHARS = dict(_CASTLING_ORDER)


def _fen_error(message: str) -> ParseError:
    return ParseError(ErrorKind.INVALID_POSITION, message)


def _parse_rank(text: str, rank: int, pieces: dict[Square, Piece]) -> None:
    file = 0
    for ch in text:
        if ch in "12345678":
            file += int(ch)
        else:
            if file >= 8:
                raise _fen_error(f"FEN rank {rank + 1} is wider than 8 files: {text!r}")
            try:
                pieces[make_square(file, rank)] = Piece.from_char(ch)
            except ValueError:
                raise _fen_error(f"Invalid FEN piece {ch!r} on rank {rank + 1}") from None
            file += 1
    if file != 8:
        raise _fen_error(f"FEN rank {rank + 1} does not span 8 files: {text!r}")


def _parse_placement(placement: str) -> dict[Square, Piece]:
    ranks = placement.split("/")
    if len(ranks) != 8:
        raise _fen_error(f"FEN board must contain 8 ranks: {placement!r}")
    pieces: dict[Square, Piece] = {}
    for rank, text in zip(range(7, -1, -1), ranks):
        _parse_rank(text, rank, pieces)
    return pieces


def _parse_castling(text: str) -> CastlingRights:
    if text == "-":
        return CastlingRights.NONE
    if len(set(text)) != len(text) or not set(text) <= _CASTLING_CHARS.keys():
        raise _fen_error(f"Invalid FEN castling field: {text!r}")
    rights = CastlingRights.NONE
    for ch in text:
        rights |= _CASTLING_CHARS[ch]
    return rights


def _parse_counter(text: str, name: str, minimum: int) -> int:
    if not text.isdigit():
        raise _fen_error(f"Invalid FEN {name}: {text!r}")
    value = int(text)
    if value < minimum:
        raise _fen_error(f"FEN {name} below {minimum}: {text!r}")
    return value


def position_from_fen(fen: str) -> Position:
    """Parse a FEN string into a :class:`Position`.

    The two clock fields may be omitted and default to ``0 1``.

    Raises:
        ParseError: (kind ``INVALID_POSITION``) for malformed text or an
            impossible position.
    """
    fields = fen.split()
    if not 4 <= len(fields) <= 6:
        raise _fen_error(f"FEN needs 4-6 fields, got {len(fields)}: {fen!r}")
    placement, side_text, castling_text, ep_text = fields[:4]
    halfmove_text = fields[4] if len(fields) > 4 else "0"
    fullmove_text = fields[5] if len(fields) > 5 else "1"

    side = _SIDES.get(side_text)
    if side is None:
        raise _fen_error(f"Invalid FEN side-to-move field: {side_text!r}")

    en_passant: Square | None = None
    if ep_text != "-":
        try:
            en_passant = parse_square(ep_text)
        except ParseError:
            raise _fen_error(f"Invalid FEN en-passant square: {ep_text!r}") from None

    return Position.from_board_description(
        _parse_placement(placement),
        side_to_move=side,
        castling=_parse_castling(castling_text),
        en_passant=en_passant,
        halfmove_clock=_parse_counter(halfmove_text, "halfmove clock", 0),
        fullmove_number=_parse_counter(fullmove_text, "fullmove number", 1),
    )


def _rank_text(pos: Position, rank: int) -> str:
    out: list[str] = []
    gap = 0
    for file in range(8):
        piece = pos.board[make_square(file, rank)]
        if piece is None:
            gap += 1
            continue
        if gap:
            out.append(str(gap))
            gap = 0
        out.append(str(piece))
    if gap:
        out.append(str(gap))
    return "".join(out)


def position_to_fen(pos: Position) -> str:
    """Serialise a :class:`Position` to FEN (inverse of :func:`position_from_fen`)."""
    placement = "/".join(_rank_text(pos, rank) for rank in range(7, -1, -1))
    castling = "".join(ch for ch, right in _CASTLING_ORDER if pos.castling & right)
    ep = square_name(pos.en_passant) if pos.en_passant is not None else "-"
    return " ".join(
        (
            placement,
            _SIDE_CHARS[pos.side_to_move],
            castling or "-",
            ep,
            str(pos.halfmove_clock),
            str(pos.fullmove_number),
        )
    )
