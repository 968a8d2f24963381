"""Error taxonomy for move validation and the parsing boundary.

Rule violations are *values*: the validator returns :class:`ChessError`
instances instead of raising them. Only the parsing boundary raises
(:class:`ParseError`), and :class:`InvariantViolation` marks bugs.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCategory(StrEnum):
    GEOMETRY = "geometry"
    PATH = "path"
    RULE = "rule"
    PARSING = "parsing"


class ErrorKind(StrEnum):
    """Closed set of reasons a move or a parse can fail."""

    # Geometry
    SQUARE_OUT_OF_RANGE = "square out of range"
    NO_PIECE_ON_SOURCE = "no piece on source square"
    WRONG_SIDE_TO_MOVE = "piece belongs to the side not on move"
    TARGET_OCCUPIED_BY_FRIENDLY = "destination occupied by a friendly piece"
    INVALID_PROMOTION = "invalid promotion"
    ILLEGAL_PIECE_MOVE = "piece cannot move this way"
    # Path
    PATH_BLOCKED = "path blocked"
    # Rule
    KING_LEFT_IN_CHECK = "king would be left in check"
    INVALID_CASTLING = "castling not allowed"
    INVALID_EN_PASSANT_TARGET = "en passant target mismatch"
    # Parsing
    MALFORMED_TOKEN = "malformed move token"
    INVALID_POSITION = "invalid board description"

    @property
    def category(self) -> ErrorCategory:
        return _CATEGORIES[self]


_CATEGORIES: dict[ErrorKind, ErrorCategory] = {
    ErrorKind.SQUARE_OUT_OF_RANGE: ErrorCategory.GEOMETRY,
    ErrorKind.NO_PIECE_ON_SOURCE: ErrorCategory.GEOMETRY,
    ErrorKind.WRONG_SIDE_TO_MOVE: ErrorCategory.GEOMETRY,
    ErrorKind.TARGET_OCCUPIED_BY_FRIENDLY: ErrorCategory.GEOMETRY,
    ErrorKind.INVALID_PROMOTION: ErrorCategory.GEOMETRY,
    ErrorKind.ILLEGAL_PIECE_MOVE: ErrorCategory.GEOMETRY,
    ErrorKind.PATH_BLOCKED: ErrorCategory.PATH,
    ErrorKind.KING_LEFT_IN_CHECK: ErrorCategory.RULE,
    ErrorKind.INVALID_CASTLING: ErrorCategory.RULE,
    ErrorKind.INVALID_EN_PASSANT_TARGET: ErrorCategory.RULE,
    ErrorKind.MALFORMED_TOKEN: ErrorCategory.PARSING,
    ErrorKind.INVALID_POSITION: ErrorCategory.PARSING,
}


class ChessError(Exception):
    """A recoverable chess-domain failure."""

    def __init__(self, kind: ErrorKind, detail: str = "") -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)

    @property
    def category(self) -> ErrorCategory:
        return self.kind.category

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChessError):
            return NotImplemented
        return self.kind == other.kind and self.detail == other.detail

    def __hash__(self) -> int:
        return hash((self.kind, self.detail))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind.name}, {self.detail!r})"


class ParseError(ChessError, ValueError):
    """Malformed external input (board description, FEN, move token)."""


class InvariantViolation(RuntimeError):
    """Internal state is inconsistent; this is a bug, not a rule violation."""
