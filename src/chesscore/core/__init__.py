"""Core domain layer: pure chess rules with no dependencies outside the stdlib.

Quick start::

    from chesscore.core import MoveIntent, Position, apply_move, validate_move

    pos = Position.initial()
    result = validate_move(pos, MoveIntent.from_token("e2e4"))
    pos, event = apply_move(pos, result.unwrap())
"""

from chesscore.core.enums import (
    CastlingRights,
    CastlingSide,
    Color,
    GameResult,
    MoveFlag,
    PieceType,
)
from chesscore.core.errors import (
    ChessError,
    ErrorCategory,
    ErrorKind,
    InvariantViolation,
    ParseError,
)
from chesscore.core.events import (
    CastlingExecuted,
    EnPassantExecuted,
    MoveEvent,
    MoveExecuted,
    PromotionExecuted,
    describe_event,
    event_token,
)
from chesscore.core.move import MoveIntent, ValidatedMove
from chesscore.core.move_generator import (
    MoveGenerator,
    generate_captures,
    generate_legal_moves,
    generate_pseudo_legal_moves,
    is_in_check,
    is_square_attacked,
)
from chesscore.core.piece import Piece
from chesscore.core.position import Position
from chesscore.core.rules import Rules
from chesscore.core.squareset import SquareSet
from chesscore.core.transition import apply_move
from chesscore.core.types import (
    Square,
    file_of,
    make_square,
    parse_square,
    rank_of,
    square_name,
)
from chesscore.core.validation import ValidationResult, validate_move
from chesscore.core.zobrist import compute_hash, update_hash

__all__ = [
    # Enums / flags
    "CastlingRights",
    "CastlingSide",
    "Color",
    "GameResult",
    "MoveFlag",
    "PieceType",
    # Types / helpers
    "Square",
    "SquareSet",
    "file_of",
    "make_square",
    "parse_square",
    "rank_of",
    "square_name",
    # Errors
    "ChessError",
    "ErrorCategory",
    "ErrorKind",
    "InvariantViolation",
    "ParseError",
    # Domain objects
    "MoveIntent",
    "ValidatedMove",
    "Piece",
    "Position",
    "Rules",
    # Events
    "CastlingExecuted",
    "EnPassantExecuted",
    "MoveEvent",
    "MoveExecuted",
    "PromotionExecuted",
    "describe_event",
    "event_token",
    # Operations
    "MoveGenerator",
    "ValidationResult",
    "apply_move",
    "compute_hash",
    "generate_captures",
    "generate_legal_moves",
    "generate_pseudo_legal_moves",
    "is_in_check",
    "is_square_attacked",
    "update_hash",
    "validate_move",
]
