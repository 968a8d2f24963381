"""Three-stage move validation for untrusted move intents.

Stages run in order (geometry, path, rules) and the first stage that
reports anything stops the pipeline. Within a stage errors accumulate.
Nothing here raises for an illegal move: failures come back as
:class:`ChessError` values inside a :class:`ValidationResult`.
"""

from __future__ import annotations

from dataclasses import dataclass

from chesscore.core.attacks import squares_between
from chesscore.core.enums import (
    PROMOTION_TYPES,
    CastlingRights,
    CastlingSide,
    MoveFlag,
    PieceType,
)
from chesscore.core.errors import ChessError, ErrorKind
from chesscore.core.move import CASTLING_ROOK_SQUARES, MoveIntent, ValidatedMove
from chesscore.core.move_generator import (
    castling_path_attacked,
    is_in_check,
    king_left_in_check,
)
from chesscore.core.piece import Piece
from chesscore.core.position import Position
from chesscore.core.types import (
    file_of,
    is_valid_square,
    make_square,
    rank_of,
    square_name,
)


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Either a :class:`ValidatedMove` or a non-empty tuple of errors."""

    move: ValidatedMove | None = None
    errors: tuple[ChessError, ...] = ()

    @property
    def ok(self) -> bool:
        return self.move is not None and not self.errors

    def unwrap(self) -> ValidatedMove:
        """Return the move, or raise the first recorded error."""
        if self.move is None or self.errors:
            raise self.errors[0]
        return self.move

    @classmethod
    def success(cls, move: ValidatedMove) -> ValidationResult:
        return cls(move=move)

    @classmethod
    def failure(cls, *errors: ChessError) -> ValidationResult:
        if not errors:
            raise ValueError("a failed validation needs at least one error")
        return cls(errors=tuple(errors))


# -- Stage 1: geometry -------------------------------------------------------


def _classify_pawn(
    position: Position, intent: MoveIntent, piece: Piece, errors: list[ChessError]
) -> tuple[MoveFlag, Piece | None]:
    board = position.board
    color = piece.color
    df = file_of(intent.to_sq) - file_of(intent.from_sq)
    dr = (rank_of(intent.to_sq) - rank_of(intent.from_sq)) * color.pawn_direction
    target = board[intent.to_sq]
    last_rank = rank_of(intent.to_sq) == color.opposite.home_rank
    plain = MoveFlag.PROMOTION if last_rank else MoveFlag.NORMAL

    if df == 0 and dr == 1:
        if target is not None:
            errors.append(
                ChessError(ErrorKind.ILLEGAL_PIECE_MOVE, "pawn cannot capture forward")
            )
        return plain, None

    if df == 0 and dr == 2:
        start_rank = color.home_rank + color.pawn_direction
        skipped = (intent.from_sq + intent.to_sq) // 2
        if rank_of(intent.from_sq) != start_rank:
            errors.append(
                ChessError(
                    ErrorKind.ILLEGAL_PIECE_MOVE, "double push only from the start rank"
                )
            )
        elif board[skipped] is not None or target is not None:
            errors.append(
                ChessError(
                    ErrorKind.ILLEGAL_PIECE_MOVE,
                    f"double push blocked on {square_name(skipped)}",
                )
            )
        return MoveFlag.DOUBLE_PAWN, None

    if abs(df) == 1 and dr == 1:
        if target is not None:
            return plain, target
        captured_sq = make_square(file_of(intent.to_sq), rank_of(intent.from_sq))
        victim = board[captured_sq]
        if victim != Piece(color.opposite, PieceType.PAWN):
            victim = None
        return MoveFlag.EN_PASSANT, victim

    errors.append(
        ChessError(
            ErrorKind.ILLEGAL_PIECE_MOVE, f"pawn cannot reach {square_name(intent.to_sq)}"
        )
    )
    return MoveFlag.NORMAL, None


def _classify_piece(intent: MoveIntent, piece: Piece) -> MoveFlag | None:
    """Flag for a non-pawn move, ``None`` when the pattern is impossible."""
    df = abs(file_of(intent.to_sq) - file_of(intent.from_sq))
    dr = abs(rank_of(intent.to_sq) - rank_of(intent.from_sq))
    ptype = piece.piece_type

    if ptype == PieceType.KNIGHT:
        return MoveFlag.NORMAL if {df, dr} == {1, 2} else None
    if ptype == PieceType.BISHOP:
        return MoveFlag.NORMAL if df == dr else None
    if ptype == PieceType.ROOK:
        return MoveFlag.NORMAL if df == 0 or dr == 0 else None
    if ptype == PieceType.QUEEN:
        return MoveFlag.NORMAL if df == dr or df == 0 or dr == 0 else None

    # King: one step, or two files along the home rank from the home square.
    if max(df, dr) == 1:
        return MoveFlag.NORMAL
    home = make_square(4, piece.color.home_rank)
    if intent.from_sq == home and intent.to_sq in CASTLING_ROOK_SQUARES and dr == 0:
        if file_of(intent.to_sq) == 6:
            return MoveFlag.CASTLE_KINGSIDE
        return MoveFlag.CASTLE_QUEENSIDE
    return None


def check_geometry(position: Position, intent: MoveIntent) -> ValidationResult:
    """Ranges, ownership, destination, promotion and movement pattern."""
    if not is_valid_square(intent.from_sq) or not is_valid_square(intent.to_sq):
        return ValidationResult.failure(
            ChessError(
                ErrorKind.SQUARE_OUT_OF_RANGE,
                f"{intent.from_sq} -> {intent.to_sq}",
            )
        )

    piece = position.board[intent.from_sq]
    if piece is None:
        return ValidationResult.failure(
            ChessError(ErrorKind.NO_PIECE_ON_SOURCE, square_name(intent.from_sq))
        )

    errors: list[ChessError] = []
    if piece.color != position.side_to_move:
        errors.append(
            ChessError(
                ErrorKind.WRONG_SIDE_TO_MOVE,
                f"{piece} on {square_name(intent.from_sq)}, "
                f"{position.side_to_move} to move",
            )
        )

    target = position.board[intent.to_sq]
    if intent.from_sq == intent.to_sq:
        errors.append(
            ChessError(ErrorKind.ILLEGAL_PIECE_MOVE, "source equals destination")
        )
    elif target is not None and target.color == piece.color:
        errors.append(
            ChessError(ErrorKind.TARGET_OCCUPIED_BY_FRIENDLY, square_name(intent.to_sq))
        )

    reaches_last_rank = (
        piece.piece_type == PieceType.PAWN
        and rank_of(intent.to_sq) == piece.color.opposite.home_rank
    )
    if reaches_last_rank and intent.promotion is None:
        errors.append(
            ChessError(ErrorKind.INVALID_PROMOTION, "promotion piece required")
        )
    elif reaches_last_rank and intent.promotion not in PROMOTION_TYPES:
        errors.append(
            ChessError(
                ErrorKind.INVALID_PROMOTION, f"cannot promote to {intent.promotion!r}"
            )
        )
    elif not reaches_last_rank and intent.promotion is not None:
        errors.append(
            ChessError(ErrorKind.INVALID_PROMOTION, "promotion only on the last rank")
        )

    if errors:
        return ValidationResult.failure(*errors)

    captured = target
    if piece.piece_type == PieceType.PAWN:
        flag, captured = _classify_pawn(position, intent, piece, errors)
    else:
        maybe_flag = _classify_piece(intent, piece)
        if maybe_flag is None:
            errors.append(
                ChessError(
                    ErrorKind.ILLEGAL_PIECE_MOVE,
                    f"{piece.piece_type.name.lower()} cannot move "
                    f"{square_name(intent.from_sq)}-{square_name(intent.to_sq)}",
                )
            )
            flag = MoveFlag.NORMAL
        else:
            flag = maybe_flag

    if errors:
        return ValidationResult.failure(*errors)
    return ValidationResult.success(ValidatedMove(intent, piece, captured, flag))


# -- Stage 2: path -----------------------------------------------------------


def check_path(position: Position, move: ValidatedMove) -> tuple[ChessError, ...]:
    """Sliders need every square strictly between source and destination empty."""
    if not move.piece.piece_type.is_slider:
        return ()
    blockers = squares_between(move.from_sq, move.to_sq) & position.occupied.mask
    if blockers:
        first = (blockers & -blockers).bit_length() - 1
        return (ChessError(ErrorKind.PATH_BLOCKED, f"blocked on {square_name(first)}"),)
    return ()


# -- Stage 3: rules ----------------------------------------------------------


def _check_castling(position: Position, move: ValidatedMove) -> list[ChessError]:
    color = move.piece.color
    side = (
        CastlingSide.KINGSIDE
        if move.flag == MoveFlag.CASTLE_KINGSIDE
        else CastlingSide.QUEENSIDE
    )
    right = CastlingRights.for_side(color, side)
    rook_sq, _ = CASTLING_ROOK_SQUARES[move.to_sq]

    if not position.castling & right:
        return [ChessError(ErrorKind.INVALID_CASTLING, f"no {side} right for {color}")]
    if position.board[rook_sq] != Piece(color, PieceType.ROOK):
        return [
            ChessError(ErrorKind.INVALID_CASTLING, f"no rook on {square_name(rook_sq)}")
        ]

    errors: list[ChessError] = []
    if squares_between(move.from_sq, rook_sq) & position.occupied.mask:
        errors.append(
            ChessError(ErrorKind.INVALID_CASTLING, "squares between king and rook occupied")
        )
    if is_in_check(position, color):
        errors.append(ChessError(ErrorKind.INVALID_CASTLING, "king is in check"))
    elif castling_path_attacked(position, move.from_sq, move.to_sq):
        errors.append(
            ChessError(ErrorKind.INVALID_CASTLING, "king passes through an attacked square")
        )
    return errors


def check_rules(position: Position, move: ValidatedMove) -> tuple[ChessError, ...]:
    """Castling rights, en passant target and king safety."""
    if move.is_castling:
        return tuple(_check_castling(position, move))

    if move.is_en_passant:
        if (
            position.en_passant is None
            or move.to_sq != position.en_passant
            or move.captured is None
        ):
            return (
                ChessError(
                    ErrorKind.INVALID_EN_PASSANT_TARGET,
                    f"{square_name(move.to_sq)} is not the en passant target",
                ),
            )

    if king_left_in_check(position, move.from_sq, move.to_sq, move.capture_square):
        return (ChessError(ErrorKind.KING_LEFT_IN_CHECK, str(move)),)
    return ()


def validate_move(position: Position, intent: MoveIntent) -> ValidationResult:
    """Run geometry, path and rule checks; first failing stage wins."""
    result = check_geometry(position, intent)
    if not result.ok:
        return result
    move = result.unwrap()

    errors = check_path(position, move)
    if errors:
        return ValidationResult.failure(*errors)

    errors = check_rules(position, move)
    if errors:
        return ValidationResult.failure(*errors)
    return result
