"""State transition: apply a validated move to produce a new position."""

from __future__ import annotations

from chesscore.core.enums import CastlingSide, Color, PieceType
from chesscore.core.events import (
    CastlingExecuted,
    EnPassantExecuted,
    MoveEvent,
    MoveExecuted,
    PromotionExecuted,
)
from chesscore.core.move import (
    CASTLING_ROOK_SQUARES,
    ValidatedMove,
    castling_rights_after,
    en_passant_target_after,
)
from chesscore.core.piece import Piece
from chesscore.core.position import Position
from chesscore.core.squareset import SquareSet
from chesscore.core.types import file_of
from chesscore.core.zobrist import update_hash


def _move_piece(
    board: list[Piece | None], masks: list[int], piece: Piece, from_sq: int, to_sq: int
) -> None:
    board[from_sq] = None
    board[to_sq] = piece
    masks[int(piece.color)] ^= (1 << from_sq) | (1 << to_sq)


def _remove_piece(board: list[Piece | None], masks: list[int], sq: int) -> None:
    piece = board[sq]
    if piece is not None:
        board[sq] = None
        masks[int(piece.color)] &= ~(1 << sq)


def _apply_regular(
    position: Position, board: list[Piece | None], masks: list[int], move: ValidatedMove
) -> MoveEvent:
    if move.captured is not None:
        _remove_piece(board, masks, move.to_sq)
    _move_piece(board, masks, move.piece, move.from_sq, move.to_sq)
    return MoveExecuted(
        from_sq=move.from_sq,
        to_sq=move.to_sq,
        piece=move.piece,
        captured=move.captured,
        castling_before=position.castling,
        en_passant_before=position.en_passant,
    )


def _apply_castling(
    board: list[Piece | None], masks: list[int], move: ValidatedMove
) -> MoveEvent:
    rook_from, rook_to = CASTLING_ROOK_SQUARES[move.to_sq]
    rook = board[rook_from]
    assert rook is not None
    _move_piece(board, masks, move.piece, move.from_sq, move.to_sq)
    _move_piece(board, masks, rook, rook_from, rook_to)
    return CastlingExecuted(
        king_from=move.from_sq,
        king_to=move.to_sq,
        rook_from=rook_from,
        rook_to=rook_to,
        side=CastlingSide.KINGSIDE if file_of(move.to_sq) == 6 else CastlingSide.QUEENSIDE,
    )


def _apply_en_passant(
    board: list[Piece | None], masks: list[int], move: ValidatedMove
) -> MoveEvent:
    captured_sq = move.capture_square
    assert captured_sq is not None
    _remove_piece(board, masks, captured_sq)
    _move_piece(board, masks, move.piece, move.from_sq, move.to_sq)
    return EnPassantExecuted(
        pawn_from=move.from_sq,
        pawn_to=move.to_sq,
        captured_square=captured_sq,
    )


def _apply_promotion(
    board: list[Piece | None], masks: list[int], move: ValidatedMove
) -> MoveEvent:
    assert move.promotion is not None
    if move.captured is not None:
        _remove_piece(board, masks, move.to_sq)
    promoted = Piece(move.piece.color, move.promotion)
    _move_piece(board, masks, promoted, move.from_sq, move.to_sq)
    return PromotionExecuted(
        from_sq=move.from_sq,
        to_sq=move.to_sq,
        promoted_to=move.promotion,
        captured=move.captured,
    )


def apply_move(position: Position, move: ValidatedMove) -> tuple[Position, MoveEvent]:
    """Return the successor of *position* after *move* and what happened.

    *move* must come from :func:`chesscore.core.validation.validate_move`
    on the same position; nothing is re-checked here. The input position
    is left untouched.
    """
    board = list(position.board)
    masks = [position.occupancy[0].mask, position.occupancy[1].mask]

    event: MoveEvent
    if move.is_castling:
        event = _apply_castling(board, masks, move)
    elif move.is_en_passant:
        event = _apply_en_passant(board, masks, move)
    elif move.is_promotion:
        event = _apply_promotion(board, masks, move)
    else:
        event = _apply_regular(position, board, masks, move)

    mover = move.piece.color
    if move.piece.piece_type == PieceType.PAWN or move.is_capture:
        halfmove_clock = 0
    else:
        halfmove_clock = position.halfmove_clock + 1
    fullmove_number = position.fullmove_number + (1 if mover == Color.BLACK else 0)
    new_hash = update_hash(position, move)

    successor = Position(
        board=tuple(board),
        occupancy=(SquareSet(masks[0]), SquareSet(masks[1])),
        side_to_move=mover.opposite,
        castling=castling_rights_after(position.castling, move),
        en_passant=en_passant_target_after(move),
        halfmove_clock=halfmove_clock,
        fullmove_number=fullmove_number,
        history=position.history + (event,),
        zobrist_hash=new_hash,
        key_history=position.key_history + (new_hash,),
    )
    if __debug__:
        successor.verify_invariants()
    return successor, event
