"""Game-status queries: check, mate, stalemate and the draw rules."""

from __future__ import annotations

from chesscore.core.enums import Color, GameResult, PieceType
from chesscore.core.move_generator import generate_legal_moves, is_in_check
from chesscore.core.piece import Piece
from chesscore.core.position import Position
from chesscore.core.types import Square, is_light_square

FIFTY_MOVE_PLIES = 100
SEVENTY_FIVE_MOVE_PLIES = 150


def _officers(position: Position) -> list[tuple[Piece, Square]]:
    """Every non-king piece with its square."""
    return [
        (piece, sq)
        for sq, piece in enumerate(position.board)
        if piece is not None and piece.piece_type != PieceType.KING
    ]


class Rules:
    """Stateless rule queries over a :class:`Position`.

    Draw policy: the fifty-move rule and threefold repetition must be
    claimed; insufficient material, the seventy-five-move rule and
    fivefold repetition end the game on their own.
    """

    @staticmethod
    def is_in_check(position: Position) -> bool:
        return is_in_check(position, position.side_to_move)

    @staticmethod
    def has_legal_moves(position: Position) -> bool:
        return bool(generate_legal_moves(position))

    @staticmethod
    def is_checkmate(position: Position) -> bool:
        return Rules.is_in_check(position) and not Rules.has_legal_moves(position)

    @staticmethod
    def is_stalemate(position: Position) -> bool:
        return not Rules.is_in_check(position) and not Rules.has_legal_moves(position)

    @staticmethod
    def is_insufficient_material(position: Position) -> bool:
        """Bare kings, a lone minor piece, or one bishop each on one square colour."""
        officers = _officers(position)
        if not officers:
            return True
        if len(officers) == 1:
            return officers[0][0].piece_type in (PieceType.KNIGHT, PieceType.BISHOP)
        if len(officers) == 2:
            (p1, s1), (p2, s2) = officers
            return (
                p1.piece_type == p2.piece_type == PieceType.BISHOP
                and p1.color != p2.color
                and is_light_square(s1) == is_light_square(s2)
            )
        return False

    @staticmethod
    def is_fifty_move_rule(position: Position) -> bool:
        return position.halfmove_clock >= FIFTY_MOVE_PLIES

    @staticmethod
    def is_seventy_five_move_rule(position: Position) -> bool:
        return position.halfmove_clock >= SEVENTY_FIVE_MOVE_PLIES

    @staticmethod
    def is_threefold_repetition(position: Position) -> bool:
        return position.repetition_count() >= 3

    @staticmethod
    def is_fivefold_repetition(position: Position) -> bool:
        return position.repetition_count() >= 5

    @staticmethod
    def is_claimable_draw(position: Position) -> bool:
        return Rules.is_fifty_move_rule(position) or Rules.is_threefold_repetition(
            position
        )

    @staticmethod
    def is_automatic_draw(position: Position) -> bool:
        return (
            Rules.is_insufficient_material(position)
            or Rules.is_seventy_five_move_rule(position)
            or Rules.is_fivefold_repetition(position)
        )

    @staticmethod
    def game_result(position: Position) -> GameResult:
        """Decisive result, automatic draw, or ``IN_PROGRESS``.

        Claimable draws leave the game in progress until a player claims.
        """
        if not Rules.has_legal_moves(position):
            if not Rules.is_in_check(position):
                return GameResult.DRAW
            if position.side_to_move == Color.WHITE:
                return GameResult.BLACK_WINS
            return GameResult.WHITE_WINS
        if Rules.is_automatic_draw(position):
            return GameResult.DRAW
        return GameResult.IN_PROGRESS
