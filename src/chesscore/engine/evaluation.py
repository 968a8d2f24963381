"""Static evaluation: material, piece-square tables, mobility, king safety.

Scores are centipawns from White's point of view. Piece-square tables are
written from White's side with rank 8 on the first row, so a White piece
on ``sq`` reads entry ``sq ^ 56`` and a Black piece reads entry ``sq``.
"""

from __future__ import annotations

from dataclasses import dataclass

from chesscore.core.enums import Color, PieceType
from chesscore.core.move_generator import generate_legal_moves, is_in_check
from chesscore.core.piece import Piece
from chesscore.core.position import Position
from chesscore.core.types import Square, file_of, mirror_square, rank_of, try_make_square

MATE_SCORE = 100_000

# fmt: off
_PAWN_TABLE: tuple[int, ...] = (
     0,   0,   0,   0,   0,   0,   0,   0,
    50,  50,  50,  50,  50,  50,  50,  50,
    10,  10,  20,  30,  30,  20,  10,  10,
     5,   5,  10,  25,  25,  10,   5,   5,
     0,   0,   0,  20,  20,   0,   0,   0,
     5,  -5, -10,   0,   0, -10,  -5,   5,
     5,  10,  10, -20, -20,  10,  10,   5,
     0,   0,   0,   0,   0,   0,   0,   0,
)

_PAWN_END_TABLE: tuple[int, ...] = (
     0,   0,   0,   0,   0,   0,   0,   0,
    80,  80,  80,  80,  80,  80,  80,  80,
    50,  50,  50,  50,  50,  50,  50,  50,
    30,  30,  30,  30,  30,  30,  30,  30,
    20,  20,  20,  20,  20,  20,  20,  20,
    10,  10,  10,  10,  10,  10,  10,  10,
    10,  10,  10,  10,  10,  10,  10,  10,
     0,   0,   0,   0,   0,   0,   0,   0,
)

_KNIGHT_TABLE: tuple[int, ...] = (
    -50, -40, -30, -30, -30, -30, -40, -50,
    -40, -20,   0,   0,   0,   0, -20, -40,
    -30,   0,  10,  15,  15,  10,   0, -30,
    -30,   5,  15,  20,  20,  15,   5, -30,
    -30,   0,  15,  20,  20,  15,   0, -30,
    -30,   5,  10,  15,  15,  10,   5, -30,
    -40, -20,   0,   5,   5,   0, -20, -40,
    -50, -40, -30, -30, -30, -30, -40, -50,
)

_BISHOP_TABLE: tuple[int, ...] = (
    -20, -10, -10, -10, -10, -10, -10, -20,
    -10,   0,   0,   0,   0,   0,   0, -10,
    -10,   0,   5,  10,  10,   5,   0, -10,
    -10,   5,   5,  10,  10,   5,   5, -10,
    -10,   0,  10,  10,  10,  10,   0, -10,
    -10,  10,  10,  10,  10,  10,  10, -10,
    -10,   5,   0,   0,   0,   0,   5, -10,
    -20, -10, -10, -10, -10, -10, -10, -20,
)

_ROOK_TABLE: tuple[int, ...] = (
     0,   0,   0,   0,   0,   0,   0,   0,
     5,  10,  10,  10,  10,  10,  10,   5,
    -5,   0,   0,   0,   0,   0,   0,  -5,
    -5,   0,   0,   0,   0,   0,   0,  -5,
    -5,   0,   0,   0,   0,   0,   0,  -5,
    -5,   0,   0,   0,   0,   0,   0,  -5,
    -5,   0,   0,   0,   0,   0,   0,  -5,
     0,   0,   0,   5,   5,   0,   0,   0,
)

_QUEEN_TABLE: tuple[int, ...] = (
    -20, -10, -10,  -5,  -5, -10, -10, -20,
    -10,   0,   0,   0,   0,   0,   0, -10,
    -10,   0,   5,   5,   5,   5,   0, -10,
     -5,   0,   5,   5,   5,   5,   0,  -5,
      0,   0,   5,   5,   5,   5,   0,  -5,
    -10,   5,   5,   5,   5,   5,   0, -10,
    -10,   0,   5,   0,   0,   0,   0, -10,
    -20, -10, -10,  -5,  -5, -10, -10, -20,
)

_KING_MIDDLE_TABLE: tuple[int, ...] = (
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -20, -30, -30, -40, -40, -30, -30, -20,
    -10, -20, -20, -20, -20, -20, -20, -10,
     20,  20,   0,   0,   0,   0,  20,  20,
     20,  30,  10,   0,   0,  10,  30,  20,
)

_KING_END_TABLE: tuple[int, ...] = (
    -50, -40, -30, -20, -20, -30, -40, -50,
    -30, -20, -10,   0,   0, -10, -20, -30,
    -30, -10,  20,  30,  30,  20, -10, -30,
    -30, -10,  30,  40,  40,  30, -10, -30,
    -30, -10,  30,  40,  40,  30, -10, -30,
    -30, -10,  20,  30,  30,  20, -10, -30,
    -30, -30,   0,   0,   0,   0, -30, -30,
    -50, -30, -30, -30, -30, -30, -30, -50,
)
# fmt: on

_MIDDLEGAME_TABLES: dict[PieceType, tuple[int, ...]] = {
    PieceType.PAWN: _PAWN_TABLE,
    PieceType.KNIGHT: _KNIGHT_TABLE,
    PieceType.BISHOP: _BISHOP_TABLE,
    PieceType.ROOK: _ROOK_TABLE,
    PieceType.QUEEN: _QUEEN_TABLE,
    PieceType.KING: _KING_MIDDLE_TABLE,
}

_ENDGAME_TABLES: dict[PieceType, tuple[int, ...]] = {
    **_MIDDLEGAME_TABLES,
    PieceType.PAWN: _PAWN_END_TABLE,
    PieceType.KING: _KING_END_TABLE,
}


@dataclass(frozen=True, slots=True)
class EvalConfig:
    """Weights of the evaluation terms."""

    mobility_weight: int = 1
    check_penalty: int = 50
    pawn_shield_bonus: int = 10
    # endgame tables once this many knights/bishops/rooks/queens or fewer remain
    endgame_piece_threshold: int = 6

    def validate(self) -> None:
        if self.mobility_weight < 0:
            raise ValueError("mobility_weight must be >= 0")
        if self.check_penalty < 0 or self.pawn_shield_bonus < 0:
            raise ValueError("king safety weights must be >= 0")
        if self.endgame_piece_threshold < 0:
            raise ValueError("endgame_piece_threshold must be >= 0")


DEFAULT_EVAL_CONFIG = EvalConfig()


def is_endgame(position: Position, config: EvalConfig = DEFAULT_EVAL_CONFIG) -> bool:
    """Few enough pieces (pawns and kings excluded) for the endgame tables."""
    board = position.board
    officers = 0
    for sq in position.occupied:
        piece = board[sq]
        if piece is not None and piece.piece_type not in (PieceType.PAWN, PieceType.KING):
            officers += 1
    return officers <= config.endgame_piece_threshold


def piece_square_value(piece: Piece, sq: Square, endgame: bool = False) -> int:
    """Table bonus for *piece* on *sq*, from its own side's point of view."""
    tables = _ENDGAME_TABLES if endgame else _MIDDLEGAME_TABLES
    index = mirror_square(sq) if piece.color == Color.WHITE else sq
    return tables[piece.piece_type][index]


def material_score(position: Position, endgame: bool = False) -> int:
    """Material plus piece-square bonuses, White minus Black."""
    score = 0
    board = position.board
    for sq in position.occupied:
        piece = board[sq]
        if piece is None:
            continue
        value = piece.value_cp + piece_square_value(piece, sq, endgame)
        score += value * piece.color.sign
    return score


def mobility_score(
    position: Position,
    config: EvalConfig = DEFAULT_EVAL_CONFIG,
    own_moves: int | None = None,
) -> int:
    """Legal-move difference between the side to move and its opponent."""
    if own_moves is None:
        own_moves = len(generate_legal_moves(position))
    side = position.side_to_move
    their_moves = len(generate_legal_moves(position.with_side_to_move(side.opposite)))
    return config.mobility_weight * (own_moves - their_moves) * side.sign


def _pawn_shield(position: Position, king_sq: Square, color: Color) -> int:
    rank = rank_of(king_sq) + color.pawn_direction
    own_pawn = Piece(color, PieceType.PAWN)
    count = 0
    for df in (-1, 0, 1):
        sq = try_make_square(file_of(king_sq) + df, rank)
        if sq is not None and position.board[sq] == own_pawn:
            count += 1
    return count


def king_safety_score(
    position: Position, config: EvalConfig = DEFAULT_EVAL_CONFIG
) -> int:
    """Check penalty and pawn shield bonus, White minus Black."""
    score = 0
    for color in Color:
        king_sq = position.king_square(color)
        side_score = config.pawn_shield_bonus * _pawn_shield(position, king_sq, color)
        if is_in_check(position, color):
            side_score -= config.check_penalty
        score += side_score * color.sign
    return score


def evaluate(position: Position, config: EvalConfig = DEFAULT_EVAL_CONFIG) -> int:
    """Static score of *position* in centipawns; positive favours White.

    Checkmate scores ``MATE_SCORE`` against the mated side and stalemate
    scores zero, so callers can use this directly on terminal nodes.
    """
    legal = generate_legal_moves(position)
    if not legal:
        if is_in_check(position, position.side_to_move):
            return -MATE_SCORE * position.side_to_move.sign
        return 0

    endgame = is_endgame(position, config)
    return (
        material_score(position, endgame)
        + mobility_score(position, config, own_moves=len(legal))
        + king_safety_score(position, config)
    )
