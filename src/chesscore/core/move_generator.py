"""Legal and pseudo-legal move generation + attack detection."""

from __future__ import annotations

from chesscore.core.attacks import (
    KING_ATTACKS,
    KNIGHT_ATTACKS,
    attacks_from,
    bishop_attacks,
    is_aligned,
    queen_attacks,
    rook_attacks,
    squares_between,
)
from chesscore.core.enums import PROMOTION_TYPES, CastlingRights, Color, PieceType
from chesscore.core.move import MoveIntent
from chesscore.core.piece import Piece
from chesscore.core.position import Position
from chesscore.core.types import (
    A1,
    A8,
    C1,
    C8,
    E1,
    E8,
    G1,
    G8,
    H1,
    H8,
    Square,
    make_square,
)

# (right, king home, king destination, rook corner, owner)
_CASTLING_PATTERNS: tuple[
    tuple[CastlingRights, Square, Square, Square, Color], ...
] = (
    (CastlingRights.WHITE_KINGSIDE, E1, G1, H1, Color.WHITE),
    (CastlingRights.WHITE_QUEENSIDE, E1, C1, A1, Color.WHITE),
    (CastlingRights.BLACK_KINGSIDE, E8, G8, H8, Color.BLACK),
    (CastlingRights.BLACK_QUEENSIDE, E8, C8, A8, Color.BLACK),
)


# -- Attack detection --------------------------------------------------------


def _attacked_by_mask(
    board: tuple[Piece | None, ...],
    sq: Square,
    attackers: int,
    occupied: int,
) -> bool:
    """Does any piece on *attackers* hit *sq* given total *occupied*?"""
    while attackers:
        lsb = attackers & -attackers
        from_sq = lsb.bit_length() - 1
        attackers ^= lsb
        piece = board[from_sq]
        if piece is None:
            continue
        if piece.piece_type.is_slider and not is_aligned(from_sq, sq):
            continue
        if attacks_from(piece, from_sq, occupied) >> sq & 1:
            return True
    return False


def is_square_attacked(position: Position, sq: Square, by_color: Color) -> bool:
    """Is *sq* attacked by any piece of *by_color*?"""
    return _attacked_by_mask(
        position.board,
        sq,
        position.occupancy[int(by_color)].mask,
        position.occupied.mask,
    )


def is_in_check(position: Position, color: Color | None = None) -> bool:
    """Is *color*'s king (default: side to move) attacked by the opponent?"""
    if color is None:
        color = position.side_to_move
    return is_square_attacked(position, position.king_square(color), color.opposite)


def king_left_in_check(
    position: Position,
    from_sq: Square,
    to_sq: Square,
    captured_sq: Square | None = None,
) -> bool:
    """Would the mover's king be attacked after moving *from_sq* → *to_sq*?

    Only occupancy masks are updated hypothetically; the board tuple is
    left untouched. *captured_sq* names the square of a piece removed by
    the move when it differs from *to_sq* (en passant).
    """
    board = position.board
    mover = board[from_sq]
    if mover is None:
        return False
    color = mover.color
    own = position.occupancy[int(color)].mask
    enemy = position.occupancy[int(color.opposite)].mask

    from_bit = 1 << from_sq
    to_bit = 1 << to_sq
    own = (own & ~from_bit) | to_bit
    enemy &= ~to_bit
    if captured_sq is not None:
        enemy &= ~(1 << captured_sq)
    occupied = own | enemy

    if mover.piece_type == PieceType.KING:
        king_sq = to_sq
    else:
        king_sq = position.king_square(color)
    return _attacked_by_mask(board, king_sq, enemy, occupied)


# -- Pseudo-legal generation -------------------------------------------------


def _gen_pawn(
    position: Position,
    sq: Square,
    color: Color,
    empty: int,
    enemy: int,
    moves: list[MoveIntent],
) -> None:
    rank_idx = sq >> 3
    file_idx = sq & 7
    step = 8 * color.pawn_direction
    start_rank = 1 if color == Color.WHITE else 6
    promo_rank = 6 if color == Color.WHITE else 1
    append = moves.append

    one_step = sq + step
    if empty >> one_step & 1:
        if rank_idx == promo_rank:
            for pt in PROMOTION_TYPES:
                append(MoveIntent(sq, one_step, pt))
        else:
            append(MoveIntent(sq, one_step))
            two_step = one_step + step
            if rank_idx == start_rank and empty >> two_step & 1:
                append(MoveIntent(sq, two_step))

    for df in (-1, 1):
        if not 0 <= file_idx + df < 8:
            continue
        cap_sq = one_step + df
        if enemy >> cap_sq & 1:
            if rank_idx == promo_rank:
                for pt in PROMOTION_TYPES:
                    append(MoveIntent(sq, cap_sq, pt))
            else:
                append(MoveIntent(sq, cap_sq))
        elif cap_sq == position.en_passant and enemy >> (sq + df) & 1:
            append(MoveIntent(sq, cap_sq))


def _gen_targets(sq: Square, targets: int, moves: list[MoveIntent]) -> None:
    append = moves.append
    while targets:
        lsb = targets & -targets
        append(MoveIntent(sq, lsb.bit_length() - 1))
        targets ^= lsb


def _gen_castling(position: Position, color: Color, moves: list[MoveIntent]) -> None:
    board = position.board
    occupied = position.occupied.mask
    rook = Piece(color, PieceType.ROOK)
    king = Piece(color, PieceType.KING)
    for right, king_sq, king_to, rook_sq, side_color in _CASTLING_PATTERNS:
        if side_color != color or not position.castling & right:
            continue
        if board[king_sq] != king or board[rook_sq] != rook:
            continue
        if squares_between(king_sq, rook_sq) & occupied:
            continue
        moves.append(MoveIntent(king_sq, king_to))


def generate_pseudo_legal_moves(position: Position) -> list[MoveIntent]:
    """All pseudo-legal moves (may leave own king in check).

    Pieces are visited in ascending square order and each piece's
    destinations in ascending order, so output is deterministic.
    """
    moves: list[MoveIntent] = []
    color = position.side_to_move
    board = position.board
    own = position.occupancy[int(color)].mask
    enemy = position.occupancy[int(color.opposite)].mask
    occupied = own | enemy
    empty = ~occupied & 0xFFFFFFFFFFFFFFFF

    pieces = own
    while pieces:
        lsb = pieces & -pieces
        sq = lsb.bit_length() - 1
        pieces ^= lsb
        piece = board[sq]
        if piece is None:
            continue
        ptype = piece.piece_type
        if ptype == PieceType.PAWN:
            _gen_pawn(position, sq, color, empty, enemy, moves)
        elif ptype == PieceType.KNIGHT:
            _gen_targets(sq, KNIGHT_ATTACKS[sq] & ~own, moves)
        elif ptype == PieceType.BISHOP:
            _gen_targets(sq, bishop_attacks(sq, occupied) & ~own, moves)
        elif ptype == PieceType.ROOK:
            _gen_targets(sq, rook_attacks(sq, occupied) & ~own, moves)
        elif ptype == PieceType.QUEEN:
            _gen_targets(sq, queen_attacks(sq, occupied) & ~own, moves)
        else:
            _gen_targets(sq, KING_ATTACKS[sq] & ~own, moves)
            _gen_castling(position, color, moves)
    return moves


# -- Legality filter ---------------------------------------------------------


def _en_passant_capture_square(position: Position, move: MoveIntent) -> Square | None:
    piece = position.board[move.from_sq]
    if (
        piece is not None
        and piece.piece_type == PieceType.PAWN
        and move.to_sq == position.en_passant
        and (move.to_sq & 7) != (move.from_sq & 7)
    ):
        return make_square(move.to_sq & 7, move.from_sq >> 3)
    return None


def castling_path_attacked(position: Position, king_sq: Square, king_to: Square) -> bool:
    """King in check, or passing through / landing on an attacked square."""
    opponent = position.side_to_move.opposite
    transit = (king_sq + king_to) // 2
    return any(
        is_square_attacked(position, sq, opponent) for sq in (king_sq, transit, king_to)
    )


def is_legal(position: Position, move: MoveIntent) -> bool:
    """Legality filter for a pseudo-legal *move*."""
    piece = position.board[move.from_sq]
    if piece is None:
        return False
    if piece.piece_type == PieceType.KING and abs(move.to_sq - move.from_sq) == 2:
        return not castling_path_attacked(position, move.from_sq, move.to_sq)
    return not king_left_in_check(
        position,
        move.from_sq,
        move.to_sq,
        _en_passant_capture_square(position, move),
    )


def generate_legal_moves(position: Position) -> list[MoveIntent]:
    """All strictly legal moves for the side to move."""
    return [m for m in generate_pseudo_legal_moves(position) if is_legal(position, m)]


def generate_captures(position: Position) -> list[MoveIntent]:
    """Legal captures, en passant included."""
    board = position.board
    return [
        m
        for m in generate_legal_moves(position)
        if board[m.to_sq] is not None
        or _en_passant_capture_square(position, m) is not None
    ]


class MoveGenerator:
    """Move generation bound to a single :class:`Position`."""

    __slots__ = ("_pos",)

    def __init__(self, position: Position) -> None:
        self._pos = position

    @property
    def position(self) -> Position:
        return self._pos

    def generate_legal_moves(self) -> list[MoveIntent]:
        return generate_legal_moves(self._pos)

    def generate_pseudo_legal_moves(self) -> list[MoveIntent]:
        return generate_pseudo_legal_moves(self._pos)

    def generate_captures(self) -> list[MoveIntent]:
        return generate_captures(self._pos)

    def is_in_check(self, color: Color | None = None) -> bool:
        return is_in_check(self._pos, color)

    def is_square_attacked(self, sq: Square, by_color: Color) -> bool:
        return is_square_attacked(self._pos, sq, by_color)
