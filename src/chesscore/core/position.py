"""Position: immutable board + metadata snapshot."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace

from chesscore.core.enums import CastlingRights, Color, PieceType
from chesscore.core.errors import ErrorKind, InvariantViolation, ParseError
from chesscore.core.events import MoveEvent
from chesscore.core.piece import Piece
from chesscore.core.squareset import SquareSet
from chesscore.core.types import Square, is_valid_square, make_square, rank_of, square_name
from chesscore.core.zobrist import compute_hash

_BACK_RANK: tuple[PieceType, ...] = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)

# castling right -> (king home, rook corner)
_CASTLING_HOMES: dict[CastlingRights, tuple[Square, Square, Color]] = {
    CastlingRights.WHITE_KINGSIDE: (make_square(4, 0), make_square(7, 0), Color.WHITE),
    CastlingRights.WHITE_QUEENSIDE: (make_square(4, 0), make_square(0, 0), Color.WHITE),
    CastlingRights.BLACK_KINGSIDE: (make_square(4, 7), make_square(7, 7), Color.BLACK),
    CastlingRights.BLACK_QUEENSIDE: (make_square(4, 7), make_square(0, 7), Color.BLACK),
}


def occupancy_from_board(
    board: tuple[Piece | None, ...],
) -> tuple[SquareSet, SquareSet]:
    """Recompute per-color occupancy from a 64-slot board."""
    masks = [0, 0]
    for sq, piece in enumerate(board):
        if piece is not None:
            masks[int(piece.color)] |= 1 << sq
    return (SquareSet(masks[0]), SquareSet(masks[1]))


@dataclass(frozen=True, slots=True)
class Position:
    """Full chess position: board, occupancy cache, side to move and clocks.

    Instances are never mutated. The transition engine builds successors
    with a single constructor call, so ``occupancy`` always mirrors
    ``board``. ``history`` and ``key_history`` do not take part in
    equality: two positions with the same placement and state are equal
    whatever the path that reached them.
    """

    board: tuple[Piece | None, ...]
    occupancy: tuple[SquareSet, SquareSet]
    side_to_move: Color = Color.WHITE
    castling: CastlingRights = CastlingRights.ALL
    en_passant: Square | None = None
    halfmove_clock: int = 0
    fullmove_number: int = 1
    history: tuple[MoveEvent, ...] = field(default=(), compare=False, repr=False)
    zobrist_hash: int | None = field(default=None, compare=False)
    key_history: tuple[int, ...] = field(default=(), compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.zobrist_hash is None:
            object.__setattr__(self, "zobrist_hash", compute_hash(self))
        if not self.key_history:
            object.__setattr__(self, "key_history", (self.zobrist_hash,))

    # ── Factories ────────────────────────────────────────────────────────

    @classmethod
    def initial(cls) -> Position:
        """Standard starting position."""
        board: list[Piece | None] = [None] * 64
        for f, pt in enumerate(_BACK_RANK):
            board[make_square(f, 0)] = Piece(Color.WHITE, pt)
            board[make_square(f, 1)] = Piece(Color.WHITE, PieceType.PAWN)
            board[make_square(f, 6)] = Piece(Color.BLACK, PieceType.PAWN)
            board[make_square(f, 7)] = Piece(Color.BLACK, pt)
        frozen = tuple(board)
        return cls(frozen, occupancy_from_board(frozen))

    @classmethod
    def from_board_description(
        cls,
        pieces: Mapping[Square, Piece] | Iterable[tuple[Square, Piece]],
        side_to_move: Color = Color.WHITE,
        castling: CastlingRights = CastlingRights.NONE,
        en_passant: Square | None = None,
        halfmove_clock: int = 0,
        fullmove_number: int = 1,
    ) -> Position:
        """Build a position from an already-parsed board description.

        Raises :class:`ParseError` when the description cannot be a legal
        chess position.
        """
        items = pieces.items() if isinstance(pieces, Mapping) else pieces
        board: list[Piece | None] = [None] * 64
        for sq, piece in items:
            if not is_valid_square(sq):
                raise ParseError(ErrorKind.INVALID_POSITION, f"square {sq} out of range")
            if board[sq] is not None:
                raise ParseError(
                    ErrorKind.INVALID_POSITION, f"two pieces on {square_name(sq)}"
                )
            if piece.piece_type == PieceType.PAWN and rank_of(sq) in (0, 7):
                raise ParseError(
                    ErrorKind.INVALID_POSITION, f"pawn on back rank {square_name(sq)}"
                )
            board[sq] = piece

        for color in Color:
            kings = sum(
                1
                for p in board
                if p is not None and p.color == color and p.piece_type == PieceType.KING
            )
            if kings != 1:
                raise ParseError(
                    ErrorKind.INVALID_POSITION,
                    f"{color} must have exactly one king, found {kings}",
                )

        for right, (king_sq, rook_sq, color) in _CASTLING_HOMES.items():
            if not castling & right:
                continue
            if board[king_sq] != Piece(color, PieceType.KING) or board[rook_sq] != Piece(
                color, PieceType.ROOK
            ):
                raise ParseError(
                    ErrorKind.INVALID_POSITION,
                    f"castling right {right.name} without king and rook at home",
                )

        if en_passant is not None:
            expected_rank = 5 if side_to_move == Color.WHITE else 2
            if not is_valid_square(en_passant) or rank_of(en_passant) != expected_rank:
                raise ParseError(
                    ErrorKind.INVALID_POSITION, f"bad en passant square {en_passant}"
                )
            mover = side_to_move.opposite
            pushed = en_passant + 8 * mover.pawn_direction
            if board[en_passant] is not None or board[pushed] != Piece(
                mover, PieceType.PAWN
            ):
                raise ParseError(
                    ErrorKind.INVALID_POSITION,
                    f"en passant square {square_name(en_passant)} without a "
                    f"double-pushed pawn on {square_name(pushed)}",
                )

        if halfmove_clock < 0 or fullmove_number < 1:
            raise ParseError(ErrorKind.INVALID_POSITION, "negative move counters")

        frozen = tuple(board)
        return cls(
            frozen,
            occupancy_from_board(frozen),
            side_to_move,
            castling,
            en_passant,
            halfmove_clock,
            fullmove_number,
        )

    # ── Queries ──────────────────────────────────────────────────────────

    def piece_at(self, sq: Square) -> Piece | None:
        return self.board[sq]

    def is_empty(self, sq: Square) -> bool:
        return self.board[sq] is None

    def occupancy_of(self, color: Color) -> SquareSet:
        return self.occupancy[int(color)]

    @property
    def occupied(self) -> SquareSet:
        return self.occupancy[0] | self.occupancy[1]

    def pieces(self, color: Color, piece_type: PieceType) -> list[Square]:
        """Squares occupied by *color*'s *piece_type*, ascending."""
        board = self.board
        return [
            sq
            for sq in self.occupancy[int(color)]
            if board[sq].piece_type == piece_type  # type: ignore[union-attr]
        ]

    def king_square(self, color: Color) -> Square:
        """Return the single king square for *color*."""
        board = self.board
        for sq in self.occupancy[int(color)]:
            piece = board[sq]
            if piece is not None and piece.piece_type == PieceType.KING:
                return sq
        raise InvariantViolation(f"No {color.name} king on board")

    def repetition_count(self) -> int:
        """How many times the current position key occurred in the game."""
        return self.key_history.count(self.key_history[-1])

    def with_side_to_move(self, color: Color) -> Position:
        """Same placement with *color* to move and no en passant target."""
        if color == self.side_to_move and self.en_passant is None:
            return self
        flipped = replace(
            self,
            side_to_move=color,
            en_passant=None,
            zobrist_hash=None,
            key_history=(),
        )
        return flipped

    # ── Invariants ───────────────────────────────────────────────────────

    def verify_invariants(self) -> None:
        """Raise :class:`InvariantViolation` if the occupancy cache drifted."""
        if len(self.board) != 64:
            raise InvariantViolation(f"board has {len(self.board)} squares")
        expected = occupancy_from_board(self.board)
        if expected != self.occupancy:
            raise InvariantViolation(
                f"occupancy cache {self.occupancy!r} != board occupancy {expected!r}"
            )
        if self.occupancy[0] & self.occupancy[1]:
            raise InvariantViolation("square occupied by both colors")

    # ── Dunder helpers ───────────────────────────────────────────────────

    def __str__(self) -> str:
        rows: list[str] = []
        for rank in range(7, -1, -1):
            row = []
            for file in range(8):
                p = self.board[make_square(file, rank)]
                row.append(str(p) if p else ".")
            rows.append(f"{rank + 1} {' '.join(row)}")
        rows.append("  a b c d e f g h")
        return "\n".join(rows)
