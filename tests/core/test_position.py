"""Tests for Position construction, queries and invariants."""

from dataclasses import replace

import pytest

from chesscore.core.enums import CastlingRights, Color, PieceType
from chesscore.core.errors import ErrorKind, InvariantViolation, ParseError
from chesscore.core.piece import Piece
from chesscore.core.position import Position
from chesscore.core.squareset import SquareSet
from chesscore.core.types import (
    A1,
    A8,
    B1,
    C1,
    D1,
    E1,
    E8,
    F1,
    G1,
    H1,
    H8,
    parse_square,
)
from chesscore.core.zobrist import compute_hash

WK = Piece(Color.WHITE, PieceType.KING)
BK = Piece(Color.BLACK, PieceType.KING)
WR = Piece(Color.WHITE, PieceType.ROOK)
WP = Piece(Color.WHITE, PieceType.PAWN)
BP = Piece(Color.BLACK, PieceType.PAWN)


class TestInitial:
    def test_back_ranks(self) -> None:
        pos = Position.initial()
        expected = [
            (A1, PieceType.ROOK), (B1, PieceType.KNIGHT), (C1, PieceType.BISHOP),
            (D1, PieceType.QUEEN), (E1, PieceType.KING), (F1, PieceType.BISHOP),
            (G1, PieceType.KNIGHT), (H1, PieceType.ROOK),
        ]  # fmt: skip
        for sq, pt in expected:
            assert pos.piece_at(sq) == Piece(Color.WHITE, pt), f"Mismatch at {sq}"
            assert pos.piece_at(sq ^ 56) == Piece(Color.BLACK, pt)

    def test_metadata(self) -> None:
        pos = Position.initial()
        assert pos.side_to_move == Color.WHITE
        assert pos.castling == CastlingRights.ALL
        assert pos.en_passant is None
        assert pos.halfmove_clock == 0
        assert pos.fullmove_number == 1
        assert pos.history == ()

    def test_occupancy(self) -> None:
        pos = Position.initial()
        assert len(pos.occupancy_of(Color.WHITE)) == 16
        assert len(pos.occupancy_of(Color.BLACK)) == 16
        assert len(pos.occupied) == 32
        assert all(pos.is_empty(sq) for sq in range(16, 48))
        pos.verify_invariants()

    def test_pieces_and_kings(self) -> None:
        pos = Position.initial()
        pawns = pos.pieces(Color.WHITE, PieceType.PAWN)
        assert pawns == list(range(8, 16))
        assert pos.king_square(Color.WHITE) == E1
        assert pos.king_square(Color.BLACK) == E8

    def test_hash_and_history_key(self) -> None:
        pos = Position.initial()
        assert pos.zobrist_hash == compute_hash(pos)
        assert pos.key_history == (pos.zobrist_hash,)
        assert pos.repetition_count() == 1

    def test_immutable(self) -> None:
        pos = Position.initial()
        with pytest.raises(AttributeError):
            pos.side_to_move = Color.BLACK  # type: ignore[misc]

    def test_str_diagram(self) -> None:
        lines = str(Position.initial()).splitlines()
        assert lines[0] == "8 r n b q k b n r"
        assert lines[-1] == "  a b c d e f g h"


class TestFromBoardDescription:
    def test_minimal_kings(self) -> None:
        pos = Position.from_board_description({E1: WK, E8: BK})
        assert pos.castling == CastlingRights.NONE
        assert len(pos.occupied) == 2
        pos.verify_invariants()

    def test_accepts_pairs(self) -> None:
        pos = Position.from_board_description(
            [(E1, WK), (E8, BK), (H1, WR)],
            castling=CastlingRights.WHITE_KINGSIDE,
        )
        assert pos.piece_at(H1) == WR
        assert pos.castling == CastlingRights.WHITE_KINGSIDE

    def test_missing_king(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            Position.from_board_description({E1: WK})
        assert exc_info.value.kind == ErrorKind.INVALID_POSITION

    def test_two_kings_same_color(self) -> None:
        with pytest.raises(ParseError):
            Position.from_board_description({E1: WK, D1: WK, E8: BK})

    def test_duplicate_square(self) -> None:
        with pytest.raises(ParseError):
            Position.from_board_description([(E1, WK), (E8, BK), (E8, WR)])

    def test_square_out_of_range(self) -> None:
        with pytest.raises(ParseError):
            Position.from_board_description({E1: WK, E8: BK, 64: WR})

    @pytest.mark.parametrize("square", [A1, A8])
    def test_pawn_on_back_rank(self, square: int) -> None:
        with pytest.raises(ParseError):
            Position.from_board_description({E1: WK, E8: BK, square: WP})

    def test_castling_without_rook(self) -> None:
        with pytest.raises(ParseError):
            Position.from_board_description(
                {E1: WK, E8: BK}, castling=CastlingRights.WHITE_KINGSIDE
            )

    def test_castling_with_displaced_king(self) -> None:
        with pytest.raises(ParseError):
            Position.from_board_description(
                {D1: WK, E8: BK, A1: WR}, castling=CastlingRights.WHITE_QUEENSIDE
            )

    def test_en_passant_rank_must_match_side(self) -> None:
        e6, e5 = parse_square("e6"), parse_square("e5")
        e3, e4 = parse_square("e3"), parse_square("e4")
        pos = Position.from_board_description({E1: WK, E8: BK, e5: BP}, en_passant=e6)
        assert pos.en_passant == e6
        with pytest.raises(ParseError):
            Position.from_board_description({E1: WK, E8: BK, e4: WP}, en_passant=e3)
        black = Position.from_board_description(
            {E1: WK, E8: BK, e4: WP}, side_to_move=Color.BLACK, en_passant=e3
        )
        assert black.en_passant == e3

    @pytest.mark.parametrize(
        "extra",
        [
            {},
            {"e5": WP},
            {"e5": BP, "e6": BP},
            {"e5": Piece(Color.BLACK, PieceType.KNIGHT)},
        ],
    )
    def test_en_passant_needs_double_pushed_pawn(self, extra: dict[str, Piece]) -> None:
        pieces = {E1: WK, E8: BK, parse_square("d5"): WP}
        pieces.update({parse_square(name): p for name, p in extra.items()})
        with pytest.raises(ParseError) as exc_info:
            Position.from_board_description(pieces, en_passant=parse_square("e6"))
        assert exc_info.value.kind == ErrorKind.INVALID_POSITION

    def test_bad_counters(self) -> None:
        with pytest.raises(ParseError):
            Position.from_board_description({E1: WK, E8: BK}, halfmove_clock=-1)
        with pytest.raises(ParseError):
            Position.from_board_description({E1: WK, E8: BK}, fullmove_number=0)


class TestQueries:
    def test_with_side_to_move(self) -> None:
        pos = Position.initial()
        assert pos.with_side_to_move(Color.WHITE) is pos
        flipped = pos.with_side_to_move(Color.BLACK)
        assert flipped.side_to_move == Color.BLACK
        assert flipped.board == pos.board
        assert flipped.zobrist_hash == compute_hash(flipped)
        assert flipped.zobrist_hash != pos.zobrist_hash
        assert pos.side_to_move == Color.WHITE

    def test_with_side_to_move_clears_en_passant(self) -> None:
        pos = Position.from_board_description(
            {E1: WK, E8: BK, parse_square("d5"): BP}, en_passant=parse_square("d6")
        )
        flipped = pos.with_side_to_move(Color.BLACK)
        assert flipped.en_passant is None

    def test_equality_ignores_history(self) -> None:
        a = Position.initial()
        b = replace(a, history=(), key_history=(1, 2, a.zobrist_hash))
        assert a == b

    def test_missing_king_is_invariant_violation(self) -> None:
        pos = Position.initial()
        board = list(pos.board)
        board[E1] = None
        broken = replace(pos, board=tuple(board), zobrist_hash=0)
        with pytest.raises(InvariantViolation):
            broken.king_square(Color.WHITE)


class TestInvariants:
    def test_drifted_occupancy_detected(self) -> None:
        pos = Position.initial()
        drifted = replace(
            pos,
            occupancy=(pos.occupancy[0].remove(E1), pos.occupancy[1]),
        )
        with pytest.raises(InvariantViolation):
            drifted.verify_invariants()

    def test_overlapping_colors_detected(self) -> None:
        pos = Position.from_board_description({E1: WK, E8: BK})
        both = SquareSet.from_squares([E1, E8])
        with pytest.raises(InvariantViolation):
            replace(pos, occupancy=(both, both)).verify_invariants()

    def test_h8_is_black_king_square(self) -> None:
        pos = Position.from_board_description({A1: WK, H8: BK})
        assert pos.king_square(Color.BLACK) == H8
