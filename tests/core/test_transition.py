"""Tests for apply_move: successors, events, clocks and incremental hashing."""

from collections.abc import Callable

import pytest

from chesscore.core.enums import CastlingRights, CastlingSide, Color, PieceType
from chesscore.core.events import (
    CastlingExecuted,
    EnPassantExecuted,
    MoveEvent,
    MoveExecuted,
    PromotionExecuted,
)
from chesscore.core.move import MoveIntent
from chesscore.core.move_generator import generate_legal_moves
from chesscore.core.piece import Piece
from chesscore.core.position import Position, occupancy_from_board
from chesscore.core.transition import apply_move
from chesscore.core.types import parse_square
from chesscore.core.validation import validate_move
from chesscore.core.zobrist import compute_hash
from chesscore.notation import position_from_fen, position_to_fen

PlayFn = Callable[..., Position]


def _apply(pos: Position, token: str) -> tuple[Position, MoveEvent]:
    return apply_move(pos, validate_move(pos, MoveIntent.from_token(token)).unwrap())


class TestBasicTransition:
    def test_e2e4(self, initial: Position) -> None:
        after, event = _apply(initial, "e2e4")
        assert after.piece_at(parse_square("e4")) == Piece(Color.WHITE, PieceType.PAWN)
        assert after.piece_at(parse_square("e2")) is None
        assert after.side_to_move == Color.BLACK
        assert after.en_passant == parse_square("e3")
        assert after.halfmove_clock == 0
        assert after.fullmove_number == 1
        assert isinstance(event, MoveExecuted)
        assert after.history == (event,)

    def test_input_position_untouched(self, initial: Position) -> None:
        fen_before = position_to_fen(initial)
        _apply(initial, "e2e4")
        assert position_to_fen(initial) == fen_before
        assert initial.history == ()

    def test_fen_after_e4(self, initial: Position) -> None:
        after, _ = _apply(initial, "e2e4")
        assert position_to_fen(after) == (
            "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"
        )

    def test_en_passant_cleared_next_move(self, play: PlayFn) -> None:
        pos = play(Position.initial(), "e2e4", "g8f6")
        assert pos.en_passant is None

    def test_new_double_push_replaces_target(self, play: PlayFn) -> None:
        pos = play(Position.initial(), "e2e4", "d7d5")
        assert pos.en_passant == parse_square("d6")

    def test_fullmove_increments_after_black(self, play: PlayFn) -> None:
        pos = play(Position.initial(), "e2e4", "e7e5")
        assert pos.fullmove_number == 2

    def test_halfmove_clock(self, play: PlayFn) -> None:
        pos = play(Position.initial(), "g1f3", "g8f6", "b1c3")
        assert pos.halfmove_clock == 3
        pos = play(pos, "e7e5")
        assert pos.halfmove_clock == 0
        pos = play(pos, "f3e5")
        assert pos.halfmove_clock == 0

    def test_capture_event(self, play: PlayFn) -> None:
        pos = play(Position.initial(), "e2e4", "d7d5")
        after, event = _apply(pos, "e4d5")
        assert isinstance(event, MoveExecuted)
        assert event.captured == Piece(Color.BLACK, PieceType.PAWN)
        assert event.castling_before == CastlingRights.ALL
        assert event.en_passant_before == parse_square("d6")
        assert len(after.occupancy_of(Color.BLACK)) == 15


class TestSpecialMoves:
    def test_en_passant(self) -> None:
        pos = position_from_fen("4k3/8/8/3pP3/8/8/8/4K3 w - d6 0 1")
        after, event = _apply(pos, "e5d6")
        assert isinstance(event, EnPassantExecuted)
        assert event.captured_square == parse_square("d5")
        assert after.piece_at(parse_square("d5")) is None
        assert after.piece_at(parse_square("d6")) == Piece(Color.WHITE, PieceType.PAWN)
        assert len(after.occupancy_of(Color.BLACK)) == 1
        assert after.halfmove_clock == 0

    def test_kingside_castling(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 3 10")
        after, event = _apply(pos, "e1g1")
        assert isinstance(event, CastlingExecuted)
        assert event.side == CastlingSide.KINGSIDE
        assert after.piece_at(parse_square("g1")) == Piece(Color.WHITE, PieceType.KING)
        assert after.piece_at(parse_square("f1")) == Piece(Color.WHITE, PieceType.ROOK)
        assert after.piece_at(parse_square("h1")) is None
        assert after.castling == CastlingRights.BLACK_BOTH
        assert after.halfmove_clock == 4

    def test_queenside_castling_black(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3K2R b KQkq - 0 1")
        after, event = _apply(pos, "e8c8")
        assert isinstance(event, CastlingExecuted)
        assert event.side == CastlingSide.QUEENSIDE
        assert (event.rook_from, event.rook_to) == (
            parse_square("a8"),
            parse_square("d8"),
        )
        assert after.piece_at(parse_square("d8")) == Piece(Color.BLACK, PieceType.ROOK)
        assert after.castling == CastlingRights.WHITE_BOTH
        assert after.fullmove_number == 2

    def test_rook_move_clears_one_right(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
        after, _ = _apply(pos, "h1h5")
        assert after.castling == (
            CastlingRights.WHITE_QUEENSIDE | CastlingRights.BLACK_BOTH
        )

    def test_rook_capture_clears_victim_right(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
        after, _ = _apply(pos, "a1a8")
        assert after.castling == (
            CastlingRights.WHITE_KINGSIDE | CastlingRights.BLACK_KINGSIDE
        )

    def test_rights_never_return(self, play: PlayFn) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
        pos = play(pos, "e1e2", "e8e7", "e2e1", "e7e8")
        assert pos.castling == CastlingRights.NONE

    @pytest.mark.parametrize("promo", ["q", "r", "b", "n"])
    def test_promotion(self, promo: str) -> None:
        pos = position_from_fen("8/P6k/8/8/8/8/8/K7 w - - 5 40")
        after, event = _apply(pos, f"a7a8{promo}")
        assert isinstance(event, PromotionExecuted)
        expected = PieceType.from_symbol(promo)
        assert event.promoted_to == expected
        assert after.piece_at(parse_square("a8")) == Piece(Color.WHITE, expected)
        assert after.pieces(Color.WHITE, PieceType.PAWN) == []
        assert after.halfmove_clock == 0

    def test_promotion_capture_event(self) -> None:
        pos = position_from_fen("1r5k/P7/8/8/8/8/8/K7 w - - 0 1")
        after, event = _apply(pos, "a7b8q")
        assert isinstance(event, PromotionExecuted)
        assert event.captured == Piece(Color.BLACK, PieceType.ROOK)
        assert len(after.occupancy_of(Color.BLACK)) == 1


def _walk(pos: Position, depth: int, seen: list[Position]) -> None:
    seen.append(pos)
    if depth == 0:
        return
    for move in generate_legal_moves(pos)[:8]:
        child, _ = apply_move(pos, validate_move(pos, move).unwrap())
        _walk(child, depth - 1, seen)


class TestInvariantsAcrossGames:
    @pytest.mark.parametrize(
        "fen",
        [
            "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1",
            "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1",
            "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1",
            "r3k2r/Pppp1ppp/1b3nbN/nP6/BBP1P3/q4N2/Pp1P2PP/R2Q1RK1 w kq - 0 1",
        ],
    )
    def test_occupancy_and_hash_stay_consistent(self, fen: str) -> None:
        positions: list[Position] = []
        _walk(position_from_fen(fen), 3, positions)
        for pos in positions:
            assert occupancy_from_board(pos.board) == pos.occupancy
            assert pos.zobrist_hash == compute_hash(pos)
            assert len(pos.key_history) == len(pos.history) + 1

    def test_en_passant_hash(self) -> None:
        pos = position_from_fen("4k3/8/8/3pP3/8/8/8/4K3 w - d6 0 1")
        after, _ = _apply(pos, "e5d6")
        assert after.zobrist_hash == compute_hash(after)

    def test_transposition_same_hash(self, play: PlayFn) -> None:
        a = play(Position.initial(), "g1f3", "g8f6", "b1c3")
        b = play(Position.initial(), "b1c3", "g8f6", "g1f3")
        assert a.zobrist_hash == b.zobrist_hash
        assert a == b
