"""Tests for game-status queries: mate, stalemate and the draw rules."""

from collections.abc import Callable

import pytest

from chesscore.core.enums import GameResult
from chesscore.core.position import Position
from chesscore.core.rules import Rules
from chesscore.notation import STARTING_FEN, position_from_fen

PlayFn = Callable[..., Position]

FOOLS_MATE = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"
BACK_RANK_MATE = "R2k4/8/3K4/8/8/8/8/8 b - - 0 1"
STALEMATE = "7k/8/5KQ1/8/8/8/8/8 b - - 0 1"
ROOK_CHECK = "4k3/8/8/8/8/8/8/r3K3 w - - 0 1"
BARE_KINGS = "8/8/4k3/8/8/4K3/8/8 w - - 0 1"


class TestGameStatus:
    @pytest.mark.parametrize(
        ("fen", "check", "mate", "stalemate", "result"),
        [
            (STARTING_FEN, False, False, False, GameResult.IN_PROGRESS),
            (FOOLS_MATE, True, True, False, GameResult.BLACK_WINS),
            (BACK_RANK_MATE, True, True, False, GameResult.WHITE_WINS),
            (ROOK_CHECK, True, False, False, GameResult.IN_PROGRESS),
            (STALEMATE, False, False, True, GameResult.DRAW),
            ("7k/8/5K2/8/8/8/8/8 b - - 0 1", False, False, False, GameResult.DRAW),
        ],
    )
    def test_status(
        self, fen: str, check: bool, mate: bool, stalemate: bool, result: GameResult
    ) -> None:
        pos = position_from_fen(fen)
        assert Rules.is_in_check(pos) is check
        assert Rules.is_checkmate(pos) is mate
        assert Rules.is_stalemate(pos) is stalemate
        assert Rules.game_result(pos) == result

    def test_fools_mate_played_out(self, play: PlayFn) -> None:
        pos = play(Position.initial(), "f2f3", "e7e5", "g2g4", "d8h4")
        assert Rules.is_checkmate(pos)
        assert not Rules.has_legal_moves(pos)


class TestInsufficientMaterial:
    @pytest.mark.parametrize(
        ("fen", "expected"),
        [
            (BARE_KINGS, True),
            ("8/8/4k3/8/8/4K3/3B4/8 w - - 0 1", True),
            ("8/8/4k3/8/8/4K3/3N4/8 w - - 0 1", True),
            ("8/8/4k3/3n4/8/4K3/8/8 w - - 0 1", True),
            # d2 and e7 are both dark
            ("8/4b3/4k3/8/8/4K3/3B4/8 w - - 0 1", True),
            ("8/3b4/4k3/8/8/4K3/3B4/8 w - - 0 1", False),
            ("8/8/4k3/8/8/4K3/3BB3/8 w - - 0 1", False),
            ("8/8/4k3/8/8/4K3/3NN3/8 w - - 0 1", False),
            ("8/8/4k3/8/8/4K3/3R4/8 w - - 0 1", False),
            ("8/8/4k3/8/4P3/4K3/8/8 w - - 0 1", False),
            (STARTING_FEN, False),
        ],
    )
    def test_detection(self, fen: str, expected: bool) -> None:
        assert Rules.is_insufficient_material(position_from_fen(fen)) is expected

    def test_is_automatic_draw(self) -> None:
        pos = position_from_fen(BARE_KINGS)
        assert Rules.is_automatic_draw(pos)
        assert not Rules.is_claimable_draw(pos)
        assert Rules.game_result(pos) == GameResult.DRAW


class TestMoveCounterRules:
    @pytest.mark.parametrize(
        ("clock", "fifty", "seventy_five"),
        [(0, False, False), (99, False, False), (100, True, False), (150, True, True)],
    )
    def test_thresholds(self, clock: int, fifty: bool, seventy_five: bool) -> None:
        pos = position_from_fen(f"4k3/8/8/8/8/8/4K2R/7r w - - {clock} 90")
        assert Rules.is_fifty_move_rule(pos) is fifty
        assert Rules.is_seventy_five_move_rule(pos) is seventy_five

    def test_fifty_moves_must_be_claimed(self) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/4K2R/7r w - - 100 51")
        assert Rules.is_claimable_draw(pos)
        assert not Rules.is_automatic_draw(pos)
        assert Rules.game_result(pos) == GameResult.IN_PROGRESS

    def test_seventy_five_moves_end_the_game(self) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/4K2R/7r w - - 150 76")
        assert Rules.is_automatic_draw(pos)
        assert Rules.game_result(pos) == GameResult.DRAW


class TestRepetition:
    KNIGHTS = "4k2n/8/8/8/8/8/8/4K2N w - - 0 1"
    SHUFFLE = ("h1f2", "h8f7", "f2h1", "f7h8")

    @pytest.mark.parametrize(
        ("cycles", "count", "threefold", "fivefold"),
        [(0, 1, False, False), (1, 2, False, False), (2, 3, True, False), (4, 5, True, True)],
    )
    def test_counts(
        self, play: PlayFn, cycles: int, count: int, threefold: bool, fivefold: bool
    ) -> None:
        pos = play(position_from_fen(self.KNIGHTS), *(self.SHUFFLE * cycles))
        assert pos.repetition_count() == count
        assert Rules.is_threefold_repetition(pos) is threefold
        assert Rules.is_fivefold_repetition(pos) is fivefold

    def test_threefold_is_claimable_only(self, play: PlayFn) -> None:
        pos = play(position_from_fen(self.KNIGHTS), *(self.SHUFFLE * 2))
        assert Rules.is_claimable_draw(pos)
        assert Rules.game_result(pos) == GameResult.IN_PROGRESS

    def test_fivefold_is_automatic(self, play: PlayFn) -> None:
        pos = play(position_from_fen(self.KNIGHTS), *(self.SHUFFLE * 4))
        assert Rules.game_result(pos) == GameResult.DRAW

    def test_knight_shuffle_from_start(self, play: PlayFn) -> None:
        start = Position.initial()
        pos = play(start, *(("g1f3", "g8f6", "f3g1", "f6g8") * 2))
        assert pos.zobrist_hash == start.zobrist_hash
        assert Rules.is_threefold_repetition(pos)
