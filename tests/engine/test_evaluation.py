"""Tests for the static evaluator."""

import pytest

from rookery.core.move_generator import MoveGenerator
from rookery.core.notation import state_from_fen
from rookery.core.state import GameState
from rookery.engine.evaluation import MATE_SCORE, Evaluator, is_endgame

DOUBLED_WHITE = "4k3/8/8/8/8/4P3/4P3/4K3 w - - 0 1"
DOUBLED_BLACK = "4k3/4p3/4p3/8/8/8/8/4K3 w - - 0 1"
PASSED_D5 = "4k3/8/8/3P4/8/8/8/4K3 w - - 0 1"
PASSED_D6 = "4k3/8/3P4/8/8/8/8/4K3 w - - 0 1"


@pytest.fixture()
def evaluator() -> Evaluator:
    return Evaluator()


class TestTerminal:
    def test_checkmated_side(self, evaluator: Evaluator) -> None:
        state = state_from_fen("R2k4/8/3K4/8/8/8/8/8 b - - 0 1")
        assert evaluator.evaluate(state) == -MATE_SCORE

    def test_stalemate_is_zero(self, evaluator: Evaluator) -> None:
        state = state_from_fen("7k/8/5KQ1/8/8/8/8/8 b - - 0 1")
        assert evaluator.evaluate(state) == 0


class TestBalance:
    def test_start_position_small_and_side_independent(self, evaluator: Evaluator) -> None:
        white = GameState.initial()
        black = state_from_fen("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR b KQkq - 0 1")
        score = evaluator.evaluate(white)
        assert 0 < score <= 2
        assert evaluator.evaluate(black) == score

    def test_extra_queen(self, evaluator: Evaluator) -> None:
        white_to_move = state_from_fen("4k3/8/8/8/8/8/8/3QK3 w - - 0 1")
        black_to_move = state_from_fen("4k3/8/8/8/8/8/8/3QK3 b - - 0 1")
        assert evaluator.evaluate(white_to_move) > 200
        assert evaluator.evaluate(black_to_move) < -200

    def test_material_counts_both_sides(self, evaluator: Evaluator) -> None:
        board = GameState.initial().board
        assert evaluator.material(board, endgame=False) == 0


class TestPawnStructure:
    def test_doubled_white(self, evaluator: Evaluator) -> None:
        assert evaluator.pawn_structure(state_from_fen(DOUBLED_WHITE).board) == -30

    def test_doubled_black(self, evaluator: Evaluator) -> None:
        assert evaluator.pawn_structure(state_from_fen(DOUBLED_BLACK).board) == 30

    def test_isolated_passed_pawn(self, evaluator: Evaluator) -> None:
        # 40 + 3 * 15 passed, minus 25 isolated
        assert evaluator.pawn_structure(state_from_fen(PASSED_D5).board) == 60

    def test_advanced_passer_worth_more(self, evaluator: Evaluator) -> None:
        d5 = evaluator.pawn_structure(state_from_fen(PASSED_D5).board)
        d6 = evaluator.pawn_structure(state_from_fen(PASSED_D6).board)
        assert d6 - d5 == 15

    def test_blocked_by_enemy_pawn_is_not_passed(self, evaluator: Evaluator) -> None:
        state = state_from_fen("4k3/3p4/8/3P4/8/8/8/4K3 w - - 0 1")
        # Both pawns isolated, neither passed
        assert evaluator.pawn_structure(state.board) == 0


class TestKingSafety:
    def test_castling_rights_bonus(self, evaluator: Evaluator) -> None:
        with_rights = state_from_fen("r3k2r/pppppppp/8/8/8/8/PPPPPPPP/R3K2R w KQkq - 0 1")
        without = state_from_fen("r3k2r/pppppppp/8/8/8/8/PPPPPPPP/R3K2R w kq - 0 1")
        a = evaluator.king_safety(with_rights, MoveGenerator(with_rights), False)
        b = evaluator.king_safety(without, MoveGenerator(without), False)
        assert a - b == 25

    def test_check_penalised(self, evaluator: Evaluator) -> None:
        quiet = state_from_fen("4k3/8/8/8/8/8/8/R3K3 b - - 0 1")
        check = state_from_fen("R3k3/8/8/8/8/8/8/4K3 b - - 0 1")
        quiet_score = evaluator.king_safety(quiet, MoveGenerator(quiet), True)
        check_score = evaluator.king_safety(check, MoveGenerator(check), True)
        # White's view: the checked black king costs black the endgame penalty
        assert check_score - quiet_score == 60


class TestEndgameDetection:
    def test_start_is_not_endgame(self) -> None:
        assert not is_endgame(GameState.initial().board)

    def test_few_pieces(self) -> None:
        assert is_endgame(state_from_fen("4k3/8/8/8/8/8/8/3QK3 w - - 0 1").board)

    def test_few_majors(self) -> None:
        # All minors and pawns, but only one rook left
        state = state_from_fen("1nb1kbn1/pppppppp/8/8/8/8/PPPPPPPP/1NB1KBNR w K - 0 1")
        assert is_endgame(state.board)
