"""Tests for GameState make/unmake, clocks, castling rights and keys."""

import pytest

from rookery.core.enums import CastlingRights, Color, PieceType
from rookery.core.move_generator import MoveGenerator
from rookery.core.notation import parse_coordinates, state_from_fen
from rookery.core.piece import Piece
from rookery.core.state import GameState
from rookery.core.types import A1, D5, D6, E3, E6, F1, G1, H1, H8

KIWIPETE = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"
CASTLE_FEN = "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1"


def play(state: GameState, *moves: str) -> GameState:
    for text in moves:
        state.make_move(parse_coordinates(state, text))
    return state


class TestInitial:
    def test_defaults(self) -> None:
        state = GameState.initial()
        assert state.turn == Color.WHITE
        assert state.castling == CastlingRights.ALL
        assert state.en_passant is None
        assert state.halfmove_clock == 0
        assert state.fullmove_number == 1
        assert state.last_move is None

    def test_position_key(self) -> None:
        assert (
            GameState.initial().position_key()
            == "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq -"
        )


class TestMakeUnmake:
    @pytest.mark.parametrize("fen", [KIWIPETE, CASTLE_FEN])
    def test_every_move_round_trips(self, fen: str) -> None:
        state = state_from_fen(fen)
        before = state.copy()
        for move in MoveGenerator(state).generate_legal_moves():
            state.make_move(move)
            state.unmake_move(move)
            assert state == before, f"State changed after {move}"
            assert state.board.find_king(Color.WHITE) == before.board.find_king(
                Color.WHITE
            )

    def test_turn_and_fullmove(self) -> None:
        state = play(GameState.initial(), "e2e4")
        assert state.turn == Color.BLACK
        assert state.fullmove_number == 1
        play(state, "e7e5")
        assert state.turn == Color.WHITE
        assert state.fullmove_number == 2

    def test_halfmove_clock(self) -> None:
        state = play(GameState.initial(), "g1f3")
        assert state.halfmove_clock == 1
        play(state, "b8c6")
        assert state.halfmove_clock == 2
        play(state, "e2e4")
        assert state.halfmove_clock == 0

    def test_last_move(self) -> None:
        state = play(GameState.initial(), "e2e4")
        assert state.last_move is not None
        assert str(state.last_move) == "e2e4"

    def test_missing_piece_raises(self) -> None:
        state = GameState.initial()
        move = parse_coordinates(state, "e2e4")
        state.make_move(move)
        with pytest.raises(ValueError):
            state.make_move(move)


class TestEnPassantTarget:
    def test_set_after_double_push(self) -> None:
        state = play(GameState.initial(), "e2e4")
        assert state.en_passant == E3

    def test_cleared_after_other_move(self) -> None:
        state = play(GameState.initial(), "e2e4", "g8f6")
        assert state.en_passant is None

    def test_replaced_by_next_double_push(self) -> None:
        state = play(GameState.initial(), "e2e4", "e7e5")
        assert state.en_passant == E6

    def test_en_passant_capture_removes_pawn(self) -> None:
        state = state_from_fen("4k3/8/8/3pP3/8/8/8/4K3 w - d6 0 1")
        move = parse_coordinates(state, "e5d6")
        assert move.is_en_passant
        before = state.copy()
        state.make_move(move)
        assert state.board[D5] is None
        assert state.board[D6] == Piece(Color.WHITE, PieceType.PAWN)
        state.unmake_move(move)
        assert state == before


class TestCastlingRights:
    def test_king_move_clears_both(self) -> None:
        state = play(state_from_fen(CASTLE_FEN), "e1e2")
        assert not state.castling & CastlingRights.WHITE_BOTH
        assert state.castling & CastlingRights.BLACK_BOTH == CastlingRights.BLACK_BOTH

    def test_rook_move_clears_one(self) -> None:
        state = play(state_from_fen(CASTLE_FEN), "h1h2")
        assert not state.castling & CastlingRights.WHITE_KINGSIDE
        assert state.castling & CastlingRights.WHITE_QUEENSIDE

    def test_rook_captured_on_corner(self) -> None:
        state = play(state_from_fen(CASTLE_FEN), "a1a8")
        assert not state.castling & CastlingRights.BLACK_QUEENSIDE
        assert not state.castling & CastlingRights.WHITE_QUEENSIDE

    def test_rights_never_reappear(self) -> None:
        state = play(state_from_fen(CASTLE_FEN), "h1g1", "h8g8", "g1h1", "g8h8")
        assert state.castling & CastlingRights.WHITE_KINGSIDE == CastlingRights.NONE
        assert state.castling & CastlingRights.BLACK_KINGSIDE == CastlingRights.NONE
        assert state.board[H1] == Piece(Color.WHITE, PieceType.ROOK)
        assert state.board[H8] == Piece(Color.BLACK, PieceType.ROOK)

    def test_castling_moves_rook(self) -> None:
        state = play(state_from_fen(CASTLE_FEN), "e1g1")
        assert state.board[G1] == Piece(Color.WHITE, PieceType.KING)
        assert state.board[F1] == Piece(Color.WHITE, PieceType.ROOK)
        assert state.board[H1] is None
        assert state.board[A1] == Piece(Color.WHITE, PieceType.ROOK)


class TestScopedApply:
    def test_applied_restores(self) -> None:
        state = GameState.initial()
        before = state.copy()
        move = parse_coordinates(state, "e2e4")
        with state.applied(move) as inner:
            assert inner.turn == Color.BLACK
        assert state == before

    def test_applied_restores_on_error(self) -> None:
        state = GameState.initial()
        before = state.copy()
        move = parse_coordinates(state, "g1f3")
        with pytest.raises(RuntimeError):
            with state.applied(move):
                raise RuntimeError("boom")
        assert state == before
        assert state.ply_depth == 0


class TestNullMove:
    def test_null_move_round_trip(self) -> None:
        state = play(GameState.initial(), "e2e4")
        before = state.copy()
        state.make_null_move()
        assert state.turn == Color.WHITE
        assert state.en_passant is None
        assert state.fullmove_number == 2
        state.unmake_null_move()
        assert state == before


class TestCopy:
    def test_copy_equal_but_independent(self) -> None:
        state = play(GameState.initial(), "e2e4")
        clone = state.copy()
        assert clone == state
        assert clone.ply_depth == 0
        play(clone, "e7e5")
        assert clone != state
        assert state.turn == Color.BLACK
