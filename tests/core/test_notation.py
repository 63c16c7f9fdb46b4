"""Tests for FEN and move text."""

import pytest

from rookery.core.enums import CastlingRights, Color, PieceType
from rookery.core.move_generator import MoveGenerator
from rookery.core.notation import (
    STARTING_FEN,
    move_to_notation,
    parse_coordinates,
    state_from_fen,
    state_to_fen,
)
from rookery.core.piece import Piece
from rookery.core.state import GameState
from rookery.core.types import E1, E3, E4, E7, E8, G1, H1

KIWIPETE = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"


def notate(state: GameState, text: str) -> str:
    """Render coordinate *text* and then play it."""
    move = parse_coordinates(state, text)
    rendered = move_to_notation(state, move)
    state.make_move(move)
    return rendered


# ── FEN ──────────────────────────────────────────────────────────────────────


class TestFenParse:
    def test_starting_position(self) -> None:
        state = state_from_fen(STARTING_FEN)
        assert state == GameState.initial()

    def test_fields(self) -> None:
        state = state_from_fen("4k3/8/8/8/4P3/8/8/4K2R b K e3 3 17")
        assert state.turn == Color.BLACK
        assert state.castling == CastlingRights.WHITE_KINGSIDE
        assert state.en_passant == E3
        assert state.halfmove_clock == 3
        assert state.fullmove_number == 17
        assert state.board[E4] == Piece(Color.WHITE, PieceType.PAWN)
        assert state.board[H1] == Piece(Color.WHITE, PieceType.ROOK)

    def test_counters_optional(self) -> None:
        state = state_from_fen("4k3/8/8/8/8/8/8/4K3 w - -")
        assert state.halfmove_clock == 0
        assert state.fullmove_number == 1

    @pytest.mark.parametrize(
        "fen",
        [
            "",
            "8/8/8/8/8/8/8/8 w - - 0 1",  # no kings
            "4k3/8/8/8/8/8/8/4KK2 w - - 0 1",  # two white kings
            "4k3/8/8/8/8/8/4K3 w - - 0 1",  # seven ranks
            "4k4/8/8/8/8/8/8/4K3 w - - 0 1",  # nine files
            "4k3/8/8/8/8/8/8/4K2X w - - 0 1",  # unknown piece
            "4k3/8/8/8/8/8/8/4K3 x - - 0 1",
            "4k3/8/8/8/8/8/8/4K3 w KK - 0 1",
            "4k3/8/8/8/8/8/8/4K3 w A - 0 1",
            "4k3/8/8/8/8/8/8/4K3 w - e3 0 1",  # wrong row for white to move
            "4k3/8/8/8/8/8/8/4K3 w - z9 0 1",
            "4k3/8/8/8/8/8/8/4K3 w - - -1 1",
            "4k3/8/8/8/8/8/8/4K3 w - - 0 0",
            "4k3/8/8/8/8/8/8/4K3 w - - a b",
        ],
    )
    def test_invalid(self, fen: str) -> None:
        with pytest.raises(ValueError):
            state_from_fen(fen)


class TestFenSerialize:
    @pytest.mark.parametrize(
        "fen",
        [
            STARTING_FEN,
            KIWIPETE,
            "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1",
            "rnbqkbnr/pppp1ppp/8/4p3/4P3/8/PPPP1PPP/RNBQKBNR w KQkq e6 0 2",
        ],
    )
    def test_round_trip(self, fen: str) -> None:
        assert state_to_fen(state_from_fen(fen)) == fen

    def test_after_moves(self) -> None:
        state = GameState.initial()
        state.make_move(parse_coordinates(state, "e2e4"))
        assert (
            state_to_fen(state)
            == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"
        )


# ── Move text ────────────────────────────────────────────────────────────────


class TestMoveNotation:
    def test_pawn_push(self) -> None:
        assert notate(GameState.initial(), "e2e4") == "e2e4"

    def test_knight(self) -> None:
        assert notate(GameState.initial(), "g1f3") == "Ng1f3"

    def test_capture(self) -> None:
        state = GameState.initial()
        for text in ("e2e4", "d7d5"):
            notate(state, text)
        assert notate(state, "e4d5") == "e4xd5"

    def test_en_passant_is_capture(self) -> None:
        state = state_from_fen("4k3/8/8/3pP3/8/8/8/4K3 w - d6 0 1")
        assert notate(state, "e5d6") == "e5xd6"

    def test_castling(self) -> None:
        state = state_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
        assert notate(state, "e1g1") == "O-O"
        assert notate(state, "e8c8") == "O-O-O"

    def test_promotion_with_check(self) -> None:
        state = state_from_fen("4k3/P7/8/8/8/8/8/4K3 w - - 0 1")
        assert notate(state, "a7a8q") == "a7a8=Q+"

    def test_underpromotion(self) -> None:
        state = state_from_fen("4k3/8/8/8/8/8/p7/4K3 b - - 0 1")
        assert notate(state, "a2a1n") == "a2a1=N"

    def test_checkmate_suffix(self) -> None:
        state = GameState.initial()
        for text in ("e2e4", "e7e5", "f1c4", "b8c6", "d1h5", "g8f6"):
            notate(state, text)
        assert notate(state, "h5f7") == "Qh5xf7#"

    def test_check_suffix(self) -> None:
        state = GameState.initial()
        for text in ("e2e4", "f7f6"):
            notate(state, text)
        assert notate(state, "d1h5") == "Qd1h5+"

    def test_state_untouched(self) -> None:
        state = GameState.initial()
        before = state.copy()
        for move in MoveGenerator(state).generate_legal_moves():
            move_to_notation(state, move)
        assert state == before


class TestParseCoordinates:
    def test_simple(self) -> None:
        move = parse_coordinates(GameState.initial(), "g1f3")
        assert move.from_sq == G1
        assert move.piece == Piece(Color.WHITE, PieceType.KNIGHT)

    def test_case_and_whitespace(self) -> None:
        move = parse_coordinates(GameState.initial(), " E2E4 ")
        assert move.to_sq == E4

    def test_castling_resolves_flags(self) -> None:
        state = state_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
        move = parse_coordinates(state, "e1g1")
        assert move.from_sq == E1
        assert move.is_castling

    def test_promotion(self) -> None:
        state = state_from_fen("4k3/P7/8/8/8/8/8/4K3 w - - 0 1")
        assert parse_coordinates(state, "a7a8r").promotion == PieceType.ROOK

    @pytest.mark.parametrize("text", ["e2", "e2e4e5", "e2e9", "i2i4", "e7e8x"])
    def test_malformed(self, text: str) -> None:
        with pytest.raises(ValueError):
            parse_coordinates(GameState.initial(), text)

    @pytest.mark.parametrize("text", ["e2e5", "e7e5", "e1e2"])
    def test_illegal(self, text: str) -> None:
        with pytest.raises(ValueError, match="Illegal"):
            parse_coordinates(GameState.initial(), text)

    def test_missing_promotion_is_illegal(self) -> None:
        state = state_from_fen("4k3/P7/8/8/8/8/8/4K3 w - - 0 1")
        with pytest.raises(ValueError):
            parse_coordinates(state, "a7a8")

    def test_black_move(self) -> None:
        state = GameState.initial()
        state.make_move(parse_coordinates(state, "e2e4"))
        assert parse_coordinates(state, "e7e5").from_sq == E7
        assert state.board[E8] == Piece(Color.BLACK, PieceType.KING)
