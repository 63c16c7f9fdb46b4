"""GameState — complete game state (board + metadata) with make/unmake."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from rookery.core.board import Board
from rookery.core.enums import CastlingRights, Color, PieceType
from rookery.core.move import Move
from rookery.core.piece import Piece
from rookery.core.types import (
    A1,
    A8,
    H1,
    H8,
    Square,
    col_of,
    make_square,
    row_of,
    square_name,
)

# Rook home square -> castling right it guards.
_ROOK_CORNERS: dict[Square, CastlingRights] = {
    A1: CastlingRights.WHITE_QUEENSIDE,
    H1: CastlingRights.WHITE_KINGSIDE,
    A8: CastlingRights.BLACK_QUEENSIDE,
    H8: CastlingRights.BLACK_KINGSIDE,
}

_CASTLING_CHARS: tuple[tuple[CastlingRights, str], ...] = (
    (CastlingRights.WHITE_KINGSIDE, "K"),
    (CastlingRights.WHITE_QUEENSIDE, "Q"),
    (CastlingRights.BLACK_KINGSIDE, "k"),
    (CastlingRights.BLACK_QUEENSIDE, "q"),
)


@dataclass(slots=True)
class _UndoRecord:
    """Snapshot saved before each move so we can undo it."""

    castling: CastlingRights
    en_passant: Square | None
    halfmove_clock: int
    fullmove_number: int
    last_move: Move | None
    captured_piece: Piece | None = None
    captured_sq: Square | None = None


class GameState:
    """Full chess state: board, side to move, castling, en passant, clocks.

    Supports exact :meth:`make_move` / :meth:`unmake_move` through an internal
    undo stack. Neither method validates legality; use
    :func:`rookery.core.executor.apply_move` for caller-submitted moves.
    """

    __slots__ = (
        "board",
        "turn",
        "castling",
        "en_passant",
        "halfmove_clock",
        "fullmove_number",
        "last_move",
        "_history",
    )

    def __init__(
        self,
        board: Board | None = None,
        turn: Color = Color.WHITE,
        castling: CastlingRights = CastlingRights.ALL,
        en_passant: Square | None = None,
        halfmove_clock: int = 0,
        fullmove_number: int = 1,
        last_move: Move | None = None,
    ) -> None:
        self.board = board if board is not None else Board.initial()
        self.turn = turn
        self.castling = castling
        self.en_passant = en_passant
        self.halfmove_clock = halfmove_clock
        self.fullmove_number = fullmove_number
        self.last_move = last_move
        self._history: list[_UndoRecord] = []

    @classmethod
    def initial(cls) -> GameState:
        return cls()

    # ── Core move operations ─────────────────────────────────────────────

    def make_move(self, move: Move) -> None:
        """Apply *move*, pushing undo state onto the history stack."""
        board = self.board
        piece = board[move.from_sq]
        if piece is None:
            raise ValueError(f"No piece on {square_name(move.from_sq)}")

        capture_sq = move.to_sq
        if move.is_en_passant:
            # The captured pawn sits beside the mover, behind the target square.
            capture_sq = make_square(row_of(move.from_sq), col_of(move.to_sq))
        captured = board[capture_sq]

        self._history.append(
            _UndoRecord(
                castling=self.castling,
                en_passant=self.en_passant,
                halfmove_clock=self.halfmove_clock,
                fullmove_number=self.fullmove_number,
                last_move=self.last_move,
                captured_piece=captured,
                captured_sq=capture_sq,
            )
        )

        board[move.from_sq] = None
        if captured is not None:
            board[capture_sq] = None

        if move.promotion is not None:
            board[move.to_sq] = Piece(piece.color, move.promotion)
        else:
            board[move.to_sq] = piece

        if move.is_castling:
            rook_from, rook_to = _castling_rook_squares(move)
            board[rook_to] = board[rook_from]
            board[rook_from] = None

        self._update_castling(move, piece)
        self.en_passant = move.en_passant_target

        if piece.piece_type == PieceType.PAWN or captured is not None:
            self.halfmove_clock = 0
        else:
            self.halfmove_clock += 1

        if self.turn == Color.BLACK:
            self.fullmove_number += 1
        self.turn = self.turn.opposite
        self.last_move = move

    def unmake_move(self, move: Move) -> None:
        """Undo the last :meth:`make_move`."""
        record = self._history.pop()
        board = self.board

        self.turn = self.turn.opposite

        piece = board[move.to_sq]
        assert piece is not None
        if move.promotion is not None:
            piece = Piece(piece.color, PieceType.PAWN)

        board[move.to_sq] = None
        board[move.from_sq] = piece
        if record.captured_piece is not None:
            assert record.captured_sq is not None
            board[record.captured_sq] = record.captured_piece

        if move.is_castling:
            rook_from, rook_to = _castling_rook_squares(move)
            board[rook_from] = board[rook_to]
            board[rook_to] = None

        self._restore(record)

    def make_null_move(self) -> None:
        """Pass the turn without moving (null-move pruning)."""
        self._history.append(
            _UndoRecord(
                castling=self.castling,
                en_passant=self.en_passant,
                halfmove_clock=self.halfmove_clock,
                fullmove_number=self.fullmove_number,
                last_move=self.last_move,
            )
        )
        self.en_passant = None
        self.halfmove_clock += 1
        if self.turn == Color.BLACK:
            self.fullmove_number += 1
        self.turn = self.turn.opposite

    def unmake_null_move(self) -> None:
        record = self._history.pop()
        self.turn = self.turn.opposite
        self._restore(record)

    @contextmanager
    def applied(self, move: Move) -> Iterator[GameState]:
        """Scope *move*: it is undone on every exit path, including errors."""
        self.make_move(move)
        try:
            yield self
        finally:
            self.unmake_move(move)

    # ── Castling bookkeeping ─────────────────────────────────────────────

    def _update_castling(self, move: Move, piece: Piece) -> None:
        if not self.castling:
            return
        if piece.piece_type == PieceType.KING:
            self.castling &= ~CastlingRights.both(piece.color)
        # A rook leaving its corner, or anything landing on it, ends that right.
        for sq in (move.from_sq, move.to_sq):
            right = _ROOK_CORNERS.get(sq)
            if right is not None:
                self.castling &= ~right

    def _restore(self, record: _UndoRecord) -> None:
        self.castling = record.castling
        self.en_passant = record.en_passant
        self.halfmove_clock = record.halfmove_clock
        self.fullmove_number = record.fullmove_number
        self.last_move = record.last_move

    # ── Utilities ────────────────────────────────────────────────────────

    def copy(self) -> GameState:
        """Deep copy without undo history."""
        return GameState(
            board=self.board.copy(),
            turn=self.turn,
            castling=self.castling,
            en_passant=self.en_passant,
            halfmove_clock=self.halfmove_clock,
            fullmove_number=self.fullmove_number,
            last_move=self.last_move,
        )

    def placement(self) -> str:
        """Board placement in FEN notation (row 0 first)."""
        rows: list[str] = []
        for row in range(8):
            empty = 0
            text = ""
            for col in range(8):
                piece = self.board[make_square(row, col)]
                if piece is None:
                    empty += 1
                    continue
                if empty:
                    text += str(empty)
                    empty = 0
                text += str(piece)
            if empty:
                text += str(empty)
            rows.append(text)
        return "/".join(rows)

    def castling_text(self) -> str:
        text = "".join(char for right, char in _CASTLING_CHARS if self.castling & right)
        return text or "-"

    def position_key(self) -> str:
        """Canonical key: placement, turn, castling rights and en-passant square."""
        ep = square_name(self.en_passant) if self.en_passant is not None else "-"
        side = "w" if self.turn == Color.WHITE else "b"
        return f"{self.placement()} {side} {self.castling_text()} {ep}"

    @property
    def ply_depth(self) -> int:
        """Number of moves currently on the undo stack."""
        return len(self._history)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GameState):
            return NotImplemented
        return (
            self.board == other.board
            and self.turn == other.turn
            and self.castling == other.castling
            and self.en_passant == other.en_passant
            and self.halfmove_clock == other.halfmove_clock
            and self.fullmove_number == other.fullmove_number
            and self.last_move == other.last_move
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"GameState({self.position_key()!r})"


def _castling_rook_squares(move: Move) -> tuple[Square, Square]:
    row = row_of(move.from_sq)
    if col_of(move.to_sq) == 6:
        return make_square(row, 7), make_square(row, 5)
    return make_square(row, 0), make_square(row, 3)
