"""Static position evaluation.

Scores are in centipawns from the side to move's point of view. The total
is a weighted blend of six factors, each computed from white's view:

========================  ======
material                  30 %
piece-square tables       25 %
pawn structure            15 %
king safety               12 %
mobility / coordination   10 %
strategic factors          8 %
========================  ======
"""

from __future__ import annotations

from rookery.core.board import Board
from rookery.core.enums import CastlingRights, Color, PieceType
from rookery.core.move_generator import MoveGenerator
from rookery.core.state import GameState
from rookery.core.types import Square, col_of, make_square, row_of

MATE_SCORE = 30_000

PIECE_VALUES: dict[PieceType, int] = {
    PieceType.PAWN: 100,
    PieceType.KNIGHT: 320,
    PieceType.BISHOP: 330,
    PieceType.ROOK: 500,
    PieceType.QUEEN: 900,
    PieceType.KING: 20_000,
}

_ENDGAME_MATERIAL_SCALE: dict[PieceType, float] = {
    PieceType.PAWN: 1.3,
    PieceType.KNIGHT: 0.9,
    PieceType.BISHOP: 1.1,
    PieceType.ROOK: 1.05,
    PieceType.QUEEN: 0.95,
    PieceType.KING: 1.0,
}

_W_MATERIAL = 0.3
_W_POSITION = 0.25
_W_PAWNS = 0.15
_W_KING = 0.12
_W_ACTIVITY = 0.1
_W_STRATEGY = 0.08

_ENDGAME_MAX_PIECES = 12
_ENDGAME_MAX_MAJORS = 3

# ── Piece-square tables (white's view, row 0 = rank 8) ─────────────────────

_PAWN_OPENING = (
    (0, 0, 0, 0, 0, 0, 0, 0),
    (50, 50, 50, 50, 50, 50, 50, 50),
    (10, 10, 20, 30, 30, 20, 10, 10),
    (5, 5, 10, 27, 27, 10, 5, 5),
    (0, 0, 0, 25, 25, 0, 0, 0),
    (5, -5, -10, 0, 0, -10, -5, 5),
    (5, 10, 10, -25, -25, 10, 10, 5),
    (0, 0, 0, 0, 0, 0, 0, 0),
)

_PAWN_ENDGAME = (
    (0, 0, 0, 0, 0, 0, 0, 0),
    (80, 80, 80, 80, 80, 80, 80, 80),
    (50, 50, 50, 50, 50, 50, 50, 50),
    (30, 30, 30, 30, 30, 30, 30, 30),
    (20, 20, 20, 20, 20, 20, 20, 20),
    (10, 10, 10, 10, 10, 10, 10, 10),
    (10, 10, 10, 10, 10, 10, 10, 10),
    (0, 0, 0, 0, 0, 0, 0, 0),
)

_KNIGHT_TABLE = (
    (-50, -40, -30, -30, -30, -30, -40, -50),
    (-40, -20, 0, 0, 0, 0, -20, -40),
    (-30, 0, 10, 15, 15, 10, 0, -30),
    (-30, 5, 15, 20, 20, 15, 5, -30),
    (-30, 0, 15, 20, 20, 15, 0, -30),
    (-30, 5, 10, 15, 15, 10, 5, -30),
    (-40, -20, 0, 5, 5, 0, -20, -40),
    (-50, -40, -30, -30, -30, -30, -40, -50),
)

_BISHOP_TABLE = (
    (-20, -10, -10, -10, -10, -10, -10, -20),
    (-10, 0, 0, 0, 0, 0, 0, -10),
    (-10, 0, 5, 10, 10, 5, 0, -10),
    (-10, 5, 5, 10, 10, 5, 5, -10),
    (-10, 0, 10, 10, 10, 10, 0, -10),
    (-10, 10, 10, 10, 10, 10, 10, -10),
    (-10, 5, 0, 0, 0, 0, 5, -10),
    (-20, -10, -10, -10, -10, -10, -10, -20),
)

_ROOK_TABLE = (
    (0, 0, 0, 0, 0, 0, 0, 0),
    (5, 10, 10, 10, 10, 10, 10, 5),
    (-5, 0, 0, 0, 0, 0, 0, -5),
    (-5, 0, 0, 0, 0, 0, 0, -5),
    (-5, 0, 0, 0, 0, 0, 0, -5),
    (-5, 0, 0, 0, 0, 0, 0, -5),
    (-5, 0, 0, 0, 0, 0, 0, -5),
    (0, 0, 0, 5, 5, 0, 0, 0),
)

_QUEEN_TABLE = (
    (-20, -10, -10, -5, -5, -10, -10, -20),
    (-10, 0, 0, 0, 0, 0, 0, -10),
    (-10, 0, 5, 5, 5, 5, 0, -10),
    (-5, 0, 5, 5, 5, 5, 0, -5),
    (0, 0, 5, 5, 5, 5, 0, -5),
    (-10, 5, 5, 5, 5, 5, 0, -10),
    (-10, 0, 5, 0, 0, 0, 0, -10),
    (-20, -10, -10, -5, -5, -10, -10, -20),
)

_KING_MIDDLEGAME = (
    (-30, -40, -40, -50, -50, -40, -40, -30),
    (-30, -40, -40, -50, -50, -40, -40, -30),
    (-30, -40, -40, -50, -50, -40, -40, -30),
    (-30, -40, -40, -50, -50, -40, -40, -30),
    (-20, -30, -30, -40, -40, -30, -30, -20),
    (-10, -20, -20, -20, -20, -20, -20, -10),
    (20, 20, 0, 0, 0, 0, 20, 20),
    (20, 30, 10, 0, 0, 10, 30, 20),
)

_KING_ENDGAME = (
    (-50, -40, -30, -20, -20, -30, -40, -50),
    (-30, -20, -10, 0, 0, -10, -20, -30),
    (-30, -10, 20, 30, 30, 20, -10, -30),
    (-30, -10, 30, 40, 40, 30, -10, -30),
    (-30, -10, 30, 40, 40, 30, -10, -30),
    (-30, -10, 20, 30, 30, 20, -10, -30),
    (-30, -30, 0, 0, 0, 0, -30, -30),
    (-50, -30, -30, -30, -30, -30, -30, -50),
)

_CENTRALIZATION_BONUS: dict[PieceType, int] = {
    PieceType.PAWN: 5,
    PieceType.KNIGHT: 15,
    PieceType.BISHOP: 10,
    PieceType.ROOK: 5,
    PieceType.QUEEN: 8,
    PieceType.KING: 0,
}

_KEY_SQUARES: tuple[Square, ...] = (
    make_square(3, 3),
    make_square(3, 4),
    make_square(4, 3),
    make_square(4, 4),
)

_OPEN_FILE_BONUS = 25
_SEMI_OPEN_FILE_BONUS = 15
_DOUBLED_PAWN_PENALTY = 30
_ISOLATED_PAWN_PENALTY = 25
_BACKWARD_PAWN_PENALTY = 20
_PASSED_PAWN_BASE = 40
_PASSED_PAWN_STEP = 15
_PAWN_CHAIN_BONUS = 15
_CHECK_PENALTY = 120
_ENDGAME_CHECK_PENALTY = 60
_PAWN_SHIELD_BONUS = 20
_EXPOSED_KING_PENALTY = 40
_CASTLING_RIGHTS_BONUS = 25
_KING_ZONE_ATTACK_PENALTY = 10
_ENDGAME_KING_CENTER_FACTOR = 8
_MOBILITY_FACTOR = 5
_OUTPOST_BONUS = 30
_BISHOP_PAIR_BONUS = 20
_CONNECTED_ROOKS_BONUS = 25
_TEMPO_BONUS = 15
_KEY_SQUARE_FACTOR = 8
_SPACE_FACTOR = 3


def _sign(color: Color) -> int:
    return 1 if color == Color.WHITE else -1


def is_endgame(board: Board) -> bool:
    """Few pieces left overall, or few queens and rooks."""
    pieces = 0
    majors = 0
    for _sq, piece in board.occupied():
        pieces += 1
        if piece.piece_type in (PieceType.QUEEN, PieceType.ROOK):
            majors += 1
    return pieces <= _ENDGAME_MAX_PIECES or majors <= _ENDGAME_MAX_MAJORS


class Evaluator:
    """Multi-factor static evaluator.

    Stateless; one instance may be shared by any number of searches.
    """

    __slots__ = ()

    def evaluate(self, state: GameState) -> int:
        """Score *state* for the side to move (mate -30000, stalemate 0)."""
        gen = MoveGenerator(state)
        if not gen.has_legal_move():
            return -MATE_SCORE if gen.is_in_check(state.turn) else 0
        return self.evaluate_position(state, gen)

    def evaluate_position(self, state: GameState, gen: MoveGenerator | None = None) -> int:
        """Weighted score without the terminal check."""
        if gen is None:
            gen = MoveGenerator(state)
        board = state.board
        endgame = is_endgame(board)

        score = (
            self.material(board, endgame) * _W_MATERIAL
            + self.piece_squares(board, endgame) * _W_POSITION
            + self.pawn_structure(board) * _W_PAWNS
            + self.king_safety(state, gen, endgame) * _W_KING
            + self.activity(board, gen) * _W_ACTIVITY
            + self.strategic(state, gen) * _W_STRATEGY
        )
        white_view = round(score)
        return white_view if state.turn == Color.WHITE else -white_view

    # ── Material ────────────────────────────────────────────────────────

    def material(self, board: Board, endgame: bool) -> float:
        score = 0.0
        for _sq, piece in board.occupied():
            value: float = PIECE_VALUES[piece.piece_type]
            if endgame:
                value *= _ENDGAME_MATERIAL_SCALE[piece.piece_type]
            score += value * _sign(piece.color)
        return score

    # ── Piece-square tables ─────────────────────────────────────────────

    def piece_squares(self, board: Board, endgame: bool) -> float:
        score = 0.0
        for sq, piece in board.occupied():
            col = col_of(sq)
            row = row_of(sq) if piece.color == Color.WHITE else 7 - row_of(sq)
            value: float
            match piece.piece_type:
                case PieceType.PAWN:
                    table = _PAWN_ENDGAME if endgame else _PAWN_OPENING
                    value = table[row][col]
                case PieceType.KNIGHT:
                    value = _KNIGHT_TABLE[row][col] * (0.8 if endgame else 1.0)
                case PieceType.BISHOP:
                    value = _BISHOP_TABLE[row][col] * (1.1 if endgame else 1.0)
                case PieceType.ROOK:
                    value = _ROOK_TABLE[row][col]
                    if _is_open_file(board, col):
                        value += _OPEN_FILE_BONUS
                    if _is_semi_open_file(board, col, piece.color):
                        value += _SEMI_OPEN_FILE_BONUS
                case PieceType.QUEEN:
                    value = _QUEEN_TABLE[row][col]
                case PieceType.KING:
                    table = _KING_ENDGAME if endgame else _KING_MIDDLEGAME
                    value = table[row][col]
            score += value * _sign(piece.color)
        return score

    # ── Pawn structure ──────────────────────────────────────────────────

    def pawn_structure(self, board: Board) -> int:
        # [color][col] -> rows holding that color's pawns
        files: tuple[list[list[int]], list[list[int]]] = (
            [[] for _ in range(8)],
            [[] for _ in range(8)],
        )
        for sq in board.pieces(Color.WHITE, PieceType.PAWN):
            files[Color.WHITE][col_of(sq)].append(row_of(sq))
        for sq in board.pieces(Color.BLACK, PieceType.PAWN):
            files[Color.BLACK][col_of(sq)].append(row_of(sq))

        score = 0
        for col in range(8):
            for color in Color:
                rows = files[color][col]
                sign = _sign(color)
                if len(rows) > 1:
                    score -= sign * _DOUBLED_PAWN_PENALTY * (len(rows) - 1)
                if len(rows) != 1:
                    continue
                row = rows[0]
                if _is_isolated(board, col, color):
                    score -= sign * _ISOLATED_PAWN_PENALTY
                if _is_passed(board, row, col, color):
                    advance = 6 - row if color == Color.WHITE else row - 1
                    score += sign * (_PASSED_PAWN_BASE + advance * _PASSED_PAWN_STEP)
                if _is_backward(board, row, col, color):
                    score -= sign * _BACKWARD_PAWN_PENALTY
        return score + self._pawn_chains(board)

    def _pawn_chains(self, board: Board) -> int:
        score = 0
        for sq, piece in board.occupied():
            row, col = row_of(sq), col_of(sq)
            if piece.piece_type != PieceType.PAWN or not 1 <= row <= 6:
                continue
            # Supporters are looked up one row below on the board, for both colors.
            for dc in (-1, 1):
                c = col + dc
                if 0 <= c < 8 and board[make_square(row + 1, c)] == piece:
                    score += _sign(piece.color) * _PAWN_CHAIN_BONUS
        return score

    # ── King safety ─────────────────────────────────────────────────────

    def king_safety(self, state: GameState, gen: MoveGenerator, endgame: bool) -> int:
        score = 0
        for color in Color:
            king_sq = state.board.find_king(color)
            if king_sq is not None:
                score += _sign(color) * self._king_safety_for(
                    state, gen, king_sq, color, endgame
                )
        return score

    def _king_safety_for(
        self,
        state: GameState,
        gen: MoveGenerator,
        king_sq: Square,
        color: Color,
        endgame: bool,
    ) -> float:
        board = state.board
        safety: float = 0
        if gen.is_square_attacked(king_sq, color.opposite):
            safety -= _ENDGAME_CHECK_PENALTY if endgame else _CHECK_PENALTY

        king_row, king_col = row_of(king_sq), col_of(king_sq)
        if endgame:
            center_distance = abs(king_row - 3.5) + abs(king_col - 3.5)
            return safety + (7 - center_distance) * _ENDGAME_KING_CENTER_FACTOR

        direction = color.pawn_direction
        own_pawn = (color, PieceType.PAWN)
        for col in range(max(0, king_col - 1), min(7, king_col + 1) + 1):
            for step in (1, 2):
                row = king_row + direction * step
                if not 0 <= row < 8:
                    break
                p = board[make_square(row, col)]
                if p is not None and (p.color, p.piece_type) == own_pawn:
                    safety += _PAWN_SHIELD_BONUS
                    break

        if 2 <= king_col <= 5:
            safety -= _EXPOSED_KING_PENALTY
        if state.castling & CastlingRights.both(color):
            safety += _CASTLING_RIGHTS_BONUS

        attacked = 0
        for dr in (-1, 0, 1):
            for dc in (-1, 0, 1):
                r, c = king_row + dr, king_col + dc
                if 0 <= r < 8 and 0 <= c < 8:
                    if gen.is_square_attacked(make_square(r, c), color.opposite):
                        attacked += 1
        return safety - attacked * _KING_ZONE_ATTACK_PENALTY

    # ── Mobility and coordination ───────────────────────────────────────

    def activity(self, board: Board, gen: MoveGenerator) -> int:
        score = (
            gen.count_mobility(Color.WHITE) - gen.count_mobility(Color.BLACK)
        ) * _MOBILITY_FACTOR

        bishops = {color: board.count(color, PieceType.BISHOP) for color in Color}
        for sq, piece in board.occupied():
            sign = _sign(piece.color)
            row, col = row_of(sq), col_of(sq)
            match piece.piece_type:
                case PieceType.KNIGHT:
                    if _is_outpost(board, row, col, piece.color):
                        score += sign * _OUTPOST_BONUS
                case PieceType.BISHOP:
                    if bishops[piece.color] >= 2:
                        score += sign * _BISHOP_PAIR_BONUS
                case PieceType.ROOK:
                    if _rook_connected(board, sq, piece.color):
                        score += sign * _CONNECTED_ROOKS_BONUS
            if 2 <= row <= 5 and 2 <= col <= 5:
                score += sign * _CENTRALIZATION_BONUS[piece.piece_type]
        return score

    # ── Strategic factors ───────────────────────────────────────────────

    def strategic(self, state: GameState, gen: MoveGenerator) -> int:
        score = _TEMPO_BONUS * _sign(state.turn)
        for sq in _KEY_SQUARES:
            score += (
                gen.count_attackers(sq, Color.WHITE)
                - gen.count_attackers(sq, Color.BLACK)
            ) * _KEY_SQUARE_FACTOR

        white_space = 0
        black_space = 0
        for sq, piece in state.board.occupied():
            if piece.color == Color.WHITE and row_of(sq) < 4:
                white_space += 1
            elif piece.color == Color.BLACK and row_of(sq) > 3:
                black_space += 1
        return score + (white_space - black_space) * _SPACE_FACTOR


# ── Board pattern helpers ──────────────────────────────────────────────────


def _file_pawns(board: Board, col: int) -> list[Color]:
    colors: list[Color] = []
    for row in range(8):
        p = board[make_square(row, col)]
        if p is not None and p.piece_type == PieceType.PAWN:
            colors.append(p.color)
    return colors


def _is_open_file(board: Board, col: int) -> bool:
    return not _file_pawns(board, col)


def _is_semi_open_file(board: Board, col: int, color: Color) -> bool:
    pawns = _file_pawns(board, col)
    return color not in pawns and color.opposite in pawns


def _is_isolated(board: Board, col: int, color: Color) -> bool:
    for adj in (col - 1, col + 1):
        if 0 <= adj < 8 and color in _file_pawns(board, adj):
            return False
    return True


def _is_enemy_pawn(board: Board, row: int, col: int, color: Color) -> bool:
    if not (0 <= row < 8 and 0 <= col < 8):
        return False
    p = board[make_square(row, col)]
    return p is not None and p.piece_type == PieceType.PAWN and p.color != color


def _is_passed(board: Board, row: int, col: int, color: Color) -> bool:
    direction = color.pawn_direction
    for c in range(max(0, col - 1), min(7, col + 1) + 1):
        r = row + direction
        while 0 <= r < 8:
            if _is_enemy_pawn(board, r, c, color):
                return False
            r += direction
    return True


def _is_backward(board: Board, row: int, col: int, color: Color) -> bool:
    direction = color.pawn_direction
    advance_row = row + direction
    if not 0 <= advance_row < 8:
        return False
    guard_row = advance_row + direction
    return _is_enemy_pawn(board, guard_row, col - 1, color) or _is_enemy_pawn(
        board, guard_row, col + 1, color
    )


def _is_outpost(board: Board, row: int, col: int, color: Color) -> bool:
    # Enemy pawns that could chase the knight sit one row towards our own side.
    behind = row - color.pawn_direction
    if _is_enemy_pawn(board, behind, col - 1, color) or _is_enemy_pawn(
        board, behind, col + 1, color
    ):
        return False
    return row < 4 if color == Color.WHITE else row > 3


def _rook_connected(board: Board, sq: Square, color: Color) -> bool:
    row, col = row_of(sq), col_of(sq)
    for other in board.pieces(color, PieceType.ROOK):
        if other == sq:
            continue
        o_row, o_col = row_of(other), col_of(other)
        if o_row == row:
            lo, hi = sorted((col, o_col))
            if all(board.is_empty(make_square(row, c)) for c in range(lo + 1, hi)):
                return True
        if o_col == col:
            lo, hi = sorted((row, o_row))
            if all(board.is_empty(make_square(r, col)) for r in range(lo + 1, hi)):
                return True
    return False
