"""Legal and pseudo-legal move generation + attack detection."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rookery.core.enums import CastlingRights, Color, PieceType
from rookery.core.move import Move
from rookery.core.piece import Piece
from rookery.core.types import Square, col_of, make_square, row_of

if TYPE_CHECKING:
    from rookery.core.state import GameState


KNIGHT_OFFSETS: tuple[tuple[int, int], ...] = (
    (-2, -1),
    (-2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
    (2, -1),
    (2, 1),
)

KING_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
)

BISHOP_DIRS: tuple[tuple[int, int], ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
ROOK_DIRS: tuple[tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))
QUEEN_DIRS: tuple[tuple[int, int], ...] = BISHOP_DIRS + ROOK_DIRS

_PROMOTION_TYPES: tuple[PieceType, ...] = (
    PieceType.QUEEN,
    PieceType.ROOK,
    PieceType.BISHOP,
    PieceType.KNIGHT,
)

_DIAGONAL_ATTACKERS = (PieceType.BISHOP, PieceType.QUEEN)
_STRAIGHT_ATTACKERS = (PieceType.ROOK, PieceType.QUEEN)


# -- Precomputed lookup tables ---------------------------------------------


def _build_targets(
    offsets: tuple[tuple[int, int], ...],
) -> tuple[tuple[Square, ...], ...]:
    targets: list[tuple[Square, ...]] = []
    for sq in range(64):
        row = row_of(sq)
        col = col_of(sq)
        moves: list[Square] = []
        for dr, dc in offsets:
            r = row + dr
            c = col + dc
            if 0 <= r < 8 and 0 <= c < 8:
                moves.append(make_square(r, c))
        targets.append(tuple(moves))
    return tuple(targets)


def _build_rays(
    directions: tuple[tuple[int, int], ...],
) -> tuple[tuple[tuple[Square, ...], ...], ...]:
    rays_per_square: list[tuple[tuple[Square, ...], ...]] = []
    for sq in range(64):
        square_rays: list[tuple[Square, ...]] = []
        for dr, dc in directions:
            r = row_of(sq) + dr
            c = col_of(sq) + dc
            ray: list[Square] = []
            while 0 <= r < 8 and 0 <= c < 8:
                ray.append(make_square(r, c))
                r += dr
                c += dc
            square_rays.append(tuple(ray))
        rays_per_square.append(tuple(square_rays))
    return tuple(rays_per_square)


def _build_pawn_sources() -> tuple[tuple[tuple[Square, ...], ...], ...]:
    """[color][sq] -> squares from which a pawn of *color* attacks *sq*."""
    per_color: list[tuple[tuple[Square, ...], ...]] = []
    for color in Color:
        # Attacker stands one row behind the target, from its own point of view.
        src_row_delta = -color.pawn_direction
        sources: list[tuple[Square, ...]] = []
        for sq in range(64):
            r = row_of(sq) + src_row_delta
            found: list[Square] = []
            for dc in (-1, 1):
                c = col_of(sq) + dc
                if 0 <= r < 8 and 0 <= c < 8:
                    found.append(make_square(r, c))
            sources.append(tuple(found))
        per_color.append(tuple(sources))
    return tuple(per_color)


_KNIGHT_TARGETS = _build_targets(KNIGHT_OFFSETS)
_KING_TARGETS = _build_targets(KING_OFFSETS)
_PAWN_SOURCES = _build_pawn_sources()

_BISHOP_RAYS = _build_rays(BISHOP_DIRS)
_ROOK_RAYS = _build_rays(ROOK_DIRS)
_QUEEN_RAYS = _build_rays(QUEEN_DIRS)


class MoveGenerator:
    """Generates moves and answers attack queries for a :class:`GameState`.

    Legality is tested by making each candidate on the state and always
    unmaking it again, so the state is unchanged when a call returns.
    """

    __slots__ = ("_state", "_board")

    def __init__(self, state: GameState) -> None:
        self._state = state
        self._board = state.board

    # -- Legal moves --------------------------------------------------------

    def generate_legal_moves(self, color: Color | None = None) -> list[Move]:
        """All strictly legal moves for *color* (default: side to move)."""
        if color is None:
            color = self._state.turn
        is_legal = self.is_legal
        legal: list[Move] = []
        for sq, _piece in self._board.occupied(color):
            legal.extend(m for m in self.pseudo_legal_moves(sq) if is_legal(m))
        return legal

    def legal_moves_from(self, sq: Square) -> list[Move]:
        """Legal moves of the piece on *sq* if it belongs to the side to move."""
        piece = self._board[sq]
        if piece is None or piece.color != self._state.turn:
            return []
        return [m for m in self.pseudo_legal_moves(sq) if self.is_legal(m)]

    def has_legal_move(self) -> bool:
        color = self._state.turn
        for sq, _piece in list(self._board.occupied(color)):
            for move in self.pseudo_legal_moves(sq):
                if self.is_legal(move):
                    return True
        return False

    def is_legal(self, move: Move) -> bool:
        """Does *move* leave its mover's king safe?"""
        mover = move.piece.color
        with self._state.applied(move):
            return not self.is_in_check(mover)

    # -- Pseudo-legal moves -------------------------------------------------

    def pseudo_legal_moves(self, sq: Square) -> list[Move]:
        """Candidates for the piece on *sq* (may leave own king in check)."""
        piece = self._board[sq]
        if piece is None:
            return []
        moves: list[Move] = []
        match piece.piece_type:
            case PieceType.PAWN:
                self._gen_pawn(sq, piece, moves)
            case PieceType.KNIGHT:
                self._gen_steps(sq, piece, _KNIGHT_TARGETS[sq], moves)
            case PieceType.BISHOP:
                self._gen_sliding(sq, piece, _BISHOP_RAYS[sq], moves)
            case PieceType.ROOK:
                self._gen_sliding(sq, piece, _ROOK_RAYS[sq], moves)
            case PieceType.QUEEN:
                self._gen_sliding(sq, piece, _QUEEN_RAYS[sq], moves)
            case PieceType.KING:
                self._gen_steps(sq, piece, _KING_TARGETS[sq], moves)
                self._gen_castling(sq, piece, moves)
        return moves

    def count_mobility(self, color: Color) -> int:
        """Pseudo-legal destination count for *color*, castling excluded."""
        board = self._board
        total = 0
        for sq, piece in board.occupied(color):
            match piece.piece_type:
                case PieceType.PAWN:
                    total += self._count_pawn(sq, color)
                case PieceType.KNIGHT:
                    total += self._count_steps(color, _KNIGHT_TARGETS[sq])
                case PieceType.KING:
                    total += self._count_steps(color, _KING_TARGETS[sq])
                case PieceType.BISHOP:
                    total += self._count_sliding(color, _BISHOP_RAYS[sq])
                case PieceType.ROOK:
                    total += self._count_sliding(color, _ROOK_RAYS[sq])
                case PieceType.QUEEN:
                    total += self._count_sliding(color, _QUEEN_RAYS[sq])
        return total

    # -- Attack detection ---------------------------------------------------

    def is_in_check(self, color: Color) -> bool:
        """Is *color*'s king attacked by the opponent?"""
        king_sq = self._board.king_square(color)
        return self.is_square_attacked(king_sq, color.opposite)

    def is_square_attacked(self, sq: Square, by_color: Color) -> bool:
        """Is *sq* attacked by any piece of *by_color*?"""
        return self._scan_attackers(sq, by_color, stop_at_first=True) > 0

    def count_attackers(self, sq: Square, by_color: Color) -> int:
        """Number of *by_color* pieces attacking *sq*."""
        return self._scan_attackers(sq, by_color, stop_at_first=False)

    def _scan_attackers(self, sq: Square, by_color: Color, *, stop_at_first: bool) -> int:
        board = self._board
        count = 0

        for src in _PAWN_SOURCES[by_color][sq]:
            p = board[src]
            if p is not None and p.color == by_color and p.piece_type == PieceType.PAWN:
                count += 1
                if stop_at_first:
                    return count

        for src in _KNIGHT_TARGETS[sq]:
            p = board[src]
            if p is not None and p.color == by_color and p.piece_type == PieceType.KNIGHT:
                count += 1
                if stop_at_first:
                    return count

        for src in _KING_TARGETS[sq]:
            p = board[src]
            if p is not None and p.color == by_color and p.piece_type == PieceType.KING:
                count += 1
                if stop_at_first:
                    return count

        for rays, kinds in (
            (_BISHOP_RAYS[sq], _DIAGONAL_ATTACKERS),
            (_ROOK_RAYS[sq], _STRAIGHT_ATTACKERS),
        ):
            for ray in rays:
                for src in ray:
                    p = board[src]
                    if p is None:
                        continue
                    if p.color == by_color and p.piece_type in kinds:
                        count += 1
                        if stop_at_first:
                            return count
                    break

        return count

    # -- Piece-specific generators (private) -------------------------------

    def _gen_pawn(self, sq: Square, piece: Piece, moves: list[Move]) -> None:
        board = self._board
        color = piece.color
        direction = color.pawn_direction
        row = row_of(sq)
        col = col_of(sq)
        start_row = 6 if color == Color.WHITE else 1
        promo_row = 0 if color == Color.WHITE else 7

        fwd_row = row + direction
        if not 0 <= fwd_row < 8:
            return

        one_step = make_square(fwd_row, col)
        if board.is_empty(one_step):
            if fwd_row == promo_row:
                for pt in _PROMOTION_TYPES:
                    moves.append(Move(sq, one_step, piece, promotion=pt))
            else:
                moves.append(Move(sq, one_step, piece))
                if row == start_row:
                    two_step = make_square(row + 2 * direction, col)
                    if board.is_empty(two_step):
                        moves.append(
                            Move(sq, two_step, piece, en_passant_target=one_step)
                        )

        for dc in (-1, 1):
            c = col + dc
            if not 0 <= c < 8:
                continue
            cap_sq = make_square(fwd_row, c)
            target = board[cap_sq]
            if target is not None:
                if target.color == color:
                    continue
                if fwd_row == promo_row:
                    for pt in _PROMOTION_TYPES:
                        moves.append(
                            Move(sq, cap_sq, piece, captured=target, promotion=pt)
                        )
                else:
                    moves.append(Move(sq, cap_sq, piece, captured=target))
            elif cap_sq == self._state.en_passant:
                victim = board[make_square(row, c)]
                if (
                    victim is not None
                    and victim.color != color
                    and victim.piece_type == PieceType.PAWN
                ):
                    moves.append(
                        Move(sq, cap_sq, piece, captured=victim, is_en_passant=True)
                    )

    def _gen_steps(
        self,
        sq: Square,
        piece: Piece,
        targets: tuple[Square, ...],
        moves: list[Move],
    ) -> None:
        board = self._board
        for to_sq in targets:
            target = board[to_sq]
            if target is None:
                moves.append(Move(sq, to_sq, piece))
            elif target.color != piece.color:
                moves.append(Move(sq, to_sq, piece, captured=target))

    def _gen_sliding(
        self,
        sq: Square,
        piece: Piece,
        rays: tuple[tuple[Square, ...], ...],
        moves: list[Move],
    ) -> None:
        board = self._board
        for ray in rays:
            for to_sq in ray:
                target = board[to_sq]
                if target is None:
                    moves.append(Move(sq, to_sq, piece))
                    continue
                if target.color != piece.color:
                    moves.append(Move(sq, to_sq, piece, captured=target))
                break

    def _gen_castling(self, king_sq: Square, piece: Piece, moves: list[Move]) -> None:
        color = piece.color
        rights = self._state.castling & CastlingRights.both(color)
        if not rights:
            return

        back = color.back_row
        if king_sq != make_square(back, 4):
            return

        board = self._board
        opponent = color.opposite
        rook = Piece(color, PieceType.ROOK)

        def attacked(col: int) -> bool:
            return self.is_square_attacked(make_square(back, col), opponent)

        if attacked(4):
            return

        if (
            rights & CastlingRights.kingside(color)
            and board[make_square(back, 7)] == rook
            and board.is_empty(make_square(back, 5))
            and board.is_empty(make_square(back, 6))
            and not attacked(5)
            and not attacked(6)
        ):
            moves.append(Move(king_sq, make_square(back, 6), piece, is_castling=True))

        if (
            rights & CastlingRights.queenside(color)
            and board[make_square(back, 0)] == rook
            and board.is_empty(make_square(back, 1))
            and board.is_empty(make_square(back, 2))
            and board.is_empty(make_square(back, 3))
            and not attacked(3)
            and not attacked(2)
        ):
            moves.append(Move(king_sq, make_square(back, 2), piece, is_castling=True))

    # -- Mobility counters (private) ----------------------------------------

    def _count_pawn(self, sq: Square, color: Color) -> int:
        board = self._board
        direction = color.pawn_direction
        fwd_row = row_of(sq) + direction
        if not 0 <= fwd_row < 8:
            return 0
        col = col_of(sq)
        total = 0
        if board.is_empty(make_square(fwd_row, col)):
            total += 1
            start_row = 6 if color == Color.WHITE else 1
            if row_of(sq) == start_row and board.is_empty(
                make_square(fwd_row + direction, col)
            ):
                total += 1
        for dc in (-1, 1):
            c = col + dc
            if 0 <= c < 8:
                target = board[make_square(fwd_row, c)]
                if target is not None and target.color != color:
                    total += 1
        return total

    def _count_steps(self, color: Color, targets: tuple[Square, ...]) -> int:
        board = self._board
        total = 0
        for to_sq in targets:
            target = board[to_sq]
            if target is None or target.color != color:
                total += 1
        return total

    def _count_sliding(
        self, color: Color, rays: tuple[tuple[Square, ...], ...]
    ) -> int:
        board = self._board
        total = 0
        for ray in rays:
            for to_sq in ray:
                target = board[to_sq]
                if target is None:
                    total += 1
                    continue
                if target.color != color:
                    total += 1
                break
        return total
