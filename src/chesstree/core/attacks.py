"""Attack tables and attacked-square detection.

Only what SAN resolution needs: which pieces can reach a square, and whether
a king is left attacked after a candidate move.
"""

from __future__ import annotations

from chesstree.core.board import Board
from chesstree.core.enums import Color, PieceType
from chesstree.core.piece import Piece
from chesstree.core.types import Square, file_of, make_square, rank_of

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


# -- Precomputed lookup tables ---------------------------------------------


def _build_targets(
    offsets: tuple[tuple[int, int], ...],
) -> tuple[tuple[Square, ...], ...]:
    targets: list[tuple[Square, ...]] = []
    for sq in range(64):
        file_idx = sq & 7
        rank_idx = sq >> 3
        moves: list[Square] = []
        for df, dr in offsets:
            af = file_idx + df
            ar = rank_idx + dr
            if 0 <= af < 8 and 0 <= ar < 8:
                moves.append(make_square(af, ar))
        targets.append(tuple(moves))
    return tuple(targets)


def _build_rays(
    directions: tuple[tuple[int, int], ...],
) -> tuple[tuple[tuple[Square, ...], ...], ...]:
    rays_per_square: list[tuple[tuple[Square, ...], ...]] = []
    for sq in range(64):
        file_idx = sq & 7
        rank_idx = sq >> 3
        square_rays: list[tuple[Square, ...]] = []
        for df, dr in directions:
            af = file_idx + df
            ar = rank_idx + dr
            ray: list[Square] = []
            while 0 <= af < 8 and 0 <= ar < 8:
                ray.append(make_square(af, ar))
                af += df
                ar += dr
            square_rays.append(tuple(ray))
        rays_per_square.append(tuple(square_rays))
    return tuple(rays_per_square)


KNIGHT_TARGETS = _build_targets(KNIGHT_OFFSETS)
KING_TARGETS = _build_targets(KING_OFFSETS)
BISHOP_RAYS = _build_rays(BISHOP_DIRS)
ROOK_RAYS = _build_rays(ROOK_DIRS)
QUEEN_RAYS = _build_rays(QUEEN_DIRS)

_SLIDER_RAYS: dict[PieceType, tuple[tuple[tuple[Square, ...], ...], ...]] = {
    PieceType.BISHOP: BISHOP_RAYS,
    PieceType.ROOK: ROOK_RAYS,
    PieceType.QUEEN: QUEEN_RAYS,
}


def piece_origins(
    board: Board, to_sq: Square, color: Color, piece_type: PieceType
) -> list[Square]:
    """Squares of *color*'s non-pawn *piece_type* that reach *to_sq*.

    Leaping and sliding geometry only; pins are checked by the caller.
    """
    wanted = Piece(color, piece_type)
    origins: list[Square] = []
    if piece_type in (PieceType.KNIGHT, PieceType.KING):
        table = KNIGHT_TARGETS if piece_type == PieceType.KNIGHT else KING_TARGETS
        for sq in table[to_sq]:
            if board[sq] == wanted:
                origins.append(sq)
        return origins

    for ray in _SLIDER_RAYS[piece_type][to_sq]:
        for sq in ray:
            piece = board[sq]
            if piece is None:
                continue
            if piece == wanted:
                origins.append(sq)
            break
    return origins


def is_square_attacked(board: Board, sq: Square, by_color: Color) -> bool:
    """Is *sq* attacked by any piece of *by_color*?"""
    # Attacking pawns stand one step behind the square.
    file_idx = file_of(sq)
    rank_idx = rank_of(sq) - by_color.pawn_step
    if 0 <= rank_idx < 8:
        for df in (-1, 1):
            af = file_idx + df
            if 0 <= af < 8:
                piece = board[make_square(af, rank_idx)]
                if (
                    piece is not None
                    and piece.color == by_color
                    and piece.piece_type == PieceType.PAWN
                ):
                    return True

    for piece_type in (PieceType.KNIGHT, PieceType.KING):
        if piece_origins(board, sq, by_color, piece_type):
            return True

    for ray in BISHOP_RAYS[sq]:
        for to_sq in ray:
            piece = board[to_sq]
            if piece is None:
                continue
            if piece.color == by_color and piece.piece_type in (
                PieceType.BISHOP,
                PieceType.QUEEN,
            ):
                return True
            break

    for ray in ROOK_RAYS[sq]:
        for to_sq in ray:
            piece = board[to_sq]
            if piece is None:
                continue
            if piece.color == by_color and piece.piece_type in (
                PieceType.ROOK,
                PieceType.QUEEN,
            ):
                return True
            break

    return False
