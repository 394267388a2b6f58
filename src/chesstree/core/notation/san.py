"""SAN (Standard Algebraic Notation) resolution against a position."""

from __future__ import annotations

import re

from chesstree.core.attacks import is_square_attacked, piece_origins
from chesstree.core.enums import CastlingRights, Color, MoveFlag, PieceType
from chesstree.core.move import Move
from chesstree.core.position import Position
from chesstree.core.types import (
    FILES,
    RANKS,
    file_of,
    make_square,
    parse_square,
    rank_of,
)

_SAN_RE = re.compile(
    r"^(?P<piece>[NBRQK])?(?P<file>[a-h])?(?P<rank>[1-8])?(?P<capture>x)?"
    r"(?P<dest>[a-h][1-8])(?:=?(?P<promotion>[NBRQ]))?$"
)
_KINGSIDE_TOKENS = ("O-O", "0-0")
_QUEENSIDE_TOKENS = ("O-O-O", "0-0-0")
_CASTLING_ALIASES = {"0-0": "O-O", "0-0-0": "O-O-O"}

# (right, king file after castling, files that must be empty,
#  files the king must not cross while attacked)
_CastleSpec = tuple[CastlingRights, int, tuple[int, ...], tuple[int, ...]]
_CASTLES: dict[tuple[Color, MoveFlag], _CastleSpec] = {
    (Color.WHITE, MoveFlag.CASTLE_KINGSIDE): (
        CastlingRights.WHITE_KINGSIDE, 6, (5, 6), (5, 6),
    ),
    (Color.WHITE, MoveFlag.CASTLE_QUEENSIDE): (
        CastlingRights.WHITE_QUEENSIDE, 2, (1, 2, 3), (2, 3),
    ),
    (Color.BLACK, MoveFlag.CASTLE_KINGSIDE): (
        CastlingRights.BLACK_KINGSIDE, 6, (5, 6), (5, 6),
    ),
    (Color.BLACK, MoveFlag.CASTLE_QUEENSIDE): (
        CastlingRights.BLACK_QUEENSIDE, 2, (1, 2, 3), (2, 3),
    ),
}


def strip_san_suffix(token: str) -> str:
    """Drop check/mate markers and annotation glyphs from a SAN token."""
    return token.rstrip("+#!?")


def canonical_san(token: str) -> str:
    """SAN as stored in a tree: glyphs dropped, ``0-0`` spelled ``O-O``."""
    san = token.strip().rstrip("!?")
    body = san.rstrip("+#")
    return _CASTLING_ALIASES.get(body, body) + san[len(body) :]


def parse_san(position: Position, san: str) -> Move:
    """Resolve a SAN string to the single legal :class:`Move` it denotes.

    Raises ``ValueError`` when the token names no legal move or more than one.
    """
    clean = strip_san_suffix(san)

    if clean in _KINGSIDE_TOKENS:
        return _castle(position, MoveFlag.CASTLE_KINGSIDE, san)
    if clean in _QUEENSIDE_TOKENS:
        return _castle(position, MoveFlag.CASTLE_QUEENSIDE, san)

    match = _SAN_RE.match(clean)
    if match is None:
        raise ValueError(f"Invalid SAN: {san}")

    to_sq = parse_square(match["dest"])
    from_file = FILES.index(match["file"]) if match["file"] else None
    from_rank = RANKS.index(match["rank"]) if match["rank"] else None
    promotion = PieceType.from_san(match["promotion"]) if match["promotion"] else None

    if match["piece"] is None:
        candidates = _pawn_candidates(
            position, to_sq, from_file, bool(match["capture"]), promotion, san
        )
    else:
        if promotion is not None:
            raise ValueError(f"Invalid SAN: {san}")
        piece_type = PieceType.from_san(match["piece"])
        candidates = _piece_candidates(position, to_sq, piece_type)

    candidates = [
        m
        for m in candidates
        if (from_file is None or file_of(m.from_sq) == from_file)
        and (from_rank is None or rank_of(m.from_sq) == from_rank)
    ]
    legal = [m for m in candidates if position.leaves_king_safe(m)]

    if len(legal) == 1:
        return legal[0]
    if not legal:
        raise ValueError(f"Illegal move: {san}")
    raise ValueError(f"Ambiguous move: {san} → {[str(m) for m in legal]}")


def _piece_candidates(
    position: Position, to_sq: int, piece_type: PieceType
) -> list[Move]:
    target = position.board[to_sq]
    side = position.side_to_move
    if target is not None and target.color == side:
        return []
    return [
        Move(from_sq, to_sq)
        for from_sq in piece_origins(position.board, to_sq, side, piece_type)
    ]


def _pawn_candidates(
    position: Position,
    to_sq: int,
    from_file: int | None,
    is_capture: bool,
    promotion: PieceType | None,
    san: str,
) -> list[Move]:
    board = position.board
    side = position.side_to_move
    step = side.pawn_step
    last_rank = side.opposite.back_rank
    to_file = file_of(to_sq)
    to_rank = rank_of(to_sq)
    from_rank = to_rank - step

    if not 0 <= from_rank < 8:
        return []
    if to_rank == last_rank and promotion is None:
        raise ValueError(f"Missing promotion piece: {san}")
    if to_rank != last_rank and promotion is not None:
        raise ValueError(f"Invalid promotion: {san}")

    def _is_own_pawn(sq: int) -> bool:
        piece = board[sq]
        return (
            piece is not None
            and piece.color == side
            and piece.piece_type == PieceType.PAWN
        )

    moves: list[Move] = []
    if is_capture or (from_file is not None and from_file != to_file):
        if from_file is None or abs(from_file - to_file) != 1:
            return []
        from_sq = make_square(from_file, from_rank)
        if not _is_own_pawn(from_sq):
            return []
        target = board[to_sq]
        if target is not None and target.color != side:
            flag = MoveFlag.PROMOTION if promotion is not None else MoveFlag.NORMAL
            moves.append(Move(from_sq, to_sq, flag, promotion))
        elif target is None and to_sq == position.en_passant:
            moves.append(Move(from_sq, to_sq, MoveFlag.EN_PASSANT))
        return moves

    if not board.is_empty(to_sq):
        return []
    one_back = make_square(to_file, from_rank)
    if _is_own_pawn(one_back):
        flag = MoveFlag.PROMOTION if promotion is not None else MoveFlag.NORMAL
        moves.append(Move(one_back, to_sq, flag, promotion))
    elif board.is_empty(one_back):
        if to_rank == side.double_push_rank:
            two_back = make_square(to_file, from_rank - step)
            if _is_own_pawn(two_back):
                moves.append(Move(two_back, to_sq, MoveFlag.DOUBLE_PAWN))
    return moves


def _castle(position: Position, flag: MoveFlag, san: str) -> Move:
    side = position.side_to_move
    right, king_file, empty_files, safe_files = _CASTLES[(side, flag)]
    home_rank = side.back_rank
    king_sq = position.board.king_square(side)
    if (
        not position.castling & right
        or king_sq != make_square(4, home_rank)
        or position.is_in_check()
    ):
        raise ValueError(f"Illegal move: {san}")
    board = position.board
    if any(not board.is_empty(make_square(f, home_rank)) for f in empty_files):
        raise ValueError(f"Illegal move: {san}")
    if any(
        is_square_attacked(board, make_square(f, home_rank), side.opposite)
        for f in safe_files
    ):
        raise ValueError(f"Illegal move: {san}")
    return Move(king_sq, make_square(king_file, home_rank), flag)
