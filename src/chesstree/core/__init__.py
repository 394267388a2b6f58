"""Core domain layer: squares, pieces, positions and notation.

Quick start::

    from chesstree.core import parse_san, position_from_fen, STARTING_FEN

    pos = position_from_fen(STARTING_FEN)
    pos = pos.play(parse_san(pos, "e4"))
"""

from chesstree.core.board import Board
from chesstree.core.enums import CastlingRights, Color, GameResult, MoveFlag, PieceType
from chesstree.core.move import Move
from chesstree.core.notation import (
    STARTING_FEN,
    fen_key,
    parse_san,
    position_from_fen,
    position_key,
    position_to_fen,
)
from chesstree.core.piece import Piece
from chesstree.core.position import Position
from chesstree.core.types import (
    Square,
    file_of,
    make_square,
    parse_square,
    rank_of,
    square_name,
)

__all__ = [
    # Enums / flags
    "CastlingRights",
    "Color",
    "GameResult",
    "MoveFlag",
    "PieceType",
    # Types / helpers
    "Square",
    "file_of",
    "make_square",
    "parse_square",
    "rank_of",
    "square_name",
    # Domain objects
    "Board",
    "Move",
    "Piece",
    "Position",
    # Notation
    "STARTING_FEN",
    "fen_key",
    "parse_san",
    "position_from_fen",
    "position_key",
    "position_to_fen",
]
