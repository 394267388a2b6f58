"""FEN parsing, serialization and aggregation keys."""

from __future__ import annotations

from chesstree.core.board import Board
from chesstree.core.enums import CastlingRights, Color
from chesstree.core.position import Position
from chesstree.core.types import Square, parse_square, rank_of, square_name

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


def position_from_fen(fen: str) -> Position:
    """Parse a FEN string into a :class:`Position`."""
    parts = fen.split()
    if not (4 <= len(parts) <= 6):
        raise ValueError(f"Invalid FEN (need 4-6 fields): {fen!r}")

    placement, side_part, castling_part, ep_part = parts[:4]
    board = Board.from_placement(placement)
    side = Color.from_fen(side_part)
    castling = CastlingRights.from_fen(castling_part)

    ep: Square | None = None
    if ep_part != "-":
        ep = parse_square(ep_part)
        # Square the opponent's pawn skipped over.
        if rank_of(ep) != side.opposite.double_push_rank + side.pawn_step:
            raise ValueError(
                f"Invalid FEN en-passant square for side-to-move: {ep_part!r}"
            )

    # Counters are optional.
    try:
        halfmove = int(parts[4]) if len(parts) > 4 else 0
        fullmove = int(parts[5]) if len(parts) > 5 else 1
    except ValueError:
        raise ValueError(f"Invalid FEN move counters: {fen!r}") from None
    if halfmove < 0:
        raise ValueError(f"Invalid FEN halfmove clock: {parts[4]!r}")
    if fullmove < 1:
        raise ValueError(f"Invalid FEN fullmove number: {parts[5]!r}")

    return Position(board, side, castling, ep, halfmove, fullmove)


def _fields(pos: Position, ep: Square | None) -> str:
    ep_str = square_name(ep) if ep is not None else "-"
    return (
        f"{pos.board.placement()} {pos.side_to_move.fen} "
        f"{pos.castling.to_fen()} {ep_str}"
    )


def position_to_fen(pos: Position) -> str:
    """Serialise a :class:`Position` to FEN."""
    return (
        f"{_fields(pos, pos.en_passant)} "
        f"{pos.halfmove_clock} {pos.fullmove_number}"
    )


def position_key(pos: Position) -> str:
    """Transposition key: FEN without move counters.

    The en-passant square is kept only when a pawn of the side to move could
    actually capture onto it, so positions reached by a double push and by two
    single pushes group together.
    """
    ep = pos.en_passant if pos.can_capture_en_passant() else None
    return _fields(pos, ep)


def fen_key(fen: str) -> str:
    """:func:`position_key` for a FEN string."""
    return position_key(position_from_fen(fen))


def looks_like_fen(text: str) -> bool:
    """Cheap shape test used to tell a bare FEN from PGN text."""
    parts = text.split()
    return (
        4 <= len(parts) <= 6
        and parts[0].count("/") == 7
        and parts[1] in ("w", "b")
        and not text.lstrip().startswith("[")
    )
