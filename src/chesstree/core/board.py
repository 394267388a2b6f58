"""Board - piece placement on an 8x8 board."""

from __future__ import annotations

from collections.abc import Iterator

from chesstree.core.enums import Color, PieceType
from chesstree.core.piece import Piece
from chesstree.core.types import Square, make_square

_BACK_RANK: tuple[PieceType, ...] = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


class Board:
    """64-square board with a king-square cache.

    Boards held by a :class:`~chesstree.core.position.Position` are never
    mutated after construction; positions copy before playing a move.
    """

    __slots__ = ("_squares", "_king_squares")

    def __init__(self) -> None:
        self._squares: list[Piece | None] = [None] * 64
        # [color] -> king square cache (None if king missing).
        self._king_squares: list[Square | None] = [None, None]

    # -- Element access -----------------------------------------------------

    def __getitem__(self, sq: Square) -> Piece | None:
        return self._squares[sq]

    def __setitem__(self, sq: Square, piece: Piece | None) -> None:
        old_piece = self._squares[sq]
        if (
            old_piece is not None
            and old_piece.piece_type == PieceType.KING
            and self._king_squares[int(old_piece.color)] == sq
        ):
            self._king_squares[int(old_piece.color)] = None
        self._squares[sq] = piece
        if piece is not None and piece.piece_type == PieceType.KING:
            self._king_squares[int(piece.color)] = sq

    def is_empty(self, sq: Square) -> bool:
        return self._squares[sq] is None

    # -- Query helpers ------------------------------------------------------

    def pieces(self, color: Color, piece_type: PieceType) -> list[Square]:
        """Squares occupied by *color*'s *piece_type*."""
        wanted = Piece(color, piece_type)
        return [sq for sq, piece in enumerate(self._squares) if piece == wanted]

    def occupied(self) -> Iterator[tuple[Square, Piece]]:
        """Yield ``(square, piece)`` for every occupied square, a1 first."""
        for sq, piece in enumerate(self._squares):
            if piece is not None:
                yield sq, piece

    def king_square(self, color: Color) -> Square | None:
        """The king square for *color*, or ``None`` on a king-less board."""
        return self._king_squares[int(color)]

    # -- Copying ------------------------------------------------------------

    def copy(self) -> Board:
        b = Board()
        b._squares = self._squares.copy()
        b._king_squares = self._king_squares.copy()
        return b

    # -- Factories and FEN placement ---------------------------------------

    @classmethod
    def initial(cls) -> Board:
        """Standard starting position."""
        b = cls()
        for f, pt in enumerate(_BACK_RANK):
            b[make_square(f, 0)] = Piece(Color.WHITE, pt)
            b[make_square(f, 1)] = Piece(Color.WHITE, PieceType.PAWN)
            b[make_square(f, 6)] = Piece(Color.BLACK, PieceType.PAWN)
            b[make_square(f, 7)] = Piece(Color.BLACK, pt)
        return b

    @classmethod
    def from_placement(cls, placement: str) -> Board:
        """Board from the first FEN field, rank 8 first."""
        rows = placement.split("/")
        if len(rows) != 8:
            raise ValueError(
                f"Invalid FEN board (must contain 8 ranks): {placement!r}"
            )
        b = cls()
        for rank, row in zip(range(7, -1, -1), rows):
            file = 0
            for ch in row:
                if ch.isdigit():
                    if not 1 <= int(ch) <= 8:
                        raise ValueError(f"Invalid FEN digit {ch!r}: {placement!r}")
                    file += int(ch)
                    continue
                if file >= 8:
                    raise ValueError(f"Invalid FEN rank width: {placement!r}")
                b[make_square(file, rank)] = Piece.from_char(ch)
                file += 1
            if file != 8:
                raise ValueError(f"Invalid FEN rank width: {placement!r}")
        return b

    def placement(self) -> str:
        """First FEN field: ranks 8 to 1, empty runs as digits."""
        rows: list[str] = []
        for rank in range(7, -1, -1):
            row = ""
            empty = 0
            for file in range(8):
                piece = self._squares[make_square(file, rank)]
                if piece is None:
                    empty += 1
                    continue
                row += (str(empty) if empty else "") + piece.fen
                empty = 0
            rows.append(row + (str(empty) if empty else ""))
        return "/".join(rows)

    # -- Dunder helpers -----------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._squares == other._squares

    def __hash__(self) -> int:
        return hash(tuple(self._squares))

    def __repr__(self) -> str:
        return f"Board({self.placement()!r})"
