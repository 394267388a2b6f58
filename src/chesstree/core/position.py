"""Position: board plus side to move, castling, en passant and clocks."""

from __future__ import annotations

from dataclasses import dataclass, field

from chesstree.core.attacks import is_square_attacked
from chesstree.core.board import Board
from chesstree.core.enums import CastlingRights, Color, MoveFlag, PieceType
from chesstree.core.move import Move
from chesstree.core.piece import Piece
from chesstree.core.types import Square, file_of, make_square, rank_of

# Rights lost when a piece leaves or lands on these squares.
_RIGHTS_BY_SQUARE: dict[Square, CastlingRights] = {
    make_square(0, 0): CastlingRights.WHITE_QUEENSIDE,
    make_square(7, 0): CastlingRights.WHITE_KINGSIDE,
    make_square(0, 7): CastlingRights.BLACK_QUEENSIDE,
    make_square(7, 7): CastlingRights.BLACK_KINGSIDE,
}
_RIGHTS_BY_KING: dict[Color, CastlingRights] = {
    Color.WHITE: CastlingRights.WHITE_BOTH,
    Color.BLACK: CastlingRights.BLACK_BOTH,
}


@dataclass(frozen=True, slots=True)
class Position:
    """Immutable chess position.

    :meth:`play` returns a new position, so a move tree can cache one
    position per node and share the parent untouched.
    """

    board: Board = field(default_factory=Board.initial)
    side_to_move: Color = Color.WHITE
    castling: CastlingRights = CastlingRights.ALL
    en_passant: Square | None = None
    halfmove_clock: int = 0
    fullmove_number: int = 1

    # ── Move application ─────────────────────────────────────────────────

    def play(self, move: Move) -> Position:
        """Return the position reached by playing *move* (no legality check)."""
        board = self.board.copy()
        piece = board[move.from_sq]
        if piece is None:
            raise ValueError(f"No piece on {move.from_sq}")

        captured = board[move.to_sq]
        if move.flag == MoveFlag.EN_PASSANT:
            # The captured pawn sits beside the mover, not on the target square.
            ep_capture_sq = make_square(file_of(move.to_sq), rank_of(move.from_sq))
            captured = board[ep_capture_sq]
            board[ep_capture_sq] = None

        board[move.from_sq] = None
        if move.promotion is not None:
            board[move.to_sq] = Piece(piece.color, move.promotion)
        else:
            board[move.to_sq] = piece

        if move.flag.is_castle:
            rank = rank_of(move.from_sq)
            kingside = move.flag == MoveFlag.CASTLE_KINGSIDE
            rook_from = make_square(7 if kingside else 0, rank)
            board[make_square(5 if kingside else 3, rank)] = board[rook_from]
            board[rook_from] = None

        en_passant: Square | None = None
        if move.flag == MoveFlag.DOUBLE_PAWN:
            en_passant = move.from_sq + 8 * piece.color.pawn_step

        castling = self.castling
        if piece.piece_type == PieceType.KING:
            castling &= ~_RIGHTS_BY_KING[piece.color]
        for sq in (move.from_sq, move.to_sq):
            castling &= ~_RIGHTS_BY_SQUARE.get(sq, CastlingRights.NONE)

        resets_clock = piece.piece_type == PieceType.PAWN or captured is not None
        return Position(
            board=board,
            side_to_move=self.side_to_move.opposite,
            castling=castling,
            en_passant=en_passant,
            halfmove_clock=0 if resets_clock else self.halfmove_clock + 1,
            fullmove_number=self.fullmove_number + int(self.side_to_move),
        )

    # ── Queries ──────────────────────────────────────────────────────────

    def is_in_check(self, color: Color | None = None) -> bool:
        """Is *color*'s king (default: side to move) attacked?

        A board without that king is never in check.
        """
        color = self.side_to_move if color is None else color
        king_sq = self.board.king_square(color)
        if king_sq is None:
            return False
        return is_square_attacked(self.board, king_sq, color.opposite)

    def leaves_king_safe(self, move: Move) -> bool:
        """Whether *move* does not leave the mover's own king attacked."""
        return not self.play(move).is_in_check(self.side_to_move)

    def can_capture_en_passant(self) -> bool:
        """Whether a pawn of the side to move stands ready to take en passant."""
        if self.en_passant is None:
            return False
        pawn = Piece(self.side_to_move, PieceType.PAWN)
        rank = rank_of(self.en_passant) - self.side_to_move.pawn_step
        for df in (-1, 1):
            f = file_of(self.en_passant) + df
            if 0 <= f < 8 and self.board[make_square(f, rank)] == pawn:
                return True
        return False

    def __repr__(self) -> str:
        from chesstree.core.notation.fen import position_to_fen

        return f"Position({position_to_fen(self)!r})"
