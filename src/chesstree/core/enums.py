"""Enumerations shared by positions, moves and game records."""

from __future__ import annotations

from enum import IntEnum, IntFlag, StrEnum


class Color(IntEnum):
    """Side color; ``fen`` is its side-to-move letter."""

    WHITE = 0
    BLACK = 1

    @property
    def opposite(self) -> Color:
        return Color(1 - self.value)

    @property
    def fen(self) -> str:
        return "w" if self is Color.WHITE else "b"

    @classmethod
    def from_fen(cls, text: str) -> Color:
        if text == "w":
            return cls.WHITE
        if text == "b":
            return cls.BLACK
        raise ValueError(f"Invalid FEN side-to-move field: {text!r}")

    # ── Board geometry seen from this side ───────────────────────────────

    @property
    def pawn_step(self) -> int:
        """Rank delta of a single pawn push."""
        return 1 if self is Color.WHITE else -1

    @property
    def back_rank(self) -> int:
        return 0 if self is Color.WHITE else 7

    @property
    def double_push_rank(self) -> int:
        """Rank a pawn lands on after its two-square first move."""
        return 3 if self is Color.WHITE else 4


class PieceType(IntEnum):
    """Chess piece types; ``san`` is the SAN letter (empty for pawns)."""

    PAWN = 1
    KNIGHT = 2
    BISHOP = 3
    ROOK = 4
    QUEEN = 5
    KING = 6

    @property
    def san(self) -> str:
        return _SAN_LETTERS[self]

    @classmethod
    def from_san(cls, letter: str) -> PieceType:
        try:
            return _SAN_PIECES[letter]
        except KeyError:
            raise ValueError(f"Invalid SAN piece letter: {letter!r}") from None


_SAN_LETTERS: dict[PieceType, str] = {
    PieceType.PAWN: "",
    PieceType.KNIGHT: "N",
    PieceType.BISHOP: "B",
    PieceType.ROOK: "R",
    PieceType.QUEEN: "Q",
    PieceType.KING: "K",
}
_SAN_PIECES: dict[str, PieceType] = {
    letter: piece_type for piece_type, letter in _SAN_LETTERS.items() if letter
}


class MoveFlag(IntEnum):
    """How a move changes the board beyond moving one piece."""

    NORMAL = 0
    DOUBLE_PAWN = 1
    EN_PASSANT = 2
    CASTLE_KINGSIDE = 3
    CASTLE_QUEENSIDE = 4
    PROMOTION = 5

    @property
    def is_castle(self) -> bool:
        return self in (MoveFlag.CASTLE_KINGSIDE, MoveFlag.CASTLE_QUEENSIDE)


class CastlingRights(IntFlag):
    """Castling availability, read and written in FEN order ``KQkq``."""

    NONE = 0
    WHITE_KINGSIDE = 1
    WHITE_QUEENSIDE = 2
    BLACK_KINGSIDE = 4
    BLACK_QUEENSIDE = 8

    WHITE_BOTH = WHITE_KINGSIDE | WHITE_QUEENSIDE
    BLACK_BOTH = BLACK_KINGSIDE | BLACK_QUEENSIDE
    ALL = WHITE_BOTH | BLACK_BOTH

    @classmethod
    def from_fen(cls, text: str) -> CastlingRights:
        if text == "-":
            return cls.NONE
        rights = cls.NONE
        for ch in text:
            right = _CASTLING_LETTERS.get(ch)
            if right is None or rights & right:
                raise ValueError(f"Invalid FEN castling field: {text!r}")
            rights |= right
        return rights

    def to_fen(self) -> str:
        text = "".join(ch for ch, right in _CASTLING_LETTERS.items() if self & right)
        return text or "-"


_CASTLING_LETTERS: dict[str, CastlingRights] = {
    "K": CastlingRights.WHITE_KINGSIDE,
    "Q": CastlingRights.WHITE_QUEENSIDE,
    "k": CastlingRights.BLACK_KINGSIDE,
    "q": CastlingRights.BLACK_QUEENSIDE,
}


class GameResult(StrEnum):
    """Game outcome, valued by its PGN result token."""

    WHITE_WINS = "1-0"
    BLACK_WINS = "0-1"
    DRAW = "1/2-1/2"
    UNKNOWN = "*"

    @property
    def is_decided(self) -> bool:
        return self is not GameResult.UNKNOWN

    @classmethod
    def from_token(cls, token: str | None) -> GameResult:
        """Map a PGN result token to :class:`GameResult` (unknown → ``*``)."""
        try:
            return cls(token or "*")
        except ValueError:
            return cls.UNKNOWN
