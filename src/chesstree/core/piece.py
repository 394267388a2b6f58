"""Piece value object."""

from __future__ import annotations

from dataclasses import dataclass

from chesstree.core.enums import Color, PieceType

# Lowercase FEN letter per piece type; white pieces are written uppercase.
_FEN_LETTERS: dict[PieceType, str] = {
    PieceType.PAWN: "p",
    PieceType.KNIGHT: "n",
    PieceType.BISHOP: "b",
    PieceType.ROOK: "r",
    PieceType.QUEEN: "q",
    PieceType.KING: "k",
}
_FEN_TYPES: dict[str, PieceType] = {ch: kind for kind, ch in _FEN_LETTERS.items()}


@dataclass(frozen=True, slots=True)
class Piece:
    color: Color
    piece_type: PieceType

    @property
    def fen(self) -> str:
        letter = _FEN_LETTERS[self.piece_type]
        return letter.upper() if self.color is Color.WHITE else letter

    def __str__(self) -> str:
        return self.fen

    @classmethod
    def from_char(cls, char: str) -> Piece:
        """Piece for a FEN letter: ``"N"`` is a white knight, ``"n"`` a black one."""
        kind = _FEN_TYPES.get(char.lower()) if len(char) == 1 else None
        if kind is None:
            raise ValueError(f"Invalid piece character: {char!r}")
        return cls(Color.WHITE if char.isupper() else Color.BLACK, kind)
