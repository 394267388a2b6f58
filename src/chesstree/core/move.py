"""Move value object."""

from __future__ import annotations

from dataclasses import dataclass

from chesstree.core.enums import MoveFlag, PieceType
from chesstree.core.types import Square, square_name


@dataclass(frozen=True, slots=True)
class Move:
    """A resolved move: squares plus what it does to the board.

    Moves are only built by SAN resolution, so they are always legal in the
    position they were resolved against.
    """

    from_sq: Square
    to_sq: Square
    flag: MoveFlag = MoveFlag.NORMAL
    promotion: PieceType | None = None

    @property
    def uci(self) -> str:
        """Long algebraic form, e.g. ``e7e8q``; the aggregation identity of a move."""
        suffix = self.promotion.san.lower() if self.promotion is not None else ""
        return square_name(self.from_sq) + square_name(self.to_sq) + suffix

    def __str__(self) -> str:
        return self.uci
