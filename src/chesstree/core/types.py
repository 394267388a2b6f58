"""Square type alias and coordinate helpers.

Squares are numbered rank by rank from White's side: a1=0, b1=1, ..., h1=7,
a2=8, ..., h8=63.
"""

from __future__ import annotations

from typing import TypeAlias

Square: TypeAlias = int  # 0–63

FILES = "abcdefgh"
RANKS = "12345678"

SQUARE_NAMES: tuple[str, ...] = tuple(f + r for r in RANKS for f in FILES)
_SQUARES_BY_NAME: dict[str, Square] = {name: sq for sq, name in enumerate(SQUARE_NAMES)}


def file_of(sq: Square) -> int:
    """File index 0–7 (a–h)."""
    return sq & 7


def rank_of(sq: Square) -> int:
    """Rank index 0–7 (1–8)."""
    return sq >> 3


def make_square(file: int, rank: int) -> Square:
    return rank * 8 + file


def square_name(sq: Square) -> str:
    return SQUARE_NAMES[sq]


def parse_square(name: str) -> Square:
    """``"e4"`` → 28."""
    try:
        return _SQUARES_BY_NAME[name]
    except KeyError:
        raise ValueError(f"Invalid square name: {name!r}") from None
