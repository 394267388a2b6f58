"""Notation package: FEN, SAN and annotation glyphs."""

from chesstree.core.notation.fen import (
    STARTING_FEN,
    fen_key,
    looks_like_fen,
    position_from_fen,
    position_key,
    position_to_fen,
)
from chesstree.core.notation.nags import nag_from_text, nag_to_text
from chesstree.core.notation.san import canonical_san, parse_san

__all__ = [
    "STARTING_FEN",
    "canonical_san",
    "fen_key",
    "looks_like_fen",
    "nag_from_text",
    "nag_to_text",
    "parse_san",
    "position_from_fen",
    "position_key",
    "position_to_fen",
]
