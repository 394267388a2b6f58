"""Numeric Annotation Glyphs and their symbolic move-quality forms."""

from __future__ import annotations

GOOD_MOVE = 1
MISTAKE = 2
BRILLIANT_MOVE = 3
BLUNDER = 4
SPECULATIVE_MOVE = 5
DUBIOUS_MOVE = 6

GLYPH_NAGS: dict[str, int] = {
    "!": GOOD_MOVE,
    "?": MISTAKE,
    "!!": BRILLIANT_MOVE,
    "??": BLUNDER,
    "!?": SPECULATIVE_MOVE,
    "?!": DUBIOUS_MOVE,
}
NAG_GLYPHS: dict[int, str] = {v: k for k, v in GLYPH_NAGS.items()}

# $1..$6 are mutually exclusive move judgments.
MOVE_QUALITY_NAGS = frozenset(NAG_GLYPHS)


def nag_from_text(text: str) -> int:
    """Normalize ``"!?"`` or ``"$5"`` to the numeric NAG ``5``."""
    if text in GLYPH_NAGS:
        return GLYPH_NAGS[text]
    if text.startswith("$") and text[1:].isdigit():
        return int(text[1:])
    raise ValueError(f"Invalid annotation glyph: {text!r}")


def nag_to_text(nag: int) -> str:
    """Symbolic form for move-quality NAGs, ``$n`` otherwise."""
    return NAG_GLYPHS.get(nag, f"${nag}")
