"""chesstree: PGN/FEN game trees with variations and opening statistics."""

__version__ = "0.1.0"
