"""Typed errors raised by the game-tree core.

Every error here is recoverable: callers branch on the type instead of
treating it as fatal.
"""

from __future__ import annotations


class ChessTreeError(Exception):
    """Base class for all game-tree errors."""


# ── Notation (parse-time) ────────────────────────────────────────────────────


class NotationError(ChessTreeError, ValueError):
    """PGN/FEN text could not be turned into a tree.

    ``offset`` is the character offset of the offending text in the input.
    """

    def __init__(self, message: str, offset: int = 0) -> None:
        super().__init__(f"{message} (at offset {offset})")
        self.offset = offset


class EmptyInput(NotationError):
    """Input holds neither headers, moves nor a position."""

    def __init__(self, offset: int = 0) -> None:
        super().__init__("Empty input", offset)


class MalformedMove(NotationError):
    """A SAN token does not resolve to exactly one legal move."""

    def __init__(
        self, move_index: int, token: str, offset: int, reason: str = ""
    ) -> None:
        message = f"Malformed move #{move_index} {token!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message, offset)
        self.move_index = move_index
        self.token = token


class UnterminatedComment(NotationError):
    """A ``{`` comment is never closed."""

    def __init__(self, offset: int) -> None:
        super().__init__("Unterminated comment", offset)


class UnterminatedVariation(NotationError):
    """Parentheses in the movetext are unbalanced."""

    def __init__(self, offset: int, message: str = "Unterminated variation") -> None:
        super().__init__(message, offset)


# ── Interactive edits ────────────────────────────────────────────────────────


class TreeEditError(ChessTreeError):
    """A navigation or edit request could not be applied; the tree is unchanged."""


class NoSuchPath(TreeEditError, LookupError):
    """A path does not index into the current shape of the tree."""

    def __init__(self, path: tuple[int, ...], message: str = "") -> None:
        super().__init__(message or f"No node at path {list(path)}")
        self.path = path


class NoSuchVariation(TreeEditError, LookupError):
    """A variation index is out of range at an existing node."""

    def __init__(self, path: tuple[int, ...], variation: int) -> None:
        super().__init__(f"No variation {variation} at path {list(path)}")
        self.path = path
        self.variation = variation


class IllegalMove(TreeEditError, ValueError):
    """Move text cannot be resolved against the position at a path."""

    def __init__(self, path: tuple[int, ...], move_text: str, reason: str = "") -> None:
        message = f"Illegal move {move_text!r} at path {list(path)}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.path = path
        self.move_text = move_text


# ── Explorer / sessions ──────────────────────────────────────────────────────


class MissingReferenceData(ChessTreeError):
    """Aggregation requested without a corpus or reference database."""


class AggregationCancelled(ChessTreeError):
    """Raised when a running aggregation was cancelled; results are discarded."""


class SessionError(ChessTreeError):
    """A stored session blob cannot be decoded."""
