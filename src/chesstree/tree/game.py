"""Game tree: a fixed root position, its move nodes and the PGN headers."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TypeAlias

from chesstree.core.enums import GameResult
from chesstree.core.notation.fen import STARTING_FEN, position_from_fen
from chesstree.errors import NoSuchPath
from chesstree.tree.node import MoveNode

Path: TypeAlias = tuple[int, ...]
"""Variation index chosen at each ply from the root; ``()`` is the root."""

ROOT_PATH: Path = ()

SEVEN_TAG_ROSTER: tuple[str, ...] = (
    "Event",
    "Site",
    "Date",
    "Round",
    "White",
    "Black",
    "Result",
)

_ROSTER_DEFAULTS: dict[str, str] = {
    "Event": "?",
    "Site": "?",
    "Date": "????.??.??",
    "Round": "?",
    "White": "?",
    "Black": "?",
    "Result": "*",
}


@dataclass(slots=True)
class GameTree:
    """A root :class:`MoveNode` plus the game's header mapping."""

    root: MoveNode
    headers: dict[str, str] = field(default_factory=dict)

    # ── Header views ─────────────────────────────────────────────────────

    @property
    def result(self) -> GameResult:
        return GameResult.from_token(self.headers.get("Result"))

    @result.setter
    def result(self, value: GameResult) -> None:
        self.headers["Result"] = value.value

    @property
    def root_fen(self) -> str:
        return self.root.fen

    @property
    def is_fen_rooted(self) -> bool:
        """Whether the game starts from anything but the standard position."""
        return self.root.fen != STARTING_FEN

    # ── Traversal ────────────────────────────────────────────────────────

    def node_at(self, path: Path) -> MoveNode:
        """Resolve *path* to its node or raise :class:`NoSuchPath`."""
        node = self.root
        for variation in path:
            if not 0 <= variation < len(node.children):
                raise NoSuchPath(tuple(path))
            node = node.children[variation]
        return node

    def has_path(self, path: Path) -> bool:
        try:
            self.node_at(path)
        except NoSuchPath:
            return False
        return True

    def mainline(self) -> list[MoveNode]:
        """Main-line nodes after the root, in play order."""
        nodes: list[MoveNode] = []
        node = self.root
        while node.children:
            node = node.children[0]
            nodes.append(node)
        return nodes

    def mainline_sans(self) -> list[str]:
        return [node.san or "" for node in self.mainline()]

    def walk(self) -> Iterator[tuple[Path, MoveNode]]:
        """Yield ``(path, node)`` for every node, depth first, main line first."""
        stack: list[tuple[Path, MoveNode]] = [(ROOT_PATH, self.root)]
        while stack:
            path, node = stack.pop()
            yield path, node
            for idx in range(len(node.children) - 1, -1, -1):
                stack.append((path + (idx,), node.children[idx]))

    def __len__(self) -> int:
        """Number of move nodes (the root excluded)."""
        return sum(1 for _ in self.walk()) - 1


def default_tree(fen: str | None = None) -> GameTree:
    """Empty tree with seven-tag defaults, rooted at *fen* or the start position."""
    start_fen = fen or STARTING_FEN
    tree = GameTree(
        root=MoveNode.root(position_from_fen(start_fen)),
        headers=dict(_ROSTER_DEFAULTS),
    )
    if tree.is_fen_rooted:
        tree.headers["SetUp"] = "1"
        tree.headers["FEN"] = tree.root.fen
    return tree


def game_name(headers: dict[str, str]) -> str:
    """Tab title for a game, e.g. ``"Carlsen - Nepomniachtchi"``."""
    white = headers.get("White", "?")
    black = headers.get("Black", "?")
    if white in ("", "?") and black in ("", "?"):
        return "Unknown"
    return f"{white or '?'} - {black or '?'}"
