"""Path-addressed navigation and editing over a :class:`GameTree`."""

from __future__ import annotations

from collections.abc import Callable

from chesstree.core.notation.nags import MOVE_QUALITY_NAGS, nag_from_text
from chesstree.core.notation.san import canonical_san, parse_san
from chesstree.errors import IllegalMove, NoSuchPath, NoSuchVariation
from chesstree.tree.game import ROOT_PATH, GameTree, Path
from chesstree.tree.node import MoveNode


def is_ancestor(candidate: Path, path: Path) -> bool:
    """True iff *candidate* is a strict prefix of *path*."""
    candidate = tuple(candidate)
    return len(candidate) < len(path) and tuple(path[: len(candidate)]) == candidate


def _remap(
    path: Path, depth: int, index_map: Callable[[int], int | None]
) -> Path | None:
    """Rewrite the step at *depth* of *path*; ``None`` drops the path there."""
    if len(path) <= depth:
        return path
    new_index = index_map(path[depth])
    if new_index is None:
        return None
    return path[:depth] + (new_index,) + path[depth + 1 :]


class TreeNavigator:
    """Cursor plus structural edits for one game tree.

    Every operation takes an explicit path; the navigator also keeps a
    ``current`` path for interactive use and re-resolves it after edits that
    reshape the tree. Paths held elsewhere are not updated: after
    :meth:`delete_node` or :meth:`promote_variation` callers must re-resolve.
    A failed edit raises before touching the tree.
    """

    __slots__ = ("_tree", "_current")

    def __init__(self, tree: GameTree, current: Path = ROOT_PATH) -> None:
        self._tree = tree
        self._current: Path = ROOT_PATH
        self.go_to(current)

    @property
    def tree(self) -> GameTree:
        return self._tree

    @property
    def current(self) -> Path:
        return self._current

    @property
    def current_node(self) -> MoveNode:
        return self._tree.node_at(self._current)

    # ── Path arithmetic ──────────────────────────────────────────────────

    def node_at(self, path: Path) -> MoveNode:
        return self._tree.node_at(path)

    def advance(self, path: Path, variation: int = 0) -> Path:
        """Path of the child at *variation* below *path*."""
        node = self._tree.node_at(path)
        if not 0 <= variation < len(node.children):
            raise NoSuchVariation(tuple(path), variation)
        return tuple(path) + (variation,)

    @staticmethod
    def retreat(path: Path) -> Path:
        """Path of the parent; the root retreats to itself."""
        return tuple(path[:-1])

    @staticmethod
    def is_ancestor(candidate: Path, path: Path) -> bool:
        return is_ancestor(candidate, path)

    def mainline_path(self, path: Path = ROOT_PATH) -> Path:
        """Path of the last node reached by following main lines from *path*."""
        node = self._tree.node_at(path)
        result = tuple(path)
        while node.children:
            node = node.children[0]
            result += (0,)
        return result

    def variation_paths(self, path: Path) -> list[Path]:
        """Paths of every child of the node at *path*, main line first."""
        node = self._tree.node_at(path)
        return [tuple(path) + (idx,) for idx in range(len(node.children))]

    # ── Cursor ───────────────────────────────────────────────────────────

    def go_to(self, path: Path) -> MoveNode:
        node = self._tree.node_at(path)
        self._current = tuple(path)
        return node

    def go_forward(self, variation: int = 0) -> Path:
        self._current = self.advance(self._current, variation)
        return self._current

    def go_back(self) -> Path:
        self._current = self.retreat(self._current)
        return self._current

    def go_start(self) -> Path:
        self._current = ROOT_PATH
        return self._current

    def go_end(self) -> Path:
        self._current = self.mainline_path(self._current)
        return self._current

    # ── Structural edits ─────────────────────────────────────────────────

    def insert_move(self, path: Path, move_text: str) -> Path:
        """Play *move_text* from *path* and return the child's path.

        A child already reaching the same position is reused, so inserting the
        same move twice yields the same path.
        """
        path = tuple(path)
        parent = self._tree.node_at(path)
        try:
            move = parse_san(parent.position, move_text.strip())
        except ValueError as exc:
            raise IllegalMove(path, move_text, str(exc)) from exc

        child = parent.play(move, canonical_san(move_text))
        existing = parent.child_index(child.fen)
        if existing is not None:
            return path + (existing,)
        parent.children.append(child)
        return path + (len(parent.children) - 1,)

    def play(self, move_text: str) -> Path:
        """:meth:`insert_move` at the cursor, then move the cursor there."""
        self._current = self.insert_move(self._current, move_text)
        return self._current

    def promote_variation(self, path: Path) -> Path:
        """Make the node at *path* its parent's main line; returns its new path."""
        path = tuple(path)
        self._tree.node_at(path)
        if not path or path[-1] == 0:
            return path

        parent = self._tree.node_at(path[:-1])
        index = path[-1]
        parent.children.insert(0, parent.children.pop(index))

        def _shift(i: int) -> int:
            if i == index:
                return 0
            return i + 1 if i < index else i

        if path[:-1] == self._current[: len(path) - 1]:
            self._current = _remap(self._current, len(path) - 1, _shift) or ROOT_PATH
        return path[:-1] + (0,)

    def promote_to_mainline(self, path: Path) -> Path:
        """Promote every step of *path* so the node ends up on the main line."""
        path = tuple(path)
        self._tree.node_at(path)
        for depth in range(1, len(path) + 1):
            promoted = self.promote_variation(path[:depth])
            path = promoted + path[depth:]
        return path

    def delete_node(self, path: Path) -> None:
        """Remove the subtree rooted at *path* from its parent."""
        path = tuple(path)
        if not path:
            raise NoSuchPath(path, "The root node cannot be deleted")
        self._tree.node_at(path)

        parent = self._tree.node_at(path[:-1])
        index = path[-1]
        del parent.children[index]

        def _shift(i: int) -> int | None:
            if i == index:
                return None
            return i - 1 if i > index else i

        if path[:-1] == self._current[: len(path) - 1]:
            remapped = _remap(self._current, len(path) - 1, _shift)
            self._current = path[:-1] if remapped is None else remapped

    # ── Metadata edits ───────────────────────────────────────────────────

    def set_comment(self, path: Path, comment: str) -> None:
        """Replace the comments after the node at *path* (blank clears them)."""
        node = self._tree.node_at(path)
        clean = " ".join(comment.split())
        node.comments = [clean] if clean else []

    def set_annotation(self, path: Path, annotation: str | int | None) -> None:
        """Set the move-judgment glyph (``"!"``, ``"?!"``, ``$n`` …) of a node.

        Judgment NAGs 1–6 replace each other; other NAGs are appended once.
        ``None`` clears the judgment and keeps the rest.
        """
        node = self._tree.node_at(path)
        if annotation is None:
            node.nags = [nag for nag in node.nags if nag not in MOVE_QUALITY_NAGS]
            return

        nag = nag_from_text(annotation) if isinstance(annotation, str) else annotation
        if nag < 0:
            raise ValueError(f"Invalid annotation glyph: {annotation!r}")
        if nag in MOVE_QUALITY_NAGS:
            node.nags = [nag] + [n for n in node.nags if n not in MOVE_QUALITY_NAGS]
        elif nag not in node.nags:
            node.nags.append(nag)
