"""Move tree nodes."""

from __future__ import annotations

from dataclasses import dataclass, field

from chesstree.core.move import Move
from chesstree.core.notation.fen import position_key, position_to_fen
from chesstree.core.position import Position


@dataclass(slots=True)
class MoveNode:
    """One ply of a game tree.

    ``children[0]`` is the main line; later entries are alternatives from the
    same position, in import/insertion order. Nodes own their children and
    keep no reference to their parent: upward navigation goes through paths.
    """

    position: Position
    fen: str
    move: Move | None = None
    san: str | None = None
    children: list[MoveNode] = field(default_factory=list)
    comments: list[str] = field(default_factory=list)
    starting_comments: list[str] = field(default_factory=list)
    nags: list[int] = field(default_factory=list)
    evals: dict[str, str] = field(default_factory=dict)

    @classmethod
    def root(cls, position: Position) -> MoveNode:
        return cls(position=position, fen=position_to_fen(position))

    def play(self, move: Move, san: str) -> MoveNode:
        """Build (but do not attach) the child reached by *move*."""
        position = self.position.play(move)
        return MoveNode(
            position=position,
            fen=position_to_fen(position),
            move=move,
            san=san,
        )

    @property
    def is_root(self) -> bool:
        return self.move is None

    @property
    def key(self) -> str:
        """Counter-free transposition key of this node's position."""
        return position_key(self.position)

    def child_index(self, fen: str) -> int | None:
        """Index of the child whose position has *fen*, if any."""
        for idx, child in enumerate(self.children):
            if child.fen == fen:
                return idx
        return None
