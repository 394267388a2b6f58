"""PGN writer: the inverse of :mod:`chesstree.tree.reader`."""

from __future__ import annotations

from dataclasses import dataclass, field

from chesstree.core.enums import Color
from chesstree.core.notation.nags import MOVE_QUALITY_NAGS, nag_to_text
from chesstree.tree.game import ROOT_PATH, SEVEN_TAG_ROSTER, GameTree, Path
from chesstree.tree.node import MoveNode


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _comment(text: str) -> str:
    # PGN comments cannot contain a closing brace.
    return "{" + text.replace("}", "]") + "}"


def ordered_headers(tree: GameTree) -> list[tuple[str, str]]:
    """Seven-tag roster first, then ``SetUp``/``FEN`` if needed, then the rest."""
    headers = dict(tree.headers)
    headers["Result"] = tree.result.value
    if tree.is_fen_rooted:
        headers.setdefault("SetUp", "1")
        headers.setdefault("FEN", tree.root_fen)

    ordered = [(key, headers[key]) for key in SEVEN_TAG_ROSTER if key in headers]
    ordered.extend(
        (key, value) for key, value in headers.items() if key not in SEVEN_TAG_ROSTER
    )
    return ordered


def _join(tokens: list[str]) -> str:
    out: list[str] = []
    for token in tokens:
        if out and out[-1] != "(" and token != ")":
            out.append(" ")
        out.append(token)
    return "".join(out)


def _annotated_san(node: MoveNode) -> list[str]:
    """SAN with a leading judgment glyph glued on; other NAGs as ``$n``."""
    nags = list(node.nags)
    san = node.san or ""
    if nags and nags[0] in MOVE_QUALITY_NAGS:
        san += nag_to_text(nags.pop(0))
    return [san] + [f"${nag}" for nag in nags]


def _comment_tokens(node: MoveNode) -> list[str]:
    bodies = list(node.comments)
    if node.evals:
        commands = " ".join(f"[%{key} {value}]" for key, value in node.evals.items())
        if bodies:
            bodies[0] = f"{commands} {bodies[0]}"
        else:
            bodies.append(commands)
    return [_comment(body) for body in bodies]


def _write_move(
    parent: MoveNode, child: MoveNode, tokens: list[str], force_number: bool
) -> bool:
    """Emit *child*; return whether the next move needs an explicit number."""
    if child.starting_comments:
        tokens.extend(_comment(text) for text in child.starting_comments)
        force_number = True

    position = parent.position
    if position.side_to_move == Color.WHITE:
        tokens.append(f"{position.fullmove_number}.")
    elif force_number:
        tokens.append(f"{position.fullmove_number}...")

    tokens.extend(_annotated_san(child))
    comments = _comment_tokens(child)
    tokens.extend(comments)
    return bool(comments)


@dataclass(slots=True)
class _LineFrame:
    """A line being written: where it continues from and what is still owed."""

    node: MoveNode
    force_number: bool
    branch: MoveNode | None = None  # parent of the alternatives below
    alternatives: list[MoveNode] = field(default_factory=list)
    closes: bool = False  # emit ")" once the line is exhausted


def _write_lines(start: MoveNode, tokens: list[str], force_number: bool) -> None:
    """Emit the main continuation from *start*, nesting each alternative.

    Every alternative is written right after the main move it replaces, as a
    parenthesized line of its own.
    """
    stack = [_LineFrame(start, force_number)]
    while stack:
        frame = stack[-1]
        if frame.alternatives and frame.branch is not None:
            variation = frame.alternatives.pop(0)
            tokens.append("(")
            variation_force = _write_move(frame.branch, variation, tokens, True)
            frame.force_number = True
            stack.append(_LineFrame(variation, variation_force, closes=True))
            continue

        node = frame.node
        if not node.children:
            stack.pop()
            if frame.closes:
                tokens.append(")")
            continue

        main = node.children[0]
        frame.force_number = _write_move(node, main, tokens, frame.force_number)
        frame.branch = node
        frame.alternatives = node.children[1:]
        frame.node = main


def write_movetext(
    tree: GameTree, path: Path = ROOT_PATH, *, with_result: bool = True
) -> str:
    """Render the movetext continuing from the node at *path*.

    From the root this is the whole game, with root comments first and the
    result token last.
    """
    node = tree.node_at(path)
    tokens: list[str] = []
    if not path:
        tokens.extend(_comment_tokens(node))
    _write_lines(node, tokens, force_number=True)
    if with_result:
        tokens.append(tree.result.value)
    return _join(tokens)


def write_pgn(tree: GameTree) -> str:
    """Build a single-game PGN document."""
    lines = [f'[{key} "{_escape(value)}"]' for key, value in ordered_headers(tree)]
    lines.append("")
    lines.append(write_movetext(tree))
    lines.append("")
    return "\n".join(lines)
