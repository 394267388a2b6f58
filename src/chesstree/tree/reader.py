"""PGN / FEN reader: text in, complete :class:`GameTree` out.

The movetext is tokenized first, then parsed with an explicit stack of open
variations. Nothing is returned on failure, so callers never see a half-built
tree.
"""

from __future__ import annotations

import re
from collections import deque
from dataclasses import dataclass, field

from chesstree.core.enums import GameResult
from chesstree.core.notation.fen import STARTING_FEN, looks_like_fen, position_from_fen
from chesstree.core.notation.nags import nag_from_text
from chesstree.core.notation.san import canonical_san, parse_san
from chesstree.errors import (
    EmptyInput,
    MalformedMove,
    NotationError,
    UnterminatedComment,
    UnterminatedVariation,
)
from chesstree.tree.game import GameTree, default_tree
from chesstree.tree.node import MoveNode

_PGN_HEADER_RE = re.compile(r'^\[(\w+)\s+"((?:[^"\\]|\\.)*)"\]\s*$')
_PGN_RESULT_TOKENS = frozenset(result.value for result in GameResult)
_MOVE_NUMBER_RE = re.compile(r"^\d*\.+")
_EVAL_COMMAND_RE = re.compile(r"\[%(\w+)\s+([^\]]*)\]")
_TOKEN_STOP = frozenset("{}();$")
_NAG_RE = re.compile(r"\$\d*")

_SAN = "san"
_NAG = "nag"
_COMMENT = "comment"
_OPEN = "open"
_CLOSE = "close"
_RESULT = "result"


@dataclass(frozen=True, slots=True)
class _Token:
    kind: str
    text: str
    offset: int


# ── Tokenizer ────────────────────────────────────────────────────────────────


def _split_move_token(token: str, offset: int) -> list[_Token]:
    """Split ``12.Nf3!?`` into a SAN token and an optional glyph token."""
    number = _MOVE_NUMBER_RE.match(token)
    if number is not None:
        token = token[number.end() :]
        offset += number.end()
    if not token:
        return []

    if all(ch in "!?" for ch in token):
        return [_Token(_NAG, token, offset)]

    san = token.rstrip("!?")
    tokens = [_Token(_SAN, san, offset)]
    glyph = token[len(san) :]
    if glyph:
        tokens.append(_Token(_NAG, glyph, offset + len(san)))
    return tokens


def _tokenize(movetext: str, base: int) -> list[_Token]:
    """Tokenize *movetext*; offsets are shifted by *base* into the full input."""
    tokens: list[_Token] = []
    idx = 0
    total = len(movetext)

    while idx < total:
        ch = movetext[idx]

        if ch.isspace():
            idx += 1
            continue

        if ch == "%" and (idx == 0 or movetext[idx - 1] == "\n"):
            # Escape line: ignored up to the end of the line.
            end = movetext.find("\n", idx)
            idx = total if end < 0 else end
            continue

        if ch == "{":
            end = movetext.find("}", idx + 1)
            if end < 0:
                raise UnterminatedComment(base + idx)
            tokens.append(_Token(_COMMENT, movetext[idx + 1 : end], base + idx))
            idx = end + 1
            continue

        if ch == ";":
            end = movetext.find("\n", idx + 1)
            if end < 0:
                end = total
            tokens.append(_Token(_COMMENT, movetext[idx + 1 : end], base + idx))
            idx = end
            continue

        if ch == "}":
            raise UnterminatedComment(base + idx)

        if ch == "(":
            tokens.append(_Token(_OPEN, ch, base + idx))
            idx += 1
            continue

        if ch == ")":
            tokens.append(_Token(_CLOSE, ch, base + idx))
            idx += 1
            continue

        if ch == "$":
            nag = _NAG_RE.match(movetext, idx)
            tokens.append(_Token(_NAG, nag.group(), base + idx))
            idx = nag.end()
            continue

        token_end = idx
        while (
            token_end < total
            and not movetext[token_end].isspace()
            and movetext[token_end] not in _TOKEN_STOP
        ):
            token_end += 1
        token = movetext[idx:token_end]
        offset = base + idx
        idx = token_end

        if token in _PGN_RESULT_TOKENS:
            tokens.append(_Token(_RESULT, token, offset))
        else:
            tokens.extend(_split_move_token(token, offset))

    return tokens


# ── Comments ─────────────────────────────────────────────────────────────────


def _split_comment(raw: str) -> tuple[str, dict[str, str]]:
    """Lift ``[%key value]`` commands out of a comment body."""
    evals = {
        key: " ".join(value.split()) for key, value in _EVAL_COMMAND_RE.findall(raw)
    }
    text = " ".join(_EVAL_COMMAND_RE.sub(" ", raw).split())
    return text, evals


# ── Parser ───────────────────────────────────────────────────────────────────


@dataclass(slots=True)
class _Line:
    """Parse state of one line of play; the main line sits at the stack bottom."""

    parent: MoveNode
    open_offset: int | None  # offset of the ``(`` that opened it
    current: MoveNode
    branch_from: MoveNode | None = None
    last: MoveNode | None = None
    pending_comments: list[str] = field(default_factory=list)
    pending_evals: dict[str, str] = field(default_factory=dict)


class _MovetextParser:
    """Builds the node structure below a root from a token list.

    Open variations are kept on an explicit stack of :class:`_Line` frames,
    so nesting depth is bounded by memory, not by the interpreter stack.
    """

    __slots__ = ("_tokens", "_move_index", "result")

    def __init__(self, tokens: list[_Token]) -> None:
        self._tokens = tokens
        self._move_index = 0
        self.result: str | None = None

    def parse(self, root: MoveNode) -> None:
        stack = [_Line(parent=root, open_offset=None, current=root)]
        for token in self._tokens:
            line = stack[-1]

            if token.kind == _SAN:
                node = self._play(line.current, token)
                node.starting_comments.extend(line.pending_comments)
                node.evals.update(line.pending_evals)
                line.pending_comments.clear()
                line.pending_evals.clear()
                line.current.children.append(node)
                line.branch_from, line.current, line.last = line.current, node, node

            elif token.kind == _NAG:
                self._annotate(line.last, token)

            elif token.kind == _COMMENT:
                self._comment(line, token)

            elif token.kind == _OPEN:
                if line.branch_from is None:
                    raise UnterminatedVariation(
                        token.offset, "Variation without a preceding move"
                    )
                stack.append(
                    _Line(
                        parent=line.branch_from,
                        open_offset=token.offset,
                        current=line.branch_from,
                    )
                )

            elif token.kind == _CLOSE:
                if line.open_offset is None:
                    raise UnterminatedVariation(token.offset, "Unmatched ')'")
                stack.pop()

            elif token.kind == _RESULT and line.open_offset is None:
                self.result = token.text
                return

        if stack[-1].open_offset is not None:
            raise UnterminatedVariation(stack[-1].open_offset)

    def _annotate(self, last: MoveNode | None, token: _Token) -> None:
        if last is None:
            raise MalformedMove(
                self._move_index, token.text, token.offset, "annotation without a move"
            )
        try:
            last.nags.append(nag_from_text(token.text))
        except ValueError as exc:
            raise MalformedMove(
                self._move_index, token.text, token.offset, str(exc)
            ) from exc

    @staticmethod
    def _comment(line: _Line, token: _Token) -> None:
        text, evals = _split_comment(token.text)
        if line.last is not None:
            target = line.last
        elif line.open_offset is None:
            target = line.parent
        else:
            # Before a variation's first move: held for that move.
            if text:
                line.pending_comments.append(text)
            line.pending_evals.update(evals)
            return
        target.evals.update(evals)
        if text:
            target.comments.append(text)

    def _play(self, current: MoveNode, token: _Token) -> MoveNode:
        move_index = self._move_index
        self._move_index += 1
        try:
            move = parse_san(current.position, token.text)
        except ValueError as exc:
            raise MalformedMove(move_index, token.text, token.offset, str(exc)) from exc
        return current.play(move, canonical_san(token.text))


# ── Headers ──────────────────────────────────────────────────────────────────


def _split_headers(text: str) -> tuple[dict[str, str], str, int]:
    """Return headers, the movetext and the movetext's offset in *text*."""
    headers: dict[str, str] = {}
    offset = 0
    for raw_line in text.splitlines(keepends=True):
        line = raw_line.strip()
        if not line:
            offset += len(raw_line)
            continue
        if not line.startswith("["):
            break
        match = _PGN_HEADER_RE.match(line)
        if match is None:
            raise NotationError(f"Invalid PGN header line: {line}", offset)
        key, raw_value = match.groups()
        headers[key] = raw_value.replace('\\"', '"').replace("\\\\", "\\")
        offset += len(raw_line)
    return headers, text[offset:], offset


# ── Public API ───────────────────────────────────────────────────────────────


def parse_fen(fen: str) -> GameTree:
    """Root-only tree for a bare FEN, flagged with ``SetUp``/``FEN`` headers."""
    clean = " ".join(fen.split())
    if not clean:
        raise EmptyInput()
    try:
        position_from_fen(clean)
    except ValueError as exc:
        raise NotationError(str(exc), 0) from exc
    tree = default_tree(clean)
    if not tree.is_fen_rooted:
        tree.headers["SetUp"] = "1"
        tree.headers["FEN"] = tree.root.fen
    return tree


def parse_pgn(pgn_text: str) -> GameTree:
    """Parse one PGN game (headers + movetext with variations) into a tree."""
    if not pgn_text.strip():
        raise EmptyInput()

    headers, movetext, movetext_offset = _split_headers(pgn_text)

    start_fen = headers.get("FEN", STARTING_FEN)
    try:
        root = MoveNode.root(position_from_fen(start_fen))
    except ValueError as exc:
        raise NotationError(str(exc), 0) from exc

    parser = _MovetextParser(_tokenize(movetext, movetext_offset))
    parser.parse(root)

    # Last token wins over an explicit Result header.
    if parser.result is not None:
        headers["Result"] = parser.result
    else:
        headers.setdefault("Result", GameResult.UNKNOWN.value)
    return GameTree(root=root, headers=headers)


def parse_game(text: str) -> GameTree:
    """Parse PGN text or a bare FEN, whichever *text* is."""
    if not text.strip():
        raise EmptyInput()
    if looks_like_fen(text):
        return parse_fen(text)
    return parse_pgn(text)


@dataclass(slots=True)
class _SplitState:
    """Lexical state carried across lines while splitting a document."""

    in_movetext: bool = False
    in_comment: bool = False
    depth: int = 0


def _game_end(line: str, state: _SplitState) -> int | None:
    """Index just past a top-level result token in *line*, if there is one."""
    idx = 0
    total = len(line)
    while idx < total:
        if state.in_comment:
            end = line.find("}", idx)
            if end < 0:
                return None
            state.in_comment = False
            idx = end + 1
            continue

        ch = line[idx]
        if ch == ";":
            return None
        if ch == "{":
            state.in_comment = True
        elif ch == "(":
            state.depth += 1
        elif ch == ")":
            state.depth = max(state.depth - 1, 0)
        elif not ch.isspace():
            end = idx + 1
            while (
                end < total
                and not line[end].isspace()
                and line[end] not in _TOKEN_STOP
            ):
                end += 1
            if state.depth == 0 and line[idx:end] in _PGN_RESULT_TOKENS:
                return end
            idx = end
            continue
        idx += 1
    return None


def split_pgn_games(pgn_text: str) -> list[str]:
    """Split a multi-game PGN document into one text per game.

    A game ends at its top-level result token, or where the next header
    block starts. Brace comments may span lines and may contain lines that
    start with ``[`` (wrapped ``[%clk ...]`` commands).
    """
    games: list[str] = []
    current: list[str] = []
    state = _SplitState()
    lines = deque(pgn_text.splitlines())

    while lines:
        line = lines.popleft()
        stripped = line.strip()

        if not state.in_comment:
            if stripped.startswith("[") and state.in_movetext:
                games.append("\n".join(current))
                current, state = [], _SplitState()
            if not state.in_movetext and (not stripped or stripped.startswith("[")):
                current.append(line)
                continue
            if stripped.startswith("%"):
                current.append(line)
                continue

        state.in_movetext = True
        end = _game_end(line, state)
        if end is None:
            current.append(line)
            continue
        current.append(line[:end])
        games.append("\n".join(current))
        current, state = [], _SplitState()
        if line[end:].strip():
            lines.appendleft(line[end:].lstrip())

    if any(line.strip() for line in current):
        games.append("\n".join(current))
    return [game.strip("\n") for game in games if game.strip()]


def parse_pgn_games(pgn_text: str) -> list[GameTree]:
    """Parse every game of a multi-game PGN document."""
    return [parse_pgn(game) for game in split_pgn_games(pgn_text)]
