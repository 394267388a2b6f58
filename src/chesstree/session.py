"""Per-tab session persistence.

Each open tab owns one game tree and a navigator path. The pair is stored as
a small JSON blob keyed by the tab id, rewritten on every edit and read back
once when the tab is restored. The tree travels as PGN, so anything the PGN
writer and reader preserve survives a save/load cycle.
"""

from __future__ import annotations

import json
import logging
import pathlib
import re
from dataclasses import dataclass

from chesstree.config import SessionSettings
from chesstree.errors import NotationError, SessionError
from chesstree.tree.game import ROOT_PATH, GameTree, Path
from chesstree.tree.navigator import TreeNavigator
from chesstree.tree.reader import parse_pgn
from chesstree.tree.writer import write_pgn

_LOGGER = logging.getLogger(__name__)

SESSION_VERSION = 1
_TAB_ID_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


@dataclass(slots=True)
class TabSession:
    """A restored tab: its tree and the path the user was looking at."""

    tab_id: str
    tree: GameTree
    path: Path = ROOT_PATH

    def navigator(self) -> TreeNavigator:
        """Navigator positioned at the saved path, or the root if it is stale."""
        path = self.path if self.tree.has_path(self.path) else ROOT_PATH
        return TreeNavigator(self.tree, path)


def encode_session(tree: GameTree, path: Path = ROOT_PATH) -> str:
    return json.dumps(
        {"version": SESSION_VERSION, "pgn": write_pgn(tree), "path": list(path)}
    )


def decode_session(tab_id: str, blob: str) -> TabSession:
    try:
        data = json.loads(blob)
    except json.JSONDecodeError as exc:
        raise SessionError(f"Corrupt session blob for tab {tab_id!r}: {exc}") from exc

    if not isinstance(data, dict) or data.get("version") != SESSION_VERSION:
        raise SessionError(f"Unsupported session blob for tab {tab_id!r}")
    pgn = data.get("pgn")
    raw_path = data.get("path", [])
    if not isinstance(pgn, str) or not isinstance(raw_path, list):
        raise SessionError(f"Malformed session blob for tab {tab_id!r}")
    if not all(isinstance(step, int) and step >= 0 for step in raw_path):
        raise SessionError(f"Malformed session path for tab {tab_id!r}")

    try:
        tree = parse_pgn(pgn)
    except NotationError as exc:
        raise SessionError(f"Stored game for tab {tab_id!r} is invalid: {exc}") from exc
    return TabSession(tab_id=tab_id, tree=tree, path=tuple(raw_path))


class SessionStore:
    """Session blobs keyed by tab id, on disk or in memory.

    Lifecycle: :meth:`open` when a tab is created, :meth:`save` after every
    mutation, :meth:`load` once when the tab is restored, :meth:`close` when
    it is discarded.
    """

    __slots__ = ("_settings", "_memory")

    def __init__(self, settings: SessionSettings | None = None) -> None:
        self._settings = settings or SessionSettings()
        self._memory: dict[str, str] = {}
        if self._settings.directory is not None:
            self._settings.directory.mkdir(parents=True, exist_ok=True)

    @property
    def is_persistent(self) -> bool:
        return self._settings.directory is not None

    def open(self, tab_id: str, tree: GameTree) -> TabSession:
        """Register a new tab, persisting its initial tree."""
        self.save(tab_id, tree, ROOT_PATH)
        return TabSession(tab_id=tab_id, tree=tree)

    def save(self, tab_id: str, tree: GameTree, path: Path = ROOT_PATH) -> None:
        blob = encode_session(tree, path)
        self._write(tab_id, blob)
        _LOGGER.debug("Saved session %s (%d bytes)", tab_id, len(blob))

    def load(self, tab_id: str) -> TabSession | None:
        """Stored session of *tab_id*, or ``None`` if the tab was never saved."""
        blob = self._read(tab_id)
        if blob is None:
            return None
        return decode_session(tab_id, blob)

    def close(self, tab_id: str) -> None:
        """Discard a tab's stored session; unknown tabs are ignored."""
        self._memory.pop(tab_id, None)
        directory = self._settings.directory
        if directory is not None:
            self._file(directory, tab_id).unlink(missing_ok=True)
        _LOGGER.debug("Closed session %s", tab_id)

    def tab_ids(self) -> list[str]:
        directory = self._settings.directory
        if directory is None:
            return list(self._memory)
        return sorted(entry.stem for entry in directory.glob("*.json"))

    # ── Backends ─────────────────────────────────────────────────────────

    @staticmethod
    def _file(directory: pathlib.Path, tab_id: str) -> pathlib.Path:
        if not _TAB_ID_RE.match(tab_id):
            raise SessionError(f"Invalid tab id: {tab_id!r}")
        return directory / f"{tab_id}.json"

    def _write(self, tab_id: str, blob: str) -> None:
        directory = self._settings.directory
        if directory is None:
            self._memory[tab_id] = blob
            return
        target = self._file(directory, tab_id)
        tmp = target.with_suffix(".tmp")
        try:
            tmp.write_text(blob, encoding=self._settings.encoding)
            tmp.replace(target)
        except OSError as exc:
            raise SessionError(f"Cannot write session {tab_id!r}: {exc}") from exc

    def _read(self, tab_id: str) -> str | None:
        directory = self._settings.directory
        if directory is None:
            return self._memory.get(tab_id)
        target = self._file(directory, tab_id)
        if not target.exists():
            return None
        try:
            return target.read_text(encoding=self._settings.encoding)
        except (OSError, UnicodeDecodeError) as exc:
            raise SessionError(f"Cannot read session {tab_id!r}: {exc}") from exc
