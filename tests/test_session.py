"""Tests for per-tab session persistence."""

from __future__ import annotations

from pathlib import Path

import pytest

from chesstree.config import SessionSettings
from chesstree.errors import SessionError
from chesstree.session import SessionStore, decode_session, encode_session
from chesstree.tree import TreeNavigator, default_tree, parse_pgn

ANNOTATED = (
    '[Event "Club"]\n[White "A"]\n[Black "B"]\n[Result "1-0"]\n[ECO "C50"]\n\n'
    "{Intro} 1. e4! {[%eval 0.3] main} e5 2. Nf3 (2. Bc4 $14 Nc6) 2... Nc6 1-0"
)


@pytest.fixture(params=["memory", "disk"])
def store(request: pytest.FixtureRequest, tmp_path: Path) -> SessionStore:
    if request.param == "memory":
        return SessionStore()
    return SessionStore(SessionSettings(directory=tmp_path / "sessions"))


class TestSessionStore:
    def test_round_trip_is_lossless(self, store: SessionStore) -> None:
        tree = parse_pgn(ANNOTATED)
        store.save("tab-1", tree, (0, 0, 1))
        restored = store.load("tab-1")
        assert restored is not None
        assert restored.tree == tree
        assert restored.path == (0, 0, 1)

    def test_open_then_save_on_mutation(self, store: SessionStore) -> None:
        session = store.open("board", default_tree())
        nav = session.navigator()
        nav.play("d4")
        store.save("board", nav.tree, nav.current)
        restored = store.load("board")
        assert restored is not None
        assert restored.tree.mainline_sans() == ["d4"]
        assert restored.navigator().current == (0,)

    def test_load_unknown_tab(self, store: SessionStore) -> None:
        assert store.load("missing") is None

    def test_close_discards(self, store: SessionStore) -> None:
        store.open("tab-2", default_tree())
        assert "tab-2" in store.tab_ids()
        store.close("tab-2")
        assert store.load("tab-2") is None
        store.close("tab-2")

    def test_stale_path_falls_back_to_root(self, store: SessionStore) -> None:
        store.save("tab-3", parse_pgn("1. e4 *"), (0, 4))
        restored = store.load("tab-3")
        assert restored is not None
        assert restored.navigator().current == ()


class TestDiskStore:
    def test_one_file_per_tab(self, tmp_path: Path) -> None:
        store = SessionStore(SessionSettings(directory=tmp_path))
        store.open("a", default_tree())
        store.open("b", default_tree())
        assert sorted(p.name for p in tmp_path.iterdir()) == ["a.json", "b.json"]
        assert store.is_persistent

    def test_corrupt_file_raises(self, tmp_path: Path) -> None:
        (tmp_path / "bad.json").write_text("{not json", encoding="utf-8")
        store = SessionStore(SessionSettings(directory=tmp_path))
        with pytest.raises(SessionError):
            store.load("bad")

    def test_invalid_tab_id(self, tmp_path: Path) -> None:
        store = SessionStore(SessionSettings(directory=tmp_path))
        with pytest.raises(SessionError):
            store.save("../escape", default_tree())


class TestBlob:
    def test_blob_shape(self) -> None:
        blob = encode_session(parse_pgn("1. e4 *"), (0,))
        session = decode_session("t", blob)
        assert session.path == (0,)
        assert '"version": 1' in blob

    @pytest.mark.parametrize(
        "blob",
        [
            '{"version": 2, "pgn": "*", "path": []}',
            '{"version": 1, "pgn": 5, "path": []}',
            '{"version": 1, "pgn": "*", "path": [-1]}',
            '{"version": 1, "pgn": "1. e4 (", "path": []}',
            "[]",
        ],
    )
    def test_bad_blobs(self, blob: str) -> None:
        with pytest.raises(SessionError):
            decode_session("t", blob)

    def test_navigator_edits_survive(self) -> None:
        tree = parse_pgn("1. e4 e5 *")
        nav = TreeNavigator(tree)
        nav.set_annotation((0, 0), "?!")
        nav.set_comment((0, 0), "risky")
        assert decode_session("t", encode_session(tree)).tree == tree
