"""Regression tests for ExplorerSession wiring."""

from __future__ import annotations

import threading
import time
import weakref

import pytest

from chesstree.config import ExplorerSettings
from chesstree.core.notation import STARTING_FEN
from chesstree.errors import AggregationCancelled
from chesstree.explorer import LocalSource, OpeningReport
from chesstree.tree import parse_pgn
from chesstree.ui import explorer_session
from chesstree.ui.explorer_session import (
    ExplorerSession,
    _ExplorerRequest,
    _ExplorerWorker,
)


class _Recorder:
    def __init__(self) -> None:
        self.finished: list[OpeningReport] = []
        self.failed: list[str] = []
        self.cancelled = 0

    def session(self) -> ExplorerSession:
        return ExplorerSession(
            on_finished=self.finished.append,
            on_failed=self.failed.append,
            on_cancelled=self._cancelled,
        )

    def _cancelled(self) -> None:
        self.cancelled += 1


class _BlockingFetch:
    """Stands in for fetch_opening and spins until its cancel check fires."""

    def __init__(self) -> None:
        self.started = threading.Event()
        self.saw_cancel = threading.Event()

    def __call__(self, source, fen, *, is_cancelled, **kwargs) -> OpeningReport:
        del source, kwargs
        self.started.set()
        deadline = time.monotonic() + 5.0
        while time.monotonic() < deadline:
            if is_cancelled():
                self.saw_cancel.set()
                raise AggregationCancelled
            time.sleep(0.005)
        return OpeningReport(fen=fen)


def _request(request_id: int, *games: str) -> _ExplorerRequest:
    corpus = [parse_pgn(game) for game in games]
    return _ExplorerRequest(request_id, LocalSource(corpus=corpus), STARTING_FEN)


def _worker_signals(worker: _ExplorerWorker) -> dict[str, list[tuple]]:
    seen: dict[str, list[tuple]] = {"finished": [], "failed": [], "cancelled": []}
    worker.finished.connect(lambda rid, report: seen["finished"].append((rid, report)))
    worker.failed.connect(lambda rid, message: seen["failed"].append((rid, message)))
    worker.cancelled.connect(lambda rid: seen["cancelled"].append((rid,)))
    return seen


class TestExplorerSession:
    def test_setup_connects_slots_without_weakref_error(self, qapp: object) -> None:
        del qapp
        session = _Recorder().session()
        assert weakref.ref(session)() is session
        session.setup()
        session.shutdown()

    def test_shutdown_before_setup_is_noop(self, qapp: object) -> None:
        del qapp
        session = _Recorder().session()
        session.shutdown()
        assert session._is_started is False

    def test_request_ids_increase(self, qapp: object) -> None:
        del qapp
        session = _Recorder().session()
        first = session.explore(LocalSource(corpus=[]), STARTING_FEN)
        second = session.explore(LocalSource(corpus=[]), STARTING_FEN)
        assert first is not None and second is not None and second > first
        session.shutdown()
        assert session._is_started is False

    def test_stale_results_are_dropped(self, qapp: object) -> None:
        del qapp
        recorder = _Recorder()
        session = recorder.session()
        session._active = _request(2)
        session._on_worker_finished(1, OpeningReport(fen=STARTING_FEN))
        assert recorder.finished == []
        report = OpeningReport(fen=STARTING_FEN)
        session._on_worker_finished(2, report)
        assert recorder.finished == [report]
        assert not session.is_busy

    def test_invalid_report_is_a_failure(self, qapp: object) -> None:
        del qapp
        recorder = _Recorder()
        session = recorder.session()
        session._active = _request(7)
        session._on_worker_finished(7, "not a report")
        assert recorder.failed == ["Explorer worker produced invalid report"]

    def test_cancelled_callback(self, qapp: object) -> None:
        del qapp
        recorder = _Recorder()
        session = recorder.session()
        session._active = _request(3)
        session._on_worker_cancelled(2)
        session._on_worker_cancelled(3)
        assert recorder.cancelled == 1


class TestCancellation:
    def test_cancel_reaches_a_running_lookup(
        self, qapp: object, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        del qapp
        fetch = _BlockingFetch()
        monkeypatch.setattr(explorer_session, "fetch_opening", fetch)
        session = _Recorder().session()
        try:
            session.explore(LocalSource(corpus=[]), STARTING_FEN)
            assert fetch.started.wait(5.0)
            session.cancel()
            assert fetch.saw_cancel.wait(2.0)
            assert not session.is_busy
        finally:
            session.shutdown()

    def test_shutdown_stops_a_running_lookup(
        self, qapp: object, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        del qapp
        fetch = _BlockingFetch()
        monkeypatch.setattr(explorer_session, "fetch_opening", fetch)
        session = _Recorder().session()
        session.explore(LocalSource(corpus=[]), STARTING_FEN)
        assert fetch.started.wait(5.0)
        session.shutdown()
        assert fetch.saw_cancel.is_set()
        assert session._thread.isFinished()

    def test_new_request_leaves_older_cancel_set(
        self, qapp: object, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        del qapp
        fetch = _BlockingFetch()
        monkeypatch.setattr(explorer_session, "fetch_opening", fetch)
        session = _Recorder().session()
        try:
            session.explore(LocalSource(corpus=[]), STARTING_FEN)
            first = session._active
            session.explore(LocalSource(corpus=[]), STARTING_FEN)
            second = session._active
            assert first is not None and second is not None
            assert first.cancel_event.is_set()
            assert not second.cancel_event.is_set()
        finally:
            session.shutdown()


class TestExplorerWorker:
    def test_worker_emits_report(self, qapp: object) -> None:
        del qapp
        worker = _ExplorerWorker(None, ExplorerSettings())
        seen = _worker_signals(worker)
        worker.run(_request(1, "1. e4 1-0"))
        assert seen["failed"] == []
        ((request_id, report),) = seen["finished"]
        assert request_id == 1
        assert [move.san for move in report.moves] == ["e4"]

    def test_worker_reports_missing_database(self, qapp: object) -> None:
        del qapp
        worker = _ExplorerWorker(None, ExplorerSettings())
        seen = _worker_signals(worker)
        worker.run(_ExplorerRequest(4, LocalSource(), STARTING_FEN))
        assert seen["failed"] == [(4, "Missing reference database")]

    def test_worker_skips_request_cancelled_while_queued(self, qapp: object) -> None:
        del qapp
        worker = _ExplorerWorker(None, ExplorerSettings())
        seen = _worker_signals(worker)
        stale = _request(5, "1. e4 1-0")
        stale.cancel()
        worker.run(stale)
        worker.run(_request(6, "1. d4 1-0"))
        assert seen["cancelled"] == [(5,)]
        assert [rid for rid, _ in seen["finished"]] == [6]
        assert stale.cancel_event.is_set()

    def test_worker_ignores_foreign_payload(self, qapp: object) -> None:
        del qapp
        worker = _ExplorerWorker(None, ExplorerSettings())
        seen = _worker_signals(worker)
        worker.run("not a request")
        assert seen == {"finished": [], "failed": [], "cancelled": []}
