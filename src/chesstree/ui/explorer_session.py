"""Background opening-explorer orchestration for the UI thread.

Every lookup travels to the worker as an :class:`_ExplorerRequest` carrying
its own cancel event. The UI thread sets that event directly, so a lookup
that is already running inside :func:`fetch_opening` sees the cancel on its
next check without waiting for the worker's event loop.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field

from PyQt6.QtCore import QObject, QThread, pyqtSignal, pyqtSlot

from chesstree.config import ExplorerSettings
from chesstree.errors import AggregationCancelled
from chesstree.explorer.models import OpeningReport
from chesstree.explorer.sources import ExplorerSource, OpeningFetcher, fetch_opening

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _ExplorerRequest:
    request_id: int
    source: ExplorerSource
    fen: str
    cancel_event: threading.Event = field(default_factory=threading.Event)

    def cancel(self) -> None:
        self.cancel_event.set()


class _ExplorerCommandBus(QObject):
    submitted = pyqtSignal(object)  # _ExplorerRequest


class _ExplorerWorker(QObject):
    finished = pyqtSignal(int, object)  # request_id, report
    cancelled = pyqtSignal(int)  # request_id
    failed = pyqtSignal(int, str)  # request_id, message

    __slots__ = ("_fetcher", "_settings")

    def __init__(
        self, fetcher: OpeningFetcher | None, settings: ExplorerSettings
    ) -> None:
        super().__init__()
        self._fetcher = fetcher
        self._settings = settings

    @pyqtSlot(object)
    def run(self, request_obj: object) -> None:
        if not isinstance(request_obj, _ExplorerRequest):
            _LOGGER.warning("Ignoring explorer request of type %s", type(request_obj))
            return
        request = request_obj
        if request.cancel_event.is_set():
            # Superseded while queued behind an earlier lookup.
            self.cancelled.emit(request.request_id)
            return

        try:
            report = fetch_opening(
                request.source,
                request.fen,
                fetcher=self._fetcher,
                settings=self._settings,
                is_cancelled=request.cancel_event.is_set,
            )
        except AggregationCancelled:
            self.cancelled.emit(request.request_id)
            return
        except Exception as exc:
            _LOGGER.debug(
                "Explorer request %d failed", request.request_id, exc_info=True
            )
            self.failed.emit(request.request_id, str(exc))
            return

        if request.cancel_event.is_set():
            self.cancelled.emit(request.request_id)
            return
        self.finished.emit(request.request_id, report)


class ExplorerSession:
    """Owns the worker thread that answers opening explorer lookups.

    At most one request is active. Starting a lookup cancels the previous
    one, and results that arrive for anything but the active request are
    dropped, so only the latest position's report reaches ``on_finished``.
    """

    __slots__ = (
        "__weakref__",
        "_on_finished",
        "_on_failed",
        "_on_cancelled",
        "_command_bus",
        "_thread",
        "_worker",
        "_request_ids",
        "_active",
        "_is_started",
        "_is_shutting_down",
    )

    def __init__(
        self,
        *,
        on_finished: Callable[[OpeningReport], None],
        on_failed: Callable[[str], None],
        on_cancelled: Callable[[], None],
        fetcher: OpeningFetcher | None = None,
        settings: ExplorerSettings | None = None,
        parent: QObject | None = None,
    ) -> None:
        self._on_finished = on_finished
        self._on_failed = on_failed
        self._on_cancelled = on_cancelled

        self._command_bus = _ExplorerCommandBus(parent)
        self._thread = QThread(parent)
        self._worker = _ExplorerWorker(fetcher, settings or ExplorerSettings())
        self._request_ids = itertools.count(1)
        self._active: _ExplorerRequest | None = None
        self._is_started = False
        self._is_shutting_down = False

    @property
    def is_busy(self) -> bool:
        return self._active is not None

    def setup(self) -> None:
        """Move the worker onto its thread and start it."""
        if self._is_started:
            return
        self._is_shutting_down = False
        self._worker.moveToThread(self._thread)
        self._command_bus.submitted.connect(self._worker.run)
        self._worker.finished.connect(self._on_worker_finished)
        self._worker.failed.connect(self._on_worker_failed)
        self._worker.cancelled.connect(self._on_worker_cancelled)
        self._thread.start()
        self._is_started = True

    def shutdown(self) -> None:
        """Cancel the active lookup and join the worker thread."""
        if not self._is_started:
            return
        self._is_shutting_down = True
        self.cancel()
        self._thread.quit()
        if not self._thread.wait(2000):
            _LOGGER.warning("Explorer worker did not stop within 2s")
        self._is_started = False

    def explore(self, source: ExplorerSource, fen: str) -> int | None:
        """Start a lookup for *fen*, superseding any active one.

        Returns the request id, or ``None`` while shutting down.
        """
        if not self._is_started:
            self.setup()
        if self._is_shutting_down:
            return None

        self.cancel()
        request = _ExplorerRequest(next(self._request_ids), source, fen)
        self._active = request
        self._command_bus.submitted.emit(request)
        return request.request_id

    def cancel(self) -> None:
        """Cancel the active lookup, if any."""
        request, self._active = self._active, None
        if request is not None:
            request.cancel()

    def _claim(self, request_id: int) -> bool:
        """Retire the active request if *request_id* still names it."""
        active = self._active
        if self._is_shutting_down or active is None:
            return False
        if active.request_id != request_id:
            return False
        self._active = None
        return True

    def _on_worker_finished(self, request_id: int, report_obj: object) -> None:
        if not self._claim(request_id):
            return
        if not isinstance(report_obj, OpeningReport):
            self._on_failed("Explorer worker produced invalid report")
            return
        self._on_finished(report_obj)

    def _on_worker_failed(self, request_id: int, message: str) -> None:
        if self._claim(request_id):
            self._on_failed(message)

    def _on_worker_cancelled(self, request_id: int) -> None:
        if self._claim(request_id):
            self._on_cancelled()
