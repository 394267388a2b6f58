"""Opening explorer backends: a local reference database or remote explorers.

The three backends form a closed union dispatched in :func:`fetch_opening`.
Local and remote sources produce the same :class:`OpeningReport` shape, so
consumers never need to know where the numbers came from.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol, TypeAlias, assert_never

from chesstree.config import ExplorerSettings
from chesstree.errors import MissingReferenceData
from chesstree.explorer.aggregator import CancelCheck, OpeningAggregator
from chesstree.explorer.models import OpeningReport
from chesstree.tree.game import GameTree

_LOGGER = logging.getLogger(__name__)


# ── Collaborators ────────────────────────────────────────────────────────────


class GameReader(Protocol):
    """Bulk game store: reads raw PGN texts by index range."""

    def read_games(self, start: int, end: int) -> list[str]: ...


class OpeningFetcher(Protocol):
    """Remote opening explorer client."""

    def fetch_lichess_games(
        self, fen: str, *, speeds: Sequence[str], ratings: Sequence[int]
    ) -> OpeningReport: ...

    def fetch_masters_games(
        self, fen: str, *, since: int | None, until: int | None
    ) -> OpeningReport: ...


# ── Sources ──────────────────────────────────────────────────────────────────


@dataclass(slots=True)
class LocalSource:
    """Games from a local reference database or an in-memory corpus."""

    reader: GameReader | None = None
    corpus: list[GameTree] | None = None


@dataclass(slots=True)
class LichessAllSource:
    """All rated games on lichess, filtered by speed and rating band."""

    speeds: list[str] = field(default_factory=list)
    ratings: list[int] = field(default_factory=list)


@dataclass(slots=True)
class LichessMastersSource:
    """Over-the-board master games, optionally bounded by year."""

    since: int | None = None
    until: int | None = None


ExplorerSource: TypeAlias = LocalSource | LichessAllSource | LichessMastersSource


def default_source(kind: str, settings: ExplorerSettings) -> ExplorerSource:
    """Source for a selector value: ``local``, ``lch_all`` or ``lch_master``."""
    if kind == "local":
        return LocalSource()
    if kind == "lch_all":
        return LichessAllSource(
            speeds=list(settings.speeds), ratings=list(settings.ratings)
        )
    if kind == "lch_master":
        return LichessMastersSource(
            since=settings.since_year, until=settings.until_year
        )
    raise ValueError(f"Unknown explorer source: {kind!r}")


def _sorted(report: OpeningReport) -> OpeningReport:
    report.moves.sort(key=lambda move: move.total, reverse=True)
    return report


def fetch_opening(
    source: ExplorerSource,
    fen: str,
    *,
    fetcher: OpeningFetcher | None = None,
    settings: ExplorerSettings | None = None,
    is_cancelled: CancelCheck | None = None,
    allow_partial: bool = False,
) -> OpeningReport:
    """Opening statistics for *fen* from *source*.

    An empty FEN yields an empty report. A local source with neither a reader
    nor a corpus raises :class:`MissingReferenceData`.
    """
    if not fen.strip():
        return OpeningReport(fen=fen)

    settings = settings or ExplorerSettings()

    if isinstance(source, LocalSource):
        aggregator = OpeningAggregator(settings)
        if source.corpus is not None:
            return aggregator.aggregate(
                fen,
                source.corpus,
                is_cancelled=is_cancelled,
                allow_partial=allow_partial,
            )
        if source.reader is None:
            raise MissingReferenceData("Missing reference database")
        texts = source.reader.read_games(0, settings.max_games)
        _LOGGER.debug("Read %d texts from the reference database", len(texts))
        return aggregator.aggregate_texts(
            fen, texts, is_cancelled=is_cancelled, allow_partial=allow_partial
        )

    if fetcher is None:
        raise MissingReferenceData("No remote opening explorer configured")

    if isinstance(source, LichessAllSource):
        report = fetcher.fetch_lichess_games(
            fen, speeds=source.speeds, ratings=source.ratings
        )
    elif isinstance(source, LichessMastersSource):
        report = fetcher.fetch_masters_games(
            fen, since=source.since, until=source.until
        )
    else:
        assert_never(source)
    return _sorted(report)
