"""Opening explorer APIs."""

from chesstree.explorer.aggregator import OpeningAggregator
from chesstree.explorer.models import GameRef, OpeningMove, OpeningReport
from chesstree.explorer.sources import (
    ExplorerSource,
    LichessAllSource,
    LichessMastersSource,
    LocalSource,
    fetch_opening,
)

__all__ = [
    "ExplorerSource",
    "GameRef",
    "LichessAllSource",
    "LichessMastersSource",
    "LocalSource",
    "OpeningAggregator",
    "OpeningMove",
    "OpeningReport",
    "fetch_opening",
]
