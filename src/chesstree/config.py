"""User-configurable settings for the explorer and session layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

# ── Settings data classes ────────────────────────────────────────────────────


@dataclass
class ExplorerSettings:
    """Opening explorer settings."""

    # Aggregation
    sample_size: int = 5  # games kept per move
    workers: int = 1  # > 1 fans per-game extraction out to a thread pool

    # Local reference database
    max_games: int = 1000  # games read from a bulk store per request

    # Remote explorers
    since_year: int | None = None
    until_year: int | None = None
    speeds: list[str] = field(default_factory=list)
    ratings: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.sample_size < 0:
            raise ValueError("sample_size must be >= 0")
        if self.workers < 1:
            raise ValueError("workers must be >= 1")
        if self.max_games < 0:
            raise ValueError("max_games must be >= 0")


@dataclass
class SessionSettings:
    """Where open tabs are persisted; ``None`` keeps them in memory."""

    directory: Path | None = None
    encoding: str = "utf-8"
