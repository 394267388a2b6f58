"""Game import from pasted PGN, a bare FEN or a link to an online game."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, TypeAlias, assert_never

from chesstree.tree.game import GameTree, game_name
from chesstree.tree.reader import parse_fen, parse_pgn

_LOGGER = logging.getLogger(__name__)


class GameFetcher(Protocol):
    """Downloads a single game's PGN from an online server."""

    def fetch_chesscom_game(self, url: str) -> str: ...

    def fetch_lichess_game(self, game_id: str) -> str: ...


@dataclass(slots=True, frozen=True)
class PgnImport:
    text: str


@dataclass(slots=True, frozen=True)
class FenImport:
    fen: str


@dataclass(slots=True, frozen=True)
class LinkImport:
    url: str


ImportSource: TypeAlias = PgnImport | FenImport | LinkImport


def lichess_game_id(url: str) -> str:
    """Game id of a lichess URL: ``https://lichess.org/<id>/...``."""
    parts = url.strip().split("/")
    if len(parts) < 4 or not parts[3]:
        raise ValueError(f"No game id in lichess link: {url!r}")
    return parts[3]


def _fetch_link(url: str, fetcher: GameFetcher | None) -> str:
    if fetcher is None:
        raise ValueError("Importing from a link needs a game fetcher")
    if "chess.com" in url:
        return fetcher.fetch_chesscom_game(url)
    if "lichess" in url:
        return fetcher.fetch_lichess_game(lichess_game_id(url))
    raise ValueError(f"Unsupported game link: {url!r}")


def import_game(source: ImportSource, fetcher: GameFetcher | None = None) -> GameTree:
    """Build a game tree from any import source."""
    if isinstance(source, PgnImport):
        tree = parse_pgn(source.text)
    elif isinstance(source, FenImport):
        tree = parse_fen(source.fen)
    elif isinstance(source, LinkImport):
        tree = parse_pgn(_fetch_link(source.url, fetcher))
    else:
        assert_never(source)
    _LOGGER.debug("Imported %s (%d nodes)", game_name(tree.headers), len(tree))
    return tree


def imported_tab_name(tree: GameTree) -> str:
    """Tab title shown after an import."""
    if not len(tree) and tree.is_fen_rooted:
        return "Analysis Board"
    return f"{game_name(tree.headers)} (Imported)"
