"""Position-indexed opening statistics over a corpus of games."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Sequence
from contextlib import closing
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from chesstree.config import ExplorerSettings
from chesstree.core.notation.fen import fen_key
from chesstree.errors import AggregationCancelled, NotationError
from chesstree.explorer.models import GameRef, OpeningMove, OpeningReport
from chesstree.tree.game import GameTree
from chesstree.tree.reader import parse_pgn, split_pgn_games

_LOGGER = logging.getLogger(__name__)

CancelCheck = Callable[[], bool]
ProgressCallback = Callable[[int, int], None]
CorpusEntry = GameTree | str


@dataclass(slots=True)
class _GameHits:
    """Per-game extraction result, merged in corpus order."""

    index: int
    ref: GameRef | None = None
    hits: list[tuple[str, str]] = field(default_factory=list)  # (uci, san)
    skip_reason: str | None = None


def _as_tree(entry: CorpusEntry) -> GameTree:
    if isinstance(entry, GameTree):
        return entry
    return parse_pgn(entry)


def _extract(index: int, entry: object, target_key: str) -> _GameHits:
    """Collect every move played from the target position in one game."""
    if not isinstance(entry, (GameTree, str)):
        return _GameHits(
            index, skip_reason=f"unsupported entry type {type(entry).__name__}"
        )
    try:
        tree = _as_tree(entry)
    except NotationError as exc:
        return _GameHits(index, skip_reason=str(exc))

    result = tree.result
    if not result.is_decided:
        return _GameHits(index, skip_reason=f"undecided result {result.value!r}")

    ref = GameRef(
        index=index,
        white=tree.headers.get("White", "?"),
        black=tree.headers.get("Black", "?"),
        result=result,
    )
    hits: list[tuple[str, str]] = []
    for _path, node in tree.walk():
        if not node.children or node.key != target_key:
            continue
        for child in node.children:
            if child.move is not None:
                hits.append((child.move.uci, child.san or child.move.uci))
    return _GameHits(index, ref=ref, hits=hits)


class OpeningAggregator:
    """Ranks the moves played from a position across many game trees.

    Every occurrence counts: a game that reaches the target position twice
    (for instance through two variations) tallies its result twice.
    """

    __slots__ = ("_settings",)

    def __init__(self, settings: ExplorerSettings | None = None) -> None:
        self._settings = settings or ExplorerSettings()

    @property
    def settings(self) -> ExplorerSettings:
        return self._settings

    def aggregate(
        self,
        target_fen: str,
        corpus: Iterable[CorpusEntry],
        *,
        is_cancelled: CancelCheck | None = None,
        on_progress: ProgressCallback | None = None,
        allow_partial: bool = False,
    ) -> OpeningReport:
        """Aggregate *corpus* at *target_fen*.

        Corpus entries are game trees or single-game PGN texts. On
        cancellation :class:`AggregationCancelled` is raised, unless
        *allow_partial* is set, in which case the games merged so far are
        returned in a report flagged ``partial``.
        """
        entries = list(corpus)
        target_key = fen_key(target_fen)
        cancelled = is_cancelled or (lambda: False)
        total = len(entries)

        moves: dict[str, OpeningMove] = {}
        report = OpeningReport(fen=target_fen)

        with closing(self._extract_all(entries, target_key)) as games:
            for done, game in enumerate(games, start=1):
                if cancelled():
                    if not allow_partial:
                        raise AggregationCancelled
                    _LOGGER.info(
                        "Aggregation cancelled after %d of %d games", done - 1, total
                    )
                    report.partial = True
                    break
                self._merge(game, moves, report)
                if on_progress is not None:
                    on_progress(done, total)

        # sorted() is stable: equal totals keep first-seen order.
        report.moves = sorted(moves.values(), key=lambda move: move.total, reverse=True)
        return report

    def aggregate_texts(
        self,
        target_fen: str,
        pgn_texts: Iterable[str],
        *,
        is_cancelled: CancelCheck | None = None,
        on_progress: ProgressCallback | None = None,
        allow_partial: bool = False,
    ) -> OpeningReport:
        """Aggregate raw PGN texts as handed over by a bulk game store.

        Each text may hold several games; they are split before parsing.
        """
        games: list[str] = []
        for text in pgn_texts:
            games.extend(split_pgn_games(text))
        return self.aggregate(
            target_fen,
            games,
            is_cancelled=is_cancelled,
            on_progress=on_progress,
            allow_partial=allow_partial,
        )

    # ── Internals ────────────────────────────────────────────────────────

    def _extract_all(
        self, entries: Sequence[CorpusEntry], target_key: str
    ) -> Iterator[_GameHits]:
        workers = self._settings.workers
        if workers <= 1 or len(entries) < 2:
            for idx, entry in enumerate(entries):
                yield _extract(idx, entry, target_key)
            return
        yield from self._extract_parallel(entries, target_key, workers)

    @staticmethod
    def _extract_parallel(
        entries: Sequence[CorpusEntry], target_key: str, workers: int
    ) -> Iterator[_GameHits]:
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="chesstree-aggregate"
        ) as pool:
            futures = [
                pool.submit(_extract, idx, entry, target_key)
                for idx, entry in enumerate(entries)
            ]
            try:
                # Results are consumed in submission order.
                for future in futures:
                    yield future.result()
            finally:
                for future in futures:
                    future.cancel()

    def _merge(
        self,
        game: _GameHits,
        moves: dict[str, OpeningMove],
        report: OpeningReport,
    ) -> None:
        if game.ref is None:
            report.skipped += 1
            _LOGGER.warning(
                "Skipping corpus entry %d: %s", game.index, game.skip_reason
            )
            return

        sample_size = self._settings.sample_size
        for uci, san in game.hits:
            move = moves.get(uci)
            if move is None:
                move = moves[uci] = OpeningMove(uci=uci, san=san)
            move.tally(game.ref.result)
            if len(move.games) < sample_size and all(
                ref.index != game.ref.index for ref in move.games
            ):
                move.games.append(game.ref)


def count_occurrences(target_fen: str, trees: Iterable[GameTree]) -> int:
    """Number of (game, occurrence) pairs leaving *target_fen* with a decided result."""
    target_key = fen_key(target_fen)
    count = 0
    for tree in trees:
        if not tree.result.is_decided:
            continue
        for _path, node in tree.walk():
            if node.key == target_key:
                count += len(node.children)
    return count
