"""Data models produced by opening aggregation."""

from __future__ import annotations

from dataclasses import dataclass, field

from chesstree.core.enums import GameResult


@dataclass(slots=True, frozen=True)
class GameRef:
    """Short reference to a corpus game a move was played in."""

    index: int
    white: str
    black: str
    result: GameResult

    @property
    def name(self) -> str:
        return f"{self.white} - {self.black}"


@dataclass(slots=True)
class OpeningMove:
    """Outcome counts for one move played from the target position."""

    uci: str
    san: str
    white: int = 0
    draws: int = 0
    black: int = 0
    games: list[GameRef] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.white + self.draws + self.black

    def tally(self, result: GameResult) -> None:
        if result == GameResult.WHITE_WINS:
            self.white += 1
        elif result == GameResult.BLACK_WINS:
            self.black += 1
        elif result == GameResult.DRAW:
            self.draws += 1
        else:
            raise ValueError(f"Cannot tally an undecided result: {result!r}")


@dataclass(slots=True)
class OpeningReport:
    """Ranked moves from one position over a corpus of games.

    ``skipped`` counts corpus entries left out (undecided result or unparsable
    text). ``partial`` is set when aggregation stopped early on cancellation.
    """

    fen: str
    moves: list[OpeningMove] = field(default_factory=list)
    skipped: int = 0
    partial: bool = False

    @property
    def total(self) -> int:
        return sum(move.total for move in self.moves)

    @property
    def is_empty(self) -> bool:
        return not self.moves

    def move(self, uci: str) -> OpeningMove | None:
        for candidate in self.moves:
            if candidate.uci == uci:
                return candidate
        return None
