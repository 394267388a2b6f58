"""Game trees: parsing, navigation, editing and PGN export."""

from chesstree.tree.game import ROOT_PATH, GameTree, Path, default_tree, game_name
from chesstree.tree.importer import (
    FenImport,
    ImportSource,
    LinkImport,
    PgnImport,
    import_game,
)
from chesstree.tree.navigator import TreeNavigator
from chesstree.tree.node import MoveNode
from chesstree.tree.reader import (
    parse_fen,
    parse_game,
    parse_pgn,
    parse_pgn_games,
    split_pgn_games,
)
from chesstree.tree.writer import write_movetext, write_pgn

__all__ = [
    "ROOT_PATH",
    "FenImport",
    "GameTree",
    "ImportSource",
    "LinkImport",
    "MoveNode",
    "Path",
    "PgnImport",
    "TreeNavigator",
    "default_tree",
    "game_name",
    "import_game",
    "parse_fen",
    "parse_game",
    "parse_pgn",
    "parse_pgn_games",
    "split_pgn_games",
    "write_movetext",
    "write_pgn",
]
