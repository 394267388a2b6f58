"""Tests for the PGN writer and the parse/write round trip."""

import pytest

from chesstree.core.enums import Color, GameResult
from chesstree.core.notation import parse_san
from chesstree.tree import (
    TreeNavigator,
    default_tree,
    parse_fen,
    parse_pgn,
    write_movetext,
    write_pgn,
)

SCENARIO_A = "1. e4 e5 2. Nf3 (2. Bc4 Nc6) Nc6 *"

ROUND_TRIP_GAMES = [
    SCENARIO_A,
    "1. e4 (1. d4 d5 (1... Nf6 2. c4)) e5 *",
    "{Intro} 1. e4! {best by test} e5?? $14 2. Qh5 *",
    "1. e4 ({Queen's pawn} 1. d4 {closed}) 1... e5 2. Nf3 Nc6 1-0",
    "1. e4 {[%eval 0.25] [%clk 0:03:00] solid} e5 {[%clk 0:02:59]} 0-1",
    '[Event "Club"]\n[Site "Here"]\n[Date "2024.01.02"]\n[Round "3"]\n'
    '[White "A"]\n[Black "B"]\n[Result "1/2-1/2"]\n[ECO "C20"]\n\n'
    "1. e4 e5 1/2-1/2",
    '[SetUp "1"]\n[FEN "4k3/8/8/8/8/8/8/4K2R b K - 3 40"]\n\n'
    "40... Kd7 41. O-O (41. Rh7+ Kc6) 41... Ke6 *",
]


class TestHeaders:
    def test_roster_first_then_extras(self) -> None:
        tree = parse_pgn('[ECO "B00"]\n[White "A"]\n[Event "E"]\n\n1. e4 1-0')
        lines = write_pgn(tree).splitlines()
        assert lines[:4] == [
            '[Event "E"]',
            '[White "A"]',
            '[Result "1-0"]',
            '[ECO "B00"]',
        ]

    def test_result_follows_tree(self) -> None:
        tree = parse_pgn('[Result "1-0"]\n\n1. e4 *')
        tree.result = GameResult.DRAW
        text = write_pgn(tree)
        assert '[Result "1/2-1/2"]' in text
        assert text.rstrip().endswith("1/2-1/2")

    def test_header_values_are_escaped(self) -> None:
        tree = default_tree()
        tree.headers["White"] = 'A "B" \\ C'
        assert '[White "A \\"B\\" \\\\ C"]' in write_pgn(tree)

    def test_fen_rooted_tree_gets_setup_headers(self) -> None:
        tree = parse_fen("8/8/8/8/8/8/8/K6k w - - 0 1")
        text = write_pgn(tree)
        assert '[FEN "8/8/8/8/8/8/8/K6k w - - 0 1"]' in text
        assert '[SetUp "1"]' in text
        assert text.endswith("\n\n*\n")

    def test_missing_fen_header_is_added(self) -> None:
        tree = parse_fen("8/8/8/8/8/8/8/K6k w - - 0 1")
        del tree.headers["FEN"]
        del tree.headers["SetUp"]
        assert '[FEN "8/8/8/8/8/8/8/K6k w - - 0 1"]' in write_pgn(tree)

    def test_setup_is_added_next_to_an_existing_fen(self) -> None:
        tree = parse_pgn('[FEN "8/8/8/8/8/8/8/K6k w - - 0 1"]\n\n1. Kb1 *')
        assert "SetUp" not in tree.headers
        text = write_pgn(tree)
        assert '[SetUp "1"]' in text
        assert text.count("[FEN ") == 1
        assert parse_pgn(text).headers["SetUp"] == "1"


class TestMovetext:
    def test_scenario_a(self) -> None:
        assert write_movetext(parse_pgn(SCENARIO_A)) == (
            "1. e4 e5 2. Nf3 (2. Bc4 Nc6) 2... Nc6 *"
        )

    def test_glyphs_and_numeric_nags(self) -> None:
        tree = parse_pgn("1. e4 $1 $14 e5 $6 2. Nf3 $22 *")
        assert write_movetext(tree) == "1. e4! $14 e5?! 2. Nf3 $22 *"

    def test_comment_forces_black_move_number(self) -> None:
        tree = parse_pgn("1. e4 {main} e5 *")
        assert write_movetext(tree) == "1. e4 {main} 1... e5 *"

    def test_closing_brace_in_comment_is_replaced(self) -> None:
        tree = parse_pgn("1. e4 *")
        TreeNavigator(tree).set_comment((0,), "a } b")
        assert write_movetext(tree) == "1. e4 {a ] b} *"

    def test_subtree_from_path(self) -> None:
        tree = parse_pgn(SCENARIO_A)
        assert write_movetext(tree, (0, 0), with_result=False) == (
            "2. Nf3 (2. Bc4 Nc6) 2... Nc6"
        )

    def test_black_to_move_root(self) -> None:
        tree = parse_pgn('[FEN "4k3/8/8/8/8/8/8/4K2R b K - 0 1"]\n\nKd7 2. Kd2 *')
        assert write_movetext(tree) == "1... Kd7 2. Kd2 *"


class TestRoundTrip:
    @pytest.mark.parametrize("text", ROUND_TRIP_GAMES)
    def test_parse_write_parse(self, text: str) -> None:
        tree = parse_pgn(text)
        again = parse_pgn(write_pgn(tree))
        assert again == tree

    @pytest.mark.parametrize("text", ROUND_TRIP_GAMES)
    def test_write_is_stable(self, text: str) -> None:
        once = write_pgn(parse_pgn(text))
        assert write_pgn(parse_pgn(once)) == once

    def test_edited_tree_round_trips(self) -> None:
        tree = parse_pgn(SCENARIO_A)
        nav = TreeNavigator(tree)
        nav.insert_move((0, 0, 1), "Nf6")
        nav.set_annotation((0, 0, 1), "?!")
        nav.set_comment((0,), "open game")
        nav.promote_variation((0, 0, 1))
        assert parse_pgn(write_pgn(tree)) == tree


# b-knights shuffle while the g-knights stay home, so every ply has a legal
# main move (Nf3/Nf6) and a legal alternative.
_SHUFFLE = ("Nc3", "Nc6", "Nb1", "Nb8")


def _nested_tree(depth: int):
    """Tree whose every alternative carries a further alternative."""
    tree = default_tree()
    node = tree.root
    for ply in range(depth):
        main_san = "Nf3" if node.position.side_to_move == Color.WHITE else "Nf6"
        for san in (main_san, _SHUFFLE[ply % 4]):
            node.children.append(node.play(parse_san(node.position, san), san))
        node = node.children[1]
    return tree


class TestDeepVariations:
    def test_nested_variations_round_trip(self) -> None:
        depth = 1200
        text = write_pgn(_nested_tree(depth))
        assert text.count("(") == depth
        assert text.count(")") == depth

        again = parse_pgn(text)
        assert len(again) == 2 * depth
        assert write_pgn(again) == text

    def test_shallow_nesting_layout(self) -> None:
        movetext = write_movetext(_nested_tree(2), with_result=False)
        assert movetext == "1. Nf3 (1. Nc3 Nf6 (1... Nc6))"
