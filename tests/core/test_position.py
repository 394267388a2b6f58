"""Tests for Position.play and position queries."""

from chesstree.core.board import Board
from chesstree.core.enums import CastlingRights, Color, MoveFlag, PieceType
from chesstree.core.move import Move
from chesstree.core.notation import STARTING_FEN, position_from_fen, position_to_fen
from chesstree.core.piece import Piece
from chesstree.core.types import parse_square


def _sq(name: str) -> int:
    return parse_square(name)


class TestPlay:
    def test_side_switches(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        after = pos.play(Move(_sq("e2"), _sq("e4"), MoveFlag.DOUBLE_PAWN))
        assert after.side_to_move == Color.BLACK

    def test_original_is_untouched(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        pos.play(Move(_sq("e2"), _sq("e4"), MoveFlag.DOUBLE_PAWN))
        assert position_to_fen(pos) == STARTING_FEN

    def test_en_passant_set_and_replaced(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        pos = pos.play(Move(_sq("e2"), _sq("e4"), MoveFlag.DOUBLE_PAWN))
        assert pos.en_passant == _sq("e3")
        pos = pos.play(Move(_sq("d7"), _sq("d5"), MoveFlag.DOUBLE_PAWN))
        assert pos.en_passant == _sq("d6")

    def test_capture_resets_halfmove_clock(self) -> None:
        fen = "rnbqkbnr/ppp1pppp/8/3p4/4P3/8/PPPP1PPP/RNBQKBNR w KQkq d6 3 2"
        after = position_from_fen(fen).play(Move(_sq("e4"), _sq("d5")))
        assert after.board[_sq("d5")] == Piece(Color.WHITE, PieceType.PAWN)
        assert after.halfmove_clock == 0

    def test_fullmove_increments_after_black(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        pos = pos.play(Move(_sq("g1"), _sq("f3")))
        assert pos.fullmove_number == 1
        assert pos.halfmove_clock == 1
        pos = pos.play(Move(_sq("g8"), _sq("f6")))
        assert pos.fullmove_number == 2


class TestCastling:
    def test_king_move_removes_rights(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
        after = pos.play(Move(_sq("e1"), _sq("f1")))
        assert not after.castling & CastlingRights.WHITE_BOTH
        assert after.castling & CastlingRights.BLACK_BOTH == CastlingRights.BLACK_BOTH

    def test_rook_capture_removes_one_right(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
        after = pos.play(Move(_sq("h1"), _sq("h8")))
        assert not after.castling & CastlingRights.WHITE_KINGSIDE
        assert not after.castling & CastlingRights.BLACK_KINGSIDE
        assert after.castling & CastlingRights.WHITE_QUEENSIDE

    def test_castling_kingside_moves_rook(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
        after = pos.play(Move(_sq("e1"), _sq("g1"), MoveFlag.CASTLE_KINGSIDE))
        assert after.board[_sq("g1")] == Piece(Color.WHITE, PieceType.KING)
        assert after.board[_sq("f1")] == Piece(Color.WHITE, PieceType.ROOK)
        assert after.board[_sq("h1")] is None

    def test_castling_queenside_moves_rook(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3K2R b KQkq - 0 1")
        after = pos.play(Move(_sq("e8"), _sq("c8"), MoveFlag.CASTLE_QUEENSIDE))
        assert after.board[_sq("c8")] == Piece(Color.BLACK, PieceType.KING)
        assert after.board[_sq("d8")] == Piece(Color.BLACK, PieceType.ROOK)
        assert after.board[_sq("a8")] is None


class TestPromotion:
    def test_promote_to_queen(self) -> None:
        pos = position_from_fen("7k/4P3/8/8/8/8/8/4K3 w - - 0 1")
        move = Move(_sq("e7"), _sq("e8"), MoveFlag.PROMOTION, PieceType.QUEEN)
        after = pos.play(move)
        assert after.board[_sq("e8")] == Piece(Color.WHITE, PieceType.QUEEN)
        assert after.board[_sq("e7")] is None
        assert move.uci == "e7e8q"


class TestQueries:
    def test_check_detection(self) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/8/4K2r w - - 0 1")
        assert pos.is_in_check()
        assert not pos.is_in_check(Color.BLACK)

    def test_kingless_board_is_never_in_check(self) -> None:
        pos = position_from_fen("8/8/8/8/8/8/8/7r w - - 0 1")
        assert not pos.is_in_check()

    def test_leaves_king_safe(self) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/8/4K2r w - - 0 1")
        assert not pos.leaves_king_safe(Move(_sq("e1"), _sq("f1")))
        assert pos.leaves_king_safe(Move(_sq("e1"), _sq("e2")))

    def test_equality_follows_state(self) -> None:
        a = position_from_fen(STARTING_FEN)
        b = position_from_fen(STARTING_FEN)
        assert a == b
        assert hash(a) == hash(b)
        assert a != position_from_fen(STARTING_FEN.replace(" 0 1", " 0 2"))


class TestBoard:
    def test_initial_kings(self) -> None:
        board = Board.initial()
        assert board.king_square(Color.WHITE) == _sq("e1")
        assert board.king_square(Color.BLACK) == _sq("e8")

    def test_copy_independence(self) -> None:
        board = Board.initial()
        copy = board.copy()
        copy[_sq("e2")] = None
        assert board[_sq("e2")] == Piece(Color.WHITE, PieceType.PAWN)
        assert board != copy

    def test_king_square_tracks_removal(self) -> None:
        board = Board.initial()
        board[_sq("e1")] = None
        assert board.king_square(Color.WHITE) is None

    def test_placement_round_trip(self) -> None:
        placement = "r3k2r/8/8/3pP3/8/8/8/R3K2R"
        board = Board.from_placement(placement)
        assert board.placement() == placement
        assert board[_sq("d5")] == Piece(Color.BLACK, PieceType.PAWN)
        assert Board.initial().placement() == STARTING_FEN.split()[0]

    def test_piece_letters(self) -> None:
        assert Piece.from_char("N") == Piece(Color.WHITE, PieceType.KNIGHT)
        assert Piece(Color.BLACK, PieceType.QUEEN).fen == "q"
