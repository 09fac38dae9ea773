"""
Gomoku Engine - Core Board Tests

game_core.py の盤面操作と候補手生成を検証します。
"""

import random

import pytest

from game_core import Board, GameStatus, Move, Stone


class TestStone:
    """Stone列挙型のテスト"""

    def test_opponent_of_black_is_white(self):
        assert Stone.BLACK.opponent() == Stone.WHITE

    def test_opponent_of_white_is_black(self):
        assert Stone.WHITE.opponent() == Stone.BLACK

    def test_opponent_of_empty_is_empty(self):
        assert Stone.EMPTY.opponent() == Stone.EMPTY


class TestMove:
    """Move座標クラスのテスト"""

    def test_equality(self):
        assert Move(3, 4) == Move(3, 4)
        assert Move(3, 4) != Move(4, 3)

    def test_hashable(self):
        """setやdictのキーに使える"""
        assert Move(3, 4) in {Move(3, 4)}

    def test_immutable(self):
        move = Move(1, 2)
        with pytest.raises(AttributeError):
            move.row = 5  # type: ignore[misc]


class TestBoard:
    """Boardクラスのテスト"""

    def test_initial_board_is_empty(self):
        board = Board(15)
        assert board.size == 15
        assert board.move_count == 0
        for row in range(15):
            for col in range(15):
                assert board.get_stone(row, col) == Stone.EMPTY

    @pytest.mark.parametrize("size", [0, -3])
    def test_invalid_size_raises(self, size):
        with pytest.raises(ValueError, match="positive integer"):
            Board(size)

    def test_apply_sets_stone(self):
        board = Board(15)
        assert board.apply(7, 8, Stone.BLACK) is True
        assert board.get_stone(7, 8) == Stone.BLACK
        assert board.get_stone(8, 7) == Stone.EMPTY
        assert board.move_count == 1

    def test_apply_on_occupied_cell_fails_without_mutation(self):
        """既に石がある場所には置けず、盤面も変わらない"""
        board = Board(9)
        board.apply(4, 4, Stone.BLACK)
        before = board.snapshot()

        assert board.apply(4, 4, Stone.WHITE) is False
        assert board.snapshot() == before
        assert board.get_stone(4, 4) == Stone.BLACK
        assert board.move_count == 1

    @pytest.mark.parametrize("row, col", [(-1, 0), (0, -1), (9, 0), (0, 9)])
    def test_apply_out_of_range_fails(self, row, col):
        board = Board(9)
        assert board.apply(row, col, Stone.BLACK) is False
        assert board.move_count == 0

    def test_apply_empty_stone_raises(self):
        board = Board(9)
        with pytest.raises(ValueError):
            board.apply(0, 0, Stone.EMPTY)

    def test_get_stone_out_of_range_raises(self):
        board = Board(9)
        with pytest.raises(IndexError):
            board.get_stone(9, 0)
        with pytest.raises(IndexError):
            board.get_stone(0, -1)

    def test_undo_restores_empty_cell(self):
        board = Board(9)
        board.apply(2, 3, Stone.WHITE)
        board.undo(2, 3)
        assert board.get_stone(2, 3) == Stone.EMPTY
        assert board.move_count == 0

    def test_undo_empty_cell_raises(self):
        """対応する apply のない undo は例外"""
        board = Board(9)
        with pytest.raises(ValueError, match="already empty"):
            board.undo(2, 3)

    def test_apply_then_undo_restores_every_cell(self):
        """どの局面・どの座標でも apply → undo で完全に元に戻る"""
        rng = random.Random(7)
        board = Board(7)
        for _ in range(15):
            board.apply(rng.randrange(7), rng.randrange(7), rng.choice([Stone.BLACK, Stone.WHITE]))

        before = board.snapshot()
        count_before = board.move_count
        for row in range(7):
            for col in range(7):
                for stone in (Stone.BLACK, Stone.WHITE):
                    if board.apply(row, col, stone):
                        board.undo(row, col)
                    assert board.snapshot() == before
                    assert board.move_count == count_before

    def test_is_full(self):
        board = Board(2)
        assert board.is_full() is False
        for row in range(2):
            for col in range(2):
                board.apply(row, col, Stone.BLACK)
        assert board.is_full() is True

    def test_copy_is_independent(self):
        board = Board(9)
        board.apply(4, 4, Stone.BLACK)

        copied = board.copy()
        copied.apply(5, 5, Stone.WHITE)

        assert board.get_stone(5, 5) == Stone.EMPTY
        assert copied.get_stone(5, 5) == Stone.WHITE
        assert copied.get_stone(4, 4) == Stone.BLACK
        assert board.move_count == 1

    def test_clear(self):
        board = Board(9)
        board.apply(4, 4, Stone.BLACK)
        board.apply(4, 5, Stone.WHITE)

        board.clear()

        assert board.move_count == 0
        assert board.get_stone(4, 4) == Stone.EMPTY
        assert board.get_stone(4, 5) == Stone.EMPTY


class TestGenerateMoves:
    """候補手生成のテスト"""

    def test_empty_board_has_no_moves(self):
        """石がない盤面では候補手なし（初手は呼び出し側が決める）"""
        assert Board(19).generate_moves() == []

    def test_single_stone_yields_its_neighbors(self):
        """孤立した石1つなら8近傍の空きマスだけが候補"""
        board = Board(5)
        board.apply(2, 2, Stone.BLACK)

        moves = board.generate_moves()

        assert moves == [
            Move(1, 1), Move(1, 2), Move(1, 3),
            Move(2, 1), Move(2, 3),
            Move(3, 1), Move(3, 2), Move(3, 3),
        ]

    def test_corner_stone_yields_three_neighbors(self):
        board = Board(5)
        board.apply(0, 0, Stone.WHITE)
        assert board.generate_moves() == [Move(0, 1), Move(1, 0), Move(1, 1)]

    def test_edge_stone_yields_five_neighbors(self):
        board = Board(5)
        board.apply(0, 2, Stone.WHITE)
        assert board.generate_moves() == [
            Move(0, 1), Move(0, 3), Move(1, 1), Move(1, 2), Move(1, 3)
        ]

    def test_full_board_has_no_moves(self):
        """満杯の盤面も候補手なし。空の盤面とは手数で区別する"""
        board = Board(3)
        for row in range(3):
            for col in range(3):
                board.apply(row, col, Stone.BLACK if (row + col) % 2 else Stone.WHITE)

        assert board.generate_moves() == []
        assert board.move_count == 9

    def test_moves_are_empty_unique_and_row_major(self):
        rng = random.Random(42)
        board = Board(9)
        for _ in range(12):
            board.apply(rng.randrange(9), rng.randrange(9), Stone.BLACK)

        moves = board.generate_moves()

        assert len(moves) == len(set(moves))
        assert all(board.is_empty(m.row, m.col) for m in moves)
        assert moves == sorted(moves, key=lambda m: (m.row, m.col))

    def test_every_move_touches_a_stone(self):
        board = Board(9)
        board.apply(4, 4, Stone.BLACK)
        board.apply(4, 6, Stone.WHITE)

        for move in board.generate_moves():
            neighbors = [
                (move.row + dr, move.col + dc)
                for dr in (-1, 0, 1) for dc in (-1, 0, 1)
                if (dr, dc) != (0, 0)
            ]
            assert any(
                board.is_within_bounds(r, c) and not board.is_empty(r, c)
                for r, c in neighbors
            )

    def test_shared_neighbors_are_not_duplicated(self):
        board = Board(9)
        board.apply(4, 4, Stone.BLACK)
        board.apply(4, 6, Stone.WHITE)

        moves = board.generate_moves()

        assert moves.count(Move(4, 5)) == 1
        assert len(moves) == 13


class TestGameStatus:
    """GameStatusのテスト"""

    def test_members(self):
        assert {s.name for s in GameStatus} == {"ONGOING", "BLACK_WIN", "WHITE_WIN", "DRAW"}
