"""
Gomoku Engine - Core Board Logic

五目並べ思考エンジンのコアとなる盤面表現を提供します。

アーキテクチャ:
- Stone: マスの状態（空・黒・白）
- Move: 盤面上の座標（row, col）
- Board: N×N の盤面。探索中は apply/undo でその場で更新・復元される

盤面の描画やマウス入力などの表示層はこのモジュールの責務ではありません。
"""

from dataclasses import dataclass
from enum import Enum, auto


class Stone(Enum):
    """盤面上の石を表す列挙型"""
    EMPTY = auto()
    BLACK = auto()
    WHITE = auto()

    def opponent(self) -> "Stone":
        """相手の石色を返す"""
        if self == Stone.BLACK:
            return Stone.WHITE
        elif self == Stone.WHITE:
            return Stone.BLACK
        return Stone.EMPTY


class GameStatus(Enum):
    """ゲームの状態を表す列挙型"""
    ONGOING = auto()      # 進行中
    BLACK_WIN = auto()    # 黒の勝利
    WHITE_WIN = auto()    # 白の勝利
    DRAW = auto()         # 引き分け（候補手がなくなった場合）


@dataclass(frozen=True)
class Move:
    """盤面上の座標を表す不変データクラス（行, 列）"""
    row: int
    col: int


# 8近傍のオフセット
_NEIGHBOR_OFFSETS = [
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
]


class Board:
    """
    N×N の正方形盤面

    責務:
    - 石の配置状態の保持
    - 着手（apply）と取り消し（undo）
    - 候補手の列挙（既存の石に隣接する空きマスのみ）

    探索エンジンは同じインスタンスを apply/undo で書き換えながら探索し、
    戻る前に必ず元の状態へ復元します（LIFO の順序を守ること）。
    同じ盤面に対して複数の探索を同時に走らせてはいけません。
    """

    def __init__(self, size: int) -> None:
        """
        盤面を初期化します

        Args:
            size: 盤面の一辺の長さ（正の整数）

        Raises:
            ValueError: size が正の整数でない場合
        """
        if not isinstance(size, int) or size < 1:
            raise ValueError(f"Board size must be a positive integer: {size!r}")

        self._size = size
        self._grid: list[list[Stone]] = [
            [Stone.EMPTY for _ in range(size)] for _ in range(size)
        ]
        self._move_count = 0

    @property
    def size(self) -> int:
        """盤面の一辺の長さ"""
        return self._size

    @property
    def move_count(self) -> int:
        """盤面上の石の数"""
        return self._move_count

    def is_within_bounds(self, row: int, col: int) -> bool:
        """座標が盤面内かどうかを判定"""
        return 0 <= row < self._size and 0 <= col < self._size

    def get_stone(self, row: int, col: int) -> Stone:
        """
        指定座標の石を取得

        Raises:
            IndexError: 盤面外の座標を指定した場合（呼び出し側のバグ）
        """
        if not self.is_within_bounds(row, col):
            raise IndexError(f"({row}, {col}) is outside a {self._size}x{self._size} board")
        return self._grid[row][col]

    def is_empty(self, row: int, col: int) -> bool:
        """指定座標が空かどうかを判定"""
        return self.get_stone(row, col) == Stone.EMPTY

    def is_full(self) -> bool:
        """盤面が全て埋まっているかを判定"""
        return self._move_count >= self._size * self._size

    def apply(self, row: int, col: int, stone: Stone) -> bool:
        """
        指定座標に石を置く

        空きマスにのみ置けます。失敗した場合、盤面は変更されません。

        Args:
            row: 行
            col: 列
            stone: 置く石（BLACK または WHITE）

        Returns:
            成功したらTrue、盤面外または既に石がある場合はFalse

        Raises:
            ValueError: stone に EMPTY を指定した場合
        """
        if stone == Stone.EMPTY:
            raise ValueError("Cannot apply an EMPTY stone; use undo() instead")
        if not self.is_within_bounds(row, col):
            return False
        if self._grid[row][col] != Stone.EMPTY:
            return False

        self._grid[row][col] = stone
        self._move_count += 1
        return True

    def undo(self, row: int, col: int) -> None:
        """
        指定座標の石を取り除く

        直前に apply した座標に対してのみ呼び出してください。
        空きマスを undo するのは apply/undo の対応が崩れている証拠なので例外にします。

        Raises:
            IndexError: 盤面外の座標
            ValueError: 既に空きマスの場合
        """
        if self.get_stone(row, col) == Stone.EMPTY:
            raise ValueError(f"Cannot undo ({row}, {col}): cell is already empty")

        self._grid[row][col] = Stone.EMPTY
        self._move_count -= 1

    def generate_moves(self) -> list[Move]:
        """
        候補手を列挙

        8近傍のいずれかに石がある空きマスのみを返します。
        順序は行優先の走査順で、重複はありません。

        石が1つもない盤面では空リストを返します。初手（中央など）は
        呼び出し側で決めてください。
        """
        moves: list[Move] = []
        size = self._size
        grid = self._grid

        for row in range(size):
            for col in range(size):
                if grid[row][col] != Stone.EMPTY:
                    continue

                for dr, dc in _NEIGHBOR_OFFSETS:
                    nr, nc = row + dr, col + dc
                    if 0 <= nr < size and 0 <= nc < size and grid[nr][nc] != Stone.EMPTY:
                        moves.append(Move(row, col))
                        break

        return moves

    def snapshot(self) -> tuple[tuple[Stone, ...], ...]:
        """盤面の不変スナップショット（評価関数の走査や比較に使用）"""
        return tuple(tuple(row) for row in self._grid)

    def copy(self) -> "Board":
        """盤面の独立したコピーを作成"""
        new_board = Board(self._size)
        new_board._grid = [list(row) for row in self._grid]
        new_board._move_count = self._move_count
        return new_board

    def clear(self) -> None:
        """盤面をクリア"""
        self._grid = [
            [Stone.EMPTY for _ in range(self._size)] for _ in range(self._size)
        ]
        self._move_count = 0

    def __repr__(self) -> str:
        return f"Board(size={self._size}, move_count={self._move_count})"
