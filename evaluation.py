"""
Gomoku Engine - Evaluation Module

盤面の静的評価関数を提供します。

評価の考え方:
- 4方向（横・縦・右上がり斜め・右下がり斜め）の全ラインを走査する
- 同色の連続石（連）ごとに「長さ」と「両端の塞がり数（0-2）」を求める
- 連の価値はスコア表で決まり、手番側の開いた連ほど高く評価される

全ての関数は盤面を読むだけで、変更しません。
"""

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Optional

from game_core import Board, Stone


# 勝ちを表すスコア。勝ち以外の連のスコアの合計より十分大きい値
WIN_SCORE = 100_000_000

# 手番側の両端開き4連（次の手で必ず勝てる）
WIN_GUARANTEE = 1_000_000


class Direction(Enum):
    """走査方向"""
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    DIAGONAL_UP = "diagonal_up"        # 左下から右上
    DIAGONAL_DOWN = "diagonal_down"    # 左上から右下


Line = tuple[tuple[int, int], ...]


@lru_cache(maxsize=None)
def board_lines(size: int, direction: Direction) -> tuple[Line, ...]:
    """
    指定方向の全ラインの座標列を返す

    盤面サイズごとに一度だけ計算してキャッシュします。
    斜め方向は長さ1のラインも含みます。
    """
    if direction == Direction.HORIZONTAL:
        return tuple(
            tuple((row, col) for col in range(size)) for row in range(size)
        )

    if direction == Direction.VERTICAL:
        return tuple(
            tuple((row, col) for row in range(size)) for col in range(size)
        )

    lines: list[Line] = []
    if direction == Direction.DIAGONAL_UP:
        # row + col = k が一定のライン
        for k in range(2 * size - 1):
            start = max(0, k - size + 1)
            end = min(size - 1, k)
            lines.append(tuple((row, k - row) for row in range(start, end + 1)))
    else:
        # row - col = k が一定のライン
        for k in range(1 - size, size):
            start = max(0, k)
            end = min(size - 1 + k, size - 1)
            lines.append(tuple((row, row - k) for row in range(start, end + 1)))

    return tuple(lines)


def consecutive_set_score(count: int, blocks: int, current_turn: bool) -> int:
    """
    連1つ分のスコアを返す

    Args:
        count: 連の長さ
        blocks: 塞がれている端の数（0, 1, 2）
        current_turn: その連の持ち主の手番かどうか

    Returns:
        スコア。両端が塞がれた5未満の連は0
    """
    if blocks == 2 and count < 5:
        return 0

    if count == 5:
        return WIN_SCORE

    if count == 4:
        if blocks == 0:
            return WIN_GUARANTEE if current_turn else WIN_GUARANTEE // 4
        return 200

    if count == 3:
        if blocks == 0:
            return 50_000 if current_turn else 200
        return 10 if current_turn else 5

    if count == 2:
        if blocks == 0:
            return 7 if current_turn else 5
        return 3

    if count == 1:
        return 1

    # 6連以上（長連）。5連の判定で先に止まるため通常は到達しない
    return WIN_SCORE * 2


@dataclass
class RunScan:
    """
    1ライン分の走査状態

    ラインの先頭は盤端で塞がれているので blocks=2 から始めます。
    ラインごとに新しいインスタンスを使うため、ライン間で状態が漏れません。
    """
    consecutive: int = 0
    blocks: int = 2
    score: int = 0

    def visit(self, cell: Stone, player: Stone, current_turn: bool) -> None:
        """マスを1つ進める"""
        if cell == player:
            self.consecutive += 1
        elif cell == Stone.EMPTY:
            if self.consecutive > 0:
                # 空きマスで終わった連は片側が開いている
                self.blocks -= 1
                self.score += consecutive_set_score(self.consecutive, self.blocks, current_turn)
                self.consecutive = 0
            self.blocks = 1
        else:
            if self.consecutive > 0:
                self.score += consecutive_set_score(self.consecutive, self.blocks, current_turn)
                self.consecutive = 0
            self.blocks = 2

    def finish(self, current_turn: bool) -> int:
        """ライン末尾（盤端）で連を閉じてスコアを返す"""
        if self.consecutive > 0:
            self.score += consecutive_set_score(self.consecutive, self.blocks, current_turn)
            self.consecutive = 0
        return self.score


def _evaluate_lines(
    grid: tuple[tuple[Stone, ...], ...],
    lines: tuple[Line, ...],
    player: Stone,
    current_turn: bool
) -> int:
    total = 0
    for line in lines:
        scan = RunScan()
        for row, col in line:
            scan.visit(grid[row][col], player, current_turn)
        total += scan.finish(current_turn)
    return total


def evaluate_horizontal(board: Board, player: Stone, is_players_turn: bool) -> int:
    """横方向のスコア"""
    lines = board_lines(board.size, Direction.HORIZONTAL)
    return _evaluate_lines(board.snapshot(), lines, player, is_players_turn)


def evaluate_vertical(board: Board, player: Stone, is_players_turn: bool) -> int:
    """縦方向のスコア"""
    lines = board_lines(board.size, Direction.VERTICAL)
    return _evaluate_lines(board.snapshot(), lines, player, is_players_turn)


def evaluate_diagonal(board: Board, player: Stone, is_players_turn: bool) -> int:
    """斜め2方向のスコアの合計"""
    grid = board.snapshot()
    return (
        _evaluate_lines(grid, board_lines(board.size, Direction.DIAGONAL_UP), player, is_players_turn)
        + _evaluate_lines(grid, board_lines(board.size, Direction.DIAGONAL_DOWN), player, is_players_turn)
    )


def score(board: Board, player: Stone, is_players_turn: bool) -> int:
    """
    指定プレイヤーの盤面スコア

    Args:
        board: 評価する盤面
        player: 評価対象の石の色
        is_players_turn: 評価対象のプレイヤーが次に打つ番かどうか

    Returns:
        0以上の整数。5連があれば WIN_SCORE 以上
    """
    grid = board.snapshot()
    size = board.size
    return sum(
        _evaluate_lines(grid, board_lines(size, direction), player, is_players_turn)
        for direction in Direction
    )


def relative_score(board: Board, blacks_turn: bool) -> float:
    """
    白（最大化側）から見た相対スコア

    白のスコアを黒のスコアで割った値です。黒のスコアが0のときは1として扱います。
    探索の末端ノードでのみ使用します。
    """
    white_score = score(board, Stone.WHITE, not blacks_turn)
    black_score = score(board, Stone.BLACK, blacks_turn)
    return white_score / max(black_score, 1)


def find_winner(board: Board) -> Optional[Stone]:
    """
    5連ができているプレイヤーを返す（いなければNone）

    両者とも5連がある盤面は通常の対局では起こりませんが、その場合は黒を返します。
    """
    if score(board, Stone.BLACK, False) >= WIN_SCORE:
        return Stone.BLACK
    if score(board, Stone.WHITE, False) >= WIN_SCORE:
        return Stone.WHITE
    return None
