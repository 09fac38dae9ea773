"""
Gomoku Engine - Search Engine Module

コンピュータ（白）の着手を決める探索エンジンを提供します。

探索の流れ:
1. 候補手それぞれを1手だけ試し、即勝ちの手があればそれを返す
2. なければ Alpha-Beta 枝刈り付き Minimax で指定深度まで探索する

設計原則:
- 探索は同期・単一スレッドで、開始したら最後まで走る（キャンセルなし）
- 盤面はコピーせず apply/undo で書き換え、戻る前に必ず元に戻す
- 評価回数などの計測値は SearchStats として明示的に受け渡す
- UI への通知（思考開始/終了）は Observer パターンで行う
"""

from dataclasses import dataclass
from typing import Callable, Optional
import logging
import time

from game_core import Board, Move, Stone
from evaluation import WIN_SCORE, relative_score, score


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoredMove:
    """部分木の探索結果（評価値と手）。末端ノードでは move は None"""
    score: float
    move: Optional[Move] = None


@dataclass
class SearchStats:
    """1回の探索の計測値"""
    nodes_evaluated: int = 0


@dataclass(frozen=True)
class SearchResult:
    """
    choose_move の詳細な結果

    score は Minimax 探索を行った場合のみ設定されます。
    move が None の場合は候補手がない（盤面が埋まった、または空の盤面）ことを表します。
    """
    move: Optional[Move]
    depth: int
    score: Optional[float] = None
    nodes_evaluated: int = 0
    elapsed_time: float = 0.0
    immediate_win: bool = False


@dataclass
class SearchEvent:
    """
    探索イベント

    event_type:
    - SEARCH_STARTED: 探索開始
    - SEARCH_FINISHED: 探索終了（result に結果が入る）
    """
    event_type: str
    depth: int
    result: Optional[SearchResult] = None


SearchEventCallback = Callable[[SearchEvent], None]


class SearchEngine:
    """
    Alpha-Beta 枝刈り付き Minimax 探索エンジン

    白が最大化側、黒が最小化側です。評価値は evaluation.relative_score
    （白のスコア / 黒のスコア）なので常に0以上になります。

    使用例:
        board = Board(19)
        board.apply(9, 9, Stone.BLACK)

        engine = SearchEngine(board)
        move = engine.choose_move(depth=3)
    """

    def __init__(self, board: Board) -> None:
        """
        Args:
            board: 探索対象の盤面（探索中のみ借用し、終了時には元の状態に戻す）
        """
        self._board = board
        self._listeners: list[SearchEventCallback] = []

    @property
    def board(self) -> Board:
        """探索対象の盤面"""
        return self._board

    def add_listener(self, callback: SearchEventCallback) -> None:
        """探索イベントのリスナーを登録"""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: SearchEventCallback) -> bool:
        """
        探索イベントのリスナーを解除

        Returns:
            解除できたらTrue、存在しなければFalse
        """
        if callback in self._listeners:
            self._listeners.remove(callback)
            return True
        return False

    def _notify_listeners(self, event: SearchEvent) -> None:
        """全リスナーにイベントを通知"""
        for listener in self._listeners:
            try:
                listener(event)
            except Exception:
                # リスナーの例外で探索を止めない
                logger.warning("Search listener failed on %s", event.event_type, exc_info=True)

    def choose_move(self, depth: int) -> Optional[Move]:
        """
        白の次の手を選ぶ

        Args:
            depth: 探索深度（正の整数）

        Returns:
            選択した座標。候補手がなければNone
        """
        return self.search(depth).move

    def search(self, depth: int) -> SearchResult:
        """
        探索して結果と計測値を返す

        Raises:
            ValueError: depth が1未満の場合
        """
        if depth < 1:
            raise ValueError(f"Search depth must be at least 1: {depth}")

        self._notify_listeners(SearchEvent(event_type="SEARCH_STARTED", depth=depth))

        result: Optional[SearchResult] = None
        try:
            result = self._run_search(depth)
            logger.debug(
                "Search finished: depth=%d move=%s nodes=%d time=%.3fs",
                depth, result.move, result.nodes_evaluated, result.elapsed_time
            )
            return result
        finally:
            self._notify_listeners(SearchEvent(
                event_type="SEARCH_FINISHED",
                depth=depth,
                result=result,
            ))

    def _run_search(self, depth: int) -> SearchResult:
        start_time = time.perf_counter()
        stats = SearchStats()

        # 即勝ちの手は深い探索より常に優先する
        winning_move = self.find_winning_move(stats)
        if winning_move is not None:
            return SearchResult(
                move=winning_move,
                depth=depth,
                nodes_evaluated=stats.nodes_evaluated,
                elapsed_time=time.perf_counter() - start_time,
                immediate_win=True,
            )

        # 候補手がなければ（空の盤面・満杯の盤面）move は None になる
        best = self.minimax(depth, True, -1.0, float(WIN_SCORE), stats)

        return SearchResult(
            move=best.move,
            depth=depth,
            score=best.score,
            nodes_evaluated=stats.nodes_evaluated,
            elapsed_time=time.perf_counter() - start_time,
        )

    def find_winning_move(self, stats: Optional[SearchStats] = None) -> Optional[Move]:
        """
        白がその1手で5連を作れる手を探す

        Returns:
            最初に見つかった勝ち手。なければNone
        """
        board = self._board

        for move in board.generate_moves():
            if stats is not None:
                stats.nodes_evaluated += 1

            board.apply(move.row, move.col, Stone.WHITE)
            try:
                wins = score(board, Stone.WHITE, False) >= WIN_SCORE
            finally:
                board.undo(move.row, move.col)

            if wins:
                return move

        return None

    def minimax(
        self,
        depth: int,
        maximizing: bool,
        alpha: float,
        beta: float,
        stats: Optional[SearchStats] = None
    ) -> ScoredMove:
        """
        Minimax探索（Alpha-Beta枝刈り）

        Args:
            depth: 残り探索深度
            maximizing: 白（最大化側）の手番か
            alpha: 最大化側が保証されている評価値の下限
            beta: 最小化側が保証されている評価値の上限
            stats: 計測値（末端評価のたびに nodes_evaluated を加算）

        Returns:
            最善の評価値と手。末端ノードでは move は None
        """
        board = self._board
        moves = board.generate_moves() if depth > 0 else []

        if not moves:
            if stats is not None:
                stats.nodes_evaluated += 1
            return ScoredMove(score=relative_score(board, blacks_turn=not maximizing))

        if maximizing:
            best = ScoredMove(score=-1.0)
            for move in moves:
                board.apply(move.row, move.col, Stone.WHITE)
                try:
                    child = self.minimax(depth - 1, False, alpha, beta, stats)
                finally:
                    board.undo(move.row, move.col)

                alpha = max(alpha, child.score)
                if child.score >= beta:
                    return ScoredMove(child.score, move)  # Beta cutoff

                if child.score > best.score:
                    best = ScoredMove(child.score, move)

            return best

        best = ScoredMove(score=float(WIN_SCORE), move=moves[0])
        for move in moves:
            board.apply(move.row, move.col, Stone.BLACK)
            try:
                child = self.minimax(depth - 1, True, alpha, beta, stats)
            finally:
                board.undo(move.row, move.col)

            beta = min(beta, child.score)
            if child.score <= alpha:
                return ScoredMove(child.score, move)  # Alpha cutoff

            if child.score < best.score:
                best = ScoredMove(child.score, move)

        return best
