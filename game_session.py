"""
Gomoku Engine - Game Session Module

人間（黒）対コンピュータ（白）の対局進行を管理します。

設計原則:
- SearchEngine は同期メソッド（計算のみ）
- 非同期化はこのモジュールの責務（asyncio.to_thread() でスレッド分離）
- 盤面の描画・マウス入力は外部の表示層が行い、このクラスへは検証前の座標を渡す

クラス構成:
- GameConfig: 対局設定（盤面サイズ・探索深度・先手）
- GameEvent: Observer に通知されるイベント
- GameSession: 対局セッション
"""

from dataclasses import dataclass
from typing import Callable, ClassVar, Optional
import asyncio
import logging
import threading

from game_core import Board, GameStatus, Move, Stone
from evaluation import find_winner
from search_engine import SearchEngine, SearchEvent, SearchResult


logger = logging.getLogger(__name__)


@dataclass
class GameConfig:
    """
    対局設定

    盤面サイズと探索深度は1局の間は変わりません。
    """
    board_size: int = 19
    depth: int = 3
    ai_starts: bool = True

    # 難易度ごとの探索深度
    DIFFICULTY_DEPTHS: ClassVar[dict[str, int]] = {
        "normal": 3,
        "hard": 4,
    }

    def __post_init__(self) -> None:
        if not isinstance(self.board_size, int) or self.board_size < 1:
            raise ValueError(f"board_size must be a positive integer: {self.board_size!r}")
        if not isinstance(self.depth, int) or self.depth < 1:
            raise ValueError(f"depth must be a positive integer: {self.depth!r}")

    @classmethod
    def from_difficulty(cls, difficulty: str, **kwargs) -> "GameConfig":
        """
        難易度名から設定を作成

        Args:
            difficulty: "normal"（深さ3）または "hard"（深さ4）
            **kwargs: board_size, ai_starts

        Raises:
            ValueError: 未知の難易度の場合
        """
        key = difficulty.lower()
        if key not in cls.DIFFICULTY_DEPTHS:
            raise ValueError(f"Unknown difficulty: {difficulty}")
        return cls(depth=cls.DIFFICULTY_DEPTHS[key], **kwargs)

    def to_config(self) -> dict:
        """設定をdict形式でシリアライズ"""
        return {
            "board_size": self.board_size,
            "depth": self.depth,
            "ai_starts": self.ai_starts,
        }

    @classmethod
    def from_config(cls, config: dict) -> "GameConfig":
        """to_config() で作ったdictから設定を復元"""
        return cls(
            board_size=config.get("board_size", 19),
            depth=config.get("depth", 3),
            ai_starts=config.get("ai_starts", True),
        )


@dataclass
class GameEvent:
    """
    ゲームイベント

    event_type:
    - GAME_START: 対局開始
    - MOVE_PLAYED: 石が置かれた
    - THINKING_STARTED / THINKING_FINISHED: コンピュータの思考開始/終了
    - GAME_OVER: 対局終了（status に結果）
    - GAME_RESET: リセット
    """
    event_type: str
    move: Optional[Move] = None
    stone: Optional[Stone] = None
    status: Optional[GameStatus] = None
    search_result: Optional[SearchResult] = None
    message: str = ""


GameEventCallback = Callable[[GameEvent], None]


class GameSession:
    """
    対局セッション

    人間が黒、コンピュータが白です。表示層は play_human_move() で人間の手を渡し、
    play_computer_move()（または非同期版）でコンピュータの手を打たせます。

    使用例:
        session = GameSession(GameConfig(board_size=15, depth=3))
        session.add_listener(on_event)
        session.start()

        # 盤面クリック時
        async def on_click(row, col):
            await session.play_turn(row, col)
    """

    def __init__(self, config: Optional[GameConfig] = None) -> None:
        """
        Args:
            config: 対局設定（省略時はデフォルト）
        """
        self._config = config or GameConfig()
        self._board = Board(self._config.board_size)
        self._engine = SearchEngine(self._board)
        self._engine.add_listener(self._on_search_event)
        self._status = GameStatus.ONGOING
        self._listeners: list[GameEventCallback] = []
        self._move_history: list[tuple[Move, Stone]] = []
        self._search_lock = threading.Lock()
        self._side_to_move: Optional[Stone] = None
        self._started = False

    @property
    def config(self) -> GameConfig:
        """対局設定"""
        return self._config

    @property
    def board(self) -> Board:
        """現在の盤面（コピーを返す）"""
        return self._board.copy()

    @property
    def status(self) -> GameStatus:
        """ゲームの状態"""
        return self._status

    @property
    def is_game_over(self) -> bool:
        return self._status != GameStatus.ONGOING

    @property
    def side_to_move(self) -> Optional[Stone]:
        """次に打つ側（開始前・終局後はNone）"""
        return self._side_to_move

    @property
    def is_thinking(self) -> bool:
        """コンピュータの探索、または着手の処理中か"""
        return self._search_lock.locked()

    @property
    def move_history(self) -> list[tuple[Move, Stone]]:
        """着手履歴のコピー"""
        return list(self._move_history)

    def add_listener(self, callback: GameEventCallback) -> None:
        """イベントリスナーを登録（Observerパターン）"""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: GameEventCallback) -> bool:
        """
        イベントリスナーを解除

        Returns:
            解除できたらTrue、存在しなければFalse
        """
        if callback in self._listeners:
            self._listeners.remove(callback)
            return True
        return False

    def _notify_listeners(self, event: GameEvent) -> None:
        """全リスナーにイベントを通知"""
        for listener in self._listeners:
            try:
                listener(event)
            except Exception:
                # リスナーの例外がゲームロジックに影響しないようにする
                logger.warning("Game listener failed on %s", event.event_type, exc_info=True)

    def _on_search_event(self, event: SearchEvent) -> None:
        """探索の開始/終了を思考イベントとして転送"""
        if event.event_type == "SEARCH_STARTED":
            self._notify_listeners(GameEvent(
                event_type="THINKING_STARTED",
                stone=Stone.WHITE,
                status=self._status,
                message=f"Thinking (depth={event.depth})"
            ))
        elif event.event_type == "SEARCH_FINISHED":
            self._notify_listeners(GameEvent(
                event_type="THINKING_FINISHED",
                stone=Stone.WHITE,
                status=self._status,
                search_result=event.result,
                message="Thinking finished"
            ))

    def start(self) -> None:
        """
        対局を開始

        ai_starts が True なら、白が盤面中央に初手を打ちます。
        それ以外は黒（人間）の手番から始まります。

        Raises:
            RuntimeError: 既に開始している場合
        """
        if self._started:
            raise RuntimeError("Game has already started")
        self._started = True

        self._notify_listeners(GameEvent(
            event_type="GAME_START",
            status=self._status,
            message="Game started"
        ))

        if self._config.ai_starts:
            self._side_to_move = Stone.WHITE
            center = self._config.board_size // 2
            self._place(Move(center, center), Stone.WHITE)
        else:
            self._side_to_move = Stone.BLACK

    def play_human_move(self, row: int, col: int) -> bool:
        """
        人間（黒）の手を打つ

        Returns:
            成功したらTrue。開始前・対局終了後・白の手番・処理中・盤面外・
            既に石がある場合はFalse（盤面は変更されない）
        """
        # 探索スレッドと同じロックで盤面の変更を排他する
        if not self._search_lock.acquire(blocking=False):
            return False

        try:
            if self.is_game_over or self._side_to_move != Stone.BLACK:
                return False
            if not self._board.is_within_bounds(row, col) or not self._board.is_empty(row, col):
                return False

            self._place(Move(row, col), Stone.BLACK)
            return True
        finally:
            self._search_lock.release()

    def play_computer_move(self) -> Optional[Move]:
        """
        コンピュータ（白）の手を探索して打つ

        Returns:
            打った座標。対局終了済み、または候補手がなく引き分けになった場合はNone

        Raises:
            RuntimeError: 別の探索が実行中、対局開始前、または黒の手番の場合
        """
        if not self._search_lock.acquire(blocking=False):
            raise RuntimeError("Search already in progress")

        try:
            if self.is_game_over:
                return None
            if not self._started:
                raise RuntimeError("Game has not started")
            if self._side_to_move != Stone.WHITE:
                raise RuntimeError("Not the computer's turn")

            move = self._engine.choose_move(self._config.depth)
            if move is None:
                self._finish(GameStatus.DRAW)
                return None

            self._place(move, Stone.WHITE)
            return move
        finally:
            self._search_lock.release()

    async def play_computer_move_async(self) -> Optional[Move]:
        """
        play_computer_move() を別スレッドで実行

        探索中もイベントループはブロックされません。
        THINKING_* イベントは探索スレッドから通知されます。
        """
        return await asyncio.to_thread(self.play_computer_move)

    async def play_turn(self, row: int, col: int) -> bool:
        """
        人間の手とコンピュータの応手を1往復進める

        Returns:
            人間の手が受け付けられたらTrue
        """
        if not self.play_human_move(row, col):
            return False

        if not self.is_game_over:
            await self.play_computer_move_async()

        return True

    def _place(self, move: Move, stone: Stone) -> None:
        """石を置き、通知して終局判定し、手番を相手に渡す"""
        self._board.apply(move.row, move.col, stone)
        self._move_history.append((move, stone))

        self._notify_listeners(GameEvent(
            event_type="MOVE_PLAYED",
            move=move,
            stone=stone,
            status=self._status,
            message=f"{stone.name} played at ({move.row}, {move.col})"
        ))

        self._update_status()
        if not self.is_game_over:
            self._side_to_move = stone.opponent()

    def _update_status(self) -> None:
        """勝敗・引き分けを判定"""
        winner = find_winner(self._board)
        if winner == Stone.BLACK:
            self._finish(GameStatus.BLACK_WIN)
        elif winner == Stone.WHITE:
            self._finish(GameStatus.WHITE_WIN)
        elif self._board.is_full():
            self._finish(GameStatus.DRAW)

    def _finish(self, status: GameStatus) -> None:
        self._status = status
        self._side_to_move = None
        logger.info("Game over: %s after %d moves", status.name, len(self._move_history))
        self._notify_listeners(GameEvent(
            event_type="GAME_OVER",
            status=status,
            message=f"Game over: {status.name}"
        ))

    def reset(self) -> None:
        """
        対局をリセットして初期状態に戻す

        Raises:
            RuntimeError: 探索中の場合
        """
        if self.is_thinking:
            raise RuntimeError("Cannot reset while a search is in progress")

        self._board.clear()
        self._status = GameStatus.ONGOING
        self._move_history.clear()
        self._started = False
        self._side_to_move = None

        self._notify_listeners(GameEvent(
            event_type="GAME_RESET",
            status=GameStatus.ONGOING,
            message="Game has been reset"
        ))
