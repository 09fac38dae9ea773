"""
Pytest configuration and shared fixtures
"""

import pytest

from game_core import Board, Stone

# pytest-asyncioの設定
pytest_plugins = ('pytest_asyncio',)


def pytest_configure(config):
    """pytestの設定"""
    config.addinivalue_line(
        "markers", "asyncio: mark test as an asyncio test."
    )


@pytest.fixture
def place():
    """盤面に石をまとめて置くヘルパー（置けなければテスト失敗）"""
    def _place(board: Board, stone: Stone, cells) -> Board:
        for row, col in cells:
            assert board.apply(row, col, stone), f"cannot place {stone.name} at ({row}, {col})"
        return board
    return _place
