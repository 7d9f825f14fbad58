"""
Pytest 测试配置
提供测试数据库、存储句柄、固定时钟、服务实例和 API 客户端等测试基础设施
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Generator

import pytest
from sqlmodel import Session

# 添加 backend 目录到 sys.path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from luma_settings.db.init_db import create_tables, get_engine
from luma_settings.db.store import Store
from luma_settings.models.base import TIMESTAMP_FORMAT
from luma_settings.services import SettingsService, HistoryService


class FakeClock:
    """
    递增时钟
    每次调用前进一秒，保证前后两次写入的时间戳一定不同
    """

    def __init__(self, start: datetime = datetime(2024, 1, 1, tzinfo=timezone.utc)):
        self.current = start
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        self.current += timedelta(seconds=1)
        return self.current.strftime(TIMESTAMP_FORMAT)

    def peek(self) -> str:
        """上一次返回的时间戳"""
        return self.current.strftime(TIMESTAMP_FORMAT)


# ==================== 数据库 Fixtures ====================

@pytest.fixture(scope="function")
def test_db_engine():
    """
    创建测试用的内存数据库引擎
    每个测试函数都会获得一个全新的数据库
    """
    engine = get_engine("sqlite:///:memory:")

    # 创建所有表
    create_tables(engine)

    yield engine

    engine.dispose()


@pytest.fixture(scope="function")
def test_db_session(test_db_engine) -> Generator[Session, None, None]:
    """
    创建测试用的数据库会话（仅用于直接测试 Repository）
    """
    with Session(test_db_engine) as session:
        yield session


@pytest.fixture(scope="function")
def store(test_db_engine) -> Store:
    """
    基于内存数据库的存储句柄
    """
    return Store(test_db_engine)


@pytest.fixture(scope="function")
def file_store(tmp_path) -> Generator[Store, None, None]:
    """
    基于临时文件的存储句柄
    并发测试需要真实的文件库，多个线程各自持有连接
    """
    engine = get_engine(f"sqlite:///{tmp_path / 'luma_settings_test.db'}")
    handle = Store(engine)
    handle.ensure_schema()

    yield handle

    engine.dispose()


# ==================== 服务 Fixtures ====================

@pytest.fixture(scope="function")
def clock() -> FakeClock:
    """
    固定起点的递增时钟
    """
    return FakeClock()


@pytest.fixture(scope="function")
def settings_service(store: Store, clock: FakeClock) -> SettingsService:
    """
    创建 SettingsService 实例
    """
    return SettingsService(store, clock)


@pytest.fixture(scope="function")
def history_service(store: Store, clock: FakeClock) -> HistoryService:
    """
    创建 HistoryService 实例
    """
    return HistoryService(store, clock)


# ==================== API Fixtures ====================

TEST_API_KEY = "test-api-key"


@pytest.fixture(scope="function")
def api_client(store: Store, clock: FakeClock):
    """
    带正确密钥头的 FastAPI 测试客户端
    """
    from fastapi.testclient import TestClient
    from luma_settings.api.app import create_app, API_KEY_HEADER

    app = create_app(store=store, clock=clock, api_key=TEST_API_KEY)
    with TestClient(app) as client:
        client.headers.update({API_KEY_HEADER: TEST_API_KEY})
        yield client


# ==================== Pytest 配置 ====================

def pytest_configure(config):
    """
    Pytest 初始化配置
    """
    # 标记测试分类
    config.addinivalue_line(
        "markers", "unit: Unit tests"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests"
    )
    config.addinivalue_line(
        "markers", "slow: Slow running tests"
    )
