"""
数据库初始化脚本
负责创建引擎和表结构（users、settings、chat_history）
"""

import os
from pathlib import Path
from typing import Optional

from sqlalchemy import event
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

# 导入模型，确保三张表都注册到 SQLModel.metadata
from luma_settings.models.user import User  # noqa: F401
from luma_settings.models.settings import UserSettings  # noqa: F401
from luma_settings.models.message import ChatMessage  # noqa: F401


def get_database_url() -> str:
    """
    获取数据库连接 URL
    优先使用 DATABASE_URL，其次 DATABASE_PATH，否则使用默认的 SQLite 文件
    """
    database_url = os.environ.get("DATABASE_URL")
    if database_url:
        return database_url

    db_path = os.environ.get("DATABASE_PATH", "luma_settings.db")
    # 确保路径是绝对路径
    if not os.path.isabs(db_path):
        # 从 backend 目录解析
        project_root = Path(__file__).parent.parent.parent
        db_path = str(project_root / db_path)
    return f"sqlite:///{db_path}"


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def get_engine(database_url: Optional[str] = None):
    """
    创建并返回数据库引擎

    Args:
        database_url: 连接 URL（可选，默认读取环境变量）
    """
    database_url = database_url or get_database_url()

    kwargs = {"echo": False}  # 设置为 True 可查看 SQL 语句
    if database_url.startswith("sqlite"):
        # 多个请求线程共用同一个引擎
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url == "sqlite://":
            # 内存库只存在于单个连接中，所有线程必须共享它
            kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, **kwargs)

    if database_url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def create_tables(engine) -> None:
    """
    创建所有数据库表
    已存在的表不会被改动，可以重复调用
    """
    SQLModel.metadata.create_all(engine)
    print(f"[init_db] Database tables ready at {engine.url}")


def init_db() -> None:
    """
    完整的数据库初始化流程
    1. 创建数据库引擎
    2. 创建所有表结构

    用户和默认设置不在这里创建，由 Provisioning 在首次访问时懒加载
    """
    print("\n=== Initializing database ===")

    engine = get_engine()
    create_tables(engine)

    print("=== Database initialization completed ===\n")


if __name__ == "__main__":
    # 直接运行此脚本时，执行数据库初始化
    init_db()
