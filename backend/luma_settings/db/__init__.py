"""
数据库模块
提供数据库连接、初始化和事务化的存储句柄
"""

from .init_db import init_db, get_engine, get_database_url, create_tables
from .store import Store

__all__ = [
    "init_db",
    "get_engine",
    "get_database_url",
    "create_tables",
    "Store"
]
