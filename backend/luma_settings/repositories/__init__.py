"""
Repository (DAO) 模块
提供数据库操作的抽象层，封装 CRUD 逻辑
"""

from .user_repository import UserRepository, PROFILE_FIELDS
from .settings_repository import SettingsRepository
from .history_repository import HistoryRepository

__all__ = [
    "UserRepository",
    "SettingsRepository",
    "HistoryRepository",
    "PROFILE_FIELDS"
]
