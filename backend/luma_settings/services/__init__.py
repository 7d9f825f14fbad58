"""
服务层模块
对外提供设置与聊天记录的调用面
"""

from .settings_service import SettingsService
from .history_service import HistoryService

__all__ = [
    "SettingsService",
    "HistoryService"
]
