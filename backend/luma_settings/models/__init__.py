"""
数据库模型模块
导出所有表模型和枚举类型
"""

# 用户域模型
from .user import User
from .settings import UserSettings, ThemeMode, SETTINGS_FIELDS, NOTIFICATION_FIELDS

# 会话域模型
from .message import ChatMessage, MessageRole

# 时钟
from .base import iso_now, Clock, TIMESTAMP_FORMAT

__all__ = [
    # 用户域
    "User",
    "UserSettings", "ThemeMode", "SETTINGS_FIELDS", "NOTIFICATION_FIELDS",
    # 会话域
    "ChatMessage", "MessageRole",
    # 时钟
    "iso_now", "Clock", "TIMESTAMP_FORMAT"
]
