"""
会话域模型 - 聊天记录表
只追加的日志：按 id 递增顺序就是对话顺序
"""

from enum import Enum
from typing import Optional

from sqlmodel import SQLModel, Field

from .base import iso_now


class MessageRole(str, Enum):
    """消息角色枚举（role 列本身是开放字符串，这里只列出常用值）"""
    USER = "user"
    BOT = "bot"


class ChatMessage(SQLModel, table=True):
    """
    聊天记录表
    只会被追加，或者按用户整体清空，从不原地修改
    """
    __tablename__ = "chat_history"

    # AUTOINCREMENT：清空记录后 id 也不会被复用
    __table_args__ = {"sqlite_autoincrement": True}

    # 自增主键，决定消息的权威顺序
    id: Optional[int] = Field(default=None, primary_key=True)

    # 外键：归属用户，导出时按用户查询
    user_id: str = Field(foreign_key="users.user_id", index=True, nullable=False)

    role: str = Field(default=MessageRole.USER.value, nullable=False)
    message: str = Field(default="", nullable=False)

    # 导入时可由调用方提供，因此可能与 id 顺序不一致，仅供展示
    created_at: str = Field(default_factory=iso_now, nullable=False)
