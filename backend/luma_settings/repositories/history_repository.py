"""
聊天记录 Repository
提供 chat_history 表的追加、按用户查询和按用户清空
"""

from typing import List

from sqlalchemy import delete
from sqlmodel import Session, select, col

from luma_settings.models.message import ChatMessage


class HistoryRepository:
    """
    聊天记录数据访问对象
    只有追加和整体清空两种写操作
    """

    def __init__(self, session: Session):
        """
        初始化 Repository

        Args:
            session: SQLModel 数据库会话
        """
        self.session = session

    def append(
        self,
        user_id: str,
        role: str,
        message: str,
        created_at: str
    ) -> ChatMessage:
        """
        追加一条消息

        Returns:
            已分配 id 的 ChatMessage 对象
        """
        chat_message = ChatMessage(
            user_id=user_id,
            role=role,
            message=message,
            created_at=created_at
        )
        self.session.add(chat_message)
        self.session.flush()
        return chat_message

    def get_by_user_id(self, user_id: str) -> List[ChatMessage]:
        """
        获取用户的全部消息（按 id 正序，即插入顺序）
        """
        statement = select(ChatMessage).where(
            ChatMessage.user_id == user_id
        ).order_by(col(ChatMessage.id).asc())
        return list(self.session.exec(statement).all())

    def delete_by_user_id(self, user_id: str) -> int:
        """
        删除用户的全部消息

        Returns:
            删除的消息数量（没有消息时为 0）
        """
        statement = delete(ChatMessage).where(col(ChatMessage.user_id) == user_id)
        result = self.session.execute(statement)
        return result.rowcount or 0
