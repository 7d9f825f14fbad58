"""
用户管理 Repository
提供 users 表的查询、创建和资料更新操作
"""

from typing import Any, Dict, Optional

from sqlmodel import Session

from luma_settings.models.user import User

# 可通过 /profile 更新的资料字段
PROFILE_FIELDS = ("name", "email", "avatar_url")


class UserRepository:
    """
    用户数据访问对象
    封装所有与 users 表相关的数据库操作

    注意：Repository 只 flush 不 commit，事务边界由 Store 负责
    """

    def __init__(self, session: Session):
        """
        初始化 Repository

        Args:
            session: SQLModel 数据库会话
        """
        self.session = session

    def get_by_id(self, user_id: str) -> Optional[User]:
        """
        根据 user_id 获取用户

        Returns:
            User 对象，不存在则返回 None
        """
        return self.session.get(User, user_id)

    def create(self, user_id: str, created_at: str) -> User:
        """
        用占位资料创建新用户

        Args:
            user_id: 外部用户 ID
            created_at: 创建时间戳

        Returns:
            创建的 User 对象
        """
        user = User(user_id=user_id, created_at=created_at)
        self.session.add(user)
        self.session.flush()
        return user

    def update_profile(self, user: User, fields: Dict[str, Any]) -> User:
        """
        局部更新用户资料，只改动 fields 中出现的资料字段

        Args:
            user: 已存在的 User 对象
            fields: 要覆盖的字段
        """
        for key, value in fields.items():
            if key in PROFILE_FIELDS:
                setattr(user, key, value)
        self.session.add(user)
        self.session.flush()
        return user
