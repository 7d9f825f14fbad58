"""
设置 Repository
提供 settings 表的查询、默认值插入和局部更新
"""

from typing import Any, Dict, Optional

from sqlmodel import Session

from luma_settings.models.settings import UserSettings, SETTINGS_FIELDS


class SettingsRepository:
    """
    设置数据访问对象
    封装所有与 settings 表相关的数据库操作
    """

    def __init__(self, session: Session):
        """
        初始化 Repository

        Args:
            session: SQLModel 数据库会话
        """
        self.session = session

    def get_by_user_id(self, user_id: str) -> Optional[UserSettings]:
        """
        获取用户的设置行

        Returns:
            UserSettings 对象，不存在则返回 None
        """
        return self.session.get(UserSettings, user_id)

    def create_defaults(self, user_id: str, updated_at: str) -> UserSettings:
        """
        插入一行全部为默认值的设置

        Args:
            user_id: 用户 ID
            updated_at: 写入时间戳
        """
        settings = UserSettings(user_id=user_id, updated_at=updated_at)
        self.session.add(settings)
        self.session.flush()
        return settings

    def apply(
        self,
        settings: UserSettings,
        fields: Dict[str, Any],
        updated_at: str
    ) -> UserSettings:
        """
        把局部字段写到已有的设置行上

        未识别的字段忽略；无论是否有字段变化，updated_at 都会刷新

        Args:
            settings: 已存在的 UserSettings 对象
            fields: 要覆盖的字段（只包含调用方明确提供的键）
            updated_at: 本次写入时间戳
        """
        for key, value in fields.items():
            if key in SETTINGS_FIELDS:
                setattr(settings, key, value)
        settings.updated_at = updated_at
        self.session.add(settings)
        self.session.flush()
        return settings
