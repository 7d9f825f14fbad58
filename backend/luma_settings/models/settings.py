"""
用户域模型 - 设置表
与 users 表一对一，主键同为 user_id
"""

from enum import Enum

from sqlmodel import SQLModel, Field

from .base import iso_now


class ThemeMode(str, Enum):
    """主题模式枚举"""
    SYSTEM = "System"
    LIGHT = "Light"
    DARK = "Dark"


class UserSettings(SQLModel, table=True):
    """
    设置表
    所有列都有默认值，Provisioning 插入的就是这一组默认值
    """
    __tablename__ = "settings"

    # 主键兼外键：归属用户
    user_id: str = Field(primary_key=True, foreign_key="users.user_id")

    # 外观：theme_mode 存枚举的 value（System / Light / Dark）
    # dark_mode 通常由 set_theme 推导，但也允许单独设置
    theme_mode: str = Field(default=ThemeMode.SYSTEM.value, nullable=False)
    dark_mode: bool = Field(default=False, nullable=False)

    # 通知开关
    notifications_enabled: bool = Field(default=True, nullable=False)
    chat_notifications: bool = Field(default=True, nullable=False)
    update_notifications: bool = Field(default=True, nullable=False)
    reminder_notifications: bool = Field(default=False, nullable=False)

    # 其他偏好
    language: str = Field(default="English", nullable=False)
    biometric_lock: bool = Field(default=False, nullable=False)
    app_version: str = Field(default="1.0.0", nullable=False)

    # 每次写入（包括首次创建）都会刷新
    updated_at: str = Field(default_factory=iso_now, nullable=False)


# 可通过合并更新的设置字段（不含主键和 updated_at）
SETTINGS_FIELDS = (
    "theme_mode",
    "dark_mode",
    "notifications_enabled",
    "chat_notifications",
    "update_notifications",
    "reminder_notifications",
    "language",
    "biometric_lock",
    "app_version",
)

NOTIFICATION_FIELDS = (
    "notifications_enabled",
    "chat_notifications",
    "update_notifications",
    "reminder_notifications",
)
