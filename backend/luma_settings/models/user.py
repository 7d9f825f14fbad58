"""
用户域模型 - 用户表
每个外部 user_id 对应一行，由 Provisioning 懒加载创建
"""

from typing import Optional
from sqlmodel import SQLModel, Field

from .base import iso_now

# 新用户的占位资料
DEFAULT_NAME = "User Name"
DEFAULT_EMAIL = "user@example.com"
DEFAULT_AVATAR_URL = ""


class User(SQLModel, table=True):
    """
    用户表
    user_id 是外部稳定标识，创建后不可修改
    """
    __tablename__ = "users"

    # 主键：外部传入的字符串 ID
    user_id: str = Field(primary_key=True)

    # 基础资料，可通过 /profile 局部更新
    name: Optional[str] = Field(default=DEFAULT_NAME)
    email: Optional[str] = Field(default=DEFAULT_EMAIL)
    avatar_url: Optional[str] = Field(default=DEFAULT_AVATAR_URL)

    # 只在创建时写入一次
    created_at: str = Field(default_factory=iso_now, nullable=False)
