"""
异常定义模块

三类错误对应调用方的三种处理方式：
- ValidationFailure: 输入不合法，在开启事务之前抛出，不会改动任何数据
- StorageFailure: 存储层失败，当前事务已回滚，由调用方决定是否重试
- NotFound: 绕过 Provisioning 直接查询不存在的记录
"""

from typing import Optional


class SettingsStoreError(Exception):
    """所有核心错误的基类"""


class ValidationFailure(SettingsStoreError):
    """调用方输入违反约束（非法主题、缺少 user_id 等）"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class StorageFailure(SettingsStoreError):
    """
    存储层失败

    Args:
        operation: 失败的操作名（如 "upsert_settings"、"open"）
        detail: 底层错误信息
    """

    def __init__(self, operation: str, detail: str = ""):
        super().__init__(f"storage failure during {operation}: {detail}")
        self.operation = operation
        self.detail = detail


class NotFound(SettingsStoreError):
    """记录不存在"""

    def __init__(self, entity: str, key: str):
        super().__init__(f"{entity} not found: {key}")
        self.entity = entity
        self.key = key
