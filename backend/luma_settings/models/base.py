"""
基础模型模块
提供时钟（时间戳格式）和所有模型共用的字段工厂
"""

from datetime import datetime, timezone
from typing import Callable

# 对外契约的时间戳格式，例如 2024-05-01T08:30:00Z
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# 时钟类型：无参调用，返回固定格式的时间戳字符串
Clock = Callable[[], str]


def iso_now() -> str:
    """
    返回当前 UTC 时间戳字符串

    所有 created_at / updated_at 字段都使用这个格式，
    存储层保存的就是字符串，导出时原样返回
    """
    return datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)
