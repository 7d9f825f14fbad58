"""
Provisioning：懒加载创建用户和默认设置

在任何读写之前保证 user_id 有一行 users 和一行 settings。
只插入缺失的行，已存在的行不做任何改动，因此可以重复调用。
"""

from typing import Any, Callable, TypeVar

from sqlmodel import Session

from luma_settings.db.store import Store
from luma_settings.exceptions import NotFound, ValidationFailure
from luma_settings.models.base import Clock
from luma_settings.repositories.user_repository import UserRepository
from luma_settings.repositories.settings_repository import SettingsRepository

T = TypeVar("T")


def require_user_id(user_id: Any) -> str:
    """
    校验 user_id，必须是非空字符串

    Raises:
        ValidationFailure: user_id 缺失或类型错误
    """
    if not isinstance(user_id, str) or not user_id:
        raise ValidationFailure("user_id required", field="user_id")
    return user_id


def ensure_user(session: Session, user_id: str, now: str) -> bool:
    """
    确保用户和默认设置存在（在调用方的事务内执行）

    Args:
        session: 当前事务的会话
        user_id: 用户 ID
        now: 新行使用的时间戳

    Returns:
        本次是否新建了任何一行
    """
    user_repo = UserRepository(session)
    settings_repo = SettingsRepository(session)

    created = False
    if user_repo.get_by_id(user_id) is None:
        print(f"[Provisioning] 检测到新用户 '{user_id}'，正在创建默认资料...")
        user_repo.create(user_id, created_at=now)
        created = True

    if settings_repo.get_by_user_id(user_id) is None:
        settings_repo.create_defaults(user_id, updated_at=now)
        created = True

    return created


def read_provisioned(
    store: Store,
    user_id: str,
    loader: Callable[[Session], T],
    operation: str,
    clock: Clock
) -> T:
    """
    读路径：先无锁读取，用户不存在时再在写事务里补建后读取

    loader 在用户或设置缺失时必须抛出 NotFound。
    补建的默认值单独提交，不依赖后续的写操作。
    """
    try:
        return store.read(loader, operation)
    except NotFound:
        def _provision_and_load(session: Session) -> T:
            ensure_user(session, user_id, clock())
            return loader(session)

        return store.run_in_transaction(_provision_and_load, operation)
