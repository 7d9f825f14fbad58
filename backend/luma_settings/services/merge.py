"""
合并引擎

把局部字段应用到已有的设置 / 用户资料上：
出现的字段覆盖，缺省的字段保留，未识别的字段忽略。
主题到 dark_mode 的推导不在这里做，见 SettingsService.set_theme。
"""

from sqlmodel import Session

from luma_settings.exceptions import NotFound
from luma_settings.models.settings import UserSettings
from luma_settings.models.user import User
from luma_settings.repositories.user_repository import UserRepository
from luma_settings.repositories.settings_repository import SettingsRepository
from luma_settings.schemas import ProfilePatch, SettingsPatch, SettingsRecord


def merge_settings(
    session: Session,
    user_id: str,
    patch: SettingsPatch,
    now: str
) -> UserSettings:
    """
    合并设置字段，updated_at 总是刷新

    Raises:
        NotFound: 设置行不存在（调用方跳过了 Provisioning）
    """
    repo = SettingsRepository(session)
    settings = repo.get_by_user_id(user_id)
    if settings is None:
        raise NotFound("settings", user_id)
    return repo.apply(settings, patch.changes(), updated_at=now)


def merge_profile(session: Session, user_id: str, patch: ProfilePatch) -> User:
    """
    合并 name / email / avatar_url

    Raises:
        NotFound: 用户不存在
    """
    repo = UserRepository(session)
    user = repo.get_by_id(user_id)
    if user is None:
        raise NotFound("user", user_id)
    changes = patch.changes()
    if changes:
        repo.update_profile(user, changes)
    return user


def load_settings_record(session: Session, user_id: str) -> SettingsRecord:
    """
    组装用户资料 + 设置的完整视图

    Raises:
        NotFound: 用户或设置行不存在
    """
    user = UserRepository(session).get_by_id(user_id)
    settings = SettingsRepository(session).get_by_user_id(user_id)
    if user is None or settings is None:
        raise NotFound("settings", user_id)

    return SettingsRecord(
        user_id=user.user_id,
        name=user.name,
        email=user.email,
        avatar_url=user.avatar_url,
        theme_mode=settings.theme_mode,
        dark_mode=settings.dark_mode,
        notifications_enabled=settings.notifications_enabled,
        chat_notifications=settings.chat_notifications,
        update_notifications=settings.update_notifications,
        reminder_notifications=settings.reminder_notifications,
        language=settings.language,
        biometric_lock=settings.biometric_lock,
        app_version=settings.app_version,
        updated_at=settings.updated_at,
    )
