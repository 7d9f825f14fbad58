"""
设置服务层

对外的设置调用面：
1. 读取设置（读路径懒加载创建默认值）
2. 局部更新设置 / 资料 / 通知（Provisioning 与写入同一事务）
3. 主题切换（唯一推导 dark_mode 的地方）
4. 生物识别锁开关
"""

from typing import Any, Dict, Optional

from sqlmodel import Session

from luma_settings.db.store import Store
from luma_settings.models.base import Clock, iso_now
from luma_settings.models.settings import ThemeMode, NOTIFICATION_FIELDS
from luma_settings.schemas import (
    ProfilePatch,
    SettingsPatch,
    SettingsRecord,
    parse_payload,
)
from luma_settings.services.merge import (
    load_settings_record,
    merge_profile,
    merge_settings,
)
from luma_settings.services.provisioning import (
    ensure_user,
    read_provisioned,
    require_user_id,
)


class SettingsService:
    """
    设置服务类

    所有输入校验都在开启事务之前完成；写操作返回 None，
    失败时抛出 ValidationFailure / StorageFailure

    使用示例：
        service = SettingsService(store)
        service.upsert_settings("u-1", {"language": "French"})
        service.get_settings("u-1").language  # "French"
    """

    def __init__(self, store: Store, clock: Clock = iso_now):
        """
        Args:
            store: 存储句柄
            clock: 时间戳来源（测试中可替换为固定时钟）
        """
        self.store = store
        self.clock = clock

    def get_settings(self, user_id: str) -> SettingsRecord:
        """获取用户的完整设置，不存在则先创建默认值"""
        user_id = require_user_id(user_id)
        return read_provisioned(
            self.store,
            user_id,
            lambda session: load_settings_record(session, user_id),
            "get_settings",
            self.clock,
        )

    def upsert_settings(self, user_id: str, partial_fields: Optional[Dict[str, Any]]) -> None:
        """
        局部更新设置；同一请求体里的 name / email / avatar_url 一并写入 users 表
        """
        user_id = require_user_id(user_id)
        settings_patch = parse_payload(SettingsPatch, partial_fields)
        profile_patch = parse_payload(ProfilePatch, partial_fields)
        self._write(user_id, settings_patch, profile_patch, "upsert_settings")

    def set_profile(self, user_id: str, partial_profile_fields: Optional[Dict[str, Any]]) -> None:
        """局部更新资料（只识别 name / email / avatar_url）"""
        user_id = require_user_id(user_id)
        profile_patch = parse_payload(ProfilePatch, partial_profile_fields)
        self._write(user_id, SettingsPatch(), profile_patch, "set_profile")

    def set_notifications(self, user_id: str, fields: Optional[Dict[str, Any]]) -> None:
        """只更新四个通知开关，其余键忽略"""
        user_id = require_user_id(user_id)
        fields = fields or {}
        notification_fields = {k: fields[k] for k in NOTIFICATION_FIELDS if k in fields}
        settings_patch = parse_payload(SettingsPatch, notification_fields)
        self._write(user_id, settings_patch, None, "set_notifications")

    def set_theme(self, user_id: str, theme_mode: Any) -> None:
        """
        设置主题，并推导 dark_mode：Dark 为 True，其余为 False

        Raises:
            ValidationFailure: theme_mode 不在 System / Light / Dark 之内
        """
        user_id = require_user_id(user_id)
        theme_patch = parse_payload(SettingsPatch, {"theme_mode": theme_mode})
        settings_patch = SettingsPatch(
            theme_mode=theme_patch.theme_mode,
            dark_mode=theme_patch.theme_mode == ThemeMode.DARK.value,
        )
        self._write(user_id, settings_patch, None, "set_theme")

    def set_biometric_lock(self, user_id: str, enabled: Any) -> None:
        user_id = require_user_id(user_id)
        settings_patch = parse_payload(SettingsPatch, {"biometric_lock": enabled})
        self._write(user_id, settings_patch, None, "set_biometric_lock")

    def _write(
        self,
        user_id: str,
        settings_patch: SettingsPatch,
        profile_patch: Optional[ProfilePatch],
        operation: str
    ) -> None:
        """Provisioning + 资料合并 + 设置合并，作为一个事务提交"""

        def _apply(session: Session) -> None:
            now = self.clock()
            ensure_user(session, user_id, now)
            if profile_patch is not None:
                merge_profile(session, user_id, profile_patch)
            merge_settings(session, user_id, settings_patch, now)

        self.store.run_in_transaction(_apply, operation)
