"""
聊天记录服务层

封装只追加日志的全部操作：
1. 追加消息（Provisioning 与插入同一事务）
2. 清空 / 读取聊天记录
3. 导出快照：设置 + 按插入顺序的聊天记录
4. 导入快照：合并或替换模式，设置合并与全部插入在同一事务内
"""

from typing import Any, Dict, List, Optional

from sqlmodel import Session

from luma_settings.db.store import Store
from luma_settings.exceptions import NotFound, ValidationFailure
from luma_settings.models.base import Clock, iso_now
from luma_settings.repositories.history_repository import HistoryRepository
from luma_settings.repositories.user_repository import UserRepository
from luma_settings.schemas import (
    ChatEntry,
    ExportSnapshot,
    ImportPayload,
    ProfilePatch,
    SettingsPatch,
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


def _load_history(session: Session, user_id: str) -> List[ChatEntry]:
    if UserRepository(session).get_by_id(user_id) is None:
        raise NotFound("user", user_id)
    return [
        ChatEntry(role=m.role, message=m.message, created_at=m.created_at)
        for m in HistoryRepository(session).get_by_user_id(user_id)
    ]


class HistoryService:
    """
    聊天记录服务类

    注意：append_message 和 import_snapshot 不是幂等的，
    调用方不能在结果不明时盲目重试

    使用示例：
        service = HistoryService(store)
        service.append_message("u-1", "user", "hi")
        snapshot = service.export("u-1")
    """

    def __init__(self, store: Store, clock: Clock = iso_now):
        """
        Args:
            store: 存储句柄
            clock: 时间戳来源
        """
        self.store = store
        self.clock = clock

    def append_message(self, user_id: str, role: Any, message: Any) -> None:
        """
        追加一条消息，created_at 由时钟分配

        Raises:
            ValidationFailure: role / message 不是字符串
        """
        user_id = require_user_id(user_id)
        if not isinstance(role, str):
            raise ValidationFailure("role must be a string", field="role")
        if not isinstance(message, str):
            raise ValidationFailure("message must be a string", field="message")

        def _append(session: Session) -> None:
            now = self.clock()
            ensure_user(session, user_id, now)
            HistoryRepository(session).append(user_id, role, message, created_at=now)

        self.store.run_in_transaction(_append, "append_message")

    def get_history(self, user_id: str) -> List[ChatEntry]:
        """获取聊天记录（按插入顺序）"""
        user_id = require_user_id(user_id)
        return read_provisioned(
            self.store,
            user_id,
            lambda session: _load_history(session, user_id),
            "get_history",
            self.clock,
        )

    def clear_history(self, user_id: str) -> int:
        """
        清空用户的全部聊天记录，没有记录时什么也不做

        Returns:
            删除的消息数量
        """
        user_id = require_user_id(user_id)

        def _clear(session: Session) -> int:
            ensure_user(session, user_id, self.clock())
            return HistoryRepository(session).delete_by_user_id(user_id)

        return self.store.run_in_transaction(_clear, "clear_history")

    def export(self, user_id: str) -> ExportSnapshot:
        """导出设置和聊天记录；设置与记录来自同一次读取"""
        user_id = require_user_id(user_id)

        def _load(session: Session) -> ExportSnapshot:
            settings = load_settings_record(session, user_id)
            return ExportSnapshot(
                exported_at=self.clock(),
                settings=settings,
                chat_history=_load_history(session, user_id),
            )

        return read_provisioned(self.store, user_id, _load, "export", self.clock)

    def import_snapshot(
        self,
        user_id: str,
        payload: Optional[Dict[str, Any]],
        replace: bool = False
    ) -> None:
        """
        导入快照

        - payload.settings 存在时按合并语义写入（资料字段同时写入 users 表）
        - payload.chat_history 存在时：replace=True 先清空再插入，
          否则追加在已有记录之后；缺省 role 为 "user"、message 为 ""、
          created_at 为当前时间
        - 以上全部在同一事务内，失败时整体回滚

        Raises:
            ValidationFailure: 快照结构或设置字段不合法（未开启事务）
            StorageFailure: 写入失败（已回滚）
        """
        user_id = require_user_id(user_id)
        snapshot = parse_payload(ImportPayload, payload)

        settings_patch = profile_patch = None
        if snapshot.settings is not None:
            settings_patch = parse_payload(SettingsPatch, snapshot.settings)
            profile_patch = parse_payload(ProfilePatch, snapshot.settings)

        def _import(session: Session) -> None:
            now = self.clock()
            ensure_user(session, user_id, now)

            if settings_patch is not None:
                merge_profile(session, user_id, profile_patch)
                merge_settings(session, user_id, settings_patch, now)

            if snapshot.chat_history is not None:
                repo = HistoryRepository(session)
                if replace:
                    removed = repo.delete_by_user_id(user_id)
                    print(f"[HistoryService] 替换导入：已清空用户 '{user_id}' 的 {removed} 条记录")
                for entry in snapshot.chat_history:
                    repo.append(
                        user_id,
                        entry.role,
                        entry.message,
                        created_at=now if entry.created_at is None else entry.created_at,
                    )

        self.store.run_in_transaction(_import, "import_snapshot")
