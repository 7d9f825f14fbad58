"""
合并引擎单元测试
验证局部更新模式的三态区分，以及 merge_settings / merge_profile 的字段保留语义
"""

import pytest

from luma_settings.exceptions import NotFound, ValidationFailure
from luma_settings.schemas import (
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
from luma_settings.services.provisioning import ensure_user


class TestSettingsPatch:
    """测试局部更新模式"""

    def test_absent_fields_not_in_changes(self):
        """测试缺省字段不出现在 changes 中"""
        patch = parse_payload(SettingsPatch, {"dark_mode": True})

        assert patch.changes() == {"dark_mode": True}

    def test_explicit_false_kept(self):
        """测试明确的 false 与缺省区分"""
        patch = parse_payload(SettingsPatch, {"notifications_enabled": False})

        assert patch.changes() == {"notifications_enabled": False}

    def test_explicit_empty_string_kept(self):
        """测试明确的空字符串与缺省区分"""
        patch = parse_payload(SettingsPatch, {"language": ""})

        assert patch.changes() == {"language": ""}

    def test_unknown_fields_ignored(self):
        """测试未识别的键被忽略"""
        patch = parse_payload(SettingsPatch, {"user_id": "u-1", "font_size": 14, "language": "French"})

        assert patch.changes() == {"language": "French"}

    def test_theme_value_is_plain_string(self):
        """测试主题按枚举 value 输出"""
        patch = parse_payload(SettingsPatch, {"theme_mode": "Dark"})

        assert patch.changes() == {"theme_mode": "Dark"}

    @pytest.mark.parametrize("theme", ["dark", "Purple", "", 1])
    def test_invalid_theme_rejected(self, theme):
        """测试非法主题被拒绝"""
        with pytest.raises(ValidationFailure) as exc_info:
            parse_payload(SettingsPatch, {"theme_mode": theme})

        assert exc_info.value.field == "theme_mode"

    @pytest.mark.parametrize("value", ["true", 1, 0])
    def test_non_boolean_rejected(self, value):
        """测试布尔字段必须是 JSON 布尔值"""
        with pytest.raises(ValidationFailure) as exc_info:
            parse_payload(SettingsPatch, {"dark_mode": value})

        assert exc_info.value.field == "dark_mode"

    def test_explicit_null_rejected(self):
        """测试明确的 null 被拒绝"""
        with pytest.raises(ValidationFailure) as exc_info:
            parse_payload(SettingsPatch, {"language": None})

        assert exc_info.value.field == "language"

    def test_non_object_payload_rejected(self):
        """测试请求体必须是对象"""
        with pytest.raises(ValidationFailure):
            parse_payload(SettingsPatch, ["dark_mode"])

    def test_none_payload_is_empty(self):
        """测试 None 视为空对象"""
        assert parse_payload(SettingsPatch, None).changes() == {}


class TestProfilePatch:
    """测试资料局部更新模式"""

    def test_profile_fields_only(self):
        """测试只识别 name / email / avatar_url"""
        patch = parse_payload(ProfilePatch, {"name": "Kevin", "avatar_url": "", "language": "French"})

        assert patch.changes() == {"name": "Kevin", "avatar_url": ""}


class TestImportPayload:
    """测试导入快照模式"""

    def test_message_defaults(self):
        """测试导入消息的缺省值"""
        payload = parse_payload(ImportPayload, {"chat_history": [{}]})

        entry = payload.chat_history[0]
        assert entry.role == "user"
        assert entry.message == ""
        assert entry.created_at is None

    def test_absent_sections(self):
        """测试 settings 和 chat_history 都可以缺省"""
        payload = parse_payload(ImportPayload, {"user_id": "u-1"})

        assert payload.settings is None
        assert payload.chat_history is None

    def test_bad_message_type_rejected(self):
        """测试消息内容必须是字符串"""
        with pytest.raises(ValidationFailure) as exc_info:
            parse_payload(ImportPayload, {"chat_history": [{"message": 5}]})

        assert exc_info.value.field == "chat_history.0.message"


class TestMergeSettings:
    """测试 merge_settings / merge_profile"""

    def _provision(self, store):
        store.run_in_transaction(lambda session: ensure_user(session, "u-1", "2024-01-01T00:00:00Z"))

    def test_partial_update_preserves_other_fields(self, store):
        """测试缺省字段保留原值"""
        self._provision(store)
        store.run_in_transaction(lambda session: merge_settings(
            session, "u-1", SettingsPatch(language="French"), "2024-01-01T00:00:01Z"))

        store.run_in_transaction(lambda session: merge_settings(
            session, "u-1", SettingsPatch(dark_mode=True), "2024-01-01T00:00:02Z"))

        record = store.read(lambda session: load_settings_record(session, "u-1"))
        assert record.language == "French"
        assert record.dark_mode is True
        assert record.updated_at == "2024-01-01T00:00:02Z"

    def test_theme_and_dark_mode_independent(self, store):
        """测试通用合并不从主题推导 dark_mode"""
        self._provision(store)

        store.run_in_transaction(lambda session: merge_settings(
            session, "u-1", SettingsPatch(theme_mode="Dark", dark_mode=False), "2024-01-01T00:00:01Z"))

        record = store.read(lambda session: load_settings_record(session, "u-1"))
        assert record.theme_mode == "Dark"
        assert record.dark_mode is False

    def test_merge_profile_partial(self, store):
        """测试资料合并只改动给出的字段"""
        self._provision(store)

        store.run_in_transaction(lambda session: merge_profile(
            session, "u-1", ProfilePatch(name="Kevin")))

        record = store.read(lambda session: load_settings_record(session, "u-1"))
        assert record.name == "Kevin"
        assert record.email == "user@example.com"

    def test_merge_without_provisioning_raises_not_found(self, store):
        """测试跳过 Provisioning 时报 NotFound"""
        with pytest.raises(NotFound):
            store.run_in_transaction(lambda session: merge_settings(
                session, "ghost", SettingsPatch(dark_mode=True), "2024-01-01T00:00:00Z"))

        with pytest.raises(NotFound):
            store.run_in_transaction(lambda session: merge_profile(
                session, "ghost", ProfilePatch(name="x")))

    def test_load_record_not_found(self, store):
        """测试读取不存在用户的设置报 NotFound"""
        with pytest.raises(NotFound):
            store.read(lambda session: load_settings_record(session, "ghost"))
