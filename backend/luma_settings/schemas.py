"""
请求 / 响应数据模式

局部更新用 pydantic 的 fields-set 区分三种状态：
- 键不存在：保留原值
- 键存在且为 false / 空字符串：按该值写入
- 键存在且为 null：拒绝
"""

from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    ValidationError,
    field_validator,
)

from luma_settings.exceptions import ValidationFailure
from luma_settings.models.message import MessageRole
from luma_settings.models.settings import ThemeMode

PatchT = TypeVar("PatchT", bound=BaseModel)


class _Patch(BaseModel):
    """局部更新基类：未识别的键忽略，枚举按 value 输出"""
    model_config = ConfigDict(extra="ignore", use_enum_values=True)

    @field_validator("*", mode="before")
    @classmethod
    def _reject_null(cls, value: Any) -> Any:
        # 只对调用方明确提供的键生效
        if value is None:
            raise ValueError("must not be null")
        return value

    def changes(self) -> Dict[str, Any]:
        """只返回调用方明确提供的字段"""
        return self.model_dump(exclude_unset=True)


class SettingsPatch(_Patch):
    """settings 表的局部更新"""
    theme_mode: Optional[ThemeMode] = None
    dark_mode: Optional[StrictBool] = None
    notifications_enabled: Optional[StrictBool] = None
    chat_notifications: Optional[StrictBool] = None
    update_notifications: Optional[StrictBool] = None
    reminder_notifications: Optional[StrictBool] = None
    language: Optional[StrictStr] = None
    biometric_lock: Optional[StrictBool] = None
    app_version: Optional[StrictStr] = None


class ProfilePatch(_Patch):
    """users 表资料字段的局部更新"""
    name: Optional[StrictStr] = None
    email: Optional[StrictStr] = None
    avatar_url: Optional[StrictStr] = None


class ImportedMessage(BaseModel):
    """导入的一条聊天记录，缺省字段按约定补齐"""
    model_config = ConfigDict(extra="ignore")

    role: StrictStr = MessageRole.USER.value
    message: StrictStr = ""
    # None 表示由时钟补当前时间
    created_at: Optional[StrictStr] = None


class ImportPayload(BaseModel):
    """导入快照；settings 和 chat_history 都可以缺省"""
    model_config = ConfigDict(extra="ignore")

    settings: Optional[Dict[str, Any]] = None
    chat_history: Optional[List[ImportedMessage]] = None


class SettingsRecord(BaseModel):
    """用户资料 + 设置的完整视图，字段名即对外契约"""
    user_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    theme_mode: str
    dark_mode: bool
    notifications_enabled: bool
    chat_notifications: bool
    update_notifications: bool
    reminder_notifications: bool
    language: str
    biometric_lock: bool
    app_version: str
    updated_at: str


class ChatEntry(BaseModel):
    """导出的一条聊天记录"""
    role: str
    message: str
    created_at: str


class ExportSnapshot(BaseModel):
    """导出快照"""
    exported_at: str
    settings: SettingsRecord
    chat_history: List[ChatEntry] = Field(default_factory=list)


def parse_payload(model_cls: Type[PatchT], payload: Any) -> PatchT:
    """
    把已解码的请求体校验为指定模式

    pydantic 的 ValidationError 不会离开本模块，统一转换为 ValidationFailure，
    field 指向第一个出错的字段

    Args:
        model_cls: 目标模式类
        payload: 已解码的结构化数据（dict），None 视为空对象

    Raises:
        ValidationFailure: 输入不合法
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationFailure("payload must be a JSON object")
    try:
        return model_cls.model_validate(payload)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        message = f"{field}: {first['msg']}" if field else first["msg"]
        raise ValidationFailure(message, field=field) from e
