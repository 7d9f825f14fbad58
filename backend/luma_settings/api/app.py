"""
HTTP 适配层

只负责：共享密钥校验、从已解码的请求体取参数、调用服务层、把异常映射为状态码。
- ValidationFailure -> 400 {"error", "field"}
- NotFound          -> 404 {"error", "detail"}
- StorageFailure    -> 500 {"error", "operation"}（底层错误只打印，不返回）
"""

import os
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from luma_settings.db.store import Store
from luma_settings.exceptions import NotFound, StorageFailure, ValidationFailure
from luma_settings.models.base import Clock, iso_now
from luma_settings.services.history_service import HistoryService
from luma_settings.services.settings_service import SettingsService

API_KEY_HEADER = "X-API-KEY"

# 不需要密钥的路径
PUBLIC_PATHS = ("/health",)

OK = {"ok": True}


def get_api_key() -> str:
    """从环境变量读取共享密钥（生产环境必须替换默认值）"""
    return os.environ.get("LUMA_API_KEY", "secret-api-key")


def _require(body: Dict[str, Any], *keys: str) -> None:
    """请求体必须包含的键，缺失时报 "<a> and <b> required" """
    if not all(key in body for key in keys):
        raise ValidationFailure(f"{' and '.join(keys)} required", field=keys[0])


def create_app(
    store: Optional[Store] = None,
    clock: Clock = iso_now,
    api_key: Optional[str] = None
) -> FastAPI:
    """
    创建 FastAPI 应用

    Args:
        store: 存储句柄（可选，不传则按环境变量创建）
        clock: 时间戳来源
        api_key: 共享密钥（可选，默认读取 LUMA_API_KEY）
    """
    store = store if store is not None else Store()
    store.ensure_schema()

    settings_service = SettingsService(store, clock)
    history_service = HistoryService(store, clock)
    expected_key = api_key or get_api_key()

    app = FastAPI(title="Luma Settings", version="1.0.0")

    # ==================== 中间件与异常映射 ====================

    @app.middleware("http")
    async def require_api_key(request: Request, call_next):
        if request.url.path not in PUBLIC_PATHS:
            if request.headers.get(API_KEY_HEADER) != expected_key:
                return JSONResponse(status_code=401, content={"error": "unauthorized"})
        return await call_next(request)

    @app.exception_handler(ValidationFailure)
    async def handle_validation_failure(request: Request, exc: ValidationFailure):
        return JSONResponse(
            status_code=400,
            content={"error": exc.message, "field": exc.field}
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": "invalid json"})

    @app.exception_handler(NotFound)
    async def handle_not_found(request: Request, exc: NotFound):
        return JSONResponse(status_code=404, content={"error": "not found", "detail": str(exc)})

    @app.exception_handler(StorageFailure)
    async def handle_storage_failure(request: Request, exc: StorageFailure):
        return JSONResponse(
            status_code=500,
            content={"error": "storage failure", "operation": exc.operation}
        )

    # ==================== 健康检查 ====================

    @app.get("/health")
    def health():
        return {"status": "ok", "time": clock()}

    # ==================== 设置 ====================

    @app.get("/settings")
    def get_settings(user_id: str = ""):
        return settings_service.get_settings(user_id).model_dump()

    @app.post("/settings")
    def upsert_settings(body: Dict[str, Any] = Body(...)):
        _require(body, "user_id")
        # 设置既可以直接平铺在请求体里，也可以放在 "settings" 下
        payload = body.get("settings", body)
        if isinstance(payload, dict):
            payload = {k: v for k, v in payload.items() if k != "user_id"}
        settings_service.upsert_settings(body["user_id"], payload)
        return OK

    @app.post("/profile")
    def set_profile(body: Dict[str, Any] = Body(...)):
        _require(body, "user_id")
        settings_service.set_profile(body["user_id"], body)
        return OK

    @app.post("/notifications")
    def set_notifications(body: Dict[str, Any] = Body(...)):
        _require(body, "user_id")
        settings_service.set_notifications(body["user_id"], body)
        return OK

    @app.post("/theme")
    def set_theme(body: Dict[str, Any] = Body(...)):
        _require(body, "user_id", "theme_mode")
        settings_service.set_theme(body["user_id"], body["theme_mode"])
        return OK

    @app.post("/security/biometric")
    def set_biometric_lock(body: Dict[str, Any] = Body(...)):
        _require(body, "user_id", "enabled")
        settings_service.set_biometric_lock(body["user_id"], body["enabled"])
        return OK

    # ==================== 聊天记录 ====================

    @app.post("/history")
    def append_message(body: Dict[str, Any] = Body(...)):
        _require(body, "user_id", "role", "message")
        history_service.append_message(body["user_id"], body["role"], body["message"])
        return OK

    @app.get("/history")
    def get_history(user_id: str = ""):
        return [entry.model_dump() for entry in history_service.get_history(user_id)]

    @app.post("/history/clear")
    def clear_history(body: Dict[str, Any] = Body(...)):
        _require(body, "user_id")
        history_service.clear_history(body["user_id"])
        return OK

    @app.get("/history/export")
    def export_history(user_id: str = ""):
        return history_service.export(user_id).model_dump()

    @app.post("/history/import")
    def import_history(replace: str = "", body: Dict[str, Any] = Body(...)):
        _require(body, "user_id")
        history_service.import_snapshot(
            body["user_id"],
            body,
            replace=replace in ("1", "true"),
        )
        return OK

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "luma_settings.api.app:create_app",
        factory=True,
        host=os.environ.get("LUMA_HOST", "0.0.0.0"),
        port=int(os.environ.get("LUMA_PORT", "8080")),
    )
