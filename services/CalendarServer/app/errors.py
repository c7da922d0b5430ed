# -*- coding: utf-8 -*-
"""
使用者操作層級的錯誤種類

每個錯誤帶一個 i18n key 與參數，在回應時才依呼叫者的語系轉成訊息；
全部都在觸發的那個請求邊界被攔下，不重試、不影響整個程序。
"""
from __future__ import annotations
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from libs.LogConfig import get_logger
from .i18n import t, normalize_locale

log = get_logger(__name__)

LOCALE_HEADER = "X-Locale"


class CalendarDiaryError(Exception):
    """所有可顯示給使用者的錯誤的基底"""
    message_key: str = "unknownError"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message_key: Optional[str] = None, **params: Any):
        if message_key:
            self.message_key = message_key
        self.params: Dict[str, Any] = params
        super().__init__(self.localize("en"))

    def localize(self, locale: Optional[str]) -> str:
        return t(locale, self.message_key, **self.params)


class ConfigurationError(CalendarDiaryError):
    """外部 API 金鑰未設定"""
    message_key = "apiKeyNotConfigured"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class TransportError(CalendarDiaryError):
    """連線失敗或 HTTP 非成功狀態"""
    message_key = "apiRequestFailed"
    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, status_code: Optional[int] = None, reason: str = ""):
        self.upstream_status = status_code
        super().__init__(status="-" if status_code is None else status_code, reason=reason)


class RemoteError(CalendarDiaryError):
    """外部 API 回傳了 error 物件"""
    message_key = "apiError"
    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, message: Optional[str] = None):
        self.remote_message = message
        super().__init__(message=message or "")

    def localize(self, locale: Optional[str]) -> str:
        message = self.remote_message or t(locale, "unknownError")
        return t(locale, self.message_key, message=message)


class MalformedResponseError(CalendarDiaryError):
    """成功回應但缺少 choices[0].message.content"""
    message_key = "unableToExtractContent"
    status_code = status.HTTP_502_BAD_GATEWAY


class EmptyInputError(CalendarDiaryError):
    """所選日期沒有事件（在送出請求前就擋下）"""
    message_key = "noEventsForDate"
    status_code = status.HTTP_404_NOT_FOUND


class ValidationError(CalendarDiaryError):
    """表單欄位限制（註冊、事件時間順序）"""
    message_key = "requiredField"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


def resolve_locale(request: Request) -> str:
    """?locale= → 使用者偏好 → X-Locale 標頭 → en"""
    requested = request.query_params.get("locale")
    if requested:
        return normalize_locale(requested)
    user = getattr(request.state, "current_user", None)
    settings = getattr(user, "settings", None) if user is not None else None
    if isinstance(settings, dict) and settings.get("default_locale"):
        return normalize_locale(settings["default_locale"])
    return normalize_locale(request.headers.get(LOCALE_HEADER))


async def _handle_calendar_diary_error(request: Request, exc: CalendarDiaryError) -> JSONResponse:
    locale = resolve_locale(request)
    log.warning(
        "request failed: %s",
        exc.message_key,
        extra={"path": request.url.path, "error": type(exc).__name__},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.localize(locale), "code": exc.message_key},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CalendarDiaryError, _handle_calendar_diary_error)
