# -*- coding: utf-8 -*-
"""
呼叫外部 chat-completion API 產生日記

單一請求、不重試；各種失敗分別丟出 errors.py 裡對應的錯誤，
由 FastAPI 的 exception handler 依語系轉成訊息。
"""
from __future__ import annotations
import json
from typing import Any, Optional, Sequence

import httpx

from libs.LogConfig import get_logger
from ...config.diary_api import (
    SAMPLING_PARAMS,
    get_diary_api_url,
    get_diary_api_key,
    get_diary_model,
    get_diary_api_timeout,
)
from ...errors import (
    ConfigurationError,
    EmptyInputError,
    MalformedResponseError,
    RemoteError,
    TransportError,
)
from .formatter import build_messages

log = get_logger(__name__)

_UNSET: Any = object()


class DiaryGenerator:
    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Any = _UNSET,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url or get_diary_api_url()
        # api_key=None → 讀環境變數；空字串視為沒設定
        self.api_key = (get_diary_api_key() if api_key is None else api_key.strip()) or None
        self.model = model or get_diary_model()
        self.timeout = get_diary_api_timeout() if timeout is _UNSET else timeout
        self.transport = transport

    def build_payload(self, events: Sequence[Any], locale: Optional[str], tz: Any = None) -> dict:
        return {
            "model": self.model,
            "messages": build_messages(events, locale, tz),
            **SAMPLING_PARAMS,
        }

    async def generate(self, events: Sequence[Any], locale: Optional[str] = None, tz: Any = None) -> str:
        """回傳 choices[0].message.content（原樣，不修剪）"""
        if not events:
            raise EmptyInputError()
        if not self.api_key:
            raise ConfigurationError()

        payload = self.build_payload(events, locale, tz)
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.post(self.api_url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            log.warning("diary api timeout: %s", e)
            raise TransportError(reason="timeout") from e
        except httpx.HTTPError as e:
            log.warning("diary api unreachable: %s", e)
            raise TransportError(reason=str(e) or type(e).__name__) from e

        if not resp.is_success:
            log.warning(
                "diary api returned %s",
                resp.status_code,
                extra={"body": resp.text[:500]},
            )
            raise TransportError(resp.status_code, resp.reason_phrase)

        try:
            data = resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedResponseError() from e

        # error 欄位存在就算（空物件也是），沒有 message 時用「未知錯誤」
        if isinstance(data, dict) and data.get("error") is not None:
            error = data["error"]
            if isinstance(error, dict):
                message = error.get("message")
            else:
                message = error if isinstance(error, str) else None
            raise RemoteError(message)

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedResponseError() from e
        if not isinstance(content, str) or not content:
            raise MalformedResponseError()
        return content


def get_diary_generator() -> DiaryGenerator:
    return DiaryGenerator()
