# -*- coding: utf-8 -*-
"""
CalendarServer 的 HTTP 包裝

每個請求帶上 Bearer token 與目前語系；非 2xx 一律丟 ApiError(status, detail)。
"""
from __future__ import annotations
import os
import re
from datetime import date
from typing import Any, Dict, Optional, Tuple

import httpx

from libs.LogConfig import get_logger
from .state import SessionState, validate_registration

log = get_logger(__name__)

DEFAULT_BASE_URL = "http://localhost:30000/api/v1"
LOCALE_HEADER = "X-Locale"
_FILENAME_RE = re.compile(r'filename="?([^";]+)"?')


class ApiError(Exception):
    def __init__(self, status: int, detail: str):
        self.status = status
        self.detail = detail
        super().__init__(f"{status}: {detail}")


def _detail_of(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("message")
        if isinstance(detail, list):
            # FastAPI 的欄位驗證錯誤
            return "; ".join(str(d.get("msg", d)) if isinstance(d, dict) else str(d) for d in detail)
        if detail:
            return str(detail)
    return resp.reason_phrase or "An error occurred"


class CalendarApi:
    def __init__(
        self,
        state: SessionState,
        base_url: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.state = state
        self.base_url = (base_url or os.getenv("CALENDAR_API_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")
        self._client = httpx.Client(base_url=self.base_url, transport=transport, timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "CalendarApi":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ---- 通用請求 ----
    def _send(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        headers = {LOCALE_HEADER: self.state.locale}
        if self.state.token:
            headers["Authorization"] = f"Bearer {self.state.token}"
        query = {"locale": self.state.locale}
        query.update({k: v for k, v in (params or {}).items() if v is not None})

        resp = self._client.request(method, endpoint, json=json, params=query, headers=headers)
        if not resp.is_success:
            detail = _detail_of(resp)
            log.debug("%s %s -> %s %s", method, endpoint, resp.status_code, detail)
            raise ApiError(resp.status_code, detail)
        return resp

    def request(self, method: str, endpoint: str, **kwargs) -> Any:
        resp = self._send(method, endpoint, **kwargs)
        if not resp.content:
            return None
        return resp.json()

    # ---- 認證 ----
    def _remember(self, result: Dict[str, Any]) -> Dict[str, Any]:
        self.state.set_token(result["token"])
        self.state.user = result["user"]
        return result["user"]

    def login(self, email: str, password: str) -> Dict[str, Any]:
        result = self.request("POST", "/auth/login", json={"email": email, "password": password})
        return self._remember(result)

    def register(
        self,
        username: str,
        email: str,
        password: str,
        confirm_password: str,
        name: Optional[str] = None,
    ) -> Dict[str, Any]:
        validate_registration(username, email, password, confirm_password)
        body = {"username": username, "email": email, "password": password, "name": name}
        result = self.request("POST", "/auth/register", json=body)
        return self._remember(result)

    def logout(self) -> None:
        try:
            if self.state.token:
                self.request("POST", "/auth/logout")
        finally:
            self.state.clear()

    def start_trial_mode(self) -> Dict[str, Any]:
        """用掉一次試用次數並取得試用 token"""
        self.state.consume_trial()
        result = self.request("POST", "/auth/trial", json={"locale": self.state.locale})
        return self._remember(result)

    def load_current_user(self) -> Optional[Dict[str, Any]]:
        """啟動時用既有 token 取回使用者；token 失效就清掉"""
        if not self.state.token:
            return None
        try:
            self.state.user = self.request("GET", "/auth/me")["user"]
        except ApiError as e:
            if e.status != 401:
                raise
            self.state.clear()
        return self.state.user

    # ---- 使用者 ----
    def update_profile(self, **fields) -> Dict[str, Any]:
        self.state.user = self.request("PATCH", "/users/profile", json=fields)["user"]
        return self.state.user

    def get_preferences(self) -> Dict[str, Any]:
        return self.request("GET", "/users/preferences")["preferences"]

    def update_preferences(self, **preferences) -> Dict[str, Any]:
        result = self.request("PATCH", "/users/preferences", json=preferences)["preferences"]
        if self.state.user is not None:
            self.state.user["preferences"] = result
        return result

    # ---- 事件 ----
    def list_events(self, start_date: Optional[date] = None, end_date: Optional[date] = None) -> list:
        params = {
            "start_date": start_date.isoformat() if start_date else None,
            "end_date": end_date.isoformat() if end_date else None,
        }
        return self.request("GET", "/events", params=params)["items"]

    def create_event(self, **event) -> Dict[str, Any]:
        return self.request("POST", "/events", json=event)

    def update_event(self, event_id: str, **patch) -> Dict[str, Any]:
        return self.request("PATCH", f"/events/{event_id}", json=patch)

    def replace_event(self, event_id: str, **event) -> Dict[str, Any]:
        return self.request("PUT", f"/events/{event_id}", json=event)

    def delete_event(self, event_id: str) -> None:
        self.request("DELETE", f"/events/{event_id}")

    # ---- 月曆 ----
    def month(
        self,
        reference: Optional[date] = None,
        move: Optional[str] = None,
        selected: Optional[date] = None,
    ) -> Dict[str, Any]:
        params = {
            "date": reference.isoformat() if reference else None,
            "move": move,
            "selected": selected.isoformat() if selected else None,
        }
        return self.request("GET", "/calendar/month", params=params)

    def day(self, day: Optional[date] = None) -> Dict[str, Any]:
        return self.request("GET", "/calendar/day", params={"date": day.isoformat() if day else None})

    # ---- 日記 ----
    def generate_diary(self, day: date) -> str:
        return self.request("POST", "/diary/generate", json={"date": day.isoformat()})["content"]

    def export_diary(self, day: date) -> Tuple[str, str]:
        """回傳 (檔名, 內容)"""
        resp = self._send("GET", "/diary/export", params={"date": day.isoformat()})
        match = _FILENAME_RE.search(resp.headers.get("content-disposition", ""))
        filename = match.group(1) if match else f"diary-{day.isoformat()}.txt"
        return filename, resp.text

    def save_diary(self, day: date, content: str) -> Dict[str, Any]:
        return self.request("POST", "/diary", json={"date": day.isoformat(), "content": content})

    def get_diary(self, day: date) -> Dict[str, Any]:
        return self.request("GET", "/diary", params={"date": day.isoformat()})
