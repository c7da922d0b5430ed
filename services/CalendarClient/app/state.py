# -*- coding: utf-8 -*-
"""
用戶端的 session 狀態

對應瀏覽器端 localStorage 的三個鍵：token / locale / trialCount。
啟動時讀一次，每次變更就整份寫回 JSON 檔。
"""
from __future__ import annotations
import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from libs.LogConfig import get_logger
from services.CalendarServer.app.i18n import DEFAULT_LOCALE, normalize_locale, t

log = get_logger(__name__)

DEFAULT_TRIAL_COUNT = 5
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 20
PASSWORD_MIN_LENGTH = 8
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def default_state_path() -> Path:
    configured = os.getenv("CALENDAR_STATE_FILE")
    if configured:
        return Path(configured)
    return Path.home() / ".calendar-diary" / "state.json"


class ValidationError(Exception):
    """表單驗證失敗；key 對應 i18n 字串"""

    def __init__(self, key: str, field: Optional[str] = None):
        self.key = key
        self.field = field
        super().__init__(key)

    def localize(self, locale: Optional[str]) -> str:
        return t(locale, self.key)


def validate_registration(username: str, email: str, password: str, confirm_password: str) -> None:
    """依序檢查，遇到第一個錯誤就丟出"""
    if not username:
        raise ValidationError("requiredField", "username")
    if not (USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH):
        raise ValidationError("usernameRequirements", "username")

    if not email:
        raise ValidationError("requiredField", "email")
    if not EMAIL_RE.match(email):
        raise ValidationError("invalidEmail", "email")

    if not password:
        raise ValidationError("requiredField", "password")
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError("passwordRequirements", "password")

    if password != confirm_password:
        raise ValidationError("passwordMismatch", "confirm_password")


class SessionState:
    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else default_state_path()
        self._token: Optional[str] = None
        self._locale: str = DEFAULT_LOCALE
        self._trial_count: int = DEFAULT_TRIAL_COUNT
        # 目前登入者（不落地，重新啟動時由 /auth/me 取回）
        self.user: Optional[Dict[str, Any]] = None
        self.load()

    # ---- 讀寫 ----
    def load(self) -> None:
        if not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            log.warning("state file unreadable, using defaults: %s", e)
            return
        if not isinstance(data, dict):
            return

        token = data.get("token")
        self._token = token if isinstance(token, str) and token else None
        self._locale = normalize_locale(data.get("locale"))
        try:
            self._trial_count = max(int(data.get("trialCount", DEFAULT_TRIAL_COUNT)), 0)
        except (TypeError, ValueError):
            self._trial_count = DEFAULT_TRIAL_COUNT

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"token": self._token, "locale": self._locale, "trialCount": self._trial_count}
        fd, tmp_name = tempfile.mkstemp(prefix=".state-", suffix=".json", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        finally:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)

    # ---- token ----
    @property
    def token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: Optional[str]) -> None:
        self._token = token or None
        self.save()

    def clear(self) -> None:
        """登出：清掉 token 與目前使用者，語系與試用次數保留"""
        self._token = None
        self.user = None
        self.save()

    # ---- locale ----
    @property
    def locale(self) -> str:
        return self._locale

    def set_locale(self, locale: str) -> str:
        self._locale = normalize_locale(locale)
        self.save()
        return self._locale

    # ---- 試用 ----
    @property
    def trial_count(self) -> int:
        return self._trial_count

    def consume_trial(self) -> int:
        """用掉一次試用；已經用完則丟出 ValidationError"""
        if self._trial_count <= 0:
            raise ValidationError("trialExhausted")
        self._trial_count -= 1
        self.save()
        return self._trial_count

    @property
    def is_trial(self) -> bool:
        return bool(self.user) and self.user.get("id") == "trial-user"

    def t(self, key: str, **params) -> str:
        return t(self._locale, key, **params)
