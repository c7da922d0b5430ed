# -*- coding: utf-8 -*-
"""
試用模式的臨時使用者

沒有對應的 users 資料列；欄位與 users.Table 對齊，讓各路由可以一視同仁地使用
request.state.current_user。
"""
from __future__ import annotations
from typing import Optional

from ..DataAccess.tables.__Enumeration import Role
from ..i18n import normalize_locale
from ..router.User.settings import UserSettings

TRIAL_USER_ID = "trial-user"


class TrialUser:
    id = TRIAL_USER_ID
    username = "trial"
    email = "trial@example.com"
    name = "Trial User"
    role = Role.trial
    active = True
    created_at = None

    def __init__(self, session_id: str, locale: Optional[str] = None, expires_at: Optional[float] = None):
        self.session_id = session_id
        # token 的 exp（epoch 秒），記憶體裡的試用事件跟著一起過期
        self.expires_at = expires_at
        self.settings = UserSettings(default_locale=normalize_locale(locale)).model_dump()


def is_trial_user(user) -> bool:
    return getattr(user, "role", None) == Role.trial
