# -*- coding: utf-8 -*-
from __future__ import annotations

from fastapi.security import OAuth2PasswordBearer
from fastapi import Depends, HTTPException, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import time

from ..DataAccess.Connect import get_session
from ..DataAccess.tables import users
from .jwt_manager import JWTManager, WWW_BEARER
from .trial import TrialUser
from ..i18n import t, normalize_locale
from ..config.path import (API_ROOT,
                           AUTH_PREFIX,
                           AUTH_POST_LOGIN)

_oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{API_ROOT}{AUTH_PREFIX}{AUTH_POST_LOGIN}")
jwt_manager = JWTManager()

# {token: {"payload": payload, "exp": exp}}
_current_user_cache = {}
# 已登出的 jti → exp（過期後自然失效，順手清掉）
_revoked_tokens = {}


def _purge_revoked(now: float) -> None:
    for jti in [k for k, exp in _revoked_tokens.items() if exp <= now]:
        del _revoked_tokens[jti]


def revoke_token(token: str) -> None:
    """登出：讓這個 token 在到期前也不能再用"""
    payload = check_user_token_cached(token)
    jti = payload.get("jti")
    if jti:
        _revoked_tokens[jti] = payload["exp"]
    _current_user_cache.pop(token, None)


def check_user_token_cached(token: str):
    now = time.time()
    _purge_revoked(now)

    # 快取命中但過期 → 清掉
    if token in _current_user_cache:
        if _current_user_cache[token]["exp"] <= now:
            del _current_user_cache[token]
        else:
            payload = _current_user_cache[token]["payload"]
            if payload.get("jti") in _revoked_tokens:
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Token has been revoked",
                    headers=WWW_BEARER,
                )
            return payload

    # 沒有快取 → decode
    payload = jwt_manager.decode_token(token)
    if payload.get("jti") in _revoked_tokens:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has been revoked",
            headers=WWW_BEARER,
        )
    _current_user_cache[token] = {"payload": payload, "exp": payload["exp"]}
    return payload


async def get_current_user(
    request: Request,
    token: str = Depends(_oauth2_scheme),
    db: AsyncSession = Depends(get_session),
):
    payload = check_user_token_cached(token)
    sub = payload.get("sub")
    if sub is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has no subject",
            headers=WWW_BEARER,
        )

    # 試用身分：不查資料庫
    if payload.get("trial"):
        session_id = str(sub).split(":", 1)[-1]
        user_obj = TrialUser(session_id=session_id, locale=payload.get("locale"), expires_at=payload.get("exp"))
        request.state.current_user = user_obj
        request.state.access_token = token
        return user_obj

    try:
        user_id = int(sub)
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token subject must be an integer",
            headers=WWW_BEARER,
        )

    stmt = select(users.Table).where(users.Table.id == user_id)
    result = await db.execute(stmt)
    user_obj: users.Table | None = result.scalar_one_or_none()
    if user_obj is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers=WWW_BEARER,
        )

    if not bool(getattr(user_obj, "active", False)):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account disabled")

    # 存到 request.state，方便 handler 直接取
    request.state.current_user = user_obj
    request.state.access_token = token
    return user_obj


async def require_registered_user(user=Depends(get_current_user)) -> users.Table:
    """試用身分沒有帳號可改；偏好設定/個人資料等端點用這個依賴"""
    if isinstance(user, TrialUser):
        locale = normalize_locale(user.settings.get("default_locale"))
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=t(locale, "trialNotAllowed"))
    return user
