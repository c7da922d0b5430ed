# -*- coding: utf-8 -*-
from __future__ import annotations
import uuid

from fastapi import APIRouter, Depends, status, Request
from sqlalchemy.ext.asyncio import AsyncSession

from libs.LogConfig import get_logger
from .DTO import RegisterRequestDTO, LoginRequestDTO, TrialRequestDTO, AuthResponseDTO
from ..User.DTO import UserRead, UserResponseDTO
from ..User.service import UserService
from ...DataAccess.Connect import get_session
from ...security.deps import jwt_manager, get_current_user, revoke_token
from ...security.trial import TrialUser
from ..Events.repository import clear_trial_session, purge_expired_trial_sessions
from ...errors import resolve_locale
from ...i18n import t, normalize_locale
from ...config.path import (AUTH_PREFIX,
                            AUTH_POST_REGISTER,
                            AUTH_POST_LOGIN,
                            AUTH_POST_LOGOUT,
                            AUTH_POST_TRIAL,
                            AUTH_GET_ME)

log = get_logger(__name__)

auth_router = APIRouter(prefix=AUTH_PREFIX, tags=["auth"])
user_service = UserService(jwt_manager)


# ================ User Authentication API ==================
@auth_router.post(AUTH_POST_REGISTER, response_model=AuthResponseDTO, status_code=status.HTTP_201_CREATED)
async def register(
    request: Request,
    body: RegisterRequestDTO,
    db: AsyncSession = Depends(get_session),
):
    """
    註冊新使用者 → 建立 users.Table → 回傳 user + JWT
    """
    return await user_service.register_user(db, body, resolve_locale(request))


@auth_router.post(AUTH_POST_LOGIN, response_model=AuthResponseDTO)
async def login(
    request: Request,
    body: LoginRequestDTO,
    db: AsyncSession = Depends(get_session),
):
    """
    登入 → 驗證 email 與密碼 → 回傳 user + JWT
    """
    return await user_service.login_user(db, body, resolve_locale(request))


@auth_router.post(AUTH_POST_LOGOUT)
async def logout(request: Request, current_user=Depends(get_current_user)):
    """登出：撤銷目前這張 token"""
    revoke_token(request.state.access_token)
    if isinstance(current_user, TrialUser):
        clear_trial_session(current_user.session_id)
    log.info("logged out", extra={"user_id": str(current_user.id)})
    return {"msg": t(resolve_locale(request), "loggedOut")}


@auth_router.get(AUTH_GET_ME, response_model=UserResponseDTO)
async def read_me(current_user=Depends(get_current_user)):
    return UserResponseDTO(user=UserRead.from_user(current_user))


@auth_router.post(AUTH_POST_TRIAL, response_model=AuthResponseDTO)
async def start_trial(request: Request, body: TrialRequestDTO | None = None):
    """
    試用模式：不建帳號，簽一張短效 token；事件只存在伺服器記憶體
    """
    locale = normalize_locale((body.locale if body else None) or resolve_locale(request))
    purge_expired_trial_sessions()
    session_id = uuid.uuid4().hex
    trial_user = TrialUser(session_id=session_id, locale=locale)
    token = jwt_manager.create_trial_token(session_id, locale)
    log.info("trial session started", extra={"session_id": session_id})
    return AuthResponseDTO(user=UserRead.from_user(trial_user), token=token)
