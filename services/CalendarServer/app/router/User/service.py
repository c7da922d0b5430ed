# -*- coding: utf-8 -*-
from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from sqlalchemy.exc import SQLAlchemyError, IntegrityError, OperationalError

from libs.LogConfig import get_logger
from ...DataAccess.Connect import get_session
from ...DataAccess.tables import users
from ...security.jwt_manager import JWTManager, WWW_BEARER
from ...security.deps import jwt_manager as shared_jwt_manager, require_registered_user
from ...security.trial import is_trial_user
from ...errors import resolve_locale
from ...i18n import t, normalize_locale
from ..Authentication.DTO import RegisterRequestDTO, LoginRequestDTO, AuthResponseDTO
from .DTO import UserRead, UpdateUserProfileDTO, UserResponseDTO
from .settings import (
    UserSettings,
    UpdateUserPreferencesRequest,
    UserPreferencesResponse,
    get_default_user_settings,
    load_user_settings,
    get_common_timezones,
    get_supported_locales,
)

log = get_logger(__name__)


# ======= Service（商業邏輯）=======
class UserService:
    """使用者註冊 / 登入 / 修改資料 / 偏好設定 的應用服務。"""

    def __init__(self, jwt_manager: Optional[JWTManager] = None):
        self.jwt = jwt_manager or shared_jwt_manager

    # 註冊：成功直接回 user + token
    async def register_user(
        self, db: AsyncSession, body: RegisterRequestDTO, locale: str = "en"
    ) -> AuthResponseDTO:
        try:
            stmt = select(users.Table).where(users.Table.username == body.username)
            exists = await db.execute(stmt)
            if exists.scalar_one_or_none():
                raise HTTPException(status_code=400, detail=t(locale, "usernameTaken"))

            stmt = select(users.Table).where(users.Table.email == body.email)
            exists = await db.execute(stmt)
            if exists.scalar_one_or_none():
                raise HTTPException(status_code=400, detail=t(locale, "emailTaken"))

            # 註冊當下的語系成為預設語系
            default_settings = get_default_user_settings()
            default_settings.default_locale = normalize_locale(locale)

            user = users.Table(
                username=body.username,
                email=body.email,
                name=body.name or body.username,
                password_hash=self.jwt.hash_password(body.password),
                role=users.Role.user,
                active=True,
                settings=default_settings.model_dump(),
            )
            db.add(user)
            await db.commit()
            await db.refresh(user)

            log.info("user registered", extra={"user_id": user.id})
            return AuthResponseDTO(user=UserRead.from_user(user), token=self._issue_token(user))

        except HTTPException:
            await db.rollback()
            raise
        except IntegrityError as e:
            # 唯一性約束（併發註冊時的備用檢查）
            await db.rollback()
            log.warning("register_user integrity error: %s", e)
            raise HTTPException(status_code=400, detail=t(locale, "emailTaken"))
        except OperationalError as e:
            await db.rollback()
            log.error("register_user database unavailable: %s", e)
            raise HTTPException(status_code=503, detail=t(locale, "databaseUnavailable"))
        except SQLAlchemyError:
            await db.rollback()
            log.exception("register_user failed")
            raise HTTPException(status_code=500, detail=t(locale, "requestFailed"))

    # 登入
    async def login_user(
        self, db: AsyncSession, body: LoginRequestDTO, locale: str = "en"
    ) -> AuthResponseDTO:
        try:
            stmt = select(users.Table).where(users.Table.email == body.email)
            result = await db.execute(stmt)
            user: Optional[users.Table] = result.scalar_one_or_none()

            if not user or not self.jwt.verify_password(body.password, user.password_hash):
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail=t(locale, "invalidCredentials"),
                    headers=WWW_BEARER,
                )

            if not user.active:
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail=t(locale, "accountDisabled"),
                    headers=WWW_BEARER,
                )

            return AuthResponseDTO(user=UserRead.from_user(user), token=self._issue_token(user))

        except HTTPException:
            raise
        except OperationalError as e:
            log.error("login_user database unavailable: %s", e)
            raise HTTPException(status_code=503, detail=t(locale, "databaseUnavailable"))
        except SQLAlchemyError:
            log.exception("login_user failed")
            raise HTTPException(status_code=500, detail=t(locale, "requestFailed"))

    # 修改基本資料（不含密碼）
    async def update_profile(
        self, db: AsyncSession, current_user: users.Table, body: UpdateUserProfileDTO, locale: str = "en"
    ) -> UserResponseDTO:
        try:
            patch = body.model_dump(exclude_unset=True, exclude_none=True)

            new_username = patch.get("username")
            new_email = patch.get("email")
            if (new_username and new_username != current_user.username) or (
                new_email and new_email != current_user.email
            ):
                stmt = (
                    select(users.Table)
                    .where(or_(users.Table.username == new_username, users.Table.email == new_email))
                    .where(users.Table.id != current_user.id)
                )
                result = await db.execute(stmt)
                other = result.scalars().first()
                if other is not None:
                    key = "usernameTaken" if other.username == new_username else "emailTaken"
                    raise HTTPException(status_code=400, detail=t(locale, key))

            for k, v in patch.items():
                setattr(current_user, k, v)

            db.add(current_user)
            await db.commit()
            await db.refresh(current_user)

            return UserResponseDTO(user=UserRead.from_user(current_user))

        except HTTPException:
            await db.rollback()
            raise
        except IntegrityError as e:
            await db.rollback()
            log.warning("update_profile integrity error: %s", e)
            raise HTTPException(status_code=400, detail=t(locale, "emailTaken"))
        except OperationalError as e:
            await db.rollback()
            log.error("update_profile database unavailable: %s", e)
            raise HTTPException(status_code=503, detail=t(locale, "databaseUnavailable"))
        except SQLAlchemyError:
            await db.rollback()
            log.exception("update_profile failed")
            raise HTTPException(status_code=500, detail=t(locale, "requestFailed"))

    # ---- 偏好設定 ----
    def get_user_preferences(self, current_user) -> UserSettings:
        return load_user_settings(getattr(current_user, "settings", None))

    async def update_user_preferences(
        self,
        db: AsyncSession,
        current_user: users.Table,
        body: UpdateUserPreferencesRequest,
        locale: str = "en",
    ) -> UserPreferencesResponse:
        current_settings = self.get_user_preferences(current_user)
        update_data = body.model_dump(exclude_unset=True, exclude_none=True)
        try:
            # 重新驗證，讓不支援的語系 / 時區回 422
            new_settings = UserSettings.model_validate({**current_settings.model_dump(), **update_data})
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

        try:
            current_user.settings = new_settings.model_dump()
            db.add(current_user)
            await db.commit()
            await db.refresh(current_user)
            return UserPreferencesResponse(preferences=new_settings)
        except OperationalError as e:
            await db.rollback()
            log.error("update_user_preferences database unavailable: %s", e)
            raise HTTPException(status_code=503, detail=t(locale, "databaseUnavailable"))
        except SQLAlchemyError:
            await db.rollback()
            log.exception("update_user_preferences failed")
            raise HTTPException(status_code=500, detail=t(locale, "requestFailed"))

    # ---- internal helpers ----
    def _issue_token(self, user: users.Table) -> str:
        return self.jwt.create_token(
            subject=str(user.id),
            extra={"username": user.username, "role": str(user.role.value)},
        )


# ======= Routers =======
from ...config.path import (USER_PREFIX,
                            USER_PATCH_PROFILE,
                            USER_GET_PREFERENCES,
                            USER_PATCH_PREFERENCES,
                            USER_GET_TIMEZONES)

user_router = APIRouter(prefix=USER_PREFIX, tags=["users"])
service = UserService()


@user_router.patch(USER_PATCH_PROFILE, response_model=UserResponseDTO)
async def update_profile(
    request: Request,
    body: UpdateUserProfileDTO,
    current_user: users.Table = Depends(require_registered_user),
    db: AsyncSession = Depends(get_session),
):
    return await service.update_profile(db, current_user, body, resolve_locale(request))


@user_router.get(USER_GET_PREFERENCES, response_model=UserPreferencesResponse)
async def get_preferences(request: Request):
    """獲取偏好設定（試用身分回傳其臨時設定）"""
    current_user = request.state.current_user
    return UserPreferencesResponse(preferences=service.get_user_preferences(current_user))


@user_router.patch(USER_PATCH_PREFERENCES, response_model=UserPreferencesResponse)
async def update_preferences(
    request: Request,
    body: UpdateUserPreferencesRequest,
    current_user: users.Table = Depends(require_registered_user),
    db: AsyncSession = Depends(get_session),
):
    return await service.update_user_preferences(db, current_user, body, resolve_locale(request))


@user_router.get(USER_GET_TIMEZONES)
async def get_available_options(request: Request):
    """可選的時區與語系"""
    return {
        "timezones": get_common_timezones(),
        "locales": get_supported_locales(),
        "trial": is_trial_user(request.state.current_user),
    }
