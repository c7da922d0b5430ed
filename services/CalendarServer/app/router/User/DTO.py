# -*- coding: utf-8 -*-
from pydantic import BaseModel, EmailStr, field_validator
from datetime import datetime, timezone
from typing import Optional

from .settings import UserSettings, load_user_settings


# ======= DTOs =======
class UserRead(BaseModel):
    """對外的使用者資料（不含密碼雜湊）"""
    id: str
    username: str
    email: str
    name: str
    created_at: Optional[datetime] = None
    preferences: UserSettings

    @classmethod
    def from_user(cls, u) -> "UserRead":
        created_at = getattr(u, "created_at", None)
        if created_at is not None and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return cls(
            id=str(u.id),
            username=u.username,
            email=u.email,
            name=u.name,
            created_at=created_at,
            preferences=load_user_settings(u.settings),
        )


class UpdateUserProfileDTO(BaseModel):
    username: Optional[str] = None
    email: Optional[EmailStr] = None
    name: Optional[str] = None

    @field_validator('username')
    @classmethod
    def validate_username(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if len(v) < 3 or len(v) > 20:
            raise ValueError('Username must be between 3 and 20 characters')
        return v

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError('Name must not be empty')
        return v


class UserResponseDTO(BaseModel):
    user: UserRead
