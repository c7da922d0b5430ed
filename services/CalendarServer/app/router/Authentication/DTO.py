from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, EmailStr, field_validator

from ..User.DTO import UserRead

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 20
PASSWORD_MIN_LENGTH = 8


class RegisterRequestDTO(BaseModel):
    username: str
    email: EmailStr
    password: str
    name: Optional[str] = None

    @field_validator('username')
    @classmethod
    def validate_username(cls, v: str) -> str:
        if not v or not isinstance(v, str):
            raise ValueError('This field is required')

        v = v.strip()
        if len(v) < USERNAME_MIN_LENGTH or len(v) > USERNAME_MAX_LENGTH:
            raise ValueError('Username must be between 3 and 20 characters')

        return v

    @field_validator('password')
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not v or not isinstance(v, str):
            raise ValueError('This field is required')

        if len(v) < PASSWORD_MIN_LENGTH:
            raise ValueError('Password must be at least 8 characters')

        return v

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        # 空字串視為沒填，註冊時以 username 代替
        if v is None:
            return None
        v = v.strip()
        return v or None


class LoginRequestDTO(BaseModel):
    email: EmailStr
    password: str

    @field_validator('password')
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not v:
            raise ValueError('This field is required')
        return v


class TrialRequestDTO(BaseModel):
    locale: Optional[str] = None


class AuthResponseDTO(BaseModel):
    user: UserRead
    token: str
    token_type: str = "bearer"
