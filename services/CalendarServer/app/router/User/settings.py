# -*- coding: utf-8 -*-
from __future__ import annotations
from typing import Dict, List, Literal, Optional
from datetime import date, datetime, time, timezone
from pydantic import BaseModel, Field, field_validator
import pytz

from ...i18n import SUPPORTED_LOCALES, LOCALE_NAMES, DEFAULT_LOCALE

DEFAULT_TIMEZONE = "UTC"


# ====== 使用者偏好設定 ======

class UserSettings(BaseModel):
    """使用者偏好設定模型（存於 users.settings）"""

    theme: Literal["light", "dark"] = Field(default="light", description="主題設定")
    default_locale: str = Field(default=DEFAULT_LOCALE, description="預設語系")
    # 事件以 UTC 儲存，依此時區判斷「哪一天」
    timezone: str = Field(default=DEFAULT_TIMEZONE, description="使用者時區")

    @field_validator('default_locale')
    @classmethod
    def validate_locale(cls, v: str) -> str:
        if v not in SUPPORTED_LOCALES:
            raise ValueError(f"unsupported locale: {v}")
        return v

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """驗證時區是否有效"""
        try:
            pytz.timezone(v)
            return v
        except pytz.exceptions.UnknownTimeZoneError:
            raise ValueError(f"unknown timezone: {v}")

    def get_timezone_info(self) -> pytz.BaseTzInfo:
        return pytz.timezone(self.timezone)

    def convert_utc_to_user_timezone(self, utc_datetime: datetime) -> datetime:
        """將 UTC 時間轉換為使用者時區"""
        if utc_datetime.tzinfo is None:
            utc_datetime = utc_datetime.replace(tzinfo=timezone.utc)
        return utc_datetime.astimezone(self.get_timezone_info())

    def convert_user_timezone_to_utc(self, user_datetime: datetime) -> datetime:
        """將使用者時區時間轉換為 UTC（naive 視為使用者當地時間）"""
        if user_datetime.tzinfo is None:
            user_datetime = self.get_timezone_info().localize(user_datetime)
        return user_datetime.astimezone(timezone.utc)

    def today(self, now: Optional[datetime] = None) -> date:
        """使用者時區的今天"""
        now = now or datetime.now(timezone.utc)
        return self.convert_utc_to_user_timezone(now).date()


# ====== 預設設定 ======

def get_default_user_settings() -> UserSettings:
    """獲取預設使用者設定"""
    return UserSettings(
        theme="light",
        default_locale=DEFAULT_LOCALE,
        timezone=DEFAULT_TIMEZONE,
    )


def load_user_settings(raw: Optional[dict]) -> UserSettings:
    """從 users.settings 讀出；沒有或格式錯誤時退回預設值"""
    if not raw:
        return get_default_user_settings()
    try:
        return UserSettings.model_validate(raw)
    except ValueError:
        return get_default_user_settings()


# ====== 設定更新 DTO ======

class UpdateUserPreferencesRequest(BaseModel):
    """更新偏好設定請求"""
    theme: Optional[Literal["light", "dark"]] = Field(None, description="主題設定")
    default_locale: Optional[str] = Field(None, description="預設語系")
    timezone: Optional[str] = Field(None, description="時區設定")


class UserPreferencesResponse(BaseModel):
    preferences: UserSettings


# ====== 時區工具函數 ======

def local_date_to_utc_range(d: date, user_timezone: str) -> tuple[datetime, datetime]:
    """
    把單一 'date' 轉成 UTC 的 [當日 00:00, 隔日 00:00) 範圍。
    使用使用者時區進行轉換（夏令時間切換日也正確）。
    """
    user_tz = pytz.timezone(user_timezone)
    local_start = user_tz.localize(datetime.combine(d, time.min))
    next_day = date.fromordinal(d.toordinal() + 1)
    local_end = user_tz.localize(datetime.combine(next_day, time.min))
    return local_start.astimezone(timezone.utc), local_end.astimezone(timezone.utc)


def get_common_timezones() -> List[Dict[str, str]]:
    """獲取常用時區列表"""
    common_tz = [
        ("UTC", "UTC (UTC+0)"),
        ("Asia/Shanghai", "北京时间 (UTC+8)"),
        ("Asia/Taipei", "台北時間 (UTC+8)"),
        ("Asia/Tokyo", "Tokyo (UTC+9)"),
        ("America/New_York", "New York (UTC-5/-4)"),
        ("America/Los_Angeles", "Los Angeles (UTC-8/-7)"),
        ("Europe/London", "London (UTC+0/+1)"),
        ("Europe/Paris", "Paris (UTC+1/+2)"),
        ("Australia/Sydney", "Sydney (UTC+10/+11)"),
    ]
    return [{"value": tz[0], "label": tz[1]} for tz in common_tz]


def get_supported_locales() -> List[Dict[str, str]]:
    return [{"value": code, "label": LOCALE_NAMES[code]} for code in SUPPORTED_LOCALES]
