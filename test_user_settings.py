# -*- coding: utf-8 -*-
"""
測試使用者偏好設定和時區功能
"""
import pytest
from datetime import date, datetime, timezone
import pytz

from services.CalendarServer.app.router.User.settings import (
    UserSettings,
    get_default_user_settings,
    load_user_settings,
    local_date_to_utc_range,
    get_common_timezones,
    get_supported_locales,
)


def test_default_user_settings():
    """測試預設偏好設定"""
    settings = get_default_user_settings()

    assert settings.timezone == "UTC"
    assert settings.default_locale == "en"
    assert settings.theme == "light"


def test_timezone_conversion():
    """測試時區轉換功能"""
    settings = UserSettings(timezone="Asia/Taipei")

    utc_time = datetime(2025, 1, 21, 12, 0, 0, tzinfo=timezone.utc)
    user_time = settings.convert_utc_to_user_timezone(utc_time)

    # 台北時間應該是 UTC+8
    assert user_time.hour == 20
    assert user_time.tzinfo.zone == "Asia/Taipei"

    # naive 視為使用者當地時間
    back = settings.convert_user_timezone_to_utc(datetime(2025, 1, 21, 20, 0, 0))
    assert back == utc_time


def test_today_follows_user_timezone():
    settings = UserSettings(timezone="Asia/Taipei")
    now = datetime(2024, 5, 31, 17, 30, tzinfo=timezone.utc)
    assert settings.today(now) == date(2024, 6, 1)
    assert get_default_user_settings().today(now) == date(2024, 5, 31)


def test_invalid_timezone():
    """測試無效時區"""
    with pytest.raises(ValueError):
        UserSettings(timezone="Invalid/Timezone")


def test_unsupported_locale():
    with pytest.raises(ValueError):
        UserSettings(default_locale="fr")


def test_invalid_theme():
    with pytest.raises(ValueError):
        UserSettings(theme="blue")


def test_load_user_settings_falls_back_to_defaults():
    assert load_user_settings(None) == get_default_user_settings()
    assert load_user_settings({"timezone": "Nowhere/Else"}) == get_default_user_settings()
    loaded = load_user_settings({"theme": "dark", "default_locale": "zh-TW", "timezone": "Asia/Taipei"})
    assert loaded.theme == "dark"
    assert loaded.default_locale == "zh-TW"


def test_local_date_to_utc_range():
    start, end = local_date_to_utc_range(date(2024, 6, 1), "Asia/Taipei")
    assert start == datetime(2024, 5, 31, 16, 0, tzinfo=timezone.utc)
    assert end == datetime(2024, 6, 1, 16, 0, tzinfo=timezone.utc)


def test_local_date_range_across_dst():
    """夏令時間切換日只有 23 小時"""
    start, end = local_date_to_utc_range(date(2024, 3, 10), "America/New_York")
    assert (end - start).total_seconds() == 23 * 3600


def test_settings_serialization():
    """測試設定序列化"""
    settings = UserSettings(theme="dark", default_locale="zh-CN", timezone="Asia/Shanghai")

    settings_dict = settings.model_dump()
    assert settings_dict == {"theme": "dark", "default_locale": "zh-CN", "timezone": "Asia/Shanghai"}
    assert UserSettings.model_validate(settings_dict) == settings


def test_option_lists():
    zones = [tz["value"] for tz in get_common_timezones()]
    assert "UTC" in zones
    for zone in zones:
        pytz.timezone(zone)
    assert [loc["value"] for loc in get_supported_locales()] == ["en", "zh-CN", "zh-TW"]
