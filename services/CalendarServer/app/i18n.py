# -*- coding: utf-8 -*-
"""
多語系字串表

(locale, key) → 字串；模組載入時建好一次，之後只做精確查詢。
找不到的 locale 或 key 一律退回 en（基準語系），en 也沒有就回傳 key 本身。
"""
from __future__ import annotations
from datetime import date
from typing import Dict, List

DEFAULT_LOCALE = "en"
SUPPORTED_LOCALES = ("en", "zh-CN", "zh-TW")

LOCALE_NAMES = {
    "en": "English",
    "zh-CN": "简体中文",
    "zh-TW": "繁體中文",
}

_EN: Dict[str, str] = {
    # 月曆
    "today": "Today",
    "more": "More",
    "items": "items",
    "noEvents": "No events",
    "exportDiary": "Export Diary",
    "addSchedule": "Add Schedule",
    # 事件欄位
    "title": "Title",
    "startTime": "Start Time",
    "endTime": "End Time",
    "location": "Location",
    "description": "Description",
    "category": "Category",
    "priority": "Priority",
    "tags": "Tags",
    "participants": "Participants",
    "work": "Work",
    "personal": "Personal",
    "meeting": "Meeting",
    "high": "High",
    "medium": "Medium",
    "low": "Low",
    # 驗證
    "requiredField": "This field is required",
    "usernameRequirements": "Username must be between 3 and 20 characters",
    "invalidEmail": "Please enter a valid email address",
    "passwordRequirements": "Password must be at least 8 characters",
    "passwordMismatch": "Passwords do not match",
    "eventTimeOrder": "End time must not be earlier than start time",
    "dateOutOfRange": "Date is out of the supported range",
    # 帳號
    "trialExhausted": "No trial attempts remaining, please register",
    "trialStarted": "Trial mode started, {remaining} attempts remaining",
    "loggedOut": "Logged out",
    "notLoggedIn": "Please log in or start trial mode first",
    # 日記
    "apiKeyNotConfigured": "API Key not configured",
    "apiRequestFailed": "API request failed: {status} {reason}",
    "apiError": "API error: {message}",
    "unknownError": "Unknown error",
    "unableToExtractContent": "Unable to extract content from API response",
    "noEventsForDate": "No events scheduled for the selected date",
    "diaryGenerationFailed": "Error generating diary, please try again later",
    "diarySaved": "Diary saved to {path}",
    "diaryNotFound": "No diary saved for this date",
    # 帳號 / 事件
    "usernameTaken": "Username is already taken",
    "emailTaken": "Email is already in use",
    "invalidCredentials": "Invalid email or password",
    "accountDisabled": "Account disabled",
    "trialNotAllowed": "Not available in trial mode",
    "eventNotFound": "Event not found",
    "databaseUnavailable": "Database temporarily unavailable, please try again later",
    "requestFailed": "Error processing the request, please try again later",
}

_ZH_CN: Dict[str, str] = {
    "today": "今天",
    "more": "还有",
    "items": "项",
    "noEvents": "暂无日程",
    "exportDiary": "导出日记",
    "addSchedule": "添加日程",
    "title": "标题",
    "startTime": "开始时间",
    "endTime": "结束时间",
    "location": "地点",
    "description": "描述",
    "category": "类别",
    "priority": "优先级",
    "tags": "标签",
    "participants": "参与人",
    "work": "工作",
    "personal": "个人",
    "meeting": "会议",
    "high": "高",
    "medium": "中",
    "low": "低",
    "requiredField": "此字段为必填项",
    "usernameRequirements": "用户名长度必须在3到20个字符之间",
    "invalidEmail": "请输入有效的邮箱地址",
    "passwordRequirements": "密码长度至少为8个字符",
    "passwordMismatch": "两次输入的密码不一致",
    "eventTimeOrder": "结束时间不能早于开始时间",
    "dateOutOfRange": "日期超出可显示的范围",
    "trialExhausted": "试用次数已用完，请注册账号",
    "trialStarted": "已进入试用模式，剩余 {remaining} 次",
    "loggedOut": "已退出登录",
    "notLoggedIn": "请先登录或进入试用模式",
    "apiKeyNotConfigured": "API Key 未配置",
    "apiRequestFailed": "API 请求失败: {status} {reason}",
    "apiError": "API 错误: {message}",
    "unknownError": "未知错误",
    "unableToExtractContent": "无法从 API 响应中提取内容",
    "noEventsForDate": "所选日期没有日程安排",
    "diaryGenerationFailed": "生成日记时出错，请稍后重试",
    "diarySaved": "日记已保存到 {path}",
    "diaryNotFound": "该日期没有已保存的日记",
    "usernameTaken": "用户名已被使用",
    "emailTaken": "邮箱已被使用",
    "invalidCredentials": "邮箱或密码错误",
    "accountDisabled": "账号已停用",
    "trialNotAllowed": "试用模式无法使用此功能",
    "eventNotFound": "找不到该日程",
    "databaseUnavailable": "数据库服务暂时不可用，请稍后再试",
    "requestFailed": "处理请求时出错，请稍后再试",
}

_ZH_TW: Dict[str, str] = {
    "today": "今天",
    "more": "還有",
    "items": "項",
    "noEvents": "暫無日程",
    "exportDiary": "匯出日記",
    "addSchedule": "新增日程",
    "title": "標題",
    "startTime": "開始時間",
    "endTime": "結束時間",
    "location": "地點",
    "description": "描述",
    "category": "類別",
    "priority": "優先級",
    "tags": "標籤",
    "participants": "參與人",
    "work": "工作",
    "personal": "個人",
    "meeting": "會議",
    "high": "高",
    "medium": "中",
    "low": "低",
    "requiredField": "此欄位為必填",
    "usernameRequirements": "使用者名稱長度必須在3到20個字元之間",
    "invalidEmail": "請輸入有效的電子郵件地址",
    "passwordRequirements": "密碼長度至少為8個字元",
    "passwordMismatch": "兩次輸入的密碼不一致",
    "eventTimeOrder": "結束時間不能早於開始時間",
    "dateOutOfRange": "日期超出可顯示的範圍",
    "trialExhausted": "試用次數已用完，請註冊帳號",
    "trialStarted": "已進入試用模式，剩餘 {remaining} 次",
    "loggedOut": "已登出",
    "notLoggedIn": "請先登入或進入試用模式",
    "apiKeyNotConfigured": "API Key 未設定",
    "apiRequestFailed": "API 請求失敗: {status} {reason}",
    "apiError": "API 錯誤: {message}",
    "unknownError": "未知錯誤",
    "unableToExtractContent": "無法從 API 回應中提取內容",
    "noEventsForDate": "所選日期沒有日程安排",
    "diaryGenerationFailed": "生成日記時出錯，請稍後再試",
    "diarySaved": "日記已儲存到 {path}",
    "diaryNotFound": "該日期沒有已儲存的日記",
    # 帳號 / 事件
    "usernameTaken": "使用者名稱已被使用",
    "emailTaken": "電子郵件已被使用",
    "invalidCredentials": "電子郵件或密碼錯誤",
    "accountDisabled": "帳號已停用",
    "trialNotAllowed": "試用模式無法使用此功能",
    "eventNotFound": "找不到此日程",
    "databaseUnavailable": "資料庫服務暫時無法使用，請稍後再試",
    "requestFailed": "處理請求時發生錯誤，請稍後再試",
}

TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "en": _EN,
    "zh-CN": _ZH_CN,
    "zh-TW": _ZH_TW,
}

# 星期名稱：索引 0 = 星期日（與 week_start 0/1 的慣例一致）
_WEEKDAY_SHORT: Dict[str, List[str]] = {
    "en": ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"],
    "zh-CN": ["周日", "周一", "周二", "周三", "周四", "周五", "周六"],
    "zh-TW": ["週日", "週一", "週二", "週三", "週四", "週五", "週六"],
}

_WEEKDAY_LONG: Dict[str, List[str]] = {
    "en": ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"],
    "zh-CN": ["星期日", "星期一", "星期二", "星期三", "星期四", "星期五", "星期六"],
    "zh-TW": ["星期日", "星期一", "星期二", "星期三", "星期四", "星期五", "星期六"],
}

_MONTH_LONG = ["January", "February", "March", "April", "May", "June", "July",
               "August", "September", "October", "November", "December"]
_MONTH_SHORT = [m[:3] for m in _MONTH_LONG]


def normalize_locale(locale: str | None) -> str:
    """不支援的語系退回 en"""
    if locale in TRANSLATIONS:
        return locale
    return DEFAULT_LOCALE


def t(locale: str | None, key: str, **params) -> str:
    """查字串；params 以 str.format 帶入"""
    table = TRANSLATIONS.get(locale or DEFAULT_LOCALE) or TRANSLATIONS[DEFAULT_LOCALE]
    text = table.get(key)
    if text is None:
        text = TRANSLATIONS[DEFAULT_LOCALE].get(key, key)
    if params:
        try:
            return text.format(**params)
        except (KeyError, IndexError):
            return text
    return text


def _sunday_index(d: date) -> int:
    # date.weekday(): 星期一 = 0；轉成星期日 = 0
    return (d.weekday() + 1) % 7


def weekday_short_names(locale: str | None) -> List[str]:
    return list(_WEEKDAY_SHORT[normalize_locale(locale)])


def weekday_long_name(locale: str | None, d: date) -> str:
    return _WEEKDAY_LONG[normalize_locale(locale)][_sunday_index(d)]


def format_month_title(locale: str | None, d: date) -> str:
    """en: 'June 2024'；中文: '2024年06月'"""
    if normalize_locale(locale) == "en":
        return f"{_MONTH_LONG[d.month - 1]} {d.year}"
    return f"{d.year}年{d.month:02d}月"


def format_long_date(locale: str | None, d: date) -> str:
    """en: 'Saturday, June 1, 2024'；中文: '2024年06月01日 星期六'"""
    if normalize_locale(locale) == "en":
        return f"{weekday_long_name(locale, d)}, {_MONTH_LONG[d.month - 1]} {d.day}, {d.year}"
    return f"{d.year}年{d.month:02d}月{d.day:02d}日 {weekday_long_name(locale, d)}"


def format_day_label(locale: str | None, d: date, *, with_month: bool) -> str:
    """月曆格子的日期；非本月的格子帶上月份（en: 'Jul 1'；中文: '7月1日'）"""
    if not with_month:
        return str(d.day)
    if normalize_locale(locale) == "en":
        return f"{_MONTH_SHORT[d.month - 1]} {d.day}"
    return f"{d.month}月{d.day}日"


def diary_header(locale: str | None, d: date) -> str:
    """匯出日記檔的標題行（後面接一個空行）"""
    loc = normalize_locale(locale)
    prefix = {"en": "Diary", "zh-CN": "日记", "zh-TW": "日記"}[loc]
    return f"{prefix} - {format_long_date(loc, d)}\n\n"
