# -*- coding: utf-8 -*-
"""
月曆格線與事件分桶

全部是純函式：不碰資料庫、不碰時鐘（today 由呼叫端傳入），方便單元測試。

week_start 慣例：0 = 星期日開頭，1 = 星期一開頭。
"""
from __future__ import annotations
import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import pytz

from ...i18n import normalize_locale, weekday_short_names

WEEK_DAYS = 7
FIXED_ROWS = 6
PREVIEW_LIMIT = 2

# 各語系的一週起始日（en 從星期日開始，中文從星期一開始）
_LOCALE_WEEK_START = {
    "en": 0,
    "zh-CN": 1,
    "zh-TW": 1,
}


def week_start_for_locale(locale: Optional[str]) -> int:
    return _LOCALE_WEEK_START[normalize_locale(locale)]


def _check_week_start(week_start: int) -> None:
    if week_start not in (0, 1):
        raise ValueError(f"week_start must be 0 (Sunday) or 1 (Monday), got {week_start!r}")


def build_month_grid(reference: date, week_start: int = 0, fixed_rows: bool = True) -> List[date]:
    """
    reference 所在月份的可見日期，含前後月份補齊的日子，遞增且連續。

    fixed_rows=True 時一律補到 6 週 = 42 天；False 時回傳自然的 4/5/6 週。
    """
    _check_week_start(week_start)
    # calendar 模組的 firstweekday：0 = 星期一，6 = 星期日
    cal = calendar.Calendar(firstweekday=6 if week_start == 0 else 0)
    grid = list(cal.itermonthdates(reference.year, reference.month))

    if fixed_rows:
        while len(grid) < FIXED_ROWS * WEEK_DAYS:
            grid.append(grid[-1] + timedelta(days=1))
    return grid


def shift_month(reference: date, delta: int) -> date:
    """delta 個月之後（或之前）那個月的 1 號"""
    index = reference.year * 12 + (reference.month - 1) + delta
    return date(index // 12, index % 12 + 1, 1)


def week_day_labels(locale: Optional[str], week_start: int) -> List[str]:
    _check_week_start(week_start)
    names = weekday_short_names(locale)
    return names[week_start:] + names[:week_start]


# ====== 事件分桶 ======

def resolve_tz(tz: Any):
    if tz is None:
        return timezone.utc
    if isinstance(tz, str):
        return pytz.timezone(tz)
    return tz


def local_day(instant: datetime, tz: Any = None) -> date:
    """事件開始時間在 tz 下是哪一天（naive 視為 UTC）"""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(resolve_tz(tz)).date()


def events_on_day(events: Iterable[Any], day: date, tz: Any = None) -> List[Any]:
    """開始時間落在 day 的事件，保留原本順序"""
    zone = resolve_tz(tz)
    return [ev for ev in events if local_day(ev.start_time, zone) == day]


def bucket_events(events: Iterable[Any], days: Sequence[date], tz: Any = None) -> Dict[date, List[Any]]:
    """
    把事件分到格線上的每一天；格線範圍內的事件恰好出現一次，範圍外的丟掉。
    """
    zone = resolve_tz(tz)
    buckets: Dict[date, List[Any]] = {d: [] for d in days}
    for ev in events:
        bucket = buckets.get(local_day(ev.start_time, zone))
        if bucket is not None:
            bucket.append(ev)
    return buckets


def summarize_day(events: Sequence[Any], limit: int = PREVIEW_LIMIT) -> Tuple[List[Any], int]:
    """格子裡只顯示前 limit 筆，其餘以「還有 N 項」表示"""
    preview = list(events[:limit])
    return preview, max(len(events) - limit, 0)


@dataclass
class CalendarDay:
    date: date
    is_current_month: bool
    is_today: bool
    is_past: bool
    is_future: bool
    is_selected: bool
    events: List[Any] = field(default_factory=list)
    preview: List[Any] = field(default_factory=list)
    more_count: int = 0


def build_calendar_days(
    grid: Sequence[date],
    reference: date,
    today: date,
    selected: Optional[date] = None,
    buckets: Optional[Dict[date, List[Any]]] = None,
) -> List[CalendarDay]:
    buckets = buckets or {}
    days = []
    for d in grid:
        matched = list(buckets.get(d, []))
        preview, more = summarize_day(matched)
        days.append(CalendarDay(
            date=d,
            is_current_month=(d.year == reference.year and d.month == reference.month),
            is_today=(d == today),
            is_past=(d < today),
            is_future=(d > today),
            is_selected=(selected is not None and d == selected),
            events=matched,
            preview=preview,
            more_count=more,
        ))
    return days
