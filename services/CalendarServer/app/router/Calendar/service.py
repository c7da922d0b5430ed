# -*- coding: utf-8 -*-
from __future__ import annotations
from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Request

from ...errors import ValidationError, resolve_locale
from ...i18n import t, format_month_title, format_long_date, format_day_label
from ...router.User.service import UserService
from ...router.User.settings import local_date_to_utc_range
from ..Events.repository import get_event_repository
from ..Events.service import to_event_read
from ...config.path import (CALENDAR_PREFIX,
                            CALENDAR_GET_MONTH,
                            CALENDAR_GET_DAY)
from .DTO import CalendarDayRead, MonthResp, DayResp
from .grid import (
    build_month_grid,
    build_calendar_days,
    bucket_events,
    events_on_day,
    shift_month,
    week_day_labels,
    week_start_for_locale,
)

calendar_router = APIRouter(prefix=CALENDAR_PREFIX, tags=["calendar"])
user_service = UserService()


def more_label(locale: str, count: int) -> Optional[str]:
    """格子底下的「還有 N 項」"""
    if count <= 0:
        return None
    sep = " " if locale == "en" else ""
    return f"{t(locale, 'more')}{sep}{count}{sep}{t(locale, 'items')}"


def _grid_range_to_utc(grid, user_timezone: str):
    range_start, _ = local_date_to_utc_range(grid[0], user_timezone)
    _, range_end = local_date_to_utc_range(grid[-1], user_timezone)
    return range_start, range_end


@calendar_router.get(CALENDAR_GET_MONTH, response_model=MonthResp)
async def get_month(
    request: Request,
    date_: Optional[date] = Query(default=None, alias="date", description="參考日期（預設今天）"),
    move: Optional[Literal["prev", "next", "today"]] = Query(default=None),
    selected: Optional[date] = Query(default=None),
    fixed_rows: bool = Query(default=True, description="固定 6 週"),
    repo=Depends(get_event_repository),
):
    """
    月曆：可見的日期格線 + 每天的事件（前兩筆預覽與剩餘數量）
    """
    current_user = request.state.current_user
    prefs = user_service.get_user_preferences(current_user)
    locale = resolve_locale(request)

    today = prefs.today()
    week_start = week_start_for_locale(locale)
    try:
        reference = date_ or today
        if move == "prev":
            reference = shift_month(reference, -1)
        elif move == "next":
            reference = shift_month(reference, 1)
        elif move == "today":
            reference = today

        grid = build_month_grid(reference, week_start, fixed_rows=fixed_rows)
        range_start, range_end = _grid_range_to_utc(grid, prefs.timezone)
    except (ValueError, OverflowError) as e:
        # 西元 1 年 1 月、9999 年 12 月附近，補齊的格子會超出 date 的範圍
        raise ValidationError("dateOutOfRange") from e
    events = await repo.list_range(range_start, range_end)

    buckets = bucket_events(events, grid, prefs.timezone)
    days = build_calendar_days(grid, reference, today, selected, buckets)

    return MonthResp(
        reference=reference,
        today=today,
        selected=selected,
        title=format_month_title(locale, reference),
        locale=locale,
        week_start=week_start,
        week_days=week_day_labels(locale, week_start),
        days=[
            CalendarDayRead(
                date=d.date,
                label=format_day_label(locale, d.date, with_month=not d.is_current_month),
                is_current_month=d.is_current_month,
                is_today=d.is_today,
                is_past=d.is_past,
                is_future=d.is_future,
                is_selected=d.is_selected,
                events=[to_event_read(ev, prefs) for ev in d.events],
                preview=[to_event_read(ev, prefs) for ev in d.preview],
                more_count=d.more_count,
                more_label=more_label(locale, d.more_count),
            )
            for d in days
        ],
    )


@calendar_router.get(CALENDAR_GET_DAY, response_model=DayResp)
async def get_day(
    request: Request,
    date_: Optional[date] = Query(default=None, alias="date"),
    repo=Depends(get_event_repository),
):
    """單日完整的事件清單（不截斷）"""
    prefs = user_service.get_user_preferences(request.state.current_user)
    locale = resolve_locale(request)
    day = date_ or prefs.today()

    try:
        range_start, range_end = local_date_to_utc_range(day, prefs.timezone)
    except (ValueError, OverflowError) as e:
        raise ValidationError("dateOutOfRange") from e
    events = events_on_day(await repo.list_range(range_start, range_end), day, prefs.timezone)
    return DayResp(
        date=day,
        title=format_long_date(locale, day),
        items=[to_event_read(ev, prefs) for ev in events],
        item_total=len(events),
    )
