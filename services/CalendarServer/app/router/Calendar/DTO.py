# -*- coding: utf-8 -*-
from __future__ import annotations
import datetime as dt
from typing import List, Optional
from pydantic import BaseModel

from ..Events.DTO import EventRead


class CalendarDayRead(BaseModel):
    date: dt.date
    label: str
    is_current_month: bool
    is_today: bool
    is_past: bool
    is_future: bool
    is_selected: bool
    events: List[EventRead]
    preview: List[EventRead]
    more_count: int
    more_label: Optional[str] = None


class MonthResp(BaseModel):
    reference: dt.date
    today: dt.date
    selected: Optional[dt.date] = None
    title: str
    locale: str
    week_start: int
    week_days: List[str]
    days: List[CalendarDayRead]


class DayResp(BaseModel):
    date: dt.date
    title: str
    items: List[EventRead]
    item_total: int
