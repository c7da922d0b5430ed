# -*- coding: utf-8 -*-
"""
測試月曆格線與事件分桶
"""
import pytest
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from services.CalendarServer.app.router.Calendar.grid import (
    build_month_grid,
    build_calendar_days,
    bucket_events,
    events_on_day,
    shift_month,
    summarize_day,
    week_day_labels,
    week_start_for_locale,
)


@dataclass
class Ev:
    title: str
    start_time: datetime
    end_time: datetime


def _ev(title, y, m, d, hour=9, tz=timezone.utc):
    start = datetime(y, m, d, hour, tzinfo=tz)
    return Ev(title, start, start + timedelta(hours=1))


def _sunday_index(d: date) -> int:
    return (d.weekday() + 1) % 7


MONTHS = [date(y, m, 1) for y in (2023, 2024, 2025, 2026) for m in range(1, 13)]


@pytest.mark.parametrize("week_start", [0, 1])
@pytest.mark.parametrize("fixed_rows", [True, False])
def test_grid_properties(week_start, fixed_rows):
    for ref in MONTHS:
        grid = build_month_grid(ref, week_start, fixed_rows=fixed_rows)
        last = shift_month(ref, 1) - timedelta(days=1)

        assert len(grid) % 7 == 0
        assert ref in grid and last in grid
        assert all(b - a == timedelta(days=1) for a, b in zip(grid, grid[1:]))
        assert _sunday_index(grid[0]) == week_start
        if fixed_rows:
            assert len(grid) == 42
        else:
            # 不多出整週
            assert grid[6] >= ref
            assert grid[-7] <= last


def test_wednesday_month_sunday_start():
    # 2024-05-01 是星期三
    ref = date(2024, 5, 1)
    grid = build_month_grid(ref, 0, fixed_rows=False)
    assert grid[0] == date(2024, 4, 28)
    assert grid[-1] == date(2024, 6, 1)
    assert _sunday_index(grid[0]) == 0
    assert _sunday_index(grid[-1]) == 6


def test_month_aligned_to_week_boundary():
    # 2026-02-01 是星期日，28 天剛好 4 週
    grid = build_month_grid(date(2026, 2, 14), 0, fixed_rows=False)
    assert len(grid) == 28
    assert grid[0] == date(2026, 2, 1)
    assert grid[-1] == date(2026, 2, 28)

    fixed = build_month_grid(date(2026, 2, 14), 0)
    assert fixed[:28] == grid
    assert fixed[-1] == date(2026, 3, 14)


def test_grid_is_deterministic():
    assert build_month_grid(date(2024, 6, 15), 1) == build_month_grid(date(2024, 6, 1), 1)


def test_invalid_week_start():
    with pytest.raises(ValueError):
        build_month_grid(date(2024, 6, 1), 3)
    with pytest.raises(ValueError):
        week_day_labels("en", 2)


def test_week_start_for_locale():
    assert week_start_for_locale("en") == 0
    assert week_start_for_locale("zh-CN") == 1
    assert week_start_for_locale("zh-TW") == 1
    assert week_start_for_locale("fr") == 0


def test_week_day_labels_rotate():
    assert week_day_labels("en", 0)[0] == "Sun"
    assert week_day_labels("en", 1) == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    assert week_day_labels("zh-TW", 1)[0] == "週一"


def test_shift_month():
    assert shift_month(date(2024, 1, 31), -1) == date(2023, 12, 1)
    assert shift_month(date(2024, 1, 31), 1) == date(2024, 2, 1)
    assert shift_month(date(2024, 12, 15), 1) == date(2025, 1, 1)
    assert shift_month(date(2024, 6, 15), 0) == date(2024, 6, 1)


def test_events_on_day_keeps_order():
    a = _ev("A", 2024, 6, 1, 9)
    b = _ev("B", 2024, 6, 1, 14)
    c = _ev("C", 2024, 6, 2, 9)
    assert events_on_day([a, b, c], date(2024, 6, 1)) == [a, b]
    assert events_on_day([b, c, a], date(2024, 6, 1)) == [b, a]
    assert events_on_day([], date(2024, 6, 1)) == []


def test_events_on_day_uses_local_timezone():
    # UTC 5/31 20:00 = 台北 6/1 04:00
    ev = _ev("late", 2024, 5, 31, 20)
    assert events_on_day([ev], date(2024, 6, 1), "Asia/Taipei") == [ev]
    assert events_on_day([ev], date(2024, 5, 31)) == [ev]

    naive = Ev("naive", datetime(2024, 6, 1, 9), datetime(2024, 6, 1, 10))
    assert events_on_day([naive], date(2024, 6, 1)) == [naive]


def test_bucket_events_partitions_grid():
    grid = build_month_grid(date(2024, 6, 1), 0)
    events = [_ev(f"e{i}", 2024, 6, (i % 30) + 1, i % 24) for i in range(60)]
    outside = _ev("outside", 2024, 9, 1)

    buckets = bucket_events(events + [outside], grid)
    flat = [ev for d in grid for ev in buckets[d]]
    assert sorted(e.title for e in flat) == sorted(e.title for e in events)
    for d in grid:
        assert buckets[d] == events_on_day(events, d)


def test_summarize_day():
    events = [_ev(str(i), 2024, 6, 1) for i in range(5)]
    preview, more = summarize_day(events)
    assert preview == events[:2]
    assert more == 3
    assert summarize_day(events[:1]) == (events[:1], 0)


def test_build_calendar_days_flags():
    ref = date(2024, 6, 1)
    today = date(2024, 6, 10)
    grid = build_month_grid(ref, 0)
    events = [_ev("A", 2024, 6, 10), _ev("B", 2024, 6, 10, 11), _ev("C", 2024, 6, 10, 12)]
    days = build_calendar_days(grid, ref, today, selected=date(2024, 6, 12),
                               buckets=bucket_events(events, grid))
    by_date = {d.date: d for d in days}

    assert by_date[date(2024, 5, 26)].is_current_month is False
    assert by_date[date(2024, 6, 9)].is_past is True
    assert by_date[date(2024, 6, 11)].is_future is True
    assert by_date[date(2024, 6, 12)].is_selected is True

    t = by_date[today]
    assert t.is_today and not t.is_past and not t.is_future
    assert [e.title for e in t.events] == ["A", "B", "C"]
    assert [e.title for e in t.preview] == ["A", "B"]
    assert t.more_count == 1
