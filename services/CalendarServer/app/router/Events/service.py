# -*- coding: utf-8 -*-
from __future__ import annotations
import uuid
from typing import Optional, Tuple, Any, Dict
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Path, Request
from sqlalchemy.exc import SQLAlchemyError, OperationalError

from libs.LogConfig import get_logger
from ...errors import ValidationError, resolve_locale
from ...i18n import t
from ...router.User.service import UserService
from ...router.User.settings import UserSettings, local_date_to_utc_range
from ...config.path import (EVENTS_PREFIX,
                            EVENTS_GET_LIST,
                            EVENTS_POST_CREATE,
                            EVENTS_GET_ONE,
                            EVENTS_PUT_REPLACE,
                            EVENTS_PATCH_UPDATE,
                            EVENTS_DELETE_ONE)
from .repository import get_event_repository

from .DTO import (
    EventCreate, EventRead, EventListResp, EventUpdate, OkResp
)

log = get_logger(__name__)

events_router = APIRouter(prefix=EVENTS_PREFIX, tags=["events"])

# ====== User Service 實例 ======
user_service = UserService()

# ====== utils ======

def _date_range_to_utc(
    start_d: Optional[date],
    end_d: Optional[date],
    user_timezone: str,
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    本地日期區間 → UTC 的 [start_d 00:00, end_d 隔日 00:00)
    只給一端時視為單日。
    """
    if start_d and not end_d:
        end_d = start_d
    elif end_d and not start_d:
        start_d = end_d
    if not start_d:
        return None, None
    s0, _ = local_date_to_utc_range(start_d, user_timezone)
    _, e1 = local_date_to_utc_range(end_d, user_timezone)
    return s0, e1


def to_event_read(ev, prefs: UserSettings) -> EventRead:
    """轉成回應物件，時間換成使用者時區（不動到 ORM 物件本身）"""
    item = EventRead.model_validate(ev)
    item.start_time = prefs.convert_utc_to_user_timezone(item.start_time)
    item.end_time = prefs.convert_utc_to_user_timezone(item.end_time)
    if item.created_at is not None:
        item.created_at = prefs.convert_utc_to_user_timezone(item.created_at)
    if item.updated_at is not None:
        item.updated_at = prefs.convert_utc_to_user_timezone(item.updated_at)
    return item


def _normalize_times(data: Dict[str, Any], prefs: UserSettings) -> Dict[str, Any]:
    # 不帶時區的時間視為使用者當地時間，一律以 UTC 存
    for key in ("start_time", "end_time"):
        if data.get(key) is not None:
            data[key] = prefs.convert_user_timezone_to_utc(data[key])
    return data


def _check_time_order(start_time: datetime, end_time: datetime) -> None:
    if end_time < start_time:
        raise ValidationError("eventTimeOrder")


async def _get_event_or_404(repo, event_id: uuid.UUID, locale: str):
    ev = await repo.get(event_id)
    if ev is None:
        raise HTTPException(status_code=404, detail=t(locale, "eventNotFound"))
    return ev


async def _write(locale: str, action: str, coro):
    """寫入類操作的共用錯誤處理（repository 已負責 rollback）"""
    try:
        return await coro
    except OperationalError as e:
        log.error("%s database unavailable: %s", action, e)
        raise HTTPException(status_code=503, detail=t(locale, "databaseUnavailable"))
    except SQLAlchemyError:
        log.exception("%s failed", action)
        raise HTTPException(status_code=500, detail=t(locale, "requestFailed"))

# ====== 路由 ======

@events_router.get(EVENTS_GET_LIST, response_model=EventListResp)
async def list_events(
    request: Request,
    start_date: Optional[date] = Query(default=None, description="ISO local date"),
    end_date: Optional[date] = Query(default=None, description="ISO local date"),
    repo=Depends(get_event_repository),
):
    """
    事件列表：與本地日期區間有交集的事件，依開始時間遞增
    """
    current_user = request.state.current_user
    prefs = user_service.get_user_preferences(current_user)

    range_start, range_end = _date_range_to_utc(start_date, end_date, prefs.timezone)
    rows = await repo.list_range(range_start, range_end, overlap=True)
    return EventListResp(
        items=[to_event_read(r, prefs) for r in rows],
        item_total=len(rows),
    )


@events_router.post(EVENTS_POST_CREATE, response_model=EventRead, status_code=201)
async def create_event(
    request: Request,
    body: EventCreate,
    repo=Depends(get_event_repository),
):
    """
    新增事件
    """
    locale = resolve_locale(request)
    prefs = user_service.get_user_preferences(request.state.current_user)

    data = _normalize_times(body.model_dump(), prefs)
    _check_time_order(data["start_time"], data["end_time"])

    ev = await _write(locale, "create_event", repo.create(data))
    log.info("event created", extra={"event_id": str(ev.id)})
    return to_event_read(ev, prefs)


@events_router.get(EVENTS_GET_ONE, response_model=EventRead)
async def get_event(
    request: Request,
    event_id: uuid.UUID = Path(...),
    repo=Depends(get_event_repository),
):
    """
    取得單一事件內容
    """
    prefs = user_service.get_user_preferences(request.state.current_user)
    ev = await _get_event_or_404(repo, event_id, resolve_locale(request))
    return to_event_read(ev, prefs)


@events_router.put(EVENTS_PUT_REPLACE, response_model=EventRead)
async def replace_event(
    request: Request,
    body: EventCreate,
    event_id: uuid.UUID = Path(...),
    repo=Depends(get_event_repository),
):
    """
    整筆取代事件
    """
    locale = resolve_locale(request)
    prefs = user_service.get_user_preferences(request.state.current_user)

    ev = await _get_event_or_404(repo, event_id, locale)
    data = _normalize_times(body.model_dump(), prefs)
    _check_time_order(data["start_time"], data["end_time"])

    ev = await _write(locale, "replace_event", repo.update(ev, data))
    return to_event_read(ev, prefs)


@events_router.patch(EVENTS_PATCH_UPDATE, response_model=EventRead)
async def update_event(
    request: Request,
    body: EventUpdate,
    event_id: uuid.UUID = Path(...),
    repo=Depends(get_event_repository),
):
    """
    更新事件（部分欄位）；合併後仍須 end_time >= start_time
    """
    locale = resolve_locale(request)
    prefs = user_service.get_user_preferences(request.state.current_user)

    ev = await _get_event_or_404(repo, event_id, locale)
    patch = body.model_dump(exclude_unset=True)
    # 必填欄位不能被清成 null
    for key in ("title", "start_time", "end_time", "tags", "participants"):
        if key in patch and patch[key] is None:
            del patch[key]
    patch = _normalize_times(patch, prefs)

    _check_time_order(
        patch.get("start_time", ev.start_time),
        patch.get("end_time", ev.end_time),
    )

    ev = await _write(locale, "update_event", repo.update(ev, patch))
    return to_event_read(ev, prefs)


@events_router.delete(EVENTS_DELETE_ONE, response_model=OkResp)
async def delete_event(
    request: Request,
    event_id: uuid.UUID = Path(...),
    repo=Depends(get_event_repository),
):
    """
    刪除事件
    """
    locale = resolve_locale(request)
    ev = await _get_event_or_404(repo, event_id, locale)
    await _write(locale, "delete_event", repo.delete(ev))
    return OkResp()
