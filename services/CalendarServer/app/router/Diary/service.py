# -*- coding: utf-8 -*-
from __future__ import annotations
from datetime import date
from typing import List, Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError, OperationalError

from libs.LogConfig import get_logger
from ...DataAccess.Connect import get_session
from ...DataAccess.tables import diary, users
from ...errors import ValidationError, resolve_locale
from ...i18n import t, diary_header
from ...security.deps import require_registered_user
from ...router.User.service import UserService
from ...router.User.settings import UserSettings, local_date_to_utc_range
from ..Calendar.grid import events_on_day
from ..Events.repository import get_event_repository
from ...config.path import (DIARY_PREFIX,
                            DIARY_POST_GENERATE,
                            DIARY_GET_EXPORT,
                            DIARY_POST_SAVE,
                            DIARY_GET_ONE)
from .client import DiaryGenerator, get_diary_generator
from .DTO import DiaryGenerateReq, DiaryGenerateResp, DiarySaveReq, DiaryRead

log = get_logger(__name__)

diary_router = APIRouter(prefix=DIARY_PREFIX, tags=["diary"])
user_service = UserService()


def export_filename(d: date) -> str:
    return f"diary-{d.isoformat()}.txt"


def compose_export(locale: str, d: date, content: str) -> str:
    """匯出檔內容：標題行 + 空行 + 生成的日記"""
    return diary_header(locale, d) + content


async def _events_of_day(repo, d: date, prefs: UserSettings) -> List[Any]:
    try:
        range_start, range_end = local_date_to_utc_range(d, prefs.timezone)
    except (ValueError, OverflowError) as e:
        raise ValidationError("dateOutOfRange") from e
    return events_on_day(await repo.list_range(range_start, range_end), d, prefs.timezone)


@diary_router.post(DIARY_POST_GENERATE, response_model=DiaryGenerateResp)
async def generate_diary(
    request: Request,
    body: DiaryGenerateReq,
    repo=Depends(get_event_repository),
    generator: DiaryGenerator = Depends(get_diary_generator),
):
    """
    依當天的事件產生日記（不存檔）
    """
    locale = resolve_locale(request)
    prefs = user_service.get_user_preferences(request.state.current_user)

    events = await _events_of_day(repo, body.date, prefs)
    content = await generator.generate(events, locale, prefs.timezone)
    log.info("diary generated", extra={"date": body.date.isoformat(), "event_total": len(events)})
    return DiaryGenerateResp(date=body.date, locale=locale, content=content, event_total=len(events))


@diary_router.get(DIARY_GET_EXPORT, response_class=PlainTextResponse)
async def export_diary(
    request: Request,
    date_: date = Query(..., alias="date"),
    repo=Depends(get_event_repository),
    generator: DiaryGenerator = Depends(get_diary_generator),
):
    """
    產生並下載 diary-YYYY-MM-DD.txt
    """
    locale = resolve_locale(request)
    prefs = user_service.get_user_preferences(request.state.current_user)

    events = await _events_of_day(repo, date_, prefs)
    content = await generator.generate(events, locale, prefs.timezone)
    return PlainTextResponse(
        compose_export(locale, date_, content),
        media_type="text/plain; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(date_)}"'},
    )


@diary_router.post(DIARY_POST_SAVE, response_model=DiaryRead)
async def save_diary(
    request: Request,
    body: DiarySaveReq,
    current_user: users.Table = Depends(require_registered_user),
    db: AsyncSession = Depends(get_session),
):
    """
    儲存日記；同一天已有則覆蓋
    """
    locale = resolve_locale(request)
    try:
        stmt = select(diary.Table).where(
            diary.Table.user_id == current_user.id,
            diary.Table.diary_date == body.date,
        )
        entry = (await db.execute(stmt)).scalar_one_or_none()
        if entry is None:
            entry = diary.Table(user_id=current_user.id, diary_date=body.date, content=body.content)
        else:
            entry.content = body.content
        entry.locale = body.locale or locale

        db.add(entry)
        await db.commit()
        await db.refresh(entry)
        return DiaryRead.model_validate(entry)
    except OperationalError as e:
        await db.rollback()
        log.error("save_diary database unavailable: %s", e)
        raise HTTPException(status_code=503, detail=t(locale, "databaseUnavailable"))
    except SQLAlchemyError:
        await db.rollback()
        log.exception("save_diary failed")
        raise HTTPException(status_code=500, detail=t(locale, "requestFailed"))


@diary_router.get(DIARY_GET_ONE, response_model=DiaryRead)
async def get_diary(
    request: Request,
    date_: date = Query(..., alias="date"),
    current_user: users.Table = Depends(require_registered_user),
    db: AsyncSession = Depends(get_session),
):
    stmt = select(diary.Table).where(
        diary.Table.user_id == current_user.id,
        diary.Table.diary_date == date_,
    )
    entry = (await db.execute(stmt)).scalar_one_or_none()
    if entry is None:
        raise HTTPException(status_code=404, detail=t(resolve_locale(request), "diaryNotFound"))
    return DiaryRead.model_validate(entry)
