# -*- coding: utf-8 -*-
"""
事件的存取層

已註冊使用者 → SqlEventRepository（events 表，只看得到自己的事件）
試用身分     → MemoryEventRepository（程序內的 dict，以 session 分開；登出、token 過期或重啟即消失）

兩者回傳的物件都有相同欄位，EventRead 可直接 from_attributes 轉換。
"""
from __future__ import annotations
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Depends
from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from libs.LogConfig import get_logger
from ...DataAccess.Connect import get_session
from ...DataAccess.tables import events as events_table  # events_table.Table
from ...DataAccess.tables.__Function import create_uuid7, as_utc
from ...security.deps import get_current_user
from ...security.trial import TrialUser

log = get_logger(__name__)


@dataclass
class MemoryEvent:
    title: str
    start_time: datetime
    end_time: datetime
    category: Any = None
    priority: Any = None
    location: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    participants: List[str] = field(default_factory=list)
    id: uuid.UUID = field(default_factory=create_uuid7)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None


def _normalize_row(row):
    # SQLite 取回的是 naive datetime，統一成 UTC aware
    row.start_time = as_utc(row.start_time)
    row.end_time = as_utc(row.end_time)
    if getattr(row, "created_at", None) is not None:
        row.created_at = as_utc(row.created_at)
    if getattr(row, "updated_at", None) is not None:
        row.updated_at = as_utc(row.updated_at)
    return row


class SqlEventRepository:
    def __init__(self, db: AsyncSession, user_id: int):
        self.db = db
        self.user_id = user_id

    async def list_range(
        self,
        range_start: Optional[datetime] = None,
        range_end: Optional[datetime] = None,
        overlap: bool = False,
    ) -> List[events_table.Table]:
        """
        [range_start, range_end) 內的事件，依開始時間遞增
        overlap=True：只要事件期間與範圍有交集就算；否則以開始時間判斷
        """
        conds = [events_table.Table.user_id == self.user_id]
        if range_start is not None:
            col = events_table.Table.end_time if overlap else events_table.Table.start_time
            conds.append(col >= range_start)
        if range_end is not None:
            conds.append(events_table.Table.start_time < range_end)

        stmt = (
            select(events_table.Table)
            .where(and_(*conds))
            .order_by(events_table.Table.start_time.asc(), events_table.Table.id.asc())
        )
        rows = (await self.db.execute(stmt)).scalars().all()
        return [_normalize_row(r) for r in rows]

    async def get(self, event_id: uuid.UUID) -> Optional[events_table.Table]:
        stmt = select(events_table.Table).where(
            events_table.Table.id == event_id,
            events_table.Table.user_id == self.user_id,
        )
        row = (await self.db.execute(stmt)).scalar_one_or_none()
        return _normalize_row(row) if row is not None else None

    async def create(self, data: Dict[str, Any]) -> events_table.Table:
        ev = events_table.Table(user_id=self.user_id, **data)
        self.db.add(ev)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        await self.db.refresh(ev)
        return _normalize_row(ev)

    async def update(self, ev: events_table.Table, data: Dict[str, Any]) -> events_table.Table:
        for k, v in data.items():
            setattr(ev, k, v)
        self.db.add(ev)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        await self.db.refresh(ev)
        return _normalize_row(ev)

    async def delete(self, ev: events_table.Table) -> None:
        try:
            await self.db.delete(ev)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise


@dataclass
class TrialSession:
    # token 的 exp（epoch 秒）；None 表示不過期
    expires_at: Optional[float] = None
    events: Dict[uuid.UUID, MemoryEvent] = field(default_factory=dict)


# {session_id: TrialSession}；只有新增過事件的 session 才會有一筆
_trial_sessions: Dict[str, TrialSession] = {}


def purge_expired_trial_sessions(
    now: Optional[float] = None,
    store: Optional[Dict[str, TrialSession]] = None,
) -> int:
    """token 過期的試用 session 一併丟掉，回傳清掉的數量"""
    now = time.time() if now is None else now
    store = _trial_sessions if store is None else store
    expired = [sid for sid, s in store.items() if s.expires_at is not None and s.expires_at <= now]
    for sid in expired:
        del store[sid]
    if expired:
        log.info("expired trial sessions purged", extra={"count": len(expired)})
    return len(expired)


class MemoryEventRepository:
    def __init__(
        self,
        session_id: str,
        store: Optional[Dict[str, TrialSession]] = None,
        expires_at: Optional[float] = None,
    ):
        self.session_id = session_id
        self.expires_at = expires_at
        self._store = _trial_sessions if store is None else store

    @property
    def _events(self) -> Dict[uuid.UUID, MemoryEvent]:
        # 唯讀操作不建立 session
        session = self._store.get(self.session_id)
        return session.events if session is not None else {}

    async def list_range(
        self,
        range_start: Optional[datetime] = None,
        range_end: Optional[datetime] = None,
        overlap: bool = False,
    ) -> List[MemoryEvent]:
        items = []
        for ev in self._events.values():
            bound = ev.end_time if overlap else ev.start_time
            if range_start is not None and bound < range_start:
                continue
            if range_end is not None and ev.start_time >= range_end:
                continue
            items.append(ev)
        # 同時間者維持建立順序（dict 保留插入順序，sort 為穩定排序）
        return sorted(items, key=lambda e: e.start_time)

    async def get(self, event_id: uuid.UUID) -> Optional[MemoryEvent]:
        return self._events.get(event_id)

    async def create(self, data: Dict[str, Any]) -> MemoryEvent:
        session = self._store.get(self.session_id)
        if session is None:
            session = self._store[self.session_id] = TrialSession(expires_at=self.expires_at)
        ev = MemoryEvent(**data)
        session.events[ev.id] = ev
        return ev

    async def update(self, ev: MemoryEvent, data: Dict[str, Any]) -> MemoryEvent:
        for k, v in data.items():
            setattr(ev, k, v)
        ev.updated_at = datetime.now(timezone.utc)
        return ev

    async def delete(self, ev: MemoryEvent) -> None:
        session = self._store.get(self.session_id)
        if session is None:
            return
        session.events.pop(ev.id, None)
        if not session.events:
            del self._store[self.session_id]


def clear_trial_session(session_id: str) -> None:
    """登出時丟掉該試用 session 的事件"""
    if _trial_sessions.pop(session_id, None) is not None:
        log.info("trial events cleared", extra={"session_id": session_id})


async def get_event_repository(
    current_user=Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    if isinstance(current_user, TrialUser):
        purge_expired_trial_sessions()
        return MemoryEventRepository(current_user.session_id, expires_at=current_user.expires_at)
    return SqlEventRepository(db, current_user.id)
