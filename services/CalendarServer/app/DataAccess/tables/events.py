from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import String, DateTime, Text, ForeignKey, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from . import ORMBase, TimestampMixin
from .__Enumeration import Category, Priority, CategoryEnum, PriorityEnum
from .__Function import create_uuid7

__all__ = ["Table"]

class EventsTable(ORMBase, TimestampMixin):
    __tablename__ = "events"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=create_uuid7
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    start_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    end_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    category: Mapped[Category | None] = mapped_column(CategoryEnum, nullable=True)
    priority: Mapped[Priority | None] = mapped_column(PriorityEnum, nullable=True)
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 有順序的字串清單
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    participants: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

Table = EventsTable
