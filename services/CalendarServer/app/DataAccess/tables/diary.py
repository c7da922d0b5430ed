from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import String, Date, Text, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from . import ORMBase, TimestampMixin
from .__Function import create_uuid7

__all__ = ["Table"]


class DiaryTable(ORMBase, TimestampMixin):
    __tablename__ = "diary"
    __table_args__ = (
        UniqueConstraint("user_id", "diary_date", name="uq_diary_user_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=create_uuid7
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True
    )
    diary_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        index=True
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False
    )
    locale: Mapped[str | None] = mapped_column(
        String(10),
        nullable=True
    )


Table = DiaryTable
