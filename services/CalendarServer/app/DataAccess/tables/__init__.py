"""
檔案內所有的檔名為表格名稱(除去Enumeration與Function)，每個表格都有對應的模型：
Table - 表格模型 (繼承自 ORMBase)

所有非table欄位的寫在Enumeration與Function
"""
__all__ = ["ORMBase",
           "TimestampMixin"]

from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, declared_attr
from sqlalchemy import DateTime, func
from datetime import datetime

# 讓其他table可以繼承這個Base，同根
class ORMBase(AsyncAttrs, DeclarativeBase):
    pass

class TimestampMixin:
    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            server_default=func.now(),
            nullable=False,
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime | None]:
        return mapped_column(
            DateTime(timezone=True),
            onupdate=func.now(),
            nullable=True,
        )
