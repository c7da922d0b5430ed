from __future__ import annotations
from sqlalchemy import String, Integer, JSON
from sqlalchemy.orm import Mapped, mapped_column
from . import ORMBase, TimestampMixin
from .__Enumeration import Role, RoleEnum

__all__ = ["Table", "Role"]


class UserTable(ORMBase, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(20), nullable=False, unique=True, index=True)
    email: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[Role] = mapped_column(RoleEnum, nullable=False, default=Role.user)
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    active: Mapped[bool] = mapped_column(default=True, nullable=False)
    # 偏好設定（theme / default_locale / timezone），見 router/User/settings.py
    settings: Mapped[dict | None] = mapped_column(JSON, nullable=True)

Table = UserTable
