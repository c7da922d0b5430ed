# -*- coding: utf-8 -*-
from __future__ import annotations
import uuid
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...DataAccess.tables.__Enumeration import Category, Priority


def _clean_text(v: Optional[str]) -> Optional[str]:
    # 空字串視為沒填
    if v is None:
        return None
    v = v.strip()
    return v or None


def _clean_list(v: Optional[List[str]]) -> Optional[List[str]]:
    # 去空白、去重，保留原本順序
    if v is None:
        return None
    seen = []
    for item in v:
        item = (item or "").strip()
        if item and item not in seen:
            seen.append(item)
    return seen


# ====== 共用回應 ======
class OkResp(BaseModel):
    ok: bool = True


# ====== 建立 / 整筆取代 ======
class EventCreate(BaseModel):
    """時間若不帶時區，視為使用者時區的當地時間"""
    title: str = Field(min_length=1, max_length=200)
    start_time: datetime
    end_time: datetime
    category: Optional[Category] = None
    priority: Optional[Priority] = None
    location: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    participants: List[str] = Field(default_factory=list)

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('This field is required')
        return v

    @field_validator('location', 'description')
    @classmethod
    def empty_to_none(cls, v: Optional[str]) -> Optional[str]:
        return _clean_text(v)

    @field_validator('tags', 'participants')
    @classmethod
    def dedupe(cls, v: List[str]) -> List[str]:
        return _clean_list(v) or []


# ====== 部分更新 ======
class EventUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    category: Optional[Category] = None
    priority: Optional[Priority] = None
    location: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    participants: Optional[List[str]] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError('This field is required')
        return v

    @field_validator('location', 'description')
    @classmethod
    def empty_to_none(cls, v: Optional[str]) -> Optional[str]:
        return _clean_text(v)

    @field_validator('tags', 'participants')
    @classmethod
    def dedupe(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _clean_list(v)


# ====== 讀取 ======
class EventRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    start_time: datetime
    end_time: datetime
    category: Optional[Category] = None
    priority: Optional[Priority] = None
    location: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    participants: List[str] = Field(default_factory=list)

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class EventListResp(BaseModel):
    items: List[EventRead]
    item_total: int
