# -*- coding: utf-8 -*-
from __future__ import annotations
import datetime as dt
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class DiaryGenerateReq(BaseModel):
    date: dt.date


class DiaryGenerateResp(BaseModel):
    date: dt.date
    locale: str
    content: str
    event_total: int


class DiarySaveReq(BaseModel):
    date: dt.date
    content: str = Field(min_length=1)
    locale: Optional[str] = None


class DiaryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: dt.date = Field(validation_alias="diary_date")
    content: str
    locale: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
