# -*- coding: utf-8 -*-
"""日記生成用的外部 completion API 設定"""
from __future__ import annotations
import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_DIARY_API_URL = "https://api.calendar-diary.com"
DEFAULT_DIARY_MODEL = "deepseek-chat"

# 固定的取樣參數
SAMPLING_PARAMS = {
    "temperature": 0.8,
    "max_tokens": 2000,
    "top_p": 0.95,
    "frequency_penalty": 0.2,
    "presence_penalty": 0.1,
    "stop": None,
}


def get_diary_api_url() -> str:
    return os.getenv("DIARY_API_URL", DEFAULT_DIARY_API_URL).strip()


def get_diary_api_key() -> Optional[str]:
    """未設定或空字串都視為沒有金鑰"""
    key = (os.getenv("DIARY_API_KEY") or "").strip()
    return key or None


def get_diary_model() -> str:
    return os.getenv("DIARY_MODEL", DEFAULT_DIARY_MODEL).strip() or DEFAULT_DIARY_MODEL


def get_diary_api_timeout() -> Optional[float]:
    """DIARY_API_TIMEOUT（秒）；未設定則不設逾時"""
    raw = (os.getenv("DIARY_API_TIMEOUT") or "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if value > 0 else None
