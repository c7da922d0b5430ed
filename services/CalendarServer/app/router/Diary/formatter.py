# -*- coding: utf-8 -*-
"""
把一天的事件排成給語言模型的提示詞

每個事件一段：時間、標題必有，其餘欄位有值才列出。
"""
from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from ...i18n import normalize_locale
from ..Calendar.grid import resolve_tz

_LABELS: Dict[str, Dict[str, str]] = {
    "en": {
        "time": "Time: ",
        "title": "Title: ",
        "category": "Category: ",
        "priority": "Priority: ",
        "location": "Location: ",
        "participants": "Participants: ",
        "tags": "Tags: ",
        "description": "Description: ",
    },
    "zh-CN": {
        "time": "时间：",
        "title": "标题：",
        "category": "类别：",
        "priority": "优先级：",
        "location": "地点：",
        "participants": "参与人：",
        "tags": "标签：",
        "description": "描述：",
    },
    "zh-TW": {
        "time": "時間：",
        "title": "標題：",
        "category": "類別：",
        "priority": "優先級：",
        "location": "地點：",
        "participants": "參與人：",
        "tags": "標籤：",
        "description": "描述：",
    },
}

_PREAMBLE = {
    "en": "Please generate a diary entry in first person perspective based on the following schedule:",
    "zh-CN": "请根据以下日程安排生成一篇日记，以第一人称的视角描述这一天：",
    "zh-TW": "請根據以下日程安排生成一篇日記，以第一人稱的視角描述這一天：",
}

_POSTAMBLE = {
    "en": "Please write a vivid and interesting diary entry that includes thoughts and feelings "
          "about each event. Make it personal and emotional.",
    "zh-CN": "请生成一篇生动有趣的日记，包含对每个事件的感受和思考。要有感情和个人色彩，像真实的日记一样。",
    "zh-TW": "請生成一篇生動有趣的日記，包含對每個事件的感受和思考。要有感情和個人色彩，像真實的日記一樣。",
}

_SYSTEM_MESSAGE = {
    "en": "You are a diary writing assistant. Write diary entries in a personal, emotional, "
          "and reflective style. Include thoughts, feelings, and reactions to events. "
          "Make the writing feel authentic and intimate, like a real diary.",
    "zh-CN": "你是一个日记写作助手。以个人化、感性和反思的风格写作。包含对事件的想法、感受和反应。"
             "让写作风格真实自然，像真实的日记一样。",
    "zh-TW": "你是一個日記寫作助手。以個人化、感性和反思的風格寫作。包含對事件的想法、感受和反應。"
             "讓寫作風格真實自然，像真實的日記一樣。",
}


def _value(v: Any) -> Optional[str]:
    # enum 取其值；空字串視為沒填
    if v is None:
        return None
    v = getattr(v, "value", v)
    v = str(v).strip()
    return v or None


def _hhmm(instant: datetime, tz) -> str:
    # naive 視為 UTC，與月曆分桶一致
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(tz).strftime("%H:%M")


def format_event_block(event: Any, locale: Optional[str] = None, tz: Any = None) -> str:
    labels = _LABELS[normalize_locale(locale)]
    zone = resolve_tz(tz)
    lines = [
        f"{labels['time']}{_hhmm(event.start_time, zone)} - {_hhmm(event.end_time, zone)}",
        f"{labels['title']}{event.title}",
    ]
    for key in ("category", "priority", "location"):
        value = _value(getattr(event, key, None))
        if value:
            lines.append(f"{labels[key]}{value}")
    for key in ("participants", "tags"):
        items = [s for s in (getattr(event, key, None) or []) if s]
        if items:
            lines.append(f"{labels[key]}{', '.join(items)}")
    description = _value(getattr(event, "description", None))
    if description:
        lines.append(f"{labels['description']}{description}")
    return "\n".join(lines)


def build_prompt(events: Iterable[Any], locale: Optional[str] = None, tz: Any = None) -> str:
    loc = normalize_locale(locale)
    blocks = "\n\n".join(format_event_block(ev, loc, tz) for ev in events)
    return f"{_PREAMBLE[loc]}\n\n{blocks}\n\n{_POSTAMBLE[loc]}"


def system_message(locale: Optional[str] = None) -> str:
    return _SYSTEM_MESSAGE[normalize_locale(locale)]


def build_messages(events: Iterable[Any], locale: Optional[str] = None, tz: Any = None) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": system_message(locale)},
        {"role": "user", "content": build_prompt(events, locale, tz)},
    ]
