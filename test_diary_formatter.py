# -*- coding: utf-8 -*-
"""
測試日記提示詞與外部 API 呼叫
"""
import asyncio
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

import httpx
import pytest

from services.CalendarServer.app.errors import (
    ConfigurationError,
    EmptyInputError,
    MalformedResponseError,
    RemoteError,
    TransportError,
)
from services.CalendarServer.app.DataAccess.tables.__Enumeration import Category, Priority
from services.CalendarServer.app.router.Diary.client import DiaryGenerator
from services.CalendarServer.app.router.Diary.formatter import (
    build_prompt,
    format_event_block,
    system_message,
)
from services.CalendarServer.app.router.Diary.service import compose_export, export_filename


@dataclass
class Ev:
    title: str
    start_time: datetime
    end_time: datetime
    category: Optional[Category] = None
    priority: Optional[Priority] = None
    location: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    participants: List[str] = field(default_factory=list)


def _utc(h, m=0):
    return datetime(2024, 6, 1, h, m, tzinfo=timezone.utc)


FULL = Ev(
    title="Team sync",
    start_time=_utc(9),
    end_time=_utc(10, 30),
    category=Category.meeting,
    priority=Priority.high,
    location="Room 3",
    description="Weekly planning",
    tags=["q3", "planning"],
    participants=["Amy", "Ben"],
)
MINIMAL = Ev(title="Lunch", start_time=_utc(12), end_time=_utc(13))


def _run(coro):
    return asyncio.run(coro)


def _generator(handler, api_key="test-key"):
    return DiaryGenerator(
        api_url="https://diary.test/v1/chat",
        api_key=api_key,
        model="test-model",
        timeout=None,
        transport=httpx.MockTransport(handler),
    )


# ====== 提示詞 ======

def test_event_block_full():
    assert format_event_block(FULL, "en").split("\n") == [
        "Time: 09:00 - 10:30",
        "Title: Team sync",
        "Category: meeting",
        "Priority: high",
        "Location: Room 3",
        "Participants: Amy, Ben",
        "Tags: q3, planning",
        "Description: Weekly planning",
    ]


def test_event_block_omits_absent_fields():
    assert format_event_block(MINIMAL, "en") == "Time: 12:00 - 13:00\nTitle: Lunch"


def test_event_block_localized_and_timezone():
    block = format_event_block(MINIMAL, "zh-CN", "Asia/Shanghai")
    assert block == "时间：20:00 - 21:00\n标题：Lunch"
    assert format_event_block(MINIMAL, "zh-TW").startswith("時間：12:00")


def test_event_block_naive_times_are_utc():
    naive = Ev(title="Lunch", start_time=datetime(2024, 6, 1, 12), end_time=datetime(2024, 6, 1, 13))
    assert format_event_block(naive, "en", "Asia/Taipei").startswith("Time: 20:00 - 21:00")


def test_prompt_layout():
    prompt = build_prompt([FULL, MINIMAL], "en")
    assert prompt.startswith("Please generate a diary entry in first person perspective")
    assert prompt.endswith("Make it personal and emotional.")
    assert prompt.index("Title: Team sync") < prompt.index("Title: Lunch")

    zh = build_prompt([MINIMAL], "zh-CN")
    assert zh.startswith("请根据以下日程安排生成一篇日记")
    assert "标题：Lunch" in zh


def test_system_message_per_locale():
    assert system_message("en").startswith("You are a diary writing assistant.")
    assert system_message("zh-CN").startswith("你是一个日记写作助手")
    assert system_message("zh-TW").startswith("你是一個日記寫作助手")
    assert system_message("fr") == system_message("en")


# ====== 外部 API ======

def test_returns_content_verbatim():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["auth"] = request.headers["Authorization"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "X"}}]})

    assert _run(_generator(handler).generate([FULL], "en")) == "X"

    body = captured["body"]
    assert captured["auth"] == "Bearer test-key"
    assert body["model"] == "test-model"
    assert [m["role"] for m in body["messages"]] == ["system", "user"]
    assert body["temperature"] == 0.8
    assert body["max_tokens"] == 2000
    assert body["top_p"] == 0.95
    assert body["frequency_penalty"] == 0.2
    assert body["presence_penalty"] == 0.1
    assert body["stop"] is None


def test_content_is_not_trimmed():
    def handler(request):
        return httpx.Response(200, json={"choices": [{"message": {"content": "  Dear diary\n"}}]})

    assert _run(_generator(handler).generate([MINIMAL])) == "  Dear diary\n"


def test_empty_input_makes_no_request():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={})

    with pytest.raises(EmptyInputError) as exc:
        _run(_generator(handler).generate([], "en"))
    assert calls == []
    assert exc.value.localize("en") == "No events scheduled for the selected date"
    assert exc.value.localize("zh-CN") == "所选日期没有日程安排"


def test_empty_input_checked_before_missing_key():
    with pytest.raises(EmptyInputError):
        _run(_generator(lambda r: httpx.Response(200), api_key="").generate([]))


def test_missing_api_key():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={})

    with pytest.raises(ConfigurationError) as exc:
        _run(_generator(handler, api_key="").generate([MINIMAL]))
    assert calls == []
    assert exc.value.localize("zh-CN") == "API Key 未配置"


def test_unreachable_endpoint():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError) as exc:
        _run(_generator(handler).generate([MINIMAL]))
    assert exc.value.localize("en").startswith("API request failed:")
    assert exc.value.localize("zh-TW").startswith("API 請求失敗:")


def test_non_success_status():
    def handler(request):
        return httpx.Response(503, json={"error": {"message": "busy"}})

    with pytest.raises(TransportError) as exc:
        _run(_generator(handler).generate([MINIMAL]))
    assert exc.value.upstream_status == 503
    assert exc.value.localize("en") == "API request failed: 503 Service Unavailable"


def test_remote_error_payload():
    def handler(request):
        return httpx.Response(200, json={"error": {"message": "quota exceeded"}})

    with pytest.raises(RemoteError) as exc:
        _run(_generator(handler).generate([MINIMAL]))
    assert exc.value.localize("en") == "API error: quota exceeded"


def test_remote_error_without_message():
    def handler(request):
        return httpx.Response(200, json={"error": {"code": 42}})

    with pytest.raises(RemoteError) as exc:
        _run(_generator(handler).generate([MINIMAL]))
    assert exc.value.localize("en") == "API error: Unknown error"
    assert exc.value.localize("zh-CN") == "API 错误: 未知错误"


@pytest.mark.parametrize("error", [{}, []])
def test_empty_error_object_is_remote_error(error):
    def handler(request):
        return httpx.Response(200, json={"error": error})

    with pytest.raises(RemoteError) as exc:
        _run(_generator(handler).generate([MINIMAL]))
    assert exc.value.localize("en") == "API error: Unknown error"


@pytest.mark.parametrize("body", [
    {"choices": []},
    {"choices": [{"message": {}}]},
    {"choices": [{"message": {"content": ""}}]},
    {"result": "ok"},
])
def test_malformed_response(body):
    with pytest.raises(MalformedResponseError):
        _run(_generator(lambda r: httpx.Response(200, json=body)).generate([MINIMAL]))


def test_non_json_response():
    def handler(request):
        return httpx.Response(200, text="<html>oops</html>")

    with pytest.raises(MalformedResponseError):
        _run(_generator(handler).generate([MINIMAL]))


# ====== 匯出 ======

def test_export_file():
    d = datetime(2024, 6, 1).date()
    assert export_filename(d) == "diary-2024-06-01.txt"
    assert compose_export("en", d, "X") == "Diary - Saturday, June 1, 2024\n\nX"
    assert compose_export("zh-CN", d, "X") == "日记 - 2024年06月01日 星期六\n\nX"
    assert compose_export("zh-TW", d, "X") == "日記 - 2024年06月01日 星期六\n\nX"
