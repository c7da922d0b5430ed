# -*- coding: utf-8 -*-
"""
測試命令列用戶端：本機狀態、表單驗證、HTTP 包裝與月曆排版
"""
import json
from datetime import date

import httpx
import pytest

from services.CalendarClient.app.api import ApiError, CalendarApi
from services.CalendarClient.app.cli import build_parser, diary_body, render_month, run, write_diary_file
from services.CalendarClient.app.state import (
    DEFAULT_TRIAL_COUNT,
    SessionState,
    ValidationError,
    validate_registration,
)

USER = {"id": "1", "username": "alice", "email": "alice@calendar-diary.com", "name": "Alice",
        "created_at": None, "preferences": {"theme": "light", "default_locale": "en", "timezone": "UTC"}}
TRIAL_USER = dict(USER, id="trial-user", username="trial", email="trial@example.com", name="Trial User")


@pytest.fixture
def state(tmp_path):
    return SessionState(tmp_path / "state.json")


def _api(state, handler):
    return CalendarApi(state, base_url="http://calendar.test/api/v1", transport=httpx.MockTransport(handler))


# ====== SessionState ======

def test_state_defaults(state):
    assert state.token is None
    assert state.locale == "en"
    assert state.trial_count == DEFAULT_TRIAL_COUNT
    assert not state.path.exists()


def test_state_persists(tmp_path):
    path = tmp_path / "nested" / "state.json"
    s = SessionState(path)
    s.set_token("abc")
    s.set_locale("zh-TW")
    s.consume_trial()

    assert json.loads(path.read_text(encoding="utf-8")) == {"token": "abc", "locale": "zh-TW", "trialCount": 4}
    again = SessionState(path)
    assert (again.token, again.locale, again.trial_count) == ("abc", "zh-TW", 4)


def test_clear_keeps_locale_and_trial(state):
    state.set_token("abc")
    state.set_locale("zh-CN")
    state.consume_trial()
    state.user = USER
    state.clear()
    assert state.token is None
    assert state.user is None
    assert state.locale == "zh-CN"
    assert state.trial_count == DEFAULT_TRIAL_COUNT - 1


def test_unsupported_locale_falls_back(state):
    assert state.set_locale("fr") == "en"


def test_corrupt_state_file(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")
    s = SessionState(path)
    assert s.token is None
    assert s.trial_count == DEFAULT_TRIAL_COUNT


def test_trial_exhaustion(state):
    for remaining in range(DEFAULT_TRIAL_COUNT - 1, -1, -1):
        assert state.consume_trial() == remaining
    with pytest.raises(ValidationError) as exc:
        state.consume_trial()
    assert exc.value.localize("en") == "No trial attempts remaining, please register"
    assert state.trial_count == 0


# ====== 註冊表單 ======

@pytest.mark.parametrize("args, key, field", [
    (("", "", "", ""), "requiredField", "username"),
    (("ab", "bad", "x", "y"), "usernameRequirements", "username"),
    (("alice", "", "x", "y"), "requiredField", "email"),
    (("alice", "alice@", "x", "y"), "invalidEmail", "email"),
    (("alice", "alice@mail.com", "", ""), "requiredField", "password"),
    (("alice", "alice@mail.com", "short", "short"), "passwordRequirements", "password"),
    (("alice", "alice@mail.com", "password123", "password124"), "passwordMismatch", "confirm_password"),
])
def test_validate_registration(args, key, field):
    with pytest.raises(ValidationError) as exc:
        validate_registration(*args)
    assert (exc.value.key, exc.value.field) == (key, field)


def test_validate_registration_ok():
    validate_registration("alice", "alice@mail.com", "password123", "password123")


# ====== CalendarApi ======

def test_requests_carry_token_and_locale(state):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"items": [], "item_total": 0})

    state.set_token("tok")
    state.set_locale("zh-CN")
    with _api(state, handler) as api:
        api.list_events(date(2024, 6, 1), None)

    req = seen[0]
    assert req.url.path == "/api/v1/events"
    assert req.headers["Authorization"] == "Bearer tok"
    assert req.headers["X-Locale"] == "zh-CN"
    assert req.url.params["locale"] == "zh-CN"
    assert req.url.params["start_date"] == "2024-06-01"
    assert "end_date" not in req.url.params


def test_error_detail_surfaces(state):
    def handler(request):
        return httpx.Response(422, json={"detail": "End time must not be earlier than start time",
                                         "code": "eventTimeOrder"})

    with _api(state, handler) as api, pytest.raises(ApiError) as exc:
        api.create_event(title="x", start_time="2024-06-01T10:00", end_time="2024-06-01T09:00")
    assert exc.value.status == 422
    assert exc.value.detail == "End time must not be earlier than start time"


def test_error_without_json_body(state):
    with _api(state, lambda r: httpx.Response(502, text="")) as api, pytest.raises(ApiError) as exc:
        api.get_preferences()
    assert exc.value.detail == "Bad Gateway"


def test_login_stores_token(state):
    def handler(request):
        assert json.loads(request.content) == {"email": "alice@calendar-diary.com", "password": "password123"}
        return httpx.Response(200, json={"user": USER, "token": "tok", "token_type": "bearer"})

    with _api(state, handler) as api:
        user = api.login("alice@calendar-diary.com", "password123")
    assert user["name"] == "Alice"
    assert state.token == "tok"
    assert SessionState(state.path).token == "tok"


def test_register_validates_before_request(state):
    calls = []
    with _api(state, lambda r: calls.append(r) or httpx.Response(201)) as api:
        with pytest.raises(ValidationError):
            api.register("alice", "alice@mail.com", "password123", "different1")
    assert calls == []


def test_trial_consumes_attempt(state):
    def handler(request):
        assert request.url.path.endswith("/auth/trial")
        assert json.loads(request.content) == {"locale": "en"}
        return httpx.Response(200, json={"user": TRIAL_USER, "token": "trial-tok", "token_type": "bearer"})

    with _api(state, handler) as api:
        api.start_trial_mode()
    assert state.trial_count == DEFAULT_TRIAL_COUNT - 1
    assert state.token == "trial-tok"
    assert state.is_trial


def test_trial_exhausted_makes_no_request(tmp_path):
    path = tmp_path / "state.json"
    path.write_text(json.dumps({"token": None, "locale": "en", "trialCount": 0}), encoding="utf-8")
    s = SessionState(path)
    calls = []
    with _api(s, lambda r: calls.append(r) or httpx.Response(200)) as api:
        with pytest.raises(ValidationError):
            api.start_trial_mode()
    assert calls == []


def test_logout_clears_even_on_error(state):
    state.set_token("tok")
    with _api(state, lambda r: httpx.Response(401, json={"detail": "Token has been revoked"})) as api:
        with pytest.raises(ApiError):
            api.logout()
    assert state.token is None


def test_load_current_user_drops_stale_token(state):
    state.set_token("stale")
    with _api(state, lambda r: httpx.Response(401, json={"detail": "Access token expired"})) as api:
        assert api.load_current_user() is None
    assert state.token is None


def test_export_diary(state):
    def handler(request):
        assert request.url.params["date"] == "2024-06-01"
        return httpx.Response(
            200,
            text="Diary - Saturday, June 1, 2024\n\nX",
            headers={"Content-Disposition": 'attachment; filename="diary-2024-06-01.txt"'},
        )

    with _api(state, handler) as api:
        filename, text = api.export_diary(date(2024, 6, 1))
    assert filename == "diary-2024-06-01.txt"
    assert text.endswith("\n\nX")


def test_write_diary_file(tmp_path):
    path = write_diary_file(tmp_path / "out", "diary-2024-06-01.txt", "日記 - 2024年06月01日 星期六\n\n內容")
    assert path.read_text(encoding="utf-8").endswith("內容")


# ====== CLI ======

def _day(d, label, *, current=True, preview=(), more=None, today=False, selected=False):
    return {
        "date": d, "label": label, "is_current_month": current, "is_today": today,
        "is_past": False, "is_future": False, "is_selected": selected,
        "events": [], "preview": [{"title": t} for t in preview],
        "more_count": 0, "more_label": more,
    }


def test_render_month():
    days = [_day(f"2024-05-{26 + i}", str(26 + i), current=False) for i in range(6)]
    days.append(_day("2024-06-01", "1", preview=("Standup", "Lunch"), more="More 1 items",
                     today=True, selected=True))
    month = {"title": "June 2024", "week_days": ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"], "days": days}

    text = render_month(month)
    assert "June 2024" in text
    assert "(26)" in text
    assert "*>1" in text
    assert "· Standup" in text and "· Lunch" in text
    assert "More 1 items" in text


def test_locale_command_needs_no_login(state):
    args = build_parser().parse_args(["locale", "zh-TW"])
    with _api(state, lambda r: httpx.Response(500)) as api:
        assert run(args, api) == 0
    assert SessionState(state.path).locale == "zh-TW"


def test_commands_require_session(state, capsys):
    args = build_parser().parse_args(["month"])
    with _api(state, lambda r: httpx.Response(500)) as api:
        assert run(args, api) == 1
    assert "Please log in or start trial mode first" in capsys.readouterr().err


def test_diary_body_strips_header():
    d = date(2024, 6, 1)
    assert diary_body("Diary - Saturday, June 1, 2024\n\nDear diary", "en", d) == "Dear diary"
    assert diary_body("日记 - 2024年06月01日 星期六\n\n今天", "zh-CN", d) == "今天"
    assert diary_body("no header", "en", d) == "no header"


def test_export_save_sends_body_only(state, tmp_path):
    saved = []

    def handler(request):
        if request.url.path.endswith("/auth/me"):
            return httpx.Response(200, json={"user": USER})
        if request.url.path.endswith("/diary/export"):
            return httpx.Response(
                200,
                text="Diary - Saturday, June 1, 2024\n\nDear diary",
                headers={"Content-Disposition": 'attachment; filename="diary-2024-06-01.txt"'},
            )
        saved.append(json.loads(request.content))
        return httpx.Response(200, json={"date": "2024-06-01", "content": "Dear diary"})

    state.set_token("tok")
    args = build_parser().parse_args(["export", "--date", "2024-06-01", "--out", str(tmp_path), "--save"])
    with _api(state, handler) as api:
        assert run(args, api) == 0

    assert saved == [{"date": "2024-06-01", "content": "Dear diary"}]
    assert (tmp_path / "diary-2024-06-01.txt").read_text(encoding="utf-8").startswith("Diary - ")
