# -*- coding: utf-8 -*-
"""
Calendar Diary 命令列用戶端

範例：
    calendar-diary trial
    calendar-diary month --move next
    calendar-diary add --title 晨會 --start 2024-06-01T09:00 --end 2024-06-01T10:00 --category meeting
    calendar-diary export --date 2024-06-01 --out ./diaries
"""
from __future__ import annotations
import argparse
import getpass
import os
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

from libs.LogConfig import setup_logging, get_logger
from services.CalendarServer.app.i18n import SUPPORTED_LOCALES, diary_header
from .api import ApiError, CalendarApi
from .state import SessionState, ValidationError

log = get_logger(__name__)

CELL_WIDTH = 16


def _fit(text: str, width: int = CELL_WIDTH) -> str:
    text = text.replace("\n", " ")
    if len(text) > width:
        text = text[: width - 1] + "…"
    return text.ljust(width)


def render_month(month: Dict[str, Any]) -> str:
    """把 /calendar/month 的回應排成文字月曆；每格最多兩筆事件，其餘顯示「還有 N 項」"""
    lines = [month["title"].center(CELL_WIDTH * 7), ""]
    lines.append("".join(_fit(name) for name in month["week_days"]))

    days = month["days"]
    for row in range(0, len(days), 7):
        week = days[row:row + 7]
        height = 1 + max(len(d["preview"]) + (1 if d.get("more_label") else 0) for d in week)
        cells: List[List[str]] = []
        for d in week:
            marks = ""
            if d["is_today"]:
                marks += "*"
            if d["is_selected"]:
                marks += ">"
            label = f"{marks}{d['label']}" if d["is_current_month"] else f"({d['label']})"
            cell = [label] + [f"· {ev['title']}" for ev in d["preview"]]
            if d.get("more_label"):
                cell.append(d["more_label"])
            cells.append(cell + [""] * (height - len(cell)))
        for i in range(height):
            lines.append("".join(_fit(c[i]) for c in cells).rstrip())
        lines.append("")
    return "\n".join(lines)


def render_day(day: Dict[str, Any], state: SessionState) -> str:
    lines = [day["title"]]
    if not day["items"]:
        lines.append(state.t("noEvents"))
    for ev in day["items"]:
        start = datetime.fromisoformat(ev["start_time"]).strftime("%H:%M")
        end = datetime.fromisoformat(ev["end_time"]).strftime("%H:%M")
        lines.append(f"{start} - {end}  {ev['title']}  [{ev['id']}]")
        if ev.get("location"):
            lines.append(f"    {state.t('location')}: {ev['location']}")
    return "\n".join(lines)


def _event_fields(args: argparse.Namespace) -> Dict[str, Any]:
    fields = {
        "title": args.title,
        "start_time": args.start,
        "end_time": args.end,
        "category": args.category,
        "priority": args.priority,
        "location": args.location,
        "description": args.description,
        "tags": args.tag,
        "participants": args.participant,
    }
    return {k: v for k, v in fields.items() if v is not None}


def write_diary_file(directory: Path, filename: str, content: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    path.write_text(content, encoding="utf-8")
    return path


def diary_body(text: str, locale: str, day: date) -> str:
    """匯出檔去掉標題行，只留生成的日記內容（存到伺服器用）"""
    header = diary_header(locale, day)
    return text[len(header):] if text.startswith(header) else text


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="calendar-diary", description="Calendar Diary 命令列用戶端")
    ap.add_argument("--base-url", default=None, help="預設讀 CALENDAR_API_BASE_URL")
    ap.add_argument("--state-file", default=None, help="預設讀 CALENDAR_STATE_FILE")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("login")
    p.add_argument("--email", required=True)
    p.add_argument("--password")

    p = sub.add_parser("register")
    p.add_argument("--username", required=True)
    p.add_argument("--email", required=True)
    p.add_argument("--name")
    p.add_argument("--password")
    p.add_argument("--confirm-password")

    sub.add_parser("logout")
    sub.add_parser("trial")
    sub.add_parser("whoami")

    p = sub.add_parser("locale")
    p.add_argument("locale", choices=SUPPORTED_LOCALES)

    p = sub.add_parser("prefs")
    p.add_argument("--theme", choices=("light", "dark"))
    p.add_argument("--default-locale", choices=SUPPORTED_LOCALES)
    p.add_argument("--timezone")

    p = sub.add_parser("month")
    p.add_argument("--date", type=date.fromisoformat)
    p.add_argument("--move", choices=("prev", "next", "today"))
    p.add_argument("--selected", type=date.fromisoformat)

    p = sub.add_parser("day")
    p.add_argument("--date", type=date.fromisoformat)

    for name in ("add", "edit"):
        p = sub.add_parser(name)
        if name == "edit":
            p.add_argument("event_id")
        p.add_argument("--title", required=(name == "add"))
        p.add_argument("--start", required=(name == "add"), help="ISO 時間，例如 2024-06-01T09:00")
        p.add_argument("--end", required=(name == "add"))
        p.add_argument("--category", choices=("work", "personal", "meeting"))
        p.add_argument("--priority", choices=("high", "medium", "low"))
        p.add_argument("--location")
        p.add_argument("--description")
        p.add_argument("--tag", action="append")
        p.add_argument("--participant", action="append")

    p = sub.add_parser("delete")
    p.add_argument("event_id")

    p = sub.add_parser("export")
    p.add_argument("--date", type=date.fromisoformat, required=True)
    p.add_argument("--out", default=".", help="輸出資料夾")
    p.add_argument("--save", action="store_true", help="同時存到伺服器")
    return ap


def run(args: argparse.Namespace, api: CalendarApi) -> int:
    state = api.state
    cmd = args.command

    if cmd == "locale":
        state.set_locale(args.locale)
        print(args.locale)
        return 0

    if cmd == "login":
        password = args.password or getpass.getpass()
        user = api.login(args.email, password)
        print(user["name"])
        return 0

    if cmd == "register":
        password = args.password or getpass.getpass()
        confirm = args.confirm_password if args.confirm_password is not None else getpass.getpass()
        user = api.register(args.username, args.email, password, confirm, name=args.name)
        print(user["name"])
        return 0

    if cmd == "trial":
        api.start_trial_mode()
        print(state.t("trialStarted", remaining=state.trial_count))
        return 0

    if cmd == "logout":
        api.logout()
        print(state.t("loggedOut"))
        return 0

    # 以下需要登入或試用
    if not state.token or api.load_current_user() is None:
        print(state.t("notLoggedIn"), file=sys.stderr)
        return 1

    if cmd == "whoami":
        user = state.user
        print(f"{user['name']} <{user['email']}>")
    elif cmd == "prefs":
        changes = {
            "theme": args.theme,
            "default_locale": args.default_locale,
            "timezone": args.timezone,
        }
        changes = {k: v for k, v in changes.items() if v is not None}
        prefs = api.update_preferences(**changes) if changes else api.get_preferences()
        for k, v in prefs.items():
            print(f"{k}: {v}")
    elif cmd == "month":
        print(render_month(api.month(args.date, args.move, args.selected)))
    elif cmd == "day":
        print(render_day(api.day(args.date), state))
    elif cmd == "add":
        ev = api.create_event(**_event_fields(args))
        print(ev["id"])
    elif cmd == "edit":
        ev = api.update_event(args.event_id, **_event_fields(args))
        print(ev["id"])
    elif cmd == "delete":
        api.delete_event(args.event_id)
    elif cmd == "export":
        filename, content = api.export_diary(args.date)
        path = write_diary_file(Path(args.out), filename, content)
        if args.save and not state.is_trial:
            api.save_diary(args.date, diary_body(content, state.locale, args.date))
        print(state.t("diarySaved", path=str(path)))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    setup_logging(service_name="calendar-cli", to_stdout=False, file_path=os.getenv("LOG_FILE"))
    args = build_parser().parse_args(argv)
    state = SessionState(Path(args.state_file) if args.state_file else None)

    with CalendarApi(state, base_url=args.base_url) as api:
        try:
            return run(args, api)
        except ValidationError as e:
            print(e.localize(state.locale), file=sys.stderr)
            return 2
        except ApiError as e:
            log.warning("api error %s: %s", e.status, e.detail)
            print(e.detail, file=sys.stderr)
            return 1
        except httpx.HTTPError as e:
            log.error("cannot reach %s: %s", api.base_url, e)
            print(f"{api.base_url}: {e}", file=sys.stderr)
            return 1


if __name__ == "__main__":
    sys.exit(main())
