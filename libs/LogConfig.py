# libs/LogConfig.py
import json
import logging
import os
import sys
import uuid
from logging.handlers import WatchedFileHandler
from contextvars import ContextVar
from typing import Optional
from datetime import datetime, timezone

"""
Calendar Diary 共用的 logging 設定

使用範例
# services/CalendarServer/app/main.py
from libs.LogConfig import setup_logging, get_logger, install_trace_middleware

setup_logging(service_name="calendar")      # 其餘設定靠環境變數
app = FastAPI()
install_trace_middleware(app)               # 每個請求帶上 X-Trace-Id

#########################################
在任何地方寫 log：

from libs.LogConfig import get_logger
log = get_logger(__name__)
log.info("event created", extra={"event_id": "abc-123"})

#########################################
在 CLI / 背景工作：

setup_logging(service_name="calendar-cli", to_stdout=False, file_path=os.getenv("LOG_FILE"))
"""

TRACE_HEADER = "X-Trace-Id"

# ======== request 範圍的追蹤變數（可跨 async 任務） ========
_trace_id: ContextVar[Optional[str]] = ContextVar("_trace_id", default=None)

def set_trace_id(trace_id: Optional[str]) -> None:
    """在請求開始時設定 trace_id；結束時設回 None。"""
    _trace_id.set(trace_id)

def get_trace_id() -> Optional[str]:
    return _trace_id.get()

# LogRecord 內建欄位，輸出 JSON 時不當成 extra
_RESERVED_ATTRS = frozenset((
    "args", "msg", "levelname", "levelno", "pathname", "filename", "module",
    "exc_info", "exc_text", "stack_info", "lineno", "funcName", "created",
    "msecs", "relativeCreated", "thread", "threadName", "processName", "process",
    "taskName", "name",
))

# ======== JSON 與 Text Formatter ========
class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc) \
                     .isoformat(timespec="milliseconds") \
                     .replace("+00:00", "Z")
        doc = {
            "ts": ts,
            "level": record.levelname.lower(),
            "svc": getattr(record, "svc", None),
            "logger": record.name,
            "msg": record.getMessage(),
            "trace_id": getattr(record, "trace_id", None),
            "pid": record.process,
        }
        if record.exc_info:
            doc["exc"] = self.formatException(record.exc_info)
        # 其餘 extra（例如 event_id、user_id）
        for k, v in record.__dict__.items():
            if k in _RESERVED_ATTRS or k in doc:
                continue
            doc[k] = v
        return json.dumps(doc, ensure_ascii=False, default=str)

class TextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        trace = getattr(record, "trace_id", None)
        svc = getattr(record, "svc", "-")
        base = f"[{datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S')}]"
        base += f" [{record.levelname}] [{svc}] [{record.name}]"
        if trace:
            base += f" [trace={trace}]"
        base += f" - {record.getMessage()}"
        if record.exc_info:
            base += "\n" + self.formatException(record.exc_info)
        return base

# ======== 把 svc/trace_id 注入每筆 log 的 Filter ========
class ContextFilter(logging.Filter):
    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "svc"):
            record.svc = self.service_name
        if not hasattr(record, "trace_id"):
            record.trace_id = get_trace_id()
        return True

# ======== 只初始化一次的守門機制 ========
_INITIALIZED_FLAG = "_calendar_logging_initialized"

def _already_initialized(root: logging.Logger) -> bool:
    return getattr(root, _INITIALIZED_FLAG, False)

def _mark_initialized(root: logging.Logger) -> None:
    setattr(root, _INITIALIZED_FLAG, True)

def _has_app_handlers(root: logging.Logger) -> bool:
    return any(getattr(h, "_app_handler", False) for h in root.handlers)

def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")

# ======== 對外 API ========
def setup_logging(
    *,
    service_name: Optional[str] = None,
    level: Optional[str] = None,
    json_format: Optional[bool] = None,
    to_stdout: Optional[bool] = None,
    to_file: Optional[bool] = None,
    file_path: Optional[str] = None,
) -> None:
    """
    初始化全域 logging（重複呼叫安全、僅生效一次）

    環境變數（參數優先）：
      SERVICE_NAME     預設 "calendar"
      LOG_LEVEL        預設 "INFO"
      LOG_JSON         "1"|"true" 啟用 JSON 格式，預設 JSON
      LOG_STDOUT       預設 "1"（寫 stdout）
      LOG_FILE         檔案路徑（會用 WatchedFileHandler，配合 logrotate）
    """
    root = logging.getLogger()

    if _already_initialized(root):
        return

    service_name = service_name or os.getenv("SERVICE_NAME", "calendar")
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    json_format = json_format if json_format is not None else _env_flag("LOG_JSON", "1")
    to_stdout = to_stdout if to_stdout is not None else _env_flag("LOG_STDOUT", "1")
    file_path = file_path or os.getenv("LOG_FILE")
    to_file = to_file if to_file is not None else bool(file_path)

    root.setLevel(level)

    if not _has_app_handlers(root):
        fmt = JsonFormatter() if json_format else TextFormatter()
        ctx_filter = ContextFilter(service_name=service_name)

        if to_stdout:
            sh = logging.StreamHandler(sys.stdout)
            sh.setFormatter(fmt)
            sh.addFilter(ctx_filter)
            sh._app_handler = True  # 打標記，避免重複掛
            root.addHandler(sh)

        if to_file and file_path:
            directory = os.path.dirname(file_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            fh = WatchedFileHandler(file_path, encoding="utf-8")
            fh.setFormatter(fmt)
            fh.addFilter(ctx_filter)
            fh._app_handler = True
            root.addHandler(fh)

    _mark_initialized(root)

def get_logger(name: str) -> logging.Logger:
    """取得具備 svc/trace_id 欄位的 logger。"""
    return logging.getLogger(name)

def install_trace_middleware(app) -> None:
    """
    在 FastAPI app 上掛一個 http middleware：
    從 X-Trace-Id 取 trace_id（沒有就產生），寫回回應標頭，請求結束後清掉。
    """
    @app.middleware("http")
    async def _trace_id_middleware(request, call_next):
        trace = request.headers.get(TRACE_HEADER) or str(uuid.uuid4())
        set_trace_id(trace)
        try:
            response = await call_next(request)
            response.headers[TRACE_HEADER] = trace
            return response
        finally:
            set_trace_id(None)  # 避免外溢到下一個請求
