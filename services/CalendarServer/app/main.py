# -*- coding: utf-8 -*-
from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from libs.LogConfig import setup_logging, get_logger, install_trace_middleware
from .DataAccess.Connect import create_db_and_tables
from .errors import register_error_handlers
from .security.deps import get_current_user
from .config.path import (API_ROOT)
from .router.Authentication.service import auth_router
from .router.User.service import user_router
from .router.Events.service import events_router
from .router.Calendar.service import calendar_router
from .router.Diary.service import diary_router
"""
這個檔案負責"呼叫"各個Business Logic Functions，並提供API介面。
規劃：
    1. 使用 FastAPI 作為 Web 框架。
    2. 使用 SQLAlchemy 作為 ORM，連接到資料庫。
    3. 使用 Pydantic 定義資料模型，確保資料的完整性和驗證。
    4. 使用 JWT 進行使用者認證（含試用模式的短效 token）。
    5. 錯誤依呼叫者語系回傳訊息（errors.py）。
    6. 提供健康檢查 API，方便監控和維護。

API 功能規劃：
    - 權限守門員（Authentication）：註冊 / 登入 / 登出 / 試用
    - 使用者資料與偏好設定（User）
    - 日程 CRUD（Events）
    - 月曆格線與每日事件（Calendar）
    - AI 日記生成與匯出（Diary）
"""

setup_logging(service_name="calendar")
log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """管理應用程式的生命週期"""
    log.info("應用程式啟動中...")
    # 建立資料表
    await create_db_and_tables()
    log.info("資料庫連接準備完成")

    yield  # 應用程式運行中

    log.info("應用程式已關閉")


app = FastAPI(
    root_path=API_ROOT,
    title="Calendar Diary API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=600,  # 預檢快取
)
install_trace_middleware(app)
register_error_handlers(app)

# 基本權限控制路由，公開（logout / me 在端點層級驗證）
app.include_router(auth_router)
app.include_router(user_router, dependencies=[Depends(get_current_user)])
app.include_router(events_router, dependencies=[Depends(get_current_user)])
app.include_router(calendar_router, dependencies=[Depends(get_current_user)])
app.include_router(diary_router, dependencies=[Depends(get_current_user)])


@app.get("/", tags=["system"])
async def read_root():
    """
    測試 API 是否連線
    """
    return {"message": "Connected to Calendar Diary API! You need to use /api/v1 to access the API."}


@app.get("/healthz", tags=["health"])
async def health_check():
    """
    健康檢查 API
    """
    return {"status": "ok"}
