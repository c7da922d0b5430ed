# -*- coding: utf-8 -*-
"""
測試共用設定：環境變數要在 import app 之前設好
"""
import os
import tempfile
import uuid

import pytest

_DB_DIR = tempfile.mkdtemp(prefix="calendar-diary-test-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-calendar-diary"
os.environ["DIARY_API_KEY"] = ""
os.environ.setdefault("LOG_JSON", "0")


@pytest.fixture(scope="session")
def client():
    from fastapi.testclient import TestClient
    from services.CalendarServer.app.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def app():
    from services.CalendarServer.app.main import app as _app

    yield _app
    _app.dependency_overrides.clear()


def _register(client, **overrides):
    suffix = uuid.uuid4().hex[:8]
    body = {
        "username": f"user_{suffix}",
        "email": f"user_{suffix}@calendar-diary.com",
        "password": "password123",
    }
    body.update(overrides)
    resp = client.post("/auth/register", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def register(client):
    return lambda **overrides: _register(client, **overrides)


@pytest.fixture
def auth_headers(client):
    data = _register(client)
    return {"Authorization": f"Bearer {data['token']}"}
