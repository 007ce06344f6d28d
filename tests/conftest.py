from __future__ import annotations

from contextlib import asynccontextmanager

import pytest
from fastapi.testclient import TestClient

import main
from auth import dependencies as auth_dependencies
from core import db


@pytest.fixture(autouse=True)
def _env(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    monkeypatch.setenv("COOKIE_SECURE", "false")
    monkeypatch.setenv("COOKIE_SAMESITE", "lax")
    monkeypatch.delenv("ADMIN_PASSWORD", raising=False)
    monkeypatch.delenv("PRODUCT_EDIT_WINDOW_MINUTES", raising=False)
    monkeypatch.delenv("COMMISSION_RATE", raising=False)
    monkeypatch.delenv("MAX_IMAGE_UPLOAD_BYTES", raising=False)


@pytest.fixture
def client():
    # No context manager: the lifespan (DB pool, schema) stays off in tests.
    main.app.dependency_overrides.clear()
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


@pytest.fixture
def login():
    """
    Authenticate every request as the given identity user.
    """

    def _login(user: dict) -> dict:
        main.app.dependency_overrides[auth_dependencies.get_current_user] = lambda: user
        return user

    return _login


@pytest.fixture
def returns():
    """
    Build an async stand-in that records calls and returns a fixed value.
    """

    def _factory(value=None):
        calls: list[tuple[tuple, dict]] = []

        async def _fake(*args, **kwargs):
            calls.append((args, kwargs))
            return value

        _fake.calls = calls
        return _fake

    return _factory


@pytest.fixture
def buyer() -> dict:
    return {"id": "buyer-1", "email": "buyer@example.com", "google_user_data": {"name": "Bia Buyer"}}


@pytest.fixture
def seller() -> dict:
    return {"id": "seller-1", "email": "seller@example.com", "google_user_data": {"name": "Sol Seller"}}


class SqlRecorder:
    """
    Stands in for `core.db` and its transaction connections.

    Every statement is recorded whitespace-normalized. The latest reply set with
    `on(fragment, value)` answers statements containing `fragment`;
    anything else gets None.
    """

    def __init__(self) -> None:
        self.statements: list[tuple[str, tuple]] = []
        self._replies: list[tuple[str, object]] = []

    def on(self, fragment: str, value) -> None:
        self._replies.insert(0, (fragment, value))

    def sql(self, fragment: str = "") -> list[str]:
        return [sql for sql, _ in self.statements if fragment in sql]

    async def _run(self, sql: str, *args):
        sql = " ".join(sql.split())
        self.statements.append((sql, args))
        for fragment, value in self._replies:
            if fragment in sql:
                return value
        return None

    # asyncpg connection surface
    fetchrow = fetchval = fetch = execute = _run

    @asynccontextmanager
    async def transaction(self):
        yield self


@pytest.fixture
def sql_log(monkeypatch) -> SqlRecorder:
    recorder = SqlRecorder()
    for name in ("fetch_one", "fetch_all", "fetch_val", "execute"):
        monkeypatch.setattr(db, name, recorder._run)
    monkeypatch.setattr(db, "transaction", recorder.transaction)
    return recorder
