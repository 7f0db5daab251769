"""
Pytest configuration and shared fixtures.

Tests run against a throwaway SQLite file per test (aiosqlite, NullPool) and
with ENVIRONMENT=test, so the AI adapter never calls out unless a test hands
it a mocked transport explicitly.
"""

import asyncio
import os
import tempfile

_BOOTSTRAP_DIR = tempfile.mkdtemp(prefix="lifetasks-tests-")
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_BOOTSTRAP_DIR}/bootstrap.db"
os.environ["REMINDER_SWEEP_ENABLED"] = "false"
os.environ["OPENAI_API_KEY"] = ""

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from lifetasks.db.base import Base  # noqa: E402
from lifetasks.db.session import get_db  # noqa: E402
from lifetasks.main import app  # noqa: E402
from lifetasks.models import Subtask, Task, TaskReminder, User  # noqa: E402,F401

TEST_PASSWORD = "secret123"


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests, no database")
    config.addinivalue_line("markers", "db: uses the temporary SQLite database")


def _enable_sqlite_foreign_keys(dbapi_connection, _record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def session_maker(tmp_path):
    """Session factory bound to a fresh SQLite file with all tables created."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )
    event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    async def create_schema():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(create_schema())
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    asyncio.run(engine.dispose())


@pytest.fixture
def client(session_maker):
    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Register through the API; returns (auth headers, response body)."""

    def _register(email="owner@example.com", name="Owner", password=TEST_PASSWORD, **extra):
        resp = client.post(
            "/auth/register",
            json={"name": name, "email": email, "password": password, **extra},
        )
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return {"Authorization": f"Bearer {body['accessToken']}"}, body

    return _register


@pytest.fixture
def auth_headers(register):
    headers, _ = register()
    return headers


@pytest.fixture
def other_headers(register):
    headers, _ = register(email="intruder@example.com", name="Intruder")
    return headers
