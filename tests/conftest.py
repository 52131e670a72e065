"""
Shared fixtures.

Patches dotenv so pydantic-settings never reads the project's real .env file
during tests. Tests control config through factories.make_settings() or
monkeypatch.setenv().
"""

import httpx
import pytest

from app import build_recorder
from factories import AsyncClient, build_test_app, make_settings
from repositories.indexes import ensure_indexes
from schemas.models.user import Principal, Role


@pytest.fixture(autouse=True)
def disable_dotenv_loading(monkeypatch):
    """Prevent pydantic-settings from loading .env files in all tests."""
    import pydantic_settings.sources.providers.dotenv as ps_dotenv

    monkeypatch.setattr(ps_dotenv, "dotenv_values", lambda *a, **kw: {})


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
async def db(settings):
    database = AsyncClient()[settings.db.db_name]
    await ensure_indexes(database)
    return database


@pytest.fixture
async def recorder(db, settings):
    rec = build_recorder(db, settings.recorder)
    await rec.start()
    yield rec
    await rec.stop()


@pytest.fixture
async def client(db, settings, recorder):
    app = build_test_app(db, settings, recorder)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def owner():
    return Principal(id="user-1", role=Role.USER)


@pytest.fixture
def other_user():
    return Principal(id="user-2", role=Role.USER)


@pytest.fixture
def admin():
    return Principal(id="admin-1", role=Role.ADMIN)
