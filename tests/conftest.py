"""Shared fixtures and utilities for tests."""

import os

# Settings are read at import time, so the environment must be in place
# before anything under api/, core/ or database/ is imported.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/0")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-min-32-chars-long-for-security")
os.environ.setdefault("JWT_ALGORITHM", "HS256")
os.environ.setdefault("JSON_LOGS", "true")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from api.dependencies import get_quota_counter
from api.main import app
from core.quotas import MonthlyQuotaCounter
from core.security import create_access_token
from database.engine import Base, _import_models, get_db, make_session_factory


class FakePipeline:
    """Queues commands and runs them against FakeRedis on execute()."""

    def __init__(self, redis):
        self.redis = redis
        self.commands = []

    def incr(self, key):
        self.commands.append(("incr", key))
        return self

    def expire(self, key, seconds):
        self.commands.append(("expire", key, seconds))
        return self

    async def execute(self):
        results = []
        for name, *args in self.commands:
            results.append(await getattr(self.redis, name)(*args))
        self.commands = []
        return results


class FakeRedis:
    """In-memory stand-in for the handful of redis.asyncio calls quotas use."""

    def __init__(self):
        self.store = {}
        self.expirations = {}

    def pipeline(self):
        return FakePipeline(self)

    async def incr(self, key):
        self.store[key] = self.store.get(key, 0) + 1
        return self.store[key]

    async def decr(self, key):
        self.store[key] = self.store.get(key, 0) - 1
        return self.store[key]

    async def expire(self, key, seconds):
        self.expirations[key] = seconds
        return True

    async def get(self, key):
        value = self.store.get(key)
        return None if value is None else str(value)


@pytest.fixture
def fake_redis():
    """Fixture providing an empty in-memory Redis double."""
    return FakeRedis()


@pytest.fixture
def quota_counter(fake_redis):
    return MonthlyQuotaCounter(fake_redis)


@pytest.fixture
def session_factory(tmp_path):
    """Async session factory over a fresh SQLite file with all tables created."""
    db_path = tmp_path / "test.db"

    _import_models()
    sync_engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()

    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    yield make_session_factory(engine)


@pytest.fixture
def client(session_factory, quota_counter):
    """Test client wired to the per-test database and the fake quota store."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_quota_counter():
        return quota_counter

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_quota_counter] = override_get_quota_counter
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(user_id, user_type, plan=None, email=None):
    """Bearer header for a freshly issued access token."""
    token = create_access_token(
        user_id=user_id,
        email=email or f"{user_id}@acme.io",
        user_type=user_type,
        plan=plan,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def candidate_headers():
    return auth_headers("cand-1", "candidate", plan="pro")


@pytest.fixture
def vendor_headers():
    return auth_headers("vendor-1", "vendor", plan="pro")


@pytest.fixture
def make_auth_headers():
    return auth_headers
