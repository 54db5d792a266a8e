"""
Test configuration and fixtures for the shortlink service.
This centralizes all test setup, making individual tests clean.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from main import app
from shortlink_app.database.connection import Base, get_db
from shortlink_app.services.short_code_strategies import ShortCodeStrategy
from shortlink_app.services.url_service import URLService
from shortlink_app.storage import (
    InMemoryAnalyticsStore,
    InMemoryURLStore,
    SQLAlchemyAnalyticsStore,
    SQLAlchemyURLStore,
)

# Test database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TTL = timedelta(hours=6)
START = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Callable clock that only moves when a test moves it"""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta):
        self.now += delta


class ScriptedShortCodeStrategy(ShortCodeStrategy):
    """Hands out a fixed sequence of codes so collisions can be staged"""

    def __init__(self, codes):
        self.codes = list(codes)
        self.calls = 0

    def generate(self) -> str:
        code = self.codes[self.calls]
        self.calls += 1
        return code


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    This ensures tests are isolated and don't affect each other.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Create a test client with database dependency overridden.
    This is the main fixture that tests will use.
    """
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def memory_stores():
    return InMemoryURLStore(), InMemoryAnalyticsStore()


@pytest.fixture
def memory_service(memory_stores, clock):
    """URLService over in-memory stores with a pinned clock"""
    url_store, analytics_store = memory_stores
    return URLService(url_store, analytics_store, ttl=TTL, clock=clock)


@pytest.fixture
def sql_service(db_session, clock):
    """URLService over the SQLite test database with a pinned clock"""
    return URLService(
        SQLAlchemyURLStore(db_session),
        SQLAlchemyAnalyticsStore(db_session),
        ttl=TTL,
        clock=clock,
    )
