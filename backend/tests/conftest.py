"""
Pytest fixtures for test database, client, relay and admin access.

Each test gets a fresh in-memory SQLite database; tables are created and
dropped around the test for isolation.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["REDIS_ENABLED"] = "false"
os.environ["NOTIFICATION_BACKEND"] = "memory"
os.environ["ADMIN_TOKEN"] = "test-admin-token"

from datetime import date, timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from schoolhub.main import app
from schoolhub.db.base import Base
from schoolhub.db.session import get_db
from schoolhub.models.event import Event
from schoolhub.services.interfaces.memory_notifier import InMemoryRelay
from schoolhub.services.strategy_factory import get_relay

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
ADMIN_TOKEN = "test-admin-token"


def days_from_today(days: int) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


def build_event(**overrides) -> Event:
    fields = {
        "event_name": "Annual Sports Meet",
        "category": "Sports",
        "start_date": days_from_today(30),
        "end_date": days_from_today(31),
        "time": "09:00 AM",
        "venue": "Main Ground",
        "description": "Track and field events",
        "sub_activities": ["100m Sprint", "Long Jump"],
    }
    fields.update(overrides)
    return Event(**fields)


def application_payload(event_id=None, **overrides) -> dict:
    payload = {
        "student_name": "Asha Verma",
        "class_name": "8",
        "section": "A",
        "roll_number": "801",
        "phone": "9876543210",
        "event_id": event_id,
        "activity": "100m Sprint",
    }
    payload.update(overrides)
    return payload


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield session, then drop tables for isolation."""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def relay() -> InMemoryRelay:
    return InMemoryRelay(queue_size=10)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession, relay: InMemoryRelay) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB and relay dependencies."""

    async def override_get_db():
        yield db_session
        await db_session.commit()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_relay] = lambda: relay

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict:
    return {"X-Admin-Token": ADMIN_TOKEN}


async def _persist(db_session: AsyncSession, event: Event) -> Event:
    db_session.add(event)
    await db_session.commit()
    await db_session.refresh(event)
    return event


@pytest_asyncio.fixture
async def test_event(db_session: AsyncSession) -> Event:
    """Individual event without a capacity limit."""
    return await _persist(db_session, build_event())


@pytest_asyncio.fixture
async def limited_event(db_session: AsyncSession) -> Event:
    """Individual event that accepts two applications."""
    return await _persist(db_session, build_event(event_name="Quiz Bowl", category="Academics", capacity=2))


@pytest_asyncio.fixture
async def team_event(db_session: AsyncSession) -> Event:
    """Team event for 3 to 5 players plus one substitute."""
    return await _persist(
        db_session,
        build_event(
            event_name="Inter-House Football",
            event_type="team",
            participation_config={"min_players": 3, "max_players": 5, "max_substitutes": 1, "team_size": 5},
        ),
    )


@pytest_asyncio.fixture
async def timed_event(db_session: AsyncSession) -> Event:
    """Event ranked by elapsed time, lowest first."""
    return await _persist(
        db_session,
        build_event(
            event_name="Cross Country",
            metric_config={"metric_label": "Time", "sort_by": "asc", "unit": "s"},
        ),
    )
