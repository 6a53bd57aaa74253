"""
Pytest configuration and shared fixtures for Scrumkit tests.

- Every test gets its own in-memory SQLite database.
- The FastAPI app runs in-process through httpx's ASGITransport, with the
  database, event bus and text generator swapped through dependency overrides.
"""

from typing import List, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import scrumkit.models  # noqa: F401
from scrumkit.database import Base, get_db
from scrumkit.dependencies import get_event_bus, get_text_generator
from scrumkit.errors import GenerationFailed
from scrumkit.main import app
from scrumkit.services.event_bus import EventBus, SessionEvent


class FakeTextGenerator:
    """Records prompts and answers with canned text, or fails on demand."""

    def __init__(self, reply: str = "# Summary\nA good sprint."):
        self.reply = reply
        self.fail = False
        self.calls: List[Tuple[str, str]] = []

    async def generate(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        if self.fail:
            raise GenerationFailed("Failed to generate report")
        return self.reply


class Recorder:
    """Bus listener that keeps every event it receives."""

    def __init__(self):
        self.events: List[SessionEvent] = []

    def __call__(self, event: SessionEvent) -> None:
        self.events.append(event)

    @property
    def types(self) -> List[str]:
        return [e.type.value for e in self.events]


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def generator() -> FakeTextGenerator:
    return FakeTextGenerator()


@pytest_asyncio.fixture
async def client(session_factory, bus, generator):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_event_bus] = lambda: bus
    app.dependency_overrides[get_text_generator] = lambda: generator

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def retro(client):
    """A freshly created session (JSON body)."""
    resp = await client.post("/api/sessions", json={"name": "Sprint 42 Retro", "sprint_name": "Sprint 42"})
    assert resp.status_code == 201
    return resp.json()
