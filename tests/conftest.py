"""Pytest fixtures for testing."""

from datetime import datetime, timedelta

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import news_admin.models  # noqa: F401  (registers tables)
from news_admin.config import Settings, get_settings
from news_admin.database import get_session
from news_admin.main import create_app
from news_admin.models import FetchLog, FetchStatus, NewsItem, Source

NOW = datetime(2024, 6, 15, 12, 0, 0)


@pytest.fixture
def anyio_backend():
    """Use asyncio backend for pytest-asyncio."""
    return "asyncio"


@pytest.fixture
async def async_engine():
    """Create an in-memory async engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def async_session(async_engine):
    """Create an async session for testing."""
    async with AsyncSession(async_engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
async def broken_session():
    """A session on a database without any tables, so every query fails."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with AsyncSession(engine) as session:
        yield session
    await engine.dispose()


@pytest.fixture
def test_settings():
    """Settings with authentication disabled and no log files."""
    return Settings(
        enable_auth=False,
        jwt_secret_key="test-secret",
        log_file="",
        log_error_file="",
    )


@pytest.fixture
async def app(async_session, test_settings):
    """Create test application with overridden dependencies."""
    app = create_app()

    async def override_get_session():
        yield async_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_settings] = lambda: test_settings
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client


def make_source(name: str = "Publico", category: str = "politics_pt", **kwargs) -> Source:
    """Helper function to create a source for testing."""
    return Source(
        name=name,
        url=kwargs.get("url", f"https://{name.lower().replace(' ', '')}.example/rss"),
        category=category,
        country=kwargs.get("country", "PT"),
        language=kwargs.get("language", "pt"),
        is_active=kwargs.get("is_active", True),
        last_fetch_at=kwargs.get("last_fetch_at"),
        fetch_count=kwargs.get("fetch_count", 0),
        error_count=kwargs.get("error_count", 0),
    )


def make_news(
    source: Source,
    title: str = "Headline",
    category: str | None = None,
    priority_score: float = 0.0,
    fetched_at: datetime | None = None,
    **kwargs,
) -> NewsItem:
    """Helper function to create a news item for testing."""
    return NewsItem(
        title=title,
        link=kwargs.get("link", f"https://news.example/{title.lower().replace(' ', '-')}"),
        description=kwargs.get("description"),
        author=kwargs.get("author"),
        published_at=kwargs.get("published_at"),
        fetched_at=fetched_at or NOW,
        category=category or source.category,
        priority_score=priority_score,
        matched_keywords=kwargs.get("matched_keywords", []),
        source_id=source.id,
    )


@pytest.fixture
async def sources(async_session):
    """Three sources, one of them inactive."""
    items = [
        make_source("Publico", "politics_pt"),
        make_source("Folha", "politics_br", country="BR"),
        make_source("Reuters World", "conflicts", country="GB", language="en", is_active=False),
    ]
    for source in items:
        async_session.add(source)
    await async_session.commit()
    for source in items:
        await async_session.refresh(source)
    return items


@pytest.fixture
async def seeded(async_session, sources):
    """A small news set covering every filter dimension."""
    publico, folha, reuters = sources
    news = [
        make_news(publico, "Election results announced", priority_score=3.0,
                  fetched_at=NOW - timedelta(hours=1), description="Final count"),
        make_news(publico, "Budget vote delayed", priority_score=1.0,
                  fetched_at=NOW - timedelta(days=1)),
        make_news(folha, "Congresso aprova reforma", priority_score=2.0,
                  fetched_at=NOW - timedelta(days=2), description="Nova ELEICAO em debate"),
        make_news(folha, "Floods hit the south", category="disasters", priority_score=0.0,
                  fetched_at=NOW - timedelta(days=3)),
        make_news(reuters, "Ceasefire talks resume", priority_score=2.5,
                  fetched_at=NOW - timedelta(days=4), description="Post-election tension"),
    ]
    for item in news:
        async_session.add(item)
    await async_session.commit()
    for item in news:
        await async_session.refresh(item)
    return news


@pytest.fixture
async def fetch_logs(async_session, sources):
    publico, folha, _ = sources
    logs = [
        FetchLog(source_id=publico.id, status=FetchStatus.success, news_count=12,
                 duration_ms=850, created_at=NOW - timedelta(minutes=30)),
        FetchLog(source_id=folha.id, status=FetchStatus.error, news_count=0,
                 error_message="HTTP 503", created_at=NOW - timedelta(minutes=10)),
        FetchLog(source_id=publico.id, status=FetchStatus.success, news_count=3,
                 duration_ms=400, created_at=NOW - timedelta(hours=2)),
    ]
    for log in logs:
        async_session.add(log)
    await async_session.commit()
    return logs
