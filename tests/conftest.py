"""
Test configuration and fixtures for PageGrade.

The database URL is pointed at a throwaway SQLite file before any project
module is imported, so importing ``db.session`` or ``main`` never needs a
running PostgreSQL.
"""

import asyncio
import os
import tempfile
from datetime import datetime, timedelta, timezone

_db_fd, test_db_path = tempfile.mkstemp(suffix=".db")
os.close(_db_fd)
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{test_db_path}"

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from analyzers.base import BaseAnalyzer, ComponentResult
from analyzers.registry import CANONICAL_COMPONENT_NAMES
from db.session import create_tables
from pipeline.metadata import PageMetadata
from pipeline.requests import build_request


class StubAnalyzer(BaseAnalyzer):
    """Analyzer with a canned score that counts its invocations."""

    def __init__(
        self,
        name: str,
        score: int = 80,
        error: Exception | None = None,
        delay: float = 0.0,
        issues: list[str] | None = None,
        recommendations: list[str] | None = None,
    ):
        self._name = name
        self.score = score
        self.error = error
        self.delay = delay
        self.issues = issues or []
        self.recommendations = recommendations or []
        self.calls = 0

    @property
    def name(self) -> str:
        return self._name

    async def analyze(self, url: str) -> ComponentResult:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return ComponentResult(
            score=self.score,
            issues=list(self.issues),
            recommendations=list(self.recommendations),
            metrics={"url": url},
        )


class StubMetadataProvider:
    def __init__(self, title: str = "Example Domain"):
        self.title = title
        self.calls = 0

    async def fetch(self, url: str) -> PageMetadata:
        self.calls += 1
        return PageMetadata(
            title=self.title,
            description="An example page",
            url=url,
            schema=None,
        )


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def make_registry(scores: dict[str, int] | None = None, **overrides) -> dict[str, StubAnalyzer]:
    """Six stub analyzers, scoring 80 unless told otherwise."""
    scores = scores or {}
    registry = {
        name: StubAnalyzer(name, score=scores.get(name, 80))
        for name in CANONICAL_COMPONENT_NAMES
    }
    registry.update(overrides)
    return registry


@pytest.fixture
def registry():
    return make_registry({"speed": 90, "fonts": 80, "images": 70, "cta": 60, "whitespace": 50, "social": 40})


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def metadata_provider():
    return StubMetadataProvider()


@pytest.fixture
def make_request():
    def _make(url="https://example.com", component=None, email="owner@example.com", force_rescan=False):
        return build_request(url=url, component=component, email=email, force_rescan=force_rescan)

    return _make


@pytest.fixture
async def db_engine(tmp_path):
    """Fresh SQLite database per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'pagegrade.db'}")
    await create_tables(bind=engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
