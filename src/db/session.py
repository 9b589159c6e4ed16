"""Async engine, session factory and the FastAPI session dependency."""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from config import settings
from db.models import Base


def make_engine(database_url: str | None = None, pooled: bool = True) -> AsyncEngine:
    """
    Build an async engine for the analysis store.

    Worker tasks run each analysis in a fresh event loop and pass
    ``pooled=False``; pooled connections are bound to the loop that
    opened them.
    """
    url = database_url or settings.database_url
    if not pooled:
        return create_async_engine(url, poolclass=NullPool, echo=settings.debug)
    return create_async_engine(url, pool_pre_ping=True, echo=settings.debug)


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Records are read after commit when building responses
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = make_engine()
async_session_factory = make_session_factory(engine)


async def create_tables(bind: AsyncEngine = engine) -> None:
    """Create tables that do not exist yet."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Read-only session for report endpoints.

    Writes go through AnalysisService, which opens and commits its own
    sessions, so nothing is committed here.
    """
    async with async_session_factory() as session:
        yield session
