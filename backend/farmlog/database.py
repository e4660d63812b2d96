"""Database engine, session factory, and declarative base.

All entity tables carry a ``user_id`` column; rows are never shared
between user contexts.  Tables are created at startup with
``init_models()`` (there is no migration history to replay).
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from farmlog.config import settings


def _engine_options(url: str) -> dict:
    # SQLite uses a static/singleton pool that rejects sizing arguments
    if url.startswith("sqlite"):
        return {}
    return {"pool_size": 20, "max_overflow": 10}


def make_engine(url: str) -> AsyncEngine:
    return create_async_engine(url, echo=settings.debug, **_engine_options(url))


def make_sessionmaker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = make_engine(settings.database_url)
async_session = make_sessionmaker(engine)


class Base(DeclarativeBase):
    """Models for the per-user entity tables."""
    pass


async def init_models(bind: AsyncEngine = engine) -> None:
    """Create any missing tables."""
    import farmlog.models  # noqa: F401  (registers tables on Base.metadata)

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
