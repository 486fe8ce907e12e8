"""Database engine, session factory, and declarative base.

The identifier stores open their own short transactions through
``async_session``: one statement-sized unit of work per allocation or
mapping insert, so no row lock outlives the call that took it.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.orm import DeclarativeBase

from seedtrace.config import settings


class Base(DeclarativeBase):
    """Declarative base for every SeedTrace table."""
    pass


def make_engine(url: str, echo: bool = False) -> AsyncEngine:
    if url.startswith("sqlite"):
        # SQLite serialises writers; wait for the lock instead of failing fast
        return create_async_engine(url, echo=echo, connect_args={"timeout": 30})
    return create_async_engine(url, echo=echo, pool_size=20, max_overflow=10)


def make_sessionmaker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = make_engine(settings.database_url, echo=settings.debug)

async_session = make_sessionmaker(engine)


async def create_schema(bind: AsyncEngine = engine) -> None:
    """Create all tables that do not exist yet (dev / test helper)."""
    import seedtrace.models  # noqa: F401  register tables on Base.metadata

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
