from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import AsyncAdaptedQueuePool, NullPool


class Base(DeclarativeBase):
    pass


def to_async_url(database_url: str) -> str:
    """Convert sqlite:/// to sqlite+aiosqlite:///"""
    if database_url.startswith("sqlite:///"):
        return database_url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return database_url


class Database:
    """
    Async engine and session factory for one process.

    Built once at startup and shared read-only by every store. Celery
    workers run each task on a fresh event loop, so they build it with
    ``null_pool=True`` to avoid reusing connections across loops.
    SQLite engines in the API process hand out a single pooled connection,
    so concurrent writes are serialized instead of failing with "database
    is locked".
    """

    def __init__(self, database_url: str, echo: bool = False, null_pool: bool = False):
        self.url = to_async_url(database_url)
        engine_kwargs = {"echo": echo}
        if null_pool:
            engine_kwargs["poolclass"] = NullPool
        elif self.url.startswith("sqlite") and ":memory:" not in self.url:
            # SQLite has a single writer; sessions queue for one connection
            engine_kwargs.update(poolclass=AsyncAdaptedQueuePool, pool_size=1, max_overflow=0)
        self.engine = create_async_engine(self.url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def init_db(self) -> None:
        # Import models so their tables are registered on Base.metadata
        from hirewise import models  # noqa: F401

        sqlite_prefix = "sqlite+aiosqlite:///"
        if self.url.startswith(sqlite_prefix) and ":memory:" not in self.url:
            Path(self.url[len(sqlite_prefix):]).parent.mkdir(parents=True, exist_ok=True)

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
