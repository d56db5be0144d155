from __future__ import annotations
import logging
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger("board.db")


class Base(DeclarativeBase):
    pass


def make_sqlite_url(db_path: str) -> str:
    # db_path like "./data/team_board.db"
    p = Path(db_path).resolve()
    p.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite+aiosqlite:///{p.as_posix()}"


def normalize_database_url(url: str) -> str:
    """Point plain postgres URLs at the asyncpg driver; leave anything else alone."""
    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return "postgresql+asyncpg://" + url[len(prefix):]
    return url


def make_engine(url: str, pool_size: int = 1) -> AsyncEngine:
    if url.startswith("sqlite"):
        return create_async_engine(url, future=True)
    return create_async_engine(
        url,
        future=True,
        pool_size=pool_size,
        max_overflow=0,
        pool_pre_ping=True,
    )


class Database:
    """
    Owns the engine and session factory for one process.

    Built once by the app factory (or a test), handed to the repo, and
    closed on shutdown.
    """

    def __init__(self, url: str, pool_size: int = 1):
        self.url = normalize_database_url(url)
        self.engine = make_engine(self.url, pool_size)
        self.sessionmaker: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine, expire_on_commit=False
        )

    async def create_schema(self) -> None:
        # registers TaskRow on Base.metadata
        from team_board.infra.db import task_repo_sql  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def reset(self) -> None:
        """Drop every pooled connection; the next session reconnects."""
        logger.warning("db.reset", extra={"category": "db", "event": "db.reset"})
        await self.engine.dispose()

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("db.closed", extra={"category": "db", "event": "db.closed"})
