from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

import sqlalchemy as sa
from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.shared.database.base_model import Base
from src.shared.logging import get_logger

logger = get_logger(__name__)


class Database:
    """
    Owns one async engine and its session factory.

    Constructed explicitly by the application factory (or the worker entrypoint)
    and passed to whatever needs a session; nothing here is process-global.
    """

    def __init__(
        self,
        database_url: str,
        *,
        echo: bool = False,
        pool_size: int = 5,
        max_overflow: int = 10,
    ) -> None:
        self.url = database_url
        engine_kwargs: Dict[str, Any] = {"echo": echo, "pool_pre_ping": True}

        if database_url.startswith("sqlite"):
            if ":memory:" in database_url or database_url.rstrip("/").endswith("sqlite+aiosqlite:"):
                # one shared connection, otherwise every session sees an empty database
                engine_kwargs["poolclass"] = StaticPool
            engine_kwargs["connect_args"] = {"check_same_thread": False}
        else:
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=30,
                pool_recycle=3600,
            )

        self.engine: AsyncEngine = create_async_engine(database_url, **engine_kwargs)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=True,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Plain session (no implicit commit). Rolls back on error, always closed.
        """
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def create_all(self, metadata: Optional[MetaData] = None) -> None:
        """Create tables for every imported model (dev/test bootstrap; prod uses alembic)."""
        async with self.engine.begin() as conn:
            await conn.run_sync((metadata or Base.metadata).create_all)
        logger.info("database_schema_created")

    async def ping(self) -> bool:
        async with self.session() as session:
            await session.execute(sa.text("SELECT 1"))
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("database_engine_disposed")
