"""
SQLAlchemy Implementation of Unit of Work
Manages database transactions with async SQLAlchemy sessions
"""
from __future__ import annotations

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.shared.logging import get_logger

logger = get_logger(__name__)


class SQLAlchemyUnitOfWork:
    """
    SQLAlchemy-based Unit of Work implementation.

    Opens one session per ``async with`` block. Everything done through the
    repositories bound in ``_bind_repositories`` is atomic: committed by
    ``commit()``, rolled back on exception or when the block exits without a
    commit. The session is closed on every exit path.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self.session: Optional[AsyncSession] = None
        self._committed = False

    async def __aenter__(self) -> SQLAlchemyUnitOfWork:
        self.session = self._session_factory()
        self._committed = False
        self._bind_repositories(self.session)
        logger.debug("uow_started")
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        try:
            if exc_type is not None:
                await self.rollback()
                logger.debug("uow_rolled_back", exception=str(exc_val))
            elif not self._committed:
                await self.rollback()
        finally:
            if self.session is not None:
                await self.session.close()
            self.session = None

    def _bind_repositories(self, session: AsyncSession) -> None:
        """Subclasses attach their repositories to the fresh session."""

    async def commit(self) -> None:
        """
        Commit the current transaction.

        Raises:
            Exception: If commit fails (after rolling back)
        """
        assert self.session is not None, "UnitOfWork used outside of 'async with'"
        try:
            await self.session.commit()
            self._committed = True
        except Exception as e:
            await self.rollback()
            logger.error("uow_commit_failed", error=str(e))
            raise

    async def rollback(self) -> None:
        if self.session is None:
            return
        await self.session.rollback()
        self._committed = False
