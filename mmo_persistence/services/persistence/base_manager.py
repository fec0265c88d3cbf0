"""
Shared infrastructure for all persistence managers.

Provides read sessions, transaction scopes and timestamp helpers. Sub-entity
mappers do not open sessions at all: they receive the session of the
composite operation that calls them and never commit.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from mmo_persistence.core.logging_config import get_logger
from mmo_persistence.core.metrics import skipped_rows_total
from mmo_persistence.core.transactions import StorageTransaction, transaction_scope

logger = get_logger(__name__)


class BaseManager:
    """Base class providing shared infrastructure for all persistence managers."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _db_session(self) -> AsyncGenerator[AsyncSession, None]:
        if not self._session_factory:
            raise RuntimeError("Database session factory not initialized")

        async with self._session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    def _transaction(self, outer: Optional[StorageTransaction] = None):
        if not self._session_factory:
            raise RuntimeError("Database session factory not initialized")
        return transaction_scope(self._session_factory, outer)

    def _utc_now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _skip_row(self, table: str, reason: str, message: str, **context) -> None:
        """Report a row that no longer fits current game data."""
        skipped_rows_total.labels(table=table, reason=reason).inc()
        logger.warning(message, extra={"table": table, "reason": reason, **context})
