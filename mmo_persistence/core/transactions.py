"""
Explicit transaction handles for composite writes.

Every composite operation (character save, batch save, guild save, guild
removal) receives a `StorageTransaction`. The operation that opened the
transaction owns it and commits it; operations running inside someone else's
transaction receive an enlisted handle whose commit is a no-op. This is how a
character save inside a batch save skips its own commit without a boolean
flag.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Awaitable, Callable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from .logging_config import get_logger

logger = get_logger(__name__)

AfterCommit = Callable[[], Awaitable[Any]]


class StorageTransaction:
    """A database session plus the knowledge of who may commit it."""

    def __init__(
        self,
        session: AsyncSession,
        owner: bool = True,
        root: Optional["StorageTransaction"] = None,
    ):
        self._session = session
        self._owner = owner
        self._root = root or self
        self._after_commit: List[AfterCommit] = []

    @property
    def session(self) -> AsyncSession:
        return self._session

    @property
    def owns(self) -> bool:
        """Whether this handle opened the transaction and will commit it."""
        return self._owner

    def enlist(self) -> "StorageTransaction":
        """Handle for a nested operation: same session, cannot commit."""
        return StorageTransaction(self._session, owner=False, root=self._root)

    def after_commit(self, callback: AfterCommit) -> None:
        """Run `callback` once the outermost transaction has committed."""
        self._root._after_commit.append(callback)

    async def _run_after_commit(self) -> None:
        callbacks, self._after_commit = self._after_commit, []
        for callback in callbacks:
            await callback()


@asynccontextmanager
async def transaction_scope(
    session_factory: sessionmaker,
    outer: Optional[StorageTransaction] = None,
) -> AsyncGenerator[StorageTransaction, None]:
    """
    Open a transaction, or join `outer` if one is already running.

    The owning scope commits on success and rolls back every write since the
    start on any exception, which is then re-raised. After-commit callbacks
    only run for the owning scope, after the commit succeeded.
    """
    if outer is not None:
        yield outer.enlist()
        return

    async with session_factory() as session:
        tx = StorageTransaction(session)
        try:
            yield tx
            await session.commit()
        except Exception:
            await session.rollback()
            logger.debug("Transaction rolled back")
            raise

    await tx._run_after_commit()
