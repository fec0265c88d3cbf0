"""
Database connection setup.

Creates the async engine and session factory for the relational store
(PostgreSQL in production, SQLite in tests) and bootstraps the schema.

Sessions are created with `expire_on_commit=False`: loaded rows are read
after the commit that marks a character online, and async sessions cannot
lazily refresh expired attributes.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from .config import settings
from .logging_config import get_logger

logger = get_logger(__name__)


def create_engine(database_url: Optional[str] = None, **kwargs) -> AsyncEngine:
    """Create the async engine for `database_url` (defaults to settings)."""
    kwargs.setdefault("echo", settings.DATABASE_ECHO)
    return create_async_engine(database_url or settings.DATABASE_URL, **kwargs)


def create_session_factory(engine: AsyncEngine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """Create every table that does not exist yet."""
    # Import models so they register on the metadata
    from ..models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info(
        "Database schema ready",
        extra={"tables": sorted(Base.metadata.tables.keys())},
    )
