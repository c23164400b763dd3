"""SQLAlchemy async engine and session factory for the users database.

The engine is created lazily from settings on first use (singleton), the
same way the rest of the infrastructure exposes its connections.
"""

# Standard library imports
import logging
from typing import Optional

# External package imports
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

# Local application imports
from ...core.config import get_settings


logger = logging.getLogger(__name__)

# Global engine instances (singleton pattern)
_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def create_engine(url: str, *, pool_size: int = 5, max_overflow: int = 10, echo: bool = False) -> AsyncEngine:
    """
    Create a new AsyncEngine

    Args:
        url: Database URL (``postgresql+asyncpg://...``)
        pool_size: Persistent connections kept in the pool
        max_overflow: Extra connections allowed beyond pool_size
        echo: Log emitted SQL

    Returns:
        Configured AsyncEngine
    """
    engine = create_async_engine(
        url,
        echo=echo,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=True,
    )
    logger.info("Created async engine for %s (pool_size=%s)", url.split("@")[-1], pool_size)
    return engine


def get_engine() -> AsyncEngine:
    """
    Get the database engine (singleton pattern)

    Returns:
        AsyncEngine bound to the configured database URL
    """
    global _engine

    if _engine is not None:
        return _engine

    settings = get_settings()
    _engine = create_engine(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Get the session factory bound to the singleton engine

    Returns:
        async_sessionmaker producing AsyncSession instances
    """
    global _session_factory

    if _session_factory is None:
        _session_factory = async_sessionmaker(
            bind=get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factory


async def dispose_engine() -> None:
    """Dispose of the engine and release all pooled connections."""
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        logger.info("Engine disposed")
    _engine = None
    _session_factory = None
