"""
Async database engine and session management.
"""
import logging
from typing import AsyncGenerator, Optional

from sqlalchemy.exc import ArgumentError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from app.config import get_settings
from app.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

Base = declarative_base()

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker] = None


def get_engine() -> AsyncEngine:
    """
    Build the engine on first use.

    Raises ConfigurationError when the database URL or service credential
    is missing, or the URL cannot be parsed, so a misdeployed service
    fails before running any query.
    """
    global _engine, _session_factory

    if _engine is None:
        settings = get_settings()
        settings.require_persistence()
        try:
            engine = create_async_engine(
                settings.database_url,
                pool_pre_ping=True,
                echo=settings.debug,
            )
        except (ArgumentError, ImportError) as e:
            logger.error(f"❌ Failed to create database engine: {e}")
            raise ConfigurationError(f"Invalid DATABASE_URL: {e}") from e
        _engine = engine
        _session_factory = async_sessionmaker(_engine, expire_on_commit=False)
        logger.info("✅ Database engine created successfully")

    return _engine


def get_session_factory() -> async_sessionmaker:
    get_engine()
    return _session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a request-scoped session."""
    async with get_session_factory()() as session:
        yield session


async def init_db() -> None:
    """Create tables for all registered models."""
    import app.models  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
