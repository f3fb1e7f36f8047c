"""
Database configuration and session management.

The engine and session factory live on a `Database` object owned by the
application context instead of module globals, so tests and scripts can
build their own against any URL:
1. Declarative base with id and timestamps
2. Engine creation with pool settings (skipped for SQLite)
3. Session factory and request-scoped sessions
4. Explicit connect/dispose lifecycle
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Optional

from sqlalchemy import DateTime, func
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from socialnet.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base model class for all database models.

    Provides common functionality that all models should have:
    - Primary key (id)
    - Created/updated timestamps
    - String representation
    """

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        """String representation for debugging"""
        return f"<{self.__class__.__name__}(id={self.id})>"


class Database:
    """Owns the async engine and the session factory."""

    def __init__(self, url: str, engine: Optional[AsyncEngine] = None, **engine_kwargs):
        self.url = url
        self.engine = engine or create_async_engine(url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        engine_kwargs = {"echo": settings.debug}
        if not settings.is_sqlite:
            engine_kwargs.update(
                {
                    "pool_size": settings.database_pool_size,
                    "max_overflow": settings.database_max_overflow,
                    "pool_pre_ping": True,  # Validate connections before use
                    "pool_recycle": 3600,
                }
            )
        return cls(settings.database_url, **engine_kwargs)

    async def connect(self) -> None:
        """Check that the database answers."""
        async with self.engine.begin() as conn:
            await conn.exec_driver_sql("SELECT 1")
        logger.info("Database connection established")

    async def create_all(self) -> None:
        """Create all tables (tests and local scripts; production uses Alembic)."""
        # Import all models here to ensure they're registered
        from socialnet import models  # noqa

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database connections closed")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        A session that is rolled back on error and always closed.

        async with database.session() as db:
            ...
        """
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()
