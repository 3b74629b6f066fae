# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database connection management using SQLAlchemy async.

The Database object owns the async engine and sessionmaker. It is
created once at application startup, kept on app.state and handed to
request handlers through FastAPI dependencies.

Uses SQLAlchemy 2.0 async API with asyncpg driver.

Example:
    from edupulse.infrastructure.database import Database

    database = Database.from_settings(settings)

    async with database.session() as session:
        result = await session.execute(select(Content))
        contents = result.scalars().all()

    await database.dispose()
"""

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from edupulse.core.exceptions import PersistenceError

if TYPE_CHECKING:
    from edupulse.core.config.settings import Settings

logger = logging.getLogger(__name__)


class Database:
    """Storage handle wrapping an async engine and its sessionmaker.

    Attributes:
        engine: SQLAlchemy async engine.
        sessionmaker: Factory for AsyncSession instances.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        """Initialize the storage handle.

        Args:
            engine: Async engine to bind sessions to.
        """
        self.engine = engine
        self.sessionmaker = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: "Settings") -> "Database":
        """Create the connection pool from application settings.

        Args:
            settings: Application settings containing database configuration.

        Returns:
            Database bound to a new engine.

        Raises:
            PersistenceError: If engine creation fails.
        """
        try:
            engine = create_async_engine(
                settings.database.url,
                pool_size=settings.database.pool_size,
                max_overflow=settings.database.max_overflow,
                pool_pre_ping=True,
                pool_recycle=1800,
                echo=settings.database.echo,
            )
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to initialize database connection", e) from e

        logger.info(
            "Database engine created: host=%s, name=%s",
            settings.database.host,
            settings.database.name,
        )
        return cls(engine)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Get an async session scoped to one unit of work.

        The session is committed on success and rolled back on exception.

        Yields:
            AsyncSession for database operations.

        Raises:
            PersistenceError: If a database operation fails.
        """
        async with self.sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise PersistenceError("Database operation failed", e) from e
            except Exception:
                await session.rollback()
                raise

    async def check_connection(self) -> bool:
        """Check if the database is reachable.

        Returns:
            True if a trivial query succeeds, False otherwise.
        """
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning("Database connection check failed: %s", e)
            return False

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()
        logger.info("Database engine disposed")
