# 📄 File: app/shared/infrastructure/database/connection.py
#
# 🧭 Purpose (Layman Explanation):
# Manages the connection to our database, where the species catalog lives and where every
# plant scan is written down, handling multiple connections efficiently.
#
# 🧪 Purpose (Technical Summary):
# Async SQLAlchemy engine and session-factory management with connection pooling and
# health checks, plus the declarative Base shared by all ORM models.
#
# 🔗 Dependencies:
# - sqlalchemy (async engine and sessions)
# - app/shared/config/settings.py (database configuration)
# - asyncpg (PostgreSQL async driver)
#
# 🔄 Connected Modules / Calls From:
# - app.main (lifespan startup/shutdown)
# - plant_identification repository implementations (session factory)
# - migrations/env.py (metadata)

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.shared.config.settings import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for every ORM model in the application."""


class DatabaseConnectionManager:
    """
    Manages database connections with connection pooling,
    health monitoring, and retry on the health probe.
    """

    def __init__(self, settings: Settings):
        self._settings = settings
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._health_check_query = text("SELECT 1")
        self._retry_attempts = 3
        self._retry_delay = 1.0

    def _build_connection_params(self) -> Dict[str, Any]:
        """Build SQLAlchemy engine parameters from settings."""
        url = self._settings.database_url
        params: Dict[str, Any] = {
            "url": url,
            "echo": False,
            "pool_pre_ping": True,
        }

        # SQLite (tests, local runs) has no server-side pool to size
        if not url.startswith("sqlite"):
            params.update({
                "pool_recycle": 3600,
                "pool_size": self._settings.DB_POOL_SIZE,
                "max_overflow": self._settings.DB_MAX_OVERFLOW,
                "pool_timeout": 30,
            })

        return params

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database engine not initialized")
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            raise RuntimeError("Database engine not initialized")
        return self._session_factory

    async def initialize(self, create_tables: bool = False) -> None:
        """Initialize database engine and session factory."""
        if self._engine is not None:
            logger.warning("Database engine already initialized")
            return

        logger.info("Initializing database connection pool...")
        self._engine = create_async_engine(**self._build_connection_params())
        self._session_factory = async_sessionmaker(self._engine, expire_on_commit=False)

        if create_tables:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

        logger.info("Database connection pool initialized")

    async def health_check(self) -> dict:
        """
        Perform database health check and return structured status.
        """
        if self._engine is None:
            return {
                "status": "unhealthy",
                "error": "Database engine not initialized",
                "timestamp": datetime.utcnow().isoformat()
            }

        for attempt in range(self._retry_attempts):
            try:
                async with self._engine.connect() as conn:
                    await conn.execute(self._health_check_query)

                return {
                    "status": "healthy",
                    "timestamp": datetime.utcnow().isoformat()
                }

            except Exception as e:
                logger.warning(
                    f"Database health check failed (attempt {attempt + 1}/{self._retry_attempts}): {e}"
                )
                if attempt < self._retry_attempts - 1:
                    await asyncio.sleep(self._retry_delay * (2 ** attempt))

        return {
            "status": "unhealthy",
            "error": "Database health check failed after all retry attempts",
            "timestamp": datetime.utcnow().isoformat()
        }

    async def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database connections closed")
