"""
Database Connection Management

Async SQLAlchemy 2.0 engine owned by a ``Database`` handle. The application
lifespan creates the handle, runs the startup schema setup and injects it into
route handlers through the ``get_session`` dependency.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import structlog
from fastapi import Request
from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool

from marketplace.config.settings import DatabaseSettings
from marketplace.database.models import Base, Product, PRODUCT_SUPPLEMENTARY_COLUMNS

logger = structlog.get_logger(__name__)


def _ensure_product_columns(conn: Connection) -> None:
    """Add the derived product columns to a products table created before they existed."""
    inspector = inspect(conn)
    existing = {column["name"] for column in inspector.get_columns(Product.__tablename__)}

    for name in PRODUCT_SUPPLEMENTARY_COLUMNS:
        if name in existing:
            continue

        column = Product.__table__.c[name]
        column_type = column.type.compile(dialect=conn.dialect)
        if name == "total_score":
            default = "0.00"
        elif conn.dialect.name == "postgresql":
            default = "'{}'"
        else:
            default = "'[]'"

        conn.execute(text(
            f"ALTER TABLE {Product.__tablename__} ADD COLUMN {name} {column_type} DEFAULT {default}"
        ))
        logger.info("Added missing product column", column=name)


class Database:
    """
    Handle on the relational store.

    Example:
        database = Database(settings.database)
        await database.init()
        async with database.session() as session:
            result = await session.execute(query)
    """

    def __init__(self, settings: DatabaseSettings):
        self.settings = settings
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def engine(self) -> AsyncEngine:
        """
        Get the database engine.

        Raises:
            RuntimeError: If database is not initialized
        """
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self._engine

    async def init(self) -> AsyncEngine:
        """
        Create the engine, verify connectivity and bring the schema up to date.

        Tables are created if absent and the supplementary product columns are
        added when missing. Any failure here is fatal and re-raised.

        Returns:
            AsyncEngine: The initialized database engine
        """
        if self._engine is not None:
            logger.warning("Database already initialized")
            return self._engine

        url = self.settings.async_url
        engine_config = {"echo": self.settings.echo}
        if url.startswith("sqlite"):
            # In-memory SQLite lives on a single connection
            engine_config.update({
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            })
        else:
            engine_config.update({
                "poolclass": NullPool,
                "pool_pre_ping": True,
            })

        self._engine = create_async_engine(url, **engine_config)
        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

        try:
            async with self._engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
                await conn.run_sync(Base.metadata.create_all)
                await conn.run_sync(_ensure_product_columns)
            logger.info(
                "Database initialized",
                dialect=self._engine.dialect.name,
                host=self.settings.host,
                database=self.settings.db,
            )
        except Exception as e:
            logger.error("Database initialization failed", error=str(e), error_type=type(e).__name__)
            await self.close()
            raise

        return self._engine

    async def close(self) -> None:
        """Dispose of the engine and its connections."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database connection pool closed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Open a session wrapping one transaction.

        Commits when the block completes, rolls back when it raises.
        """
        if self._session_factory is None:
            logger.error("Database not initialized when session() called")
            raise RuntimeError("Database not initialized. Call init() first.")

        session = self._session_factory()
        try:
            yield session
            await session.commit()
            logger.debug("Database session committed")
        except Exception as e:
            logger.debug("Database session error, rolling back", error=str(e), error_type=type(e).__name__)
            await session.rollback()
            raise
        finally:
            await session.close()

    async def check_health(self) -> dict:
        """
        Check database health status.

        Returns:
            dict: Health status with latency information
        """
        try:
            start = time.perf_counter()
            async with self.session() as session:
                await session.execute(text("SELECT 1"))
            latency_ms = (time.perf_counter() - start) * 1000

            return {
                "status": "healthy",
                "latency_ms": round(latency_ms, 2),
            }
        except Exception as e:
            return {
                "status": "unhealthy",
                "error": str(e),
            }


def get_database(request: Request) -> Database:
    """FastAPI dependency returning the application's Database handle."""
    return request.app.state.database


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for database sessions.

    Example:
        @router.get("/items")
        async def get_items(session: AsyncSession = Depends(get_session)):
            ...
    """
    async with get_database(request).session() as session:
        yield session
