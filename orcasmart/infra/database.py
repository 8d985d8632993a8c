"""Async database configuration.

Provides:
- Async SQLAlchemy engine and session factory
- Transaction helper used by the catalog components
- Dialect-aware INSERT construct for atomic upserts
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy import text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from orcasmart.config import settings
from orcasmart.infra.logging import get_logger
from orcasmart.models import Base

logger = get_logger(__name__)

# Type alias for dependency injection
DatabaseSession = AsyncSession
SessionFactory = async_sessionmaker[AsyncSession]

# Global engine (initialized on app startup)
_engine: AsyncEngine | None = None
_session_factory: SessionFactory | None = None


def get_engine() -> AsyncEngine:
    """Get or create the async database engine."""
    global _engine

    if _engine is None:
        url = settings.database_url
        options: dict[str, Any] = {"echo": settings.debug}
        if not url.startswith("sqlite"):
            options.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_pool_max_overflow,
                pool_pre_ping=True,
                pool_recycle=1800,
            )

        logger.info(
            "Creating database engine",
            dialect=url.split(":", 1)[0],
            pool_size=options.get("pool_size"),
        )
        _engine = create_async_engine(url, **options)

    return _engine


def get_session_factory() -> SessionFactory:
    """Get or create the session factory."""
    global _session_factory

    if _session_factory is None:
        _session_factory = build_session_factory(get_engine())

    return _session_factory


def build_session_factory(engine: AsyncEngine) -> SessionFactory:
    """Create a session factory bound to the given engine."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@asynccontextmanager
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get an async database session that commits on success.

    Example:
        async with get_db_session() as session:
            result = await session.execute(select(Category))
    """
    factory = get_session_factory()
    session = factory()

    try:
        yield session
        await session.commit()

    except Exception as e:
        await session.rollback()
        logger.error("Database session error", error=str(e))
        raise

    finally:
        await session.close()


@asynccontextmanager
async def transaction(
    session_factory: SessionFactory | None = None,
) -> AsyncGenerator[AsyncSession, None]:
    """Open a session and run the block inside a single transaction.

    The transaction commits when the block exits normally and rolls back
    on any exception, which is re-raised unchanged.

    Args:
        session_factory: Factory to use (defaults to the global one)
    """
    factory = session_factory or get_session_factory()
    async with factory() as session:
        async with session.begin():
            yield session


def insert_for(session: AsyncSession, model: Any) -> Any:
    """Return a dialect-specific INSERT supporting ON CONFLICT.

    PostgreSQL and SQLite both expose ``on_conflict_do_update`` and
    ``returning``; the generic construct does not.

    Raises:
        NotImplementedError: For dialects without upsert support here
    """
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(model)
    if dialect == "sqlite":
        return sqlite.insert(model)
    raise NotImplementedError(f"Upserts are not supported for dialect '{dialect}'")


async def create_schema(engine: AsyncEngine | None = None) -> None:
    """Create all catalog tables that do not exist yet."""
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ensured", tables=sorted(Base.metadata.tables))


async def close_db_engine() -> None:
    """Close the database engine and all connections.

    Call this during application shutdown.
    """
    global _engine, _session_factory

    if _engine is not None:
        logger.info("Closing database engine")
        await _engine.dispose()
        _engine = None
        _session_factory = None


async def verify_db_connection() -> bool:
    """Verify database connectivity.

    Returns:
        True if connection successful, False otherwise
    """
    try:
        async with get_db_session() as session:
            await session.execute(text("SELECT 1"))
            logger.info("Database connection verified")
            return True
    except Exception as e:
        logger.error("Database connection failed", error=str(e))
        return False
