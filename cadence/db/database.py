"""Database connection and session management."""
import logging

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from cadence.config.settings import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def _configure_sqlite(sync_engine) -> None:
    """Let SQLAlchemy own BEGIN so SAVEPOINTs work, and enforce foreign keys."""

    @event.listens_for(sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_primary_engine(url: str | None = None, **engine_kwargs) -> AsyncEngine:
    """Create the database engine."""
    url = url or settings.database_url
    if url.startswith("sqlite"):
        sqlite_engine = create_async_engine(url, echo=settings.debug, future=True, **engine_kwargs)
        _configure_sqlite(sqlite_engine.sync_engine)
        return sqlite_engine
    return create_async_engine(
        url,
        echo=settings.debug,
        future=True,
        pool_size=20,
        max_overflow=20,
        pool_timeout=30,
        pool_recycle=300,
        pool_pre_ping=True,
    )


engine = create_primary_engine()

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


async def get_db() -> AsyncSession:
    """
    Dependency that provides a database session.

    Commits when the request handler returns, rolls back if it raises.
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db():
    """Initialize database tables."""
    import cadence.models  # noqa: F401  registers all tables on Base.metadata

    if settings.database_url.startswith("sqlite"):
        async with engine.connect() as conn:
            await conn.execute(text("PRAGMA journal_mode=WAL"))
            await conn.execute(text("PRAGMA busy_timeout=30000"))
            await conn.commit()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created/verified")


async def close_all_engines():
    """Close the database engine."""
    await engine.dispose()
