# problemlog/db/engine.py
"""
SQLModel database engine and session management.
Uses AsyncSession for compatibility with fastapi-users-db-sqlalchemy.
Supports SQLite (default) and PostgreSQL via the DATABASE_URL environment variable.
"""

from collections.abc import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.config import get_settings

DATABASE_URL = get_settings().resolved_database_url

# Detect dialect from URL
_is_sqlite = DATABASE_URL.startswith("sqlite")

# SQLite connections are cheap; opening one per session keeps them bound to
# the running event loop.
_engine_kwargs = (
    {"connect_args": {"check_same_thread": False}, "poolclass": NullPool}
    if _is_sqlite
    else {}
)
engine = create_async_engine(DATABASE_URL, echo=False, **_engine_kwargs)


# Activate WAL mode only for SQLite to improve concurrency
if _is_sqlite:
    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL;")
        cursor.execute("PRAGMA foreign_keys=ON;")
        cursor.close()

# Create session maker
async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for async SQLModel session injection.
    Usage: session: AsyncSession = Depends(get_session)
    """
    async with async_session_maker() as session:
        yield session


async def create_db_and_tables():
    """
    Create all tables defined in SQLModel models.
    Call this at application startup after importing all models.
    """
    from .. import models  # noqa: F401  (registers every table)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
