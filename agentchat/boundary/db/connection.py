"""
Database connection management.

Async engine and session factory for the conversation store, memory store
and pgvector index store. Components receive the factory by injection; this
module never holds a global engine.

Dependencies: sqlalchemy (asyncio), asyncpg, agentchat.configs
System role: Database connection lifecycle management
"""

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from agentchat.boundary.db.base import Base
from agentchat.configs.database import DatabaseSettings


def create_engine_from_settings(db_config: DatabaseSettings) -> AsyncEngine:
    """
    Create async SQLAlchemy engine with connection pooling.

    pool_pre_ping=True verifies connections before use to detect stale
    connections early.

    Returns:
        AsyncEngine: Configured async engine (asyncpg driver)
    """
    kwargs = {"echo": db_config.echo_sql, "pool_pre_ping": True}
    if db_config.async_database_url.startswith("postgresql"):
        kwargs.update(
            pool_size=db_config.pool_size,
            max_overflow=db_config.max_overflow,
            pool_timeout=db_config.pool_timeout,
        )
    return create_async_engine(db_config.async_database_url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """
    Create async session factory bound to `engine`.

    expire_on_commit=False so returned rows stay readable after the
    session closes.

    Usage:
        factory = create_session_factory(engine)
        async with factory() as session:
            session.add(obj)
            await session.commit()
    """
    return async_sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create all ORM tables that do not exist yet."""
    # Import models so they register on Base.metadata
    from agentchat.boundary.db import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
