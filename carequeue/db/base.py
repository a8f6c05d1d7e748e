"""
Database engine, session factory and health utilities.
"""

from datetime import datetime, timezone
from typing import Any, Dict
from sqlmodel import SQLModel
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy import text
from sqlalchemy.pool import StaticPool

from carequeue.core.config import settings


def engine_kwargs(database_url: str) -> Dict[str, Any]:
    """Engine options for the configured backend."""
    if database_url.startswith("sqlite"):
        # A single shared connection keeps in-memory databases alive
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    return {
        "pool_size": settings.database_pool_size,
        "max_overflow": settings.database_max_overflow,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        "connect_args": {"timeout": settings.database_connect_timeout},
    }


def build_engine(database_url: str) -> AsyncEngine:
    return create_async_engine(
        database_url,
        **engine_kwargs(database_url),
        echo=settings.debug
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


# Create async engine
async_engine = build_engine(settings.database_url)

# Session maker
AsyncSessionLocal = build_session_factory(async_engine)


async def init_db(engine: AsyncEngine = None):
    """Create all tables known to the SQLModel metadata."""
    # Register table models on the metadata
    from carequeue.models import database  # noqa: F401

    engine = engine or async_engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def check_database_health(session_factory: async_sessionmaker = None) -> Dict[str, Any]:
    """Check database connectivity and health."""
    session_factory = session_factory or AsyncSessionLocal
    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
            return {
                "status": "healthy",
                "database": "connected",
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
    except Exception as e:
        return {
            "status": "unhealthy",
            "database": "disconnected",
            "error": str(e),
            "timestamp": datetime.now(timezone.utc).isoformat()
        }
