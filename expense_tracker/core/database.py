# expense_tracker/core/database.py
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from fastapi import Request
import logging
from typing import AsyncGenerator

from .config import Settings

logger = logging.getLogger(__name__)

# Base class for all models
Base = declarative_base()


def build_engine_kwargs(settings: Settings) -> dict:
    engine_kwargs = {
        "echo": settings.DEBUG,
        "future": True,
        "pool_pre_ping": True,    # Check connection before using
    }
    if settings.is_sqlite:
        # SQLite picks its own pool; only a busy timeout applies
        engine_kwargs["connect_args"] = {"timeout": settings.DB_STATEMENT_TIMEOUT}
        return engine_kwargs

    # Bounded pool so concurrent requests queue instead of piling up connections
    engine_kwargs.update({
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,   # Seconds to wait for a free connection
        "pool_recycle": 300,                        # Recycle connections after 5 minutes
    })
    if settings.DATABASE_URL.startswith("postgresql+asyncpg"):
        engine_kwargs["connect_args"] = {
            "timeout": 10,  # seconds for asyncpg connect
            "command_timeout": settings.DB_STATEMENT_TIMEOUT,
        }
    return engine_kwargs


class Database:
    """Async engine plus session factory, created at startup and disposed at shutdown."""

    def __init__(self, settings: Settings):
        self.engine = create_async_engine(settings.DATABASE_URL, **build_engine_kwargs(settings))
        self.sessionmaker = async_sessionmaker(
            bind=self.engine,
            expire_on_commit=False,
            class_=AsyncSession,
        )

    async def create_all(self) -> None:
        # Register every table on the metadata before creating
        from expense_tracker.models import category, expense, session, user  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database ping failed: {str(e)}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


# Dependency to get DB session with proper exception handling
async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    database: Database = request.app.state.context.database
    session = database.sessionmaker()
    try:
        yield session
    except SQLAlchemyError as e:
        # Log the error and rollback
        logger.error(f"Database session error: {str(e)}")
        await session.rollback()
        raise
    except Exception:
        await session.rollback()
        raise
    finally:
        # Always close the session
        await session.close()
        logger.debug("Database session closed")
