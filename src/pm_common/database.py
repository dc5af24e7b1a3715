import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from config.settings import settings
from src.pm_common.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=20,
    max_overflow=10,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields an AsyncSession, auto-closes after request."""
    async with async_session_factory() as session:
        yield session


@asynccontextmanager
async def store_call(operation: str) -> AsyncIterator[None]:
    """Translate connection-level SQLAlchemy failures into StoreUnavailableError.

    Constraint violations and programming errors propagate unchanged.
    """
    try:
        yield
    except (OperationalError, InterfaceError, PoolTimeoutError) as e:
        logger.warning("Store call failed: op=%s err=%s", operation, e.__class__.__name__)
        raise StoreUnavailableError(f"Datastore unavailable during {operation}") from e
