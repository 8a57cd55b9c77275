from collections.abc import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from foresight.config import settings
from foresight.services.history_provider import HistoryProvider, SqlHistoryProvider

engine = create_async_engine(settings.database_url, echo=settings.debug)
session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a read-only database session per request."""
    async with session_factory() as session:
        yield session


def get_history_provider(db: AsyncSession = Depends(get_db)) -> HistoryProvider:
    return SqlHistoryProvider(db)
