"""Async Postgres engine shared by the API process."""

from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from booking_api.core import get_settings

_settings = get_settings()

engine = create_async_engine(
    _settings.DB_DSN,
    echo=_settings.DB_ECHO,
    pool_size=_settings.DB_POOL_SIZE,
    pool_pre_ping=True,
)

# Responses are serialized from rows after the service commits
SessionFactory = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


async def get_session() -> AsyncIterator[AsyncSession]:
    """Request-scoped session; rolled back if the handler raises"""
    async with SessionFactory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
