from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from typing import AsyncGenerator

from .config import settings
from .models.base import Base

def _connect_args(url: str) -> dict:
    # check_same_thread hanya dikenal oleh driver SQLite
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}

async_engine = create_async_engine(
    settings.DATABASE_URL,
    connect_args=_connect_args(settings.DATABASE_URL),
    echo=settings.DATABASE_ECHO,
)

AsyncSessionLocal = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False
)

__all__ = ['Base', 'async_engine', 'AsyncSessionLocal', 'get_db_session']

async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency untuk menyediakan database session per request.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
