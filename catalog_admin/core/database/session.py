import json
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.ext.asyncio.session import async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from catalog_admin.core.config import settings
from catalog_admin.core.logging import get_logger

logger = get_logger(__name__)

# make sure all SQLModel models are imported (catalog_admin.domain.models) before creating tables
# otherwise, SQLModel metadata will not know about them

DATABASE_URL = settings.SQLALCHEMY_DATABASE_URI

engine = create_async_engine(
    url=DATABASE_URL,
    echo=settings.DATABASE_ECHO,
    pool_pre_ping=True,
    pool_recycle=settings.DATABASE_POOL_RECYCLE,
    pool_size=settings.DATABASE_POOL_SIZE,
    max_overflow=0,
    json_serializer=lambda obj: json.dumps(obj),
)

SessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session."""
    session = SessionLocal()
    try:
        yield session
    finally:
        try:
            await session.close()
        except Exception as e:
            logger.warning("Session unexpectedly closed", exc_info=e)


db_context_manager = asynccontextmanager(get_db_session)
