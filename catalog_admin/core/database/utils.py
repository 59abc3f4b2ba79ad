from sqlalchemy.ext.asyncio.engine import AsyncEngine
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from catalog_admin.core.logging import get_logger

logger = get_logger(__name__)


async def init_db(db_engine: AsyncEngine) -> None:
    """Verify the database is reachable."""
    async with AsyncSession(db_engine) as session:
        (await session.exec(select(1))).all()


async def check_db_health(db_engine: AsyncEngine) -> dict[str, str]:
    """Check database health"""
    try:
        async with AsyncSession(db_engine) as session:
            await session.exec(select(1))
            return {"status": "ok"}
    except Exception as e:
        logger.warning("Database health check failed", exc_info=e)
        return {"status": "error", "details": str(e)}


async def create_tables(db_engine: AsyncEngine) -> None:
    """
    Create every table registered on the SQLModel metadata.

    The domain models must be imported before calling this.
    """
    import catalog_admin.domain.models  # noqa: F401

    async with db_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    logger.info("Database tables created", extra={"event_type": "db_tables_created"})
