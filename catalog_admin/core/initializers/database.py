import logging

from sqlalchemy.ext.asyncio.engine import AsyncEngine
from catalog_admin.core.config import settings
from catalog_admin.core.database.session import engine
from catalog_admin.core.database.utils import check_db_health, create_tables, init_db
from tenacity import after_log, before_log, retry, stop_after_attempt, wait_fixed

max_tries = 60 * 5
wait_seconds = 1

logger = logging.getLogger(__name__)


@retry(
    stop=stop_after_attempt(max_tries),
    wait=wait_fixed(wait_seconds),
    before=before_log(logger, logging.INFO),
    after=after_log(logger, logging.WARN),
)
async def init_db_with_retry(db_engine: AsyncEngine) -> None:
    await init_db(db_engine)


async def main() -> None:
    await init_db_with_retry(engine)

    if settings.ENVIRONMENT == "local":
        await create_tables(engine)

    health = await check_db_health(engine)
    logger.info(f"catalog_admin.core.initializers.database:: database status is {health['status']}")

    await engine.dispose()


if __name__ == "__main__":
    import asyncio

    from catalog_admin.core.logging import setup_logging

    setup_logging()
    asyncio.run(main())
