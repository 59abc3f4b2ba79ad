import argparse
import asyncio

from catalog_admin.core.database.session import db_context_manager, engine
from catalog_admin.core.logging import add_to_log_context, get_logger, setup_exception_logging, setup_logging
from catalog_admin.domain.services import CategoryService

logger = get_logger(__name__)


async def recompute(category_id: str | None = None) -> int:
    """
    Refresh denormalized category product counts, for one category or all of them.

    Returns:
        int: The number of categories refreshed
    """
    async with db_context_manager() as session:
        service = CategoryService(session)

        if category_id:
            await service.update_product_count(category_id)
            return 1

        return await service.recompute_all_statistics()


async def main(category_id: str | None = None) -> None:
    try:
        with add_to_log_context(command="recompute_statistics", category_id=category_id or "all"):
            refreshed = await recompute(category_id)
            logger.info(f"catalog_admin.core.initializers.statistics:: refreshed {refreshed} categories")
    finally:
        await engine.dispose()


def run() -> None:
    """Entry point for the statistics refresh command."""
    parser = argparse.ArgumentParser(description="Recompute the product statistics stored on categories")
    parser.add_argument("--category-id", type=str, help="Only refresh this category (default: every category)")
    args = parser.parse_args()

    setup_logging()
    setup_exception_logging()
    asyncio.run(main(args.category_id))


if __name__ == "__main__":
    run()
