from __future__ import annotations

from typing import Any

from sqlmodel.ext.asyncio.session import AsyncSession
from catalog_admin.core.config import settings
from catalog_admin.core.database.session import db_context_manager
from catalog_admin.core.logging import get_logger
from catalog_admin.domain.models import Category
from catalog_admin.domain.schemas import CategoryCreate
from catalog_admin.domain.services import CategoryService

logger = get_logger(__name__)

DEFAULT_CATEGORIES: list[dict[str, Any]] = [
    {
        "name": "Jewelry",
        "description": "Jewelry, watches, and precious accessories",
        "display_order": 1,
        "children": [
            {"name": "Necklaces", "description": "Necklaces and pendants", "display_order": 1},
            {"name": "Earrings", "description": "Earrings and ear accessories", "display_order": 2},
            {"name": "Bracelets", "description": "Bracelets and wrist accessories", "display_order": 3},
        ],
    },
    {
        "name": "Shoes",
        "description": "Footwear for all occasions and styles",
        "display_order": 2,
    },
    {
        "name": "Fragrance",
        "description": "Fragrances, colognes, and scented products",
        "display_order": 3,
        "children": [
            {"name": "Perfumes", "description": "Premium perfumes and eau de toilette", "display_order": 1},
        ],
    },
    {
        "name": "Skincare",
        "description": "Skincare products and beauty essentials",
        "display_order": 4,
    },
]


async def _create_if_not_exists(
    service: CategoryService, category_data: dict[str, Any], parent: Category | None = None
) -> Category:
    existing = await service.category_repository.find_by_name(category_data["name"])
    if existing:
        return existing

    return await service.create_category(
        CategoryCreate(
            name=category_data["name"],
            description=category_data.get("description"),
            display_order=category_data.get("display_order", 0),
            parent_id=parent.id if parent else None,
            created_by="fixtures",
        )
    )


async def _load_default_categories(session: AsyncSession) -> None:
    """
    Load the default category forest into the system.
    """
    service = CategoryService(session)

    for category_data in DEFAULT_CATEGORIES:
        parent = await _create_if_not_exists(service, category_data)

        for child_data in category_data.get("children", []):
            await _create_if_not_exists(service, child_data, parent)

    logger.info(f"catalog_admin.core.initializers.fixtures:: loaded {len(DEFAULT_CATEGORIES)} default root categories")


async def load() -> None:
    if settings.LOAD_FIXTURES:
        async with db_context_manager() as session:
            await _load_default_categories(session=session)
    else:
        print("Skipping loading fixtures as per configuration.")


async def main() -> None:
    await load()


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())
