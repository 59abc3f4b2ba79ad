from __future__ import annotations

from decimal import Decimal

from sqlalchemy import case, update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col, func, select
from sqlmodel.ext.asyncio.session import AsyncSession
from catalog_admin.core.exceptions import errors
from catalog_admin.core.logging import get_logger
from catalog_admin.domain.enums import ProductStatus
from catalog_admin.domain.models.product import Product
from catalog_admin.domain.repositories.base_repository import BaseRepository
from catalog_admin.domain.schemas.product import ProductCreate, ProductUpdate

logger = get_logger(__name__)

_ACTIVE_CASE = case((col(Product.status) == ProductStatus.ACTIVE, 1), else_=0)


class ProductRepository(BaseRepository[Product, ProductCreate, ProductUpdate]):
    """
    Repository for the product catalog, limited to what the category hierarchy needs.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Product, session)

    async def count_by_category(self, category_name: str) -> tuple[int, int]:
        """
        Count the products referencing a category.

        Args:
            category_name: The category name products reference

        Returns:
            tuple[int, int]: Total and active product counts
        """
        try:
            query = select(func.count(), func.coalesce(func.sum(_ACTIVE_CASE), 0)).where(
                col(Product.category) == category_name
            )
            total, active = (await self.session.exec(query)).one()
            return int(total), int(active)
        except SQLAlchemyError as e:
            logger.exception(
                f"catalog_admin.domain.repositories.product_repository.count_by_category:: error while counting products of {category_name}: {e}"
            )
            raise errors.DatabaseError(
                message="Failed to count products",
                detail="An error occurred while counting products for category.",
                metadata={"category": category_name},
            ) from e

    async def count_grouped_by_category(self) -> dict[str, tuple[int, int]]:
        """
        Count total and active products for every referenced category in one query.

        Returns:
            dict[str, tuple[int, int]]: Category name to (total, active)
        """
        try:
            query = select(
                col(Product.category),
                func.count(),
                func.coalesce(func.sum(_ACTIVE_CASE), 0),
            ).group_by(col(Product.category))
            rows = (await self.session.exec(query)).all()
            return {name: (int(total), int(active)) for name, total, active in rows}
        except SQLAlchemyError as e:
            logger.exception(
                f"catalog_admin.domain.repositories.product_repository.count_grouped_by_category:: error while counting products: {e}"
            )
            raise errors.DatabaseError(
                message="Failed to count products",
                detail="An error occurred while counting products per category.",
            ) from e

    async def has_products_in_category(self, category_name: str) -> bool:
        query = select(col(Product.id)).where(col(Product.category) == category_name).limit(1)
        result = await self._execute(query)
        return result.first() is not None

    async def reassign_category(self, from_name: str, to_name: str) -> int:
        """
        Point every product of one category at another, in a single bulk update.

        Args:
            from_name: The category name products currently reference
            to_name: The category name they should reference

        Returns:
            int: The number of products updated
        """
        try:
            statement = (
                update(Product)
                .where(col(Product.category) == from_name)
                .values(category=to_name)
                .execution_options(synchronize_session="evaluate")
            )
            result = await self.session.exec(statement)  # type: ignore
            return result.rowcount
        except SQLAlchemyError as e:
            logger.exception(
                f"catalog_admin.domain.repositories.product_repository.reassign_category:: error while moving products from {from_name} to {to_name}: {e}"
            )
            raise errors.DatabaseError(
                message="Failed to reassign products",
                detail="An error occurred while moving products to another category.",
                metadata={"from": from_name, "to": to_name},
            ) from e

    async def aggregate_by_category(self, category_name: str) -> dict[str, Decimal | int]:
        """
        Stock and price aggregates over the products of a category.

        Returns:
            dict: total, active, total_stock, total_stock_value, average_price, min_price, max_price
        """
        try:
            query = select(
                func.count(),
                func.coalesce(func.sum(_ACTIVE_CASE), 0),
                func.coalesce(func.sum(col(Product.stock_quantity)), 0),
                func.coalesce(func.sum(col(Product.price) * col(Product.stock_quantity)), 0),
                func.avg(col(Product.price)),
                func.min(col(Product.price)),
                func.max(col(Product.price)),
            ).where(col(Product.category) == category_name)
            total, active, stock, stock_value, avg_price, min_price, max_price = (
                await self.session.exec(query)
            ).one()
        except SQLAlchemyError as e:
            logger.exception(
                f"catalog_admin.domain.repositories.product_repository.aggregate_by_category:: error while aggregating products of {category_name}: {e}"
            )
            raise errors.DatabaseError(
                message="Failed to aggregate products",
                detail="An error occurred while computing product statistics for category.",
                metadata={"category": category_name},
            ) from e

        return {
            "total": int(total),
            "active": int(active),
            "total_stock": int(stock),
            "total_stock_value": _to_money(stock_value),
            "average_price": _to_money(avg_price),
            "min_price": _to_money(min_price),
            "max_price": _to_money(max_price),
        }


def _to_money(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(Decimal("0.01"))
