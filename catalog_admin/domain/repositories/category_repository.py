from __future__ import annotations

from typing import Sequence

from sqlalchemy import case, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.attributes import set_committed_value
from sqlmodel import col, func, or_, select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlmodel.sql.expression import SelectOfScalar
from catalog_admin.core.constants import PATH_SEPARATOR, ROOT_PARENT_ALIASES
from catalog_admin.core.exceptions import errors
from catalog_admin.core.helpers.hierarchy import subtree_prefix
from catalog_admin.core.logging import get_logger
from catalog_admin.core.types import GUID
from catalog_admin.domain.enums import SortOrder
from catalog_admin.domain.models.category import Category
from catalog_admin.domain.repositories.base_repository import BaseRepository
from catalog_admin.domain.schemas import CategoryCreate, CategoryListParams, CategorySummary, CategoryUpdate

logger = get_logger(__name__)


class CategoryRepository(BaseRepository[Category, CategoryCreate, CategoryUpdate]):
    """
    Repository for managing categories in the system.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Category, session)

    def _ordered(self, query: SelectOfScalar[Category]) -> SelectOfScalar[Category]:
        return query.order_by(col(Category.display_order), col(Category.name))

    async def find_by_name(self, name: str, *, exclude_id: GUID | None = None) -> Category | None:
        """
        Find a category by name, ignoring case.

        Args:
            name: The category name to search for
            exclude_id: A category to leave out, usually the one being renamed

        Returns:
            Category | None: The found category or None
        """
        query = select(Category).where(func.lower(col(Category.name)) == name.lower())
        if exclude_id is not None:
            query = query.where(col(Category.id) != exclude_id)

        result = await self._execute(query.limit(1))
        return result.first()

    async def slug_exists(self, slug: str, *, exclude_id: GUID | None = None) -> bool:
        query = select(col(Category.id)).where(col(Category.slug) == slug)
        if exclude_id is not None:
            query = query.where(col(Category.id) != exclude_id)

        result = await self._execute(query.limit(1))
        return result.first() is not None

    async def find_children(self, parent_id: GUID) -> list[Category]:
        """
        Find the direct children of a category, in display order.

        Args:
            parent_id: The parent category id

        Returns:
            list[Category]: The children
        """
        query = self._ordered(select(Category).where(col(Category.parent_id) == parent_id))
        return list((await self._execute(query)).all())

    async def has_children(self, parent_id: GUID) -> bool:
        query = select(col(Category.id)).where(col(Category.parent_id) == parent_id).limit(1)
        return (await self._execute(query)).first() is not None

    async def find_descendants(self, category: Category, *, refresh: bool = False) -> list[Category]:
        """
        Find every category below ``category``.

        A descendant's stored path starts with the category's path followed by
        its own id. The match is on whole path segments, so an id that merely
        starts with another id never counts as a descendant.

        Args:
            category: The category whose subtree to collect
            refresh: Overwrite descendants already loaded in the session with the stored rows

        Returns:
            list[Category]: Descendants ordered by depth, then display order
        """
        prefix = subtree_prefix(category.path, category.id)
        segment_prefix = f"{prefix}{PATH_SEPARATOR}"

        try:
            query = (
                select(Category)
                .where(
                    or_(
                        col(Category.materialized_path) == prefix,
                        func.substr(col(Category.materialized_path), 1, len(segment_prefix)) == segment_prefix,
                    )
                )
                .order_by(col(Category.level), col(Category.display_order), col(Category.name))
            )
            if refresh:
                query = query.execution_options(populate_existing=True)
            result = await self.session.exec(query)
            return list(result.all())
        except SQLAlchemyError as e:
            logger.exception(
                f"catalog_admin.domain.repositories.category_repository.find_descendants:: error while getting descendants of {category.id}: {e}"
            )
            raise errors.DatabaseError(
                message="Failed to retrieve descendants",
                detail="An error occurred while retrieving category descendants.",
                metadata={"id": category.id},
            ) from e

    async def find_all_ordered(self, *, include_inactive: bool = True) -> list[Category]:
        """
        Find every category sorted by (display_order, name).

        Args:
            include_inactive: Whether inactive categories are included

        Returns:
            list[Category]: The categories
        """
        query = select(Category)
        if not include_inactive:
            query = query.where(col(Category.is_active) == True)  # noqa: E712

        result = await self._execute(self._ordered(query))
        return list(result.all())

    def build_list_query(self, params: CategoryListParams) -> SelectOfScalar[Category]:
        """
        Build the filtered and sorted select behind a category listing.

        Args:
            params: Filters and sorting

        Returns:
            SelectOfScalar[Category]: The query, ready for pagination
        """
        query = select(Category)

        if params.search:
            pattern = f"%{params.search.lower()}%"
            query = query.where(
                or_(
                    func.lower(col(Category.name)).like(pattern),
                    func.lower(col(Category.slug)).like(pattern),
                    func.lower(func.coalesce(col(Category.description), "")).like(pattern),
                )
            )

        if params.is_active is not None:
            query = query.where(col(Category.is_active) == params.is_active)

        if params.parent:
            if params.parent.lower() in ROOT_PARENT_ALIASES:
                query = query.where(col(Category.parent_id).is_(None))
            else:
                query = query.where(col(Category.parent_id) == params.parent)

        if params.level is not None:
            query = query.where(col(Category.level) == params.level)

        sort_column = col(getattr(Category, params.sort_by))
        if params.sort_order == SortOrder.DESC:
            query = query.order_by(sort_column.desc(), col(Category.name))
        else:
            query = query.order_by(sort_column.asc(), col(Category.name))

        return query

    async def summarize(self) -> CategorySummary:
        """
        Catalog-wide category totals.

        ``total_products`` sums the stored product counts of every category, so
        products whose category name matches no category are not included.
        """
        try:
            query = select(
                func.count(),
                func.coalesce(func.sum(case((col(Category.is_active) == True, 1), else_=0)), 0),  # noqa: E712
                func.coalesce(func.sum(case((col(Category.parent_id).is_(None), 1), else_=0)), 0),
                func.coalesce(func.sum(col(Category.product_count)), 0),
            )
            total, active, roots, products = (await self.session.exec(query)).one()
        except SQLAlchemyError as e:
            logger.exception(
                f"catalog_admin.domain.repositories.category_repository.summarize:: error while summarizing categories: {e}"
            )
            raise errors.DatabaseError(
                message="Failed to summarize categories",
                detail="An error occurred while counting categories.",
            ) from e

        return CategorySummary(
            total_categories=int(total),
            active_categories=int(active),
            root_categories=int(roots),
            total_products=int(products),
        )

    async def claim_version(self, category: Category, expected_version: int | None = None) -> int:
        """
        Bump the version of a category if it still holds the version the caller read.

        The conditional update locks the row until the surrounding transaction
        ends, so concurrent writers of the same category are serialized and the
        loser sees a version mismatch.

        Args:
            category: The category about to be written
            expected_version: The version the caller read, defaults to the loaded one

        Returns:
            int: The new version

        Raises:
            CategoryVersionConflictError: If the stored version differs
        """
        seen = category.version if expected_version is None else expected_version
        await self._compare_and_set_version(category, seen, seen + 1)
        set_committed_value(category, "version", seen + 1)
        return seen + 1

    async def claim_versions(self, categories: Sequence[Category]) -> None:
        """
        Claim the loaded version of each category in turn.

        Raises:
            CategoryVersionConflictError: On the first category whose stored version differs
        """
        for category in categories:
            await self.claim_version(category)

    async def assert_version(self, category: Category) -> None:
        """
        Check that a category still holds its loaded version, locking its row.

        Raises:
            CategoryVersionConflictError: If the stored version differs
        """
        await self._compare_and_set_version(category, category.version, category.version)

    async def _compare_and_set_version(self, category: Category, seen: int, new: int) -> None:
        table = Category.__table__  # type: ignore[attr-defined]
        statement = update(table).where(table.c.id == category.id, table.c.version == seen).values(version=new)
        result = await self._execute(statement)

        if result.rowcount != 1:
            logger.info(
                f"catalog_admin.domain.repositories.category_repository._compare_and_set_version:: version conflict on {category.id} (expected {seen})"
            )
            raise errors.CategoryVersionConflictError(metadata={"id": category.id, "expected_version": seen})
