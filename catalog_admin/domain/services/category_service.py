from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlmodel.ext.asyncio.session import AsyncSession
from catalog_admin.core.config import settings
from catalog_admin.core.constants import ROOT_PARENT_ALIASES
from catalog_admin.core.database.decorators import transactional
from catalog_admin.core.database.mixins import utc_now
from catalog_admin.core.exceptions import errors
from catalog_admin.core.helpers.hierarchy import build_forest, disambiguate_slug, rebase_path, slugify
from catalog_admin.core.logging import get_logger
from catalog_admin.core.types import GUID
from catalog_admin.domain.models.category import Category
from catalog_admin.domain.repositories.category_repository import CategoryRepository
from catalog_admin.domain.repositories.product_repository import ProductRepository
from catalog_admin.domain.schemas import (
    CategoryBasicResponse,
    CategoryCreate,
    CategoryDetailsResponse,
    CategoryListParams,
    CategoryListResponse,
    CategoryProductStatistics,
    CategoryReorderItem,
    CategoryResponse,
    CategoryTreeNode,
    CategoryUpdate,
    OffsetPaginationRequest,
    OffsetPaginationResponse,
)

logger = get_logger(__name__)

SchemaType = TypeVar("SchemaType", bound=BaseModel)

_EXPECTED_ERRORS = (
    errors.ValidationError,
    errors.NotFoundError,
    errors.ConflictError,
    errors.InvalidOperationError,
)


def _parse(schema_class: type[SchemaType], data: SchemaType | Mapping[str, Any]) -> SchemaType:
    if isinstance(data, schema_class):
        return data

    try:
        return schema_class.model_validate(data)
    except PydanticValidationError as e:
        raise errors.ValidationError(
            detail=f"Invalid {schema_class.__name__} data",
            metadata={"errors": e.errors(include_url=False, include_context=False, include_input=False)},
        ) from e


class CategoryService:
    """
    Service maintaining the category forest.

    Every category stores its parent id, the ids of its ancestors from the
    root down (``path``) and its depth (``level``). Writes keep
    ``path == parent.path + [parent.id]`` and ``level == len(path)`` for every
    node, reject self-parenting and cycles, and keep names and slugs unique.

    Product statistics on categories are derived from the product catalog and
    only refreshed when asked to, see :meth:`update_product_count` and
    :meth:`recompute_all_statistics`.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.category_repository = CategoryRepository(session=self.session)
        self.product_repository = ProductRepository(session=self.session)

    async def _get_or_404(self, category_id: GUID | str, *, detail: str | None = None) -> Category:
        category = await self.category_repository.find_one_by(category_id)
        if not category:
            raise errors.CategoryNotFoundError(detail=detail, metadata={"id": category_id})
        return category

    async def _unique_slug(self, base: str, *, exclude_id: GUID | None = None) -> str:
        max_length = settings.CATEGORY_SLUG_MAX_LENGTH
        slug = slugify(base, max_length)

        if not slug:
            raise errors.ValidationError(
                detail="Category name must contain at least one letter or digit",
                metadata={"value": base},
            )

        candidate = slug
        while await self.category_repository.slug_exists(candidate, exclude_id=exclude_id):
            candidate = disambiguate_slug(slug, max_length)

        return candidate

    async def _ensure_name_available(self, name: str, *, exclude_id: GUID | None = None) -> None:
        if await self.category_repository.find_by_name(name, exclude_id=exclude_id):
            raise errors.CategoryAlreadyExistsError(metadata={"name": name})

    async def _resolve_new_parent(self, category: Category, parent_id: GUID | None) -> Category | None:
        """
        Validate a parent assignment and return the new parent.

        Raises:
            CategorySelfParentError: If the category would become its own parent
            CategoryNotFoundError: If the parent does not exist
            CategoryCycleError: If the parent is a descendant of the category
        """
        if parent_id is not None and parent_id == category.id:
            raise errors.CategorySelfParentError(metadata={"id": category.id})

        parent = None
        if parent_id is not None:
            parent = await self._get_or_404(parent_id, detail="Parent category not found")

        descendants = await self.category_repository.find_descendants(category)

        if parent is not None and parent.id in {descendant.id for descendant in descendants}:
            raise errors.CategoryCycleError(metadata={"id": category.id, "parent_id": parent.id})

        return parent

    def _rebase_subtree(self, descendants: Sequence[Category], old_prefix: list[str], new_prefix: list[str]) -> None:
        for descendant in descendants:
            descendant.set_path(rebase_path(descendant.path, old_prefix, new_prefix))

    async def create_category(self, data: CategoryCreate | Mapping[str, Any]) -> Category:
        """
        Create a category under an optional parent.

        The slug is derived from the explicit slug or the name and suffixed
        with a timestamp when already taken. Path and level come from the parent.

        Args:
            data: The category data

        Returns:
            Category: The created category with fresh statistics

        Raises:
            ValidationError: If the data is malformed
            CategoryAlreadyExistsError: If the name is taken, ignoring case
            CategoryNotFoundError: If the parent does not exist
        """
        try:
            schema = _parse(CategoryCreate, data)

            await self._ensure_name_available(schema.name)

            parent = None
            if schema.parent_id is not None:
                parent = await self._get_or_404(schema.parent_id, detail="Parent category not found")

            slug = await self._unique_slug(schema.slug or schema.name)

            category = Category(
                **schema.model_dump(mode="json", exclude={"slug", "parent_id"}),
                slug=slug,
            )
            category.place_under(parent)

            category = await self.category_repository.save(category)
            category = await self.update_product_count(category)

            logger.info(
                f"catalog_admin.domain.services.category_service.create_category:: created category {category.id} ({category.name}) at level {category.level}"
            )
            return category
        except _EXPECTED_ERRORS:
            raise
        except errors.DatabaseError as e:
            logger.exception(
                f"catalog_admin.domain.services.category_service.create_category:: error while creating category: {e}"
            )
            raise
        except Exception as e:
            logger.exception(
                f"catalog_admin.domain.services.category_service.create_category:: unexpected error while creating category: {e}"
            )
            raise errors.InternalServerError(detail="Failed to create category") from e

    async def update_category(self, category_id: GUID | str, data: CategoryUpdate | Mapping[str, Any]) -> Category:
        """
        Patch a category.

        A rename re-checks uniqueness, regenerates the slug and moves every
        product of the old name to the new one in the same transaction. A new
        parent (``None`` promotes to root) is checked for self-parenting and
        cycles, then the category and its whole subtree get new paths and levels.

        Args:
            category_id: The category to update
            data: The fields to change, optionally with ``expected_version``

        Returns:
            Category: The updated category

        Raises:
            ValidationError: If the data is malformed
            CategoryNotFoundError: If the category or the new parent does not exist
            CategoryAlreadyExistsError: If the new name is taken, ignoring case
            CategorySelfParentError: If the category would become its own parent
            CategoryCycleError: If the new parent is one of its descendants
            CategoryVersionConflictError: If the category changed since it was read
        """
        try:
            schema = _parse(CategoryUpdate, data)
            category = await self._get_or_404(category_id)

            changes = schema.model_dump(mode="json", exclude_unset=True)
            expected_version = changes.pop("expected_version", None)
            new_name = changes.pop("name", None)
            requested_slug = changes.pop("slug", None)
            parent_given = "parent_id" in changes
            new_parent_id = changes.pop("parent_id", None)

            name_changed = new_name is not None and new_name != category.name
            if name_changed:
                await self._ensure_name_available(new_name, exclude_id=category.id)

            slug = None
            if requested_slug is not None and requested_slug != category.slug:
                slug = await self._unique_slug(requested_slug, exclude_id=category.id)
            elif name_changed:
                slug = await self._unique_slug(new_name, exclude_id=category.id)

            reparent = parent_given and new_parent_id != category.parent_id
            new_parent = None
            if reparent:
                new_parent = await self._resolve_new_parent(category, new_parent_id)

            category = await self._apply_update(
                category,
                changes=changes,
                new_name=new_name if name_changed else None,
                slug=slug,
                reparent=reparent,
                new_parent=new_parent,
                expected_version=expected_version,
            )

            if name_changed:
                category = await self.update_product_count(category)

            logger.info(
                f"catalog_admin.domain.services.category_service.update_category:: updated category {category_id}"
                + (f" under {new_parent.id if new_parent else 'root'}" if reparent else "")
            )
            return category
        except _EXPECTED_ERRORS:
            raise
        except errors.DatabaseError as e:
            logger.exception(
                f"catalog_admin.domain.services.category_service.update_category:: error while updating category {category_id}: {e}"
            )
            raise
        except Exception as e:
            logger.exception(
                f"catalog_admin.domain.services.category_service.update_category:: unexpected error while updating category {category_id}: {e}"
            )
            raise errors.InternalServerError(detail="Failed to update category") from e

    @transactional
    async def _apply_update(
        self,
        category: Category,
        *,
        changes: dict[str, Any],
        new_name: str | None,
        slug: str | None,
        reparent: bool,
        new_parent: Category | None,
        expected_version: int | None,
    ) -> Category:
        await self.category_repository.claim_version(category, expected_version)

        if new_name is not None:
            moved = await self.product_repository.reassign_category(category.name, new_name)
            logger.debug(
                f"catalog_admin.domain.services.category_service._apply_update:: renamed category {category.id} on {moved} products"
            )
            category.name = new_name

        if slug is not None:
            category.slug = slug

        if changes:
            category.sqlmodel_update(changes)

        if reparent:
            if new_parent is not None:
                await self.category_repository.assert_version(new_parent)

            descendants = await self.category_repository.find_descendants(category, refresh=True)
            if new_parent is not None and new_parent.id in {descendant.id for descendant in descendants}:
                raise errors.CategoryCycleError(metadata={"id": category.id, "parent_id": new_parent.id})
            await self.category_repository.claim_versions(descendants)

            old_prefix = [*category.path, category.id]
            category.place_under(new_parent)
            self._rebase_subtree(descendants, old_prefix, [*category.path, category.id])
            await self.category_repository.save_all(descendants)
            logger.debug(
                f"catalog_admin.domain.services.category_service._apply_update:: moved {len(descendants)} descendants of {category.id}"
            )

        return await self.category_repository.save(category)

    async def delete_category(
        self,
        category_id: GUID | str,
        move_products_to: GUID | str | None = None,
        move_children_to: GUID | str | None = None,
    ) -> None:
        """
        Delete a category once nothing depends on it.

        Products are moved to ``move_products_to`` and children are moved under
        ``move_children_to`` (``"root"`` promotes them). Each move commits on its
        own before the category is removed.

        Args:
            category_id: The category to delete
            move_products_to: Category to move the products to
            move_children_to: New parent for the children, or ``"root"``

        Raises:
            CategoryNotFoundError: If the category or a move target does not exist
            CategoryHasProductsError: If products reference the category and no target is given
            CategoryHasChildrenError: If the category has children and no target is given
            InvalidReassignmentTargetError: If a target is the category itself or, for children, below it
        """
        try:
            category = await self._get_or_404(category_id)

            product_target = None
            if await self.product_repository.has_products_in_category(category.name):
                if not move_products_to:
                    raise errors.CategoryHasProductsError(metadata={"id": category.id})
                product_target = await self._resolve_reassignment_target(category, move_products_to)

            children_moved, children_target = False, None
            if await self.category_repository.has_children(category.id):
                if not move_children_to:
                    raise errors.CategoryHasChildrenError(metadata={"id": category.id})

                children_moved = True
                subtree = await self.category_repository.find_descendants(category)
                if str(move_children_to).lower() not in ROOT_PARENT_ALIASES:
                    children_target = await self._resolve_reassignment_target(category, move_children_to)
                    if children_target.id in {node.id for node in subtree}:
                        raise errors.InvalidReassignmentTargetError(
                            metadata={"id": category.id, "target_id": children_target.id}
                        )

            if product_target is not None:
                moved = await self._move_products(category, product_target)
                await self.update_product_count(product_target)
                logger.info(
                    f"catalog_admin.domain.services.category_service.delete_category:: moved {moved} products from {category.id} to {product_target.id}"
                )

            if children_moved:
                await self._move_children(category, children_target)
                logger.info(
                    f"catalog_admin.domain.services.category_service.delete_category:: moved children of {category.id} under {children_target.id if children_target else 'root'}"
                )

            await self.category_repository.delete(category.id)
            logger.info(f"catalog_admin.domain.services.category_service.delete_category:: deleted category {category_id}")
        except _EXPECTED_ERRORS:
            raise
        except errors.DatabaseError as e:
            logger.exception(
                f"catalog_admin.domain.services.category_service.delete_category:: error while deleting category {category_id}: {e}"
            )
            raise
        except Exception as e:
            logger.exception(
                f"catalog_admin.domain.services.category_service.delete_category:: unexpected error while deleting category {category_id}: {e}"
            )
            raise errors.InternalServerError(detail="Failed to delete category") from e

    async def _resolve_reassignment_target(self, category: Category, target_id: GUID | str) -> Category:
        if target_id == category.id:
            raise errors.InvalidReassignmentTargetError(metadata={"id": category.id, "target_id": target_id})
        return await self._get_or_404(target_id, detail="Reassignment target category not found")

    @transactional
    async def _move_products(self, category: Category, target: Category) -> int:
        return await self.product_repository.reassign_category(category.name, target.name)

    @transactional
    async def _move_children(self, category: Category, new_parent: Category | None) -> None:
        await self.category_repository.assert_version(category)
        if new_parent is not None:
            await self.category_repository.assert_version(new_parent)

        subtree = await self.category_repository.find_descendants(category, refresh=True)
        if new_parent is not None and new_parent.id in {node.id for node in subtree}:
            raise errors.InvalidReassignmentTargetError(metadata={"id": category.id, "target_id": new_parent.id})
        await self.category_repository.claim_versions(subtree)

        old_prefix = [*category.path, category.id]
        new_prefix = [*new_parent.path, new_parent.id] if new_parent is not None else []

        for node in subtree:
            if node.parent_id == category.id:
                node.parent_id = new_parent.id if new_parent is not None else None
        self._rebase_subtree(subtree, old_prefix, new_prefix)

        await self.category_repository.save_all(subtree)

    @transactional
    async def toggle_category_status(self, category_id: GUID | str) -> Category:
        """
        Flip the active flag of a category.

        Args:
            category_id: The category to toggle

        Returns:
            Category: The updated category
        """
        try:
            category = await self._get_or_404(category_id)
            await self.category_repository.claim_version(category)
            category.is_active = not category.is_active
            category = await self.category_repository.save(category)

            logger.info(
                f"catalog_admin.domain.services.category_service.toggle_category_status:: category {category_id} is now {'active' if category.is_active else 'inactive'}"
            )
            return category
        except _EXPECTED_ERRORS:
            raise
        except errors.DatabaseError as e:
            logger.exception(
                f"catalog_admin.domain.services.category_service.toggle_category_status:: error while toggling category {category_id}: {e}"
            )
            raise
        except Exception as e:
            logger.exception(
                f"catalog_admin.domain.services.category_service.toggle_category_status:: unexpected error while toggling category {category_id}: {e}"
            )
            raise errors.InternalServerError(detail="Failed to toggle category status") from e

    @transactional
    async def reorder_categories(self, items: Sequence[CategoryReorderItem | Mapping[str, Any]]) -> list[Category]:
        """
        Set the display order of several categories at once.

        Nothing is written when any of the categories does not exist.

        Args:
            items: Category ids with their new display order

        Returns:
            list[Category]: The updated categories, in the order given
        """
        try:
            orders = [_parse(CategoryReorderItem, item) for item in items]
            if not orders:
                raise errors.ValidationError(detail="At least one category is required to reorder")

            categories = {
                category.id: category
                for category in await self.category_repository.find_by_ids([item.category_id for item in orders])
            }
            missing = [item.category_id for item in orders if item.category_id not in categories]
            if missing:
                raise errors.CategoryNotFoundError(detail="Some categories do not exist", metadata={"ids": missing})

            for item in orders:
                category = categories[item.category_id]
                await self.category_repository.claim_version(category)
                category.display_order = item.display_order

            await self.category_repository.save_all(list(categories.values()))

            logger.info(
                f"catalog_admin.domain.services.category_service.reorder_categories:: reordered {len(categories)} categories"
            )
            return [categories[item.category_id] for item in orders]
        except _EXPECTED_ERRORS:
            raise
        except errors.DatabaseError as e:
            logger.exception(
                f"catalog_admin.domain.services.category_service.reorder_categories:: error while reordering categories: {e}"
            )
            raise
        except Exception as e:
            logger.exception(
                f"catalog_admin.domain.services.category_service.reorder_categories:: unexpected error while reordering categories: {e}"
            )
            raise errors.InternalServerError(detail="Failed to reorder categories") from e

    async def get_category(self, category_id: GUID | str) -> Category:
        """Get a category by id or raise CategoryNotFoundError."""
        return await self._get_or_404(category_id)

    async def get_tree(self, include_inactive: bool = False, root_only: bool = False) -> list[CategoryTreeNode]:
        """
        Build a snapshot of the category forest.

        Siblings are sorted by (display_order, name) at every level. When
        inactive categories are excluded, so is everything below them.

        Args:
            include_inactive: Whether inactive categories are included
            root_only: Return the root categories with their direct children only

        Returns:
            list[CategoryTreeNode]: The root nodes
        """
        try:
            categories = await self.category_repository.find_all_ordered(include_inactive=include_inactive)

            forest = build_forest(
                categories,
                make_node=lambda category, children: CategoryTreeNode.from_obj(category, children),
                key=lambda category: category.id,
                parent_key=lambda category: category.parent_id,
            )
            if root_only:
                return [root.pruned(1) for root in forest]
            return forest
        except errors.DatabaseError as e:
            logger.exception(
                f"catalog_admin.domain.services.category_service.get_tree:: error while building category tree: {e}"
            )
            raise

    async def get_descendants(self, category_id: GUID | str) -> list[Category]:
        """
        Get every category below a category.

        Args:
            category_id: The category whose subtree to collect

        Returns:
            list[Category]: Descendants ordered by depth, then display order
        """
        category = await self._get_or_404(category_id)
        return await self.category_repository.find_descendants(category)

    async def get_full_path(self, category_id: GUID | str) -> list[str]:
        """
        Get the names from the root down to a category.

        Ancestors that no longer exist show up as ``CATEGORY_UNKNOWN_ANCESTOR_NAME``.

        Args:
            category_id: The category

        Returns:
            list[str]: Ancestor names followed by the category's own name
        """
        category = await self._get_or_404(category_id)
        return await self._breadcrumb(category)

    async def _breadcrumb(self, category: Category) -> list[str]:
        ancestors = await self.category_repository.find_by_ids(category.path)
        names = {ancestor.id: ancestor.name for ancestor in ancestors}
        return [names.get(ancestor_id, settings.CATEGORY_UNKNOWN_ANCESTOR_NAME) for ancestor_id in category.path] + [
            category.name
        ]

    async def get_category_details(self, category_id: GUID | str) -> CategoryDetailsResponse:
        """
        Get a category with its breadcrumb, its live product count and its direct children.
        """
        category = await self._get_or_404(category_id)

        breadcrumb = await self._breadcrumb(category)
        product_count, _ = await self.product_repository.count_by_category(category.name)
        children = await self.category_repository.find_children(category.id)

        return CategoryDetailsResponse(
            category=CategoryResponse.from_obj(category),
            breadcrumb=breadcrumb,
            product_count=product_count,
            children=[CategoryBasicResponse.from_obj(child) for child in children],
        )

    async def list_categories(self, params: CategoryListParams | Mapping[str, Any] | None = None) -> CategoryListResponse:
        """
        List categories one page at a time with catalog-wide totals.

        Args:
            params: Search, filters, sorting and pagination

        Returns:
            CategoryListResponse: The page and the summary
        """
        try:
            list_params = _parse(CategoryListParams, params or {})

            query = self.category_repository.build_list_query(list_params)
            page = await self.category_repository.paginate(
                query,
                OffsetPaginationRequest(page=list_params.page, limit=list_params.limit),
            )

            summary = await self.category_repository.summarize()

            return CategoryListResponse(
                results=OffsetPaginationResponse[CategoryResponse].build(
                    [CategoryResponse.from_obj(category) for category in page.items],
                    page=page.page,
                    per_page=page.per_page,
                    total_count=page.total_count,
                ),
                summary=summary,
            )
        except _EXPECTED_ERRORS:
            raise
        except errors.DatabaseError as e:
            logger.exception(
                f"catalog_admin.domain.services.category_service.list_categories:: error while listing categories: {e}"
            )
            raise

    async def update_product_count(self, category: Category | GUID | str) -> Category:
        """
        Refresh the product counts of one category from the product catalog.

        Args:
            category: The category or its id

        Returns:
            Category: The category with fresh statistics
        """
        if not isinstance(category, Category):
            category = await self._get_or_404(category)

        total, active = await self.product_repository.count_by_category(category.name)

        category.product_count = total
        category.active_product_count = active
        category.statistics_updated_datetime = utc_now()

        return await self.category_repository.save(category)

    async def recompute_all_statistics(self) -> int:
        """
        Refresh the product counts of every category.

        Products are counted once, grouped by category name, then each
        category is written in turn.

        Returns:
            int: The number of categories refreshed
        """
        try:
            counts = await self.product_repository.count_grouped_by_category()
            categories = await self.category_repository.find_all_ordered()

            refreshed_at = utc_now()
            for category in categories:
                total, active = counts.get(category.name, (0, 0))
                category.product_count = total
                category.active_product_count = active
                category.statistics_updated_datetime = refreshed_at
                await self.category_repository.save(category)

            logger.info(
                f"catalog_admin.domain.services.category_service.recompute_all_statistics:: refreshed statistics of {len(categories)} categories"
            )
            return len(categories)
        except errors.DatabaseError as e:
            logger.exception(
                f"catalog_admin.domain.services.category_service.recompute_all_statistics:: error while refreshing statistics: {e}"
            )
            raise

    async def get_product_statistics(self, category_id: GUID | str) -> CategoryProductStatistics:
        """
        Refresh the counts of a category and aggregate stock and prices of its products.

        Args:
            category_id: The category

        Returns:
            CategoryProductStatistics: The aggregates, zeros when the category has no products
        """
        category = await self.update_product_count(category_id)
        aggregates = await self.product_repository.aggregate_by_category(category.name)

        return CategoryProductStatistics(
            category_id=category.id,
            category_name=category.name,
            total_products=aggregates["total"],
            active_products=aggregates["active"],
            total_stock=aggregates["total_stock"],
            total_stock_value=aggregates["total_stock_value"],
            average_price=aggregates["average_price"],
            min_price=aggregates["min_price"],
            max_price=aggregates["max_price"],
        )
