from datetime import datetime
from decimal import Decimal
from typing import Any, ClassVar

from sqlalchemy import JSON, TEXT, TIMESTAMP, Numeric
from sqlmodel import Field
from catalog_admin.core.database.mixins import GUIDMixin, TimestampMixin, VersionedMixin
from catalog_admin.core.helpers.hierarchy import child_path, join_path, level_for, split_path
from catalog_admin.core.types import GUID
from catalog_admin.domain.schemas.category import CategoryStatistics


class Category(GUIDMixin, VersionedMixin, TimestampMixin, table=True):
    """
    Represents one node of the category forest.

    Hierarchy is kept as an arena of rows addressed by id: ``parent_id`` points
    up, ``materialized_path`` holds the comma-joined ancestor ids from the root
    down to the parent, and ``level`` is the number of ancestors.

    Attributes:
        id (GUID): The unique identifier for the category.
        name (str): Unique display name, also the value products reference.
        slug (str): Unique URL slug.
        description (str | None): Description of the category.
        parent_id (GUID | None): Parent category, None for roots.
        level (int): Depth in the forest, 0 for roots.
        materialized_path (str): Comma-joined ancestor ids, empty for roots.
        image_url (str | None): Image shown for the category.
        image_public_id (str | None): Storage provider id of the image.
        icon (str | None): Icon name or URL.
        display_order (int): Sort order among siblings.
        show_in_menu (bool): Whether the category is listed in navigation menus.
        show_in_homepage (bool): Whether the category is featured on the homepage.
        is_active (bool): Whether the category is active.
        meta_title (str | None): SEO title.
        meta_description (str | None): SEO description.
        meta_keywords (list[str]): SEO keywords.
        attributes (list[dict]): Custom product attribute definitions for this category.
        product_count (int): Denormalized count of products in the category.
        active_product_count (int): Denormalized count of active products in the category.
        total_sales (int): Denormalized units sold.
        total_revenue (Decimal): Denormalized revenue.
        statistics_updated_datetime (datetime | None): When the counts were last refreshed.
        created_by (str | None): Admin that created the category.
        updated_by (str | None): Admin that last updated the category.
        version (int): Optimistic concurrency counter.
    """

    STRUCTURAL_FIELDS: ClassVar[frozenset[str]] = frozenset({"parent_id", "level", "materialized_path"})

    name: str = Field(max_length=100, nullable=False, unique=True, index=True)
    slug: str = Field(max_length=100, nullable=False, unique=True, index=True)
    description: str | None = Field(default=None, sa_type=TEXT)  # type: ignore

    parent_id: GUID | None = Field(default=None, foreign_key="categories.id", index=True)
    level: int = Field(default=0, nullable=False)
    materialized_path: str = Field(default="", sa_type=TEXT, nullable=False, index=True)  # type: ignore

    image_url: str | None = Field(default=None)
    image_public_id: str | None = Field(default=None)
    icon: str | None = Field(default=None, max_length=100)

    display_order: int = Field(default=0, nullable=False, index=True)
    show_in_menu: bool = Field(default=True, nullable=False)
    show_in_homepage: bool = Field(default=False, nullable=False)
    is_active: bool = Field(default=True, nullable=False, index=True)

    meta_title: str | None = Field(default=None, max_length=70)
    meta_description: str | None = Field(default=None, max_length=160)
    meta_keywords: list[str] = Field(default_factory=list, sa_type=JSON)  # type: ignore
    attributes: list[dict[str, Any]] = Field(default_factory=list, sa_type=JSON)  # type: ignore

    product_count: int = Field(default=0, nullable=False)
    active_product_count: int = Field(default=0, nullable=False)
    total_sales: int = Field(default=0, nullable=False)
    total_revenue: Decimal = Field(default=Decimal("0"), sa_type=Numeric(14, 2), nullable=False)  # type: ignore
    statistics_updated_datetime: datetime | None = Field(
        default=None,
        sa_type=TIMESTAMP(timezone=True),  # type: ignore
    )

    created_by: str | None = Field(default=None)
    updated_by: str | None = Field(default=None)

    @property
    def path(self) -> list[GUID]:
        """Ancestor ids from the root down to (excluding) this category."""
        return [GUID(segment) for segment in split_path(self.materialized_path)]

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    @property
    def statistics(self) -> CategoryStatistics:
        return CategoryStatistics(
            product_count=self.product_count,
            active_product_count=self.active_product_count,
            total_sales=self.total_sales,
            total_revenue=self.total_revenue,
            updated_datetime=self.statistics_updated_datetime,
        )

    def place_under(self, parent: "Category | None") -> None:
        """
        Recompute parent, path and level from the parent's current state.
        """
        self.parent_id = parent.id if parent is not None else None
        self.set_path(child_path(parent.path if parent is not None else None, self.parent_id))

    def set_path(self, path: list[str]) -> None:
        self.materialized_path = join_path(path)
        self.level = level_for(path)
