from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Self

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator, model_validator
from catalog_admin.core.config import settings
from catalog_admin.core.constants import CATEGORY_SLUG_PATTERN, CATEGORY_SORTABLE_FIELDS
from catalog_admin.core.types import GUID
from catalog_admin.domain.enums import CategoryAttributeType, SortOrder
from catalog_admin.domain.schemas.pagination import OffsetPaginationResponse

CategoryName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)]
CategorySlug = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100, pattern=CATEGORY_SLUG_PATTERN)
]


class CategoryAttribute(BaseModel):
    """
    A custom product attribute definition attached to a category.

    Attributes:
        name (str): Attribute name shown to admins and shoppers.
        type (CategoryAttributeType): The input type of the attribute.
        options (list[str]): Allowed values for select and multiselect attributes.
        required (bool): Whether products in the category must provide a value.
        filterable (bool): Whether the storefront offers a filter on this attribute.
    """

    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
    type: CategoryAttributeType = CategoryAttributeType.TEXT
    options: list[str] = Field(default_factory=list)
    required: bool = False
    filterable: bool = False

    @model_validator(mode="after")
    def options_match_type(self) -> Self:
        if self.type in (CategoryAttributeType.SELECT, CategoryAttributeType.MULTISELECT) and not self.options:
            raise ValueError(f"Attribute '{self.name}' of type {self.type} needs at least one option.")
        return self


def _clean_keywords(value: list[str] | None) -> list[str] | None:
    if value is None:
        return None
    return [keyword.strip() for keyword in value if keyword and keyword.strip()]


class CategoryBase(BaseModel):
    """Base category schema with the descriptive fields"""

    model_config = ConfigDict(str_strip_whitespace=True)

    description: str | None = Field(None, max_length=500, description="Description of the category")
    image_url: str | None = Field(None, description="Image shown for the category")
    image_public_id: str | None = Field(None, description="Storage provider id of the image")
    icon: str | None = Field(None, max_length=100, description="Icon name or URL")
    display_order: int = Field(0, ge=0, description="Sort order among siblings")
    show_in_menu: bool = Field(True, description="Whether the category is listed in navigation menus")
    show_in_homepage: bool = Field(False, description="Whether the category is featured on the homepage")
    is_active: bool = Field(True, description="Whether the category is active")
    meta_title: str | None = Field(None, max_length=70, description="SEO title")
    meta_description: str | None = Field(None, max_length=160, description="SEO description")
    meta_keywords: list[str] = Field(default_factory=list, description="SEO keywords")
    attributes: list[CategoryAttribute] = Field(default_factory=list, description="Custom attribute definitions")

    @field_validator("meta_keywords", mode="after")
    @classmethod
    def clean_keywords(cls, v: list[str]) -> list[str]:
        return _clean_keywords(v) or []


class CategoryCreate(CategoryBase):
    """Schema for creating a new category"""

    name: CategoryName = Field(..., description="The unique name of the category")
    slug: CategorySlug | None = Field(None, description="URL slug, derived from the name when omitted")
    parent_id: GUID | None = Field(None, description="Reference to parent category")
    created_by: str | None = Field(None, description="Admin creating the category")


class CategoryUpdate(BaseModel):
    """
    Schema for patching a category.

    Only the fields that are set are applied. An explicit ``parent_id: None``
    promotes the category to a root.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    name: CategoryName | None = None
    slug: CategorySlug | None = None
    parent_id: GUID | None = None
    description: str | None = Field(None, max_length=500)
    image_url: str | None = None
    image_public_id: str | None = None
    icon: str | None = Field(None, max_length=100)
    display_order: int | None = Field(None, ge=0)
    show_in_menu: bool | None = None
    show_in_homepage: bool | None = None
    is_active: bool | None = None
    meta_title: str | None = Field(None, max_length=70)
    meta_description: str | None = Field(None, max_length=160)
    meta_keywords: list[str] | None = None
    attributes: list[CategoryAttribute] | None = None
    updated_by: str | None = None
    expected_version: int | None = Field(None, ge=1, description="Version the caller last read")

    @field_validator("meta_keywords", mode="after")
    @classmethod
    def clean_keywords(cls, v: list[str] | None) -> list[str] | None:
        return _clean_keywords(v)

    @model_validator(mode="after")
    def reject_null_required_fields(self) -> Self:
        for field in ("name", "display_order", "show_in_menu", "show_in_homepage", "is_active"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null.")
        return self


class CategoryStatistics(BaseModel):
    """
    Denormalized product statistics of a category.

    Derived from the product catalog and refreshed on demand, so the values
    may lag behind the products they describe.
    """

    model_config = ConfigDict(frozen=True)

    product_count: int = 0
    active_product_count: int = 0
    total_sales: int = 0
    total_revenue: Decimal = Decimal("0")
    updated_datetime: datetime | None = None


class CategoryResponse(BaseModel):
    """Schema for category response"""

    id: GUID
    name: str
    slug: str
    description: str | None = None
    parent_id: GUID | None = None
    level: int
    path: list[GUID]
    image_url: str | None = None
    image_public_id: str | None = None
    icon: str | None = None
    display_order: int
    show_in_menu: bool
    show_in_homepage: bool
    is_active: bool
    meta_title: str | None = None
    meta_description: str | None = None
    meta_keywords: list[str]
    attributes: list[dict[str, Any]]
    statistics: CategoryStatistics
    version: int
    created_by: str | None = None
    updated_by: str | None = None
    created_datetime: datetime
    updated_datetime: datetime | None = None

    @classmethod
    def from_obj(cls, obj: Any) -> "CategoryResponse":
        return cls(
            id=obj.id,
            name=obj.name,
            slug=obj.slug,
            description=getattr(obj, "description", None),
            parent_id=getattr(obj, "parent_id", None),
            level=obj.level,
            path=list(obj.path),
            image_url=getattr(obj, "image_url", None),
            image_public_id=getattr(obj, "image_public_id", None),
            icon=getattr(obj, "icon", None),
            display_order=obj.display_order,
            show_in_menu=obj.show_in_menu,
            show_in_homepage=obj.show_in_homepage,
            is_active=obj.is_active,
            meta_title=getattr(obj, "meta_title", None),
            meta_description=getattr(obj, "meta_description", None),
            meta_keywords=list(getattr(obj, "meta_keywords", None) or []),
            attributes=list(getattr(obj, "attributes", None) or []),
            statistics=obj.statistics,
            version=obj.version,
            created_by=getattr(obj, "created_by", None),
            updated_by=getattr(obj, "updated_by", None),
            created_datetime=obj.created_datetime,
            updated_datetime=getattr(obj, "updated_datetime", None),
        )


class CategoryBasicResponse(BaseModel):
    """Schema for category basic response, used for children and breadcrumbs"""

    id: GUID
    name: str
    slug: str
    level: int
    display_order: int
    is_active: bool
    product_count: int = 0

    @classmethod
    def from_obj(cls, obj: Any) -> "CategoryBasicResponse":
        return cls(
            id=obj.id,
            name=obj.name,
            slug=obj.slug,
            level=obj.level,
            display_order=obj.display_order,
            is_active=obj.is_active,
            product_count=getattr(obj, "product_count", 0),
        )


class CategoryTreeNode(CategoryBasicResponse):
    """
    Immutable snapshot of a category and its nested children.
    """

    model_config = ConfigDict(frozen=True)

    parent_id: GUID | None = None
    icon: str | None = None
    image_url: str | None = None
    show_in_menu: bool = True
    children: tuple["CategoryTreeNode", ...] = ()

    @classmethod
    def from_obj(cls, obj: Any, children: list["CategoryTreeNode"] | None = None) -> "CategoryTreeNode":  # type: ignore[override]
        return cls(
            id=obj.id,
            name=obj.name,
            slug=obj.slug,
            level=obj.level,
            display_order=obj.display_order,
            is_active=obj.is_active,
            product_count=getattr(obj, "product_count", 0),
            parent_id=getattr(obj, "parent_id", None),
            icon=getattr(obj, "icon", None),
            image_url=getattr(obj, "image_url", None),
            show_in_menu=getattr(obj, "show_in_menu", True),
            children=tuple(children or ()),
        )

    def walk(self):
        """Yield this node and every node below it, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def pruned(self, depth: int) -> "CategoryTreeNode":
        """Copy of this node keeping only ``depth`` levels of children."""
        children = tuple(child.pruned(depth - 1) for child in self.children) if depth > 0 else ()
        return self.model_copy(update={"children": children})


class CategoryDetailsResponse(BaseModel):
    """Schema for a single category with its breadcrumb, children and live product count"""

    category: CategoryResponse
    breadcrumb: list[str]
    product_count: int
    children: list[CategoryBasicResponse]


class CategoryReorderItem(BaseModel):
    """One entry of a bulk display order update"""

    category_id: GUID
    display_order: int = Field(..., ge=0)


class CategoryListParams(BaseModel):
    """
    Filter, sort and pagination parameters for listing categories.

    Attributes:
        search (str | None): Case-insensitive substring of name, slug or description.
        is_active (bool | None): Only categories with this active flag.
        parent (str | None): Parent category id, or ``root``/``null`` for root categories.
        level (int | None): Only categories at this depth.
        sort_by (str): One of display_order, name, level, created_datetime, product_count.
        sort_order (SortOrder): Sort direction.
        page (int): 1-based page number.
        limit (int): Page size.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    search: str | None = None
    is_active: bool | None = None
    parent: str | None = None
    level: int | None = Field(None, ge=0)
    sort_by: str = "display_order"
    sort_order: SortOrder = SortOrder.ASC
    page: int = Field(1, ge=1)
    limit: int = Field(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE)

    @field_validator("sort_by")
    @classmethod
    def validate_sort_by(cls, v: str) -> str:
        if v not in CATEGORY_SORTABLE_FIELDS:
            raise ValueError(f"Cannot sort categories by '{v}'.")
        return CATEGORY_SORTABLE_FIELDS[v]


class CategorySummary(BaseModel):
    """Catalog-wide category totals returned alongside a category listing"""

    total_categories: int = 0
    active_categories: int = 0
    root_categories: int = 0
    total_products: int = 0


class CategoryProductStatistics(BaseModel):
    """Aggregates over the products of one category"""

    category_id: GUID
    category_name: str
    total_products: int = 0
    active_products: int = 0
    total_stock: int = 0
    total_stock_value: Decimal = Decimal("0")
    average_price: Decimal = Decimal("0")
    min_price: Decimal = Decimal("0")
    max_price: Decimal = Decimal("0")


class CategoryListResponse(BaseModel):
    """A page of categories with catalog-wide totals"""

    results: OffsetPaginationResponse[CategoryResponse]
    summary: CategorySummary
