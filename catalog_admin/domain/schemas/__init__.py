from .category import (  # noqa: F401
    CategoryAttribute,
    CategoryBasicResponse,
    CategoryCreate,
    CategoryDetailsResponse,
    CategoryListResponse,
    CategoryListParams,
    CategoryProductStatistics,
    CategoryReorderItem,
    CategoryResponse,
    CategoryStatistics,
    CategorySummary,
    CategoryTreeNode,
    CategoryUpdate,
)
from .pagination import OffsetPaginationRequest, OffsetPaginationResponse  # noqa: F401
from .product import ProductCreate, ProductUpdate  # noqa: F401
