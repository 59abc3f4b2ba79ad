from .category import CategoryAttributeType, SortOrder  # noqa: F401
from .product import ProductStatus  # noqa: F401
