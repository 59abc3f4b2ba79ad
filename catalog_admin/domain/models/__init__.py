from .category import Category  # noqa: F401
from .product import Product  # noqa: F401

__all__ = ["Category", "Product"]
