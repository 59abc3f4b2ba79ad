from .base_repository import BaseRepository  # noqa: F401
from .category_repository import CategoryRepository  # noqa: F401
from .product_repository import ProductRepository  # noqa: F401
