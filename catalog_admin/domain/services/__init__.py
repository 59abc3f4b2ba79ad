from .category_service import CategoryService  # noqa: F401
