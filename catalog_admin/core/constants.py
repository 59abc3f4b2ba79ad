PATH_SEPARATOR: str = ","

ROOT_PARENT_ALIASES: frozenset[str] = frozenset({"root", "null"})

CATEGORY_SLUG_PATTERN: str = r"^[a-z0-9-]+$"

CATEGORY_SORTABLE_FIELDS: dict[str, str] = {
    "display_order": "display_order",
    "displayOrder": "display_order",
    "name": "name",
    "level": "level",
    "created_datetime": "created_datetime",
    "createdAt": "created_datetime",
    "product_count": "product_count",
}
