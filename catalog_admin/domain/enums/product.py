from enum import StrEnum


class ProductStatus(StrEnum):
    """
    Enumeration for Product status options

    Attributes:
        ACTIVE: Listed and purchasable, counted in a category's active product count.
        INACTIVE: Hidden from the storefront.
        DRAFT: Not yet published.
        DISCONTINUED: No longer sold.
    """

    ACTIVE = "active"
    INACTIVE = "inactive"
    DRAFT = "draft"
    DISCONTINUED = "discontinued"
