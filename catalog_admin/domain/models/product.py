from decimal import Decimal

from sqlalchemy import TEXT, Numeric
from sqlmodel import Field
from catalog_admin.core.database.mixins import GUIDMixin, TimestampMixin
from catalog_admin.domain.enums import ProductStatus


class Product(GUIDMixin, TimestampMixin, table=True):
    """
    Represents a catalog product, reduced to what the category hierarchy reads and writes.

    Products reference their category by name, not by id.

    Attributes:
        id (GUID): The unique identifier for the product.
        name (str): The name of the product.
        description (str | None): A description of the product.
        category (str): Name of the category the product belongs to.
        status (ProductStatus): The current status of the product.
        price (Decimal): The unit price of the product.
        stock_quantity (int): Units in stock.
    """

    name: str = Field(nullable=False, index=True)
    description: str | None = Field(default=None, sa_type=TEXT)  # type: ignore
    category: str = Field(nullable=False, index=True)
    status: ProductStatus = Field(default=ProductStatus.ACTIVE, nullable=False, index=True)
    price: Decimal = Field(default=Decimal("0"), sa_type=Numeric(12, 2), nullable=False)  # type: ignore
    stock_quantity: int = Field(default=0, nullable=False)
