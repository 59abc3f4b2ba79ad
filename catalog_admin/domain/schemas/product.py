from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field
from catalog_admin.domain.enums import ProductStatus


class ProductBase(BaseModel):
    """Base product schema with the fields the category hierarchy reads."""

    name: str = Field(..., min_length=1, max_length=255, description="The name of the product")
    description: Optional[str] = Field(None, description="A description of the product")
    category: str = Field(..., min_length=1, description="Name of the category the product belongs to")
    status: ProductStatus = Field(default=ProductStatus.ACTIVE, description="The current status of the product")
    price: Decimal = Field(default=Decimal("0"), ge=0, description="The unit price of the product")
    stock_quantity: int = Field(default=0, ge=0, description="Units in stock")


class ProductCreate(ProductBase):
    """Schema for creating a new product."""


class ProductUpdate(BaseModel):
    """Schema for updating a product."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1)
    status: Optional[ProductStatus] = None
    price: Optional[Decimal] = Field(None, ge=0)
    stock_quantity: Optional[int] = Field(None, ge=0)
