"""
Storefront Backend — Product Schemas
======================================

Admin create/update payloads, the admin listing shape (category + variants
attached), and the public catalogue shape (rating summary instead of raw
reviews).
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from storefront.models.product import ProductStatus
from storefront.schemas.common import CamelModel


class ProductCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=1, max_length=255)
    description: str
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    images: List[str]
    category_id: Optional[uuid.UUID] = None
    stock: int = Field(default=0, ge=0, strict=True)
    status: ProductStatus = ProductStatus.ACTIVE


class ProductUpdate(CamelModel):
    # Partial form of ProductCreate: absent is fine, null is not
    name: str = Field(default=None, min_length=1, max_length=255)
    slug: str = Field(default=None, min_length=1, max_length=255)
    description: str = None
    price: Decimal = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    images: List[str] = None
    category_id: Optional[uuid.UUID] = None
    stock: int = Field(default=None, ge=0, strict=True)
    status: ProductStatus = None


class CategoryOut(CamelModel):
    id: uuid.UUID
    name: str
    slug: str


class VariantOut(CamelModel):
    id: uuid.UUID
    name: str
    value: str
    price: float
    stock: int


class ProductOut(CamelModel):
    id: uuid.UUID
    name: str
    slug: str
    description: str
    price: float
    images: List[str]
    category_id: Optional[uuid.UUID] = None
    stock: int
    status: ProductStatus
    created_at: datetime
    updated_at: datetime


class ProductDetail(ProductOut):
    """ProductOut with its category and variants attached."""

    category: Optional[CategoryOut] = None
    variants: List[VariantOut] = Field(default_factory=list)


class CatalogProduct(ProductDetail):
    """Public listing item: approved-review summary, never the reviews themselves."""

    average_rating: float
    review_count: int


class ProductEnvelope(CamelModel):
    product: ProductOut


class ProductListResponse(CamelModel):
    products: List[ProductDetail]


class CatalogPage(CamelModel):
    """
    One page of the public catalogue.

    total counts every product matching the filters, ignoring limit/offset.
    """

    products: List[CatalogProduct]
    total: int
    limit: int
    offset: int
