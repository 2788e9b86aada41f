"""
Storefront Backend — ORM Models Package
=========================================

Importing this package registers every table with Base.metadata
(Alembic autogenerate and the test-suite's create_all() rely on it).
"""

from storefront.models.user import Address, User, UserRole
from storefront.models.blog import BlogPost
from storefront.models.product import (
    Category,
    Product,
    ProductStatus,
    ProductVariant,
    Review,
)
from storefront.models.order import Order, OrderItem, OrderStatus

__all__ = [
    "Address",
    "BlogPost",
    "Category",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Product",
    "ProductStatus",
    "ProductVariant",
    "Review",
    "User",
    "UserRole",
]
