"""
Storefront Backend — Order Schemas
====================================

Checkout payload, admin status update, and the order shapes returned to
customers and admins. A client-supplied `total` is not part of any input
schema and is silently ignored.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field

from storefront.models.order import OrderStatus
from storefront.schemas.common import CamelModel, PublicUser


class AddressIn(CamelModel):
    street: str
    city: str
    state: str
    zip: str


class OrderItemIn(CamelModel):
    # Any string; ids that match no product fail at resolution, not validation
    product_id: str = Field(min_length=1)
    variant_id: Optional[uuid.UUID] = None
    quantity: int = Field(gt=0, strict=True)


class OrderCreate(CamelModel):
    items: List[OrderItemIn] = Field(min_length=1)
    shipping_address: AddressIn
    billing_address: Optional[AddressIn] = None
    phone: str
    email: EmailStr
    notes: Optional[str] = None


class OrderStatusUpdate(CamelModel):
    id: uuid.UUID
    status: OrderStatus


class OrderItemOut(CamelModel):
    id: uuid.UUID
    product_id: uuid.UUID
    variant_id: Optional[uuid.UUID] = None
    name: str
    price: float
    quantity: int
    image: Optional[str] = None


class OrderOut(CamelModel):
    id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    is_guest: bool
    email: str
    phone: str
    shipping_address: AddressIn
    billing_address: AddressIn
    notes: Optional[str] = None
    total: float
    status: OrderStatus
    created_at: datetime
    updated_at: datetime


class OrderWithItems(OrderOut):
    items: List[OrderItemOut] = Field(default_factory=list)


class AdminOrder(OrderWithItems):
    user: Optional[PublicUser] = None


class OrderEnvelope(CamelModel):
    order: OrderWithItems


class OrderStatusEnvelope(CamelModel):
    order: OrderOut


class AdminOrderListResponse(CamelModel):
    orders: List[AdminOrder]
