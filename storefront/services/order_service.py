"""
Storefront Backend — Order Service
====================================

What:  Checkout (order placement) and the admin order views.
How:   Every line is resolved against the catalogue before anything is
       written, so a bad line leaves no order behind. The order and its
       lines are then inserted and committed together, and only after the
       commit are the confirmation and admin emails attempted.
Who:   POST /api/orders (guest or signed-in), /api/admin/orders.

Pricing:
    line price  = variant.price if a known variant of the product is chosen,
                  else product.price
    line name   = "<product name> - <variant value>" or "<product name>"
    line image  = the product's first image, if any
    order total = Σ(line price × quantity), in Decimal. Client totals are
                  never read.

Email delivery is best-effort: a failed send is logged and the order is
still returned as created.
"""

import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Set

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.exceptions import DatabaseError, EmailDeliveryError, OrderItemResolutionError
from storefront.models.order import Order, OrderItem, OrderStatus
from storefront.models.product import Product
from storefront.schemas.order import OrderCreate, OrderItemIn
from storefront.services.crud import flush_or_raise, get_or_404
from storefront.services.email_service import EmailService, OrderEmailData, OrderEmailLine
from storefront.services.security import Identity

logger = logging.getLogger(__name__)


@dataclass
class ResolvedLine:
    product_id: uuid.UUID
    variant_id: Optional[uuid.UUID]
    name: str
    price: Decimal
    quantity: int
    image: Optional[str]

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


def as_uuid(value: str) -> Optional[uuid.UUID]:
    """The UUID a client id string names, or None if it is not one."""
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


def resolve_line(product: Product, item: OrderItemIn) -> ResolvedLine:
    """Price and name one order line from the live product row."""
    name = product.name
    price = Decimal(product.price)
    variant_id = None

    if item.variant_id is not None:
        variant = next((v for v in product.variants if v.id == item.variant_id), None)
        if variant is not None:
            name = f"{product.name} - {variant.value}"
            price = Decimal(variant.price)
            variant_id = variant.id

    return ResolvedLine(
        product_id=product.id,
        variant_id=variant_id,
        name=name,
        price=price,
        quantity=item.quantity,
        image=product.primary_image,
    )


class OrderService:
    def __init__(self, email_service: EmailService):
        self.email_service = email_service

    async def _load_products(self, db: AsyncSession, product_ids: Set[uuid.UUID]) -> Dict[uuid.UUID, Product]:
        if not product_ids:
            return {}
        result = await db.execute(
            select(Product)
            .options(selectinload(Product.variants))
            .where(Product.id.in_(list(product_ids)))
        )
        return {product.id: product for product in result.scalars().all()}

    async def resolve_lines(self, db: AsyncSession, items: List[OrderItemIn]) -> List[ResolvedLine]:
        """
        Raises:
            OrderItemResolutionError: the first line whose product is unknown
        """
        ids = [as_uuid(item.product_id) for item in items]
        products = await self._load_products(db, {i for i in ids if i is not None})
        lines = []
        for item, product_id in zip(items, ids):
            product = products.get(product_id)
            if product is None:
                raise OrderItemResolutionError(item.product_id)
            lines.append(resolve_line(product, item))
        return lines

    async def place_order(
        self,
        db: AsyncSession,
        payload: OrderCreate,
        identity: Optional[Identity] = None,
    ) -> Order:
        """
        Create an order with its lines and attempt both notification emails.

        Raises:
            OrderItemResolutionError: a line references an unknown product
            DatabaseError: the insert or commit failed
        """
        lines = await self.resolve_lines(db, payload.items)
        total = sum((line.subtotal for line in lines), Decimal("0"))

        shipping = payload.shipping_address.model_dump()
        billing = payload.billing_address.model_dump() if payload.billing_address else shipping

        order = Order(
            user_id=identity.user_id if identity else None,
            is_guest=identity is None,
            email=payload.email,
            phone=payload.phone,
            shipping_address=shipping,
            billing_address=billing,
            notes=payload.notes,
            total=total,
            status=OrderStatus.PENDING,
            items=[
                OrderItem(
                    product_id=line.product_id,
                    variant_id=line.variant_id,
                    name=line.name,
                    price=line.price,
                    quantity=line.quantity,
                    image=line.image,
                )
                for line in lines
            ],
        )
        db.add(order)

        try:
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Order commit failed: %s", str(e), exc_info=True)
            raise DatabaseError(context={"action": "place_order"}) from e

        logger.info(
            "Order placed: %s (%d lines, total=%s, guest=%s)",
            order.id, len(lines), total, order.is_guest,
        )

        await self.notify(order)
        return order

    async def notify(self, order: Order) -> None:
        """Send both order emails; failures are logged, never raised."""
        data = OrderEmailData(
            order_id=str(order.id),
            email=order.email,
            phone=order.phone,
            total=order.total,
            items=[OrderEmailLine(name=i.name, quantity=i.quantity, price=i.price) for i in order.items],
            shipping_address=order.shipping_address,
        )
        for label, send in (
            ("confirmation", self.email_service.send_order_confirmation),
            ("admin alert", self.email_service.send_admin_order_alert),
        ):
            try:
                await send(data)
            except EmailDeliveryError as e:
                logger.warning("Order %s %s email failed: %s", order.id, label, e.context.get("error", e.message))
            except Exception:
                logger.exception("Order %s %s email raised unexpectedly", order.id, label)


class AdminOrderService:
    async def list_orders(self, db: AsyncSession) -> List[Order]:
        """All orders, newest first, with lines and the placing user."""
        result = await db.execute(
            select(Order)
            .options(selectinload(Order.items), selectinload(Order.user))
            .order_by(desc(Order.created_at))
        )
        return list(result.scalars().all())

    async def update_status(self, db: AsyncSession, order_id: uuid.UUID, status: OrderStatus) -> Order:
        """
        Raises:
            NotFoundError: no such order
        """
        order = await get_or_404(db, Order, order_id, "order")
        previous = order.status
        order.status = status
        await flush_or_raise(db, "order", "update")
        logger.info("Order %s status %s -> %s", order.id, previous.value, status.value)
        return order
