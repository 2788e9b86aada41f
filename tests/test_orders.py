"""
Storefront Backend — Order Placement Tests
============================================

What we test:
    ✅ Guest checkout → 201, isGuest, billing defaults to shipping
    ✅ Signed-in checkout links the order to the user
    ✅ Total is Σ(price × qty); a client-supplied total is ignored
    ✅ Variant lines use the variant price and "<product> - <value>" name
    ✅ Line image is the product's first image
    ✅ Unknown (or non-UUID) product id → 500 with a descriptive message and no order rows
    ✅ Order lines are snapshots: later product edits leave them unchanged
    ✅ Email failures never fail the order
    ✅ Payload validation → 400
"""

import uuid
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from storefront.exceptions import EmailDeliveryError
from storefront.models import Order, OrderItem
from storefront.schemas.order import OrderItemIn
from storefront.services.order_service import resolve_line
from tests.conftest import create_product

ADDRESS = {"street": "1 Main St", "city": "Springfield", "state": "IL", "zip": "62701"}


def order_payload(items, **overrides) -> dict:
    payload = {
        "items": items,
        "shippingAddress": ADDRESS,
        "email": "buyer@example.com",
        "phone": "555-0100",
    }
    payload.update(overrides)
    return payload


async def count_rows(context, model) -> int:
    async with context.session_factory() as session:
        return await session.scalar(select(func.count()).select_from(model))


class TestPlaceOrder:
    @pytest.mark.asyncio
    async def test_guest_order(self, client, context, mock_email):
        product = await create_product(context, price="25.00")

        response = await client.post(
            "/api/orders",
            json=order_payload([{"productId": str(product.id), "quantity": 2}], notes="Leave at door"),
        )

        assert response.status_code == 201
        order = response.json()["order"]
        assert order["isGuest"] is True
        assert order["userId"] is None
        assert order["status"] == "PENDING"
        assert order["total"] == 50.0
        assert order["billingAddress"] == ADDRESS
        assert order["notes"] == "Leave at door"
        assert len(order["items"]) == 1
        item = order["items"][0]
        assert item["name"] == "Linen Shirt"
        assert item["price"] == 25.0
        assert item["quantity"] == 2
        assert item["image"] == "/uploads/shirt.jpg"

    @pytest.mark.asyncio
    async def test_signed_in_order_links_user(self, customer_client, customer_user, context, mock_email):
        product = await create_product(context)

        response = await customer_client.post(
            "/api/orders",
            json=order_payload([{"productId": str(product.id), "quantity": 1}]),
        )

        assert response.status_code == 201
        order = response.json()["order"]
        assert order["isGuest"] is False
        assert order["userId"] == str(customer_user.id)

    @pytest.mark.asyncio
    async def test_total_ignores_client_total_and_uses_variant_price(self, client, context, mock_email):
        shirt = await create_product(
            context,
            name="Linen Shirt",
            price="25.00",
            variants=[{"name": "Size", "value": "XL", "price": "29.50"}],
        )
        socks = await create_product(context, name="Wool Socks", price="7.25", images=[])
        variant_id = str(shirt.variants[0].id)

        response = await client.post(
            "/api/orders",
            json=order_payload(
                [
                    {"productId": str(shirt.id), "variantId": variant_id, "quantity": 2},
                    {"productId": str(socks.id), "quantity": 3},
                ],
                total=0.01,
                billingAddress={**ADDRESS, "street": "9 Billing Rd"},
            ),
        )

        assert response.status_code == 201
        order = response.json()["order"]
        # 2 × 29.50 + 3 × 7.25
        assert order["total"] == 80.75
        assert order["billingAddress"]["street"] == "9 Billing Rd"
        names = {i["name"]: i for i in order["items"]}
        assert names["Linen Shirt - XL"]["price"] == 29.5
        assert names["Linen Shirt - XL"]["variantId"] == variant_id
        assert names["Wool Socks"]["image"] is None

        async with context.session_factory() as session:
            stored = await session.get(Order, uuid.UUID(order["id"]))
            assert stored.total == Decimal("80.75")

    @pytest.mark.asyncio
    async def test_unknown_product_persists_nothing(self, client, context, mock_email):
        product = await create_product(context)
        missing = uuid.uuid4()

        response = await client.post(
            "/api/orders",
            json=order_payload(
                [
                    {"productId": str(product.id), "quantity": 1},
                    {"productId": str(missing), "quantity": 1},
                ]
            ),
        )

        assert response.status_code == 500
        assert response.json()["message"] == f"Product {missing} not found"
        assert await count_rows(context, Order) == 0
        assert await count_rows(context, OrderItem) == 0
        mock_email.send_order_confirmation.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_non_uuid_product_id_is_an_unknown_product(self, client, context, mock_email):
        product = await create_product(context)

        response = await client.post(
            "/api/orders",
            json=order_payload(
                [
                    {"productId": str(product.id), "quantity": 1},
                    {"productId": "does-not-exist", "quantity": 1},
                ]
            ),
        )

        assert response.status_code == 500
        assert response.json()["error"] == "order_failed"
        assert response.json()["message"] == "Product does-not-exist not found"
        assert await count_rows(context, Order) == 0

    @pytest.mark.asyncio
    async def test_order_lines_keep_prices_after_product_edit(self, client, admin_client, context, mock_email):
        product = await create_product(context, name="Linen Shirt", price="10.00")
        placed = await client.post(
            "/api/orders",
            json=order_payload([{"productId": str(product.id), "quantity": 2}]),
        )
        order_id = placed.json()["order"]["id"]

        edit = await admin_client.put(
            "/api/admin/products",
            json={"id": str(product.id), "name": "Linen Shirt v2", "price": 99.0},
        )
        assert edit.status_code == 200

        orders = (await admin_client.get("/api/admin/orders")).json()["orders"]
        stored = next(o for o in orders if o["id"] == order_id)
        assert stored["total"] == 20.0
        assert stored["items"][0]["name"] == "Linen Shirt"
        assert stored["items"][0]["price"] == 10.0

        async with context.session_factory() as session:
            row = await session.get(Order, uuid.UUID(order_id))
            assert row.total == Decimal("20.00")

    @pytest.mark.asyncio
    async def test_email_failure_still_creates_order(self, client, context, mock_email):
        product = await create_product(context)
        mock_email.send_order_confirmation.side_effect = EmailDeliveryError(context={"error": "refused"})
        mock_email.send_admin_order_alert.side_effect = RuntimeError("smtp exploded")

        response = await client.post(
            "/api/orders",
            json=order_payload([{"productId": str(product.id), "quantity": 1}]),
        )

        assert response.status_code == 201
        assert await count_rows(context, Order) == 1
        mock_email.send_order_confirmation.assert_awaited_once()
        mock_email.send_admin_order_alert.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_emails_receive_order_summary(self, client, context, mock_email):
        product = await create_product(context, price="10.00")

        response = await client.post(
            "/api/orders",
            json=order_payload([{"productId": str(product.id), "quantity": 3}]),
        )

        data = mock_email.send_order_confirmation.await_args.args[0]
        assert data.order_id == response.json()["order"]["id"]
        assert data.email == "buyer@example.com"
        assert data.total == Decimal("30.00")
        assert data.items[0].quantity == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            order_payload([]),
            order_payload([{"productId": str(uuid.uuid4()), "quantity": 0}]),
            order_payload([{"productId": "", "quantity": 1}]),
            order_payload([{"productId": str(uuid.uuid4()), "quantity": 1}], email="nope"),
            {"items": [{"productId": str(uuid.uuid4()), "quantity": 1}]},
        ],
    )
    async def test_invalid_payload(self, client, mock_email, payload):
        response = await client.post("/api/orders", json=payload)

        assert response.status_code == 400


class TestResolveLine:
    """Pricing of a single line from an already-loaded product."""

    @pytest.mark.asyncio
    async def test_unknown_variant_falls_back_to_product(self, context):
        product = await create_product(
            context,
            price="12.00",
            variants=[{"name": "Color", "value": "Red", "price": "15.00"}],
        )

        line = resolve_line(product, OrderItemIn(product_id=str(product.id), variant_id=uuid.uuid4(), quantity=2))

        assert line.name == product.name
        assert line.price == Decimal("12.00")
        assert line.variant_id is None
        assert line.subtotal == Decimal("24.00")
