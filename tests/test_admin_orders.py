"""
Storefront Backend — Admin Order Endpoint Tests
=================================================

What we test:
    ✅ List: newest first, with items and the placing user (no password hash)
    ✅ Status update to each valid status; unknown status → 400
    ✅ Missing id → 400, unknown id → 404
    ✅ Non-admin → 401
"""

import pytest

from tests.conftest import create_product

ADDRESS = {"street": "1 Main St", "city": "Springfield", "state": "IL", "zip": "62701"}


async def place_order(http, product, quantity=1) -> dict:
    response = await http.post(
        "/api/orders",
        json={
            "items": [{"productId": str(product.id), "quantity": quantity}],
            "shippingAddress": ADDRESS,
            "email": "buyer@example.com",
            "phone": "555-0100",
        },
    )
    assert response.status_code == 201, response.text
    return response.json()["order"]


class TestListOrders:
    @pytest.mark.asyncio
    async def test_list_with_items_and_user(self, admin_client, customer_client, client, context, mock_email):
        product = await create_product(context)
        guest_order = await place_order(client, product)
        customer_order = await place_order(customer_client, product, quantity=2)

        response = await admin_client.get("/api/admin/orders")

        assert response.status_code == 200
        orders = response.json()["orders"]
        assert [o["id"] for o in orders] == [customer_order["id"], guest_order["id"]]
        assert orders[0]["user"]["email"] == "customer@example.com"
        assert "password" not in orders[0]["user"]
        assert orders[0]["items"][0]["quantity"] == 2
        assert orders[1]["user"] is None

    @pytest.mark.asyncio
    async def test_customer_cannot_list(self, customer_client):
        response = await customer_client.get("/api/admin/orders")

        assert response.status_code == 401


class TestUpdateStatus:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status",
        ["PENDING", "CONFIRMED", "PROCESSING", "SHIPPED", "DELIVERED", "CANCELLED", "REFUNDED"],
    )
    async def test_update_to_each_status(self, admin_client, client, context, mock_email, status):
        product = await create_product(context)
        order = await place_order(client, product)

        response = await admin_client.put("/api/admin/orders", json={"id": order["id"], "status": status})

        assert response.status_code == 200
        assert response.json()["order"]["status"] == status
        assert response.json()["order"]["total"] == order["total"]

    @pytest.mark.asyncio
    async def test_unknown_status(self, admin_client, client, context, mock_email):
        product = await create_product(context)
        order = await place_order(client, product)

        response = await admin_client.put("/api/admin/orders", json={"id": order["id"], "status": "LOST"})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_missing_id(self, admin_client):
        response = await admin_client.put("/api/admin/orders", json={"status": "SHIPPED"})

        assert response.status_code == 400
        assert response.json()["message"] == "Order ID required"

    @pytest.mark.asyncio
    async def test_unknown_order(self, admin_client):
        response = await admin_client.put(
            "/api/admin/orders",
            json={"id": "00000000-0000-0000-0000-000000000003", "status": "SHIPPED"},
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_customer_cannot_update(self, customer_client):
        response = await customer_client.put("/api/admin/orders", json={"status": "nonsense"})

        assert response.status_code == 401
