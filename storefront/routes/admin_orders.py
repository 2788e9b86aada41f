"""
Storefront Backend — Admin Order Route Handlers
=================================================

What:  GET /api/admin/orders (every order with lines and customer) and
       PUT /api/admin/orders (status change only).

Orders have no create or delete here: they come from checkout and are
only ever moved between statuses.
"""

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.dependencies import get_db_session, read_json_body, require_admin
from storefront.schemas.common import ErrorResponse
from storefront.schemas.order import (
    AdminOrder,
    AdminOrderListResponse,
    OrderOut,
    OrderStatusEnvelope,
    OrderStatusUpdate,
)
from storefront.services.order_service import AdminOrderService
from storefront.services.security import Identity
from storefront.validation import parse_payload, split_id

router = APIRouter(prefix="/api/admin/orders", tags=["Admin: Orders"])

admin_order_service = AdminOrderService()


@router.get(
    "",
    response_model=AdminOrderListResponse,
    responses={401: {"description": "Admin session required", "model": ErrorResponse}},
    summary="List all orders, newest first",
)
async def list_orders(
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> AdminOrderListResponse:
    orders = await admin_order_service.list_orders(db)
    return AdminOrderListResponse(orders=[AdminOrder.model_validate(o) for o in orders])


@router.put(
    "",
    response_model=OrderStatusEnvelope,
    responses={
        400: {"description": "Missing id or unknown status", "model": ErrorResponse},
        401: {"description": "Admin session required", "model": ErrorResponse},
        404: {"description": "No such order", "model": ErrorResponse},
    },
    summary="Move an order to another status",
)
async def update_order_status(
    admin: Identity = Depends(require_admin),
    data: Any = Depends(read_json_body),
    db: AsyncSession = Depends(get_db_session),
) -> OrderStatusEnvelope:
    order_id, fields = split_id(data, "Order")
    payload = parse_payload(OrderStatusUpdate, {"id": order_id, **fields})
    order = await admin_order_service.update_status(db, payload.id, payload.status)
    return OrderStatusEnvelope(order=OrderOut.model_validate(order))
