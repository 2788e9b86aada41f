"""
Storefront Backend — Checkout Route
=====================================

What:  POST /api/orders. Guests and signed-in customers alike.
How:   OrderService resolves prices from the catalogue, commits the order,
       then attempts the notification emails. A signed-in caller's order is
       linked to their account; otherwise it is flagged as a guest order.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.dependencies import get_db_session, get_optional_identity, get_order_service, read_json_body
from storefront.schemas.common import ErrorResponse
from storefront.schemas.order import OrderCreate, OrderEnvelope, OrderWithItems
from storefront.services.order_service import OrderService
from storefront.services.security import Identity
from storefront.validation import parse_payload

router = APIRouter(prefix="/api", tags=["Orders"])


@router.post(
    "/orders",
    response_model=OrderEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid order payload", "model": ErrorResponse},
        500: {"description": "Unknown product or server error", "model": ErrorResponse},
    },
    summary="Place an order",
)
async def place_order(
    identity: Optional[Identity] = Depends(get_optional_identity),
    data: Any = Depends(read_json_body),
    order_service: OrderService = Depends(get_order_service),
    db: AsyncSession = Depends(get_db_session),
) -> OrderEnvelope:
    payload = parse_payload(OrderCreate, data)
    order = await order_service.place_order(db, payload, identity)
    return OrderEnvelope(order=OrderWithItems.model_validate(order))
