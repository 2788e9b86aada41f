"""
Storefront Backend — Admin Product Route Handlers
===================================================

What:  GET/POST/PUT/DELETE /api/admin/products.
Who:   The admin dashboard's catalogue editor.

The listing returns every product (any status) with category and variants.
Validation rules live in ProductCreate / ProductUpdate; the admin gate is
the first dependency of every handler.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.dependencies import get_db_session, read_json_body, require_admin
from storefront.schemas.common import ErrorResponse, SuccessResponse
from storefront.schemas.product import ProductDetail, ProductEnvelope, ProductListResponse, ProductOut
from storefront.services.product_service import ProductService
from storefront.services.security import Identity
from storefront.validation import parse_uuid, split_id

router = APIRouter(prefix="/api/admin/products", tags=["Admin: Products"])

product_service = ProductService()

ADMIN_ERRORS = {
    400: {"description": "Invalid input", "model": ErrorResponse},
    401: {"description": "Admin session required", "model": ErrorResponse},
}
NOT_FOUND = {404: {"description": "No such product", "model": ErrorResponse}}


@router.get("", response_model=ProductListResponse, responses=ADMIN_ERRORS, summary="List all products")
async def list_products(
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ProductListResponse:
    products = await product_service.list_products(db)
    return ProductListResponse(products=[ProductDetail.model_validate(p) for p in products])


@router.post(
    "",
    response_model=ProductEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses=ADMIN_ERRORS,
    summary="Create a product",
)
async def create_product(
    admin: Identity = Depends(require_admin),
    data: Any = Depends(read_json_body),
    db: AsyncSession = Depends(get_db_session),
) -> ProductEnvelope:
    product = await product_service.create_product(db, data)
    return ProductEnvelope(product=ProductOut.model_validate(product))


@router.put(
    "",
    response_model=ProductEnvelope,
    responses={**ADMIN_ERRORS, **NOT_FOUND},
    summary="Update the supplied fields of a product",
)
async def update_product(
    admin: Identity = Depends(require_admin),
    data: Any = Depends(read_json_body),
    db: AsyncSession = Depends(get_db_session),
) -> ProductEnvelope:
    product_id, fields = split_id(data, "Product")
    product = await product_service.update_product(db, product_id, fields)
    return ProductEnvelope(product=ProductOut.model_validate(product))


@router.delete(
    "",
    response_model=SuccessResponse,
    responses={**ADMIN_ERRORS, **NOT_FOUND},
    summary="Delete a product",
)
async def delete_product(
    admin: Identity = Depends(require_admin),
    id: Optional[str] = Query(default=None, description="Product ID"),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await product_service.delete_product(db, parse_uuid(id, "Product"))
    return SuccessResponse()
