"""
Storefront Backend — Public Catalogue Route
=============================================

What:  GET /api/products, the paginated list of ACTIVE products.
Who:   Storefront shop and search pages. No session needed.

Query parameters:
    search      case-insensitive match on name or description
    categoryId  restrict to one category
    limit       ≥ 1, default 50
    offset      ≥ 0, default 0
Malformed numbers or ids are rejected with 400 rather than coerced.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.dependencies import get_db_session
from storefront.schemas.common import ErrorResponse
from storefront.schemas.product import CatalogPage
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/api", tags=["Products"])

product_service = ProductService()


@router.get(
    "/products",
    response_model=CatalogPage,
    responses={
        400: {"description": "Malformed query parameter", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List active products with rating summaries",
)
async def list_products(
    response: Response,
    search: Optional[str] = Query(default=None, description="Substring of name or description"),
    category_id: Optional[uuid.UUID] = Query(default=None, alias="categoryId"),
    limit: int = Query(default=50, ge=1, description="Page size"),
    offset: int = Query(default=0, ge=0, description="Items to skip"),
    db: AsyncSession = Depends(get_db_session),
) -> CatalogPage:
    products, total = await product_service.list_catalog(
        db,
        search=search,
        category_id=category_id,
        limit=limit,
        offset=offset,
    )
    response.headers["X-Total-Count"] = str(total)
    return CatalogPage(products=products, total=total, limit=limit, offset=offset)
