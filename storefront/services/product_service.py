"""
Storefront Backend — Product Service
======================================

What:  Admin CRUD over products and the public, paginated catalogue.
How:   Async SQLAlchemy; relations are eager-loaded with selectinload so the
       response models never trigger lazy IO.
Who:   /api/admin/products and /api/products routes.

Catalogue rules:
    - only status=ACTIVE products are listed
    - `search` is a case-insensitive substring match on name OR description
    - `category_id` narrows to one category
    - averageRating is the mean of APPROVED review ratings, 0 with none
    - total counts every match, independent of limit/offset
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.exceptions import ValidationError
from storefront.models.product import Category, Product, ProductStatus, Review
from storefront.schemas.product import CatalogProduct, ProductCreate, ProductDetail, ProductUpdate
from storefront.services.crud import apply_changes, delete_row, flush_or_raise, get_or_404
from storefront.validation import parse_payload

logger = logging.getLogger(__name__)


@dataclass
class RatingSummary:
    average: float = 0.0
    count: int = 0


class ProductService:
    # ── Admin ──────────────────────────────────────────────

    async def list_products(self, db: AsyncSession) -> List[Product]:
        """Every product regardless of status, newest first."""
        result = await db.execute(
            select(Product)
            .options(selectinload(Product.category), selectinload(Product.variants))
            .order_by(desc(Product.created_at))
        )
        return list(result.scalars().all())

    async def _check_category(self, db: AsyncSession, category_id: Optional[uuid.UUID]) -> None:
        if category_id is not None and await db.get(Category, category_id) is None:
            raise ValidationError(message="Category not found", field="categoryId")

    async def create_product(self, db: AsyncSession, data: Any) -> Product:
        """
        Raises:
            ValidationError: payload rejected, unknown category, or slug taken
        """
        payload = parse_payload(ProductCreate, data)
        await self._check_category(db, payload.category_id)

        product = Product(**payload.model_dump())
        db.add(product)
        await flush_or_raise(db, "product", "create")
        logger.info("Product created: %s (%s)", product.id, product.slug)
        return product

    async def update_product(self, db: AsyncSession, product_id: uuid.UUID, data: Dict[str, Any]) -> Product:
        """
        Apply only the fields present in `data`.

        Raises:
            ValidationError: bad field, unknown category, or slug taken
            NotFoundError: no such product
        """
        payload = parse_payload(ProductUpdate, data)
        changes = payload.model_dump(exclude_unset=True)
        product = await get_or_404(db, Product, product_id, "product")
        if "category_id" in changes:
            await self._check_category(db, changes["category_id"])

        apply_changes(product, changes)
        await flush_or_raise(db, "product", "update")
        logger.info("Product updated: %s", product.id)
        return product

    async def delete_product(self, db: AsyncSession, product_id: uuid.UUID) -> None:
        """Variants and reviews go with it; past order lines keep their copies."""
        await delete_row(db, Product, product_id, "product")

    # ── Public catalogue ───────────────────────────────────

    @staticmethod
    def _catalog_filters(search: Optional[str], category_id: Optional[uuid.UUID]) -> list:
        filters = [Product.status == ProductStatus.ACTIVE]
        if search:
            # autoescape: "%" and "_" in the term match literally
            filters.append(
                or_(
                    Product.name.icontains(search, autoescape=True),
                    Product.description.icontains(search, autoescape=True),
                )
            )
        if category_id is not None:
            filters.append(Product.category_id == category_id)
        return filters

    async def _rating_summaries(
        self, db: AsyncSession, product_ids: List[uuid.UUID]
    ) -> Dict[uuid.UUID, RatingSummary]:
        if not product_ids:
            return {}
        result = await db.execute(
            select(Review.product_id, func.avg(Review.rating), func.count(Review.id))
            .where(Review.product_id.in_(product_ids), Review.approved.is_(True))
            .group_by(Review.product_id)
        )
        return {
            product_id: RatingSummary(average=float(average or 0), count=int(count))
            for product_id, average, count in result.all()
        }

    async def list_catalog(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
        category_id: Optional[uuid.UUID] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[CatalogProduct], int]:
        """
        One page of ACTIVE products plus the unpaginated match count.

        Returns:
            (items, total)
        """
        filters = self._catalog_filters(search, category_id)

        total = await db.scalar(select(func.count(Product.id)).where(*filters))

        result = await db.execute(
            select(Product)
            .options(selectinload(Product.category), selectinload(Product.variants))
            .where(*filters)
            .order_by(desc(Product.created_at), Product.id)
            .limit(limit)
            .offset(offset)
        )
        products = list(result.scalars().all())
        ratings = await self._rating_summaries(db, [p.id for p in products])

        items = []
        for product in products:
            summary = ratings.get(product.id, RatingSummary())
            detail = ProductDetail.model_validate(product)
            items.append(
                CatalogProduct(
                    **detail.model_dump(),
                    average_rating=summary.average,
                    review_count=summary.count,
                )
            )
        return items, int(total or 0)
