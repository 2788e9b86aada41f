"""
Storefront Backend — Shared Admin CRUD Helpers
================================================

What:  The load/patch/delete steps every admin resource repeats, with
       database failures translated into the application's exceptions.
Who:   BlogService, ProductService, AdminOrderService.
"""

import logging
import uuid
from typing import Any, Dict, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.database import Base
from storefront.exceptions import DatabaseError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

RowT = TypeVar("RowT", bound=Base)


async def get_or_404(db: AsyncSession, model: Type[RowT], row_id: uuid.UUID, resource: str) -> RowT:
    row = await db.get(model, row_id)
    if row is None:
        raise NotFoundError(resource=resource, resource_id=str(row_id))
    return row


def apply_changes(row: Base, changes: Dict[str, Any]) -> None:
    """Assign only the supplied fields."""
    for name, value in changes.items():
        setattr(row, name, value)


async def flush_or_raise(db: AsyncSession, resource: str, action: str) -> None:
    """
    Flush pending changes.

    Raises:
        ValidationError: a unique constraint fired (duplicate slug)
        DatabaseError: any other database failure (details logged only)
    """
    try:
        await db.flush()
    except IntegrityError as e:
        logger.warning("%s %s rejected by constraint: %s", resource, action, str(e.orig))
        raise ValidationError(
            message=f"A {resource} with this slug already exists",
            field="slug",
        ) from e
    except SQLAlchemyError as e:
        logger.error("%s %s failed: %s", resource, action, str(e), exc_info=True)
        raise DatabaseError(context={"resource": resource, "action": action}) from e


async def delete_row(db: AsyncSession, model: Type[RowT], row_id: uuid.UUID, resource: str) -> None:
    row = await get_or_404(db, model, row_id, resource)
    await db.delete(row)
    try:
        await db.flush()
    except SQLAlchemyError as e:
        logger.error("%s delete failed: %s", resource, str(e), exc_info=True)
        raise DatabaseError(context={"resource": resource, "action": "delete"}) from e
    logger.info("%s deleted: %s", resource, row_id)
