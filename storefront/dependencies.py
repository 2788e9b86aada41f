"""
Storefront Backend — FastAPI Dependencies
===========================================

What:  Request-scoped accessors for the AppContext, database sessions and the
       caller's identity.
Who:   Injected into route handlers via Depends().

Identity dependencies:
    get_optional_identity  → Identity | None (guest checkout)
    require_identity       → Identity, else AuthenticationError (401)
    require_admin          → Identity with role ADMIN, else 401

The admin check runs on every call; nothing is cached between requests.
Because it is a dependency, it resolves before the handler reads or
validates the request body.
"""

import json
import logging
from typing import Any, AsyncGenerator, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.context import AppContext
from storefront.exceptions import AuthenticationError, ValidationError
from storefront.services.auth_service import AuthService
from storefront.services.order_service import OrderService
from storefront.services.security import Identity
from storefront.services.upload_service import UploadService

logger = logging.getLogger(__name__)


def get_context(request: Request) -> AppContext:
    return request.app.state.context


async def get_db_session(
    context: AppContext = Depends(get_context),
) -> AsyncGenerator[AsyncSession, None]:
    """
    Provides a database session per request.

    How it works:
        1. Creates a new session from the context's factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back the transaction
        5. Always: closes the session (returns connection to pool)

    Services that must commit before a side effect (order placement commits
    before sending email) call `session.commit()` themselves; the commit
    here is then a no-op.
    """
    async with context.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def get_optional_identity(
    request: Request,
    context: AppContext = Depends(get_context),
) -> Optional[Identity]:
    """Identity from the session cookie, or None when absent/invalid/expired."""
    token = request.cookies.get(context.settings.auth_cookie_name)
    return context.token_signer.read(token)


def require_identity(identity: Optional[Identity] = Depends(get_optional_identity)) -> Identity:
    if identity is None:
        raise AuthenticationError()
    return identity


def require_admin(identity: Optional[Identity] = Depends(get_optional_identity)) -> Identity:
    if identity is None or not identity.is_admin:
        raise AuthenticationError()
    return identity


async def read_json_body(request: Request) -> Any:
    """
    Parse the raw JSON body.

    Handlers call this after their identity dependency has resolved, so an
    unauthorized caller always gets 401 before any payload is inspected.

    Raises:
        ValidationError: empty or malformed JSON.
    """
    raw = await request.body()
    if not raw:
        raise ValidationError(message="Request body must be a JSON object", field="body")
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError(
            message="Malformed JSON body",
            field="body",
            context={"error": str(e)},
        ) from e


# ── Service providers ─────────────────────────────────────────────────────


def get_auth_service(context: AppContext = Depends(get_context)) -> AuthService:
    return AuthService(context.password_hasher, context.token_signer)


def get_order_service(context: AppContext = Depends(get_context)) -> OrderService:
    return OrderService(context.email_service)


def get_upload_service(context: AppContext = Depends(get_context)) -> UploadService:
    return context.upload_service
