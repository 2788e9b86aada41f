"""
Storefront Backend — Authentication Route Handlers
====================================================

What:  POST /api/auth/register, POST /api/auth/login, GET /api/auth/me,
       POST /api/auth/logout.
How:   AuthService does the work; this module only moves the session token
       in and out of the HttpOnly cookie.
Who:   Storefront sign-up / sign-in pages and the account menu.

Rate limiting of register/login happens in AuthRateLimitMiddleware, before
these handlers run.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.config import Settings
from storefront.context import AppContext
from storefront.dependencies import (
    get_auth_service,
    get_context,
    get_db_session,
    read_json_body,
    require_identity,
)
from storefront.schemas.auth import (
    LoginRequest,
    RegisterRequest,
    UserEnvelope,
    UserProfile,
    UserProfileEnvelope,
)
from storefront.schemas.common import ErrorResponse, PublicUser, SuccessResponse
from storefront.services.auth_service import AuthService
from storefront.services.security import Identity
from storefront.validation import parse_payload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def set_session_cookie(response: Response, settings: Settings, token: str) -> None:
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.session_ttl_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
    )


@router.post(
    "/register",
    response_model=UserEnvelope,
    responses={
        400: {"description": "Invalid input or email already registered", "model": ErrorResponse},
        429: {"description": "Too many attempts", "model": ErrorResponse},
    },
    summary="Create a customer account and start a session",
)
async def register(
    response: Response,
    data: Any = Depends(read_json_body),
    context: AppContext = Depends(get_context),
    auth_service: AuthService = Depends(get_auth_service),
    db: AsyncSession = Depends(get_db_session),
) -> UserEnvelope:
    payload = parse_payload(RegisterRequest, data)
    user, token = await auth_service.register(db, payload)
    set_session_cookie(response, context.settings, token)
    return UserEnvelope(user=PublicUser.model_validate(user))


@router.post(
    "/login",
    response_model=UserEnvelope,
    responses={
        401: {"description": "Invalid credentials", "model": ErrorResponse},
        429: {"description": "Too many attempts", "model": ErrorResponse},
    },
    summary="Sign in with email and password",
)
async def login(
    response: Response,
    data: Any = Depends(read_json_body),
    context: AppContext = Depends(get_context),
    auth_service: AuthService = Depends(get_auth_service),
    db: AsyncSession = Depends(get_db_session),
) -> UserEnvelope:
    payload = parse_payload(LoginRequest, data)
    user, token = await auth_service.login(db, payload)
    set_session_cookie(response, context.settings, token)
    return UserEnvelope(user=PublicUser.model_validate(user))


@router.get(
    "/me",
    response_model=UserProfileEnvelope,
    responses={
        401: {"description": "No valid session", "model": ErrorResponse},
        404: {"description": "Session user no longer exists", "model": ErrorResponse},
    },
    summary="Current user's profile with saved addresses",
)
async def me(
    identity: Identity = Depends(require_identity),
    auth_service: AuthService = Depends(get_auth_service),
    db: AsyncSession = Depends(get_db_session),
) -> UserProfileEnvelope:
    user = await auth_service.get_profile(db, identity)
    return UserProfileEnvelope(user=UserProfile.model_validate(user))


@router.post("/logout", response_model=SuccessResponse, summary="End the current session")
async def logout(
    response: Response,
    context: AppContext = Depends(get_context),
) -> SuccessResponse:
    settings = context.settings
    response.delete_cookie(
        key=settings.auth_cookie_name,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    return SuccessResponse()
