"""
Storefront Backend — Admin Blog Route Handlers
================================================

What:  GET/POST/PUT/DELETE /api/admin/blog.
Who:   The admin dashboard's blog editor.

Every handler declares `require_admin` before the body dependency, so a
non-admin caller gets 401 whatever the payload looks like.

    PUT    body {id, ...partial fields}
    DELETE ?id=<uuid>
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.dependencies import get_db_session, read_json_body, require_admin
from storefront.schemas.blog import (
    BlogPostEnvelope,
    BlogPostListResponse,
    BlogPostOut,
    BlogPostWithAuthor,
)
from storefront.schemas.common import ErrorResponse, SuccessResponse
from storefront.services.blog_service import BlogService
from storefront.services.security import Identity
from storefront.validation import parse_uuid, split_id

router = APIRouter(prefix="/api/admin/blog", tags=["Admin: Blog"])

blog_service = BlogService()

ADMIN_ERRORS = {
    400: {"description": "Invalid input", "model": ErrorResponse},
    401: {"description": "Admin session required", "model": ErrorResponse},
}


@router.get("", response_model=BlogPostListResponse, responses=ADMIN_ERRORS, summary="List blog posts")
async def list_posts(
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> BlogPostListResponse:
    posts = await blog_service.list_posts(db)
    return BlogPostListResponse(posts=[BlogPostWithAuthor.model_validate(p) for p in posts])


@router.post(
    "",
    response_model=BlogPostEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses=ADMIN_ERRORS,
    summary="Create a blog post authored by the caller",
)
async def create_post(
    admin: Identity = Depends(require_admin),
    data: Any = Depends(read_json_body),
    db: AsyncSession = Depends(get_db_session),
) -> BlogPostEnvelope:
    post = await blog_service.create_post(db, admin, data)
    return BlogPostEnvelope(post=BlogPostOut.model_validate(post))


@router.put(
    "",
    response_model=BlogPostEnvelope,
    responses={**ADMIN_ERRORS, 404: {"description": "No such post", "model": ErrorResponse}},
    summary="Update the supplied fields of a blog post",
)
async def update_post(
    admin: Identity = Depends(require_admin),
    data: Any = Depends(read_json_body),
    db: AsyncSession = Depends(get_db_session),
) -> BlogPostEnvelope:
    post_id, fields = split_id(data, "Post")
    post = await blog_service.update_post(db, post_id, fields)
    return BlogPostEnvelope(post=BlogPostOut.model_validate(post))


@router.delete(
    "",
    response_model=SuccessResponse,
    responses={**ADMIN_ERRORS, 404: {"description": "No such post", "model": ErrorResponse}},
    summary="Delete a blog post",
)
async def delete_post(
    admin: Identity = Depends(require_admin),
    id: Optional[str] = Query(default=None, description="Post ID"),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await blog_service.delete_post(db, parse_uuid(id, "Post"))
    return SuccessResponse()
