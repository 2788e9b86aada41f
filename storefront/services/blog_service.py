"""
Storefront Backend — Blog Service
===================================

What:  Admin CRUD for blog posts.
Who:   /api/admin/blog routes (admin-gated before any call lands here).

The creating admin becomes the post's author; any admin may later edit or
delete it.
"""

import logging
import uuid
from typing import Any, Dict, List

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.models.blog import BlogPost
from storefront.schemas.blog import BlogPostCreate, BlogPostUpdate
from storefront.services.crud import apply_changes, delete_row, flush_or_raise, get_or_404
from storefront.services.security import Identity
from storefront.validation import parse_payload

logger = logging.getLogger(__name__)


class BlogService:
    async def list_posts(self, db: AsyncSession) -> List[BlogPost]:
        """All posts, newest first, each with its author loaded."""
        result = await db.execute(
            select(BlogPost)
            .options(selectinload(BlogPost.author))
            .order_by(desc(BlogPost.created_at))
        )
        return list(result.scalars().all())

    async def create_post(self, db: AsyncSession, author: Identity, data: Any) -> BlogPost:
        """
        Raises:
            ValidationError: payload rejected, or slug already taken
        """
        payload = parse_payload(BlogPostCreate, data)
        post = BlogPost(**payload.model_dump(), author_id=author.user_id)
        db.add(post)
        await flush_or_raise(db, "post", "create")
        logger.info("Blog post created: %s by %s", post.id, author.user_id)
        return post

    async def update_post(self, db: AsyncSession, post_id: uuid.UUID, data: Dict[str, Any]) -> BlogPost:
        """
        Apply only the fields present in `data`.

        Raises:
            ValidationError: a present field violates its constraint
            NotFoundError: no such post
        """
        payload = parse_payload(BlogPostUpdate, data)
        post = await get_or_404(db, BlogPost, post_id, "post")
        apply_changes(post, payload.model_dump(exclude_unset=True))
        await flush_or_raise(db, "post", "update")
        logger.info("Blog post updated: %s", post.id)
        return post

    async def delete_post(self, db: AsyncSession, post_id: uuid.UUID) -> None:
        await delete_row(db, BlogPost, post_id, "post")
