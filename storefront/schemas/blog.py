"""
Storefront Backend — Blog Post Schemas
========================================

BlogPostCreate is the full schema; BlogPostUpdate is its partial form:
every field may be omitted, but a field that is present obeys the same
constraints (an explicit null for a required field is rejected).
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from storefront.schemas.common import CamelModel


class BlogPostCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=1, max_length=255)
    content: str
    excerpt: Optional[str] = None
    published: bool = False


class BlogPostUpdate(CamelModel):
    # Defaults are not validated, so "absent" is allowed while null is not
    title: str = Field(default=None, min_length=1, max_length=255)
    slug: str = Field(default=None, min_length=1, max_length=255)
    content: str = None
    excerpt: Optional[str] = None
    published: bool = None


class AuthorOut(CamelModel):
    name: Optional[str] = None
    email: str


class BlogPostOut(CamelModel):
    id: uuid.UUID
    title: str
    slug: str
    content: str
    excerpt: Optional[str] = None
    published: bool
    author_id: uuid.UUID
    created_at: datetime
    updated_at: datetime


class BlogPostWithAuthor(BlogPostOut):
    author: Optional[AuthorOut] = None


class BlogPostEnvelope(CamelModel):
    post: BlogPostOut


class BlogPostListResponse(CamelModel):
    posts: List[BlogPostWithAuthor]
