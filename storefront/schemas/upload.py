"""Storefront Backend — Upload response schema."""

from typing import Optional

from storefront.schemas.common import CamelModel


class UploadResponse(CamelModel):
    """`thumbnail` is only present for image uploads (route excludes None)."""

    url: str
    thumbnail: Optional[str] = None
