"""
Storefront Backend — Upload Route
===================================

What:  POST /api/upload (multipart, field "file"), admin only.
Returns {url, thumbnail} for images and {url} for anything else.

The form is parsed inside the handler, after require_admin has resolved,
so a non-admin caller gets 401 even when the multipart body is malformed.
"""

import logging

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException

from storefront.dependencies import get_upload_service, require_admin
from storefront.exceptions import ValidationError
from storefront.schemas.common import ErrorResponse
from storefront.schemas.upload import UploadResponse
from storefront.services.security import Identity
from storefront.services.upload_service import UploadService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Upload"])


@router.post(
    "/upload",
    response_model=UploadResponse,
    response_model_exclude_none=True,
    responses={
        400: {"description": "No file, malformed form, empty file, or file too large", "model": ErrorResponse},
        401: {"description": "Admin session required", "model": ErrorResponse},
        500: {"description": "Upload failed", "model": ErrorResponse},
    },
    summary="Upload a product or blog image",
)
async def upload_file(
    request: Request,
    admin: Identity = Depends(require_admin),
    upload_service: UploadService = Depends(get_upload_service),
) -> UploadResponse:
    try:
        form = await request.form()
    except (HTTPException, MultiPartException) as e:
        # Starlette wraps multipart parse errors in HTTPException(400) inside an app
        raise ValidationError(message="Invalid multipart form data", field="file") from e

    try:
        file = form.get("file")
        if not isinstance(file, UploadFile) or not file.filename:
            raise ValidationError(message="No file provided", field="file")

        content = await file.read()
        result = await upload_service.store(file.filename, file.content_type, content)
    finally:
        await form.close()

    logger.info("Upload by %s stored at %s", admin.user_id, result.url)
    return result
