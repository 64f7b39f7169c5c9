"""
PixTag Backend — Image Route Handlers
======================================

What:  POST /api/images (upload), GET /api/images (list with labels),
       DELETE /api/images/{id} (delete image, file and annotations).
How:   Extract the request data, delegate to ImageService, return JSON.
Who:   Called by the browser client's upload form and image grid.

Upload request flow:
    1. Client sends multipart/form-data with an 'image' field
    2. At most max_file_size + 1 bytes are read, enough to detect an
       oversized file without buffering all of it
    3. ImageService validates, stores, and records the image
    4. 201 Created with {imageId, filename}

The 'image' field is optional at the FastAPI level so that a request
without it reaches the service and gets the "No file uploaded." 400
instead of FastAPI's generic missing-field error.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile

from pixtag.routes.deps import get_store
from pixtag.schemas.common import ErrorResponse, SuccessResponse
from pixtag.schemas.image import ImageWithLabels, UploadResponse
from pixtag.services.image_service import image_service
from pixtag.store import AnnotationStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Images"])


@router.post(
    "/images",
    status_code=201,
    response_model=UploadResponse,
    responses={
        201: {"description": "Image stored", "model": UploadResponse},
        400: {"description": "Missing file, unsupported type, or too large", "model": ErrorResponse},
        500: {"description": "File could not be written", "model": ErrorResponse},
    },
    summary="Upload an image",
    description="Upload one JPEG or PNG image (max 5MB) in the multipart field 'image'.",
)
async def upload_image(
    image: Optional[UploadFile] = File(
        default=None,
        description="Image file (JPEG or PNG, max 5MB)",
    ),
    store: AnnotationStore = Depends(get_store),
) -> UploadResponse:
    filename = content_type = None
    content = None

    if image is not None:
        try:
            content = await image.read(image_service.files.max_file_size + 1)
        finally:
            await image.close()
        filename, content_type = image.filename, image.content_type
        logger.info(
            "Received upload: filename=%s, type=%s, size=%d bytes",
            filename or "unknown",
            content_type or "unknown",
            len(content),
        )

    return await image_service.upload_image(
        store,
        filename=filename,
        content_type=content_type,
        content=content,
    )


@router.get(
    "/images",
    response_model=List[ImageWithLabels],
    responses={
        200: {"description": "Every image with its labels"},
        400: {"description": "Store error", "model": ErrorResponse},
    },
    summary="List images with their labels",
    description=(
        "Returns every image. 'labels' and 'labelIds' are ', '-joined and "
        "positionally aligned; both are null for an unlabelled image."
    ),
)
async def list_images(store: AnnotationStore = Depends(get_store)) -> List[ImageWithLabels]:
    return await image_service.list_images_with_labels(store)


@router.delete(
    "/images/{image_id}",
    response_model=SuccessResponse,
    responses={
        200: {"description": "Image deleted", "model": SuccessResponse},
        400: {"description": "Malformed id or store error", "model": ErrorResponse},
        404: {"description": "Image not found", "model": ErrorResponse},
    },
    summary="Delete an image with its file and labels",
)
async def delete_image(
    image_id: int,
    store: AnnotationStore = Depends(get_store),
) -> SuccessResponse:
    """
    Delete an image.

    A non-numeric id fails FastAPI's path validation, which the global
    handler reports as a 400 validation_error.
    """
    return await image_service.delete_image(store, image_id)
