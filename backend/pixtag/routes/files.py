"""
PixTag Backend — Stored File Route
===================================

What:  Read-only retrieval of uploaded images: GET /api/files/{filename}.
Who:   Referenced by the image_url field of GET /api/images; used as <img> src.

Security:
    - Only bare filenames directly under the storage root are served;
      anything resolving elsewhere (../, nested paths) is a 400
    - Stored names are generated by FileService and never reused, so
      responses can be cached for a long time
"""

from fastapi import APIRouter
from fastapi.responses import FileResponse

from pixtag.exceptions import NotFoundError
from pixtag.services.image_service import image_service

router = APIRouter(prefix="/api", tags=["Files"])


@router.get(
    "/files/{filename:path}",
    summary="Serve an uploaded image file",
    responses={
        200: {"description": "Image file"},
        400: {"description": "Invalid file path"},
        404: {"description": "File not found"},
    },
)
async def serve_file(filename: str) -> FileResponse:
    full_path = image_service.files.resolve_public_path(filename)

    if not full_path.is_file():
        raise NotFoundError(resource="file", resource_id=filename)

    # media type is guessed from the extension
    return FileResponse(
        path=str(full_path),
        headers={"Cache-Control": "public, max-age=86400"},
    )
