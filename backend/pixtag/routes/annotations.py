"""
PixTag Backend — Annotation Route Handlers
===========================================

What:  POST /api/annotations (attach a label by name) and
       DELETE /api/annotations (detach a label by id).
Who:   Called by the browser client's label input and label chips.

Both endpoints take a JSON body. DELETE with a body is unusual but it is
what the client sends: {"imageId": 1, "labelId": 2}.
"""

from fastapi import APIRouter, Depends

from pixtag.routes.deps import get_store
from pixtag.schemas.annotation import AttachLabelRequest, AttachLabelResponse, DetachLabelRequest
from pixtag.schemas.common import ErrorResponse, SuccessResponse
from pixtag.services.annotation_service import annotation_service
from pixtag.store import AnnotationStore

router = APIRouter(prefix="/api", tags=["Annotations"])


@router.post(
    "/annotations",
    response_model=AttachLabelResponse,
    responses={
        200: {"description": "Label attached", "model": AttachLabelResponse},
        400: {"description": "Invalid input or store error", "model": ErrorResponse},
    },
    summary="Attach a label to an image",
    description=(
        "Attaches the named label to the image, creating the label first if "
        "no label has that name. Attaching a label twice is a no-op."
    ),
)
async def attach_label(
    body: AttachLabelRequest,
    store: AnnotationStore = Depends(get_store),
) -> AttachLabelResponse:
    return await annotation_service.attach_label(store, body.image_id, body.label_name)


@router.delete(
    "/annotations",
    response_model=SuccessResponse,
    responses={
        200: {"description": "Label removed (or was not attached)", "model": SuccessResponse},
        400: {"description": "Malformed ids", "model": ErrorResponse},
    },
    summary="Remove a label from an image",
)
async def detach_label(
    body: DetachLabelRequest,
    store: AnnotationStore = Depends(get_store),
) -> SuccessResponse:
    return await annotation_service.detach_label(store, body.image_id, body.label_id)
