"""
PixTag Backend — Annotation Schemas
====================================

What:  Request and response bodies for POST/DELETE /api/annotations.

The request models only check shape and type. Ids are strict integers,
so JSON true or "7" is refused rather than coerced. The business rules
(positive ids, 1-50 character label names) live in AnnotationService so
they apply to every caller, not just HTTP.
"""

from pydantic import BaseModel, Field, StrictInt


class AttachLabelRequest(BaseModel):
    """Body of POST /api/annotations."""
    image_id: StrictInt = Field(alias="imageId", description="Image to annotate")
    label_name: str = Field(alias="labelName", description="Label text, 1-50 characters")

    model_config = {"populate_by_name": True}


class DetachLabelRequest(BaseModel):
    """Body of DELETE /api/annotations."""
    image_id: StrictInt = Field(alias="imageId", description="Image to remove the label from")
    label_id: StrictInt = Field(alias="labelId", description="Label to remove")

    model_config = {"populate_by_name": True}


class AttachLabelResponse(BaseModel):
    """
    What:  Result of attaching a label.

    created tells whether the label row was created by this call; the
    message says the same thing for humans.
    """
    success: bool = Field(default=True)
    message: str = Field(description="Which path was taken: existing or new label")
    label_id: int = Field(alias="labelId", description="Identity of the attached label")
    created: bool = Field(description="True if this call created the label")

    model_config = {"populate_by_name": True}
