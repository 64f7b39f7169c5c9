"""
PixTag Backend — Image Schemas
===============================

What:  Response models for the image endpoints.
Why:   The JSON contract uses camelCase keys (imageId, labelIds) that the
       browser client already consumes; the Python side keeps snake_case
       attribute names and maps them with aliases.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class UploadResponse(BaseModel):
    """
    What:  Returned by POST /api/images with HTTP 201 Created.
    """
    image_id: int = Field(alias="imageId", description="Identity of the new image row")
    filename: str = Field(description="Generated storage filename")

    model_config = {"populate_by_name": True}


class ImageWithLabels(BaseModel):
    """
    What:  One entry of GET /api/images.

    Label fields:
        labels and labelIds are ", "-joined strings in annotation insertion
        order. Splitting both on ", " yields parallel lists: the id at index
        i belongs to the name at index i. Both are null for an image with
        no labels.

    Example:
        {
            "id": 1,
            "filename": "image-1700000000000-1a2b3c4d.jpg",
            "file_path": "/srv/pixtag/uploads/image-1700000000000-1a2b3c4d.jpg",
            "upload_time": "2024-01-15T12:00:00Z",
            "image_url": "/api/files/image-1700000000000-1a2b3c4d.jpg",
            "labels": "cat, dog",
            "labelIds": "1, 2"
        }
    """
    id: int = Field(description="Image identity")
    filename: str = Field(description="Generated storage filename")
    file_path: str = Field(description="Path of the stored binary")
    upload_time: Optional[datetime] = Field(default=None, description="Upload timestamp (UTC)")
    image_url: str = Field(description="URL path serving the stored file")
    labels: Optional[str] = Field(default=None, description="Label names joined with ', '")
    label_ids: Optional[str] = Field(
        default=None,
        alias="labelIds",
        description="Label ids joined with ', ', aligned with labels",
    )

    model_config = {"populate_by_name": True}
