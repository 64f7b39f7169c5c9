"""
PixTag Backend — Image Service
===============================

What:  Upload, listing, and deletion of images.
Why:   Keeps the ordering rules between disk and database in one place.
How:   Combines FileService (disk) with an AnnotationStore (database)
       passed in by the caller. Each operation runs one store transaction.
Who:   Called by the /api/images route handlers.

Disk / database ordering:
    Upload:  write file → insert row. If the insert fails the file stays
             on disk; the path is logged so it can be swept later.
    Delete:  read row → remove file (best effort) → delete annotations →
             delete row. A file that cannot be removed is logged and the
             rows are deleted anyway. If the row deletes fail after the
             file is gone, the file is not restored.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from pixtag.exceptions import FileSystemWarning, NotFoundError, StoreError
from pixtag.models import LABEL_SEPARATOR
from pixtag.schemas.common import SuccessResponse
from pixtag.schemas.image import ImageWithLabels, UploadResponse
from pixtag.services.file_service import FileService, file_service
from pixtag.services.validators import require_id
from pixtag.store import AnnotationStore

logger = logging.getLogger(__name__)


class ImageService:
    """
    Business logic for image operations.

    Responsibilities:
        - upload_image(): validate, store file, record row
        - list_images_with_labels(): aggregated view for the client grid
        - delete_image(): best-effort file removal plus row deletion
    """

    def __init__(self, files: Optional[FileService] = None):
        self.files = files or file_service

    async def upload_image(
        self,
        store: AnnotationStore,
        filename: Optional[str],
        content_type: Optional[str],
        content: Optional[bytes],
    ) -> UploadResponse:
        """
        Validate an upload, write it to storage, and insert its Image row.

        Args:
            store: Store bound to the caller's session
            filename: Client-side filename (only its extension is used)
            content_type: Media type declared by the client
            content: File bytes, or None when no file part was sent

        Raises:
            ValidationError: Missing file, unsupported type, too large, empty
            FileStorageError: The file could not be written
            StoreError: The row could not be inserted
        """
        extension = self.files.validate_upload(filename, content_type, content)
        stored_name, absolute_path = await self.files.store_file(content, extension)

        try:
            async with store.transaction():
                image = await store.insert_image(stored_name, absolute_path)
                image_id, image_filename = image.id, image.filename
        except SQLAlchemyError as e:
            # Known gap: the file written above is not removed
            logger.error(
                "Insert of image row failed; stored file left at %s: %s",
                absolute_path,
                str(e),
            )
            raise StoreError(
                message="Could not record the uploaded image.",
                context={"filename": stored_name, "error_type": type(e).__name__},
            )

        logger.info("Image %d uploaded as %s", image_id, image_filename)
        return UploadResponse(image_id=image_id, filename=image_filename)

    async def list_images_with_labels(self, store: AnnotationStore) -> List[ImageWithLabels]:
        """
        Every image with its labels joined into strings.

        `labels` and `label_ids` are built from the same ordered lists, so
        splitting both on LABEL_SEPARATOR gives parallel arrays. Images with
        no labels get None for both.
        """
        try:
            async with store.transaction():
                rows = await store.list_images_with_labels()
        except SQLAlchemyError as e:
            logger.error("Listing images failed: %s", str(e), exc_info=True)
            raise StoreError(
                message="Could not retrieve images.",
                context={"error_type": type(e).__name__},
            )

        return [
            ImageWithLabels(
                id=row.id,
                filename=row.filename,
                file_path=row.file_path,
                upload_time=row.upload_time,
                image_url=f"/api/files/{row.filename}",
                labels=LABEL_SEPARATOR.join(row.label_names) if row.label_names else None,
                label_ids=(
                    LABEL_SEPARATOR.join(str(label_id) for label_id in row.label_ids)
                    if row.label_ids
                    else None
                ),
            )
            for row in rows
        ]

    async def delete_image(self, store: AnnotationStore, image_id) -> SuccessResponse:
        """
        Delete an image's file, annotations, and row.

        Workflow Steps:
            1. Look up the row; missing → NotFoundError, nothing touched
            2. Remove the file; failure is logged, not raised
            3. Delete the image's annotations
            4. Delete the image row
        Steps 1, 3 and 4 share one transaction.

        Raises:
            ValidationError: image_id is not a positive integer
            NotFoundError: No image with this id
            StoreError: The row deletes failed (the file may already be gone)
        """
        image_id = require_id(image_id, "imageId")

        try:
            async with store.transaction():
                image = await store.get_image(image_id)
                if image is None:
                    raise NotFoundError(resource="image", resource_id=str(image_id))

                try:
                    await self.files.remove_file(image.file_path)
                except FileSystemWarning as w:
                    logger.warning(
                        "Image %d: %s (continuing with row deletion) | Context: %s",
                        image_id,
                        w.message,
                        w.context,
                    )

                await store.delete_image_cascade(image_id)
        except SQLAlchemyError as e:
            logger.error("Deleting image %d failed: %s", image_id, str(e))
            raise StoreError(
                message="Could not delete the image.",
                context={"image_id": image_id, "error_type": type(e).__name__},
            )

        logger.info("Image %d deleted", image_id)
        return SuccessResponse(
            message="Image deleted successfully (including file and annotations)!"
        )


# ── Singleton Instance ────────────────────────────────────────────────────
image_service = ImageService()
