"""
PixTag Backend — Annotation Service
====================================

What:  Attaches labels to images and detaches them.
Why:   Holds the rules that keep the image ↔ label relation consistent:
       one label row per name, at most one link per (image, label) pair.
How:   Each call runs as a single store transaction:
           attach: lookup label → create if absent (upsert) → link
           detach: delete the link row
Who:   Called by the /api/annotations route handlers.

Idempotence:
    Attaching a label an image already carries succeeds without adding a
    row. Detaching a label an image does not carry succeeds too.
"""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from pixtag.exceptions import StoreError, ValidationError
from pixtag.models import LABEL_NAME_MAX_LENGTH, LABEL_SEPARATOR
from pixtag.schemas.annotation import AttachLabelResponse
from pixtag.schemas.common import SuccessResponse
from pixtag.services.validators import require_id
from pixtag.store import AnnotationStore

logger = logging.getLogger(__name__)

EXISTING_LABEL_MESSAGE = "Label added (or already linked to the image)!"
NEW_LABEL_MESSAGE = "New label created and linked to the image!"


def normalize_label_name(label_name) -> str:
    """
    Strip surrounding whitespace and enforce the 1-50 character rule.

    Names containing LABEL_SEPARATOR are refused: the list view joins
    names with it, and such a name would split into two entries.

    Raises:
        ValidationError if the name is missing, blank, too long, or
        contains the separator.
    """
    if not isinstance(label_name, str) or not label_name.strip():
        raise ValidationError(message="Label name is required.", field="labelName")

    name = label_name.strip()
    if len(name) > LABEL_NAME_MAX_LENGTH:
        raise ValidationError(
            message=f"Label name cannot exceed {LABEL_NAME_MAX_LENGTH} characters.",
            field="labelName",
            context={"length": len(name)},
        )
    if LABEL_SEPARATOR in name:
        raise ValidationError(
            message=f"Label name cannot contain '{LABEL_SEPARATOR}'.",
            field="labelName",
        )
    return name


class AnnotationService:
    """Business logic for image/label links."""

    async def attach_label(
        self,
        store: AnnotationStore,
        image_id,
        label_name,
    ) -> AttachLabelResponse:
        """
        Attach a label, by name, to an image.

        Algorithm:
            1. Validate both arguments (no store access on failure)
            2. Look the label up by exact name
            3. If absent, create it; a concurrent request may win the
               insert, in which case its row is reused
            4. Link label and image; an existing link is left as is

        All of it commits or rolls back together, so a failed link (for
        instance an unknown image) leaves no freshly created label behind.

        Returns:
            AttachLabelResponse; `created` and `message` say whether the
            label row was new.

        Raises:
            ValidationError: Bad image id or label name
            StoreError: The store refused the link (e.g. unknown image id)
        """
        image_id = require_id(image_id, "imageId")
        name = normalize_label_name(label_name)

        try:
            async with store.transaction():
                label = await store.find_label_by_name(name)
                if label is not None:
                    label_id, created = label.id, False
                else:
                    label_id, created = await store.create_label(name)

                linked = await store.link_annotation(image_id, label_id)
        except IntegrityError as e:
            logger.warning(
                "Attach of label '%s' to image %d rejected by store: %s",
                name,
                image_id,
                str(e.orig),
            )
            raise StoreError(
                message=f"Could not attach label to image {image_id}. Make sure the image exists.",
                context={"image_id": image_id, "label_name": name},
            )
        except SQLAlchemyError as e:
            logger.error("Attach of label '%s' to image %d failed: %s", name, image_id, str(e))
            raise StoreError(
                message="Could not attach the label. Please try again.",
                context={"image_id": image_id, "error_type": type(e).__name__},
            )

        logger.info(
            "Image %d ← label %d '%s' (label %s, link %s)",
            image_id,
            label_id,
            name,
            "created" if created else "existing",
            "added" if linked else "already present",
        )
        return AttachLabelResponse(
            message=NEW_LABEL_MESSAGE if created else EXISTING_LABEL_MESSAGE,
            label_id=label_id,
            created=created,
        )

    async def detach_label(self, store: AnnotationStore, image_id, label_id) -> SuccessResponse:
        """
        Remove one label from one image.

        Removing a link that does not exist is not an error.

        Raises:
            ValidationError: Either id missing or not a positive integer
            StoreError: The delete failed
        """
        image_id = require_id(image_id, "imageId")
        label_id = require_id(label_id, "labelId")

        try:
            async with store.transaction():
                removed = await store.unlink_annotation(image_id, label_id)
        except SQLAlchemyError as e:
            logger.error("Detach of label %d from image %d failed: %s", label_id, image_id, str(e))
            raise StoreError(
                message="Could not remove the label. Please try again.",
                context={"image_id": image_id, "label_id": label_id},
            )

        if not removed:
            logger.debug("Detach: image %d did not carry label %d", image_id, label_id)
        return SuccessResponse(message="Label removed from the image successfully!")


# ── Singleton Instance ────────────────────────────────────────────────────
annotation_service = AnnotationService()
