"""
PixTag Backend — Annotation Store
==================================

What:  The persistence capability handed to every service call.
Why:   Services never reach for a global session; they receive an
       AnnotationStore built around the current request's session. Tests
       build one around a temporary database the same way.
How:   Thin async methods over one AsyncSession. None of them commits on
       its own: callers group them with `async with store.transaction():`
       so each logical operation is exactly one database transaction.

Concurrency notes:
    create_label() is an upsert (INSERT ... ON CONFLICT (name) DO NOTHING
    RETURNING id, then SELECT on conflict). Two requests creating the same
    new label at the same time therefore end up sharing one row instead of
    one of them failing on the unique constraint.

    link_annotation() uses the same ON CONFLICT form on (image_id, label_id),
    which makes linking an already-linked pair a silent no-op.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from itertools import groupby
from typing import AsyncIterator, List, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from pixtag.exceptions import StoreError
from pixtag.models import Annotation, Image, Label

logger = logging.getLogger(__name__)

_INSERT_CONSTRUCTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


@dataclass
class ImageLabels:
    """One image with its labels in annotation insertion order."""

    id: int
    filename: str
    file_path: str
    upload_time: Optional[datetime]
    label_names: List[str] = field(default_factory=list)
    label_ids: List[int] = field(default_factory=list)


class AnnotationStore:
    """
    Store interface over the images / labels / annotations tables.

    Capabilities:
        insert_image, get_image, find_label_by_name, create_label,
        link_annotation, unlink_annotation, list_images_with_labels,
        delete_image_cascade, and transaction() to group them.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # ── Transactions ──────────────────────────────────────────────────────

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["AnnotationStore"]:
        """
        Run the enclosed store calls as one transaction.

        Commits when the block exits normally, rolls back and re-raises on
        any exception. The transaction itself begins lazily with the first
        statement (on SQLite that BEGIN is BEGIN IMMEDIATE).
        """
        try:
            yield self
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

    def _insert(self, model):
        """Dialect-specific INSERT construct (needed for ON CONFLICT)."""
        dialect = self.session.get_bind().dialect.name
        try:
            return _INSERT_CONSTRUCTS[dialect](model)
        except KeyError:
            raise StoreError(
                message=f"Unsupported database dialect: {dialect}",
                context={"dialect": dialect, "supported": sorted(_INSERT_CONSTRUCTS)},
            )

    # ── Images ────────────────────────────────────────────────────────────

    async def insert_image(self, filename: str, file_path: str) -> Image:
        image = Image(filename=filename, file_path=file_path)
        self.session.add(image)
        await self.session.flush()  # assigns id and server defaults
        return image

    async def get_image(self, image_id: int) -> Optional[Image]:
        return await self.session.get(Image, image_id)

    async def delete_image_cascade(self, image_id: int) -> bool:
        """
        Delete an image's annotations, then the image row.

        The annotation delete is explicit even though the foreign key
        cascades, so the result does not depend on the store having
        cascades switched on.

        Returns:
            True if the image row existed and was deleted.
        """
        await self.session.execute(
            delete(Annotation)
            .where(Annotation.image_id == image_id)
            .execution_options(synchronize_session=False)
        )
        # Default synchronization evicts a loaded Image from the identity map
        result = await self.session.execute(delete(Image).where(Image.id == image_id))
        return result.rowcount > 0

    # ── Labels ────────────────────────────────────────────────────────────

    async def find_label_by_name(self, name: str) -> Optional[Label]:
        result = await self.session.execute(select(Label).where(Label.name == name))
        return result.scalar_one_or_none()

    async def create_label(self, name: str) -> Tuple[int, bool]:
        """
        Insert a label unless one with this name exists.

        Returns:
            (label_id, created) where created is False when the row was
            already there, including when a concurrent request inserted it
            between our lookup and this insert.
        """
        stmt = (
            self._insert(Label)
            .values(name=name)
            .on_conflict_do_nothing(index_elements=["name"])
            .returning(Label.id)
        )
        label_id = (await self.session.execute(stmt)).scalar_one_or_none()
        if label_id is not None:
            return label_id, True

        existing = await self.session.execute(select(Label.id).where(Label.name == name))
        return existing.scalar_one(), False

    # ── Annotations ───────────────────────────────────────────────────────

    async def link_annotation(self, image_id: int, label_id: int) -> bool:
        """
        Link a label to an image.

        Returns:
            True if a new annotation row was inserted, False if the pair
            was already linked.

        Raises:
            sqlalchemy.exc.IntegrityError if either id has no row.
        """
        stmt = (
            self._insert(Annotation)
            .values(image_id=image_id, label_id=label_id)
            .on_conflict_do_nothing(index_elements=["image_id", "label_id"])
            .returning(Annotation.id)
        )
        return (await self.session.execute(stmt)).scalar_one_or_none() is not None

    async def unlink_annotation(self, image_id: int, label_id: int) -> bool:
        """Remove one image/label link. Returns True if a row was deleted."""
        result = await self.session.execute(
            delete(Annotation)
            .where(Annotation.image_id == image_id, Annotation.label_id == label_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    # ── Aggregated view ───────────────────────────────────────────────────

    async def list_images_with_labels(self) -> List[ImageLabels]:
        """
        Every image with its labels, images ordered by id.

        One LEFT OUTER JOIN images → annotations → labels, ordered by
        (image id, annotation id), folded per image. Ordering on the
        annotation id keeps names and ids in insertion order and in step
        with each other; an image without annotations comes back with
        empty lists rather than being dropped.
        """
        stmt = (
            select(
                Image.id,
                Image.filename,
                Image.file_path,
                Image.upload_time,
                Label.id.label("label_id"),
                Label.name.label("label_name"),
            )
            .select_from(Image)
            .outerjoin(Annotation, Annotation.image_id == Image.id)
            .outerjoin(Label, Label.id == Annotation.label_id)
            .order_by(Image.id, Annotation.id)
        )
        rows = (await self.session.execute(stmt)).all()

        images: List[ImageLabels] = []
        for image_id, group in groupby(rows, key=lambda row: row.id):
            group = list(group)
            first = group[0]
            item = ImageLabels(
                id=image_id,
                filename=first.filename,
                file_path=first.file_path,
                upload_time=first.upload_time,
            )
            for row in group:
                if row.label_id is not None:
                    item.label_ids.append(row.label_id)
                    item.label_names.append(row.label_name)
            images.append(item)

        return images
