"""
PixTag Backend — Annotation SQLAlchemy Model
=============================================

What:  ORM model for the `annotations` link table (Image ↔ Label).

Invariants enforced by the table:
    - (image_id, label_id) is unique: an image never carries a label twice
    - both ids must reference existing rows
    - deleting an image or a label cascades to its annotations

The unique constraint's leading column also serves the "annotations of
image X" lookups used by the list view and image deletion, so no extra
index is declared.
"""

from sqlalchemy import ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from pixtag.database import Base


class Annotation(Base):
    """Links one Image to one Label."""

    __tablename__ = "annotations"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Insertion order of the link; the list view orders labels by it",
    )

    image_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("images.id", ondelete="CASCADE"),
        nullable=False,
    )

    label_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("labels.id", ondelete="CASCADE"),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("image_id", "label_id", name="uq_annotations_image_label"),
    )

    def __repr__(self) -> str:
        return f"<Annotation(image_id={self.image_id}, label_id={self.label_id})>"
