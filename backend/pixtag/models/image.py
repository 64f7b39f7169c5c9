"""
PixTag Backend — Image SQLAlchemy Model
========================================

What:  ORM model representing the `images` table.
Why:   One row per successfully validated upload; the binary itself lives
       on disk at `file_path`.
Who:   Written by ImageService.upload_image, removed by ImageService.delete_image.

Table Design Rationale:
    - Integer autoincrement id: the API exchanges numeric ids
    - filename UNIQUE: the stored name is generated per upload and doubles
      as the public name used by GET /api/files/{filename}
    - file_path: resolved absolute path of the stored binary
    - upload_time: UTC with timezone; set by the database when omitted
"""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from pixtag.database import Base


class Image(Base):
    """
    An uploaded image.

    Lifecycle:
        1. Created after the file has been written to storage
        2. Never mutated
        3. Deleted together with its file and annotations
    """

    __tablename__ = "images"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    filename: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Generated storage filename (image-<ms>-<hex>.<ext>)",
    )

    upload_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When the image was uploaded (UTC)",
    )

    file_path: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        comment="Resolved path of the stored binary",
    )

    __table_args__ = (
        CheckConstraint("length(filename) > 0", name="ck_images_filename_not_empty"),
        CheckConstraint("length(file_path) > 0", name="ck_images_file_path_not_empty"),
    )

    def __repr__(self) -> str:
        return f"<Image(id={self.id}, filename='{self.filename}')>"
