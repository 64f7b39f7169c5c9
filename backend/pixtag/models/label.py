"""
PixTag Backend — Label SQLAlchemy Model
========================================

What:  ORM model representing the `labels` table, the shared tag vocabulary.
Why:   Labels are reused across images; one row per distinct name.

Labels are created lazily the first time a name is attached, are never
renamed, and are kept when their last annotation goes away (the vocabulary
only grows). The UNIQUE constraint on `name` is what keeps two concurrent
"create label" requests from producing duplicate rows.
"""

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from pixtag.database import Base

# Maximum label length accepted by the API and enforced by the table
LABEL_NAME_MAX_LENGTH = 50

# Joins names and ids in the list view; a name may not contain it
LABEL_SEPARATOR = ", "


class Label(Base):
    """A reusable free-text tag."""

    __tablename__ = "labels"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    name: Mapped[str] = mapped_column(
        String(LABEL_NAME_MAX_LENGTH),
        nullable=False,
        unique=True,
        comment="Label text, e.g. 'cat'",
    )

    # String(50) is not enforced by SQLite, so the length rule is a CHECK
    __table_args__ = (
        CheckConstraint(
            f"length(name) BETWEEN 1 AND {LABEL_NAME_MAX_LENGTH}",
            name="ck_labels_name_length",
        ),
    )

    def __repr__(self) -> str:
        return f"<Label(id={self.id}, name='{self.name}')>"
