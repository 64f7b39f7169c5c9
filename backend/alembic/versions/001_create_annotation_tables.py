"""Create images, labels and annotations tables

Revision ID: 001
Revises: None
Create Date: 2025-01-15 00:00:00.000000+00:00

What:  Initial schema: images, labels (shared vocabulary), annotations (links).
How:   Mirrors pixtag/models; seeds the default labels cat, dog, car.

Rollback: downgrade() drops all three tables (destructive).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

DEFAULT_LABELS = ("cat", "dog", "car")


def upgrade() -> None:
    op.create_table(
        "images",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "filename",
            sa.String(255),
            nullable=False,
            comment="Generated storage filename (image-<ms>-<hex>.<ext>)",
        ),
        sa.Column(
            "upload_time",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When the image was uploaded (UTC)",
        ),
        sa.Column(
            "file_path",
            sa.String(1024),
            nullable=False,
            comment="Resolved path of the stored binary",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("filename"),
        sa.CheckConstraint("length(filename) > 0", name="ck_images_filename_not_empty"),
        sa.CheckConstraint("length(file_path) > 0", name="ck_images_file_path_not_empty"),
    )

    labels = op.create_table(
        "labels",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(50), nullable=False, comment="Label text, e.g. 'cat'"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
        sa.CheckConstraint("length(name) BETWEEN 1 AND 50", name="ck_labels_name_length"),
    )

    op.create_table(
        "annotations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("image_id", sa.Integer(), nullable=False),
        sa.Column("label_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["image_id"], ["images.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["label_id"], ["labels.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("image_id", "label_id", name="uq_annotations_image_label"),
    )

    op.bulk_insert(labels, [{"name": name} for name in DEFAULT_LABELS])


def downgrade() -> None:
    """Drop all annotation tables. Link table first, it references the others."""
    op.drop_table("annotations")
    op.drop_table("labels")
    op.drop_table("images")
