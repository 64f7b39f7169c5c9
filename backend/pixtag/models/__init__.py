# Models package init
"""
PixTag Backend — ORM Models
============================

Importing this package registers every table with `Base.metadata`,
which Alembic and init_database() rely on.
"""

from pixtag.models.annotation import Annotation
from pixtag.models.image import Image
from pixtag.models.label import LABEL_NAME_MAX_LENGTH, LABEL_SEPARATOR, Label

__all__ = ["Annotation", "Image", "Label", "LABEL_NAME_MAX_LENGTH", "LABEL_SEPARATOR"]
