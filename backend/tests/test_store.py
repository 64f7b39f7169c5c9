"""
PixTag Backend — Annotation Store Tests
========================================

What:  Store-level behavior not already covered through the services:
       upsert results, link idempotence, and dialect selection.
"""

from unittest.mock import MagicMock

import pytest

from pixtag.exceptions import StoreError
from pixtag.models import Label
from pixtag.store import AnnotationStore


class TestUpserts:

    @pytest.mark.asyncio
    async def test_create_label_reports_existing(self, store):
        async with store.transaction():
            created_id, created = await store.create_label("meadow")
            again_id, again = await store.create_label("meadow")

        assert created is True
        assert again is False
        assert again_id == created_id

    @pytest.mark.asyncio
    async def test_link_twice_inserts_once(self, store, make_image):
        image_id = await make_image()
        async with store.transaction():
            cat = await store.find_label_by_name("cat")
            first = await store.link_annotation(image_id, cat.id)
            second = await store.link_annotation(image_id, cat.id)

        assert (first, second) == (True, False)

    @pytest.mark.asyncio
    async def test_unlink_reports_whether_a_row_went(self, store, make_image):
        image_id = await make_image()
        async with store.transaction():
            dog = await store.find_label_by_name("dog")
            await store.link_annotation(image_id, dog.id)
            removed = await store.unlink_annotation(image_id, dog.id)
            removed_again = await store.unlink_annotation(image_id, dog.id)

        assert (removed, removed_again) == (True, False)


class TestDialects:

    def test_unsupported_dialect_raises_store_error(self):
        session = MagicMock()
        session.get_bind.return_value.dialect.name = "mysql"

        with pytest.raises(StoreError, match="Unsupported database dialect: mysql") as exc_info:
            AnnotationStore(session)._insert(Label)
        assert exc_info.value.context["dialect"] == "mysql"

    @pytest.mark.parametrize("dialect", ["sqlite", "postgresql"])
    def test_supported_dialects(self, dialect):
        session = MagicMock()
        session.get_bind.return_value.dialect.name = dialect

        stmt = AnnotationStore(session)._insert(Label)

        assert hasattr(stmt, "on_conflict_do_nothing")
