"""
PixTag Backend — Image Service Tests
=====================================

What:  Upload, list, and delete workflows with a real temporary database
       and a real temporary upload directory.

What we test:
    ✅ Upload writes the file and records a row; rejections write nothing
    ✅ The list view keeps label names and ids positionally aligned
    ✅ Unlabelled images list with null labels
    ✅ Delete removes file, annotations, and row; labels survive
    ✅ Delete tolerates a file that is already gone
    ✅ Deleting an unknown id touches nothing
    ✅ Store failures: the upload keeps its orphan file, a failed delete
       keeps the row but not the file
"""

import os
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from pixtag.exceptions import NotFoundError, StoreError, ValidationError
from pixtag.models import LABEL_SEPARATOR, Annotation, Image
from pixtag.services.annotation_service import AnnotationService
from pixtag.services.file_service import FileService
from pixtag.services.image_service import ImageService


def split(joined):
    return joined.split(LABEL_SEPARATOR) if joined else []


class TestUpload:

    @pytest.mark.asyncio
    async def test_upload_stores_file_and_row(self, images, store, sample_image_bytes):
        result = await images.upload_image(store, "holiday.jpg", "image/jpeg", sample_image_bytes)

        assert result.image_id > 0
        assert result.filename.startswith("image-") and result.filename.endswith(".jpg")

        image = await store.get_image(result.image_id)
        assert image.filename == result.filename
        assert image.upload_time is not None
        with open(image.file_path, "rb") as f:
            assert f.read() == sample_image_bytes

    @pytest.mark.asyncio
    async def test_upload_png(self, images, store, sample_png_bytes):
        result = await images.upload_image(store, "scan.png", "image/png", sample_png_bytes)
        assert result.filename.endswith(".png")

    @pytest.mark.asyncio
    async def test_two_uploads_get_distinct_names(self, images, store, sample_image_bytes):
        first = await images.upload_image(store, "same.jpg", "image/jpeg", sample_image_bytes)
        second = await images.upload_image(store, "same.jpg", "image/jpeg", sample_image_bytes)

        assert first.image_id != second.image_id
        assert first.filename != second.filename

    @pytest.mark.asyncio
    async def test_disallowed_type_writes_nothing(self, images, store, temp_storage):
        with pytest.raises(ValidationError, match="Unsupported type"):
            await images.upload_image(store, "anim.gif", "image/gif", b"GIF89a")

        assert os.listdir(temp_storage) == []
        assert await store.list_images_with_labels() == []

    @pytest.mark.asyncio
    async def test_too_large_rejected(self, store, temp_storage):
        service = ImageService(files=FileService(storage_root=temp_storage, max_file_size=1_048_576))

        with pytest.raises(ValidationError, match="File too large"):
            await service.upload_image(store, "big.jpg", "image/jpeg", b"\xff" * 1_048_577)

        assert os.listdir(temp_storage) == []

    @pytest.mark.asyncio
    async def test_no_file(self, images, store):
        with pytest.raises(ValidationError, match="No file uploaded"):
            await images.upload_image(store, None, None, None)

    @pytest.mark.asyncio
    async def test_failed_insert_leaves_file_on_disk(
        self, images, store, temp_storage, sample_image_bytes, monkeypatch
    ):
        monkeypatch.setattr(
            store, "insert_image", AsyncMock(side_effect=SQLAlchemyError("disk I/O error"))
        )

        with pytest.raises(StoreError, match="Could not record the uploaded image"):
            await images.upload_image(store, "a.jpg", "image/jpeg", sample_image_bytes)

        # The written file is not cleaned up
        [orphan] = os.listdir(temp_storage)
        assert orphan.startswith("image-")


class TestListImages:

    def setup_method(self):
        self.annotations = AnnotationService()

    @pytest.mark.asyncio
    async def test_empty(self, images, store):
        assert await images.list_images_with_labels(store) == []

    @pytest.mark.asyncio
    async def test_cat_and_dog(self, images, store, sample_image_bytes):
        uploaded = await images.upload_image(store, "pets.jpg", "image/jpeg", sample_image_bytes)
        await self.annotations.attach_label(store, uploaded.image_id, "cat")
        await self.annotations.attach_label(store, uploaded.image_id, "dog")
        cat = await store.find_label_by_name("cat")
        dog = await store.find_label_by_name("dog")

        [item] = await images.list_images_with_labels(store)

        assert item.id == uploaded.image_id
        assert item.filename == uploaded.filename
        assert item.image_url == f"/api/files/{uploaded.filename}"
        assert item.labels == "cat, dog"
        assert item.label_ids == f"{cat.id}, {dog.id}"

    @pytest.mark.asyncio
    async def test_names_and_ids_aligned(self, images, store, make_image):
        image_id = await make_image()
        for name in ["zeta", "alpha", "car", "mid"]:
            await self.annotations.attach_label(store, image_id, name)

        [item] = await images.list_images_with_labels(store)
        names, ids = split(item.labels), split(item.label_ids)

        assert names == ["zeta", "alpha", "car", "mid"]
        assert len(names) == len(ids)
        for name, label_id in zip(names, ids):
            label = await store.find_label_by_name(name)
            assert label.id == int(label_id)

    @pytest.mark.asyncio
    async def test_unlabelled_image_has_null_labels(self, images, store, make_image):
        labelled = await make_image("a.jpg")
        bare = await make_image("b.jpg")
        await self.annotations.attach_label(store, labelled, "car")

        items = {item.id: item for item in await images.list_images_with_labels(store)}

        assert items[bare].labels is None
        assert items[bare].label_ids is None
        assert items[labelled].labels == "car"

    @pytest.mark.asyncio
    async def test_separator_name_cannot_break_alignment(self, images, store, make_image):
        image_id = await make_image()
        await self.annotations.attach_label(store, image_id, "cat")
        with pytest.raises(ValidationError):
            await self.annotations.attach_label(store, image_id, "red, blue")
        await self.annotations.attach_label(store, image_id, "red,blue")

        [item] = await images.list_images_with_labels(store)
        names, ids = split(item.labels), split(item.label_ids)

        assert names == ["cat", "red,blue"]
        assert len(names) == len(ids)

    @pytest.mark.asyncio
    async def test_images_ordered_by_id(self, images, store, make_image):
        ids = [await make_image(f"{n}.jpg") for n in range(3)]
        listed = [item.id for item in await images.list_images_with_labels(store)]
        assert listed == sorted(ids)

    @pytest.mark.asyncio
    async def test_detached_label_disappears(self, images, store, make_image):
        image_id = await make_image()
        cat = await self.annotations.attach_label(store, image_id, "cat")
        await self.annotations.attach_label(store, image_id, "dog")

        await self.annotations.detach_label(store, image_id, cat.label_id)

        [item] = await images.list_images_with_labels(store)
        assert item.labels == "dog"


class TestDeleteImage:

    def setup_method(self):
        self.annotations = AnnotationService()

    @pytest.mark.asyncio
    async def test_delete_removes_everything(
        self, images, store, session_factory, sample_image_bytes
    ):
        uploaded = await images.upload_image(store, "a.jpg", "image/jpeg", sample_image_bytes)
        path = (await store.get_image(uploaded.image_id)).file_path
        await self.annotations.attach_label(store, uploaded.image_id, "lighthouse")

        result = await images.delete_image(store, uploaded.image_id)

        assert result.success is True
        assert result.message == "Image deleted successfully (including file and annotations)!"
        assert not os.path.exists(path)
        async with session_factory() as session:
            assert await session.get(Image, uploaded.image_id) is None
            remaining = await session.execute(
                select(func.count()).select_from(Annotation).where(
                    Annotation.image_id == uploaded.image_id
                )
            )
            assert remaining.scalar_one() == 0
        # The vocabulary is never pruned
        assert await store.find_label_by_name("lighthouse") is not None

    @pytest.mark.asyncio
    async def test_delete_leaves_other_images(self, images, store, make_image):
        doomed = await make_image("a.jpg")
        kept = await make_image("b.jpg")
        await self.annotations.attach_label(store, doomed, "cat")
        await self.annotations.attach_label(store, kept, "cat")

        await images.delete_image(store, doomed)

        [item] = await images.list_images_with_labels(store)
        assert item.id == kept
        assert item.labels == "cat"

    @pytest.mark.asyncio
    async def test_missing_file_still_deletes_row(
        self, images, store, sample_image_bytes, caplog
    ):
        uploaded = await images.upload_image(store, "a.jpg", "image/jpeg", sample_image_bytes)
        os.remove((await store.get_image(uploaded.image_id)).file_path)

        result = await images.delete_image(store, uploaded.image_id)

        assert result.success is True
        assert await store.get_image(uploaded.image_id) is None
        assert "continuing with row deletion" in caplog.text

    @pytest.mark.asyncio
    async def test_unknown_id(self, images, store, sample_image_bytes, temp_storage):
        await images.upload_image(store, "a.jpg", "image/jpeg", sample_image_bytes)

        with pytest.raises(NotFoundError):
            await images.delete_image(store, 424242)

        assert len(os.listdir(temp_storage)) == 1
        assert len(await store.list_images_with_labels()) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("image_id", [0, -1, "abc", None])
    async def test_malformed_id(self, images, store, image_id):
        with pytest.raises(ValidationError):
            await images.delete_image(store, image_id)

    @pytest.mark.asyncio
    async def test_failed_row_delete_keeps_file_deleted(
        self, images, store, session_factory, sample_image_bytes, monkeypatch
    ):
        uploaded = await images.upload_image(store, "a.jpg", "image/jpeg", sample_image_bytes)
        path = (await store.get_image(uploaded.image_id)).file_path
        monkeypatch.setattr(
            store,
            "delete_image_cascade",
            AsyncMock(side_effect=OperationalError("DELETE", {}, Exception("database is locked"))),
        )

        with pytest.raises(StoreError, match="Could not delete the image"):
            await images.delete_image(store, uploaded.image_id)

        # The file is gone and not restored; the row survives the rollback
        assert not os.path.exists(path)
        async with session_factory() as session:
            assert await session.get(Image, uploaded.image_id) is not None
