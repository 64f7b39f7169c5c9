"""
PixTag Backend — Test Configuration (conftest.py)
==================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test that touches the database gets a fresh SQLite file under
       pytest's tmp_path, created and seeded by init_database(), so the
       tests exercise the real SQL (upserts, foreign keys, cascades).

Fixture Hierarchy (all function-scoped):
    ├── db_engine: AsyncEngine over a temporary SQLite file, schema + seed labels
    │   └── session_factory: async_sessionmaker bound to db_engine
    │       ├── store: AnnotationStore around one session
    │       ├── make_image: insert an Image row without touching disk
    │       └── test_client: HTTPX AsyncClient with the DB dependency overridden
    ├── temp_storage: Temporary upload directory
    ├── files / images: FileService and ImageService over temp_storage
    └── sample_image_bytes / sample_png_bytes: Tiny image payloads
"""

import os
import tempfile
from typing import AsyncGenerator

# Override settings for testing BEFORE any pixtag imports
# (pixtag.config builds its settings singleton at import time)
_TEST_ROOT = tempfile.mkdtemp(prefix="pixtag_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT}/app.db"
os.environ["STORAGE_ROOT"] = os.path.join(_TEST_ROOT, "uploads")
os.environ["AUTO_CREATE_SCHEMA"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from pixtag.database import build_engine, get_db_session, init_database  # noqa: E402
from pixtag.services.file_service import FileService  # noqa: E402
from pixtag.services.image_service import ImageService  # noqa: E402
from pixtag.store import AnnotationStore  # noqa: E402

DEFAULT_TEST_LABELS = ["cat", "dog", "car"]


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """
    A real database for one test.

    Built with the same build_engine() the app uses, so foreign keys and
    BEGIN IMMEDIATE are active exactly as in production SQLite.
    """
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'pixtag.db'}")
    await init_database(engine, default_labels=DEFAULT_TEST_LABELS)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def store(session_factory) -> AsyncGenerator[AnnotationStore, None]:
    async with session_factory() as session:
        yield AnnotationStore(session)


@pytest.fixture
def make_image(session_factory):
    """
    Insert an Image row pointing at a file that is never written.

    Usage:
        image_id = await make_image("a.jpg")
    """

    async def _make(filename: str = "image-test.jpg") -> int:
        async with session_factory() as session:
            image_store = AnnotationStore(session)
            async with image_store.transaction():
                image = await image_store.insert_image(filename, f"/nonexistent/{filename}")
                return image.id

    return _make


# ══════════════════════════════════════════════════════════════════════════
# File Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def temp_storage(tmp_path):
    """A fresh upload directory for each test (removed by pytest)."""
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def files(temp_storage):
    return FileService(storage_root=temp_storage)


@pytest.fixture
def images(files):
    return ImageService(files=files)


@pytest.fixture
def sample_image_bytes():
    """
    Minimal JPEG bytes: SOI marker + JFIF header + EOI marker.

    Not a decodable photograph; uploads are checked by declared type only.
    """
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def sample_png_bytes():
    """PNG signature followed by an empty IEND chunk."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\x00IEND\xaeB`\x82"


# ══════════════════════════════════════════════════════════════════════════
# HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory, files, monkeypatch):
    """
    HTTPX AsyncClient wired to the FastAPI app.

    The request session dependency is pointed at the test database and
    the shared ImageService writes into temp_storage. ASGITransport does
    not run the lifespan, so the app's own engine is never initialized.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/api/images")
            assert response.status_code == 200
    """
    from pixtag.main import app
    from pixtag.services.image_service import image_service

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    monkeypatch.setattr(image_service, "files", files)
    app.dependency_overrides[get_db_session] = override_db_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
