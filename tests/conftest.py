"""
Pytest configuration for the cellar API tests.

Environment is pointed at a throwaway directory before any ``cellar`` module
is imported, so the module-level settings and engine never touch a real
database. Each test then gets its own SQLite file and upload directory.
"""

import os
import tempfile
from pathlib import Path

_SESSION_DIR = Path(tempfile.mkdtemp(prefix="cellar-tests-"))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_SESSION_DIR / 'cellar.db'}")
os.environ.setdefault("UPLOAD_DIR", str(_SESSION_DIR / "uploads"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from cellar.db import build_engine, get_session, init_db
from cellar.main import app
from cellar.models.records import WineRecord
from cellar.models.upload import ImageUploadConfig
from cellar.models.wine import WineColor
from cellar.services.storage import LocalImageStorage
from cellar.services.uploads import ImageUploadService
from tests.helpers import MAX_FILE_SIZE, MAX_IMAGE_WIDTH, make_image_bytes


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_image_bytes("JPEG")


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes("PNG", mode="RGBA", color=(0, 128, 0, 128))


@pytest.fixture
def webp_bytes() -> bytes:
    return make_image_bytes("WEBP")


@pytest.fixture
def upload_config(tmp_path) -> ImageUploadConfig:
    return ImageUploadConfig(
        upload_dir=tmp_path / "uploads",
        max_file_size=MAX_FILE_SIZE,
        max_image_width=MAX_IMAGE_WIDTH,
        image_quality=85,
    )


@pytest.fixture
def storage(upload_config) -> LocalImageStorage:
    storage = LocalImageStorage(upload_config.upload_dir)
    storage.initialize()
    return storage


@pytest.fixture
def uploads(upload_config, storage) -> ImageUploadService:
    return ImageUploadService(upload_config, storage=storage)


@pytest.fixture
def session_factory(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory, uploads):
    """TestClient wired to the per-test database and upload directory.

    Used without a ``with`` block, so the app lifespan (which would build the
    default services) does not run.
    """

    def _session_override():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_session] = _session_override
    app.state.uploads = uploads
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_wine(db_session):
    def _make_wine(**overrides) -> WineRecord:
        fields = {
            "name": "Test Wine",
            "vintage": 2020,
            "producer": "Test Winery",
            "region": "Napa Valley",
            "country": "USA",
            "grape_variety": "Cabernet Sauvignon",
            "color": WineColor.RED,
            "quantity": 1,
        }
        fields.update(overrides)
        wine = WineRecord(**fields)
        db_session.add(wine)
        db_session.commit()
        db_session.refresh(wine)
        return wine

    return _make_wine
