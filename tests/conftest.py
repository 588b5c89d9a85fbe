"""
Shared fixtures for the mediaboard test suite.

Provides temporary data directories, configuration, storage, an assembled
application and generated sample media files.
"""

import shutil
import struct
import tempfile
import zlib
from pathlib import Path

import pytest
from PIL import Image

from mediaboard.application import build_application
from mediaboard.core.config.models import AppConfig, PdfConfig, StorageConfig, ThumbnailConfig
from mediaboard.core.context import AppContext
from mediaboard.core.events.bus import EventBus
from mediaboard.storage import Storage


SAMPLE_PDF = (
    b"%PDF-1.4\n"
    b"1 0 obj << /Type /Catalog /Pages 2 0 R >> endobj\n"
    b"2 0 obj << /Type /Pages /Kids [] /Count 0 >> endobj\n"
    b"trailer << /Root 1 0 R >>\n"
    b"%%EOF\n"
)


def _png_chunk(kind, data):
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data) & 0xFFFFFFFF)


@pytest.fixture
def temp_dir():
    """Create temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def app_config(temp_dir):
    """Configuration pointing at a throwaway data directory, without plugins."""
    return AppConfig(
        storage=StorageConfig(data_dir=temp_dir / "data", database=":memory:"),
        thumbnails=ThumbnailConfig(engine="gd"),
        pdf=PdfConfig(thumb_engine="static"),
        enable_plugins=False,
    )


@pytest.fixture
def storage(app_config):
    """In-memory image records over a temporary warehouse."""
    store = Storage.from_config(app_config.storage)
    yield store
    store.close()


@pytest.fixture
def context(app_config, storage):
    """Bare application context with an empty event bus."""
    return AppContext(config=app_config, storage=storage, bus=EventBus())


@pytest.fixture
def app(app_config):
    """Fully assembled application with the built-in extensions."""
    application = build_application(app_config)
    yield application
    application.close()


@pytest.fixture
def make_image(temp_dir):
    """Factory writing a solid-colour image to the upload area."""
    uploads = temp_dir / "uploads"
    uploads.mkdir(exist_ok=True)

    def _make(name="sample.png", size=(64, 48), fmt="PNG", color=(200, 40, 40), mode="RGB"):
        path = uploads / name
        Image.new(mode, size, color=color).save(path, fmt)
        return path

    return _make


@pytest.fixture
def sample_png(make_image):
    return make_image("sample.png", size=(64, 48), fmt="PNG")


@pytest.fixture
def sample_jpeg(make_image):
    return make_image("sample.jpg", size=(320, 240), fmt="JPEG")


@pytest.fixture
def sample_pdf(temp_dir):
    """A minimal file carrying the PDF magic header."""
    uploads = temp_dir / "uploads"
    uploads.mkdir(exist_ok=True)
    path = uploads / "document.pdf"
    path.write_bytes(SAMPLE_PDF)
    return path


@pytest.fixture
def huge_png(temp_dir):
    """A PNG whose header claims 20000x20000 pixels; the pixel data is a stub."""
    uploads = temp_dir / "uploads"
    uploads.mkdir(exist_ok=True)
    path = uploads / "huge.png"
    header = struct.pack(">IIBBBBB", 20000, 20000, 8, 2, 0, 0, 0)
    path.write_bytes(
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", header)
        + _png_chunk(b"IDAT", zlib.compress(b"\x00" * 64))
        + _png_chunk(b"IEND", b"")
    )
    return path
