"""
Tests for the content-addressed warehouse and the image repository.
"""

import sqlite3
from unittest.mock import patch

import pytest

from mediaboard.core.config.models import StorageConfig
from mediaboard.core.exceptions import ArchiveError
from mediaboard.core.models import Image
from mediaboard.storage import ImageRepository, Storage, Warehouse

HASH = "0123456789abcdef0123456789abcdef"


class TestWarehouse:
    """File layout and archiving."""

    def test_paths_are_sharded_by_hash_prefix(self, temp_dir):
        warehouse = Warehouse(temp_dir)

        assert warehouse.image_path(HASH) == temp_dir / "images" / "01" / HASH
        assert warehouse.thumbnail_path(HASH) == temp_dir / "thumbs" / "01" / HASH

    def test_invalid_hash_rejected(self, temp_dir):
        with pytest.raises(ValueError):
            Warehouse(temp_dir).image_path("../etc")

    def test_archive_bytes(self, temp_dir):
        warehouse = Warehouse(temp_dir)

        path = warehouse.archive(HASH, b"payload")

        assert path.read_bytes() == b"payload"
        assert warehouse.has_image(HASH)
        # no temporary files left behind
        assert list(path.parent.iterdir()) == [path]

    def test_archive_file_moves_upload(self, temp_dir):
        warehouse = Warehouse(temp_dir / "store")
        upload = temp_dir / "upload.bin"
        upload.write_bytes(b"data")

        path = warehouse.archive_file(HASH, upload)

        assert path.read_bytes() == b"data"
        assert not upload.exists()

    def test_archive_file_missing_source(self, temp_dir):
        with pytest.raises(ArchiveError) as exc_info:
            Warehouse(temp_dir).archive_file(HASH, temp_dir / "missing")

        assert exc_info.value.recoverable is False
        assert exc_info.value.context.image_hash == HASH

    def test_archive_write_failure(self, temp_dir):
        warehouse = Warehouse(temp_dir)

        with patch("mediaboard.storage.warehouse.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(ArchiveError):
                warehouse.archive(HASH, b"x")

        assert not warehouse.has_image(HASH)

    def test_has_thumbnail(self, temp_dir):
        warehouse = Warehouse(temp_dir)
        assert warehouse.has_thumbnail(HASH) is False

        thumb = warehouse.thumbnail_path(HASH)
        thumb.parent.mkdir(parents=True)
        thumb.write_bytes(b"jpg")

        assert warehouse.has_thumbnail(HASH) is True


def make_image(hash=HASH, **kwargs):
    fields = dict(hash=hash, width=10, height=20, filesize=100, filename="a.png", ext="png")
    fields.update(kwargs)
    return Image(**fields)


class TestImageRepository:
    """Image records in SQLite."""

    def test_add_assigns_id_and_round_trips(self):
        repo = ImageRepository()
        image = make_image(tag_array=["cat", "cute"], source="http://example.com")

        image_id = repo.add(image)
        found = repo.find_by_id(image_id)

        assert image.id == image_id
        assert found == image

    def test_ids_increase(self):
        repo = ImageRepository()

        first = repo.add(make_image("a" * 32))
        second = repo.add(make_image("b" * 32))

        assert second > first
        assert repo.count() == 2

    def test_duplicate_hash_rejected(self):
        repo = ImageRepository()
        repo.add(make_image())

        with pytest.raises(sqlite3.IntegrityError):
            repo.add(make_image())

    def test_replace_keeps_id(self):
        repo = ImageRepository()
        image_id = repo.add(make_image(tag_array=["old"]))

        repo.replace(image_id, make_image("c" * 32, width=99, tag_array=["old"]))
        found = repo.find_by_id(image_id)

        assert found.hash == "c" * 32
        assert found.width == 99
        assert repo.find_by_hash(HASH) is None

    def test_replace_keeps_rating_and_lock(self):
        repo = ImageRepository()
        image_id = repo.add(make_image())
        repo.set_rating(image_id, "e")
        repo.set_locked(image_id, True)

        repo.replace(image_id, make_image("d" * 32))
        found = repo.find_by_id(image_id)

        assert found.rating == "e"
        assert found.locked is True

    def test_rating_and_lock(self):
        repo = ImageRepository()
        image_id = repo.add(make_image())

        repo.set_rating(image_id, "s")
        repo.set_locked(image_id, True)
        found = repo.find_by_id(image_id)

        assert found.rating == "s"
        assert found.locked is True

    def test_find_missing(self):
        repo = ImageRepository()

        assert repo.find_by_id(42) is None
        assert repo.find_by_id("not-a-number") is None
        assert repo.find_by_hash("f" * 32) is None

    def test_file_database_persists(self, temp_dir):
        db = str(temp_dir / "records.db")
        repo = ImageRepository(db)
        image_id = repo.add(make_image())
        repo.close()

        reopened = ImageRepository(db)
        assert reopened.find_by_id(image_id).hash == HASH
        reopened.close()


class TestStorage:

    def test_facade(self, storage, app_config):
        assert storage.driver_name == "sqlite"
        assert storage.image_path(HASH).is_relative_to(app_config.storage.data_dir)

        image = make_image()
        storage.images.add(image)

        assert storage.find_image_by_id(image.id) == image
        assert storage.find_image_by_hash(HASH) == image

    def test_archive_through_facade(self, storage):
        storage.archive(HASH, b"bytes")

        assert storage.image_path(HASH).read_bytes() == b"bytes"
        assert storage.has_thumbnail(HASH) is False

    def test_default_database_lives_in_data_dir(self, temp_dir):
        config = StorageConfig(data_dir=temp_dir / "data")

        store = Storage.from_config(config)
        image_id = store.images.add(make_image())
        store.close()

        assert (temp_dir / "data" / "mediaboard.db").is_file()
        reopened = Storage.from_config(config)
        assert reopened.find_image_by_id(image_id).hash == HASH
        reopened.close()
