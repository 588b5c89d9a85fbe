"""
Storage collaborator for mediaboard.

The ingestion pipeline only touches files and records through this façade:
the content-addressed warehouse for originals and thumbnails, and the image
repository for records. Each single write is atomic; nothing spans stages.
"""

from pathlib import Path
from typing import Optional, Union

from mediaboard.core.config.models import MEMORY_DATABASE, StorageConfig
from mediaboard.core.models import Image
from mediaboard.storage.repository import ImageRepository
from mediaboard.storage.warehouse import IMAGES, THUMBS, Warehouse


class Storage:
    """Files and records behind one object."""

    def __init__(self, warehouse: Warehouse, images: ImageRepository):
        self.warehouse = warehouse
        self.images = images

    @classmethod
    def from_config(cls, config: StorageConfig) -> "Storage":
        database = config.database_path
        if database != MEMORY_DATABASE:
            Path(database).parent.mkdir(parents=True, exist_ok=True)
        return cls(Warehouse(config.data_dir), ImageRepository(database))

    @property
    def driver_name(self) -> str:
        return self.images.driver_name

    def archive(self, hash: str, data: bytes) -> Path:
        return self.warehouse.archive(hash, data)

    def archive_file(self, hash: str, source: Union[str, Path]) -> Path:
        return self.warehouse.archive_file(hash, source)

    def image_path(self, hash: str) -> Path:
        return self.warehouse.image_path(hash)

    def thumbnail_path(self, hash: str) -> Path:
        return self.warehouse.thumbnail_path(hash)

    def has_thumbnail(self, hash: str) -> bool:
        return self.warehouse.has_thumbnail(hash)

    def find_image_by_id(self, image_id) -> Optional[Image]:
        return self.images.find_by_id(image_id)

    def find_image_by_hash(self, hash: str) -> Optional[Image]:
        return self.images.find_by_hash(hash)

    def close(self) -> None:
        self.images.close()


__all__ = ['Storage', 'Warehouse', 'ImageRepository', 'IMAGES', 'THUMBS']
