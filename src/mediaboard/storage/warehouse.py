"""
Content-addressed file warehouse.

Files are stored under ``<data_dir>/<kind>/<hash[:2]>/<hash>`` so a
directory never holds more than a slice of the collection. Originals live
under ``images``, derived thumbnails under ``thumbs``.
"""

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Union

from mediaboard.core.exceptions import ArchiveError
from mediaboard.core.models import is_content_hash


logger = logging.getLogger(__name__)

IMAGES = "images"
THUMBS = "thumbs"


class Warehouse:
    """Filesystem store keyed by content hash."""

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)

    def path(self, kind: str, hash: str) -> Path:
        if not is_content_hash(hash):
            raise ValueError(f"Invalid content hash: {hash!r}")
        return self.data_dir / kind / hash[:2] / hash

    def image_path(self, hash: str) -> Path:
        return self.path(IMAGES, hash)

    def thumbnail_path(self, hash: str) -> Path:
        return self.path(THUMBS, hash)

    def has_image(self, hash: str) -> bool:
        return self.image_path(hash).exists()

    def has_thumbnail(self, hash: str) -> bool:
        return self.thumbnail_path(hash).exists()

    def archive(self, hash: str, data: bytes) -> Path:
        """
        Write bytes to the image store.

        The write goes through a temporary file in the target directory and
        is renamed into place, so readers never see a partial file.

        Raises:
            ArchiveError: If the file cannot be written
        """
        target = self.image_path(hash)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=target.parent, prefix=".upload-")
            try:
                with os.fdopen(fd, 'wb') as f:
                    f.write(data)
                os.replace(tmp, target)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise ArchiveError(f"Failed to archive {hash}: {e}", image_hash=hash, cause=e) from e

        logger.debug(f"Archived {len(data)} bytes as {target}")
        return target

    def archive_file(self, hash: str, source: Union[str, Path]) -> Path:
        """
        Move an uploaded file into the image store.

        Raises:
            ArchiveError: If the file cannot be moved
        """
        target = self.image_path(hash)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(source), str(target))
        except OSError as e:
            raise ArchiveError(f"Failed to archive {source}: {e}", image_hash=hash, cause=e) from e

        logger.debug(f"Moved {source} to {target}")
        return target
