"""
SQLite-backed image records.
"""

import json
import logging
import sqlite3
from typing import Any, Optional

from mediaboard.core.config.models import MEMORY_DATABASE
from mediaboard.core.models import Image


logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS images (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    hash TEXT NOT NULL UNIQUE,
    width INTEGER NOT NULL,
    height INTEGER NOT NULL,
    filesize INTEGER NOT NULL,
    filename TEXT NOT NULL,
    ext TEXT NOT NULL,
    tags TEXT NOT NULL DEFAULT '[]',
    source TEXT,
    locked INTEGER NOT NULL DEFAULT 0,
    rating TEXT
)
"""


class ImageRepository:
    """Image records keyed by id, with a unique index on the content hash."""

    driver_name = "sqlite"

    def __init__(self, database: str = MEMORY_DATABASE):
        self.database = database
        self._conn = sqlite3.connect(database)
        self._conn.row_factory = sqlite3.Row
        with self._conn:
            self._conn.execute(SCHEMA)

    def close(self) -> None:
        self._conn.close()

    def add(self, image: Image) -> int:
        """
        Insert a new record.

        Returns:
            The id assigned to the image

        Raises:
            sqlite3.IntegrityError: If an image with the same hash exists
        """
        with self._conn:
            cursor = self._conn.execute(
                """
                INSERT INTO images (hash, width, height, filesize, filename, ext, tags, source, locked, rating)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                self._row_values(image)
            )
        image.id = cursor.lastrowid
        logger.debug(f"Added image {image.id} ({image.hash})")
        return image.id

    def replace(self, image_id: int, image: Image) -> None:
        """Overwrite the content fields of an existing record, keeping its id, rating and lock."""
        with self._conn:
            self._conn.execute(
                """
                UPDATE images SET hash = ?, width = ?, height = ?, filesize = ?, filename = ?,
                                  ext = ?, tags = ?, source = ?
                WHERE id = ?
                """,
                (*self._row_values(image)[:8], image_id)
            )
        image.id = image_id
        logger.debug(f"Replaced image {image_id} with {image.hash}")

    def set_rating(self, image_id: int, rating: Optional[str]) -> None:
        with self._conn:
            self._conn.execute("UPDATE images SET rating = ? WHERE id = ?", (rating, image_id))

    def set_locked(self, image_id: int, locked: bool) -> None:
        with self._conn:
            self._conn.execute("UPDATE images SET locked = ? WHERE id = ?", (int(locked), image_id))

    def find_by_id(self, image_id: Any) -> Optional[Image]:
        try:
            image_id = int(image_id)
        except (TypeError, ValueError):
            return None
        row = self._conn.execute("SELECT * FROM images WHERE id = ?", (image_id,)).fetchone()
        return self._from_row(row) if row else None

    def find_by_hash(self, hash: str) -> Optional[Image]:
        row = self._conn.execute("SELECT * FROM images WHERE hash = ?", (hash,)).fetchone()
        return self._from_row(row) if row else None

    def count(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM images").fetchone()[0]

    @staticmethod
    def _row_values(image: Image) -> tuple:
        return (
            image.hash, image.width, image.height, image.filesize, image.filename,
            image.ext, json.dumps(image.tag_array), image.source, int(image.locked), image.rating
        )

    @staticmethod
    def _from_row(row: sqlite3.Row) -> Image:
        return Image(
            id=row['id'],
            hash=row['hash'],
            width=row['width'],
            height=row['height'],
            filesize=row['filesize'],
            filename=row['filename'],
            ext=row['ext'],
            tag_array=json.loads(row['tags']),
            source=row['source'],
            locked=bool(row['locked']),
            rating=row['rating'],
        )
