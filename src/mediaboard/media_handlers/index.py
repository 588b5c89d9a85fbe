"""
Image index extension.

Owns the image records: stores new images, swaps the content of replaced
ones and applies rating and lock changes. Runs ahead of default-priority
extensions so that observers of ImageAdditionEvent already see ``image.id``.
"""

import sqlite3

from mediaboard.core.events.types import ImageAdditionEvent, ImageReplaceEvent, LockSetEvent, RatingSetEvent
from mediaboard.core.exceptions import ErrorCode, UploadError, upload_error
from mediaboard.core.extensions import Extension


class ImageIndex(Extension):

    priority = 40

    def on_image_addition(self, event: ImageAdditionEvent) -> None:
        image = event.image
        images = self.context.storage.images

        existing = images.find_by_hash(image.hash)
        if existing is not None:
            raise upload_error(f"Image already exists as #{existing.id}", ErrorCode.UPLOAD_DUPLICATE, image_hash=image.hash)

        try:
            images.add(image)
        except sqlite3.Error as e:
            raise UploadError(f"Failed to store image: {e}", image_hash=image.hash, cause=e) from e

    def on_image_replace(self, event: ImageReplaceEvent) -> None:
        images = self.context.storage.images

        clash = images.find_by_hash(event.image.hash)
        if clash is not None and clash.id != event.id:
            raise upload_error(f"Image already exists as #{clash.id}", ErrorCode.UPLOAD_DUPLICATE, image_hash=event.image.hash)

        try:
            images.replace(event.id, event.image)
        except sqlite3.Error as e:
            raise UploadError(f"Failed to replace image {event.id}: {e}", image_hash=event.image.hash, cause=e) from e

    def on_rating_set(self, event: RatingSetEvent) -> None:
        self.context.storage.images.set_rating(event.image.id, event.rating)
        event.image.rating = event.rating

    def on_lock_set(self, event: LockSetEvent) -> None:
        self.context.storage.images.set_locked(event.image.id, event.locked)
        event.image.locked = event.locked
