"""
Media Type Handler Architecture

Provides the extension base classes that turn an uploaded file into a stored
image. A data handler claims uploads by file extension and content sniffing,
archives the file, asks for a thumbnail and publishes the follow-up events
that store the image record.

Handlers are ordinary extensions: the event bus delivers DataUploadEvent,
ThumbnailGenerationEvent and DisplayingImageEvent to every live handler in
priority order, and each handler decides for itself whether the event is
its business.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union

from mediaboard.core.events.types import (
    DataUploadEvent,
    DisplayingImageEvent,
    ImageAdditionEvent,
    ImageReplaceEvent,
    LockSetEvent,
    RatingSetEvent,
    ThumbnailGenerationEvent,
)
from mediaboard.core.exceptions import (
    ErrorCode,
    ErrorContext,
    MediaBoardError,
    UploadError,
    ValidationError,
)
from mediaboard.core.extensions import Extension
from mediaboard.core.models import Image, is_content_hash
from mediaboard.processing.commands import CommandRunner
from mediaboard.processing.engines import EngineResult, EngineStatus, ThumbnailEngine, create_engine


class DataHandlerExtension(Extension, ABC):
    """
    Abstract base class for extensions that ingest one family of media types.

    Subclasses implement the four hooks below; the upload state machine in
    ``on_data_upload`` is shared.
    """

    @abstractmethod
    def supported_ext(self, ext: str) -> bool:
        """Whether files with this extension belong to the handler."""

    @abstractmethod
    def check_contents(self, tmpname: Union[str, Path]) -> bool:
        """Sniff the file contents; False means the file is corrupt or mislabelled."""

    @abstractmethod
    def create_image_from_data(self, filename: Union[str, Path], metadata: Dict[str, Any]) -> Optional[Image]:
        """Build the Image entity for an archived file, or None if it cannot be read."""

    @abstractmethod
    def create_thumb(self, hash: str) -> EngineResult:
        """Generate the thumbnail for a stored file unless it already exists."""

    def on_data_upload(self, event: DataUploadEvent) -> None:
        """
        Validate, archive, thumbnail and store an upload.

        Raises:
            ValidationError: The upload is not for this handler
            UploadError: The upload is for this handler but was rejected
        """
        if event.claimed:
            raise ValidationError(f"Upload already handled by {event.handled_by}")

        if not self.supported_ext(event.type):
            raise ValidationError(
                f"Unsupported extension: {event.type!r}",
                error_code=ErrorCode.VALIDATION_UNSUPPORTED_TYPE,
                field_name="type",
                field_value=event.type
            )
        if not self.check_contents(event.tmpname):
            raise UploadError(
                "Invalid or corrupted file",
                error_code=ErrorCode.UPLOAD_CORRUPT_FILE,
                image_hash=event.hash,
                context=ErrorContext(operation="validate", file_path=str(event.tmpname))
            )
        if not is_content_hash(event.hash):
            raise UploadError(
                f"Invalid content hash: {event.hash!r}",
                error_code=ErrorCode.VALIDATION_INVALID_INPUT,
                context=ErrorContext(operation="validate", file_path=str(event.tmpname))
            )

        event.handled_by = self.name
        existing = self._check_replace_target(event)

        self.context.storage.archive_file(event.hash, event.tmpname)
        self.logger.info(f"Archived {event.metadata.get('filename')} as {event.hash}")

        self._request_thumbnail(event)

        if existing is not None:
            self._replace(event, existing)
        else:
            self._add(event)

    def _check_replace_target(self, event: DataUploadEvent) -> Optional[Image]:
        """Resolve the image being replaced, rejecting the upload before anything is archived."""
        if event.metadata.get('replace') is None:
            return None

        existing = self.context.storage.find_image_by_id(event.metadata['replace'])
        if existing is None:
            raise UploadError(
                "Image to replace does not exist",
                error_code=ErrorCode.UPLOAD_TARGET_MISSING,
                image_hash=event.hash
            )
        if existing.hash == event.hash:
            raise UploadError(
                "The uploaded image is the same as the one to replace",
                error_code=ErrorCode.UPLOAD_DUPLICATE,
                image_hash=event.hash,
                context=ErrorContext(image_id=existing.id)
            )
        return existing

    def _request_thumbnail(self, event: DataUploadEvent) -> None:
        thumb = ThumbnailGenerationEvent(hash=event.hash, type=event.type)
        try:
            self.context.send_event(thumb)
        except MediaBoardError as e:
            if not e.recoverable:
                raise
            self.logger.warning(f"Thumbnail generation failed for {event.hash}: {e.message}")
            thumb.result = EngineResult(EngineStatus.PROCESS_FAILED, message=e.message)

        if thumb.result is not None and not thumb.result:
            self.logger.warning(
                f"Thumbnail for {event.hash} not created "
                f"({thumb.result.status.value}): {thumb.result.message}"
            )

    def _decode(self, event: DataUploadEvent) -> Image:
        image = self.create_image_from_data(self.context.storage.image_path(event.hash), event.metadata)
        if image is None:
            raise UploadError(
                "Data handler failed to create image object from data",
                error_code=ErrorCode.UPLOAD_ENTITY_FAILED,
                image_hash=event.hash
            )
        return image

    def _replace(self, event: DataUploadEvent, existing: Image) -> None:
        event.metadata['tags'] = existing.get_tag_list()
        image = self._decode(event)
        self.context.send_event(ImageReplaceEvent(id=existing.id, image=image))
        event.image_id = existing.id
        self.logger.info(f"Replaced image {existing.id} with {event.hash}")

    def _add(self, event: DataUploadEvent) -> None:
        image = self._decode(event)
        addition = ImageAdditionEvent(image=image)
        self.context.send_event(addition)
        event.image_id = addition.image.id
        self.logger.info(f"Added image {event.image_id} ({event.hash})")

        rating = event.metadata.get('rating')
        if rating:
            self._best_effort(RatingSetEvent(image=image, rating=rating))
        if event.metadata.get('locked'):
            self._best_effort(LockSetEvent(image=image, locked=True))

    def _best_effort(self, event) -> None:
        try:
            self.context.send_event(event)
        except MediaBoardError as e:
            if not e.recoverable:
                raise
            self.logger.warning(f"{event.event_type} failed for image {event.image.id}: {e.message}")

    def on_thumbnail_generation(self, event: ThumbnailGenerationEvent) -> None:
        if not self.supported_ext(event.type):
            return

        force_thumb = getattr(self, 'create_thumb_force', None)
        if event.force and force_thumb is not None:
            event.result = force_thumb(event.hash)
        else:
            event.result = self.create_thumb(event.hash)

    def on_displaying_image(self, event: DisplayingImageEvent) -> None:
        if self.supported_ext(event.image.ext) and self.theme is not None:
            self.theme.display_image(event.page, event.image)


class ThumbHandlerExtension(DataHandlerExtension):
    """
    Data handler whose thumbnails are rendered by the configured engine.

    ``create_thumb`` is idempotent and defers to ``create_thumb_force``,
    which subclasses implement.
    """

    def __init__(self, context, registry=None):
        super().__init__(context, registry)
        self._engine: Optional[ThumbnailEngine] = None

    @property
    def engine(self) -> ThumbnailEngine:
        if self._engine is None:
            config = self.context.config.thumbnails
            self._engine = create_engine(config.engine, config, CommandRunner(config.process_timeout))
        return self._engine

    def create_thumb(self, hash: str) -> EngineResult:
        output = self.context.storage.thumbnail_path(hash)
        if output.exists():
            return EngineResult(EngineStatus.OK, message="thumbnail exists", output=output)
        return self.create_thumb_force(hash)

    @abstractmethod
    def create_thumb_force(self, hash: str) -> EngineResult:
        """Regenerate the thumbnail even if one exists."""

    def do_create_thumb(self, src: Union[str, Path], dst: Union[str, Path]) -> EngineResult:
        """Render ``src`` to ``dst`` with the configured engine."""
        result = self.engine.make_thumb(src, dst)
        self.logger.debug(f"{result.engine} thumbnail {dst}: {result.status.value}")
        return result
