"""
Application assembly.

``build_application`` wires storage, the event bus and the extension
registry together in a fixed order, and the returned Application offers
the operations the command line (or an embedding program) calls.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from mediaboard.core.config.models import AppConfig
from mediaboard.core.context import AppContext
from mediaboard.core.events.bus import EventBus
from mediaboard.core.events.types import (
    DataUploadEvent,
    DisplayingImageEvent,
    InitExtEvent,
    TextFormattingEvent,
    ThumbnailGenerationEvent,
)
from mediaboard.core.exceptions import MediaBoardError, UploadError
from mediaboard.core.extensions import Extension, ExtensionRegistry
from mediaboard.core.models import Image
from mediaboard.core.page import Page
from mediaboard.core.plugins.manager import PluginManager
from mediaboard.media_handlers import (
    ImageIndex,
    NewlineFormatter,
    PdfFileHandler,
    PdfFileHandlerTheme,
    PixelFileHandler,
    PixelFileHandlerTheme,
    WhitespaceStripper,
)
from mediaboard.processing.engines import EngineResult
from mediaboard.storage import Storage


logger = logging.getLogger(__name__)


class UploadOutcome(Enum):
    HANDLED = "handled"
    NOT_APPLICABLE = "not_applicable"
    REJECTED = "rejected"


@dataclass
class UploadResult:
    """What happened to one upload attempt."""
    outcome: UploadOutcome
    image_id: Optional[int] = None
    message: str = ""
    handled_by: Optional[str] = None
    hash: str = ""

    @property
    def success(self) -> bool:
        return self.outcome is UploadOutcome.HANDLED


def register_builtins(registry: ExtensionRegistry) -> None:
    """Register the built-in extensions in their declared order."""
    registry.register(ImageIndex)
    registry.register(PixelFileHandler, theme=PixelFileHandlerTheme)
    registry.register(PdfFileHandler, theme=PdfFileHandlerTheme)
    registry.register(WhitespaceStripper)
    registry.register(NewlineFormatter)


class Application:
    """A fully assembled mediaboard instance."""

    def __init__(self, context: AppContext, registry: ExtensionRegistry, plugins: PluginManager):
        self.context = context
        self.registry = registry
        self.plugins = plugins

    @property
    def config(self) -> AppConfig:
        return self.context.config

    @property
    def bus(self) -> EventBus:
        return self.context.bus

    @property
    def storage(self) -> Storage:
        return self.context.storage

    @property
    def extensions(self) -> List[Extension]:
        return self.bus.extensions

    def ingest(self, tmpname: Union[str, Path], metadata: Optional[Dict[str, Any]] = None) -> UploadResult:
        """
        Run an uploaded file through the data handlers.

        Args:
            tmpname: Temporary location of the uploaded file (moved into storage on success)
            metadata: Upload metadata: filename, tags, source, rating, locked, replace

        Returns:
            UploadResult; REJECTED carries the user-facing reason

        Raises:
            MediaBoardError: For unrecoverable failures (e.g. the file could not be archived)
        """
        event = DataUploadEvent(tmpname=tmpname, metadata=dict(metadata or {}))
        try:
            self.bus.publish(event)
        except UploadError as e:
            if not e.recoverable:
                raise
            logger.info(f"Upload of {event.metadata.get('filename')} rejected: {e.message}")
            return UploadResult(
                UploadOutcome.REJECTED,
                message=e.message,
                handled_by=event.handled_by,
                hash=event.hash
            )
        except MediaBoardError as e:
            logger.error(f"Upload of {event.metadata.get('filename')} failed: {e.message}")
            raise
        except Exception:
            logger.exception(f"Unexpected error while ingesting {tmpname}")
            raise

        if event.image_id is None:
            logger.info(f"No handler accepted {event.metadata.get('filename')} (type: {event.type!r})")
            return UploadResult(
                UploadOutcome.NOT_APPLICABLE,
                message=f"Unsupported file type: {event.type or 'unknown'}",
                hash=event.hash
            )

        return UploadResult(
            UploadOutcome.HANDLED,
            image_id=event.image_id,
            handled_by=event.handled_by,
            hash=event.hash
        )

    def regenerate_thumbnail(self, hash: str, ext: Optional[str] = None, force: bool = False) -> Optional[EngineResult]:
        """
        Ask the handlers to (re)build a thumbnail.

        ``ext`` defaults to the extension of the stored image with this hash.
        Returns None when no handler supports the type.
        """
        if ext is None:
            image = self.storage.find_image_by_hash(hash)
            if image is None:
                raise UploadError(f"No image with hash {hash}", image_hash=hash)
            ext = image.ext
        event = self.bus.publish(ThumbnailGenerationEvent(hash=hash, type=ext, force=force))
        return event.result

    def display(self, image: Image) -> Page:
        """Collect the markup every handler contributes for an image."""
        page = Page(title=image.filename)
        self.bus.publish(DisplayingImageEvent(image=image, page=page))
        return page

    def format_text(self, text: str) -> TextFormattingEvent:
        return self.bus.publish(TextFormattingEvent(original=text))

    def close(self) -> None:
        self.storage.close()


def build_application(
    config: Optional[AppConfig] = None,
    plugins: Iterable[Any] = (),
    storage: Optional[Storage] = None
) -> Application:
    """
    Assemble an application.

    Built-ins are registered first, then installed plugins (when
    ``config.enable_plugins``) and finally the plugin objects passed in.
    The registry is frozen before any extension is constructed.

    Args:
        config: Application configuration; defaults apply when omitted
        plugins: Extra plugin modules or objects implementing the hooks
        storage: Storage to use instead of one built from the configuration
    """
    config = config or AppConfig()
    storage = storage or Storage.from_config(config.storage)
    bus = EventBus()

    registry = ExtensionRegistry()
    register_builtins(registry)

    plugin_manager = PluginManager()
    if config.enable_plugins:
        plugin_manager.load_entry_points()
    for plugin in plugins:
        plugin_manager.register(plugin)
    plugin_manager.populate(registry)
    registry.freeze()

    context = AppContext(config=config, storage=storage, bus=bus)
    for extension in registry.instantiate(context, disabled=config.disabled_extensions):
        bus.register(extension)

    bus.publish(InitExtEvent())
    logger.debug(f"Application ready with {len(bus.extensions)} extension(s)")

    return Application(context, registry, plugin_manager)
