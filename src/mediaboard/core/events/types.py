"""
Event Types for mediaboard

Defines the event hierarchy broadcast to extensions. Events carry write-once
inputs set by the producer and output slots that extensions fill in while
the event is being dispatched.
"""

import hashlib
import re
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

from mediaboard.core.models import Image, strip_query
from mediaboard.core.page import Page


_CAMEL_BOUNDARY = re.compile(r'(?<!^)(?=[A-Z])')


def handler_name_for(event_type: str) -> str:
    """
    Name of the extension method that receives an event type.

    ``DataUploadEvent`` is delivered to ``on_data_upload``.
    """
    base = event_type[:-len("Event")] if event_type.endswith("Event") else event_type
    return "on_" + _CAMEL_BOUNDARY.sub('_', base).lower()


@dataclass
class BaseEvent:
    """
    Base class for all events.

    Provides common fields for event identification and timing.
    """
    timestamp: float = field(default_factory=time.time, init=False)
    event_id: str = field(default_factory=lambda: str(uuid.uuid4())[:12], init=False)

    @property
    def datetime(self) -> datetime:
        """Get event timestamp as datetime object."""
        return datetime.fromtimestamp(self.timestamp)

    @property
    def event_type(self) -> str:
        """Get the event type name."""
        return self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        return {
            'event_type': self.event_type,
            'timestamp': self.timestamp,
            'event_id': self.event_id,
            'datetime': self.datetime.isoformat(),
            **{k: v for k, v in self.__dict__.items()
               if k not in ['timestamp', 'event_id']}
        }


@dataclass
class InitExtEvent(BaseEvent):
    """Published once after every extension has been constructed and registered."""


@dataclass
class DataUploadEvent(BaseEvent):
    """
    A file has been uploaded and is waiting in a temporary location.

    ``hash``, ``size`` and ``type`` are derived from the file and metadata
    when the producer does not supply them, and are mirrored back into
    ``metadata`` so handlers can build an Image from it. ``image_id`` and
    ``handled_by`` are filled in by the handler that claims the upload.
    """
    tmpname: Union[str, Path]
    metadata: Dict[str, Any] = field(default_factory=dict)
    hash: str = ""
    type: str = ""
    size: int = 0

    image_id: Optional[int] = None
    handled_by: Optional[str] = None

    def __post_init__(self):
        self.tmpname = Path(self.tmpname)

        if not self.hash:
            self.hash = self.metadata.get('hash') or _md5_file(self.tmpname)
        if not self.size:
            self.size = self.metadata.get('size') or self.tmpname.stat().st_size

        extension = self.metadata.get('extension')
        if not extension:
            filename = strip_query(self.metadata.get('filename')) or self.tmpname.name
            extension = Path(filename).suffix.lstrip('.')
        if not self.type:
            self.type = strip_query(extension).lower()

        self.metadata['hash'] = self.hash
        self.metadata['size'] = self.size
        self.metadata.setdefault('extension', extension)
        self.metadata.setdefault('filename', self.tmpname.name)
        self.metadata.setdefault('tags', [])
        self.metadata.setdefault('source', None)

    @property
    def claimed(self) -> bool:
        return self.handled_by is not None


@dataclass
class ThumbnailGenerationEvent(BaseEvent):
    """Request to (re)generate the thumbnail for a stored file."""
    hash: str = ""
    type: str = ""
    force: bool = False

    # EngineResult of the handler that produced the thumbnail
    result: Optional[Any] = None


@dataclass
class DisplayingImageEvent(BaseEvent):
    """An image is being shown; handlers add their markup to ``page``."""
    image: Image = field(default_factory=Image)
    page: Page = field(default_factory=Page)


@dataclass
class ImageAdditionEvent(BaseEvent):
    """A new image is ready to be stored; the index assigns ``image.id``."""
    image: Image = field(default_factory=Image)


@dataclass
class ImageReplaceEvent(BaseEvent):
    """The content of image ``id`` is superseded by ``image``."""
    id: int = 0
    image: Image = field(default_factory=Image)


@dataclass
class RatingSetEvent(BaseEvent):
    image: Image = field(default_factory=Image)
    rating: str = ""


@dataclass
class LockSetEvent(BaseEvent):
    image: Image = field(default_factory=Image)
    locked: bool = False


@dataclass
class TextFormattingEvent(BaseEvent):
    """
    Ask formatters to render user text.

    Each formatter transforms ``formatted`` and ``stripped`` in turn, so the
    final values are the composition of every formatter in priority order.
    """
    original: str = ""
    formatted: str = ""
    stripped: str = ""

    def __post_init__(self):
        self.original = self.original.strip()
        self.formatted = self.original
        self.stripped = self.original


def _md5_file(path: Path) -> str:
    digest = hashlib.md5()
    with open(path, 'rb') as f:
        for chunk in iter(lambda: f.read(65536), b''):
            digest.update(chunk)
    return digest.hexdigest()
