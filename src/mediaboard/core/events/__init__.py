"""
Event system for mediaboard.

Typed events and the priority-ordered bus that delivers them to extensions.
"""

from mediaboard.core.events.bus import EventBus
from mediaboard.core.events.types import (
    BaseEvent,
    DataUploadEvent,
    DisplayingImageEvent,
    ImageAdditionEvent,
    ImageReplaceEvent,
    InitExtEvent,
    LockSetEvent,
    RatingSetEvent,
    TextFormattingEvent,
    ThumbnailGenerationEvent,
    handler_name_for,
)

__all__ = [
    'EventBus',
    'BaseEvent',
    'DataUploadEvent',
    'DisplayingImageEvent',
    'ImageAdditionEvent',
    'ImageReplaceEvent',
    'InitExtEvent',
    'LockSetEvent',
    'RatingSetEvent',
    'TextFormattingEvent',
    'ThumbnailGenerationEvent',
    'handler_name_for',
]
