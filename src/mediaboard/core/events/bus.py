"""
Event Bus for mediaboard

Delivers events to registered extensions in priority order. Dispatch is
synchronous and depth-first: an extension may publish further events from
inside a handler and those are fully drained before the outer dispatch
moves on to the next extension.
"""

import logging
from collections import deque
from itertools import count
from typing import Any, Dict, List, Optional

from mediaboard.core.events.types import BaseEvent, handler_name_for
from mediaboard.core.exceptions import ErrorCode, ExtensionError, MediaBoardError, ValidationError


logger = logging.getLogger(__name__)


class EventBus:
    """
    Priority-ordered, re-entrant event dispatcher.

    Features:
    - Extensions sorted by ascending priority, ties kept in registration order
    - Handlers looked up by event type (``DataUploadEvent`` -> ``on_data_upload``)
    - ``ValidationError`` from a handler means "not applicable" and dispatch
      continues; any other exception aborts the publish and propagates
    - Event history and dispatch statistics for inspection

    Handlers that already ran are not rolled back when a later handler
    aborts the publish.
    """

    def __init__(self, max_history: int = 1000, enable_history: bool = True):
        """
        Initialize the event bus.

        Args:
            max_history: Maximum number of events to keep in history
            enable_history: Whether to store event history
        """
        self.max_history = max_history
        self.enable_history = enable_history

        # (priority, sequence, extension), kept sorted
        self._extensions: List[tuple] = []
        self._sequence = count()
        self._dispatch_cache: Dict[str, List[Any]] = {}
        self._depth = 0

        self._event_history: deque = deque(maxlen=max_history if enable_history else 0)

        self._stats = {
            'events_published': 0,
            'handlers_invoked': 0,
            'handler_errors': 0,
            'not_applicable': 0,
            'max_depth': 0,
        }

    def register(self, extension: Any) -> None:
        """
        Add an extension to the dispatch table.

        Args:
            extension: Extension instance exposing ``priority`` and ``on_*`` handlers

        Raises:
            ExtensionError: If this instance, or another instance of the same
                extension type, is already registered
        """
        for _, _, existing in self._extensions:
            if existing is extension or type(existing) is type(extension):
                raise ExtensionError(
                    f"Extension {type(extension).__name__} is already registered",
                    error_code=ErrorCode.EXTENSION_DUPLICATE,
                    extension=type(extension).__name__
                )

        priority = getattr(extension, 'priority', 50)
        self._extensions.append((priority, next(self._sequence), extension))
        self._extensions.sort(key=lambda item: (item[0], item[1]))
        self._dispatch_cache.clear()

        logger.debug(f"Registered extension {type(extension).__name__} (priority: {priority})")

    def unregister(self, extension: Any) -> bool:
        """Remove an extension; returns False if it was not registered."""
        for item in self._extensions:
            if item[2] is extension:
                self._extensions.remove(item)
                self._dispatch_cache.clear()
                logger.debug(f"Unregistered extension {type(extension).__name__}")
                return True
        return False

    @property
    def extensions(self) -> List[Any]:
        """Registered extensions in dispatch order."""
        return [ext for _, _, ext in self._extensions]

    def _handlers_for(self, event_type: str) -> List[Any]:
        if event_type not in self._dispatch_cache:
            method = handler_name_for(event_type)
            self._dispatch_cache[event_type] = [
                ext for _, _, ext in self._extensions
                if callable(getattr(ext, method, None))
            ]
        return self._dispatch_cache[event_type]

    def publish(self, event: BaseEvent) -> BaseEvent:
        """
        Deliver an event to every interested, live extension in priority order.

        Args:
            event: Event instance; handlers may fill in its output fields

        Returns:
            The same event, after every handler has seen it

        Raises:
            Whatever a handler raises, other than ValidationError
        """
        event_type = event.event_type
        method = handler_name_for(event_type)

        self._stats['events_published'] += 1
        if self.enable_history:
            self._event_history.append(event)

        self._depth += 1
        self._stats['max_depth'] = max(self._stats['max_depth'], self._depth)
        try:
            # snapshot: handlers may register extensions while we iterate
            for extension in list(self._handlers_for(event_type)):
                if hasattr(extension, 'is_live') and not extension.is_live():
                    continue

                handler = getattr(extension, method)
                self._stats['handlers_invoked'] += 1
                try:
                    handler(event)
                except ValidationError as e:
                    self._stats['not_applicable'] += 1
                    logger.debug(f"{type(extension).__name__} passed on {event_type}: {e.message}")
                except MediaBoardError as e:
                    self._stats['handler_errors'] += 1
                    if e.recoverable:
                        logger.info(f"{type(extension).__name__} rejected {event_type}: {e.message}")
                    else:
                        logger.error(f"{type(extension).__name__} failed on {event_type}: {e.message}")
                    if not e.context.extension:
                        e.context.extension = type(extension).__name__
                    if not e.context.event_type:
                        e.context.event_type = event_type
                    raise
                except Exception as e:
                    self._stats['handler_errors'] += 1
                    logger.error(f"{type(extension).__name__} failed on {event_type}: {e}")
                    raise
        finally:
            self._depth -= 1

        return event

    def get_handlers(self, event_type: Optional[str] = None) -> Dict[str, List[str]]:
        """
        Get extension names by event type, in dispatch order.

        Args:
            event_type: Event type to check, or None for every type seen so far

        Returns:
            Dictionary mapping event types to extension names
        """
        if event_type:
            return {event_type: [type(e).__name__ for e in self._handlers_for(event_type)]}
        return {
            et: [type(e).__name__ for e in handlers]
            for et, handlers in self._dispatch_cache.items()
        }

    def get_event_history(self,
                          event_type: Optional[str] = None,
                          limit: Optional[int] = None) -> List[BaseEvent]:
        """
        Get event history, optionally filtered by type.

        Args:
            event_type: Filter by specific event type
            limit: Maximum number of events to return

        Returns:
            List of events from history
        """
        if not self.enable_history:
            return []

        events = list(self._event_history)

        if event_type:
            events = [e for e in events if e.event_type == event_type]

        if limit:
            events = events[-limit:]

        return events

    def get_statistics(self) -> Dict[str, Any]:
        """Get dispatch statistics."""
        return {
            **self._stats,
            'registered_extensions': len(self._extensions),
            'history_size': len(self._event_history) if self.enable_history else 0,
            'history_enabled': self.enable_history
        }

    def clear_history(self) -> None:
        """Clear event history."""
        self._event_history.clear()

    def clear(self) -> None:
        """Remove all extensions."""
        self._extensions.clear()
        self._dispatch_cache.clear()
