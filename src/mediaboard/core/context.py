"""
Application context handed to every extension at construction.

Holds the process-wide collaborators (configuration, storage, event bus)
as a plain object instead of module globals, so tests can build as many
independent contexts as they like.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict

from mediaboard.core.config.models import AppConfig

if TYPE_CHECKING:
    from mediaboard.core.events.bus import EventBus
    from mediaboard.storage import Storage


@dataclass
class AppContext:
    config: AppConfig
    storage: "Storage"
    bus: "EventBus"
    # runtime values decided at startup, e.g. the effective PDF engine
    settings: Dict[str, Any] = field(default_factory=dict)

    @property
    def database_driver(self) -> str:
        return self.storage.driver_name

    def send_event(self, event):
        """Shorthand for ``self.bus.publish(event)``."""
        return self.bus.publish(event)
