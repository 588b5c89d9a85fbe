"""
Extensions and the extension registry.

An extension is anything that reacts to events: it exposes ``on_<event>``
methods and is registered with the event bus, which calls those methods in
priority order. The registry is the process-wide table of extension types
known to the application, together with the optional presentation delegate
("theme") each one renders through. It is filled once at startup, in a fixed
declared order, and frozen before any extension is instantiated.

Themes are looked up by extension name in the registry. A deployment may
register a *custom* theme for an extension to change its visual output
without subclassing the extension; the custom theme wins over the default
one when both are present.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Iterable, List, Optional, Type

from mediaboard.core.events.types import TextFormattingEvent
from mediaboard.core.exceptions import ErrorCode, ExtensionError

if TYPE_CHECKING:
    from mediaboard.core.context import AppContext


DEFAULT_PRIORITY = 50


class Extension:
    """
    Base class for all extensions.

    Subclasses override ``priority`` (lower numbers receive events first)
    and, to opt out on incompatible backends, ``db_support``.
    """

    priority: int = DEFAULT_PRIORITY

    # database drivers this extension works with; empty means all of them
    db_support: FrozenSet[str] = frozenset()

    def __init__(self, context: "AppContext", registry: Optional["ExtensionRegistry"] = None):
        self.context = context
        self.name = type(self).__name__
        self.logger = logging.getLogger(f"mediaboard.extensions.{self.name}")
        self.theme = registry.create_theme(self.name) if registry is not None else None

    def is_live(self) -> bool:
        return not self.db_support or self.context.database_driver in self.db_support

    def get_priority(self) -> int:
        return self.priority

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(priority={self.priority})"


class FormatterExtension(Extension, ABC):
    """Common shape of the extensions that take part in text formatting."""

    def on_text_formatting(self, event: TextFormattingEvent) -> None:
        event.formatted = self.format(event.formatted)
        event.stripped = self.strip(event.stripped)

    @abstractmethod
    def format(self, text: str) -> str:
        pass

    @abstractmethod
    def strip(self, text: str) -> str:
        pass


class Theme:
    """Base class for presentation delegates."""


@dataclass
class ExtensionEntry:
    """Registry row: one extension type and its presentation delegates."""
    name: str
    extension_class: Type[Extension]
    theme_class: Optional[Type[Any]] = None
    custom_theme_class: Optional[Type[Any]] = None
    enabled: bool = True
    source: str = "builtin"


class ExtensionRegistry:
    """
    Registry for extension types and their themes.

    Provides registration in declared order, theme resolution and
    instantiation of one extension instance per type.
    """

    def __init__(self):
        self._entries: Dict[str, ExtensionEntry] = {}
        self._frozen = False
        self.logger = logging.getLogger("mediaboard.registry")

    def _check_writable(self, name: str) -> None:
        if self._frozen:
            raise ExtensionError(
                f"Extension registry is frozen; cannot modify '{name}'",
                error_code=ErrorCode.EXTENSION_REGISTRY_FROZEN,
                extension=name
            )

    def _entry(self, name: str) -> ExtensionEntry:
        try:
            return self._entries[name]
        except KeyError:
            raise ExtensionError(f"Unknown extension: {name}", extension=name) from None

    def register(
        self,
        extension_class: Type[Extension],
        theme: Optional[Type[Any]] = None,
        source: str = "builtin"
    ) -> ExtensionEntry:
        """
        Register an extension type.

        Args:
            extension_class: Extension subclass to register
            theme: Default theme class for the extension
            source: Where the registration came from (builtin or plugin name)

        Raises:
            ExtensionError: If the name is taken or the registry is frozen
        """
        name = extension_class.__name__
        self._check_writable(name)

        if name in self._entries:
            raise ExtensionError(
                f"Extension '{name}' is already registered",
                error_code=ErrorCode.EXTENSION_DUPLICATE,
                extension=name
            )

        entry = ExtensionEntry(name=name, extension_class=extension_class, theme_class=theme, source=source)
        self._entries[name] = entry
        self.logger.debug(f"Registered extension: {name} (source: {source})")
        return entry

    def register_theme(self, name: str, theme_class: Type[Any], custom: bool = False) -> None:
        """
        Attach a theme to a registered extension.

        Args:
            name: Extension name
            theme_class: Theme class to bind
            custom: Register as the deployment override rather than the default
        """
        self._check_writable(name)
        entry = self._entry(name)
        if custom:
            entry.custom_theme_class = theme_class
        else:
            entry.theme_class = theme_class

    def resolve_theme(self, name: str) -> Optional[Type[Any]]:
        """Theme class for an extension: custom first, then default, else None."""
        entry = self._entries.get(name)
        if entry is None:
            return None
        return entry.custom_theme_class or entry.theme_class

    def create_theme(self, name: str) -> Optional[Any]:
        theme_class = self.resolve_theme(name)
        return theme_class() if theme_class is not None else None

    def disable(self, name: str) -> None:
        self._check_writable(name)
        self._entry(name).enabled = False

    def freeze(self) -> None:
        """Make the registry read-only."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def entries(self) -> List[ExtensionEntry]:
        """Entries in declared order."""
        return list(self._entries.values())

    def get(self, name: str) -> Optional[ExtensionEntry]:
        return self._entries.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def instantiate(self, context: "AppContext", disabled: Iterable[str] = ()) -> List[Extension]:
        """
        Construct one instance of every enabled extension, in declared order.

        Args:
            context: Application context handed to each extension
            disabled: Extra extension names to skip

        Returns:
            The constructed extensions
        """
        skip = set(disabled)
        instances = []
        for entry in self._entries.values():
            if not entry.enabled or entry.name in skip:
                self.logger.debug(f"Skipping disabled extension: {entry.name}")
                continue
            try:
                instances.append(entry.extension_class(context, registry=self))
            except Exception as e:
                raise ExtensionError(
                    f"Failed to construct extension '{entry.name}': {e}",
                    extension=entry.name,
                    cause=e
                ) from e
        return instances
