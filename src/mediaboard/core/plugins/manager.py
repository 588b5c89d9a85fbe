"""
Plugin Manager

Discovers third-party extension plugins through pluggy and lets them fill
the extension registry during startup.
"""

import logging
from typing import Any, Dict, List, Optional

import pluggy

from mediaboard.core.extensions import ExtensionRegistry
from mediaboard.core.plugins.hooks import PROJECT_NAME, ExtensionHooks


ENTRY_POINT_GROUP = "mediaboard.extensions"


class PluginManager:
    """
    Central plugin management for mediaboard.

    Wraps a pluggy manager carrying the extension hook specifications.
    Plugins come from installed entry points or are registered directly
    (mostly useful in tests and embedding applications).
    """

    def __init__(self):
        self.logger = logging.getLogger("mediaboard.plugins")
        self.pm = pluggy.PluginManager(PROJECT_NAME)
        self.pm.add_hookspecs(ExtensionHooks)
        self._loaded: List[str] = []

    def load_entry_points(self, group: str = ENTRY_POINT_GROUP) -> int:
        """
        Load every plugin advertised under an entry-point group.

        Returns:
            Number of plugins loaded
        """
        count = self.pm.load_setuptools_entrypoints(group)
        for name, _ in self.pm.list_name_plugin():
            if name not in self._loaded:
                self._loaded.append(name)
        self.logger.info(f"Loaded {count} plugin(s) from entry points")
        return count

    def register(self, plugin: Any, name: Optional[str] = None) -> str:
        """Register a plugin module or object directly."""
        plugin_name = self.pm.register(plugin, name=name)
        if plugin_name is None:
            self.logger.warning(f"Plugin {name or plugin!r} is blocked or already registered")
            return ""
        self._loaded.append(plugin_name)
        self.logger.debug(f"Registered plugin: {plugin_name}")
        return plugin_name

    def populate(self, registry: ExtensionRegistry) -> None:
        """Let every plugin register its extensions, then its themes."""
        self.pm.hook.mediaboard_register_extensions(registry=registry)
        self.pm.hook.mediaboard_register_themes(registry=registry)

    @property
    def plugin_names(self) -> List[str]:
        return list(self._loaded)

    def get_plugin_info(self) -> List[Dict[str, Any]]:
        """Describe loaded plugins, including their distribution when known."""
        dists = {plugin: dist for plugin, dist in self.pm.list_plugin_distinfo()}
        info = []
        for name, plugin in self.pm.list_name_plugin():
            dist = dists.get(plugin)
            info.append({
                'name': name,
                'distribution': dist.project_name if dist else None,
                'version': dist.version if dist else None,
            })
        return info
