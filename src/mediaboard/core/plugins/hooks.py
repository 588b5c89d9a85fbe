"""
Plugin Hook Specifications

This module defines the hooks a third-party package implements to contribute
extensions and themes. Plugins are ordinary modules advertised under the
``mediaboard.extensions`` entry-point group:

    [project.entry-points."mediaboard.extensions"]
    my_plugin = "my_package.mediaboard_plugin"

and implement the hooks with ``hookimpl``:

    from mediaboard.core.plugins import hookimpl

    @hookimpl
    def mediaboard_register_extensions(registry):
        registry.register(MyExtension, theme=MyExtensionTheme)
"""

import pluggy

PROJECT_NAME = "mediaboard"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class ExtensionHooks:
    """Hook specifications for extension plugins."""

    @hookspec
    def mediaboard_register_extensions(self, registry):
        """Register extension types.

        Called after the built-in extensions are registered and before the
        registry is frozen.

        Args:
            registry: The application's ExtensionRegistry
        """

    @hookspec
    def mediaboard_register_themes(self, registry):
        """Register themes, typically custom overrides for existing extensions.

        Called after every plugin has had ``mediaboard_register_extensions``
        called, so themes may target extensions from any plugin.

        Args:
            registry: The application's ExtensionRegistry
        """
