"""
Plugin system for mediaboard.

Third-party packages contribute extensions and themes through pluggy hooks.
"""

from mediaboard.core.plugins.hooks import ExtensionHooks, hookimpl, hookspec
from mediaboard.core.plugins.manager import ENTRY_POINT_GROUP, PluginManager

__all__ = [
    'ExtensionHooks',
    'hookimpl',
    'hookspec',
    'ENTRY_POINT_GROUP',
    'PluginManager',
]
