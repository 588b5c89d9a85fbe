"""
Tests for extensions and the extension registry.
"""

import pytest

from mediaboard.core.events.types import TextFormattingEvent
from mediaboard.core.exceptions import ErrorCode, ExtensionError
from mediaboard.core.extensions import (
    DEFAULT_PRIORITY,
    Extension,
    ExtensionRegistry,
    FormatterExtension,
    Theme,
)


class Gallery(Extension):
    pass


class GalleryTheme(Theme):
    pass


class CustomGalleryTheme(Theme):
    pass


class SqliteOnly(Extension):
    db_support = frozenset({"sqlite"})


class PostgresOnly(Extension):
    db_support = frozenset({"pgsql"})


class Shouting(FormatterExtension):
    def format(self, text):
        return text.upper()

    def strip(self, text):
        return text.lower()


class TestExtension:
    """Extension base class behaviour."""

    def test_defaults(self, context):
        ext = Gallery(context)

        assert ext.name == "Gallery"
        assert ext.get_priority() == DEFAULT_PRIORITY
        assert ext.theme is None
        assert ext.logger.name == "mediaboard.extensions.Gallery"

    def test_live_without_db_support(self, context):
        """An empty db_support works with every driver."""
        assert Gallery(context).is_live() is True

    def test_live_with_matching_driver(self, context):
        assert SqliteOnly(context).is_live() is True

    def test_not_live_with_other_driver(self, context):
        """Extensions declaring other drivers opt out."""
        assert PostgresOnly(context).is_live() is False

    def test_formatter_extension(self, context):
        """Formatters transform both running values of the event."""
        event = TextFormattingEvent(original="Hello")

        Shouting(context).on_text_formatting(event)

        assert event.formatted == "HELLO"
        assert event.stripped == "hello"
        assert event.original == "Hello"

    def test_formatter_is_abstract(self, context):
        with pytest.raises(TypeError):
            FormatterExtension(context)


class TestExtensionRegistry:
    """Registration, theme resolution and instantiation."""

    def test_register_in_declared_order(self):
        registry = ExtensionRegistry()
        registry.register(SqliteOnly)
        registry.register(Gallery)

        assert [e.name for e in registry.entries()] == ["SqliteOnly", "Gallery"]
        assert "Gallery" in registry
        assert len(registry) == 2

    def test_duplicate_registration_fails(self):
        registry = ExtensionRegistry()
        registry.register(Gallery)

        with pytest.raises(ExtensionError) as exc_info:
            registry.register(Gallery)
        assert exc_info.value.error_code == ErrorCode.EXTENSION_DUPLICATE

    def test_custom_theme_wins(self, context):
        """A custom theme takes precedence over the default."""
        registry = ExtensionRegistry()
        registry.register(Gallery, theme=GalleryTheme)
        registry.register_theme("Gallery", CustomGalleryTheme, custom=True)

        assert registry.resolve_theme("Gallery") is CustomGalleryTheme
        assert isinstance(Gallery(context, registry).theme, CustomGalleryTheme)

    def test_default_theme_used_without_custom(self, context):
        registry = ExtensionRegistry()
        registry.register(Gallery, theme=GalleryTheme)

        assert isinstance(Gallery(context, registry).theme, GalleryTheme)

    def test_no_theme_is_tolerated(self, context):
        """Extensions without any theme get None."""
        registry = ExtensionRegistry()
        registry.register(Gallery)

        assert registry.resolve_theme("Gallery") is None
        assert registry.resolve_theme("Unknown") is None
        assert Gallery(context, registry).theme is None

    def test_theme_for_unknown_extension_fails(self):
        registry = ExtensionRegistry()

        with pytest.raises(ExtensionError):
            registry.register_theme("Missing", GalleryTheme)

    def test_frozen_registry_rejects_writes(self):
        """After freeze() the table is read-only."""
        registry = ExtensionRegistry()
        registry.register(Gallery)
        registry.freeze()

        assert registry.frozen is True
        with pytest.raises(ExtensionError) as exc_info:
            registry.register(SqliteOnly)
        assert exc_info.value.error_code == ErrorCode.EXTENSION_REGISTRY_FROZEN

        with pytest.raises(ExtensionError):
            registry.register_theme("Gallery", CustomGalleryTheme, custom=True)
        with pytest.raises(ExtensionError):
            registry.disable("Gallery")

    def test_instantiate_one_per_type(self, context):
        registry = ExtensionRegistry()
        registry.register(Gallery, theme=GalleryTheme)
        registry.register(SqliteOnly)

        instances = registry.instantiate(context)

        assert [type(i) for i in instances] == [Gallery, SqliteOnly]
        assert isinstance(instances[0].theme, GalleryTheme)

    def test_instantiate_skips_disabled(self, context):
        registry = ExtensionRegistry()
        registry.register(Gallery)
        registry.register(SqliteOnly)
        registry.register(PostgresOnly)
        registry.disable("SqliteOnly")

        instances = registry.instantiate(context, disabled=["PostgresOnly"])

        assert [type(i) for i in instances] == [Gallery]

    def test_instantiate_wraps_constructor_errors(self, context):
        """A failing constructor becomes an ExtensionError naming the extension."""
        class Exploding(Extension):
            def __init__(self, context, registry=None):
                raise RuntimeError("no")

        registry = ExtensionRegistry()
        registry.register(Exploding)

        with pytest.raises(ExtensionError) as exc_info:
            registry.instantiate(context)
        assert exc_info.value.context.extension == "Exploding"
        assert isinstance(exc_info.value.cause, RuntimeError)
