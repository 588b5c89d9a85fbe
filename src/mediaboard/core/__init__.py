"""
Core mediaboard Package

Contains core infrastructure components including the event bus, extension
registry, plugins, configuration and error handling.
"""

from mediaboard.core.exceptions import (
    ArchiveError,
    ConfigurationError,
    EngineError,
    EngineUnavailableError,
    ErrorCode,
    ErrorContext,
    ExtensionError,
    MediaBoardError,
    RecoverySuggestion,
    UploadError,
    ValidationError,
)

__all__ = [
    'ArchiveError',
    'ConfigurationError',
    'EngineError',
    'EngineUnavailableError',
    'ErrorCode',
    'ErrorContext',
    'ExtensionError',
    'MediaBoardError',
    'RecoverySuggestion',
    'UploadError',
    'ValidationError',
]
