"""
Core Exception Hierarchy for mediaboard

Provides error classification with error codes, recovery suggestions and
context information. The hierarchy separates the three outcomes an
extension can produce while handling an event:

- ValidationError: "not my file", the next extension may claim the event
- UploadError: the attempt is rejected, the user may resubmit
- everything raised with recoverable=False: fatal, abort and log
"""

import sys
import time
import traceback
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(Enum):
    """Standard error codes for different error categories."""

    # Configuration errors (3000-3999)
    CONFIG_INVALID_FORMAT = 3001
    CONFIG_INVALID_VALUE = 3003
    CONFIG_FILE_NOT_FOUND = 3004

    # Upload errors (4000-4999)
    UPLOAD_CORRUPT_FILE = 4001
    UPLOAD_TARGET_MISSING = 4002
    UPLOAD_DUPLICATE = 4003
    UPLOAD_ENTITY_FAILED = 4004
    UPLOAD_ARCHIVE_FAILED = 4005

    # Validation errors (5000-5999)
    VALIDATION_INVALID_INPUT = 5001
    VALIDATION_UNSUPPORTED_TYPE = 5002

    # Thumbnail engine errors (6000-6999)
    ENGINE_UNAVAILABLE = 6001
    ENGINE_PROCESS_FAILED = 6002
    ENGINE_TIMEOUT = 6004

    # Extension errors (7000-7999)
    EXTENSION_DUPLICATE = 7001
    EXTENSION_REGISTRY_FROZEN = 7002
    EXTENSION_LOAD_FAILED = 7003

    # Generic/unknown errors (9000-9999)
    UNKNOWN_ERROR = 9000


@dataclass
class ErrorContext:
    """Contextual information about an error occurrence."""

    operation: str = ""
    extension: str = ""
    event_type: str = ""
    file_path: Optional[str] = None
    image_hash: Optional[str] = None
    image_id: Optional[int] = None
    correlation_id: Optional[str] = None
    timestamp: float = field(default_factory=time.time)
    system_info: Dict[str, Any] = field(default_factory=dict)
    user_context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary for serialization."""
        return {
            'operation': self.operation,
            'extension': self.extension,
            'event_type': self.event_type,
            'file_path': self.file_path,
            'image_hash': self.image_hash,
            'image_id': self.image_id,
            'correlation_id': self.correlation_id,
            'timestamp': self.timestamp,
            'system_info': self.system_info,
            'user_context': self.user_context
        }


@dataclass
class RecoverySuggestion:
    """Structured recovery suggestion for error resolution."""

    action: str
    description: str
    automatic: bool = False
    command: Optional[str] = None
    priority: int = 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert suggestion to dictionary."""
        return {
            'action': self.action,
            'description': self.description,
            'automatic': self.automatic,
            'command': self.command,
            'priority': self.priority
        }


class MediaBoardError(Exception):
    """
    Base exception for all mediaboard errors.

    Provides error information including error codes, recovery
    suggestions, and detailed context for debugging.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
        recoverable: bool = True,
        suggestions: Optional[List[RecoverySuggestion]] = None
    ):
        """
        Initialize mediaboard error.

        Args:
            message: Human-readable error description
            error_code: Standardized error code
            context: Contextual information about the error
            cause: Original exception that caused this error
            recoverable: Whether the error can potentially be recovered
            suggestions: List of recovery suggestions
        """
        super().__init__(message)

        self.message = message
        self.error_code = error_code
        self.context = context or ErrorContext()
        self.cause = cause
        self.recoverable = recoverable
        self.suggestions = suggestions or []
        self.stack_trace = traceback.format_exc()

        if not self.context.correlation_id:
            self.context.correlation_id = str(uuid.uuid4())[:8]

        if not self.context.system_info:
            self.context.system_info = {
                'platform': sys.platform,
                'python_version': sys.version,
            }

    def add_suggestion(self, suggestion: RecoverySuggestion) -> None:
        """Add a recovery suggestion to the error."""
        self.suggestions.append(suggestion)
        self.suggestions.sort(key=lambda s: s.priority)

    def get_user_message(self) -> str:
        """Get user-friendly error message with suggestions."""
        lines = [f"Error: {self.message}"]

        if self.error_code != ErrorCode.UNKNOWN_ERROR:
            lines.append(f"Error Code: {self.error_code.value}")

        if self.context.correlation_id:
            lines.append(f"Correlation ID: {self.context.correlation_id}")

        if self.suggestions:
            lines.append("\nSuggested solutions:")
            for i, suggestion in enumerate(self.suggestions[:3], 1):
                lines.append(f"  {i}. {suggestion.action}")
                lines.append(f"     {suggestion.description}")
                if suggestion.command:
                    lines.append(f"     Command: {suggestion.command}")

        return "\n".join(lines)

    def get_debug_info(self) -> Dict[str, Any]:
        """Get comprehensive debug information."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'error_code': self.error_code.value,
            'recoverable': self.recoverable,
            'context': self.context.to_dict(),
            'cause': {
                'type': type(self.cause).__name__ if self.cause else None,
                'message': str(self.cause) if self.cause else None
            },
            'suggestions': [s.to_dict() for s in self.suggestions],
            'stack_trace': self.stack_trace
        }


class ValidationError(MediaBoardError):
    """
    Raised when an input does not belong to the extension inspecting it.

    The event bus treats this as "not applicable" and carries on with the
    next extension.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.VALIDATION_INVALID_INPUT,
        field_name: Optional[str] = None,
        field_value: Optional[Any] = None,
        **kwargs
    ):
        context = kwargs.get('context') or ErrorContext()
        if field_name:
            context.user_context['field_name'] = field_name
            context.user_context['field_value'] = field_value

        kwargs['context'] = context
        kwargs['error_code'] = error_code

        super().__init__(message, **kwargs)


class UploadError(MediaBoardError):
    """Raised when an upload attempt is rejected; aborts the triggering dispatch."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UPLOAD_ENTITY_FAILED,
        image_hash: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.get('context') or ErrorContext()
        if image_hash:
            context.image_hash = image_hash

        kwargs['context'] = context
        kwargs['error_code'] = error_code

        super().__init__(message, **kwargs)

        if error_code == ErrorCode.UPLOAD_CORRUPT_FILE:
            self.add_suggestion(RecoverySuggestion(
                action="Check the file",
                description="The file extension is supported but its contents could not be read. "
                            "Re-export or re-download the file and upload it again.",
                priority=1
            ))
        elif error_code == ErrorCode.UPLOAD_DUPLICATE:
            self.add_suggestion(RecoverySuggestion(
                action="Upload a different file",
                description="The replacement is byte-identical to the current image.",
                priority=1
            ))


class ArchiveError(MediaBoardError):
    """Raised when the storage collaborator cannot persist an upload."""

    def __init__(self, message: str, image_hash: Optional[str] = None, **kwargs):
        context = kwargs.get('context') or ErrorContext()
        if image_hash:
            context.image_hash = image_hash

        kwargs['context'] = context
        kwargs.setdefault('error_code', ErrorCode.UPLOAD_ARCHIVE_FAILED)
        kwargs.setdefault('recoverable', False)

        super().__init__(message, **kwargs)


class EngineError(MediaBoardError):
    """Exception for thumbnail engine failures."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.ENGINE_PROCESS_FAILED,
        engine: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.get('context') or ErrorContext()
        if engine:
            context.user_context['engine'] = engine

        kwargs['context'] = context
        kwargs['error_code'] = error_code

        super().__init__(message, **kwargs)
        self.engine = engine


class EngineUnavailableError(EngineError):
    """Raised when an external rendering binary cannot be resolved on this host."""

    def __init__(self, binary: str, **kwargs):
        kwargs.setdefault('error_code', ErrorCode.ENGINE_UNAVAILABLE)
        super().__init__(f"Executable not found: {binary}", **kwargs)
        self.binary = binary
        self.add_suggestion(RecoverySuggestion(
            action=f"Install {binary}",
            description=f"Install {binary} or point the configuration at its full path.",
            command="mediaboard config init mediaboard.yaml",
            priority=1
        ))


class ConfigurationError(MediaBoardError):
    """Exception for configuration-related errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.CONFIG_INVALID_FORMAT,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        **kwargs
    ):
        context = kwargs.get('context') or ErrorContext()
        if config_key:
            context.user_context['config_key'] = config_key
            context.user_context['config_value'] = config_value

        kwargs['context'] = context
        kwargs['error_code'] = error_code
        kwargs.setdefault('recoverable', False)

        super().__init__(message, **kwargs)

        if error_code == ErrorCode.CONFIG_FILE_NOT_FOUND:
            self.add_suggestion(RecoverySuggestion(
                action="Create configuration file",
                description="Create a configuration file using the default template.",
                command="mediaboard config init mediaboard.yaml",
                priority=1
            ))


class ExtensionError(MediaBoardError):
    """Exception for extension registration and dispatch failures."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.EXTENSION_LOAD_FAILED,
        extension: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.get('context') or ErrorContext()
        if extension:
            context.extension = extension

        kwargs['context'] = context
        kwargs['error_code'] = error_code
        kwargs.setdefault('recoverable', False)

        super().__init__(message, **kwargs)


def upload_error(message: str, code: ErrorCode = ErrorCode.UPLOAD_ENTITY_FAILED, **kwargs) -> UploadError:
    """Create an upload error with standard suggestions."""
    return UploadError(message, error_code=code, **kwargs)


def config_error(message: str, key: Optional[str] = None, **kwargs) -> ConfigurationError:
    """Create a configuration error with standard suggestions."""
    return ConfigurationError(message, config_key=key, **kwargs)
