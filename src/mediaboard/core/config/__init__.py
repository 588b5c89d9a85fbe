"""
Configuration Management Package

Provides Pydantic-based configuration models and management for mediaboard.
"""

from mediaboard.core.config.models import AppConfig, PdfConfig, StorageConfig, ThumbnailConfig
from mediaboard.core.config.manager import ConfigManager

__all__ = [
    "AppConfig",
    "PdfConfig",
    "StorageConfig",
    "ThumbnailConfig",
    "ConfigManager",
]
