"""
Configuration Manager

Handles hierarchical configuration loading, validation, and management
with support for CLI args → environment variables → config files → defaults.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import ValidationError

from mediaboard.core.config.models import MEMORY_DATABASE, AppConfig
from mediaboard.core.exceptions import ConfigurationError, ErrorCode, config_error


class ConfigManager:
    """
    Manages application configuration with hierarchical loading and validation.

    Configuration sources in order of precedence:
    1. CLI arguments (highest priority)
    2. Environment variables
    3. Configuration files
    4. Default values (lowest priority)
    """

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Optional path to configuration file
        """
        self.config_file = Path(config_file) if config_file else None
        self._config: Optional[AppConfig] = None
        self._config_paths = self._get_default_config_paths()

    def _get_default_config_paths(self) -> List[Path]:
        """Get default configuration file search paths."""
        search_paths = [
            Path.cwd() / "mediaboard.yaml",
            Path.cwd() / "mediaboard.yml",
            Path.cwd() / ".mediaboard.yaml",
            Path.home() / ".config" / "mediaboard" / "config.yaml",
        ]

        xdg_config = os.environ.get('XDG_CONFIG_HOME')
        if xdg_config:
            search_paths.append(Path(xdg_config) / "mediaboard" / "config.yaml")

        return search_paths

    def load_config(
        self,
        cli_args: Optional[Dict[str, Any]] = None,
        env_prefix: str = "MEDIABOARD_"
    ) -> AppConfig:
        """
        Load and validate configuration from all sources.

        Args:
            cli_args: Dictionary of CLI arguments
            env_prefix: Prefix for environment variables

        Returns:
            Validated AppConfig instance

        Raises:
            ConfigurationError: If configuration is invalid
        """
        config_data: Dict[str, Any] = {}

        file_config = self._load_config_file()
        if file_config:
            config_data.update(file_config)

        env_config = self._load_env_config(env_prefix)
        if env_config:
            config_data = self._deep_merge(config_data, env_config)

        if cli_args:
            cli_config = self._normalize_cli_args(cli_args)
            config_data = self._deep_merge(config_data, cli_config)

        try:
            self._config = AppConfig(**config_data)
            return self._config
        except ValidationError as e:
            first = e.errors()[0] if e.errors() else {}
            key = ".".join(str(part) for part in first.get('loc', ())) or None
            raise config_error(
                f"Configuration validation failed: {e}",
                key=key,
                error_code=ErrorCode.CONFIG_INVALID_VALUE,
                cause=e
            ) from e

    def _load_config_file(self) -> Optional[Dict[str, Any]]:
        """Load configuration from file."""
        config_file = self.config_file

        if config_file and not config_file.exists():
            raise ConfigurationError(
                f"Config file not found: {config_file}",
                error_code=ErrorCode.CONFIG_FILE_NOT_FOUND,
                config_key="config_file",
                config_value=str(config_file)
            )

        if not config_file:
            for path in self._config_paths:
                if path.exists() and path.is_file():
                    config_file = path
                    break

        if not config_file:
            return None

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                if config_file.suffix.lower() == '.json':
                    return json.load(f)
                return yaml.safe_load(f) or {}
        except (IOError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Failed to load config file {config_file}: {e}")

    def _load_env_config(self, prefix: str) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        env_config: Dict[str, Any] = {}

        env_mappings = {
            # Thumbnail configuration
            f"{prefix}THUMB_ENGINE": ("thumbnails", "engine", str),
            f"{prefix}THUMB_WIDTH": ("thumbnails", "width", int),
            f"{prefix}THUMB_HEIGHT": ("thumbnails", "height", int),
            f"{prefix}THUMB_QUALITY": ("thumbnails", "quality", int),
            f"{prefix}THUMB_OPTIM": ("thumbnails", "optimize", self._parse_bool),
            f"{prefix}THUMB_CONVERT_PATH": ("thumbnails", "convert_path", str),
            f"{prefix}THUMB_MEMORY_LIMIT": ("thumbnails", "memory_limit", int),
            f"{prefix}THUMB_TIMEOUT": ("thumbnails", "process_timeout", float),

            # PDF configuration
            f"{prefix}PDF_THUMB_ENGINE": ("pdf", "thumb_engine", str),
            f"{prefix}PDFTOPPM_PATH": ("pdf", "pdftoppm_path", str),

            # Storage configuration
            f"{prefix}DATA_DIR": ("storage", "data_dir", str),
            f"{prefix}DATABASE": ("storage", "database", str),

            # General settings
            f"{prefix}VERBOSE": ("verbose", None, self._parse_bool),
            f"{prefix}DEBUG": ("debug", None, self._parse_bool),
            f"{prefix}DISABLED_EXTENSIONS": ("disabled_extensions", None, self._parse_list),
        }

        for env_var, (section, key, parser) in env_mappings.items():
            value = os.environ.get(env_var)
            if value is not None:
                try:
                    parsed_value = parser(value)
                    if key is None:
                        env_config[section] = parsed_value
                    else:
                        env_config.setdefault(section, {})[key] = parsed_value
                except (ValueError, TypeError) as e:
                    raise ConfigurationError(
                        f"Invalid value for {env_var}: {value} ({e})",
                        error_code=ErrorCode.CONFIG_INVALID_VALUE,
                        config_key=env_var,
                        config_value=value
                    )

        return env_config

    def _normalize_cli_args(self, cli_args: Dict[str, Any]) -> Dict[str, Any]:
        """Normalize CLI arguments to configuration structure."""
        normalized: Dict[str, Any] = {}

        cli_mappings = {
            'verbose': 'verbose',
            'debug': 'debug',

            'engine': ('thumbnails', 'engine'),
            'thumb_width': ('thumbnails', 'width'),
            'thumb_height': ('thumbnails', 'height'),
            'quality': ('thumbnails', 'quality'),
            'optimize': ('thumbnails', 'optimize'),

            'data_dir': ('storage', 'data_dir'),
            'database': ('storage', 'database'),
        }

        for cli_key, value in cli_args.items():
            if value is None:
                continue

            mapping = cli_mappings.get(cli_key)
            if mapping:
                if isinstance(mapping, tuple):
                    section, key = mapping
                    normalized.setdefault(section, {})[key] = value
                else:
                    normalized[mapping] = value

        return normalized

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries, with override taking precedence."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    @staticmethod
    def _parse_bool(value: Union[str, bool]) -> bool:
        """Parse boolean value from string."""
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in {'true', '1', 'yes', 'on', 'enabled'}
        return bool(value)

    @staticmethod
    def _parse_list(value: Union[str, List[str]]) -> List[str]:
        """Parse list value from string."""
        if isinstance(value, list):
            return value
        if isinstance(value, str):
            return [item.strip() for item in value.split(',') if item.strip()]
        return []

    def validate_config(self, config: Optional[AppConfig] = None) -> List[str]:
        """
        Validate configuration and return list of warnings/issues.

        Only existence checks are made; binaries are not executed.
        """
        if config is None:
            config = self._config

        if config is None:
            return ["No configuration loaded"]

        warnings = []

        try:
            config.storage.data_dir.mkdir(parents=True, exist_ok=True)
        except (OSError, PermissionError):
            warnings.append(f"Cannot create data directory: {config.storage.data_dir}")

        from mediaboard.processing.engines import ENGINES
        if config.thumbnails.engine not in ENGINES:
            warnings.append(
                f"Unknown thumbnail engine '{config.thumbnails.engine}', gd will be used"
            )

        if config.storage.database == MEMORY_DATABASE:
            warnings.append("database is :memory:; image records are lost when the process exits")

        if config.thumbnails.process_timeout is None:
            warnings.append("process_timeout is disabled; external engines may block indefinitely")

        return warnings

    def create_example_config(self, output_file: Path) -> None:
        """
        Create example configuration file.

        Args:
            output_file: Path to write configuration file
        """
        config_dict = AppConfig().model_dump(mode='json', exclude={'created'})

        with open(output_file, 'w', encoding='utf-8') as f:
            yaml.dump(config_dict, f, default_flow_style=False, indent=2)

    @property
    def config(self) -> Optional[AppConfig]:
        """Get the loaded configuration."""
        return self._config
