"""Application configuration helpers."""

from __future__ import annotations

from .env import bool_env, positive_int_env, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .logging import configure_logging
from .preview import PreviewConfig, get_preview_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "PreviewConfig",
    "StorageConfig",
    "bool_env",
    "configure_logging",
    "get_database_config",
    "get_preview_config",
    "get_storage_config",
    "positive_int_env",
    "require_env_vars",
]
