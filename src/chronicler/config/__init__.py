"""Application configuration helpers."""

from __future__ import annotations

from .env import bool_env_var, optional_env_var, require_env_vars
from .errors import ConfigurationError, InvalidConfigurationValue, MissingConfigurationError
from .logging import configure_logging, get_log_level
from .notifications import NotificationBackend, NotificationConfig, get_notification_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "InvalidConfigurationValue",
    "MissingConfigurationError",
    "NotificationBackend",
    "NotificationConfig",
    "StorageConfig",
    "bool_env_var",
    "configure_logging",
    "get_database_config",
    "get_log_level",
    "get_notification_config",
    "get_storage_config",
    "optional_env_var",
    "require_env_vars",
]
