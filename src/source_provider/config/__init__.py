"""Configuration loading and management."""

from source_provider.config.loader import (
    find_config_files,
    load_config,
    merge_configs,
)
from source_provider.config.schema import (
    SettingsConfig,
    SourceConfig,
    SourceProviderConfig,
)

__all__ = [
    # Loader functions
    "find_config_files",
    "load_config",
    "merge_configs",
    # Schema classes
    "SettingsConfig",
    "SourceConfig",
    "SourceProviderConfig",
]
