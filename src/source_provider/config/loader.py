"""Configuration loader with merge logic and precedence handling."""

import copy
import os
from pathlib import Path
from typing import Any, Optional

import yaml

from source_provider.config.defaults import DEFAULT_CONFIG
from source_provider.config.schema import SourceProviderConfig
from source_provider.utils.paths import expand_path

CONFIG_FILENAME = "sources.yaml"
USER_CONFIG_PATH = "~/.config/source-provider/sources.yaml"


def find_config_files() -> list[Path]:
    """Find configuration files in standard locations.

    Searches for configuration files in order of precedence (lowest to highest):
    1. Project config (./sources.yaml in current directory)
    2. User config (~/.config/source-provider/sources.yaml)

    Returns:
        List of Path objects for existing config files, ordered from lowest
        to highest precedence (so later configs override earlier ones)
    """
    config_files = []

    project_config = Path.cwd() / CONFIG_FILENAME
    if project_config.exists():
        config_files.append(project_config)

    user_config = expand_path(USER_CONFIG_PATH)
    if user_config.exists():
        config_files.append(user_config)

    return config_files


def load_yaml_file(file_path: Path) -> dict[str, Any]:
    """Load and parse a YAML configuration file.

    Args:
        file_path: Path to the YAML file

    Returns:
        Dictionary containing the parsed YAML content

    Raises:
        yaml.YAMLError: If the file contains invalid YAML
        FileNotFoundError: If the file doesn't exist
    """
    with open(file_path, "r") as f:
        content = yaml.safe_load(f)
        return content if content is not None else {}


def merge_configs(configs: list[dict[str, Any]]) -> dict[str, Any]:
    """Deep merge multiple configuration dictionaries.

    Later configs override earlier ones. Nested dictionaries are merged
    recursively; lists and scalars are replaced outright.

    Args:
        configs: List of configuration dictionaries in order from lowest to
                highest precedence

    Returns:
        Merged configuration dictionary
    """
    result: dict[str, Any] = {}

    for config in configs:
        result = _deep_merge(result, config)

    return result


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = copy.deepcopy(base)

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)

    return result


def apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides to configuration.

    Supports the following environment variables:
    - SOURCE_PROVIDER_WORKSPACE_DIR: Override settings.workspace_dir
    - SOURCE_PROVIDER_REGISTRY_URL: Override settings.registry_url
    - SOURCE_PROVIDER_TARGET_DIRS: Override settings.target_dirs (comma-separated)

    Args:
        config: Configuration dictionary to apply overrides to

    Returns:
        New configuration dictionary with environment overrides applied
    """
    result = copy.deepcopy(config)
    settings = result.setdefault("settings", {})

    if workspace_dir := os.getenv("SOURCE_PROVIDER_WORKSPACE_DIR"):
        settings["workspace_dir"] = workspace_dir

    if registry_url := os.getenv("SOURCE_PROVIDER_REGISTRY_URL"):
        settings["registry_url"] = registry_url

    if target_dirs := os.getenv("SOURCE_PROVIDER_TARGET_DIRS"):
        settings["target_dirs"] = [
            d.strip() for d in target_dirs.split(",") if d.strip()
        ]

    return result


def load_config(config_path: Optional[Path] = None) -> SourceProviderConfig:
    """Load and merge configuration from all sources.

    Configuration precedence (lowest to highest):
    1. Built-in defaults
    2. Project config (./sources.yaml)
    3. User config (~/.config/source-provider/sources.yaml)
    4. Explicitly provided config_path (if given)
    5. Environment variables
    6. CLI flags (handled by caller)

    Args:
        config_path: Optional explicit path to a config file

    Returns:
        Validated SourceProviderConfig instance

    Raises:
        pydantic.ValidationError: If the merged configuration is invalid
        yaml.YAMLError: If a config file contains invalid YAML
        FileNotFoundError: If config_path is provided but doesn't exist
    """
    configs_to_merge = [DEFAULT_CONFIG]

    for config_file in find_config_files():
        if config_path is not None and config_file.resolve() == config_path.resolve():
            continue
        try:
            configs_to_merge.append(load_yaml_file(config_file))
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Error loading {config_file}: {e}") from e

    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        configs_to_merge.append(load_yaml_file(config_path))

    merged_config = apply_env_overrides(merge_configs(configs_to_merge))

    return SourceProviderConfig(**merged_config)
