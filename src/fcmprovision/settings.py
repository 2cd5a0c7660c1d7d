"""
Tool settings for fcmprovision.

Settings live in an optional YAML file (`fcmprovision.yaml`) in the user
config directory or at an explicit path. Every key is optional; invalid values
are logged and replaced by their defaults.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs
import yaml

from fcmprovision.constants import (
    APP_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_DEV_PACKAGE_NAME,
    DEFAULT_MAX_CONCURRENT_DOWNLOADS,
    DEFAULT_REQUEST_TIMEOUT,
)
from fcmprovision.download.interfaces import Pathish, ProjectLayout
from fcmprovision.exceptions import ConfigFileError
from fcmprovision.log_utils import logger

CONFIG_DIR = platformdirs.user_config_dir(APP_NAME)
CONFIG_FILE = os.path.join(CONFIG_DIR, CONFIG_FILE_NAME)


def load_config(config_path: Optional[Pathish] = None) -> Dict[str, Any]:
    """
    Load the fcmprovision YAML settings.

    Parameters:
        config_path (Optional[Pathish]): Explicit settings file. When omitted, CONFIG_FILE is used.

    Returns:
        Dict[str, Any]: The parsed settings; empty when no file exists at the default location.

    Raises:
        ConfigFileError: If an explicit file is missing, or any file is unreadable,
            not valid YAML or not a mapping.
    """
    explicit = config_path is not None
    path = Path(config_path) if explicit else Path(CONFIG_FILE)

    if not path.exists():
        if explicit:
            raise ConfigFileError(f"Configuration file not found: {path}")
        logger.debug(f"No configuration file at {path}, using defaults")
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigFileError(f"Failed to load configuration from {path}", str(e)) from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigFileError(
            f"Configuration in {path} must be a mapping, got {type(config).__name__}"
        )
    logger.debug(f"Loaded configuration from {path}")
    return config


def get_request_timeout(config: Dict[str, Any]) -> float:
    """
    Return the per-request timeout in seconds.

    Reads REQUEST_TIMEOUT, uses DEFAULT_REQUEST_TIMEOUT when missing or invalid,
    and treats values <= 0 as invalid.
    """
    raw_value = config.get("REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT)
    try:
        parsed_value = float(raw_value)
    except (TypeError, ValueError):
        logger.warning(
            "Invalid REQUEST_TIMEOUT value %r; using default %d",
            raw_value,
            DEFAULT_REQUEST_TIMEOUT,
        )
        return float(DEFAULT_REQUEST_TIMEOUT)

    if parsed_value <= 0:
        logger.warning(
            "REQUEST_TIMEOUT must be > 0; using default %d", DEFAULT_REQUEST_TIMEOUT
        )
        return float(DEFAULT_REQUEST_TIMEOUT)
    return parsed_value


def get_max_concurrent(config: Dict[str, Any]) -> int:
    """
    Determine the configured maximum number of concurrent downloads.

    Returns:
        int: MAX_CONCURRENT_DOWNLOADS as an int, the default when invalid, and at least 1.
    """
    raw_value = config.get("MAX_CONCURRENT_DOWNLOADS", DEFAULT_MAX_CONCURRENT_DOWNLOADS)
    try:
        parsed_value = int(raw_value)
    except (TypeError, ValueError):
        logger.warning(
            "Invalid MAX_CONCURRENT_DOWNLOADS value %r; using default of %d",
            raw_value,
            DEFAULT_MAX_CONCURRENT_DOWNLOADS,
        )
        return DEFAULT_MAX_CONCURRENT_DOWNLOADS

    if parsed_value <= 0:
        logger.warning(
            "MAX_CONCURRENT_DOWNLOADS must be >= 1; clamping %d to 1", parsed_value
        )
        return 1
    return parsed_value


def get_dev_package_name(config: Dict[str, Any]) -> str:
    value = config.get("DEV_PACKAGE_NAME")
    if not value or not isinstance(value, str):
        return DEFAULT_DEV_PACKAGE_NAME
    return value.strip() or DEFAULT_DEV_PACKAGE_NAME


def _optional_path(config: Dict[str, Any], key: str, base: Path) -> Optional[Path]:
    value = config.get(key)
    if not value:
        return None
    path = Path(os.path.expanduser(str(value)))
    return path if path.is_absolute() else base / path


def build_project_layout(config: Dict[str, Any], project_root: Pathish) -> ProjectLayout:
    """
    Build the ProjectLayout for `project_root` from EXTENSION_DIR, TEMPLATES_DIR and DOWNLOAD_DIR.

    Relative paths in the settings are resolved against the project root.
    """
    root = Path(project_root).resolve()
    return ProjectLayout(
        project_root=root,
        extension_dir=_optional_path(config, "EXTENSION_DIR", root),
        templates_dir=_optional_path(config, "TEMPLATES_DIR", root),
        download_dir=_optional_path(config, "DOWNLOAD_DIR", root),
    )
