"""
Configuration loading for crosswalk-android.

Configuration lives in a YAML file under the platformdirs user config directory.
Values are plain upper-case keys in a dict, merged over the defaults returned by
`default_config()`.
"""

import os
import tempfile
from typing import Any, Dict, Optional

import platformdirs
import yaml

from crosswalk_android.constants import (
    APP_NAME,
    CHANNELS,
    CONFIG_FILE_NAME,
    DEFAULT_CHANNEL,
    DOWNLOADS_DIR_NAME,
    RELEASE_SERVER_URL,
)
from crosswalk_android.exceptions import ConfigFileError, ConfigurationError
from crosswalk_android.log_utils import logger


def get_config_dir() -> str:
    """Return the platformdirs-managed configuration directory."""
    return platformdirs.user_config_dir(APP_NAME)


def get_config_file() -> str:
    """Return the default configuration file path."""
    return os.path.join(get_config_dir(), CONFIG_FILE_NAME)


def get_default_download_dir() -> str:
    """Return the directory where downloaded release archives are kept."""
    return os.path.join(platformdirs.user_cache_dir(APP_NAME), DOWNLOADS_DIR_NAME)


def default_config() -> Dict[str, Any]:
    """
    Build the default configuration mapping.

    Returns:
        dict: Defaults for every recognized key. Optional keys default to None.
    """
    return {
        "CHANNEL": DEFAULT_CHANNEL,
        "RELEASE_SERVER_URL": RELEASE_SERVER_URL,
        "DOWNLOAD_DIR": get_default_download_dir(),
        "ANDROID_SDK_ROOT": None,
        "ANT_PATH": None,
        "PACKAGE_DIR": None,
        "LOG_LEVEL": None,
        "LOG_DIR": None,
    }


def validate_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a merged configuration mapping.

    Raises:
        ConfigurationError: If the channel is unknown or the server URL is empty.
    """
    channel = config.get("CHANNEL")
    if channel not in CHANNELS:
        raise ConfigurationError(
            f"Unknown release channel '{channel}'",
            details=f"expected one of {', '.join(CHANNELS)}",
        )

    server_url = config.get("RELEASE_SERVER_URL")
    if not isinstance(server_url, str) or not server_url.strip():
        raise ConfigurationError("RELEASE_SERVER_URL must be a non-empty string")

    return config


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the YAML configuration and merge it over the defaults.

    Parameters:
        config_path (str | None): Explicit file to load; defaults to the platformdirs location.

    Returns:
        dict: The merged and validated configuration. A missing file yields the defaults.

    Raises:
        ConfigFileError: If the file exists but cannot be read or parsed.
        ConfigurationError: If the document is not a mapping or fails validation.
    """
    path = config_path or get_config_file()
    config = default_config()

    if not os.path.exists(path):
        logger.debug("No configuration file at %s; using defaults", path)
        return validate_config(config)

    try:
        with open(path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigFileError(f"Failed to load configuration {path}", str(e)) from e

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise ConfigurationError(
            f"Configuration {path} must be a mapping",
            details=f"got {type(loaded).__name__}",
        )

    for key, value in loaded.items():
        if key not in config:
            logger.warning("Ignoring unknown configuration key: %s", key)
            continue
        config[key] = value

    logger.debug("Loaded configuration from %s", path)
    return validate_config(config)


def save_config(config: Dict[str, Any], config_path: Optional[str] = None) -> str:
    """
    Atomically write the configuration mapping as YAML.

    Keys whose value is None are omitted.

    Returns:
        str: The path that was written.

    Raises:
        ConfigFileError: If the file cannot be written.
    """
    path = config_path or get_config_file()
    data = {key: value for key, value in config.items() if value is not None}

    try:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        temp_fd, temp_path = tempfile.mkstemp(
            dir=os.path.dirname(path) or ".", prefix="tmp-", suffix=".yaml"
        )
    except OSError as e:
        raise ConfigFileError(f"Could not write configuration {path}", str(e)) from e

    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=True)
        os.replace(temp_path, path)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigFileError(f"Could not write configuration {path}", str(e)) from e
    finally:
        if os.path.exists(temp_path):
            try:
                os.remove(temp_path)
            except OSError:
                pass

    logger.debug("Saved configuration to %s", path)
    return path
