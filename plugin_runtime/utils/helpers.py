"""
Helper utilities for the plugin runtime.

Provides common functions used across loader and search:
- Settings loading
- URL detection for icon paths
- Development mode detection
"""

import os
import sys
from pathlib import Path
from typing import Dict, Any, Optional
from urllib.parse import urlparse

import toml
from loguru import logger

from ..constants import ENV_VAR, MAX_RESULTS


def default_settings_path() -> Path:
    """Location of settings.toml under the XDG config directory."""
    config_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(config_home) / "plugin-runtime" / "settings.toml"


def load_settings(settings_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load runtime settings from TOML file.

    Args:
        settings_path: Explicit settings file. Defaults to
            default_settings_path().

    Returns:
        Dictionary containing settings with defaults applied

    Example settings structure:
        {
            "plugins": {
                "core_path": "",
                "user_path": "~/.dext/plugins"
            },
            "dispatch": {
                "max_results": 30,
                "timeout_seconds": 5.0,
                "interpreter": ""
            }
        }
    """
    # Default settings
    defaults = {
        "plugins": {
            "core_path": "",
            "user_path": str(Path.home() / ".dext" / "plugins"),
        },
        "dispatch": {
            "max_results": MAX_RESULTS,
            "timeout_seconds": 5.0,
            "interpreter": "",
        },
    }

    if settings_path is None:
        settings_path = default_settings_path()
    settings_path = Path(settings_path)

    # Load from file if it exists
    if settings_path.exists():
        try:
            loaded = toml.load(settings_path)
            settings = _deep_merge(defaults, loaded)
        except Exception as e:
            logger.warning(f"Could not load settings from {settings_path}: {e}")
            logger.warning("Using default settings")
            settings = defaults
    else:
        logger.info(f"Settings file not found at {settings_path}, using defaults")
        settings = defaults

    for key in ("core_path", "user_path"):
        if settings["plugins"].get(key):
            settings["plugins"][key] = os.path.expanduser(settings["plugins"][key])
    if not settings["dispatch"].get("interpreter"):
        settings["dispatch"]["interpreter"] = sys.executable

    return settings


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary with defaults
        override: Dictionary with overrides

    Returns:
        Merged dictionary (override takes precedence)
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def is_url(value: str) -> bool:
    """
    Check whether a string is a URL rather than a filesystem path.

    Windows drive letters ("C:\\icons") parse with a one-letter scheme
    and are not URLs.
    """
    if not isinstance(value, str):
        return False
    parsed = urlparse(value)
    if len(parsed.scheme) < 2:
        return False
    if parsed.scheme in ("data", "file"):
        return True
    return bool(parsed.netloc)


def is_dev_mode() -> bool:
    """True when the runtime is started in development mode."""
    return os.environ.get(ENV_VAR, "").lower() == "development"
