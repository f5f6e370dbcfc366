# Plugin Runtime Utilities Package
"""
Shared utility functions for the plugin runtime.
"""

from .helpers import load_settings, is_url, is_dev_mode

__all__ = ["load_settings", "is_url", "is_dev_mode"]
