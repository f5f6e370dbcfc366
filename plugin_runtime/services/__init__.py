# Plugin Runtime Services Package
"""
Long-lived runtime services.

The registry owns the resolved plugin list shared by all queries.
"""

from .registry import PluginRegistry, get_plugin_registry

__all__ = ["PluginRegistry", "get_plugin_registry"]
