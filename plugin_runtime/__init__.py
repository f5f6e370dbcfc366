# Plugin Runtime Package
"""
Plugin runtime for a desktop quick-launcher.

Stages:
  - Loader: discover plugin directories, drop themes, resolve schemas
  - Search: route queries, dispatch per schema, normalize items
  - Services: process-wide plugin registry
"""

from .errors import (
    PluginError,
    PluginInvocationError,
    PluginLoadError,
    PluginOutputError,
    PluginTimeoutError,
)
from .models import Details, Plugin, Schema

__version__ = "0.1.0-dev"

__all__ = [
    "Plugin",
    "Schema",
    "Details",
    "PluginError",
    "PluginLoadError",
    "PluginInvocationError",
    "PluginOutputError",
    "PluginTimeoutError",
]
