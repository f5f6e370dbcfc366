"""
Loader package - Plugin discovery and schema resolution.

Turns plugin root directories into resolved Plugin records.
"""

from .discovery import is_core_plugin, is_plugin_a_theme, load_plugins, load_plugins_in_path
from .modules import ModuleCache, clear_module_cache, load_plugin_module
from .schema import apply_module_properties

__all__ = [
    "load_plugins",
    "load_plugins_in_path",
    "is_core_plugin",
    "is_plugin_a_theme",
    "apply_module_properties",
    "load_plugin_module",
    "clear_module_cache",
    "ModuleCache",
]
