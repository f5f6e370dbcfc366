"""
Native plugin module loading.

A native plugin is a package directory; its __init__.py is imported under
a private module name so plugins with clashing directory names coexist.
Loaded modules live in a ModuleCache keyed by plugin path. Each cache has
its own generation in the module names, so a registry refresh can import
fresh copies into a new cache while queries on the old snapshot keep
using the old one.
"""

import hashlib
import importlib.util
import itertools
import os
import sys
import threading
from types import ModuleType
from typing import Optional

from loguru import logger

from ..errors import PluginLoadError

MODULE_PREFIX = "plugin_runtime_plugins"

_generations = itertools.count()


class ModuleCache:
    """
    Imported plugin modules, keyed by plugin path.

    Imports of different plugins run in parallel; only concurrent loads of
    the same plugin wait for each other.
    """

    def __init__(self):
        self.generation = next(_generations)
        self._modules: dict[str, ModuleType] = {}
        self._path_locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def module_name(self, plugin_path: str) -> str:
        digest = hashlib.sha1(plugin_path.encode("utf-8")).hexdigest()[:10]
        stem = "".join(c if c.isalnum() else "_" for c in os.path.basename(plugin_path))
        return f"{MODULE_PREFIX}_{stem}_{digest}_{self.generation}"

    def load(self, plugin_path: str) -> ModuleType:
        """
        Import (or fetch from cache) the module of a native plugin.

        Args:
            plugin_path: Absolute plugin directory

        Returns:
            The imported module

        Raises:
            PluginLoadError: No __init__.py, or the module raised on import
        """
        with self._lock:
            cached = self._modules.get(plugin_path)
            if cached is not None:
                return cached
            path_lock = self._path_locks.setdefault(plugin_path, threading.Lock())

        with path_lock:
            with self._lock:
                cached = self._modules.get(plugin_path)
            if cached is not None:
                return cached

            module = self._import(plugin_path)

            with self._lock:
                self._modules[plugin_path] = module
            return module

    def _import(self, plugin_path: str) -> ModuleType:
        entry = os.path.join(plugin_path, "__init__.py")
        if not os.path.isfile(entry):
            raise PluginLoadError(f"No module entry point at {entry}")

        module_name = self.module_name(plugin_path)
        spec = importlib.util.spec_from_file_location(
            module_name, entry, submodule_search_locations=[plugin_path]
        )
        if spec is None or spec.loader is None:
            raise PluginLoadError(f"Cannot build import spec for {entry}")

        module = importlib.util.module_from_spec(spec)
        # Register before exec so the plugin's relative imports resolve
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(module_name, None)
            raise PluginLoadError(f"Failed to import plugin at {plugin_path}: {e}") from e

        logger.debug(f"Loaded plugin module {module_name} from {plugin_path}")
        return module

    def release(self) -> None:
        """
        Unregister this cache's modules from sys.modules.

        Modules already handed out, and still held by this cache, keep
        working for callers that reference the cache.
        """
        with self._lock:
            paths = list(self._modules)
        for plugin_path in paths:
            name = self.module_name(plugin_path)
            for key in [k for k in sys.modules if k == name or k.startswith(name + ".")]:
                del sys.modules[key]

    def clear(self) -> None:
        """Forget every loaded module so the next load re-imports it."""
        self.release()
        with self._lock:
            self._modules.clear()
            self._path_locks.clear()


_default_cache = ModuleCache()


def load_plugin_module(plugin_path: str, cache: Optional[ModuleCache] = None) -> ModuleType:
    """Load a plugin module through `cache`, or the process-wide cache."""
    return (cache or _default_cache).load(plugin_path)


def clear_module_cache() -> None:
    """Forget every module loaded through the process-wide cache."""
    _default_cache.clear()
