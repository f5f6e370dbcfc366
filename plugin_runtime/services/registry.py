"""
Plugin Registry - Process-wide list of resolved plugins.

The registry is built once at startup and read by every query. A refresh
rebuilds the whole list off to the side and swaps it in with a single
assignment, so in-flight queries keep the snapshot they started with.
"""

import asyncio
from typing import Any, Dict, Optional

from loguru import logger

from ..loader.discovery import load_plugins
from ..loader.modules import ModuleCache
from ..models import Plugin
from ..search.router import PluginRouter
from ..utils.helpers import load_settings


class PluginRegistry:
    """
    Holds the resolved plugin snapshot.

    Methods:
        load(): Build the snapshot if it has not been built yet
        refresh(): Rebuild and atomically replace the snapshot
        get(name): Look up a plugin by name
        router(): PluginRouter over the current snapshot
    """

    def __init__(self, settings: Optional[Dict[str, Any]] = None):
        self.settings = settings if settings is not None else load_settings()
        self._plugins: tuple[Plugin, ...] = ()
        self._modules = ModuleCache()
        self._loaded = False
        self._lock = asyncio.Lock()

    @property
    def plugins(self) -> tuple[Plugin, ...]:
        """Current immutable snapshot."""
        return self._plugins

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def directories(self) -> list[str]:
        paths = self.settings["plugins"]
        return [d for d in (paths.get("core_path"), paths.get("user_path")) if d]

    async def _build(self, modules: ModuleCache) -> tuple[Plugin, ...]:
        plugins = await load_plugins(
            self.directories,
            user_plugin_path=self.settings["plugins"].get("user_path"),
            modules=modules,
        )
        return tuple(plugins)

    async def load(self) -> tuple[Plugin, ...]:
        """Build the snapshot once. Later calls return it unchanged."""
        async with self._lock:
            if not self._loaded:
                self._plugins = await self._build(self._modules)
                self._loaded = True
        return self._plugins

    async def refresh(self) -> tuple[Plugin, ...]:
        """
        Re-discover every plugin and replace the snapshot.

        Plugin modules are re-imported into a fresh cache so code changes
        take effect. Routers built from the previous snapshot keep the
        modules they were resolved against.
        """
        async with self._lock:
            modules = ModuleCache()
            plugins = await self._build(modules)
            previous = self._modules
            self._plugins, self._modules = plugins, modules
            self._loaded = True
            previous.release()
        logger.debug(f"Plugin registry refreshed with {len(plugins)} plugins")
        return plugins

    def get(self, name: str) -> Optional[Plugin]:
        for plugin in self._plugins:
            if plugin.name == name:
                return plugin
        return None

    def router(self) -> PluginRouter:
        """Router bound to the snapshot current at call time."""
        dispatch = self.settings["dispatch"]
        return PluginRouter(
            self._plugins,
            timeout=dispatch.get("timeout_seconds"),
            max_results=dispatch.get("max_results"),
            interpreter=dispatch.get("interpreter") or None,
            modules=self._modules,
        )


# Singleton accessor
_registry_instance = None


def get_plugin_registry() -> PluginRegistry:
    """
    Get the singleton PluginRegistry instance.

    Returns:
        PluginRegistry: The global instance
    """
    global _registry_instance
    if _registry_instance is None:
        _registry_instance = PluginRegistry()
    return _registry_instance
