"""
Query Router - Dispatches search queries to the plugins that handle them.

A plugin with a keyword handles queries whose first token is that
keyword; it receives the remaining tokens. Plugins without a keyword are
default handlers and receive every query that no keyword claims.
"""

import asyncio
from typing import Iterable, Optional

from loguru import logger

from ..constants import MAX_RESULTS
from ..loader.modules import ModuleCache
from ..models import Item, Plugin
from .dispatcher import QueryOutcome, query_all
from .extras import query_helper


class PluginRouter:
    """Routes query tokens to matching plugins and aggregates results."""

    def __init__(
        self,
        plugins: Iterable[Plugin],
        timeout: Optional[float] = None,
        max_results: int = MAX_RESULTS,
        interpreter: Optional[str] = None,
        modules: Optional[ModuleCache] = None,
    ):
        self._plugins: tuple[Plugin, ...] = tuple(plugins)
        self.timeout = timeout
        self.max_results = max_results
        self.interpreter = interpreter
        self.modules = modules

    @property
    def plugins(self) -> tuple[Plugin, ...]:
        return self._plugins

    def match(self, args: list[str]) -> list[tuple[Plugin, list[str]]]:
        """
        Find the plugins that should handle a query.

        Args:
            args: Query tokens

        Returns:
            (plugin, args-for-plugin) pairs. Empty for an empty query.
        """
        if not args or not any(a.strip() for a in args):
            return []

        head = args[0].strip().lower()
        keyed = [p for p in self._plugins if p.keyword and p.keyword.lower() == head]
        if keyed:
            return [(p, list(args[1:])) for p in keyed]

        return [(p, list(args)) for p in self._plugins if not p.keyword]

    async def route(self, args: list[str]) -> list[QueryOutcome]:
        """
        Query every matching plugin concurrently.

        Returns:
            One QueryOutcome per matched plugin.
        """
        matches = self.match(args)
        if not matches:
            return []
        return await query_all(
            matches,
            timeout=self.timeout,
            max_results=self.max_results,
            interpreter=self.interpreter,
            modules=self.modules,
        )

    async def helpers(self, keyword: str = "") -> list[Item]:
        """
        Collect helper items for plugins activated by a keyword.

        With an empty keyword every plugin with a helper offers it, default
        handlers included, so the host can list what is available before
        anything is typed.
        """
        head = keyword.strip().lower()
        plugins = [
            p for p in self._plugins
            if p.helper and (not head or (p.keyword and p.keyword.lower() == head))
        ]
        results = await asyncio.gather(
            *(query_helper(p, keyword) for p in plugins),
            return_exceptions=True,
        )

        items = []
        for plugin, result in zip(plugins, results):
            if isinstance(result, BaseException):
                logger.opt(exception=result).warning(f"Helper failed for {plugin.name}")
                continue
            items.extend(result)
        return items
