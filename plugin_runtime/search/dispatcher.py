"""
Query Dispatcher - Invoke plugins and collect their items.

Two protocols, selected by Plugin.schema:
  dext   -> import the plugin module and call query()/execute()
  alfred -> run the plugin directory as a child process and parse the
            single JSON document it prints

Every invocation is bounded by a deadline. A timed-out child process is
killed; a timed-out native call is abandoned and its result discarded.
"""

import asyncio
import inspect
import json
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Iterable, Optional

from loguru import logger

from ..constants import MAX_RESULTS
from ..errors import (
    PluginError,
    PluginInvocationError,
    PluginOutputError,
    PluginTimeoutError,
)
from ..loader.modules import ModuleCache, load_plugin_module
from ..models import Item, Plugin, Schema
from ..utils.helpers import is_dev_mode
from .normalizer import connect_items

# Plugins already warned about the deprecated execute() entry point
_deprecation_warned: set[str] = set()


@dataclass
class QueryOutcome:
    """Result of querying one plugin during a fan-out."""
    plugin: Plugin
    items: list[Item] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _extract_items(output, plugin: Plugin) -> list:
    """Pull the items list out of a plugin's result document."""
    if not output:
        return []
    if isinstance(output, Mapping):
        items = output.get("items")
    else:
        items = getattr(output, "items", None)
    if not isinstance(items, list):
        raise PluginOutputError(
            f"Plugin {plugin.name} returned a result without an items list",
            plugin,
        )
    return items


async def _query_workflow(plugin: Plugin, args: list[str], interpreter: str, **_) -> list[Item]:
    """Run an Alfred workflow plugin as a child process."""
    process = await asyncio.create_subprocess_exec(
        interpreter, plugin.path, *args,
        cwd=plugin.path,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await process.communicate()
    except asyncio.CancelledError:
        if process.returncode is None:
            process.kill()
            await process.wait()
        raise

    if stderr:
        logger.debug(f"{plugin.name} stderr: {stderr.decode('utf-8', errors='replace').strip()}")

    message = stdout.decode("utf-8", errors="replace")
    if not message.strip():
        logger.debug(f"{plugin.name} exited ({process.returncode}) without output")
        return []

    try:
        output = json.loads(message)
    except json.JSONDecodeError as e:
        raise PluginOutputError(f"Plugin {plugin.name} printed invalid JSON: {e}", plugin) from e

    return connect_items(_extract_items(output, plugin), plugin)


async def _query_native(
    plugin: Plugin,
    args: list[str],
    max_results: int,
    modules: Optional[ModuleCache] = None,
    **_,
) -> list[Item]:
    """Call a native plugin's query()/execute() entry point."""
    module = await asyncio.to_thread(load_plugin_module, plugin.path, modules)

    # query() is the current API; execute() is the legacy name
    if hasattr(module, "query"):
        command = module.query
    elif hasattr(module, "execute"):
        command = module.execute
        if is_dev_mode() and plugin.path not in _deprecation_warned:
            _deprecation_warned.add(plugin.path)
            logger.warning(
                f"Plugin {plugin.name} uses the deprecated execute() entry point. "
                "Rename it to query()."
            )
    else:
        command = None

    text = " ".join(args)
    try:
        if callable(command):
            output = await asyncio.to_thread(command, text, {"size": max_results})
        else:
            output = command
        if inspect.isawaitable(output):
            output = await output
    except Exception as e:
        raise PluginInvocationError(f"Plugin {plugin.name} failed: {e}", plugin) from e

    return connect_items(_extract_items(output, plugin), plugin)


_HANDLERS = {
    Schema.DEXT: _query_native,
    Schema.ALFRED: _query_workflow,
}


async def query_results(
    plugin: Plugin,
    args: Iterable[str],
    *,
    timeout: Optional[float] = None,
    max_results: int = MAX_RESULTS,
    interpreter: Optional[str] = None,
    modules: Optional[ModuleCache] = None,
) -> list[Item]:
    """
    Query a single plugin.

    Args:
        plugin: Resolved plugin
        args: Query tokens
        timeout: Deadline in seconds, None to wait forever
        max_results: Advisory result-size hint for native plugins
        interpreter: Executable used to run workflow plugins
        modules: Cache native modules are loaded through

    Returns:
        Normalized items

    Raises:
        PluginError: Load, invocation, output or timeout failure
    """
    handler = _HANDLERS[Schema(plugin.schema)]
    call = handler(
        plugin,
        list(args),
        max_results=max_results,
        interpreter=interpreter or sys.executable,
        modules=modules,
    )
    try:
        return await asyncio.wait_for(call, timeout)
    except asyncio.TimeoutError as e:
        raise PluginTimeoutError(
            f"Plugin {plugin.name} did not respond within {timeout}s", plugin
        ) from e


async def query_all(
    requests: Iterable[tuple[Plugin, list[str]]],
    **kwargs,
) -> list[QueryOutcome]:
    """
    Query several plugins concurrently.

    Args:
        requests: (plugin, args) pairs
        **kwargs: Forwarded to query_results()

    Returns:
        One QueryOutcome per request. A failing plugin reports its error
        in the outcome and never affects the others.
    """
    requests = list(requests)
    results = await asyncio.gather(
        *(query_results(plugin, args, **kwargs) for plugin, args in requests),
        return_exceptions=True,
    )

    outcomes = []
    for (plugin, _args), result in zip(requests, results):
        if isinstance(result, BaseException):
            if isinstance(result, PluginError):
                logger.warning(f"Query failed for {plugin.name}: {result}")
            else:
                logger.opt(exception=result).error(f"Unexpected failure querying {plugin.name}")
            outcomes.append(QueryOutcome(plugin=plugin, error=result))
        else:
            outcomes.append(QueryOutcome(plugin=plugin, items=result))
    return outcomes
