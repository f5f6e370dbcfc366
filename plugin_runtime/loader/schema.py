"""
Schema Resolver - Decide how each plugin is invoked.

Plugins shipping a readable info.plist are Alfred workflows and run as
child processes. Everything else is a native module whose exported
attributes supply keyword, action, helper and details.
"""

import asyncio
import dataclasses
import os
import plistlib
from typing import Optional
from xml.parsers.expat import ExpatError

from loguru import logger

from ..constants import ALFRED_OPEN_URL, ALFRED_SCRIPT_FILTER, PLIST_NAME
from ..errors import PluginLoadError
from ..models import Details, Plugin, Schema
from .modules import ModuleCache, load_plugin_module


def parse_workflow_plist(data: bytes) -> dict:
    """
    Extract invocation metadata from an Alfred workflow descriptor.

    Args:
        data: Raw info.plist contents (XML or binary)

    Returns:
        {"keyword": str, "action": str}

    Raises:
        ValueError: The document is not a valid plist, or its objects
            are not shaped like a workflow descriptor
    """
    try:
        document = plistlib.loads(data)
    except (ExpatError, ValueError, TypeError, KeyError) as e:
        raise ValueError(f"Invalid plist: {e}") from e

    keyword = ""
    action = ""
    objects = document.get("objects", []) if isinstance(document, dict) else []
    if not isinstance(objects, list):
        raise ValueError(f"Expected an objects list, got {type(objects).__name__}")
    for obj in objects:
        if not isinstance(obj, dict):
            continue
        kind = obj.get("type")
        if kind == ALFRED_SCRIPT_FILTER:
            config = obj.get("config") or {}
            if not isinstance(config, dict):
                raise ValueError(f"Expected a script filter config dict, got {type(config).__name__}")
            keyword = config.get("keyword", "") or ""
            if not isinstance(keyword, str):
                raise ValueError(f"Expected a string keyword, got {type(keyword).__name__}")
        elif kind == ALFRED_OPEN_URL:
            action = "openurl"

    return {"keyword": keyword, "action": action}


def _read_file(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


async def _resolve_native(plugin: Plugin, modules: Optional[ModuleCache]) -> Optional[Plugin]:
    try:
        module = await asyncio.to_thread(load_plugin_module, plugin.path, modules)
    except PluginLoadError as e:
        logger.warning(f"Excluding plugin {plugin.name}: {e}")
        return None

    keyword = getattr(module, "keyword", plugin.keyword) or ""
    action = getattr(module, "action", plugin.action) or ""
    if not isinstance(keyword, str) or not isinstance(action, str):
        logger.warning(
            f"Excluding plugin {plugin.name}: keyword and action must be strings, "
            f"got {type(keyword).__name__} and {type(action).__name__}"
        )
        return None

    return dataclasses.replace(
        plugin,
        schema=Schema.DEXT,
        keyword=keyword,
        action=action,
        helper=getattr(module, "helper", None),
        details=Details.from_export(getattr(module, "details", None)),
    )


async def apply_module_properties(
    plugin: Plugin,
    modules: Optional[ModuleCache] = None,
) -> Optional[Plugin]:
    """
    Resolve a plugin's schema and invocation metadata.

    Args:
        plugin: Plugin with pre-resolution defaults
        modules: Cache native modules are loaded through

    Returns:
        A resolved copy of the plugin. The plugin unchanged if its
        descriptor cannot be read or parsed. None if it is a native
        plugin whose module does not load or exports a non-string
        keyword or action.
    """
    plist_path = os.path.join(plugin.path, PLIST_NAME)

    if not os.access(plist_path, os.R_OK):
        return await _resolve_native(plugin, modules)

    try:
        data = await asyncio.to_thread(_read_file, plist_path)
        metadata = parse_workflow_plist(data)
    except (OSError, ValueError) as e:
        logger.debug(f"Could not use {plist_path}, keeping defaults: {e}")
        return plugin

    return dataclasses.replace(
        plugin,
        schema=Schema.ALFRED,
        keyword=metadata["keyword"],
        action=metadata["action"],
    )
