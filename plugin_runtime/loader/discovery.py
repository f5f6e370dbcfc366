"""
Plugin Discovery - Find plugin directories and build Plugin records.

Pipeline:
  1. list every plugin root (missing roots are empty)
  2. classify core vs. user-installed by parent directory
  3. drop theme packages
  4. resolve each plugin's schema concurrently

Discovery never raises: broken plugins degrade to "not present".
"""

import asyncio
import json
import os
from typing import Iterable, Optional

from loguru import logger

from ..constants import MANIFEST_NAME, METADATA_ENTRIES, THEME_KEYWORD
from ..models import Plugin
from .modules import ModuleCache
from .schema import apply_module_properties


def _list_directory(directory: str) -> list[str]:
    try:
        entries = os.listdir(directory)
    except OSError as e:
        logger.debug(f"Plugin directory {directory} not readable: {e}")
        return []

    return [
        os.path.abspath(os.path.join(directory, entry))
        for entry in entries
        if entry not in METADATA_ENTRIES
    ]


async def load_plugins_in_path(directory: str) -> list[str]:
    """
    List candidate plugin paths in a directory.

    Args:
        directory: A plugin root

    Returns:
        Absolute paths of the directory's children, in listing order.
        Empty if the directory is missing or unreadable.
    """
    if not directory:
        return []
    return await asyncio.to_thread(_list_directory, directory)


def is_core_plugin(path: str, user_plugin_path: Optional[str]) -> bool:
    """
    Check if a plugin is bundled with the host.

    Anything whose parent directory is not the user plugin root is core.
    """
    if not user_plugin_path:
        return True
    parent = os.path.normpath(os.path.dirname(path))
    return parent != os.path.normpath(os.path.abspath(user_plugin_path))


def is_plugin_a_theme(path: str) -> bool:
    """
    Check if the plugin is a theme.

    Reads the package manifest. A plugin without a readable manifest is
    kept. A manifest that lists no keywords, or lists the theme keyword,
    marks a theme.

    Args:
        path: A plugin directory

    Returns:
        True if it is a theme
    """
    manifest_path = os.path.join(path, MANIFEST_NAME)
    try:
        with open(manifest_path, encoding="utf-8") as f:
            manifest = json.load(f)
    except (OSError, ValueError) as e:
        logger.debug(f"No usable manifest for {path}: {e}")
        return False

    if not isinstance(manifest, dict):
        return False

    keywords = manifest.get("keywords")
    if not keywords:
        return True
    if not isinstance(keywords, list):
        logger.debug(f"Ignoring malformed keywords in manifest for {path}: {keywords!r}")
        return False
    return THEME_KEYWORD in keywords


async def load_plugins(
    directories: Iterable[str],
    user_plugin_path: Optional[str] = None,
    modules: Optional[ModuleCache] = None,
) -> list[Plugin]:
    """
    Load every plugin from the given roots and resolve their schemas.

    Args:
        directories: Plugin roots, e.g. [core_path, user_path]
        user_plugin_path: Root holding user-installed plugins
        modules: Cache native modules are loaded through

    Returns:
        Resolved Plugin records; themes and invalid plugins excluded
    """
    listings = await asyncio.gather(*(load_plugins_in_path(d) for d in directories))

    candidates = []
    for paths in listings:
        for path in paths:
            if not os.path.isdir(path):
                continue
            if await asyncio.to_thread(is_plugin_a_theme, path):
                logger.debug(f"Skipping theme {path}")
                continue
            candidates.append(Plugin(
                path=path,
                name=os.path.basename(path),
                is_core=is_core_plugin(path, user_plugin_path),
            ))

    resolved = await asyncio.gather(
        *(apply_module_properties(p, modules) for p in candidates)
    )
    plugins = [p for p in resolved if p is not None]
    logger.info(f"Loaded {len(plugins)} plugins from {len(listings)} directories")
    return plugins
