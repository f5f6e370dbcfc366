"""
Item Normalizer - Shape raw plugin items into launcher items.

Every item leaving the dispatcher carries plugin provenance, an icon path
the host can open directly, and the keyword/action it should act with.
Item-level keyword/action win; the plugin's values only fill gaps.
"""

import copy
import os
from typing import Iterable

from ..models import Item, Plugin
from ..utils.helpers import is_url


def resolve_icon_path(icon_path: str, plugin: Plugin) -> str:
    """Resolve a relative icon path against the plugin directory."""
    if is_url(icon_path) or os.path.isabs(icon_path):
        return icon_path
    return os.path.normpath(os.path.join(plugin.path, icon_path))


def connect_items(items: Iterable[Item], plugin: Plugin) -> list[Item]:
    """
    Connect a set of raw items with the plugin that produced them.

    Args:
        items: Raw item dicts
        plugin: The owning plugin

    Returns:
        New item dicts; the input is left untouched
    """
    connected = []
    for item in items:
        if not isinstance(item, dict):
            continue
        new_item = copy.deepcopy(item)

        icon = new_item.get("icon")
        if isinstance(icon, dict) and icon.get("path"):
            icon["path"] = resolve_icon_path(icon["path"], plugin)

        new_item["plugin"] = plugin.to_ref()

        if plugin.keyword and not new_item.get("keyword"):
            new_item["keyword"] = plugin.keyword
        if plugin.action and not new_item.get("action"):
            new_item["action"] = plugin.action

        connected.append(new_item)

    return connected
