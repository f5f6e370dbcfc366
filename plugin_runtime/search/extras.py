"""
Helper items and item details.

Helper items are placeholders a plugin shows before the user has typed
any query text. Details are the expanded view of a selected item,
rendered from HTML or Markdown.
"""

import inspect

from markdown_it import MarkdownIt

from ..models import Item, Plugin
from .normalizer import connect_items

_markdown = MarkdownIt()


def render_markdown(text: str) -> str:
    """Render Markdown to HTML."""
    return _markdown.render(text)


async def query_helper(plugin: Plugin, keyword: str) -> list[Item]:
    """
    Retrieve the plugin's helper item.

    Args:
        plugin: The plugin
        keyword: The keyword typed so far

    Returns:
        A single normalized helper item, or an empty list
    """
    if not plugin.helper:
        return []

    helper_item = plugin.helper
    if callable(helper_item):
        helper_item = helper_item(keyword)
    if inspect.isawaitable(helper_item):
        helper_item = await helper_item

    if helper_item is None:
        return []
    return connect_items([helper_item], plugin)


async def retrieve_item_details(item: Item, plugin: Plugin) -> str:
    """
    Render an item's details view.

    Args:
        item: The selected item
        plugin: The owning plugin

    Returns:
        The rendered HTML string
    """
    render_type = "html"
    content = ""

    details = plugin.details if plugin else None
    if details:
        if details.type:
            render_type = details.type
        if details.render:
            if callable(details.render):
                content = details.render(item)
            else:
                content = details.render

    if inspect.isawaitable(content):
        content = await content
    if content is None:
        content = ""

    content = str(content)
    if render_type == "md":
        return render_markdown(content)
    return content
