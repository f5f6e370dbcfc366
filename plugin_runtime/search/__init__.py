"""
Search package - Query routing and plugin dispatch.

Queries are routed to matching plugins by keyword, dispatched per plugin
schema (native module or workflow child process), and normalized into
one item model.
"""

from .dispatcher import QueryOutcome, query_all, query_results
from .extras import query_helper, retrieve_item_details
from .normalizer import connect_items
from .router import PluginRouter

__all__ = [
    "PluginRouter",
    "QueryOutcome",
    "query_results",
    "query_all",
    "connect_items",
    "query_helper",
    "retrieve_item_details",
]
