"""
Exceptions raised while loading or querying plugins.

Discovery-time problems never raise; these surface only from query-time
operations so the host can mark the failing plugin.
"""


class PluginError(Exception):
    """Base class for plugin failures. Carries the offending plugin."""

    def __init__(self, message: str, plugin=None):
        super().__init__(message)
        self.plugin = plugin


class PluginLoadError(PluginError):
    """The plugin module could not be imported."""


class PluginInvocationError(PluginError):
    """The plugin's entry point raised."""


class PluginOutputError(PluginError):
    """The plugin produced output that is not a valid items document."""


class PluginTimeoutError(PluginError):
    """The plugin did not finish before the query deadline."""
