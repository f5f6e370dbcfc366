"""
Shared constants for plugin discovery and dispatch.
"""

# Advisory result-size hint passed to native plugins
MAX_RESULTS = 30

# Filesystem entries that are never plugins
METADATA_ENTRIES = frozenset({".DS_Store"})

# Plugin package manifest and the keyword that marks a theme package
MANIFEST_NAME = "package.json"
THEME_KEYWORD = "dext-theme"

# Alfred workflow descriptor
PLIST_NAME = "info.plist"
ALFRED_SCRIPT_FILTER = "alfred.workflow.input.scriptfilter"
ALFRED_OPEN_URL = "alfred.workflow.action.openurl"

DEFAULT_ACTION = "openurl"

# Set to "development" to enable deprecation notices
ENV_VAR = "PLUGIN_RUNTIME_ENV"
