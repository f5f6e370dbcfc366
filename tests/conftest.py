"""
Shared test fixtures for the plugin runtime test suite.

Builds real plugin directories under tmp_path: native modules, Alfred
workflows run as real child processes, and theme packages (no mocking of
the filesystem or of subprocesses).
"""

import json
import plistlib
import textwrap
from pathlib import Path

import pytest
import toml

from plugin_runtime.loader.modules import clear_module_cache
from plugin_runtime.search import dispatcher


@pytest.fixture(autouse=True)
def _fresh_module_cache():
    """Every test imports plugin modules from scratch."""
    clear_module_cache()
    dispatcher._deprecation_warned.clear()
    yield
    clear_module_cache()


@pytest.fixture
def plugin_roots(tmp_path):
    """Core and user plugin roots."""
    core = tmp_path / "core"
    user = tmp_path / "user"
    core.mkdir()
    user.mkdir()
    return core, user


@pytest.fixture
def make_native_plugin(tmp_path):
    """Factory writing a native plugin package with the given source."""

    def _make(name: str, source: str, root: Path = None, manifest: dict = None) -> Path:
        plugin_dir = (root or tmp_path) / name
        plugin_dir.mkdir(parents=True)
        (plugin_dir / "__init__.py").write_text(textwrap.dedent(source))
        if manifest is not None:
            (plugin_dir / "package.json").write_text(json.dumps(manifest))
        return plugin_dir

    return _make


@pytest.fixture
def make_workflow_plugin(tmp_path):
    """
    Factory writing an Alfred workflow plugin.

    The descriptor gets a script filter with the given keyword and an
    optional open-url action. The script is the plugin's __main__.py.
    """

    def _make(
        name: str,
        script: str,
        keyword: str = "wf",
        open_url: bool = True,
        root: Path = None,
    ) -> Path:
        plugin_dir = (root or tmp_path) / name
        plugin_dir.mkdir(parents=True)
        objects = [{
            "type": "alfred.workflow.input.scriptfilter",
            "config": {"keyword": keyword, "script": "python3 ."},
        }]
        if open_url:
            objects.append({"type": "alfred.workflow.action.openurl", "config": {}})
        (plugin_dir / "info.plist").write_bytes(plistlib.dumps({"objects": objects}))
        (plugin_dir / "__main__.py").write_text(textwrap.dedent(script))
        return plugin_dir

    return _make


@pytest.fixture
def tmp_settings(tmp_path):
    """Create a real settings TOML file with all sections."""
    settings_path = tmp_path / "settings.toml"
    data = {
        "plugins": {"core_path": str(tmp_path / "core"), "user_path": str(tmp_path / "user")},
        "dispatch": {"max_results": 10, "timeout_seconds": 2.5},
    }
    settings_path.write_text(toml.dumps(data))
    return settings_path
