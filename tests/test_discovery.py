"""
Tests for plugin discovery and the theme/core filter.

Uses real directories and manifests under tmp_path.
"""

import json
import os

import pytest

from plugin_runtime.loader.discovery import (
    is_core_plugin,
    is_plugin_a_theme,
    load_plugins,
    load_plugins_in_path,
)
from plugin_runtime.models import Schema


class TestLoadPluginsInPath:
    """Test listing plugin candidates."""

    @pytest.mark.asyncio
    async def test_lists_absolute_child_paths(self, tmp_path):
        (tmp_path / "alpha").mkdir()
        (tmp_path / "beta").mkdir()
        paths = await load_plugins_in_path(str(tmp_path))
        assert sorted(paths) == [str(tmp_path / "alpha"), str(tmp_path / "beta")]
        assert all(os.path.isabs(p) for p in paths)

    @pytest.mark.asyncio
    async def test_skips_ds_store_anywhere(self, tmp_path):
        for name in ("a", ".DS_Store", "z"):
            (tmp_path / name).mkdir()
        paths = await load_plugins_in_path(str(tmp_path))
        assert not any(os.path.basename(p) == ".DS_Store" for p in paths)
        assert len(paths) == 2

    @pytest.mark.asyncio
    async def test_missing_directory_is_empty(self, tmp_path):
        assert await load_plugins_in_path(str(tmp_path / "nope")) == []

    @pytest.mark.asyncio
    async def test_file_instead_of_directory_is_empty(self, tmp_path):
        not_a_dir = tmp_path / "file.txt"
        not_a_dir.write_text("x")
        assert await load_plugins_in_path(str(not_a_dir)) == []


class TestIsCorePlugin:
    """Core classification is decided by the parent directory."""

    def test_user_plugin_is_not_core(self, tmp_path):
        assert is_core_plugin(str(tmp_path / "user" / "foo"), str(tmp_path / "user")) is False

    def test_other_root_is_core(self, tmp_path):
        assert is_core_plugin(str(tmp_path / "core" / "foo"), str(tmp_path / "user")) is True

    def test_trailing_slash_on_user_root(self, tmp_path):
        user_root = str(tmp_path / "user") + os.sep
        assert is_core_plugin(str(tmp_path / "user" / "foo"), user_root) is False

    def test_nested_under_user_root_is_core(self, tmp_path):
        """Only immediate children of the user root are user plugins."""
        path = str(tmp_path / "user" / "nested" / "foo")
        assert is_core_plugin(path, str(tmp_path / "user")) is True


class TestIsPluginATheme:
    """Theme detection from the package manifest."""

    def _write_manifest(self, path, data):
        path.mkdir()
        (path / "package.json").write_text(json.dumps(data))

    def test_theme_keyword_marks_theme(self, tmp_path):
        self._write_manifest(tmp_path / "t", {"keywords": ["dext-theme", "dark"]})
        assert is_plugin_a_theme(str(tmp_path / "t")) is True

    def test_other_keywords_are_not_theme(self, tmp_path):
        self._write_manifest(tmp_path / "p", {"keywords": ["dext-plugin"]})
        assert is_plugin_a_theme(str(tmp_path / "p")) is False

    def test_manifest_without_keywords_is_theme(self, tmp_path):
        self._write_manifest(tmp_path / "p", {"name": "p"})
        assert is_plugin_a_theme(str(tmp_path / "p")) is True

    def test_missing_manifest_is_not_theme(self, tmp_path):
        (tmp_path / "p").mkdir()
        assert is_plugin_a_theme(str(tmp_path / "p")) is False

    def test_corrupt_manifest_is_not_theme(self, tmp_path):
        (tmp_path / "p").mkdir()
        (tmp_path / "p" / "package.json").write_text("{not json")
        assert is_plugin_a_theme(str(tmp_path / "p")) is False

    def test_non_list_keywords_is_not_theme(self, tmp_path):
        self._write_manifest(tmp_path / "p", {"keywords": 5})
        assert is_plugin_a_theme(str(tmp_path / "p")) is False

    def test_keywords_mapping_is_not_theme(self, tmp_path):
        self._write_manifest(tmp_path / "p", {"keywords": {"dext-theme": True}})
        assert is_plugin_a_theme(str(tmp_path / "p")) is False


class TestLoadPlugins:
    """End-to-end discovery, filtering and schema resolution."""

    @pytest.mark.asyncio
    async def test_themes_never_loaded(self, plugin_roots, make_native_plugin):
        core, user = plugin_roots
        make_native_plugin("good", "keyword = 'g'\n", root=user)
        make_native_plugin(
            "theme", "keyword = 't'\n", root=user, manifest={"keywords": ["dext-theme"]}
        )
        plugins = await load_plugins([str(core), str(user)], user_plugin_path=str(user))
        assert [p.name for p in plugins] == ["good"]

    @pytest.mark.asyncio
    async def test_unions_roots_and_classifies(self, plugin_roots, make_native_plugin):
        core, user = plugin_roots
        make_native_plugin("bundled", "keyword = 'b'\n", root=core)
        make_native_plugin("installed", "keyword = 'i'\n", root=user)
        plugins = await load_plugins([str(core), str(user)], user_plugin_path=str(user))
        by_name = {p.name: p for p in plugins}
        assert by_name["bundled"].is_core is True
        assert by_name["installed"].is_core is False

    @pytest.mark.asyncio
    async def test_broken_module_is_excluded(self, plugin_roots, make_native_plugin):
        core, user = plugin_roots
        make_native_plugin("broken", "raise RuntimeError('boom')\n", root=user)
        make_native_plugin("fine", "keyword = 'f'\n", root=user)
        plugins = await load_plugins([str(user)], user_plugin_path=str(user))
        assert [p.name for p in plugins] == ["fine"]

    @pytest.mark.asyncio
    async def test_directory_without_module_or_plist_is_excluded(self, plugin_roots):
        core, user = plugin_roots
        (user / "empty").mkdir()
        plugins = await load_plugins([str(user)], user_plugin_path=str(user))
        assert plugins == []

    @pytest.mark.asyncio
    async def test_mixed_schemas(self, plugin_roots, make_native_plugin, make_workflow_plugin):
        core, user = plugin_roots
        make_native_plugin("native", "keyword = 'n'\n", root=core)
        make_workflow_plugin("legacy", "print('{}')\n", keyword="lg", root=user)
        plugins = await load_plugins([str(core), str(user)], user_plugin_path=str(user))
        schemas = {p.name: p.schema for p in plugins}
        assert schemas == {"native": Schema.DEXT, "legacy": Schema.ALFRED}

    @pytest.mark.asyncio
    async def test_missing_roots_yield_nothing(self, tmp_path):
        plugins = await load_plugins([str(tmp_path / "a"), str(tmp_path / "b")])
        assert plugins == []

    @pytest.mark.asyncio
    async def test_malformed_manifest_keywords_keep_plugin(self, plugin_roots, make_native_plugin):
        core, user = plugin_roots
        make_native_plugin("odd", "keyword = 'o'\n", root=user, manifest={"keywords": 5})
        make_native_plugin("fine", "keyword = 'f'\n", root=user)
        plugins = await load_plugins([str(user)], user_plugin_path=str(user))
        assert sorted(p.name for p in plugins) == ["fine", "odd"]
