from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import List

import pytest

from knife_core.core.discovery import Discovery, FullScanDiscovery, ManifestDiscovery
from knife_core.core.errors import KnifeError, SubcommandLoadError
from knife_core.core.manifest import MANIFEST_KEY, PLUGIN_CATEGORIES_KEY, PLUGIN_PATHS_KEY, ManifestCache
from knife_core.core.registry import CommandRegistry
from knife_core.core.subcommand_loader import SubcommandLoader, _module_name_for


class CountingDiscovery(Discovery):
    kind = "counting"

    def __init__(self, paths: List[Path]):
        self.paths = paths
        self.calls = 0

    def subcommand_files(self) -> List[Path]:
        self.calls += 1
        return list(self.paths)


def _manifest(home_dir: Path, payload: object) -> ManifestCache:
    cache = ManifestCache(home_dir)
    cache.path.parent.mkdir(parents=True, exist_ok=True)
    cache.path.write_text(json.dumps(payload), encoding="utf-8")
    return cache


# ----------------------------------------------------------------------
# FACTORY
# ----------------------------------------------------------------------

def test_for_config_without_manifest_scans(config_dir: Path, home_dir: Path) -> None:
    loader = SubcommandLoader.for_config(config_dir, CommandRegistry(), home_dir=home_dir)
    assert isinstance(loader.discovery, FullScanDiscovery)


def test_for_config_with_trusted_manifest(config_dir: Path, home_dir: Path) -> None:
    _manifest(home_dir, {MANIFEST_KEY: {PLUGIN_PATHS_KEY: ["/x/one.py"]}})

    loader = SubcommandLoader.for_config(config_dir, CommandRegistry(), home_dir=home_dir)

    assert isinstance(loader.discovery, ManifestDiscovery)
    assert loader.subcommand_files() == [Path("/x/one.py")]


def test_for_config_falls_back_when_marker_key_missing(config_dir: Path, home_dir: Path) -> None:
    _manifest(home_dir, {"plugins_paths": ["/x/one.py"]})

    loader = SubcommandLoader.for_config(config_dir, CommandRegistry(), home_dir=home_dir)
    assert isinstance(loader.discovery, FullScanDiscovery)


def test_for_config_falls_back_on_corrupt_manifest(config_dir: Path, home_dir: Path) -> None:
    cache = ManifestCache(home_dir)
    cache.path.parent.mkdir(parents=True)
    cache.path.write_text('{"_autogenerated_command_paths": {"plugin_pa', encoding="utf-8")

    loader = SubcommandLoader.for_config(config_dir, CommandRegistry(), home_dir=home_dir)
    assert loader.discovery.kind == "full_scan"


def test_full_scan_ignores_trusted_manifest(config_dir: Path, home_dir: Path) -> None:
    _manifest(home_dir, {MANIFEST_KEY: {PLUGIN_PATHS_KEY: []}})

    loader = SubcommandLoader.full_scan(config_dir, CommandRegistry(), home_dir=home_dir)
    assert isinstance(loader.discovery, FullScanDiscovery)


def test_for_config_defaults_home_to_user_home(home_dir: Path) -> None:
    _manifest(home_dir, {MANIFEST_KEY: {PLUGIN_PATHS_KEY: []}})

    loader = SubcommandLoader.for_config(None, CommandRegistry())
    assert loader.discovery.kind == "manifest"
    assert loader.manifest.path == home_dir / ".chef" / "plugin_manifest.json"


# ----------------------------------------------------------------------
# LOADING
# ----------------------------------------------------------------------

def test_load_commands_is_idempotent(tmp_path: Path, write_plugin) -> None:
    plugin = write_plugin(tmp_path / "plugins", "NodeList")
    registry = CommandRegistry()
    discovery = CountingDiscovery([plugin])
    loader = SubcommandLoader(None, registry, discovery)

    assert not loader.loaded
    loader.load_commands()
    first = registry.subcommands["node_list"]
    loader.load_commands()

    assert discovery.calls == 1
    assert loader.loaded
    assert registry.subcommands["node_list"] is first


def test_force_load_always_reloads(tmp_path: Path, write_plugin) -> None:
    plugin = write_plugin(tmp_path / "plugins", "NodeList")
    registry = CommandRegistry()
    discovery = CountingDiscovery([plugin])
    loader = SubcommandLoader(None, registry, discovery)

    loader.load_commands()
    first = registry.subcommands["node_list"]
    loader.force_load()
    loader.force_load()

    assert discovery.calls == 3
    assert registry.subcommands["node_list"] is not first
    assert registry.subcommands_by_category == {"node": ["node_list"]}


def test_force_load_drops_commands_that_disappeared(tmp_path: Path, write_plugin) -> None:
    keep = write_plugin(tmp_path / "plugins", "NodeList")
    gone = write_plugin(tmp_path / "plugins", "RoleList")
    registry = CommandRegistry()
    discovery = CountingDiscovery([keep, gone])
    loader = SubcommandLoader(None, registry, discovery)
    loader.load_commands()

    discovery.paths = [keep]
    loader.force_load()

    assert set(registry.subcommands) == {"node_list"}
    assert "role" not in registry.subcommands_by_category


def test_load_command_loads_everything_regardless_of_words(tmp_path: Path, write_plugin) -> None:
    paths = [write_plugin(tmp_path / "plugins", name) for name in ("NodeList", "RoleShow")]
    registry = CommandRegistry()
    loader = SubcommandLoader(None, registry, CountingDiscovery(paths))

    loader.load_command(["node", "list"])

    assert set(registry.subcommands) == {"node_list", "role_show"}


def test_same_command_in_two_files_keeps_one_handle(tmp_path: Path, write_plugin) -> None:
    first = write_plugin(tmp_path / "a", "NodeList")
    second = write_plugin(tmp_path / "b", "NodeList")
    registry = CommandRegistry()
    SubcommandLoader(None, registry, CountingDiscovery([first, second])).load_commands()

    assert list(registry.subcommands) == ["node_list"]
    assert registry.subcommands_by_category["node"] == ["node_list"]


def test_manifest_loader_loads_only_listed_files(tmp_path: Path, home_dir: Path, write_plugin) -> None:
    listed = write_plugin(tmp_path / "plugins", "NodeList")
    write_plugin(home_dir / ".chef" / "plugins" / "knife", "RoleList")
    _manifest(home_dir, {MANIFEST_KEY: {PLUGIN_PATHS_KEY: [str(listed)]}})
    registry = CommandRegistry()

    SubcommandLoader.for_config(None, registry, home_dir=home_dir).load_commands()

    assert set(registry.subcommands) == {"node_list"}


def test_full_scan_loader_registers_builtins_and_plugins(config_dir: Path, home_dir: Path, write_plugin) -> None:
    write_plugin(config_dir / "plugins" / "knife", "SiteDeploy", category="deploy")
    registry = CommandRegistry()

    SubcommandLoader.full_scan(config_dir, registry, home_dir=home_dir).load_commands()

    assert {"rehash", "help", "config_show", "site_deploy"} <= set(registry.subcommands)
    assert registry.subcommands_by_category["deploy"] == ["site_deploy"]
    assert registry.subcommands_by_category["config"] == ["config_show"]


# ----------------------------------------------------------------------
# FAILURES
# ----------------------------------------------------------------------

def test_syntax_error_is_fatal(tmp_path: Path, write_plugin) -> None:
    broken = write_plugin(tmp_path / "plugins", "Broken", source="def register(registry):\n    return (\n")
    loader = SubcommandLoader(None, CommandRegistry(), CountingDiscovery([broken]))

    with pytest.raises(SubcommandLoadError) as excinfo:
        loader.load_commands()

    assert excinfo.value.path == broken
    assert isinstance(excinfo.value.__cause__, SyntaxError)
    assert isinstance(excinfo.value, KnifeError)
    assert not loader.loaded


def test_missing_register_function_is_fatal(tmp_path: Path, write_plugin) -> None:
    plain = write_plugin(tmp_path / "plugins", "Plain", source="VALUE = 1\n")
    loader = SubcommandLoader(None, CommandRegistry(), CountingDiscovery([plain]))

    with pytest.raises(SubcommandLoadError, match="register"):
        loader.load_commands()


def test_register_failure_is_wrapped(tmp_path: Path, write_plugin) -> None:
    source = "def register(registry):\n    raise KeyError('oops')\n"
    broken = write_plugin(tmp_path / "plugins", "Broken", source=source)
    loader = SubcommandLoader(None, CommandRegistry(), CountingDiscovery([broken]))

    with pytest.raises(SubcommandLoadError, match="register\\(\\) failed") as excinfo:
        loader.load_commands()

    assert excinfo.value.path == broken
    assert isinstance(excinfo.value.__cause__, KeyError)


def test_similar_file_names_get_distinct_modules(tmp_path: Path, write_plugin) -> None:
    hyphen = write_plugin(tmp_path / "plugins", "NodeList", filename="a-b.py")
    underscore = write_plugin(tmp_path / "plugins", "RoleList", filename="a_b.py")
    loader = SubcommandLoader(None, CommandRegistry(), CountingDiscovery([hyphen, underscore]))

    assert _module_name_for(hyphen) != _module_name_for(underscore)
    first = loader.load_file(hyphen)
    second = loader.load_file(underscore)

    assert first is not second
    assert sys.modules[first.__name__] is first
    assert sys.modules[second.__name__] is second


def test_stale_manifest_entry_is_fatal(tmp_path: Path) -> None:
    loader = SubcommandLoader(None, CommandRegistry(), ManifestDiscovery([str(tmp_path / "gone.py")]))

    with pytest.raises(SubcommandLoadError):
        loader.load_commands()


# ----------------------------------------------------------------------
# LISTING
# ----------------------------------------------------------------------

def test_list_commands_filters_by_known_category(tmp_path: Path, write_plugin) -> None:
    paths = [write_plugin(tmp_path / "plugins", name) for name in ("NodeList", "NodeShow", "RoleList")]
    loader = SubcommandLoader(None, CommandRegistry(), CountingDiscovery(paths))

    assert loader.list_commands("node") == {"node": ["node_list", "node_show"]}
    assert loader.list_commands("cookbook") == {"node": ["node_list", "node_show"], "role": ["role_list"]}
    assert loader.list_commands() == loader.list_commands("cookbook")


def test_list_commands_answers_from_manifest_categories_without_loading(tmp_path: Path, home_dir: Path) -> None:
    _manifest(
        home_dir,
        {
            MANIFEST_KEY: {
                PLUGIN_PATHS_KEY: [str(tmp_path / "gone.py")],
                PLUGIN_CATEGORIES_KEY: {"node": ["node_list", "node_show"], "role": ["role_list"]},
            }
        },
    )
    registry = CommandRegistry()
    loader = SubcommandLoader.for_config(None, registry, home_dir=home_dir)

    assert loader.list_commands("node") == {"node": ["node_list", "node_show"]}
    assert loader.list_commands() == {"node": ["node_list", "node_show"], "role": ["role_list"]}
    assert not loader.loaded
    assert len(registry) == 0


def test_manifest_without_categories_lists_from_registry(tmp_path: Path, home_dir: Path, write_plugin) -> None:
    plugin = write_plugin(tmp_path / "plugins", "NodeList")
    _manifest(home_dir, {MANIFEST_KEY: {PLUGIN_PATHS_KEY: [str(plugin)]}})

    loader = SubcommandLoader.for_config(None, CommandRegistry(), home_dir=home_dir)

    assert loader.list_commands() == {"node": ["node_list"]}
    assert loader.loaded
