"""
knife_core.core.manifest

Persistent snapshot of discovery results (``~/.chef/plugin_manifest.json``).

The manifest is a cache: anything unreadable or oddly shaped is reported as
"no manifest" and the caller falls back to a full scan. Writes overwrite the
file in place.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from common.base.file_io import read_json, write_json
from common.base.fs import ensure_parent
from common.base.logging import get_logger
from knife_core.core.discovery import USER_CONFIG_SUBDIR, FullScanDiscovery, ManifestDiscovery
from knife_core.core.registry import CommandRegistry

log = get_logger(__name__)

MANIFEST_KEY = "_autogenerated_command_paths"
PLUGIN_PATHS_KEY = "plugin_paths"
PLUGIN_CATEGORIES_KEY = "plugin_categories"
MANIFEST_FILENAME = "plugin_manifest.json"


def _is_string_list(value: object) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


class ManifestCache:
    """Read, build and persist the plugin manifest under a home directory."""

    def __init__(self, home_dir: Optional[Path | str] = None):
        self.home_dir = Path(home_dir).expanduser() if home_dir else Path.home()

    @property
    def path(self) -> Path:
        return self.home_dir / USER_CONFIG_SUBDIR / MANIFEST_FILENAME

    def exists(self) -> bool:
        return self.path.is_file()

    def plugin_manifest(self) -> Optional[Dict[str, Any]]:
        """The parsed manifest document, or None when missing or unparsable."""
        if not self.exists():
            return None
        try:
            data = read_json(self.path)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            log.debug("Ignoring unreadable plugin manifest %s: %s", self.path, exc)
            return None
        if not isinstance(data, dict):
            log.debug("Ignoring plugin manifest %s: root is not an object", self.path)
            return None
        return data

    def autogenerated_manifest(self) -> Optional[Dict[str, Any]]:
        """The marker-key payload when the manifest is trusted, else None."""
        data = self.plugin_manifest()
        if data is None or MANIFEST_KEY not in data:
            return None

        payload = data[MANIFEST_KEY]
        if not isinstance(payload, Mapping):
            return None
        paths = payload.get(PLUGIN_PATHS_KEY)
        if not _is_string_list(paths):
            return None
        categories = payload.get(PLUGIN_CATEGORIES_KEY) or {}
        if not isinstance(categories, Mapping) or not all(_is_string_list(names) for names in categories.values()):
            log.debug("Ignoring plugin manifest %s: malformed %s", self.path, PLUGIN_CATEGORIES_KEY)
            return None
        return {PLUGIN_PATHS_KEY: paths, PLUGIN_CATEGORIES_KEY: dict(categories)}

    def discovery(self) -> Optional[ManifestDiscovery]:
        payload = self.autogenerated_manifest()
        if payload is None:
            return None
        return ManifestDiscovery(payload[PLUGIN_PATHS_KEY], payload[PLUGIN_CATEGORIES_KEY])

    def generate_hash(self, registry: CommandRegistry, config_dir: Optional[Path | str]) -> Dict[str, Any]:
        """
        Snapshot a fresh full scan and the registry's categories.

        Top-level keys other than the marker are carried over from an
        existing manifest.
        """
        output = self.plugin_manifest() or {}
        scan = FullScanDiscovery(config_dir, home_dir=self.home_dir)
        output[MANIFEST_KEY] = {
            PLUGIN_PATHS_KEY: [str(path) for path in scan.subcommand_files()],
            PLUGIN_CATEGORIES_KEY: registry.category_snapshot(),
        }
        return output

    def write_hash(self, data: Mapping[str, Any]) -> Path:
        ensure_parent(self.path)
        write_json(self.path, data, indent=2)
        log.debug("Wrote plugin manifest %s", self.path)
        return self.path
