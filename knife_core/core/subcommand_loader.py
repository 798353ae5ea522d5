"""
knife_core.core.subcommand_loader

Loads subcommand files into a CommandRegistry.

Public methods of a loader:

    load_commands            - loads all available subcommands (once)
    force_load               - clears the registry and loads again
    load_command(words)      - loads subcommands for the given words
    command_categories       - category table (from the manifest when it has one)
    list_commands(category)  - commands grouped by category, optionally filtered
    subcommand_files         - every file the active discovery would load
"""

from __future__ import annotations

import hashlib
import importlib.util
import re
import sys
from pathlib import Path
from types import ModuleType
from typing import Dict, List, Optional, Sequence

from common.base.logging import get_logger
from knife_core.core.discovery import Discovery, FullScanDiscovery
from knife_core.core.errors import SubcommandLoadError
from knife_core.core.manifest import ManifestCache
from knife_core.core.registry import CommandRegistry

log = get_logger(__name__)

_MODULE_NAME_UNSAFE = re.compile(r"\W")


def _module_name_for(path: Path) -> str:
    digest = hashlib.sha1(str(path).encode("utf-8")).hexdigest()[:8]
    return f"knife_subcommand_{_MODULE_NAME_UNSAFE.sub('_', path.stem)}_{digest}"


class SubcommandLoader:
    """Runs a discovery strategy and loads what it finds, at most once."""

    def __init__(
        self,
        config_dir: Optional[Path | str],
        registry: CommandRegistry,
        discovery: Discovery,
        home_dir: Optional[Path | str] = None,
    ):
        self.config_dir = Path(config_dir).expanduser() if config_dir else None
        self.home_dir = Path(home_dir).expanduser() if home_dir else Path.home()
        self.registry = registry
        self.discovery = discovery
        self._loaded = False

    # ------------------------------------------------------------------
    # FACTORIES
    # ------------------------------------------------------------------

    @classmethod
    def for_config(
        cls,
        config_dir: Optional[Path | str],
        registry: CommandRegistry,
        home_dir: Optional[Path | str] = None,
    ) -> "SubcommandLoader":
        """Use the plugin manifest when a trusted one exists, else scan."""
        manifest = ManifestCache(home_dir)
        discovery = manifest.discovery()
        if discovery is not None:
            log.debug("Using autogenerated hashed command manifest %s", manifest.path)
            return cls(config_dir, registry, discovery, home_dir=home_dir)
        return cls.full_scan(config_dir, registry, home_dir=home_dir)

    @classmethod
    def full_scan(
        cls,
        config_dir: Optional[Path | str],
        registry: CommandRegistry,
        home_dir: Optional[Path | str] = None,
    ) -> "SubcommandLoader":
        """Always scan the filesystem, ignoring any manifest."""
        return cls(config_dir, registry, FullScanDiscovery(config_dir, home_dir=home_dir), home_dir=home_dir)

    # ------------------------------------------------------------------
    # LOADING
    # ------------------------------------------------------------------

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def manifest(self) -> ManifestCache:
        return ManifestCache(self.home_dir)

    def subcommand_files(self) -> List[Path]:
        return self.discovery.subcommand_files()

    def load_commands(self) -> bool:
        if self._loaded:
            return True

        files = self.subcommand_files()
        log.debug("Loading %d subcommand files via %s", len(files), self.discovery.kind)
        for subcommand in files:
            self.load_file(subcommand)
        self._loaded = True
        return True

    def force_load(self) -> bool:
        self._loaded = False
        self.registry.clear()
        return self.load_commands()

    def load_command(self, command_words: Sequence[str]) -> bool:
        # Every file is loaded whatever the words; partial loading is not supported.
        return self.load_commands()

    def load_file(self, path: Path | str) -> ModuleType:
        """Import one subcommand file and let it register its command."""
        path = Path(path)
        module_name = _module_name_for(path)
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise SubcommandLoadError(path, "not an importable Python file")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as exc:
            sys.modules.pop(module_name, None)
            raise SubcommandLoadError(path, f"{type(exc).__name__}: {exc}") from exc

        register = getattr(module, "register", None)
        if not callable(register):
            raise SubcommandLoadError(path, "missing register(registry) function")
        try:
            register(self.registry)
        except Exception as exc:
            raise SubcommandLoadError(path, f"register() failed: {type(exc).__name__}: {exc}") from exc
        log.debug("Loaded subcommand file %s", path)
        return module

    # ------------------------------------------------------------------
    # LISTING
    # ------------------------------------------------------------------

    def command_categories(self) -> Dict[str, List[str]]:
        """
        Category -> command names. A manifest that recorded categories answers
        directly; otherwise every file is loaded and the registry is read.
        """
        cached = self.discovery.cached_categories()
        if cached is not None:
            return cached
        self.load_commands()
        return self.registry.subcommands_by_category

    def list_commands(self, pref_cat: Optional[str] = None) -> Dict[str, List[str]]:
        categories = self.command_categories()
        if pref_cat and pref_cat in categories:
            return {pref_cat: list(categories[pref_cat])}
        return {category: list(names) for category, names in categories.items()}
