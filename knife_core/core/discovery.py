"""
knife_core.core.discovery

Strategies that decide WHICH subcommand files to load.

 - FullScanDiscovery walks the built-in commands package and the site/user
   plugin directories.
 - ManifestDiscovery replays the path list recorded by a previous full scan.

Both expose ``kind`` and ``subcommand_files()``; the loader never needs to
know which one it holds.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Dict, List, Mapping, Optional, Sequence

from common.base.fs import glob_files
from common.base.logging import get_logger

log = get_logger(__name__)

BUILTIN_COMMANDS_ROOT = Path(__file__).resolve().parents[1] / "commands"
VERSION_MARKER = "version.py"
SUBCOMMAND_GLOB = "*.py"
PLUGIN_SUBDIR = Path("plugins") / "knife"
USER_CONFIG_SUBDIR = ".chef"


@dataclass(frozen=True)
class SubcommandFile:
    path: Path
    name: str


def logical_name(path: Path, root: Path) -> str:
    """Relative path of ``path`` under ``root``, '/'-separated, without extension."""
    return path.relative_to(root).with_suffix("").as_posix()


class Discovery:
    """Common interface of the discovery strategies."""

    kind: ClassVar[str] = "abstract"

    def subcommand_files(self) -> List[Path]:
        raise NotImplementedError

    def cached_categories(self) -> Optional[Dict[str, List[str]]]:
        """Category table known without loading any file, if the strategy has one."""
        return None


# ----------------------------------------------------------------------
# FULL SCAN
# ----------------------------------------------------------------------

class FullScanDiscovery(Discovery):
    kind = "full_scan"

    def __init__(
        self,
        config_dir: Optional[Path | str],
        home_dir: Optional[Path | str] = None,
        commands_root: Path = BUILTIN_COMMANDS_ROOT,
    ):
        self.config_dir = Path(config_dir).expanduser() if config_dir else None
        self.home_dir = Path(home_dir).expanduser() if home_dir else Path.home()
        self.commands_root = commands_root.resolve()

    @property
    def version_file(self) -> Path:
        return self.commands_root / VERSION_MARKER

    def find_subcommands_via_dirglob(self) -> Dict[str, Path]:
        """Built-in subcommand files keyed by logical name."""
        subcommand_files: Dict[str, Path] = {}
        for command_file in glob_files(self.commands_root, SUBCOMMAND_GLOB, recursive=True):
            # version.py is the release marker, not a subcommand
            if command_file == self.version_file or command_file.name == "__init__.py":
                continue
            subcommand_files[logical_name(command_file, self.commands_root)] = command_file
        return subcommand_files

    def plugin_dirs(self) -> List[Path]:
        dirs = []
        if self.config_dir:
            dirs.append(self.config_dir / PLUGIN_SUBDIR)
        dirs.append(self.home_dir / USER_CONFIG_SUBDIR / PLUGIN_SUBDIR)
        return dirs

    def site_subcommands(self) -> List[Path]:
        """Plugin files from <config_dir>/plugins/knife and ~/.chef/plugins/knife."""
        user_specific_files: List[Path] = []
        for plugin_dir in self.plugin_dirs():
            user_specific_files.extend(p.resolve() for p in glob_files(plugin_dir, SUBCOMMAND_GLOB))
        return user_specific_files

    def files(self) -> List[SubcommandFile]:
        """Built-ins (sorted) then site plugins, each path once."""
        found = [
            SubcommandFile(path=path, name=name)
            for name, path in self.find_subcommands_via_dirglob().items()
        ]
        # plugin dirs are not recursive, so a plugin's logical name is its stem
        found.extend(SubcommandFile(path=path, name=path.stem) for path in self.site_subcommands())

        unique: Dict[Path, SubcommandFile] = {}
        for entry in found:
            unique.setdefault(entry.path, entry)
        return list(unique.values())

    def subcommand_files(self) -> List[Path]:
        paths = [entry.path for entry in self.files()]
        log.debug("Full scan found %d subcommand files", len(paths))
        return paths


# ----------------------------------------------------------------------
# MANIFEST
# ----------------------------------------------------------------------

class ManifestDiscovery(Discovery):
    kind = "manifest"

    def __init__(
        self,
        plugin_paths: Sequence[str],
        plugin_categories: Optional[Mapping[str, Sequence[str]]] = None,
    ):
        self.plugin_paths = list(plugin_paths)
        self.categories: Dict[str, List[str]] = {
            category: list(names) for category, names in (plugin_categories or {}).items()
        }

    def subcommand_files(self) -> List[Path]:
        return [Path(p) for p in self.plugin_paths]

    def cached_categories(self) -> Optional[Dict[str, List[str]]]:
        return self.categories or None
