"""
Shared configuration loading and validation helpers.

Provides:
 - `load_config`: basic YAML loader
 - `resolve_config_path`: locate the knife.yaml for a config directory
 - `load_logging_config`: validated `logging` section
 - `load_knife_config`: validated `knife` section (manifest and home overrides)
 - `cli_main`: command-line entry point exposed as the `knife-config` script
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional

from common.base.file_io import read_yaml
from common.base.logging import normalize_level


ConfigDict = Dict[str, Any]

DEFAULT_CONFIG_FILENAME = "knife.yaml"
DEFAULT_CONFIG_DIR = Path("~/.chef")
LOGGING_SECTION_KEY = "logging"
KNIFE_SECTION_KEY = "knife"

LOGGING_ALLOWED_KEYS = {"level", "use_rich", "log_dir", "file_prefix"}
KNIFE_ALLOWED_KEYS = {"use_manifest", "home_dir"}

YES_VALUES = {"1", "true", "yes", "y", "on"}
NO_VALUES = {"0", "false", "no", "n", "off"}
AUTO_VALUES = {"", "auto", "default"}


def load_config(path: str | Path | None) -> Mapping[str, Any] | Dict[str, Any]:
    if not path:
        return {}

    cfg_path = Path(path).expanduser()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {cfg_path}")

    data = read_yaml(cfg_path)
    if not isinstance(data, Mapping):
        raise ValueError(f"Configuration root must be a mapping in {cfg_path}")

    return data


def resolve_config_path(
    explicit: str | Path | None,
    config_dir: str | Path | None = None,
) -> Optional[Path]:
    """
    Return the YAML file to read, or None when there is nothing to load.

    An explicit path is always returned (load_config reports it when missing);
    the per-directory knife.yaml is optional.
    """
    if explicit:
        return Path(explicit).expanduser()
    if config_dir:
        candidate = Path(config_dir).expanduser() / DEFAULT_CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def _section(root: Mapping[str, Any], key: str, allowed: set[str], config_path: Path | str | None) -> Dict[str, Any]:
    section = root.get(key) or {}
    if not isinstance(section, Mapping):
        raise ValueError(f"'{key}' section must be a mapping in {config_path}")

    invalid = [name for name in section if name not in allowed]
    if invalid:
        invalid_keys = ", ".join(sorted(str(name) for name in invalid))
        raise ValueError(f"'{key}' contains unsupported keys in {config_path}: {invalid_keys}")
    return dict(section)


def _coerce_bool(value: object, key: str, config_path: Path | str | None) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in YES_VALUES:
        return True
    if text in NO_VALUES:
        return False
    raise ValueError(f"Configuration '{config_path}' field '{key}' must be a boolean.")


def _coerce_use_rich(value: object, config_path: Path | str | None) -> Optional[bool]:
    if value is None or str(value).strip().lower() in AUTO_VALUES:
        return None
    return _coerce_bool(value, "use_rich", config_path)


def load_logging_config(config_path: str | Path | None = None) -> Dict[str, Any]:
    root = load_config(config_path)
    section = _section(root, LOGGING_SECTION_KEY, LOGGING_ALLOWED_KEYS, config_path)

    cfg: Dict[str, Any] = {
        "level": normalize_level(section.get("level")),
        "use_rich": _coerce_use_rich(section.get("use_rich"), config_path),
        "log_dir": None,
        "file_prefix": section.get("file_prefix") or "knife",
    }
    if section.get("log_dir"):
        log_dir = Path(str(section["log_dir"])).expanduser()
        if not log_dir.is_absolute() and config_path:
            log_dir = Path(config_path).expanduser().parent / log_dir
        cfg["log_dir"] = str(log_dir.resolve())
    return cfg


def load_knife_config(config_path: str | Path | None = None) -> ConfigDict:
    root = load_config(config_path)
    section = _section(root, KNIFE_SECTION_KEY, KNIFE_ALLOWED_KEYS, config_path)

    cfg: ConfigDict = {"use_manifest": True, "home_dir": None}
    if "use_manifest" in section and section["use_manifest"] is not None:
        cfg["use_manifest"] = _coerce_bool(section["use_manifest"], "use_manifest", config_path)
    if section.get("home_dir"):
        cfg["home_dir"] = str(Path(str(section["home_dir"])).expanduser().resolve())
    return cfg


def cli_main(argv: Optional[Iterable[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Load and validate knife YAML configs.")
    parser.add_argument("config_path", nargs="?", help="Path to YAML file (defaults to ~/.chef/knife.yaml)")
    args = parser.parse_args(list(argv) if argv is not None else None)

    config_path = resolve_config_path(args.config_path, DEFAULT_CONFIG_DIR)
    payload = {
        LOGGING_SECTION_KEY: load_logging_config(config_path),
        KNIFE_SECTION_KEY: load_knife_config(config_path),
    }
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(cli_main())
