"""
knife_core.cli.base

Shared CLI runner foundation for knife.

Provides:
 - Unified global options (config dir, config file, log level)
 - Automatic logging setup from the YAML config
 - Safe execution wrapper (KeyboardInterrupt, knife errors, exceptions)
 - Consistent exit codes
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Callable, Iterable, List, Mapping, Optional, Tuple

import argcomplete
from rich.console import Console

from common.base.logging import get_logger, setup_logging
from common.shared.loader import DEFAULT_CONFIG_DIR, load_logging_config, resolve_config_path
from knife_core.core.errors import KnifeError

log = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_NO_SUBCOMMAND = 10
EXIT_INTERRUPTED = 130


# ----------------------------------------------------------------------
# BASE PARSER FACTORY
# ----------------------------------------------------------------------

def build_base_parser(description: str = "knife: pluggable command-line tool.") -> argparse.ArgumentParser:
    """
    Build a base parser preloaded with common global options.
    """
    parser = argparse.ArgumentParser(
        prog="knife",
        description=description,
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument(
        "--config-dir",
        type=Path,
        default=DEFAULT_CONFIG_DIR.expanduser(),
        help="Directory holding knife.yaml and plugins/knife (default: ~/.chef).",
    )
    parser.add_argument(
        "--config",
        help="Path to configuration YAML (defaults to <config-dir>/knife.yaml).",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set logging verbosity (default: from config, else INFO).",
    )
    argcomplete.autocomplete(parser)
    return parser


def parse_global_options(
    parser: argparse.ArgumentParser,
    argv: Optional[Iterable[str]] = None,
) -> Tuple[argparse.Namespace, List[str]]:
    """Split global options from the words meant for the subcommand."""
    return parser.parse_known_args(list(argv) if argv is not None else None)


def configure_logging(args: argparse.Namespace) -> Optional[Path]:
    config_path = resolve_config_path(args.config, args.config_dir)
    logging_cfg = load_logging_config(config_path)
    setup_logging(
        level=args.log_level or logging_cfg.get("level"),
        use_rich=logging_cfg.get("use_rich"),
        log_dir=logging_cfg.get("log_dir"),
        file_prefix=logging_cfg.get("file_prefix"),
    )
    return config_path


def print_command_list(ui: Console, commands_by_category: Mapping[str, Iterable[str]]) -> None:
    for category in sorted(commands_by_category):
        ui.print(f"** {category.upper()} COMMANDS **")
        for name in sorted(commands_by_category[category]):
            ui.print(f"knife {name.replace('_', ' ')}")
        ui.print("")


# ----------------------------------------------------------------------
# WRAPPER FUNCTION
# ----------------------------------------------------------------------

def run_cli(main_func: Callable[[argparse.Namespace, List[str]], int], argv: Optional[Iterable[str]] = None) -> int:
    """
    Execute a CLI command function safely with unified error handling.

    Args:
        main_func: Function taking the global options and the remaining
            words, returning an exit code.
        argv: Arguments to parse (defaults to sys.argv[1:]).
    """
    parser = build_base_parser()
    args, rest = parse_global_options(parser, argv)

    setup_logging(level=args.log_level, use_rich=False)
    try:
        configure_logging(args)
        log.debug("Arguments: %s rest=%s", args, rest)
        return main_func(args, rest)
    except KeyboardInterrupt:
        log.warning("⚠️ Operation cancelled by user.")
        return EXIT_INTERRUPTED
    except KnifeError as exc:
        log.error("❌ %s", exc)
        return EXIT_FAILURE
    except Exception as exc:
        log.error("❌ Unexpected error: %s", exc, exc_info=True)
        return EXIT_FAILURE
