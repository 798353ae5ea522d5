"""
knife_core.cli.knife

The ``knife`` entry point: load the registry lazily, resolve the words the
user typed to a subcommand and run it.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Iterable, List, Optional

from common.base.logging import get_logger
from common.shared.loader import load_knife_config, resolve_config_path
from knife_core.cli.base import (
    EXIT_FAILURE,
    EXIT_NO_SUBCOMMAND,
    print_command_list,
    run_cli,
)
from knife_core.core.registry import CommandRegistry, SubcommandContext
from knife_core.core.resolver import Resolver
from knife_core.core.subcommand_loader import SubcommandLoader

log = get_logger(__name__)

USAGE = "Usage: knife sub-command (options)"


def build_context(config_dir: Optional[Path], config_path: Optional[Path]) -> SubcommandContext:
    knife_cfg = load_knife_config(config_path)
    home_dir = Path(knife_cfg["home_dir"]) if knife_cfg.get("home_dir") else Path.home()

    registry = CommandRegistry()
    if knife_cfg["use_manifest"]:
        loader = SubcommandLoader.for_config(config_dir, registry, home_dir=home_dir)
    else:
        loader = SubcommandLoader.full_scan(config_dir, registry, home_dir=home_dir)
    log.debug("Subcommand discovery: %s", loader.discovery.kind)

    return SubcommandContext(
        registry=registry,
        loader=loader,
        config_dir=config_dir,
        home_dir=home_dir,
    )


def dispatch(args: argparse.Namespace, words: List[str]) -> int:
    config_path = resolve_config_path(args.config, args.config_dir)
    context = build_context(args.config_dir, config_path)
    ui = context.console
    resolver = Resolver(context.registry, context.loader)

    if not words:
        ui.print(USAGE)
        ui.print("")
        print_command_list(ui, context.loader.list_commands())
        return EXIT_FAILURE

    command_class = resolver.command_class_from(words)
    if command_class is None:
        ui.print(f"FATAL: Cannot find subcommand for: '{' '.join(words)}'")
        category = resolver.guess_category(words)
        if category:
            ui.print(f"Available {category} subcommands: (for details, knife SUB-COMMAND --help)")
            ui.print("")
        print_command_list(ui, context.loader.list_commands(category))
        return EXIT_NO_SUBCOMMAND

    log.debug("Running %s", command_class.command_name())
    command = command_class(words, context)
    return command.run()


def main(argv: Optional[Iterable[str]] = None) -> None:
    raise SystemExit(run_cli(dispatch, argv))


if __name__ == "__main__":
    main()
