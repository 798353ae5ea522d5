"""knife help: list available subcommands."""

from __future__ import annotations

from knife_core.cli.base import print_command_list
from knife_core.core.registry import CommandRegistry, Subcommand


class Help(Subcommand):
    banner = "knife help [category]"

    def run(self) -> int:
        category = " ".join(self.name_args) or None
        print_command_list(self.ui, self.context.loader.list_commands(category))
        return 0


def register(registry: CommandRegistry) -> None:
    registry.register(Help)
