"""knife rehash: regenerate the plugin manifest."""

from __future__ import annotations

from knife_core.core.registry import CommandRegistry, Subcommand
from knife_core.core.subcommand_loader import SubcommandLoader


class Rehash(Subcommand):
    banner = "knife rehash"

    def run(self) -> int:
        ctx = self.context
        scanner = SubcommandLoader.full_scan(ctx.config_dir, ctx.registry, home_dir=ctx.home_dir)
        scanner.force_load()

        manifest = scanner.manifest
        path = manifest.write_hash(manifest.generate_hash(ctx.registry, ctx.config_dir))
        self.ui.print(f"Knife subcommands are cached in {path}. Delete this file to disable the caching.")
        return 0


def register(registry: CommandRegistry) -> None:
    registry.register(Rehash)
