"""knife config show: print where knife looks for subcommands."""

from __future__ import annotations

from knife_core.core.registry import CommandRegistry, Subcommand


class ConfigShow(Subcommand):
    banner = "knife config show"

    def run(self) -> int:
        loader = self.context.loader
        rows = [
            ("config_dir", loader.config_dir or "(none)"),
            ("home_dir", loader.home_dir),
            ("plugin_manifest", loader.manifest.path),
            ("discovery", loader.discovery.kind),
            ("subcommand_files", len(loader.subcommand_files())),
        ]
        for key, value in rows:
            self.ui.print(f"{key}: {value}")
        return 0


def register(registry: CommandRegistry) -> None:
    registry.register(ConfigShow)
