"""knife_core: subcommand discovery and dispatch for the knife command line."""

from knife_core.commands.version import VERSION as __version__

__all__ = ["__version__"]
