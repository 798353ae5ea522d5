"""
knife_core.core.errors

Exceptions raised by the subcommand loader.
"""

from __future__ import annotations

from pathlib import Path


class KnifeError(Exception):
    """Base class for knife failures that should reach the user."""


class SubcommandLoadError(KnifeError):
    """A subcommand file could not be loaded into the registry."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to load subcommand file {self.path}: {reason}")
