"""
knife_core.core.registry

Command registry shared by the loader and the resolver, plus the base class
every subcommand derives from.

A registry is created once per process and handed to whoever needs it; there
is no module-level table. Subcommand files register their command through a
module-level ``register(registry)`` function that the loader calls after
importing the file.
"""

from __future__ import annotations

import argparse
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar, Dict, List, Optional, Sequence, Type

from rich.console import Console

from common.base.logging import get_logger

if TYPE_CHECKING:
    from knife_core.core.subcommand_loader import SubcommandLoader

log = get_logger(__name__)

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")


def snake_case(name: str) -> str:
    """Convert a class name to a command name (``NodeRunListAdd`` -> ``node_run_list_add``)."""
    converted = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    converted = _WORD_BOUNDARY.sub(r"\1_\2", converted)
    return converted.replace("-", "_").lower()


# ----------------------------------------------------------------------
# RUNTIME CONTEXT
# ----------------------------------------------------------------------

def default_console() -> Console:
    return Console(soft_wrap=True, highlight=False, markup=False, emoji=False)


@dataclass
class SubcommandContext:
    """What a running subcommand can see of the knife process."""

    registry: "CommandRegistry"
    loader: "SubcommandLoader"
    config_dir: Optional[Path] = None
    home_dir: Optional[Path] = None
    console: Console = field(default_factory=default_console)


# ----------------------------------------------------------------------
# SUBCOMMAND BASE CLASS
# ----------------------------------------------------------------------

class Subcommand:
    """
    Base class for knife subcommands.

    Subclasses may set ``name`` and ``category``; otherwise the name is the
    snake_case class name and the category is its first word. ``run`` returns
    the process exit code.
    """

    name: ClassVar[Optional[str]] = None
    category: ClassVar[Optional[str]] = None
    banner: ClassVar[Optional[str]] = None

    def __init__(self, argv: Sequence[str], context: SubcommandContext):
        self.context = context
        self.ui = context.console
        parser = self.build_parser()
        self.config = parser.parse_args(list(argv))
        self.name_args: List[str] = self._strip_command_words(list(self.config.name_args))

    @classmethod
    def command_name(cls) -> str:
        return cls.name or snake_case(cls.__name__)

    @classmethod
    def subcommand_category(cls) -> str:
        return cls.category or cls.command_name().split("_")[0]

    @classmethod
    def command_banner(cls) -> str:
        return cls.banner or f"knife {cls.command_name().replace('_', ' ')} (options)"

    @classmethod
    def configure_parser(cls, parser: argparse.ArgumentParser) -> None:
        """Hook for subclasses to add their own options."""

    @classmethod
    def build_parser(cls) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog=f"knife {cls.command_name().replace('_', ' ')}",
            usage=cls.command_banner(),
        )
        parser.add_argument("name_args", nargs="*")
        cls.configure_parser(parser)
        return parser

    def _strip_command_words(self, args: List[str]) -> List[str]:
        words = self.command_name().split("_")
        hyphenated = "-".join(words)
        if hyphenated in args:
            args.remove(hyphenated)
        remaining = []
        for arg in args:
            if arg in words:
                words.remove(arg)
                continue
            remaining.append(arg)
        return remaining

    def run(self) -> int:
        raise NotImplementedError(f"{type(self).__name__} does not implement run()")


# ----------------------------------------------------------------------
# REGISTRY
# ----------------------------------------------------------------------

class CommandRegistry:
    """Command name -> class, and category -> ordered command names."""

    def __init__(self) -> None:
        self.subcommands: Dict[str, Type[Subcommand]] = {}
        self.subcommands_by_category: Dict[str, List[str]] = {}

    def register(self, command_class: Type[Subcommand]) -> str:
        name = command_class.command_name()
        category = command_class.subcommand_category()

        if name in self.subcommands:
            log.debug("Replacing registered subcommand %s", name)
        self.subcommands[name] = command_class

        members = self.subcommands_by_category.setdefault(category, [])
        if name not in members:
            members.append(name)
        return name

    def clear(self) -> None:
        self.subcommands.clear()
        self.subcommands_by_category.clear()

    def category_snapshot(self) -> Dict[str, List[str]]:
        return {category: list(names) for category, names in self.subcommands_by_category.items()}

    def __contains__(self, name: object) -> bool:
        return name in self.subcommands

    def __len__(self) -> int:
        return len(self.subcommands)
