"""
knife_core.core.resolver

Turns the words a user typed into a registered command or category.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Mapping, Optional, Sequence, Type

from knife_core.core.registry import CommandRegistry, Subcommand
from knife_core.core.subcommand_loader import SubcommandLoader

POSITIONAL_ARG = re.compile(r"[^\W_][\w-]+")


def positional_arguments(args: Iterable[str]) -> List[str]:
    """Word-like arguments (used to search for subcommands and categories), in order."""
    return [arg for arg in args if POSITIONAL_ARG.fullmatch(arg)]


def find_longest_key(table: Mapping[str, object], words: Sequence[str], sep: str = "_") -> Optional[str]:
    """
    Longest key of ``table`` made of the leading ``words`` joined by ``sep``.

    Words are dropped from the end until a key matches; hyphens become
    underscores before each lookup.
    """
    words = list(words)
    while words:
        candidate = sep.join(words).replace("-", "_")
        if candidate in table:
            return candidate
        words.pop()
    return None


class Resolver:
    def __init__(self, registry: CommandRegistry, loader: SubcommandLoader):
        self.registry = registry
        self.loader = loader

    def command_class_from(self, args: Sequence[str]) -> Optional[Type[Subcommand]]:
        cmd_words = positional_arguments(args)
        self.loader.load_command(cmd_words)

        key = find_longest_key(self.registry.subcommands, cmd_words, "_")
        if key is not None:
            return self.registry.subcommands[key]
        if not args:
            return None
        return self.registry.subcommands.get(args[0].replace("-", "_"))

    def guess_category(self, args: Sequence[str]) -> Optional[str]:
        categories = self.loader.command_categories()
        category_words = [part for word in positional_arguments(args) for part in word.split("-")]
        return find_longest_key(categories, category_words, " ")
