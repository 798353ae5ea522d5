"""Subcommand registry, discovery, manifest cache, loader and resolver."""

from .errors import KnifeError, SubcommandLoadError
from .registry import CommandRegistry, Subcommand
from .subcommand_loader import SubcommandLoader
from .resolver import Resolver, find_longest_key, positional_arguments

__all__ = [
    "CommandRegistry",
    "KnifeError",
    "Resolver",
    "Subcommand",
    "SubcommandLoadError",
    "SubcommandLoader",
    "find_longest_key",
    "positional_arguments",
]
