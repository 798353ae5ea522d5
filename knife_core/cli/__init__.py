"""
knife_core.cli

Command-line front end for knife.
"""

from .base import build_base_parser, run_cli
from .knife import dispatch, main

__all__ = ["build_base_parser", "dispatch", "main", "run_cli"]
