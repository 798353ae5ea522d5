"""Low-level shared utilities for knife tools."""

from .logging import get_logger, setup_logging, KnifeLogger

__all__ = [
    "get_logger",
    "setup_logging",
    "KnifeLogger",
]
