"""
common.base.logging

Logging for the knife command line.

Every module asks for ``get_logger(__name__)`` and gets a child of the
``knife`` logger. Nothing is printed until ``setup_logging`` installs the
console handler (Rich on a terminal, plain ANSI otherwise) and, when a log
directory is configured, a per-run log file.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, cast

from rich.logging import RichHandler
from rich.text import Text

ROOT_LOGGER_NAME = "knife"

ANSI_RESET = "\033[0m"

# level -> (emoji, ansi colour, rich style)
LEVEL_STYLES: Dict[int, tuple[str, str, str]] = {
    logging.DEBUG: ("🐛", "\033[36m", "bright_cyan"),
    logging.INFO: ("ℹ️", "\033[32m", "green"),
    logging.WARNING: ("⚠️", "\033[33m", "yellow"),
    logging.ERROR: ("❌", "\033[31m", "red"),
    logging.CRITICAL: ("💥", "\033[95m", "bold magenta"),
}


def level_style(levelno: int) -> tuple[str, str, str]:
    return LEVEL_STYLES.get(levelno, LEVEL_STYLES[logging.INFO])


class LevelFormatter(logging.Formatter):
    """Prefixes the level name with its emoji; colours it when ``color`` is set."""

    def __init__(self, fmt: str, datefmt: str, color: bool = False):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        emoji, ansi, _ = level_style(record.levelno)
        label = f"{emoji} {record.levelname}"
        if self.color:
            label = f"{ansi}{label}{ANSI_RESET}"
        record.level_label = label  # type: ignore[attr-defined]
        try:
            return super().format(record)
        finally:
            del record.level_label  # type: ignore[attr-defined]


class KnifeRichHandler(RichHandler):
    def get_level_text(self, record: logging.LogRecord) -> Text:
        emoji, _, style = level_style(record.levelno)
        return Text(f"{emoji} {record.levelname}", style=style)


class KnifeLogger(logging.Logger):
    """Logger that remembers the file it writes to, if any."""

    log_file: Optional[Path] = None


def normalize_level(value: Any) -> str:
    """Level name for ``value`` (name or number); INFO when unknown."""
    if isinstance(value, str):
        candidate = value.strip().upper()
        if candidate in logging._nameToLevel:  # type: ignore[attr-defined]
            return candidate
    elif isinstance(value, int):
        label = logging.getLevelName(value)
        if isinstance(label, str) and not label.startswith("Level "):
            return label
    return "INFO"


def _console_handler(use_rich: bool) -> logging.Handler:
    if use_rich:
        return KnifeRichHandler(rich_tracebacks=True, markup=False, show_path=False, log_time_format="[%X]")
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        LevelFormatter("%(asctime)s %(level_label)s %(name)s: %(message)s", "%H:%M:%S", color=True)
    )
    return handler


def _file_handler(log_dir: Path, file_prefix: str) -> logging.FileHandler:
    log_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    handler = logging.FileHandler(log_dir / f"{file_prefix}_{timestamp}.log", mode="a", encoding="utf-8")
    handler.setFormatter(
        LevelFormatter("%(asctime)s %(level_label)s %(name)s: %(message)s", "%Y-%m-%d %H:%M:%S")
    )
    return handler


def setup_logging(
    level: str | int | None = None,
    use_rich: Optional[bool] = None,
    log_dir: Optional[Path | str] = None,
    file_prefix: Optional[str] = None,
) -> KnifeLogger:
    """
    Configure and return the ``knife`` logger. Safe to call again; the
    previous handlers are closed and replaced.

    Args:
        level: Logging level name or number (INFO if unset or unknown).
        use_rich: Force the Rich handler on or off. None means Rich only
            when stderr is a terminal.
        log_dir: Directory for a per-run log file. No file when unset.
        file_prefix: Prefix of the log file name.
    """
    resolved_level = normalize_level(level)
    rich_console = sys.stderr.isatty() if use_rich is None else bool(use_rich)

    logging.setLoggerClass(KnifeLogger)
    logger = cast(KnifeLogger, logging.getLogger(ROOT_LOGGER_NAME))
    logger.setLevel(resolved_level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_console_handler(rich_console))
    logger.log_file = None
    if log_dir:
        file_handler = _file_handler(Path(log_dir).expanduser(), file_prefix or ROOT_LOGGER_NAME)
        logger.addHandler(file_handler)
        logger.log_file = Path(file_handler.baseFilename)

    logger.debug("Logging at %s (rich=%s, file=%s)", resolved_level, rich_console, logger.log_file)
    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> KnifeLogger:
    """Child of the ``knife`` logger; silent until ``setup_logging`` runs."""
    logging.setLoggerClass(KnifeLogger)
    base = cast(KnifeLogger, logging.getLogger(ROOT_LOGGER_NAME))
    if not base.handlers:
        base.addHandler(logging.NullHandler())

    if not name or name == ROOT_LOGGER_NAME:
        return base
    return cast(KnifeLogger, base.getChild(name))
