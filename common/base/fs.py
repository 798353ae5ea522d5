"""Filesystem helper utilities shared across common modules."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator


def ensure_dir(path: Path | str) -> Path:
    p = Path(path).expanduser()
    p.mkdir(parents=True, exist_ok=True)
    return p


def ensure_parent(path: Path | str) -> Path:
    return ensure_dir(Path(path).expanduser().parent)


def glob_files(root: Path, pattern: str, recursive: bool = False) -> Iterator[Path]:
    """Yield regular files under ``root`` matching ``pattern``, sorted by path."""
    if not root.is_dir():
        return
    matches = root.rglob(pattern) if recursive else root.glob(pattern)
    for path in sorted(matches):
        if path.is_file():
            yield path
