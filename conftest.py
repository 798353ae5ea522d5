from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Callable, Optional

import pytest


PLUGIN_TEMPLATE = """\
from knife_core.core.registry import CommandRegistry, Subcommand


class {class_name}(Subcommand):
{body}
    def run(self) -> int:
        self.ui.print("{class_name}: " + " ".join(self.name_args))
        return 0


def register(registry: CommandRegistry) -> None:
    registry.register({class_name})
"""


@pytest.fixture(autouse=True)
def home_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the user's home at a scratch directory so ~/.chef is never touched."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    path = tmp_path / "config"
    path.mkdir()
    return path


PluginWriter = Callable[..., Path]


@pytest.fixture
def write_plugin() -> PluginWriter:
    def _write(
        directory: Path,
        class_name: str,
        *,
        filename: Optional[str] = None,
        category: Optional[str] = None,
        source: Optional[str] = None,
    ) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / (filename or f"{class_name.lower()}.py")
        if source is None:
            body = f"    category = {category!r}\n" if category else ""
            source = PLUGIN_TEMPLATE.format(class_name=class_name, body=body)
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        return path.resolve()

    return _write
