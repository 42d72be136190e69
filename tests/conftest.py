"""
Pytest configuration and fixtures for unfold tests.
"""

from pathlib import Path
from typing import Callable, Dict

import pytest

from unfold.core.config import Settings


def write_tree(root: Path, files: Dict[str, str]) -> Path:
    """Create ``files`` (relative path -> text content) under ``root``."""
    root.mkdir(parents=True, exist_ok=True)
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[..., Path]:
    """Factory creating a source tree under ``tmp_path``."""

    def _make(files: Dict[str, str], name: str = "source") -> Path:
        return write_tree(tmp_path / name, files)

    return _make


@pytest.fixture
def settings() -> Settings:
    """Settings with defaults, isolated from the environment."""
    return Settings(_env_file=None)


@pytest.fixture
def no_open():
    """Opener that records the paths it was asked to open."""
    opened = []

    def _open(path: Path) -> None:
        opened.append(path)

    _open.opened = opened
    return _open
