"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from collections.abc import Callable
from pathlib import Path

import pytest

TreeSpec = dict[str, "str | bytes | TreeSpec | None"]


def build_tree(base: Path, spec: TreeSpec) -> None:
    """Create files and directories below base from a nested dict.

    Strings and bytes become file contents, dicts become directories and
    None becomes an empty directory.
    """
    for name, content in spec.items():
        path = base / name
        if isinstance(content, dict):
            path.mkdir(parents=True, exist_ok=True)
            build_tree(path, content)
        elif content is None:
            path.mkdir(parents=True, exist_ok=True)
        elif isinstance(content, bytes):
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[TreeSpec], Path]:
    """Factory that builds a directory tree below a fresh root and returns it."""

    def _make(spec: TreeSpec) -> Path:
        root = tmp_path / "root"
        root.mkdir(exist_ok=True)
        build_tree(root, spec)
        return root

    return _make


@pytest.fixture
def project_tree(make_tree: Callable[[TreeSpec], Path]) -> Path:
    """A small project with build output, logs and a nested ignore file."""
    return make_tree(
        {
            ".gitignore": "*.log\nbuild/\n",
            "main.py": "print('hi')\n",
            "debug.log": b"x" * 10,
            "build": {"out.bin": b"y" * 100, "obj": {"a.o": b"z" * 5}},
            "src": {
                ".gitignore": "!keep.log\n",
                "keep.log": "keep\n",
                "trace.log": b"t" * 7,
                "app.py": "",
            },
        }
    )


@pytest.fixture
def isolated_config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG_CONFIG_HOME at a temporary directory."""
    config_home = tmp_path / "xdg-config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home
