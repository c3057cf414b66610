# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

ScriptWriter = Callable[..., Path]


@pytest.fixture
def write_script() -> ScriptWriter:
    """Return a helper writing a script with an optional interpreter line."""

    def _write(path: Path, body: str, *, shebang: str | None = None, executable: bool = True) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        header = f"#!{shebang}\n" if shebang is not None else ""
        path.write_text(header + body, encoding="utf-8")
        path.chmod(0o755 if executable else 0o644)
        return path

    return _write


@pytest.fixture
def bin_dir(tmp_path: Path) -> Path:
    """Return a directory containing ``pyinterp``, a link to the running interpreter."""

    directory = tmp_path / "bin"
    directory.mkdir()
    if sys.platform != "win32":
        (directory / "pyinterp").symlink_to(sys.executable)
    return directory


@pytest.fixture
def child_env(bin_dir: Path) -> dict[str, str]:
    """Return an environment whose ``PATH`` starts with :func:`bin_dir`."""

    env = dict(os.environ)
    env["PATH"] = os.pathsep.join([str(bin_dir), env.get("PATH", os.defpath)])
    return env
