# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Portable process launching with PATH, PATHEXT, shebang and cmd.exe handling."""

from __future__ import annotations

from importlib import metadata

from .errors import ExecutableNotFoundError, InvalidTransitionError, SpawnError
from .escaping import build_command_line, escape_argument, escape_command
from .lifecycle import LifecycleState
from .models import LaunchPlan, ResolutionOptions, ResolvedInvocation, Shebang
from .options import SpawnOptions
from .process import ChildProcess, ChildStream
from .resolution import PosixResolver, ShellMediatedResolver, get_resolver, read_shebang, select_resolver
from .spawn import SpawnSyncResult, spawn, spawn_sync

__all__ = [
    "ChildProcess",
    "ChildStream",
    "ExecutableNotFoundError",
    "InvalidTransitionError",
    "LaunchPlan",
    "LifecycleState",
    "PosixResolver",
    "ResolutionOptions",
    "ResolvedInvocation",
    "Shebang",
    "ShellMediatedResolver",
    "SpawnError",
    "SpawnOptions",
    "SpawnSyncResult",
    "__version__",
    "build_command_line",
    "escape_argument",
    "escape_command",
    "get_resolver",
    "read_shebang",
    "select_resolver",
    "spawn",
    "spawn_sync",
]

try:
    __version__ = metadata.version("crossproc")
except metadata.PackageNotFoundError:  # pragma: no cover - local development fallback
    __version__ = "0.0.0"
