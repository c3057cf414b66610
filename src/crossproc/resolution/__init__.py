# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command resolution: PATH search, extension probing and interpreter rewriting."""

from __future__ import annotations

from .extensions import find_with_extensions, is_regular_file, parse_pathext
from .locator import CommandLocator
from .shebang import parse_shebang_line, read_shebang
from .strategies import PosixResolver, ShellMediatedResolver, get_resolver, select_resolver

__all__ = [
    "CommandLocator",
    "PosixResolver",
    "ShellMediatedResolver",
    "find_with_extensions",
    "get_resolver",
    "is_regular_file",
    "parse_pathext",
    "parse_shebang_line",
    "read_shebang",
    "select_resolver",
]
