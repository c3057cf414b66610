# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing message helpers and opt-in diagnostic logging."""

from __future__ import annotations

import logging
import os
import sys

from rich.text import Text

from .console import detect_tty, get_console_manager
from .constants import DEBUG_ENV

PACKAGE_LOGGER = logging.getLogger("crossproc")
_TRUTHY = frozenset({"1", "true", "yes", "on"})


def enable_debug_logging() -> None:
    """Stream ``crossproc`` debug records to stderr (idempotent)."""

    if getattr(PACKAGE_LOGGER, "_crossproc_verbose_configured", False):
        return
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    PACKAGE_LOGGER.addHandler(handler)
    PACKAGE_LOGGER.setLevel(logging.DEBUG)
    PACKAGE_LOGGER.propagate = False
    setattr(PACKAGE_LOGGER, "_crossproc_verbose_configured", True)


def debug_requested(env: dict[str, str] | None = None) -> bool:
    """Return ``True`` when ``CROSSPROC_DEBUG`` asks for diagnostic logging."""

    source = os.environ if env is None else env
    return source.get(DEBUG_ENV, "").strip().lower() in _TRUTHY


def _print_line(msg: str, *, style: str | None, use_color: bool | None, stderr: bool = False) -> None:
    """Render ``msg`` through the shared console.

    Args:
        msg: Message text.
        style: Rich style applied when colour output is active.
        use_color: Explicit colour flag; ``None`` follows TTY detection.
        stderr: Write to standard error instead of standard output.
    """

    color_enabled = detect_tty("stderr" if stderr else "stdout") if use_color is None else use_color
    console = get_console_manager().get(color=color_enabled, stderr=stderr)
    text = Text(msg)
    if style and color_enabled:
        text.stylize(style)
    console.print(text)


def info(msg: str, *, use_color: bool | None = None) -> None:
    """Emit an informational message."""

    _print_line(msg, style="cyan", use_color=use_color)


def ok(msg: str, *, use_color: bool | None = None) -> None:
    """Emit a success message."""

    _print_line(msg, style="green", use_color=use_color)


def warn(msg: str, *, use_color: bool | None = None) -> None:
    """Emit a warning message on stderr."""

    _print_line(msg, style="yellow", use_color=use_color, stderr=True)


def fail(msg: str, *, use_color: bool | None = None) -> None:
    """Emit an error message on stderr."""

    _print_line(msg, style="red", use_color=use_color, stderr=True)


__all__ = ["debug_requested", "enable_debug_logging", "fail", "info", "ok", "warn"]
