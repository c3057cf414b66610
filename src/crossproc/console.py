# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rich console management for command-line output."""

from __future__ import annotations

import sys
from functools import cache
from typing import Literal

from rich.console import Console


def detect_tty(stream_name: Literal["stdout", "stderr"] = "stdout") -> bool:
    """Return ``True`` when the named standard stream is backed by a terminal.

    Args:
        stream_name: ``"stdout"`` or ``"stderr"``.

    Returns:
        bool: ``True`` when the stream reports TTY support.
    """

    stream = getattr(sys, stream_name, None)
    try:
        return bool(stream is not None and stream.isatty())
    except (AttributeError, ValueError):
        return False


class RichConsoleManager:
    """Provision Rich :class:`Console` instances keyed by colour and target stream."""

    def __init__(self) -> None:
        """Create an empty console cache."""

        self._cache: dict[tuple[bool, bool, bool], Console] = {}

    def get(self, *, color: bool, stderr: bool = False) -> Console:
        """Return a console configured for ``color`` writing to stdout or stderr.

        Args:
            color: ``True`` when ANSI colour output should be enabled.
            stderr: ``True`` to write to standard error.

        Returns:
            Console: Cached or newly constructed console.
        """

        tty = detect_tty("stderr" if stderr else "stdout")
        key = (color, stderr, tty)
        if key not in self._cache:
            self._cache[key] = Console(
                color_system="auto" if color and tty else None,
                force_terminal=tty,
                no_color=not (color and tty),
                stderr=stderr,
                highlight=False,
                soft_wrap=True,
            )
        return self._cache[key]


@cache
def get_console_manager() -> RichConsoleManager:
    """Return the process-wide :class:`RichConsoleManager`."""

    return RichConsoleManager()


__all__ = ["RichConsoleManager", "detect_tty", "get_console_manager"]
