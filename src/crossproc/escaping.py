# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command-line escaping for shell-mediated process creation.

``cmd.exe /d /s /c "<line>"`` parses ``<line>`` twice: cmd itself consumes
caret escapes and reacts to metacharacters, then the target program splits the
remaining text with the Microsoft C runtime rules (backslashes are literal
unless they precede a double quote). Arguments are therefore first quoted for
the C runtime and then caret-escaped for cmd, which keeps every metacharacter,
including the inserted quotes, away from cmd's own interpretation.

Shell built-ins such as ``echo`` never go through the C runtime split, so they
only receive the caret pass and no quoting.
"""

from __future__ import annotations

import re
import shlex
from collections.abc import Iterable
from pathlib import PureWindowsPath
from typing import Final

from .constants import CMD_BUILTINS
from .options import coerce_argument

_META_CHARS: Final[re.Pattern[str]] = re.compile(r'([()\][%!^"`<>&|;, *?])')
_BUILTIN_META_CHARS: Final[re.Pattern[str]] = re.compile(r"([()%!^<>&|;,\"' ])")
_BACKSLASHES_BEFORE_QUOTE: Final[re.Pattern[str]] = re.compile(r'(\\*)"')
_TRAILING_BACKSLASHES: Final[re.Pattern[str]] = re.compile(r"(\\*)\Z")
_PLAIN_COMMAND: Final[re.Pattern[str]] = re.compile(r"[A-Za-z0-9_-]+")
_CMD_SHIM: Final[re.Pattern[str]] = re.compile(r"node_modules[\\/]\.bin[\\/][^\\/]+\.cmd\Z", re.IGNORECASE)


def _caret_escape(text: str, pattern: re.Pattern[str], rounds: int) -> str:
    """Prefix every ``pattern`` match with ``^``, ``rounds`` times."""

    for _ in range(rounds):
        text = pattern.sub(r"^\1", text)
    return text


def quote_for_crt(value: object) -> str:
    """Return ``value`` quoted so the C runtime argv parser yields it unchanged.

    Args:
        value: Argument of any shape; coerced to text first.

    Returns:
        str: Double-quoted argument with embedded quotes and trailing
        backslashes escaped.
    """

    text = coerce_argument(value)
    text = _BACKSLASHES_BEFORE_QUOTE.sub(r'\1\1\\"', text)
    text = _TRAILING_BACKSLASHES.sub(r"\1\1", text, count=1)
    return f'"{text}"'


def escape_argument(value: object, *, double_escape: bool = False) -> str:
    """Escape one argument for an external program started through cmd.exe.

    Args:
        value: Argument of any shape; coerced to text first.
        double_escape: Apply the caret pass twice, for targets (npm cmd-shims)
            that re-parse their arguments through a second cmd expansion.

    Returns:
        str: Escaped argument that survives cmd and the C runtime unchanged.
    """

    return _caret_escape(quote_for_crt(value), _META_CHARS, 2 if double_escape else 1)


def escape_builtin_argument(value: object) -> str:
    """Escape one argument for a cmd.exe built-in (``echo``, ``set``...)."""

    return _caret_escape(coerce_argument(value), _BUILTIN_META_CHARS, 1)


def escape_command(command: object) -> str:
    """Escape the executable position of a cmd.exe command line.

    Bare names made of letters, digits, ``_`` and ``-`` are left alone so that
    built-ins keep working; anything else is escaped like an argument.

    Args:
        command: Executable path or name.

    Returns:
        str: Escaped executable.
    """

    text = coerce_argument(command)
    if _PLAIN_COMMAND.fullmatch(text):
        return text
    return escape_argument(text)


def is_cmd_builtin(command: str) -> bool:
    """Return ``True`` when ``command`` names a cmd.exe built-in or cmd itself."""

    name = PureWindowsPath(command).name.lower()
    stem = name.removesuffix(".exe")
    return stem in CMD_BUILTINS


def is_cmd_itself(command: str) -> bool:
    """Return ``True`` when ``command`` names cmd.exe."""

    return PureWindowsPath(command).name.lower() in {"cmd", "cmd.exe"}


def is_cmd_shim(path: str) -> bool:
    """Return ``True`` for npm-generated ``node_modules/.bin/*.cmd`` wrappers."""

    return _CMD_SHIM.search(path) is not None


def build_command_line(command: object, args: Iterable[object], *, builtin: bool | None = None) -> str:
    """Return the single cmd.exe command line reproducing ``[command, *args]``.

    Args:
        command: Resolved executable (path or built-in name).
        args: Final argument vector; values are coerced to text.
        builtin: Whether cmd.exe runs ``command`` itself, so arguments only get
            the caret pass. ``None`` treats ``command`` as an unresolved token
            and decides from its name.

    Returns:
        str: Space-joined escaped executable followed by escaped arguments.
    """

    command_text = coerce_argument(command)
    if builtin is None:
        bare = not any(separator in command_text for separator in ("/", "\\"))
        builtin = is_cmd_itself(command_text) or (bare and is_cmd_builtin(command_text))
    if builtin:
        escaped_args = [escape_builtin_argument(arg) for arg in args]
    else:
        double = is_cmd_shim(command_text)
        escaped_args = [escape_argument(arg, double_escape=double) for arg in args]
    return " ".join([escape_command(command_text), *escaped_args])


def wrap_for_comspec(comspec: str, command_line: str) -> str:
    """Return the verbatim ``CreateProcess`` string running ``command_line`` via cmd.

    ``/d`` skips AutoRun registry commands and ``/s`` makes cmd strip exactly
    the outer quote pair added here.
    """

    return f'{quote_for_crt(comspec) if " " in comspec else comspec} /d /s /c "{command_line}"'


def build_posix_command_line(command: object, args: Iterable[object]) -> str:
    """Return a ``/bin/sh`` command line reproducing ``[command, *args]``."""

    return shlex.join([coerce_argument(command), *(coerce_argument(arg) for arg in args)])


__all__ = [
    "build_command_line",
    "build_posix_command_line",
    "escape_argument",
    "escape_builtin_argument",
    "escape_command",
    "is_cmd_builtin",
    "is_cmd_itself",
    "is_cmd_shim",
    "quote_for_crt",
    "wrap_for_comspec",
]
