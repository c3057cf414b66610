# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Interpreter-directive (``#!``) sniffing for script files."""

from __future__ import annotations

import logging
from pathlib import Path

from ..constants import ENV_PROGRAM, ENV_SPLIT_FLAG, SHEBANG_MARKER, SHEBANG_READ_BYTES
from ..models import Shebang

LOGGER = logging.getLogger(__name__)


def _read_first_line(path: Path) -> bytes | None:
    """Return the first line of ``path`` (bounded read), or ``None`` on I/O failure."""

    try:
        with path.open("rb") as handle:
            head = handle.read(SHEBANG_READ_BYTES)
    except OSError as exc:
        LOGGER.debug("cannot read %s for shebang detection: %s", path, exc)
        return None
    return head.split(b"\n", 1)[0]


def _split_once(text: str) -> tuple[str, str | None]:
    """Split ``text`` at the first whitespace run into program and remainder."""

    parts = text.split(None, 1)
    if len(parts) == 1:
        return parts[0], None
    return parts[0], parts[1].strip() or None


def parse_shebang_line(line: str) -> Shebang | None:
    """Parse one interpreter-directive line.

    Args:
        line: First line of a file, with or without the ``#!`` marker.

    Returns:
        Shebang | None: Parsed directive, or ``None`` when ``line`` is not one
        or names no program.
    """

    if not line.startswith("#!"):
        return None
    body = line[2:].strip()
    if not body:
        return None
    program, argument = _split_once(body)
    if Path(program).name != ENV_PROGRAM:
        return Shebang(program=program, argument=argument)

    # env indirection: the next token names the interpreter to look up on PATH.
    if argument is None:
        return None
    target, remainder = _split_once(argument)
    if target == ENV_SPLIT_FLAG:
        if remainder is None:
            return None
        target, remainder = _split_once(remainder)
    return Shebang(program=target, argument=remainder, via_env=True)


def read_shebang(path: str | Path) -> Shebang | None:
    """Return the interpreter directive declared by ``path``, if any.

    Only the first :data:`~crossproc.constants.SHEBANG_READ_BYTES` bytes are
    read. Unreadable files, binaries and files without the ``#!`` marker all
    report "no interpreter"; I/O errors are never propagated.

    Args:
        path: File believed to be directly executable.

    Returns:
        Shebang | None: Parsed directive or ``None``.
    """

    first_line = _read_first_line(Path(path))
    if first_line is None or not first_line.startswith(SHEBANG_MARKER):
        return None
    try:
        text = first_line.decode("utf-8")
    except UnicodeDecodeError:
        return None
    return parse_shebang_line(text.rstrip("\r"))


__all__ = ["parse_shebang_line", "read_shebang"]
