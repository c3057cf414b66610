# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception types raised or emitted while resolving and launching commands."""

from __future__ import annotations

import errno as _errno
from collections.abc import Sequence
from pathlib import Path


class ExecutableNotFoundError(LookupError):
    """Raised when a command or candidate path does not resolve to a file."""

    def __init__(self, command: str, candidates: Sequence[Path] = ()) -> None:
        """Record the command token and every candidate that was probed.

        Args:
            command: Command token or path that failed to resolve.
            candidates: Filesystem paths tried before giving up.
        """

        super().__init__(f"Executable '{command}' could not be located")
        self.command = command
        self.candidates = tuple(candidates)


class InvalidTransitionError(RuntimeError):
    """Raised when a lifecycle transition is not permitted from the current state."""


class SpawnError(RuntimeError):
    """Start failure reported through the ``error`` event of a child process.

    The attribute layout mirrors the information a caller needs to react to a
    failed launch: ``code`` is the symbolic errno name (``"ENOENT"``), ``errno``
    repeats that name, and ``syscall`` names the failed operation together with
    the attempted command.
    """

    def __init__(self, code: str, command: str, spawnargs: Sequence[str] = ()) -> None:
        """Initialise the error for ``command``.

        Args:
            code: Symbolic errno name such as ``"ENOENT"`` or ``"EACCES"``.
            command: Command token the caller asked to run.
            spawnargs: Argument vector supplied alongside the command.
        """

        syscall = f"spawn {command}"
        super().__init__(f"{syscall} {code}")
        self.code = code
        self.errno = code
        self.syscall = syscall
        self.path = command
        self.spawnargs = tuple(spawnargs)

    @classmethod
    def not_found(cls, command: str, spawnargs: Sequence[str] = ()) -> SpawnError:
        """Return the error describing a command that could not be located."""

        return cls("ENOENT", command, spawnargs)

    @classmethod
    def from_os_error(cls, exc: OSError, command: str, spawnargs: Sequence[str] = ()) -> SpawnError:
        """Return an error carrying the symbolic name of ``exc.errno``.

        Args:
            exc: Operating system error raised by the native spawn primitive.
            command: Command token the caller asked to run.
            spawnargs: Argument vector supplied alongside the command.

        Returns:
            SpawnError: Error whose ``code`` matches the errno of ``exc``.
        """

        code = _errno.errorcode.get(exc.errno or 0, "EUNKNOWN")
        return cls(code, command, spawnargs)


__all__ = ["ExecutableNotFoundError", "InvalidTransitionError", "SpawnError"]
