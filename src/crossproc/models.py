# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Data models produced by command resolution and consumed by the launcher."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True, slots=True)
class ResolutionOptions:
    """Read-only snapshot of everything resolution depends on.

    Attributes:
        cwd: Directory relative command tokens are resolved against.
        path_entries: Directories searched for bare command names, in order.
        extensions: Suffixes tried after the unmodified path (``""`` first).
        force_shell: Whether the caller asked for shell mediation.
        env: Environment mapping the child will receive.
    """

    cwd: Path
    path_entries: tuple[str, ...]
    extensions: tuple[str, ...] = ("",)
    force_shell: bool = False
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Shebang:
    """Interpreter directive parsed from the first line of a script.

    Attributes:
        program: Interpreter path, or a bare name when declared through ``env``.
        argument: Optional single argument following the program.
        via_env: ``True`` when the line used ``/usr/bin/env`` indirection.
    """

    program: str
    argument: str | None = None
    via_env: bool = False


class ResolvedInvocation(BaseModel):
    """Executable and argument vector produced by the command locator."""

    model_config = ConfigDict(frozen=True)

    command: str
    file: str
    args: tuple[str, ...] = ()
    resolved: bool = True
    interpreters: tuple[str, ...] = Field(default_factory=tuple)

    @property
    def argv(self) -> list[str]:
        """Return ``[file, *args]`` as a new list."""

        return [self.file, *self.args]

    @classmethod
    def from_parts(
        cls,
        *,
        command: str,
        file: str | Path,
        args: Sequence[str],
        resolved: bool = True,
        interpreters: Sequence[str] = (),
    ) -> ResolvedInvocation:
        """Build an invocation from loosely typed parts."""

        return cls(
            command=command,
            file=str(file),
            args=tuple(args),
            resolved=resolved,
            interpreters=tuple(interpreters),
        )


class LaunchPlan(BaseModel):
    """Exact payload handed to :class:`subprocess.Popen`.

    ``args`` is either an argument list or, for shell-mediated launches on
    Windows, a single command line that must reach ``CreateProcess`` verbatim.
    """

    model_config = ConfigDict(frozen=True)

    invocation: ResolvedInvocation
    args: tuple[str, ...] | str
    shell_mediated: bool = False

    @property
    def popen_args(self) -> list[str] | str:
        """Return the value passed as the first argument to ``Popen``."""

        return self.args if isinstance(self.args, str) else list(self.args)


__all__ = ["LaunchPlan", "ResolutionOptions", "ResolvedInvocation", "Shebang"]
