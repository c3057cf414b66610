# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Platform strategies selected once per process from the platform identifier."""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from functools import cache
from pathlib import Path, PureWindowsPath
from typing import ClassVar

from ..constants import (
    COMSPEC_ENV,
    DEFAULT_COMSPEC,
    DIRECT_EXECUTABLE_EXTENSIONS,
    PATHEXT_ENV,
    POSIX_SHELL,
)
from ..escaping import (
    build_command_line,
    build_posix_command_line,
    is_cmd_builtin,
    is_cmd_itself,
    wrap_for_comspec,
)
from ..models import LaunchPlan, ResolutionOptions, ResolvedInvocation
from ..options import SpawnOptions
from .extensions import is_regular_file, parse_pathext
from .locator import CommandLocator


class PosixResolver(CommandLocator):
    """Resolution for loaders that honour ``#!`` lines and execute permissions.

    Extension probing is the identity, ``PATH`` hits must be executable, and a
    script is only rewritten to run through its interpreter when it lacks the
    execute bit (the kernel handles every other case).
    """

    name: ClassVar[str] = "posix"

    def accept_path_candidate(self, path: Path) -> bool:
        """Accept regular files the current user may execute."""

        return is_regular_file(path) and os.access(path, os.X_OK)

    def needs_interpreter_shim(self, path: Path) -> bool:
        """Return ``True`` when the kernel would refuse ``path`` for lack of the execute bit."""

        return not os.access(path, os.X_OK)

    def build_launch(self, invocation: ResolvedInvocation, options: ResolutionOptions) -> LaunchPlan:
        """Return an argv launch, or ``/bin/sh -c`` when the caller forced a shell."""

        if options.force_shell:
            line = build_posix_command_line(invocation.file, invocation.args)
            return LaunchPlan(invocation=invocation, args=(POSIX_SHELL, "-c", line), shell_mediated=True)
        return LaunchPlan(invocation=invocation, args=tuple(invocation.argv))


class ShellMediatedResolver(CommandLocator):
    """Resolution for Windows, where only ``.exe``/``.com`` start without cmd.exe.

    Bare names are searched in the working directory first and then on
    ``PATH``, trying every ``PATHEXT`` extension. Scripts declaring a ``#!``
    interpreter are rewritten to run through it. Anything that is not a
    directly executable image is launched through ``cmd.exe`` with a fully
    escaped command line.
    """

    name: ClassVar[str] = "shell-mediated"
    path_separators: ClassVar[tuple[str, ...]] = ("/", "\\")
    search_cwd_first: ClassVar[bool] = True

    def env_lookup(self, env: Mapping[str, str], key: str) -> str | None:
        """Return ``env[key]`` matching the key case-insensitively (``Path``, ``PATH``)."""

        if key in env:
            return env[key]
        wanted = key.upper()
        for name, value in env.items():
            if name.upper() == wanted:
                return value
        return None

    def extensions_for(self, env: Mapping[str, str], options: SpawnOptions) -> tuple[str, ...]:
        """Return ``PATHEXT`` from the options or environment as a probe list."""

        value = options.pathext if options.pathext is not None else self.env_lookup(env, PATHEXT_ENV)
        return parse_pathext(value)

    def clean_path_entry(self, entry: str) -> str:
        """Strip whitespace and one pair of surrounding double quotes."""

        stripped = entry.strip()
        if len(stripped) >= 2 and stripped[0] == stripped[-1] == '"':
            return stripped[1:-1]
        return stripped

    def allows_unresolved(self, command: str) -> bool:
        """Let bare cmd.exe built-in names through for cmd to resolve."""

        return not self.has_path_separator(command) and is_cmd_builtin(command)

    def needs_interpreter_shim(self, path: Path) -> bool:
        """Return ``True`` for anything other than ``.exe``/``.com`` images."""

        return path.suffix.lower() not in DIRECT_EXECUTABLE_EXTENSIONS

    def fallback_interpreter(self, declared: str, options: ResolutionOptions) -> Path | None:
        """Look up the basename of a Unix interpreter path (``/usr/bin/node``) on ``PATH``."""

        name = PureWindowsPath(declared).name
        if not name:
            return None
        try:
            return self.locate(name, options)
        except LookupError:
            return None

    def needs_shell(self, invocation: ResolvedInvocation, options: ResolutionOptions) -> bool:
        """Return ``True`` when the invocation has to be handed to cmd.exe."""

        if options.force_shell or not invocation.resolved:
            return True
        return PureWindowsPath(invocation.file).suffix.lower() not in DIRECT_EXECUTABLE_EXTENSIONS

    def build_launch(self, invocation: ResolvedInvocation, options: ResolutionOptions) -> LaunchPlan:
        """Return an argv launch for images, otherwise a verbatim cmd.exe command line."""

        if not self.needs_shell(invocation, options):
            return LaunchPlan(invocation=invocation, args=tuple(invocation.argv))
        comspec = self.env_lookup(options.env, COMSPEC_ENV) or DEFAULT_COMSPEC
        builtin = not invocation.resolved or is_cmd_itself(invocation.file)
        line = build_command_line(invocation.file, invocation.args, builtin=builtin)
        return LaunchPlan(invocation=invocation, args=wrap_for_comspec(comspec, line), shell_mediated=True)


def select_resolver(platform_id: str | None = None) -> CommandLocator:
    """Return the resolution strategy for ``platform_id`` (defaults to ``sys.platform``).

    Args:
        platform_id: Platform identifier as reported by ``sys.platform``.

    Returns:
        CommandLocator: :class:`ShellMediatedResolver` on Windows, otherwise
        :class:`PosixResolver`.
    """

    identifier = sys.platform if platform_id is None else platform_id
    if identifier == "win32":
        return ShellMediatedResolver()
    return PosixResolver()


@cache
def get_resolver() -> CommandLocator:
    """Return the strategy for the running platform, chosen once per process."""

    return select_resolver()


__all__ = ["PosixResolver", "ShellMediatedResolver", "get_resolver", "select_resolver"]
