# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Public entry points: resolve, escape where needed, launch, normalise failures."""

from __future__ import annotations

import logging

# Bandit: subprocess usage is intentional; commands are resolved to concrete
# executables and never passed through ``shell=True``.
import subprocess  # nosec B404
from dataclasses import dataclass
from pathlib import Path

from .constants import EXIT_NOT_EXECUTABLE, EXIT_NOT_FOUND
from .errors import ExecutableNotFoundError, SpawnError
from .interfaces import CommandResolver
from .models import LaunchPlan, ResolutionOptions
from .options import SpawnCall, StdioValue, normalize_call
from .process import ChildProcess, split_returncode
from .resolution.strategies import get_resolver

LOGGER = logging.getLogger(__name__)

_STDIO_TARGETS: dict[str, int | None] = {
    "pipe": subprocess.PIPE,
    "ignore": subprocess.DEVNULL,
    "inherit": None,
}


@dataclass(frozen=True, slots=True)
class SpawnSyncResult:
    """Outcome of :func:`spawn_sync`.

    Attributes:
        pid: Process id, ``None`` when the process never started.
        status: Exit status, ``None`` when killed by a signal or never started.
        signal: Terminating signal name, if any.
        stdout: Captured stdout when piped.
        stderr: Captured stderr when piped.
        error: Start failure or timeout, ``None`` otherwise.
    """

    pid: int | None
    status: int | None
    signal: str | None
    stdout: bytes | None
    stderr: bytes | None
    error: SpawnError | None = None


def _stdio_target(value: StdioValue) -> int | None:
    """Return the :class:`subprocess.Popen` value for one stdio disposition."""

    if isinstance(value, str):
        return _STDIO_TARGETS[value]
    return value


def _prepare(call: SpawnCall, resolver: CommandResolver) -> tuple[ResolutionOptions, LaunchPlan]:
    """Resolve ``call`` and return the snapshot together with its launch plan."""

    snapshot = resolver.snapshot(call.options)
    invocation = resolver.resolve(call.command, call.args, snapshot)
    return snapshot, resolver.build_launch(invocation, snapshot)


def _popen(call: SpawnCall, plan: LaunchPlan) -> subprocess.Popen[bytes]:
    """Start the native process described by ``plan``."""

    stdin, stdout, stderr = (_stdio_target(value) for value in call.options.stdio)
    LOGGER.debug("launching %r", plan.popen_args)
    # Bandit: arguments come from resolution; shell mediation, when needed, is an
    # explicit and fully escaped cmd.exe or /bin/sh command line.
    return subprocess.Popen(  # nosec B603
        plan.popen_args,
        cwd=call.options.cwd,
        env=dict(call.options.env) if call.options.env is not None else None,
        stdin=stdin,
        stdout=stdout,
        stderr=stderr,
    )


def _is_missing_loader_target(exc: OSError, call: SpawnCall) -> bool:
    """Return ``True`` when ``exc`` means the loader could not find an interpreter.

    The top-level command was already located, so an ``ENOENT`` from the
    launch itself means something the file depends on is missing. A missing
    working directory also reports ``ENOENT`` but names the directory.
    """

    if not isinstance(exc, FileNotFoundError):
        return False
    cwd = call.options.cwd
    return cwd is None or exc.filename is None or Path(str(exc.filename)) != Path(cwd)


def spawn(
    command: object,
    args: object = None,
    options: object = None,
    /,
    *,
    resolver: CommandResolver | None = None,
) -> ChildProcess:
    """Launch ``command`` with ``args`` and return its :class:`ChildProcess` handle.

    ``args`` and ``options`` may be omitted; an options mapping passed in the
    ``args`` position is recognised as options. Neither value is modified.

    Args:
        command: Bare name, relative path or absolute path of the program.
        args: Argument vector (values are coerced to text).
        options: Mapping or :class:`~crossproc.options.SpawnOptions`.
        resolver: Strategy override; defaults to the platform strategy.

    Returns:
        ChildProcess: Live handle. Call :meth:`ChildProcess.wait` to deliver events.

    Raises:
        TypeError: If ``command`` or ``args`` have the wrong shape.
        ValueError: If ``command`` is empty or the options are invalid.
        SpawnError: If the command is not found and ``raise_on_not_found`` is set.
    """

    call = normalize_call(command, args, options)
    strategy = resolver or get_resolver()
    try:
        _, plan = _prepare(call, strategy)
    except ExecutableNotFoundError:
        error = SpawnError.not_found(call.command, call.args)
        if call.options.raise_on_not_found:
            raise error from None
        child = ChildProcess(call.command, call.args)
        child._start_failed(error, EXIT_NOT_FOUND)
        return child

    child = ChildProcess(call.command, call.args, plan)
    try:
        popen = _popen(call, plan)
    except OSError as exc:
        if _is_missing_loader_target(exc, call):
            LOGGER.debug("%s resolved but could not be loaded: %s", call.command, exc)
            child._launch_failed(EXIT_NOT_FOUND)
        else:
            child._start_failed(SpawnError.from_os_error(exc, call.command, call.args), EXIT_NOT_EXECUTABLE)
        return child
    child._attach(popen)
    return child


def spawn_sync(
    command: object,
    args: object = None,
    options: object = None,
    /,
    *,
    input: bytes | None = None,  # noqa: A002 - mirrors subprocess.run
    timeout: float | None = None,
    resolver: CommandResolver | None = None,
) -> SpawnSyncResult:
    """Run ``command`` to completion and return its captured result.

    Resolution, escaping and failure classification are identical to
    :func:`spawn`. A command that cannot be found yields a result whose
    ``error`` is the ``ENOENT`` :class:`SpawnError`; a timeout kills the child
    and reports ``ETIMEDOUT``.

    Args:
        command: Program to run.
        args: Argument vector.
        options: Mapping or :class:`~crossproc.options.SpawnOptions`.
        input: Bytes written to a piped stdin.
        timeout: Seconds to wait before killing the child.
        resolver: Strategy override.

    Returns:
        SpawnSyncResult: Exit status, signal, captured output and any error.
    """

    call = normalize_call(command, args, options)
    strategy = resolver or get_resolver()
    try:
        _, plan = _prepare(call, strategy)
    except ExecutableNotFoundError:
        error = SpawnError.not_found(call.command, call.args)
        if call.options.raise_on_not_found:
            raise error from None
        return SpawnSyncResult(pid=None, status=None, signal=None, stdout=None, stderr=None, error=error)

    try:
        popen = _popen(call, plan)
    except OSError as exc:
        if _is_missing_loader_target(exc, call):
            return SpawnSyncResult(pid=None, status=EXIT_NOT_FOUND, signal=None, stdout=None, stderr=None)
        error = SpawnError.from_os_error(exc, call.command, call.args)
        return SpawnSyncResult(pid=None, status=None, signal=None, stdout=None, stderr=None, error=error)

    timeout_error: SpawnError | None = None
    with popen:
        try:
            stdout, stderr = popen.communicate(input=input, timeout=timeout)
        except subprocess.TimeoutExpired:
            popen.kill()
            stdout, stderr = popen.communicate()
            timeout_error = SpawnError("ETIMEDOUT", call.command, call.args)
    status, signal_name = split_returncode(popen.returncode)
    return SpawnSyncResult(
        pid=popen.pid,
        status=status,
        signal=signal_name,
        stdout=stdout,
        stderr=stderr,
        error=timeout_error,
    )


__all__ = ["SpawnSyncResult", "spawn", "spawn_sync"]
