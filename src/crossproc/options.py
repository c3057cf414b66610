# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Caller-facing spawn options and normalisation of the positional calling convention."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator

StdioMode: TypeAlias = Literal["pipe", "inherit", "ignore"]
StdioValue: TypeAlias = StdioMode | int
StdioTriple: TypeAlias = tuple[StdioValue, StdioValue, StdioValue]

_STREAM_COUNT = 3


class SpawnOptions(BaseModel):
    """Options accepted by :func:`crossproc.spawn` and :func:`crossproc.spawn_sync`.

    Attributes:
        cwd: Working directory used for both resolution and the child.
        env: Environment for the child; also the source of ``PATH``/``PATHEXT``.
        stdio: Per-stream disposition for stdin, stdout and stderr.
        shell: Force shell mediation even where the platform does not need it.
        path: Explicit ``PATH`` value overriding the environment.
        pathext: Explicit ``PATHEXT`` value overriding the environment.
        raise_on_not_found: Raise :class:`~crossproc.errors.SpawnError` from
            ``spawn`` instead of emitting an ``error`` event.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    cwd: Path | None = None
    env: dict[str, str] | None = None
    stdio: StdioTriple = Field(default=("pipe", "pipe", "pipe"))
    shell: bool = False
    path: str | None = None
    pathext: str | None = None
    raise_on_not_found: bool = False

    @field_validator("stdio", mode="before")
    @classmethod
    def _expand_stdio(cls, value: Any) -> Any:
        """Expand a single disposition or a short sequence into a triple."""

        if value is None:
            return ("pipe",) * _STREAM_COUNT
        if isinstance(value, (str, int)):
            return (value,) * _STREAM_COUNT
        if isinstance(value, Sequence):
            entries = ["pipe" if entry is None else entry for entry in value]
            if len(entries) < _STREAM_COUNT:
                entries.extend(["pipe"] * (_STREAM_COUNT - len(entries)))
            return tuple(entries)
        return value

    @field_validator("cwd", mode="before")
    @classmethod
    def _coerce_cwd(cls, value: Any) -> Any:
        """Accept text and path-like working directories."""

        if isinstance(value, (str, os.PathLike)):
            return Path(value)
        return value


@dataclass(frozen=True, slots=True)
class SpawnCall:
    """Normalised view of one ``spawn`` invocation.

    Attributes:
        command: Command token exactly as supplied (as text).
        args: Argument vector coerced to strings.
        options: Validated options; a fresh object, never the caller's.
    """

    command: str
    args: tuple[str, ...]
    options: SpawnOptions


def coerce_argument(value: object) -> str:
    """Return the textual form of one argument value.

    Args:
        value: Argument supplied by the caller.

    Returns:
        str: ``value`` unchanged for text, decoded for bytes, ``os.fspath`` for
        path-like values, and ``str(value)`` for everything else.
    """

    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode(errors="replace")
    if isinstance(value, os.PathLike):
        path_value = os.fspath(value)
        return path_value if isinstance(path_value, str) else path_value.decode(errors="replace")
    return str(value)


def _looks_like_options(value: object) -> bool:
    """Return ``True`` when ``value`` is options-shaped rather than an argument vector."""

    return isinstance(value, (SpawnOptions, Mapping))


def _build_options(value: object) -> SpawnOptions:
    """Return validated options from ``None``, a mapping or a model."""

    if value is None:
        return SpawnOptions()
    if isinstance(value, SpawnOptions):
        return value
    if isinstance(value, Mapping):
        return SpawnOptions.model_validate(dict(value))
    raise TypeError(f"options must be a mapping or SpawnOptions, not {type(value).__name__}")


def normalize_call(command: object, args: object = None, options: object = None) -> SpawnCall:
    """Validate ``spawn`` parameters and resolve the optional positional convention.

    Callers may pass any prefix of ``(args, options)``; an options-shaped value
    (a mapping or :class:`SpawnOptions`) in the ``args`` slot is taken as the
    options and the argument vector defaults to empty.

    Args:
        command: Command token to run.
        args: Argument vector, ``None``, or an options-shaped value.
        options: Options mapping, :class:`SpawnOptions`, or ``None``.

    Returns:
        SpawnCall: Immutable call description built from copies of the inputs.

    Raises:
        TypeError: If ``command`` is not text/path-like or ``args`` is not a sequence.
        ValueError: If ``command`` is empty.
    """

    if isinstance(command, os.PathLike):
        command = coerce_argument(command)
    if not isinstance(command, str):
        raise TypeError(f"command must be a string, not {type(command).__name__}")
    if not command:
        raise ValueError("command must be a non-empty string")

    if _looks_like_options(args):
        if options is not None:
            raise TypeError("options supplied twice")
        args, options = None, args

    if args is None:
        argv: tuple[str, ...] = ()
    elif isinstance(args, (str, bytes)) or not isinstance(args, Sequence):
        raise TypeError(f"args must be a sequence of arguments, not {type(args).__name__}")
    else:
        argv = tuple(coerce_argument(item) for item in args)

    return SpawnCall(command=command, args=argv, options=_build_options(options))


__all__ = [
    "SpawnCall",
    "SpawnOptions",
    "StdioMode",
    "StdioTriple",
    "StdioValue",
    "coerce_argument",
    "normalize_call",
]
