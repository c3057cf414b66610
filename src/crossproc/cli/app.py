# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Typer application exposing resolution, quoting and launching from the shell."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Annotated, Final

import typer

from ..constants import EXIT_NOT_FOUND
from ..errors import ExecutableNotFoundError, SpawnError
from ..escaping import build_command_line, build_posix_command_line
from ..logging import debug_requested, enable_debug_logging, fail, info, ok, warn
from ..options import SpawnOptions
from ..resolution.locator import CommandLocator
from ..resolution.strategies import get_resolver, select_resolver
from ..spawn import spawn

_PASSTHROUGH_CONTEXT: Final[dict[str, bool]] = {
    "allow_interspersed_args": False,
    "ignore_unknown_options": True,
}


class PlatformChoice(StrEnum):
    """Strategy selectable from the command line."""

    CURRENT = "current"
    POSIX = "posix"
    WINDOWS = "win32"


app = typer.Typer(help="Portable command resolution and launching.", no_args_is_help=True)


def _strategy(platform: PlatformChoice) -> CommandLocator:
    """Return the resolver for ``platform``."""

    if platform is PlatformChoice.CURRENT:
        return get_resolver()
    return select_resolver(platform.value)


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log resolution steps to stderr.")] = False,
) -> None:
    """Configure diagnostic logging for every sub-command."""

    if verbose or debug_requested():
        enable_debug_logging()


@app.command("which")
def which_command(
    command: Annotated[str, typer.Argument(help="Command token to resolve.")],
    args: Annotated[list[str] | None, typer.Argument(help="Arguments to include in the invocation.")] = None,
    cwd: Annotated[Path | None, typer.Option(help="Resolve relative to this directory.")] = None,
    shell: Annotated[bool, typer.Option(help="Show the shell-mediated launch.")] = False,
    platform: Annotated[PlatformChoice, typer.Option(help="Resolution strategy.")] = PlatformChoice.CURRENT,
) -> None:
    """Print the executable, argument vector and launch payload for COMMAND."""

    strategy = _strategy(platform)
    snapshot = strategy.snapshot(SpawnOptions(cwd=cwd, shell=shell))
    try:
        invocation = strategy.resolve(command, list(args or []), snapshot)
    except ExecutableNotFoundError as exc:
        fail(str(exc))
        raise typer.Exit(code=EXIT_NOT_FOUND) from None
    plan = strategy.build_launch(invocation, snapshot)
    ok(invocation.file)
    for argument in invocation.args:
        info(f"  {argument!r}")
    for interpreter in invocation.interpreters:
        info(f"interpreter: {interpreter}")
    if plan.shell_mediated:
        info(f"launch: {plan.popen_args if isinstance(plan.popen_args, str) else ' '.join(plan.popen_args)}")


@app.command("quote")
def quote_command(
    command: Annotated[str, typer.Argument(help="Executable placed first on the command line.")],
    args: Annotated[list[str] | None, typer.Argument(help="Arguments to escape.")] = None,
    platform: Annotated[PlatformChoice, typer.Option(help="Target shell rules.")] = PlatformChoice.WINDOWS,
) -> None:
    """Print the escaped command line a shell-mediated launch would use."""

    argv = list(args or [])
    if platform is PlatformChoice.POSIX:
        typer.echo(build_posix_command_line(command, argv))
        return
    if platform is PlatformChoice.CURRENT and get_resolver().name == "posix":
        typer.echo(build_posix_command_line(command, argv))
        return
    typer.echo(build_command_line(command, argv))


@app.command("run", context_settings=_PASSTHROUGH_CONTEXT)
def run_command(
    command: Annotated[str, typer.Argument(help="Command to run.")],
    args: Annotated[list[str] | None, typer.Argument(help="Arguments passed to the command.")] = None,
    cwd: Annotated[Path | None, typer.Option(help="Working directory for the child.")] = None,
    shell: Annotated[bool, typer.Option(help="Force shell mediation.")] = False,
) -> None:
    """Run COMMAND with inherited stdio and exit with its status."""

    options = SpawnOptions(cwd=cwd, shell=shell, stdio="inherit")
    child = spawn(command, list(args or []), options)
    errors: list[SpawnError] = []
    child.on("error", errors.append)
    code = child.wait()
    for error in errors:
        fail(str(error))
    if code is None:
        warn(f"{command} terminated by {child.signal_code}")
        raise typer.Exit(code=1)
    raise typer.Exit(code=code)


def main() -> None:
    """Console-script entry point."""

    app()


__all__ = ["app", "main"]
