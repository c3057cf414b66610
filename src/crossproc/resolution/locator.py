# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Platform-neutral command location: PATH walk, extension probing, shebang rewrite."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Mapping, Sequence
from pathlib import Path
from typing import ClassVar

from ..constants import MAX_INTERPRETER_DEPTH, PATH_ENV
from ..errors import ExecutableNotFoundError
from ..models import LaunchPlan, ResolutionOptions, ResolvedInvocation, Shebang
from ..options import SpawnOptions
from .extensions import find_with_extensions, is_regular_file
from .shebang import read_shebang

LOGGER = logging.getLogger(__name__)


class CommandLocator:
    """Resolve a command token into the executable and arguments to launch.

    Subclasses describe the platform: which characters count as path
    separators, how the environment is searched, which candidates are
    acceptable on ``PATH``, and when a script has to be rewritten to run
    through its interpreter explicitly.
    """

    name: ClassVar[str] = "generic"
    path_separators: ClassVar[tuple[str, ...]] = ("/",)
    search_cwd_first: ClassVar[bool] = False

    # -- snapshot -----------------------------------------------------------------

    def snapshot(self, options: SpawnOptions) -> ResolutionOptions:
        """Return the resolution inputs for one call.

        Args:
            options: Validated spawn options.

        Returns:
            ResolutionOptions: Frozen snapshot; later environment changes do not
            affect an invocation already being resolved.
        """

        env = dict(options.env) if options.env is not None else dict(os.environ)
        cwd = Path.cwd() if options.cwd is None else Path(os.path.abspath(options.cwd))
        path_value = options.path if options.path is not None else self.env_lookup(env, PATH_ENV)
        if path_value is None and options.env is not None:
            path_value = self.env_lookup(os.environ, PATH_ENV)
        if path_value is None:
            path_value = os.defpath
        return ResolutionOptions(
            cwd=cwd,
            path_entries=tuple(path_value.split(os.pathsep)),
            extensions=self.extensions_for(env, options),
            force_shell=options.shell,
            env=env,
        )

    def env_lookup(self, env: Mapping[str, str], key: str) -> str | None:
        """Return ``env[key]`` or ``None``."""

        return env.get(key)

    def extensions_for(self, env: Mapping[str, str], options: SpawnOptions) -> tuple[str, ...]:
        """Return the extension list probed for every candidate path."""

        return ("",)

    # -- location -----------------------------------------------------------------

    def has_path_separator(self, token: str) -> bool:
        """Return ``True`` when ``token`` must be treated as a path, not a name."""

        return any(separator in token for separator in self.path_separators)

    def accept_path_candidate(self, path: Path) -> bool:
        """Return ``True`` when a ``PATH`` candidate may be used as the command."""

        return is_regular_file(path)

    def iter_search_dirs(self, options: ResolutionOptions) -> Iterator[Path]:
        """Yield the directories searched for a bare command name, in order."""

        if self.search_cwd_first:
            yield options.cwd
        for entry in options.path_entries:
            cleaned = self.clean_path_entry(entry)
            if not cleaned:
                continue
            directory = Path(cleaned)
            yield directory if directory.is_absolute() else options.cwd / directory

    def clean_path_entry(self, entry: str) -> str:
        """Return ``entry`` ready for use as a directory."""

        return entry

    def locate(self, token: str, options: ResolutionOptions) -> Path:
        """Return the file ``token`` refers to.

        Tokens containing a path separator are resolved against the resolution
        working directory (so ``../bin/tool`` works) and never searched on
        ``PATH``. Bare names are tried in every search directory in order.

        Args:
            token: Command token or interpreter name.
            options: Resolution snapshot.

        Returns:
            Path: Absolute path of the first matching file.

        Raises:
            ExecutableNotFoundError: If nothing matches.
        """

        if self.has_path_separator(token):
            candidate = Path(os.path.abspath(os.path.join(options.cwd, token)))
            return find_with_extensions(candidate, options.extensions)

        tried: list[Path] = []
        for directory in self.iter_search_dirs(options):
            try:
                return find_with_extensions(
                    directory / token,
                    options.extensions,
                    predicate=self.accept_path_candidate,
                )
            except ExecutableNotFoundError as exc:
                tried.extend(exc.candidates)
        raise ExecutableNotFoundError(token, tried)

    def allows_unresolved(self, command: str) -> bool:
        """Return ``True`` when an unresolvable ``command`` may still be launched."""

        return False

    # -- interpreter handling -----------------------------------------------------

    def needs_interpreter_shim(self, path: Path) -> bool:
        """Return ``True`` when ``path`` cannot be started by the OS loader itself."""

        raise NotImplementedError

    def fallback_interpreter(self, declared: str, options: ResolutionOptions) -> Path | None:
        """Return a replacement for a literal interpreter path that does not exist."""

        return None

    def locate_interpreter(self, shebang: Shebang, options: ResolutionOptions) -> Path | None:
        """Return the interpreter named by ``shebang`` or ``None`` when it is missing.

        Bare names (always the case for ``env`` lines) go through the same
        search as a top-level command; literal paths are used as declared.
        """

        if shebang.via_env or not self.has_path_separator(shebang.program):
            try:
                return self.locate(shebang.program, options)
            except ExecutableNotFoundError:
                return None
        literal = Path(os.path.abspath(os.path.join(options.cwd, shebang.program)))
        try:
            return find_with_extensions(literal, options.extensions)
        except ExecutableNotFoundError:
            return self.fallback_interpreter(shebang.program, options)

    def follow_interpreters(
        self,
        located: Path,
        args: Sequence[str],
        options: ResolutionOptions,
    ) -> tuple[str, list[str], list[str]]:
        """Rewrite ``located`` to run through its interpreter when required.

        Args:
            located: Resolved top-level file.
            args: Caller argument vector.
            options: Resolution snapshot.

        Returns:
            tuple[str, list[str], list[str]]: Final executable, final argument
            vector, and the interpreters that were inserted.
        """

        current = str(located)
        argv = list(args)
        interpreters: list[str] = []
        visited: set[str] = set()
        for _ in range(MAX_INTERPRETER_DEPTH):
            if current in visited or not self.needs_interpreter_shim(Path(current)):
                break
            visited.add(current)
            shebang = read_shebang(current)
            if shebang is None:
                break
            prefix = [shebang.argument] if shebang.argument is not None else []
            argv = [*prefix, current, *argv]
            interpreter = self.locate_interpreter(shebang, options)
            if interpreter is None:
                LOGGER.debug("interpreter %s for %s not found", shebang.program, current)
                current = shebang.program
                interpreters.append(current)
                break
            current = str(interpreter)
            interpreters.append(current)
        return current, argv, interpreters

    # -- public contract ----------------------------------------------------------

    def resolve(self, command: str, args: Sequence[str], options: ResolutionOptions) -> ResolvedInvocation:
        """Return the executable and arguments that run ``command``.

        Args:
            command: Command token supplied by the caller.
            args: Caller argument vector (already coerced to text).
            options: Resolution snapshot.

        Returns:
            ResolvedInvocation: Resolved executable and final argument vector.

        Raises:
            ExecutableNotFoundError: If ``command`` cannot be located.
        """

        try:
            located = self.locate(command, options)
        except ExecutableNotFoundError:
            if not self.allows_unresolved(command):
                LOGGER.debug("command %s not found", command)
                raise
            LOGGER.debug("command %s left for the shell to resolve", command)
            return ResolvedInvocation.from_parts(command=command, file=command, args=args, resolved=False)

        file, argv, interpreters = self.follow_interpreters(located, args, options)
        LOGGER.debug("resolved %s -> %s %s", command, file, argv)
        return ResolvedInvocation.from_parts(
            command=command,
            file=file,
            args=argv,
            interpreters=interpreters,
        )

    def build_launch(self, invocation: ResolvedInvocation, options: ResolutionOptions) -> LaunchPlan:
        """Return the payload handed to :class:`subprocess.Popen`."""

        raise NotImplementedError


__all__ = ["CommandLocator"]
