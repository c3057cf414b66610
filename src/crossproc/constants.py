# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Constants shared by command resolution, escaping and process launch."""

from __future__ import annotations

from typing import Final

PATH_ENV: Final[str] = "PATH"
PATHEXT_ENV: Final[str] = "PATHEXT"
COMSPEC_ENV: Final[str] = "COMSPEC"
DEBUG_ENV: Final[str] = "CROSSPROC_DEBUG"

DEFAULT_PATHEXT: Final[str] = ".COM;.EXE;.BAT;.CMD"
DEFAULT_COMSPEC: Final[str] = "cmd.exe"
POSIX_SHELL: Final[str] = "/bin/sh"

SHEBANG_MARKER: Final[bytes] = b"#!"
SHEBANG_READ_BYTES: Final[int] = 150
MAX_INTERPRETER_DEPTH: Final[int] = 4
ENV_PROGRAM: Final[str] = "env"
ENV_SPLIT_FLAG: Final[str] = "-S"

# Extensions the Windows loader starts directly; anything else needs cmd.exe.
DIRECT_EXECUTABLE_EXTENSIONS: Final[frozenset[str]] = frozenset({".exe", ".com"})

# Internal commands of cmd.exe; they only exist inside the shell.
CMD_BUILTINS: Final[frozenset[str]] = frozenset(
    {
        "assoc",
        "break",
        "call",
        "cd",
        "chdir",
        "cls",
        "cmd",
        "color",
        "copy",
        "date",
        "del",
        "dir",
        "echo",
        "endlocal",
        "erase",
        "exit",
        "ftype",
        "md",
        "mkdir",
        "mklink",
        "move",
        "path",
        "pause",
        "popd",
        "prompt",
        "pushd",
        "rd",
        "ren",
        "rename",
        "rmdir",
        "set",
        "setlocal",
        "start",
        "time",
        "title",
        "type",
        "ver",
        "verify",
        "vol",
    }
)

EXIT_NOT_FOUND: Final[int] = 127
EXIT_NOT_EXECUTABLE: Final[int] = 126

READ_CHUNK_SIZE: Final[int] = 65536

__all__ = [
    "CMD_BUILTINS",
    "COMSPEC_ENV",
    "DEBUG_ENV",
    "DEFAULT_COMSPEC",
    "DEFAULT_PATHEXT",
    "DIRECT_EXECUTABLE_EXTENSIONS",
    "ENV_PROGRAM",
    "ENV_SPLIT_FLAG",
    "EXIT_NOT_EXECUTABLE",
    "EXIT_NOT_FOUND",
    "MAX_INTERPRETER_DEPTH",
    "PATHEXT_ENV",
    "PATH_ENV",
    "POSIX_SHELL",
    "READ_CHUNK_SIZE",
    "SHEBANG_MARKER",
    "SHEBANG_READ_BYTES",
]
