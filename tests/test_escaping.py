# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for cmd.exe command-line escaping."""

from __future__ import annotations

from pathlib import PureWindowsPath

import pytest

from crossproc.escaping import (
    build_command_line,
    build_posix_command_line,
    escape_argument,
    escape_builtin_argument,
    escape_command,
    is_cmd_builtin,
    is_cmd_shim,
    quote_for_crt,
    wrap_for_comspec,
)
from tests.helpers.cmdline import crt_split, tokenize_launch

COMSPEC = r"C:\Windows\System32\cmd.exe"

AWKWARD_ARGUMENTS = [
    "plain",
    "with space",
    "",
    'say "hi"',
    "trailing\\",
    "back\\\\slash\\",
    '\\"already\\"',
    "100%",
    "%PATH%",
    "!bang!",
    "x&y|z",
    "<in >out",
    "^caret",
    "(group) [set]",
    "a;b,c",
    "glob*?",
    "`tick`",
    "unicode ✓",
]


def _launch(command: str, args: list[object]) -> str:
    return wrap_for_comspec(COMSPEC, build_command_line(command, args))


def test_quote_for_crt_escapes_quotes_and_trailing_backslashes() -> None:
    assert quote_for_crt("plain") == '"plain"'
    assert quote_for_crt('a"b') == '"a\\"b"'
    assert quote_for_crt('a\\"b') == '"a\\\\\\"b"'
    assert quote_for_crt("dir\\") == '"dir\\\\"'
    assert quote_for_crt("mid\\dle") == '"mid\\dle"'


@pytest.mark.parametrize("argument", AWKWARD_ARGUMENTS)
def test_arguments_survive_cmd_and_crt_parsing(argument: str) -> None:
    argv = tokenize_launch(_launch(r"C:\tools\app.bat", [argument]))

    assert argv == [r"C:\tools\app.bat", argument]


def test_argument_vectors_keep_their_shape() -> None:
    argv = tokenize_launch(_launch(r"C:\Program Files\tool\run.cmd", AWKWARD_ARGUMENTS))

    assert argv == [r"C:\Program Files\tool\run.cmd", *AWKWARD_ARGUMENTS]


def test_non_string_values_are_coerced() -> None:
    argv = tokenize_launch(_launch(r"C:\tools\app.bat", [1234, None, PureWindowsPath(r"C:\data\in.txt"), b"raw"]))

    assert argv == [r"C:\tools\app.bat", "1234", "None", r"C:\data\in.txt", "raw"]


def test_escape_argument_carets_every_metacharacter() -> None:
    assert escape_argument("a&b") == '^"a^&b^"'
    assert escape_argument("a b") == '^"a^ b^"'
    assert escape_argument(5) == '^"5^"'


def test_double_escape_survives_two_cmd_passes() -> None:
    shim = r"C:\proj\node_modules\.bin\tool.cmd"
    arguments = ["a&b", "with space", '"quoted"', "100%"]

    argv = tokenize_launch(_launch(shim, arguments), caret_rounds=2)

    assert argv == [shim, *arguments]
    assert escape_argument("a&b", double_escape=True) == '^^^"a^^^&b^^^"'


def test_escape_command_leaves_plain_names_alone() -> None:
    assert escape_command("node") == "node"
    assert escape_command("my-tool_2") == "my-tool_2"
    assert escape_command("my tool") == '^"my^ tool^"'
    assert escape_command(r"C:\x\a.cmd") == '^"C:\\x\\a.cmd^"'


def test_builtins_are_only_caret_escaped() -> None:
    assert escape_builtin_argument("hello world") == "hello^ world"
    assert escape_builtin_argument("a&b|c") == "a^&b^|c"
    assert escape_builtin_argument("'q'") == "^'q^'"
    assert build_command_line("echo", ["hi there", "x>y"]) == "echo hi^ there x^>y"


@pytest.mark.parametrize(
    ("command", "expected"),
    [
        ("echo", True),
        ("ECHO", True),
        ("dir", True),
        ("cmd", True),
        ("cmd.exe", True),
        (r"C:\Windows\System32\cmd.exe", True),
        ("node", False),
        ("echo.bat", False),
    ],
)
def test_is_cmd_builtin(command: str, expected: bool) -> None:
    assert is_cmd_builtin(command) is expected


def test_is_cmd_shim() -> None:
    assert is_cmd_shim(r"C:\proj\node_modules\.bin\eslint.cmd")
    assert is_cmd_shim("/proj/node_modules/.bin/eslint.CMD")
    assert not is_cmd_shim(r"C:\proj\node_modules\.bin\eslint")
    assert not is_cmd_shim(r"C:\proj\bin\eslint.cmd")


def test_wrap_for_comspec_quotes_paths_with_spaces() -> None:
    assert wrap_for_comspec("cmd.exe", "echo hi") == 'cmd.exe /d /s /c "echo hi"'
    wrapped = wrap_for_comspec(r"C:\Shell Dir\cmd.exe", "echo hi")

    assert wrapped.startswith('"C:\\Shell Dir\\cmd.exe" /d /s /c ')
    assert crt_split(wrapped)[0] == r"C:\Shell Dir\cmd.exe"


def test_posix_command_line_uses_shell_quoting() -> None:
    assert build_posix_command_line("echo", ["a b", "$HOME", 3]) == "echo 'a b' '$HOME' 3"


@pytest.mark.parametrize("value", [object(), 3.5, ["list"], {"k": "v"}, "\x00", "\n"])
def test_escaping_never_raises(value: object) -> None:
    assert escape_argument(value)
    assert escape_builtin_argument(value) is not None
    assert build_command_line("tool.bat", [value])


def test_explicit_external_mode_quotes_builtin_names() -> None:
    line = build_command_line("type", ["a b", 'x"y'], builtin=False)

    assert tokenize_launch(wrap_for_comspec(COMSPEC, line)) == ["type", "a b", 'x"y']


def test_paths_named_like_builtins_are_not_builtins() -> None:
    argv = tokenize_launch(_launch(r"C:\tools\echo.exe", ["a b"]))

    assert argv == [r"C:\tools\echo.exe", "a b"]
