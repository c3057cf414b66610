# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""End-to-end tests for :func:`crossproc.spawn` and :func:`crossproc.spawn_sync`."""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import pytest

from crossproc import LifecycleState, SpawnError, spawn, spawn_sync
from tests.helpers.buffered import buffered

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="scripts rely on POSIX interpreter lines")

ScriptWriter = Callable[..., Path]

ECHO_BODY = "import sys\nsys.stdout.write('\\n'.join(sys.argv[1:]))\n"
SLEEP_BODY = "import time\ntime.sleep(30)\n"
ENV_SHEBANG = "/usr/bin/env pyinterp"
AWKWARD_ARGS = ["foo", "bar", "", "1234", "with space", "$HOME", '"quoted"', "semi;colon", "%PATH%", "^caret"]


@pytest.fixture
def echo_script(tmp_path: Path, write_script: ScriptWriter) -> Path:
    return write_script(tmp_path / "tools" / "echo.py", ECHO_BODY, shebang=ENV_SHEBANG)


def test_arguments_reach_the_child_unchanged(
    tmp_path: Path,
    echo_script: Path,
    child_env: dict[str, str],
) -> None:
    run = buffered(str(echo_script), AWKWARD_ARGS, {"env": child_env, "cwd": tmp_path})

    assert run.events == ["exit", "close"]
    assert run.stdout == "\n".join(AWKWARD_ARGS)
    assert run.exit == (0, None)
    assert run.close == (0, None)
    assert run.child is not None and run.child.pid is not None


def test_bare_names_are_found_on_path(
    tmp_path: Path,
    echo_script: Path,
    child_env: dict[str, str],
) -> None:
    env = {**child_env, "PATH": f"{echo_script.parent}:{child_env['PATH']}"}

    run = buffered("echo.py", ["hello"], {"env": env, "cwd": tmp_path})

    assert run.stdout == "hello"


def test_non_executable_script_runs_through_env_interpreter(
    tmp_path: Path,
    write_script: ScriptWriter,
    child_env: dict[str, str],
) -> None:
    script = write_script(tmp_path / "echo.py", ECHO_BODY, shebang=ENV_SHEBANG, executable=False)

    run = buffered(str(script), ["a", "b"], {"env": child_env, "cwd": tmp_path})

    assert run.stdout == "a\nb"
    assert run.close == (0, None)


def test_non_executable_script_runs_through_literal_interpreter(
    tmp_path: Path,
    write_script: ScriptWriter,
    child_env: dict[str, str],
) -> None:
    script = write_script(tmp_path / "echo.py", ECHO_BODY, shebang=sys.executable, executable=False)

    run = buffered(str(script), ["x y"], {"env": child_env, "cwd": tmp_path})

    assert run.stdout == "x y"


def test_relative_commands_resolve_against_cwd(
    tmp_path: Path,
    echo_script: Path,
    child_env: dict[str, str],
) -> None:
    cwd = tmp_path / "sub"
    cwd.mkdir()

    run = buffered("../tools/echo.py", ["rel"], {"env": child_env, "cwd": cwd})

    assert run.stdout == "rel"


def test_exit_code_is_reported(tmp_path: Path, write_script: ScriptWriter, child_env: dict[str, str]) -> None:
    script = write_script(tmp_path / "exit25", "import sys\nsys.exit(25)\n", shebang=ENV_SHEBANG)

    run = buffered(str(script), options={"env": child_env, "cwd": tmp_path})

    assert run.events == ["exit", "close"]
    assert run.exit == (25, None)
    assert run.close == (25, None)
    assert run.child is not None
    assert run.child.state is LifecycleState.EXITED
    assert run.child.exit_code == 25


def test_stderr_is_streamed(tmp_path: Path, write_script: ScriptWriter, child_env: dict[str, str]) -> None:
    script = write_script(tmp_path / "err", "import sys\nsys.stderr.write('oops')\nsys.exit(1)\n", shebang=ENV_SHEBANG)

    run = buffered(str(script), [], {"env": child_env, "cwd": tmp_path})

    assert run.stderr == "oops"
    assert run.stdout is None
    assert run.close == (1, None)


def test_missing_command_emits_error_then_close(child_env: dict[str, str]) -> None:
    run = buffered("crossproc-no-such-command", ["arg"], {"env": child_env})

    assert run.events == ["error", "close"]
    assert run.exit is None
    assert run.close == (127, None)
    error = run.errors[0]
    assert isinstance(error, SpawnError)
    assert error.code == "ENOENT"
    assert error.errno == "ENOENT"
    assert error.syscall == "spawn crossproc-no-such-command"
    assert error.path == "crossproc-no-such-command"
    assert error.spawnargs == ("arg",)
    assert str(error) == "spawn crossproc-no-such-command ENOENT"
    assert run.child is not None
    assert run.child.state is LifecycleState.ERRORED


def test_missing_interpreter_is_an_exit_not_an_error(
    tmp_path: Path,
    write_script: ScriptWriter,
    child_env: dict[str, str],
) -> None:
    script = write_script(tmp_path / "orphan", "echo never\n", shebang="/nonexistent/interpreter")

    run = buffered(str(script), [], {"env": child_env, "cwd": tmp_path})

    assert run.events == ["exit", "close"]
    assert run.errors == []
    assert run.exit == (127, None)
    assert run.close == (127, None)


@pytest.mark.parametrize("executable", [True, False], ids=["executable", "non-executable"])
def test_missing_env_interpreter_is_an_exit_not_an_error(
    tmp_path: Path,
    write_script: ScriptWriter,
    child_env: dict[str, str],
    executable: bool,
) -> None:
    script = write_script(
        tmp_path / "orphan",
        "echo never\n",
        shebang="/usr/bin/env crossproc-missing-interpreter",
        executable=executable,
    )

    run = buffered(str(script), [], {"env": child_env, "cwd": tmp_path})

    assert run.events == ["exit", "close"]
    assert run.errors == []
    assert run.exit == (127, None)
    assert run.close == (127, None)


def test_unlaunchable_file_reports_the_os_error(tmp_path: Path, child_env: dict[str, str]) -> None:
    data = tmp_path / "data.txt"
    data.write_text("not a program\n", encoding="utf-8")

    run = buffered("./data.txt", [], {"env": child_env, "cwd": tmp_path})

    assert run.events == ["error", "close"]
    assert run.errors[0].code == "EACCES"
    assert run.close == (126, None)


def test_error_without_listener_is_raised(child_env: dict[str, str]) -> None:
    child = spawn("crossproc-no-such-command", {"env": child_env})

    with pytest.raises(SpawnError):
        child.wait(timeout=5)


def test_raise_on_not_found(child_env: dict[str, str]) -> None:
    with pytest.raises(SpawnError) as excinfo:
        spawn("crossproc-no-such-command", {"env": child_env, "raise_on_not_found": True})

    assert excinfo.value.code == "ENOENT"


def test_inputs_are_left_untouched(tmp_path: Path, echo_script: Path, child_env: dict[str, str]) -> None:
    args = ["a", "b"]
    options = {"env": child_env, "cwd": str(tmp_path), "stdio": ["pipe", "pipe", "pipe"]}
    snapshot = (list(args), {key: value for key, value in options.items()})

    buffered(str(echo_script), args, options)

    assert (args, options) == snapshot


def test_optional_args_and_ignored_stdio(tmp_path: Path, echo_script: Path, child_env: dict[str, str]) -> None:
    run = buffered(str(echo_script), {"env": child_env, "cwd": tmp_path, "stdio": "ignore"})

    assert run.child is not None
    assert run.child.stdout is None
    assert run.stdout is None
    assert run.close == (0, None)


def test_stdin_pipe(tmp_path: Path, write_script: ScriptWriter, child_env: dict[str, str]) -> None:
    script = write_script(
        tmp_path / "upper",
        "import sys\nsys.stdout.write(sys.stdin.read().upper())\n",
        shebang=ENV_SHEBANG,
    )
    child = spawn(str(script), [], {"env": child_env, "cwd": tmp_path})
    chunks: list[bytes] = []
    assert child.stdout is not None and child.stdin is not None
    child.stdout.on("data", chunks.append)

    child.stdin.write(b"hello")
    child.stdin.close()

    assert child.wait(timeout=30) == 0
    assert b"".join(chunks) == b"HELLO"


def test_kill_reports_the_signal(tmp_path: Path, write_script: ScriptWriter, child_env: dict[str, str]) -> None:
    script = write_script(tmp_path / "sleeper", SLEEP_BODY, shebang=ENV_SHEBANG)
    child = spawn(str(script), [], {"env": child_env, "cwd": tmp_path, "stdio": "ignore"})
    exits: list[tuple[int | None, str | None]] = []
    child.on("exit", lambda code, sig: exits.append((code, sig)))

    assert child.kill()

    assert child.wait(timeout=30) is None
    assert exits == [(None, "SIGTERM")]
    assert child.signal_code == "SIGTERM"
    assert not child.kill()


def test_forced_shell_on_posix(tmp_path: Path, echo_script: Path, child_env: dict[str, str]) -> None:
    run = buffered(str(echo_script), ["a b", "$HOME"], {"env": child_env, "cwd": tmp_path, "shell": True})

    assert run.stdout == "a b\n$HOME"
    assert run.close == (0, None)


def test_spawn_sync_captures_output(tmp_path: Path, echo_script: Path, child_env: dict[str, str]) -> None:
    result = spawn_sync(str(echo_script), ["one", "two"], {"env": child_env, "cwd": tmp_path})

    assert result.error is None
    assert result.status == 0
    assert result.signal is None
    assert result.stdout == b"one\ntwo"
    assert result.pid is not None


def test_spawn_sync_not_found(child_env: dict[str, str]) -> None:
    result = spawn_sync("crossproc-no-such-command", {"env": child_env})

    assert result.status is None
    assert result.pid is None
    assert result.error is not None
    assert result.error.code == "ENOENT"


def test_spawn_sync_timeout(tmp_path: Path, write_script: ScriptWriter, child_env: dict[str, str]) -> None:
    script = write_script(tmp_path / "sleeper", SLEEP_BODY, shebang=ENV_SHEBANG)

    result = spawn_sync(str(script), [], {"env": child_env, "cwd": tmp_path}, timeout=0.5)

    assert result.error is not None
    assert result.error.code == "ETIMEDOUT"
    assert result.status is None
    assert result.signal == "SIGKILL"


def test_spawn_sync_input(tmp_path: Path, write_script: ScriptWriter, child_env: dict[str, str]) -> None:
    script = write_script(tmp_path / "cat", "import sys\nsys.stdout.write(sys.stdin.read())\n", shebang=ENV_SHEBANG)

    result = spawn_sync(str(script), [], {"env": child_env, "cwd": tmp_path}, input=b"piped")

    assert result.stdout == b"piped"
