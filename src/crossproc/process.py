# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Child process handle with an ordered lifecycle event stream.

Background threads observe the native process (one supervisor waiting for the
exit status, one reader per piped output stream) and only ever enqueue events.
Listeners run on the caller's thread when it calls :meth:`ChildProcess.wait`
or :meth:`ChildProcess.dispatch_pending`, in exactly the order the events
occurred.
"""

from __future__ import annotations

import codecs
import logging
import signal as _signal
import subprocess
import threading
import time
from collections.abc import Sequence
from typing import IO, Any

from .constants import READ_CHUNK_SIZE
from .events import EventEmitter, EventQueue
from .lifecycle import Lifecycle, LifecycleState
from .models import LaunchPlan

LOGGER = logging.getLogger(__name__)


def split_returncode(returncode: int) -> tuple[int | None, str | None]:
    """Return ``(exit_code, signal_name)`` for a :class:`subprocess.Popen` return code.

    Args:
        returncode: Return code; negative values mean "killed by signal".

    Returns:
        tuple[int | None, str | None]: Exactly one element is ``None``.
    """

    if returncode >= 0:
        return returncode, None
    try:
        return None, _signal.Signals(-returncode).name
    except ValueError:
        return None, f"SIG{-returncode}"


class ChildStream(EventEmitter):
    """Readable end of a piped child output stream.

    Emits ``data`` with each chunk (``bytes``, or ``str`` after
    :meth:`set_encoding`) followed by a single ``end``.
    """

    def __init__(self, name: str, raw: IO[bytes], events: EventQueue) -> None:
        """Wrap ``raw`` and publish its chunks through ``events``."""

        super().__init__()
        self.name = name
        self._raw = raw
        self._events = events
        self._decoder: codecs.IncrementalDecoder | None = None
        self._thread = threading.Thread(target=self._pump, name=f"crossproc-{name}", daemon=True)

    def set_encoding(self, encoding: str) -> ChildStream:
        """Decode subsequent ``data`` chunks with ``encoding``."""

        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        return self

    def start(self) -> None:
        """Start the reader thread."""

        self._thread.start()

    def join(self) -> None:
        """Wait until the stream reached end of file."""

        self._thread.join()

    def _pump(self) -> None:
        """Read chunks until end of file, then queue ``end`` and close the pipe."""

        read = getattr(self._raw, "read1", self._raw.read)
        try:
            while chunk := read(READ_CHUNK_SIZE):
                self._events.put(self, "data", chunk)
        except (OSError, ValueError) as exc:
            LOGGER.debug("%s stream closed early: %s", self.name, exc)
        finally:
            self._raw.close()
            self._events.put(self, "end")

    def emit(self, event: str, *args: Any) -> bool:
        """Decode ``data`` chunks when an encoding was set, flushing the decoder on ``end``."""

        if self._decoder is not None and event == "data":
            return super().emit(event, self._decoder.decode(args[0]))
        if self._decoder is not None and event == "end":
            tail = self._decoder.decode(b"", final=True)
            if tail:
                super().emit("data", tail)
        return super().emit(event, *args)


class ChildProcess(EventEmitter):
    """Handle for one spawned command.

    Events, in order: at most one ``error`` (a :class:`~crossproc.errors.SpawnError`),
    ``exit(code, signal)`` once the process terminated (not emitted after a
    start failure), then exactly one ``close(code, signal)`` once the process
    and all of its piped streams are done. An ``error`` with no listener is
    raised from the dispatching call instead.

    Attributes:
        spawnfile: Command token as given by the caller.
        spawnargs: Caller argument vector.
        plan: Launch payload, ``None`` when the command could not be resolved.
        pid: Operating system process id once running.
        stdin: Writable pipe to the child, or ``None`` when not piped.
        stdout: :class:`ChildStream` for stdout, or ``None`` when not piped.
        stderr: :class:`ChildStream` for stderr, or ``None`` when not piped.
    """

    def __init__(self, spawnfile: str, spawnargs: Sequence[str], plan: LaunchPlan | None = None) -> None:
        """Create a pending handle for ``spawnfile``; the launch attaches later."""

        super().__init__()
        self.spawnfile = spawnfile
        self.spawnargs = tuple(spawnargs)
        self.plan = plan
        self.pid: int | None = None
        self.stdin: IO[bytes] | None = None
        self.stdout: ChildStream | None = None
        self.stderr: ChildStream | None = None
        self._popen: subprocess.Popen[bytes] | None = None
        self._lifecycle = Lifecycle()
        self._events = EventQueue()
        self._closed = False
        self._close_code: int | None = None

    # -- state --------------------------------------------------------------------

    @property
    def state(self) -> LifecycleState:
        """Return the lifecycle state of the child."""

        return self._lifecycle.state

    @property
    def exit_code(self) -> int | None:
        """Return the exit status, ``None`` while running or when killed by a signal."""

        return self._lifecycle.exit_code

    @property
    def signal_code(self) -> str | None:
        """Return the name of the terminating signal, if any."""

        return self._lifecycle.signal

    @property
    def error(self) -> BaseException | None:
        """Return the start failure, if the child never started."""

        return self._lifecycle.error

    @property
    def closed(self) -> bool:
        """Return ``True`` once the ``close`` event has been delivered."""

        return self._closed

    # -- transitions driven by the spawn wrapper ----------------------------------

    def _start_failed(self, error: BaseException, close_code: int) -> None:
        """Queue ``error`` then ``close(close_code)`` for a child that never started."""

        self._lifecycle.fail(error)
        self._events.put(self, "error", error)
        self._events.put(self, "close", close_code, None)

    def _launch_failed(self, exit_code: int) -> None:
        """Queue ``exit`` then ``close`` for a launch the loader rejected."""

        self._lifecycle.exit(exit_code, None)
        self._events.put(self, "exit", exit_code, None)
        self._events.put(self, "close", exit_code, None)

    def _attach(self, popen: subprocess.Popen[bytes]) -> None:
        """Bind the running ``popen`` and start its reader and supervisor threads."""

        self._popen = popen
        self.pid = popen.pid
        self.stdin = popen.stdin
        readers: list[ChildStream] = []
        if popen.stdout is not None:
            self.stdout = ChildStream("stdout", popen.stdout, self._events)
            readers.append(self.stdout)
        if popen.stderr is not None:
            self.stderr = ChildStream("stderr", popen.stderr, self._events)
            readers.append(self.stderr)
        self._lifecycle.start()
        for reader in readers:
            reader.start()
        threading.Thread(
            target=self._supervise,
            args=(popen, readers),
            name=f"crossproc-supervisor-{popen.pid}",
            daemon=True,
        ).start()

    def _supervise(self, popen: subprocess.Popen[bytes], readers: list[ChildStream]) -> None:
        """Wait for exit, then for every reader, and queue ``exit`` and ``close``."""

        exit_code, signal_name = split_returncode(popen.wait())
        self._lifecycle.exit(exit_code, signal_name)
        self._events.put(self, "exit", exit_code, signal_name)
        for reader in readers:
            reader.join()
        self._events.put(self, "close", exit_code, signal_name)

    # -- delivery -----------------------------------------------------------------

    def emit(self, event: str, *args: Any) -> bool:
        """Record ``close`` and raise an ``error`` nobody listens for."""

        if event == "close":
            self._closed = True
            self._close_code = args[0] if args else None
        if event == "error" and self.listener_count("error") == 0:
            raise args[0]
        return super().emit(event, *args)

    def dispatch_pending(self) -> int:
        """Deliver every event already queued without waiting.

        Returns:
            int: Number of events delivered.
        """

        delivered = 0
        while self._events.dispatch(block=False) is not None:
            delivered += 1
        return delivered

    def wait(self, timeout: float | None = None) -> int | None:
        """Deliver events until ``close`` has been delivered.

        Args:
            timeout: Maximum number of seconds to wait; ``None`` waits forever.

        Returns:
            int | None: Code carried by ``close`` (``None`` when killed by a signal).

        Raises:
            subprocess.TimeoutExpired: If ``close`` was not delivered in time.
            SpawnError: If an ``error`` event is delivered with no listener.
        """

        deadline = None if timeout is None else time.monotonic() + timeout
        while not self._closed:
            remaining = None if deadline is None else deadline - time.monotonic()
            if remaining is not None and remaining <= 0:
                raise subprocess.TimeoutExpired(self.spawnfile, timeout or 0)
            self._events.dispatch(block=True, timeout=remaining)
        return self._close_code

    def kill(self, sig: int = _signal.SIGTERM) -> bool:
        """Send ``sig`` to the child.

        Returns:
            bool: ``True`` when the signal was delivered to a running child.
        """

        if self._popen is None or self._lifecycle.state is not LifecycleState.RUNNING:
            return False
        try:
            self._popen.send_signal(sig)
        except ProcessLookupError:
            return False
        return True


__all__ = ["ChildProcess", "ChildStream", "split_returncode"]
