# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Explicit lifecycle state machine for a spawned child process."""

from __future__ import annotations

from enum import StrEnum
from threading import Lock
from typing import Final

from .errors import InvalidTransitionError


class LifecycleState(StrEnum):
    """States a child process handle moves through."""

    PENDING = "pending"
    RUNNING = "running"
    ERRORED = "errored"
    EXITED = "exited"


# A launch that fails after resolution succeeded (missing interpreter) is a
# result, not a start failure, so PENDING may move straight to EXITED.
_ALLOWED: Final[dict[LifecycleState, frozenset[LifecycleState]]] = {
    LifecycleState.PENDING: frozenset({LifecycleState.RUNNING, LifecycleState.ERRORED, LifecycleState.EXITED}),
    LifecycleState.RUNNING: frozenset({LifecycleState.EXITED}),
    LifecycleState.ERRORED: frozenset(),
    LifecycleState.EXITED: frozenset(),
}

TERMINAL_STATES: Final[frozenset[LifecycleState]] = frozenset({LifecycleState.ERRORED, LifecycleState.EXITED})


class Lifecycle:
    """Thread-safe holder of a :class:`LifecycleState` with guarded transitions.

    Besides the state, the machine records the exit status and signal name
    once the child has exited, or the start failure that ended it.
    """

    def __init__(self) -> None:
        """Start in :attr:`LifecycleState.PENDING` with no result recorded."""

        self._lock = Lock()
        self._state = LifecycleState.PENDING
        self.exit_code: int | None = None
        self.signal: str | None = None
        self.error: BaseException | None = None

    @property
    def state(self) -> LifecycleState:
        """Return the current state."""

        with self._lock:
            return self._state

    @property
    def terminal(self) -> bool:
        """Return ``True`` once the child has exited or failed to start."""

        return self.state in TERMINAL_STATES

    def _transition(self, target: LifecycleState) -> None:
        """Move to ``target``; callers hold the lock."""

        if target not in _ALLOWED[self._state]:
            raise InvalidTransitionError(f"cannot move from {self._state} to {target}")
        self._state = target

    def start(self) -> None:
        """Record a successful launch."""

        with self._lock:
            self._transition(LifecycleState.RUNNING)

    def fail(self, error: BaseException) -> None:
        """Record a start failure.

        Args:
            error: Error that will be delivered through the ``error`` event.

        Raises:
            InvalidTransitionError: If the child already started or finished.
        """

        with self._lock:
            self._transition(LifecycleState.ERRORED)
            self.error = error

    def exit(self, exit_code: int | None, signal: str | None) -> None:
        """Record termination with ``exit_code`` or ``signal`` (exactly one is set).

        Raises:
            InvalidTransitionError: If the child already reached a terminal state.
        """

        with self._lock:
            self._transition(LifecycleState.EXITED)
            self.exit_code = exit_code
            self.signal = signal


__all__ = ["Lifecycle", "LifecycleState", "TERMINAL_STATES"]
