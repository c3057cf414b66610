# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Listener registry and the ordered per-invocation event queue."""

from __future__ import annotations

import logging
import queue
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock
from typing import Any

LOGGER = logging.getLogger(__name__)

Listener = Callable[..., Any]


@dataclass(slots=True)
class _Registration:
    listener: Listener
    once: bool


class EventEmitter:
    """Minimal named-event listener registry.

    Listeners are called in registration order. ``emit`` works on a snapshot of
    the registrations, so removing a listener while an event is being delivered
    never affects that delivery, only later ones.
    """

    def __init__(self) -> None:
        """Create an emitter with no listeners."""

        self._listeners: dict[str, list[_Registration]] = {}
        self._listeners_lock = Lock()

    def on(self, event: str, listener: Listener) -> EventEmitter:
        """Register ``listener`` for ``event`` and return ``self`` for chaining."""

        with self._listeners_lock:
            self._listeners.setdefault(event, []).append(_Registration(listener, once=False))
        return self

    def once(self, event: str, listener: Listener) -> EventEmitter:
        """Register ``listener`` to run for the next ``event`` only."""

        with self._listeners_lock:
            self._listeners.setdefault(event, []).append(_Registration(listener, once=True))
        return self

    def off(self, event: str, listener: Listener) -> EventEmitter:
        """Remove the most recent registration of ``listener`` for ``event``."""

        with self._listeners_lock:
            registrations = self._listeners.get(event, [])
            for index in range(len(registrations) - 1, -1, -1):
                if registrations[index].listener is listener:
                    del registrations[index]
                    break
        return self

    def remove_all_listeners(self, event: str | None = None) -> EventEmitter:
        """Remove every listener for ``event``, or for all events when ``None``."""

        with self._listeners_lock:
            if event is None:
                self._listeners.clear()
            else:
                self._listeners.pop(event, None)
        return self

    def listener_count(self, event: str) -> int:
        """Return the number of listeners registered for ``event``."""

        with self._listeners_lock:
            return len(self._listeners.get(event, []))

    def emit(self, event: str, *args: Any) -> bool:
        """Call the listeners registered for ``event`` with ``args``.

        Returns:
            bool: ``True`` when at least one listener was called.
        """

        with self._listeners_lock:
            registrations = list(self._listeners.get(event, []))
            if any(registration.once for registration in registrations):
                self._listeners[event] = [item for item in self._listeners.get(event, []) if not item.once]
        for registration in registrations:
            registration.listener(*args)
        return bool(registrations)


@dataclass(frozen=True, slots=True)
class QueuedEvent:
    """Event waiting for delivery on the caller's thread."""

    target: EventEmitter
    name: str
    args: tuple[Any, ...]


class EventQueue:
    """Single ordered stream of events for one invocation.

    Producer threads (the process supervisor and stream readers) ``put``
    events; the consumer delivers them in order with :meth:`dispatch`.
    """

    def __init__(self) -> None:
        """Create an empty queue."""

        self._queue: queue.Queue[QueuedEvent] = queue.Queue()

    def put(self, target: EventEmitter, name: str, *args: Any) -> None:
        """Queue ``name`` with ``args`` for delivery on ``target``."""

        self._queue.put(QueuedEvent(target, name, args))

    def dispatch(self, *, block: bool, timeout: float | None = None) -> QueuedEvent | None:
        """Deliver one event and return it, or ``None`` when nothing is queued.

        Args:
            block: Wait for an event when the queue is empty.
            timeout: Upper bound on the wait when ``block`` is true.

        Returns:
            QueuedEvent | None: The delivered event.
        """

        try:
            event = self._queue.get(block=block, timeout=timeout)
        except queue.Empty:
            return None
        LOGGER.debug("dispatching %s", event.name)
        event.target.emit(event.name, *event.args)
        return event


__all__ = ["EventEmitter", "EventQueue", "Listener", "QueuedEvent"]
