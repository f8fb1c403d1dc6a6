"""Minimal publish/subscribe channel for engine state changes."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

log = logging.getLogger(__name__)

Listener = Callable[[Any], None]


class Signal:
    """A named channel that calls every connected listener with one value.

    A listener that raises is logged and skipped; the remaining listeners
    still run and the emitter is not interrupted.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._listeners: list[Listener] = []
        self._lock = threading.Lock()

    def connect(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; returns a callable that disconnects it."""
        with self._lock:
            self._listeners.append(listener)
        return lambda: self.disconnect(listener)

    def disconnect(self, listener: Listener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def emit(self, value: Any) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(value)
            except Exception:
                log.exception("Listener %r on signal %r failed", listener, self.name)
