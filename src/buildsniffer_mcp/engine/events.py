"""Build events and the event source listeners subscribe to."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Final

from .diagnostics import BuildDiagnostic

logger = logging.getLogger(__name__)

MESSAGE_EVENT: Final[str] = "message"
WARNING_EVENT: Final[str] = "warning"
ERROR_EVENT: Final[str] = "error"

EVENT_NAMES: Final[frozenset[str]] = frozenset({MESSAGE_EVENT, WARNING_EVENT, ERROR_EVENT})


class MessageImportance(str, Enum):
    """MSBuild message importance."""

    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


@dataclass(frozen=True)
class MessageEvent:
    """Informational message raised while a task executes."""

    sender_name: str
    message: str
    importance: MessageImportance = MessageImportance.NORMAL


@dataclass(frozen=True)
class DiagnosticEvent:
    """Warning or error raised during the build."""

    diagnostic: BuildDiagnostic
    sender_name: str | None = None


class EventSource:
    """Fan-out point between a running build and its listeners.

    Handlers may be invoked from any engine thread. Registration is
    expected to happen before the build starts.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Callable[[Any], None]]] = {
            name: [] for name in EVENT_NAMES
        }
        self._lock = threading.Lock()

    def on_event(self, event_name: str, handler: Callable[[Any], None]) -> None:
        """Register event handler."""
        if event_name not in EVENT_NAMES:
            raise ValueError(f"Unknown build event: {event_name}")
        with self._lock:
            self._handlers[event_name].append(handler)

    def off_event(self, event_name: str, handler: Callable[[Any], None]) -> None:
        """Unregister event handler."""
        with self._lock:
            try:
                self._handlers.get(event_name, []).remove(handler)
            except ValueError:
                pass  # Handler not registered

    def handler_count(self, event_name: str) -> int:
        """Number of handlers registered for an event."""
        with self._lock:
            return len(self._handlers.get(event_name, []))

    def _dispatch(self, event_name: str, event: Any) -> None:
        with self._lock:
            handlers = list(self._handlers[event_name])
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(f"Build {event_name} handler error")

    def raise_message(self, event: MessageEvent) -> None:
        self._dispatch(MESSAGE_EVENT, event)

    def raise_warning(self, event: DiagnosticEvent) -> None:
        self._dispatch(WARNING_EVENT, event)

    def raise_error(self, event: DiagnosticEvent) -> None:
        self._dispatch(ERROR_EVENT, event)
