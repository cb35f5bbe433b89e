"""Build engine boundary: listeners and the engine protocol."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import BinaryIO, Protocol

from .events import (
    ERROR_EVENT,
    MESSAGE_EVENT,
    WARNING_EVENT,
    DiagnosticEvent,
    EventSource,
    MessageEvent,
)


class Listener:
    """Observer attached to one build invocation.

    Subclasses subscribe to the events they need in initialize() and
    detach in shutdown().
    """

    def initialize(self, event_source: EventSource) -> None:
        """Subscribe to build events."""
        raise NotImplementedError

    def shutdown(self) -> None:
        """Detach from the event source once the build completes."""
        pass


class LoggingListener(Listener):
    """Forwards build events to the logging module."""

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger("buildsniffer_mcp.build")
        self._event_source: EventSource | None = None

    def initialize(self, event_source: EventSource) -> None:
        self._event_source = event_source
        event_source.on_event(MESSAGE_EVENT, self._on_message)
        event_source.on_event(WARNING_EVENT, self._on_warning)
        event_source.on_event(ERROR_EVENT, self._on_error)

    def shutdown(self) -> None:
        if self._event_source is None:
            return
        self._event_source.off_event(MESSAGE_EVENT, self._on_message)
        self._event_source.off_event(WARNING_EVENT, self._on_warning)
        self._event_source.off_event(ERROR_EVENT, self._on_error)
        self._event_source = None

    def _on_message(self, event: MessageEvent) -> None:
        self._logger.debug(f"[{event.sender_name}] {event.message}")

    def _on_warning(self, event: DiagnosticEvent) -> None:
        self._logger.warning(str(event.diagnostic))

    def _on_error(self, event: DiagnosticEvent) -> None:
        self._logger.error(str(event.diagnostic))


class EngineProject(Protocol):
    """An isolated, loaded project owned by a build engine."""

    def build(self, targets: Sequence[str], listeners: Sequence[Listener]) -> bool:
        """Build targets (engine defaults when empty), returning success."""
        ...

    def close(self) -> None:
        """Release everything backing this project."""
        ...

    def __enter__(self) -> EngineProject: ...

    def __exit__(self, *exc_info: object) -> None: ...


class BuildEngine(Protocol):
    """Creates isolated projects from serialized project XML."""

    def load_project(self, reader: BinaryIO, directory: str) -> EngineProject:
        """Load project XML from reader; directory is the original location."""
        ...
