"""Listener capturing the projects a build delegates to."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from typing import Final

from ..engine.base import Listener
from ..engine.events import MESSAGE_EVENT, EventSource, MessageEvent
from .items import BuiltItem

# Swapped MSBuild tasks report through Message tasks
SENDER_NAME: Final[str] = "Message"
ITEM_DELIMITER: Final[str] = ";"


class SolutionCapturingListener(Listener):
    """Collects item names reported by Message tasks during one build.

    Thread-safe: the engine may raise messages from several threads.
    """

    def __init__(self) -> None:
        self._items: list[str] = []
        self._lock = threading.Lock()
        self._event_source: EventSource | None = None

    def initialize(self, event_source: EventSource) -> None:
        self._event_source = event_source
        event_source.on_event(MESSAGE_EVENT, self.on_message)

    def shutdown(self) -> None:
        if self._event_source is not None:
            self._event_source.off_event(MESSAGE_EVENT, self.on_message)
            self._event_source = None

    def on_message(self, event: MessageEvent) -> None:
        """Record the items carried by a Message task event."""
        if (event.sender_name or "").lower() != SENDER_NAME.lower() or not event.message:
            return

        items = [part for part in event.message.split(ITEM_DELIMITER) if part]
        with self._lock:
            self._items.extend(items)

    def raw_items(self) -> list[str]:
        """Snapshot of every captured name in arrival order."""
        with self._lock:
            return list(self._items)

    @property
    def items_built(self) -> Iterator[BuiltItem]:
        """Captured items, marking repeats of an earlier name as duplicates.

        Each access returns a new iterator over a snapshot taken when
        iteration starts.
        """
        return self._iter_items()

    def _iter_items(self) -> Iterator[BuiltItem]:
        already_seen: set[str] = set()
        for name in self.raw_items():
            yield BuiltItem(name=name, is_duplicate=name in already_seen)
            already_seen.add(name)
