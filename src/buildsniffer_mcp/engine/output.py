"""MSBuild console output to build events.

At detailed verbosity MSBuild brackets the output of each task:

    Task "Message"
      App.dll
    Done executing task "Message".

Lines between the markers are raised as messages sent by that task.
"""

from __future__ import annotations

import re
from typing import Final

from .diagnostics import BuildErrorSeverity, parse_diagnostic
from .events import DiagnosticEvent, EventSource, MessageEvent

# Sender used for lines printed outside any task
ENGINE_SENDER: Final[str] = "MSBuild"

# Multi-node builds prefix each line with "<node>>"
NODE_PREFIX_PATTERN = re.compile(r"^\s*\d+>")
TASK_ID_SUFFIX_PATTERN = re.compile(r"\s*\(TaskId:\d+\)$")
TASK_START_PATTERN = re.compile(r'^Task "(?P<task>[^"]+)"$')
TASK_DONE_PATTERN = re.compile(r'^Done executing task "(?P<task>[^"]+)"')
TARGET_BOUNDARY_PATTERN = re.compile(r'^(?:Target "[^"]+"|Done building target "[^"]+")')
TASK_PARAMETER_PREFIX: Final[str] = "Task Parameter:"


class MSBuildOutputParser:
    """Stateful parser for one MSBuild output stream.

    Not thread-safe: use one parser per stream.
    """

    def __init__(self, event_source: EventSource):
        self._event_source = event_source
        self._current_task: str | None = None

    @property
    def current_task(self) -> str | None:
        """Name of the task whose output is being read."""
        return self._current_task

    @staticmethod
    def normalize(line: str) -> str:
        """Strip node prefix, TaskId suffix and surrounding whitespace."""
        line = NODE_PREFIX_PATTERN.sub("", line.rstrip("\r\n"))
        line = TASK_ID_SUFFIX_PATTERN.sub("", line)
        return line.strip()

    def feed(self, raw_line: str) -> None:
        """Consume one output line, raising events as appropriate."""
        line = self.normalize(raw_line)
        if not line:
            return

        match = TASK_START_PATTERN.match(line)
        if match:
            self._current_task = match.group("task")
            return

        match = TASK_DONE_PATTERN.match(line)
        if match:
            self._current_task = None
            return

        if TARGET_BOUNDARY_PATTERN.match(line):
            self._current_task = None
            return

        if line.startswith(TASK_PARAMETER_PREFIX):
            return

        diagnostic = parse_diagnostic(line)
        if diagnostic is not None:
            event = DiagnosticEvent(diagnostic=diagnostic, sender_name=self._current_task)
            if diagnostic.severity == BuildErrorSeverity.ERROR:
                self._event_source.raise_error(event)
            elif diagnostic.severity == BuildErrorSeverity.WARNING:
                self._event_source.raise_warning(event)
            else:
                self._event_source.raise_message(
                    MessageEvent(sender_name=self._current_task or ENGINE_SENDER, message=line)
                )
            return

        self._event_source.raise_message(
            MessageEvent(sender_name=self._current_task or ENGINE_SENDER, message=line)
        )
