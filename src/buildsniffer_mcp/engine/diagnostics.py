"""MSBuild diagnostic types and line parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any


class BuildErrorSeverity(str, Enum):
    """MSBuild error severity levels."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass
class BuildDiagnostic:
    """Parsed MSBuild diagnostic (error/warning)."""

    severity: BuildErrorSeverity
    code: str
    message: str
    file: str | None = None
    line: int | None = None
    column: int | None = None
    project: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
        }
        if self.file:
            result["file"] = self.file
        if self.line is not None:
            result["line"] = self.line
        if self.column is not None:
            result["column"] = self.column
        if self.project:
            result["project"] = self.project
        return result

    def __str__(self) -> str:
        location = ""
        if self.file:
            location = self.file
            if self.line:
                location += f"({self.line},{self.column or 0})"
            location += ": "
        return f"{location}{self.severity.value} {self.code}: {self.message}"


# MSBuild output patterns
# Format: path(line,col): severity code: message [project]
MSBUILD_DIAGNOSTIC_PATTERN = re.compile(
    r"^(?P<file>[^(]+)\((?P<line>\d+),(?P<col>\d+)\):\s*"
    r"(?P<severity>error|warning|info)\s+(?P<code>\w+):\s*"
    r"(?P<message>.+?)(?:\s+\[(?P<project>[^\]]+)\])?$",
    re.IGNORECASE,
)

# Format without location: [tool : ]severity code: message [project]
MSBUILD_SIMPLE_PATTERN = re.compile(
    r"^(?:[^:]+\s:\s)?(?P<severity>error|warning|info)\s+(?P<code>\w+):\s*"
    r"(?P<message>.+?)(?:\s+\[(?P<project>[^\]]+)\])?$",
    re.IGNORECASE,
)


def parse_diagnostic(line: str) -> BuildDiagnostic | None:
    """Parse a single MSBuild output line into a diagnostic.

    Args:
        line: One line of MSBuild console output, node prefix removed

    Returns:
        Parsed diagnostic, or None if the line is not a diagnostic
    """
    line = line.strip()
    if not line:
        return None

    # Try detailed format first
    match = MSBUILD_DIAGNOSTIC_PATTERN.match(line)
    if match:
        return BuildDiagnostic(
            severity=BuildErrorSeverity(match.group("severity").lower()),
            code=match.group("code"),
            message=match.group("message"),
            file=match.group("file").strip(),
            line=int(match.group("line")),
            column=int(match.group("col")),
            project=match.group("project"),
        )

    match = MSBUILD_SIMPLE_PATTERN.match(line)
    if match:
        return BuildDiagnostic(
            severity=BuildErrorSeverity(match.group("severity").lower()),
            code=match.group("code"),
            message=match.group("message"),
            project=match.group("project"),
        )

    return None
