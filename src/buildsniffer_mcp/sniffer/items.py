"""Built item and target result records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DUPLICATE_MARKER = " [Duplicate]"


@dataclass(frozen=True)
class BuiltItem:
    """One item a target reported building."""

    name: str
    is_duplicate: bool = False

    def __str__(self) -> str:
        return self.name + (DUPLICATE_MARKER if self.is_duplicate else "")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"name": self.name, "isDuplicate": self.is_duplicate}


@dataclass
class TargetResult:
    """Items built by exactly one target."""

    name: str
    items: list[BuiltItem] = field(default_factory=list)

    @property
    def duplicate_count(self) -> int:
        return sum(1 for item in self.items if item.is_duplicate)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "items": [item.to_dict() for item in self.items],
        }

    def to_summary(self) -> str:
        """Generate human-readable summary."""
        parts = [f'Target: "{self.name}" is building:']
        parts.extend(f"\t=> {item}" for item in self.items)
        return "\n".join(parts)
