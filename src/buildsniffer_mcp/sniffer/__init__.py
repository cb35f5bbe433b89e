"""Per-target build sniffing.

Provides:
- Project model with import normalization and task swapping
- Thread-safe capture of the projects each target delegates to
- Orchestration over every target of a project
"""

from .capture import ITEM_DELIMITER, SENDER_NAME, SolutionCapturingListener
from .items import BuiltItem, TargetResult
from .orchestrator import build_all, list_targets
from .project import Project, concretize_import_path, is_absolute_import

__all__ = [
    "ITEM_DELIMITER",
    "SENDER_NAME",
    "SolutionCapturingListener",
    "BuiltItem",
    "TargetResult",
    "build_all",
    "list_targets",
    "Project",
    "concretize_import_path",
    "is_absolute_import",
]
