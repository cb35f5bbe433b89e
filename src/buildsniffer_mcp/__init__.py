"""Build Sniffer - discover which projects each MSBuild target builds."""

from .errors import BuildEngineError, ConfigError, ProjectLoadError, SnifferError
from .sniffer import BuiltItem, Project, SolutionCapturingListener, TargetResult, build_all

__version__ = "0.1.0"

__all__ = [
    "BuildEngineError",
    "ConfigError",
    "ProjectLoadError",
    "SnifferError",
    "BuiltItem",
    "Project",
    "SolutionCapturingListener",
    "TargetResult",
    "build_all",
]
