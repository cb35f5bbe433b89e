"""Build engine boundary.

Provides:
- Build events and an event source listeners subscribe to
- A listener base class and a logging listener
- An MSBuild engine that runs each project in isolation
"""

from .base import BuildEngine, EngineProject, Listener, LoggingListener
from .diagnostics import BuildDiagnostic, BuildErrorSeverity, parse_diagnostic
from .events import DiagnosticEvent, EventSource, MessageEvent, MessageImportance
from .msbuild import MSBuildEngine, MSBuildProject, find_msbuild
from .output import MSBuildOutputParser

__all__ = [
    "BuildEngine",
    "EngineProject",
    "Listener",
    "LoggingListener",
    "BuildDiagnostic",
    "BuildErrorSeverity",
    "parse_diagnostic",
    "DiagnosticEvent",
    "EventSource",
    "MessageEvent",
    "MessageImportance",
    "MSBuildEngine",
    "MSBuildProject",
    "find_msbuild",
    "MSBuildOutputParser",
]
