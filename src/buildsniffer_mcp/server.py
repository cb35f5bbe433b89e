"""MCP Server for sniffing MSBuild projects."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from collections.abc import Sequence
from typing import Any

from mcp.server.fastmcp import FastMCP

from .config import load_config
from .engine.base import BuildEngine
from .engine.msbuild import MSBuildEngine
from .policy import ProjectPolicy
from .sniffer import Project, SolutionCapturingListener, build_all, list_targets

logger = logging.getLogger(__name__)

# Last report produced by sniff_project (single client mode)
_last_report: dict[str, Any] | None = None


def get_last_report() -> dict[str, Any] | None:
    """Get the report of the most recent sniff_project call."""
    return _last_report


def load_project(
    project_file: str,
    ignore_items: Sequence[str] | None = None,
    engine: BuildEngine | None = None,
) -> Project:
    """Load a project and strip ignored elements.

    Args:
        project_file: Path to the project file
        ignore_items: Element names to strip; configured defaults when None
        engine: Build engine; MSBuild from configuration when None
    """
    config = load_config()
    if engine is None:
        engine = MSBuildEngine(config.msbuild_command, config.verbosity)
    ignore = config.ignore_items if ignore_items is None else tuple(ignore_items)
    return Project(project_file, engine=engine).ignore_items(*ignore)


def sniff(
    project_file: str,
    ignore_items: Sequence[str] | None = None,
    engine: BuildEngine | None = None,
) -> dict[str, Any]:
    """Build every target of a project and report what each one built."""
    global _last_report
    project = load_project(project_file, ignore_items, engine)
    results = build_all(project)
    report = {
        "project": project.file_name,
        "targets": [result.to_dict() for result in results],
    }
    _last_report = report
    return report


def sniff_target(
    project_file: str,
    target: str,
    ignore_items: Sequence[str] | None = None,
    engine: BuildEngine | None = None,
) -> dict[str, Any]:
    """Build one target and report its items, even when it failed."""
    project = load_project(project_file, ignore_items, engine)
    listener = SolutionCapturingListener()
    success = project.build_target(target, listener)
    return {
        "target": target,
        "success": success,
        "items": [item.to_dict() for item in listener.items_built],
    }


def create_server(project_path: str | None = None, engine: BuildEngine | None = None) -> FastMCP:
    """Create and configure the MCP server.

    Args:
        project_path: Root directory project files must live in.
            Defaults to the current directory.
        engine: Build engine shared by all tools (MSBuild when omitted)
    """
    policy = ProjectPolicy(root=project_path or os.getcwd())
    mcp = FastMCP("buildsniffer-mcp")

    @mcp.tool()
    async def list_project_targets(project_file: str) -> dict:
        """
        List the named targets of an MSBuild project file.

        Args:
            project_file: Path to the project file (relative to the root or absolute)
        """
        try:
            validated = policy.validate_project_file(project_file)
            project = Project(validated, engine=engine)
            return {"success": True, "data": list_targets(project)}
        except Exception as e:
            return {"success": False, "error": str(e)}

    @mcp.tool()
    async def sniff_project(project_file: str, ignore_items: list[str] | None = None) -> dict:
        """
        Build every target of an MSBuild project in isolation and report which
        projects each target builds. Repeated projects are flagged as duplicates.

        MSBuild tasks are rewritten to only announce their projects, so the
        delegated projects are not actually built. Targets that fail or build
        nothing are left out of the report.

        Args:
            project_file: Path to the project file (relative to the root or absolute)
            ignore_items: Task names to strip before building (defaults to
                Exec, Copy, Message and other utility tasks)
        """
        try:
            validated = policy.validate_project_file(project_file)
            report = await asyncio.to_thread(sniff, validated, ignore_items, engine)
            return {"success": True, "data": report}
        except Exception as e:
            return {"success": False, "error": str(e)}

    @mcp.tool()
    async def build_target(
        project_file: str, target: str, ignore_items: list[str] | None = None
    ) -> dict:
        """
        Build a single target and report the projects it builds.

        Unlike sniff_project, the items are returned even if the build failed.

        Args:
            project_file: Path to the project file (relative to the root or absolute)
            target: Target name
            ignore_items: Task names to strip before building
        """
        try:
            validated = policy.validate_project_file(project_file)
            result = await asyncio.to_thread(
                sniff_target, validated, target, ignore_items, engine
            )
            return {"success": True, "data": result}
        except Exception as e:
            return {"success": False, "error": str(e)}

    @mcp.resource("sniffer://report", mime_type="application/json")
    async def get_report() -> str:
        """
        Report of the most recent sniff_project call.
        Includes: project, targets with their items and duplicate flags
        """
        return json.dumps(get_last_report() or {}, indent=2)

    return mcp
