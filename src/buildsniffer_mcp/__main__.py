"""Entry point for buildsniffer-mcp."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from collections.abc import Sequence
from typing import TextIO

from .config import load_config
from .engine.base import BuildEngine
from .errors import ConfigError, SnifferError
from .server import create_server, load_project
from .sniffer import TargetResult, build_all


def configure_logging(level: str | None = None) -> None:
    """Configure logging based on environment."""
    level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Build Sniffer - report which projects each MSBuild target builds"
    )
    parser.add_argument(
        "project_file",
        nargs="?",
        default=None,
        help="MSBuild project file to sniff.",
    )
    parser.add_argument(
        "--ignore",
        action="append",
        default=None,
        metavar="TAG",
        help="Element name to strip before building. May be repeated. "
        "Defaults to BUILDSNIFFER_IGNORE or the built-in list of utility tasks.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Print the report as JSON.",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        default=False,
        help="Run as an MCP server over stdio instead of printing a report.",
    )
    parser.add_argument(
        "--project",
        type=str,
        default=None,
        help="Root path for the MCP server. "
        "Project files outside this path are rejected.",
    )
    args = parser.parse_args(argv)
    if args.serve and args.project_file:
        parser.error("project_file cannot be used with --serve")
    if not args.serve and not args.project_file:
        parser.error("project_file is required unless --serve is given")
    return args


def print_report(results: Sequence[TargetResult], as_json: bool = False, out: TextIO | None = None) -> None:
    """Print results in console or JSON form."""
    out = out or sys.stdout
    if as_json:
        json.dump([result.to_dict() for result in results], out, indent=2)
        out.write("\n")
        return
    for result in results:
        print(result.to_summary(), file=out)


def run_report(
    project_file: str,
    ignore_items: Sequence[str] | None = None,
    as_json: bool = False,
    engine: BuildEngine | None = None,
) -> int:
    """Sniff a project and print the report.

    Returns:
        Process exit code
    """
    logger = logging.getLogger(__name__)
    try:
        project = load_project(project_file, ignore_items, engine)
        results = build_all(project)
    except SnifferError as e:
        logger.error(str(e))
        return 1
    print_report(results, as_json)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logger = logging.getLogger(__name__)
    try:
        config = load_config()
    except ConfigError as e:
        configure_logging()
        logger.error(str(e))
        return 1
    configure_logging(config.log_level)

    if not args.serve:
        return run_report(args.project_file, args.ignore, args.json)

    project_path = args.project or os.getcwd()
    logger.info(f"Starting Build Sniffer MCP Server (project: {project_path})...")
    mcp = create_server(project_path)
    try:
        mcp.run()
    except Exception:
        logger.exception("Server error")
        raise
    finally:
        logger.info("Server stopped")
    return 0


def run() -> None:
    """Run the command line tool."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
