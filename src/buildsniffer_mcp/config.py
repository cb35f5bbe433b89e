"""Sniffer configuration.

Settings come from the environment:
1. BUILDSNIFFER_IGNORE - tags stripped from the project before building
2. BUILDSNIFFER_MSBUILD - command used to invoke MSBuild
3. BUILDSNIFFER_VERBOSITY - MSBuild console verbosity
4. LOG_LEVEL - logging level for the CLI and server
"""

from __future__ import annotations

import logging
import os
import re
import shlex
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Final

from .errors import ConfigError

logger = logging.getLogger(__name__)

# Tasks that never signal "build a thing" and would only add noise.
# Existing Message tasks are stripped so only swapped MSBuild tasks report.
DEFAULT_IGNORE_ITEMS: Final[tuple[str, ...]] = (
    "Gallio",
    "Exec",
    "RemoveDir",
    "Message",
    "MakeDir",
    "Copy",
    "WriteLinesToFile",
    "Script",
)

DEFAULT_VERBOSITY: Final[str] = "detailed"

# Verbosities at which MSBuild prints task boundaries
ALLOWED_VERBOSITY: Final[frozenset[str]] = frozenset(
    {"detailed", "diagnostic", "d", "diag"}
)

_LIST_SEPARATOR = re.compile(r"[;,]")


@dataclass
class SnifferConfig:
    """Runtime settings for sniffing a project."""

    ignore_items: tuple[str, ...] = DEFAULT_IGNORE_ITEMS
    """Element names removed from the project before any build."""

    msbuild_command: list[str] | None = None
    """Explicit MSBuild command line prefix, located automatically when None."""

    verbosity: str = DEFAULT_VERBOSITY
    """MSBuild console verbosity."""

    log_level: str = "INFO"

    env_var_names: dict[str, str] = field(
        default_factory=lambda: {
            "ignore_items": "BUILDSNIFFER_IGNORE",
            "msbuild_command": "BUILDSNIFFER_MSBUILD",
            "verbosity": "BUILDSNIFFER_VERBOSITY",
            "log_level": "LOG_LEVEL",
        }
    )


def parse_item_list(value: str) -> tuple[str, ...]:
    """Split a semicolon or comma separated list, dropping blanks."""
    return tuple(part.strip() for part in _LIST_SEPARATOR.split(value) if part.strip())


def load_config(environ: Mapping[str, str] | None = None) -> SnifferConfig:
    """Build configuration from environment variables.

    Args:
        environ: Mapping to read from. Defaults to os.environ.

    Returns:
        Populated configuration

    Raises:
        ConfigError: If BUILDSNIFFER_VERBOSITY is not a verbosity that
            reports task boundaries
    """
    env = os.environ if environ is None else environ
    config = SnifferConfig()
    names = config.env_var_names

    ignore = env.get(names["ignore_items"])
    if ignore is not None:
        config.ignore_items = parse_item_list(ignore)

    command = env.get(names["msbuild_command"])
    if command:
        config.msbuild_command = shlex.split(command)

    verbosity = env.get(names["verbosity"])
    if verbosity:
        if verbosity.lower() not in ALLOWED_VERBOSITY:
            raise ConfigError(f"Invalid verbosity: {verbosity}")
        config.verbosity = verbosity.lower()

    config.log_level = env.get(names["log_level"], "INFO").upper()

    logger.debug(
        f"Config loaded: ignore={config.ignore_items}, "
        f"msbuild={config.msbuild_command}, verbosity={config.verbosity}"
    )
    return config
