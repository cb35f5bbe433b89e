"""Build every target of a project and collect what each one built."""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..errors import BuildEngineError
from .capture import SolutionCapturingListener
from .items import TargetResult
from .project import Project

logger = logging.getLogger(__name__)


def list_targets(project: Project) -> list[str]:
    """Names of the targets build_all() would build, in order."""
    return project.target_names()


def build_all(
    project: Project,
    listener_factory: Callable[[], SolutionCapturingListener] = SolutionCapturingListener,
) -> list[TargetResult]:
    """Build each named target in isolation.

    Targets are built one at a time, each with a fresh capturing
    listener. A target is left out of the results when its build fails
    or when it reports no items.

    Args:
        project: Loaded project
        listener_factory: Creates the capturing listener for each target

    Returns:
        One result per target that built something, in document order
    """
    results: list[TargetResult] = []

    for name in list_targets(project):
        listener = listener_factory()
        logger.info(f"Building target {name}")
        try:
            success = project.build(name, [listener])
        except BuildEngineError as e:
            logger.warning(f"Target {name} could not be built: {e}")
            continue

        if not success:
            logger.debug(f"Target {name} failed, skipping")
            continue

        items = list(listener.items_built)
        if not items:
            logger.debug(f"Target {name} built nothing, skipping")
            continue

        results.append(TargetResult(name=name, items=items))

    return results
