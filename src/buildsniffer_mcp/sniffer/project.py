"""MSBuild project model.

Loads a project file, rewrites it so it can be built from anywhere and so
delegated builds become observable, then builds it through an engine.
"""

from __future__ import annotations

import copy
import io
import logging
import ntpath
import os
import posixpath
import xml.etree.ElementTree as ET
from collections.abc import Iterable, Sequence
from typing import Final

from ..engine.base import BuildEngine, Listener, LoggingListener
from ..engine.msbuild import MSBuildEngine
from ..errors import ProjectLoadError

logger = logging.getLogger(__name__)

TARGET_TAG: Final[str] = "Target"
NAME_ATTR: Final[str] = "Name"
IMPORT_TAG: Final[str] = "Import"
PROJECT_ATTR: Final[str] = "Project"
MSBUILD_TAG: Final[str] = "MSBuild"
PROJECTS_ATTR: Final[str] = "Projects"
MESSAGE_TAG: Final[str] = "Message"
TEXT_ATTR: Final[str] = "Text"

DRIVE_TOKENS: Final[tuple[str, ...]] = (":\\", ":/")
PROPERTY_PREFIX: Final[str] = "$("


def _is_windows_path(path: str) -> bool:
    return any(token in path for token in DRIVE_TOKENS) or "\\" in path


def is_absolute_import(value: str) -> bool:
    """Whether an Import path needs no anchoring.

    Drive-qualified (C:\\x), rooted (/x, \\x, \\\\server\\share) and
    property-rooted ($(Prop)\\x) paths are left alone.
    """
    return (
        any(token in value for token in DRIVE_TOKENS)
        or value.startswith(("/", "\\"))
        or value.startswith(PROPERTY_PREFIX)
    )


def concretize_import_path(directory: str, value: str) -> str:
    """Anchor a relative Import path at the project's directory.

    The separator style follows the directory, so a Windows project
    directory keeps producing Windows paths on any platform.
    """
    path_module = ntpath if _is_windows_path(directory) else posixpath

    if is_absolute_import(value):
        return value
    return path_module.join(directory, value)


def _as_targets(targets: str | Sequence[str] | None) -> list[str]:
    if targets is None:
        return []
    if isinstance(targets, str):
        return [targets]
    return list(targets)


def _as_listeners(listeners: Listener | Iterable[Listener] | None) -> list[Listener]:
    if listeners is None:
        return []
    if hasattr(listeners, "initialize"):
        return [listeners]  # type: ignore[list-item]
    return list(listeners)  # type: ignore[arg-type]


class Project:
    """An MSBuild project file held as a mutable XML tree.

    Usage:
        project = Project("build.proj").ignore_items("Exec", "Message")
        project.build("Build", SolutionCapturingListener())
    """

    def __init__(
        self,
        file_name: str,
        listener: Listener | None = None,
        engine: BuildEngine | None = None,
    ):
        """Load and normalize a project file.

        Args:
            file_name: Path to the project file
            listener: Listener attached to every build (logs when omitted)
            engine: Build engine (MSBuild located on first build when omitted)

        Raises:
            ProjectLoadError: If the file is missing or is not valid XML
        """
        self.file_name = os.path.abspath(file_name)
        self.original_directory = os.path.dirname(self.file_name)
        self.listener: Listener = listener or LoggingListener()
        self._engine = engine
        self.document = self._read_from_file(self.file_name)
        self.default_namespace = self._get_default_namespace()
        self._concretize_relative_imports()

    @property
    def root(self) -> ET.Element:
        return self.document.getroot()

    @property
    def engine(self) -> BuildEngine:
        """Build engine, created on first use."""
        if self._engine is None:
            self._engine = MSBuildEngine()
        return self._engine

    def _read_from_file(self, file_name: str) -> ET.ElementTree:
        try:
            return ET.parse(file_name)
        except ET.ParseError as e:
            raise ProjectLoadError(
                f"Malformed project file {file_name}: {e}", file_name=file_name
            ) from e
        except OSError as e:
            raise ProjectLoadError(
                f"Cannot read project file {file_name}: {e}", file_name=file_name
            ) from e

    def _get_default_namespace(self) -> str:
        tag = self.root.tag
        if tag.startswith("{"):
            return tag[1:].split("}", 1)[0]
        return ""

    def _qualify(self, tag_name: str) -> str:
        if self.default_namespace:
            return f"{{{self.default_namespace}}}{tag_name}"
        return tag_name

    def _parent_map(self) -> dict[ET.Element, ET.Element]:
        return {child: parent for parent in self.root.iter() for child in parent}

    def _concretize_relative_imports(self) -> None:
        for element in self.get_all_tags(IMPORT_TAG):
            value = element.get(PROJECT_ATTR)
            if value is None:
                continue
            concrete = concretize_import_path(self.original_directory, value)
            if concrete != value:
                logger.debug(f"Import rewritten: {value} -> {concrete}")
                element.set(PROJECT_ATTR, concrete)

    def get_all_tags(self, *tag_names: str) -> list[ET.Element]:
        """Get all elements with the given names from the default namespace.

        Searches at any depth below the root, in document order per name.
        """
        root = self.root
        elements: list[ET.Element] = []
        for tag_name in tag_names:
            elements.extend(
                element for element in root.iter(self._qualify(tag_name)) if element is not root
            )
        return elements

    def target_names(self) -> list[str]:
        """Names of all named Target elements, in document order."""
        return [
            element.get(NAME_ATTR, "")
            for element in self.get_all_tags(TARGET_TAG)
            if element.get(NAME_ATTR)
        ]

    def ignore_items(self, *items_to_ignore: str) -> Project:
        """Remove every element with one of the given names from the tree."""
        parents = self._parent_map()
        removed = 0
        for element in self.get_all_tags(*dict.fromkeys(items_to_ignore)):
            parent = parents.get(element)
            if parent is None:
                continue
            parent.remove(element)
            removed += 1
        if removed:
            logger.debug(f"Ignored {removed} elements ({', '.join(items_to_ignore)})")
        return self

    def swap_msbuild_tasks(self) -> None:
        """Replace MSBuild tasks with Message tasks naming their projects.

        Elements already swapped are gone, so repeating this is a no-op.
        """
        parents = self._parent_map()
        for task in self.get_all_tags(MSBUILD_TAG):
            parent = parents.get(task)
            if parent is None:
                continue
            message = ET.Element(
                self._qualify(MESSAGE_TAG), {TEXT_ATTR: task.get(PROJECTS_ATTR, "")}
            )
            parent.append(message)
            parent.remove(task)

    def to_bytes(self) -> bytes:
        """Serialize the current tree with the default namespace unprefixed.

        MSBuild rejects a prefixed root, so namespaced tags are written bare
        under an xmlns declaration on a copy of the tree.
        """
        root = self.root
        if self.default_namespace:
            qualifier = self._qualify("")
            root = copy.deepcopy(root)
            for element in root.iter():
                if isinstance(element.tag, str) and element.tag.startswith(qualifier):
                    element.tag = element.tag[len(qualifier):]
            root.set("xmlns", self.default_namespace)
        return ET.tostring(root, encoding="utf-8", xml_declaration=True)

    def build(
        self,
        targets: str | Sequence[str] | None = None,
        listeners: Listener | Iterable[Listener] | None = None,
    ) -> bool:
        """Build targets of a fresh, isolated copy of this project.

        Args:
            targets: Target name(s); the project's default targets when None
            listeners: Listener(s) attached after this project's own listener

        Returns:
            True on success; False otherwise
        """
        target_list = _as_targets(targets)
        all_listeners = [self.listener, *_as_listeners(listeners)]

        self.swap_msbuild_tasks()
        with io.BytesIO(self.to_bytes()) as reader:
            with self.engine.load_project(reader, self.original_directory) as inner:
                return inner.build(target_list, all_listeners)

    def build_target(
        self, target: str, listeners: Listener | Iterable[Listener] | None = None
    ) -> bool:
        """Build a single target."""
        return self.build([target], listeners)

    def build_default(self, listeners: Listener | Iterable[Listener] | None = None) -> bool:
        """Build the project's default targets."""
        return self.build(None, listeners)
