"""Project file policy - path validation for the server surface.

Security measures:
- Project files must live inside the configured root
- Path canonicalization with symlink/junction rejection
- UNC and device path denial
- Extension whitelisting
"""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Final

# MSBuild project file extensions
ALLOWED_EXTENSIONS: Final[frozenset[str]] = frozenset(
    {
        ".proj",
        ".csproj",
        ".vbproj",
        ".fsproj",
        ".vcxproj",
        ".targets",
        ".props",
        ".msbuild",
        ".build",
    }
)


@dataclass
class ProjectPolicy:
    """Security policy for project files handed to the sniffer.

    Validates:
    - Paths are within the root
    - No symlinks, junctions, or reparse points
    - No UNC or device paths
    - Files carry an MSBuild project extension
    """

    root: str
    allow_unc_paths: bool = False
    allow_device_paths: bool = False

    def __post_init__(self) -> None:
        """Validate and canonicalize root."""
        self.root = self._validate_path(self.root, context="root")

    def _validate_path(self, path: str, context: str = "path") -> str:
        """Validate and canonicalize a path.

        Args:
            path: Path to validate
            context: Context for error messages

        Returns:
            Canonicalized absolute path

        Raises:
            ValueError: If path is invalid or violates security policy
        """
        if not path:
            raise ValueError(f"Empty {context}")

        # Deny device paths (\\?\, \\.\) - check before UNC since they start with \\
        if path.startswith(("\\\\.\\", "\\\\?\\")):
            if not self.allow_device_paths:
                raise ValueError(f"Device paths not allowed in {context}: {path}")

        # Deny UNC paths (\\server\share)
        elif path.startswith("\\\\") and not self.allow_unc_paths:
            raise ValueError(f"UNC paths not allowed in {context}: {path}")

        abs_path = os.path.abspath(path)

        if ".." in Path(path).parts:
            resolved = os.path.normpath(abs_path)
            if resolved != abs_path:
                raise ValueError(f"Path traversal detected in {context}: {path}")

        if os.name == "nt" and os.path.exists(abs_path):
            try:
                attrs = os.lstat(abs_path)
                if stat.S_ISLNK(attrs.st_mode):
                    raise ValueError(f"Symlink not allowed in {context}: {path}")
                if hasattr(attrs, "st_file_attributes"):
                    FILE_ATTRIBUTE_REPARSE_POINT = 0x400
                    if attrs.st_file_attributes & FILE_ATTRIBUTE_REPARSE_POINT:
                        raise ValueError(
                            f"Reparse point (junction/symlink) not allowed in {context}: {path}"
                        )
            except OSError as e:
                raise ValueError(f"Cannot access {context}: {path} ({e})") from e
        elif os.path.islink(abs_path):
            raise ValueError(f"Symlink not allowed in {context}: {path}")

        return abs_path

    def validate_project_file(self, project_file: str) -> str:
        """Validate a project file is inside the root and exists.

        Relative paths are taken relative to the root.

        Returns:
            Validated absolute path

        Raises:
            ValueError: If path is invalid, outside root, or not a project file
        """
        if project_file and not os.path.isabs(project_file) and not project_file.startswith("\\\\"):
            project_file = os.path.join(self.root, project_file)

        validated = self._validate_path(project_file, context="project_file")

        try:
            common = os.path.commonpath([validated, self.root])
        except ValueError as e:
            raise ValueError(f"Project file outside root: {project_file}") from e
        if common != self.root:
            raise ValueError(f"Project file outside root: {project_file}")

        extension = os.path.splitext(validated)[1].lower()
        if extension not in ALLOWED_EXTENSIONS:
            raise ValueError(f"Not an MSBuild project file: {project_file}")

        if not os.path.isfile(validated):
            raise ValueError(f"Project file not found: {project_file}")

        return validated
