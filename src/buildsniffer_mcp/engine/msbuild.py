"""MSBuild engine driven as a child process.

Each loaded project is a uniquely named snapshot file, so builds of
different targets never share files or engine state.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import tempfile
import threading
from collections.abc import Sequence
from typing import IO, BinaryIO

from ..config import DEFAULT_VERBOSITY
from ..errors import BuildEngineError
from .base import Listener
from .events import EventSource
from .output import MSBuildOutputParser

logger = logging.getLogger(__name__)

# Output line limit (security: prevent DoS)
MAX_OUTPUT_LINE: int = 10_000  # 10KB per line

PROJECT_FILE_PREFIX = ".buildsniffer-"
PROJECT_FILE_SUFFIX = ".proj"

# Task boundary markers are only recognised in English output
BUILD_ENVIRONMENT: dict[str, str] = {
    "DOTNET_CLI_UI_LANGUAGE": "en",
    "MSBUILDDISABLENODEREUSE": "1",
    "DOTNET_NOLOGO": "1",
}


def find_msbuild() -> list[str]:
    """Find the command that runs MSBuild.

    Checks BUILDSNIFFER_MSBUILD, then `dotnet msbuild`, then `msbuild`.

    Raises:
        BuildEngineError: If no MSBuild is available
    """
    env_command = os.environ.get("BUILDSNIFFER_MSBUILD")
    if env_command:
        return shlex.split(env_command)

    dotnet = shutil.which("dotnet")
    if dotnet:
        return [dotnet, "msbuild"]

    msbuild = shutil.which("msbuild")
    if msbuild:
        return [msbuild]

    raise BuildEngineError(
        "MSBuild not found. Install the .NET SDK or set BUILDSNIFFER_MSBUILD."
    )


class MSBuildEngine:
    """Build engine backed by the MSBuild command line."""

    def __init__(
        self,
        command: Sequence[str] | None = None,
        verbosity: str = DEFAULT_VERBOSITY,
    ):
        self.command = list(command) if command else find_msbuild()
        self.verbosity = verbosity

    def load_project(self, reader: BinaryIO, directory: str) -> MSBuildProject:
        """Materialize the reader's XML as a private project file."""
        return MSBuildProject(self, reader.read(), directory)


class MSBuildProject:
    """One isolated project instance; close() removes its file.

    The snapshot sits beside the original project, so MSBuild evaluates
    relative items and directory properties against the original location.
    """

    def __init__(self, engine: MSBuildEngine, content: bytes, directory: str):
        self._engine = engine
        self._open = True
        fd, self.project_file = tempfile.mkstemp(
            prefix=PROJECT_FILE_PREFIX,
            suffix=PROJECT_FILE_SUFFIX,
            dir=directory if os.path.isdir(directory) else None,
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
        except BaseException:
            os.unlink(self.project_file)
            raise

    @property
    def is_open(self) -> bool:
        return self._open

    def __enter__(self) -> MSBuildProject:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if not self._open:
            return
        self._open = False
        try:
            os.unlink(self.project_file)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove {self.project_file}: {e}")

    def get_command(self, targets: Sequence[str]) -> list[str]:
        """Build the MSBuild command line for the given targets."""
        cmd = [
            *self._engine.command,
            self.project_file,
            "-nologo",
            "-nodeReuse:false",
            "-maxCpuCount:1",
            f"-verbosity:{self._engine.verbosity}",
        ]
        if targets:
            cmd.append(f"-target:{';'.join(targets)}")
        return cmd

    def build(self, targets: Sequence[str], listeners: Sequence[Listener]) -> bool:
        """Run MSBuild, relaying its output to the listeners.

        Returns:
            True if MSBuild exited with code 0

        Raises:
            BuildEngineError: If the project is closed or MSBuild cannot start
        """
        if not self._open:
            raise BuildEngineError("Project has been closed")

        event_source = EventSource()
        for listener in listeners:
            listener.initialize(event_source)

        try:
            exit_code = self._run(self.get_command(targets), event_source)
        finally:
            for listener in listeners:
                try:
                    listener.shutdown()
                except Exception:
                    logger.exception("Listener shutdown error")

        logger.debug(f"MSBuild exited with code {exit_code}")
        return exit_code == 0

    def _run(self, cmd: list[str], event_source: EventSource) -> int:
        logger.info(f"Running: {' '.join(cmd)}")

        try:
            # Never use shell=True (security)
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=os.path.dirname(self.project_file),
                env={**os.environ, **BUILD_ENVIRONMENT},
            )
        except OSError as e:
            raise BuildEngineError(f"Failed to start MSBuild: {e}") from e

        try:
            readers = [
                threading.Thread(
                    target=_read_stream,
                    args=(stream, event_source),
                    name=f"msbuild-{name}",
                    daemon=True,
                )
                for name, stream in (("stdout", process.stdout), ("stderr", process.stderr))
            ]
            for reader in readers:
                reader.start()
            for reader in readers:
                reader.join()
            return process.wait()
        finally:
            if process.poll() is None:
                logger.warning("Killing MSBuild process")
                process.kill()
                process.wait()


def _read_stream(stream: IO[bytes] | None, event_source: EventSource) -> None:
    """Feed every line of an output stream through its own parser."""
    if stream is None:
        return
    parser = MSBuildOutputParser(event_source)
    with stream:
        for raw in iter(stream.readline, b""):
            decoded = raw.decode("utf-8", errors="replace")
            # Truncate long lines
            if len(decoded) > MAX_OUTPUT_LINE:
                decoded = decoded[:MAX_OUTPUT_LINE] + "...[truncated]"
            parser.feed(decoded)
