"""Pytest fixtures for buildsniffer-mcp tests."""

import pytest
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from buildsniffer_mcp.engine.events import EventSource, MessageEvent  # noqa: E402

MSBUILD_NS = "http://schemas.microsoft.com/developer/msbuild/2003"

SAMPLE_PROJECT = """<?xml version="1.0" encoding="utf-8"?>
<Project ToolsVersion="4.0" DefaultTargets="Build" xmlns="http://schemas.microsoft.com/developer/msbuild/2003">
  <Import Project="common.targets" />
  <Import Project="C:\\tools\\shared.targets" />
  <Import Project="$(MSBuildToolsPath)\\Microsoft.Common.targets" />
  <Import Condition="false" />
  <Target Name="Build">
    <Exec Command="echo building" />
    <MSBuild Projects="App.sln;Lib.sln" Targets="Build" />
  </Target>
  <Target Name="Clean">
    <RemoveDir Directories="bin" />
    <Message Text="cleaning" />
  </Target>
  <Target Name="Package">
    <ItemGroup>
      <Deploy Include="*.zip" />
    </ItemGroup>
    <CallTarget Targets="Build">
      <MSBuild Projects="Installer.sln" />
    </CallTarget>
  </Target>
  <Target>
    <Message Text="unnamed" />
  </Target>
</Project>
"""


class FakeEngineProject:
    """Isolated project handed out by FakeEngine."""

    def __init__(self, engine, content, directory):
        self.engine = engine
        self.content = content
        self.directory = directory
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self):
        self.closed = True

    def build(self, targets, listeners):
        self.engine.builds.append((list(targets), list(listeners), self.content))
        source = EventSource()
        for listener in listeners:
            listener.initialize(source)
        try:
            key = targets[0] if targets else None
            outcome = self.engine.outcomes.get(key, (True, []))
            if isinstance(outcome, Exception):
                raise outcome
            success, messages = outcome
            for sender, text in messages:
                source.raise_message(MessageEvent(sender_name=sender, message=text))
        finally:
            for listener in listeners:
                listener.shutdown()
        return success


class FakeEngine:
    """Build engine scripted per target.

    outcomes maps a target name (None for default targets) to either
    (success, [(sender, text), ...]) or an exception to raise.
    """

    def __init__(self, outcomes=None):
        self.outcomes = outcomes or {}
        self.builds = []
        self.projects = []

    def load_project(self, reader, directory):
        project = FakeEngineProject(self, reader.read(), directory)
        self.projects.append(project)
        return project


@pytest.fixture
def make_engine():
    """Factory for scripted fake engines."""
    return FakeEngine


@pytest.fixture
def sample_project_file(tmp_path):
    """Sample MSBuild project written to disk."""
    path = tmp_path / "build.proj"
    path.write_text(SAMPLE_PROJECT, encoding="utf-8")
    return path


@pytest.fixture
def write_project(tmp_path):
    """Write arbitrary project XML to a file and return its path."""

    def _write(content, name="build.proj"):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write
