"""Tests for configuration loading."""

import pytest

from buildsniffer_mcp.config import (
    DEFAULT_IGNORE_ITEMS,
    SnifferConfig,
    load_config,
    parse_item_list,
)
from buildsniffer_mcp.errors import ConfigError, SnifferError


class TestSnifferConfig:
    """Tests for configuration defaults."""

    def test_defaults(self):
        """Test default configuration values."""
        config = SnifferConfig()

        assert config.ignore_items == DEFAULT_IGNORE_ITEMS
        assert "Message" in config.ignore_items
        assert config.msbuild_command is None
        assert config.verbosity == "detailed"
        assert config.log_level == "INFO"


class TestLoadConfig:
    """Tests for reading the environment."""

    def test_empty_environment(self):
        """Test defaults with no variables set."""
        config = load_config({})
        assert config.ignore_items == DEFAULT_IGNORE_ITEMS

    def test_ignore_items(self):
        """Test ignore list accepts semicolons and commas."""
        config = load_config({"BUILDSNIFFER_IGNORE": "Exec; Copy,Message;;"})
        assert config.ignore_items == ("Exec", "Copy", "Message")

    def test_empty_ignore_clears_defaults(self):
        """Test an empty ignore variable disables pruning."""
        assert load_config({"BUILDSNIFFER_IGNORE": ""}).ignore_items == ()

    def test_msbuild_command(self):
        """Test MSBuild command is split like a shell would."""
        config = load_config({"BUILDSNIFFER_MSBUILD": '"/opt/my tools/dotnet" msbuild'})
        assert config.msbuild_command == ["/opt/my tools/dotnet", "msbuild"]

    def test_verbosity(self):
        """Test verbosity is normalized."""
        assert load_config({"BUILDSNIFFER_VERBOSITY": "Diagnostic"}).verbosity == "diagnostic"

    def test_invalid_verbosity(self):
        """Test verbosities that hide task boundaries are rejected."""
        with pytest.raises(ConfigError, match="Invalid verbosity"):
            load_config({"BUILDSNIFFER_VERBOSITY": "minimal"})

    def test_invalid_verbosity_is_value_error(self):
        """Test a bad setting is both a SnifferError and a ValueError."""
        with pytest.raises(SnifferError):
            load_config({"BUILDSNIFFER_VERBOSITY": "quiet"})
        with pytest.raises(ValueError):
            load_config({"BUILDSNIFFER_VERBOSITY": "quiet"})

    def test_log_level(self):
        """Test log level is upper-cased."""
        assert load_config({"LOG_LEVEL": "debug"}).log_level == "DEBUG"

    def test_reads_os_environ(self, monkeypatch):
        """Test os.environ is used by default."""
        monkeypatch.setenv("BUILDSNIFFER_IGNORE", "Exec")
        assert load_config().ignore_items == ("Exec",)


class TestParseItemList:
    """Tests for list parsing."""

    def test_strips_blanks(self):
        """Test whitespace-only entries are dropped."""
        assert parse_item_list(" A ; ;B ") == ("A", "B")
