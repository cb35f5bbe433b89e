"""Sniffer specific exceptions."""


class SnifferError(Exception):
    """Base exception for build sniffing errors."""

    pass


class ProjectLoadError(SnifferError):
    """Raised when a project file cannot be read or parsed."""

    def __init__(self, message: str, file_name: str | None = None):
        super().__init__(message)
        self.file_name = file_name


class BuildEngineError(SnifferError):
    """Raised when the build engine cannot be located or started."""

    pass


class ConfigError(SnifferError, ValueError):
    """Raised when the environment holds an invalid setting."""

    pass
