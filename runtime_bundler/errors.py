from __future__ import annotations


class BuildError(RuntimeError):
    """Base class for every failure that aborts a build."""

    kind = "BuildError"


class UnsupportedPlatform(BuildError):
    kind = "UnsupportedPlatform"


class MissingVersionArgument(BuildError):
    kind = "MissingVersionArgument"


class NoInterpreterFound(BuildError):
    kind = "NoInterpreterFound"


class DownloadFailure(BuildError):
    kind = "DownloadFailure"


class DependencyInstallFailure(BuildError):
    kind = "DependencyInstallFailure"


class StagingError(BuildError):
    kind = "StagingError"


class CommandError(BuildError):
    kind = "CommandError"

    def __init__(self, message: str, *, argv: list[str] | None = None, returncode: int | None = None) -> None:
        super().__init__(message)
        self.argv = list(argv or [])
        self.returncode = returncode


class ConfigError(BuildError):
    kind = "ConfigError"
