"""Exception types raised by repo-pulse.

The aggregation core is total and raises nothing; these errors come from
the edges (time zone parsing, configuration and repository access) and are
turned into user-facing messages by the CLI.
"""

from __future__ import annotations

from pathlib import Path


class RepoPulseError(Exception):
    """Base class for all repo-pulse specific errors."""


class InvalidTimezoneError(RepoPulseError, ValueError):
    """Raised when a time zone name is not local, utc or a known IANA zone."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(
            f"invalid timezone: {value}. Use local, utc, or an IANA name like Asia/Tokyo"
        )


class ConfigNotFoundError(RepoPulseError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Configuration file not found: {path}")


class ConfigInvalidError(RepoPulseError):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Invalid configuration: {message}")


class RepositoryNotFoundError(RepoPulseError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Repository not found: {path}")


class NotGitRepositoryError(RepoPulseError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Not a git repository: {path}")


class GitOperationError(RepoPulseError):
    """Raised when git refuses an operation (unknown branch, corrupt object...)."""


class NoRepositoriesError(RepoPulseError):
    def __init__(self) -> None:
        super().__init__("No repositories to analyze")


class RepoNotInConfigError(RepoPulseError):
    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"Repository not found in config: {identifier}")
