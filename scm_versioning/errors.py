"""Error types shared across the versioning package."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

__all__ = [
    "ConfigError",
    "DescribeParseError",
    "GitCommandError",
    "NoCommitsError",
    "RepositoryUnavailableError",
    "VersioningError",
]


class VersioningError(RuntimeError):
    """Raised when version information cannot be computed."""


class RepositoryUnavailableError(VersioningError):
    """Raised when no Git metadata can be opened at a resolved path."""


class NoCommitsError(VersioningError):
    """Raised when the repository has no history to derive a version from."""


class DescribeParseError(VersioningError):
    """Raised when ``git describe --long`` output has an unexpected shape."""

    def __init__(self, described: str) -> None:
        super().__init__(f"Cannot parse description of current commit: {described!r}")
        self.described = described


class GitCommandError(VersioningError):
    """Raised when a ``git`` invocation fails unexpectedly."""

    def __init__(
        self, command: cabc.Sequence[str], returncode: int, stderr: str
    ) -> None:
        joined = " ".join(command)
        details = stderr.strip() or "no output"
        super().__init__(f"{joined} exited with status {returncode}: {details}")
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr


class ConfigError(VersioningError):
    """Raised when the versioning configuration is invalid."""
