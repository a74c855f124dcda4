"""The version descriptor returned to callers."""

from __future__ import annotations

import dataclasses

__all__ = ["NONE", "VersionRecord"]


@dataclasses.dataclass(frozen=True, slots=True)
class VersionRecord:
    """Version information derived from the state of a repository."""

    branch: str
    commit: str
    abbreviated: str
    tag: str | None
    dirty: bool
    shallow: bool
    version_name: str = ""
    version_code: str = "1"

    def as_dict(self) -> dict[str, str | bool | None]:
        """Return the record keyed by the property names build tools expect."""
        return {
            "branch": self.branch,
            "commit": self.commit,
            "abbreviated": self.abbreviated,
            "tag": self.tag,
            "dirty": self.dirty,
            "shallow": self.shallow,
            "versionName": self.version_name,
            "versionCode": self.version_code,
        }

    def as_properties(self) -> dict[str, str]:
        """Return the record as ``key=value`` friendly strings."""
        return {
            key: _format_property(value) for key, value in self.as_dict().items()
        }


def _format_property(value: str | bool | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


NONE = VersionRecord(
    branch="",
    commit="",
    abbreviated="",
    tag=None,
    dirty=False,
    shallow=False,
    version_name="",
    version_code="",
)
"""Sentinel returned when no repository is present."""
