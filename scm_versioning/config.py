"""Configuration model and loader for the versioning helper.

Settings live in the ``[tool.scm-versioning]`` table of a TOML file, usually
the project's ``pyproject.toml``::

    [tool.scm-versioning]
    git_repo_root_dir = "../.."
    branch_env = ["GIT_BRANCH", "BRANCH_NAME"]
    dirty_ignore_prefixes = ["userHome/"]
    release_prefix = "release"
"""

from __future__ import annotations

import dataclasses
import tomllib
import typing as typ
from pathlib import Path

from .dirty import DEFAULT_IGNORE_PREFIXES
from .errors import ConfigError

__all__ = ["DEFAULT_BRANCH_ENV", "VersioningConfig", "load_config"]

DEFAULT_BRANCH_ENV = ("GIT_BRANCH", "BRANCH_NAME")
TABLE_PATH = ("tool", "scm-versioning")


@dataclasses.dataclass(frozen=True, slots=True)
class VersioningConfig:
    """Settings consulted when deriving version information."""

    git_repo_root_dir: Path | None = None
    branch_env: tuple[str, ...] = DEFAULT_BRANCH_ENV
    dirty_ignore_prefixes: tuple[str, ...] = DEFAULT_IGNORE_PREFIXES
    release_prefix: str = "release"

    def repository_dir(self, project_dir: Path) -> Path:
        """Return the directory Git metadata is read from."""
        if self.git_repo_root_dir is not None:
            return self.git_repo_root_dir
        return project_dir


def load_config(config_file: Path) -> VersioningConfig:
    """Load :class:`VersioningConfig` from ``config_file``.

    Relative ``git_repo_root_dir`` values are resolved against the directory
    holding ``config_file``. A file without the table yields the defaults.

    Raises
    ------
    FileNotFoundError
        Raised when ``config_file`` does not exist.
    ConfigError
        Raised when the table holds unknown keys or values of the wrong type.
    """
    config_file = Path(config_file)
    if not config_file.is_file():
        msg = f"Configuration file not found at {config_file}"
        raise FileNotFoundError(msg)

    section = _extract_section(_load_toml(config_file), config_file)
    _reject_unknown_keys(section, config_file)

    repo_root = section.get("git_repo_root_dir")
    return VersioningConfig(
        git_repo_root_dir=(
            config_file.parent / _require_str(repo_root, "git_repo_root_dir", config_file)
            if repo_root is not None
            else None
        ),
        branch_env=_str_tuple(
            section.get("branch_env", DEFAULT_BRANCH_ENV), "branch_env", config_file
        ),
        dirty_ignore_prefixes=_str_tuple(
            section.get("dirty_ignore_prefixes", DEFAULT_IGNORE_PREFIXES),
            "dirty_ignore_prefixes",
            config_file,
        ),
        release_prefix=_require_str(
            section.get("release_prefix", "release"), "release_prefix", config_file
        ),
    )


def _load_toml(path: Path) -> dict[str, typ.Any]:
    """Load and parse a TOML file."""
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise ConfigError(msg) from exc


def _extract_section(data: dict[str, typ.Any], config_path: Path) -> dict[str, typ.Any]:
    """Return the ``[tool.scm-versioning]`` table, or an empty mapping."""
    section: object = data
    for key in TABLE_PATH:
        if not isinstance(section, dict):
            break
        section = section.get(key, {})
    if not isinstance(section, dict):
        label = ".".join(TABLE_PATH)
        msg = f"[{label}] in {config_path} must be a table"
        raise ConfigError(msg)
    return section


def _reject_unknown_keys(section: dict[str, typ.Any], config_path: Path) -> None:
    known = {field.name for field in dataclasses.fields(VersioningConfig)}
    unknown = sorted(set(section) - known)
    if unknown:
        joined = ", ".join(unknown)
        msg = f"Unknown key(s) {joined} in [tool.scm-versioning] of {config_path}"
        raise ConfigError(msg)


def _require_str(value: object, field_name: str, config_path: Path) -> str:
    if not isinstance(value, str):
        msg = (
            f"'{field_name}' must be a string, got {type(value).__name__} "
            f"in {config_path}"
        )
        raise ConfigError(msg)
    return value


def _str_tuple(value: object, field_name: str, config_path: Path) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        msg = (
            f"'{field_name}' must be a list, got {type(value).__name__} "
            f"in {config_path}"
        )
        raise ConfigError(msg)
    for index, item in enumerate(value):
        if not isinstance(item, str):
            msg = (
                f"'{field_name}[{index}]' must be a string, "
                f"got {type(item).__name__} in {config_path}"
            )
            raise ConfigError(msg)
    return tuple(value)
