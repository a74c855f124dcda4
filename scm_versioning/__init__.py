"""Derive reproducible version information from a Git repository.

The package inspects an existing repository (refs, commit ancestry, tags and
working-tree status) and produces a :class:`VersionRecord` holding the branch,
commit, tag, dirty flag and a computed version name and code.
"""

from __future__ import annotations

from .base_tags import find_base_tags
from .branch import release_base, resolve_branch
from .commit import CommitInfo, classify_commit, parse_describe
from .config import VersioningConfig, load_config
from .dirty import is_repository_dirty, is_tree_dirty
from .errors import (
    ConfigError,
    DescribeParseError,
    GitCommandError,
    NoCommitsError,
    RepositoryUnavailableError,
    VersioningError,
)
from .gateway import GitGateway, HeadCommit, RepositoryGateway, TagRef
from .naming import derive_version_name, normalize_version_name, version_code_from_name
from .record import NONE, VersionRecord
from .service import get_base_tags, get_info

__all__ = [
    "NONE",
    "CommitInfo",
    "ConfigError",
    "DescribeParseError",
    "GitCommandError",
    "GitGateway",
    "HeadCommit",
    "NoCommitsError",
    "RepositoryGateway",
    "RepositoryUnavailableError",
    "TagRef",
    "VersionRecord",
    "VersioningConfig",
    "VersioningError",
    "classify_commit",
    "derive_version_name",
    "find_base_tags",
    "get_base_tags",
    "get_info",
    "is_repository_dirty",
    "is_tree_dirty",
    "load_config",
    "normalize_version_name",
    "parse_describe",
    "release_base",
    "resolve_branch",
    "version_code_from_name",
]
