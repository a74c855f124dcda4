"""Assemble version information for a project directory."""

from __future__ import annotations

import logging
import os
import typing as typ

from .base_tags import find_base_tags
from .branch import resolve_branch
from .commit import classify_commit
from .dirty import is_tree_dirty
from .gateway import GitGateway, has_git_marker
from .naming import derive_version_name, version_code_from_name
from .record import NONE, VersionRecord

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from .config import VersioningConfig
    from .gateway import RepositoryGateway

    GatewayFactory = cabc.Callable[[Path], RepositoryGateway]

__all__ = ["get_base_tags", "get_info"]

logger = logging.getLogger(__name__)


def get_info(
    config: VersioningConfig,
    *,
    project_dir: Path,
    root_project_dir: Path | None = None,
    environ: cabc.Mapping[str, str] | None = None,
    gateway_factory: GatewayFactory = GitGateway.open,
) -> VersionRecord:
    """Return the :class:`VersionRecord` describing ``project_dir``.

    Parameters
    ----------
    config
        Versioning settings (repository root override, branch variables and
        ignorable dirty paths).
    project_dir
        Directory of the project being built.
    root_project_dir
        Directory of the top-most project in a multi-project build.
    environ
        Environment consulted for branch overrides; defaults to
        :data:`os.environ`.
    gateway_factory
        Callable opening a :class:`RepositoryGateway` for a directory.

    Returns
    -------
    VersionRecord
        The derived record, or :data:`NONE` when no ``.git`` marker exists in
        the root project, the project or the configured repository root.

    Raises
    ------
    NoCommitsError
        Raised when the repository has no commits.
    DescribeParseError
        Raised when ``git describe`` output cannot be parsed.
    """
    candidates = (root_project_dir, project_dir, config.git_repo_root_dir)
    if not has_git_marker(candidates):
        logger.info("No Git repository found for %s", project_dir)
        return NONE

    gateway = gateway_factory(config.repository_dir(project_dir))
    commit = classify_commit(gateway)
    branch = resolve_branch(
        config.branch_env, os.environ if environ is None else environ, gateway
    )
    staged, unstaged = gateway.working_tree_changes()
    version_name = derive_version_name(
        branch, gateway.branch_target(), gateway.all_tags()
    )

    record = VersionRecord(
        branch=branch,
        commit=commit.commit,
        abbreviated=commit.abbreviated,
        tag=commit.tag,
        dirty=is_tree_dirty(staged, unstaged, config.dirty_ignore_prefixes),
        shallow=commit.shallow,
        version_name=version_name,
        version_code=version_code_from_name(version_name),
    )
    logger.info(
        "Version %s (%s) on %s at %s%s",
        record.version_name,
        record.version_code,
        record.branch,
        record.abbreviated,
        " [dirty]" if record.dirty else "",
    )
    return record


def get_base_tags(
    config: VersioningConfig,
    base: str,
    *,
    project_dir: Path,
    gateway_factory: GatewayFactory = GitGateway.open,
) -> list[str]:
    """Return the ``<base>.<N>`` tag names of the repository, latest first."""
    gateway = gateway_factory(config.repository_dir(project_dir))
    return find_base_tags(gateway.all_tags(), base)
