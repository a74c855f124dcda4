"""Resolve the effective branch name."""

from __future__ import annotations

import logging
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .gateway import RepositoryGateway

__all__ = ["BRANCH_TYPE_SEPARATOR", "release_base", "resolve_branch"]

logger = logging.getLogger(__name__)

BRANCH_TYPE_SEPARATOR = "/"


def resolve_branch(
    branch_env: cabc.Iterable[str],
    environ: cabc.Mapping[str, str],
    gateway: RepositoryGateway,
) -> str:
    """Return the branch name, preferring the first set override variable.

    CI servers usually check out a detached HEAD and publish the branch name
    through an environment variable instead. Values are taken verbatim, so an
    empty string still counts as set.
    """
    for name in branch_env:
        value = environ.get(name)
        if value is not None:
            logger.debug("Branch %r taken from $%s", value, name)
            return value
    branch = gateway.current_branch_name()
    logger.debug("Branch %r taken from the repository", branch)
    return branch


def release_base(branch: str, prefix: str = "release") -> str | None:
    """Return the base version of a release branch.

    Examples
    --------
    >>> release_base("release/1.2")
    '1.2'
    >>> release_base("feature/login") is None
    True
    """
    branch_type, separator, base = branch.partition(BRANCH_TYPE_SEPARATOR)
    if not separator or branch_type != prefix or not base:
        return None
    return base
