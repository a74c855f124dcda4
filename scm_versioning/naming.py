"""Derive the version name and version code from branch and tag state."""

from __future__ import annotations

import logging
import re
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .gateway import TagRef

__all__ = [
    "DEFAULT_VERSION_CODE",
    "derive_version_name",
    "normalize_version_name",
    "select_version_tag",
    "version_code_from_name",
]

logger = logging.getLogger(__name__)

DEFAULT_VERSION_CODE = "1"

_SLASH_WORD = re.compile(r"/(\w)", re.ASCII)
_VERSION_TRIPLE = re.compile(r"(\d+)\.(\d+)\.(\d+)", re.ASCII)
_INTEGER_LITERAL = re.compile(r"[+-]?\d+", re.ASCII)


def select_version_tag(
    tags: cabc.Iterable[TagRef], branch_target: str | None
) -> str | None:
    """Return the tag naming the commit the branch points at.

    When several tags annotate that commit, the one with the fewest dashes
    wins (``1.2.3`` over ``1.2.3-rc1``); on equal counts the later tag wins.
    """
    if branch_target is None:
        return None
    selected: str | None = None
    for tag in tags:
        if tag.commit != branch_target:
            continue
        if selected is None or selected.count("-") >= tag.name.count("-"):
            selected = tag.name
    return selected


def normalize_version_name(name: str) -> str:
    """Fold each ``/`` into an upper-cased following character.

    Examples
    --------
    >>> normalize_version_name("feature/login")
    'featureLogin'
    >>> normalize_version_name("a/b/c")
    'aBC'
    """
    return _SLASH_WORD.sub(lambda match: match.group(1).upper(), name)


def derive_version_name(
    branch: str, branch_target: str | None, tags: cabc.Iterable[TagRef]
) -> str:
    """Return the artefact-safe version name for ``branch``."""
    tag = select_version_tag(tags, branch_target)
    if tag is not None:
        logger.debug("Version name taken from tag %s", tag)
    return normalize_version_name(tag if tag is not None else branch)


def version_code_from_name(name: str) -> str:
    """Pack the first ``major.minor.patch`` triple of ``name`` into an integer.

    The code is ``major * 10000 + minor * 100 + patch``. A name without a
    triple is used as-is when it is an integer literal; anything else falls
    back to :data:`DEFAULT_VERSION_CODE`.

    Examples
    --------
    >>> version_code_from_name("2.10.5")
    '21005'
    >>> version_code_from_name("release")
    '1'
    """
    if (match := _VERSION_TRIPLE.search(name)) is not None:
        major, minor, patch = (int(group) for group in match.groups())
        return str(major * 10000 + minor * 100 + patch)
    if _INTEGER_LITERAL.fullmatch(name.strip()):
        return str(int(name))
    return DEFAULT_VERSION_CODE
