"""Locate earlier release points of a base version line."""

from __future__ import annotations

import re
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .gateway import TagRef

__all__ = ["find_base_tags"]


def find_base_tags(tags: cabc.Iterable[TagRef], base: str) -> list[str]:
    """Return the names of ``<base>.<N>`` tags, most recent first.

    Matches are sorted by commit time, newest first, and then sorted again
    by the numeric suffix, highest first. Both sorts are stable, so the
    suffix order wins and commit time only matters between equal suffixes
    (for instance ``1.2.03`` and ``1.2.3``).

    Examples
    --------
    >>> from scm_versioning.gateway import TagRef
    >>> find_base_tags(
    ...     [
    ...         TagRef("1.2.1", "a", "a", 100),
    ...         TagRef("1.2.3", "a", "a", 100),
    ...         TagRef("1.2.2", "b", "b", 50),
    ...         TagRef("1.3.0", "c", "c", 200),
    ...     ],
    ...     "1.2",
    ... )
    ['1.2.3', '1.2.2', '1.2.1']
    """
    pattern = re.compile(rf"^{re.escape(base)}\.(\d+)$", re.ASCII)
    matches = [
        (tag, int(match.group(1)))
        for tag in tags
        if (match := pattern.fullmatch(tag.name)) is not None
    ]
    matches.sort(key=lambda item: -item[0].commit_time)
    # several compliant tags may share a commit, so the suffix decides
    matches.sort(key=lambda item: -item[1])
    return [tag.name for tag, _ in matches]
