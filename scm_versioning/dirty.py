"""Working-tree cleanliness with environment noise filtered out."""

from __future__ import annotations

import logging
import typing as typ

from .gateway import GitGateway

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

__all__ = ["DEFAULT_IGNORE_PREFIXES", "is_repository_dirty", "is_tree_dirty"]

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_PREFIXES = ("userHome/",)


def is_tree_dirty(
    staged: cabc.Sequence[str],
    unstaged: cabc.Iterable[str],
    ignore_prefixes: cabc.Sequence[str] = DEFAULT_IGNORE_PREFIXES,
) -> bool:
    """Return ``True`` when the working tree holds uncommitted changes.

    Staged changes always count. Unstaged paths under one of
    ``ignore_prefixes`` are dropped: CI builds often keep tool caches such as
    a relocated user home inside the checkout.
    """
    prefixes = tuple(ignore_prefixes)
    relevant: list[str] = []
    for path in unstaged:
        if path.startswith(prefixes):
            logger.debug("Ignoring unstaged change %s", path)
            continue
        relevant.append(path)
    return bool(staged) or bool(relevant)


def is_repository_dirty(
    repo_dir: Path,
    ignore_prefixes: cabc.Sequence[str] = DEFAULT_IGNORE_PREFIXES,
) -> bool:
    """Open ``repo_dir`` and report whether its working tree is dirty."""
    staged, unstaged = GitGateway.open(repo_dir).working_tree_changes()
    return is_tree_dirty(staged, unstaged, ignore_prefixes)
