"""Classify the current commit: identity, shallowness and tag."""

from __future__ import annotations

import dataclasses
import logging
import re
import typing as typ

from .errors import DescribeParseError, NoCommitsError

if typ.TYPE_CHECKING:
    from .gateway import RepositoryGateway

__all__ = ["CommitInfo", "DescribeResult", "classify_commit", "parse_describe"]

logger = logging.getLogger(__name__)

_DESCRIBE_PATTERN = re.compile(r"^(.*)-(\d+)-g([0-9a-f]+)$", re.ASCII)


@dataclasses.dataclass(frozen=True, slots=True)
class DescribeResult:
    """Parsed ``git describe --long`` output."""

    tag: str
    distance: int
    abbreviated: str


@dataclasses.dataclass(frozen=True, slots=True)
class CommitInfo:
    """Identity and tag association of HEAD."""

    commit: str
    abbreviated: str
    shallow: bool
    tag: str | None


def parse_describe(described: str) -> DescribeResult:
    """Parse the ``<tag>-<distance>-g<hash>`` long describe format.

    Raises
    ------
    DescribeParseError
        If ``described`` does not have the long describe shape.

    Examples
    --------
    >>> parse_describe("1.2.3-4-gabcdef1")
    DescribeResult(tag='1.2.3', distance=4, abbreviated='abcdef1')
    """
    match = _DESCRIBE_PATTERN.fullmatch(described)
    if match is None:
        raise DescribeParseError(described)
    tag, distance, abbreviated = match.groups()
    return DescribeResult(tag, int(distance), abbreviated)


def _shallow_tag(gateway: RepositoryGateway, object_id: str) -> str | None:
    # describe cannot walk a truncated history, so only an exact match counts
    lucky = gateway.peeled_tag_targets().get(object_id)
    return lucky.name if lucky is not None else None


def _described_tag(gateway: RepositoryGateway) -> str | None:
    described = gateway.describe_long()
    if not described:
        return None
    result = parse_describe(described)
    if result.distance != 0:
        logger.debug("HEAD is %d commit(s) past %s", result.distance, result.tag)
        return None
    return result.tag


def classify_commit(gateway: RepositoryGateway) -> CommitInfo:
    """Resolve HEAD's identity, whether the clone is shallow and its tag.

    Raises
    ------
    NoCommitsError
        If the repository has no commits.
    DescribeParseError
        If ``git describe`` returns output of an unexpected shape.
    """
    head = gateway.head_commit()
    if head is None:
        msg = "No commit available in the repository - cannot compute version"
        raise NoCommitsError(msg)

    shallow = head.parent_count == 0
    tag = _shallow_tag(gateway, head.object_id) if shallow else _described_tag(gateway)
    return CommitInfo(
        commit=head.commit,
        abbreviated=head.abbreviated,
        shallow=shallow,
        tag=tag,
    )
