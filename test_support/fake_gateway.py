"""In-memory repository gateway for versioning tests."""

from __future__ import annotations

import dataclasses

from scm_versioning.gateway import HeadCommit, TagRef


@dataclasses.dataclass
class FakeGateway:
    """Gateway double answering from canned repository state."""

    head: HeadCommit | None = None
    branch: str = "main"
    target: str | None = None
    tags: list[TagRef] = dataclasses.field(default_factory=list)
    described: str | None = None
    staged: list[str] = dataclasses.field(default_factory=list)
    unstaged: list[str] = dataclasses.field(default_factory=list)
    describe_calls: int = 0

    def head_commit(self) -> HeadCommit | None:
        """Return the canned HEAD commit."""
        return self.head

    def current_branch_name(self) -> str:
        """Return the canned branch name."""
        return self.branch

    def branch_target(self) -> str | None:
        """Return the canned branch target, defaulting to HEAD's commit."""
        if self.target is not None:
            return self.target
        return self.head.object_id if self.head is not None else None

    def all_tags(self) -> list[TagRef]:
        """Return the canned tags."""
        return list(self.tags)

    def peeled_tag_targets(self) -> dict[str, TagRef]:
        """Index the canned tags by commit."""
        return {tag.commit: tag for tag in self.tags}

    def describe_long(self) -> str | None:
        """Return the canned describe output and count the call."""
        self.describe_calls += 1
        return self.described

    def working_tree_changes(self) -> tuple[list[str], list[str]]:
        """Return the canned working-tree changes."""
        return list(self.staged), list(self.unstaged)


def make_head(
    commit: str = "0123456789abcdef0123456789abcdef01234567",
    *,
    parent_count: int = 1,
) -> HeadCommit:
    """Return a :class:`HeadCommit` for ``commit``."""
    return HeadCommit(
        commit=commit,
        abbreviated=commit[:7],
        parent_count=parent_count,
        object_id=commit,
    )


__all__ = ["FakeGateway", "make_head"]
