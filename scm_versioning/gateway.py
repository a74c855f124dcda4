"""Read-only access to a Git repository.

The versioning core depends on the narrow :class:`RepositoryGateway`
protocol. :class:`GitGateway` satisfies it by shelling out to the ``git``
CLI through plumbum; tests substitute an in-memory fake.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import typing as typ
from pathlib import Path

from plumbum import CommandNotFound, local
from plumbum.commands.processes import ProcessExecutionError

from cmd_utils import RunResult, process_error_to_run_result, run_cmd

from .errors import GitCommandError, RepositoryUnavailableError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

__all__ = [
    "GitGateway",
    "HeadCommit",
    "RepositoryGateway",
    "TagRef",
    "has_git_marker",
    "parse_porcelain_status",
    "parse_tag_listing",
]

logger = logging.getLogger(__name__)

TAGS_PREFIX = "refs/tags/"

_FIELD_SEP = "\x00"
_TAG_FORMAT = "%00".join(
    (
        "%(refname)",
        "%(objectname)",
        "%(*objectname)",
        "%(committerdate:unix)",
        "%(*committerdate:unix)",
        "%(*objecttype)",
    )
)
_NO_DESCRIPTION_MARKERS = ("cannot describe", "can describe")
# git translates its diagnostics; stderr is only matched in the C locale
_GIT_LOCALE = {"LC_ALL": "C", "LANGUAGE": ""}


@dataclasses.dataclass(frozen=True, slots=True)
class TagRef:
    """A tag with its target resolved to the underlying commit."""

    name: str
    object_id: str
    commit: str
    commit_time: int = 0


class HeadCommit(typ.NamedTuple):
    """Identity of the commit HEAD points at."""

    commit: str
    abbreviated: str
    parent_count: int
    object_id: str


class RepositoryGateway(typ.Protocol):
    """Read-only capabilities the versioning core needs from a repository."""

    def head_commit(self) -> HeadCommit | None:
        """Return HEAD's commit, or ``None`` when the history is empty."""
        ...

    def current_branch_name(self) -> str:
        """Return the short name of the checked-out branch."""
        ...

    def branch_target(self) -> str | None:
        """Return the commit the current branch reference points at."""
        ...

    def all_tags(self) -> list[TagRef]:
        """Return every tag in the repository, ordered by name."""
        ...

    def peeled_tag_targets(self) -> dict[str, TagRef]:
        """Return tags keyed by the commit id they ultimately target."""
        ...

    def describe_long(self) -> str | None:
        """Return ``<tag>-<distance>-g<hash>`` for HEAD, if a tag is reachable."""
        ...

    def working_tree_changes(self) -> tuple[list[str], list[str]]:
        """Return the ``(staged, unstaged)`` paths of the working tree."""
        ...


def has_git_marker(candidate_dirs: cabc.Iterable[Path | None]) -> bool:
    """Return ``True`` when any candidate directory holds a ``.git`` marker."""
    return any(
        (Path(directory) / ".git").exists()
        for directory in candidate_dirs
        if directory is not None
    )


def parse_tag_listing(
    output: str,
    peel: cabc.Callable[[str], tuple[str, int] | None] | None = None,
) -> list[TagRef]:
    """Parse ``git for-each-ref`` output produced with the gateway's format.

    ``%(*objectname)`` dereferences a single level only. When an annotated
    tag targets another tag, ``peel`` is called with the full ref name and
    returns the ``(commit, commit_time)`` the chain ends at, or ``None`` when
    it does not end at a commit.
    """
    tags: list[TagRef] = []
    for line in output.splitlines():
        if not line:
            continue
        refname, object_id, peeled, commit_time, peeled_time, peeled_type = (
            line.split(_FIELD_SEP)
        )
        commit = peeled or object_id
        time = int(peeled_time or commit_time or 0)
        if peeled_type == "tag" and peel is not None:
            resolved = peel(refname)
            if resolved is not None:
                commit, time = resolved
        tags.append(
            TagRef(
                name=refname.removeprefix(TAGS_PREFIX),
                object_id=object_id,
                commit=commit,
                commit_time=time,
            )
        )
    return tags


def parse_porcelain_status(output: str) -> tuple[list[str], list[str]]:
    """Split ``git status --porcelain=v1 -z`` output into staged/unstaged paths.

    Untracked files are reported as unstaged. Rename and copy entries carry
    their source path in the following NUL-separated field, which is skipped.
    """
    staged: list[str] = []
    unstaged: list[str] = []
    entries = iter(output.split(_FIELD_SEP))
    for entry in entries:
        if len(entry) < 4:
            continue
        index_state, worktree_state, path = entry[0], entry[1], entry[3:]
        if index_state not in " ?":
            staged.append(path)
        if worktree_state != " ":
            unstaged.append(path)
        if "R" in (index_state, worktree_state) or "C" in (
            index_state,
            worktree_state,
        ):
            next(entries, None)
    return staged, unstaged


class GitGateway:
    """Repository gateway backed by the ``git`` command-line client.

    Every command runs in the C locale. With ``echo`` set, each command line
    is printed to stderr before it runs.
    """

    def __init__(self, repo_dir: Path, *, echo: bool = False) -> None:
        self.repo_dir = Path(repo_dir)
        self.echo = echo

    @classmethod
    def open(cls, repo_dir: Path, *, echo: bool = False) -> GitGateway:
        """Return a gateway for ``repo_dir`` after checking it is a repository.

        Raises
        ------
        RepositoryUnavailableError
            If ``git`` is missing or ``repo_dir`` holds no Git metadata.
        """
        gateway = cls(repo_dir, echo=echo)
        result = gateway._run("rev-parse", "--git-dir")
        if result.returncode != 0:
            msg = f"No Git repository found at {gateway.repo_dir}"
            raise RepositoryUnavailableError(msg)
        return gateway

    def _command(self, *args: str) -> object:
        try:
            git = local["git"]
        except CommandNotFound as exc:
            msg = "git executable not found on PATH"
            raise RepositoryUnavailableError(msg) from exc
        return git["-C", str(self.repo_dir), *args]

    def _run(self, *args: str) -> RunResult:
        result = run_cmd(
            self._command(*args),
            method="run",
            env=os.environ | _GIT_LOCALE,
            echo=self.echo,
        )
        return typ.cast("RunResult", result)

    def _output(self, *args: str) -> str:
        try:
            output = run_cmd(
                self._command(*args), env=os.environ | _GIT_LOCALE, echo=self.echo
            )
        except ProcessExecutionError as exc:
            failure = process_error_to_run_result(exc)
            raise GitCommandError(
                ["git", *args], failure.returncode, failure.stderr
            ) from exc
        return typ.cast("str", output)

    def _resolve_commit(self, revision: str) -> str | None:
        result = self._run("rev-parse", "--verify", "--quiet", f"{revision}^{{commit}}")
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def head_commit(self) -> HeadCommit | None:
        if self._resolve_commit("HEAD") is None:
            return None
        raw = self._output("log", "-1", "--format=%H%x00%h%x00%P", "HEAD")
        full, abbreviated, parents = raw.strip("\n").split(_FIELD_SEP)
        return HeadCommit(
            commit=full,
            abbreviated=abbreviated,
            parent_count=len(parents.split()),
            object_id=full,
        )

    def current_branch_name(self) -> str:
        return self._output("rev-parse", "--abbrev-ref", "HEAD").strip()

    def branch_target(self) -> str | None:
        symbolic = self._run("symbolic-ref", "-q", "HEAD")
        reference = symbolic.stdout.strip() if symbolic.returncode == 0 else "HEAD"
        return self._resolve_commit(reference or "HEAD")

    def all_tags(self) -> list[TagRef]:
        return parse_tag_listing(
            self._output("for-each-ref", f"--format={_TAG_FORMAT}", "refs/tags"),
            peel=self._peel_nested_tag,
        )

    def _peel_nested_tag(self, refname: str) -> tuple[str, int] | None:
        result = self._run(
            "log", "-1", "--format=%H%x00%ct", f"{refname}^{{commit}}", "--"
        )
        if result.returncode != 0:
            logger.debug("Tag %s does not lead to a commit", refname)
            return None
        commit, commit_time = result.stdout.strip("\n").split(_FIELD_SEP)
        return commit, int(commit_time)

    def peeled_tag_targets(self) -> dict[str, TagRef]:
        return {tag.commit: tag for tag in self.all_tags()}

    def describe_long(self) -> str | None:
        result = self._run("describe", "--long", "HEAD")
        if result.returncode == 0:
            return result.stdout.strip() or None
        if any(marker in result.stderr for marker in _NO_DESCRIPTION_MARKERS):
            logger.debug("No tag reachable from HEAD in %s", self.repo_dir)
            return None
        raise GitCommandError(
            ["git", "describe", "--long", "HEAD"], result.returncode, result.stderr
        )

    def working_tree_changes(self) -> tuple[list[str], list[str]]:
        return parse_porcelain_status(
            self._output("status", "--porcelain=v1", "-z", "--untracked-files=all")
        )
