"""Build throwaway Git repositories with the ``git`` CLI for tests."""

from __future__ import annotations

import typing as typ

from plumbum import local

if typ.TYPE_CHECKING:  # pragma: no cover - typing helpers
    from pathlib import Path

_IDENTITY_ENV = {
    "GIT_AUTHOR_NAME": "Release Bot",
    "GIT_AUTHOR_EMAIL": "release-bot@example.com",
    "GIT_COMMITTER_NAME": "Release Bot",
    "GIT_COMMITTER_EMAIL": "release-bot@example.com",
    "GIT_CONFIG_NOSYSTEM": "1",
}
_NO_SIGNING = ("-c", "commit.gpgsign=false", "-c", "tag.gpgsign=false")


class GitRepo:
    """Thin wrapper running ``git`` inside a scratch repository."""

    def __init__(self, path: Path) -> None:
        self.path = path

    @classmethod
    def init(cls, path: Path, *, branch: str = "main") -> GitRepo:
        """Create an empty repository at ``path`` on ``branch``."""
        path.mkdir(parents=True, exist_ok=True)
        repo = cls(path)
        repo.git("init", "-q")
        repo.git("symbolic-ref", "HEAD", f"refs/heads/{branch}")
        return repo

    def git(self, *args: str, env: dict[str, str] | None = None) -> str:
        """Run ``git`` with ``args`` and return its stdout."""
        command = local["git"]["-C", str(self.path), *_NO_SIGNING, *args]
        return command.with_env(**_IDENTITY_ENV, **(env or {}))()

    def commit(self, message: str = "commit", *, timestamp: int | None = None) -> str:
        """Record an empty commit and return its full hash."""
        env = None
        if timestamp is not None:
            stamp = f"@{timestamp} +0000"
            env = {"GIT_AUTHOR_DATE": stamp, "GIT_COMMITTER_DATE": stamp}
        self.git("commit", "-q", "--allow-empty", "-m", message, env=env)
        return self.head()

    def head(self) -> str:
        """Return the full hash of HEAD."""
        return self.git("rev-parse", "HEAD").strip()

    def tag(self, name: str, *, annotated: bool = False, rev: str = "HEAD") -> None:
        """Create a lightweight or annotated tag on ``rev``."""
        if annotated:
            self.git("tag", "-a", name, "-m", f"Release {name}", rev)
        else:
            self.git("tag", name, rev)

    def write(self, relative: str, content: str = "content\n") -> Path:
        """Write ``content`` to ``relative`` inside the working tree."""
        target = self.path / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return target


def shallow_clone(source: GitRepo, destination: Path) -> GitRepo:
    """Clone ``source`` with ``--depth 1`` into ``destination``."""
    local["git"][
        "clone", "-q", "--depth", "1", f"file://{source.path.as_posix()}",
        str(destination),
    ].with_env(**_IDENTITY_ENV)()
    return GitRepo(destination)


__all__ = ["GitRepo", "shallow_clone"]
