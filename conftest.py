"""Pytest configuration for the versioning tests."""

from __future__ import annotations

import shutil
import sys
import typing as typ

import pytest

from test_support.fake_gateway import FakeGateway, make_head
from test_support.git_repo import GitRepo

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

HAS_GIT = shutil.which("git") is not None

REQUIRES_GIT = pytest.mark.usefixtures("require_git")

sys.modules.setdefault("scm_versioning_conftest", sys.modules[__name__])

_HOST_VARIABLES = (
    "GIT_BRANCH",
    "BRANCH_NAME",
    "GITHUB_OUTPUT",
    "GIT_DIR",
    "GIT_WORK_TREE",
    "GIT_INDEX_FILE",
)


@pytest.fixture(autouse=True)
def _isolate_host_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep CI and Git variables of the host out of the tests."""
    for name in _HOST_VARIABLES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def require_git() -> None:
    """Skip tests that exercise the git CLI when it is unavailable."""
    if not HAS_GIT:
        pytest.skip("git CLI not installed")


@pytest.fixture
def fake_gateway() -> FakeGateway:
    """Return a gateway on an untagged commit of ``main`` with a clean tree."""
    return FakeGateway(head=make_head(), branch="main")


@pytest.fixture
def git_repo(require_git: None, tmp_path: Path) -> GitRepo:
    """Return an empty repository on ``main`` under ``tmp_path``."""
    return GitRepo.init(tmp_path / "repo")


@pytest.fixture
def make_git_repo(
    require_git: None, tmp_path: Path
) -> cabc.Callable[[str], GitRepo]:
    """Return a factory creating named repositories under ``tmp_path``."""

    def _make(name: str) -> GitRepo:
        return GitRepo.init(tmp_path / name)

    return _make
