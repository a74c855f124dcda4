"""Tests for the ``scm-versioning`` command-line interface."""

from __future__ import annotations

import json
import typing as typ

import pytest

from scm_versioning.cli import main
from scm_versioning_conftest import REQUIRES_GIT

if typ.TYPE_CHECKING:
    from pathlib import Path

    from test_support.git_repo import GitRepo


def _run(argv: list[str]) -> None:
    main(argv)


class TestInfoWithoutRepository:
    """Tests for ``info`` outside any repository."""

    def test_prints_empty_properties(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """A directory without ``.git`` yields the empty record."""
        _run(["info", "--project-dir", str(tmp_path)])

        lines = capsys.readouterr().out.splitlines()
        assert lines == [
            "branch=",
            "commit=",
            "abbreviated=",
            "tag=",
            "dirty=false",
            "shallow=false",
            "versionName=",
            "versionCode=",
        ]

    def test_json_output(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """JSON output keeps ``null`` and booleans."""
        _run(["info", "--project-dir", str(tmp_path), "--output-format", "json"])

        payload = json.loads(capsys.readouterr().out)
        assert payload["tag"] is None
        assert payload["dirty"] is False
        assert payload["versionCode"] == ""

    def test_inputs_from_environment(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """``INPUT_*`` variables supply options as in a GitHub Action."""
        monkeypatch.setenv("INPUT_PROJECT_DIR", str(tmp_path))
        monkeypatch.setenv("INPUT_OUTPUT_FORMAT", "json")

        _run(["info"])

        assert json.loads(capsys.readouterr().out)["branch"] == ""

    def test_appends_github_outputs(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Records are appended to ``$GITHUB_OUTPUT`` when it is set."""
        output = tmp_path / "out" / "github_output"
        output.parent.mkdir()
        output.write_text("existing=1\n", encoding="utf-8")
        monkeypatch.setenv("GITHUB_OUTPUT", str(output))

        _run(["info", "--project-dir", str(tmp_path)])
        capsys.readouterr()

        lines = output.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "existing=1"
        assert "versionCode=" in lines
        assert len(lines) == 9


class TestErrors:
    """Tests for user-facing error reporting."""

    def test_invalid_config_exits_with_annotation(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Configuration errors become a workflow error annotation."""
        config_file = tmp_path / "versioning.toml"
        config_file.write_text("[tool.scm-versioning\n", encoding="utf-8")

        with pytest.raises(SystemExit) as excinfo:
            _run(
                [
                    "info",
                    "--project-dir",
                    str(tmp_path),
                    "--config-file",
                    str(config_file),
                ]
            )

        assert excinfo.value.code == 1
        err = capsys.readouterr().err
        assert err.startswith("::error title=Versioning Failure::")
        assert "Invalid TOML" in err

    def test_missing_config_file(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """An explicit configuration file must exist."""
        with pytest.raises(SystemExit) as excinfo:
            _run(
                [
                    "info",
                    "--project-dir",
                    str(tmp_path),
                    "--config-file",
                    str(tmp_path / "missing.toml"),
                ]
            )

        assert excinfo.value.code == 1
        assert "::error title=Versioning Failure::" in capsys.readouterr().err


@REQUIRES_GIT
class TestWithRepository:
    """Tests running the CLI against real repositories."""

    def test_info_on_tagged_commit(
        self, git_repo: GitRepo, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """A tagged commit reports its tag and derived version."""
        git_repo.commit("first")
        commit = git_repo.commit("second")
        git_repo.tag("1.4.2", annotated=True)

        _run(["info", "--project-dir", str(git_repo.path), "--output-format", "json"])

        payload = json.loads(capsys.readouterr().out)
        assert payload["branch"] == "main"
        assert payload["commit"] == commit
        assert payload["tag"] == "1.4.2"
        assert payload["versionName"] == "1.4.2"
        assert payload["versionCode"] == "10402"

    def test_branch_env_option(
        self,
        git_repo: GitRepo,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """``--branch-env`` replaces the configured override variables."""
        git_repo.commit("first")
        monkeypatch.setenv("CI_BRANCH", "feature/login")

        _run(
            [
                "info",
                "--project-dir",
                str(git_repo.path),
                "--branch-env",
                "CI_BRANCH",
            ]
        )

        out = capsys.readouterr().out
        assert "branch=feature/login" in out.splitlines()
        assert "versionName=featureLogin" in out.splitlines()

    def test_pyproject_configuration(
        self, git_repo: GitRepo, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Settings are read from the project's pyproject.toml."""
        git_repo.commit("first")
        git_repo.write(
            "pyproject.toml",
            '[tool.scm-versioning]\nbranch_env = []\ndirty_ignore_prefixes = ["pyproject.toml"]\n',
        )

        _run(["info", "--project-dir", str(git_repo.path)])

        assert "dirty=false" in capsys.readouterr().out.splitlines()

    def test_base_tags_with_explicit_base(
        self, git_repo: GitRepo, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """``base-tags`` lists the matching tags, highest suffix first."""
        git_repo.commit("first")
        for name in ("1.2.0", "1.2.1", "1.20.0"):
            git_repo.tag(name)

        _run(["base-tags", "--base", "1.2", "--project-dir", str(git_repo.path)])

        assert capsys.readouterr().out.splitlines() == ["1.2.1", "1.2.0"]

    def test_base_tags_from_release_branch(
        self, git_repo: GitRepo, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Without ``--base`` the release branch supplies it."""
        git_repo.commit("first")
        git_repo.tag("3.1.0")
        git_repo.git("checkout", "-q", "-b", "release/3.1")

        _run(["base-tags", "--project-dir", str(git_repo.path)])

        assert capsys.readouterr().out.splitlines() == ["3.1.0"]

    def test_base_tags_requires_release_branch(
        self, git_repo: GitRepo, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Other branches need an explicit base."""
        git_repo.commit("first")

        with pytest.raises(SystemExit) as excinfo:
            _run(["base-tags", "--project-dir", str(git_repo.path)])

        assert excinfo.value.code == 1
        assert "is not a 'release' branch" in capsys.readouterr().err

    def test_verbose_echoes_git_commands(
        self, git_repo: GitRepo, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """``--verbose`` shows each git command on stderr only."""
        git_repo.commit("first")

        _run(["info", "--project-dir", str(git_repo.path), "--verbose"])

        captured = capsys.readouterr()
        assert "branch=main" in captured.out.splitlines()
        assert "$ " in captured.err
        assert "describe --long HEAD" in captured.err
