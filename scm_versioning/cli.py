"""Command-line entry point for the versioning helper.

Examples
--------
Print the version record of the current checkout::

    scm-versioning info --output-format json

Inside GitHub Actions, inputs may also be supplied as ``INPUT_*`` variables
and the record is appended to ``$GITHUB_OUTPUT``::

    INPUT_PROJECT_DIR=app GITHUB_OUTPUT="$(mktemp)" scm-versioning info

List earlier release points for the ``1.2`` line::

    scm-versioning base-tags --base 1.2
"""

from __future__ import annotations

import dataclasses
import functools
import json
import logging
import os
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App

from .branch import release_base, resolve_branch
from .config import VersioningConfig, load_config
from .errors import VersioningError
from .gateway import GitGateway
from .service import get_base_tags, get_info

if typ.TYPE_CHECKING:
    import collections.abc as cabc

__all__ = ["app", "main"]

OutputFormat = typ.Literal["json", "properties"]

app: App = App(
    name="scm-versioning",
    help="Derive version information from a Git repository.",
    config=cyclopts.config.Env("INPUT_", command=False),
)


def _configure_logging(*, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _resolve_config(
    project_dir: Path,
    config_file: Path | None,
    repo_root: Path | None,
    branch_env: list[str] | None,
) -> VersioningConfig:
    """Load settings from ``config_file`` or the project's pyproject.toml."""
    if config_file is not None:
        config = load_config(config_file)
    elif (pyproject := project_dir / "pyproject.toml").is_file():
        config = load_config(pyproject)
    else:
        config = VersioningConfig()
    if repo_root is not None:
        config = dataclasses.replace(config, git_repo_root_dir=repo_root)
    if branch_env:
        config = dataclasses.replace(config, branch_env=tuple(branch_env))
    return config


def _append_outputs(path: Path, values: cabc.Mapping[str, str]) -> None:
    """Append ``key=value`` lines for the surrounding workflow."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as handle:
        for key, value in values.items():
            handle.write(f"{key}={value}\n")


@app.command
def info(
    *,
    project_dir: Path | None = None,
    root_project_dir: Path | None = None,
    repo_root: Path | None = None,
    config_file: Path | None = None,
    branch_env: list[str] | None = None,
    output_format: OutputFormat = "properties",
    verbose: bool = False,
) -> None:
    """Print the version record of the project.

    Parameters
    ----------
    project_dir
        Project directory; defaults to the working directory.
    root_project_dir
        Top-most project directory of a multi-project build.
    repo_root
        Explicit repository root overriding the project directory.
    config_file
        TOML file holding a ``[tool.scm-versioning]`` table.
    branch_env
        Environment variables consulted, in order, for the branch name.
    output_format
        ``properties`` for ``key=value`` lines or ``json``.
    verbose
        Log debugging details and echo git commands to stderr.
    """
    _configure_logging(verbose=verbose)
    project = project_dir or Path.cwd()
    config = _resolve_config(project, config_file, repo_root, branch_env)
    record = get_info(
        config,
        project_dir=project,
        root_project_dir=root_project_dir,
        gateway_factory=functools.partial(GitGateway.open, echo=verbose),
    )

    properties = record.as_properties()
    if output_format == "json":
        print(json.dumps(record.as_dict(), indent=2))
    else:
        for key, value in properties.items():
            print(f"{key}={value}")

    if github_output := os.environ.get("GITHUB_OUTPUT"):
        _append_outputs(Path(github_output), properties)


@app.command(name="base-tags")
def base_tags(
    *,
    base: str | None = None,
    project_dir: Path | None = None,
    repo_root: Path | None = None,
    config_file: Path | None = None,
    verbose: bool = False,
) -> None:
    """Print the ``<base>.<N>`` tags of the repository, latest first.

    Parameters
    ----------
    base
        Base version line such as ``1.2``. Defaults to the version part of
        the current release branch.
    project_dir
        Project directory; defaults to the working directory.
    repo_root
        Explicit repository root overriding the project directory.
    config_file
        TOML file holding a ``[tool.scm-versioning]`` table.
    verbose
        Log debugging details and echo git commands to stderr.
    """
    _configure_logging(verbose=verbose)
    project = project_dir or Path.cwd()
    config = _resolve_config(project, config_file, repo_root, None)

    if base is None:
        gateway = GitGateway.open(config.repository_dir(project), echo=verbose)
        branch = resolve_branch(config.branch_env, os.environ, gateway)
        base = release_base(branch, config.release_prefix)
        if base is None:
            msg = (
                f"No --base given and branch {branch!r} is not a "
                f"{config.release_prefix!r} branch"
            )
            raise ValueError(msg)

    names = get_base_tags(
        config,
        base,
        project_dir=project,
        gateway_factory=functools.partial(GitGateway.open, echo=verbose),
    )
    for name in names:
        print(name)


def main(argv: cabc.Sequence[str] | None = None) -> None:
    """Run the CLI and present user-facing errors consistently."""
    tokens = list(sys.argv[1:] if argv is None else argv)
    try:
        app(tokens)
    except (VersioningError, FileNotFoundError, ValueError) as exc:
        print(f"::error title=Versioning Failure::{exc}", file=sys.stderr)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
