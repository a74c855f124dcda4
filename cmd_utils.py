r"""Utilities for running plumbum command invocations.

This module provides :func:`run_cmd`, the single seam through which
``scm_versioning`` executes the ``git`` CLI. Two execution strategies are
supported: ``call`` (the default, returning stdout and raising on failure)
and ``run`` (returning a :class:`RunResult` without raising on non-zero exit
codes). Commands see the current process environment unless an explicit
mapping is given, and may be echoed to stderr to aid debugging in CI logs.

Examples
--------
Basic usage with the default ``call`` strategy::

    >>> from plumbum import local
    >>> run_cmd(local["git"]["--version"])
    'git version 2.43.0\n'

Inspecting exit status and stderr with the ``run`` method::

    >>> failure = run_cmd(local["git"]["rev-parse", "--git-dir"], method="run")
    >>> failure.returncode
    128
    >>> failure.stderr
    'fatal: not a git repository (or any of the parent directories): .git\n'
"""

from __future__ import annotations

import collections.abc as cabc
import logging
import os
import typing as typ

import typer
from plumbum import local
from plumbum.commands.processes import ProcessExecutionError

RunMethod = typ.Literal["call", "run"]

logger = logging.getLogger(__name__)


class RunResult(typ.NamedTuple):
    """Structured representation of plumbum ``run`` results."""

    returncode: int
    stdout: str
    stderr: str


@typ.runtime_checkable
class SupportsFormulate(typ.Protocol):
    """Objects that expose a shell representation via ``formulate``."""

    def formulate(self) -> cabc.Sequence[str]:  # pragma: no cover - protocol
        ...


@typ.runtime_checkable
class SupportsCall(SupportsFormulate, typ.Protocol):
    """Commands that can be invoked like ``cmd()``."""

    def __call__(
        self, *args: object, **kwargs: object
    ) -> object:  # pragma: no cover - protocol
        ...


@typ.runtime_checkable
class SupportsRun(SupportsFormulate, typ.Protocol):
    """Commands that implement :meth:`run`."""

    def run(
        self, *args: object, **run_kwargs: object
    ) -> object:  # pragma: no cover - protocol
        ...


@typ.runtime_checkable
class SupportsWithEnv(SupportsFormulate, typ.Protocol):
    """Commands that support environment overrides via :meth:`with_env`."""

    def with_env(self, **env: str) -> SupportsWithEnv:  # pragma: no cover - protocol
        ...


def _ensure_text(value: str | bytes | None) -> str:
    """Return ``value`` as a decoded ``str`` replacing undecodable bytes."""
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    return value.decode("utf-8", errors="replace")


def coerce_run_result(
    result: RunResult | cabc.Sequence[object],
) -> RunResult:
    """Normalise *result* into a :class:`RunResult`."""
    if isinstance(result, RunResult):
        return result
    try:
        returncode_obj, stdout_obj, stderr_obj = result  # type: ignore[misc]
    except ValueError as exc:
        msg = "plumbum run() results must unpack into (returncode, stdout, stderr)"
        raise TypeError(msg) from exc
    return RunResult(
        int(typ.cast("int", returncode_obj)),
        _ensure_text(typ.cast("str | bytes | None", stdout_obj)),
        _ensure_text(typ.cast("str | bytes | None", stderr_obj)),
    )


def process_error_to_run_result(exc: ProcessExecutionError) -> RunResult:
    """Convert ``exc`` into a :class:`RunResult` for consistent handling."""
    return RunResult(
        int(exc.retcode),
        _ensure_text(getattr(exc, "stdout", "")),
        _ensure_text(getattr(exc, "stderr", "")),
    )


def format_command(cmd: SupportsFormulate) -> str:
    """Return a printable command line for ``cmd``."""
    return " ".join(str(part) for part in cmd.formulate())


def _collect_runtime_env(
    env: cabc.Mapping[str, str] | None,
) -> dict[str, str] | None:
    """Return an environment mapping reflecting local and process mutations."""
    plumbum_env = typ.cast("cabc.Mapping[str, str]", local.env)
    base_env = {key: str(value) for key, value in plumbum_env.items()}

    if env is not None:
        return {key: str(value) for key, value in env.items()}

    runtime_env = base_env | {key: str(value) for key, value in os.environ.items()}
    return None if runtime_env == base_env else runtime_env


def _apply_environment(
    cmd: SupportsFormulate,
    runtime_env: dict[str, str] | None,
) -> SupportsFormulate:
    """Return *cmd* with *runtime_env* applied when provided."""
    if runtime_env is None:
        return cmd
    if not isinstance(cmd, SupportsWithEnv):
        msg = "Command does not support environment overrides"
        raise TypeError(msg)
    return typ.cast("SupportsFormulate", cmd.with_env(**runtime_env))


def run_cmd(
    cmd: object,
    *,
    method: RunMethod = "call",
    env: cabc.Mapping[str, str] | None = None,
    echo: bool = False,
    **run_kwargs: object,
) -> object:
    """Execute ``cmd`` using plumbum semantics.

    Parameters
    ----------
    cmd
        A bound plumbum command such as ``local["git"]["status"]``.
    method
        ``"call"`` returns stdout and raises
        :class:`~plumbum.commands.processes.ProcessExecutionError` on failure;
        ``"run"`` returns a :class:`RunResult` whatever the exit code.
    env
        Complete environment for the command. By default the process
        environment is used, including changes made after start-up.
    echo
        When true, print ``$ <command>`` to stderr before running it.
    **run_kwargs
        Extra keyword arguments forwarded to plumbum.

    Raises
    ------
    TypeError
        If ``cmd`` is not a plumbum command invocation.
    ValueError
        If ``method`` is not a supported strategy.
    """
    if not isinstance(cmd, SupportsFormulate):
        msg = "run_cmd requires a plumbum command invocation"
        raise TypeError(msg)

    if echo:
        typer.echo(f"$ {format_command(cmd)}", err=True)
    logger.debug("Running %s", format_command(cmd))

    handler = _RUN_HANDLERS.get(method)
    if handler is None:
        msg = f"Unknown run method: {method}"
        raise ValueError(msg)
    prepared = _apply_environment(cmd, _collect_runtime_env(env))
    return handler(prepared, run_kwargs)


def _call_handler(command: SupportsFormulate, run_kwargs: dict[str, object]) -> object:
    if not isinstance(command, SupportsCall):
        msg = "Command does not support call semantics"
        raise TypeError(msg)
    return command(**run_kwargs)


def _run_handler(
    command: SupportsFormulate, run_kwargs: dict[str, object]
) -> RunResult:
    if not isinstance(command, SupportsRun):
        msg = "Command does not support run()"
        raise TypeError(msg)
    run_options = dict(run_kwargs)
    run_options.setdefault("retcode", None)
    raw_result = command.run(**run_options)
    return coerce_run_result(typ.cast("cabc.Sequence[object]", raw_result))


_MethodHandler = cabc.Callable[[SupportsFormulate, dict[str, object]], object]

_RUN_HANDLERS: dict[RunMethod, _MethodHandler] = {
    "call": _call_handler,
    "run": typ.cast("_MethodHandler", _run_handler),
}


__all__ = [
    "RunMethod",
    "RunResult",
    "coerce_run_result",
    "format_command",
    "process_error_to_run_result",
    "run_cmd",
]
