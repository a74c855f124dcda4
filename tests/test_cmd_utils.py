"""Tests for :mod:`cmd_utils`."""

from __future__ import annotations

import os
import sys
import typing as typ

import pytest
from plumbum import local
from plumbum.commands.processes import ProcessExecutionError

from cmd_utils import (
    RunResult,
    coerce_run_result,
    format_command,
    process_error_to_run_result,
    run_cmd,
)

if typ.TYPE_CHECKING:
    from cmd_utils import RunMethod


def _python_command(*args: str) -> object:
    command = local[sys.executable]
    return command[list(args)] if args else command


def test_run_cmd_returns_stdout_by_default() -> None:
    """run_cmd should return decoded stdout when using the default method."""
    script = "import sys; sys.stdout.write('hello')"
    result = run_cmd(_python_command("-c", script))

    assert result == "hello"


def test_run_cmd_echoes_when_requested(capsys: pytest.CaptureFixture[str]) -> None:
    """Echoed commands go to stderr so stdout stays machine-readable."""
    result = run_cmd(_python_command("-c", "print('quiet')"), echo=True)

    captured = capsys.readouterr()
    assert result.strip() == "quiet"
    assert captured.err.startswith("$ ")
    assert captured.out == ""


def test_run_cmd_is_silent_by_default(capsys: pytest.CaptureFixture[str]) -> None:
    """Commands are not echoed unless asked."""
    run_cmd(_python_command("-c", "pass"))

    assert capsys.readouterr().err == ""


@pytest.mark.parametrize("method", ["call", "run"], ids=lambda value: value)
def test_run_cmd_rejects_non_plumbum_inputs(method: RunMethod) -> None:
    """Passing non-plumbum objects should raise :class:`TypeError`."""
    with pytest.raises(TypeError, match="plumbum command"):
        run_cmd(object(), method=method)


def test_run_cmd_run_method_returns_run_result() -> None:
    """The run method should surface plumbum's output via :class:`RunResult`."""
    script = "import sys; sys.stdout.write('world'); sys.stderr.write('!')"
    result = run_cmd(_python_command("-c", script), method="run")
    assert isinstance(result, RunResult)
    assert result.returncode == 0
    assert result.stdout == "world"
    assert result.stderr == "!"


def test_run_cmd_run_method_captures_stderr_on_failure() -> None:
    """The run method should not raise and should expose stderr on failure."""
    script = "import sys; sys.stderr.write('error message'); sys.exit(5)"

    result = run_cmd(_python_command("-c", script), method="run")

    assert isinstance(result, RunResult)
    assert result.returncode == 5
    assert result.stdout == ""
    assert "error message" in result.stderr


def test_run_cmd_propagates_process_execution_error() -> None:
    """run_cmd should propagate plumbum's ProcessExecutionError for call."""
    script = "import sys; sys.stderr.write('diagnostic'); sys.exit(3)"

    with pytest.raises(ProcessExecutionError) as excinfo:
        run_cmd(_python_command("-c", script))

    exc: ProcessExecutionError = excinfo.value
    assert exc.retcode == 3
    assert "diagnostic" in (exc.stderr or "")


def test_process_error_helpers_decode_output() -> None:
    """process_error_to_run_result converts binary payloads to text."""
    error = ProcessExecutionError(("cmd",), 5, b"hello", b"err")
    run_result = process_error_to_run_result(error)
    assert run_result == RunResult(5, "hello", "err")

    coerced = coerce_run_result((0, b"out", b"err"))
    assert coerced == RunResult(0, "out", "err")


def test_coerce_run_result_rejects_malformed_results() -> None:
    """Results that do not unpack into three items raise TypeError."""
    with pytest.raises(TypeError, match="must unpack"):
        coerce_run_result((0, "out"))


def test_run_cmd_merges_runtime_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Environment changes made after import should reach executed commands."""
    monkeypatch.setenv("CMD_UTILS_TOKEN", "runtime")
    script = "import os; import sys; sys.stdout.write(os.environ['CMD_UTILS_TOKEN'])"

    result = run_cmd(_python_command("-c", script))

    assert result == "runtime"


def test_run_cmd_env_replaces_inherited_environment(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Providing env should replace the inherited environment entirely."""
    monkeypatch.setenv("CMD_UTILS_TOKEN", "runtime")
    script = (
        "import os; import sys; sys.stdout.write(str('CMD_UTILS_TOKEN' in os.environ))"
    )
    sanitized_env = {
        key: value for key, value in os.environ.items() if key != "CMD_UTILS_TOKEN"
    }

    result = run_cmd(_python_command("-c", script), env=sanitized_env)

    assert result == "False"


def test_run_cmd_rejects_unknown_method() -> None:
    """Unknown execution strategies should raise :class:`ValueError`."""
    command = _python_command("-c", "print('noop')")

    with pytest.raises(ValueError, match="Unknown run method"):
        run_cmd(command, method=typ.cast("RunMethod", "unknown"))


def test_format_command_joins_arguments() -> None:
    """format_command renders the executable followed by its arguments."""
    rendered = format_command(local[sys.executable]["-c", "pass"])

    assert rendered.endswith("-c pass")
