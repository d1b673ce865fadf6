# topmark:header:start
#
#   project      : Condor
#   file         : conftest.py
#   file_relpath : tests/cli/conftest.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""CLI test helpers for invoking Condor through Click's test runner.

Reports written by the runtime go to stderr; `click.testing.Result.output` carries both
streams, so tests assert on ``result.output``.
"""

from __future__ import annotations

from typing import IO, TYPE_CHECKING, Any

from click.testing import CliRunner, Result

from condor.cli.exit_codes import ExitCode
from condor.cli.main import cli
from condor.config import logging
from tests.conftest import fixture

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from pathlib import Path


@fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    """Re-attach the test-suite log handler after each CLI invocation.

    The CLI points the root logger at the runner's stderr, which is closed once the
    invocation returns.
    """
    yield
    logging.setup_logging(level=logging.TRACE_LEVEL)


def run_cli(
    argv: str | Sequence[str] | None,
    *,
    input_text: str | bytes | IO[Any] | None = None,
) -> Result:
    """Invoke the CLI without changing the working directory.

    Args:
        argv (str | Sequence[str] | None): CLI argument vector, e.g. ``["version"]``.
        input_text (str | bytes | IO[Any] | None): Optional standard input, used by
            ``condor run -``.

    Returns:
        Result: The `click.testing.Result` produced by `click.testing.CliRunner.invoke`.
    """
    runner = CliRunner()
    return runner.invoke(cli, argv, input=input_text)


def write_script(tmp_path: Path, source: str, name: str = "script.py") -> Path:
    """Write a script under ``tmp_path`` and return its path."""
    path: Path = tmp_path / name
    path.write_text(source, encoding="utf-8")
    return path


def assert_exit(result: Result, code: ExitCode) -> None:
    """Assert the command exited with ``code``, showing the output on failure.

    Args:
        result (Result): The Result object returned by `run_cli`.
        code (ExitCode): The expected exit code.
    """
    assert result.exit_code == code, result.output
