# topmark:header:start
#
#   project      : Condor
#   file         : run.py
#   file_relpath : src/condor/cli/commands/run.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Condor `run` command.

Runs a Python script one top-level statement at a time. Each statement is its own
top-level unit: an unhandled error aborts that statement only (unless
``--stop-on-error`` is given), and deferred warnings are summarized after the statement
that signaled them.

Input:
  * ``condor run script.py``: read the script from a file.
  * ``condor run -``: read the script from STDIN.

Exit codes:
  * 0: every statement completed.
  * 1: at least one statement was aborted by an unhandled error.
  * 65: the script is not valid Python.
  * 66: the script file does not exist.
  * 78: the configuration is invalid.
  * 130: a statement was interrupted.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from condor.cli.config_resolver import render_config_diagnostics, resolve_config_from_click
from condor.cli.errors import CondorFileNotFoundError, CondorSyntaxError
from condor.cli.exit_codes import ExitCode
from condor.cli.options import CONTEXT_SETTINGS, common_config_options, runtime_override_options
from condor.config.keys import Args
from condor.config.logging import get_logger
from condor.diagnostic.sink import ConsoleSink
from condor.runtime import BatchRunner

if TYPE_CHECKING:
    from condor.config import Config
    from condor.config.logging import CondorLogger
    from condor.config.types import WarningMode
    from condor.runtime import BatchReport

logger: CondorLogger = get_logger(__name__)

STDIN_NAME: str = "<stdin>"


def read_script(script: str) -> tuple[str, str, Path | None]:
    """Read the script source.

    Args:
        script (str): A file path, or ``-`` for STDIN.

    Returns:
        tuple[str, str, Path | None]: The source, the filename used in reports, and the
            directory where config discovery starts (None = current directory).

    Raises:
        CondorFileNotFoundError: If the script file does not exist.
    """
    if script == "-":
        return click.get_text_stream("stdin").read(), STDIN_NAME, None
    path = Path(script)
    if not path.is_file():
        raise CondorFileNotFoundError(f"Script not found: {script}")
    return path.read_text(encoding="utf-8"), str(path), path.parent


@click.command(
    name="run",
    help="Run a Python script, one top-level statement per unit.",
    context_settings=CONTEXT_SETTINGS,
)
@click.argument("script", type=click.Path(dir_okay=False, allow_dash=True))
@click.option(
    "--stop-on-error",
    "stop_on_error",
    is_flag=True,
    help="Stop at the first statement aborted by an error.",
)
@common_config_options
@runtime_override_options
def run_command(
    *,
    script: str,
    stop_on_error: bool,
    no_config: bool,
    config_paths: tuple[str, ...],
    warning_mode: WarningMode | None,
    max_deferred_warnings: int | None,
    show_call_site: bool | None,
) -> None:
    """Run a Python script under the condition runtime.

    Args:
        script (str): Script path, or ``-`` for STDIN.
        stop_on_error (bool): Stop after the first failed statement.
        no_config (bool): If True, skip discovery of local config files.
        config_paths (tuple[str, ...]): Additional config files to merge, in order.
        warning_mode (WarningMode | None): Override of ``runtime.warning_mode``.
        max_deferred_warnings (int | None): Override of ``runtime.max_deferred_warnings``.
        show_call_site (bool | None): Override of ``runtime.show_call_site``.
    """
    ctx = click.get_current_context()
    ctx.ensure_object(dict)

    source, filename, start = read_script(script)
    config: Config = resolve_config_from_click(
        start=start,
        no_config=no_config,
        config_paths=list(config_paths),
        overrides={
            Args.WARNING_MODE: warning_mode,
            Args.MAX_DEFERRED_WARNINGS: max_deferred_warnings,
            Args.SHOW_CALL_SITE: show_call_site,
            Args.COLOR: ctx.obj.get("color_override"),
        },
    )
    render_config_diagnostics(ctx=ctx, config=config)

    enable_color: bool = (
        config.color if config.color is not None else bool(ctx.obj.get("color_enabled"))
    )
    runner = BatchRunner(
        config=config,
        sink=ConsoleSink(enable_color=enable_color),
        stop_on_error=stop_on_error,
    )
    try:
        report: BatchReport = runner.run_source(source, filename=filename)
    except SyntaxError as exc:
        raise CondorSyntaxError(f"{filename}:{exc.lineno}: {exc.msg}") from exc

    logger.info(
        "%s: %d statement(s) run, %d failed",
        filename,
        len(report.results),
        len(report.failed),
    )
    if report.interrupted:
        ctx.exit(ExitCode.INTERRUPTED)
    if not report.ok:
        ctx.exit(ExitCode.FAILURE)
