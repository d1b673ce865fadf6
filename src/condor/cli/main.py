# topmark:header:start
#
#   project      : Condor
#   file         : main.py
#   file_relpath : src/condor/cli/main.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Click entry point for the ``condor`` command.

Key ideas:
- Group-level options are initialized once and placed into ``ctx.obj``.
- Subcommands read the console, verbosity and color state from ``ctx.obj``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from condor.cli.commands.config import config_command
from condor.cli.commands.run import run_command
from condor.cli.commands.version import version_command
from condor.cli.console import ClickConsole
from condor.cli.options import (
    CONTEXT_SETTINGS,
    ColorMode,
    common_color_options,
    common_verbose_options,
    resolve_color_mode,
    resolve_verbosity,
)
from condor.config.logging import get_logger, resolve_env_log_level, setup_logging

if TYPE_CHECKING:
    from condor.cli.console import ConsoleLike
    from condor.config.logging import CondorLogger

logger: CondorLogger = get_logger(__name__)


def init_common_state(
    ctx: click.Context,
    *,
    verbose: int,
    quiet: int,
    color_mode: str | None,
    no_color: bool,
) -> None:
    """Initialize shared state (verbosity & color) on the Click context.

    Args:
        ctx (click.Context): Current Click context; will have ``obj`` and ``color`` set.
        verbose (int): Count of ``-v`` flags.
        quiet (int): Count of ``-q`` flags.
        color_mode (str | None): Explicit color mode from ``--color`` (or ``None``).
        no_color (bool): Whether ``--no-color`` was passed; forces color off.
    """
    ctx.obj = ctx.obj or {}

    level_cli: int = resolve_verbosity(verbose, quiet)
    ctx.obj["verbose"] = verbose
    # CONDOR_LOG_LEVEL wins over -v/-q
    level_env: int | None = resolve_env_log_level()
    ctx.obj["log_level"] = level_env if level_env is not None else level_cli
    setup_logging(level=ctx.obj["log_level"])

    effective_mode: ColorMode = (
        ColorMode.NEVER if no_color else ColorMode(color_mode or ColorMode.AUTO.value)
    )
    # Only an explicit choice overrides the config file's ``[output] color``.
    ctx.obj["color_override"] = (
        None if effective_mode is ColorMode.AUTO else effective_mode is ColorMode.ALWAYS
    )
    enable_color: bool = resolve_color_mode(cli_mode=effective_mode)
    ctx.obj["color_enabled"] = enable_color
    ctx.color = enable_color

    ctx.obj["console"] = ClickConsole(enable_color=enable_color)


@click.group(
    cls=click.Group,
    context_settings=CONTEXT_SETTINGS,
    invoke_without_command=True,
    help="Condor: run Python scripts under a condition signaling runtime.",
)
@common_verbose_options
@common_color_options
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: int,
    quiet: int,
    color_mode: str | None,
    no_color: bool,
) -> None:
    """Entry point for the Condor CLI."""
    init_common_state(
        ctx,
        verbose=verbose,
        quiet=quiet,
        color_mode=color_mode,
        no_color=no_color,
    )
    console: ConsoleLike = ctx.obj["console"]

    if ctx.invoked_subcommand is None:
        console.print("Hint: use 'condor run SCRIPT' to run a script.")
        console.print()
        console.print(ctx.get_help())


cli.add_command(version_command)

cli.add_command(config_command)

cli.add_command(run_command)

if __name__ == "__main__":
    cli()
