# topmark:header:start
#
#   project      : Condor
#   file         : config.py
#   file_relpath : src/condor/cli/commands/config.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Condor `config` command group.

  * ``condor config dump``: show the effective merged configuration.
  * ``condor config defaults``: show the built-in default configuration.

Output is wrapped between `TOML_BLOCK_START` and `TOML_BLOCK_END` markers for easy
parsing in tests or tooling.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from condor.cli.config_resolver import render_config_diagnostics, resolve_config_from_click
from condor.cli.options import CONTEXT_SETTINGS, common_config_options, runtime_override_options
from condor.config import Config
from condor.config.io import to_toml
from condor.config.keys import Args
from condor.config.logging import get_logger
from condor.constants import TOML_BLOCK_END, TOML_BLOCK_START

if TYPE_CHECKING:
    from condor.cli.console import ConsoleLike
    from condor.config.logging import CondorLogger
    from condor.config.types import WarningMode

logger: CondorLogger = get_logger(__name__)


def emit_toml_block(console: ConsoleLike, config: Config) -> None:
    """Print ``config`` as TOML between the block markers."""
    console.print(TOML_BLOCK_START)
    console.print(to_toml(config.to_toml_dict()).rstrip("\n"))
    console.print(TOML_BLOCK_END)


@click.group(
    name="config",
    help="Inspect Condor configuration.",
    context_settings=CONTEXT_SETTINGS,
)
def config_command() -> None:
    """Group for configuration-related subcommands."""
    # No-op: behavior is provided by subcommands only.


@config_command.command(
    name="dump",
    help="Dump the effective merged configuration as TOML.",
)
@common_config_options
@runtime_override_options
def config_dump_command(
    *,
    no_config: bool,
    config_paths: tuple[str, ...],
    warning_mode: WarningMode | None,
    max_deferred_warnings: int | None,
    show_call_site: bool | None,
) -> None:
    """Dump the effective merged configuration as TOML.

    Args:
        no_config (bool): If True, skip discovery of local config files.
        config_paths (tuple[str, ...]): Additional config files to merge, in order.
        warning_mode (WarningMode | None): Override of ``runtime.warning_mode``.
        max_deferred_warnings (int | None): Override of ``runtime.max_deferred_warnings``.
        show_call_site (bool | None): Override of ``runtime.show_call_site``.
    """
    ctx = click.get_current_context()
    ctx.ensure_object(dict)
    console: ConsoleLike = ctx.obj["console"]

    config: Config = resolve_config_from_click(
        start=None,
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
    logger.trace("config dump: %s", config)
    emit_toml_block(console, config)


@config_command.command(
    name="defaults",
    help="Show the built-in default configuration as TOML.",
)
def config_defaults_command() -> None:
    """Show the built-in default configuration as TOML."""
    ctx = click.get_current_context()
    ctx.ensure_object(dict)
    console: ConsoleLike = ctx.obj["console"]
    emit_toml_block(console, Config.from_defaults())
