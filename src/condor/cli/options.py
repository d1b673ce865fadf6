# topmark:header:start
#
#   project      : Condor
#   file         : options.py
#   file_relpath : src/condor/cli/options.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Common CLI option utilities for the Click-based Condor CLI.

This module centralizes reusable options (verbosity, color, config files) and their
resolution logic, so commands and groups can stay thin.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Callable
from enum import Enum
from typing import ParamSpec, TypeVar

import click

from condor.cli.cli_types import EnumChoiceParam
from condor.cli.errors import CondorUsageError
from condor.config.logging import TRACE_LEVEL
from condor.config.types import WarningMode

P = ParamSpec("P")
R = TypeVar("R")

#: Click context settings shared by all commands.
CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
}


def resolve_verbosity(verbose_count: int, quiet_count: int) -> int:
    """Resolve the logging level from the ``-v`` / ``-q`` counts.

    Args:
        verbose_count: Number of times the verbose flag (-v) is passed.
        quiet_count: Number of times the quiet flag (-q) is passed.

    Returns:
        The logging level as an integer.

    Raises:
        CondorUsageError: If both verbose and quiet flags are used simultaneously.

    Behavior:
        Three or more -v flags set TRACE level.
        Two -v flags set DEBUG level.
        One -v flag sets INFO level.
        One or more -q flags set ERROR level.
        Default level is WARNING.
    """
    if verbose_count > 0 and quiet_count > 0:
        raise CondorUsageError("The '--verbose' and '--quiet' options are mutually exclusive.")

    if verbose_count >= 3:  # -vvv
        return TRACE_LEVEL
    if verbose_count == 2:  # -vv
        return logging.DEBUG
    if verbose_count == 1:  # -v
        return logging.INFO
    if quiet_count >= 1:  # -q
        return logging.ERROR
    return logging.WARNING


def common_verbose_options(f: Callable[P, R]) -> Callable[P, R]:
    """Add --verbose and --quiet options to a command."""
    f = click.option(
        "-v",
        "--verbose",
        count=True,
        help="Increase log verbosity (-v info, -vv debug, -vvv trace).",
    )(f)
    f = click.option(
        "-q",
        "--quiet",
        count=True,
        help="Only log errors.",
    )(f)
    return f


class ColorMode(str, Enum):
    """User intent for colorized terminal output."""

    AUTO = "auto"
    ALWAYS = "always"
    NEVER = "never"


def resolve_color_mode(
    *,
    cli_mode: ColorMode | None,
    stderr_isatty: bool | None = None,
) -> bool:
    """Determine whether color output should be enabled.

    Args:
        cli_mode: Explicit color mode from CLI options (auto, always, never).
        stderr_isatty: Whether stderr is a TTY; if None, auto-detected.

    Returns:
        True if color output should be enabled, False otherwise.

    Behavior:
        Honors --color and --no-color CLI flags.
        Honors FORCE_COLOR and NO_COLOR environment variables.
        Defaults to enabling color if stderr (where reports go) is a TTY.
    """
    if cli_mode == ColorMode.ALWAYS:
        return True
    if cli_mode == ColorMode.NEVER:
        return False
    force_color: str | None = os.getenv("FORCE_COLOR")
    if force_color and force_color != "0":
        return True
    if os.getenv("NO_COLOR") is not None:
        return False
    if stderr_isatty is None:
        stderr_isatty = sys.stderr.isatty()
    return bool(stderr_isatty)


def common_color_options(f: Callable[P, R]) -> Callable[P, R]:
    """Add --color and --no-color options to a command."""
    f = click.option(
        "--color",
        "color_mode",
        type=click.Choice([m.value for m in ColorMode]),
        default=None,
        help="Color output: auto (default), always, or never.",
    )(f)
    f = click.option(
        "--no-color",
        "no_color",
        is_flag=True,
        help="Disable color output (equivalent to --color=never).",
    )(f)
    return f


def common_config_options(f: Callable[P, R]) -> Callable[P, R]:
    """Add ``--no-config`` and ``--config`` options to a command."""
    f = click.option(
        "--no-config",
        "no_config",
        is_flag=True,
        help="Ignore local project config files (only use defaults).",
    )(f)
    f = click.option(
        "--config",
        "config_paths",
        multiple=True,
        metavar="FILE",
        type=click.Path(file_okay=True, dir_okay=False),
        help="Additional config file(s) to load and merge.",
    )(f)
    return f


def runtime_override_options(f: Callable[P, R]) -> Callable[P, R]:
    """Add the options overriding the ``[runtime]`` config section."""
    f = click.option(
        "--warning-mode",
        "warning_mode",
        type=EnumChoiceParam(WarningMode),
        default=None,
        help=f"Default for unhandled warnings ({', '.join(WarningMode.keys())}).",
    )(f)
    f = click.option(
        "--max-deferred-warnings",
        "max_deferred_warnings",
        type=click.IntRange(min=0),
        default=None,
        help="How many deferred warnings a top-level unit keeps.",
    )(f)
    f = click.option(
        "--show-call-site/--hide-call-site",
        "show_call_site",
        default=None,
        help="Mention the signaling function in error and warning reports.",
    )(f)
    return f
