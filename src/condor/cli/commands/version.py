# topmark:header:start
#
#   project      : Condor
#   file         : version.py
#   file_relpath : src/condor/cli/commands/version.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Condor `version` command.

Prints the current Condor version as installed in the active Python environment.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from condor.constants import CONDOR_VERSION

if TYPE_CHECKING:
    from condor.cli.console import ConsoleLike


@click.command(
    name="version",
    help="Show the current version of Condor.",
)
def version_command() -> None:
    """Show the current version of Condor."""
    ctx = click.get_current_context()
    ctx.ensure_object(dict)
    console: ConsoleLike = ctx.obj["console"]
    console.print(console.styled(CONDOR_VERSION, bold=True))
