# topmark:header:start
#
#   project      : Condor
#   file         : __main__.py
#   file_relpath : src/condor/__main__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Module entry point for running Condor via ``python -m condor``.

Equivalent to running the ``condor`` console script.

Examples:
    Run a script::

        python -m condor run script.py
"""

from __future__ import annotations

from condor.cli.main import cli

if __name__ == "__main__":
    cli()
