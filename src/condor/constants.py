# topmark:header:start
#
#   project      : Condor
#   file         : constants.py
#   file_relpath : src/condor/constants.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Condor Constants."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version

try:
    CONDOR_VERSION: str = get_version("condor")
except PackageNotFoundError:  # pragma: no cover - source checkout without install
    CONDOR_VERSION = "0.0.0"

# Environment variables
ENV_LOG_LEVEL: str = "CONDOR_LOG_LEVEL"
ENV_WARNING_MODE: str = "CONDOR_WARNING_MODE"

# Config file names, in same-directory precedence order
PYPROJECT_TOML_NAME: str = "pyproject.toml"
CONDOR_TOML_NAME: str = "condor.toml"

# Names of the restarts established by the non-error signaling primitives
RESTART_MUFFLE_WARNING: str = "muffle-warning"
RESTART_MUFFLE_MESSAGE: str = "muffle-message"

# Deferred warning batch
DEFAULT_MAX_DEFERRED_WARNINGS: int = 50
# Above this many warnings the summary only reports a count
WARNING_SUMMARY_LIST_LIMIT: int = 10

# Message prefix used when a warning is escalated to an error
ESCALATED_WARNING_PREFIX: str = "(converted from warning) "

# Markers wrapping TOML output of `condor config dump`
TOML_BLOCK_START: str = "# === BEGIN ==="
TOML_BLOCK_END: str = "# === END ==="
