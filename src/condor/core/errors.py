# topmark:header:start
#
#   project      : Condor
#   file         : errors.py
#   file_relpath : src/condor/core/errors.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Ordinary (catchable) exceptions raised by the Condor runtime.

These are programming or configuration errors surfaced to the caller as normal Python
exceptions. They are distinct from the control transfers in
[`condor.runtime.control`][condor.runtime.control], which model non-local exits of the
condition system and must never be swallowed by user code.
"""

from __future__ import annotations


class CondorError(Exception):
    """Base class for all Condor runtime errors."""


class ControlError(CondorError):
    """Misuse of the condition system.

    Raised when invoking a restart that is not active, when a call site cannot be
    replayed, or when handler scopes are exited out of order.
    """


class ConfigError(CondorError, ValueError):
    """Invalid configuration value passed programmatically."""
