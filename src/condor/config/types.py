# topmark:header:start
#
#   project      : Condor
#   file         : types.py
#   file_relpath : src/condor/config/types.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Lightweight config types and aliases.

This module hosts stable, import-friendly definitions that other config modules
can depend on without risk of circular imports.

Exports:
    - `ArgsLike`: structural mapping type for CLI/API argument dicts.
    - `WarningMode`: default behavior for unhandled warnings.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from condor.core.enum_mixins import KeyedStrEnum

# ArgsLike: generic mapping accepted by config loaders (works for CLI namespaces and API dicts).
ArgsLike = Mapping[str, Any]


class WarningMode(KeyedStrEnum):
    """Default behavior for warnings that no handler muffles or catches.

    The numeric aliases follow the traditional ``warn`` option levels (0, 1, 2).
    """

    DEFERRED = ("deferred", "Collect and summarize when the top-level unit finishes", ("0",))
    IMMEDIATE = ("immediate", "Report each warning as soon as it is signaled", ("1",))
    ESCALATE = ("escalate", "Turn each unhandled warning into an error", ("2", "error"))
