# topmark:header:start
#
#   project      : Condor
#   file         : __init__.py
#   file_relpath : src/condor/config/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Condor configuration: immutable `Config` snapshots and the `MutableConfig` builder.

Build configs with `MutableConfig` (discovery, merging, CLI overrides), then `freeze()`
into a `Config` before activating it for a top-level unit. Do not mutate a frozen
`Config`: call `Config.thaw()`, edit, and `freeze()` again.
"""

from __future__ import annotations

from condor.config import logging
from condor.config.model import Config, MutableConfig
from condor.config.types import ArgsLike, WarningMode

__all__ = [
    "ArgsLike",
    "Config",
    "MutableConfig",
    "WarningMode",
    "logging",
]
