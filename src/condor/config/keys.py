# topmark:header:start
#
#   project      : Condor
#   file         : keys.py
#   file_relpath : src/condor/config/keys.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Canonical TOML section/key names and argument keys for Condor configuration.

This module defines the authoritative string constants used when reading, writing, and
validating Condor configuration from TOML sources (``condor.toml`` and
``[tool.condor]`` in ``pyproject.toml``), and the keys of the argument mappings the CLI
and the API pass to `MutableConfig.apply_args`.

Design notes:
    - Keys defined in `Toml` represent *external configuration API*.
    - Renaming or removing keys is a breaking change.
"""

from __future__ import annotations

from typing import Final


class Toml:
    """TOML section names and keys used by Condor configuration.

    The ordering of constants mirrors the rendered default configuration.
    """

    # Root / discovery
    KEY_ROOT: Final[str] = "root"

    # [runtime]
    SECTION_RUNTIME: Final[str] = "runtime"

    KEY_WARNING_MODE: Final[str] = "warning_mode"
    KEY_MAX_DEFERRED_WARNINGS: Final[str] = "max_deferred_warnings"
    KEY_SHOW_CALL_SITE: Final[str] = "show_call_site"

    # [output]
    SECTION_OUTPUT: Final[str] = "output"

    KEY_COLOR: Final[str] = "color"

    # ---------------------------- Schema helpers ----------------------------

    ALLOWED_TOP_LEVEL_KEYS: Final[frozenset[str]] = frozenset(
        {
            KEY_ROOT,
            SECTION_RUNTIME,
            SECTION_OUTPUT,
        }
    )

    ALLOWED_SECTION_KEYS: Final[dict[str, frozenset[str]]] = {
        SECTION_RUNTIME: frozenset(
            {
                KEY_WARNING_MODE,
                KEY_MAX_DEFERRED_WARNINGS,
                KEY_SHOW_CALL_SITE,
            }
        ),
        SECTION_OUTPUT: frozenset(
            {
                KEY_COLOR,
            }
        ),
    }


class Args:
    """Keys of the argument mapping accepted by `MutableConfig.apply_args`."""

    WARNING_MODE: Final[str] = "warning_mode"
    MAX_DEFERRED_WARNINGS: Final[str] = "max_deferred_warnings"
    SHOW_CALL_SITE: Final[str] = "show_call_site"
    COLOR: Final[str] = "color"
