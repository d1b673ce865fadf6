# topmark:header:start
#
#   project      : Condor
#   file         : loaders.py
#   file_relpath : src/condor/config/io/loaders.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Load TOML configuration sources.

This module provides I/O helpers for reading Condor configuration from on-disk TOML files
(``condor.toml`` / ``pyproject.toml``) and the in-code runtime defaults.

Parsing is done with `tomlkit` and returned as plain `dict` structures.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

import tomlkit
from tomlkit.exceptions import ParseError as TomlkitParseError

from condor.config.keys import Toml
from condor.config.logging import get_logger
from condor.constants import DEFAULT_MAX_DEFERRED_WARNINGS, PYPROJECT_TOML_NAME

if TYPE_CHECKING:
    from pathlib import Path

    from condor.config.logging import CondorLogger

    from .types import TomlTable

logger: CondorLogger = get_logger(__name__)


def load_defaults_dict() -> TomlTable:
    """Return Condor's **runtime defaults** as a Python dict.

    This function performs no I/O. The returned value is a new dict so callers can
    mutate it safely.
    """
    return {
        Toml.SECTION_RUNTIME: {
            Toml.KEY_WARNING_MODE: "deferred",
            Toml.KEY_MAX_DEFERRED_WARNINGS: DEFAULT_MAX_DEFERRED_WARNINGS,
            Toml.KEY_SHOW_CALL_SITE: True,
        },
        Toml.SECTION_OUTPUT: {
            # NOTE: color defaults to None (auto-detect) unless configured.
        },
    }


def load_toml_dict(path: Path) -> TomlTable:
    """Load and parse a TOML file from the filesystem.

    Args:
        path: Path to a TOML document (e.g., ``condor.toml`` or ``pyproject.toml``).

    Returns:
        The parsed TOML content.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not valid TOML.
    """
    try:
        text: str = path.read_text(encoding="utf-8")
    except OSError as e:
        logger.error("Error loading TOML from %s: %s", path, e)
        raise
    try:
        doc: tomlkit.TOMLDocument = tomlkit.parse(text)
    except TomlkitParseError as e:
        logger.error("Error decoding TOML from %s: %s", path, e)
        raise ValueError(f"Invalid TOML in {path}: {e}") from e
    data_any: Any = doc.unwrap()
    return cast("TomlTable", data_any) if isinstance(data_any, dict) else {}


def extract_condor_table(data: TomlTable, path: Path) -> TomlTable | None:
    """Return the Condor table of a parsed config file.

    For ``pyproject.toml`` this is ``[tool.condor]`` (None when absent); any other file is
    a Condor config file in its entirety.
    """
    if path.name != PYPROJECT_TOML_NAME:
        return data
    tool: Any = data.get("tool", {})
    if not isinstance(tool, dict):
        return None
    table: Any = cast("dict[str, Any]", tool).get("condor")
    return cast("TomlTable", table) if isinstance(table, dict) else None
