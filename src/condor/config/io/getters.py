# topmark:header:start
#
#   project      : Condor
#   file         : getters.py
#   file_relpath : src/condor/config/io/getters.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Value getters for TOML config tables.

The getters validate the expected shape of a value. When a key is present but has the
wrong type, a warning is recorded in the supplied `DiagnosticLog` (and logged) and
``None`` is returned, so user mistakes are surfaced without crashing config loading.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from condor.config.logging import get_logger

if TYPE_CHECKING:
    from condor.config.logging import CondorLogger
    from condor.diagnostic.model import DiagnosticLog

    from .types import TomlTable

logger: CondorLogger = get_logger(__name__)


def _report(diagnostics: DiagnosticLog | None, text: str) -> None:
    logger.warning(text)
    if diagnostics is not None:
        diagnostics.add_warning(text)


def get_table_value(table: TomlTable, key: str) -> TomlTable:
    """Extract a sub-table, returning an empty dict when missing or not a table."""
    value: Any | None = table.get(key)
    if isinstance(value, dict):
        return value  # type: ignore[return-value]
    if value is not None:
        logger.debug("Expected table for key %s, got %r; using empty table", key, value)
    return {}


def get_string_value_or_none(
    table: TomlTable,
    key: str,
    *,
    diagnostics: DiagnosticLog | None = None,
    where: str = "",
) -> str | None:
    """Extract an optional string value.

    Integers are coerced with ``str(...)`` so that ``warning_mode = 1`` is accepted.
    """
    value: Any | None = table.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        _report(diagnostics, f"{where}{key}: expected a string, got {value!r}")
        return None
    if isinstance(value, (str, int)):
        return str(value)
    _report(diagnostics, f"{where}{key}: expected a string, got {value!r}")
    return None


def get_bool_value_or_none(
    table: TomlTable,
    key: str,
    *,
    diagnostics: DiagnosticLog | None = None,
    where: str = "",
) -> bool | None:
    """Extract an optional boolean value."""
    value: Any | None = table.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    _report(diagnostics, f"{where}{key}: expected a boolean, got {value!r}")
    return None


def get_int_value_or_none(
    table: TomlTable,
    key: str,
    *,
    diagnostics: DiagnosticLog | None = None,
    where: str = "",
    minimum: int | None = None,
) -> int | None:
    """Extract an optional integer value, optionally bounded below."""
    value: Any | None = table.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        _report(diagnostics, f"{where}{key}: expected an integer, got {value!r}")
        return None
    if minimum is not None and value < minimum:
        _report(diagnostics, f"{where}{key}: must be >= {minimum}, got {value}")
        return None
    return value


def check_unknown_keys(
    table: TomlTable,
    allowed_top: frozenset[str],
    allowed_sections: dict[str, frozenset[str]],
    *,
    diagnostics: DiagnosticLog | None = None,
) -> None:
    """Record a warning for every key the schema does not know."""
    for key, value in table.items():
        if key not in allowed_top:
            _report(diagnostics, f"Unknown configuration key: {key}")
            continue
        allowed: frozenset[str] | None = allowed_sections.get(key)
        if allowed is None or not isinstance(value, dict):
            continue
        for sub in value:
            if sub not in allowed:
                _report(diagnostics, f"Unknown configuration key: {key}.{sub}")
