# topmark:header:start
#
#   project      : Condor
#   file         : render.py
#   file_relpath : src/condor/config/io/render.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Render TOML for config dumps.

TOML has no `null` value, so `None` entries are stripped during rendering.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, cast

import tomlkit

from condor.config.logging import get_logger

if TYPE_CHECKING:
    from condor.config.logging import CondorLogger

    from .types import TomlTable

logger: CondorLogger = get_logger(__name__)


def _strip_none_for_toml(value: object) -> object:
    """Remove TOML-incompatible `None` from mappings/lists."""
    if isinstance(value, Mapping):
        out: dict[str, object] = {}
        m: Mapping[object, object] = cast("Mapping[object, object]", value)
        for k_any, v_any in m.items():
            if v_any is None:
                logger.debug("Ignoring `None` entry in Mapping for key %s", k_any)
                continue
            out[str(k_any)] = _strip_none_for_toml(v_any)
        return out

    if isinstance(value, list):
        seq: list[object] = cast("list[object]", value)
        return [_strip_none_for_toml(v) for v in seq if v is not None]

    return value


def to_toml(toml_dict: TomlTable) -> str:
    """Serialize a TOML mapping to a string.

    Args:
        toml_dict (TomlTable): The mapping to serialize.

    Returns:
        str: The TOML document text.
    """
    cleaned: Any = _strip_none_for_toml(toml_dict)
    return cast("str", cast("Any", tomlkit).dumps(cast("Mapping[str, Any]", cleaned)))
