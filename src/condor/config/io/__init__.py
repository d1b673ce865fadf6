# topmark:header:start
#
#   project      : Condor
#   file         : __init__.py
#   file_relpath : src/condor/config/io/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""TOML I/O for Condor configuration (loading, value getters, rendering)."""

from __future__ import annotations

from condor.config.io.getters import (
    check_unknown_keys,
    get_bool_value_or_none,
    get_int_value_or_none,
    get_string_value_or_none,
    get_table_value,
)
from condor.config.io.loaders import extract_condor_table, load_defaults_dict, load_toml_dict
from condor.config.io.render import to_toml
from condor.config.io.types import TomlTable

__all__ = [
    "TomlTable",
    "check_unknown_keys",
    "extract_condor_table",
    "get_bool_value_or_none",
    "get_int_value_or_none",
    "get_string_value_or_none",
    "get_table_value",
    "load_defaults_dict",
    "load_toml_dict",
    "to_toml",
]
