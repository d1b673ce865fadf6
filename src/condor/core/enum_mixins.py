# topmark:header:start
#
#   project      : Condor
#   file         : enum_mixins.py
#   file_relpath : src/condor/core/enum_mixins.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Keyed string enums for Condor (typing-friendly, UI-agnostic).

Condor enumerations that appear in configuration files, on the command line, or in
condition metadata (severities, warning modes, unit statuses) share one shape: a stable
machine key stored as ``.value``, a human label, and optional aliases accepted when
parsing user input.

Example:
    ```python
    class WarningMode(KeyedStrEnum):
        DEFERRED = ("deferred", "Collect and summarize at unit end", ("batch",))
        IMMEDIATE = ("immediate", "Report as soon as signaled")

    assert WarningMode.parse("Batch") is WarningMode.DEFERRED
    ```
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Iterable

_KS = TypeVar("_KS", bound="KeyedStrEnum")


def _norm_token(s: str) -> str:
    """Normalize an identifier-like string to match config keys and aliases."""
    return s.strip().lower().replace("-", "_").replace(" ", "_")


class KeyedStrEnum(str, Enum):
    """Enum where `.value` is a stable machine key; metadata lives on attributes.

    Attributes:
        label (str): Human-readable label for the member.
        aliases (tuple[str, ...]): Alternative tokens accepted by `parse()`.
    """

    label: str
    aliases: tuple[str, ...]

    def __new__(
        cls: type[_KS],
        key: str,
        label: str,
        aliases: Iterable[str] = (),
    ) -> _KS:
        """Create a new KeyedStrEnum member with key, label, and optional aliases.

        Args:
            key (str): The stable machine key (stored as `.value`).
            label (str): The human-readable label for the enum member.
            aliases (Iterable[str]): Optional aliases for parsing. Defaults to empty.

        Returns:
            _KS: The newly created enum member.
        """
        obj: _KS = str.__new__(cls, key)
        obj._value_ = key
        obj.label = label
        obj.aliases = tuple(aliases)
        return obj

    def __str__(self) -> str:
        """Return the stable machine key."""
        return str(self.value)

    @property
    def key(self) -> str:
        """Stable machine key (same as `.value`)."""
        return str(self.value)

    @classmethod
    def keys(cls) -> list[str]:
        """Return the machine keys of all members, in definition order."""
        return [str(m.value) for m in cls]

    @classmethod
    def parse(cls: type[_KS], raw: str | None) -> _KS | None:
        """Parse a token into an enum member.

        Matches against:
          - the stable key (`.value`)
          - the member name (`.name`)
          - any configured aliases

        Matching is case-insensitive and normalizes '-', ' ' to '_' via `_norm_token()`.
        """
        if raw is None:
            return None
        token: str = _norm_token(raw)

        for m in cls:
            if token in (_norm_token(m.value), _norm_token(m.name)):
                return m
            if any(token == _norm_token(a) for a in m.aliases):
                return m
        return None
