# topmark:header:start
#
#   project      : Condor
#   file         : __init__.py
#   file_relpath : src/condor/condition/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Condition records and the severity taxonomy.

Design:
    - Conditions are immutable `Condition` instances created by the signaling call,
      read-only in handlers and discarded once dispatch completes.
    - Types are a tagged variant (`ConditionType`: severity plus subtype tags) with an
      explicit `matches` predicate instead of Python class inspection.
"""

from __future__ import annotations

from condor.condition.call_site import (
    CallSite,
    capture_call_site,
    infer_call_site,
    traceback_call_site,
)
from condor.condition.model import (
    CONDITION,
    ERROR,
    INTERRUPT,
    MESSAGE,
    WARNING,
    Condition,
    ConditionType,
    Severity,
)

__all__ = [
    "CONDITION",
    "ERROR",
    "INTERRUPT",
    "MESSAGE",
    "WARNING",
    "CallSite",
    "Condition",
    "ConditionType",
    "Severity",
    "capture_call_site",
    "infer_call_site",
    "traceback_call_site",
]
