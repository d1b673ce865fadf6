# topmark:header:start
#
#   project      : Condor
#   file         : __init__.py
#   file_relpath : src/condor/diagnostic/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Diagnostic reports and sinks.

Design:
    - Reports are represented by immutable `Diagnostic` instances.
    - A top-level unit accumulates the reports it writes in a mutable `DiagnosticLog`
      and exposes a `FrozenDiagnosticLog` snapshot on its result.
    - Reports are written to a `DiagnosticSink`, kept apart from ordinary output.
"""

from __future__ import annotations

from condor.diagnostic.model import (
    Diagnostic,
    DiagnosticLevel,
    DiagnosticLog,
    DiagnosticStats,
    FrozenDiagnosticLog,
    compute_diagnostic_stats,
    diagnostics_counts_to_dict,
)
from condor.diagnostic.sink import ConsoleSink, DiagnosticSink, MemorySink

__all__ = [
    "ConsoleSink",
    "Diagnostic",
    "DiagnosticLevel",
    "DiagnosticLog",
    "DiagnosticSink",
    "DiagnosticStats",
    "FrozenDiagnosticLog",
    "MemorySink",
    "compute_diagnostic_stats",
    "diagnostics_counts_to_dict",
]
