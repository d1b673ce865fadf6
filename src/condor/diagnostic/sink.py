# topmark:header:start
#
#   project      : Condor
#   file         : sink.py
#   file_relpath : src/condor/diagnostic/sink.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Diagnostic sinks: the write-only channel for condition reports.

The diagnostic sink is distinct from ordinary program output. `ConsoleSink` writes to
stderr only, so capturing stdout never observes condition reports and a sink never
observes ordinary output. `MemorySink` keeps reports in memory for tests and embedding.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Protocol, TextIO

import click

if TYPE_CHECKING:
    from condor.diagnostic.model import Diagnostic, DiagnosticLevel


class DiagnosticSink(Protocol):
    """Minimal interface for a diagnostic sink."""

    def write(self, diagnostic: Diagnostic) -> None:
        """Write one diagnostic report."""
        ...


class ConsoleSink(DiagnosticSink):
    """Sink writing reports to a terminal stream (stderr by default).

    Args:
        enable_color (bool): If True, reports are colored by level.
        err (TextIO | None): The stream to write to. Defaults to `sys.stderr`.

    Attributes:
        enable_color (bool): Whether to emit ANSI color codes.
        err (TextIO): Stream receiving the reports.
    """

    enable_color: bool
    err: TextIO

    def __init__(self, *, enable_color: bool = True, err: TextIO | None = None) -> None:
        self.enable_color = enable_color
        self.err = err or sys.stderr

    def write(self, diagnostic: Diagnostic) -> None:
        """Write a report, colored by level when enabled.

        Args:
            diagnostic (Diagnostic): The report to write.
        """
        text: str = diagnostic.text
        if self.enable_color:
            text = diagnostic.level.color(text)
        click.echo(text, file=self.err, color=self.enable_color)


class MemorySink(DiagnosticSink):
    """Sink keeping reports in memory, in write order."""

    def __init__(self) -> None:
        self.diagnostics: list[Diagnostic] = []

    def write(self, diagnostic: Diagnostic) -> None:
        """Record a report."""
        self.diagnostics.append(diagnostic)

    def texts(self, level: DiagnosticLevel | None = None) -> list[str]:
        """Return the report texts, optionally restricted to one level."""
        return [d.text for d in self.diagnostics if level is None or d.level == level]

    def getvalue(self) -> str:
        """Return all reports joined as they would appear on a terminal."""
        return "".join(f"{d.text}\n" for d in self.diagnostics)

    def clear(self) -> None:
        """Forget all recorded reports."""
        self.diagnostics.clear()
