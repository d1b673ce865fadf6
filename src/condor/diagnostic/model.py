# topmark:header:start
#
#   project      : Condor
#   file         : model.py
#   file_relpath : src/condor/diagnostic/model.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Core diagnostic types and helpers for Condor.

A *diagnostic* is the user-facing report of a condition: the line written to the
diagnostic sink when a message is signaled, when a warning is reported (immediately or in
a deferred batch), or when an unhandled error aborts a top-level unit.

Sections:
    * DiagnosticLevel: report levels with associated terminal colors.
    * Diagnostic: immutable structured report (level + text + originating condition).
    * DiagnosticStats: aggregated per-level counts.
    * DiagnosticLog: mutable per-unit collection with helpers for adding and summarizing.
    * FrozenDiagnosticLog: immutable snapshot stored on unit results.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, cast

from yachalk import chalk

from condor.condition.model import Severity
from condor.config.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from condor.condition.model import Condition
    from condor.config.logging import CondorLogger


logger: CondorLogger = get_logger(__name__)


class DiagnosticLevel(Enum):
    """Report levels written to the diagnostic sink.

    Levels map to terminal colors and are ordered by importance: ERROR > WARNING > MESSAGE.
    """

    MESSAGE = "message"
    WARNING = "warning"
    ERROR = "error"

    @classmethod
    def for_severity(cls, severity: Severity) -> DiagnosticLevel:
        """Return the report level used for conditions of ``severity``."""
        if severity is Severity.MESSAGE:
            return cls.MESSAGE
        if severity is Severity.WARNING:
            return cls.WARNING
        return cls.ERROR

    @property
    def color(self) -> Callable[[str], str]:
        """Return the `yachalk` color function associated with this level.

        Intended for human-readable output only.

        Returns:
            Callable[[str], str]: The `yachalk` color function associated with this level.
        """
        return cast(
            "Callable[[str], str]",
            {
                DiagnosticLevel.MESSAGE: chalk.blue,
                DiagnosticLevel.WARNING: chalk.yellow,
                DiagnosticLevel.ERROR: chalk.red_bright,
            }[self],
        )


@dataclass(frozen=True)
class Diagnostic:
    """Structured report with a level, rendered text and the originating condition."""

    level: DiagnosticLevel
    text: str
    condition: Condition | None = None


@dataclass(frozen=True)
class DiagnosticStats:
    """Aggregated counts for diagnostics by level."""

    n_message: int
    n_warning: int
    n_error: int

    @property
    def total(self) -> int:
        """Return the total count of diagnostics."""
        return self.n_message + self.n_warning + self.n_error


@dataclass
class DiagnosticLog:
    """Mutable, per-unit collection of diagnostics.

    Every report a top-level unit writes to its sink is also recorded here, so drivers can
    summarize what happened without re-parsing sink output.
    """

    items: list[Diagnostic] = field(default_factory=lambda: [])

    def freeze(self) -> FrozenDiagnosticLog:
        """Return an immutable snapshot of this log's diagnostics."""
        return FrozenDiagnosticLog(items=tuple(self.items))

    def add(self, diagnostic: Diagnostic) -> None:
        """Append a diagnostic to the log.

        Args:
            diagnostic: The diagnostic object.
        """
        self.items.append(diagnostic)
        logger.trace("Recording [%s]: %r", diagnostic.level.value, diagnostic.text)

    def add_message(self, text: str, condition: Condition | None = None) -> None:
        """Add a ``message`` diagnostic to the log."""
        self.add(Diagnostic(DiagnosticLevel.MESSAGE, text, condition))

    def add_warning(self, text: str, condition: Condition | None = None) -> None:
        """Add a ``warning`` diagnostic to the log."""
        self.add(Diagnostic(DiagnosticLevel.WARNING, text, condition))

    def add_error(self, text: str, condition: Condition | None = None) -> None:
        """Add an ``error`` diagnostic to the log."""
        self.add(Diagnostic(DiagnosticLevel.ERROR, text, condition))

    def stats(self) -> DiagnosticStats:
        """Return per-level counts for diagnostics in this log."""
        return compute_diagnostic_stats(self.items)

    def has_warning(self) -> bool:
        """Return True if the log contains warning diagnostics."""
        return any(d.level == DiagnosticLevel.WARNING for d in self.items)

    def has_error(self) -> bool:
        """Return True if the log contains error diagnostics."""
        return any(d.level == DiagnosticLevel.ERROR for d in self.items)

    def to_dict(self) -> dict[str, int]:
        """Return a JSON-friendly mapping of counts by level."""
        return diagnostics_counts_to_dict(self.items)

    def __iter__(self) -> Iterator[Diagnostic]:
        """Iterate over all diagnostics in insertion order."""
        return iter(self.items)

    def __len__(self) -> int:
        """Return the number of diagnostics stored in this log."""
        return len(self.items)


@dataclass(frozen=True, slots=True)
class FrozenDiagnosticLog:
    """Immutable counterpart to `DiagnosticLog`, stored on unit results."""

    items: tuple[Diagnostic, ...] = ()

    def __iter__(self) -> Iterator[Diagnostic]:
        """Iterate over contained diagnostics in insertion order."""
        return iter(self.items)

    def __len__(self) -> int:
        """Return the number of contained diagnostics."""
        return len(self.items)

    def stats(self) -> DiagnosticStats:
        """Return aggregated per-level counts for the contained diagnostics."""
        return compute_diagnostic_stats(self.items)

    def to_dict(self) -> dict[str, int]:
        """Return a JSON-friendly mapping of counts by level."""
        return diagnostics_counts_to_dict(self.items)


def compute_diagnostic_stats(diagnostics: Iterable[Diagnostic]) -> DiagnosticStats:
    """Return per-level counts for a sequence of diagnostics.

    Args:
        diagnostics: the diagnostics to count.

    Returns:
        Per-level counts.
    """
    items: list[Diagnostic] = list(diagnostics)
    n_msg: int = sum(1 for d in items if d.level == DiagnosticLevel.MESSAGE)
    n_warn: int = sum(1 for d in items if d.level == DiagnosticLevel.WARNING)
    n_err: int = sum(1 for d in items if d.level == DiagnosticLevel.ERROR)
    return DiagnosticStats(n_message=n_msg, n_warning=n_warn, n_error=n_err)


def diagnostics_counts_to_dict(diagnostics: Iterable[Diagnostic]) -> dict[str, int]:
    """Return a JSON-friendly mapping of counts by level for any iterable."""
    stats: DiagnosticStats = compute_diagnostic_stats(diagnostics)
    return {
        "message": stats.n_message,
        "warning": stats.n_warning,
        "error": stats.n_error,
    }
