# topmark:header:start
#
#   project      : Condor
#   file         : defaults.py
#   file_relpath : src/condor/runtime/defaults.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Top-level defaults applied when a signal finds no catching handler.

- errors and interrupts are reported and abort the current top-level unit;
- warnings follow the active ``warning_mode``: deferred into the unit's `WarningBatch`,
  reported immediately, or escalated to errors;
- messages are written to the diagnostic sink.

Every report goes to the active `DiagnosticSink` and is also recorded in the active
unit's diagnostic log.

Report formats:

    Error in parse() : unexpected token
    Error: unexpected token
    Interrupted: interrupted
    Warning in parse() : value truncated
    Warning message:
    In parse() : value truncated
    Warning messages:
    1: In parse() : value truncated
    2: value truncated
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, NoReturn

from condor.condition.model import Condition, Severity
from condor.config.logging import get_logger
from condor.config.types import WarningMode
from condor.constants import ESCALATED_WARNING_PREFIX, WARNING_SUMMARY_LIST_LIMIT
from condor.diagnostic.model import Diagnostic, DiagnosticLevel
from condor.runtime.context import current_config, current_sink, current_unit
from condor.runtime.control import UnitAborted

if TYPE_CHECKING:
    from condor.config.logging import CondorLogger
    from condor.config.model import Config
    from condor.runtime.unit import TopLevelUnit

logger: CondorLogger = get_logger(__name__)


def format_condition_line(condition: Condition, *, show_call_site: bool) -> str:
    """Render ``In f() : text`` (or just ``text`` without a call site)."""
    text: str = _display_text(condition)
    site = condition.call_site()
    if show_call_site and site is not None:
        return f"In {site} : {text}"
    return text


def format_error_report(condition: Condition, *, show_call_site: bool) -> str:
    """Render the report written for an unhandled error or interrupt."""
    text: str = _display_text(condition)
    if condition.severity() is Severity.INTERRUPT:
        return f"Interrupted: {text}"
    site = condition.call_site()
    if show_call_site and site is not None:
        return f"Error in {site} : {text}"
    return f"Error: {text}"


def format_warning_report(condition: Condition, *, show_call_site: bool) -> str:
    """Render the report written for an immediately reported warning."""
    site = condition.call_site()
    if show_call_site and site is not None:
        return f"Warning in {site} : {condition.message()}"
    return f"Warning: {condition.message()}"


def _display_text(condition: Condition) -> str:
    if condition.extra("escalated_from") is not None:
        return f"{ESCALATED_WARNING_PREFIX}{condition.message()}"
    return condition.message()


@dataclass
class WarningBatch:
    """Bounded accumulator for the deferred warnings of one top-level unit.

    Warnings beyond ``capacity`` are counted but not kept.

    Attributes:
        capacity (int): Maximum number of warnings kept.
        conditions (list[Condition]): Kept warnings, in signal order.
        dropped (int): Number of warnings signaled after the batch was full.
    """

    capacity: int
    conditions: list[Condition] = field(default_factory=lambda: [])
    dropped: int = 0

    def add(self, condition: Condition) -> None:
        """Record a deferred warning."""
        if len(self.conditions) < self.capacity:
            self.conditions.append(condition)
        else:
            self.dropped += 1

    @property
    def total(self) -> int:
        """Number of warnings signaled into this batch, kept or not."""
        return len(self.conditions) + self.dropped

    def summary(self, *, show_call_site: bool, in_addition: bool = False) -> str | None:
        """Render the end-of-unit warning summary, or None for an empty batch.

        Args:
            show_call_site (bool): Whether lines mention the call site.
            in_addition (bool): Prefix ``In addition:`` (the unit ended with an error
                report).

        Returns:
            str | None: The summary text.
        """
        if self.total == 0:
            return None
        prefix: str = "In addition: " if in_addition else ""
        if self.capacity == 0:
            return f"{prefix}There were {self.total} warnings (use last_warnings() to see them)"
        if self.dropped:
            return (
                f"{prefix}There were {self.capacity} or more warnings "
                f"(use last_warnings() to see the first {self.capacity})"
            )
        if self.total > WARNING_SUMMARY_LIST_LIMIT:
            return f"{prefix}There were {self.total} warnings (use last_warnings() to see them)"
        lines: list[str] = [
            format_condition_line(c, show_call_site=show_call_site) for c in self.conditions
        ]
        if len(lines) == 1:
            return f"{prefix}Warning message:\n{lines[0]}"
        numbered: str = "\n".join(f"{i}: {line}" for i, line in enumerate(lines, start=1))
        return f"{prefix}Warning messages:\n{numbered}"

    def __iter__(self) -> Iterator[Condition]:
        return iter(self.conditions)

    def __len__(self) -> int:
        return len(self.conditions)


class TopLevelDefaults:
    """Behavior applied to conditions that no catching handler took."""

    def report(self, level: DiagnosticLevel, text: str, condition: Condition | None = None) -> None:
        """Write a report to the active sink and record it in the active unit."""
        diagnostic: Diagnostic = Diagnostic(level, text, condition)
        current_sink().write(diagnostic)
        unit: TopLevelUnit | None = current_unit()
        if unit is not None:
            unit.diagnostics.add(diagnostic)

    def on_error(self, condition: Condition) -> NoReturn:
        """Report an unhandled error or interrupt and abort the current unit.

        Raises:
            UnitAborted: Always.
        """
        config: Config = current_config()
        self.report(
            DiagnosticLevel.for_severity(condition.severity()),
            format_error_report(condition, show_call_site=config.show_call_site),
            condition,
        )
        logger.info("aborting top-level unit: %r", condition)
        raise UnitAborted(condition)

    def on_warning(self, condition: Condition) -> None:
        """Apply the active warning mode to an unhandled warning.

        The mode is read once per call. Outside a top-level unit, deferred warnings are
        reported immediately since there is no unit end to flush at.
        """
        config: Config = current_config()
        mode: WarningMode = config.warning_mode
        if mode is WarningMode.ESCALATE:
            # Imported here: the error path lives with the signaling primitives.
            from condor.runtime.signals import escalate_warning

            escalate_warning(condition)

        unit: TopLevelUnit | None = current_unit()
        if mode is WarningMode.DEFERRED and unit is not None:
            logger.trace("deferring %r", condition)
            unit.warnings.add(condition)
            return
        self.report(
            DiagnosticLevel.for_severity(condition.severity()),
            format_warning_report(condition, show_call_site=config.show_call_site),
            condition,
        )

    def on_message(self, condition: Condition) -> None:
        """Write an unhandled message to the diagnostic sink."""
        level: DiagnosticLevel = DiagnosticLevel.for_severity(condition.severity())
        self.report(level, condition.message(), condition)


top_level_defaults: TopLevelDefaults = TopLevelDefaults()
