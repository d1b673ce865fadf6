# topmark:header:start
#
#   project      : Condor
#   file         : test_defaults.py
#   file_relpath : tests/runtime/test_defaults.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for the top-level defaults: reports, warning modes and the deferred batch."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from condor.condition import ERROR, WARNING, CallSite, Condition, Severity
from condor.core.errors import ConfigError
from condor.diagnostic.model import DiagnosticLevel
from condor.diagnostic.sink import MemorySink
from condor.runtime import (
    TopLevelUnit,
    UnitStatus,
    WarningBatch,
    last_warnings,
    muffle_warning_handler,
    signal_error,
    signal_interrupt,
    signal_message,
    signal_warning,
    try_catch,
    use_config,
    with_calling_handlers,
)
from condor.runtime.defaults import format_error_report, format_warning_report
from tests.conftest import make_config, mark_runtime, parametrize

if TYPE_CHECKING:
    from condor.config import Config
    from condor.runtime import UnitResult


def check(message: str = "value truncated") -> None:
    signal_warning(message)


def fail(message: str = "boom") -> None:
    signal_error(message)


def run_unit(
    body: object, *, config: Config | None = None
) -> tuple[UnitResult[object], MemorySink]:
    memory = MemorySink()
    result = TopLevelUnit(config=config, sink=memory).run(body)  # type: ignore[arg-type]
    return result, memory


# --- Report formats ---


@mark_runtime
def test_error_report_formats() -> None:
    """Errors render R style, with or without call site."""
    cond = Condition.create(ERROR, "boom", call_site=CallSite(label="f()"))
    assert format_error_report(cond, show_call_site=True) == "Error in f() : boom"
    assert format_error_report(cond, show_call_site=False) == "Error: boom"
    assert format_error_report(Condition.create(ERROR, "boom"), show_call_site=True) == (
        "Error: boom"
    )


@mark_runtime
def test_warning_report_formats() -> None:
    """Immediate warnings render R style."""
    cond = Condition.create(WARNING, "careful", call_site=CallSite(label="g()"))
    assert format_warning_report(cond, show_call_site=True) == "Warning in g() : careful"
    assert format_warning_report(cond, show_call_site=False) == "Warning: careful"


# --- Errors, interrupts and messages ---


@mark_runtime
def test_unhandled_error_is_reported_and_aborts() -> None:
    """The rest of the unit's body is skipped."""
    steps: list[str] = []

    def body() -> None:
        fail()
        steps.append("after")  # pragma: no cover

    result, memory = run_unit(body)

    assert result.status is UnitStatus.FAILED
    assert result.value is None
    assert result.condition is not None
    assert result.condition.message() == "boom"
    assert steps == []
    assert memory.texts(DiagnosticLevel.ERROR) == ["Error in fail() : boom"]
    assert [d.text for d in result.diagnostics] == ["Error in fail() : boom"]


@mark_runtime
def test_call_site_can_be_hidden() -> None:
    """``show_call_site = false`` drops the ``in f()`` part."""
    result, memory = run_unit(fail, config=make_config(show_call_site=False))
    assert result.status is UnitStatus.FAILED
    assert memory.texts() == ["Error: boom"]


@mark_runtime
def test_unhandled_interrupt_is_reported() -> None:
    """Interrupts abort the unit with their own status and report."""
    result, memory = run_unit(lambda: signal_interrupt("stop requested"))
    assert result.status is UnitStatus.INTERRUPTED
    assert memory.texts() == ["Interrupted: stop requested"]


@parametrize(
    ("severity", "level"),
    [
        (Severity.ERROR, DiagnosticLevel.ERROR),
        (Severity.INTERRUPT, DiagnosticLevel.ERROR),
        (Severity.WARNING, DiagnosticLevel.WARNING),
        (Severity.MESSAGE, DiagnosticLevel.MESSAGE),
    ],
)
@mark_runtime
def test_report_level_follows_the_condition_severity(
    severity: Severity, level: DiagnosticLevel
) -> None:
    """Each severity maps to one diagnostic level."""
    assert DiagnosticLevel.for_severity(severity) is level


@mark_runtime
def test_reports_are_written_at_the_severity_level() -> None:
    """Default reports carry the level of the condition they describe."""

    def body() -> None:
        signal_message("note")
        check()
        signal_interrupt("stop")

    _, memory = run_unit(body, config=make_config(warning_mode="immediate"))
    assert [(d.level, d.text) for d in memory.diagnostics] == [
        (DiagnosticLevel.MESSAGE, "note"),
        (DiagnosticLevel.WARNING, "Warning in check() : value truncated"),
        (DiagnosticLevel.ERROR, "Interrupted: stop"),
    ]


@mark_runtime
def test_messages_are_written_immediately() -> None:
    """Messages go to the sink at once and are never deferred."""

    def body() -> None:
        signal_message("loading")
        check()
        signal_message("done")

    result, memory = run_unit(body)

    assert result.ok
    assert memory.texts(DiagnosticLevel.MESSAGE) == ["loading", "done"]
    assert memory.texts() == [
        "loading",
        "done",
        "Warning message:\nIn check() : value truncated",
    ]


# --- Deferred warnings ---


@mark_runtime
def test_single_deferred_warning_summary() -> None:
    """One warning: ``Warning message:`` and the line."""
    result, memory = run_unit(check)
    assert result.ok
    assert memory.texts() == ["Warning message:\nIn check() : value truncated"]
    assert [w.message() for w in result.warnings] == ["value truncated"]


@mark_runtime
def test_several_deferred_warnings_are_numbered() -> None:
    """Several warnings: a numbered list in signal order."""

    def body() -> None:
        check("first")
        signal_warning("second")

    _result, memory = run_unit(body)
    assert memory.texts() == ["Warning messages:\n1: In check() : first\n2: second"]


@mark_runtime
def test_many_deferred_warnings_are_counted() -> None:
    """Past ten warnings only the count is printed."""

    def body() -> None:
        for i in range(11):
            check(f"w{i}")

    result, memory = run_unit(body)
    assert memory.texts() == ["There were 11 warnings (use last_warnings() to see them)"]
    assert len(result.warnings) == 11
    assert [w.message() for w in last_warnings()] == [f"w{i}" for i in range(11)]


@mark_runtime
def test_deferred_batch_is_capped() -> None:
    """Warnings past ``max_deferred_warnings`` are dropped from the batch."""

    def body() -> None:
        for i in range(5):
            check(f"w{i}")

    result, memory = run_unit(body, config=make_config(max_deferred_warnings=3))
    assert memory.texts() == [
        "There were 3 or more warnings (use last_warnings() to see the first 3)"
    ]
    assert [w.message() for w in result.warnings] == ["w0", "w1", "w2"]


@mark_runtime
def test_summary_follows_the_error_report() -> None:
    """Warnings of a failed unit are summarized after the error, ``In addition``."""

    def body() -> None:
        check("careful")
        fail()

    result, memory = run_unit(body)
    assert result.status is UnitStatus.FAILED
    assert memory.texts() == [
        "Error in fail() : boom",
        "In addition: Warning message:\nIn check() : careful",
    ]


@mark_runtime
def test_deferred_warnings_outside_a_unit_are_reported_immediately(sink: MemorySink) -> None:
    """There is no unit end to flush at, so deferred degrades to immediate."""
    check()
    assert sink.texts() == ["Warning in check() : value truncated"]


@mark_runtime
def test_zero_capacity_batch_only_counts() -> None:
    """With ``max_deferred_warnings = 0`` the summary reports the count alone."""

    def body() -> None:
        check("w0")
        check("w1")

    result, memory = run_unit(body, config=make_config(max_deferred_warnings=0))
    assert memory.texts() == ["There were 2 warnings (use last_warnings() to see them)"]
    assert result.warnings == ()
    assert WarningBatch(capacity=0).summary(show_call_site=True) is None


@mark_runtime
def test_warning_batch_summary_of_empty_batch() -> None:
    """An empty batch has no summary."""
    assert WarningBatch(capacity=5).summary(show_call_site=True) is None


# --- Immediate and escalate modes ---


@mark_runtime
def test_immediate_mode_reports_in_signal_order() -> None:
    """``immediate`` writes each warning when it is signaled."""

    def body() -> None:
        check("first")
        signal_message("between")
        check("second")

    result, memory = run_unit(body, config=make_config(warning_mode="immediate"))
    assert result.ok
    assert result.warnings == ()
    assert memory.texts() == [
        "Warning in check() : first",
        "between",
        "Warning in check() : second",
    ]


@mark_runtime
def test_warning_mode_is_read_at_signal_time() -> None:
    """Switching the active config inside a unit changes the warning default."""

    def body() -> None:
        check("deferred one")
        with use_config(make_config(warning_mode="immediate")):
            check("immediate one")

    result, memory = run_unit(body)
    assert memory.texts() == [
        "Warning in check() : immediate one",
        "Warning message:\nIn check() : deferred one",
    ]
    assert [w.message() for w in result.warnings] == ["deferred one"]


@mark_runtime
def test_escalated_warning_behaves_like_an_error() -> None:
    """``escalate``: an unhandled warning aborts the unit exactly as an error does."""
    config = make_config(warning_mode="escalate")
    escalated, escalated_sink = run_unit(lambda: signal_warning("w"), config=config)
    plain, plain_sink = run_unit(lambda: signal_error("w"), config=config)

    assert escalated.status is plain.status is UnitStatus.FAILED
    assert escalated.value is plain.value is None
    assert escalated_sink.texts() == ["Error: (converted from warning) w"]
    assert plain_sink.texts() == ["Error: w"]

    assert escalated.condition is not None
    assert escalated.condition.is_a(ERROR)
    original = escalated.condition.extra("escalated_from")
    assert isinstance(original, Condition)
    assert original.is_a(WARNING)


@mark_runtime
def test_escalated_warning_keeps_the_call_site() -> None:
    """The error reports where the warning was signaled."""
    _result, memory = run_unit(check, config=make_config(warning_mode="escalate"))
    assert memory.texts() == ["Error in check() : (converted from warning) value truncated"]


@mark_runtime
def test_escalated_warning_can_be_caught_as_an_error() -> None:
    """Error handlers see the escalated condition."""
    result, memory = run_unit(
        lambda: try_catch(check, (ERROR, lambda c: f"caught {c.message()}")),
        config=make_config(warning_mode="escalate"),
    )
    assert result.value == "caught value truncated"
    assert memory.texts() == []


@mark_runtime
def test_muffled_warning_is_never_escalated() -> None:
    """Muffling prevents every default, escalation included."""
    def body() -> str:
        check()
        return "kept going"

    result, memory = run_unit(
        lambda: with_calling_handlers(body, (WARNING, muffle_warning_handler)),
        config=make_config(warning_mode="escalate"),
    )
    assert result.value == "kept going"
    assert memory.texts() == []


@parametrize("mode", ["deferred", "immediate", "escalate"])
@mark_runtime
def test_messages_ignore_the_warning_mode(mode: str) -> None:
    """Messages are never deferred nor escalated."""
    result, memory = run_unit(lambda: signal_message("note"), config=make_config(warning_mode=mode))
    assert result.ok
    assert memory.texts() == ["note"]


@mark_runtime
def test_invalid_warning_mode_override_is_rejected() -> None:
    """Programmatic overrides are validated."""
    with pytest.raises(ConfigError):
        make_config(warning_mode="loud")
