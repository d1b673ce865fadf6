# topmark:header:start
#
#   project      : Condor
#   file         : test_properties.py
#   file_relpath : tests/runtime/test_properties.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

# pyright: strict

"""Property tests for nested catching scopes.

Random towers of `try_catch` scopes (each catching errors, warnings or nothing, each with
a cleanup guard) run a body that signals an error, a warning or nothing. The suite checks:
1) every guard runs exactly once, innermost first, and
2) the innermost scope whose handler matches is the one that handles the signal.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Literal

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from condor.condition import ERROR, WARNING, Condition, ConditionType
from condor.diagnostic.sink import MemorySink
from condor.runtime import TopLevelUnit, UnitStatus, signal_error, signal_warning, try_catch

Catches = Literal["error", "warning", "none"]
Signal = Literal["error", "warning", "none"]

KINDS: dict[str, ConditionType] = {"error": ERROR, "warning": WARNING}

s_catches: st.SearchStrategy[Catches] = st.sampled_from(["error", "warning", "none"])
s_signal: st.SearchStrategy[Signal] = st.sampled_from(["error", "warning", "none"])


def build_tower(
    catches: list[Catches],
    signal: Signal,
    events: list[str],
) -> Callable[[], Any]:
    """Return a body nesting one scope per entry of ``catches`` (outermost first)."""

    def innermost() -> str:
        if signal == "error":
            signal_error("boom")
        if signal == "warning":
            signal_warning("careful")
        return "body"

    body: Callable[[], Any] = innermost
    for depth in reversed(range(len(catches))):
        body = _wrap(body, depth, catches[depth], events)
    return body


def _wrap(
    inner: Callable[[], Any],
    depth: int,
    catches: Catches,
    events: list[str],
) -> Callable[[], Any]:
    def handler(condition: Condition) -> str:
        events.append(f"handler {depth}")
        return f"handled at {depth}"

    def scoped() -> Any:
        handlers = () if catches == "none" else ((KINDS[catches], handler),)
        return try_catch(inner, *handlers, finally_=lambda: events.append(f"guard {depth}"))

    return scoped


def expected_handler(catches: list[Catches], signal: Signal) -> int | None:
    """Return the depth of the innermost scope catching ``signal``, if any."""
    if signal == "none":
        return None
    for depth in reversed(range(len(catches))):
        if catches[depth] == signal:
            return depth
    return None


def check_tower(catches: list[Catches], signal: Signal) -> None:
    """Run one tower in a fresh unit and check guard order and the handling scope.

    Args:
        catches (list[Catches]): What each scope catches, outermost first.
        signal (Signal): What the innermost body signals.
    """
    events: list[str] = []
    result = TopLevelUnit(sink=MemorySink()).run(build_tower(catches, signal, events))

    guards: list[str] = [e for e in events if e.startswith("guard")]
    assert guards == [f"guard {d}" for d in reversed(range(len(catches)))]

    handlers: list[str] = [e for e in events if e.startswith("handler")]
    target: int | None = expected_handler(catches, signal)
    if target is not None:
        assert handlers == [f"handler {target}"]
        assert result.status is UnitStatus.OK
        assert result.value == f"handled at {target}"
        # The handler runs after its own guard and after every guard inside it.
        assert events.index(f"handler {target}") == events.index(f"guard {target}") + 1
    elif signal == "error":
        assert handlers == []
        assert result.status is UnitStatus.FAILED
    else:
        # An unhandled warning is deferred; the body carries on normally.
        assert handlers == []
        assert result.status is UnitStatus.OK
        assert result.value == "body"
        assert len(result.warnings) == (1 if signal == "warning" else 0)


@settings(deadline=None, max_examples=15)
@given(catches=st.lists(s_catches, min_size=1, max_size=3), signal=s_signal)
def test_shallow_towers_unwind_in_order(catches: list[Catches], signal: Signal) -> None:
    """A few shallow towers, cheap enough for every test run."""
    check_tower(catches, signal)


@pytest.mark.hypothesis_slow
@settings(
    suppress_health_check=[HealthCheck.too_slow],
    deadline=None,
    max_examples=60,
)
@given(catches=st.lists(s_catches, min_size=1, max_size=6), signal=s_signal)
def test_guards_run_once_and_innermost_match_handles(
    catches: list[Catches],
    signal: Signal,
) -> None:
    """Each guard runs once, innermost first; the innermost matching scope handles."""
    check_tower(catches, signal)
