# topmark:header:start
#
#   project      : Condor
#   file         : helpers.py
#   file_relpath : src/condor/runtime/helpers.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Convenience wrappers built on the scopes and restarts.

These helpers are thin compositions of `CatchingScope` / `CallingScope` with the muffle
restarts; they add no semantics of their own.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, NoReturn, TypeVar

from condor.condition.model import (
    ERROR,
    INTERRUPT,
    MESSAGE,
    WARNING,
    Condition,
    ConditionType,
    Severity,
)
from condor.config.logging import get_logger
from condor.diagnostic.model import DiagnosticLevel
from condor.runtime.context import current_config
from condor.runtime.defaults import format_error_report, top_level_defaults
from condor.runtime.restarts import muffle_message_handler, muffle_warning_handler
from condor.runtime.scopes import CallingScope, CatchingScope
from condor.runtime.signals import signal_interrupt

if TYPE_CHECKING:
    from condor.config.logging import CondorLogger

logger: CondorLogger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True, eq=False)
class TryFailure:
    """Falsy marker returned by `try_` when the body signaled an error.

    Attributes:
        condition (Condition): The error that ended the body.
    """

    condition: Condition

    def message(self) -> str:
        """Return the error's message."""
        return self.condition.message()

    def __bool__(self) -> bool:
        return False

    def __str__(self) -> str:
        return format_error_report(self.condition, show_call_site=True)


def try_(body: Callable[..., T], *args: Any, silent: bool = False, **kwargs: Any) -> T | TryFailure:
    """Run ``body(*args, **kwargs)``, turning an error into a `TryFailure` value.

    Interrupts are error-class conditions but pass through: `try_` re-signals them so
    outer handlers and the top level still see the cancellation.

    Args:
        body (Callable[..., T]): The computation.
        *args (Any): Positional arguments for ``body``.
        silent (bool): If False, the error report is still written to the sink.
        **kwargs (Any): Keyword arguments for ``body``.

    Returns:
        T | TryFailure: The body's value, or a falsy `TryFailure`.
    """

    def on_error(condition: Condition) -> TryFailure:
        if not silent:
            top_level_defaults.report(
                DiagnosticLevel.for_severity(condition.severity()),
                format_error_report(condition, show_call_site=current_config().show_call_site),
                condition,
            )
        return TryFailure(condition)

    def pass_through(condition: Condition) -> NoReturn:
        signal_interrupt(condition)

    scope: CatchingScope = CatchingScope(
        [(INTERRUPT, pass_through), (ERROR, on_error)],
        label="try",
    )
    return scope.run(body, *args, **kwargs)


def _require(kind: ConditionType | Severity, severity: Severity) -> ConditionType:
    target: ConditionType = ConditionType.of(kind)
    if target.severity is not severity:
        raise ValueError(f"Expected a {severity.key} type, got {target.name}")
    return target


def suppress_warnings(
    body: Callable[..., T],
    *args: Any,
    type: ConditionType | Severity = WARNING,  # noqa: A002
    **kwargs: Any,
) -> T:
    """Run ``body`` while muffling warnings of ``type`` (all warnings by default).

    Raises:
        ValueError: If ``type`` is not a warning type.
    """
    target: ConditionType = _require(type, Severity.WARNING)
    scope = CallingScope([(target, muffle_warning_handler)], label="suppress_warnings")
    return scope.run(body, *args, **kwargs)


def suppress_messages(
    body: Callable[..., T],
    *args: Any,
    type: ConditionType | Severity = MESSAGE,  # noqa: A002
    **kwargs: Any,
) -> T:
    """Run ``body`` while muffling messages of ``type`` (all messages by default).

    Raises:
        ValueError: If ``type`` is not a message type.
    """
    target: ConditionType = _require(type, Severity.MESSAGE)
    scope = CallingScope([(target, muffle_message_handler)], label="suppress_messages")
    return scope.run(body, *args, **kwargs)
