# topmark:header:start
#
#   project      : Condor
#   file         : signals.py
#   file_relpath : src/condor/runtime/signals.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Signaling primitives.

| Primitive           | Restart established | If no catching handler             |
|---------------------|---------------------|------------------------------------|
| `signal_condition`  | none                | returns None                       |
| `signal_message`    | ``muffle-message``  | message written, returns None      |
| `signal_warning`    | ``muffle-warning``  | warning mode applied, returns None |
| `signal_error`      | none                | reported, unit aborted             |
| `signal_interrupt`  | none                | reported, unit aborted             |

Each primitive accepts either a message string (a condition of the primitive's severity
is created, with the caller's function as call site) or a prepared `Condition`, which
must have the matching severity.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, NoReturn

from condor.condition.call_site import infer_call_site as _infer_call_site
from condor.condition.call_site import traceback_call_site
from condor.condition.model import ERROR, INTERRUPT, MESSAGE, WARNING, Condition, Severity
from condor.config.logging import get_logger
from condor.constants import RESTART_MUFFLE_MESSAGE, RESTART_MUFFLE_WARNING
from condor.runtime.control import RestartInvoked
from condor.runtime.defaults import top_level_defaults
from condor.runtime.dispatch import dispatcher
from condor.runtime.restarts import Restart, restart_registry

if TYPE_CHECKING:
    from condor.condition.call_site import CallSite
    from condor.condition.model import ConditionType
    from condor.config.logging import CondorLogger

logger: CondorLogger = get_logger(__name__)


def _coerce(
    value: str | Condition,
    base: ConditionType,
    *,
    kind: ConditionType | None,
    call_site: CallSite | None,
    infer_call_site: bool,
    extra: dict[str, Any],
) -> Condition:
    """Turn a primitive's argument into a condition of ``base``'s severity.

    Raises:
        ValueError: If a prepared condition or ``kind`` has another severity.
    """
    if kind is not None and kind.severity is not base.severity:
        raise ValueError(f"Cannot signal a {kind.name} condition as {base.name}")
    if isinstance(value, Condition):
        if value.severity() is not base.severity:
            raise ValueError(
                f"Cannot signal a {value.kind.name} condition as {base.name}: {value!r}"
            )
        return value.derive(**extra) if extra else value
    if call_site is None and infer_call_site:
        # _coerce <- primitive <- signaling code
        call_site = _infer_call_site(stacklevel=2)
    target: ConditionType = base if kind is None else kind
    return Condition.create(target, str(value), call_site=call_site, **extra)


def signal_condition(condition: Condition) -> None:
    """Offer ``condition`` to the installed handlers.

    Calling handlers run in place. If a catching handler matches, control unwinds to its
    scope and this call does not return.

    Returns:
        None: When no catching handler took the condition; no default action applies.
    """
    dispatcher.dispatch(condition)


def signal_message(
    message: str | Condition,
    *,
    kind: ConditionType | None = None,
    call_site: CallSite | None = None,
    infer_call_site: bool = True,
    **extra: Any,
) -> None:
    """Signal an informational message.

    A ``muffle-message`` restart is established while handlers run; a calling handler
    invoking it silences the message. Otherwise an unhandled message is written to the
    diagnostic sink.

    Args:
        message (str | Condition): Message text or a prepared message condition.
        kind (ConditionType | None): A subtype to signal instead of the plain severity.
        call_site (CallSite | None): Explicit call site.
        infer_call_site (bool): Use the calling function as call site when none is given.
        **extra (Any): Extra payload stored on the condition.
    """
    condition: Condition = _coerce(
        message,
        MESSAGE,
        kind=kind,
        call_site=call_site,
        infer_call_site=infer_call_site,
        extra=extra,
    )
    if _dispatch_muffleable(condition, RESTART_MUFFLE_MESSAGE):
        top_level_defaults.on_message(condition)


def signal_warning(
    message: str | Condition,
    *,
    kind: ConditionType | None = None,
    call_site: CallSite | None = None,
    infer_call_site: bool = True,
    **extra: Any,
) -> None:
    """Signal a recoverable warning.

    A ``muffle-warning`` restart is established while handlers run; a calling handler
    invoking it silences the warning. Otherwise the active warning mode decides: defer
    it to the end of the unit, report it now, or escalate it to an error (in which case
    this call does not return).

    Args:
        message (str | Condition): Warning text or a prepared warning condition.
        kind (ConditionType | None): A subtype to signal instead of the plain severity.
        call_site (CallSite | None): Explicit call site.
        infer_call_site (bool): Use the calling function as call site when none is given.
        **extra (Any): Extra payload stored on the condition.
    """
    condition: Condition = _coerce(
        message,
        WARNING,
        kind=kind,
        call_site=call_site,
        infer_call_site=infer_call_site,
        extra=extra,
    )
    if _dispatch_muffleable(condition, RESTART_MUFFLE_WARNING):
        top_level_defaults.on_warning(condition)


def signal_error(
    message: str | Condition | BaseException,
    *,
    kind: ConditionType | None = None,
    call_site: CallSite | None = None,
    infer_call_site: bool = True,
    **extra: Any,
) -> NoReturn:
    """Signal an error. Never returns.

    Control leaves through a catching handler's scope, through a restart invoked by a
    calling handler, or, when nothing handles the error, by aborting the current
    top-level unit after the error report.

    Args:
        message (str | Condition | BaseException): Error text, a prepared error
            condition, or a native exception to wrap.
        kind (ConditionType | None): A subtype to signal instead of the plain severity.
        call_site (CallSite | None): Explicit call site.
        infer_call_site (bool): Use the calling function as call site when none is given.
        **extra (Any): Extra payload stored on the condition.

    Raises:
        UnitAborted: When no handler takes the error.
    """
    condition: Condition
    if isinstance(message, BaseException):
        site: CallSite | None = call_site or traceback_call_site(message)
        condition = Condition.from_exception(message, call_site=site)
        if condition.severity() is not Severity.ERROR:
            raise ValueError(f"Cannot signal {type(message).__name__} as an error")
        if kind is not None and kind.severity is not Severity.ERROR:
            raise ValueError(f"Cannot signal a {kind.name} condition as {ERROR.name}")
        if kind is not None or extra:
            condition = condition.derive(kind=kind, **extra)
    else:
        condition = _coerce(
            message,
            ERROR,
            kind=kind,
            call_site=call_site,
            infer_call_site=infer_call_site,
            extra=extra,
        )
    _signal_terminal(condition)


def signal_interrupt(
    message: str | Condition = "interrupted",
    *,
    kind: ConditionType | None = None,
    call_site: CallSite | None = None,
    infer_call_site: bool = True,
    **extra: Any,
) -> NoReturn:
    """Signal a user interrupt. Never returns.

    Interrupts are dispatched like errors and are error-class conditions: handlers for
    ``interrupt``, ``error`` or the root ``condition`` type all see them. A scope that
    must not swallow a cancellation registers an ``interrupt`` handler ahead of its
    ``error`` handler.

    Raises:
        UnitAborted: When no handler takes the interrupt.
    """
    condition: Condition = _coerce(
        message,
        INTERRUPT,
        kind=kind,
        call_site=call_site,
        infer_call_site=infer_call_site,
        extra=extra,
    )
    _signal_terminal(condition)


def signal_native(exc: BaseException, **extra: Any) -> NoReturn:
    """Signal a native exception caught at a scope boundary (error or interrupt)."""
    condition: Condition = Condition.from_exception(exc, call_site=traceback_call_site(exc))
    if extra:
        condition = condition.derive(**extra)
    logger.debug("converting %s to %r", type(exc).__name__, condition)
    _signal_terminal(condition)


def escalate_warning(condition: Condition) -> NoReturn:
    """Signal ``condition`` again as an error (the ``escalate`` warning mode).

    The error keeps the warning's message, call site and payload; its ``escalated_from``
    extra holds the original warning.
    """
    escalated: Condition = Condition.create(
        ERROR,
        condition.message(),
        call_site=condition.call_site(),
        **{**condition.data, "escalated_from": condition},
    )
    logger.debug("escalating %r", condition)
    _signal_terminal(escalated)


def _signal_terminal(condition: Condition) -> NoReturn:
    dispatcher.dispatch(condition)
    top_level_defaults.on_error(condition)


def _dispatch_muffleable(condition: Condition, restart_name: str) -> bool:
    """Dispatch with a muffle restart established.

    Returns:
        bool: False if a handler invoked the muffle restart, True if the default action
            should still apply.
    """
    muffle: Restart = Restart(restart_name, description=f"Muffle the {condition.kind.name}")
    try:
        with restart_registry.established((muffle,)):
            dispatcher.dispatch(condition)
    except RestartInvoked as invocation:
        if invocation.restart is not muffle:
            raise
        logger.debug("%r muffled", condition)
        return False
    return True

