# topmark:header:start
#
#   project      : Condor
#   file         : scopes.py
#   file_relpath : src/condor/runtime/scopes.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Handler scopes.

- `CatchingScope` / `try_catch`: exiting handlers. When one of its handlers is selected,
  the stack unwinds to the scope (running cleanup guards on the way) and the handler's
  return value becomes the scope's value.
- `CallingScope` / `with_calling_handlers`: non-exiting handlers. They run in place when
  a matching condition is signaled; the signaling code then continues (unless the
  handler invokes a restart or something unwinds).

Native Python exceptions raised in a scope's body are converted to error conditions
(``KeyboardInterrupt`` to an interrupt) at the scope boundary and signaled from there,
so handlers see them like any other error. Handler callbacks of a `CatchingScope` run
*after* the scope has been left: exceptions they raise propagate to the caller.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from contextvars import ContextVar
from types import TracebackType
from typing import TYPE_CHECKING, Any, TypeVar

from condor.config.logging import get_logger
from condor.core.errors import ControlError
from condor.runtime.control import Unwind
from condor.runtime.signals import signal_native
from condor.runtime.stack import HandlerFrame, HandlerMode, handler_stack

if TYPE_CHECKING:
    from contextvars import Token

    from condor.config.logging import CondorLogger
    from condor.runtime.stack import HandlerSpec

    _FrameToken = Token[tuple[HandlerFrame, ...]]

logger: CondorLogger = get_logger(__name__)

T = TypeVar("T")

# Calling scopes entered in the current context, innermost last. Context-local so one
# scope instance can be entered concurrently from several tasks or threads.
_entered_calling: ContextVar[tuple[tuple[CallingScope, HandlerFrame, _FrameToken], ...]] = (
    ContextVar("condor_entered_calling", default=())
)


class CatchingScope:
    """A scope with exiting handlers and an optional cleanup guard.

    Args:
        handlers (Iterable[HandlerSpec]): ``(type, callback)`` pairs; when several
            match a condition, the first registered wins.
        finally_ (Callable[[], Any] | None): Cleanup guard run exactly once whenever
            the scope is left (normal return or unwinding), before any selected
            handler runs.
        label (str): Name used in debug logs.
    """

    def __init__(
        self,
        handlers: Iterable[HandlerSpec] = (),
        *,
        finally_: Callable[[], Any] | None = None,
        label: str = "try_catch",
    ) -> None:
        self.specs: tuple[HandlerSpec, ...] = tuple(handlers)
        self.finally_ = finally_
        self.label = label
        # Validate eagerly; every run gets a fresh frame built from the same specs.
        HandlerFrame.build(HandlerMode.CATCHING, self.specs, label=label)

    def run(self, body: Callable[..., T], *args: Any, **kwargs: Any) -> T | Any:
        """Run ``body(*args, **kwargs)`` under this scope's handlers.

        Returns:
            T | Any: The body's value, or the selected handler's return value.
        """
        frame: HandlerFrame = HandlerFrame.build(
            HandlerMode.CATCHING, self.specs, label=self.label
        )
        unwind: Unwind | None = None
        try:
            with handler_stack.installed(frame):
                try:
                    try:
                        return body(*args, **kwargs)
                    except (Exception, KeyboardInterrupt) as exc:
                        signal_native(exc)
                except Unwind as caught:
                    if caught.target is not frame:
                        raise
                    unwind = caught
        finally:
            self._run_guard()

        assert unwind is not None
        logger.debug("%s: handling %r", self.label, unwind.condition)
        return unwind.handler.callback(unwind.condition)

    def _run_guard(self) -> None:
        if self.finally_ is None:
            return
        try:
            self.finally_()
        except (Exception, KeyboardInterrupt) as exc:
            # The scope's frame is gone: the failure is offered to the outer handlers.
            logger.debug("%s: cleanup guard failed: %s", self.label, exc)
            signal_native(exc, guard_failure=True)


def try_catch(
    body: Callable[[], T],
    *handlers: HandlerSpec,
    finally_: Callable[[], Any] | None = None,
) -> T | Any:
    """Evaluate ``body()`` with exiting handlers and an optional cleanup guard.

    Example:
        >>> try_catch(lambda: signal_error("boom"), (ERROR, lambda c: c.message()))
        'boom'

    Args:
        body (Callable[[], T]): The protected computation.
        *handlers (HandlerSpec): ``(type, callback)`` pairs.
        finally_ (Callable[[], Any] | None): Cleanup guard.

    Returns:
        T | Any: The body's value or the selected handler's return value.
    """
    return CatchingScope(handlers, finally_=finally_).run(body)


class CallingScope:
    """A scope with non-exiting handlers.

    Usable with `run` or as a context manager::

        with CallingScope([(WARNING, log_warning)]):
            work()

    Args:
        handlers (Iterable[HandlerSpec]): ``(type, callback)`` pairs; every matching
            handler of the scope runs, in registration order. Return values are ignored.
        label (str): Name used in debug logs.
    """

    def __init__(
        self, handlers: Iterable[HandlerSpec] = (), *, label: str = "with_calling_handlers"
    ) -> None:
        self.specs: tuple[HandlerSpec, ...] = tuple(handlers)
        self.label = label
        HandlerFrame.build(HandlerMode.CALLING, self.specs, label=label)

    def run(self, body: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run ``body(*args, **kwargs)`` with this scope's handlers installed."""
        with self:
            return body(*args, **kwargs)

    def __enter__(self) -> CallingScope:
        frame: HandlerFrame = HandlerFrame.build(
            HandlerMode.CALLING, self.specs, label=self.label
        )
        token: _FrameToken = handler_stack.push(frame)
        _entered_calling.set((*_entered_calling.get(), (self, frame, token)))
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        entered: tuple[tuple[CallingScope, HandlerFrame, _FrameToken], ...] = (
            _entered_calling.get()
        )
        if not entered or entered[-1][0] is not self:
            raise ControlError(f"Calling scope exited out of order: {self.label}")
        _, frame, token = entered[-1]
        try:
            if isinstance(exc, (Exception, KeyboardInterrupt)):
                # Still installed: this scope's handlers see the converted condition.
                signal_native(exc)
        finally:
            _entered_calling.set(entered[:-1])
            handler_stack.pop(frame, token)


def with_calling_handlers(body: Callable[[], T], *handlers: HandlerSpec) -> T:
    """Evaluate ``body()`` with non-exiting handlers installed.

    Args:
        body (Callable[[], T]): The computation.
        *handlers (HandlerSpec): ``(type, callback)`` pairs.

    Returns:
        T: The body's value.
    """
    return CallingScope(handlers).run(body)
