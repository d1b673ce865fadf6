# topmark:header:start
#
#   project      : Condor
#   file         : call_site.py
#   file_relpath : src/condor/condition/call_site.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Call-site references attached to conditions.

A `CallSite` records *where* a condition was signaled. It comes in two flavors:

- **re-invocable**: built with `capture_call_site(func, *args, **kwargs)`; it keeps the
  callable and its arguments so a handler can replay the call for diagnostics;
- **label-only**: inferred from the caller's frame by the signaling primitives; it only
  renders as ``name()`` and cannot be replayed.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from condor.core.errors import ControlError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from types import FrameType, TracebackType


def _empty_kwargs() -> Mapping[str, Any]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class CallSite:
    """Reference to the call that signaled a condition.

    Attributes:
        function (Callable[..., Any] | None): The called function, when known.
        args (tuple[Any, ...]): Positional arguments of the call.
        kwargs (Mapping[str, Any]): Keyword arguments of the call (read-only).
        label (str | None): Explicit rendering; overrides the generated one.
    """

    function: Callable[..., Any] | None = None
    args: tuple[Any, ...] = ()
    kwargs: Mapping[str, Any] = field(default_factory=_empty_kwargs)
    label: str | None = None

    @property
    def replayable(self) -> bool:
        """Return True if the call can be re-invoked with `replay()`."""
        return self.function is not None

    def replay(self) -> Any:
        """Re-invoke the recorded call and return its result.

        Raises:
            ControlError: If the call site only carries a label.
        """
        if self.function is None:
            raise ControlError(f"Call site {self} cannot be replayed (no function recorded)")
        return self.function(*self.args, **dict(self.kwargs))

    def __str__(self) -> str:
        """Render as ``label`` or ``name(arg, key=value)``."""
        if self.label is not None:
            return self.label
        name: str = getattr(self.function, "__qualname__", None) or repr(self.function)
        parts: list[str] = [repr(a) for a in self.args]
        parts.extend(f"{k}={v!r}" for k, v in self.kwargs.items())
        return f"{name}({', '.join(parts)})"


def capture_call_site(func: Callable[..., Any], *args: Any, **kwargs: Any) -> CallSite:
    """Build a re-invocable call site for ``func(*args, **kwargs)``."""
    return CallSite(function=func, args=tuple(args), kwargs=MappingProxyType(dict(kwargs)))


def infer_call_site(stacklevel: int = 1) -> CallSite | None:
    """Return a label-only call site for a frame of the current call stack.

    Args:
        stacklevel (int): How many frames above the *caller* of this function to
            inspect. ``1`` designates the function that called `infer_call_site`'s caller.

    Returns:
        CallSite | None: A call site labelled ``name()``, or None at module level
            (top-level code has no enclosing call to report).
    """
    frame: FrameType | None = inspect.currentframe()
    try:
        # Skip our own frame and the direct caller's frame
        for _ in range(stacklevel + 1):
            if frame is None:
                return None
            frame = frame.f_back
        if frame is None:
            return None
        name: str = frame.f_code.co_name
        if name.startswith("<"):
            return None
        return CallSite(label=f"{name}()")
    finally:
        # Break the reference cycle through the frame object
        del frame


def traceback_call_site(exc: BaseException) -> CallSite | None:
    """Return a label-only call site for the function that raised ``exc``.

    The innermost traceback entry is used; None when the exception was raised from
    module-level code or carries no traceback.
    """
    tb: TracebackType | None = exc.__traceback__
    if tb is None:
        return None
    while tb.tb_next is not None:
        tb = tb.tb_next
    name: str = tb.tb_frame.f_code.co_name
    if name.startswith("<"):
        return None
    return CallSite(label=f"{name}()")
