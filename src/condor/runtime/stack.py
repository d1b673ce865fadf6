# topmark:header:start
#
#   project      : Condor
#   file         : stack.py
#   file_relpath : src/condor/runtime/stack.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Handler records and the context-local handler stack.

The stack is an immutable tuple of `HandlerFrame`s (outermost first) held in a
`ContextVar`. Installing a frame sets a longer tuple and removing it resets the variable
with the token returned at installation, so frames are always removed in LIFO order and
each thread or asyncio task works on its own stack.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeAlias

from condor.condition.model import Condition, ConditionType, Severity
from condor.config.logging import get_logger
from condor.core.errors import ControlError

if TYPE_CHECKING:
    from condor.config.logging import CondorLogger

logger: CondorLogger = get_logger(__name__)

HandlerCallback: TypeAlias = Callable[[Condition], Any]
HandlerSpec: TypeAlias = tuple[ConditionType | Severity, HandlerCallback]
"""A ``(type, callback)`` pair as accepted by the scope constructors."""


class HandlerMode(Enum):
    """How a handler receives control."""

    CATCHING = "catching"
    """The stack unwinds to the scope first; the callback's result becomes the scope's."""
    CALLING = "calling"
    """The callback runs in place, on top of the signaling code."""


@dataclass(frozen=True, slots=True)
class Handler:
    """A type-to-callback binding registered by a scope."""

    kind: ConditionType
    callback: HandlerCallback
    mode: HandlerMode

    def applies_to(self, condition: Condition) -> bool:
        """Return True if this handler's type matches ``condition``."""
        return self.kind.matches(condition)


@dataclass(frozen=True, slots=True, eq=False)
class HandlerFrame:
    """The handlers installed by one scope, in registration order.

    Frames compare by identity: a catching scope recognizes the `Unwind` aimed at it by
    checking ``unwind.target is frame``.
    """

    mode: HandlerMode
    handlers: tuple[Handler, ...]
    label: str = ""

    @classmethod
    def build(
        cls, mode: HandlerMode, specs: Iterable[HandlerSpec], *, label: str = ""
    ) -> HandlerFrame:
        """Create a frame from ``(type, callback)`` pairs.

        Raises:
            TypeError: If a callback is not callable or a type is not a condition type.
        """
        handlers: list[Handler] = []
        for kind, callback in specs:
            if not callable(callback):
                raise TypeError(f"Handler for {kind} is not callable: {callback!r}")
            handlers.append(Handler(ConditionType.of(kind), callback, mode))
        return cls(mode, tuple(handlers), label)

    def matching(self, condition: Condition) -> tuple[Handler, ...]:
        """Return the handlers matching ``condition``, in registration order."""
        return tuple(h for h in self.handlers if h.applies_to(condition))

    def first_match(self, condition: Condition) -> Handler | None:
        """Return the first registered handler matching ``condition``."""
        for handler in self.handlers:
            if handler.applies_to(condition):
                return handler
        return None

    def without_matches_for(self, condition: Condition) -> HandlerFrame | None:
        """Return a copy without the handlers matching ``condition`` (None if empty)."""
        kept: tuple[Handler, ...] = tuple(h for h in self.handlers if not h.applies_to(condition))
        if not kept:
            return None
        return HandlerFrame(self.mode, kept, self.label)

    def __str__(self) -> str:
        kinds: str = ", ".join(h.kind.name for h in self.handlers)
        return f"{self.mode.value} frame {self.label or '<anonymous>'} [{kinds}]"


class HandlerStack:
    """Context-local stack of handler frames."""

    def __init__(self, name: str = "condor.handlers") -> None:
        self._frames: ContextVar[tuple[HandlerFrame, ...]] = ContextVar(name, default=())

    def frames(self) -> tuple[HandlerFrame, ...]:
        """Return a snapshot of the installed frames, outermost first."""
        return self._frames.get()

    def push(self, frame: HandlerFrame) -> Token[tuple[HandlerFrame, ...]]:
        """Install ``frame`` on top of the stack and return the token to remove it."""
        frames: tuple[HandlerFrame, ...] = self._frames.get()
        logger.trace("push %s (depth %d)", frame, len(frames) + 1)
        return self._frames.set((*frames, frame))

    def pop(self, frame: HandlerFrame, token: Token[tuple[HandlerFrame, ...]]) -> None:
        """Remove ``frame``, which must be the top of the stack.

        Raises:
            ControlError: If ``frame`` is not the most recently installed frame.
        """
        frames: tuple[HandlerFrame, ...] = self._frames.get()
        if not frames or frames[-1] is not frame:
            raise ControlError(f"Handler frames removed out of order: {frame}")
        logger.trace("pop %s (depth %d)", frame, len(frames) - 1)
        self._frames.reset(token)

    @contextmanager
    def installed(self, frame: HandlerFrame) -> Iterator[HandlerFrame]:
        """Install ``frame`` for the dynamic extent of the ``with`` block."""
        token: Token[tuple[HandlerFrame, ...]] = self.push(frame)
        try:
            yield frame
        finally:
            self.pop(frame, token)

    @contextmanager
    def replaced(self, frames: tuple[HandlerFrame, ...]) -> Iterator[None]:
        """Make ``frames`` the visible stack for the dynamic extent of the block.

        Used while a calling handler runs (it must only see the frames outside its own
        scope) and by top-level units, which start from an empty stack.
        """
        token: Token[tuple[HandlerFrame, ...]] = self._frames.set(frames)
        try:
            yield
        finally:
            self._frames.reset(token)

    def __len__(self) -> int:
        return len(self._frames.get())


handler_stack: HandlerStack = HandlerStack()
"""The process-wide handle on the context-local handler stack."""
