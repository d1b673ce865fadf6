# topmark:header:start
#
#   project      : Condor
#   file         : dispatch.py
#   file_relpath : src/condor/runtime/dispatch.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Handler search for signaled conditions.

`Dispatcher.dispatch` walks a snapshot of the handler stack from the most recently
installed frame outwards:

- a matching **calling** handler runs in place. While it runs, the visible stack is the
  frames outside its scope plus the non-matching handlers of its own scope, so it cannot
  re-enter itself. Its return value is ignored and the walk continues outwards.
- a matching **catching** handler ends the walk: `Unwind` is raised towards its scope.

Returning normally means no catching handler took the condition; the caller then applies
the top-level default for the condition's severity.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from condor.config.logging import get_logger
from condor.runtime.control import Unwind
from condor.runtime.stack import HandlerMode, handler_stack

if TYPE_CHECKING:
    from condor.condition.model import Condition
    from condor.config.logging import CondorLogger
    from condor.runtime.stack import Handler, HandlerFrame, HandlerStack

logger: CondorLogger = get_logger(__name__)


class Dispatcher:
    """Search the handler stack for handlers matching a condition.

    Args:
        stack (HandlerStack): The handler stack to search.
    """

    def __init__(self, stack: HandlerStack = handler_stack) -> None:
        self.stack = stack

    def dispatch(self, condition: Condition) -> None:
        """Offer ``condition`` to the installed handlers, most recent first.

        Raises:
            Unwind: When a catching handler matches.
        """
        frames: tuple[HandlerFrame, ...] = self.stack.frames()
        logger.trace("dispatch %r over %d frame(s)", condition, len(frames))
        for index in range(len(frames) - 1, -1, -1):
            frame: HandlerFrame = frames[index]
            if frame.mode is HandlerMode.CATCHING:
                handler: Handler | None = frame.first_match(condition)
                if handler is not None:
                    logger.debug("unwinding to %s for %r", frame, condition)
                    raise Unwind(frame, handler, condition)
                continue

            matching: tuple[Handler, ...] = frame.matching(condition)
            if not matching:
                continue
            rest: HandlerFrame | None = frame.without_matches_for(condition)
            visible: tuple[HandlerFrame, ...] = frames[:index] if rest is None else (
                *frames[:index],
                rest,
            )
            with self.stack.replaced(visible):
                for handler in matching:
                    logger.trace("calling handler for %s in %s", handler.kind, frame)
                    handler.callback(condition)
        logger.trace("no catching handler for %r", condition)


dispatcher: Dispatcher = Dispatcher()
