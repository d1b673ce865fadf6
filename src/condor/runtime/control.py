# topmark:header:start
#
#   project      : Condor
#   file         : control.py
#   file_relpath : src/condor/runtime/control.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Non-local control transfers of the condition system.

The condition system is implemented on top of Python exceptions. Signaling does not unwind
the call stack: the dispatcher first decides *where* control will land, and only then
raises one of the transfers below, which unwinds exactly up to its target:

- `Unwind`: a catching handler matched; lands in the `CatchingScope` owning ``target``.
- `RestartInvoked`: a handler invoked a restart; lands where the restart was established.
- `UnitAborted`: nothing handled a terminal condition; lands at the top-level unit.

All of them derive from `BaseException` (like `GeneratorExit` and `KeyboardInterrupt`) so
that ordinary ``except Exception`` clauses in user code cannot swallow them; ``finally``
clauses and context managers still run as the stack unwinds.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from condor.condition.model import Condition
    from condor.runtime.restarts import Restart
    from condor.runtime.stack import Handler, HandlerFrame


class ControlTransfer(BaseException):
    """Base class for the non-local exits of the condition system."""


class Unwind(ControlTransfer):
    """Unwind to the catching scope that owns ``target``.

    Attributes:
        target (HandlerFrame): Frame of the catching scope that will receive control.
        handler (Handler): The matching handler, selected before unwinding.
        condition (Condition): The condition being handled.
    """

    def __init__(self, target: HandlerFrame, handler: Handler, condition: Condition) -> None:
        super().__init__(f"condor: internal error: uncaught unwind for {condition!r}")
        self.target = target
        self.handler = handler
        self.condition = condition


class RestartInvoked(ControlTransfer):
    """Transfer control to the point where ``restart`` was established.

    Attributes:
        restart (Restart): The invoked restart.
        restart_args (tuple[Any, ...]): Positional arguments for the restart function.
        restart_kwargs (dict[str, Any]): Keyword arguments for the restart function.
    """

    def __init__(self, restart: Restart, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        super().__init__(f"condor: internal error: uncaught invocation of restart {restart.name!r}")
        self.restart = restart
        self.restart_args = args
        self.restart_kwargs = kwargs


class UnitAborted(ControlTransfer):
    """Abort the current top-level unit because ``condition`` was not handled.

    Outside any top-level unit this propagates to the caller, like `SystemExit`.

    Attributes:
        condition (Condition): The unhandled terminal condition.
    """

    def __init__(self, condition: Condition) -> None:
        super().__init__(f"{condition.kind.name}: {condition.message()}")
        self.condition = condition
