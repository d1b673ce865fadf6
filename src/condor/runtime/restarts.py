# topmark:header:start
#
#   project      : Condor
#   file         : restarts.py
#   file_relpath : src/condor/runtime/restarts.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Restarts: named recovery points that handlers can transfer control to.

A restart is established by the code that knows *how* to recover (`with_restarts`), and
invoked by a handler that knows *whether* to recover (`invoke_restart`). Invoking a
restart unwinds to its establishment point, runs the restart function there, and makes
its result the value of the `with_restarts` call.

Like the handler stack, the registry is a context-local tuple, so restarts established
in one thread or asyncio task are invisible to the others.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, NoReturn

from condor.config.logging import get_logger
from condor.constants import RESTART_MUFFLE_MESSAGE, RESTART_MUFFLE_WARNING
from condor.core.errors import ControlError
from condor.runtime.control import RestartInvoked

if TYPE_CHECKING:
    from condor.condition.model import Condition
    from condor.config.logging import CondorLogger

logger: CondorLogger = get_logger(__name__)


def _no_op(*_args: Any, **_kwargs: Any) -> None:
    return None


@dataclass(frozen=True, slots=True, eq=False)
class Restart:
    """A named recovery point.

    Restarts compare by identity: two nested restarts with the same name are distinct,
    and the innermost one shadows the other in `find_restart`.

    Attributes:
        name (str): Name used by `invoke_restart` and `find_restart`.
        function (Callable[..., Any]): Runs at the establishment point on invocation.
        description (str): Optional human-readable description.
    """

    name: str
    function: Callable[..., Any] = _no_op
    description: str = ""

    def invoke(self, *args: Any, **kwargs: Any) -> NoReturn:
        """Invoke this exact restart (see `invoke_restart`)."""
        invoke_restart(self, *args, **kwargs)

    def __str__(self) -> str:
        return self.description or self.name


class RestartRegistry:
    """Context-local registry of the currently established restarts."""

    def __init__(self, name: str = "condor.restarts") -> None:
        self._restarts: ContextVar[tuple[Restart, ...]] = ContextVar(name, default=())

    def available(self) -> tuple[Restart, ...]:
        """Return the established restarts, innermost first."""
        return tuple(reversed(self._restarts.get()))

    def find(self, name: str) -> Restart | None:
        """Return the innermost established restart called ``name``."""
        for restart in reversed(self._restarts.get()):
            if restart.name == name:
                return restart
        return None

    def is_active(self, restart: Restart) -> bool:
        """Return True if ``restart`` is currently established."""
        return any(r is restart for r in self._restarts.get())

    @contextmanager
    def established(self, restarts: Iterable[Restart]) -> Iterator[tuple[Restart, ...]]:
        """Establish ``restarts`` for the dynamic extent of the ``with`` block."""
        added: tuple[Restart, ...] = tuple(restarts)
        token: Token[tuple[Restart, ...]] = self._restarts.set((*self._restarts.get(), *added))
        logger.trace("establish restarts: %s", ", ".join(r.name for r in added))
        try:
            yield added
        finally:
            self._restarts.reset(token)

    @contextmanager
    def replaced(self, restarts: tuple[Restart, ...]) -> Iterator[None]:
        """Make ``restarts`` the visible registry for the dynamic extent of the block."""
        token: Token[tuple[Restart, ...]] = self._restarts.set(restarts)
        try:
            yield
        finally:
            self._restarts.reset(token)


restart_registry: RestartRegistry = RestartRegistry()


def with_restarts(body: Callable[[], Any], **restarts: Callable[..., Any]) -> Any:
    """Run ``body`` with the given named restarts established.

    Args:
        body (Callable[[], Any]): The protected computation.
        **restarts (Callable[..., Any]): Restart functions keyed by restart name.

    Returns:
        Any: The value of ``body()``, or, if one of these restarts is invoked while
            ``body`` runs, the value returned by the restart function (called with the
            invocation's arguments after the restarts have been torn down).
    """
    established: tuple[Restart, ...] = tuple(Restart(name, fn) for name, fn in restarts.items())
    with restart_registry.established(established):
        try:
            return body()
        except RestartInvoked as invocation:
            if not any(invocation.restart is r for r in established):
                raise
            invoked: RestartInvoked = invocation
    logger.debug("restart %r invoked", invoked.restart.name)
    return invoked.restart.function(*invoked.restart_args, **invoked.restart_kwargs)


def invoke_restart(restart: str | Restart, *args: Any, **kwargs: Any) -> NoReturn:
    """Transfer control to an established restart.

    Args:
        restart (str | Restart): A restart name (the innermost restart with that name
            is used) or a `Restart` object.
        *args (Any): Positional arguments for the restart function.
        **kwargs (Any): Keyword arguments for the restart function.

    Raises:
        ControlError: If no such restart is currently established.
    """
    target: Restart | None
    if isinstance(restart, Restart):
        target = restart if restart_registry.is_active(restart) else None
    else:
        target = restart_registry.find(restart)
    if target is None:
        name: str = restart.name if isinstance(restart, Restart) else restart
        raise ControlError(f"No restart {name!r} is active")
    logger.debug("invoking restart %r", target.name)
    raise RestartInvoked(target, args, kwargs)


def find_restart(name: str) -> Restart | None:
    """Return the innermost established restart called ``name``, if any."""
    return restart_registry.find(name)


def compute_restarts() -> tuple[Restart, ...]:
    """Return all currently established restarts, innermost first."""
    return restart_registry.available()


def muffle_warning() -> NoReturn:
    """Invoke the ``muffle-warning`` restart, silencing the warning being handled.

    Raises:
        ControlError: Outside the dynamic extent of a warning signal.
    """
    invoke_restart(RESTART_MUFFLE_WARNING)


def muffle_message() -> NoReturn:
    """Invoke the ``muffle-message`` restart, silencing the message being handled.

    Raises:
        ControlError: Outside the dynamic extent of a message signal.
    """
    invoke_restart(RESTART_MUFFLE_MESSAGE)


def muffle_warning_handler(condition: Condition) -> NoReturn:
    """Calling handler that muffles every warning it receives."""
    muffle_warning()


def muffle_message_handler(condition: Condition) -> NoReturn:
    """Calling handler that muffles every message it receives."""
    muffle_message()
