# topmark:header:start
#
#   project      : Condor
#   file         : unit.py
#   file_relpath : src/condor/runtime/unit.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Top-level units and the batch runner.

A `TopLevelUnit` is the outermost boundary of one evaluation (one statement of a script,
one request, one job). It:

- activates its config and diagnostic sink for the dynamic extent of the evaluation;
- starts from an empty handler stack and restart registry, so handlers installed by
  the caller never see the unit's conditions;
- converts native exceptions escaping the body into error conditions;
- absorbs `UnitAborted` and returns a `UnitResult` instead of raising;
- owns the deferred warning batch and flushes its summary when the unit ends;
- owns a queue of pending interrupts, delivered at safe points.

`BatchRunner` runs a sequence of units, optionally stopping at the first failure.
"""

from __future__ import annotations

import ast
from collections import deque
from collections.abc import Callable, Iterable
from contextlib import ExitStack
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from types import TracebackType
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from condor.condition.model import Condition, Severity
from condor.config.logging import get_logger
from condor.core.enum_mixins import KeyedStrEnum
from condor.core.errors import ControlError
from condor.diagnostic.model import DiagnosticLevel, DiagnosticLog, FrozenDiagnosticLog
from condor.runtime.context import (
    current_config,
    current_unit,
    enter_unit,
    exit_unit,
    use_config,
    use_sink,
)
from condor.runtime.control import UnitAborted
from condor.runtime.defaults import WarningBatch, top_level_defaults
from condor.runtime.restarts import restart_registry
from condor.runtime.signals import signal_interrupt, signal_native
from condor.runtime.stack import handler_stack

if TYPE_CHECKING:
    from condor.config.logging import CondorLogger
    from condor.config.model import Config
    from condor.diagnostic.sink import DiagnosticSink

logger: CondorLogger = get_logger(__name__)

T = TypeVar("T")

_last_warnings: ContextVar[tuple[Condition, ...]] = ContextVar("condor.last_warnings", default=())


class UnitStatus(KeyedStrEnum):
    """How a top-level unit ended."""

    OK = ("ok", "Completed")
    FAILED = ("failed", "Aborted by an unhandled error")
    INTERRUPTED = ("interrupted", "Aborted by an interrupt")


@dataclass(frozen=True)
class UnitResult(Generic[T]):
    """Outcome of a top-level unit.

    Attributes:
        status (UnitStatus): How the unit ended.
        value (T | None): The body's value (None unless ``status`` is OK).
        condition (Condition | None): The condition that aborted the unit.
        warnings (tuple[Condition, ...]): Deferred warnings kept in the unit's batch.
        diagnostics (FrozenDiagnosticLog): Reports written during the unit.
        name (str): The unit's name.
    """

    status: UnitStatus
    value: T | None = None
    condition: Condition | None = None
    warnings: tuple[Condition, ...] = ()
    diagnostics: FrozenDiagnosticLog = field(default_factory=FrozenDiagnosticLog)
    name: str = ""

    @property
    def ok(self) -> bool:
        """Return True if the unit completed."""
        return self.status is UnitStatus.OK


class TopLevelUnit:
    """One top-level evaluation.

    Use `run` for a callable, or the unit as a context manager::

        with TopLevelUnit(name="job") as unit:
            work()
        print(unit.result.status)

    A unit object can be entered only once.

    Args:
        config (Config | None): Config activated for the unit (defaults to the config
            active when the unit is entered).
        sink (DiagnosticSink | None): Sink activated for the unit (defaults to the
            active sink).
        name (str): Name used in logs and results.
    """

    def __init__(
        self,
        *,
        config: Config | None = None,
        sink: DiagnosticSink | None = None,
        name: str = "",
    ) -> None:
        self.config: Config | None = config
        self.sink: DiagnosticSink | None = sink
        self.name: str = name
        self.warnings: WarningBatch = WarningBatch(capacity=0)
        self.diagnostics: DiagnosticLog = DiagnosticLog()
        self.result: UnitResult[Any] | None = None
        self._value: Any = None
        # Lock-free: deque.append and deque.popleft are atomic.
        self._pending: deque[Condition] = deque()
        self._exit_stack: ExitStack | None = None
        self._unit_token: Token[TopLevelUnit | None] | None = None
        self._entered: bool = False

    # --- Interrupts ---

    def request_interrupt(self, message: str = "interrupted") -> None:
        """Queue an interrupt for delivery at the unit's next safe point.

        Never blocks, so it is safe to call from any thread and from a signal handler
        that runs on the unit's own thread. Nothing is logged here; delivery logs.
        """
        self._pending.append(Condition.create(Severity.INTERRUPT, message))

    @property
    def interrupt_pending(self) -> bool:
        """Return True if an interrupt waits for delivery."""
        return bool(self._pending)

    def deliver_interrupts(self) -> None:
        """Signal the oldest pending interrupt, if any.

        Raises:
            UnitAborted: When the interrupt is not handled.
        """
        try:
            condition: Condition = self._pending.popleft()
        except IndexError:
            return
        logger.debug("delivering interrupt to unit %r", self.name)
        signal_interrupt(condition)

    # --- Execution ---

    def run(self, body: Callable[..., T], *args: Any, **kwargs: Any) -> UnitResult[T]:
        """Run ``body(*args, **kwargs)`` as this unit and return its result."""
        with self:
            self._value = body(*args, **kwargs)
        assert self.result is not None
        return self.result

    def __enter__(self) -> TopLevelUnit:
        if self._entered:
            raise ControlError(f"Top-level unit {self.name!r} was already entered")
        self._entered = True
        config: Config = self.config if self.config is not None else current_config()
        self.config = config
        self.warnings = WarningBatch(capacity=config.max_deferred_warnings)

        stack = ExitStack()
        stack.enter_context(use_config(config))
        if self.sink is not None:
            stack.enter_context(use_sink(self.sink))
        stack.enter_context(handler_stack.replaced(()))
        stack.enter_context(restart_registry.replaced(()))
        self._exit_stack = stack
        self._unit_token = enter_unit(self)
        logger.debug("unit %r started", self.name)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        status: UnitStatus = UnitStatus.OK
        condition: Condition | None = None
        suppress: bool = False
        try:
            if isinstance(exc, UnitAborted):
                condition, suppress = exc.condition, True
            elif isinstance(exc, (Exception, KeyboardInterrupt)):
                try:
                    signal_native(exc)
                except UnitAborted as aborted:
                    condition, suppress = aborted.condition, True
            elif exc is not None:
                # SystemExit, GeneratorExit and friends leave the unit untouched.
                logger.debug("unit %r left by %s", self.name, type(exc).__name__)

            if condition is not None:
                status = (
                    UnitStatus.INTERRUPTED
                    if condition.severity() is Severity.INTERRUPT
                    else UnitStatus.FAILED
                )
                self._value = None
            self._flush_warnings(in_addition=condition is not None)
        finally:
            if self._unit_token is not None:
                exit_unit(self._unit_token)
            if self._exit_stack is not None:
                self._exit_stack.close()
            dropped: int = 0
            while True:
                try:
                    self._pending.popleft()
                except IndexError:
                    break
                dropped += 1
            if dropped:
                logger.debug("unit %r dropped %d pending interrupt(s)", self.name, dropped)

        warnings: tuple[Condition, ...] = tuple(self.warnings)
        _last_warnings.set(warnings)
        self.result = UnitResult(
            status=status,
            value=self._value,
            condition=condition,
            warnings=warnings,
            diagnostics=self.diagnostics.freeze(),
            name=self.name,
        )
        logger.debug("unit %r finished: %s", self.name, status.key)
        return suppress

    def _flush_warnings(self, *, in_addition: bool) -> None:
        assert self.config is not None
        text: str | None = self.warnings.summary(
            show_call_site=self.config.show_call_site, in_addition=in_addition
        )
        if text is not None:
            top_level_defaults.report(DiagnosticLevel.for_severity(Severity.WARNING), text)


def safe_point() -> None:
    """Deliver a pending interrupt of the current unit, if any.

    Long-running code should call this regularly; outside a unit it does nothing.
    """
    unit: TopLevelUnit | None = current_unit()
    if unit is not None:
        unit.deliver_interrupts()


def request_interrupt(message: str = "interrupted") -> None:
    """Queue an interrupt for the current unit (see `TopLevelUnit.request_interrupt`).

    Raises:
        ControlError: Outside a top-level unit.
    """
    unit: TopLevelUnit | None = current_unit()
    if unit is None:
        raise ControlError("No active top-level unit to interrupt")
    unit.request_interrupt(message)


def last_warnings() -> tuple[Condition, ...]:
    """Return the deferred warnings of the most recently finished unit in this context."""
    return _last_warnings.get()


# ------------------ Batch runner ------------------


@dataclass(frozen=True)
class BatchReport:
    """Results of a batch of units, in execution order."""

    results: tuple[UnitResult[Any], ...] = ()

    @property
    def ok(self) -> bool:
        """Return True if every unit completed."""
        return all(r.ok for r in self.results)

    @property
    def failed(self) -> tuple[UnitResult[Any], ...]:
        """Return the units aborted by an error."""
        return tuple(r for r in self.results if r.status is UnitStatus.FAILED)

    @property
    def interrupted(self) -> bool:
        """Return True if a unit was aborted by an interrupt."""
        return any(r.status is UnitStatus.INTERRUPTED for r in self.results)


class BatchRunner:
    """Run a sequence of top-level units.

    Args:
        config (Config | None): Config for every unit (defaults to the active config).
        sink (DiagnosticSink | None): Sink for every unit (defaults to the active sink).
        stop_on_error (bool): Stop after the first unit that did not complete. Interrupts
            always stop the batch.
    """

    def __init__(
        self,
        *,
        config: Config | None = None,
        sink: DiagnosticSink | None = None,
        stop_on_error: bool = False,
    ) -> None:
        self.config = config
        self.sink = sink
        self.stop_on_error = stop_on_error

    def run(
        self, bodies: Iterable[Callable[[], Any]], *, names: Iterable[str] | None = None
    ) -> BatchReport:
        """Run each callable as its own unit."""
        name_list: list[str] = list(names) if names is not None else []
        results: list[UnitResult[Any]] = []
        for index, body in enumerate(bodies):
            name: str = name_list[index] if index < len(name_list) else f"unit {index + 1}"
            result: UnitResult[Any] = TopLevelUnit(
                config=self.config, sink=self.sink, name=name
            ).run(body)
            results.append(result)
            if result.status is UnitStatus.INTERRUPTED:
                logger.info("batch interrupted at %s", name)
                break
            if self.stop_on_error and not result.ok:
                logger.info("batch stopped at %s", name)
                break
        return BatchReport(tuple(results))

    def run_source(
        self,
        source: str,
        filename: str = "<string>",
        namespace: dict[str, Any] | None = None,
    ) -> BatchReport:
        """Run each top-level statement of Python ``source`` as its own unit.

        Statements share one namespace, like the lines of an interactive session.

        Raises:
            SyntaxError: If ``source`` does not parse.
        """
        tree: ast.Module = ast.parse(source, filename=filename)
        env: dict[str, Any] = (
            namespace if namespace is not None else {"__name__": "__main__", "__file__": filename}
        )
        bodies: list[Callable[[], Any]] = []
        names: list[str] = []
        for node in tree.body:
            code = compile(ast.Module(body=[node], type_ignores=[]), filename, "exec")
            bodies.append(_statement_runner(code, env))
            names.append(f"{filename}:{node.lineno}")
        logger.debug("running %d statement(s) from %s", len(bodies), filename)
        return self.run(bodies, names=names)


def _statement_runner(code: Any, env: dict[str, Any]) -> Callable[[], None]:
    def run_statement() -> None:
        exec(code, env)  # noqa: S102

    return run_statement
