# topmark:header:start
#
#   project      : Condor
#   file         : __init__.py
#   file_relpath : src/condor/runtime/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""The condition runtime: handler scopes, signaling primitives, restarts and units.

State (handler stack, restart registry, active unit, config and sink) is context-local:
each thread and each asyncio task has its own.
"""

from __future__ import annotations

from condor.runtime.context import current_config, current_sink, use_config, use_sink
from condor.runtime.control import ControlTransfer, RestartInvoked, UnitAborted, Unwind
from condor.runtime.defaults import TopLevelDefaults, WarningBatch, top_level_defaults
from condor.runtime.dispatch import Dispatcher
from condor.runtime.helpers import TryFailure, suppress_messages, suppress_warnings, try_
from condor.runtime.restarts import (
    Restart,
    compute_restarts,
    find_restart,
    invoke_restart,
    muffle_message,
    muffle_message_handler,
    muffle_warning,
    muffle_warning_handler,
    with_restarts,
)
from condor.runtime.scopes import CallingScope, CatchingScope, try_catch, with_calling_handlers
from condor.runtime.signals import (
    signal_condition,
    signal_error,
    signal_interrupt,
    signal_message,
    signal_warning,
)
from condor.runtime.stack import Handler, HandlerFrame, HandlerMode, HandlerStack
from condor.runtime.unit import (
    BatchReport,
    BatchRunner,
    TopLevelUnit,
    UnitResult,
    UnitStatus,
    last_warnings,
    request_interrupt,
    safe_point,
)

__all__ = [
    "BatchReport",
    "BatchRunner",
    "CallingScope",
    "CatchingScope",
    "ControlTransfer",
    "Dispatcher",
    "Handler",
    "HandlerFrame",
    "HandlerMode",
    "HandlerStack",
    "Restart",
    "RestartInvoked",
    "TopLevelDefaults",
    "TopLevelUnit",
    "TryFailure",
    "UnitAborted",
    "UnitResult",
    "UnitStatus",
    "Unwind",
    "WarningBatch",
    "compute_restarts",
    "current_config",
    "current_sink",
    "find_restart",
    "invoke_restart",
    "last_warnings",
    "muffle_message",
    "muffle_message_handler",
    "muffle_warning",
    "muffle_warning_handler",
    "request_interrupt",
    "safe_point",
    "signal_condition",
    "signal_error",
    "signal_interrupt",
    "signal_message",
    "signal_warning",
    "suppress_messages",
    "suppress_warnings",
    "top_level_defaults",
    "try_",
    "try_catch",
    "use_config",
    "use_sink",
    "with_calling_handlers",
    "with_restarts",
]
