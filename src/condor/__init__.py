# topmark:header:start
#
#   project      : Condor
#   file         : __init__.py
#   file_relpath : src/condor/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Condor package.

Condor is a condition signaling runtime for Python: code signals errors, warnings,
messages and interrupts; dynamically scoped handlers either run in place (calling
handlers) or unwind to their scope (catching handlers); named restarts let a handler
pick how the signaling code recovers; and top-level units apply the default actions
(reports, deferred warning summaries, aborts) to what nobody handled.

The names re-exported here are the stable public API.
"""

from __future__ import annotations

from condor.condition import (
    CONDITION,
    ERROR,
    INTERRUPT,
    MESSAGE,
    WARNING,
    CallSite,
    Condition,
    ConditionType,
    Severity,
    capture_call_site,
)
from condor.config import Config, MutableConfig, WarningMode
from condor.constants import CONDOR_VERSION
from condor.core.errors import CondorError, ConfigError, ControlError
from condor.diagnostic import ConsoleSink, Diagnostic, DiagnosticLevel, MemorySink
from condor.runtime import (
    BatchReport,
    BatchRunner,
    CallingScope,
    CatchingScope,
    Restart,
    TopLevelUnit,
    TryFailure,
    UnitResult,
    UnitStatus,
    compute_restarts,
    current_config,
    find_restart,
    invoke_restart,
    last_warnings,
    muffle_message,
    muffle_warning,
    request_interrupt,
    safe_point,
    signal_condition,
    signal_error,
    signal_interrupt,
    signal_message,
    signal_warning,
    suppress_messages,
    suppress_warnings,
    try_,
    try_catch,
    use_config,
    use_sink,
    with_calling_handlers,
    with_restarts,
)

__version__: str = CONDOR_VERSION

__all__ = [
    "CONDITION",
    "ERROR",
    "INTERRUPT",
    "MESSAGE",
    "WARNING",
    "BatchReport",
    "BatchRunner",
    "CallSite",
    "CallingScope",
    "CatchingScope",
    "Condition",
    "ConditionType",
    "CondorError",
    "Config",
    "ConfigError",
    "ConsoleSink",
    "ControlError",
    "Diagnostic",
    "DiagnosticLevel",
    "MemorySink",
    "MutableConfig",
    "Restart",
    "Severity",
    "TopLevelUnit",
    "TryFailure",
    "UnitResult",
    "UnitStatus",
    "WarningMode",
    "__version__",
    "capture_call_site",
    "compute_restarts",
    "current_config",
    "find_restart",
    "invoke_restart",
    "last_warnings",
    "muffle_message",
    "muffle_warning",
    "request_interrupt",
    "safe_point",
    "signal_condition",
    "signal_error",
    "signal_interrupt",
    "signal_message",
    "signal_warning",
    "suppress_messages",
    "suppress_warnings",
    "try_",
    "try_catch",
    "use_config",
    "use_sink",
    "with_calling_handlers",
    "with_restarts",
]
