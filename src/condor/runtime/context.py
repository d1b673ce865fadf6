# topmark:header:start
#
#   project      : Condor
#   file         : context.py
#   file_relpath : src/condor/runtime/context.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Context-local runtime settings: active config, diagnostic sink and top-level unit.

All three live in `contextvars.ContextVar` slots, so every thread and every asyncio task
sees its own values; a task inherits the values active when it was created.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import TYPE_CHECKING

from condor.config.model import Config, MutableConfig
from condor.diagnostic.sink import ConsoleSink

if TYPE_CHECKING:
    from condor.diagnostic.sink import DiagnosticSink
    from condor.runtime.unit import TopLevelUnit

_active_config: ContextVar[Config | None] = ContextVar("condor.config", default=None)
_active_sink: ContextVar[DiagnosticSink | None] = ContextVar("condor.sink", default=None)
_active_unit: ContextVar[TopLevelUnit | None] = ContextVar("condor.unit", default=None)


def current_config() -> Config:
    """Return the active config.

    Outside `use_config`, this is the built-in defaults with environment overrides
    applied (re-read on every call).
    """
    config: Config | None = _active_config.get()
    if config is not None:
        return config
    return MutableConfig.from_defaults().apply_env(os.environ).freeze()


@contextmanager
def use_config(config: Config) -> Iterator[Config]:
    """Activate ``config`` for the dynamic extent of the ``with`` block."""
    token: Token[Config | None] = _active_config.set(config)
    try:
        yield config
    finally:
        _active_config.reset(token)


def current_sink() -> DiagnosticSink:
    """Return the active diagnostic sink (a stderr `ConsoleSink` by default)."""
    sink: DiagnosticSink | None = _active_sink.get()
    if sink is not None:
        return sink
    color: bool | None = current_config().color
    return ConsoleSink(enable_color=sys.stderr.isatty() if color is None else color)


@contextmanager
def use_sink(sink: DiagnosticSink) -> Iterator[DiagnosticSink]:
    """Activate ``sink`` for the dynamic extent of the ``with`` block."""
    token: Token[DiagnosticSink | None] = _active_sink.set(sink)
    try:
        yield sink
    finally:
        _active_sink.reset(token)


def current_unit() -> TopLevelUnit | None:
    """Return the innermost active top-level unit, if any."""
    return _active_unit.get()


def enter_unit(unit: TopLevelUnit) -> Token[TopLevelUnit | None]:
    """Make ``unit`` the active unit; pair with `exit_unit`."""
    return _active_unit.set(unit)


def exit_unit(token: Token[TopLevelUnit | None]) -> None:
    """Restore the unit that was active before `enter_unit`."""
    _active_unit.reset(token)
