# topmark:header:start
#
#   project      : Condor
#   file         : conftest.py
#   file_relpath : tests/conftest.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Pytest configuration for the Condor test suite.

This file sets up global fixtures and customizes the logging configuration for test runs,
ensuring consistent and verbose logging output during testing.

Notes:
    Tests should respect the immutable/mutable configuration split:

    - Build configs using `condor.config.MutableConfig` (mutable), then `freeze()` into
      a `condor.config.Config` before activating them for a unit.
    - Do **not** mutate a frozen `Config`. If you need to tweak one, call
      `Config.thaw()`, edit the returned `MutableConfig`, then `freeze()` again.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any, TypeVar, cast

import pytest

from condor.config import MutableConfig, logging
from condor.diagnostic.sink import MemorySink
from condor.runtime.context import use_sink

if TYPE_CHECKING:
    from pathlib import Path

    from condor.config import Config

F = TypeVar("F", bound=Callable[..., object])

# This defines the type for the decorator function itself:
# It takes a Callable (F) and returns the same Callable (F).
DecoratorType = Callable[[F], F]


def as_typed_mark(mark: Any) -> DecoratorType[Any]:
    """Wrap a pytest mark so static type checkers preserve the function type.

    Args:
        mark (Any): A pytest mark decorator such as `pytest.mark.slow`.

    Returns:
        DecoratorType[Any]: A decorator that preserves the wrapped function's type.
    """

    def _decorator(func: F) -> F:
        return cast("F", mark(func))

    return _decorator


mark_runtime: DecoratorType[Any] = as_typed_mark(pytest.mark.runtime)
mark_cli: DecoratorType[Any] = as_typed_mark(pytest.mark.cli)
mark_config: DecoratorType[Any] = as_typed_mark(pytest.mark.config)
mark_slow: DecoratorType[Any] = as_typed_mark(pytest.mark.slow)
mark_hypothesis_slow: DecoratorType[Any] = as_typed_mark(pytest.mark.hypothesis_slow)


def parametrize(*args: Any, **kwargs: Any) -> Callable[[F], F]:
    """Typed wrapper for `pytest.mark.parametrize`.

    Args:
        *args (Any): Positional arguments forwarded to `pytest.mark.parametrize`.
        **kwargs (Any): Keyword arguments forwarded to `pytest.mark.parametrize`.

    Returns:
        Callable[[F], F]: A decorator that preserves the wrapped function's type.
    """
    mark: pytest.MarkDecorator = pytest.mark.parametrize(*args, **kwargs)
    return as_typed_mark(mark)


def hookimpl(*args: Any, **kwargs: Any) -> Callable[[F], F]:
    """Typed wrapper for `pytest.hookimpl`.

    Args:
        *args (Any): Positional arguments forwarded to `pytest.hookimpl`.
        **kwargs (Any): Keyword arguments forwarded to `pytest.hookimpl`.

    Returns:
        Callable[[F], F]: A decorator that preserves the wrapped function's type.
    """
    return as_typed_mark(pytest.hookimpl(*args, **kwargs))


def fixture(*args: Any, **kwargs: Any) -> Callable[[F], F]:
    """Typed wrapper for `pytest.fixture`.

    Args:
        *args (Any): Positional arguments forwarded to `pytest.fixture`.
        **kwargs (Any): Keyword arguments forwarded to `pytest.fixture`.

    Returns:
        Callable[[F], F]: A decorator that preserves the wrapped function's type.
    """
    return as_typed_mark(pytest.fixture(*args, **kwargs))


@pytest.fixture(autouse=True)
def clean_condor_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure the developer's environment does not leak into the tests.

    ``CONDOR_LOG_LEVEL`` would force DEBUG/TRACE noise, ``CONDOR_WARNING_MODE`` would
    change the default warning behavior, and ``FORCE_COLOR``/``NO_COLOR`` would change
    color detection.

    Args:
        monkeypatch (pytest.MonkeyPatch): Pytest monkeypatch fixture used to manipulate
            environment variables.
    """
    for name in ("CONDOR_LOG_LEVEL", "CONDOR_WARNING_MODE", "FORCE_COLOR", "NO_COLOR"):
        monkeypatch.delenv(name, raising=False)


@hookimpl(tryfirst=True)
def pytest_configure(config: pytest.Config) -> None:  # pylint: disable=unused-argument
    """Configure pytest settings and customize logging for the test suite.

    This function sets the logging level to TRACE for all tests, ensuring detailed output
    is captured during test execution.

    Args:
        config (pytest.Config): The pytest configuration object.
    """
    logging.setup_logging(level=logging.TRACE_LEVEL)


@fixture()
def sink() -> Iterator[MemorySink]:
    """Activate a fresh `MemorySink` for code running outside a unit.

    Yields:
        MemorySink: The active sink.
    """
    memory = MemorySink()
    with use_sink(memory):
        yield memory


def make_config(**overrides: Any) -> Config:
    """Return a frozen `Config` built from defaults and overrides.

    Args:
        **overrides (Any): Values keyed by `condor.config.keys.Args` names.

    Returns:
        Config: The frozen configuration.
    """
    return MutableConfig.from_defaults().apply_args(overrides).freeze()


def write_toml(path: Path, text: str) -> Path:
    """Write a TOML document and return its path."""
    path.write_text(text, encoding="utf-8")
    return path
