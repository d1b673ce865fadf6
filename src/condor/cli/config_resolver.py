# topmark:header:start
#
#   project      : Condor
#   file         : config_resolver.py
#   file_relpath : src/condor/cli/config_resolver.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Resolve the effective Condor configuration from Click parameters.

Resolution order (lowest to highest precedence):
  1. Built-in defaults.
  2. Discovered project configs (root-most first), unless ``--no-config`` is set.
  3. Explicit config files passed via ``--config``, merged in order.
  4. The ``CONDOR_WARNING_MODE`` environment variable.
  5. CLI overrides (flags/args), applied last.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from condor.cli.errors import CondorConfigError, CondorFileNotFoundError
from condor.config import MutableConfig
from condor.config.keys import Args
from condor.config.logging import get_logger
from condor.core.errors import ConfigError
from condor.diagnostic.model import DiagnosticLevel, compute_diagnostic_stats

if TYPE_CHECKING:
    import click

    from condor.cli.console import ConsoleLike
    from condor.config import Config
    from condor.config.logging import CondorLogger
    from condor.config.types import ArgsLike
    from condor.diagnostic.model import DiagnosticStats

logger: CondorLogger = get_logger(__name__)


def resolve_config_from_click(
    *,
    start: Path | None,
    no_config: bool,
    config_paths: list[str],
    overrides: ArgsLike,
) -> Config:
    """Build a frozen `Config` from Click parameters.

    Args:
        start (Path | None): Where config discovery starts (the script's directory, or
            the current working directory).
        no_config (bool): Skip discovery of local config files.
        config_paths (list[str]): Explicit config files, merged in order.
        overrides (ArgsLike): CLI overrides keyed by `Args` names (None = unset).

    Returns:
        Config: The effective configuration.

    Raises:
        CondorFileNotFoundError: If an explicit config file does not exist.
        CondorConfigError: If a config file is unreadable or invalid, or an override
            value is invalid.
    """
    extra_files: list[Path] = []
    for raw in config_paths:
        path = Path(raw)
        if not path.is_file():
            raise CondorFileNotFoundError(f"Config file not found: {raw}")
        extra_files.append(path)

    try:
        draft: MutableConfig = MutableConfig.load_merged(
            start=start, extra_files=extra_files, discover=not no_config
        )
        draft.apply_args(overrides)
    except OSError as exc:
        raise CondorConfigError(f"Cannot read config file: {exc}") from exc
    except (ConfigError, ValueError) as exc:
        raise CondorConfigError(str(exc)) from exc

    config: Config = draft.freeze()
    logger.debug(
        "effective config: %s=%s (from %s)",
        Args.WARNING_MODE,
        config.warning_mode.key,
        ", ".join(config.config_files) or "defaults",
    )
    return config


def render_config_diagnostics(*, ctx: click.Context, config: Config) -> None:
    """Report the warnings recorded while loading the config on stderr.

    At verbosity WARNING or lower a single triage line is written; with ``-v`` and
    above, one line per diagnostic follows.
    """
    if not len(config.diagnostics):
        return
    console: ConsoleLike = ctx.obj["console"]
    stats: DiagnosticStats = compute_diagnostic_stats(config.diagnostics)
    n_warn: int = stats.n_warning + stats.n_error
    console.error(
        console.styled(
            f"Config: {n_warn} problem" + ("s" if n_warn != 1 else "") + " found",
            fg="yellow",
        )
    )
    if ctx.obj.get("verbose", 0) > 0:
        for diagnostic in config.diagnostics:
            if diagnostic.level is not DiagnosticLevel.MESSAGE:
                console.error(f"- {diagnostic.level.value}: {diagnostic.text}")
