# topmark:header:start
#
#   project      : Condor
#   file         : model.py
#   file_relpath : src/condor/config/model.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Configuration model and merge policy.

This module defines:
    - `Config`: an immutable runtime snapshot read by the top-level defaults.
    - `MutableConfig`: a mutable builder used during discovery/merge; it
      can be frozen into `Config` and thawed back for edits.

Precedence (lowest to highest):
    1. built-in defaults,
    2. discovered files, root-most first (within a directory ``pyproject.toml``
       ``[tool.condor]`` then ``condor.toml``),
    3. explicit config files, in the order given,
    4. the ``CONDOR_WARNING_MODE`` environment variable,
    5. CLI/API arguments.

Invalid values in files or the environment never abort loading: they are recorded as
warnings in the builder's `DiagnosticLog` and the lower-precedence value is kept.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from condor.config.io import (
    check_unknown_keys,
    extract_condor_table,
    get_bool_value_or_none,
    get_int_value_or_none,
    get_string_value_or_none,
    get_table_value,
    load_defaults_dict,
    load_toml_dict,
)
from condor.config.keys import Args, Toml
from condor.config.logging import get_logger
from condor.config.types import WarningMode
from condor.constants import (
    CONDOR_TOML_NAME,
    DEFAULT_MAX_DEFERRED_WARNINGS,
    ENV_WARNING_MODE,
    PYPROJECT_TOML_NAME,
)
from condor.core.errors import ConfigError
from condor.diagnostic.model import DiagnosticLog, FrozenDiagnosticLog

if TYPE_CHECKING:
    from condor.config.io import TomlTable
    from condor.config.logging import CondorLogger
    from condor.config.types import ArgsLike

logger: CondorLogger = get_logger(__name__)


# ------------------ Immutable runtime config ------------------


@dataclass(frozen=True, slots=True)
class Config:
    """Immutable runtime configuration for Condor.

    Attributes:
        warning_mode (WarningMode): Default behavior for unhandled warnings.
        max_deferred_warnings (int): Capacity of a unit's deferred warning batch.
        show_call_site (bool): Whether reports mention the call site (``Error in f():``).
        color (bool | None): Force colored reports on/off; None = auto-detect.
        config_files (tuple[str, ...]): Config sources that contributed to this snapshot.
        diagnostics (FrozenDiagnosticLog): Warnings recorded while loading the config.
    """

    warning_mode: WarningMode = WarningMode.DEFERRED
    max_deferred_warnings: int = DEFAULT_MAX_DEFERRED_WARNINGS
    show_call_site: bool = True
    color: bool | None = None
    config_files: tuple[str, ...] = ()
    diagnostics: FrozenDiagnosticLog = field(default_factory=FrozenDiagnosticLog)

    @classmethod
    def from_defaults(cls) -> Config:
        """Return the frozen built-in defaults."""
        return MutableConfig.from_defaults().freeze()

    def thaw(self) -> MutableConfig:
        """Return a mutable copy of this snapshot."""
        return MutableConfig(
            warning_mode=self.warning_mode,
            max_deferred_warnings=self.max_deferred_warnings,
            show_call_site=self.show_call_site,
            color=self.color,
            config_files=list(self.config_files),
            diagnostics=DiagnosticLog(items=list(self.diagnostics)),
        )

    def to_toml_dict(self) -> TomlTable:
        """Return this snapshot as a TOML-compatible mapping."""
        return {
            Toml.SECTION_RUNTIME: {
                Toml.KEY_WARNING_MODE: self.warning_mode.key,
                Toml.KEY_MAX_DEFERRED_WARNINGS: self.max_deferred_warnings,
                Toml.KEY_SHOW_CALL_SITE: self.show_call_site,
            },
            Toml.SECTION_OUTPUT: {
                Toml.KEY_COLOR: self.color,
            },
        }


# ------------------ Mutable builder ------------------


@dataclass
class MutableConfig:
    """Mutable configuration builder.

    ``None`` means "not set at this layer"; `merge_with` lets set values of the
    higher-precedence layer win, and `freeze` fills unset values with defaults.
    """

    warning_mode: WarningMode | None = None
    max_deferred_warnings: int | None = None
    show_call_site: bool | None = None
    color: bool | None = None
    config_files: list[str] = field(default_factory=lambda: [])
    diagnostics: DiagnosticLog = field(default_factory=DiagnosticLog)

    def freeze(self) -> Config:
        """Return an immutable `Config` snapshot of this builder."""
        return Config(
            warning_mode=self.warning_mode or WarningMode.DEFERRED,
            max_deferred_warnings=(
                DEFAULT_MAX_DEFERRED_WARNINGS
                if self.max_deferred_warnings is None
                else self.max_deferred_warnings
            ),
            show_call_site=True if self.show_call_site is None else self.show_call_site,
            color=self.color,
            config_files=tuple(self.config_files),
            diagnostics=self.diagnostics.freeze(),
        )

    @classmethod
    def from_defaults(cls) -> MutableConfig:
        """Return a builder holding the built-in defaults."""
        return cls.from_toml_dict(load_defaults_dict())

    @classmethod
    def from_toml_dict(cls, data: TomlTable, config_file: Path | None = None) -> MutableConfig:
        """Create a builder from a parsed Condor table.

        Args:
            data (TomlTable): The Condor table (``condor.toml`` contents or
                ``[tool.condor]``).
            config_file (Path | None): Source file, recorded in ``config_files``.

        Returns:
            MutableConfig: The resulting builder; invalid values are reported in its
                ``diagnostics`` and left unset.
        """
        draft = cls()
        where: str = f"{config_file}: " if config_file else ""
        if config_file is not None:
            draft.config_files.append(str(config_file))

        check_unknown_keys(
            data,
            Toml.ALLOWED_TOP_LEVEL_KEYS,
            Toml.ALLOWED_SECTION_KEYS,
            diagnostics=draft.diagnostics,
        )

        runtime_tbl: TomlTable = get_table_value(data, Toml.SECTION_RUNTIME)
        logger.trace("TOML [runtime]: %s", runtime_tbl)
        output_tbl: TomlTable = get_table_value(data, Toml.SECTION_OUTPUT)
        logger.trace("TOML [output]: %s", output_tbl)

        raw_mode: str | None = get_string_value_or_none(
            runtime_tbl, Toml.KEY_WARNING_MODE, diagnostics=draft.diagnostics, where=where
        )
        if raw_mode is not None:
            draft.warning_mode = draft._parse_warning_mode(raw_mode, origin=where)

        draft.max_deferred_warnings = get_int_value_or_none(
            runtime_tbl,
            Toml.KEY_MAX_DEFERRED_WARNINGS,
            diagnostics=draft.diagnostics,
            where=where,
            minimum=0,
        )
        draft.show_call_site = get_bool_value_or_none(
            runtime_tbl, Toml.KEY_SHOW_CALL_SITE, diagnostics=draft.diagnostics, where=where
        )
        draft.color = get_bool_value_or_none(
            output_tbl, Toml.KEY_COLOR, diagnostics=draft.diagnostics, where=where
        )
        return draft

    @classmethod
    def from_toml_file(cls, path: Path) -> MutableConfig | None:
        """Load a builder from a TOML file.

        Returns:
            MutableConfig | None: The builder, or None for a ``pyproject.toml`` without a
                ``[tool.condor]`` table.

        Raises:
            OSError: If the file cannot be read.
            ValueError: If the file is not valid TOML.
        """
        data: TomlTable = load_toml_dict(path)
        table: TomlTable | None = extract_condor_table(data, path)
        if table is None:
            logger.debug("No [tool.condor] table in %s", path)
            return None
        return cls.from_toml_dict(table, config_file=path)

    @classmethod
    def discover_local_config_files(cls, start: Path) -> list[Path]:
        """Discover config files from ``start`` up to the filesystem root.

        Traversal stops after a directory whose config declares ``root = true``.

        Returns:
            list[Path]: Config files ordered root-most first; within a directory
                ``pyproject.toml`` comes before ``condor.toml``.
        """
        per_dir: list[list[Path]] = []
        cur: Path = start.resolve()
        if cur.is_file():
            cur = cur.parent

        while True:
            stop_here = False
            dir_entries: list[Path] = []
            for name in (PYPROJECT_TOML_NAME, CONDOR_TOML_NAME):
                p: Path = cur / name
                if not p.is_file():
                    continue
                try:
                    table: TomlTable | None = extract_condor_table(load_toml_dict(p), p)
                except (OSError, ValueError) as e:
                    # Best-effort discovery; unreadable files are skipped here.
                    logger.debug("Ignoring unreadable config %s: %s", p, e)
                    continue
                if table is None:
                    continue
                dir_entries.append(p)
                logger.debug("Discovered config file: %s", p)
                if bool(table.get(Toml.KEY_ROOT, False)):
                    stop_here = True
            if dir_entries:
                per_dir.append(dir_entries)
            if stop_here:
                logger.debug("Stopping upward config discovery at %s due to root=true", cur)
                break
            parent: Path = cur.parent
            if parent == cur:
                break
            cur = parent

        ordered: list[Path] = []
        for dir_list in reversed(per_dir):
            ordered.extend(dir_list)
        return ordered

    @classmethod
    def load_merged(
        cls,
        *,
        start: Path | None = None,
        extra_files: Iterable[Path] = (),
        discover: bool = True,
        environ: Mapping[str, str] | None = None,
    ) -> MutableConfig:
        """Build the effective configuration from all layers except CLI arguments.

        Args:
            start (Path | None): Directory where discovery starts (defaults to CWD).
            extra_files (Iterable[Path]): Explicit config files; read errors propagate.
            discover (bool): Whether to discover local config files.
            environ (Mapping[str, str] | None): Environment to read overrides from
                (defaults to ``os.environ``).

        Returns:
            MutableConfig: The merged builder.
        """
        merged: MutableConfig = cls.from_defaults()
        if discover:
            for path in cls.discover_local_config_files(start or Path.cwd()):
                layer: MutableConfig | None = cls.from_toml_file(path)
                if layer is not None:
                    merged = merged.merge_with(layer)
        for path in extra_files:
            layer = cls.from_toml_file(path)
            if layer is not None:
                merged = merged.merge_with(layer)
        merged.apply_env(os.environ if environ is None else environ)
        return merged

    def merge_with(self, other: MutableConfig) -> MutableConfig:
        """Return a new builder where set values of ``other`` override ``self``."""
        return MutableConfig(
            warning_mode=(
                other.warning_mode if other.warning_mode is not None else self.warning_mode
            ),
            max_deferred_warnings=(
                other.max_deferred_warnings
                if other.max_deferred_warnings is not None
                else self.max_deferred_warnings
            ),
            show_call_site=(
                other.show_call_site if other.show_call_site is not None else self.show_call_site
            ),
            color=other.color if other.color is not None else self.color,
            config_files=[*self.config_files, *other.config_files],
            diagnostics=DiagnosticLog(items=[*self.diagnostics, *other.diagnostics]),
        )

    def apply_env(self, environ: Mapping[str, str]) -> MutableConfig:
        """Apply environment overrides in place and return ``self``."""
        raw: str | None = environ.get(ENV_WARNING_MODE)
        if raw:
            mode: WarningMode | None = self._parse_warning_mode(raw, origin=f"{ENV_WARNING_MODE}: ")
            if mode is not None:
                self.warning_mode = mode
        return self

    def apply_args(self, args: ArgsLike) -> MutableConfig:
        """Apply CLI/API argument overrides in place and return ``self``.

        ``None`` values are ignored.

        Raises:
            ConfigError: If a value has the wrong type or is out of range.
        """
        mode: Any = args.get(Args.WARNING_MODE)
        if mode is not None:
            parsed: WarningMode | None = (
                mode if isinstance(mode, WarningMode) else WarningMode.parse(str(mode))
            )
            if parsed is None:
                raise ConfigError(
                    f"Invalid warning mode {mode!r}; expected one of: "
                    f"{', '.join(WarningMode.keys())}"
                )
            self.warning_mode = parsed

        max_deferred: Any = args.get(Args.MAX_DEFERRED_WARNINGS)
        if max_deferred is not None:
            if isinstance(max_deferred, bool) or not isinstance(max_deferred, int):
                raise ConfigError(f"max_deferred_warnings must be an integer: {max_deferred!r}")
            if max_deferred < 0:
                raise ConfigError(f"max_deferred_warnings must be >= 0: {max_deferred}")
            self.max_deferred_warnings = max_deferred

        show_call_site: Any = args.get(Args.SHOW_CALL_SITE)
        if show_call_site is not None:
            self.show_call_site = bool(show_call_site)

        color: Any = args.get(Args.COLOR)
        if color is not None:
            self.color = bool(color)
        return self

    def _parse_warning_mode(self, raw: str, *, origin: str) -> WarningMode | None:
        mode: WarningMode | None = WarningMode.parse(raw)
        if mode is None:
            text: str = (
                f"{origin}invalid warning mode {raw!r}; expected one of: "
                f"{', '.join(WarningMode.keys())}"
            )
            logger.warning(text)
            self.diagnostics.add_warning(text)
        return mode
