# topmark:header:start
#
#   project      : Condor
#   file         : test_config_model.py
#   file_relpath : tests/config/test_config_model.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for Condor configuration: defaults, TOML layers, discovery and precedence."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
import tomlkit

from condor.config import Config, MutableConfig, WarningMode
from condor.config.io import to_toml
from condor.config.keys import Args, Toml
from condor.constants import DEFAULT_MAX_DEFERRED_WARNINGS, ENV_WARNING_MODE
from condor.core.errors import ConfigError
from tests.conftest import mark_config, write_toml

if TYPE_CHECKING:
    from pathlib import Path


@mark_config
def test_defaults() -> None:
    """The built-in defaults defer warnings and show call sites."""
    config: Config = Config.from_defaults()
    assert config.warning_mode is WarningMode.DEFERRED
    assert config.max_deferred_warnings == DEFAULT_MAX_DEFERRED_WARNINGS
    assert config.show_call_site is True
    assert config.color is None
    assert len(config.diagnostics) == 0


@mark_config
def test_condor_toml_is_loaded(tmp_path: Path) -> None:
    """Values from ``condor.toml`` override the defaults."""
    path: Path = write_toml(
        tmp_path / "condor.toml",
        """
[runtime]
warning_mode = "immediate"
max_deferred_warnings = 5
show_call_site = false

[output]
color = true
""",
    )
    draft: MutableConfig | None = MutableConfig.from_toml_file(path)
    assert draft is not None
    config: Config = MutableConfig.from_defaults().merge_with(draft).freeze()

    assert config.warning_mode is WarningMode.IMMEDIATE
    assert config.max_deferred_warnings == 5
    assert config.show_call_site is False
    assert config.color is True
    assert config.config_files == (str(path),)


@mark_config
def test_pyproject_without_condor_table_is_ignored(tmp_path: Path) -> None:
    """A ``pyproject.toml`` only counts when it has ``[tool.condor]``."""
    path: Path = write_toml(tmp_path / "pyproject.toml", '[project]\nname = "x"\n')
    assert MutableConfig.from_toml_file(path) is None


@mark_config
def test_invalid_values_are_recorded_not_raised(tmp_path: Path) -> None:
    """Bad values become diagnostics; the defaults stay in force."""
    path: Path = write_toml(
        tmp_path / "condor.toml",
        """
[runtime]
warning_mode = "loud"
max_deferred_warnings = -1
show_call_site = "yes"
surprise = 1
""",
    )
    config: Config = MutableConfig.load_merged(
        extra_files=[path], discover=False, environ={}
    ).freeze()

    assert config.warning_mode is WarningMode.DEFERRED
    assert config.max_deferred_warnings == DEFAULT_MAX_DEFERRED_WARNINGS
    assert config.show_call_site is True
    texts: list[str] = [d.text for d in config.diagnostics]
    assert len(texts) == 4
    assert any("invalid warning mode 'loud'" in t for t in texts)
    assert any("runtime.surprise" in t for t in texts)


@mark_config
def test_invalid_toml_raises_value_error(tmp_path: Path) -> None:
    """Explicit files that do not parse are errors."""
    path: Path = write_toml(tmp_path / "condor.toml", "[runtime\n")
    with pytest.raises(ValueError):
        MutableConfig.from_toml_file(path)


@mark_config
def test_numeric_warning_mode_aliases(tmp_path: Path) -> None:
    """``warning_mode = 2`` means escalate."""
    path: Path = write_toml(tmp_path / "condor.toml", "[runtime]\nwarning_mode = 2\n")
    draft: MutableConfig | None = MutableConfig.from_toml_file(path)
    assert draft is not None
    assert draft.warning_mode is WarningMode.ESCALATE


@mark_config
def test_discovery_is_root_most_first_and_stops_at_root(tmp_path: Path) -> None:
    """Nearer files win; ``root = true`` ends the upward walk."""
    outer: Path = tmp_path / "outer"
    project: Path = outer / "project"
    nested: Path = project / "pkg"
    nested.mkdir(parents=True)

    write_toml(outer / "condor.toml", '[runtime]\nwarning_mode = "escalate"\n')
    write_toml(
        project / "pyproject.toml",
        '[tool.condor]\nroot = true\n[tool.condor.runtime]\nwarning_mode = "immediate"\n',
    )
    write_toml(project / "condor.toml", "[runtime]\nmax_deferred_warnings = 7\n")
    write_toml(nested / "condor.toml", "[runtime]\nshow_call_site = false\n")

    found: list[Path] = MutableConfig.discover_local_config_files(nested)
    assert found == [
        (project / "pyproject.toml").resolve(),
        (project / "condor.toml").resolve(),
        (nested / "condor.toml").resolve(),
    ]

    config: Config = MutableConfig.load_merged(start=nested, environ={}).freeze()
    assert config.warning_mode is WarningMode.IMMEDIATE
    assert config.max_deferred_warnings == 7
    assert config.show_call_site is False


@mark_config
def test_precedence_files_then_env_then_args(tmp_path: Path) -> None:
    """Explicit files override discovery, env overrides files, args override env."""
    write_toml(tmp_path / "condor.toml", '[runtime]\nwarning_mode = "immediate"\n')
    explicit: Path = write_toml(tmp_path / "extra.toml", '[runtime]\nwarning_mode = "escalate"\n')

    from_files = MutableConfig.load_merged(start=tmp_path, extra_files=[explicit], environ={})
    assert from_files.freeze().warning_mode is WarningMode.ESCALATE

    from_env = MutableConfig.load_merged(
        start=tmp_path, extra_files=[explicit], environ={ENV_WARNING_MODE: "deferred"}
    )
    assert from_env.freeze().warning_mode is WarningMode.DEFERRED

    from_args = from_env.apply_args({Args.WARNING_MODE: "immediate"})
    assert from_args.freeze().warning_mode is WarningMode.IMMEDIATE


@mark_config
def test_invalid_env_value_keeps_lower_layer() -> None:
    """A bad environment value is reported and ignored."""
    draft: MutableConfig = MutableConfig.from_defaults().apply_env({ENV_WARNING_MODE: "nope"})
    assert draft.warning_mode is WarningMode.DEFERRED
    assert draft.diagnostics.has_warning()


@mark_config
def test_env_is_read_from_os_environ(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Without an explicit mapping, ``os.environ`` is used."""
    monkeypatch.setenv(ENV_WARNING_MODE, "escalate")
    config: Config = MutableConfig.load_merged(start=tmp_path, discover=False).freeze()
    assert config.warning_mode is WarningMode.ESCALATE


@mark_config
@pytest.mark.parametrize(
    "overrides",
    [
        {Args.WARNING_MODE: "loud"},
        {Args.MAX_DEFERRED_WARNINGS: -1},
        {Args.MAX_DEFERRED_WARNINGS: "10"},
        {Args.MAX_DEFERRED_WARNINGS: True},
    ],
)
def test_apply_args_rejects_invalid_values(overrides: dict[str, object]) -> None:
    """Programmatic overrides are validated eagerly."""
    with pytest.raises(ConfigError):
        MutableConfig.from_defaults().apply_args(overrides)


@mark_config
def test_apply_args_ignores_none() -> None:
    """``None`` means "not given"."""
    draft: MutableConfig = MutableConfig.from_defaults().apply_args(
        {Args.WARNING_MODE: None, Args.SHOW_CALL_SITE: None, Args.COLOR: False}
    )
    config: Config = draft.freeze()
    assert config.warning_mode is WarningMode.DEFERRED
    assert config.show_call_site is True
    assert config.color is False


@mark_config
def test_thaw_round_trips() -> None:
    """`thaw` followed by `freeze` yields an equal snapshot."""
    draft: MutableConfig = MutableConfig.from_defaults().apply_args({Args.MAX_DEFERRED_WARNINGS: 3})
    config: Config = draft.freeze()
    assert config.thaw().freeze() == config


@mark_config
def test_toml_export_omits_auto_color() -> None:
    """The exported document parses back and leaves ``color`` out when it is auto."""
    text: str = to_toml(Config.from_defaults().to_toml_dict())
    parsed = tomlkit.parse(text).unwrap()

    assert parsed[Toml.SECTION_RUNTIME] == {
        Toml.KEY_WARNING_MODE: "deferred",
        Toml.KEY_MAX_DEFERRED_WARNINGS: DEFAULT_MAX_DEFERRED_WARNINGS,
        Toml.KEY_SHOW_CALL_SITE: True,
    }
    assert Toml.KEY_COLOR not in parsed.get(Toml.SECTION_OUTPUT, {})
