# topmark:header:start
#
#   project      : Condor
#   file         : test_config_dump.py
#   file_relpath : tests/cli/test_config_dump.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""CLI tests for `condor config dump` and `condor config defaults`."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import tomlkit

from condor.cli.exit_codes import ExitCode
from condor.constants import DEFAULT_MAX_DEFERRED_WARNINGS, TOML_BLOCK_END, TOML_BLOCK_START
from tests.cli.conftest import assert_exit, run_cli
from tests.conftest import mark_cli, write_toml

if TYPE_CHECKING:
    from pathlib import Path


def extract_toml_block(output: str) -> dict[str, Any]:
    """Parse the TOML document between the block markers."""
    start: int = output.index(TOML_BLOCK_START) + len(TOML_BLOCK_START)
    end: int = output.index(TOML_BLOCK_END)
    return tomlkit.parse(output[start:end]).unwrap()


@mark_cli
def test_defaults_dump() -> None:
    """`config defaults` shows the built-in configuration."""
    result = run_cli(["--no-color", "config", "defaults"])

    assert_exit(result, ExitCode.SUCCESS)
    runtime: dict[str, Any] = extract_toml_block(result.output)["runtime"]
    assert runtime == {
        "warning_mode": "deferred",
        "max_deferred_warnings": DEFAULT_MAX_DEFERRED_WARNINGS,
        "show_call_site": True,
    }


@mark_cli
def test_dump_applies_overrides() -> None:
    """CLI overrides show up in the effective configuration."""
    result = run_cli(
        [
            "--no-color",
            "config",
            "dump",
            "--no-config",
            "--warning-mode",
            "escalate",
            "--max-deferred-warnings",
            "5",
            "--hide-call-site",
        ]
    )

    assert_exit(result, ExitCode.SUCCESS)
    runtime: dict[str, Any] = extract_toml_block(result.output)["runtime"]
    assert runtime["warning_mode"] == "escalate"
    assert runtime["max_deferred_warnings"] == 5
    assert runtime["show_call_site"] is False


@mark_cli
def test_dump_merges_explicit_config_file(tmp_path: Path) -> None:
    """``--config`` files are merged into the dump."""
    extra: Path = write_toml(tmp_path / "extra.toml", '[runtime]\nwarning_mode = "immediate"\n')
    result = run_cli(["--no-color", "config", "dump", "--no-config", "--config", str(extra)])

    assert_exit(result, ExitCode.SUCCESS)
    assert extract_toml_block(result.output)["runtime"]["warning_mode"] == "immediate"


@mark_cli
def test_dump_reports_config_problems(tmp_path: Path) -> None:
    """Invalid values are summarized on stderr; the dump still succeeds."""
    bad: Path = write_toml(tmp_path / "bad.toml", '[runtime]\nwarning_mode = "loud"\n')
    result = run_cli(["--no-color", "config", "dump", "--no-config", "--config", str(bad)])

    assert_exit(result, ExitCode.SUCCESS)
    assert "Config: 1 problem found" in result.output
    assert extract_toml_block(result.output)["runtime"]["warning_mode"] == "deferred"


@mark_cli
def test_dump_color_flag_is_recorded() -> None:
    """An explicit ``--color always`` is part of the effective configuration."""
    result = run_cli(["--color", "always", "config", "dump", "--no-config"])

    assert_exit(result, ExitCode.SUCCESS)
    assert extract_toml_block(result.output)["output"]["color"] is True
