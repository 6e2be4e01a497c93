# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""End-to-end tests of the rubyqa command line."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from typer.testing import CliRunner

from rubyqa import __version__
from rubyqa.cli.app import app
from rubyqa.cli.shared import CLILogger

runner = CliRunner()


def _write(root: Path, relative: str, text: str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _check(root: Path, *args: str):
    return runner.invoke(app, ["check", "--root", str(root), "--no-color", *args, str(root)])


def test_clean_project_exits_zero(tmp_path: Path) -> None:
    _write(tmp_path, "lib/clean.rb", "def greet(name)\n  puts name\nend\n")

    result = _check(tmp_path)

    assert result.exit_code == 0, result.output
    assert "1 file inspected, 0 offenses detected" in result.output


def test_offenses_exit_one_and_are_listed(tmp_path: Path) -> None:
    _write(tmp_path, "app.rb", 'puts "Success! 🎉"\n')

    result = _check(tmp_path)

    assert result.exit_code == 1
    assert "app.rb:1:6: [Correctable] NoFancyUnicode:" in result.output
    assert "NoEmoji: Avoid emoji in code." in result.output


def test_fix_rewrites_files(tmp_path: Path) -> None:
    source = _write(tmp_path, "app.rb", "user && user.name\n")

    result = _check(tmp_path, "--fix")

    assert result.exit_code == 0, result.output
    assert source.read_text(encoding="utf-8") == "user.name\n"
    assert "[Corrected]" in result.output
    assert "1 offense corrected" in result.output
    assert "Rewrote 1 file in place" in result.output


def test_fix_applies_overlapping_corrections_across_passes(tmp_path: Path) -> None:
    source = _write(tmp_path, "app.rb", '# x = "→"\ny = x ? x : "→ a"\nputs 1 # so fancy →\n')

    result = _check(tmp_path, "--fix")

    assert result.exit_code == 0, result.output
    assert source.read_text(encoding="utf-8") == 'y = x || " a"\nputs 1 # so fancy\n'
    assert "autocorrection stopped" not in result.output
    assert "5 offenses corrected" in result.output


def test_fix_leaves_uncorrectable_offenses(tmp_path: Path) -> None:
    source = _write(tmp_path, "app.rb", "value = compute rescue nil\n")

    result = _check(tmp_path, "--fix")

    assert result.exit_code == 1
    assert source.read_text(encoding="utf-8") == "value = compute rescue nil\n"


def test_json_output(tmp_path: Path) -> None:
    _write(tmp_path, "app.rb", "# TODO: tidy\n")

    result = _check(tmp_path, "--format", "json", "--only", "TaggedComments")

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["offense_count"] == 1
    assert payload["diagnostics"][0]["rule"] == "TaggedComments"


def test_project_configuration_disables_rules(tmp_path: Path) -> None:
    _write(tmp_path, "app.rb", "# TODO: tidy\n")
    _write(tmp_path, ".rubyqa.toml", "[rules.TaggedComments]\nEnabled = false\n")

    assert _check(tmp_path).exit_code == 0


def test_except_option(tmp_path: Path) -> None:
    _write(tmp_path, "app.rb", "# TODO: tidy\n")

    assert _check(tmp_path, "--except", "TaggedComments", "--jobs", "2").exit_code == 0


def test_unknown_rule_is_a_usage_error(tmp_path: Path) -> None:
    _write(tmp_path, "app.rb", "x = 1\n")

    assert _check(tmp_path, "--only", "Bogus").exit_code == 2


def test_unknown_format_is_a_usage_error(tmp_path: Path) -> None:
    assert _check(tmp_path, "--format", "xml").exit_code == 2


def test_missing_path_is_an_error(tmp_path: Path) -> None:
    result = runner.invoke(app, ["check", "--root", str(tmp_path), str(tmp_path / "missing.rb")])

    assert result.exit_code == 2


def test_cli_logger_honours_emoji_preference() -> None:
    plain = CLILogger(console=Console(record=True, width=80), use_emoji=False, use_color=False)
    fancy = CLILogger(console=Console(record=True, width=80), use_emoji=True, use_color=False)

    plain.warn("app.rb: autocorrection stopped")
    fancy.ok("Rewrote 1 file in place")

    assert plain.console.export_text() == "app.rb: autocorrection stopped\n"
    assert fancy.console.export_text().startswith("✅ Rewrote 1 file in place")


def test_rules_command_lists_every_rule(tmp_path: Path) -> None:
    result = runner.invoke(app, ["rules", "--root", str(tmp_path), "--no-emoji"])

    assert result.exit_code == 0
    assert "MysteryRegex" in result.output
    assert "NoHardcodedLineNumbers" in result.output


def test_config_command_prints_effective_settings(tmp_path: Path) -> None:
    _write(tmp_path, ".rubyqa.toml", "jobs = 3\n")

    result = runner.invoke(app, ["config", "--root", str(tmp_path)])

    assert result.exit_code == 0
    assert json.loads(result.stdout)["jobs"] == 3


def test_version_command() -> None:
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert result.stdout.strip() == f"rubyqa {__version__}"
