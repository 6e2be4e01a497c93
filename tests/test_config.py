# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for configuration loading and rule option coercion."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from rubyqa.config.loader import PROJECT_CONFIG_FILENAME, deep_merge, load_config
from rubyqa.config.models import (
    DEFAULT_INCLUDE,
    LintConfig,
    MysteryRegexOptions,
    NoCommentedCodeOptions,
    RuleConfig,
    RuleOptions,
    coerce_options,
)
from rubyqa.core.errors import ConfigError
from rubyqa.core.severity import Severity


def test_defaults_without_configuration_files(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert config == LintConfig()
    assert config.include == DEFAULT_INCLUDE


def test_project_file_overrides_pyproject(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        "[tool.rubyqa]\njobs = 2\n[tool.rubyqa.rules.MysteryRegex]\nMaxLength = 10\n",
        encoding="utf-8",
    )
    (tmp_path / PROJECT_CONFIG_FILENAME).write_text("jobs = 4\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.jobs == 4
    assert config.rules["MysteryRegex"] == {"MaxLength": 10}


def test_explicit_file_has_highest_precedence(tmp_path: Path) -> None:
    (tmp_path / PROJECT_CONFIG_FILENAME).write_text("autocorrect = false\n", encoding="utf-8")
    explicit = tmp_path / "ci.toml"
    explicit.write_text("autocorrect = true\n", encoding="utf-8")

    assert load_config(tmp_path, explicit).autocorrect is True


def test_missing_explicit_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path, tmp_path / "missing.toml")


def test_included_documents_are_merged_first(tmp_path: Path) -> None:
    (tmp_path / "base.toml").write_text(
        "[rules.NoCommentedCode]\nMinLines = 3\nAllowKeep = false\n",
        encoding="utf-8",
    )
    (tmp_path / PROJECT_CONFIG_FILENAME).write_text(
        'include_config = "base.toml"\n[rules.NoCommentedCode]\nMinLines = 2\n',
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.rules["NoCommentedCode"] == {"MinLines": 2, "AllowKeep": False}


def test_circular_include_is_rejected(tmp_path: Path) -> None:
    (tmp_path / "a.toml").write_text('include_config = "b.toml"\n', encoding="utf-8")
    (tmp_path / "b.toml").write_text('include_config = "a.toml"\n', encoding="utf-8")
    (tmp_path / PROJECT_CONFIG_FILENAME).write_text('include_config = "a.toml"\n', encoding="utf-8")

    with pytest.raises(ConfigError, match="Circular include"):
        load_config(tmp_path)


def test_malformed_toml_is_an_error(tmp_path: Path) -> None:
    (tmp_path / PROJECT_CONFIG_FILENAME).write_text("jobs = [\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_invalid_top_level_setting_is_an_error(tmp_path: Path) -> None:
    (tmp_path / PROJECT_CONFIG_FILENAME).write_text("jobs = 0\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid configuration"):
        load_config(tmp_path)


def test_deep_merge_keeps_nested_keys() -> None:
    merged = deep_merge({"rules": {"A": {"x": 1}}}, {"rules": {"A": {"y": 2}, "B": {}}})

    assert merged == {"rules": {"A": {"x": 1, "y": 2}, "B": {}}}


def test_coerce_options_accepts_camel_case_and_snake_case() -> None:
    assert coerce_options(MysteryRegexOptions, {"MaxLength": 10}).max_length == 10
    assert coerce_options(MysteryRegexOptions, {"max_length": 12}).max_length == 12


def test_coerce_options_drops_only_invalid_fields(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        options = coerce_options(
            NoCommentedCodeOptions,
            {"MinLines": "many", "AllowKeep": False},
            rule="NoCommentedCode",
        )

    assert options.min_lines == 1
    assert options.allow_keep is False
    assert "MinLines" in caplog.text


def test_severity_option_is_case_insensitive() -> None:
    assert coerce_options(RuleOptions, {"Severity": " Warning "}).severity is Severity.WARNING
    assert coerce_options(RuleOptions, {"severity": "error"}).severity is Severity.ERROR


def test_unknown_severity_falls_back_to_rule_default() -> None:
    assert coerce_options(RuleOptions, {"Severity": "loud"}).severity is None


def test_coerce_options_ignores_non_table_values() -> None:
    assert coerce_options(MysteryRegexOptions, "long") == MysteryRegexOptions()  # type: ignore[arg-type]
    assert coerce_options(MysteryRegexOptions, None) == MysteryRegexOptions()


def test_rule_config_enabled_flag() -> None:
    config = RuleConfig({"NoEmoji": {"Enabled": False}, "MysteryRegex": {"enabled": "yes"}})

    assert not config.enabled("NoEmoji")
    assert config.enabled("MysteryRegex")
    assert config.enabled("Unconfigured")
    assert not config.enabled("Unconfigured", default=False)


def test_rule_config_caches_validated_options() -> None:
    config = RuleConfig({"MysteryRegex": {"MaxLength": 5}})

    first = config.options_for("MysteryRegex", MysteryRegexOptions)

    assert first.max_length == 5
    assert config.options_for("MysteryRegex", MysteryRegexOptions) is first
    assert config.get("MysteryRegex", "MaxLength") == 5


def test_rule_config_from_lint_config() -> None:
    lint = LintConfig(autocorrect=True, rules={"NoEmoji": {"AllowInComments": True}})

    config = RuleConfig.from_lint_config(lint)

    assert config.autocorrect
    assert config.raw("NoEmoji") == {"AllowInComments": True}
    assert not config.with_autocorrect(False).autocorrect
