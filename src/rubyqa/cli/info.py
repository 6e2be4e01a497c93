# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Informational commands: rule listing, effective configuration and version."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.table import Table

from .. import __version__
from ..config.loader import load_config
from ..config.models import RuleConfig
from ..core.errors import ConfigError
from ..rules.registry import list_rules
from .shared import EXIT_CLEAN, CLIError


def build_rules_table(config: RuleConfig, *, use_emoji: bool = True) -> Table:
    """Return a table describing every registered rule.

    Args:
        config: Configuration deciding each rule's enabled state.
        use_emoji: Render check marks instead of ``yes``/``no``.

    Returns:
        Table: Rich table with one row per rule.
    """

    yes, no = ("✓", "✗") if use_emoji else ("yes", "no")
    table = Table(title="rubyqa rules", header_style="bold")
    table.add_column("Rule", style="cyan", no_wrap=True)
    table.add_column("Enabled", justify="center")
    table.add_column("Correctable", justify="center")
    table.add_column("Description")
    for definition, enabled in list_rules(config):
        table.add_row(
            definition.name,
            yes if enabled else no,
            yes if definition.correctable else no,
            definition.description,
        )
    return table


def run_rules(root: Path, config_file: Path | None, *, console: Console, use_emoji: bool) -> int:
    """Print the rule table for the configuration found under ``root``."""

    try:
        config = load_config(root, config_file)
    except ConfigError as exc:
        raise CLIError(str(exc)) from exc
    console.print(build_rules_table(RuleConfig.from_lint_config(config), use_emoji=use_emoji))
    return EXIT_CLEAN


def render_config(root: Path, config_file: Path | None) -> str:
    """Return the effective configuration under ``root`` as indented JSON.

    Raises:
        CLIError: If the configuration cannot be loaded.
    """

    try:
        config = load_config(root, config_file)
    except ConfigError as exc:
        raise CLIError(str(exc)) from exc
    return json.dumps(config.to_dict(), indent=2, sort_keys=True)


def version_text() -> str:
    """Return the version banner."""

    return f"rubyqa {__version__}"


__all__ = ["build_rules_table", "render_config", "run_rules", "version_text"]
