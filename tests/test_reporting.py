# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for text and JSON reporting."""

from __future__ import annotations

import json

from rich.console import Console

from rubyqa.core.models import Diagnostic, FileReport
from rubyqa.core.severity import Severity
from rubyqa.reporting import build_json_report, render_json, render_text
from rubyqa.reporting.formatters import format_diagnostic, summary_line


def _diagnostic(**overrides) -> Diagnostic:
    values = {
        "file": "app/models/user.rb",
        "line": 3,
        "column": 5,
        "severity": Severity.CONVENTION,
        "message": "Avoid emoji in code. Use descriptive text instead.",
        "rule": "NoEmoji",
    }
    values.update(overrides)
    return Diagnostic(**values)


def test_format_diagnostic_tags() -> None:
    assert format_diagnostic(_diagnostic()) == (
        "app/models/user.rb:3:5: NoEmoji: Avoid emoji in code. Use descriptive text instead."
    )
    assert format_diagnostic(_diagnostic(correctable=True)).startswith("app/models/user.rb:3:5: [Correctable] ")
    assert "[Corrected] " in format_diagnostic(_diagnostic(correctable=True, corrected=True))


def test_summary_line_pluralises() -> None:
    one = [FileReport(path="a.rb", diagnostics=[_diagnostic()])]
    many = [
        FileReport(path="a.rb", diagnostics=[_diagnostic(), _diagnostic(correctable=True, corrected=True)]),
        FileReport(path="b.rb"),
    ]

    assert summary_line(one) == "1 file inspected, 1 offense detected"
    assert summary_line(many) == "2 files inspected, 2 offenses detected, 1 offense corrected"
    assert summary_line([]) == "0 files inspected, 0 offenses detected"


def test_render_text_keeps_bracketed_tags() -> None:
    console = Console(record=True, width=200, color_system=None)
    reports = [FileReport(path="a.rb", diagnostics=[_diagnostic(file="a.rb", correctable=True)])]

    render_text(reports, console=console, use_color=True)

    output = console.export_text()
    assert "a.rb:3:5: [Correctable] NoEmoji:" in output
    assert output.rstrip().endswith("1 file inspected, 1 offense detected")


def test_json_report() -> None:
    reports = [
        FileReport(path="a.rb", diagnostics=[_diagnostic(file="a.rb")], correction_error="conflict"),
        FileReport(path="b.rb"),
    ]

    report = build_json_report(reports)
    payload = json.loads(render_json(reports))

    assert (report.files, report.offense_count, report.corrected) == (2, 1, 0)
    assert payload["errors"] == {"a.rb": "conflict"}
    assert payload["diagnostics"][0]["rule"] == "NoEmoji"
    assert payload["diagnostics"][0]["severity"] == "convention"
