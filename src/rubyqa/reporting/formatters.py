# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Console formatters for lint results."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

from rich.console import Console
from rich.text import Text

from ..core.models import Diagnostic, FileReport
from ..core.severity import Severity

SEVERITY_STYLES: Final[dict[Severity, str]] = {
    Severity.INFO: "dim",
    Severity.REFACTOR: "cyan",
    Severity.CONVENTION: "yellow",
    Severity.WARNING: "magenta",
    Severity.ERROR: "bold red",
}
CORRECTABLE_TAG: Final[str] = "[Correctable]"
CORRECTED_TAG: Final[str] = "[Corrected]"
LOCATION_SEPARATOR: Final[str] = ":"


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def format_location(diagnostic: Diagnostic) -> str:
    """Return ``path:line:col`` for ``diagnostic``."""

    parts = [diagnostic.file or "<source>"]
    if diagnostic.line is not None:
        parts.append(str(diagnostic.line))
        if diagnostic.column is not None:
            parts.append(str(diagnostic.column))
    return LOCATION_SEPARATOR.join(parts)


def format_diagnostic(diagnostic: Diagnostic) -> str:
    """Return the plain-text line describing ``diagnostic``.

    Args:
        diagnostic: Diagnostic to render.

    Returns:
        str: ``path:line:col: [Correctable] Rule: message`` style line.
    """

    tag = ""
    if diagnostic.corrected:
        tag = f"{CORRECTED_TAG} "
    elif diagnostic.correctable:
        tag = f"{CORRECTABLE_TAG} "
    return f"{format_location(diagnostic)}: {tag}{diagnostic.rule}: {diagnostic.message}"


def diagnostic_text(diagnostic: Diagnostic, *, use_color: bool) -> Text:
    """Return ``diagnostic`` as rich text, styled by severity when colour is on."""

    text = Text(format_diagnostic(diagnostic))
    if use_color:
        location = format_location(diagnostic)
        text.stylize("bold", 0, len(location))
        rule_start = text.plain.find(f"{diagnostic.rule}:", len(location))
        if rule_start >= 0:
            text.stylize(SEVERITY_STYLES[diagnostic.severity], rule_start, rule_start + len(diagnostic.rule))
    return text


def summarize(reports: Sequence[FileReport]) -> tuple[int, int, int]:
    """Return the file, offense and corrected-offense counts of ``reports``."""

    offenses = sum(len(report.diagnostics) for report in reports)
    corrected = sum(1 for report in reports for diagnostic in report.diagnostics if diagnostic.corrected)
    return len(reports), offenses, corrected


def summary_line(reports: Sequence[FileReport]) -> str:
    """Return the closing summary such as ``3 files inspected, 2 offenses detected``."""

    files, offenses, corrected = summarize(reports)
    parts = [f"{_plural(files, 'file')} inspected", f"{_plural(offenses, 'offense')} detected"]
    if corrected:
        parts.append(f"{_plural(corrected, 'offense')} corrected")
    return ", ".join(parts)


def render_text(reports: Sequence[FileReport], *, console: Console, use_color: bool) -> None:
    """Print every diagnostic of ``reports`` followed by the summary line.

    Args:
        reports: Per-file reports in discovery order.
        console: Console receiving the output.
        use_color: Whether severity colouring should be applied.
    """

    for report in reports:
        for diagnostic in report.diagnostics:
            console.print(diagnostic_text(diagnostic, use_color=use_color))
    if any(report.diagnostics for report in reports):
        console.print()
    console.print(summary_line(reports))


__all__ = [
    "CORRECTABLE_TAG",
    "CORRECTED_TAG",
    "SEVERITY_STYLES",
    "diagnostic_text",
    "format_diagnostic",
    "format_location",
    "render_text",
    "summarize",
    "summary_line",
]
