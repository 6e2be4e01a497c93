# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Emit machine-readable reports for lint results."""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, Field

from ..core.models import Diagnostic, FileReport
from .formatters import summarize


class JsonReport(BaseModel):
    """Serialisable summary of a lint run."""

    files: int = 0
    offense_count: int = 0
    corrected: int = 0
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    errors: dict[str, str] = Field(default_factory=dict)


def build_json_report(reports: Sequence[FileReport]) -> JsonReport:
    """Flatten ``reports`` into a :class:`JsonReport`.

    Args:
        reports: Per-file reports in discovery order.

    Returns:
        JsonReport: Diagnostics of every file plus the run totals. Files whose
        correction was abandoned are listed under ``errors``.
    """

    files, offenses, corrected = summarize(reports)
    return JsonReport(
        files=files,
        offense_count=offenses,
        corrected=corrected,
        diagnostics=[diagnostic for report in reports for diagnostic in report.diagnostics],
        errors={report.path: report.correction_error for report in reports if report.correction_error},
    )


def render_json(reports: Sequence[FileReport]) -> str:
    """Return the JSON document describing ``reports``."""

    return build_json_report(reports).model_dump_json(indent=2)


__all__ = ["JsonReport", "build_json_report", "render_json"]
