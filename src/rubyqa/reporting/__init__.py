# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Text and JSON reporting for lint results."""

from __future__ import annotations

from .emitters import JsonReport, build_json_report, render_json
from .formatters import format_diagnostic, render_text, summarize, summary_line

__all__ = [
    "JsonReport",
    "build_json_report",
    "format_diagnostic",
    "render_json",
    "render_text",
    "summarize",
    "summary_line",
]
