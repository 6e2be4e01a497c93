# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Core models and errors shared by every rubyqa layer."""

from __future__ import annotations

from .errors import (
    ConfigError,
    CorrectionConflictError,
    GrammarUnavailableError,
    InvalidEditError,
    MalformedNodeError,
    RubyQAError,
    UnknownRuleError,
)
from .models import Correction, Diagnostic, FileReport, Offense, SourceRange, TextEdit
from .severity import Severity

__all__ = [
    "ConfigError",
    "Correction",
    "CorrectionConflictError",
    "Diagnostic",
    "FileReport",
    "GrammarUnavailableError",
    "InvalidEditError",
    "MalformedNodeError",
    "Offense",
    "RubyQAError",
    "Severity",
    "SourceRange",
    "TextEdit",
    "UnknownRuleError",
]
