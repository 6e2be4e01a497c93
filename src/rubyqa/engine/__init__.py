# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rule runner and correction engine."""

from __future__ import annotations

from .corrector import apply_edits, verify_non_overlapping
from .runner import DEFAULT_MAX_ITERATIONS, RuleRunner, RunResult, StableCorrection, correct_until_stable

__all__ = [
    "DEFAULT_MAX_ITERATIONS",
    "RuleRunner",
    "RunResult",
    "StableCorrection",
    "apply_edits",
    "correct_until_stable",
    "verify_non_overlapping",
]
