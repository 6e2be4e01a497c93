# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity levels attached to offenses."""

from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    """Severity levels attached to offenses, ordered from least to most severe.

    Configuration values are parsed by the ``severity`` validator on
    :class:`rubyqa.config.models.RuleOptions`.
    """

    INFO = "info"
    REFACTOR = "refactor"
    CONVENTION = "convention"
    WARNING = "warning"
    ERROR = "error"


__all__ = ["Severity"]
