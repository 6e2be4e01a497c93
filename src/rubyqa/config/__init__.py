# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models and loaders."""

from __future__ import annotations

from .loader import (
    PROJECT_CONFIG_FILENAME,
    DefaultConfigSource,
    PyProjectConfigSource,
    TomlConfigSource,
    deep_merge,
    load_config,
)
from .models import LintConfig, RuleConfig, RuleOptions, coerce_options

__all__ = [
    "PROJECT_CONFIG_FILENAME",
    "DefaultConfigSource",
    "LintConfig",
    "PyProjectConfigSource",
    "RuleConfig",
    "RuleOptions",
    "TomlConfigSource",
    "coerce_options",
    "deep_merge",
    "load_config",
]
