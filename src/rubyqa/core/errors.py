# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy shared across rubyqa."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - type checking import
    from .models import TextEdit


class RubyQAError(Exception):
    """Base class for every error raised deliberately by rubyqa."""


class ConfigError(RubyQAError):
    """Raised when a configuration document cannot be loaded."""


class GrammarUnavailableError(RubyQAError):
    """Raised when the Tree-sitter Ruby grammar cannot be resolved."""


class MalformedNodeError(RubyQAError):
    """Raised by a rule when a syntax node does not have the expected shape."""


class InvalidEditError(RubyQAError):
    """Raised when a text edit does not describe a valid range of the buffer."""


class UnknownRuleError(RubyQAError, KeyError):
    """Raised when a rule name is not present in the registry."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class CorrectionConflictError(RubyQAError):
    """Raised when two edits in one correction pass overlap.

    Attributes:
        edit: Edit that could not be applied.
        previous: Edit already applied whose range overlaps ``edit``.
    """

    def __init__(self, edit: TextEdit, previous: TextEdit) -> None:
        """Record the conflicting pair of edits.

        Args:
            edit: Edit that could not be applied.
            previous: Edit already applied whose range overlaps ``edit``.
        """

        super().__init__(
            f"edit [{edit.start}, {edit.end}) overlaps previously applied edit [{previous.start}, {previous.end})",
        )
        self.edit = edit
        self.previous = previous


__all__ = [
    "ConfigError",
    "CorrectionConflictError",
    "GrammarUnavailableError",
    "InvalidEditError",
    "MalformedNodeError",
    "RubyQAError",
    "UnknownRuleError",
]
