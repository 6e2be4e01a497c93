# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the rubyqa package."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .severity import Severity


@dataclass(frozen=True, slots=True)
class SourceRange:
    """Half-open character interval into a source buffer plus its start position.

    Attributes:
        start: Offset of the first character covered by the range.
        end: Offset one past the last character covered by the range.
        line: 1-based line of ``start``.
        column: 0-based column of ``start`` measured in characters.
        last_line: 1-based line containing the final character of the range.
    """

    start: int
    end: int
    line: int
    column: int
    last_line: int

    @property
    def size(self) -> int:
        """Return the number of characters covered by the range."""

        return self.end - self.start

    def contains(self, other: SourceRange) -> bool:
        """Return whether ``other`` lies entirely within this range."""

        return self.start <= other.start and other.end <= self.end

    def overlaps(self, other: SourceRange) -> bool:
        """Return whether this range and ``other`` share at least one character."""

        return self.start < other.end and other.start < self.end

    def join(self, other: SourceRange) -> SourceRange:
        """Return the smallest range covering both this range and ``other``.

        Args:
            other: Range to merge with this one.

        Returns:
            SourceRange: Range spanning from the earlier start to the later end.
        """

        first = self if self.start <= other.start else other
        last_line = max(self.last_line, other.last_line)
        return SourceRange(
            start=first.start,
            end=max(self.end, other.end),
            line=first.line,
            column=first.column,
            last_line=last_line,
        )


@dataclass(frozen=True, slots=True)
class TextEdit:
    """Replace the characters in ``[start, end)`` with ``replacement``."""

    start: int
    end: int
    replacement: str = ""

    @classmethod
    def replace(cls, target: SourceRange, replacement: str) -> TextEdit:
        """Return an edit substituting ``replacement`` for ``target``."""

        return cls(target.start, target.end, replacement)

    @classmethod
    def remove(cls, target: SourceRange) -> TextEdit:
        """Return an edit deleting ``target``."""

        return cls(target.start, target.end, "")

    @classmethod
    def insert_before(cls, target: SourceRange, text: str) -> TextEdit:
        """Return a zero-width edit inserting ``text`` at the start of ``target``."""

        return cls(target.start, target.start, text)

    @classmethod
    def insert_after(cls, target: SourceRange, text: str) -> TextEdit:
        """Return a zero-width edit inserting ``text`` at the end of ``target``."""

        return cls(target.end, target.end, text)

    def overlaps(self, other: TextEdit) -> bool:
        """Return whether applying both edits in one pass would be ambiguous.

        Zero-width insertions only conflict with edits that strictly surround
        their offset.

        Args:
            other: Edit compared against this one.

        Returns:
            bool: ``True`` when neither edit ends before the other starts.
        """

        return not (self.end <= other.start or other.end <= self.start)


Correction = tuple[TextEdit, ...]


@dataclass(frozen=True, slots=True)
class Offense:
    """Violation reported by a rule, optionally carrying the edits that fix it."""

    rule: str
    range: SourceRange
    message: str
    severity: Severity = Severity.CONVENTION
    correction: Correction = field(default_factory=tuple)

    @property
    def line(self) -> int:
        """Return the 1-based line where the offense starts."""

        return self.range.line

    @property
    def column(self) -> int:
        """Return the 0-based column where the offense starts."""

        return self.range.column

    @property
    def correctable(self) -> bool:
        """Return whether the offense carries at least one edit."""

        return bool(self.correction)

    def to_diagnostic(self, path: Path | str | None, *, corrected: bool = False) -> Diagnostic:
        """Convert the offense into the reporting model.

        Args:
            path: File the offense was found in.
            corrected: Whether the offense's correction was written back.

        Returns:
            Diagnostic: Serialisable view of the offense.
        """

        return Diagnostic(
            file=None if path is None else str(path),
            line=self.line,
            column=self.column + 1,
            severity=self.severity,
            message=self.message,
            rule=self.rule,
            correctable=self.correctable,
            corrected=corrected,
        )


class Diagnostic(BaseModel):
    """Standardize offenses into a common, serialisable schema."""

    model_config = ConfigDict(validate_assignment=True)

    file: str | None = None
    line: int | None = None
    column: int | None = None
    severity: Severity
    message: str
    rule: str
    correctable: bool = False
    corrected: bool = False

    @field_validator("file", mode="before")
    @classmethod
    def _normalize_file(cls, value: str | Path | None) -> str | None:
        """Render diagnostic file paths with forward slashes.

        Args:
            value: Original file path or ``None``.

        Returns:
            str | None: POSIX-style path string, or ``None`` when absent.
        """

        if value is None:
            return None
        if isinstance(value, str) and not value.strip():
            return value
        return Path(value).as_posix()


class FileReport(BaseModel):
    """Collect the diagnostics produced for one inspected file."""

    model_config = ConfigDict(validate_assignment=True)

    path: str
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    corrected: bool = False
    syntax_errors: int = 0
    correction_error: str | None = None
    read_error: str | None = None


__all__ = [
    "Correction",
    "Diagnostic",
    "FileReport",
    "Offense",
    "SourceRange",
    "TextEdit",
]
