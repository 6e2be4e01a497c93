# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Single-pass application of text edits collected from many rules."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..core.errors import CorrectionConflictError, InvalidEditError
from ..core.models import TextEdit


def _sorted_edits(edits: Iterable[TextEdit]) -> list[TextEdit]:
    return sorted(edits, key=lambda edit: (edit.start, edit.end))


def verify_non_overlapping(edits: Iterable[TextEdit]) -> None:
    """Raise when two edits in ``edits`` would overlap during one splice.

    Args:
        edits: Edits gathered for one file.

    Raises:
        CorrectionConflictError: If an edit starts inside a preceding edit.
    """

    previous: TextEdit | None = None
    for edit in _sorted_edits(edits):
        if previous is not None and edit.start < previous.end:
            raise CorrectionConflictError(edit, previous)
        if previous is None or edit.end >= previous.end:
            previous = edit


def apply_edits(text: str, edits: Sequence[TextEdit]) -> str:
    """Return ``text`` with every edit applied in one left-to-right splice.

    Edits are ordered by ``(start, end)``, so an insertion at an offset is
    applied before a deletion starting at the same offset. Untouched text
    between edits is copied verbatim.

    Args:
        text: Original buffer contents.
        edits: Edits from any number of rules.

    Returns:
        str: Corrected text.

    Raises:
        InvalidEditError: If an edit has a negative extent or leaves the buffer.
        CorrectionConflictError: If an edit starts before the end of an edit
            already applied.
    """

    length = len(text)
    pieces: list[str] = []
    cursor = 0
    previous: TextEdit | None = None
    for edit in _sorted_edits(edits):
        if edit.start < 0 or edit.start > edit.end or edit.end > length:
            raise InvalidEditError(f"edit [{edit.start}, {edit.end}) does not fit a buffer of {length} characters")
        if edit.start < cursor and previous is not None:
            raise CorrectionConflictError(edit, previous)
        pieces.append(text[cursor : edit.start])
        pieces.append(edit.replacement)
        cursor = edit.end
        previous = edit
    pieces.append(text[cursor:])
    return "".join(pieces)


__all__ = ["apply_edits", "verify_non_overlapping"]
