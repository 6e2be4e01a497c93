# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Source buffers with line/column bookkeeping and byte-offset translation."""

from __future__ import annotations

from bisect import bisect_right
from pathlib import Path
from typing import Final

from ..core.models import SourceRange

_NEWLINE: Final[str] = "\n"
_ONE_BYTE_LIMIT: Final[int] = 0x80
_TWO_BYTE_LIMIT: Final[int] = 0x800
_THREE_BYTE_LIMIT: Final[int] = 0x10000


def _utf8_width(char: str) -> int:
    """Return the number of bytes ``char`` occupies once UTF-8 encoded.

    Lone surrogates (produced by ``surrogateescape`` decoding) are counted the
    way ``surrogatepass`` encodes them.
    """

    point = ord(char)
    if point < _ONE_BYTE_LIMIT:
        return 1
    if point < _TWO_BYTE_LIMIT:
        return 2
    if point < _THREE_BYTE_LIMIT:
        return 3
    return 4


class SourceBuffer:
    """Decoded source text of a single file.

    The buffer is the single authority for positions: every offset it hands
    out is a character offset into :attr:`text`, and Tree-sitter byte offsets
    are translated through :meth:`char_offset`.
    """

    __slots__ = ("path", "text", "_line_starts", "_lines", "_byte_table", "_encoded")

    def __init__(self, text: str, path: Path | None = None) -> None:
        """Index ``text`` for line lookups and byte translation.

        Args:
            text: Decoded source text.
            path: File the text was read from, when known.
        """

        self.path = path
        self.text = text
        starts = [0]
        index = text.find(_NEWLINE)
        while index != -1:
            starts.append(index + 1)
            index = text.find(_NEWLINE, index + 1)
        self._line_starts: list[int] = starts
        self._lines: list[str] | None = None
        self._encoded = text.encode("utf-8", "surrogatepass")
        self._byte_table: list[int] | None = None
        if len(self._encoded) != len(text):
            self._byte_table = self._build_byte_table(text, len(self._encoded))

    @staticmethod
    def _build_byte_table(text: str, byte_length: int) -> list[int]:
        table = [0] * (byte_length + 1)
        cursor = 0
        for index, char in enumerate(text):
            width = _utf8_width(char)
            for offset in range(width):
                table[cursor + offset] = index
            cursor += width
        table[byte_length] = len(text)
        return table

    @property
    def encoded(self) -> bytes:
        """Return the UTF-8 representation handed to the parser."""

        return self._encoded

    @property
    def lines(self) -> list[str]:
        """Return the buffer's lines without their terminators."""

        if self._lines is None:
            self._lines = self.text.split(_NEWLINE)
        return self._lines

    @property
    def line_count(self) -> int:
        """Return the number of lines, counting a trailing empty line."""

        return len(self._line_starts)

    def char_offset(self, byte_offset: int) -> int:
        """Translate a UTF-8 byte offset into a character offset.

        Args:
            byte_offset: Offset reported by Tree-sitter.

        Returns:
            int: Matching offset into :attr:`text`.
        """

        if self._byte_table is None:
            return byte_offset
        clamped = max(0, min(byte_offset, len(self._byte_table) - 1))
        return self._byte_table[clamped]

    def position(self, offset: int) -> tuple[int, int]:
        """Return the 1-based line and 0-based column of ``offset``."""

        line_index = bisect_right(self._line_starts, offset) - 1
        return line_index + 1, offset - self._line_starts[line_index]

    def line_start(self, line: int) -> int:
        """Return the offset of the first character of ``line`` (1-based)."""

        return self._line_starts[line - 1]

    def line_end(self, line: int) -> int:
        """Return the offset just before the newline terminating ``line``."""

        if line < len(self._line_starts):
            return self._line_starts[line] - 1
        return len(self.text)

    def make_range(self, start: int, end: int) -> SourceRange:
        """Return a :class:`SourceRange` for the character interval ``[start, end)``.

        Args:
            start: First character offset.
            end: Offset one past the last character.

        Returns:
            SourceRange: Range annotated with line and column data.
        """

        line, column = self.position(start)
        last_line = self.position(max(start, end - 1))[0] if end > start else line
        return SourceRange(start=start, end=end, line=line, column=column, last_line=last_line)

    def line_range(self, line: int) -> SourceRange:
        """Return the range covering the contents of ``line`` without its newline."""

        return self.make_range(self.line_start(line), self.line_end(line))

    def line_range_with_newline(self, line: int) -> SourceRange:
        """Return the range of ``line`` including its newline, if it has one."""

        return self.lines_range_with_newline(line, line)

    def lines_range_with_newline(self, first_line: int, last_line: int) -> SourceRange:
        """Return the range covering whole lines including the final newline.

        On the last line of the buffer the range stops at the buffer end.

        Args:
            first_line: First line to cover (1-based).
            last_line: Last line to cover (1-based).

        Returns:
            SourceRange: Range of the complete lines.
        """

        start = self.line_start(first_line)
        end = self.line_end(last_line)
        if end < len(self.text):
            end += 1
        return self.make_range(start, end)

    def slice(self, target: SourceRange) -> str:
        """Return the text covered by ``target``."""

        return self.text[target.start : target.end]

    def __len__(self) -> int:
        return len(self.text)


__all__ = ["SourceBuffer"]
