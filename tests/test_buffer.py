# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for line and offset lookups on source buffers."""

from __future__ import annotations

from rubyqa.source.buffer import SourceBuffer


def test_position_is_one_based_line_zero_based_column() -> None:
    buffer = SourceBuffer("a = 1\nbb = 2\n")

    assert buffer.position(0) == (1, 0)
    assert buffer.position(8) == (2, 2)


def test_line_range_excludes_newline() -> None:
    buffer = SourceBuffer("first\nsecond\n")

    assert buffer.slice(buffer.line_range(2)) == "second"


def test_line_range_with_newline() -> None:
    buffer = SourceBuffer("first\nsecond")

    assert buffer.slice(buffer.line_range_with_newline(1)) == "first\n"
    assert buffer.slice(buffer.line_range_with_newline(2)) == "second"


def test_char_offset_translates_multibyte_text() -> None:
    buffer = SourceBuffer("é = 1\n")

    assert buffer.char_offset(0) == 0
    assert buffer.char_offset(2) == 1
    assert buffer.char_offset(len("é = 1\n".encode())) == len("é = 1\n")


def test_char_offset_is_identity_for_ascii() -> None:
    buffer = SourceBuffer("x = 1\n")

    assert buffer.char_offset(3) == 3
