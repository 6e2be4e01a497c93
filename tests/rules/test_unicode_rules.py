# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for NoFancyUnicode and NoEmoji."""

from __future__ import annotations

import pytest

from rubyqa.rules.unicode import (
    NoEmoji,
    NoFancyUnicode,
    clean_text,
    find_emoji,
    find_fancy_unicode,
    is_allowed_character,
)


@pytest.mark.parametrize("char", ["a", "é", "中", "٣", "\t", "~"])
def test_letters_numbers_and_ascii_are_allowed(char: str) -> None:
    assert is_allowed_character(char)


@pytest.mark.parametrize("char", ["🎉", "✓", "→", "“", "•", "\udcff"])
def test_symbols_and_surrogates_are_rejected(char: str) -> None:
    assert not is_allowed_character(char)


def test_find_helpers_return_distinct_characters_in_order() -> None:
    assert find_fancy_unicode("a → b → ✓") == ["→", "✓"]
    assert find_fancy_unicode("a → b", allowed=["→"]) == []
    assert find_emoji("ok ✅ 🎉 ✅") == ["✅", "🎉"]


def test_clean_text_tidies_only_touched_lines() -> None:
    assert clean_text('"Success! 🎉"', ["🎉"]) == '"Success!"'
    assert clean_text("  keep   this\n  done ✓ now", ["✓"]) == "  keep   this\n  done now"


def test_fancy_unicode_in_string_is_reported(inspect_source) -> None:
    offenses = inspect_source(NoFancyUnicode(), 'puts "Success! 🎉"\n')

    assert len(offenses) == 1
    assert offenses[0].message == (
        "Avoid fancy Unicode `🎉` (U+1F389). Use standard ASCII or add to AllowedUnicode."
    )
    assert offenses[0].correctable


def test_fancy_unicode_is_removed(autocorrect_source) -> None:
    assert autocorrect_source(NoFancyUnicode(), 'puts "Success! 🎉"\n') == 'puts "Success!"\n'


def test_fancy_unicode_in_comment_and_symbol(inspect_source) -> None:
    source = """
    # Done ✓
    status = :"ready→go"
    """

    offenses = inspect_source(NoFancyUnicode(), source)

    assert [offense.line for offense in offenses] == [2, 1]


def test_interpolated_segments_are_checked_once(inspect_source) -> None:
    offenses = inspect_source(NoFancyUnicode(), 'puts "→ #{name} →"\n')

    assert len(offenses) == 2


def test_accented_text_is_fine(inspect_source) -> None:
    assert inspect_source(NoFancyUnicode(), 'puts "café naïve"\n') == []


def test_fancy_unicode_options(inspect_source) -> None:
    source = """
    # Arrow →
    puts "→"
    """

    assert inspect_source(NoFancyUnicode(), source, {"AllowedUnicode": ["→"]}) == []
    assert [o.line for o in inspect_source(NoFancyUnicode(), source, {"AllowInStrings": True})] == [1]
    assert [o.line for o in inspect_source(NoFancyUnicode(), source, {"AllowInComments": True})] == [2]


def test_emoji_reported_in_strings_comments_and_symbols(inspect_source) -> None:
    source = """
    # Ship it 🚀
    puts "Done ✅"
    state = :"🔥"
    """

    offenses = inspect_source(NoEmoji(), source)

    assert sorted(offense.line for offense in offenses) == [1, 2, 3]
    assert {offense.message for offense in offenses} == {"Avoid emoji in code. Use descriptive text instead."}
    assert not any(offense.correctable for offense in offenses)


def test_emoji_allow_list(inspect_source) -> None:
    assert inspect_source(NoEmoji(), 'puts "Done ✅"\n', {"AllowedEmoji": ["✅"]}) == []
    assert inspect_source(NoEmoji(), "# 🚀\n", {"AllowInComments": True}) == []
    assert inspect_source(NoEmoji(), 'puts "🚀"\n', {"AllowInStrings": True}) == []


def test_plain_ascii_has_no_emoji(inspect_source) -> None:
    assert inspect_source(NoEmoji(), 'puts "hello"  # greet\n') == []
