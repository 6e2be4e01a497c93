# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the TaggedComments rule."""

from __future__ import annotations

import pytest

from rubyqa.rules.tagged_comments import TaggedComments


@pytest.mark.parametrize(
    ("comment", "keyword"),
    [
        ("# TODO: add caching", "TODO"),
        ("# FIXME handle nil", "FIXME"),
        ("# note: slow path", "NOTE"),
        ("#HACK: temporary", "HACK"),
    ],
)
def test_unattributed_tags_are_reported(inspect_source, comment: str, keyword: str) -> None:
    offenses = inspect_source(TaggedComments(), f"{comment}\nx = 1\n")

    assert [offense.message for offense in offenses] == [
        f"Comments need attribution. Use format: # {keyword} [@handle]: description",
    ]


@pytest.mark.parametrize(
    "comment",
    [
        "# TODO [@alice]: add caching",
        "# TODO: [@alice] add caching",
        "# FIXME [Bob Smith - @bsmith]: handle nil",
        "# Remember the todo list",
        "# Todos are tracked elsewhere",
    ],
)
def test_attributed_or_untagged_comments_pass(inspect_source, comment: str) -> None:
    assert inspect_source(TaggedComments(), f"{comment}\n") == []


def test_custom_keywords(inspect_source) -> None:
    source = "# TODO: default keyword\n# XXX: custom keyword\n"

    offenses = inspect_source(TaggedComments(), source, {"Keywords": ["XXX"]})

    assert [offense.line for offense in offenses] == [2]


def test_inline_tag_comment_is_reported(inspect_source) -> None:
    offenses = inspect_source(TaggedComments(), "retry_count = 3 # TODO: tune\n")

    assert len(offenses) == 1
