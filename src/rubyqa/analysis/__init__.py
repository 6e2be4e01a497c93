# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared analysis helpers used by the rule implementations."""

from __future__ import annotations

from .comments import (
    CommentBlock,
    CommentKind,
    CommentRunScanner,
    classify_comment_text,
    comment_content,
    is_inline_comment,
    looks_like_code,
)
from .structure import (
    VISIBILITY_KEYWORDS,
    VisibilitySection,
    collect_instance_variables,
    enclosing_scope,
    following_methods,
    inline_visibility_call,
    is_chain_head,
    is_standalone_visibility,
    line_indent,
    nearest_section,
    range_with_surrounding_newlines,
    safe_navigation_chain_length,
    visibility_sections,
)

__all__ = [
    "VISIBILITY_KEYWORDS",
    "CommentBlock",
    "CommentKind",
    "CommentRunScanner",
    "VisibilitySection",
    "classify_comment_text",
    "collect_instance_variables",
    "comment_content",
    "enclosing_scope",
    "following_methods",
    "inline_visibility_call",
    "is_chain_head",
    "is_inline_comment",
    "is_standalone_visibility",
    "line_indent",
    "looks_like_code",
    "nearest_section",
    "range_with_surrounding_newlines",
    "safe_navigation_chain_length",
    "visibility_sections",
]
