# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rule requiring attribution on TODO/FIXME style comments."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from functools import lru_cache
from typing import Final, cast

from ..config.models import TaggedCommentsOptions
from ..source.nodes import Comment
from .base import Finding, Rule, VisitContext

ATTRIBUTION_PATTERN: Final[re.Pattern[str]] = re.compile(r"\[(?:[\w\s]+-\s*)?@[\w-]+\]", re.ASCII)


@lru_cache(maxsize=32)
def keyword_pattern(keywords: Sequence[str]) -> re.Pattern[str]:
    """Return the pattern matching an unattributed tag for ``keywords``.

    The tag must open the comment and may be followed by a colon; content
    starting with ``[@`` or ``[word`` is treated as already attributed.
    """

    alternatives = "|".join(re.escape(keyword) for keyword in keywords)
    return re.compile(rf"\A#\s*({alternatives}):?\s+(?!\[[@\w])", re.IGNORECASE | re.ASCII)


class TaggedComments(Rule):
    """Flag tagged comments that do not name who wrote them."""

    name = "TaggedComments"
    description = "Enforces [@handle] attribution on TODO/FIXME/NOTE/HACK comments."
    options_model = TaggedCommentsOptions
    visits_comments = True

    message_template: Final[str] = "Comments need attribution. Use format: # {keyword} [@handle]: description"

    def on_comment(self, comment: Comment, ctx: VisitContext) -> Iterable[Finding]:
        options = cast(TaggedCommentsOptions, ctx.options(self))
        if not options.keywords:
            return ()
        match = keyword_pattern(tuple(options.keywords)).search(comment.text)
        if match is None or ATTRIBUTION_PATTERN.search(comment.text):
            return ()
        message = self.message_template.format(keyword=match.group(1).upper())
        return (Finding(range=comment.range, message=message, target=comment),)


__all__ = ["ATTRIBUTION_PATTERN", "TaggedComments", "keyword_pattern"]
