# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rule detecting references to source line numbers in comments and strings."""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Final, cast

from ..config.models import NoHardcodedLineNumbersOptions
from ..source.nodes import Comment, NodeKind, SyntaxNode
from .base import Finding, Rule, VisitContext

# More specific shapes come first; only the first qualifying match is reported.
LINE_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"\bL(\d+)\b", re.ASCII),
    re.compile(r"\.(?:rb|erb|rake|ru):(\d+)\b", re.ASCII),
    re.compile(r"\blines?\s+(\d+)", re.IGNORECASE | re.ASCII),
)

IGNORE_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"ruby\s+\d+\.\d+", re.IGNORECASE | re.ASCII),
    re.compile(r"version\s+\d+", re.IGNORECASE | re.ASCII),
    re.compile(r"port\s+\d+", re.IGNORECASE | re.ASCII),
    re.compile(r"\bv\d+\.\d+", re.IGNORECASE | re.ASCII),
    re.compile(r"\d+\.\d+\.\d+", re.ASCII),
    re.compile(r"pid[:\s]+\d+", re.IGNORECASE | re.ASCII),
    re.compile(r"id[:\s]+\d+", re.IGNORECASE | re.ASCII),
    re.compile(r"\d+\s*(?:ms|seconds?|minutes?)", re.IGNORECASE | re.ASCII),
    re.compile(r"\d+\s*(?:bytes?|kb|mb|gb)", re.IGNORECASE | re.ASCII),
    re.compile(r"\d+%", re.ASCII),
    re.compile(r"\$\d+", re.ASCII),
    re.compile(r"#\d+", re.ASCII),
    re.compile(r"://[^/]*:\d+", re.ASCII),
)

MSG_LINE_NUMBER: Final[str] = "Avoid hardcoded line number `{line}`. Line numbers shift when code changes."


def find_line_reference(text: str, min_line_number: int = 1) -> str | None:
    """Return the first line-number reference in ``text``.

    Args:
        text: Comment or string contents.
        min_line_number: Smallest line number worth reporting.

    Returns:
        str | None: Full matched text, or ``None`` when ``text`` holds no
        reference or looks like one of the known false positives.
    """

    if not text or any(pattern.search(text) for pattern in IGNORE_PATTERNS):
        return None
    for pattern in LINE_PATTERNS:
        for match in pattern.finditer(text):
            if int(match.group(1)) >= min_line_number:
                return match.group(0)
    return None


class NoHardcodedLineNumbers(Rule):
    """Flag ``line 42``, ``foo.rb:42`` and ``L42`` style references."""

    name = "NoHardcodedLineNumbers"
    description = "Detects hardcoded line numbers that go stale as code moves."
    options_model = NoHardcodedLineNumbersOptions
    node_kinds = frozenset({NodeKind.STR})
    visits_comments = True

    def _options(self, ctx: VisitContext) -> NoHardcodedLineNumbersOptions:
        return cast(NoHardcodedLineNumbersOptions, ctx.options(self))

    def on_comment(self, comment: Comment, ctx: VisitContext) -> Iterable[Finding]:
        options = self._options(ctx)
        if not options.check_comments:
            return ()
        return self._check_text(comment.text, comment, options)

    def check_node(self, node: SyntaxNode, ctx: VisitContext) -> Iterable[Finding]:
        options = self._options(ctx)
        if not options.check_strings or node.in_heredoc():
            return ()
        return self._check_text(node.value or "", node, options)

    @staticmethod
    def _check_text(
        text: str,
        target: SyntaxNode | Comment,
        options: NoHardcodedLineNumbersOptions,
    ) -> Iterable[Finding]:
        reference = find_line_reference(text, options.min_line_number)
        if reference is None:
            return ()
        return (Finding(range=target.range, message=MSG_LINE_NUMBER.format(line=reference), target=target),)


__all__ = [
    "IGNORE_PATTERNS",
    "LINE_PATTERNS",
    "MSG_LINE_NUMBER",
    "NoHardcodedLineNumbers",
    "find_line_reference",
]
