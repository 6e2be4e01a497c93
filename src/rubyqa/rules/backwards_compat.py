# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rule detecting code kept alive for backwards compatibility."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Final, cast

from ..config.models import NoBackwardsCompatHacksOptions
from ..source.nodes import Comment, NodeKind, SyntaxNode
from .base import Finding, Rule, VisitContext

DEAD_CODE_COMMENT_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"\A#\s*(?:removed|deprecated|legacy|backwards?\s*compat(?:ibility)?|for\s+compat(?:ibility)?"
    r"|compat(?:ibility)?\s+shim):",
    re.IGNORECASE | re.ASCII,
)
COMPAT_COMMENT_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"\b(?:backwards?\s*)?compat(?:ibility)?\b", re.IGNORECASE | re.ASCII),
    re.compile(r"\bfor\s+(?:legacy|old|previous)\b", re.IGNORECASE | re.ASCII),
    re.compile(r"\bdeprecated\b", re.IGNORECASE | re.ASCII),
    re.compile(r"\balias\s+for\b", re.IGNORECASE | re.ASCII),
)

MSG_UNDERSCORE: Final[str] = "Delete dead code. Don't use underscore prefix to preserve unused values."
MSG_REEXPORT: Final[str] = "Delete dead code. Don't re-export removed constants for backwards compatibility."
MSG_COMMENT: Final[str] = "Delete dead code. Don't leave removal markers in comments."


def is_compat_comment(text: str) -> bool:
    """Return whether ``text`` mentions compatibility, deprecation or aliasing."""

    return any(pattern.search(text) for pattern in COMPAT_COMMENT_PATTERNS)


class NoBackwardsCompatHacks(Rule):
    """Flag underscore-preserved values, compatibility re-exports and removal markers."""

    name = "NoBackwardsCompatHacks"
    description = "Detects dead code preserved for backwards compatibility."
    options_model = NoBackwardsCompatHacksOptions
    node_kinds = frozenset({NodeKind.LVASGN, NodeKind.CASGN})
    visits_comments = True

    def check_node(self, node: SyntaxNode, ctx: VisitContext) -> Iterable[Finding]:
        if node.kind is NodeKind.LVASGN:
            return self._check_underscore(node, ctx)
        return self._check_reexport(node, ctx)

    def on_comment(self, comment: Comment, ctx: VisitContext) -> Iterable[Finding]:
        if DEAD_CODE_COMMENT_PATTERN.search(comment.text):
            return (Finding(range=comment.range, message=MSG_COMMENT, target=comment),)
        return ()

    def _check_underscore(self, node: SyntaxNode, ctx: VisitContext) -> Iterable[Finding]:
        options = cast(NoBackwardsCompatHacksOptions, ctx.options(self))
        if not options.check_underscore_assignments:
            return ()
        name = node.value or ""
        if not name.startswith("_") or len(name) <= 1:
            return ()
        if next(node.each_ancestor(NodeKind.BLOCK), None) is not None:
            return ()
        return (Finding(range=node.range, message=MSG_UNDERSCORE, target=node),)

    def _check_reexport(self, node: SyntaxNode, ctx: VisitContext) -> Iterable[Finding]:
        assigned = node.assigned
        if assigned is None or assigned.kind is not NodeKind.CONST:
            return ()
        by_line: Mapping[int, tuple[Comment, ...]] = ctx.state_for(self, ctx.parsed.comments_by_line)
        nearby = (*by_line.get(node.line, ()), *by_line.get(node.line - 1, ()))
        if not any(is_compat_comment(comment.text) for comment in nearby):
            return ()
        return (Finding(range=node.range, message=MSG_REEXPORT, target=node),)


__all__ = [
    "COMPAT_COMMENT_PATTERNS",
    "DEAD_CODE_COMMENT_PATTERN",
    "MSG_COMMENT",
    "MSG_REEXPORT",
    "MSG_UNDERSCORE",
    "NoBackwardsCompatHacks",
    "is_compat_comment",
]
