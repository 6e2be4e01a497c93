# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rule detecting commented-out code blocks."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final, cast

from ..analysis.comments import CommentBlock, CommentRunScanner, is_inline_comment
from ..config.models import NoCommentedCodeOptions
from ..core.models import Correction, TextEdit
from ..source.nodes import Comment
from .base import CorrectingRule, Finding, VisitContext


class NoCommentedCode(CorrectingRule):
    """Flag runs of comments that read as Ruby code.

    A ``# KEEP [@handle]: reason`` comment directly above a run protects that
    single run. YARD ``@example`` blocks are never reported.
    """

    name = "NoCommentedCode"
    description = "Detects commented-out code; version control already preserves history."
    options_model = NoCommentedCodeOptions
    visits_comments = True

    message: Final[str] = "Delete commented-out code instead of leaving it. Version control preserves history."

    def _options(self, ctx: VisitContext) -> NoCommentedCodeOptions:
        return cast(NoCommentedCodeOptions, ctx.options(self))

    def _scanner(self, ctx: VisitContext) -> CommentRunScanner:
        allow_keep = self._options(ctx).allow_keep
        return ctx.state_for(self, lambda: CommentRunScanner(allow_keep=allow_keep))

    def on_comment(self, comment: Comment, ctx: VisitContext) -> Iterable[Finding]:
        inline = is_inline_comment(comment, ctx.buffer)
        closed = self._scanner(ctx).feed(comment, inline=inline)
        return self._report(closed, ctx)

    def on_comments_finished(self, ctx: VisitContext) -> Iterable[Finding]:
        return self._report(self._scanner(ctx).close(), ctx)

    def _report(self, blocks: list[CommentBlock], ctx: VisitContext) -> list[Finding]:
        min_lines = self._options(ctx).min_lines
        return [
            Finding(range=block.comments[0].range, message=self.message, target=block)
            for block in blocks
            if not block.protected and len(block) >= min_lines
        ]

    def correct(self, finding: Finding, ctx: VisitContext) -> Correction:
        block = cast(CommentBlock, finding.target)
        lines = ctx.buffer.lines_range_with_newline(block.first_line, block.last_line)
        return (TextEdit.remove(lines),)


__all__ = ["NoCommentedCode"]
