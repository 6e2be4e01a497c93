# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rule asking for long regular expressions to be named."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final, cast

from ..config.models import MysteryRegexOptions
from ..source.nodes import NodeKind, SyntaxNode
from .base import Finding, Rule, VisitContext

LET_METHODS: Final[frozenset[str]] = frozenset({"let", "let!"})
MSG_EXTRACT: Final[str] = "Extract long regex to a named constant. Complex patterns deserve descriptive names."


def in_constant_assignment(node: SyntaxNode) -> bool:
    """Return whether ``node`` is part of the value assigned to a constant."""

    return next(node.each_ancestor(NodeKind.CASGN), None) is not None


def in_let_block(node: SyntaxNode) -> bool:
    """Return whether ``node`` sits inside an RSpec ``let``/``let!`` block."""

    for block in node.each_ancestor(NodeKind.BLOCK):
        call = block.parent
        if call is not None and call.kind is NodeKind.SEND and call.value in LET_METHODS:
            return True
    return False


class MysteryRegex(Rule):
    """Flag regex literals whose pattern exceeds ``max_length`` characters.

    The length counts the pattern text between the delimiters, excluding
    interpolated expressions and flags.
    """

    name = "MysteryRegex"
    description = "Requires long regular expressions to be extracted into named constants."
    options_model = MysteryRegexOptions
    node_kinds = frozenset({NodeKind.REGEXP})

    def check_node(self, node: SyntaxNode, ctx: VisitContext) -> Iterable[Finding]:
        options = cast(MysteryRegexOptions, ctx.options(self))
        if len(node.value or "") <= options.max_length:
            return ()
        if in_constant_assignment(node):
            return ()
        if options.allow_in_let_blocks and in_let_block(node):
            return ()
        return (Finding(range=node.range, message=MSG_EXTRACT, target=node),)


__all__ = ["LET_METHODS", "MSG_EXTRACT", "MysteryRegex", "in_constant_assignment", "in_let_block"]
