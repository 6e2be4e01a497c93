# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rule flagging overly defensive coding patterns."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final, cast

from ..analysis.structure import is_chain_head, safe_navigation_chain_length
from ..config.models import NoOverlyDefensiveCodeOptions
from ..core.models import Correction, TextEdit
from ..source.nodes import CALL_KINDS, NodeKind, SyntaxNode
from .base import CorrectingRule, Finding, VisitContext

BROAD_EXCEPTIONS: Final[frozenset[str]] = frozenset({"Exception", "StandardError", "RuntimeError"})
NIL_PREDICATES: Final[frozenset[str]] = frozenset({"nil?", "blank?"})
PRESENCE_PREDICATE: Final[str] = "present?"
SAFE_NAVIGATOR: Final[str] = "&."

MSG_SWALLOW: Final[str] = "Trust internal code. Don't swallow errors with `rescue nil` or `rescue => e; nil`."
MSG_CHAIN: Final[str] = (
    "Trust internal code. Excessive safe navigation ({count} chained `&.`) suggests uncertain data model. "
    "Use explicit nil checks or fix the source."
)
MSG_REPLACE: Final[str] = "Trust internal code. Use `{replacement}` instead of `{original}`."


def is_specific_exception(node: SyntaxNode) -> bool:
    """Return whether ``node`` names an exception class narrower than ``StandardError``."""

    if node.kind is not NodeKind.CONST or not node.value:
        return False
    return node.value.split("::")[-1] not in BROAD_EXCEPTIONS


def swallows_error(rescue: SyntaxNode) -> bool:
    """Return whether a rescue clause silently discards the error.

    Clauses naming only specific exception classes are considered intentional.
    Otherwise an empty body, ``nil``, ``return`` or ``return nil`` swallows.

    Args:
        rescue: ``rescue`` clause or rescue modifier.

    Returns:
        bool: ``True`` when the clause swallows the error.
    """

    exceptions = rescue.exceptions
    if exceptions and all(is_specific_exception(item) for item in exceptions):
        return False
    body = rescue.body
    if not body:
        return True
    if len(body) != 1:
        return False
    statement = body[0]
    if statement.kind is NodeKind.NIL:
        return True
    if statement.kind is NodeKind.RETURN:
        arguments = statement.arguments
        return not arguments or (len(arguments) == 1 and arguments[0].kind is NodeKind.NIL)
    return False


def _is_predicate_call(node: SyntaxNode | None, names: frozenset[str] | str) -> bool:
    if node is None or node.kind not in CALL_KINDS or node.receiver is None or node.arguments:
        return False
    if node.block is not None:
        return False
    return node.value in names if isinstance(names, frozenset) else node.value == names


class NoOverlyDefensiveCode(CorrectingRule):
    """Flag error swallowing, long ``&.`` chains and redundant nil guards.

    Guard and ternary detection compare operands by their exact source text,
    so two identical expressions are assumed to denote the same value.
    """

    name = "NoOverlyDefensiveCode"
    description = "Flags error swallowing, excessive safe navigation and redundant nil checks."
    options_model = NoOverlyDefensiveCodeOptions
    node_kinds = frozenset({NodeKind.RESCUE, NodeKind.CSEND, NodeKind.AND, NodeKind.TERNARY})

    def _options(self, ctx: VisitContext) -> NoOverlyDefensiveCodeOptions:
        return cast(NoOverlyDefensiveCodeOptions, ctx.options(self))

    def check_node(self, node: SyntaxNode, ctx: VisitContext) -> Iterable[Finding]:
        if node.kind is NodeKind.RESCUE:
            return self._check_rescue(node, ctx)
        if node.kind is NodeKind.CSEND:
            return self._check_chain(node, ctx)
        if node.kind is NodeKind.AND:
            return self._check_guard(node, ctx)
        return self._check_ternary(node)

    def _check_rescue(self, node: SyntaxNode, ctx: VisitContext) -> Iterable[Finding]:
        if not swallows_error(node):
            return ()
        anchor = node.range
        keyword = node.locs.get("keyword")
        if node.modifier and keyword is not None:
            anchor = ctx.buffer.make_range(keyword.start, node.range.end)
        return (Finding(range=anchor, message=MSG_SWALLOW, target=node),)

    def _check_chain(self, node: SyntaxNode, ctx: VisitContext) -> Iterable[Finding]:
        if not is_chain_head(node):
            return ()
        length = safe_navigation_chain_length(node)
        if length <= self._options(ctx).max_safe_navigation_chain:
            return ()
        return (Finding(range=node.range, message=MSG_CHAIN.format(count=length), target=node),)

    def _check_guard(self, node: SyntaxNode, ctx: VisitContext) -> Iterable[Finding]:
        left, right = node.left, node.right
        if left is None or right is None or right.kind not in CALL_KINDS or right.receiver is None:
            return ()
        guarded = right.receiver.source
        if left.source != guarded:
            if not _is_predicate_call(left, PRESENCE_PREDICATE) or left.receiver is None:
                return ()
            if left.receiver.source != guarded:
                return ()
        replacement = self._guarded_call(right, add_safe_navigator=self._options(ctx).add_safe_navigator)
        return (self._replacement_finding(node, replacement),)

    @staticmethod
    def _guarded_call(call: SyntaxNode, *, add_safe_navigator: bool) -> str:
        source = call.source
        dot = call.locs.get("dot")
        if not add_safe_navigator or call.kind is NodeKind.CSEND or dot is None:
            return source
        offset = call.range.start
        return f"{source[: dot.start - offset]}{SAFE_NAVIGATOR}{source[dot.end - offset :]}"

    def _check_ternary(self, node: SyntaxNode) -> Iterable[Finding]:
        condition, consequence, alternative = node.condition, node.if_branch, node.else_branch
        if condition is None or consequence is None or alternative is None:
            return ()
        if _is_predicate_call(condition, NIL_PREDICATES) and condition.receiver is not None:
            subject = condition.receiver.source
            if alternative.source != subject:
                return ()
            replacement = f"{subject} || {consequence.source}"
        elif condition.source == consequence.source:
            replacement = f"{condition.source} || {alternative.source}"
        else:
            return ()
        return (self._replacement_finding(node, replacement),)

    @staticmethod
    def _replacement_finding(node: SyntaxNode, replacement: str) -> Finding:
        message = MSG_REPLACE.format(replacement=replacement, original=node.source)
        return Finding(range=node.range, message=message, target=node, data={"replacement": replacement})

    def correct(self, finding: Finding, ctx: VisitContext) -> Correction:
        replacement = finding.data.get("replacement")
        if replacement is None:
            return ()
        return (TextEdit.replace(finding.range, replacement),)


__all__ = [
    "BROAD_EXCEPTIONS",
    "MSG_CHAIN",
    "MSG_REPLACE",
    "MSG_SWALLOW",
    "NoOverlyDefensiveCode",
    "is_specific_exception",
    "swallows_error",
]
