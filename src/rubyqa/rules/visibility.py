# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rule enforcing one placement style for visibility keywords."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final, cast

from ..analysis.structure import (
    enclosing_scope,
    following_methods,
    inline_visibility_call,
    is_standalone_visibility,
    line_indent,
    nearest_section,
    range_with_surrounding_newlines,
    visibility_sections,
)
from ..config.models import ExplicitVisibilityOptions
from ..core.models import Correction, TextEdit
from ..source.nodes import NodeKind, SyntaxNode
from .base import CorrectingRule, Finding, VisitContext

GROUPABLE_KEYWORDS: Final[frozenset[str]] = frozenset({"private", "protected"})
STYLE_MODIFIER: Final[str] = "modifier"
STYLE_GROUPED: Final[str] = "grouped"

MSG_USE_MODIFIER: Final[str] = "Use explicit visibility. Place `{visibility}` before the method definition."
MSG_USE_GROUPED: Final[str] = "Use grouped visibility. Move method to `{visibility}` section."


class ExplicitVisibility(CorrectingRule):
    """Enforce either ``private def foo`` modifiers or grouped ``private`` sections.

    Under the ``modifier`` style a standalone keyword followed by methods is
    reported and each method gets the keyword prefixed. Under the ``grouped``
    style an inline ``private def`` is reported and the method moves into the
    nearest matching section, which is created before the closing ``end`` of
    the class when none exists.
    """

    name = "ExplicitVisibility"
    description = "Enforces grouped or modifier placement of private/protected keywords."
    options_model = ExplicitVisibilityOptions
    node_kinds = frozenset({NodeKind.IDENTIFIER, NodeKind.SEND, NodeKind.DEF})

    def _style(self, ctx: VisitContext) -> str:
        return cast(ExplicitVisibilityOptions, ctx.options(self)).enforced_style

    def check_node(self, node: SyntaxNode, ctx: VisitContext) -> Iterable[Finding]:
        style = self._style(ctx)
        if node.kind is NodeKind.DEF:
            return self._check_inline(node) if style == STYLE_GROUPED else ()
        return self._check_standalone(node) if style == STYLE_MODIFIER else ()

    # ------------------------------------------------------------------
    # modifier style

    @staticmethod
    def _is_statement(node: SyntaxNode) -> bool:
        parent = node.parent
        return parent is not None and any(statement is node for statement in parent.body)

    def _check_standalone(self, node: SyntaxNode) -> Iterable[Finding]:
        if not is_standalone_visibility(node) or not self._is_statement(node):
            return ()
        methods = following_methods(node)
        if not methods:
            return ()
        return (
            Finding(
                range=node.range,
                message=MSG_USE_MODIFIER.format(visibility=node.value),
                target=node,
                data={"style": STYLE_MODIFIER, "keyword": node.value, "methods": tuple(methods)},
            ),
        )

    def _modifier_correction(self, finding: Finding, ctx: VisitContext) -> Correction:
        keyword = cast(str, finding.data["keyword"])
        methods = cast(tuple[SyntaxNode, ...], finding.data["methods"])
        edits = [TextEdit.remove(range_with_surrounding_newlines(ctx.buffer, finding.range))]
        edits.extend(TextEdit.insert_before(method.range, f"{keyword} ") for method in methods)
        return tuple(edits)

    # ------------------------------------------------------------------
    # grouped style

    def _check_inline(self, node: SyntaxNode) -> Iterable[Finding]:
        call = inline_visibility_call(node)
        if call is None or call.value not in GROUPABLE_KEYWORDS:
            return ()
        return (
            Finding(
                range=call.range,
                message=MSG_USE_GROUPED.format(visibility=call.value),
                target=call,
                data={"style": STYLE_GROUPED, "keyword": call.value, "definition": node},
            ),
        )

    def _grouped_correction(self, finding: Finding, ctx: VisitContext) -> Correction:
        call = cast(SyntaxNode, finding.target)
        definition = cast(SyntaxNode, finding.data["definition"])
        keyword = cast(str, finding.data["keyword"])
        scope = enclosing_scope(call)
        if scope is None or call.parent is not scope:
            return ()
        buffer = ctx.buffer
        indent = line_indent(buffer, call.line)
        removal = TextEdit.remove(range_with_surrounding_newlines(buffer, call.range))
        section = nearest_section(visibility_sections(scope.body, keyword), call.range.start)
        if section is not None:
            insertion = TextEdit.insert_after(section.insertion_anchor, f"\n\n{indent}{definition.source}")
            return (removal, insertion)

        end_loc = scope.locs.get("end")
        if end_loc is None:
            return ()
        end_line_start = buffer.line_start(end_loc.line)
        offset = end_line_start if not buffer.text[end_line_start : end_loc.start].strip() else end_loc.start
        created: set[tuple[int, str]] = ctx.state_for(self, set)
        section_key = (scope.range.start, keyword)
        if section_key in created:
            text = f"\n{indent}{definition.source}\n"
        else:
            created.add(section_key)
            text = f"\n\n{indent}{keyword}\n\n{indent}{definition.source}\n"
        return (removal, TextEdit(offset, offset, text))

    def correct(self, finding: Finding, ctx: VisitContext) -> Correction:
        if finding.data.get("style") == STYLE_MODIFIER:
            return self._modifier_correction(finding, ctx)
        return self._grouped_correction(finding, ctx)


__all__ = ["ExplicitVisibility", "MSG_USE_GROUPED", "MSG_USE_MODIFIER"]
