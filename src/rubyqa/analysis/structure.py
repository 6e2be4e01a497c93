# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Structural helpers shared by rules: call chains, scopes and visibility sections."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from ..core.models import SourceRange
from ..source.buffer import SourceBuffer
from ..source.nodes import SCOPE_KINDS, NodeKind, SyntaxNode

VISIBILITY_KEYWORDS: Final[frozenset[str]] = frozenset({"private", "protected", "public"})
_HORIZONTAL_SPACE: Final[str] = " \t"
_NEWLINE: Final[str] = "\n"


def safe_navigation_chain_length(node: SyntaxNode) -> int:
    """Count the consecutive ``&.`` calls ending at ``node``.

    The walk follows receiver links while they remain conditional sends, so a
    plain ``.`` call breaks the chain.

    Args:
        node: Outermost call of the chain.

    Returns:
        int: Number of chained safe-navigation operators.
    """

    count = 0
    current: SyntaxNode | None = node
    while current is not None and current.kind is NodeKind.CSEND:
        count += 1
        current = current.receiver
    return count


def is_chain_head(node: SyntaxNode) -> bool:
    """Return whether ``node`` is the outermost call of its ``&.`` chain."""

    parent = node.parent
    if parent is None or parent.kind is not NodeKind.CSEND:
        return True
    return parent.receiver is not node


def collect_instance_variables(scope: SyntaxNode) -> frozenset[str]:
    """Return the instance variable names referenced anywhere below ``scope``.

    Args:
        scope: Class or module node to scan.

    Returns:
        frozenset[str]: Variable names without the leading ``@``.
    """

    names = {node.value.removeprefix("@") for node in scope.each_descendant(NodeKind.IVAR) if node.value}
    names.update(
        node.value.removeprefix("@") for node in scope.each_descendant(NodeKind.IVASGN) if node.value
    )
    return frozenset(names)


def enclosing_scope(node: SyntaxNode) -> SyntaxNode | None:
    """Return the nearest enclosing class, module or singleton class."""

    return next(node.each_ancestor(*SCOPE_KINDS), None)


def is_standalone_visibility(node: SyntaxNode) -> bool:
    """Return whether ``node`` is a bare ``private``/``protected``/``public`` statement."""

    if node.value not in VISIBILITY_KEYWORDS:
        return False
    if node.kind is NodeKind.IDENTIFIER:
        return True
    return node.kind is NodeKind.SEND and node.receiver is None and not node.arguments and node.block is None


def inline_visibility_call(definition: SyntaxNode) -> SyntaxNode | None:
    """Return the ``private def ...`` style call wrapping ``definition``, if any.

    Args:
        definition: Method definition node.

    Returns:
        SyntaxNode | None: Wrapping visibility call with ``definition`` as its
        single argument, or ``None``.
    """

    parent = definition.parent
    if parent is None or parent.kind is not NodeKind.SEND:
        return None
    if parent.value not in VISIBILITY_KEYWORDS or parent.receiver is not None:
        return None
    if len(parent.arguments) != 1 or parent.arguments[0] is not definition:
        return None
    return parent


def following_methods(keyword: SyntaxNode) -> list[SyntaxNode]:
    """Return the method definitions governed by a standalone visibility keyword.

    Args:
        keyword: Standalone visibility statement.

    Returns:
        list[SyntaxNode]: Sibling ``def`` nodes up to the next standalone keyword.
    """

    parent = keyword.parent
    if parent is None:
        return []
    siblings = parent.children
    try:
        index = next(position for position, sibling in enumerate(siblings) if sibling is keyword)
    except StopIteration:
        return []
    methods: list[SyntaxNode] = []
    for sibling in siblings[index + 1 :]:
        if is_standalone_visibility(sibling):
            break
        if sibling.kind is NodeKind.DEF:
            methods.append(sibling)
    return methods


@dataclass(frozen=True, slots=True)
class VisibilitySection:
    """Stretch of a class body governed by one standalone visibility keyword."""

    keyword: str
    keyword_node: SyntaxNode
    methods: tuple[SyntaxNode, ...]

    @property
    def insertion_anchor(self) -> SourceRange:
        """Return the range after which new methods of the section are inserted."""

        if self.methods:
            return self.methods[-1].range
        return self.keyword_node.range


def visibility_sections(body: Sequence[SyntaxNode], keyword: str | None = None) -> list[VisibilitySection]:
    """Split ``body`` into visibility sections.

    Args:
        body: Statements of a class or module body in source order.
        keyword: Only return sections opened by this keyword when given.

    Returns:
        list[VisibilitySection]: Sections in source order.
    """

    sections: list[VisibilitySection] = []
    current_node: SyntaxNode | None = None
    current_methods: list[SyntaxNode] = []

    def close() -> None:
        if current_node is not None and current_node.value is not None:
            sections.append(VisibilitySection(current_node.value, current_node, tuple(current_methods)))

    for statement in body:
        if is_standalone_visibility(statement):
            close()
            current_node = statement
            current_methods = []
        elif statement.kind is NodeKind.DEF and current_node is not None:
            current_methods.append(statement)
    close()
    if keyword is None:
        return sections
    return [section for section in sections if section.keyword == keyword]


def nearest_section(sections: Sequence[VisibilitySection], offset: int) -> VisibilitySection | None:
    """Return the last section opened before ``offset``, else the first after it."""

    preceding = [section for section in sections if section.keyword_node.range.start < offset]
    if preceding:
        return preceding[-1]
    return sections[0] if sections else None


def line_indent(buffer: SourceBuffer, line: int) -> str:
    """Return the leading whitespace of ``line``."""

    content = buffer.lines[line - 1]
    return content[: len(content) - len(content.lstrip(_HORIZONTAL_SPACE))]


def range_with_surrounding_newlines(buffer: SourceBuffer, target: SourceRange) -> SourceRange:
    """Widen ``target`` so that removing it deletes its whole line(s).

    The range grows over the indentation before it and the newline after it.
    When the removed lines border a blank line, one blank line goes with them
    so that the surrounding code does not gain an extra gap.

    Args:
        buffer: Buffer containing ``target``.
        target: Range of a statement standing on its own line(s).

    Returns:
        SourceRange: Widened range, or ``target`` when it shares its lines with
        other code.
    """

    text = buffer.text
    start, end = target.start, target.end
    while start > 0 and text[start - 1] in _HORIZONTAL_SPACE:
        start -= 1
    if start > 0 and text[start - 1] != _NEWLINE:
        return target
    if end < len(text):
        if text[end] != _NEWLINE:
            return target
        end += 1
    if start > 0 and (start == 1 or text[start - 2] == _NEWLINE):
        start -= 1
    elif end < len(text) and text[end] == _NEWLINE:
        end += 1
    return buffer.make_range(start, end)


__all__ = [
    "VISIBILITY_KEYWORDS",
    "VisibilitySection",
    "collect_instance_variables",
    "enclosing_scope",
    "following_methods",
    "inline_visibility_call",
    "is_chain_head",
    "is_standalone_visibility",
    "line_indent",
    "nearest_section",
    "range_with_surrounding_newlines",
    "safe_navigation_chain_length",
    "visibility_sections",
]
