# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Syntax tree abstraction consumed by rules.

Rules never see Tree-sitter objects: the parser adapter converts them into
:class:`SyntaxNode` instances tagged with a closed :class:`NodeKind` set.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Final

from ..core.models import SourceRange
from .buffer import SourceBuffer


class NodeKind(str, Enum):
    """Closed set of node kinds understood by the rule engine."""

    PROGRAM = "program"
    DEF = "def"
    DEFS = "defs"
    CLASS = "class"
    SCLASS = "sclass"
    MODULE = "module"
    SEND = "send"
    CSEND = "csend"
    IDENTIFIER = "identifier"
    LVASGN = "lvasgn"
    IVASGN = "ivasgn"
    CASGN = "casgn"
    ASGN = "asgn"
    OP_ASGN = "op_asgn"
    IVAR = "ivar"
    CONST = "const"
    STR = "str"
    DSTR = "dstr"
    SYM = "sym"
    DSYM = "dsym"
    HEREDOC = "heredoc"
    REGEXP = "regexp"
    NIL = "nil"
    IF = "if"
    TERNARY = "ternary"
    AND = "and"
    OR = "or"
    BEGIN = "begin"
    RESCUE = "rescue"
    RETURN = "return"
    BLOCK = "block"
    INTERPOLATION = "interpolation"
    ARG = "arg"
    OPTARG = "optarg"
    KWARG = "kwarg"
    KWOPTARG = "kwoptarg"
    RESTARG = "restarg"
    KWRESTARG = "kwrestarg"
    BLOCKARG = "blockarg"
    OTHER = "other"


CALL_KINDS: Final[frozenset[NodeKind]] = frozenset({NodeKind.SEND, NodeKind.CSEND})
SCOPE_KINDS: Final[frozenset[NodeKind]] = frozenset({NodeKind.CLASS, NodeKind.MODULE, NodeKind.SCLASS})
SEGMENTED_KINDS: Final[frozenset[NodeKind]] = frozenset({NodeKind.DSTR, NodeKind.DSYM, NodeKind.HEREDOC})
PARAMETER_KINDS: Final[frozenset[NodeKind]] = frozenset(
    {
        NodeKind.ARG,
        NodeKind.OPTARG,
        NodeKind.KWARG,
        NodeKind.KWOPTARG,
        NodeKind.RESTARG,
        NodeKind.KWRESTARG,
        NodeKind.BLOCKARG,
    },
)

_EMPTY: Final[tuple[SyntaxNode, ...]] = ()


@dataclass(eq=False, slots=True)
class SyntaxNode:
    """Node of the converted syntax tree.

    Attributes:
        kind: Closed-set tag describing the construct.
        range: Characters of the buffer covered by the node.
        buffer: Buffer the node was parsed from.
        value: Literal payload (string contents, symbol or method name, ...).
        children: Child nodes in source order.
        roles: Named groups of children (``receiver``, ``body`` ...).
        locs: Named sub-ranges such as ``dot``, ``selector`` or ``end``.
        syntax_type: Grammar node type the node was converted from.
        modifier: Whether the construct used its modifier form (``x rescue y``).
        parent: Enclosing node, ``None`` for the root.
    """

    kind: NodeKind
    range: SourceRange
    buffer: SourceBuffer = field(repr=False)
    value: str | None = None
    children: list[SyntaxNode] = field(default_factory=list, repr=False)
    roles: dict[str, tuple[SyntaxNode, ...]] = field(default_factory=dict, repr=False)
    locs: dict[str, SourceRange] = field(default_factory=dict, repr=False)
    syntax_type: str = ""
    modifier: bool = False
    parent: SyntaxNode | None = field(default=None, repr=False)

    # ------------------------------------------------------------------
    # Generic accessors

    @property
    def source(self) -> str:
        """Return the source text covered by the node."""

        return self.buffer.slice(self.range)

    @property
    def line(self) -> int:
        """Return the 1-based line the node starts on."""

        return self.range.line

    def role(self, name: str) -> SyntaxNode | None:
        """Return the first node bound to role ``name``, if any."""

        members = self.roles.get(name, _EMPTY)
        return members[0] if members else None

    def role_nodes(self, name: str) -> tuple[SyntaxNode, ...]:
        """Return every node bound to role ``name``."""

        return self.roles.get(name, _EMPTY)

    def is_kind(self, *kinds: NodeKind) -> bool:
        """Return whether the node's kind is one of ``kinds``."""

        return self.kind in kinds

    def each_ancestor(self, *kinds: NodeKind) -> Iterator[SyntaxNode]:
        """Yield ancestors from the parent outwards, optionally filtered by kind.

        Args:
            *kinds: Kinds to keep; every ancestor is yielded when omitted.

        Yields:
            SyntaxNode: Matching ancestors, nearest first.
        """

        current = self.parent
        while current is not None:
            if not kinds or current.kind in kinds:
                yield current
            current = current.parent

    def each_descendant(self, *kinds: NodeKind) -> Iterator[SyntaxNode]:
        """Yield descendants in pre-order, optionally filtered by kind.

        Args:
            *kinds: Kinds to keep; every descendant is yielded when omitted.

        Yields:
            SyntaxNode: Matching descendants in source order.
        """

        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            if not kinds or node.kind in kinds:
                yield node
            stack.extend(reversed(node.children))

    # ------------------------------------------------------------------
    # Call accessors

    @property
    def receiver(self) -> SyntaxNode | None:
        """Return the receiver of a call, ``None`` for receiverless calls."""

        return self.role("receiver")

    @property
    def arguments(self) -> tuple[SyntaxNode, ...]:
        """Return the arguments of a call (block excluded)."""

        return self.role_nodes("arguments")

    @property
    def block(self) -> SyntaxNode | None:
        """Return the block attached to a call."""

        return self.role("block")

    @property
    def method_name(self) -> str | None:
        """Return the method name of a call or definition."""

        if self.kind in CALL_KINDS or self.kind in (NodeKind.DEF, NodeKind.DEFS, NodeKind.IDENTIFIER):
            return self.value
        return None

    # ------------------------------------------------------------------
    # Structural accessors

    @property
    def body(self) -> tuple[SyntaxNode, ...]:
        """Return the statements forming the node's body."""

        return self.role_nodes("body")

    @property
    def parameters(self) -> tuple[SyntaxNode, ...]:
        """Return parameter nodes of a definition or block."""

        return self.role_nodes("parameters")

    @property
    def exceptions(self) -> tuple[SyntaxNode, ...]:
        """Return exception class expressions listed by a rescue clause."""

        return self.role_nodes("exceptions")

    @property
    def left(self) -> SyntaxNode | None:
        """Return the left operand of a boolean operator."""

        return self.role("left")

    @property
    def right(self) -> SyntaxNode | None:
        """Return the right operand of a boolean operator."""

        return self.role("right")

    @property
    def condition(self) -> SyntaxNode | None:
        """Return the condition of an ``if``/ternary."""

        return self.role("condition")

    @property
    def if_branch(self) -> SyntaxNode | None:
        """Return the first node of the truthy branch of a conditional."""

        return self.role("consequence")

    @property
    def else_branch(self) -> SyntaxNode | None:
        """Return the first node of the falsy branch of a conditional."""

        return self.role("alternative")

    @property
    def target(self) -> SyntaxNode | None:
        """Return the assignment target."""

        return self.role("target")

    @property
    def assigned(self) -> SyntaxNode | None:
        """Return the value on the right-hand side of an assignment."""

        return self.role("value")

    # ------------------------------------------------------------------
    # Literal predicates

    @property
    def is_segment(self) -> bool:
        """Return whether the node is a string piece of an interpolated literal."""

        return self.kind is NodeKind.STR and self.parent is not None and self.parent.kind in SEGMENTED_KINDS

    @property
    def is_heredoc(self) -> bool:
        """Return whether the node is a heredoc body."""

        return self.kind is NodeKind.HEREDOC

    def in_heredoc(self) -> bool:
        """Return whether the node is, or sits inside, a heredoc body."""

        if self.is_heredoc:
            return True
        return any(True for _ in self.each_ancestor(NodeKind.HEREDOC))

    def __repr__(self) -> str:
        return f"SyntaxNode({self.kind.value}, {self.range.start}..{self.range.end}, value={self.value!r})"


@dataclass(frozen=True, slots=True)
class Comment:
    """Source comment, including its ``#`` marker."""

    text: str
    range: SourceRange

    @property
    def line(self) -> int:
        """Return the 1-based line of the comment."""

        return self.range.line

    @property
    def column(self) -> int:
        """Return the 0-based column of the ``#`` marker."""

        return self.range.column


@dataclass(frozen=True, slots=True)
class ParsedSource:
    """Syntax tree, comment stream and buffer of one file."""

    buffer: SourceBuffer
    root: SyntaxNode
    comments: tuple[Comment, ...]
    syntax_error_count: int = 0

    @property
    def path(self) -> Path | None:
        """Return the file the source was read from, when known."""

        return self.buffer.path

    @property
    def valid_syntax(self) -> bool:
        """Return whether the grammar recovered without error nodes."""

        return self.syntax_error_count == 0

    def comments_by_line(self) -> Mapping[int, tuple[Comment, ...]]:
        """Group comments by their starting line.

        Returns:
            Mapping[int, tuple[Comment, ...]]: Comments keyed by line.
        """

        grouped: dict[int, list[Comment]] = {}
        for comment in self.comments:
            grouped.setdefault(comment.line, []).append(comment)
        return {line: tuple(items) for line, items in grouped.items()}


__all__ = [
    "CALL_KINDS",
    "PARAMETER_KINDS",
    "SCOPE_KINDS",
    "SEGMENTED_KINDS",
    "Comment",
    "NodeKind",
    "ParsedSource",
    "SyntaxNode",
]
