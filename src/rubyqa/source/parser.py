# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Convert Tree-sitter Ruby syntax trees into :class:`SyntaxNode` trees."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Final

from tree_sitter import Node

from ..core.models import SourceRange
from .buffer import SourceBuffer
from .grammars import build_ruby_parser
from .nodes import Comment, NodeKind, ParsedSource, SyntaxNode

LOGGER = logging.getLogger(__name__)

_COMMENT_TYPE: Final[str] = "comment"
_ERROR_TYPE: Final[str] = "ERROR"
_SAFE_NAVIGATION: Final[str] = "&."

# Grammar wrappers whose children are hoisted into the enclosing node.
_FLATTENED_TYPES: Final[frozenset[str]] = frozenset(
    {
        "argument_list",
        "block_body",
        "block_parameters",
        "body_statement",
        "exceptions",
        "lambda_parameters",
        "method_parameters",
        "then",
    },
)
_STRING_PIECE_TYPES: Final[frozenset[str]] = frozenset({"string_content", "escape_sequence", "heredoc_content"})
_AND_OPERATORS: Final[frozenset[str]] = frozenset({"&&", "and"})
_OR_OPERATORS: Final[frozenset[str]] = frozenset({"||", "or"})
_SIMPLE_ESCAPES: Final[dict[str, str]] = {
    "a": "\a",
    "b": "\b",
    "e": "\x1b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "s": " ",
    "t": "\t",
    "v": "\v",
}
_OCTAL_DIGITS: Final[str] = "01234567"
_HEX_BASE: Final[int] = 16
_OCTAL_BASE: Final[int] = 8


def parse_source(text: str, path: Path | None = None) -> ParsedSource:
    """Parse Ruby ``text`` into a :class:`ParsedSource`.

    Args:
        text: Decoded Ruby source.
        path: File the text was read from, when known.

    Returns:
        ParsedSource: Converted syntax tree, comments and buffer.

    Raises:
        GrammarUnavailableError: If the Ruby grammar cannot be loaded.
    """

    buffer = SourceBuffer(text, path)
    parser = build_ruby_parser()
    tree = parser.parse(buffer.encoded)
    converter = _TreeConverter(buffer)
    root = converter.convert_root(tree.root_node)
    comments = tuple(sorted(_collect_comments(tree.root_node, converter), key=lambda item: item.range.start))
    # Missing tokens are anonymous and never reached by the converter.
    error_count = converter.error_count or int(tree.root_node.has_error)
    if error_count:
        LOGGER.debug("%s: grammar recovered from %d syntax error(s)", path or "<source>", error_count)
    return ParsedSource(buffer=buffer, root=root, comments=comments, syntax_error_count=error_count)


def parse_file(path: Path) -> ParsedSource:
    """Read and parse the Ruby file at ``path``.

    Undecodable bytes are preserved through ``surrogateescape`` so that
    corrected files can be written back byte-for-byte.

    Args:
        path: Ruby file to read.

    Returns:
        ParsedSource: Parsed representation of the file.
    """

    text = path.read_bytes().decode("utf-8", errors="surrogateescape")
    return parse_source(text, path)


def decode_escape(sequence: str) -> str:
    """Return the character(s) denoted by a double-quoted escape ``sequence``.

    Args:
        sequence: Escape text including the leading backslash.

    Returns:
        str: Decoded text, or ``sequence`` unchanged when it cannot be decoded.
    """

    body = sequence[1:]
    if not body:
        return sequence
    head = body[0]
    try:
        if body.startswith("u{"):
            return "".join(chr(int(code, _HEX_BASE)) for code in body[2:-1].split())
        if head == "u":
            return chr(int(body[1:5], _HEX_BASE))
        if head == "x":
            return chr(int(body[1:], _HEX_BASE))
        if head in _OCTAL_DIGITS and all(char in _OCTAL_DIGITS for char in body):
            return chr(int(body, _OCTAL_BASE))
    except (ValueError, OverflowError):
        return sequence
    return _SIMPLE_ESCAPES.get(head, body)


def _collect_comments(root: Node, converter: _TreeConverter) -> Iterable[Comment]:
    stack = [root]
    while stack:
        current = stack.pop()
        if current.type == _COMMENT_TYPE:
            node_range = converter.range_of(current)
            yield Comment(text=converter.buffer.slice(node_range), range=node_range)
            continue
        stack.extend(current.named_children)


def _same(left: Node | None, right: Node | None) -> bool:
    if left is None or right is None:
        return False
    return (left.start_byte, left.end_byte, left.type) == (right.start_byte, right.end_byte, right.type)


class _TreeConverter:
    """Stateful conversion of one Tree-sitter tree."""

    def __init__(self, buffer: SourceBuffer) -> None:
        self.buffer = buffer
        self.error_count = 0
        self._handlers: dict[str, Callable[[Node], SyntaxNode]] = {
            "program": self._program,
            "method": self._method,
            "singleton_method": self._singleton_method,
            "class": self._class,
            "singleton_class": self._singleton_class,
            "module": self._module,
            "call": self._call,
            "identifier": self._leaf(NodeKind.IDENTIFIER),
            "constant": self._leaf(NodeKind.CONST),
            "scope_resolution": self._leaf(NodeKind.CONST),
            "instance_variable": self._leaf(NodeKind.IVAR),
            "nil": self._leaf(NodeKind.NIL),
            "assignment": self._assignment,
            "operator_assignment": self._operator_assignment,
            "string": self._string,
            "bare_string": self._string,
            "chained_string": self._chained_string,
            "character": self._character,
            "simple_symbol": self._simple_symbol,
            "hash_key_symbol": self._leaf(NodeKind.SYM),
            "bare_symbol": self._leaf(NodeKind.SYM),
            "delimited_symbol": self._delimited_symbol,
            "regex": self._regex,
            "heredoc_body": self._heredoc_body,
            "if": self._if,
            "unless": self._if,
            "elsif": self._if,
            "if_modifier": self._if_modifier,
            "unless_modifier": self._if_modifier,
            "conditional": self._conditional,
            "binary": self._binary,
            "begin": self._begin,
            "rescue": self._rescue,
            "rescue_modifier": self._rescue_modifier,
            "block": self._block,
            "do_block": self._block,
            "return": self._return,
            "interpolation": self._interpolation,
        }

    # ------------------------------------------------------------------
    # Entry points and shared helpers

    def convert_root(self, root: Node) -> SyntaxNode:
        """Return the converted program node."""

        return self.convert(root)

    def convert(self, ts_node: Node) -> SyntaxNode:
        """Convert one grammar node (never a flattened wrapper)."""

        if ts_node.type == _ERROR_TYPE or ts_node.is_missing:
            self.error_count += 1
            return self._generic(ts_node)
        handler = self._handlers.get(ts_node.type, self._generic)
        return handler(ts_node)

    def expand(self, ts_node: Node | None) -> list[SyntaxNode]:
        """Convert ``ts_node``, hoisting the children of wrapper nodes."""

        if ts_node is None or ts_node.type == _COMMENT_TYPE:
            return []
        if ts_node.type in _FLATTENED_TYPES:
            return self.expand_all(ts_node.named_children)
        return [self.convert(ts_node)]

    def expand_all(self, ts_nodes: Iterable[Node]) -> list[SyntaxNode]:
        """Convert every node in ``ts_nodes`` through :meth:`expand`."""

        converted: list[SyntaxNode] = []
        for item in ts_nodes:
            converted.extend(self.expand(item))
        return converted

    def range_of(self, ts_node: Node) -> SourceRange:
        """Return the character range covered by ``ts_node``."""

        return self.buffer.make_range(
            self.buffer.char_offset(ts_node.start_byte),
            self.buffer.char_offset(ts_node.end_byte),
        )

    def text_of(self, ts_node: Node) -> str:
        """Return the source text of ``ts_node``."""

        return self.buffer.slice(self.range_of(ts_node))

    def _make(
        self,
        kind: NodeKind,
        ts_node: Node,
        *,
        children: Sequence[SyntaxNode] = (),
        roles: dict[str, Sequence[SyntaxNode]] | None = None,
        value: str | None = None,
        locs: dict[str, SourceRange] | None = None,
        modifier: bool = False,
        node_range: SourceRange | None = None,
    ) -> SyntaxNode:
        node = SyntaxNode(
            kind=kind,
            range=node_range or self.range_of(ts_node),
            buffer=self.buffer,
            value=value,
            children=sorted(children, key=lambda child: child.range.start),
            roles={name: tuple(members) for name, members in (roles or {}).items() if members},
            locs=locs or {},
            syntax_type=ts_node.type,
            modifier=modifier,
        )
        for child in node.children:
            child.parent = node
        return node

    def _named_without(self, ts_node: Node, *excluded: Node | None) -> list[Node]:
        return [
            child
            for child in ts_node.named_children
            if child.type != _COMMENT_TYPE and not any(_same(child, item) for item in excluded)
        ]

    def _token_loc(self, ts_node: Node, token: str, *, last: bool = False) -> SourceRange | None:
        candidates = reversed(ts_node.children) if last else iter(ts_node.children)
        for child in candidates:
            if not child.is_named and child.type == token:
                return self.range_of(child)
        return None

    def _locs(self, **entries: SourceRange | None) -> dict[str, SourceRange]:
        return {name: entry for name, entry in entries.items() if entry is not None}

    def _leaf(self, kind: NodeKind) -> Callable[[Node], SyntaxNode]:
        def build(ts_node: Node) -> SyntaxNode:
            return self._make(kind, ts_node, value=self.text_of(ts_node))

        return build

    def _generic(self, ts_node: Node) -> SyntaxNode:
        return self._make(NodeKind.OTHER, ts_node, children=self.expand_all(ts_node.named_children))

    # ------------------------------------------------------------------
    # Definitions

    def _program(self, ts_node: Node) -> SyntaxNode:
        statements = self.expand_all(ts_node.named_children)
        return self._make(NodeKind.PROGRAM, ts_node, children=statements, roles={"body": statements})

    def _parameter(self, ts_node: Node) -> SyntaxNode:
        name_node = ts_node.child_by_field_name("name")
        name = self.text_of(name_node) if name_node is not None else None
        default = ts_node.child_by_field_name("value")
        defaults = self.expand(default)
        kind_by_type = {
            "identifier": NodeKind.ARG,
            "optional_parameter": NodeKind.OPTARG,
            "keyword_parameter": NodeKind.KWOPTARG if default is not None else NodeKind.KWARG,
            "splat_parameter": NodeKind.RESTARG,
            "hash_splat_parameter": NodeKind.KWRESTARG,
            "block_parameter": NodeKind.BLOCKARG,
        }
        kind = kind_by_type.get(ts_node.type)
        if kind is None:
            return self.convert(ts_node)
        if kind is NodeKind.ARG:
            name = self.text_of(ts_node)
        return self._make(kind, ts_node, value=name, children=defaults, roles={"value": defaults})

    def _parameters(self, ts_node: Node | None) -> list[SyntaxNode]:
        if ts_node is None:
            return []
        return [self._parameter(child) for child in ts_node.named_children if child.type != _COMMENT_TYPE]

    def _method(self, ts_node: Node) -> SyntaxNode:
        name_node = ts_node.child_by_field_name("name")
        params_node = ts_node.child_by_field_name("parameters")
        params = self._parameters(params_node)
        body = self.expand_all(self._named_without(ts_node, name_node, params_node))
        return self._make(
            NodeKind.DEF,
            ts_node,
            value=self.text_of(name_node) if name_node is not None else None,
            children=[*params, *body],
            roles={"parameters": params, "body": body},
            locs=self._locs(
                keyword=self._token_loc(ts_node, "def"),
                name=self.range_of(name_node) if name_node is not None else None,
                end=self._token_loc(ts_node, "end", last=True),
            ),
        )

    def _singleton_method(self, ts_node: Node) -> SyntaxNode:
        object_node = ts_node.child_by_field_name("object")
        name_node = ts_node.child_by_field_name("name")
        params_node = ts_node.child_by_field_name("parameters")
        receiver = self.expand(object_node)
        params = self._parameters(params_node)
        body = self.expand_all(self._named_without(ts_node, object_node, name_node, params_node))
        return self._make(
            NodeKind.DEFS,
            ts_node,
            value=self.text_of(name_node) if name_node is not None else None,
            children=[*receiver, *params, *body],
            roles={"receiver": receiver, "parameters": params, "body": body},
            locs=self._locs(
                keyword=self._token_loc(ts_node, "def"),
                name=self.range_of(name_node) if name_node is not None else None,
                end=self._token_loc(ts_node, "end", last=True),
            ),
        )

    def _scope(self, kind: NodeKind, ts_node: Node, name_field: str, *extra_fields: str) -> SyntaxNode:
        name_node = ts_node.child_by_field_name(name_field)
        extra_nodes = [ts_node.child_by_field_name(field_name) for field_name in extra_fields]
        name = self.expand(name_node)
        extras = self.expand_all(extra for extra in extra_nodes if extra is not None)
        body = self.expand_all(self._named_without(ts_node, name_node, *extra_nodes))
        keyword = "class" if kind is not NodeKind.MODULE else "module"
        return self._make(
            kind,
            ts_node,
            value=self.text_of(name_node) if name_node is not None else None,
            children=[*name, *extras, *body],
            roles={"name": name, "superclass": extras, "body": body},
            locs=self._locs(
                keyword=self._token_loc(ts_node, keyword),
                end=self._token_loc(ts_node, "end", last=True),
            ),
        )

    def _class(self, ts_node: Node) -> SyntaxNode:
        return self._scope(NodeKind.CLASS, ts_node, "name", "superclass")

    def _singleton_class(self, ts_node: Node) -> SyntaxNode:
        return self._scope(NodeKind.SCLASS, ts_node, "value")

    def _module(self, ts_node: Node) -> SyntaxNode:
        return self._scope(NodeKind.MODULE, ts_node, "name")

    # ------------------------------------------------------------------
    # Calls

    def _call(self, ts_node: Node) -> SyntaxNode:
        receiver_node = ts_node.child_by_field_name("receiver")
        operator_node = ts_node.child_by_field_name("operator")
        method_node = ts_node.child_by_field_name("method")
        arguments_node = ts_node.child_by_field_name("arguments")
        block_node = ts_node.child_by_field_name("block")
        receiver = self.expand(receiver_node)
        arguments = self.expand(arguments_node)
        block = self.expand(block_node)
        # Heredoc bodies are hoisted into the argument list by the grammar.
        heredocs = [item for item in arguments if item.kind is NodeKind.HEREDOC]
        arguments = [item for item in arguments if item.kind is not NodeKind.HEREDOC]
        operator = self.text_of(operator_node) if operator_node is not None else None
        kind = NodeKind.CSEND if operator == _SAFE_NAVIGATION else NodeKind.SEND
        return self._make(
            kind,
            ts_node,
            value=self.text_of(method_node) if method_node is not None else "call",
            children=[*receiver, *arguments, *heredocs, *block],
            roles={"receiver": receiver, "arguments": arguments, "block": block},
            locs=self._locs(
                dot=self.range_of(operator_node) if operator_node is not None else None,
                selector=self.range_of(method_node) if method_node is not None else None,
            ),
        )

    def _block(self, ts_node: Node) -> SyntaxNode:
        params_node = ts_node.child_by_field_name("parameters")
        params = self._parameters(params_node)
        body = self.expand_all(self._named_without(ts_node, params_node))
        return self._make(
            NodeKind.BLOCK,
            ts_node,
            children=[*params, *body],
            roles={"parameters": params, "body": body},
        )

    def _return(self, ts_node: Node) -> SyntaxNode:
        arguments = self.expand_all(ts_node.named_children)
        return self._make(NodeKind.RETURN, ts_node, children=arguments, roles={"arguments": arguments})

    # ------------------------------------------------------------------
    # Assignments

    def _assignment(self, ts_node: Node) -> SyntaxNode:
        left_node = ts_node.child_by_field_name("left")
        right_node = ts_node.child_by_field_name("right")
        target = self.expand(left_node)
        assigned = self.expand(right_node)
        kind_by_type = {
            "identifier": NodeKind.LVASGN,
            "instance_variable": NodeKind.IVASGN,
            "constant": NodeKind.CASGN,
            "scope_resolution": NodeKind.CASGN,
        }
        kind = kind_by_type.get(left_node.type, NodeKind.ASGN) if left_node is not None else NodeKind.ASGN
        return self._make(
            kind,
            ts_node,
            value=self.text_of(left_node) if left_node is not None else None,
            children=[*target, *assigned],
            roles={"target": target, "value": assigned},
        )

    def _operator_assignment(self, ts_node: Node) -> SyntaxNode:
        left_node = ts_node.child_by_field_name("left")
        target = self.expand(left_node)
        assigned = self.expand(ts_node.child_by_field_name("right"))
        return self._make(
            NodeKind.OP_ASGN,
            ts_node,
            value=self.text_of(left_node) if left_node is not None else None,
            children=[*target, *assigned],
            roles={"target": target, "value": assigned},
        )

    # ------------------------------------------------------------------
    # Literals

    def _decode_pieces(self, pieces: Sequence[Node]) -> str:
        decoded: list[str] = []
        for piece in pieces:
            text = self.text_of(piece)
            decoded.append(decode_escape(text) if piece.type == "escape_sequence" else text)
        return "".join(decoded)

    def _segments(self, ts_node: Node) -> list[SyntaxNode]:
        """Split an interpolated literal into string segments and interpolations."""

        segments: list[SyntaxNode] = []
        pending: list[Node] = []

        def flush() -> None:
            if not pending:
                return
            start = self.buffer.char_offset(pending[0].start_byte)
            end = self.buffer.char_offset(pending[-1].end_byte)
            segments.append(
                self._make(
                    NodeKind.STR,
                    pending[0],
                    value=self._decode_pieces(pending),
                    node_range=self.buffer.make_range(start, end),
                ),
            )
            pending.clear()

        for child in ts_node.named_children:
            if child.type in _STRING_PIECE_TYPES:
                pending.append(child)
                continue
            flush()
            if child.type == "interpolation":
                segments.append(self.convert(child))
        flush()
        return segments

    def _has_interpolation(self, ts_node: Node) -> bool:
        return any(child.type == "interpolation" for child in ts_node.named_children)

    def _string(self, ts_node: Node) -> SyntaxNode:
        if self._has_interpolation(ts_node):
            segments = self._segments(ts_node)
            return self._make(NodeKind.DSTR, ts_node, children=segments)
        pieces = [child for child in ts_node.named_children if child.type in _STRING_PIECE_TYPES]
        return self._make(NodeKind.STR, ts_node, value=self._decode_pieces(pieces))

    def _chained_string(self, ts_node: Node) -> SyntaxNode:
        parts = self.expand_all(ts_node.named_children)
        return self._make(NodeKind.DSTR, ts_node, children=parts)

    def _character(self, ts_node: Node) -> SyntaxNode:
        text = self.text_of(ts_node)
        value = decode_escape(text[1:]) if text.startswith("?\\") else text[1:]
        return self._make(NodeKind.STR, ts_node, value=value)

    def _simple_symbol(self, ts_node: Node) -> SyntaxNode:
        return self._make(NodeKind.SYM, ts_node, value=self.text_of(ts_node)[1:])

    def _delimited_symbol(self, ts_node: Node) -> SyntaxNode:
        if self._has_interpolation(ts_node):
            return self._make(NodeKind.DSYM, ts_node, children=self._segments(ts_node))
        pieces = [child for child in ts_node.named_children if child.type in _STRING_PIECE_TYPES]
        return self._make(NodeKind.SYM, ts_node, value=self._decode_pieces(pieces))

    def _regex(self, ts_node: Node) -> SyntaxNode:
        pieces = [child for child in ts_node.named_children if child.type in _STRING_PIECE_TYPES]
        interpolations = [self.convert(child) for child in ts_node.named_children if child.type == "interpolation"]
        pattern = "".join(self.text_of(piece) for piece in pieces)
        return self._make(NodeKind.REGEXP, ts_node, value=pattern, children=interpolations)

    def _heredoc_body(self, ts_node: Node) -> SyntaxNode:
        segments = self._segments(ts_node)
        pieces = [child for child in ts_node.named_children if child.type in _STRING_PIECE_TYPES]
        return self._make(NodeKind.HEREDOC, ts_node, value=self._decode_pieces(pieces), children=segments)

    def _interpolation(self, ts_node: Node) -> SyntaxNode:
        statements = self.expand_all(ts_node.named_children)
        return self._make(NodeKind.INTERPOLATION, ts_node, children=statements, roles={"body": statements})

    # ------------------------------------------------------------------
    # Control flow

    def _branch(self, ts_node: Node | None) -> list[SyntaxNode]:
        if ts_node is None:
            return []
        if ts_node.type == "else":
            return self.expand_all(ts_node.named_children)
        return self.expand(ts_node)

    def _if(self, ts_node: Node) -> SyntaxNode:
        condition = self.expand(ts_node.child_by_field_name("condition"))
        consequence = self._branch(ts_node.child_by_field_name("consequence"))
        alternative = self._branch(ts_node.child_by_field_name("alternative"))
        return self._make(
            NodeKind.IF,
            ts_node,
            value=ts_node.type,
            children=[*condition, *consequence, *alternative],
            roles={"condition": condition, "consequence": consequence, "alternative": alternative},
        )

    def _if_modifier(self, ts_node: Node) -> SyntaxNode:
        body = self.expand(ts_node.child_by_field_name("body"))
        condition = self.expand(ts_node.child_by_field_name("condition"))
        return self._make(
            NodeKind.IF,
            ts_node,
            value=ts_node.type,
            children=[*body, *condition],
            roles={"condition": condition, "consequence": body},
            modifier=True,
        )

    def _conditional(self, ts_node: Node) -> SyntaxNode:
        condition = self.expand(ts_node.child_by_field_name("condition"))
        consequence = self.expand(ts_node.child_by_field_name("consequence"))
        alternative = self.expand(ts_node.child_by_field_name("alternative"))
        return self._make(
            NodeKind.TERNARY,
            ts_node,
            children=[*condition, *consequence, *alternative],
            roles={"condition": condition, "consequence": consequence, "alternative": alternative},
        )

    def _binary(self, ts_node: Node) -> SyntaxNode:
        operator_node = ts_node.child_by_field_name("operator")
        operator = self.text_of(operator_node) if operator_node is not None else ""
        left = self.expand(ts_node.child_by_field_name("left"))
        right = self.expand(ts_node.child_by_field_name("right"))
        if operator in _AND_OPERATORS:
            kind = NodeKind.AND
        elif operator in _OR_OPERATORS:
            kind = NodeKind.OR
        else:
            kind = NodeKind.OTHER
        return self._make(
            kind,
            ts_node,
            value=operator,
            children=[*left, *right],
            roles={"left": left, "right": right},
            locs=self._locs(operator=self.range_of(operator_node) if operator_node is not None else None),
        )

    def _begin(self, ts_node: Node) -> SyntaxNode:
        statements = self.expand_all(ts_node.named_children)
        return self._make(NodeKind.BEGIN, ts_node, children=statements, roles={"body": statements})

    def _rescue(self, ts_node: Node) -> SyntaxNode:
        exceptions_node = ts_node.child_by_field_name("exceptions")
        variable_node = ts_node.child_by_field_name("variable")
        body_node = ts_node.child_by_field_name("body")
        exceptions = self.expand(exceptions_node)
        variable = self.expand(variable_node)
        body = self.expand(body_node)
        return self._make(
            NodeKind.RESCUE,
            ts_node,
            children=[*exceptions, *variable, *body],
            roles={"exceptions": exceptions, "variable": variable, "body": body},
            locs=self._locs(keyword=self._token_loc(ts_node, "rescue")),
        )

    def _rescue_modifier(self, ts_node: Node) -> SyntaxNode:
        expression = self.expand(ts_node.child_by_field_name("body"))
        handler = self.expand(ts_node.child_by_field_name("handler"))
        return self._make(
            NodeKind.RESCUE,
            ts_node,
            children=[*expression, *handler],
            roles={"expression": expression, "body": handler},
            locs=self._locs(keyword=self._token_loc(ts_node, "rescue")),
            modifier=True,
        )


__all__ = ["decode_escape", "parse_file", "parse_source"]
