# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for converting Tree-sitter Ruby trees into rubyqa syntax nodes."""

from __future__ import annotations

from pathlib import Path

import pytest

from rubyqa.source.nodes import NodeKind, SyntaxNode
from rubyqa.source.parser import decode_escape, parse_file, parse_source


def _first(root: SyntaxNode, kind: NodeKind) -> SyntaxNode:
    return next(root.each_descendant(kind))


def test_class_body_and_method_definition() -> None:
    parsed = parse_source("class User < Base\n  def greet(name, title = nil, role:, &blk)\n  end\nend\n")

    klass = _first(parsed.root, NodeKind.CLASS)
    definition = _first(parsed.root, NodeKind.DEF)

    assert klass.value == "User"
    assert klass.body == (definition,)
    assert definition.parent is klass
    assert definition.value == "greet"
    assert [(param.kind, param.value) for param in definition.parameters] == [
        (NodeKind.ARG, "name"),
        (NodeKind.OPTARG, "title"),
        (NodeKind.KWARG, "role"),
        (NodeKind.BLOCKARG, "blk"),
    ]
    assert parsed.buffer.slice(klass.locs["end"]) == "end"


def test_safe_navigation_calls_are_conditional_sends() -> None:
    parsed = parse_source("user&.profile.name\n")

    outer = _first(parsed.root, NodeKind.SEND)
    inner = outer.receiver

    assert outer.value == "name"
    assert inner is not None and inner.kind is NodeKind.CSEND
    assert inner.value == "profile"
    assert parsed.buffer.slice(inner.locs["dot"]) == "&."


def test_boolean_operators_and_ternary() -> None:
    parsed = parse_source("a && a.b\nx ? y : z\n")

    conjunction = _first(parsed.root, NodeKind.AND)
    ternary = _first(parsed.root, NodeKind.TERNARY)

    assert conjunction.left is not None and conjunction.left.source == "a"
    assert conjunction.right is not None and conjunction.right.source == "a.b"
    assert [branch.source for branch in (ternary.condition, ternary.if_branch, ternary.else_branch)] == ["x", "y", "z"]


def test_assignments_are_classified_by_target() -> None:
    parsed = parse_source("local = 1\n@ivar = 2\nCONST = 3\nFoo::BAR = 4\n")

    kinds = [statement.kind for statement in parsed.root.body]

    assert kinds == [NodeKind.LVASGN, NodeKind.IVASGN, NodeKind.CASGN, NodeKind.CASGN]
    assert parsed.root.body[2].assigned is not None
    assert parsed.root.body[2].assigned.source == "3"


def test_interpolated_string_is_split_into_segments() -> None:
    parsed = parse_source('puts "a\\tb #{name} c"\n')

    literal = _first(parsed.root, NodeKind.DSTR)
    segments = [child for child in literal.children if child.kind is NodeKind.STR]

    assert [segment.value for segment in segments] == ["a\tb ", " c"]
    assert all(segment.is_segment for segment in segments)
    assert any(child.kind is NodeKind.INTERPOLATION for child in literal.children)


def test_plain_string_symbol_and_regex_values() -> None:
    parsed = parse_source("x = 'hi'\ny = :sym\nz = /ab+c/\n")

    assert _first(parsed.root, NodeKind.STR).value == "hi"
    assert _first(parsed.root, NodeKind.SYM).value == "sym"
    assert _first(parsed.root, NodeKind.REGEXP).value == "ab+c"


def test_rescue_clauses() -> None:
    parsed = parse_source("begin\n  work\nrescue KeyError => e\n  nil\nend\nvalue = risky rescue nil\n")

    clauses = list(parsed.root.each_descendant(NodeKind.RESCUE))

    assert [clause.modifier for clause in clauses] == [False, True]
    assert [item.value for item in clauses[0].exceptions] == ["KeyError"]
    assert [statement.kind for statement in clauses[0].body] == [NodeKind.NIL]
    assert [statement.kind for statement in clauses[1].body] == [NodeKind.NIL]


def test_comments_are_collected_in_order() -> None:
    parsed = parse_source("# first\nx = 1 # second\n")

    assert [(comment.text, comment.line, comment.column) for comment in parsed.comments] == [
        ("# first", 1, 0),
        ("# second", 2, 6),
    ]


def test_multibyte_offsets_are_character_based() -> None:
    parsed = parse_source('s = "é→"\n# ok\n')

    literal = _first(parsed.root, NodeKind.STR)

    assert literal.value == "é→"
    assert literal.range.column == 4
    assert parsed.comments[0].range.start == len('s = "é→"\n')


def test_syntax_errors_are_counted() -> None:
    parsed = parse_source("def broken(\n")

    assert not parsed.valid_syntax
    assert parsed.syntax_error_count > 0
    assert parse_source("def ok; end\n").valid_syntax


def test_parse_file_preserves_undecodable_bytes(tmp_path: Path) -> None:
    path = tmp_path / "latin.rb"
    path.write_bytes(b"# caf\xe9\nx = 1\n")

    parsed = parse_file(path)

    assert parsed.path == path
    assert parsed.buffer.text.encode("utf-8", errors="surrogateescape") == b"# caf\xe9\nx = 1\n"


@pytest.mark.parametrize(
    ("sequence", "expected"),
    [("\\n", "\n"), ("\\u00e9", "é"), ("\\u{1F389}", "🎉"), ("\\x41", "A"), ("\\101", "A"), ("\\q", "q")],
)
def test_decode_escape(sequence: str, expected: str) -> None:
    assert decode_escape(sequence) == expected
