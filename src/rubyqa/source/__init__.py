# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Ruby source loading and syntax tree conversion."""

from __future__ import annotations

from .buffer import SourceBuffer
from .grammars import build_ruby_parser, ensure_language, grammar_available
from .nodes import CALL_KINDS, PARAMETER_KINDS, SCOPE_KINDS, SEGMENTED_KINDS, Comment, NodeKind, ParsedSource, SyntaxNode
from .parser import decode_escape, parse_file, parse_source

__all__ = [
    "CALL_KINDS",
    "PARAMETER_KINDS",
    "SCOPE_KINDS",
    "SEGMENTED_KINDS",
    "Comment",
    "NodeKind",
    "ParsedSource",
    "SourceBuffer",
    "SyntaxNode",
    "build_ruby_parser",
    "decode_escape",
    "ensure_language",
    "grammar_available",
    "parse_file",
    "parse_source",
]
