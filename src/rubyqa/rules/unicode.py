# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rules flagging non-ASCII symbols and emoji in literals and comments."""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable, Iterator, Sequence
from typing import Final, cast

from ..config.models import NoEmojiOptions, NoFancyUnicodeOptions
from ..core.models import Correction, TextEdit
from ..source.nodes import Comment, NodeKind, SyntaxNode
from .base import CorrectingRule, Finding, Rule, VisitContext

_STRING_KINDS: Final[frozenset[NodeKind]] = frozenset({NodeKind.STR, NodeKind.DSTR, NodeKind.HEREDOC})
_SYMBOL_KINDS: Final[frozenset[NodeKind]] = frozenset({NodeKind.SYM, NodeKind.DSYM})
_ALLOWED_CONTROL: Final[str] = "\t\n\r"
_ALLOWED_CATEGORIES: Final[str] = "LMN"
_PRINTABLE_FIRST: Final[int] = 0x20
_PRINTABLE_LAST: Final[int] = 0x7E
_SURROGATE_FIRST: Final[int] = 0xD800
_SURROGATE_LAST: Final[int] = 0xDFFF

# Cleanup applied after removing characters, in order.
_TIDY_STEPS: Final[tuple[tuple[re.Pattern[str], str], ...]] = (
    (re.compile(r"_+\Z", re.ASCII), ""),
    (re.compile(r"_+(['\"])", re.ASCII), r"\1"),
    (re.compile(r"\s{2,}", re.ASCII), " "),
    (re.compile(r"\s+(['\"])", re.ASCII), r"\1"),
    (re.compile(r"\s+\Z", re.ASCII), ""),
)
_LEADING_SPACE: Final[re.Pattern[str]] = re.compile(r"\A[ \t]*")

EMOJI_RANGES: Final[tuple[tuple[int, int], ...]] = (
    (0x00A9, 0x00A9),
    (0x00AE, 0x00AE),
    (0x203C, 0x203C),
    (0x2049, 0x2049),
    (0x2122, 0x2122),
    (0x2139, 0x2139),
    (0x2194, 0x2199),
    (0x21A9, 0x21AA),
    (0x2300, 0x23FF),
    (0x24C2, 0x24C2),
    (0x25AA, 0x25AB),
    (0x25B6, 0x25B6),
    (0x25C0, 0x25C0),
    (0x25FB, 0x25FE),
    (0x2600, 0x26FF),
    (0x2700, 0x27BF),
    (0x2934, 0x2935),
    (0x2B05, 0x2B07),
    (0x2B1B, 0x2B1C),
    (0x2B50, 0x2B50),
    (0x2B55, 0x2B55),
    (0x3030, 0x3030),
    (0x303D, 0x303D),
    (0x3297, 0x3297),
    (0x3299, 0x3299),
    (0x1F000, 0x1F02F),
    (0x1F0A0, 0x1F0FF),
    (0x1F1E0, 0x1F1FF),
    (0x1F300, 0x1F9FF),
    (0x1FA00, 0x1FAFF),
)


def is_allowed_character(char: str) -> bool:
    """Return whether ``char`` is a letter, mark, number, printable ASCII or whitespace.

    Characters whose category cannot be determined (lone surrogates from
    undecodable bytes, unassigned code points) are rejected.
    """

    if char in _ALLOWED_CONTROL:
        return True
    point = ord(char)
    if _PRINTABLE_FIRST <= point <= _PRINTABLE_LAST:
        return True
    if _SURROGATE_FIRST <= point <= _SURROGATE_LAST:
        return False
    return unicodedata.category(char)[0] in _ALLOWED_CATEGORIES


def is_emoji(char: str) -> bool:
    """Return whether ``char`` falls inside one of :data:`EMOJI_RANGES`."""

    point = ord(char)
    return any(first <= point <= last for first, last in EMOJI_RANGES)


def find_fancy_unicode(text: str, allowed: Iterable[str] = ()) -> list[str]:
    """Return the distinct disallowed characters of ``text`` in order of appearance."""

    allowed_set = set(allowed)
    found: dict[str, None] = {}
    for char in text:
        if char not in allowed_set and not is_allowed_character(char):
            found.setdefault(char, None)
    return list(found)


def find_emoji(text: str, allowed: Iterable[str] = ()) -> list[str]:
    """Return the distinct emoji of ``text`` that are not in ``allowed``."""

    allowed_set = set(allowed)
    found: dict[str, None] = {}
    for char in text:
        if char not in allowed_set and is_emoji(char):
            found.setdefault(char, None)
    return list(found)


def _tidy(line: str) -> str:
    indent = _LEADING_SPACE.match(line)
    prefix = indent.group(0) if indent else ""
    result = line[len(prefix) :]
    for pattern, replacement in _TIDY_STEPS:
        result = pattern.sub(replacement, result)
    return prefix + result


def clean_text(text: str, chars: Sequence[str]) -> str:
    """Remove every character of ``chars`` from ``text`` and tidy the gaps left behind.

    Only lines that lost a character are tidied, and their indentation is
    kept, so multi-line literals keep their layout.

    Args:
        text: Source text of the literal or comment.
        chars: Characters to remove.

    Returns:
        str: Cleaned text.
    """

    cleaned_lines: list[str] = []
    for line in text.split("\n"):
        stripped = line
        for char in chars:
            stripped = stripped.replace(char, "")
        cleaned_lines.append(_tidy(stripped) if stripped != line else line)
    return "\n".join(cleaned_lines)


def literal_targets(node: SyntaxNode, *, include_strings: bool) -> Iterator[SyntaxNode]:
    """Yield the nodes whose literal value should be scanned for ``node``.

    Plain literals yield themselves; interpolated literals yield their string
    segments. Segments are skipped when visited directly so that each piece of
    text is scanned once.

    Args:
        node: Visited literal node.
        include_strings: Whether string literals are checked at all.

    Yields:
        SyntaxNode: Nodes carrying a literal value.
    """

    if node.kind in _STRING_KINDS and not include_strings:
        return
    if node.kind in (NodeKind.STR, NodeKind.SYM):
        if not node.is_segment:
            yield node
        return
    for child in node.children:
        if child.kind is NodeKind.STR and child.value is not None:
            yield child


def _format_codepoint(char: str) -> str:
    return f"{ord(char):04X}"


class NoFancyUnicode(CorrectingRule):
    """Flag characters outside letters, marks, numbers, printable ASCII and whitespace."""

    name = "NoFancyUnicode"
    description = "Detects non-standard Unicode characters such as emoji, curly quotes and math symbols."
    options_model = NoFancyUnicodeOptions
    node_kinds = frozenset(_STRING_KINDS | _SYMBOL_KINDS)
    visits_comments = True

    message_template: Final[str] = (
        "Avoid fancy Unicode `{char}` (U+{codepoint}). Use standard ASCII or add to AllowedUnicode."
    )

    def _options(self, ctx: VisitContext) -> NoFancyUnicodeOptions:
        return cast(NoFancyUnicodeOptions, ctx.options(self))

    def check_node(self, node: SyntaxNode, ctx: VisitContext) -> Iterable[Finding]:
        options = self._options(ctx)
        for target in literal_targets(node, include_strings=not options.allow_in_strings):
            finding = self._inspect(target, target.value or "", options)
            if finding is not None:
                yield finding

    def on_comment(self, comment: Comment, ctx: VisitContext) -> Iterable[Finding]:
        options = self._options(ctx)
        if options.allow_in_comments:
            return ()
        finding = self._inspect(comment, comment.text, options)
        return () if finding is None else (finding,)

    def _inspect(
        self,
        target: SyntaxNode | Comment,
        value: str,
        options: NoFancyUnicodeOptions,
    ) -> Finding | None:
        chars = find_fancy_unicode(value, options.allowed_unicode)
        if not chars:
            return None
        message = self.message_template.format(char=chars[0], codepoint=_format_codepoint(chars[0]))
        return Finding(range=target.range, message=message, target=target, data={"chars": tuple(chars)})

    def correct(self, finding: Finding, ctx: VisitContext) -> Correction:
        original = ctx.buffer.slice(finding.range)
        cleaned = clean_text(original, finding.data["chars"])
        if cleaned == original:
            return ()
        return (TextEdit.replace(finding.range, cleaned),)


class NoEmoji(Rule):
    """Flag emoji in strings, symbols and comments."""

    name = "NoEmoji"
    description = "Detects emoji characters in strings, comments and symbols."
    options_model = NoEmojiOptions
    node_kinds = frozenset(_STRING_KINDS | _SYMBOL_KINDS)
    visits_comments = True

    message: Final[str] = "Avoid emoji in code. Use descriptive text instead."

    def _options(self, ctx: VisitContext) -> NoEmojiOptions:
        return cast(NoEmojiOptions, ctx.options(self))

    def check_node(self, node: SyntaxNode, ctx: VisitContext) -> Iterable[Finding]:
        options = self._options(ctx)
        for target in literal_targets(node, include_strings=not options.allow_in_strings):
            if find_emoji(target.value or "", options.allowed_emoji):
                yield Finding(range=target.range, message=self.message, target=target)

    def on_comment(self, comment: Comment, ctx: VisitContext) -> Iterable[Finding]:
        options = self._options(ctx)
        if options.allow_in_comments or not find_emoji(comment.text, options.allowed_emoji):
            return ()
        return (Finding(range=comment.range, message=self.message, target=comment),)


__all__ = [
    "EMOJI_RANGES",
    "NoEmoji",
    "NoFancyUnicode",
    "clean_text",
    "find_emoji",
    "find_fancy_unicode",
    "is_allowed_character",
    "is_emoji",
    "literal_targets",
]
