# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Classify Ruby comments and aggregate commented-out code into runs."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Final

from ..core.models import SourceRange
from ..source.buffer import SourceBuffer
from ..source.nodes import Comment

_FLAGS: Final[re.RegexFlag] = re.ASCII

CODE_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    # method definitions
    re.compile(r"\A\s*def\s+\w+", _FLAGS),
    # class/module definitions
    re.compile(r"\A\s*(?:class|module)\s+[A-Z]", _FLAGS),
    # control flow
    re.compile(r"\A\s*(?:if|unless|case|while|until|for|begin|rescue|ensure|end)\b", _FLAGS),
    # receiver.method calls
    re.compile(r"\A\s*\w+\.\w+[!(?)]*\s*(?:\(|do\b|$)", _FLAGS),
    # bare method calls
    re.compile(r"\A\s*[a-z_]\w*[!(?)]\s*$", _FLAGS),
    re.compile(r"\A\s*[a-z_]\w+\s*$", _FLAGS),
    # assignments
    re.compile(r"\A\s*(?:@{1,2}|\$)?\w+\s*[+\-*/]?=\s*.+", _FLAGS),
    re.compile(r"\A\s*return\b", _FLAGS),
    re.compile(r"\A\s*raise\b", _FLAGS),
    re.compile(r"\A\s*require(?:_relative)?\s+['\"]", _FLAGS),
    # block openers
    re.compile(r"\A\s*(?:do|\{)\s*(?:\|.*\|)?$", _FLAGS),
    re.compile(r"\A\s*\w+\s*=\s*[\[{]", _FLAGS),
    # method chain continuations
    re.compile(r"\A\s*\.\w+", _FLAGS),
    re.compile(r"\A\s*[A-Z][A-Z0-9_]*\s*=", _FLAGS),
    re.compile(r"\A\s*@\w+\.\w+", _FLAGS),
)

_ANNOTATION_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"\A\s*(?:TODO|FIXME|NOTE|HACK|XXX|OPTIMIZE|REVIEW)\b",
    re.IGNORECASE | _FLAGS,
)
_PROSE_PATTERN: Final[re.Pattern[str]] = re.compile(r"\A\s*[A-Z][a-z]+(?:\s+[a-z]+){3,}", _FLAGS)
_SECTION_PATTERN: Final[re.Pattern[str]] = re.compile(r"\A\s*[=-]{3,}", _FLAGS)
_URL_PATTERN: Final[re.Pattern[str]] = re.compile(r"\A\s*https?://", _FLAGS)
_REFERENCE_PATTERN: Final[re.Pattern[str]] = re.compile(r"\A\s*(?:See|see|cf\.?|ref\.?)\s+", _FLAGS)
_DIRECTIVE_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"\A\s*rubocop:", _FLAGS),
    re.compile(r"\A\s*frozen_string_literal:", _FLAGS),
    re.compile(r"\A\s*(?:encoding|coding):", _FLAGS),
    re.compile(r"\A\s*-\*-.*-\*-", _FLAGS),
)
_YARD_TAG_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"\A\s*@(?:param|return|raise|see|note|deprecated|option|yield|yieldparam|yieldreturn|api|abstract|overload)",
    _FLAGS,
)

NON_CODE_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    _ANNOTATION_PATTERN,
    _PROSE_PATTERN,
    _SECTION_PATTERN,
    _URL_PATTERN,
    _REFERENCE_PATTERN,
    *_DIRECTIVE_PATTERNS,
    _YARD_TAG_PATTERN,
)

KEEP_PATTERN: Final[re.Pattern[str]] = re.compile(r"\A#\s*KEEP\s*\[(?:[\w\s]+-\s*)?@[\w-]+\]:\s*\S", _FLAGS)
YARD_EXAMPLE_START: Final[re.Pattern[str]] = re.compile(r"\A#\s*@example", _FLAGS)
_YARD_ANY_TAG: Final[re.Pattern[str]] = re.compile(r"\A#\s*@", _FLAGS)
_NO_SPACE_AFTER_HASH: Final[re.Pattern[str]] = re.compile(r"\A#[^ ]", _FLAGS)
_SINGLE_SPACE_TEXT: Final[re.Pattern[str]] = re.compile(r"\A#\s?\S", _FLAGS)
_INDENTED_TEXT: Final[re.Pattern[str]] = re.compile(r"\A#\s{2,}", _FLAGS)
_EMPTY_COMMENT: Final[re.Pattern[str]] = re.compile(r"\A#\s*$", _FLAGS)
_MARKER_PREFIX: Final[re.Pattern[str]] = re.compile(r"\A#\s?")


class CommentKind(str, Enum):
    """Coarse classification of a comment's content."""

    CODE = "code"
    PROSE = "prose"
    ANNOTATION = "annotation"
    DOCUMENTATION = "documentation"
    DIRECTIVE = "directive"
    KEEP = "keep"
    BLANK = "blank"


def comment_content(text: str) -> str:
    """Strip the ``#`` marker and at most one following space from ``text``."""

    return _MARKER_PREFIX.sub("", text, count=1)


def looks_like_code(content: str) -> bool:
    """Return whether de-hashed comment ``content`` reads as Ruby code.

    Args:
        content: Comment text without its ``#`` marker.

    Returns:
        bool: ``True`` when a code pattern matches and no non-code pattern does.
    """

    if not content.strip():
        return False
    if any(pattern.search(content) for pattern in NON_CODE_PATTERNS):
        return False
    return any(pattern.search(content) for pattern in CODE_PATTERNS)


def classify_comment_text(content: str) -> CommentKind:
    """Classify de-hashed comment ``content``.

    Args:
        content: Comment text without its ``#`` marker.

    Returns:
        CommentKind: Category of the comment.
    """

    if not content.strip():
        return CommentKind.BLANK
    if KEEP_PATTERN.search(f"#{content}"):
        return CommentKind.KEEP
    if any(pattern.search(content) for pattern in _DIRECTIVE_PATTERNS):
        return CommentKind.DIRECTIVE
    if _ANNOTATION_PATTERN.search(content):
        return CommentKind.ANNOTATION
    if _YARD_TAG_PATTERN.search(content) or content.lstrip().startswith("@example"):
        return CommentKind.DOCUMENTATION
    if looks_like_code(content):
        return CommentKind.CODE
    return CommentKind.PROSE


def is_yard_example_content(text: str) -> bool:
    """Return whether raw comment ``text`` continues a YARD ``@example`` block.

    Example blocks continue over lines indented by two or more spaces after
    the marker, and over empty comment lines.
    """

    if _YARD_ANY_TAG.search(text):
        return False
    if _NO_SPACE_AFTER_HASH.search(text):
        return False
    if _SINGLE_SPACE_TEXT.search(text) and not _INDENTED_TEXT.search(text):
        return False
    return bool(_INDENTED_TEXT.search(text) or _EMPTY_COMMENT.search(text))


def is_inline_comment(comment: Comment, buffer: SourceBuffer) -> bool:
    """Return whether ``comment`` follows code on its line."""

    prefix = buffer.text[buffer.line_start(comment.line) : comment.range.start]
    return bool(prefix.strip())


@dataclass(frozen=True, slots=True)
class CommentBlock:
    """Run of consecutive comment lines classified as code.

    Attributes:
        comments: Comments forming the run, in line order.
        protected: Whether a KEEP marker directly precedes the run.
    """

    comments: tuple[Comment, ...]
    protected: bool = False

    @property
    def first_line(self) -> int:
        """Return the line of the first comment."""

        return self.comments[0].line

    @property
    def last_line(self) -> int:
        """Return the line of the last comment."""

        return self.comments[-1].line

    @property
    def range(self) -> SourceRange:
        """Return the range spanning every comment of the run."""

        return self.comments[0].range.join(self.comments[-1].range)

    def __len__(self) -> int:
        return len(self.comments)


@dataclass(slots=True)
class CommentRunScanner:
    """Per-file state machine aggregating commented-out code into blocks.

    Feed every comment of a file in source order, then call :meth:`close`.
    One scanner instance must only ever see a single file.

    Attributes:
        allow_keep: Whether ``# KEEP [@handle]: reason`` markers protect runs.
    """

    allow_keep: bool = True
    pending_run: list[Comment] = field(default_factory=list)
    pending_protected: bool = False
    in_example_block: bool = False
    keep_armed: bool = False
    previous_line: int | None = None

    def feed(self, comment: Comment, *, inline: bool = False) -> list[CommentBlock]:
        """Consume ``comment`` and return the blocks it closed.

        Args:
            comment: Next comment in source order.
            inline: Whether the comment trails code on its line.

        Returns:
            list[CommentBlock]: Blocks completed by this comment (zero or one).
        """

        if inline:
            return []
        closed: list[CommentBlock] = []
        if self.previous_line is not None and comment.line != self.previous_line + 1:
            self._flush(closed)
            self.keep_armed = False
        self.previous_line = comment.line
        text = comment.text

        if YARD_EXAMPLE_START.search(text):
            self._flush(closed)
            self.keep_armed = False
            self.in_example_block = True
            return closed
        if self.in_example_block:
            if is_yard_example_content(text):
                return closed
            self.in_example_block = False

        if self.allow_keep and KEEP_PATTERN.search(text):
            self._flush(closed)
            self.keep_armed = True
            return closed

        if looks_like_code(comment_content(text)):
            if not self.pending_run:
                self.pending_protected = self.keep_armed
            self.pending_run.append(comment)
        else:
            self._flush(closed)
        self.keep_armed = False
        return closed

    def close(self) -> list[CommentBlock]:
        """Flush the run still pending at the end of the file."""

        closed: list[CommentBlock] = []
        self._flush(closed)
        self.keep_armed = False
        self.in_example_block = False
        self.previous_line = None
        return closed

    def _flush(self, closed: list[CommentBlock]) -> None:
        if self.pending_run:
            closed.append(CommentBlock(comments=tuple(self.pending_run), protected=self.pending_protected))
        self.pending_run = []
        self.pending_protected = False


__all__ = [
    "CODE_PATTERNS",
    "KEEP_PATTERN",
    "NON_CODE_PATTERNS",
    "YARD_EXAMPLE_START",
    "CommentBlock",
    "CommentKind",
    "CommentRunScanner",
    "classify_comment_text",
    "comment_content",
    "is_inline_comment",
    "is_yard_example_content",
    "looks_like_code",
]
