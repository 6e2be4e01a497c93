# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Dispatch rules over a parsed file and collect their offenses."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Final

from ..config.models import RuleConfig
from ..core.errors import CorrectionConflictError, InvalidEditError, MalformedNodeError
from ..core.models import Correction, Offense, SourceRange, TextEdit
from ..rules.base import CorrectingRule, Finding, Rule, VisitContext
from ..source.nodes import Comment, NodeKind, ParsedSource, SyntaxNode
from ..source.parser import parse_source
from .corrector import apply_edits, verify_non_overlapping

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS: Final[int] = 50

# Exceptions contained at the per-rule, per-element boundary.
RULE_FAILURES: Final[tuple[type[Exception], ...]] = (
    MalformedNodeError,
    AttributeError,
    IndexError,
    KeyError,
    TypeError,
    ValueError,
)


@dataclass(frozen=True, slots=True)
class RunResult:
    """Outcome of running the rules over one file.

    Attributes:
        offenses: Offenses in detection order.
        corrected_text: Text after applying every correction, ``None`` when
            correction was not requested or failed.
        correction_error: Description of the conflict that aborted correction.
        deferred: Offenses whose corrections overlapped one applied earlier
            in the same pass; a later pass picks them up.
    """

    offenses: tuple[Offense, ...] = ()
    corrected_text: str | None = None
    correction_error: str | None = None
    deferred: tuple[Offense, ...] = ()

    @property
    def edits(self) -> tuple[TextEdit, ...]:
        """Return every edit carried by the offenses."""

        return tuple(edit for offense in self.offenses for edit in offense.correction)


@dataclass(slots=True)
class _OffenseCollector:
    seen: set[tuple[str, int, int, str]] = field(default_factory=set)
    offenses: list[Offense] = field(default_factory=list)

    def add(self, offense: Offense) -> None:
        key = (offense.rule, offense.range.start, offense.range.end, offense.message)
        if key in self.seen:
            return
        self.seen.add(key)
        self.offenses.append(offense)


class RuleRunner:
    """Run a fixed rule set over parsed files.

    The runner is stateless between files: everything a rule remembers while
    visiting one file lives in that file's :class:`VisitContext`. One runner
    may therefore be reused for many files, one file at a time.
    """

    def __init__(self, rules: Sequence[Rule], config: RuleConfig | None = None) -> None:
        """Build the dispatch tables for ``rules``.

        Args:
            rules: Rules in registration order.
            config: Rule configuration; disabled rules are dropped here.
        """

        self.config = config or RuleConfig()
        self.rules: tuple[Rule, ...] = tuple(rule for rule in rules if self.config.enabled(rule.name))
        self._dispatch: dict[NodeKind, list[Rule]] = defaultdict(list)
        for rule in self.rules:
            for kind in rule.node_kinds:
                self._dispatch[kind].append(rule)
        self._comment_rules: tuple[Rule, ...] = tuple(rule for rule in self.rules if rule.visits_comments)

    def rules_for(self, kind: NodeKind) -> tuple[Rule, ...]:
        """Return the rules subscribed to ``kind`` in registration order."""

        return tuple(self._dispatch.get(kind, ()))

    def run(self, parsed: ParsedSource, *, autocorrect: bool | None = None) -> RunResult:
        """Inspect ``parsed`` and optionally apply the corrections.

        Corrections are accepted offense by offense in detection order. An
        offense whose edits overlap an edit accepted earlier in the pass is
        deferred and left for the next pass of :func:`correct_until_stable`.

        Args:
            parsed: File to inspect.
            autocorrect: Overrides ``config.autocorrect`` when given.

        Returns:
            RunResult: Offenses plus the corrected text when requested.
        """

        ctx = VisitContext(parsed, self.config)
        collector = _OffenseCollector()
        for node in self._walk(parsed.root):
            for rule in self._dispatch.get(node.kind, ()):
                self._invoke(rule, ctx, collector, node, partial(rule.check_node, node, ctx))
        for comment in parsed.comments:
            for rule in self._comment_rules:
                self._invoke(rule, ctx, collector, comment, partial(rule.on_comment, comment, ctx))
        for rule in self._comment_rules:
            self._invoke(rule, ctx, collector, None, partial(rule.on_comments_finished, ctx))

        offenses = tuple(collector.offenses)
        should_correct = self.config.autocorrect if autocorrect is None else autocorrect
        if not should_correct:
            return RunResult(offenses=offenses)
        return self._correct(parsed, offenses)

    @staticmethod
    def _walk(root: SyntaxNode) -> Iterable[SyntaxNode]:
        stack = [root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def _invoke(
        self,
        rule: Rule,
        ctx: VisitContext,
        collector: _OffenseCollector,
        element: SyntaxNode | Comment | None,
        check: Callable[[], Iterable[Finding]],
    ) -> None:
        try:
            findings = list(check())
        except RULE_FAILURES as exc:
            LOGGER.warning("%s failed on %s: %s", rule.name, _describe(element, ctx), exc)
            return
        if not findings:
            return
        severity = rule.severity(ctx)
        for finding in findings:
            collector.add(
                Offense(
                    rule=rule.name,
                    range=finding.range,
                    message=finding.message,
                    severity=severity,
                    correction=self._correction_for(rule, finding, ctx),
                ),
            )

    @staticmethod
    def _correction_for(rule: Rule, finding: Finding, ctx: VisitContext) -> Correction:
        if not isinstance(rule, CorrectingRule):
            return ()
        try:
            return tuple(rule.correct(finding, ctx))
        except (*RULE_FAILURES, InvalidEditError) as exc:
            LOGGER.warning(
                "%s could not compute a correction at %s: %s",
                rule.name,
                _describe_range(finding.range, ctx),
                exc,
            )
            return ()

    @staticmethod
    def _correct(parsed: ParsedSource, offenses: tuple[Offense, ...]) -> RunResult:
        text = parsed.buffer.text
        accepted: list[TextEdit] = []
        deferred: list[Offense] = []
        try:
            for offense in offenses:
                edits = [edit for edit in offense.correction if edit.replacement != text[edit.start : edit.end]]
                if not edits:
                    continue
                verify_non_overlapping(edits)
                if any(_edits_overlap(edit, other) for edit in edits for other in accepted):
                    deferred.append(offense)
                    continue
                accepted.extend(edits)
            corrected = apply_edits(text, accepted)
        except (CorrectionConflictError, InvalidEditError) as exc:
            LOGGER.warning("Skipping autocorrection of %s: %s", parsed.path or "<source>", exc)
            return RunResult(offenses=offenses, correction_error=str(exc))
        if deferred:
            LOGGER.debug(
                "%s: deferred %d overlapping correction(s) to the next pass",
                parsed.path or "<source>",
                len(deferred),
            )
        return RunResult(offenses=offenses, corrected_text=corrected, deferred=tuple(deferred))


def _edits_overlap(edit: TextEdit, other: TextEdit) -> bool:
    """Return whether two edits touch the same characters.

    Insertions only conflict with an edit whose interior they fall into.
    """

    return edit.start < other.end and other.start < edit.end


def _describe_range(target: SourceRange, ctx: VisitContext) -> str:
    location = f"{target.line}:{target.column + 1}"
    return f"{ctx.parsed.path}:{location}" if ctx.parsed.path is not None else location


def _describe(element: SyntaxNode | Comment | None, ctx: VisitContext) -> str:
    if element is None:
        return str(ctx.parsed.path or "<source>")
    return _describe_range(element.range, ctx)


@dataclass(frozen=True, slots=True)
class StableCorrection:
    """Result of correcting a file until no rule has anything left to fix.

    Attributes:
        text: Final text.
        iterations: Number of passes that changed the text.
        offenses: Offenses reported by the first pass.
        remaining: Offenses still reported by the last pass.
        error: Conflict or oscillation that stopped the loop early.
    """

    text: str
    iterations: int
    offenses: tuple[Offense, ...]
    remaining: tuple[Offense, ...]
    error: str | None = None


def correct_until_stable(
    text: str,
    runner: RuleRunner,
    *,
    path: Path | str | None = None,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> StableCorrection:
    """Re-parse and re-run ``runner`` until a pass changes nothing.

    Each pass applies every correction of the previous pass's offenses, so
    rules whose fixes expose new offenses converge over several passes. The
    loop stops early on a correction conflict or when a pass reproduces text
    already seen.

    Args:
        text: Initial file contents.
        runner: Runner holding the rules and configuration.
        path: File the text came from, used in log messages.
        max_iterations: Upper bound on correcting passes.

    Returns:
        StableCorrection: Final text and the offenses before and after.
    """

    source_path = Path(path) if path is not None else None
    label = source_path or "<source>"
    seen: set[str] = {text}
    current = text
    first: tuple[Offense, ...] | None = None
    for iteration in range(max_iterations):
        result = runner.run(parse_source(current, path=source_path), autocorrect=True)
        if first is None:
            first = result.offenses
        if result.correction_error is not None:
            return StableCorrection(current, iteration, first, result.offenses, result.correction_error)
        corrected = result.corrected_text
        if corrected is None or corrected == current:
            return StableCorrection(current, iteration, first, result.offenses)
        if corrected in seen:
            message = "corrections oscillate between versions of the file already produced"
            LOGGER.warning("Stopping autocorrection of %s: %s", label, message)
            return StableCorrection(current, iteration, first, result.offenses, message)
        seen.add(corrected)
        current = corrected

    remaining = runner.run(parse_source(current, path=source_path), autocorrect=False).offenses
    message = f"no fix point reached after {max_iterations} passes"
    LOGGER.warning("Stopping autocorrection of %s: %s", label, message)
    return StableCorrection(current, max_iterations, first if first is not None else remaining, remaining, message)


__all__ = [
    "DEFAULT_MAX_ITERATIONS",
    "RULE_FAILURES",
    "RuleRunner",
    "RunResult",
    "StableCorrection",
    "correct_until_stable",
]
