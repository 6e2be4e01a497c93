# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for rule dispatch, fault isolation and iterative correction."""

from __future__ import annotations

import logging
from collections.abc import Iterable

import pytest

from rubyqa.config.models import RuleConfig
from rubyqa.core.models import Correction, TextEdit
from rubyqa.core.severity import Severity
from rubyqa.engine.runner import RuleRunner, correct_until_stable
from rubyqa.rules.base import CorrectingRule, Finding, Rule, VisitContext
from rubyqa.rules.registry import build_rules
from rubyqa.rules.unicode import NoEmoji, NoFancyUnicode
from rubyqa.source.nodes import Comment, NodeKind, SyntaxNode
from rubyqa.source.parser import parse_source


class ExplodingRule(Rule):
    name = "Exploding"
    node_kinds = frozenset({NodeKind.IDENTIFIER})
    visits_comments = True

    def check_node(self, node: SyntaxNode, ctx: VisitContext) -> Iterable[Finding]:
        raise AttributeError("boom")

    def on_comment(self, comment: Comment, ctx: VisitContext) -> Iterable[Finding]:
        raise ValueError("bad comment")


class IdentifierRule(Rule):
    name = "Identifiers"
    node_kinds = frozenset({NodeKind.IDENTIFIER})

    def check_node(self, node: SyntaxNode, ctx: VisitContext) -> Iterable[Finding]:
        return (Finding(range=node.range, message=f"saw {node.value}", target=node),)


class RenameRule(CorrectingRule):
    """Rename identifiers following a fixed mapping."""

    name = "Rename"
    node_kinds = frozenset({NodeKind.IDENTIFIER})
    mapping: dict[str, str] = {"foo": "bar"}

    def check_node(self, node: SyntaxNode, ctx: VisitContext) -> Iterable[Finding]:
        if node.value in self.mapping:
            yield Finding(range=node.range, message="rename", target=node)

    def correct(self, finding: Finding, ctx: VisitContext) -> Correction:
        node = finding.target
        assert isinstance(node, SyntaxNode)
        return (TextEdit.replace(node.range, self.mapping[node.value or ""]),)


class FlipRule(RenameRule):
    name = "Flip"
    mapping = {"foo": "bar", "bar": "foo"}


class ChainRenameRule(RenameRule):
    name = "ChainRename"
    mapping = {"foo": "qux", "bar": "baz"}


class SelfOverlapRule(CorrectingRule):
    """Propose two edits over the same identifier in one correction."""

    name = "SelfOverlap"
    node_kinds = frozenset({NodeKind.IDENTIFIER})

    def check_node(self, node: SyntaxNode, ctx: VisitContext) -> Iterable[Finding]:
        return (Finding(range=node.range, message="overlap", target=node),)

    def correct(self, finding: Finding, ctx: VisitContext) -> Correction:
        return (TextEdit.replace(finding.range, "a"), TextEdit.replace(finding.range, "b"))


class GrowRule(CorrectingRule):
    name = "Grow"
    node_kinds = frozenset({NodeKind.PROGRAM})

    def check_node(self, node: SyntaxNode, ctx: VisitContext) -> Iterable[Finding]:
        return (Finding(range=node.range, message="grow", target=node),)

    def correct(self, finding: Finding, ctx: VisitContext) -> Correction:
        end = len(ctx.buffer)
        return (TextEdit(end, end, "x\n"),)


def test_failing_rule_does_not_stop_others(caplog: pytest.LogCaptureFixture) -> None:
    runner = RuleRunner([ExplodingRule(), IdentifierRule()])

    with caplog.at_level(logging.WARNING, logger="rubyqa"):
        result = runner.run(parse_source("foo # note\n"))

    assert [offense.message for offense in result.offenses] == ["saw foo"]
    assert "Exploding failed" in caplog.text
    assert "bad comment" in caplog.text


def test_offenses_follow_source_then_registration_order() -> None:
    runner = RuleRunner([NoEmoji(), NoFancyUnicode()])

    result = runner.run(parse_source('# 🚀\nputs "✓"\n'))

    assert [(offense.rule, offense.line) for offense in result.offenses] == [
        ("NoEmoji", 2),
        ("NoFancyUnicode", 2),
        ("NoEmoji", 1),
        ("NoFancyUnicode", 1),
    ]


def test_rules_for_kind_in_registration_order() -> None:
    emoji, fancy = NoEmoji(), NoFancyUnicode()
    runner = RuleRunner([emoji, fancy, IdentifierRule()])

    assert runner.rules_for(NodeKind.STR) == (emoji, fancy)
    assert runner.rules_for(NodeKind.DEF) == ()


def test_disabled_rules_are_dropped() -> None:
    runner = RuleRunner([NoEmoji(), IdentifierRule()], RuleConfig({"NoEmoji": {"Enabled": False}}))

    assert [rule.name for rule in runner.rules] == ["Identifiers"]


def test_configured_severity_is_applied() -> None:
    runner = RuleRunner([IdentifierRule()], RuleConfig({"Identifiers": {"Severity": "Warning"}}))

    (offense,) = runner.run(parse_source("foo\n")).offenses

    assert offense.severity is Severity.WARNING


def test_run_without_autocorrect_leaves_text_alone() -> None:
    result = RuleRunner([RenameRule()]).run(parse_source("foo\n"))

    assert result.corrected_text is None
    assert len(result.edits) == 1


def test_single_pass_correction() -> None:
    result = RuleRunner([RenameRule()]).run(parse_source("foo\nfoo\n"), autocorrect=True)

    assert result.corrected_text == "bar\nbar\n"
    assert result.correction_error is None


def test_overlapping_corrections_are_deferred() -> None:
    runner = RuleRunner([RenameRule(), ChainRenameRule()])

    result = runner.run(parse_source("foo\nbar\n"), autocorrect=True)

    assert result.corrected_text == "bar\nbaz\n"
    assert result.correction_error is None
    assert [(offense.rule, offense.line) for offense in result.deferred] == [("ChainRename", 1)]


def test_overlap_inside_one_correction_aborts() -> None:
    result = RuleRunner([SelfOverlapRule(), RenameRule()]).run(parse_source("foo\n"), autocorrect=True)

    assert result.corrected_text is None
    assert result.correction_error is not None
    assert len(result.offenses) == 2


def test_correct_until_stable_reaches_fix_point() -> None:
    stable = correct_until_stable("foo\n", RuleRunner([RenameRule()]))

    assert stable.text == "bar\n"
    assert stable.iterations == 1
    assert len(stable.offenses) == 1
    assert stable.remaining == ()
    assert stable.error is None


def test_correct_until_stable_is_idempotent() -> None:
    runner = RuleRunner([RenameRule()])

    once = correct_until_stable("foo\nbaz\n", runner).text
    twice = correct_until_stable(once, runner)

    assert twice.text == once
    assert twice.iterations == 0


def test_oscillating_corrections_stop() -> None:
    stable = correct_until_stable("foo\n", RuleRunner([FlipRule()]))

    assert stable.text == "bar\n"
    assert stable.error is not None and "oscillate" in stable.error


def test_deferred_corrections_land_on_a_later_pass() -> None:
    stable = correct_until_stable("foo\n", RuleRunner([RenameRule(), ChainRenameRule()]))

    assert stable.text == "baz\n"
    assert stable.iterations == 2
    assert stable.error is None
    assert stable.remaining == ()


def test_conflict_keeps_original_text() -> None:
    stable = correct_until_stable("foo\n", RuleRunner([SelfOverlapRule()]))

    assert stable.text == "foo\n"
    assert stable.error is not None


def test_iteration_limit() -> None:
    stable = correct_until_stable("a\n", RuleRunner([GrowRule()]), max_iterations=3)

    assert stable.text == "a\nx\nx\nx\n"
    assert stable.iterations == 3
    assert stable.error == "no fix point reached after 3 passes"
    assert len(stable.remaining) == 1


def _default_runner() -> RuleRunner:
    config = RuleConfig()
    return RuleRunner(build_rules(config), config)


def test_default_rules_fix_commented_code_holding_fancy_unicode() -> None:
    stable = correct_until_stable('# x = "→"\nputs 1\n', _default_runner())

    assert stable.error is None
    assert stable.text == "puts 1\n"
    assert stable.remaining == ()
    assert {offense.rule for offense in stable.offenses} == {"NoFancyUnicode", "NoCommentedCode"}


def test_default_rules_keep_unrelated_fixes_when_corrections_overlap() -> None:
    source = 'y = x ? x : "→ a"\nputs 1 # so fancy →\n'

    stable = correct_until_stable(source, _default_runner())

    assert stable.error is None
    assert stable.text == 'y = x || " a"\nputs 1 # so fancy\n'
    assert stable.remaining == ()
