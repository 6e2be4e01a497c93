# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Pattern-detection rules and their registry."""

from __future__ import annotations

from .backwards_compat import NoBackwardsCompatHacks
from .base import CorrectingRule, Finding, Rule, VisitContext, is_correcting
from .commented_code import NoCommentedCode
from .defensive_code import NoOverlyDefensiveCode
from .line_numbers import NoHardcodedLineNumbers
from .mystery_regex import MysteryRegex
from .parameter_shadowing import MethodParameterShadowing
from .registry import RULES, RuleDefinition, build_rules, get_rule, iter_rules, list_rules
from .tagged_comments import TaggedComments
from .unicode import NoEmoji, NoFancyUnicode
from .visibility import ExplicitVisibility

__all__ = [
    "RULES",
    "CorrectingRule",
    "ExplicitVisibility",
    "Finding",
    "MethodParameterShadowing",
    "MysteryRegex",
    "NoBackwardsCompatHacks",
    "NoCommentedCode",
    "NoEmoji",
    "NoFancyUnicode",
    "NoHardcodedLineNumbers",
    "NoOverlyDefensiveCode",
    "Rule",
    "RuleDefinition",
    "TaggedComments",
    "VisitContext",
    "build_rules",
    "get_rule",
    "is_correcting",
    "iter_rules",
    "list_rules",
]
