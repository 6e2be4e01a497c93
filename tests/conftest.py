# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import textwrap
from collections.abc import Callable, Mapping
from typing import Any

import pytest

from rubyqa.config.models import RuleConfig
from rubyqa.core.models import Offense
from rubyqa.engine.runner import RuleRunner, correct_until_stable
from rubyqa.rules.base import Rule
from rubyqa.source.parser import parse_source

InspectSource = Callable[..., list[Offense]]
AutocorrectSource = Callable[..., str]


def _normalize(source: str) -> str:
    return textwrap.dedent(source).lstrip("\n")


def _runner(rule: Rule, options: Mapping[str, Any] | None) -> RuleRunner:
    return RuleRunner([rule], RuleConfig({rule.name: dict(options or {})}))


@pytest.fixture
def inspect_source() -> InspectSource:
    """Return a helper running one rule over a Ruby snippet and listing its offenses."""

    def _inspect(rule: Rule, source: str, options: Mapping[str, Any] | None = None) -> list[Offense]:
        parsed = parse_source(_normalize(source))
        return list(_runner(rule, options).run(parsed).offenses)

    return _inspect


@pytest.fixture
def autocorrect_source() -> AutocorrectSource:
    """Return a helper correcting a Ruby snippet with one rule until it is stable."""

    def _correct(rule: Rule, source: str, options: Mapping[str, Any] | None = None) -> str:
        return correct_until_stable(_normalize(source), _runner(rule, options)).text

    return _correct
