# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Registry describing the rules shipped with rubyqa."""

from __future__ import annotations

from collections.abc import Callable, Collection, Iterator
from dataclasses import dataclass
from typing import Final

from ..config.models import RuleConfig
from ..core.errors import UnknownRuleError
from .backwards_compat import NoBackwardsCompatHacks
from .base import Rule, is_correcting
from .commented_code import NoCommentedCode
from .defensive_code import NoOverlyDefensiveCode
from .line_numbers import NoHardcodedLineNumbers
from .mystery_regex import MysteryRegex
from .parameter_shadowing import MethodParameterShadowing
from .tagged_comments import TaggedComments
from .unicode import NoEmoji, NoFancyUnicode
from .visibility import ExplicitVisibility


@dataclass(frozen=True, slots=True)
class RuleDefinition:
    """Describe how a registered rule is built and presented."""

    name: str
    factory: Callable[[], Rule]
    description: str
    correctable: bool
    enabled_by_default: bool = True

    def create(self) -> Rule:
        """Return a fresh instance of the rule."""

        return self.factory()


def _definition(rule_type: type[Rule], *, enabled_by_default: bool = True) -> RuleDefinition:
    instance = rule_type()
    return RuleDefinition(
        name=rule_type.name,
        factory=rule_type,
        description=rule_type.description,
        correctable=is_correcting(instance),
        enabled_by_default=enabled_by_default,
    )


RULES: Final[tuple[RuleDefinition, ...]] = (
    _definition(NoFancyUnicode),
    _definition(NoEmoji),
    _definition(TaggedComments),
    _definition(NoCommentedCode),
    _definition(NoBackwardsCompatHacks),
    _definition(NoOverlyDefensiveCode),
    _definition(ExplicitVisibility),
    _definition(MethodParameterShadowing),
    _definition(MysteryRegex),
    _definition(NoHardcodedLineNumbers),
)

_BY_NAME: Final[dict[str, RuleDefinition]] = {definition.name.lower(): definition for definition in RULES}
_NAMESPACE_SEPARATOR: Final[str] = "/"


def iter_rules() -> Iterator[RuleDefinition]:
    """Yield every registered rule definition in registration order."""

    yield from RULES


def get_rule(name: str) -> RuleDefinition:
    """Return the definition registered under ``name``.

    Lookup is case-insensitive and ignores a RuboCop style department
    prefix such as ``Claude/``.

    Args:
        name: Rule name supplied by a user or configuration file.

    Returns:
        RuleDefinition: Matching definition.

    Raises:
        UnknownRuleError: If no rule with that name is registered.
    """

    key = name.strip().rsplit(_NAMESPACE_SEPARATOR, 1)[-1].lower()
    try:
        return _BY_NAME[key]
    except KeyError:
        known = ", ".join(definition.name for definition in RULES)
        raise UnknownRuleError(f"Unknown rule '{name}'. Known rules: {known}") from None


def is_enabled(definition: RuleDefinition, config: RuleConfig) -> bool:
    """Return whether ``definition`` is enabled under ``config``."""

    return config.enabled(definition.name, default=definition.enabled_by_default)


def build_rules(
    config: RuleConfig,
    *,
    only: Collection[str] | None = None,
    exclude: Collection[str] | None = None,
) -> list[Rule]:
    """Instantiate the enabled rules in registration order.

    Args:
        config: Rule configuration providing ``enabled`` flags.
        only: Restrict the selection to these rule names when given.
        exclude: Rule names removed from the selection.

    Returns:
        list[Rule]: Rule instances ready to hand to the runner.

    Raises:
        UnknownRuleError: If ``only`` or ``exclude`` names an unknown rule.
    """

    selected = {get_rule(name).name for name in only} if only else None
    excluded = {get_rule(name).name for name in exclude or ()}
    rules: list[Rule] = []
    for definition in RULES:
        if selected is not None and definition.name not in selected:
            continue
        if definition.name in excluded or not is_enabled(definition, config):
            continue
        rules.append(definition.create())
    return rules


def list_rules(config: RuleConfig | None = None) -> list[tuple[RuleDefinition, bool]]:
    """Return every definition paired with its enabled state under ``config``."""

    effective = config or RuleConfig()
    return [(definition, is_enabled(definition, effective)) for definition in RULES]


__all__ = [
    "RULES",
    "RuleDefinition",
    "build_rules",
    "get_rule",
    "is_enabled",
    "iter_rules",
    "list_rules",
]
