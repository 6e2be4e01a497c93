# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models for rubyqa and its rules."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Final, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..core.severity import Severity

LOGGER = logging.getLogger(__name__)

DEFAULT_INCLUDE: Final[tuple[str, ...]] = (
    "**/*.rb",
    "**/*.rake",
    "**/*.gemspec",
    "**/*.ru",
    "**/Gemfile",
    "**/Rakefile",
)
DEFAULT_EXCLUDE: Final[tuple[str, ...]] = ("vendor/**", ".git/**", "node_modules/**", "tmp/**")
DEFAULT_TAG_KEYWORDS: Final[tuple[str, ...]] = ("TODO", "FIXME", "NOTE", "HACK", "OPTIMIZE", "REVIEW")

OptionsT = TypeVar("OptionsT", bound="RuleOptions")


class RuleOptions(BaseModel):
    """Options understood by every rule.

    Field names are snake_case; the CamelCase keys used by RuboCop style
    configuration files are accepted as aliases.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    enabled: bool = Field(default=True, alias="Enabled")
    severity: Severity | None = Field(default=None, alias="Severity")

    @field_validator("severity", mode="before")
    @classmethod
    def _lower_severity(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class NoFancyUnicodeOptions(RuleOptions):
    """Options for ``NoFancyUnicode``."""

    allowed_unicode: tuple[str, ...] = Field(default=(), alias="AllowedUnicode")
    allow_in_strings: bool = Field(default=False, alias="AllowInStrings")
    allow_in_comments: bool = Field(default=False, alias="AllowInComments")


class NoEmojiOptions(RuleOptions):
    """Options for ``NoEmoji``."""

    allowed_emoji: tuple[str, ...] = Field(default=(), alias="AllowedEmoji")
    allow_in_strings: bool = Field(default=False, alias="AllowInStrings")
    allow_in_comments: bool = Field(default=False, alias="AllowInComments")


class TaggedCommentsOptions(RuleOptions):
    """Options for ``TaggedComments``."""

    keywords: tuple[str, ...] = Field(default=DEFAULT_TAG_KEYWORDS, alias="Keywords")


class NoCommentedCodeOptions(RuleOptions):
    """Options for ``NoCommentedCode``."""

    min_lines: int = Field(default=1, ge=1, alias="MinLines")
    allow_keep: bool = Field(default=True, alias="AllowKeep")


class NoBackwardsCompatHacksOptions(RuleOptions):
    """Options for ``NoBackwardsCompatHacks``."""

    check_underscore_assignments: bool = Field(default=False, alias="CheckUnderscoreAssignments")


class NoOverlyDefensiveCodeOptions(RuleOptions):
    """Options for ``NoOverlyDefensiveCode``."""

    max_safe_navigation_chain: int = Field(default=1, ge=0, alias="MaxSafeNavigationChain")
    add_safe_navigator: bool = Field(default=False, alias="AddSafeNavigator")


class ExplicitVisibilityOptions(RuleOptions):
    """Options for ``ExplicitVisibility``."""

    enforced_style: Literal["grouped", "modifier"] = Field(default="grouped", alias="EnforcedStyle")

    @field_validator("enforced_style", mode="before")
    @classmethod
    def _lower_style(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class MethodParameterShadowingOptions(RuleOptions):
    """Options for ``MethodParameterShadowing``."""

    exempt_methods: tuple[str, ...] = Field(default=("initialize", "setup"), alias="ExemptMethods")


class MysteryRegexOptions(RuleOptions):
    """Options for ``MysteryRegex``."""

    max_length: int = Field(default=25, ge=0, alias="MaxLength")
    allow_in_let_blocks: bool = Field(default=True, alias="AllowInLetBlocks")


class NoHardcodedLineNumbersOptions(RuleOptions):
    """Options for ``NoHardcodedLineNumbers``."""

    check_comments: bool = Field(default=True, alias="CheckComments")
    check_strings: bool = Field(default=True, alias="CheckStrings")
    min_line_number: int = Field(default=1, ge=0, alias="MinLineNumber")


def coerce_options(model: type[OptionsT], raw: Mapping[str, Any] | None, *, rule: str = "") -> OptionsT:
    """Validate ``raw`` against ``model`` without ever raising.

    Invalid fields are dropped so they fall back to their defaults; the
    remaining fields are kept.

    Args:
        model: Options model of the rule.
        raw: Option mapping taken from configuration.
        rule: Rule name used in log messages.

    Returns:
        OptionsT: Validated options instance.
    """

    if not isinstance(raw, Mapping):
        if raw is not None:
            LOGGER.warning("Ignoring non-table options for rule %s: %r", rule or model.__name__, raw)
        return model()
    payload = dict(raw)
    spellings = _field_spellings(model)
    for _ in range(len(payload) + 1):
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            dropped: set[str] = set()
            for error in exc.errors():
                if error.get("loc"):
                    key = str(error["loc"][0])
                    dropped |= spellings.get(key, {key})
            dropped &= payload.keys()
            if not dropped:
                break
            for key in sorted(dropped):
                LOGGER.warning(
                    "Invalid value %r for option %s of rule %s; using the default",
                    payload[key],
                    key,
                    rule or model.__name__,
                )
                payload.pop(key)
    return model()


def _field_spellings(model: type[RuleOptions]) -> dict[str, set[str]]:
    """Map every accepted key of ``model`` to all spellings of the same field."""

    spellings: dict[str, set[str]] = {}
    for name, info in model.model_fields.items():
        keys = {name} if info.alias is None else {name, info.alias}
        for key in keys:
            spellings[key] = keys
    return spellings


class LintConfig(BaseModel):
    """Effective configuration for one lint run."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    autocorrect: bool = False
    include: tuple[str, ...] = DEFAULT_INCLUDE
    exclude: tuple[str, ...] = DEFAULT_EXCLUDE
    jobs: int = Field(default=1, ge=1)
    rules: dict[str, dict[str, Any]] = Field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable representation of the configuration."""

        return self.model_dump(mode="json")


class RuleConfig:
    """Read-only view over per-rule options built once per run."""

    __slots__ = ("_options", "_autocorrect", "_cache")

    def __init__(self, options: Mapping[str, Mapping[str, Any]] | None = None, *, autocorrect: bool = False) -> None:
        """Capture the raw option tables.

        Args:
            options: Mapping of rule name to its raw option table.
            autocorrect: Whether corrections should be applied.
        """

        self._options: dict[str, dict[str, Any]] = {
            name: dict(table) if isinstance(table, Mapping) else {} for name, table in (options or {}).items()
        }
        self._autocorrect = autocorrect
        self._cache: dict[tuple[str, type[RuleOptions]], RuleOptions] = {}

    @classmethod
    def from_lint_config(cls, config: LintConfig) -> RuleConfig:
        """Build a rule configuration from the loaded :class:`LintConfig`."""

        return cls(config.rules, autocorrect=config.autocorrect)

    @property
    def autocorrect(self) -> bool:
        """Return whether autocorrection was requested."""

        return self._autocorrect

    def raw(self, rule: str) -> Mapping[str, Any]:
        """Return the raw option table of ``rule``."""

        return self._options.get(rule, {})

    def get(self, rule: str, option: str, default: Any = None) -> Any:
        """Return a single raw option value, falling back to ``default``."""

        return self._options.get(rule, {}).get(option, default)

    def options_for(self, rule: str, model: type[OptionsT]) -> OptionsT:
        """Return the validated options of ``rule``.

        Args:
            rule: Rule name.
            model: Options model the rule declares.

        Returns:
            OptionsT: Validated options, cached for the lifetime of this view.
        """

        key = (rule, model)
        cached = self._cache.get(key)
        if cached is None:
            cached = coerce_options(model, self._options.get(rule), rule=rule)
            self._cache[key] = cached
        return cached  # type: ignore[return-value]

    def enabled(self, rule: str, *, default: bool = True) -> bool:
        """Return whether ``rule`` is enabled."""

        table = self._options.get(rule, {})
        value = table.get("enabled", table.get("Enabled", default))
        return value if isinstance(value, bool) else default

    def with_autocorrect(self, autocorrect: bool) -> RuleConfig:
        """Return a copy of this view with a different autocorrect flag."""

        return RuleConfig(self._options, autocorrect=autocorrect)


__all__ = [
    "DEFAULT_EXCLUDE",
    "DEFAULT_INCLUDE",
    "DEFAULT_TAG_KEYWORDS",
    "ExplicitVisibilityOptions",
    "LintConfig",
    "MethodParameterShadowingOptions",
    "MysteryRegexOptions",
    "NoBackwardsCompatHacksOptions",
    "NoCommentedCodeOptions",
    "NoEmojiOptions",
    "NoFancyUnicodeOptions",
    "NoHardcodedLineNumbersOptions",
    "NoOverlyDefensiveCodeOptions",
    "RuleConfig",
    "RuleOptions",
    "TaggedCommentsOptions",
    "coerce_options",
]
