# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared primitives for the rules shipped with rubyqa."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar, TypeVar

from ..config.models import RuleConfig, RuleOptions
from ..core.models import Correction, SourceRange
from ..core.severity import Severity
from ..source.buffer import SourceBuffer
from ..source.nodes import Comment, NodeKind, ParsedSource, SyntaxNode

StateT = TypeVar("StateT")


@dataclass(frozen=True, slots=True)
class Finding:
    """Detection result produced by a rule before it becomes an offense.

    Attributes:
        range: Characters the offense is anchored to.
        message: Human-readable explanation.
        target: Node, comment or block the finding was raised for.
        data: Rule-specific payload consumed when computing the correction.
    """

    range: SourceRange
    message: str
    target: SyntaxNode | Comment | object | None = None
    data: Mapping[str, Any] = field(default_factory=dict)


class VisitContext:
    """Explicit traversal context handed to every rule callback.

    The context owns all per-file mutable state so rule instances stay
    stateless and can be shared between threads.
    """

    __slots__ = ("parsed", "config", "_state")

    def __init__(self, parsed: ParsedSource, config: RuleConfig) -> None:
        """Bind the context to one parsed file.

        Args:
            parsed: File being inspected.
            config: Read-only rule configuration.
        """

        self.parsed = parsed
        self.config = config
        self._state: dict[str, Any] = {}

    @property
    def buffer(self) -> SourceBuffer:
        """Return the buffer of the inspected file."""

        return self.parsed.buffer

    @property
    def comments(self) -> tuple[Comment, ...]:
        """Return the comments of the inspected file in source order."""

        return self.parsed.comments

    def options(self, rule: Rule) -> RuleOptions:
        """Return the validated options of ``rule``."""

        return self.config.options_for(rule.name, rule.options_model)

    def state_for(self, rule: Rule, factory: Callable[[], StateT]) -> StateT:
        """Return the per-file state of ``rule``, creating it with ``factory``.

        Args:
            rule: Rule owning the state.
            factory: Zero-argument callable building the initial state.

        Returns:
            StateT: State object shared by all callbacks of ``rule`` for this file.
        """

        if rule.name not in self._state:
            self._state[rule.name] = factory()
        return self._state[rule.name]  # type: ignore[no-any-return]


class Rule(ABC):
    """Abstract pattern-detection rule.

    Subclasses declare the node kinds they subscribe to and whether they
    read the comment stream; the runner only dispatches matching elements.
    """

    name: ClassVar[str]
    description: ClassVar[str] = ""
    options_model: ClassVar[type[RuleOptions]] = RuleOptions
    node_kinds: ClassVar[frozenset[NodeKind]] = frozenset()
    visits_comments: ClassVar[bool] = False
    default_severity: ClassVar[Severity] = Severity.CONVENTION

    def check_node(self, node: SyntaxNode, ctx: VisitContext) -> Iterable[Finding]:
        """Return the findings raised for ``node``."""

        return ()

    def on_comment(self, comment: Comment, ctx: VisitContext) -> Iterable[Finding]:
        """Return the findings raised for ``comment``."""

        return ()

    def on_comments_finished(self, ctx: VisitContext) -> Iterable[Finding]:
        """Return findings that only become known once every comment was seen."""

        return ()

    def severity(self, ctx: VisitContext) -> Severity:
        """Return the severity configured for this rule."""

        configured = ctx.options(self).severity
        return configured or self.default_severity

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class CorrectingRule(Rule):
    """Rule able to propose text edits for its findings."""

    @abstractmethod
    def correct(self, finding: Finding, ctx: VisitContext) -> Correction:
        """Return the edits fixing ``finding``.

        Args:
            finding: Finding previously produced by this rule.
            ctx: Visit context of the file.

        Returns:
            Correction: Edits to apply; empty when no fix is possible.
        """


def is_correcting(rule: Rule) -> bool:
    """Return whether ``rule`` implements the correction capability."""

    return isinstance(rule, CorrectingRule)


__all__ = ["CorrectingRule", "Finding", "Rule", "VisitContext", "is_correcting"]
