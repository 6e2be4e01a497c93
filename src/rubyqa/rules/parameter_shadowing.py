# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rule flagging method parameters named after instance variables."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final, cast

from ..analysis.structure import collect_instance_variables, enclosing_scope
from ..config.models import MethodParameterShadowingOptions
from ..source.nodes import NodeKind, SyntaxNode
from .base import Finding, Rule, VisitContext

SHADOWING_PARAMETER_KINDS: Final[frozenset[NodeKind]] = frozenset(
    {NodeKind.ARG, NodeKind.OPTARG, NodeKind.KWARG, NodeKind.KWOPTARG},
)

MSG_SHADOW: Final[str] = "Parameter `{param}` shadows instance variable `@{param}`. Use a different name."


class MethodParameterShadowing(Rule):
    """Flag parameters that share a name with an instance variable of their class.

    Instance variables are collected once per class or module body and cached
    in the per-file state; the comparison is a plain name match.
    """

    name = "MethodParameterShadowing"
    description = "Flags method parameters that shadow instance variables of the enclosing class."
    options_model = MethodParameterShadowingOptions
    node_kinds = frozenset({NodeKind.DEF})

    def _instance_variables(self, scope: SyntaxNode, ctx: VisitContext) -> frozenset[str]:
        cache: dict[int, frozenset[str]] = ctx.state_for(self, dict)
        key = id(scope)
        if key not in cache:
            cache[key] = collect_instance_variables(scope)
        return cache[key]

    def check_node(self, node: SyntaxNode, ctx: VisitContext) -> Iterable[Finding]:
        options = cast(MethodParameterShadowingOptions, ctx.options(self))
        if node.value in options.exempt_methods:
            return ()
        scope = enclosing_scope(node)
        if scope is None:
            return ()
        ivars = self._instance_variables(scope, ctx)
        if not ivars:
            return ()
        return [
            Finding(range=param.range, message=MSG_SHADOW.format(param=param.value), target=param)
            for param in node.parameters
            if param.kind in SHADOWING_PARAMETER_KINDS and param.value in ivars
        ]


__all__ = ["MSG_SHADOW", "MethodParameterShadowing", "SHADOWING_PARAMETER_KINDS"]
