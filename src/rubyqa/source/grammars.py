# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Resolve the packaged Tree-sitter grammars used by rubyqa."""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable
from functools import lru_cache
from threading import Lock
from types import ModuleType
from typing import Final, cast

from tree_sitter import Language, Parser

from ..core.errors import GrammarUnavailableError

LOGGER = logging.getLogger(__name__)

RUBY_GRAMMAR: Final[str] = "ruby"
_MODULE_PREFIX: Final[str] = "tree_sitter_"

_LANGUAGE_CACHE: dict[str, Language] = {}
_LANGUAGE_CACHE_LOCK = Lock()


def ensure_language(grammar_name: str) -> Language:
    """Resolve a :class:`Language` for ``grammar_name``.

    Args:
        grammar_name: Canonical Tree-sitter grammar name (e.g., ``"ruby"``).

    Returns:
        Language: Loaded grammar, cached for subsequent calls.

    Raises:
        GrammarUnavailableError: If no packaged grammar module can be imported.
    """

    with _LANGUAGE_CACHE_LOCK:
        cached = _LANGUAGE_CACHE.get(grammar_name)
        if cached is not None:
            return cached

    module_name = f"{_MODULE_PREFIX}{grammar_name.replace('-', '_')}"
    module = _import_language_module(module_name)
    if module is None:
        raise GrammarUnavailableError(
            f"Tree-sitter grammar '{grammar_name}' is unavailable; install the '{module_name.replace('_', '-')}' package",
        )
    language = _language_from_module(module)
    if language is None:
        raise GrammarUnavailableError(f"Module '{module_name}' does not expose a Tree-sitter language factory")
    LOGGER.debug("Loaded Tree-sitter grammar %s from %s", grammar_name, module_name)
    with _LANGUAGE_CACHE_LOCK:
        _LANGUAGE_CACHE.setdefault(grammar_name, language)
        return _LANGUAGE_CACHE[grammar_name]


def _import_language_module(module_name: str) -> ModuleType | None:
    """Import a packaged Tree-sitter language module when available."""

    try:
        return importlib.import_module(module_name)
    except ModuleNotFoundError:
        return None


def _language_from_module(module: ModuleType) -> Language | None:
    """Instantiate a ``Language`` object from a packaged module factory."""

    factory = getattr(module, "language", None)
    if not callable(factory):
        return None
    pointer = factory()
    return Language(pointer)


@lru_cache(maxsize=1)
def grammar_available() -> bool:
    """Return whether the Ruby grammar can be loaded in this environment."""

    try:
        ensure_language(RUBY_GRAMMAR)
    except GrammarUnavailableError:
        return False
    return True


def build_ruby_parser() -> Parser:
    """Return a new Tree-sitter parser configured for Ruby.

    Parsers are not shared between threads, so callers build one per parse.

    Returns:
        Parser: Parser instance ready to parse Ruby source code.

    Raises:
        GrammarUnavailableError: If the Ruby grammar cannot be loaded.
    """

    language = ensure_language(RUBY_GRAMMAR)
    parser = Parser()
    if hasattr(parser, "set_language"):
        setter = cast(Callable[[Language], None], getattr(parser, "set_language"))
        setter(language)
    else:
        setattr(parser, "language", language)
    return parser


__all__ = ["RUBY_GRAMMAR", "build_ruby_parser", "ensure_language", "grammar_available"]
