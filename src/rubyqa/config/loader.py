# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration sources (defaults, TOML, pyproject) and the layered loader."""

from __future__ import annotations

import copy
import logging
import tomllib
from abc import abstractmethod
from collections.abc import Iterable, Mapping, MutableMapping
from pathlib import Path
from typing import Any, Final, Protocol

from pydantic import ValidationError

from ..core.errors import ConfigError
from .models import LintConfig

LOGGER = logging.getLogger(__name__)

DEFAULT_INCLUDE_KEY: Final[str] = "include_config"
PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "rubyqa"
PROJECT_CONFIG_FILENAME: Final[str] = ".rubyqa.toml"

_TOML_CACHE: dict[tuple[Path, int], Mapping[str, Any]] = {}


class ConfigSource(Protocol):
    """Provide configuration data loaded from disk or other mediums."""

    name: str

    @abstractmethod
    def load(self) -> Mapping[str, Any]:
        """Return configuration values as a mapping."""

    @abstractmethod
    def describe(self) -> str:
        """Return a human-readable description of the source."""


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``base`` recursively updated with ``override``."""

    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class DefaultConfigSource:
    """Return the built-in defaults as a configuration fragment."""

    name = "defaults"

    def load(self) -> Mapping[str, Any]:
        return LintConfig().model_dump()

    def describe(self) -> str:
        return "Built-in defaults"


class TomlConfigSource:
    """Load configuration data from a TOML document with include support.

    A document may name other documents under ``include_config``; they are
    merged first so that the including document wins.
    """

    def __init__(self, path: Path, *, name: str | None = None, include_key: str = DEFAULT_INCLUDE_KEY) -> None:
        self._root_path = path
        self.name = name or str(path)
        self._include_key = include_key

    def load(self) -> Mapping[str, Any]:
        return self._load(self._root_path, ())

    def _load(self, path: Path, stack: tuple[Path, ...]) -> Mapping[str, Any]:
        if not path.exists():
            return {}
        resolved = path.resolve()
        if resolved in stack:
            include_chain = " -> ".join(str(entry) for entry in (*stack, resolved))
            raise ConfigError(f"Circular include detected: {include_chain}")
        stat = resolved.stat()
        cache_key = (resolved, stat.st_mtime_ns)
        if cached := _TOML_CACHE.get(cache_key):
            data = copy.deepcopy(cached)
        else:
            try:
                with resolved.open("rb") as handle:
                    data = tomllib.load(handle)
            except (OSError, tomllib.TOMLDecodeError) as exc:
                raise ConfigError(f"Unable to read configuration at {path}: {exc}") from exc
            _TOML_CACHE[cache_key] = copy.deepcopy(data)
        if not isinstance(data, MutableMapping):
            raise ConfigError(f"Configuration at {path} must be a table")
        document: dict[str, Any] = dict(data)
        includes = document.pop(self._include_key, None)
        merged: dict[str, Any] = {}
        for include_path in self._coerce_includes(includes, resolved.parent):
            fragment = self._load(include_path, stack + (resolved,))
            merged = deep_merge(merged, fragment)
        return deep_merge(merged, document)

    def _coerce_includes(self, raw: Any, base_dir: Path) -> Iterable[Path]:
        if raw is None:
            return []
        if isinstance(raw, (str, Path)):
            return [self._resolve_path(Path(raw), base_dir)]
        if isinstance(raw, Iterable) and not isinstance(raw, Mapping):
            return [self._resolve_path(Path(item), base_dir) for item in raw]
        raise ConfigError(f"Unsupported include declaration: {raw!r}")

    @staticmethod
    def _resolve_path(path: Path, base_dir: Path) -> Path:
        return path if path.is_absolute() else (base_dir / path)

    def describe(self) -> str:
        return f"TOML configuration at {self.name}"


class PyProjectConfigSource(TomlConfigSource):
    """Read configuration from ``[tool.rubyqa]`` within ``pyproject.toml``."""

    def __init__(self, path: Path) -> None:
        super().__init__(path, name=str(path))

    def load(self) -> Mapping[str, Any]:
        data = super().load()
        tool_section = data.get(PYPROJECT_TOOL_KEY)
        if not isinstance(tool_section, Mapping):
            return {}
        section = tool_section.get(PYPROJECT_SECTION_KEY)
        if not isinstance(section, Mapping):
            return {}
        return dict(section)

    def describe(self) -> str:
        return f"pyproject.toml ({self.name})"


def config_sources(root: Path, explicit: Path | None = None) -> list[ConfigSource]:
    """Return the configuration sources for ``root`` in merge order.

    Args:
        root: Project root searched for configuration files.
        explicit: Configuration file passed on the command line.

    Returns:
        list[ConfigSource]: Sources from lowest to highest precedence.

    Raises:
        ConfigError: If ``explicit`` does not exist.
    """

    sources: list[ConfigSource] = [
        DefaultConfigSource(),
        PyProjectConfigSource(root / PYPROJECT_FILENAME),
        TomlConfigSource(root / PROJECT_CONFIG_FILENAME),
    ]
    if explicit is not None:
        if not explicit.is_file():
            raise ConfigError(f"Configuration file {explicit} does not exist")
        sources.append(TomlConfigSource(explicit))
    return sources


def load_config(root: Path, explicit: Path | None = None) -> LintConfig:
    """Load the effective :class:`LintConfig` for ``root``.

    Args:
        root: Project root searched for ``pyproject.toml`` and ``.rubyqa.toml``.
        explicit: Optional configuration file with the highest precedence.

    Returns:
        LintConfig: Merged configuration.

    Raises:
        ConfigError: If a configuration document is unreadable, not a table,
            includes itself, or holds invalid top-level settings.
    """

    merged: dict[str, Any] = {}
    for source in config_sources(root, explicit):
        fragment = source.load()
        if fragment:
            LOGGER.debug("Merging configuration from %s", source.describe())
        merged = deep_merge(merged, fragment)
    try:
        return LintConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


__all__ = [
    "DEFAULT_INCLUDE_KEY",
    "PROJECT_CONFIG_FILENAME",
    "ConfigSource",
    "DefaultConfigSource",
    "PyProjectConfigSource",
    "TomlConfigSource",
    "config_sources",
    "deep_merge",
    "load_config",
]
