# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Filesystem discovery of Ruby sources."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Final

_RECURSIVE_PREFIX: Final[str] = "**/"


def matches_any(relative: str, patterns: Iterable[str]) -> bool:
    """Return whether the POSIX path ``relative`` matches one of ``patterns``.

    A leading ``**/`` also matches files at the top level, so ``**/*.rb``
    covers both ``a.rb`` and ``lib/a.rb``.
    """

    for pattern in patterns:
        if fnmatchcase(relative, pattern):
            return True
        if pattern.startswith(_RECURSIVE_PREFIX) and fnmatchcase(relative, pattern[len(_RECURSIVE_PREFIX) :]):
            return True
    return False


@dataclass(frozen=True, slots=True)
class FileDiscovery:
    """Collect the files to lint below a project root.

    Attributes:
        root: Directory patterns are relative to.
        include: Glob patterns selecting candidate files.
        exclude: Glob patterns removing files or whole directories.
    """

    root: Path
    include: tuple[str, ...]
    exclude: tuple[str, ...]

    def _relative(self, path: Path) -> str:
        try:
            return path.resolve().relative_to(self.root.resolve()).as_posix()
        except ValueError:
            return path.as_posix()

    def is_excluded(self, path: Path, *, directory: bool = False) -> bool:
        """Return whether ``path`` is removed by an exclude pattern."""

        relative = self._relative(path)
        if directory:
            relative = f"{relative}/"
        return matches_any(relative, self.exclude)

    def is_included(self, path: Path) -> bool:
        """Return whether ``path`` is selected by an include pattern."""

        return matches_any(self._relative(path), self.include)

    def walk(self, base: Path) -> Iterator[Path]:
        """Yield the included files below ``base`` in sorted order."""

        for current, dirnames, filenames in os.walk(base):
            directory = Path(current)
            dirnames[:] = sorted(name for name in dirnames if not self.is_excluded(directory / name, directory=True))
            for filename in sorted(filenames):
                candidate = directory / filename
                if self.is_included(candidate) and not self.is_excluded(candidate):
                    yield candidate

    def discover(self, paths: Sequence[Path]) -> list[Path]:
        """Return the files designated by ``paths``.

        Files named explicitly are always returned; directories are walked
        with the include and exclude patterns. Duplicates are dropped while
        preserving the first occurrence.

        Args:
            paths: Files or directories given by the user.

        Returns:
            list[Path]: Files to lint.

        Raises:
            FileNotFoundError: If a path does not exist.
        """

        seen: set[Path] = set()
        files: list[Path] = []
        for path in paths:
            if path.is_file():
                candidates: Iterable[Path] = (path,)
            elif path.is_dir():
                candidates = self.walk(path)
            else:
                raise FileNotFoundError(path)
            for candidate in candidates:
                key = candidate.resolve()
                if key not in seen:
                    seen.add(key)
                    files.append(candidate)
        return files


__all__ = ["FileDiscovery", "matches_any"]
