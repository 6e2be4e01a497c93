# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared utilities for CLI commands (logging, errors, exit codes)."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from functools import lru_cache
from typing import Final

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

EXIT_CLEAN: Final[int] = 0
EXIT_OFFENSES: Final[int] = 1
EXIT_ERROR: Final[int] = 2

PACKAGE_LOGGER: Final[str] = "rubyqa"

# level -> (emoji prefix, rich style)
_MESSAGE_STYLES: Final[dict[str, tuple[str, str]]] = {
    "ok": ("✅ ", "green"),
    "warn": ("⚠️ ", "yellow"),
    "fail": ("❌ ", "red"),
}


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = EXIT_ERROR) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code


def stdout_is_tty() -> bool:
    """Return whether stdout is attached to a terminal."""

    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


def console_for(*, color: bool, emoji: bool) -> Console:
    """Return the shared rich console for one colour and emoji preference.

    Colour is only enabled when stdout is a terminal, so piped reports stay
    free of ANSI escapes.

    Args:
        color: Colour requested by the user.
        emoji: Whether rich may substitute emoji codes.

    Returns:
        Console: Console cached for these preferences.
    """

    tty = stdout_is_tty()
    return _console(color and tty, emoji, tty)


@lru_cache(maxsize=None)
def _console(colored: bool, emoji: bool, tty: bool) -> Console:
    return Console(
        color_system="auto" if colored else None,
        force_terminal=tty,
        no_color=not colored,
        emoji=emoji,
        soft_wrap=True,
        highlight=False,
    )


@dataclass(slots=True)
class CLILogger:
    """User-facing status lines that honour the ``--no-color`` and ``--no-emoji`` flags."""

    console: Console
    use_emoji: bool
    use_color: bool
    debug_enabled: bool = False

    def _emit(self, level: str, message: str) -> None:
        prefix, style = _MESSAGE_STYLES[level]
        text = Text(f"{prefix}{message}" if self.use_emoji else message)
        if self.use_color:
            text.stylize(style)
        self.console.print(text)

    def fail(self, message: str) -> None:
        """Report a failure that ends the command."""

        self._emit("fail", message)

    def warn(self, message: str) -> None:
        """Report a per-file problem that did not stop the run."""

        self._emit("warn", message)

    def ok(self, message: str) -> None:
        """Report files rewritten by ``--fix``."""

        self._emit("ok", message)

    def echo(self, message: str) -> None:
        """Write ``message`` to stdout using Typer's echo helper."""

        typer.echo(message)

    def debug(self, message: str) -> None:
        """Emit a debug message when debug logging is enabled."""

        if self.debug_enabled:
            self.console.print(f"[debug] {message}", style="dim", markup=False)


def build_cli_logger(*, emoji: bool, debug: bool = False, no_color: bool = False) -> CLILogger:
    """Return a ``CLILogger`` configured for the provided preferences.

    Args:
        emoji: Whether log output may include emoji glyphs.
        debug: Whether debug logging should be enabled.
        no_color: Whether terminal colour output should be disabled.

    Returns:
        CLILogger: Logger bound to the shared console for these preferences.
    """

    use_color = not no_color and stdout_is_tty()
    console = console_for(color=use_color, emoji=emoji)
    configure_logging(debug=debug)
    return CLILogger(console=console, use_emoji=emoji, use_color=use_color, debug_enabled=debug)


def configure_logging(*, debug: bool) -> None:
    """Route ``rubyqa`` log records to stderr through rich.

    Args:
        debug: Lower the threshold to ``DEBUG`` instead of ``WARNING``.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        handler = RichHandler(console=Console(stderr=True), show_time=False, show_path=debug)
        logger.addHandler(handler)


__all__ = [
    "EXIT_CLEAN",
    "EXIT_ERROR",
    "EXIT_OFFENSES",
    "CLIError",
    "CLILogger",
    "build_cli_logger",
    "configure_logging",
    "console_for",
    "stdout_is_tty",
]
