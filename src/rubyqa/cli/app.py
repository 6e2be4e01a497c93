# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring commands and shared services."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from .check import CheckOptions, OutputFormat, run_check
from .info import render_config, run_rules, version_text
from .shared import CLIError, build_cli_logger

app = typer.Typer(
    name="rubyqa",
    help="Lint Ruby sources for patterns common in generated code.",
    no_args_is_help=True,
    add_completion=False,
)

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Configuration file merged over project settings."),
]
RootOption = Annotated[Path, typer.Option("--root", "-r", help="Project root holding configuration.")]
NoColorOption = Annotated[bool, typer.Option("--no-color", help="Disable ANSI colour output.")]
NoEmojiOption = Annotated[bool, typer.Option("--no-emoji", help="Disable emoji in console output.")]


@app.command("check")
def check_command(
    paths: Annotated[list[Path] | None, typer.Argument(help="Files or directories to lint.")] = None,
    fix: Annotated[bool, typer.Option("--fix", "-a", help="Apply corrections in place.")] = False,
    config: ConfigOption = None,
    only: Annotated[list[str] | None, typer.Option("--only", help="Run only this rule (repeatable).")] = None,
    except_: Annotated[
        list[str] | None,
        typer.Option("--except", help="Skip this rule (repeatable)."),
    ] = None,
    output_format: Annotated[str, typer.Option("--format", "-f", help="Output format: text or json.")] = "text",
    jobs: Annotated[int | None, typer.Option("--jobs", "-j", min=1, help="Files linted in parallel.")] = None,
    root: RootOption = Path("."),
    no_color: NoColorOption = False,
    no_emoji: NoEmojiOption = False,
    debug: Annotated[bool, typer.Option("--debug", help="Enable debug logging.")] = False,
) -> None:
    """Lint Ruby files and report offenses."""

    logger = build_cli_logger(emoji=not no_emoji, debug=debug, no_color=no_color)
    normalized_format = output_format.strip().lower()
    if normalized_format not in ("text", "json"):
        logger.fail(f"Unknown format '{output_format}'. Use text or json.")
        raise typer.Exit(code=2)
    fmt: OutputFormat = "json" if normalized_format == "json" else "text"
    options = CheckOptions(
        paths=tuple(paths or ()),
        root=root,
        config_file=config,
        fix=fix,
        only=tuple(only or ()),
        exclude_rules=tuple(except_ or ()),
        output_format=fmt,
        jobs=jobs,
    )
    logger.debug(f"root={root} paths={len(options.paths)} fix={fix} format={fmt}")
    raise typer.Exit(code=run_check(options, logger=logger))


@app.command("rules")
def rules_command(
    config: ConfigOption = None,
    root: RootOption = Path("."),
    no_color: NoColorOption = False,
    no_emoji: NoEmojiOption = False,
) -> None:
    """List the available rules."""

    logger = build_cli_logger(emoji=not no_emoji, no_color=no_color)
    try:
        code = run_rules(root, config, console=logger.console, use_emoji=not no_emoji)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    raise typer.Exit(code=code)


@app.command("config")
def config_command(config: ConfigOption = None, root: RootOption = Path(".")) -> None:
    """Print the effective configuration as JSON."""

    try:
        payload = render_config(root, config)
    except CLIError as exc:
        build_cli_logger(emoji=False).fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    typer.echo(payload)


@app.command("version")
def version_command() -> None:
    """Print the rubyqa version."""

    typer.echo(version_text())


def main() -> None:
    """Console-script entry point."""

    app()


__all__ = ["app", "main"]
