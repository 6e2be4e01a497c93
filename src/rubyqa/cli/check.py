# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""The ``check`` command: lint Ruby files and optionally fix them."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Literal

from ..config.loader import load_config
from ..config.models import LintConfig, RuleConfig
from ..core.errors import RubyQAError
from ..core.models import Diagnostic, FileReport, Offense
from ..discovery import FileDiscovery
from ..engine.runner import RuleRunner, correct_until_stable
from ..reporting import render_json, render_text
from ..rules.registry import build_rules
from ..source.grammars import RUBY_GRAMMAR, ensure_language
from ..source.parser import parse_file
from .shared import EXIT_CLEAN, EXIT_ERROR, EXIT_OFFENSES, CLIError, CLILogger

LOGGER = logging.getLogger(__name__)

OutputFormat = Literal["text", "json"]
SOURCE_ENCODING = "utf-8"
SOURCE_ERRORS = "surrogateescape"


@dataclass(frozen=True, slots=True)
class CheckOptions:
    """Inputs of one ``check`` invocation."""

    paths: tuple[Path, ...] = ()
    root: Path = field(default_factory=Path.cwd)
    config_file: Path | None = None
    fix: bool = False
    only: tuple[str, ...] = ()
    exclude_rules: tuple[str, ...] = ()
    output_format: OutputFormat = "text"
    jobs: int | None = None


def _diagnostics(
    path: Path,
    offenses: Sequence[Offense],
    remaining: Sequence[Offense] | None = None,
) -> list[Diagnostic]:
    """Convert ``offenses`` into diagnostics, flagging those no longer reported."""

    if remaining is None:
        return [offense.to_diagnostic(path) for offense in offenses]
    still_reported = Counter((offense.rule, offense.message) for offense in remaining)
    diagnostics: list[Diagnostic] = []
    for offense in offenses:
        key = (offense.rule, offense.message)
        if still_reported[key] > 0:
            still_reported[key] -= 1
            diagnostics.append(offense.to_diagnostic(path))
        else:
            diagnostics.append(offense.to_diagnostic(path, corrected=offense.correctable))
    return diagnostics


def inspect_file(path: Path, runner: RuleRunner, *, fix: bool = False) -> FileReport:
    """Lint one file, writing the corrected text back when ``fix`` is set.

    Args:
        path: File to lint.
        runner: Runner shared by every worker.
        fix: Apply corrections until the file is stable.

    Returns:
        FileReport: Diagnostics of the file.
    """

    try:
        parsed = parse_file(path)
    except OSError as exc:
        LOGGER.warning("Could not read %s: %s", path, exc)
        return FileReport(path=str(path), read_error=str(exc))
    if not parsed.valid_syntax:
        LOGGER.info("%s has %d syntax errors; results may be incomplete", path, parsed.syntax_error_count)

    if not fix:
        result = runner.run(parsed, autocorrect=False)
        return FileReport(
            path=str(path),
            diagnostics=_diagnostics(path, result.offenses),
            syntax_errors=parsed.syntax_error_count,
        )

    original = parsed.buffer.text
    stable = correct_until_stable(original, runner, path=path)
    corrected = stable.text != original
    if corrected:
        path.write_text(stable.text, encoding=SOURCE_ENCODING, errors=SOURCE_ERRORS)
    return FileReport(
        path=str(path),
        diagnostics=_diagnostics(path, stable.offenses, stable.remaining if corrected else None),
        corrected=corrected,
        syntax_errors=parsed.syntax_error_count,
        correction_error=stable.error,
    )


def _effective_config(options: CheckOptions) -> LintConfig:
    config = load_config(options.root, options.config_file)
    updates: dict[str, object] = {}
    if options.fix:
        updates["autocorrect"] = True
    if options.jobs is not None:
        updates["jobs"] = max(1, options.jobs)
    return config.model_copy(update=updates) if updates else config


def collect_reports(options: CheckOptions) -> list[FileReport]:
    """Lint every file selected by ``options`` and return their reports in order.

    Args:
        options: Parsed command-line inputs.

    Returns:
        list[FileReport]: One report per discovered file.

    Raises:
        CLIError: If configuration, rule selection, grammar or paths are invalid.
    """

    try:
        config = _effective_config(options)
        rule_config = RuleConfig.from_lint_config(config)
        rules = build_rules(rule_config, only=options.only, exclude=options.exclude_rules)
        ensure_language(RUBY_GRAMMAR)
    except RubyQAError as exc:
        raise CLIError(str(exc), exit_code=EXIT_ERROR) from exc

    discovery = FileDiscovery(root=options.root, include=config.include, exclude=config.exclude)
    try:
        files = discovery.discover(options.paths or (options.root,))
    except FileNotFoundError as exc:
        raise CLIError(f"No such file or directory: {exc}", exit_code=EXIT_ERROR) from exc

    runner = RuleRunner(rules, rule_config)
    worker = partial(inspect_file, runner=runner, fix=config.autocorrect)
    if config.jobs == 1 or len(files) < 2:
        return [worker(path) for path in files]
    with ThreadPoolExecutor(max_workers=config.jobs) as executor:
        return list(executor.map(worker, files))


def exit_code_for(reports: Sequence[FileReport]) -> int:
    """Return ``2`` on unreadable files, ``1`` on uncorrected offenses, else ``0``."""

    if any(report.read_error for report in reports):
        return EXIT_ERROR
    if any(not diagnostic.corrected for report in reports for diagnostic in report.diagnostics):
        return EXIT_OFFENSES
    return EXIT_CLEAN


def run_check(options: CheckOptions, *, logger: CLILogger) -> int:
    """Execute ``check`` and render its results.

    Args:
        options: Parsed command-line inputs.
        logger: CLI logger carrying the console and presentation flags.

    Returns:
        int: Process exit status.
    """

    try:
        reports = collect_reports(options)
    except CLIError as exc:
        logger.fail(str(exc))
        return exc.exit_code

    if options.output_format == "json":
        logger.echo(render_json(reports))
        return exit_code_for(reports)

    for report in reports:
        if report.read_error:
            logger.fail(f"{report.path}: {report.read_error}")
        if report.correction_error:
            logger.warn(f"{report.path}: autocorrection stopped: {report.correction_error}")
        if report.syntax_errors:
            logger.warn(f"{report.path}: {report.syntax_errors} syntax error(s); results may be incomplete")
    render_text(reports, console=logger.console, use_color=logger.use_color)
    rewritten = sum(1 for report in reports if report.corrected)
    if rewritten:
        logger.ok(f"Rewrote {rewritten} file{'' if rewritten == 1 else 's'} in place")
    return exit_code_for(reports)


__all__ = ["CheckOptions", "collect_reports", "exit_code_for", "inspect_file", "run_check"]
