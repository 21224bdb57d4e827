"""CLI entry point — the lint-report command using Click.

    lint-report [REPORTS_DIR] [OUTPUT_PATH]

Reads <REPORTS_DIR>/lint-report.json (preferred) or lint-report.md, writes the
PR comment to OUTPUT_PATH (default <REPORTS_DIR>/pr-comment.md) and a summary
to <REPORTS_DIR>/errors.json. Exit status is 1 when any issue was found.
"""

import json
import sys
from pathlib import Path
from typing import Any

import click

from lint_report import __version__
from lint_report.config import DEFAULT_CONFIG_PATH, DIALECTS

DEFAULT_REPORTS_DIR = "./reports"
PR_COMMENT_NAME     = "pr-comment.md"
SUMMARY_NAME        = "errors.json"

EXIT_NO_ISSUES     = 0
EXIT_ISSUES_FOUND  = 1
EXIT_CONFIG_ERROR  = 2


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _load_config(config_path: str, dialect: str | None, verbose: bool):
    """Load config, applying the --dialect override. Exits on error."""
    from lint_report.config import ConfigError, load

    try:
        config = load(config_path, required=config_path != DEFAULT_CONFIG_PATH)
    except ConfigError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    if dialect:
        config.dialect = dialect
    if verbose:
        click.echo(f"[verbose] Markdown dialect: {config.dialect}", err=True)
    return config


def _write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)


def _emit_summary(result: dict[str, Any], path: Path, compact: bool) -> None:
    indent = None if compact else 2
    _write_text(path, json.dumps(result, indent=indent, ensure_ascii=False))


def _init_config(ctx: click.Context, _param: click.Parameter, value: str | None) -> None:
    """Eager callback for --init-config: write a template and exit."""
    if not value or ctx.resilient_parsing:
        return
    from lint_report.config import ConfigError, generate_template

    try:
        generate_template(value)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(EXIT_CONFIG_ERROR)
    click.echo(f"Template written to '{value}'.")
    ctx.exit(EXIT_NO_ISSUES)


# ---------------------------------------------------------------------------
# Command
# ---------------------------------------------------------------------------

@click.command()
@click.argument("reports_dir", default=DEFAULT_REPORTS_DIR, required=False,
                type=click.Path(file_okay=False))
@click.argument("output_path", default=None, required=False,
                type=click.Path(dir_okay=False))
@click.option("--config", "config_path", default=DEFAULT_CONFIG_PATH, show_default=True,
              help="Path to the configuration file (optional unless given explicitly).")
@click.option("--dialect", type=click.Choice(DIALECTS), default=None,
              help="Markdown report layout (overrides config).")
@click.option("--compact", is_flag=True, default=False,
              help="Write errors.json on a single line.")
@click.option("--verbose", is_flag=True, default=False,
              help="Enable verbose logging.")
@click.option("--init-config", metavar="PATH", callback=_init_config, expose_value=False,
              is_eager=True, help="Write a template configuration file and exit.")
@click.version_option(__version__, prog_name="lint-report")
def cli(reports_dir: str, output_path: str | None, config_path: str,
        dialect: str | None, compact: bool, verbose: bool) -> None:
    """Turn design-linter output into a PR comment and an errors.json summary."""
    from lint_report.reports.locator import collect_issues
    from lint_report.reports.pr_comment import format_for_pr

    config = _load_config(config_path, dialect, verbose)

    reports = Path(reports_dir)
    comment_path = Path(output_path) if output_path else reports / PR_COMMENT_NAME
    summary_path = reports / SUMMARY_NAME

    collected = collect_issues(reports, config, verbose=verbose)
    if verbose:
        source = collected.source or "none"
        click.echo(f"[verbose] {len(collected.issues)} issue(s) from source '{source}'", err=True)

    result = format_for_pr(collected.issues, dialect=collected.dialect, config=config)

    _write_text(comment_path, result["markdown"])
    _emit_summary(result, summary_path, compact)

    click.echo(f"PR comment written to '{comment_path}'")
    click.echo(f"Summary written to '{summary_path}'")

    sys.exit(EXIT_ISSUES_FOUND if result["hasErrors"] else EXIT_NO_ISSUES)
