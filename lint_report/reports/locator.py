"""Report discovery and reading.

Usage:
    paths     = locate_reports("./reports")
    issues    = parse_json_report(paths.json)              # list | None
    issues    = parse_markdown_report(paths.markdown, cfg)  # list | None
    collected = collect_issues("./reports", cfg)

``None`` means the source could not be read or parsed; ``[]`` means it was
read and holds no issues. Failures are reported on stderr, never raised.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path

import click

from lint_report.config import DIALECT_CONSOLE, Config
from lint_report.reports.json_report import extract_json_issues
from lint_report.reports.markdown_report import extract_markdown_issues

JSON_REPORT_NAME     = "lint-report.json"
MARKDOWN_REPORT_NAME = "lint-report.md"

SOURCE_JSON     = "json"
SOURCE_MARKDOWN = "markdown"


@dataclass(frozen=True)
class ReportPaths:
    json: Path
    markdown: Path


@dataclass
class CollectedIssues:
    issues: list = field(default_factory=list)
    source: str | None = None
    dialect: str = DIALECT_CONSOLE


def locate_reports(reports_dir: str | Path) -> ReportPaths:
    base = Path(reports_dir)
    return ReportPaths(json=base / JSON_REPORT_NAME, markdown=base / MARKDOWN_REPORT_NAME)


def _diagnostic(message: str) -> None:
    click.echo(message, err=True)


def parse_json_report(path: str | Path) -> list | None:
    """Read a JSON report and return its issue list, or None on failure."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        _diagnostic(f"Failed to read JSON report '{path}': {exc}")
        return None
    return extract_json_issues(data)


def _parse_markdown(path: str | Path, config: Config) -> tuple[list[dict], str] | None:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        _diagnostic(f"Failed to read Markdown report '{path}': {exc}")
        return None

    try:
        return extract_markdown_issues(text, config)
    except Exception as exc:  # a scan failure must not abort the run
        _diagnostic(f"Failed to parse Markdown report '{path}': {exc!r}")
        return None


def parse_markdown_report(path: str | Path, config: Config | None = None) -> list[dict] | None:
    """Read a Markdown report and return its issue records, or None on failure."""
    result = _parse_markdown(path, config or Config())
    return None if result is None else result[0]


def collect_issues(reports_dir: str | Path, config: Config | None = None,
                   verbose: bool = False) -> CollectedIssues:
    """Return the issues of the preferred report under *reports_dir*.

    The JSON report wins when it exists and yields at least one issue;
    otherwise the Markdown report is used when it yields at least one issue.
    Missing files simply contribute nothing.
    """
    config = config or Config()
    paths = locate_reports(reports_dir)

    if paths.json.exists():
        if verbose:
            _diagnostic(f"[verbose] Reading JSON report '{paths.json}'")
        issues = parse_json_report(paths.json)
        if issues:
            return CollectedIssues(issues=issues, source=SOURCE_JSON, dialect=DIALECT_CONSOLE)

    if paths.markdown.exists():
        if verbose:
            _diagnostic(f"[verbose] Reading Markdown report '{paths.markdown}'")
        result = _parse_markdown(paths.markdown, config)
        if result is not None and result[0]:
            issues, dialect = result
            return CollectedIssues(issues=issues, source=SOURCE_MARKDOWN, dialect=dialect)

    return CollectedIssues()
