"""PR comment rendering.

Functions:
    group_issues_by_file(issues)            -> dict[str, list]
    format_for_pr(issues, dialect, config)  -> dict  {hasErrors, markdown, errors, summary}
"""

from typing import Any

from lint_report.config import DIALECT_CONSOLE, DIALECT_HEADING, Config
from lint_report.models import (
    SEVERITY_ERROR,
    SEVERITY_WARNING,
    ReportSummary,
    severity_class,
)

UNKNOWN_FILE = "unknown"

TITLE = "Design AI Linter Report"

NO_ISSUES_MARKDOWN = f"## ✅ {TITLE}\n\nエラーと警告は検出されませんでした。"

_DEFAULT_MESSAGE = "エラーが検出されました"

_SEVERITY_LABELS = {
    SEVERITY_ERROR:   ("❌", "エラー"),
    SEVERITY_WARNING: ("⚠️", "警告"),
}
_INFO_LABEL = ("ℹ️", "情報")

_CONSOLE_TABLE = (
    "| 重要度 | ルール | トークン/問題 | メッセージ | 提案 |\n"
    "|--------|--------|--------------|------------|------|\n"
)
_HEADING_TABLE = (
    "| 重要度 | 行 | ルール | メッセージ |\n"
    "|--------|----|--------|------------|\n"
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def group_issues_by_file(issues: list) -> dict[str, list]:
    """Partition issues by their ``file`` key, keeping input order in each group."""
    grouped: dict[str, list] = {}
    for issue in issues:
        file = _field(issue, "file") or UNKNOWN_FILE
        grouped.setdefault(str(file), []).append(issue)
    return grouped


def format_for_pr(
    issues: list | None,
    dialect: str = DIALECT_CONSOLE,
    config: Config | None = None,
) -> dict[str, Any]:
    """Render *issues* as a PR comment and a JSON-ready summary.

    ``hasErrors`` is true whenever any issue was found, info-only included.
    The table columns follow the dialect the issues were extracted with.
    """
    config = config or Config()
    issues = list(issues or [])
    summary = ReportSummary.from_issues(issues)

    if not issues:
        return {
            "hasErrors": False,
            "markdown":  NO_ISSUES_MARKDOWN,
            "errors":    [],
            "summary":   summary.as_dict(),
        }

    render_row = _heading_row if dialect == DIALECT_HEADING else _console_row
    header = _HEADING_TABLE if dialect == DIALECT_HEADING else _CONSOLE_TABLE

    parts = [
        f"## 🔍 {TITLE}\n\n",
        "### サマリー\n\n",
        f"- ❌ **エラー**: {summary.error}件\n",
        f"- ⚠️ **警告**: {summary.warning}件\n",
        f"- ℹ️ **情報**: {summary.info}件\n\n",
        "### 検出された問題\n\n",
    ]
    for file, file_issues in group_issues_by_file(issues).items():
        parts.append(f"#### `{file}`\n\n")
        parts.append(header)
        for issue in file_issues:
            parts.append(render_row(issue, config.message_limit))
        parts.append("\n")

    return {
        "hasErrors": summary.has_issues,
        "markdown":  "".join(parts),
        "errors":    issues,
        "summary":   summary.as_dict(),
    }


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _field(issue: Any, key: str) -> Any:
    """Read a record field; non-dict records only carry a message."""
    if isinstance(issue, dict):
        return issue.get(key)
    if key == "message" and issue is not None:
        return str(issue)
    return None


def truncate(text: str, limit: int) -> str:
    """Cut *text* to *limit* characters, the last three being '...'."""
    if len(text) > limit:
        return text[:limit - 3] + "..."
    return text


def escape_cell(text: str) -> str:
    """Keep a value from breaking a Markdown table row."""
    return text.replace("|", "\\|").replace("\r\n", " ").replace("\n", " ")


def _severity_cell(issue: Any) -> str:
    klass = severity_class(_field(issue, "severity"))
    icon, label = _SEVERITY_LABELS.get(klass, _INFO_LABEL)
    return f"{icon} {label}"


def _message_cell(issue: Any, limit: int) -> str:
    message = _field(issue, "message") or _field(issue, "problem") or _DEFAULT_MESSAGE
    return escape_cell(truncate(str(message), limit))


def _console_row(issue: Any, limit: int) -> str:
    rule = _field(issue, "rule")
    rule = escape_cell(str(rule)) if rule else "-"
    token = _field(issue, "token") or _field(issue, "tokenName")
    token = f"`{token}`" if token else "-"
    suggestion = _field(issue, "suggestion")
    suggestion = escape_cell(str(suggestion)) if suggestion else "-"
    return (
        f"| {_severity_cell(issue)} | {rule} | {token} "
        f"| {_message_cell(issue, limit)} | {suggestion} |\n"
    )


def _heading_row(issue: Any, limit: int) -> str:
    line = _field(issue, "line")
    column = _field(issue, "column")
    if line is None:
        location = "-"
    elif column is not None:
        location = f"{line}:{column}"
    else:
        location = str(line)
    rule = _field(issue, "rule")
    rule = escape_cell(str(rule)) if rule else "-"
    return f"| {_severity_cell(issue)} | {location} | {rule} | {_message_cell(issue, limit)} |\n"
