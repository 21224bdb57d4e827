"""Data models for lint reports.

Contains:
    - Issue            one lint finding extracted from a Markdown report
    - ReportSummary    per-severity counts for a run
    - normalize_severity()
"""

from dataclasses import dataclass
from typing import Any

SEVERITY_ERROR   = "error"
SEVERITY_WARNING = "warning"
SEVERITY_INFO    = "info"

# Key order of an issue record in errors.json
_ISSUE_FIELDS = (
    "file", "line", "column", "severity", "message", "rule", "token", "suggestion",
)


def normalize_severity(text: str | None) -> str:
    """Map a free-text severity (``ERROR``, ``Warn``, ``エラー``, ``⚠️``...) to a class."""
    value = str(text or "").strip().lower()
    if "error" in value or "エラー" in value or "❌" in value:
        return SEVERITY_ERROR
    if "warn" in value or "警告" in value or "⚠" in value:
        return SEVERITY_WARNING
    return SEVERITY_INFO


def severity_class(text: str | None) -> str:
    """Classify a record's severity for counting; a missing severity counts as an error."""
    value = str(text or SEVERITY_ERROR).lower()
    if "error" in value:
        return SEVERITY_ERROR
    if "warn" in value:
        return SEVERITY_WARNING
    return SEVERITY_INFO


@dataclass
class Issue:
    file: str
    severity: str
    message: str
    rule: str | None = None
    line: int | None = None
    column: int | None = None
    token: str | None = None
    suggestion: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the record in output key order."""
        return {field: getattr(self, field) for field in _ISSUE_FIELDS}


@dataclass
class ReportSummary:
    error: int = 0
    warning: int = 0
    info: int = 0

    @classmethod
    def from_issues(cls, issues: list) -> "ReportSummary":
        summary = cls()
        for issue in issues:
            sev = issue.get("severity") if isinstance(issue, dict) else None
            klass = severity_class(sev)
            setattr(summary, klass, getattr(summary, klass) + 1)
        return summary

    @property
    def has_issues(self) -> bool:
        """True when any severity count is nonzero, info included."""
        return self.error > 0 or self.warning > 0 or self.info > 0

    def as_dict(self) -> dict[str, int]:
        return {"error": self.error, "warning": self.warning, "info": self.info}
