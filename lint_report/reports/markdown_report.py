"""Markdown report extraction.

The linter writes its Markdown report in one of two layouts ("dialects"):

console
    Structured blocks (``#### file`` headers, ``❌ **rule**`` markers followed
    by ``- **問題**:`` and ``- **提案**:`` bullets) interleaved with captured
    console output (``[ERROR] rule: message`` tags). Both passes run and their
    results are merged on ``(rule, token, file)``.

heading
    ``## file`` headings with ``- Error: ...`` / ``- 警告: ...`` bullets, plus
    ``path.ext:line:col`` references in backticks or link brackets.
    Records are merged on ``(file, line)``.

Functions:
    extract_markdown_issues(text, config)  -> (list[dict], dialect)
    extract_console_issues(text, config)   -> list[dict]
    extract_heading_issues(text, config)   -> list[dict]
"""

import re
from enum import Enum

from lint_report.config import (
    DIALECT_CONSOLE,
    DIALECT_HEADING,
    Config,
)
from lint_report.models import Issue, normalize_severity
from lint_report.reports.rules import extract_rule_name

_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*m")
_BACKTICK    = re.compile(r"`([^`]+)`")

_SEVERITY_ICON = r"(?:❌|⚠️?|ℹ️?)"

# --------------------------------------------------------------------------- #
# Console dialect - structured blocks
# --------------------------------------------------------------------------- #

_BLOCK_FILE_HEADER  = re.compile(r"^####\s+(?:📄\s*)*(.+?)\s*$")
_BLOCK_RULE_MARKER  = re.compile(rf"^({_SEVERITY_ICON})\s+\*\*([^*]+)\*\*")
_BLOCK_PROBLEM      = re.compile(r"^-\s+\*\*(?:問題|Problem)\*\*:\s*(.+)$")
_BLOCK_SUGGESTION   = re.compile(r"^-\s+\*\*(?:提案|Suggestion)\*\*:\s*(.+)$")

# --------------------------------------------------------------------------- #
# Console dialect - bracketed console tags
# --------------------------------------------------------------------------- #

# First tag on a line, after any prefix (timestamp, bullet, quote marker)
_CONSOLE_TAG  = re.compile(r"^.*?\[(ERROR|WARN(?:ING)?|INFO)\]", re.MULTILINE)
_CONSOLE_HEAD = re.compile(r"\[(?:ERROR|WARN(?:ING)?|INFO)\][ \t]+([^:\n]+):[ \t]*([^\n]*)")
_CONSOLE_SUGGESTION = re.compile(r"(?:提案|Suggestion)[:：\s]+([^\n]+)")

#: Token reference patterns, first match wins
_TOKEN_PATTERNS = (
    re.compile(r'Token name\s+"([^"]+)"'),
    re.compile(r"トークン[:：\s]+([^\n\s]+)"),
    re.compile(r"Token:\s*([^\n\s]+)"),
)

_NO_MESSAGE = "エラーが検出されました"

# --------------------------------------------------------------------------- #
# Heading dialect
# --------------------------------------------------------------------------- #

_HEADING_FILE = re.compile(r"^#{2,3}\s+(?:📄\s*)*`?([^`]+?)`?\s*$")
_HEADING_BULLET = re.compile(
    rf"^\s*[-*]\s+(?:{_SEVERITY_ICON}\s*)?(?:\*\*)?"
    r"(Error|Warning|Warn|Info|エラー|警告|情報)"
    r"(?:\*\*)?\s*[:：](?:\*\*)?\s*(.+)$",
    re.IGNORECASE,
)
_HEADING_SUGGESTION = re.compile(
    r"^\s*[-*]\s+(?:\*\*)?(?:Suggestion|提案)(?:\*\*)?\s*[:：](?:\*\*)?\s*(.+)$",
    re.IGNORECASE,
)
_LINE_REF      = re.compile(r"(?:\bline\s+|行\s*)(\d+)(?::(\d+))?", re.IGNORECASE)
_SEVERITY_WORD = re.compile(r"\b(error|warning|warn)\b|(エラー|警告)", re.IGNORECASE)


def _strip_ansi(text: str) -> str:
    return _ANSI_ESCAPE.sub("", text)


def _file_name_pattern(extensions: tuple[str, ...]) -> re.Pattern:
    exts = "|".join(re.escape(e) for e in sorted(extensions, key=len, reverse=True))
    return re.compile(rf"\.(?:{exts})$", re.IGNORECASE)


def _file_ref_pattern(extensions: tuple[str, ...]) -> re.Pattern:
    exts = "|".join(re.escape(e) for e in sorted(extensions, key=len, reverse=True))
    return re.compile(
        rf"[`\[]([^`\[\]\s]+?\.(?:{exts})):(\d+)(?::(\d+))?[`\]]",
        re.IGNORECASE,
    )


def _int(value: str | None) -> int | None:
    return int(value) if value else None


# --------------------------------------------------------------------------- #
# Public API
# --------------------------------------------------------------------------- #

def extract_markdown_issues(text: str, config: Config | None = None) -> tuple[list[dict], str]:
    """Extract issues from a Markdown report.

    Returns the issue records and the dialect that produced them. With
    ``dialect: auto`` the console dialect is tried first and the heading
    dialect only when it finds nothing.
    """
    config = config or Config()

    if config.dialect == DIALECT_HEADING:
        return extract_heading_issues(text, config), DIALECT_HEADING

    issues = extract_console_issues(text, config)
    if issues or config.dialect == DIALECT_CONSOLE:
        return issues, DIALECT_CONSOLE

    return extract_heading_issues(text, config), DIALECT_HEADING


def extract_console_issues(text: str, config: Config | None = None) -> list[dict]:
    """Console dialect: structured blocks first, then bracketed tags not already seen."""
    config = config or Config()
    clean = _strip_ansi(text)

    accumulator = _BlockAccumulator(config)
    for line in clean.splitlines():
        accumulator.feed(line)

    issues = accumulator.issues
    seen = {(i.rule, i.token, i.file) for i in issues}
    for issue in _console_tag_issues(clean, config):
        key = (issue.rule, issue.token, issue.file)
        if key not in seen:
            seen.add(key)
            issues.append(issue)

    return [i.to_dict() for i in issues]


def extract_heading_issues(text: str, config: Config | None = None) -> list[dict]:
    """Heading dialect: severity bullets under file headings, then bare file:line references."""
    config = config or Config()
    file_name = _file_name_pattern(config.file_extensions)
    file_ref  = _file_ref_pattern(config.file_extensions)

    current_file = config.default_file
    bullets: list[Issue] = []
    references: list[Issue] = []
    last: Issue | None = None

    for line in _strip_ansi(text).splitlines():
        match = _HEADING_FILE.match(line)
        if match:
            name = match.group(1).strip()
            if file_name.search(name):
                current_file = name
            last = None
            continue

        match = _HEADING_BULLET.match(line)
        if match:
            last = _bullet_issue(match, current_file, file_ref, config)
            bullets.append(last)
            continue

        match = _HEADING_SUGGESTION.match(line)
        if match:
            if last is not None and last.suggestion is None:
                last.suggestion = match.group(1).strip()
            continue

        issue = _reference_issue(line, file_ref, config)
        if issue is not None:
            references.append(issue)

    return [i.to_dict() for i in _dedupe_by_location(bullets + references)]


# --------------------------------------------------------------------------- #
# Console dialect internals
# --------------------------------------------------------------------------- #

class _State(Enum):
    IDLE                = "idle"
    IN_FILE             = "in-file"
    AWAITING_PROBLEM    = "awaiting-problem"
    AWAITING_SUGGESTION = "awaiting-suggestion"


class _BlockAccumulator:
    """Finite-state record accumulator for structured Markdown blocks.

    A ``❌ **rule**`` marker opens a record, ``- **問題**:`` fills its message
    and ``- **提案**:`` is the only transition that emits it. File headers
    switch the current file without discarding an open record.
    """

    def __init__(self, config: Config) -> None:
        self._file_name = _file_name_pattern(config.file_extensions)
        self.issues: list[Issue] = []
        self.state = _State.IDLE
        self._file = config.default_file
        self._seen_file = False
        self._reset_record()

    def _reset_record(self) -> None:
        self._rule: str | None = None
        self._severity: str | None = None
        self._message: str | None = None
        self._token: str | None = None

    @property
    def _in_rule(self) -> bool:
        return self.state in (_State.AWAITING_PROBLEM, _State.AWAITING_SUGGESTION)

    def _idle_state(self) -> _State:
        return _State.IN_FILE if self._seen_file else _State.IDLE

    def feed(self, line: str) -> None:
        if not line:
            return

        match = _BLOCK_FILE_HEADER.match(line)
        if match:
            name = match.group(1).strip().strip("`")
            if name != "Unknown" and self._file_name.search(name):
                self._file = name
                self._seen_file = True
                if not self._in_rule:
                    self.state = _State.IN_FILE
            return

        match = _BLOCK_RULE_MARKER.match(line)
        if match:
            self._reset_record()
            self._rule = match.group(2).strip()
            self._severity = normalize_severity(match.group(1))
            self.state = _State.AWAITING_PROBLEM
            return

        if not self._in_rule:
            return

        match = _BLOCK_PROBLEM.match(line)
        if match:
            self._message = match.group(1).strip()
            self.state = _State.AWAITING_SUGGESTION
            return

        match = _BLOCK_SUGGESTION.match(line)
        if match:
            self._emit(match.group(1).strip())
            return

        if self._token is None:
            match = _BACKTICK.search(line)
            if match:
                self._token = match.group(1)

    def _emit(self, suggestion: str) -> None:
        token_match = _BACKTICK.search(self._message) if self._message else None
        self.issues.append(Issue(
            file=self._file,
            severity=self._severity,
            message=self._message or self._rule,
            rule=self._rule,
            token=token_match.group(1) if token_match else self._token,
            suggestion=suggestion,
        ))
        self._reset_record()
        self.state = self._idle_state()


def _console_blocks(text: str):
    """Yield ``(tag, block)`` pairs.

    A block starts at its tag and runs up to the start of the next tagged
    line, or the end of text.
    """
    tags = list(_CONSOLE_TAG.finditer(text))
    for index, tag in enumerate(tags):
        end = tags[index + 1].start() if index + 1 < len(tags) else len(text)
        yield tag.group(1), text[tag.start(1) - 1:end]


def _find_token(block: str) -> str | None:
    for pattern in _TOKEN_PATTERNS:
        match = pattern.search(block)
        if match:
            return match.group(1).strip()
    return None


def _console_tag_issues(text: str, config: Config) -> list[Issue]:
    found: dict[str, Issue] = {}

    for tag, block in _console_blocks(text):
        head = _CONSOLE_HEAD.search(block)
        rule = head.group(1).strip() if head else None
        message = (head.group(2).strip() or None) if head else None
        token = _find_token(block)

        if not rule or not (token or message):
            continue

        key = f"{rule}:{token or message}"
        if key in found:
            continue

        if not message:
            message = f'Token name "{token}" does not match pattern' if token else _NO_MESSAGE

        suggestion = _CONSOLE_SUGGESTION.search(block)
        found[key] = Issue(
            file=config.default_file,
            severity=normalize_severity(tag),
            message=message,
            rule=rule,
            token=token,
            suggestion=suggestion.group(1).strip() if suggestion else None,
        )

    return list(found.values())


# --------------------------------------------------------------------------- #
# Heading dialect internals
# --------------------------------------------------------------------------- #

def _bullet_issue(match: re.Match, current_file: str, file_ref: re.Pattern,
                  config: Config) -> Issue:
    message = match.group(2).strip()
    issue = Issue(
        file=current_file,
        severity=normalize_severity(match.group(1)),
        message=message,
        rule=extract_rule_name(message, config.known_rules),
    )

    ref = file_ref.search(message)
    if ref:
        issue.file, issue.line, issue.column = ref.group(1), int(ref.group(2)), _int(ref.group(3))
    else:
        loc = _LINE_REF.search(message)
        if loc:
            issue.line, issue.column = int(loc.group(1)), _int(loc.group(2))
    return issue


def _reference_issue(line: str, file_ref: re.Pattern, config: Config) -> Issue | None:
    """Build a record from a line carrying a severity word and a file:line reference."""
    severity = _SEVERITY_WORD.search(line)
    ref = file_ref.search(line) if severity else None
    if not ref:
        return None

    rest = " ".join((line[:ref.start()] + line[ref.end():]).split())
    message = rest.strip(" -*>:：") or line.strip()
    return Issue(
        file=ref.group(1),
        line=int(ref.group(2)),
        column=_int(ref.group(3)),
        severity=normalize_severity(severity.group(0)),
        message=message,
        rule=extract_rule_name(line, config.known_rules),
    )


def _dedupe_by_location(issues: list[Issue]) -> list[Issue]:
    """Keep the first record per ``(file, line)``; records without a line are all kept."""
    seen: set[tuple[str, int]] = set()
    kept: list[Issue] = []
    for issue in issues:
        if issue.line is not None:
            key = (issue.file, issue.line)
            if key in seen:
                continue
            seen.add(key)
        kept.append(issue)
    return kept
