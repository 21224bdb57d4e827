"""Tests for lint_report/reports/markdown_report.py"""

import textwrap

from lint_report.config import Config
from lint_report.reports.markdown_report import (
    _BlockAccumulator,
    _State,
    extract_console_issues,
    extract_heading_issues,
    extract_markdown_issues,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

BLOCKS_MD = textwrap.dedent("""\
    # Design AI Linter Report

    #### 📄 tokens.json

    ❌ **naming-convention**
    - **問題**: Token name `color.Primary` does not match pattern
    - **理由**: tokens must be kebab-case
    - **提案**: rename to `color.primary`

    ⚠️ **raw-values**
    - **問題**: hardcoded color #fff
    - **理由**: use `color.white` instead
    - **提案**: use a token

    #### 📄 src/components/Button.tsx

    ℹ️ **ai-design-complexity**
    - **問題**: too many variants
    - **提案**: split the component
    """)

CONSOLE_LOG = (
    "\x1b[31m[ERROR]\x1b[0m naming-convention: Token name \"color.Primary\" does not match pattern\n"
    "  トークン: color.Primary\n"
    "  提案: rename it\n"
    "[WARN] raw-values: hardcoded color #000\n"
    "[ERROR] naming-convention: Token name \"color.Primary\" does not match pattern\n"
    "[INFO] no colon here\n"
)

HEADING_MD = textwrap.dedent("""\
    # Lint results

    ## src/components/Button.tsx

    - Error: hardcoded color #fff (rule: raw-values) line 12:5
      - Suggestion: use `color.primary.500`
    - **Warning**: spacing value 13px is off-scale, ai-spacing-consistency

    ## `src/utils/theme.ts`

    - エラー: `src/utils/theme.ts:40:3` duplicate token definition duplicates
    - 警告: naming-convention violated

    Other findings:
    * error in [src/styles/main.css:7] raw-values: raw hex color
    * warning at `src/utils/theme.ts:40` duplicated again
    """)


# ---------------------------------------------------------------------------
# Console dialect — structured blocks
# ---------------------------------------------------------------------------

def test_blocks_extract_records():
    issues = extract_console_issues(BLOCKS_MD)
    assert [(i["file"], i["rule"], i["severity"]) for i in issues] == [
        ("tokens.json",               "naming-convention",    "error"),
        ("tokens.json",               "raw-values",           "warning"),
        ("src/components/Button.tsx", "ai-design-complexity", "info"),
    ]


def test_blocks_record_fields():
    first = extract_console_issues(BLOCKS_MD)[0]
    assert first == {
        "file":       "tokens.json",
        "line":       None,
        "column":     None,
        "severity":   "error",
        "message":    "Token name `color.Primary` does not match pattern",
        "rule":       "naming-convention",
        "token":      "color.Primary",
        "suggestion": "rename to `color.primary`",
    }


def test_blocks_token_from_other_line_when_message_has_none():
    second = extract_console_issues(BLOCKS_MD)[1]
    assert second["message"] == "hardcoded color #fff"
    assert second["token"] == "color.white"


def test_blocks_without_token():
    third = extract_console_issues(BLOCKS_MD)[2]
    assert third["token"] is None
    assert third["suggestion"] == "split the component"


def test_blocks_message_falls_back_to_rule():
    md = "❌ **raw-values**\n- **提案**: use a token\n"
    issues = extract_console_issues(md)
    assert issues[0]["message"] == "raw-values"
    assert issues[0]["file"] == "tokens.json"


def test_blocks_without_suggestion_are_dropped():
    md = "❌ **raw-values**\n- **問題**: hardcoded color\n"
    assert extract_console_issues(md) == []


def test_blocks_ignore_unknown_and_unsupported_file_headers():
    md = textwrap.dedent("""\
        #### 📄 Unknown
        #### 📄 notes.txt
        ❌ **raw-values**
        - **問題**: hardcoded
        - **提案**: fix
        """)
    assert extract_console_issues(md)[0]["file"] == "tokens.json"


def test_blocks_use_configured_default_file_and_extensions():
    md = "#### theme.scss\n❌ **raw-values**\n- **提案**: fix\n"
    config = Config(default_file="design.json", file_extensions=("scss",))
    assert extract_console_issues(md, config)[0]["file"] == "theme.scss"
    assert extract_console_issues("❌ **r**\n- **提案**: fix\n", config)[0]["file"] == "design.json"


# ---------------------------------------------------------------------------
# Console dialect — record accumulator states
# ---------------------------------------------------------------------------

def test_accumulator_state_transitions():
    acc = _BlockAccumulator(Config())
    assert acc.state is _State.IDLE

    acc.feed("#### tokens.json")
    assert acc.state is _State.IN_FILE

    acc.feed("❌ **raw-values**")
    assert acc.state is _State.AWAITING_PROBLEM

    acc.feed("- **問題**: hardcoded")
    assert acc.state is _State.AWAITING_SUGGESTION
    assert acc.issues == []

    acc.feed("- **提案**: use a token")
    assert acc.state is _State.IN_FILE
    assert len(acc.issues) == 1


def test_accumulator_returns_to_idle_without_file_header():
    acc = _BlockAccumulator(Config())
    acc.feed("⚠️ **raw-values**")
    acc.feed("- **提案**: use a token")
    assert acc.state is _State.IDLE
    assert acc.issues[0].severity == "warning"


def test_accumulator_ignores_bullets_outside_a_rule():
    acc = _BlockAccumulator(Config())
    acc.feed("- **問題**: stray")
    acc.feed("- **提案**: stray")
    assert acc.issues == []
    assert acc.state is _State.IDLE


def test_accumulator_file_header_keeps_open_rule():
    acc = _BlockAccumulator(Config())
    acc.feed("❌ **raw-values**")
    acc.feed("#### Button.tsx")
    assert acc.state is _State.AWAITING_PROBLEM
    acc.feed("- **提案**: fix")
    assert acc.issues[0].file == "Button.tsx"


# ---------------------------------------------------------------------------
# Console dialect — bracketed console tags
# ---------------------------------------------------------------------------

def test_console_tags_strip_ansi_and_dedupe():
    issues = extract_console_issues(CONSOLE_LOG)
    assert [(i["rule"], i["severity"]) for i in issues] == [
        ("naming-convention", "error"),
        ("raw-values",        "warning"),
    ]


def test_console_tag_fields():
    first, second = extract_console_issues(CONSOLE_LOG)
    assert first["token"] == "color.Primary"
    assert first["suggestion"] == "rename it"
    assert first["message"] == 'Token name "color.Primary" does not match pattern'
    assert first["file"] == "tokens.json"
    assert first["line"] is None
    assert second["token"] is None
    assert second["message"] == "hardcoded color #000"


def test_console_tag_token_patterns_in_order():
    log = '[ERROR] naming-convention:\n  Token name "a.b" is wrong\n  トークン: c.d\n'
    issues = extract_console_issues(log)
    assert issues[0]["token"] == "a.b"


def test_console_tag_default_message_from_token():
    log = "[WARN] naming-convention:\n  トークン: spacing.Large\n"
    issues = extract_console_issues(log)
    assert issues[0]["message"] == 'Token name "spacing.Large" does not match pattern'
    assert issues[0]["token"] == "spacing.Large"


def test_console_tag_without_rule_is_discarded():
    assert extract_console_issues("[ERROR] something broke\n") == []


def test_console_tag_with_warning_spelling():
    issues = extract_console_issues("[WARNING] raw-values: hardcoded\n")
    assert issues[0]["severity"] == "warning"


def test_console_tag_after_line_prefix():
    log = (
        "12:00:01 [ERROR] raw-values: hardcoded color #fff\n"
        "- [WARN] naming-convention: Token name \"a.B\" is wrong\n"
        "> [INFO] duplicates: same value twice\n"
    )
    issues = extract_console_issues(log)
    assert [(i["rule"], i["severity"]) for i in issues] == [
        ("raw-values",        "error"),
        ("naming-convention", "warning"),
        ("duplicates",        "info"),
    ]
    assert issues[0]["message"] == "hardcoded color #fff"
    assert issues[1]["token"] == "a.B"


def test_console_prefixed_block_keeps_continuation_lines():
    log = "[2024-05-01 10:00] [ERROR] naming-convention:\n  トークン: color.X\n  提案: rename\n"
    issues = extract_console_issues(log)
    assert issues[0]["token"] == "color.X"
    assert issues[0]["suggestion"] == "rename"


def test_console_merge_skips_records_already_found_in_blocks():
    issues = extract_console_issues(BLOCKS_MD + "\n" + CONSOLE_LOG)
    keys = [(i["rule"], i["token"], i["file"]) for i in issues]
    assert len(keys) == len(set(keys))
    # naming-convention/color.Primary is in both passes, raw-values/None only in the log
    assert keys.count(("naming-convention", "color.Primary", "tokens.json")) == 1
    assert keys[-1] == ("raw-values", None, "tokens.json")
    assert len(issues) == 4


def test_console_no_markers_is_empty():
    assert extract_console_issues("# Report\n\nAll good.\n") == []


# ---------------------------------------------------------------------------
# Heading dialect
# ---------------------------------------------------------------------------

def test_heading_extracts_records_in_order():
    issues = extract_heading_issues(HEADING_MD)
    assert [(i["file"], i["line"], i["severity"], i["rule"]) for i in issues] == [
        ("src/components/Button.tsx", 12,   "error",   "raw-values"),
        ("src/components/Button.tsx", None, "warning", "ai-spacing-consistency"),
        ("src/utils/theme.ts",        40,   "error",   "duplicates"),
        ("src/utils/theme.ts",        None, "warning", "naming-convention"),
        ("src/styles/main.css",       7,    "error",   "raw-values"),
    ]


def test_heading_line_and_column():
    first, _, third, *_ = extract_heading_issues(HEADING_MD)
    assert (first["line"], first["column"]) == (12, 5)
    assert (third["line"], third["column"]) == (40, 3)


def test_heading_suggestion_attaches_to_previous_bullet():
    first, second, *_ = extract_heading_issues(HEADING_MD)
    assert first["suggestion"] == "use `color.primary.500`"
    assert second["suggestion"] is None


def test_heading_reference_line_message():
    last = extract_heading_issues(HEADING_MD)[-1]
    assert last["message"] == "error in raw-values: raw hex color"
    assert last["column"] is None


def test_heading_dedupes_on_file_and_line():
    md = textwrap.dedent("""\
        ## a.ts
        - Error: first (line 3)
        - Warning: second (line 3)
        - Warning: no line
        - Warning: no line
        """)
    issues = extract_heading_issues(md)
    assert [i["message"] for i in issues] == ["first (line 3)", "no line", "no line"]


def test_heading_unrecognised_heading_keeps_default_file():
    md = "## Summary\n- Warning: something odd\n"
    assert extract_heading_issues(md)[0]["file"] == "tokens.json"


def test_heading_lines_without_severity_are_ignored():
    assert extract_heading_issues("see `src/a.ts:3` for details\n") == []


# ---------------------------------------------------------------------------
# Dialect selection
# ---------------------------------------------------------------------------

def test_auto_prefers_console():
    issues, dialect = extract_markdown_issues(BLOCKS_MD)
    assert dialect == "console"
    assert len(issues) == 3


def test_auto_falls_back_to_heading():
    issues, dialect = extract_markdown_issues(HEADING_MD)
    assert dialect == "heading"
    assert len(issues) == 5


def test_forced_console_does_not_fall_back():
    issues, dialect = extract_markdown_issues(HEADING_MD, Config(dialect="console"))
    assert (issues, dialect) == ([], "console")


def test_forced_heading():
    issues, dialect = extract_markdown_issues(HEADING_MD, Config(dialect="heading"))
    assert dialect == "heading"
    assert len(issues) == 5


def test_no_markers_is_empty():
    issues, _ = extract_markdown_issues("# Report\n\nAll good.\n")
    assert issues == []
