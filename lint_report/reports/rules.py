"""Rule-name extraction from free text.

Functions:
    extract_rule_name(text, known_rules)   -> str | None
"""

import re

from lint_report.config import KNOWN_RULES

# "rule: raw-values" / "ルール: raw-values"; only the label is case-insensitive
_RULE_LABEL = re.compile(r"(?:(?i:rule)|ルール)[:\s]+([a-z-]+)")


def _known_rules_pattern(known_rules: tuple[str, ...]) -> re.Pattern | None:
    if not known_rules:
        return None
    # Longest first so "ai-naming-consistency" wins over any shorter prefix
    names = sorted(known_rules, key=len, reverse=True)
    return re.compile("|".join(re.escape(n) for n in names), re.IGNORECASE)


def extract_rule_name(text, known_rules: tuple[str, ...] = KNOWN_RULES) -> str | None:
    """Return the first rule identifier found in *text*, or None.

    An explicit ``rule:`` / ``ルール:`` label takes priority over the
    allow-list of known rule names, which may appear anywhere in the text.
    """
    if not text or not isinstance(text, str):
        return None

    match = _RULE_LABEL.search(text)
    if match:
        return match.group(1)

    pattern = _known_rules_pattern(tuple(known_rules))
    if pattern is not None:
        match = pattern.search(text)
        if match:
            return match.group(0).lower()

    return None
