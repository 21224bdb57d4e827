"""JSON report extraction.

The linter's JSON output is either a bare array of issues or an object
holding the array under one of a few container keys.
"""

from typing import Any

#: Container keys checked in priority order
_CONTAINER_KEYS = ("errors", "issues", "results")


def extract_json_issues(data: Any) -> list:
    """Return the issue list held by a parsed JSON report, or ``[]``.

    Elements are returned unchanged and in order. A container key holding
    an empty list wins over later keys.
    """
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in _CONTAINER_KEYS:
            value = data.get(key)
            if isinstance(value, list):
                return value
    return []
