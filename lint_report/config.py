"""Configuration loading and validation.

Usage:
    config = load("lint-report.yaml")        # raises ConfigError on bad config
    config = load(None)                      # built-in defaults (+ env overrides)
    generate_template("lint-report.yaml")    # writes example file to disk

Every key is optional; the defaults reproduce the linter's own conventions.
"""

import os
from dataclasses import dataclass
from pathlib import Path

import yaml


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_CONFIG_PATH = "lint-report.yaml"

#: File name used when a finding does not say where it comes from
DEFAULT_FILE = "tokens.json"

DIALECT_AUTO    = "auto"
DIALECT_CONSOLE = "console"
DIALECT_HEADING = "heading"
DIALECTS = (DIALECT_AUTO, DIALECT_CONSOLE, DIALECT_HEADING)

#: Extensions accepted in file headers and file references
FILE_EXTENSIONS: tuple[str, ...] = ("ts", "tsx", "js", "jsx", "css", "json")

#: Rule identifiers recognised anywhere in free text
KNOWN_RULES: tuple[str, ...] = (
    "naming-convention",
    "raw-values",
    "duplicates",
    "ai-naming-consistency",
    "ai-spacing-consistency",
    "ai-design-complexity",
)

#: Table cells longer than this are cut to ``limit - 3`` chars + "..."
MESSAGE_LIMIT = 100


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""


# ---------------------------------------------------------------------------
# Config dataclass
# ---------------------------------------------------------------------------

@dataclass
class Config:
    default_file: str = DEFAULT_FILE
    dialect: str = DIALECT_AUTO
    file_extensions: tuple[str, ...] = FILE_EXTENSIONS
    known_rules: tuple[str, ...] = KNOWN_RULES
    message_limit: int = MESSAGE_LIMIT


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load(config_path: str | None = DEFAULT_CONFIG_PATH, *, required: bool = False) -> Config:
    """Load and validate configuration from a YAML file.

    A missing file yields the built-in defaults unless *required* is set.
    Environment variables LINT_REPORT_DIALECT and LINT_REPORT_DEFAULT_FILE
    override file values.

    Raises:
        ConfigError: if the file is required but missing, malformed, or
                     holds invalid values.
    """
    raw: dict = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            raw = _read_yaml(path)
        elif required:
            raise ConfigError(
                f"Config file not found: '{config_path}'\n"
                "Run `lint-report --init-config lint-report.yaml` to generate a template."
            )

    errors: list[str] = []

    dialect      = os.environ.get("LINT_REPORT_DIALECT")      or _value(raw, "dialect", DIALECT_AUTO)
    default_file = os.environ.get("LINT_REPORT_DEFAULT_FILE") or _value(raw, "default_file", DEFAULT_FILE)

    config = Config(
        default_file=str(default_file).strip(),
        dialect=str(dialect).strip().lower(),
        file_extensions=_as_tuple(raw, "file_extensions", FILE_EXTENSIONS, errors),
        known_rules=_as_tuple(raw, "known_rules", KNOWN_RULES, errors),
        message_limit=_value(raw, "message_limit", MESSAGE_LIMIT),
    )
    _validate(config, errors)
    return config


def _read_yaml(path: Path) -> dict:
    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse '{path}': {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Unable to read '{path}': {exc}") from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"'{path}' must be a YAML mapping at the top level.")
    return raw


def _value(raw: dict, key: str, default):
    """Return raw[key], treating a key left empty in YAML (null) as unset."""
    value = raw.get(key)
    return default if value is None else value


def _as_tuple(raw: dict, key: str, default: tuple[str, ...],
              errors: list[str]) -> tuple[str, ...]:
    value = raw.get(key)
    if value is None:
        return default
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        errors.append(f"  - '{key}' must be a list or a string (got {value!r})")
        return default
    return tuple(str(v).strip().lstrip(".").lower() for v in value if str(v).strip())


def _validate(config: Config, errors: list[str] | None = None) -> None:
    """Raise ConfigError if any value is unusable, listing every problem."""
    errors = list(errors or [])

    if config.dialect not in DIALECTS:
        errors.append(
            f"  - 'dialect' must be one of {', '.join(DIALECTS)} (got '{config.dialect}')"
        )
    if not config.default_file:
        errors.append("  - 'default_file' must not be empty")
    if not config.file_extensions:
        errors.append("  - 'file_extensions' is empty - add at least one extension")
    if isinstance(config.message_limit, bool) or not isinstance(config.message_limit, int) \
            or config.message_limit < 4:
        errors.append(
            f"  - 'message_limit' must be an integer >= 4 (got {config.message_limit!r})"
        )

    if errors:
        raise ConfigError("Invalid configuration:\n" + "\n".join(errors))


# ---------------------------------------------------------------------------
# Template generator (used by `--init-config`)
# ---------------------------------------------------------------------------

TEMPLATE = """\
# File used when a finding does not name one
default_file: "tokens.json"

# Markdown report layout: auto | console | heading
dialect: auto

# Extensions recognised in file headers and file:line references
file_extensions: [ts, tsx, js, jsx, css, json]

# Rule identifiers detected in free-text messages
known_rules:
  - naming-convention
  - raw-values
  - duplicates
  - ai-naming-consistency
  - ai-spacing-consistency
  - ai-design-complexity

# Longest message shown in a table cell
message_limit: 100
"""


def generate_template(output_path: str = DEFAULT_CONFIG_PATH) -> None:
    """Write a template lint-report.yaml to *output_path*.

    Raises:
        ConfigError: if the file already exists.
    """
    path = Path(output_path)
    if path.exists():
        raise ConfigError(
            f"'{output_path}' already exists. Remove it first or choose a different path."
        )
    path.write_text(TEMPLATE, encoding="utf-8")
