"""Lint report tool: turn design-linter output into a PR comment."""

__version__ = "0.1.0"
