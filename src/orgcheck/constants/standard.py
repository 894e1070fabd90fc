"""Conventions of the mise-based CI tooling standard."""

from __future__ import annotations

MISE_CONFIG_FILENAME: str = ".mise.toml"
MISE_LEGACY_CONFIG_FILENAME: str = "mise.toml"
MISE_TASK_DIR: str = ".mise/tasks"
CI_WORKFLOW_PATH: str = ".github/workflows/ci.yml"
MISE_ACTION: str = "jdx/mise-action"

# Linguist languages that do not count as code for applicability checks.
PROSE_LANGUAGES: frozenset[str] = frozenset(
    {
        "AsciiDoc",
        "Markdown",
        "reStructuredText",
        "TeX",
        "Text",
    }
)

TASK_SCRIPT_TEMPLATE: str = """#!/usr/bin/env bash
#MISE description="{description}"
set -euo pipefail

echo "The '{task}' task is not implemented for this repository yet" >&2
exit 1
"""

TASK_DESCRIPTIONS: dict[str, str] = {
    "lint": "Run all linters",
    "fmt": "Format all sources",
    "test": "Run the test suite",
}
