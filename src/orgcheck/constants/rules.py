"""Rulepack schema constants and the closed set of rule kinds."""

from __future__ import annotations

import re

RULE_ID_PATTERN: re.Pattern[str] = re.compile(r"^[A-Z][A-Z0-9_]+$")

RULEPACK_FILENAME: str = "standard.yaml"

# Parameters each check kind accepts next to `kind`.
CHECK_PARAMS: dict[str, frozenset[str]] = {
    "file_present": frozenset({"path"}),
    "file_absent": frozenset({"path"}),
    "any_file_present": frozenset({"paths"}),
    "config_filename": frozenset(),
    "task_layout": frozenset({"task_set"}),
    "tasks_file_based": frozenset(),
    "workflow_invokes": frozenset({"action"}),
    "json_parses": frozenset({"paths"}),
}
CHECK_KINDS: frozenset[str] = frozenset(CHECK_PARAMS)

APPLICABILITY_KINDS: frozenset[str] = frozenset({"always", "has_code"})
FIX_KINDS: frozenset[str] = frozenset({"rename_config", "create_task_scripts"})
TASK_SETS: frozenset[str] = frozenset({"required", "code"})

REQUIRED_RULE_KEYS: frozenset[str] = frozenset({"rule_id", "title", "since_phase", "check"})
ALLOWED_RULE_KEYS: frozenset[str] = REQUIRED_RULE_KEYS | {
    "description",
    "applies_when",
    "fix",
    "recommendation",
}
ALLOWED_RULEPACK_KEYS: frozenset[str] = frozenset({"version", "rules"})

RESULT_ID_HASH_LENGTH: int = 16
