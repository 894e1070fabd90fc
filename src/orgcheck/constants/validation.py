"""Stable validation error codes and allowed-key sets for config validation."""

from __future__ import annotations

CFG001: str = "CFG001"  # config file not found (explicit --config)
CFG002: str = "CFG002"  # invalid YAML parse
CFG003: str = "CFG003"  # top-level value is not a mapping
CFG004: str = "CFG004"  # unknown key
CFG005: str = "CFG005"  # invalid value type
CFG006: str = "CFG006"  # invalid enum value
CFG007: str = "CFG007"  # value out of range
CFG008: str = "CFG008"  # contradictory rule config
CFG009: str = "CFG009"  # invalid nested mapping

ALLOWED_CONFIG_KEYS: frozenset[str] = frozenset(
    {
        "organization",
        "standard_phase",
        "concurrency",
        "run_timeout_seconds",
        "exempt_repositories",
        "exempt_topics",
        "exempt_archived",
        "include_forks",
        "required_tasks",
        "code_tasks",
        "rules",
        "api",
        "remediation",
    }
)

ALLOWED_RULES_KEYS: frozenset[str] = frozenset({"disabled"})
ALLOWED_API_KEYS: frozenset[str] = frozenset(
    {"base_url", "token_env", "timeout_seconds", "max_retries", "backoff_seconds"}
)
ALLOWED_REMEDIATION_KEYS: frozenset[str] = frozenset(
    {"enabled", "branch_prefix", "bot_name", "bot_email", "app_jwt_env", "installation_id"}
)

LIST_OF_STRINGS_KEYS: tuple[str, ...] = (
    "exempt_repositories",
    "exempt_topics",
    "required_tasks",
    "code_tasks",
)

BOOL_KEYS: tuple[str, ...] = ("exempt_archived", "include_forks")
