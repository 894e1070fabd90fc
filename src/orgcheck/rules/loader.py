"""Loader for YAML rulepacks.

Rulepacks are validated when loaded and fail fast with ``ConfigError``; the
resulting ``Rule`` records are immutable for the rest of the process.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from orgcheck.constants.config import VALID_STANDARD_PHASES
from orgcheck.constants.rules import (
    ALLOWED_RULE_KEYS,
    ALLOWED_RULEPACK_KEYS,
    CHECK_KINDS,
    CHECK_PARAMS,
    REQUIRED_RULE_KEYS,
    RULEPACK_FILENAME,
)
from orgcheck.exceptions import ConfigError
from orgcheck.rules.types import (
    AnyFilePresent,
    Check,
    ConfigFilename,
    FileAbsent,
    FilePresent,
    JsonParses,
    Rule,
    TaskLayout,
    TasksFileBased,
    WorkflowInvokes,
)

logger = logging.getLogger(__name__)

BUNDLED_RULEPACK: Path = Path(__file__).parent / RULEPACK_FILENAME


def load_rulepack(path: Path | None = None) -> tuple[Rule, ...]:
    """Load a rulepack file, defaulting to the bundled standard, sorted by rule id."""
    source = path or BUNDLED_RULEPACK
    try:
        raw = yaml.safe_load(source.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read rulepack {source}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in rulepack {source}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"Rulepack {source} must contain a mapping")
    unknown = set(raw) - ALLOWED_RULEPACK_KEYS
    if unknown:
        raise ConfigError(f"Rulepack {source} has unknown keys: {sorted(unknown)}")
    entries = raw.get("rules")
    if not isinstance(entries, list) or not entries:
        raise ConfigError(f"Rulepack {source} must define a non-empty `rules` list")

    rules: dict[str, Rule] = {}
    for index, entry in enumerate(entries):
        rule = build_rule(entry, f"{source}#rules[{index}]")
        if rule.rule_id in rules:
            raise ConfigError(f"Rulepack {source} defines {rule.rule_id} more than once")
        rules[rule.rule_id] = rule
        logger.debug("Loaded rule %s (phase %d)", rule.rule_id, rule.since_phase)

    return tuple(rules[rule_id] for rule_id in sorted(rules))


def build_rule(data: Any, source: str) -> Rule:
    """Validate one rulepack entry and turn it into a Rule."""
    if not isinstance(data, dict):
        raise ConfigError(f"{source}: rule must be a mapping, got {type(data).__name__}")

    unknown = set(data) - ALLOWED_RULE_KEYS
    if unknown:
        raise ConfigError(f"{source}: unknown keys {sorted(unknown)}")
    for key in sorted(REQUIRED_RULE_KEYS):
        if key not in data:
            raise ConfigError(f"{source}: missing required key '{key}'")

    since_phase = data["since_phase"]
    if isinstance(since_phase, bool) or not isinstance(since_phase, int) or since_phase not in VALID_STANDARD_PHASES:
        raise ConfigError(f"{source}: 'since_phase' must be one of {sorted(VALID_STANDARD_PHASES)}")

    for key in ("title", "description", "recommendation"):
        if key in data and not isinstance(data[key], str):
            raise ConfigError(f"{source}: '{key}' must be a string")

    try:
        return Rule(
            rule_id=str(data["rule_id"]),
            title=data["title"].strip(),
            check=_build_check(data["check"], source),
            since_phase=since_phase,
            applies_when=data.get("applies_when", "always"),
            fix=data.get("fix"),
            description=(data.get("description") or "").strip(),
            recommendation=(data.get("recommendation") or "").strip(),
        )
    except ValueError as exc:
        raise ConfigError(f"{source}: {exc}") from exc


def _build_check(data: Any, source: str) -> Check:
    if not isinstance(data, dict) or "kind" not in data:
        raise ConfigError(f"{source}: 'check' must be a mapping with a 'kind'")
    kind = data["kind"]
    if not isinstance(kind, str) or kind not in CHECK_KINDS:
        raise ConfigError(f"{source}: unknown check kind {kind!r}; expected one of {sorted(CHECK_KINDS)}")
    params = {key: value for key, value in data.items() if key != "kind"}
    _check_params(params, kind, source)

    match kind:
        case "file_present":
            return FilePresent(path=_string_param(params, "path", source))
        case "file_absent":
            return FileAbsent(path=_string_param(params, "path", source))
        case "any_file_present":
            return AnyFilePresent(paths=_paths_param(params, source))
        case "json_parses":
            return JsonParses(paths=_paths_param(params, source))
        case "config_filename":
            return ConfigFilename()
        case "tasks_file_based":
            return TasksFileBased()
        case "task_layout":
            return TaskLayout(task_set=params.get("task_set", "required"))
        case "workflow_invokes":
            if "action" in params:
                return WorkflowInvokes(action=_string_param(params, "action", source))
            return WorkflowInvokes()
    raise ConfigError(f"{source}: unhandled check kind {kind!r}")


def _string_param(params: dict[str, Any], key: str, source: str) -> str:
    value = params.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{source}: check parameter '{key}' must be a non-empty string")
    return value.strip()


def _paths_param(params: dict[str, Any], source: str) -> tuple[str, ...]:
    value = params.get("paths")
    if not isinstance(value, list) or not value or not all(isinstance(item, str) and item for item in value):
        raise ConfigError(f"{source}: check parameter 'paths' must be a non-empty list of strings")
    return tuple(value)


def _check_params(params: dict[str, Any], kind: str, source: str) -> None:
    allowed = CHECK_PARAMS[kind]
    unexpected = sorted(str(key) for key in params if key not in allowed)
    if not unexpected:
        return
    if not allowed:
        raise ConfigError(f"{source}: check kind {kind!r} takes no parameters, got {unexpected}")
    raise ConfigError(f"{source}: check kind {kind!r} got unknown parameters {unexpected}; expected {sorted(allowed)}")
