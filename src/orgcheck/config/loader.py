"""Config loading and normalization for orgcheck runs."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml

from orgcheck.config.model import OrgcheckConfig
from orgcheck.constants.config import (
    CONFIG_FILENAME,
    DEFAULT_CODE_TASKS,
    DEFAULT_CONCURRENCY,
    DEFAULT_EXEMPT_TOPICS,
    DEFAULT_REQUIRED_TASKS,
    DEFAULT_RUN_TIMEOUT_SECONDS,
    DEFAULT_STANDARD_PHASE,
    TASK_NAME_PATTERN,
    VALID_STANDARD_PHASES,
)
from orgcheck.exceptions import ConfigError
from orgcheck.types import ApiConfig, RemediationConfig

_TASK_NAME_RE = re.compile(TASK_NAME_PATTERN)


def load_config(root: Path, config_path: Path | None = None) -> OrgcheckConfig:
    """Load and validate run config from ``orgcheck.yaml`` or an explicit path."""
    root = root.resolve()
    path = config_path.resolve() if config_path else (root / CONFIG_FILENAME)
    if not path.exists():
        if config_path is not None:
            raise ConfigError(f"Config file not found: {path}")
        return OrgcheckConfig()

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML config file at {path}: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file at {path} must be a YAML mapping")

    organization = raw.get("organization", "")
    if organization is None:
        organization = ""
    if not isinstance(organization, str):
        raise ConfigError("organization must be a string")

    standard_phase = raw.get("standard_phase", DEFAULT_STANDARD_PHASE)
    if (
        isinstance(standard_phase, bool)
        or not isinstance(standard_phase, int)
        or standard_phase not in VALID_STANDARD_PHASES
    ):
        raise ConfigError(f"standard_phase must be one of {sorted(VALID_STANDARD_PHASES)}, got {standard_phase!r}")

    concurrency = raw.get("concurrency", DEFAULT_CONCURRENCY)
    if isinstance(concurrency, bool) or not isinstance(concurrency, int) or concurrency <= 0:
        raise ConfigError("concurrency must be a positive integer")

    run_timeout = _positive_number(raw.get("run_timeout_seconds", DEFAULT_RUN_TIMEOUT_SECONDS), "run_timeout_seconds")

    exempt_archived = raw.get("exempt_archived", True)
    if not isinstance(exempt_archived, bool):
        raise ConfigError("exempt_archived must be a boolean")

    include_forks = raw.get("include_forks", False)
    if not isinstance(include_forks, bool):
        raise ConfigError("include_forks must be a boolean")

    required_tasks = _task_names(raw.get("required_tasks", list(DEFAULT_REQUIRED_TASKS)), "required_tasks")
    code_tasks = _task_names(raw.get("code_tasks", list(DEFAULT_CODE_TASKS)), "code_tasks")
    overlap = sorted(set(required_tasks) & set(code_tasks))
    if overlap:
        raise ConfigError(f"tasks listed in both required_tasks and code_tasks: {', '.join(overlap)}")

    rules_raw = _mapping(raw.get("rules", {}), "rules")
    disabled_rules = tuple(
        rule_id.strip().upper()
        for rule_id in _ensure_string_list(rules_raw.get("disabled", []), "rules.disabled")
        if rule_id.strip()
    )

    return OrgcheckConfig(
        organization=organization.strip(),
        standard_phase=standard_phase,
        concurrency=concurrency,
        run_timeout_seconds=run_timeout,
        exempt_repositories=tuple(
            _ensure_string_list(raw.get("exempt_repositories", []), "exempt_repositories")
        ),
        exempt_topics=tuple(
            topic.strip().lower()
            for topic in _ensure_string_list(raw.get("exempt_topics", list(DEFAULT_EXEMPT_TOPICS)), "exempt_topics")
            if topic.strip()
        ),
        exempt_archived=exempt_archived,
        include_forks=include_forks,
        required_tasks=required_tasks,
        code_tasks=code_tasks,
        disabled_rules=disabled_rules,
        api=_load_api_config(_mapping(raw.get("api", {}), "api")),
        remediation=_load_remediation_config(_mapping(raw.get("remediation", {}), "remediation")),
    )


def _load_api_config(raw: dict[str, Any]) -> ApiConfig:
    defaults = ApiConfig()
    base_url = raw.get("base_url", defaults.base_url)
    if not isinstance(base_url, str) or not base_url.startswith(("http://", "https://")):
        raise ConfigError("api.base_url must be an http(s) URL")

    token_env = raw.get("token_env", defaults.token_env)
    if not isinstance(token_env, str) or not token_env.strip():
        raise ConfigError("api.token_env must be a non-empty string")

    max_retries = raw.get("max_retries", defaults.max_retries)
    if isinstance(max_retries, bool) or not isinstance(max_retries, int) or max_retries < 0:
        raise ConfigError("api.max_retries must be a non-negative integer")

    backoff = raw.get("backoff_seconds", defaults.backoff_seconds)
    if isinstance(backoff, bool) or not isinstance(backoff, (int, float)) or backoff < 0:
        raise ConfigError("api.backoff_seconds must be a non-negative number")

    return ApiConfig(
        base_url=base_url.rstrip("/"),
        token_env=token_env.strip(),
        timeout_seconds=_positive_number(raw.get("timeout_seconds", defaults.timeout_seconds), "api.timeout_seconds"),
        max_retries=max_retries,
        backoff_seconds=float(backoff),
    )


def _load_remediation_config(raw: dict[str, Any]) -> RemediationConfig:
    defaults = RemediationConfig()
    enabled = raw.get("enabled", defaults.enabled)
    if not isinstance(enabled, bool):
        raise ConfigError("remediation.enabled must be a boolean")

    values: dict[str, str] = {}
    for key in ("branch_prefix", "bot_name", "bot_email"):
        value = raw.get(key, getattr(defaults, key))
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"remediation.{key} must be a non-empty string")
        values[key] = value.strip()

    app_jwt_env = raw.get("app_jwt_env")
    if app_jwt_env is not None and (not isinstance(app_jwt_env, str) or not app_jwt_env.strip()):
        raise ConfigError("remediation.app_jwt_env must be a non-empty string")

    installation_id = raw.get("installation_id")
    if installation_id is not None and (
        isinstance(installation_id, bool) or not isinstance(installation_id, int) or installation_id <= 0
    ):
        raise ConfigError("remediation.installation_id must be a positive integer")

    if (app_jwt_env is None) != (installation_id is None):
        raise ConfigError("remediation.app_jwt_env and remediation.installation_id must be set together")

    return RemediationConfig(
        enabled=enabled,
        branch_prefix=values["branch_prefix"].strip("/"),
        bot_name=values["bot_name"],
        bot_email=values["bot_email"],
        app_jwt_env=app_jwt_env.strip() if app_jwt_env else None,
        installation_id=installation_id,
    )


def _mapping(value: Any, key: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{key} must be a mapping")
    return value


def _positive_number(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"{key} must be a positive number")
    return float(value)


def _task_names(value: Any, key: str) -> tuple[str, ...]:
    names = tuple(name.strip() for name in _ensure_string_list(value, key) if name.strip())
    for name in names:
        if not _TASK_NAME_RE.match(name):
            raise ConfigError(f"{key} contains an invalid task name: {name!r}")
    if len(set(names)) != len(names):
        raise ConfigError(f"{key} contains duplicate task names")
    return names


def _ensure_string_list(value: Any, key: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"{key} must be a list of strings")
    return value
