"""Config file validation for orgcheck runs."""

from __future__ import annotations

import difflib
from pathlib import Path
from typing import Any

import yaml

from orgcheck.constants.config import CONFIG_FILENAME, VALID_STANDARD_PHASES
from orgcheck.constants.validation import (
    ALLOWED_API_KEYS,
    ALLOWED_CONFIG_KEYS,
    ALLOWED_REMEDIATION_KEYS,
    ALLOWED_RULES_KEYS,
    BOOL_KEYS,
    CFG001,
    CFG002,
    CFG003,
    CFG004,
    CFG005,
    CFG006,
    CFG007,
    CFG008,
    CFG009,
    LIST_OF_STRINGS_KEYS,
)
from orgcheck.exceptions.validation import ValidationError


def validate_config_file(
    root: Path,
    config_path: Path | None = None,
    *,
    config_explicit: bool = False,
) -> list[ValidationError]:
    """Validate an orgcheck.yaml file and return all validation errors.

    This is the collect-all entry point used by ``orgcheck validate-config``
    and the ``orgcheck audit`` preflight. It never raises; all problems are
    returned as :class:`ValidationError` instances.
    """
    errors: list[ValidationError] = []
    root = root.resolve()
    path = config_path.resolve() if config_path else (root / CONFIG_FILENAME)
    path_str = str(path)

    if not path.exists():
        if config_explicit:
            errors.append(
                ValidationError(
                    code=CFG001,
                    path=path_str,
                    field="",
                    message=f"config file not found: {path}",
                )
            )
        return errors

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        errors.append(ValidationError(code=CFG002, path=path_str, field="", message=f"invalid YAML: {exc}"))
        return errors

    if raw is None:
        return errors

    if not isinstance(raw, dict):
        errors.append(
            ValidationError(
                code=CFG003,
                path=path_str,
                field="",
                message=f"config must be a YAML mapping, got {type(raw).__name__}",
            )
        )
        return errors

    errors.extend(_unknown_keys(raw, ALLOWED_CONFIG_KEYS, path_str, prefix=""))

    if "organization" in raw and not isinstance(raw["organization"], (str, type(None))):
        errors.append(_type_error(path_str, "organization", "expected a string"))

    if "standard_phase" in raw:
        val = raw["standard_phase"]
        if isinstance(val, bool) or not isinstance(val, int) or val not in VALID_STANDARD_PHASES:
            errors.append(
                ValidationError(
                    code=CFG006,
                    path=path_str,
                    field="standard_phase",
                    message="invalid value for `standard_phase`",
                    hint=f"expected one of: {', '.join(str(p) for p in sorted(VALID_STANDARD_PHASES))}; got: {val!r}",
                )
            )

    if "concurrency" in raw:
        val = raw["concurrency"]
        if isinstance(val, bool) or not isinstance(val, int):
            errors.append(_type_error(path_str, "concurrency", "expected a positive integer"))
        elif val <= 0:
            errors.append(_range_error(path_str, "concurrency", f"`concurrency` must be positive, got {val}"))

    if "run_timeout_seconds" in raw:
        errors.extend(_check_positive_number(raw["run_timeout_seconds"], path_str, "run_timeout_seconds"))

    for key in BOOL_KEYS:
        if key in raw and not isinstance(raw[key], bool):
            errors.append(_type_error(path_str, key, "expected a boolean"))

    for key in LIST_OF_STRINGS_KEYS:
        if key in raw and not _is_string_list(raw[key]):
            errors.append(_type_error(path_str, key, "expected a list of strings"))

    if _is_string_list(raw.get("required_tasks")) and _is_string_list(raw.get("code_tasks")):
        overlap = sorted(set(raw["required_tasks"]) & set(raw["code_tasks"]))
        if overlap:
            errors.append(
                ValidationError(
                    code=CFG008,
                    path=path_str,
                    field="code_tasks",
                    message=f"tasks listed in both `required_tasks` and `code_tasks`: {', '.join(overlap)}",
                )
            )

    errors.extend(_validate_section(raw, "rules", ALLOWED_RULES_KEYS, path_str, _validate_rules_section))
    errors.extend(_validate_section(raw, "api", ALLOWED_API_KEYS, path_str, _validate_api_section))
    errors.extend(
        _validate_section(raw, "remediation", ALLOWED_REMEDIATION_KEYS, path_str, _validate_remediation_section)
    )

    return errors


def _validate_section(
    raw: dict[str, Any],
    key: str,
    allowed: frozenset[str],
    path_str: str,
    validate_values: Any,
) -> list[ValidationError]:
    if key not in raw or raw[key] is None:
        return []
    section = raw[key]
    if not isinstance(section, dict):
        return [
            ValidationError(
                code=CFG009,
                path=path_str,
                field=key,
                message=f"`{key}` must be a mapping, got {type(section).__name__}",
            )
        ]
    errors = _unknown_keys(section, allowed, path_str, prefix=f"{key}.")
    errors.extend(validate_values(section, path_str))
    return errors


def _validate_rules_section(section: dict[str, Any], path_str: str) -> list[ValidationError]:
    if "disabled" in section and not _is_string_list(section["disabled"]):
        return [_type_error(path_str, "rules.disabled", "expected a list of rule ids")]
    return []


def _validate_api_section(section: dict[str, Any], path_str: str) -> list[ValidationError]:
    errors: list[ValidationError] = []
    if "base_url" in section:
        val = section["base_url"]
        if not isinstance(val, str) or not val.startswith(("http://", "https://")):
            errors.append(_type_error(path_str, "api.base_url", "expected an http(s) URL"))
    if "token_env" in section and (not isinstance(section["token_env"], str) or not section["token_env"].strip()):
        errors.append(_type_error(path_str, "api.token_env", "expected a non-empty string"))
    if "timeout_seconds" in section:
        errors.extend(_check_positive_number(section["timeout_seconds"], path_str, "api.timeout_seconds"))
    if "max_retries" in section:
        val = section["max_retries"]
        if isinstance(val, bool) or not isinstance(val, int):
            errors.append(_type_error(path_str, "api.max_retries", "expected a non-negative integer"))
        elif val < 0:
            errors.append(_range_error(path_str, "api.max_retries", f"`api.max_retries` must be >= 0, got {val}"))
    if "backoff_seconds" in section:
        val = section["backoff_seconds"]
        if isinstance(val, bool) or not isinstance(val, (int, float)):
            errors.append(_type_error(path_str, "api.backoff_seconds", "expected a non-negative number"))
        elif val < 0:
            errors.append(
                _range_error(path_str, "api.backoff_seconds", f"`api.backoff_seconds` must be >= 0, got {val}")
            )
    return errors


def _validate_remediation_section(section: dict[str, Any], path_str: str) -> list[ValidationError]:
    errors: list[ValidationError] = []
    if "enabled" in section and not isinstance(section["enabled"], bool):
        errors.append(_type_error(path_str, "remediation.enabled", "expected a boolean"))
    for key in ("branch_prefix", "bot_name", "bot_email", "app_jwt_env"):
        if key in section and section[key] is not None:
            val = section[key]
            if not isinstance(val, str) or not val.strip():
                errors.append(_type_error(path_str, f"remediation.{key}", "expected a non-empty string"))
    if "installation_id" in section and section["installation_id"] is not None:
        val = section["installation_id"]
        if isinstance(val, bool) or not isinstance(val, int) or val <= 0:
            errors.append(_type_error(path_str, "remediation.installation_id", "expected a positive integer"))
    if (section.get("app_jwt_env") is None) != (section.get("installation_id") is None):
        errors.append(
            ValidationError(
                code=CFG008,
                path=path_str,
                field="remediation",
                message="`app_jwt_env` and `installation_id` must be set together",
            )
        )
    return errors


def _unknown_keys(
    mapping: dict[str, Any],
    allowed: frozenset[str],
    path_str: str,
    *,
    prefix: str,
) -> list[ValidationError]:
    errors: list[ValidationError] = []
    for key in sorted(str(k) for k in mapping):
        if key not in allowed:
            errors.append(
                ValidationError(
                    code=CFG004,
                    path=path_str,
                    field=f"{prefix}{key}",
                    message=f"unknown key `{prefix}{key}`",
                    hint=_suggest_key(key, allowed),
                )
            )
    return errors


def _check_positive_number(value: Any, path_str: str, field: str) -> list[ValidationError]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return [_type_error(path_str, field, "expected a positive number")]
    if value <= 0:
        return [_range_error(path_str, field, f"`{field}` must be positive, got {value}")]
    return []


def _type_error(path_str: str, field: str, hint: str) -> ValidationError:
    return ValidationError(
        code=CFG005,
        path=path_str,
        field=field,
        message=f"invalid type for `{field}`",
        hint=hint,
    )


def _range_error(path_str: str, field: str, message: str) -> ValidationError:
    return ValidationError(code=CFG007, path=path_str, field=field, message=message)


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _suggest_key(key: str, allowed: frozenset[str]) -> str:
    """Return a 'did you mean' hint for a misspelled key, or empty string."""
    matches = difflib.get_close_matches(key, sorted(allowed), n=1, cutoff=0.6)
    if matches:
        return f"did you mean `{matches[0]}`?"
    return ""
