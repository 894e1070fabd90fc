"""Tests for collect-all config validation (error codes, messages, ordering)."""

from __future__ import annotations

from pathlib import Path

import pytest

from orgcheck.config import validate_config_file
from orgcheck.config.validator import _suggest_key
from orgcheck.constants.validation import (
    ALLOWED_CONFIG_KEYS,
    CFG001,
    CFG002,
    CFG003,
    CFG004,
    CFG005,
    CFG006,
    CFG007,
    CFG008,
    CFG009,
)
from orgcheck.exceptions.validation import ValidationError, format_errors, sort_errors


def _validate(tmp_path: Path, content: str) -> list[ValidationError]:
    path = tmp_path / "orgcheck.yaml"
    path.write_text(content, encoding="utf-8")
    return validate_config_file(tmp_path, path, config_explicit=True)


def test_missing_default_config_is_valid(tmp_path: Path) -> None:
    assert validate_config_file(tmp_path) == []


def test_missing_explicit_config(tmp_path: Path) -> None:
    errors = validate_config_file(tmp_path, tmp_path / "missing.yaml", config_explicit=True)

    assert [error.code for error in errors] == [CFG001]


@pytest.mark.parametrize(
    ("content", "code", "field"),
    [
        ("organization: [acme\n", CFG002, ""),
        ("- a\n", CFG003, ""),
        ("organisation: acme\n", CFG004, "organisation"),
        ("concurrency: many\n", CFG005, "concurrency"),
        ("standard_phase: 7\n", CFG006, "standard_phase"),
        ("concurrency: 0\n", CFG007, "concurrency"),
        ("required_tasks: [lint]\ncode_tasks: [lint]\n", CFG008, "code_tasks"),
        ("api: nope\n", CFG009, "api"),
        ("api:\n  retries: 3\n", CFG004, "api.retries"),
        ("api:\n  backoff_seconds: -2\n", CFG007, "api.backoff_seconds"),
        ("rules:\n  disabled: CI_WORKFLOW\n", CFG005, "rules.disabled"),
        ("remediation:\n  app_jwt_env: APP_JWT\n", CFG008, "remediation"),
        ("include_forks: yes please\n", CFG005, "include_forks"),
    ],
    ids=[
        "invalid_yaml",
        "not_mapping",
        "unknown_key",
        "type_error",
        "bad_phase",
        "out_of_range",
        "overlapping_tasks",
        "section_not_mapping",
        "unknown_nested_key",
        "negative_backoff",
        "disabled_not_list",
        "half_app_settings",
        "non_bool",
    ],
)
def test_single_error_codes(tmp_path: Path, content: str, code: str, field: str) -> None:
    errors = _validate(tmp_path, content)

    assert [(error.code, error.field) for error in errors] == [(code, field)]


def test_collects_every_problem(tmp_path: Path) -> None:
    errors = _validate(tmp_path, "concurrency: -1\nstandard_phase: 9\nexempt_topics: docs\nbogus: 1\n")

    assert {error.code for error in errors} == {CFG004, CFG005, CFG006, CFG007}


def test_unknown_key_hint(tmp_path: Path) -> None:
    [error] = _validate(tmp_path, "organisation: acme\n")

    assert error.hint == "did you mean `organization`?"
    assert "did you mean `organization`?" in error.format()


def test_suggest_key_without_match() -> None:
    assert _suggest_key("zzz", ALLOWED_CONFIG_KEYS) == ""


def test_format_errors_is_sorted() -> None:
    errors = [
        ValidationError(code=CFG007, path="a.yaml", field="concurrency", message="m1"),
        ValidationError(code=CFG004, path="a.yaml", field="bogus", message="m2", hint="h"),
    ]

    assert [error.code for error in sort_errors(errors)] == [CFG004, CFG007]
    assert format_errors(errors).splitlines() == [
        "[CFG004] a.yaml:bogus m2 (h)",
        "[CFG007] a.yaml:concurrency m1",
    ]


def test_valid_full_config(tmp_path: Path) -> None:
    content = (
        "organization: acme\n"
        "standard_phase: 1\n"
        "exempt_repositories: ['docs-*']\n"
        "rules:\n  disabled: [CI_WORKFLOW]\n"
        "api:\n  token_env: GH_TOKEN\n  max_retries: 0\n"
        "remediation:\n  enabled: true\n  app_jwt_env: APP_JWT\n  installation_id: 7\n"
    )

    assert _validate(tmp_path, content) == []
