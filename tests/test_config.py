"""Tests for configuration loading and fingerprinting."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from orgcheck.config import OrgcheckConfig, config_fingerprint, load_config
from orgcheck.constants.config import DEFAULT_CODE_TASKS, DEFAULT_REQUIRED_TASKS
from orgcheck.exceptions import ConfigError

FULL_CONFIG = """\
organization: acme
standard_phase: 2
concurrency: 4
run_timeout_seconds: 120
exempt_repositories: ["docs-*", ".github"]
exempt_topics: ["Documentation-Only"]
exempt_archived: false
include_forks: true
required_tasks: [lint, fmt, check]
code_tasks: [test]
rules:
  disabled: [renovate_config]
api:
  base_url: https://ghe.example.com/api/v3/
  token_env: ORGCHECK_TOKEN
  timeout_seconds: 10
  max_retries: 5
  backoff_seconds: 0.5
remediation:
  enabled: true
  branch_prefix: compliance/
  app_jwt_env: ORGCHECK_APP_JWT
  installation_id: 42
"""


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "orgcheck.yaml"
    path.write_text(content, encoding="utf-8")
    return path


def test_load_config_defaults_when_missing(tmp_path: Path) -> None:
    loaded = load_config(tmp_path)

    assert loaded == OrgcheckConfig()
    assert loaded.standard.phase == 3
    assert loaded.standard.required_tasks == DEFAULT_REQUIRED_TASKS
    assert loaded.standard.code_tasks == DEFAULT_CODE_TASKS


def test_load_config_missing_explicit_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path, tmp_path / "nope.yaml")


def test_load_full_config(tmp_path: Path) -> None:
    loaded = load_config(tmp_path, _write(tmp_path, FULL_CONFIG))

    assert loaded.organization == "acme"
    assert loaded.standard_phase == 2
    assert loaded.concurrency == 4
    assert loaded.run_timeout_seconds == 120.0
    assert loaded.exempt_topics == ("documentation-only",)
    assert loaded.exemptions.repositories == ("docs-*", ".github")
    assert loaded.exemptions.archived is False
    assert loaded.exemptions.include_forks is True
    assert loaded.standard.required_tasks == ("lint", "fmt", "check")
    assert loaded.disabled_rules == ("RENOVATE_CONFIG",)
    assert loaded.api.base_url == "https://ghe.example.com/api/v3"
    assert loaded.api.token_env == "ORGCHECK_TOKEN"
    assert loaded.api.max_retries == 5
    assert loaded.remediation.enabled is True
    assert loaded.remediation.branch_prefix == "compliance"
    assert loaded.remediation.installation_id == 42


def test_empty_file_gives_defaults(tmp_path: Path) -> None:
    assert load_config(tmp_path, _write(tmp_path, "")) == OrgcheckConfig()


@pytest.mark.parametrize(
    ("yaml_content", "expected_match"),
    [
        ("standard_phase: 4\n", "standard_phase"),
        ("standard_phase: true\n", "standard_phase"),
        ("concurrency: 0\n", "concurrency"),
        ("run_timeout_seconds: -1\n", "run_timeout_seconds"),
        ("exempt_archived: maybe\n", "exempt_archived"),
        ("required_tasks: [Lint]\n", "invalid task name"),
        ("required_tasks: [lint, lint]\n", "duplicate"),
        ("required_tasks: [lint]\ncode_tasks: [lint]\n", "both required_tasks and code_tasks"),
        ("api:\n  base_url: ftp://example.com\n", "api.base_url"),
        ("api:\n  max_retries: -1\n", "api.max_retries"),
        ("remediation:\n  installation_id: 42\n", "set together"),
        ("rules: [a]\n", "rules must be a mapping"),
        ("- a\n", "must be a YAML mapping"),
        ("organization: [acme\n", "Invalid YAML"),
    ],
    ids=[
        "phase_out_of_range",
        "phase_bool",
        "zero_concurrency",
        "negative_timeout",
        "non_bool_archived",
        "bad_task_name",
        "duplicate_task",
        "overlapping_task_sets",
        "non_http_base_url",
        "negative_retries",
        "half_app_settings",
        "rules_not_mapping",
        "top_level_list",
        "invalid_yaml",
    ],
)
def test_load_config_rejects_invalid_values(tmp_path: Path, yaml_content: str, expected_match: str) -> None:
    with pytest.raises(ConfigError, match=expected_match):
        load_config(tmp_path, _write(tmp_path, yaml_content))


def test_fingerprint_is_stable_and_sensitive() -> None:
    base = OrgcheckConfig(organization="acme")

    assert config_fingerprint(base) == config_fingerprint(OrgcheckConfig(organization="acme"))
    assert config_fingerprint(base) != config_fingerprint(replace(base, standard_phase=1))
    assert config_fingerprint(base, ("A_RULE",)) != config_fingerprint(base, ("B_RULE",))


def test_fingerprint_ignores_operational_settings() -> None:
    base = OrgcheckConfig(organization="acme")

    assert config_fingerprint(base) == config_fingerprint(replace(base, concurrency=1, run_timeout_seconds=5.0))
