"""Tests for rulepack loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from orgcheck.exceptions import ConfigError
from orgcheck.rules import BUNDLED_RULEPACK, load_rulepack
from orgcheck.rules.loader import build_rule
from orgcheck.rules.types import ConfigFilename, JsonParses, Rule, TaskLayout, WorkflowInvokes


def test_bundled_rulepack_loads_sorted() -> None:
    rules = load_rulepack()

    assert BUNDLED_RULEPACK.is_file()
    assert [rule.rule_id for rule in rules] == [
        "CI_WORKFLOW",
        "MISE_CONFIG_FILENAME",
        "MISE_TASKS_FILE_BASED",
        "MISE_TASK_LAYOUT",
        "MISE_TASK_TEST",
        "RENOVATE_CONFIG",
    ]


def test_bundled_rules_carry_expected_checks() -> None:
    rules = {rule.rule_id: rule for rule in load_rulepack()}

    assert rules["MISE_CONFIG_FILENAME"].check == ConfigFilename()
    assert rules["MISE_CONFIG_FILENAME"].fix == "rename_config"
    assert rules["MISE_TASK_TEST"].check == TaskLayout(task_set="code")
    assert rules["MISE_TASK_TEST"].applies_when == "has_code"
    assert rules["CI_WORKFLOW"].check == WorkflowInvokes(action="jdx/mise-action")
    assert isinstance(rules["RENOVATE_CONFIG"].check, JsonParses)
    assert rules["RENOVATE_CONFIG"].check.paths[0] == "renovate.json"


def test_custom_rulepack_file(tmp_path: Path) -> None:
    path = tmp_path / "custom.yaml"
    path.write_text(
        "version: 1\n"
        "rules:\n"
        "  - rule_id: HAS_LICENSE\n"
        "    title: repository has a license\n"
        "    since_phase: 1\n"
        "    check:\n"
        "      kind: file_present\n"
        "      path: LICENSE\n",
        encoding="utf-8",
    )

    rules = load_rulepack(path)

    assert len(rules) == 1
    assert rules[0].rule_id == "HAS_LICENSE"
    assert rules[0].fix is None


def test_duplicate_rule_ids_rejected(tmp_path: Path) -> None:
    entry = (
        "  - rule_id: HAS_LICENSE\n"
        "    title: t\n"
        "    since_phase: 1\n"
        "    check: {kind: file_present, path: LICENSE}\n"
    )
    path = tmp_path / "dup.yaml"
    path.write_text("rules:\n" + entry + entry, encoding="utf-8")

    with pytest.raises(ConfigError, match="more than once"):
        load_rulepack(path)


def test_missing_rulepack_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Cannot read rulepack"):
        load_rulepack(tmp_path / "missing.yaml")


@pytest.mark.parametrize(
    ("entry", "message"),
    [
        pytest.param({"rule_id": "X1", "title": "t", "since_phase": 1}, "missing required key 'check'", id="no-check"),
        pytest.param(
            {"rule_id": "lower", "title": "t", "since_phase": 1, "check": {"kind": "config_filename"}},
            "UPPER_SNAKE_CASE",
            id="bad-id",
        ),
        pytest.param(
            {"rule_id": "X1", "title": "t", "since_phase": 4, "check": {"kind": "config_filename"}},
            "since_phase",
            id="bad-phase",
        ),
        pytest.param(
            {"rule_id": "X1", "title": "t", "since_phase": 1, "check": {"kind": "regex"}},
            "unknown check kind",
            id="unknown-kind",
        ),
        pytest.param(
            {"rule_id": "X1", "title": "t", "since_phase": 1, "check": {"kind": "config_filename"}, "fix": "magic"},
            "unknown fix",
            id="unknown-fix",
        ),
        pytest.param(
            {"rule_id": "X1", "title": "t", "since_phase": 1, "check": {"kind": "task_layout", "task_set": "docs"}},
            "unknown task_set",
            id="unknown-task-set",
        ),
        pytest.param(
            {"rule_id": "X1", "title": "t", "since_phase": 1, "check": {"kind": "config_filename", "path": "x"}},
            "takes no parameters",
            id="unexpected-params",
        ),
        pytest.param(
            {"rule_id": "X1", "title": "t", "since_phase": 1, "check": {"kind": "task_layout", "task_sets": "code"}},
            r"unknown parameters \['task_sets'\]",
            id="misspelled-task-set",
        ),
        pytest.param(
            {
                "rule_id": "X1",
                "title": "t",
                "since_phase": 1,
                "check": {"kind": "workflow_invokes", "actions": "jdx/mise-action"},
            },
            r"expected \['action'\]",
            id="misspelled-action",
        ),
        pytest.param(
            {"rule_id": "X1", "title": "t", "since_phase": 1, "check": {"kind": "json_parses", "paths": []}},
            "non-empty list of strings",
            id="empty-paths",
        ),
        pytest.param(
            {"rule_id": "X1", "title": "t", "since_phase": 1, "check": {"kind": "config_filename"}, "severity": "x"},
            "unknown keys",
            id="unknown-key",
        ),
    ],
)
def test_build_rule_rejects_invalid_entries(entry: dict, message: str) -> None:
    with pytest.raises(ConfigError, match=message):
        build_rule(entry, "test.yaml#rules[0]")


def test_rule_rejects_bad_applicability() -> None:
    with pytest.raises(ValueError, match="applies_when"):
        Rule(rule_id="X1", title="t", check=ConfigFilename(), applies_when="sometimes")  # type: ignore[arg-type]
