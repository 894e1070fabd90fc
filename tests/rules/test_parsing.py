"""Tests for repository file parsers."""

from __future__ import annotations

import pytest

from orgcheck.exceptions import MalformedConfig
from orgcheck.rules.parsing import mise_run_tasks, parse_json, parse_toml, parse_workflow, workflow_steps


@pytest.mark.parametrize(
    ("command", "expected"),
    [
        pytest.param("mise run lint", {"lint"}, id="single"),
        pytest.param("mise run lint ::: fmt ::: test", {"lint", "fmt", "test"}, id="parallel"),
        pytest.param("mise run --force test -- -k slow", {"test"}, id="flags-and-args"),
        pytest.param("mise run lint && mise run fmt", {"lint", "fmt"}, id="chained"),
        pytest.param("mise install\nmise run test:unit", {"test:unit"}, id="multiline"),
        pytest.param("echo mise run", set(), id="no-task"),
        pytest.param("make lint", set(), id="not-mise"),
        pytest.param("mise run lint # mise run fmt", {"lint"}, id="comment"),
    ],
)
def test_mise_run_tasks(command: str, expected: set[str]) -> None:
    assert mise_run_tasks(command) == expected


def test_parse_toml_reports_path() -> None:
    with pytest.raises(MalformedConfig) as excinfo:
        parse_toml(".mise.toml", "[tools")

    assert excinfo.value.path == ".mise.toml"
    assert str(excinfo.value).startswith(".mise.toml: invalid TOML")


def test_parse_json_error() -> None:
    with pytest.raises(MalformedConfig, match="invalid JSON"):
        parse_json("renovate.json", "{extends: }")


@pytest.mark.parametrize(
    "text",
    [
        pytest.param("- a\n- b\n", id="not-mapping"),
        pytest.param("name: ci\non: push\n", id="no-jobs"),
        pytest.param("jobs: {}\n", id="empty-jobs"),
    ],
)
def test_parse_workflow_requires_jobs(text: str) -> None:
    with pytest.raises(MalformedConfig):
        parse_workflow(".github/workflows/ci.yml", text)


def test_workflow_steps_flatten_jobs() -> None:
    workflow = parse_workflow(
        "ci.yml",
        "jobs:\n"
        "  a:\n"
        "    steps:\n"
        "      - uses: jdx/mise-action@v2\n"
        "      - just-a-string\n"
        "  b:\n"
        "    steps:\n"
        "      - run: mise run test\n"
        "  c: not-a-job\n",
    )

    assert workflow_steps("ci.yml", workflow) == [{"uses": "jdx/mise-action@v2"}, {"run": "mise run test"}]


@pytest.mark.parametrize(
    "steps",
    [
        pytest.param("5", id="scalar"),
        pytest.param("{run: mise run lint}", id="mapping"),
    ],
)
def test_workflow_steps_rejects_non_list_steps(steps: str) -> None:
    workflow = parse_workflow("ci.yml", f"jobs:\n  check:\n    steps: {steps}\n")

    with pytest.raises(MalformedConfig, match="steps of job `check` must be a list"):
        workflow_steps("ci.yml", workflow)
