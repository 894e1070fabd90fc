"""Tests for CSV and SARIF exports."""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path

from orgcheck import __version__
from orgcheck.constants.reporting import CSV_COLUMNS, SARIF_VERSION
from orgcheck.model import EvaluationResult, RepositoryRef
from orgcheck.reporting.aggregator import ReportAggregator
from orgcheck.reporting.csv_writer import render_csv_string, write_csv_results
from orgcheck.reporting.sarif_writer import build_sarif_envelope, write_sarif_results


def _report():
    aggregator = ReportAggregator("acme", 3)
    for name in ("acme/b", "acme/a"):
        aggregator.register(RepositoryRef(full_name=name))
    aggregator.add_results(
        "acme/b",
        [
            EvaluationResult("acme/b", "RENOVATE_CONFIG", "fail", "none of renovate.json present"),
            EvaluationResult("acme/b", "MISE_CONFIG_FILENAME", "fail", "found mise.toml", fixable=True),
        ],
    )
    aggregator.add_results(
        "acme/a",
        [
            EvaluationResult("acme/a", "MISE_CONFIG_FILENAME", "pass"),
            EvaluationResult("acme/a", "RENOVATE_CONFIG", "unknown", "run timeout"),
        ],
    )
    return aggregator.build()


def test_csv_rows_are_sorted_by_repository_and_rule() -> None:
    rows = list(csv.reader(io.StringIO(render_csv_string(_report()))))

    assert tuple(rows[0]) == CSV_COLUMNS
    assert [(row[1], row[2], row[3], row[4]) for row in rows[1:]] == [
        ("acme/a", "MISE_CONFIG_FILENAME", "pass", "false"),
        ("acme/a", "RENOVATE_CONFIG", "unknown", "false"),
        ("acme/b", "MISE_CONFIG_FILENAME", "fail", "true"),
        ("acme/b", "RENOVATE_CONFIG", "fail", "false"),
    ]


def test_write_csv_results(tmp_path: Path) -> None:
    path = write_csv_results(tmp_path, _report())

    assert path.name == "results.csv"
    assert path.read_text(encoding="utf-8").startswith("id,repository,rule_id,outcome,fixable,detail")


def test_sarif_reports_failures_and_unknowns(bundled_rules) -> None:
    envelope = build_sarif_envelope(_report(), bundled_rules)

    assert envelope["version"] == SARIF_VERSION
    run = envelope["runs"][0]
    assert run["tool"]["driver"]["version"] == __version__
    assert [rule["id"] for rule in run["tool"]["driver"]["rules"]] == ["MISE_CONFIG_FILENAME", "RENOVATE_CONFIG"]
    assert [(result["ruleId"], result["level"]) for result in run["results"]] == [
        ("RENOVATE_CONFIG", "warning"),
        ("MISE_CONFIG_FILENAME", "error"),
        ("RENOVATE_CONFIG", "error"),
    ]
    first = run["results"][0]
    assert first["locations"][0]["physicalLocation"]["artifactLocation"]["uri"] == "acme/a"
    assert run["properties"]["ruleDistribution"] == {"MISE_CONFIG_FILENAME": 1, "RENOVATE_CONFIG": 2}


def test_sarif_rule_descriptors_use_rule_metadata(bundled_rules) -> None:
    envelope = build_sarif_envelope(_report(), bundled_rules)

    descriptor = envelope["runs"][0]["tool"]["driver"]["rules"][0]
    assert descriptor["shortDescription"]["text"] == "mise config uses the dot-prefixed filename"
    assert descriptor["help"]["text"] == "Rename `mise.toml` to `.mise.toml`."


def test_write_sarif_results(tmp_path: Path) -> None:
    path = write_sarif_results(tmp_path, _report())

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert path.name == "compliance.sarif"
    assert len(payload["runs"][0]["results"]) == 3
