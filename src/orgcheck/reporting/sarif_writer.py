"""SARIF 2.1.0 export writer for failing and unknown results."""

from __future__ import annotations

import json
from collections import Counter
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from orgcheck import __version__
from orgcheck.constants.reporting import (
    SARIF_FILENAME,
    SARIF_LEVEL_MAP,
    SARIF_SCHEMA_URI,
    SARIF_TOOL_NAME,
    SARIF_VERSION,
)
from orgcheck.io import write_text_atomic
from orgcheck.model import ComplianceReport, EvaluationResult
from orgcheck.rules import Rule


def _build_sarif_result(result: EvaluationResult, rule: Rule | None) -> dict[str, Any]:
    """Map a single non-passing result to a SARIF result object."""
    message = result.detail or (rule.title if rule is not None else result.rule_id)
    return {
        "ruleId": result.rule_id,
        "level": SARIF_LEVEL_MAP.get(result.outcome, "note"),
        "message": {"text": f"{result.repository}: {message}"},
        "locations": [
            {
                "physicalLocation": {
                    "artifactLocation": {"uri": result.repository},
                },
            },
        ],
        "partialFingerprints": {"resultId": result.id},
        "properties": {
            "repository": result.repository,
            "outcome": result.outcome,
            "fixable": result.fixable,
        },
    }


def _build_sarif_rules(rule_ids: Sequence[str], rules_by_id: dict[str, Rule]) -> list[dict[str, Any]]:
    descriptors: list[dict[str, Any]] = []
    for rule_id in rule_ids:
        rule = rules_by_id.get(rule_id)
        descriptor: dict[str, Any] = {
            "id": rule_id,
            "shortDescription": {"text": rule.title if rule is not None else rule_id},
        }
        if rule is not None and rule.description:
            descriptor["fullDescription"] = {"text": rule.description}
        if rule is not None and rule.recommendation:
            descriptor["help"] = {"text": rule.recommendation}
        descriptors.append(descriptor)
    return descriptors


def build_sarif_envelope(report: ComplianceReport, rules: Sequence[Rule] = ()) -> dict[str, Any]:
    """Build a complete SARIF 2.1.0 document from a compliance report."""
    rules_by_id = {rule.rule_id: rule for rule in rules}
    reported = [result for result in report.results if result.outcome in SARIF_LEVEL_MAP]
    rule_ids = sorted({result.rule_id for result in reported})
    distribution = Counter(result.rule_id for result in reported)

    run_payload: dict[str, Any] = {
        "tool": {
            "driver": {
                "name": SARIF_TOOL_NAME,
                "version": __version__,
                "rules": _build_sarif_rules(rule_ids, rules_by_id),
            },
        },
        "results": [_build_sarif_result(result, rules_by_id.get(result.rule_id)) for result in reported],
        "properties": {
            "organization": report.organization,
            "phase": report.phase,
            "ruleDistribution": {rule_id: distribution[rule_id] for rule_id in rule_ids},
        },
    }
    return {
        "$schema": SARIF_SCHEMA_URI,
        "version": SARIF_VERSION,
        "runs": [run_payload],
    }


def write_sarif_results(out_root: Path, report: ComplianceReport, rules: Sequence[Rule] = ()) -> Path:
    """Write compliance.sarif under the output root and return the path."""
    sarif_path = out_root / SARIF_FILENAME
    write_text_atomic(
        path=sarif_path,
        content=json.dumps(build_sarif_envelope(report, rules), indent=2) + "\n",
        temp_prefix=".sarif_tmp_",
        temp_suffix=".sarif",
    )
    return sarif_path
