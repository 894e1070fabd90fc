"""CSV export writer for evaluation results."""

from __future__ import annotations

import csv
import io
from pathlib import Path

from orgcheck.constants.reporting import CSV_COLUMNS, CSV_RESULTS_FILENAME
from orgcheck.io import write_text_atomic
from orgcheck.model import ComplianceReport


def write_csv_results(out_root: Path, report: ComplianceReport) -> Path:
    """Write a global results.csv under the output root and return the path."""
    csv_path = out_root / CSV_RESULTS_FILENAME
    write_text_atomic(
        path=csv_path,
        content=render_csv_string(report),
        temp_prefix=".csv_tmp_",
        temp_suffix=".csv",
    )
    return csv_path


def render_csv_string(report: ComplianceReport) -> str:
    """Render one row per result, ordered by repository then rule id."""
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(CSV_COLUMNS)
    for result in report.results:
        writer.writerow(
            (
                result.id,
                result.repository,
                result.rule_id,
                result.outcome,
                "true" if result.fixable else "false",
                result.detail,
            )
        )
    return buf.getvalue()
