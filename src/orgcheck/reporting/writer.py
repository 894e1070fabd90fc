"""JSON report writer."""

from __future__ import annotations

from pathlib import Path

from orgcheck.constants.reporting import REPORT_FILENAME, REPORT_TEMP_PREFIX, REPORT_TEMP_SUFFIX
from orgcheck.io import write_json_atomic
from orgcheck.model import ComplianceReport


def write_report(out_root: Path, report: ComplianceReport) -> Path:
    """Write ``report.json`` under the output root and return the path."""
    out_root.mkdir(parents=True, exist_ok=True)
    report_path = out_root / REPORT_FILENAME
    write_json_atomic(
        path=report_path,
        payload=report.to_dict(),
        temp_prefix=REPORT_TEMP_PREFIX,
        temp_suffix=REPORT_TEMP_SUFFIX,
    )
    return report_path
