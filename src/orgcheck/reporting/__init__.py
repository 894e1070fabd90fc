"""Reporting package for orgcheck outputs."""

from __future__ import annotations

from typing import Any

__all__ = [
    "ReportAggregator",
    "StdoutReporter",
    "build_sarif_envelope",
    "render_csv_string",
    "repository_status",
    "write_csv_results",
    "write_report",
    "write_sarif_results",
]


def __getattr__(name: str) -> Any:
    """Lazily expose reporting APIs to avoid import cycles at package import time."""
    if name in {"ReportAggregator", "repository_status"}:
        from . import aggregator

        return getattr(aggregator, name)
    if name in {"render_csv_string", "write_csv_results"}:
        from . import csv_writer

        return getattr(csv_writer, name)
    if name in {"build_sarif_envelope", "write_sarif_results"}:
        from . import sarif_writer

        return getattr(sarif_writer, name)
    if name == "StdoutReporter":
        from .stdout import StdoutReporter

        return StdoutReporter
    if name == "write_report":
        from .writer import write_report

        return write_report
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
