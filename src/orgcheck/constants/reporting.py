"""Constants for report file names, atomic writing, and stdout formatting."""

from __future__ import annotations

REPORT_FILENAME: str = "report.json"
CSV_RESULTS_FILENAME: str = "results.csv"
SARIF_FILENAME: str = "compliance.sarif"
REPORT_TEMP_PREFIX: str = ".tmp-"
REPORT_TEMP_SUFFIX: str = ".json"

SCHEMA_VERSION: str = "1.0.0"

VALID_OUTPUT_FORMATS: frozenset[str] = frozenset({"json", "csv", "sarif"})
DEFAULT_OUTPUT_FORMAT: str = "json"

CSV_COLUMNS: tuple[str, ...] = (
    "id",
    "repository",
    "rule_id",
    "outcome",
    "fixable",
    "detail",
)

SARIF_VERSION: str = "2.1.0"
SARIF_SCHEMA_URI: str = "https://docs.oasis-open.org/sarif/sarif/v2.1.0/cos02/schemas/sarif-schema-2.1.0.json"
SARIF_TOOL_NAME: str = "ORGCHECK"

SARIF_LEVEL_MAP: dict[str, str] = {
    "fail": "error",
    "unknown": "warning",
}

# ANSI escape codes for terminal colouring.
ANSI_RESET: str = "\033[0m"
ANSI_RED: str = "\033[31;1m"
ANSI_YELLOW: str = "\033[33;1m"
ANSI_GREEN: str = "\033[32;1m"
ANSI_DIM: str = "\033[2m"

OUTCOME_COLORS: dict[str, str] = {
    "fail": ANSI_RED,
    "unknown": ANSI_YELLOW,
    "pass": ANSI_GREEN,
    "inapplicable": ANSI_DIM,
}

OUTCOME_ORDER: tuple[str, ...] = ("pass", "fail", "inapplicable", "unknown")
