"""Branding constants for terminal output."""

from __future__ import annotations

BRAND_NAME: str = "ORGCHECK"
ASCII_LOGO_LINES: tuple[str, ...] = (
    ">_ ORGCHECK",
    "     // CI convention audit for GitHub organizations",
)
AUDIT_SUMMARY_TITLE: str = "Compliance summary"
CLI_DESCRIPTION: str = "\n".join((*ASCII_LOGO_LINES, "", f"{BRAND_NAME} compliance checker"))
