"""CLI entrypoint for orgcheck."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from orgcheck import __version__
from orgcheck.cli.handlers import handle_audit, handle_rules, handle_validate_config
from orgcheck.constants.branding import CLI_DESCRIPTION
from orgcheck.constants.config import VALID_STANDARD_PHASES
from orgcheck.constants.reporting import DEFAULT_OUTPUT_FORMAT


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from exc
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {number}")
    return number


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected a number, got {value!r}") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive number, got {number:g}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build top-level CLI parser."""
    parser = argparse.ArgumentParser(
        prog="orgcheck",
        description=CLI_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)
    phases = sorted(VALID_STANDARD_PHASES)

    audit = subparsers.add_parser("audit", help="Audit every repository of an organization")
    audit.add_argument("-c", "--config", type=Path, help="Explicit config file (default: ./orgcheck.yaml)")
    audit.add_argument("--org", help="Organization to audit (overrides config)")
    audit.add_argument("--phase", type=int, choices=phases, help="Standard phase to enforce (overrides config)")
    audit.add_argument("--rules-file", type=Path, default=None, help="Custom rulepack YAML file")
    audit.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        default=None,
        help="Output directory (no files written if omitted)",
    )
    audit.add_argument(
        "--output-format",
        default=DEFAULT_OUTPUT_FORMAT,
        help="Comma-separated output formats: json, csv, sarif (default: json)",
    )
    audit.add_argument("--concurrency", type=_positive_int, help="Parallel repository workers")
    audit.add_argument("--timeout", type=_positive_float, help="Run timeout in seconds")
    audit.add_argument("--remediate", action="store_true", help="Open pull requests for fixable failures")
    audit.add_argument("--dry-run", action="store_true", help="Plan remediation without writing anything")
    audit.add_argument("--no-fail", action="store_true", help="Exit 0 even when repositories fail")
    audit.add_argument("--no-stdout", action="store_true", help="Silence stdout output")
    audit.add_argument("--no-color", action="store_true", help="Disable colored output")
    audit.add_argument("-v", "--verbose", action="store_true", help="Show details and debug logging")

    validate = subparsers.add_parser("validate-config", help="Validate configuration without auditing")
    validate.add_argument("-c", "--config", type=Path, help="Explicit config file")
    validate.add_argument("--rules-file", type=Path, default=None, help="Custom rulepack YAML file")

    rules = subparsers.add_parser("rules", help="List the rules in force for a standard phase")
    rules.add_argument("-c", "--config", type=Path, help="Explicit config file")
    rules.add_argument("--phase", type=int, choices=phases, help="Standard phase (overrides config)")
    rules.add_argument("--rules-file", type=Path, default=None, help="Custom rulepack YAML file")

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    verbose = getattr(args, "verbose", False)
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(levelname)s %(message)s")

    if args.command == "validate-config":
        return handle_validate_config(args)
    if args.command == "rules":
        return handle_rules(args)
    if args.command != "audit":
        parser.error(f"Unsupported command: {args.command}")
    return handle_audit(args, stdout_is_tty=sys.stdout.isatty())


if __name__ == "__main__":
    raise SystemExit(main())
