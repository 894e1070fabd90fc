"""CLI subcommand handlers and exit-code evaluation."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from orgcheck.config import OrgcheckConfig, load_config, validate_config_file
from orgcheck.constants.reporting import VALID_OUTPUT_FORMATS
from orgcheck.exceptions import AuthError, ConfigError, OrgcheckError
from orgcheck.exceptions.validation import format_errors
from orgcheck.github import Committer, GitHubClient, resolve_bot_token_provider, resolve_token_provider
from orgcheck.github.auth import TokenProvider
from orgcheck.model import ComplianceReport
from orgcheck.remediation import RemediationDispatcher
from orgcheck.reporting.csv_writer import write_csv_results
from orgcheck.reporting.sarif_writer import write_sarif_results
from orgcheck.reporting.stdout import StdoutReporter
from orgcheck.reporting.writer import write_report
from orgcheck.rules import Rule, load_rulepack, select_rules
from orgcheck.scanner import run_audit

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_CONFIG = 2
EXIT_AUTH = 3


def evaluate_exit_code(report: ComplianceReport, *, no_fail: bool = False) -> int:
    """Return 1 when any repository fails and failures are not suppressed."""
    if report.failing_repositories and not no_fail:
        return EXIT_FAILURES
    return EXIT_OK


def parse_output_formats(raw: str) -> tuple[str, ...]:
    """Split ``--output-format`` into validated format names."""
    raw_tokens = raw.split(",")
    output_formats = tuple(fmt for fmt in (token.strip() for token in raw_tokens) if fmt)
    if not output_formats or len(output_formats) != len(raw_tokens):
        raise ConfigError("--output-format contains empty or malformed tokens")
    invalid_formats = set(output_formats) - VALID_OUTPUT_FORMATS
    if invalid_formats:
        raise ConfigError(
            f"unknown output format(s): {', '.join(sorted(invalid_formats))}. "
            f"Valid formats: {', '.join(sorted(VALID_OUTPUT_FORMATS))}"
        )
    return output_formats


def handle_validate_config(args: argparse.Namespace) -> int:
    """Run config + rulepack validation and report results."""
    errors = validate_config_file(Path.cwd(), args.config, config_explicit=args.config is not None)
    if errors:
        print(format_errors(errors), file=sys.stderr)
        return EXIT_CONFIG
    try:
        load_config(Path.cwd(), args.config)
        load_rulepack(args.rules_file)
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIG

    print("Configuration is valid.")
    return EXIT_OK


def handle_rules(args: argparse.Namespace) -> int:
    """Print the rules in force for the configured or requested phase."""
    try:
        config = load_config(Path.cwd(), args.config)
        rules = load_rulepack(args.rules_file)
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIG

    if args.phase is not None:
        config = replace(config, standard_phase=args.phase)
    standard = config.standard
    print(f"Rules in force for phase {standard.phase}:")
    for rule in select_rules(rules, standard, config.disabled_rules):
        fix = rule.fix or "-"
        print(f"  {rule.rule_id:<24} phase {rule.since_phase}  {rule.applies_when:<8}  fix={fix:<20} {rule.title}")
    return EXIT_OK


def handle_audit(args: argparse.Namespace, *, stdout_is_tty: bool = False) -> int:
    """Run a full audit and write the requested outputs."""
    try:
        output_formats = parse_output_formats(args.output_format)
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIG

    validation_errors = validate_config_file(Path.cwd(), args.config, config_explicit=args.config is not None)
    if validation_errors:
        print(format_errors(validation_errors), file=sys.stderr)
        return EXIT_CONFIG

    try:
        config = _apply_overrides(load_config(Path.cwd(), args.config), args)
        rules = load_rulepack(args.rules_file)
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIG

    try:
        token_provider = resolve_token_provider(config.api)
        client = _build_client(config, token_provider)
        dispatcher = _build_dispatcher(config, rules, token_provider, args)
        report = run_audit(client=client, config=config, rules=rules, dispatcher=dispatcher)
    except AuthError as exc:
        print(f"Authentication error: {exc}", file=sys.stderr)
        return EXIT_AUTH
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIG
    except OrgcheckError as exc:
        print(f"Audit error: {exc}", file=sys.stderr)
        return EXIT_FAILURES

    if args.output_dir is not None:
        _write_outputs(args.output_dir, report, rules, output_formats)

    exit_code = evaluate_exit_code(report, no_fail=args.no_fail)
    if not args.no_stdout:
        use_color = not args.no_color and stdout_is_tty
        reporter = StdoutReporter(report, color=use_color, verbose=args.verbose, exit_code=exit_code)
        print(reporter.render())
    return exit_code


def _apply_overrides(config: OrgcheckConfig, args: argparse.Namespace) -> OrgcheckConfig:
    if args.org:
        config = replace(config, organization=args.org)
    if args.phase is not None:
        config = replace(config, standard_phase=args.phase)
    if args.concurrency is not None:
        config = replace(config, concurrency=args.concurrency)
    if args.timeout is not None:
        config = replace(config, run_timeout_seconds=args.timeout)
    if args.remediate or args.dry_run:
        config = replace(config, remediation=replace(config.remediation, enabled=True))
    if not config.organization:
        raise ConfigError("no organization given; set `organization` in the config or pass --org")
    return config


def _build_client(config: OrgcheckConfig, token_provider: TokenProvider) -> GitHubClient:
    return GitHubClient(
        token_provider,
        base_url=config.api.base_url,
        timeout=config.api.timeout_seconds,
        max_retries=config.api.max_retries,
        backoff_seconds=config.api.backoff_seconds,
    )


def _build_dispatcher(
    config: OrgcheckConfig,
    rules: tuple[Rule, ...],
    token_provider: TokenProvider,
    args: argparse.Namespace,
) -> RemediationDispatcher | None:
    remediation = config.remediation
    if not remediation.enabled:
        return None
    bot_provider = resolve_bot_token_provider(remediation, config.api, token_provider)
    return RemediationDispatcher(
        _build_client(config, bot_provider),
        rules,
        config.standard,
        bot=Committer(name=remediation.bot_name, email=remediation.bot_email),
        branch_prefix=remediation.branch_prefix,
        dry_run=args.dry_run,
    )


def _write_outputs(
    out_root: Path,
    report: ComplianceReport,
    rules: tuple[Rule, ...],
    output_formats: tuple[str, ...],
) -> None:
    out_root = out_root.resolve()
    out_root.mkdir(parents=True, exist_ok=True)
    if "json" in output_formats:
        logger.info("Wrote %s", write_report(out_root, report))
    if "csv" in output_formats:
        logger.info("Wrote %s", write_csv_results(out_root, report))
    if "sarif" in output_formats:
        logger.info("Wrote %s", write_sarif_results(out_root, report, rules))
