"""End-to-end audit orchestration for orgcheck.

Repositories are enumerated on the calling thread and each one is fetched and
evaluated on a worker thread. Workers only return values; every merge into the
aggregator happens here, on the calling thread.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import replace
from typing import Any, Protocol, TypeAlias

from orgcheck.config import OrgcheckConfig, config_fingerprint
from orgcheck.exceptions import ApiError, AuthError, FetchCancelled
from orgcheck.model import ComplianceReport, EvaluationResult, RepositoryRef, RepositorySnapshot, StandardVersion
from orgcheck.reporting.aggregator import ReportAggregator
from orgcheck.rules import Rule, evaluate_snapshot, select_rules, unknown_results
from orgcheck.scanner.enumerator import enumerate_repositories
from orgcheck.scanner.fetch import fetch_snapshot

logger = logging.getLogger(__name__)

RUN_TIMEOUT_DETAIL = "run timeout"

RepositoryAudit: TypeAlias = tuple[RepositorySnapshot, tuple[EvaluationResult, ...]]


class RemediationRunner(Protocol):
    def dispatch_all(self, report: ComplianceReport, snapshots: dict[str, RepositorySnapshot]) -> tuple[Any, ...]:
        ...


def run_audit(
    *,
    client: Any,
    config: OrgcheckConfig,
    rules: Sequence[Rule],
    standard: StandardVersion | None = None,
    dispatcher: RemediationRunner | None = None,
) -> ComplianceReport:
    """Audit every repository of ``config.organization`` and build the report.

    Enumeration and authentication failures abort the run. A repository whose
    fetch fails, whose audit raises unexpectedly, or that is still running when
    ``config.run_timeout_seconds`` elapses, is reported with ``unknown``
    results instead of being omitted.
    """
    started_at = time.perf_counter()
    standard = standard or config.standard
    active_rules = select_rules(rules, standard, config.disabled_rules)
    warnings: list[str] = []

    known_ids = {rule.rule_id for rule in rules}
    for rule_id in sorted(set(config.disabled_rules) - known_ids):
        _warn(warnings, f"Disabled rule '{rule_id}' is not defined in the rulepack and was ignored.")

    cancel_event: threading.Event = getattr(client, "cancel_event", None) or threading.Event()
    aggregator = ReportAggregator(config.organization, standard.phase)
    snapshots: dict[str, RepositorySnapshot] = {}
    futures: dict[Future[RepositoryAudit], RepositoryRef] = {}
    deadline = started_at + config.run_timeout_seconds

    executor = ThreadPoolExecutor(max_workers=config.concurrency, thread_name_prefix="orgcheck")
    try:
        for ref in enumerate_repositories(client, config.organization, config.exemptions):
            aggregator.register(ref)
            futures[executor.submit(_audit_repository, client, ref, active_rules, standard, cancel_event)] = ref
        logger.info("Auditing %d repositories of %s (phase %d)", len(futures), config.organization, standard.phase)

        finished: set[Future[RepositoryAudit]] = set()
        try:
            for future in as_completed(futures, timeout=max(0.0, deadline - time.perf_counter())):
                finished.add(future)
                _collect(future, futures[future], aggregator, snapshots, active_rules, standard, warnings)
        except TimeoutError:
            cancel_event.set()
            unfinished = [future for future in futures if future not in finished]
            _warn(
                warnings,
                f"Run timeout of {config.run_timeout_seconds:g}s reached; "
                f"{len(unfinished)} repositories reported as unknown.",
            )
            for future in unfinished:
                future.cancel()
                ref = futures[future]
                aggregator.add_results(
                    ref.full_name,
                    unknown_results(ref.full_name, active_rules, standard, RUN_TIMEOUT_DETAIL),
                )
    except Exception:
        cancel_event.set()
        raise
    finally:
        executor.shutdown(wait=not cancel_event.is_set(), cancel_futures=True)

    fingerprint = config_fingerprint(config, tuple(rule.rule_id for rule in active_rules))
    report = aggregator.build(
        duration_seconds=time.perf_counter() - started_at,
        warnings=warnings,
        config_fingerprint=fingerprint,
    )

    if dispatcher is not None:
        remediations = dispatcher.dispatch_all(report, snapshots)
        report = replace(
            report,
            remediations=tuple(sorted(remediations, key=lambda item: (item.repository, item.rule_id))),
            duration_seconds=time.perf_counter() - started_at,
        )

    logger.info(
        "Audit of %s finished: %d failing of %d repositories",
        config.organization,
        len(report.failing_repositories),
        len(report.repositories),
    )
    return report


def _audit_repository(
    client: Any,
    ref: RepositoryRef,
    rules: Sequence[Rule],
    standard: StandardVersion,
    cancel_event: threading.Event,
) -> RepositoryAudit:
    snapshot = fetch_snapshot(client, ref, rules, standard, cancel_event)
    return snapshot, evaluate_snapshot(snapshot, rules, standard)


def _collect(
    future: Future[RepositoryAudit],
    ref: RepositoryRef,
    aggregator: ReportAggregator,
    snapshots: dict[str, RepositorySnapshot],
    rules: Sequence[Rule],
    standard: StandardVersion,
    warnings: list[str],
) -> None:
    """Merge one finished worker into the aggregator.

    Authentication failures propagate. Any other failure is contained to this
    repository, which is reported with ``unknown`` results and a warning.
    """
    try:
        snapshot, results = future.result()
    except AuthError:
        raise
    except FetchCancelled:
        aggregator.add_results(ref.full_name, unknown_results(ref.full_name, rules, standard, RUN_TIMEOUT_DETAIL))
        return
    except ApiError as exc:
        _warn(warnings, f"Could not fetch {ref.full_name}: {exc}")
        aggregator.add_results(ref.full_name, unknown_results(ref.full_name, rules, standard, f"fetch failed: {exc}"))
        return
    except Exception as exc:
        logger.debug("Audit of %s raised", ref.full_name, exc_info=True)
        _warn(warnings, f"Could not audit {ref.full_name}: {type(exc).__name__}: {exc}")
        aggregator.add_results(ref.full_name, unknown_results(ref.full_name, rules, standard, f"audit failed: {exc}"))
        return
    snapshots[ref.full_name] = snapshot
    aggregator.add_results(ref.full_name, results)


def _warn(warnings: list[str], message: str) -> None:
    warnings.append(message)
    logger.warning(message)
